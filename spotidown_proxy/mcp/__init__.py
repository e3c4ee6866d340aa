"""MCP module - tool server over stdio."""
