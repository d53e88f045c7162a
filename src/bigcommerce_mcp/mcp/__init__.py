"""MCP protocol layer: tool dispatcher and server wiring."""
