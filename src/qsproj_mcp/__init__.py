"""qsproj-mcp: Q# project build-context resolution over MCP."""

__version__ = "0.1.0"
