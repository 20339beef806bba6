"""Windows UI Automation MCP server backed by PowerShell scripts."""

__version__ = "0.1.0"
