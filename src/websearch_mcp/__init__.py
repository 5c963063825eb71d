"""Tool registry, terminal sessions and web API adapters served over MCP."""

__version__ = "0.1.0"
