"""Exception hierarchy for websearch-mcp."""


class WebsearchError(Exception):
    """Base class for all websearch-mcp errors."""


class DuplicateToolError(WebsearchError):
    """A tool name is already bound and the registry rejects overwrites."""

    def __init__(self, tool_name: str, existing_adapter: str, new_adapter: str) -> None:
        self.tool_name = tool_name
        self.existing_adapter = existing_adapter
        self.new_adapter = new_adapter
        super().__init__(
            f"Duplicate tool name detected: {tool_name} "
            f"(registered by {existing_adapter!r}, offered again by {new_adapter!r})"
        )


class ToolInvocationError(WebsearchError):
    """Raised inside the MCP call handler so the SDK flags the result as an error."""
