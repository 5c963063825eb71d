from websearch_mcp.terminal.manager import TerminalSessionManager
from websearch_mcp.terminal.models import OutputLine, SessionStatus, TerminalSession

__all__ = ["TerminalSessionManager", "TerminalSession", "SessionStatus", "OutputLine"]
