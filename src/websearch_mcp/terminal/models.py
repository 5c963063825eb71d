from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

# Oldest lines are dropped first; matches the largest tail read_terminal can request.
MAX_OUTPUT_LINES = 15000
# A line with no newline is split once it grows past this many characters.
MAX_LINE_CHARS = 64 * 1024


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.RUNNING


@dataclass(frozen=True)
class OutputLine:
    stream: str  # "STDOUT" | "STDERR"
    text: str
    timestamp: datetime = field(default_factory=utc_now)

    def render(self) -> str:
        return f"[{self.stream}] {self.timestamp.isoformat()}: {self.text}"


@dataclass
class TerminalSession:
    """Metadata and output log of one terminal, keyed by the pid from its first spawn."""

    pid: int
    command: str
    cwd: str
    shell: str | None
    os_pid: int
    status: SessionStatus = SessionStatus.RUNNING
    created_at: datetime = field(default_factory=utc_now)
    last_updated: datetime = field(default_factory=utc_now)
    exit_code: int | None = None
    error: str | None = None
    output: deque[OutputLine] = field(
        default_factory=lambda: deque(maxlen=MAX_OUTPUT_LINES)
    )
    # Lines evicted from the front of ``output`` during the current run.
    dropped_lines: int = 0
    # Bumped on every spawn; output from an older subprocess is discarded.
    generation: int = 0

    def touch(self) -> None:
        self.last_updated = utc_now()

    def stream_text(self, stream: str) -> str:
        return "\n".join(line.text for line in self.output if line.stream == stream)

    def summary(self, *, is_active: bool) -> dict[str, Any]:
        return {
            "pid": self.pid,
            "os_pid": self.os_pid,
            "command": self.command,
            "cwd": self.cwd,
            "status": self.status.value,
            "exit_code": self.exit_code,
            "created_at": self.created_at.isoformat(),
            "last_updated": self.last_updated.isoformat(),
            "output_lines": len(self.output),
            "is_active": is_active,
        }
