from typing import Any, Literal, Union

from pydantic import BaseModel, Field

from websearch_mcp.terminal.manager import (
    DEFAULT_TIMEOUT_SECONDS,
    MAX_TIMEOUT_SECONDS,
    MIN_TIMEOUT_SECONDS,
)
from websearch_mcp.tools.tool_models import (
    Adapter,
    AdapterContext,
    AdapterSpec,
    Tool,
    ToolError,
    ToolResult,
    json_result,
)

PidField = Union[int, str]


class CreateTerminalInput(BaseModel):
    command: str = Field(min_length=1, description="Command to run in the terminal")
    cwd: str | None = Field(
        default=None, description="Working directory (defaults to current directory)"
    )
    shell: str | None = Field(
        default=None, description="Shell to use (e.g., /bin/bash, cmd.exe)"
    )
    timeout: int = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        ge=MIN_TIMEOUT_SECONDS,
        le=MAX_TIMEOUT_SECONDS,
        description="Timeout in seconds (1-300)",
    )
    background: bool = Field(
        default=False, description="Run in background (don't wait for completion)"
    )


class RunTerminalInput(BaseModel):
    pid: PidField = Field(description="Terminal PID")
    command: str = Field(min_length=1, description="Command to run")
    timeout: int = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        ge=MIN_TIMEOUT_SECONDS,
        le=MAX_TIMEOUT_SECONDS,
        description="Timeout in seconds (1-300)",
    )


class ReadTerminalInput(BaseModel):
    pid: PidField = Field(description="Terminal PID")
    lines: int = Field(
        default=50, ge=1, le=15000, description="Number of recent lines to show (1-15000)"
    )


class ListTerminalsInput(BaseModel):
    include_completed: bool = Field(default=True, description="Include completed sessions")
    limit: int = Field(default=20, ge=1, le=50, description="Maximum sessions to show (1-50)")


class KillTerminalInput(BaseModel):
    pid: PidField = Field(description="Terminal PID")
    signal: Literal["SIGTERM", "SIGKILL"] = Field(
        default="SIGTERM", description="Signal to send (SIGTERM or SIGKILL)"
    )


def result_from_payload(payload: dict[str, Any]) -> ToolResult:
    """Map a session-manager payload onto the tool result envelope."""
    if payload.get("success") is False:
        details = {
            k: v for k, v in payload.items() if k not in ("success", "error", "message")
        }
        return ToolError(payload["error"], message=payload.get("message"), details=details)
    return json_result(payload)


def build_terminal_apis(context: AdapterContext) -> Adapter:
    terminals = context.terminals

    async def _create(
        command: str,
        cwd: str | None = None,
        shell: str | None = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        background: bool = False,
    ):
        return result_from_payload(
            await terminals.create(
                command, cwd=cwd, shell=shell, timeout=timeout, background=background
            )
        )

    async def _run(pid: PidField, command: str, timeout: int = DEFAULT_TIMEOUT_SECONDS):
        return result_from_payload(await terminals.run(pid, command, timeout=timeout))

    async def _read(pid: PidField, lines: int = 50):
        return result_from_payload(terminals.read(pid, lines))

    async def _list(include_completed: bool = True, limit: int = 20):
        return result_from_payload(
            terminals.list_sessions(include_completed=include_completed, limit=limit)
        )

    async def _kill(pid: PidField, signal: str = "SIGTERM"):
        return result_from_payload(terminals.kill(pid, signal))

    return Adapter(
        name="terminal-apis",
        description="Terminal APIs for creating, running, and managing terminal sessions",
        tools=(
            Tool(
                name="create_terminal",
                description="Create a new terminal session",
                args_schema=CreateTerminalInput,
                handler=_create,
            ),
            Tool(
                name="run_terminal",
                description="Run a command in a terminal (by PID) and return output",
                args_schema=RunTerminalInput,
                handler=_run,
            ),
            Tool(
                name="read_terminal",
                description="Read output from a terminal (by PID)",
                args_schema=ReadTerminalInput,
                handler=_read,
            ),
            Tool(
                name="list_terminals",
                description="List terminal sessions (by PID)",
                args_schema=ListTerminalsInput,
                handler=_list,
            ),
            Tool(
                name="kill_terminal",
                description="Kill a running terminal session",
                args_schema=KillTerminalInput,
                handler=_kill,
            ),
        ),
    )


adapter = AdapterSpec(
    name="terminal-apis",
    builder=build_terminal_apis,
    intent="Spawn shell commands and follow their output by process id.",
    schema_notes="Sessions are addressed by the pid returned from create_terminal.",
)
