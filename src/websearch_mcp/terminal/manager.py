"""
Terminal session manager.

Spawns shell commands as asyncio subprocesses and tracks them as sessions keyed
by the pid assigned at creation. Session records outlive their processes; the
live process handle is kept in a separate active mapping only while it runs.

All mutations happen on the event loop thread. Compound check-then-act
sequences (e.g. "not running" -> "running") contain no await in between, so
concurrent tool calls cannot interleave inside them.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from dataclasses import dataclass, field
from typing import Any

from websearch_mcp.terminal.models import (
    MAX_LINE_CHARS,
    MAX_OUTPUT_LINES,
    OutputLine,
    SessionStatus,
    TerminalSession,
    utc_now,
)

logger = logging.getLogger(__name__)

STDOUT = "STDOUT"
STDERR = "STDERR"

MIN_TIMEOUT_SECONDS = 1
MAX_TIMEOUT_SECONDS = 300
DEFAULT_TIMEOUT_SECONDS = 60

_READ_CHUNK = 64 * 1024

SIGNALS: dict[str, int] = {
    "SIGTERM": signal.SIGTERM,
    "SIGKILL": getattr(signal, "SIGKILL", signal.SIGTERM),
}


def _failure(error: str, message: str, **details: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {"success": False, "error": error}
    payload.update(details)
    payload["message"] = message
    return payload


def _parse_pid(pid: int | str) -> int | None:
    try:
        return int(str(pid).strip())
    except ValueError:
        return None


@dataclass(eq=False)
class _ActiveProcess:
    process: asyncio.subprocess.Process
    generation: int
    finished: asyncio.Event = field(default_factory=asyncio.Event)
    timer: asyncio.TimerHandle | None = None
    watcher: asyncio.Task | None = None


class TerminalSessionManager:
    def __init__(
        self,
        *,
        default_cwd: str | None = None,
        default_shell: str | None = None,
    ) -> None:
        self.default_cwd = default_cwd or os.getcwd()
        self.default_shell = default_shell
        self._sessions: dict[int, TerminalSession] = {}
        self._active: dict[int, _ActiveProcess] = {}
        self._watchers: set[asyncio.Task] = set()
        # Every subprocess whose watcher has not finished, finalized or not.
        self._live: set[_ActiveProcess] = set()

    # ------------------------------------------------------------------ #
    # Accessors                                                           #
    # ------------------------------------------------------------------ #

    def get_session(self, pid: int | str) -> TerminalSession | None:
        key = _parse_pid(pid)
        return self._sessions.get(key) if key is not None else None

    def is_active(self, pid: int | str) -> bool:
        key = _parse_pid(pid)
        return key is not None and key in self._active

    def known_pids(self) -> list[int]:
        return list(self._sessions.keys())

    def _not_found(self, pid: int | str, message: str) -> dict[str, Any]:
        return _failure(
            f"Terminal PID {pid} not found",
            message,
            available_sessions=[str(key) for key in self._sessions],
        )

    # ------------------------------------------------------------------ #
    # Operations                                                          #
    # ------------------------------------------------------------------ #

    async def create(
        self,
        command: str,
        *,
        cwd: str | None = None,
        shell: str | None = None,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
        background: bool = False,
    ) -> dict[str, Any]:
        """Start ``command`` and return as soon as it has a pid."""
        working_directory = cwd or self.default_cwd
        shell = shell or self.default_shell
        try:
            process = await self._spawn(command, working_directory, shell)
        except OSError as exc:
            logger.warning("Failed to spawn %r: %s", command, exc)
            return _failure(
                str(exc), "Failed to create terminal session", created_at=utc_now().isoformat()
            )

        pid = process.pid
        if pid in self._sessions:
            # The OS recycled the pid of a finished session; keep the old record.
            self._send_signal(process, SIGNALS["SIGKILL"])
            await process.wait()
            return _failure(
                f"PID {pid} is already tracked by another terminal session",
                "Could not start terminal process",
            )

        session = TerminalSession(
            pid=pid,
            command=command,
            cwd=working_directory,
            shell=shell,
            os_pid=pid,
        )
        self._sessions[pid] = session
        self._attach(pid, session, process, None if background else timeout)
        logger.info("Terminal %s started: %s", pid, command)

        return {
            "pid": pid,
            "command": command,
            "cwd": working_directory,
            "shell": shell,
            "timeout": timeout,
            "background": background,
            "status": session.status.value,
            "created_at": session.created_at.isoformat(),
            "message": (
                f"Terminal PID {pid} created and running in background"
                if background
                else f"Terminal PID {pid} created and running"
            ),
        }

    async def run(
        self,
        pid: int | str,
        command: str,
        *,
        timeout: int = DEFAULT_TIMEOUT_SECONDS,
    ) -> dict[str, Any]:
        """Run a new command in an idle session and wait for it to finish."""
        key = _parse_pid(pid)
        session = self._sessions.get(key) if key is not None else None
        if session is None:
            return self._not_found(pid, "Invalid session ID")
        if session.status is SessionStatus.RUNNING:
            return _failure(
                f"Terminal PID {key} is already running",
                "Wait for current command to complete",
                current_command=session.command,
                status=session.status.value,
            )

        # Claim the session before the first await.
        session.command = command
        session.status = SessionStatus.RUNNING
        session.exit_code = None
        session.error = None
        session.output.clear()
        session.dropped_lines = 0
        session.generation += 1
        session.touch()
        started_at = session.last_updated

        try:
            process = await self._spawn(command, session.cwd, session.shell)
        except OSError as exc:
            logger.warning("Failed to spawn %r in terminal %s: %s", command, key, exc)
            session.status = SessionStatus.ERROR
            session.error = str(exc)
            session.touch()
            return _failure(
                str(exc), "Failed to run command in terminal", pid=str(key)
            )

        session.os_pid = process.pid
        active = self._attach(key, session, process, timeout)
        await active.finished.wait()

        return {
            "pid": session.pid,
            "os_pid": session.os_pid,
            "command": command,
            "cwd": session.cwd,
            "timeout": timeout,
            "status": session.status.value,
            "exit_code": session.exit_code,
            "error": session.error,
            "stdout": session.stream_text(STDOUT).strip(),
            "stderr": session.stream_text(STDERR).strip(),
            "started_at": started_at.isoformat(),
            "message": f"Command finished in terminal PID {session.pid}",
        }

    def read(self, pid: int | str, lines: int = 50) -> dict[str, Any]:
        key = _parse_pid(pid)
        session = self._sessions.get(key) if key is not None else None
        if session is None:
            return self._not_found(pid, "Invalid PID")

        recent = list(session.output)[-lines:] if lines > 0 else []
        return {
            "pid": session.pid,
            "os_pid": session.os_pid,
            "command": session.command,
            "cwd": session.cwd,
            "status": session.status.value,
            "exit_code": session.exit_code,
            "error": session.error,
            "created_at": session.created_at.isoformat(),
            "last_updated": session.last_updated.isoformat(),
            "total_output_lines": len(session.output),
            "dropped_output_lines": session.dropped_lines,
            "recent_lines_shown": len(recent),
            "output": [line.render() for line in recent],
            "is_active": key in self._active,
        }

    def list_sessions(
        self, *, include_completed: bool = True, limit: int = 20
    ) -> dict[str, Any]:
        sessions = list(self._sessions.values())
        shown = (
            sessions
            if include_completed
            else [s for s in sessions if s.status is SessionStatus.RUNNING]
        )
        shown.sort(key=lambda s: s.last_updated, reverse=True)
        shown = shown[:limit]

        return {
            "total_sessions": len(sessions),
            "active_sessions": sum(s.status is SessionStatus.RUNNING for s in sessions),
            "completed_sessions": sum(
                s.status is SessionStatus.COMPLETED for s in sessions
            ),
            "error_sessions": sum(s.status is SessionStatus.ERROR for s in sessions),
            "sessions_shown": len(shown),
            "include_completed": include_completed,
            "sessions": [s.summary(is_active=s.pid in self._active) for s in shown],
        }

    def kill(self, pid: int | str, signal_name: str = "SIGTERM") -> dict[str, Any]:
        key = _parse_pid(pid)
        session = self._sessions.get(key) if key is not None else None
        if session is None:
            return self._not_found(pid, "Invalid session ID")

        active = self._active.get(key)
        if active is None:
            return _failure(
                f"Terminal PID {key} is not running",
                "Cannot kill non-running session",
                status=session.status.value,
            )

        sig = SIGNALS.get(signal_name)
        if sig is None:
            return _failure(
                f"Unsupported signal {signal_name}",
                "Use SIGTERM or SIGKILL",
                pid=str(key),
            )

        error = f"Process killed with {signal_name}"
        signal_error = self._send_signal(active.process, sig)
        if signal_error:
            error = f"{error} (signal delivery failed: {signal_error})"
        self._finalize(key, active, SessionStatus.ERROR, error=error)
        logger.info("Terminal %s killed with %s", key, signal_name)

        return {
            "pid": session.pid,
            "signal": signal_name,
            "killed_at": session.last_updated.isoformat(),
            "command": session.command,
            "message": f"Terminal PID {key} killed with {signal_name}",
        }

    async def shutdown(self) -> None:
        """Kill every live process and wait for the watchers to wind down."""
        for active in list(self._live):
            self._send_signal(active.process, SIGNALS["SIGKILL"])
        for key, active in list(self._active.items()):
            self._finalize(key, active, SessionStatus.ERROR, error="Terminal manager shut down")
        watchers = list(self._watchers)
        for task in watchers:
            task.cancel()
        if watchers:
            await asyncio.gather(*watchers, return_exceptions=True)

    # ------------------------------------------------------------------ #
    # Process plumbing                                                    #
    # ------------------------------------------------------------------ #

    async def _spawn(
        self, command: str, cwd: str, shell: str | None
    ) -> asyncio.subprocess.Process:
        return await asyncio.create_subprocess_shell(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            executable=shell,
            start_new_session=os.name == "posix",
        )

    def _attach(
        self,
        key: int,
        session: TerminalSession,
        process: asyncio.subprocess.Process,
        timeout: int | None,
    ) -> _ActiveProcess:
        active = _ActiveProcess(process=process, generation=session.generation)
        self._active[key] = active
        if timeout and timeout > 0:
            loop = asyncio.get_running_loop()
            active.timer = loop.call_later(timeout, self._expire, key, active, timeout)
        active.watcher = asyncio.create_task(
            self._watch(key, session, active), name=f"terminal-watch-{key}"
        )
        self._watchers.add(active.watcher)
        self._live.add(active)
        active.watcher.add_done_callback(lambda _: self._live.discard(active))
        active.watcher.add_done_callback(self._watchers.discard)
        return active

    async def _watch(
        self, key: int, session: TerminalSession, active: _ActiveProcess
    ) -> None:
        process = active.process
        try:
            await asyncio.gather(
                self._pump(process.stdout, STDOUT, session, active.generation),
                self._pump(process.stderr, STDERR, session, active.generation),
            )
            exit_code = await process.wait()
        except Exception as exc:  # noqa: BLE001
            logger.exception("Watcher for terminal %s failed", key)
            self._finalize(key, active, SessionStatus.ERROR, error=str(exc))
            return

        status = SessionStatus.COMPLETED if exit_code == 0 else SessionStatus.ERROR
        self._finalize(key, active, status, exit_code=exit_code)

    async def _pump(
        self,
        stream: asyncio.StreamReader | None,
        tag: str,
        session: TerminalSession,
        generation: int,
    ) -> None:
        if stream is None:
            return
        pending = ""
        while True:
            chunk = await stream.read(_READ_CHUNK)
            if not chunk:
                break
            pending += chunk.decode("utf-8", errors="replace")
            *lines, pending = pending.split("\n")
            for line in lines:
                self._append(session, generation, tag, line)
            while len(pending) > MAX_LINE_CHARS:
                self._append(session, generation, tag, pending[:MAX_LINE_CHARS])
                pending = pending[MAX_LINE_CHARS:]
        if pending:
            self._append(session, generation, tag, pending)

    @staticmethod
    def _append(
        session: TerminalSession, generation: int, tag: str, text: str
    ) -> None:
        if session.generation != generation:
            return
        if len(session.output) == MAX_OUTPUT_LINES:
            session.dropped_lines += 1
        session.output.append(OutputLine(stream=tag, text=text.rstrip("\r")))
        session.touch()

    def _expire(self, key: int, active: _ActiveProcess, timeout: int) -> None:
        if self._active.get(key) is not active:
            return
        logger.info("Terminal %s timed out after %s seconds", key, timeout)
        self._send_signal(active.process, SIGNALS["SIGKILL"])
        self._finalize(
            key,
            active,
            SessionStatus.ERROR,
            error=f"Process timed out after {timeout} seconds",
        )

    def _finalize(
        self,
        key: int,
        active: _ActiveProcess,
        status: SessionStatus,
        *,
        exit_code: int | None = None,
        error: str | None = None,
    ) -> None:
        # Whoever finds the handle still registered wins; later callers are no-ops.
        if self._active.get(key) is not active:
            return
        del self._active[key]
        if active.timer is not None:
            active.timer.cancel()

        session = self._sessions[key]
        session.status = status
        if exit_code is not None:
            session.exit_code = exit_code
        if error is not None:
            session.error = error
        session.touch()
        active.finished.set()

    @staticmethod
    def _send_signal(process: asyncio.subprocess.Process, sig: int) -> str | None:
        """Signal the process group (POSIX) or the process; return an error text on failure."""
        try:
            if os.name == "posix":
                os.killpg(process.pid, sig)
            else:
                process.send_signal(sig)
        except ProcessLookupError:
            return None
        except OSError as exc:
            logger.warning("Could not signal process %s: %s", process.pid, exc)
            return str(exc)
        return None
