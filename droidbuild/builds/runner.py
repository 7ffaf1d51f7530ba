"""Runner for external build tools.

This module handles:
- Executing ant, the gradle wrapper and adb with subprocess
- Logging the command line and duration
- Turning non-zero exits into BuildToolError

Every invocation is attempted exactly once and blocks until the child
exits. No timeout is applied unless one is passed explicitly, so a hung
tool hangs the caller.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from droidbuild.errors import BuildToolError

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Result of a tool execution.

    Attributes:
        command: The command that was executed.
        exit_code: Process exit code.
        started_at: Start time.
        finished_at: Finish time.
        stdout: Captured output, when capture was requested.
    """

    command: str
    exit_code: int
    started_at: datetime
    finished_at: datetime
    stdout: str | None = None

    @property
    def duration(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


def run_tool(
    cmd: Sequence[str | os.PathLike[str]],
    cwd: Path | None = None,
    timeout: int | None = None,
    capture: bool = False,
    env_override: dict[str, str] | None = None,
) -> ToolResult:
    """Run an external tool and wait for it to finish.

    Output goes straight to the terminal unless ``capture`` is set, in which
    case stdout is collected as text and returned.

    Args:
        cmd: Command as a list of arguments.
        cwd: Working directory for the tool.
        timeout: Timeout in seconds (None = wait forever).
        capture: Capture stdout instead of streaming it.
        env_override: Optional environment variable overrides.

    Returns:
        ToolResult for a zero exit.

    Raises:
        BuildToolError: If the tool cannot be started, times out or exits
            with a non-zero status.
    """
    args = [str(c) for c in cmd]
    cmd_str = shlex.join(args)
    logger.info("Running: %s", cmd_str)
    if cwd is not None:
        logger.debug("Working directory: %s", cwd)

    env: dict[str, str] | None = None
    if env_override:
        env = dict(os.environ)
        env.update(env_override)

    started_at = datetime.now(timezone.utc)
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            stdout=subprocess.PIPE if capture else None,
            text=capture,
            timeout=timeout,
            env=env,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        message = f"{args[0]} timed out after {timeout} seconds"
        logger.error(message)
        raise BuildToolError(message, exit_code=-1, command=cmd_str) from e
    except OSError as e:
        message = f"Failed to execute {args[0]}: {e}"
        logger.error(message)
        raise BuildToolError(message, exit_code=None, command=cmd_str) from e

    finished_at = datetime.now(timezone.utc)

    if result.returncode != 0:
        message = f"{args[0]} failed with exit code {result.returncode}"
        logger.error("%s: %s", message, cmd_str)
        raise BuildToolError(message, exit_code=result.returncode, command=cmd_str)

    tool_result = ToolResult(
        command=cmd_str,
        exit_code=result.returncode,
        started_at=started_at,
        finished_at=finished_at,
        stdout=result.stdout if capture else None,
    )
    logger.debug("%s finished in %.1fs", args[0], tool_result.duration)
    return tool_result


__all__ = ["ToolResult", "run_tool"]
