"""Child process creation.

The session only needs a small slice of ``asyncio.subprocess.Process``:
three streams, ``wait()``, ``kill()``, ``pid`` and ``returncode``.
Anything exposing that slice can be returned by a launcher, which keeps
the session testable without a real child.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import Any, Awaitable, Callable, Protocol, Sequence

from replsession.errors import LaunchError
from replsession.stream import ByteReader, ByteWriter

logger = logging.getLogger(__name__)

DEFAULT_READ_LIMIT = 1024 * 1024


class ConsoleProcess(Protocol):
    stdin: ByteWriter | None
    stdout: ByteReader | None
    stderr: ByteReader | None
    pid: int
    returncode: int | None

    async def wait(self) -> int: ...

    def kill(self) -> None: ...


Launcher = Callable[[str, Sequence[str]], Awaitable[ConsoleProcess]]


async def launch_process(
    command: str,
    args: Sequence[str] = (),
    cwd: str | None = None,
    env: dict[str, str] | None = None,
    read_limit: int = DEFAULT_READ_LIMIT,
) -> asyncio.subprocess.Process:
    """Start ``command`` with piped stdin/stdout/stderr.

    The child gets its own process group so ``kill_process_group`` can take
    down anything it spawns.  Raises ``LaunchError`` if the process cannot
    be started or any pipe is missing.
    """
    full_env: dict[str, Any] | None = None
    if env:
        full_env = {**os.environ, **env}

    try:
        proc = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
            env=full_env,
            start_new_session=True,
            limit=read_limit,
        )
    except (OSError, ValueError) as e:
        raise LaunchError(f"Failed to start {command}: {e}") from e

    missing = [
        name
        for name, stream in (
            ("stdin", proc.stdin),
            ("stdout", proc.stdout),
            ("stderr", proc.stderr),
        )
        if stream is None
    ]
    if missing:
        kill_process_group(proc)
        raise LaunchError(f"Failed to open {', '.join(missing)} pipe for {command}")

    logger.info(
        "Started console process pid=%d cmd=%s",
        proc.pid,
        " ".join([command, *args]),
    )
    return proc


def kill_process_group(proc: ConsoleProcess) -> None:
    """SIGKILL the child's process group, falling back to the child alone.

    Only real subprocesses are signalled by group; any other process
    object is asked to ``kill()`` itself.
    """
    if proc.returncode is not None:
        return
    if not isinstance(proc, asyncio.subprocess.Process):
        proc.kill()
        return
    try:
        os.killpg(os.getpgid(proc.pid), signal.SIGKILL)
        logger.info("Killed process group of pid=%d", proc.pid)
        return
    except ProcessLookupError:
        logger.debug("Process group already gone: pid=%d", proc.pid)
        return
    except (OSError, AttributeError) as e:
        logger.debug("killpg failed for pid=%d: %s", proc.pid, e)
    try:
        proc.kill()
    except ProcessLookupError:
        pass
