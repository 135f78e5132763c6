"""Console session — a line-oriented conversation with a REPL subprocess.

The session owns the child process and four background tasks:

* two readers (stdout, stderr) feeding one outbound queue,
* one forwarder draining the inbound queue into the child's stdin,
* one watchdog that waits for the child to exit, lets the readers drain,
  and then closes the outbound queue so ``receive()`` returns ``None``.

The queues are the only state shared between tasks.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import AsyncIterator, Sequence

from replsession.config import SessionConfig
from replsession.diagnostics import DiagnosticSink, logging_sink, null_sink
from replsession.errors import (
    BannerMismatchError,
    LaunchError,
    QueueClosedError,
    SessionClosedError,
)
from replsession.forwarder import forward_input
from replsession.line_queue import LineQueue
from replsession.multiplexer import OutputMultiplexer
from replsession.process import (
    ConsoleProcess,
    Launcher,
    kill_process_group,
    launch_process,
)
from replsession.stream import LineReader, LineWriter

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    """Lifecycle states for a console session."""

    LAUNCHING = "launching"
    READY = "ready"
    SHUTTING_DOWN = "shutting_down"  # Quit command sent, child not yet gone
    TERMINATED = "terminated"  # Child exited and all output delivered
    FAILED_STARTUP = "failed_startup"


class ConsoleSession:
    """An interactive console running in a child process.

    Build one with ``await ConsoleSession.launch(...)`` (or the module-level
    ``launch``); the constructor only wires objects together.

    Usage:
        async with await launch("node", ["-i"], config=cfg) as session:
            await session.send("1+1")
            print(await session.receive())

    ``send()`` after ``close()`` raises ``SessionClosedError``.
    ``receive()`` returns ``None`` once the child has exited and every
    line it produced has been handed out.
    """

    def __init__(
        self,
        process: ConsoleProcess,
        config: SessionConfig,
        sink: DiagnosticSink = null_sink,
    ) -> None:
        if process.stdin is None or process.stdout is None or process.stderr is None:
            raise LaunchError("Console process is missing a standard stream pipe")

        self.config = config
        self.inbound = LineQueue(config.inbound_capacity)
        self.outbound = LineQueue(config.outbound_capacity)

        self._process = process
        self._sink = sink
        self._state = SessionState.LAUNCHING
        self._banner: str | None = None
        self._close_requested = False

        self._writer = LineWriter(process.stdin, config.encoding)
        self._multiplexer = OutputMultiplexer(
            stdout=LineReader(process.stdout, config.encoding),
            stderr=LineReader(process.stderr, config.encoding),
            queue=self.outbound,
            sink=sink,
        )
        self._forwarder_task: asyncio.Task[int] | None = None
        self._watchdog_task: asyncio.Task[int] | None = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    async def launch(
        cls,
        command: str,
        args: Sequence[str] = (),
        config: SessionConfig | None = None,
        sink: DiagnosticSink | None = None,
        launcher: Launcher | None = None,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> ConsoleSession:
        """Start ``command`` and wait for its startup banner.

        Args:
            command: Executable to run.
            args: Its arguments.
            config: Session settings; defaults to ``SessionConfig()``.
            sink: Diagnostic sink.  Defaults to a logging sink when
                ``config.debug`` is set, otherwise a no-op.
            launcher: Replacement for ``launch_process`` (tests, sandboxes).
                ``cwd`` and ``env`` only apply to the default launcher.

        Raises:
            LaunchError: The process or its pipes could not be created.
            BannerMismatchError: The first output line lacked the banner.
        """
        config = config or SessionConfig()
        if sink is None:
            sink = logging_sink() if config.debug else null_sink

        sink(f"Starting command: {command} {list(args)}")
        if launcher is None:
            process = await launch_process(
                command, args, cwd=cwd, env=env, read_limit=config.read_limit
            )
        else:
            try:
                process = await launcher(command, args)
            except OSError as e:
                raise LaunchError(f"Failed to start {command}: {e}") from e

        try:
            session = cls(process, config, sink)
        except LaunchError:
            kill_process_group(process)
            raise

        session._start()
        try:
            await session._handshake()
        except BaseException:
            session._abort()
            raise
        return session

    def _start(self) -> None:
        self._multiplexer.start()
        self._forwarder_task = asyncio.create_task(
            forward_input(self.inbound, self._writer, self._sink),
            name="replsession-input-forwarder",
        )
        self._watchdog_task = asyncio.create_task(
            self._watch(), name="replsession-watchdog"
        )

    async def _handshake(self) -> None:
        first = await self.outbound.get()
        if first is None or self.config.banner not in first:
            self._state = SessionState.FAILED_STARTUP
            logger.warning(
                "Console pid=%d failed startup: got %r, expected %r",
                self._process.pid,
                first,
                self.config.banner,
            )
            raise BannerMismatchError(self.config.banner, first)
        self._banner = first
        self._sink(f"Startup banner received: {first}")
        if self._state is SessionState.LAUNCHING:
            self._state = SessionState.READY

    def _abort(self) -> None:
        """Tear down a session that never became ready."""
        self._state = SessionState.FAILED_STARTUP
        kill_process_group(self._process)
        for task in (self._forwarder_task, self._watchdog_task):
            if task is not None:
                task.cancel()
        self._multiplexer.cancel()

    async def _watch(self) -> int:
        returncode = await self._process.wait()
        self._sink(f"Process exited with code {returncode}")
        await self._multiplexer.wait()
        await self.outbound.close()
        self._sink("Output queue closed")
        if self._state is not SessionState.FAILED_STARTUP:
            self._state = SessionState.TERMINATED
        logger.info(
            "Console process pid=%d exited (code=%s)", self._process.pid, returncode
        )
        return returncode

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def send(self, line: str) -> None:
        """Queue ``line`` for the console, as if typed and followed by Enter.

        Suspends while the inbound queue is full.
        """
        if "\n" in line or "\r" in line:
            raise ValueError("A console line must not contain line terminators")
        try:
            line.encode(self.config.encoding)
        except UnicodeEncodeError as e:
            raise ValueError(
                f"Line cannot be encoded as {self.config.encoding}: {e}"
            ) from e
        if self._close_requested:
            raise SessionClosedError("Session is closed")
        try:
            await self.inbound.put(line)
        except QueueClosedError as e:
            raise SessionClosedError("Session is closed") from e
        self._sink(f"Queued input: {line}")

    async def receive(self) -> str | None:
        """Return the next output line, or ``None`` once the session is over."""
        return await self.outbound.get()

    async def close(self) -> None:
        """Ask the console to quit and stop accepting input.

        Sends ``config.quit_command`` once, then closes the inbound queue.
        The child is not signalled; see ``kill()`` and ``wait_closed()``.
        Calling this more than once does nothing.

        Call it even after the child has exited on its own: the input
        forwarder only stops, and the child's stdin is only closed, once
        the inbound queue is closed.
        """
        if self._close_requested:
            return
        self._close_requested = True
        if self._state is SessionState.READY:
            self._state = SessionState.SHUTTING_DOWN
        self._sink(f"Closing session with {self.config.quit_command!r}")
        await self.inbound.put(self.config.quit_command)
        await self.inbound.close()
        self._sink("Input queue closed")

    async def wait_closed(self, timeout: float | None = None) -> int | None:
        """Wait for the child to exit and its output to be fully queued.

        After ``close()`` this also waits for the input forwarder to finish,
        so the child's stdin is closed when it returns.

        Returns the exit code, or ``None`` if ``timeout`` ran out first.
        """
        if self._watchdog_task is None:
            return self._process.returncode
        tasks: list[asyncio.Task[int]] = [self._watchdog_task]
        if self._close_requested and self._forwarder_task is not None:
            tasks.append(self._forwarder_task)
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            return None
        return self._watchdog_task.result()

    def kill(self) -> None:
        """Forcefully kill the console's process group."""
        kill_process_group(self._process)

    async def __aenter__(self) -> ConsoleSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
        timeout = self.config.shutdown_timeout
        if timeout is None:
            return
        if await self.wait_closed(timeout) is None:
            logger.warning(
                "Console pid=%d ignored %r for %.1fs, killing it",
                self._process.pid,
                self.config.quit_command,
                timeout,
            )
            self.kill()
            await self.wait_closed(timeout)

    async def __aiter__(self) -> AsyncIterator[str]:
        while True:
            line = await self.receive()
            if line is None:
                return
            yield line

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def alive(self) -> bool:
        return self._process.returncode is None

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    @property
    def banner(self) -> str | None:
        """The startup line consumed by the handshake."""
        return self._banner

    @property
    def closing(self) -> bool:
        return self._close_requested

    @property
    def disposed(self) -> bool:
        """True once every background task has finished."""
        tasks = [self._forwarder_task, self._watchdog_task, *self._multiplexer.tasks]
        return all(t is not None and t.done() for t in tasks)


async def launch(
    command: str,
    args: Sequence[str] = (),
    config: SessionConfig | None = None,
    sink: DiagnosticSink | None = None,
    launcher: Launcher | None = None,
    cwd: str | None = None,
    env: dict[str, str] | None = None,
) -> ConsoleSession:
    """Shortcut for ``ConsoleSession.launch``."""
    return await ConsoleSession.launch(
        command, args, config=config, sink=sink, launcher=launcher, cwd=cwd, env=env
    )
