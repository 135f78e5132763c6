"""Output multiplexer — merges stdout and stderr into one line queue."""

from __future__ import annotations

import asyncio
import logging

from replsession.diagnostics import DiagnosticSink, null_sink
from replsession.errors import QueueClosedError
from replsession.line_queue import LineQueue
from replsession.stream import LineReader

logger = logging.getLogger(__name__)


async def pump_lines(
    reader: LineReader,
    queue: LineQueue,
    label: str,
    sink: DiagnosticSink = null_sink,
) -> int:
    """Push every line from ``reader`` onto ``queue`` until end-of-file.

    Returns the number of lines delivered.  The queue is never closed here;
    that is the watchdog's job once every reader has finished.
    """
    count = 0
    async for line in reader.lines():
        sink(f"{label} reader got text: {line}")
        try:
            await queue.put(line)
        except QueueClosedError:
            # Only happens when the session was torn down mid-startup.
            logger.debug("%s reader stopping: output queue closed", label)
            break
        count += 1
    sink(f"{label} reader reached end of stream after {count} lines")
    return count


class OutputMultiplexer:
    """Runs one reader task per output stream, all feeding one queue.

    Lines from stdout and stderr are not tagged; the caller sees them in
    whatever order the two readers observed them.
    """

    def __init__(
        self,
        stdout: LineReader,
        stderr: LineReader,
        queue: LineQueue,
        sink: DiagnosticSink = null_sink,
    ) -> None:
        self._readers = {"stdout": stdout, "stderr": stderr}
        self._queue = queue
        self._sink = sink
        self._tasks: list[asyncio.Task[int]] = []

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(
                pump_lines(reader, self._queue, label, self._sink),
                name=f"replsession-{label}-reader",
            )
            for label, reader in self._readers.items()
        ]

    async def wait(self) -> None:
        """Wait until both readers have drained their streams."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def cancel(self) -> None:
        for task in self._tasks:
            task.cancel()

    @property
    def tasks(self) -> list[asyncio.Task[int]]:
        return list(self._tasks)

    @property
    def done(self) -> bool:
        return bool(self._tasks) and all(t.done() for t in self._tasks)
