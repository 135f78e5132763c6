"""Input forwarder — drains the inbound queue into the child's stdin."""

from __future__ import annotations

import logging

from replsession.diagnostics import DiagnosticSink, null_sink
from replsession.errors import StreamWriteError
from replsession.line_queue import LineQueue
from replsession.stream import LineWriter

logger = logging.getLogger(__name__)


async def forward_input(
    queue: LineQueue,
    writer: LineWriter,
    sink: DiagnosticSink = null_sink,
) -> int:
    """Write each queued line to ``writer`` until the queue is closed.

    Write failures are reported and skipped; closing the queue is the
    only way this loop ends.  The input stream is closed on the way out
    so the child sees end-of-file.  Returns the number of lines written.
    """
    written = 0
    while True:
        line = await queue.get()
        if line is None:
            break
        sink(f"Got request to write string: {line}")
        try:
            n = await writer.write_line(line)
        except StreamWriteError as e:
            sink(f"Write failed: {e}")
            logger.debug("Dropped input line %r: %s", line, e)
            continue
        written += 1
        sink(f"Wrote {n} bytes")
    sink("Input queue closed, closing input stream")
    writer.close()
    return written
