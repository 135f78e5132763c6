"""Line-oriented adapters over the child's raw byte streams."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Protocol

from replsession.errors import StreamWriteError

logger = logging.getLogger(__name__)


class ByteReader(Protocol):
    async def readline(self) -> bytes: ...


class ByteWriter(Protocol):
    def write(self, data: bytes) -> None: ...

    async def drain(self) -> None: ...

    def close(self) -> None: ...

    def is_closing(self) -> bool: ...


class LineWriter:
    """Writes whole lines to the child's standard input."""

    def __init__(self, writer: ByteWriter, encoding: str = "utf-8") -> None:
        self._writer = writer
        self._encoding = encoding

    async def write_line(self, line: str) -> int:
        """Write ``line`` plus a newline in a single write.

        Returns the number of bytes written.  Raises ``StreamWriteError``
        if the stream is closed, the line cannot be encoded, or the write
        fails.
        """
        if self._writer.is_closing():
            raise StreamWriteError("input stream is closed")
        try:
            data = (line + "\n").encode(self._encoding)
        except UnicodeEncodeError as e:
            raise StreamWriteError(
                f"cannot encode line as {self._encoding}: {e}"
            ) from e
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, RuntimeError) as e:
            raise StreamWriteError(f"write to input stream failed: {e}") from e
        return len(data)

    def close(self) -> None:
        if self._writer.is_closing():
            return
        try:
            self._writer.close()
        except (OSError, RuntimeError) as e:
            logger.debug("Error closing input stream: %s", e)

    @property
    def closed(self) -> bool:
        return self._writer.is_closing()


class LineReader:
    """Decodes one of the child's output streams into lines.

    ``lines()`` ends at end-of-file or on a read error.  A trailing chunk
    with no newline at end-of-file is dropped, so only complete lines are
    ever produced.  Both ``\\n`` and ``\\r\\n`` terminators are stripped.
    """

    def __init__(self, reader: ByteReader, encoding: str = "utf-8") -> None:
        self._reader = reader
        self._encoding = encoding

    async def lines(self) -> AsyncIterator[str]:
        while True:
            try:
                raw = await self._reader.readline()
            except (OSError, ValueError, asyncio.LimitOverrunError) as e:
                logger.debug("Output stream read failed: %s", e)
                return
            if not raw.endswith(b"\n"):
                if raw:
                    logger.debug("Dropping unterminated trailing output: %r", raw)
                return
            raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
            yield raw.decode(self._encoding, errors="replace")
