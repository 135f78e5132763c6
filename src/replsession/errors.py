"""Exception hierarchy for console sessions."""

from __future__ import annotations


class ReplSessionError(Exception):
    """Base class for all replsession errors."""


class StartupError(ReplSessionError):
    """The session could not be brought to the ready state."""


class LaunchError(StartupError):
    """The child process or one of its pipes could not be created."""


class BannerMismatchError(StartupError):
    """The first line of output did not contain the expected banner.

    ``actual`` is ``None`` when output closed before any line arrived.
    """

    def __init__(self, expected: str, actual: str | None) -> None:
        self.expected = expected
        self.actual = actual
        if actual is None:
            message = (
                "Console closed before printing a startup line; "
                f"expected {expected!r}"
            )
        else:
            message = (
                f"Unable to fetch proper console startup line. "
                f"Got: {actual!r} but expected {expected!r}"
            )
        super().__init__(message)


class SessionClosedError(ReplSessionError):
    """Input was sent to a session that has already been closed."""


class QueueClosedError(ReplSessionError):
    """A line was put on a queue that has been closed."""


class StreamWriteError(ReplSessionError):
    """Writing to the child's input stream failed."""
