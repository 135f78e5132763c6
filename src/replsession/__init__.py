"""replsession — line-oriented sessions with REPL subprocesses.

A session launches a console program, checks its startup banner, and
then exchanges lines with it: ``send()`` writes to the child's stdin,
``receive()`` returns lines from its stdout and stderr merged in
arrival order, ``close()`` sends the quit command.
"""

from replsession.config import CHROME_BANNER, SessionConfig
from replsession.diagnostics import DiagnosticSink, logging_sink, null_sink
from replsession.errors import (
    BannerMismatchError,
    LaunchError,
    QueueClosedError,
    ReplSessionError,
    SessionClosedError,
    StartupError,
    StreamWriteError,
)
from replsession.line_queue import LineQueue
from replsession.session import ConsoleSession, SessionState, launch

__all__ = [
    "CHROME_BANNER",
    "SessionConfig",
    "DiagnosticSink",
    "logging_sink",
    "null_sink",
    "BannerMismatchError",
    "LaunchError",
    "QueueClosedError",
    "ReplSessionError",
    "SessionClosedError",
    "StartupError",
    "StreamWriteError",
    "LineQueue",
    "ConsoleSession",
    "SessionState",
    "launch",
]
