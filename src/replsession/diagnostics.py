"""Diagnostic sinks — optional side channel for session traffic."""

from __future__ import annotations

import logging
from typing import Callable

DiagnosticSink = Callable[[str], None]


def null_sink(message: str) -> None:
    """Discard the message."""


def logging_sink(logger: logging.Logger | None = None) -> DiagnosticSink:
    """Return a sink that forwards messages to ``logger`` at DEBUG."""
    target = logger or logging.getLogger("replsession.traffic")

    def _sink(message: str) -> None:
        target.debug("%s", message)

    return _sink
