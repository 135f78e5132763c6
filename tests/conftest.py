"""Shared fixtures for replsession tests."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

REPL_SCRIPT = textwrap.dedent(
    """
    import sys

    print(sys.argv[1], flush=True)
    for line in sys.stdin:
        line = line.rstrip("\\n")
        if line == "quit":
            break
        if line.startswith("err "):
            print(line[4:], file=sys.stderr, flush=True)
        elif line.startswith("exit "):
            sys.exit(int(line[5:]))
        else:
            print("echo: " + line, flush=True)
    """
)


@pytest.fixture
def repl_script(tmp_path: Path) -> Path:
    """A tiny line-echoing console: prints argv[1] as its banner."""
    path = tmp_path / "fake_repl.py"
    path.write_text(REPL_SCRIPT)
    return path


@pytest.fixture
def python() -> str:
    return sys.executable


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "REPLSESSION_BANNER",
        "REPLSESSION_QUIT_COMMAND",
        "REPLSESSION_SHUTDOWN_TIMEOUT",
        "REPLSESSION_DEBUG",
        "REPLSESSION_CHROME",
    ):
        monkeypatch.delenv(var, raising=False)
