"""Tests for replsession.config.SessionConfig."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from replsession.config import CHROME_BANNER, SessionConfig


class TestSessionConfigDefaults:
    def test_defaults(self) -> None:
        config = SessionConfig()
        assert config.banner == CHROME_BANNER
        assert config.quit_command == "quit"
        assert config.inbound_capacity == 1
        assert config.outbound_capacity == 5000
        assert config.shutdown_timeout is None
        assert config.debug is False

    def test_chrome_banner_text(self) -> None:
        assert CHROME_BANNER == (
            'Type a Javascript expression to evaluate or "quit" to exit.'
        )

    def test_capacity_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SessionConfig(inbound_capacity=0)
        with pytest.raises(ValidationError):
            SessionConfig(outbound_capacity=0)

    def test_unknown_encoding_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unknown encoding"):
            SessionConfig(encoding="no-such-codec")

    def test_known_encoding_accepted(self) -> None:
        assert SessionConfig(encoding="latin-1").encoding == "latin-1"


class TestSessionConfigLoad:
    def test_load_without_file(self) -> None:
        assert SessionConfig.load() == SessionConfig()

    def test_load_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = SessionConfig.load(str(tmp_path / "nope.json"))
        assert config.quit_command == "quit"

    def test_load_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"banner": "Welcome", "outbound_capacity": 10}))
        config = SessionConfig.load(str(path))
        assert config.banner == "Welcome"
        assert config.outbound_capacity == 10

    def test_env_overrides_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"banner": "from file", "quit_command": "exit"}))
        monkeypatch.setenv("REPLSESSION_BANNER", "from env")
        config = SessionConfig.load(str(path))
        assert config.banner == "from env"
        assert config.quit_command == "exit"

    def test_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPLSESSION_QUIT_COMMAND", ".exit")
        monkeypatch.setenv("REPLSESSION_SHUTDOWN_TIMEOUT", "2.5")
        monkeypatch.setenv("REPLSESSION_DEBUG", "true")
        config = SessionConfig.load()
        assert config.quit_command == ".exit"
        assert config.shutdown_timeout == 2.5
        assert config.debug is True

    def test_debug_env_false(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("REPLSESSION_DEBUG", "0")
        assert SessionConfig.load().debug is False

    def test_load_rejects_unknown_encoding(self, tmp_path: Path) -> None:
        path = tmp_path / "session.json"
        path.write_text(json.dumps({"encoding": "no-such-codec"}))
        with pytest.raises(ValidationError):
            SessionConfig.load(str(path))
