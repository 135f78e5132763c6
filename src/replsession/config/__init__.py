"""Configuration — Pydantic model for console session settings."""

from __future__ import annotations

import codecs
import json
import os
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

CHROME_BANNER = 'Type a Javascript expression to evaluate or "quit" to exit.'


class SessionConfig(BaseModel):
    """Settings for one console session."""

    banner: str = Field(
        default=CHROME_BANNER,
        description="Substring the first line of console output must contain",
    )
    quit_command: str = Field(
        default="quit", description="Line sent to ask the console to exit"
    )
    inbound_capacity: int = Field(
        default=1,
        ge=1,
        description="Lines of input that may wait to be written to the console",
    )
    outbound_capacity: int = Field(
        default=5000,
        ge=1,
        description="Lines of output buffered before the readers stall",
    )
    encoding: str = Field(default="utf-8")
    read_limit: int = Field(
        default=1024 * 1024,
        gt=0,
        description="Maximum length in bytes of a single output line",
    )
    shutdown_timeout: float | None = Field(
        default=None,
        description=(
            "Seconds to wait for the console to exit after the quit command "
            "when used as a context manager. The process group is killed "
            "when this runs out. None waits for nothing and kills nothing."
        ),
    )
    debug: bool = Field(
        default=False,
        description="Route session traffic to the 'replsession.traffic' logger",
    )

    @field_validator("encoding")
    @classmethod
    def _known_codec(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {value!r}") from e
        return value

    @classmethod
    def load(cls, config_path: str | None = None) -> SessionConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            REPLSESSION_BANNER            - Expected startup banner substring
            REPLSESSION_QUIT_COMMAND      - Line that asks the console to exit
            REPLSESSION_SHUTDOWN_TIMEOUT  - Seconds to wait before killing on exit
            REPLSESSION_DEBUG             - "1"/"true" to log all session traffic
        """
        load_dotenv(override=True)

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            with open(config_path) as f:
                config_data = json.load(f)

        env_banner = os.environ.get("REPLSESSION_BANNER")
        if env_banner:
            config_data["banner"] = env_banner

        env_quit = os.environ.get("REPLSESSION_QUIT_COMMAND")
        if env_quit:
            config_data["quit_command"] = env_quit

        env_timeout = os.environ.get("REPLSESSION_SHUTDOWN_TIMEOUT")
        if env_timeout:
            config_data["shutdown_timeout"] = float(env_timeout)

        env_debug = os.environ.get("REPLSESSION_DEBUG")
        if env_debug:
            config_data["debug"] = env_debug.strip().lower() in ("1", "true", "yes", "on")

        return cls.model_validate(config_data)
