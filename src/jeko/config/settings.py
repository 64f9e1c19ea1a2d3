"""Interpreter settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class JekoSettings(BaseSettings):
    """Runtime settings, read from ``JEKO_*`` environment variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="JEKO_",
        case_sensitive=False,
        extra="ignore",
    )

    home: str | None = Field(default=None)
    color: bool = Field(default=True)
    prelude: str | None = Field(default=None)
    max_call_depth: int = Field(default=1000, ge=1)

    def resolve_home(self) -> Path:
        if self.home:
            return Path(self.home).expanduser().resolve()
        return (Path.home() / ".jeko").resolve()

    def resolve_prelude(self) -> Path | None:
        if not self.prelude:
            return None
        return Path(self.prelude).expanduser().resolve()

    @property
    def history_file(self) -> Path:
        return self.resolve_home() / "history"


def load_settings(**overrides: Any) -> JekoSettings:
    """Load settings, letting explicit keyword overrides win over the environment."""
    values = {key: value for key, value in overrides.items() if value is not None}
    return JekoSettings(**values)
