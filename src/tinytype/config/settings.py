"""Checker settings."""

from __future__ import annotations

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from tinytype.core.checker import Features, Variant


class CheckerSettings(BaseSettings):
    """Which language variant to check and how strictly."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TINYTYPE_",
        case_sensitive=False,
        extra="ignore",
    )

    variant: Variant = Field(default=Variant.REC)
    check_conditions: bool = Field(default=True)
    leaky_scopes: bool = Field(default=False)

    def features(self) -> Features:
        return self.variant.features(
            check_conditions=self.check_conditions,
            leaky_scopes=self.leaky_scopes,
        )


def load_settings(**overrides: Any) -> CheckerSettings:
    """Load settings from the environment; ``None`` overrides are skipped."""
    return CheckerSettings(**{k: v for k, v in overrides.items() if v is not None})
