from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the data directory and input file names.
    """

    model_config = SettingsConfigDict(
        env_prefix="",  # explicit env names per field below
        extra="ignore",
    )

    project_root: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parents[1]
    )

    data_dir: Path = Field(
        default=Path("data"), validation_alias=AliasChoices("PCFI_DATA", "data_dir")
    )
    postal_code_pattern: str = Field(
        default="PCF_*.dat",
        validation_alias=AliasChoices("PCFI_PCF_PATTERN", "postal_code_pattern"),
    )
    basic_address_pattern: str = Field(
        default="BAF_*.dat",
        validation_alias=AliasChoices("PCFI_BAF_PATTERN", "basic_address_pattern"),
    )
    encoding: str = Field(default="latin-1")
    log_level: str = Field(
        default="WARNING", validation_alias=AliasChoices("PCFI_LOG_LEVEL", "log_level")
    )

    @field_validator("data_dir", mode="before")
    @classmethod
    def _coerce_path(cls, v):
        # Accept strings from env; blank falls back to the default.
        if isinstance(v, str):
            s = v.strip()
            return Path(s).expanduser() if s else Path("data")
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @field_validator("log_level", mode="after")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper() or "WARNING"

    def model_post_init(self, __context) -> None:
        # Resolve relative paths against project_root
        if not self.data_dir.is_absolute():
            self.data_dir = (self.project_root / self.data_dir).resolve()


# Lazy singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
