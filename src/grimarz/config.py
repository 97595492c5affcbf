import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GRIMARZ_",
        extra="ignore",
    )

    log_level: str = "WARNING"
    verify_table_sizes: bool = False
    max_string_length: int | None = None

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("max_string_length")
    @classmethod
    def _positive_limit(cls, value: int | None) -> int | None:
        if value is not None and value < 0:
            raise ValueError("max_string_length must not be negative")
        return value


settings = Settings()
