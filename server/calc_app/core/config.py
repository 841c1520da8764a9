from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from calc_app.services.engine import NumberFormat, SUPPORTED_DECIMAL_SEPARATORS


class AppSettings(BaseSettings):
    api_title: str = "Keypad Calculator API"
    api_version: str = "0.1.0"

    log_level: str = "INFO"
    decimal_separator: str = "."  # "." | ","
    calc_tool_mode: str = "local"  # http | local
    calc_http_base_url: str | None = None
    calc_http_timeout_sec: float = 5.0
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]
    )
    render_frontend_origin: str | None = Field(default=None, alias="RENDER_FRONTEND_ORIGIN")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("decimal_separator")
    @classmethod
    def validate_decimal_separator(cls, value: str) -> str:
        if value not in SUPPORTED_DECIMAL_SEPARATORS:
            raise ValueError(f"decimal_separator must be one of {SUPPORTED_DECIMAL_SEPARATORS}.")
        return value

    @property
    def number_format(self) -> NumberFormat:
        return NumberFormat(decimal_separator=self.decimal_separator)

    @property
    def resolved_cors_origins(self) -> List[str]:
        """
        Returns the configured CORS origins plus the optional Render frontend origin, deduped.
        """
        normalized: list[str] = []

        def _append(origin: str | None) -> None:
            if not origin:
                return
            cleaned = origin.rstrip("/")
            if cleaned not in normalized:
                normalized.append(cleaned)

        for origin in self.cors_origins:
            _append(origin)

        _append(self.render_frontend_origin)
        return normalized


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
