"""Competition server configuration via environment variables."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, EnvSettingsSource, SettingsConfigDict

if TYPE_CHECKING:
    from pydantic.fields import FieldInfo
    from pydantic_settings import PydanticBaseSettingsSource


def parse_cors_origins(value: Union[str, list[str]]) -> list[str]:
    """Accept a list, a JSON array string or a comma-separated string."""
    if isinstance(value, list):
        return value
    stripped = value.strip()
    if stripped.startswith("["):
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON array: {exc}") from exc
        if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
            raise ValueError("JSON value must be an array of strings")
        return parsed
    origins = [origin.strip() for origin in stripped.split(",") if origin.strip()]
    if not origins:
        raise ValueError("CORS origins must not be empty")
    return origins


class CorsEnvSettingsSource(EnvSettingsSource):
    """Hand the raw env string for cors_origins to the field validator."""

    def prepare_field_value(self, field_name: str, field: FieldInfo, value: Any, value_is_complex: bool) -> Any:
        if field_name == "cors_origins" and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)


class ServerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="COMPETITION_")

    max_sessions: int = 100
    log_dir: str = "logs/competition"
    cors_origins: list[str] = ["*"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, value: Union[str, list[str]]) -> list[str]:
        return parse_cors_origins(value)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, CorsEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
