"""Process configuration read from the environment."""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_bridge.errors import ConfigurationError

_CREDENTIAL_FIELDS = {
    "openai": ("openai_api_key", "OPENAI_API_KEY"),
    "anthropic": ("anthropic_api_key", "ANTHROPIC_API_KEY"),
    "gemini": ("google_ai_api_key", "GOOGLE_AI_API_KEY"),
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    google_ai_api_key: str | None = None

    openai_base_url: str | None = None
    anthropic_base_url: str | None = None
    gemini_base_url: str | None = None
    http_timeout_s: float = 60.0

    email_service: str | None = None
    email_host: str | None = None
    email_port: int | None = None
    email_from: str | None = None
    email_username: str | None = None
    email_password: str | None = None
    # JSON array or comma separated patterns
    email_allow_list: str | None = None
    email_block_list: str | None = None

    def api_key_for(self, provider: str) -> str:
        """Return the credential for ``provider`` or fail with a configuration error."""
        try:
            field, env_name = _CREDENTIAL_FIELDS[provider]
        except KeyError:
            raise ConfigurationError(f"Unknown provider '{provider}'") from None
        value = getattr(self, field)
        if not value:
            raise ConfigurationError(f"{env_name} environment variable is required")
        return value

    def base_url_for(self, provider: str) -> str | None:
        return getattr(self, f"{provider}_base_url", None)


@lru_cache
def get_settings() -> Settings:
    return Settings()
