"""Engine configuration via pydantic-settings."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthzSettings(BaseSettings):
    """Authorization settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_prefix="SCOPEAUTHZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Seed admin, odata-user, mcp-user and readonly on engine construction
    seed_default_roles: bool = True

    # Debug-log every denied decision
    log_denials: bool = True


_settings: AuthzSettings | None = None


def get_settings() -> AuthzSettings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = AuthzSettings()
    return _settings
