"""Overrides read from ``PROXY_*`` environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "PROXY_"


class EnvironmentOverrides(BaseSettings):
    """Options that can be bound to the environment.

    Only variables that are present end up in ``model_fields_set``; those
    count as explicitly provided, with the same weight as a flag.
    """

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, extra="ignore")

    config_file: str | None = None
    listen: str | None = None
    client_secret: str | None = None
    client_id: str | None = None
    discovery_url: str | None = None
    redirection_url: str | None = None
    revocation_url: str | None = None
    store_url: str | None = None
    upstream_url: str | None = None

    def provided(self) -> dict[str, str]:
        """Return only the variables that were actually set."""
        return self.model_dump(exclude_unset=True)

    @classmethod
    def env_name(cls, field: str) -> str:
        """Environment variable bound to ``field``."""
        return f"{ENV_PREFIX}{field.upper()}"
