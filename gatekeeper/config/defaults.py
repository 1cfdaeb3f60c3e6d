"""Baseline configuration values."""

from datetime import timedelta

from gatekeeper.config.types import ProxyConfig

DEFAULT_LISTEN = "127.0.0.1:3000"
DEFAULT_UPSTREAM_TIMEOUT = timedelta(seconds=10)
DEFAULT_UPSTREAM_KEEPALIVE_TIMEOUT = timedelta(seconds=10)
DEFAULT_COOKIE_ACCESS_NAME = "kc-access"
DEFAULT_COOKIE_REFRESH_NAME = "kc-state"
DEFAULT_REVOCATION_URL = "/oauth2/revoke"


def new_default_config() -> ProxyConfig:
    """Build the configuration every other source is layered onto."""
    return ProxyConfig(
        listen=DEFAULT_LISTEN,
        upstream_timeout=DEFAULT_UPSTREAM_TIMEOUT,
        upstream_keepalive_timeout=DEFAULT_UPSTREAM_KEEPALIVE_TIMEOUT,
        cookie_access_name=DEFAULT_COOKIE_ACCESS_NAME,
        cookie_refresh_name=DEFAULT_COOKIE_REFRESH_NAME,
        revocation_url=DEFAULT_REVOCATION_URL,
        secure_cookie=True,
        skip_upstream_tls_verify=True,
        match_claims={},
        headers={},
        tags={},
    )
