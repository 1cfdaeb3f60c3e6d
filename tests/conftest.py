"""Shared test fixtures for the gatekeeper configuration core."""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from gatekeeper.config.defaults import new_default_config
from gatekeeper.config.types import ProxyConfig

UPSTREAM_URL = "http://127.0.0.1:8080"
DISCOVERY_URL = "https://idp.example.com/auth/realms/main"
REDIRECTION_URL = "https://proxy.example.com"


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep PROXY_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("PROXY_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo handlers installed by configure_logging."""
    yield
    logger = logging.getLogger("gatekeeper")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def valid_config() -> ProxyConfig:
    """A reverse proxy configuration that passes validation."""
    return new_default_config().model_copy(
        update={
            "upstream_url": UPSTREAM_URL,
            "client_id": "proxy",
            "discovery_url": DISCOVERY_URL,
            "redirection_url": REDIRECTION_URL,
        }
    )


@pytest.fixture
def tls_files(tmp_path: Path) -> dict[str, str]:
    """Create placeholder certificate and key files on disk."""
    paths = {}
    for name in ("cert.pem", "key.pem", "ca.pem", "client.pem"):
        path = tmp_path / name
        path.write_text("-----BEGIN PLACEHOLDER-----\n")
        paths[name] = str(path)
    return paths
