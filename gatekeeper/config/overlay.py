"""Command-line and environment overrides applied onto a configuration."""

import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict

from gatekeeper.config.errors import KeyPairError, ResourceError
from gatekeeper.config.keypairs import decode_key_pairs, merge_maps
from gatekeeper.config.resource import Resource
from gatekeeper.config.types import ProxyConfig, file_key, freeze_map

# An explicitly provided empty string does not clear these fields.
NON_EMPTY_FIELDS = frozenset(
    {
        "listen",
        "client_id",
        "client_secret",
        "discovery_url",
        "upstream_url",
        "revocation_url",
        "store_url",
        "redirection_url",
    }
)
REPLACE_LIST_FIELDS = frozenset({"scopes"})
APPEND_LIST_FIELDS = frozenset(
    {
        "hostnames",
        "add_claims",
        "forwarding_domains",
        "cors_origins",
        "cors_methods",
        "cors_headers",
        "cors_exposed_headers",
    }
)
KEY_PAIR_FIELDS = frozenset({"tags", "match_claims", "headers"})

logger = logging.getLogger(__name__)


class CLIOptions(BaseModel):
    """Values given explicitly on the command line or through the environment.

    ``None`` means the option was not provided at all, which is not the same
    as an empty string or an empty list.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    listen: str | None = None
    upstream_url: str | None = None
    tls_cert: str | None = None
    tls_private_key: str | None = None
    tls_ca_certificate: str | None = None
    tls_client_certificate: str | None = None
    enable_proxy_protocol: bool | None = None
    upstream_timeout: timedelta | None = None
    upstream_keepalives: bool | None = None
    upstream_keepalive_timeout: timedelta | None = None
    idle_duration: timedelta | None = None

    client_id: str | None = None
    client_secret: str | None = None
    discovery_url: str | None = None
    revocation_url: str | None = None
    scopes: list[str] | None = None
    redirection_url: str | None = None
    store_url: str | None = None
    skip_token_verification: bool | None = None
    skip_upstream_tls_verify: bool | None = None

    cookie_access_name: str | None = None
    cookie_refresh_name: str | None = None
    cookie_domain: str | None = None
    secure_cookie: bool | None = None
    encryption_key: str | None = None
    enable_refresh_tokens: bool | None = None

    resources: list[str] | None = None
    match_claims: list[str] | None = None
    add_claims: list[str] | None = None
    headers: list[str] | None = None
    tags: list[str] | None = None
    hostnames: list[str] | None = None

    enable_forwarding: bool | None = None
    forwarding_username: str | None = None
    forwarding_password: str | None = None
    forwarding_domains: list[str] | None = None

    cors_origins: list[str] | None = None
    cors_methods: list[str] | None = None
    cors_headers: list[str] | None = None
    cors_exposed_headers: list[str] | None = None
    cors_max_age: timedelta | None = None
    cors_credentials: bool | None = None

    sign_in_page: str | None = None
    forbidden_page: str | None = None
    enable_metrics: bool | None = None
    json_logging: bool | None = None
    log_requests: bool | None = None
    verbose: bool | None = None
    enable_security_filter: bool | None = None
    no_redirects: bool | None = None


def _parse_resources(descriptors: list[str]) -> tuple[Resource, ...]:
    parsed = []
    for descriptor in descriptors:
        try:
            parsed.append(Resource.parse(descriptor))
        except ResourceError as exc:
            raise ResourceError(f"invalid resource {descriptor}, {exc}") from exc
    return tuple(parsed)


def _merge_key_pairs(
    name: str, current: Mapping[str, str], entries: list[str]
) -> Mapping[str, str]:
    try:
        decoded = decode_key_pairs(entries)
    except KeyPairError as exc:
        raise KeyPairError(f"invalid {file_key(name)} option, {exc}") from exc
    return freeze_map(merge_maps(dict(current), decoded))


def apply_cli_options(config: ProxyConfig, options: CLIOptions) -> ProxyConfig:
    """Return a copy of ``config`` with every provided option applied.

    The overlay is atomic: all updates are computed before the copy is made,
    so a parse failure raises without producing a partially updated snapshot.
    """
    updates: dict[str, Any] = {}
    for name in CLIOptions.model_fields:
        value = getattr(options, name)
        if value is None:
            continue
        current = getattr(config, name)

        if name == "resources":
            updates[name] = current + _parse_resources(value)
        elif name in KEY_PAIR_FIELDS:
            updates[name] = _merge_key_pairs(name, current, value)
        elif name in APPEND_LIST_FIELDS:
            updates[name] = current + tuple(value)
        elif name in REPLACE_LIST_FIELDS:
            updates[name] = tuple(value)
        elif name in NON_EMPTY_FIELDS and value == "":
            continue
        else:
            updates[name] = value

    if updates:
        logger.debug("command line overrides %s", sorted(updates))
    return config.model_copy(update=updates)
