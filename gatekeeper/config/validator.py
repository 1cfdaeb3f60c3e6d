"""Cross-field validation of a fully resolved configuration."""

import re
from pathlib import Path

from pydantic import AnyUrl, TypeAdapter, ValidationError

from gatekeeper.config.errors import ConfigValidationError, ResourceError
from gatekeeper.config.types import ProxyConfig

AES_KEY_LENGTHS = (16, 32)

_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


def _url_error(value: str) -> str | None:
    """Return why ``value`` is not a URL, or None when it parses."""
    try:
        _url_adapter.validate_python(value)
    except ValidationError as exc:
        return exc.errors()[0]["msg"]
    return None


def _check_tls(config: ProxyConfig) -> None:
    if config.tls_cert and not config.tls_private_key:
        raise ConfigValidationError(
            "you have not provided a private key", field="tls-private-key"
        )
    if config.tls_private_key and not config.tls_cert:
        raise ConfigValidationError(
            "you have not provided a certificate file", field="tls-cert"
        )
    for field, label, path in (
        ("tls-cert", "the tls certificate", config.tls_cert),
        ("tls-private-key", "the tls private key", config.tls_private_key),
        ("tls-ca-certificate", "the tls ca certificate file", config.tls_ca_certificate),
        (
            "tls-client-certificate",
            "the tls client certificate",
            config.tls_client_certificate,
        ),
    ):
        if path and not Path(path).exists():
            raise ConfigValidationError(f"{label} {path} does not exist", field=field)


def _check_forwarding(config: ProxyConfig) -> None:
    if not config.client_id:
        raise ConfigValidationError(
            "you have not specified the client id", field="client-id"
        )
    if not config.discovery_url:
        raise ConfigValidationError(
            "you have not specified the discovery url", field="discovery-url"
        )
    if not config.forwarding_username:
        raise ConfigValidationError(
            "no forwarding username", field="forwarding-username"
        )
    if not config.forwarding_password:
        raise ConfigValidationError(
            "no forwarding password", field="forwarding-password"
        )


def _check_upstream(config: ProxyConfig) -> None:
    if not config.upstream_url:
        raise ConfigValidationError(
            "you have not specified an upstream endpoint to proxy to",
            field="upstream-url",
        )
    reason = _url_error(config.upstream_url)
    if reason:
        raise ConfigValidationError(
            f"the upstream endpoint is invalid, {reason}", field="upstream-url"
        )


def _check_token_verification(config: ProxyConfig) -> None:
    """Checks that only apply when tokens are verified against the provider."""
    if not config.client_id:
        raise ConfigValidationError(
            "you have not specified the client id", field="client-id"
        )
    if not config.discovery_url:
        raise ConfigValidationError(
            "you have not specified the discovery url", field="discovery-url"
        )
    if config.enable_refresh_tokens:
        if not config.encryption_key:
            raise ConfigValidationError(
                "you have not specified a encryption key for encoding the session state",
                field="encryption-key",
            )
        length = len(config.encryption_key)
        if length not in AES_KEY_LENGTHS:
            raise ConfigValidationError(
                f"the encryption key ({length}) must be either 16 or 32 characters "
                "for AES-128/AES-256 selection",
                field="encryption-key",
            )
    if (
        not config.no_redirects
        and config.secure_cookie
        and not config.redirection_url.startswith("https")
    ):
        raise ConfigValidationError(
            "the cookie is set to secure but your redirection url is non-tls",
            field="redirection-url",
        )
    if config.store_url:
        reason = _url_error(config.store_url)
        if reason:
            raise ConfigValidationError(
                f"the store url is invalid, error: {reason}", field="store-url"
            )


def _check_resources(config: ProxyConfig) -> None:
    for resource in config.resources:
        try:
            resource.is_valid()
        except ResourceError as exc:
            raise ConfigValidationError(str(exc), field="resources") from exc


def _check_match_claims(config: ProxyConfig) -> None:
    for claim, pattern in config.match_claims.items():
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigValidationError(
                f"the claim matcher: {pattern} for claim: {claim} is not a valid regex",
                field="match-claims",
            ) from exc


def validate_config(config: ProxyConfig) -> ProxyConfig:
    """Check every invariant and return the normalized snapshot.

    Raises ConfigValidationError for the first invariant that does not hold.
    The only normalization is stripping a trailing ``/`` from the redirection
    url, which happens when tokens are verified in reverse proxy mode.
    """
    if not config.listen:
        raise ConfigValidationError(
            "you have not specified the listening interface", field="listen"
        )
    _check_tls(config)

    if config.enable_forwarding:
        _check_forwarding(config)
    else:
        _check_upstream(config)
        if not config.skip_token_verification:
            if config.redirection_url.endswith("/"):
                trimmed = config.redirection_url.removesuffix("/")
                config = config.model_copy(update={"redirection_url": trimmed})
            _check_token_verification(config)

    _check_resources(config)
    _check_match_claims(config)
    return config
