"""The proxy configuration aggregate."""

from collections.abc import Mapping
from datetime import timedelta
from types import MappingProxyType
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
)

from gatekeeper.config.durations import parse_duration
from gatekeeper.config.resource import Resource

REDACTED = "**********"
SECRET_FIELDS = ("client_secret", "encryption_key", "forwarding_password")


def _coerce_duration(value: Any) -> Any:
    """Accept Go-style strings, or integer nanoseconds as Go encodes them."""
    if isinstance(value, str):
        return parse_duration(value)
    if isinstance(value, (bool, float)):
        raise ValueError(
            f"invalid duration {value!r}, use a string such as '10s' or integer nanoseconds"
        )
    if isinstance(value, int):
        return timedelta(microseconds=value / 1000)
    return value


def freeze_map(value: Mapping[str, str]) -> Mapping[str, str]:
    """Return a read-only copy of ``value``."""
    return MappingProxyType(dict(value))


def _thaw_map(value: Mapping[str, str]) -> dict[str, str]:
    return dict(value)


def file_key(name: str) -> str:
    """Map a field name onto its configuration file key."""
    return name.replace("_", "-")


Duration = Annotated[timedelta, BeforeValidator(_coerce_duration)]
FrozenMap = Annotated[
    Mapping[str, str],
    AfterValidator(freeze_map),
    PlainSerializer(_thaw_map, return_type=dict[str, str]),
]


class ProxyConfig(BaseModel):
    """Runtime configuration of the proxy.

    Instances are frozen snapshots. Field defaults are zero values; the
    documented baseline lives in ``gatekeeper.config.defaults``. Sequences are
    tuples and mappings are read-only views over private copies, so nothing
    reachable from a snapshot can be changed after it is built.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=file_key,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    # network
    listen: str = ""
    upstream_url: str = ""
    tls_cert: str = ""
    tls_private_key: str = ""
    tls_ca_certificate: str = ""
    tls_client_certificate: str = ""
    enable_proxy_protocol: bool = False
    upstream_timeout: Duration = timedelta(0)
    upstream_keepalives: bool = False
    upstream_keepalive_timeout: Duration = timedelta(0)
    idle_duration: Duration = timedelta(0)

    # identity
    client_id: str = ""
    client_secret: str = ""
    discovery_url: str = ""
    revocation_url: str = ""
    scopes: tuple[str, ...] = ()
    redirection_url: str = ""
    store_url: str = ""
    skip_token_verification: bool = False
    skip_upstream_tls_verify: bool = False

    # session
    cookie_access_name: str = ""
    cookie_refresh_name: str = ""
    cookie_domain: str = ""
    secure_cookie: bool = False
    encryption_key: str = ""
    enable_refresh_tokens: bool = False

    # access control
    resources: tuple[Resource, ...] = ()
    match_claims: FrozenMap = Field(default_factory=lambda: freeze_map({}))
    add_claims: tuple[str, ...] = ()
    headers: FrozenMap = Field(default_factory=lambda: freeze_map({}))
    tags: FrozenMap = Field(default_factory=lambda: freeze_map({}))
    hostnames: tuple[str, ...] = ()

    # forwarding
    enable_forwarding: bool = False
    forwarding_username: str = ""
    forwarding_password: str = ""
    forwarding_domains: tuple[str, ...] = ()

    # cors
    cors_origins: tuple[str, ...] = ()
    cors_methods: tuple[str, ...] = ()
    cors_headers: tuple[str, ...] = ()
    cors_exposed_headers: tuple[str, ...] = ()
    cors_max_age: Duration = timedelta(0)
    cors_credentials: bool = False

    # pages and operations
    sign_in_page: str = ""
    forbidden_page: str = ""
    enable_metrics: bool = False
    json_logging: bool = False
    log_requests: bool = False
    verbose: bool = False
    enable_security_filter: bool = False
    no_redirects: bool = False

    def has_custom_sign_in_page(self) -> bool:
        """Check if a custom sign-in template is configured."""
        return self.sign_in_page != ""

    def has_custom_forbidden_page(self) -> bool:
        """Check if a custom forbidden template is configured."""
        return self.forbidden_page != ""

    def redacted(self) -> dict[str, Any]:
        """Dump the snapshot by file key with secrets masked, for logging."""
        data = self.model_dump(mode="json", by_alias=True)
        for name in SECRET_FIELDS:
            key = file_key(name)
            if data.get(key):
                data[key] = REDACTED
        return data
