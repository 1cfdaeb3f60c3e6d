"""Command-line flag schema and its translation into ``CLIOptions``."""

import argparse
from datetime import timedelta
from typing import Any, NamedTuple

from gatekeeper.config.defaults import new_default_config
from gatekeeper.config.durations import format_duration, parse_duration
from gatekeeper.config.overlay import CLIOptions
from gatekeeper.config.types import ProxyConfig
from gatekeeper.core.settings import EnvironmentOverrides

_TRUE_VALUES = {"1", "t", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "f", "false", "no", "n", "off"}


class FlagSpec(NamedTuple):
    """A single command-line option."""

    name: str
    dest: str
    kind: str
    help: str
    env: bool = False


# fmt: off
FLAGS: tuple[FlagSpec, ...] = (
    FlagSpec("config", "config_file", "str", "the path to the configuration file for the proxy", env=True),
    FlagSpec("listen", "listen", "str", "the interface the service should be listening on", env=True),
    FlagSpec("client-secret", "client_secret", "str", "the client secret used to authenticate to the oauth server (access_type: confidential)", env=True),
    FlagSpec("client-id", "client_id", "str", "the client id used to authenticate to the oauth service", env=True),
    FlagSpec("discovery-url", "discovery_url", "str", "the discovery url to retrieve the openid configuration", env=True),
    FlagSpec("scope", "scopes", "list", "a variable list of scopes requested when authenticating the user"),
    FlagSpec("idle-duration", "idle_duration", "duration", "the expiration of the access token cookie, if not used within this time its removed"),
    FlagSpec("redirection-url", "redirection_url", "str", "redirection url for the oauth callback url (/oauth is added)", env=True),
    FlagSpec("revocation-url", "revocation_url", "str", "the url for the revocation endpoint to revoke refresh token", env=True),
    FlagSpec("store-url", "store_url", "str", "url for the storage subsystem, e.g redis://127.0.0.1:6379, file:///etc/tokens.file", env=True),
    FlagSpec("upstream-url", "upstream_url", "str", "the url for the upstream endpoint you wish to proxy to", env=True),
    FlagSpec("upstream-keepalives", "upstream_keepalives", "bool", "enables or disables the keepalive connections for upstream endpoint"),
    FlagSpec("upstream-timeout", "upstream_timeout", "duration", "is the maximum amount of time a dial will wait for a connect to complete"),
    FlagSpec("upstream-keepalive-timeout", "upstream_keepalive_timeout", "duration", "specifies the keep-alive period for an active network connection"),
    FlagSpec("enable-refresh-tokens", "enable_refresh_tokens", "bool", "enables the handling of the refresh tokens"),
    FlagSpec("secure-cookie", "secure_cookie", "bool", "enforces the cookie to be secure"),
    FlagSpec("cookie-domain", "cookie_domain", "str", "a domain the access cookie is available to, defaults host header"),
    FlagSpec("cookie-access-name", "cookie_access_name", "str", "the name of the cookie use to hold the access token"),
    FlagSpec("cookie-refresh-name", "cookie_refresh_name", "str", "the name of the cookie used to hold the encrypted refresh token"),
    FlagSpec("encryption-key", "encryption_key", "str", "the encryption key used to encrypt the session state"),
    FlagSpec("no-redirects", "no_redirects", "bool", "do not have back redirects when no authentication is present, 401 them"),
    FlagSpec("hostname", "hostnames", "list", "a list of hostnames the service will respond to, defaults to all"),
    FlagSpec("enable-metrics", "enable_metrics", "bool", "enable the prometheus metrics collector on /oauth/metrics"),
    FlagSpec("enable-proxy-protocol", "enable_proxy_protocol", "bool", "whether to enable proxy protocol"),
    FlagSpec("enable-forwarding", "enable_forwarding", "bool", "enables the forwarding proxy mode, signing outbound request"),
    FlagSpec("forwarding-username", "forwarding_username", "str", "the username to use when logging into the openid provider"),
    FlagSpec("forwarding-password", "forwarding_password", "str", "the password to use when logging into the openid provider"),
    FlagSpec("forwarding-domains", "forwarding_domains", "list", "a list of domains which should be signed; everything else is relayed unsigned"),
    FlagSpec("tls-cert", "tls_cert", "str", "the path to a certificate file used for TLS"),
    FlagSpec("tls-private-key", "tls_private_key", "str", "the path to the private key for TLS support"),
    FlagSpec("tls-ca-certificate", "tls_ca_certificate", "str", "the path to the ca certificate used for mutual TLS"),
    FlagSpec("tls-client-certificate", "tls_client_certificate", "str", "the path to the client certificate, used to outbound connections in reverse and forwarding proxy modes"),
    FlagSpec("skip-upstream-tls-verify", "skip_upstream_tls_verify", "bool", "whether to skip the verification of any upstream TLS"),
    FlagSpec("match-claims", "match_claims", "list", "keypair values for matching access token claims e.g. aud=myapp, iss=http://example.*"),
    FlagSpec("add-claims", "add_claims", "list", "retrieve extra claims from the token and inject into headers, e.g given_name -> X-Auth-Given-Name"),
    FlagSpec("resource", "resources", "list", "a list of resources 'uri=/admin|methods=GET|roles=role1,role2'"),
    FlagSpec("headers", "headers", "list", "add custom headers to the upstream request, key=value"),
    FlagSpec("signin-page", "sign_in_page", "str", "a custom template displayed for signin"),
    FlagSpec("forbidden-page", "forbidden_page", "str", "a custom template used for access forbidden"),
    FlagSpec("tag", "tags", "list", "keypairs passed to the templates at render, e.g title='My Page'"),
    FlagSpec("cors-origins", "cors_origins", "list", "list of origins to add to the CORS origins control (Access-Control-Allow-Origin)"),
    FlagSpec("cors-methods", "cors_methods", "list", "the method permitted in the access control (Access-Control-Allow-Methods)"),
    FlagSpec("cors-headers", "cors_headers", "list", "a set of headers to add to the CORS access control (Access-Control-Allow-Headers)"),
    FlagSpec("cors-exposed-headers", "cors_exposed_headers", "list", "set the expose cors headers access control (Access-Control-Expose-Headers)"),
    FlagSpec("cors-max-age", "cors_max_age", "duration", "the max age applied to cors headers (Access-Control-Max-Age)"),
    FlagSpec("cors-credentials", "cors_credentials", "bool", "the credentials access control header (Access-Control-Allow-Credentials)"),
    FlagSpec("enable-security-filter", "enable_security_filter", "bool", "enables the security filter handler"),
    FlagSpec("skip-token-verification", "skip_token_verification", "bool", "TESTING ONLY; bypass token verification, only expiration and roles enforced"),
    FlagSpec("json-logging", "json_logging", "bool", "switch on json logging rather than text"),
    FlagSpec("log-requests", "log_requests", "bool", "switch on logging of all incoming requests"),
    FlagSpec("verbose", "verbose", "bool", "switch on debug / verbose logging"),
)
# fmt: on


def parse_bool(value: str) -> bool:
    """Accept the boolean spellings ``--flag=<value>`` allows."""
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value '{value}'")


def _duration(value: str) -> timedelta:
    try:
        return parse_duration(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _shown_default(flag: FlagSpec, defaults: ProxyConfig) -> str | None:
    value = getattr(defaults, flag.dest, None)
    if isinstance(value, timedelta):
        return format_duration(value) if value else None
    if isinstance(value, bool):
        return "true" if value else None
    if isinstance(value, str):
        return value or None
    return None


def _help_text(flag: FlagSpec, defaults: ProxyConfig) -> str:
    text = flag.help
    shown = _shown_default(flag, defaults)
    if shown is not None:
        text += f" (default: {shown})"
    if flag.env:
        text += f" [${EnvironmentOverrides.env_name(flag.dest)}]"
    return text.replace("%", "%%")


def build_parser(defaults: ProxyConfig | None = None) -> argparse.ArgumentParser:
    """Build the argument parser; unset options are left out of the namespace."""
    defaults = defaults or new_default_config()
    parser = argparse.ArgumentParser(
        prog="gatekeeper",
        description="an oauth2 authenticating reverse proxy",
        argument_default=argparse.SUPPRESS,
        allow_abbrev=False,
    )
    for flag in FLAGS:
        kwargs: dict[str, Any] = {"dest": flag.dest, "help": _help_text(flag, defaults)}
        match flag.kind:
            case "bool":
                kwargs.update(type=parse_bool, nargs="?", const=True, metavar="BOOL")
            case "duration":
                kwargs.update(type=_duration, metavar="DURATION")
            case "list":
                kwargs.update(action="append", metavar="VALUE")
            case _:
                kwargs.update(metavar="VALUE")
        parser.add_argument(f"--{flag.name}", **kwargs)
    return parser


def collect_options(
    namespace: argparse.Namespace, env: EnvironmentOverrides
) -> tuple[CLIOptions, str | None]:
    """Merge environment and flag values, flags winning, into ``CLIOptions``.

    Returns the options together with the configuration file path, if any.
    """
    values: dict[str, Any] = env.provided()
    values.update(vars(namespace))
    config_file = values.pop("config_file", None)
    return CLIOptions(**values), config_file
