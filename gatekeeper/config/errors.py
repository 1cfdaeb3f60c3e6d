"""Errors raised while resolving and validating the proxy configuration."""


class ConfigError(Exception):
    """Base class for every configuration failure; all of them abort startup."""


class ConfigReadError(ConfigError):
    """The configuration file is missing or unreadable."""


class ConfigDecodeError(ConfigError):
    """The configuration file content could not be decoded."""


class ConfigParseError(ConfigError):
    """A command-line mini-language value could not be parsed."""


class KeyPairError(ConfigParseError):
    """An entry in a key=value list has no separator."""


class ResourceError(ConfigParseError):
    """A resource descriptor is malformed or the resource is invalid."""


class ConfigValidationError(ConfigError):
    """A cross-field invariant does not hold."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
