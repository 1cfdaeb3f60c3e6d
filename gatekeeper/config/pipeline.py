"""Resolution of the runtime configuration: defaults, file, overrides, validation."""

import logging
from pathlib import Path

from gatekeeper.config.defaults import new_default_config
from gatekeeper.config.loader import load_config_file
from gatekeeper.config.overlay import CLIOptions, apply_cli_options
from gatekeeper.config.types import ProxyConfig
from gatekeeper.config.validator import validate_config

logger = logging.getLogger(__name__)


def resolve_config(
    options: CLIOptions | None = None,
    config_file: str | Path | None = None,
) -> ProxyConfig:
    """Build the validated snapshot the proxy serves traffic with.

    Precedence is command line over file over defaults. Any ConfigError
    raised here is fatal to startup.
    """
    config = new_default_config()
    if config_file:
        logger.debug("loading configuration file %s", config_file)
        config = load_config_file(config_file, config)
    if options is not None:
        config = apply_cli_options(config, options)
    return validate_config(config)
