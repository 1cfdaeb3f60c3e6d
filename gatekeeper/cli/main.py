"""Proxy entry point: resolve, validate and hand over the configuration."""

import logging
import sys
from collections.abc import Callable, Sequence

from gatekeeper.cli.flags import build_parser, collect_options
from gatekeeper.config.errors import ConfigError
from gatekeeper.config.pipeline import resolve_config
from gatekeeper.config.types import ProxyConfig
from gatekeeper.core.logging_setup import configure_logging
from gatekeeper.core.settings import EnvironmentOverrides

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1

logger = logging.getLogger(__name__)


def main(
    argv: Sequence[str] | None = None,
    start: Callable[[ProxyConfig], None] | None = None,
) -> int:
    """Resolve the configuration and pass the frozen snapshot to ``start``."""
    parser = build_parser()
    namespace = parser.parse_args(argv)
    try:
        options, config_file = collect_options(namespace, EnvironmentOverrides())
        config = resolve_config(options, config_file)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    configure_logging(config)
    logger.info(
        "configuration resolved",
        extra={"extra_fields": {"config": config.redacted()}},
    )
    logger.debug("listening on %s, upstream %s", config.listen, config.upstream_url)
    if start is not None:
        start(config)
    return EXIT_OK


def run() -> None:
    """Console script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
