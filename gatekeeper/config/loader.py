"""Configuration file loading (JSON or YAML)."""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, get_origin

import yaml
from pydantic import ValidationError

from gatekeeper.config.errors import ConfigDecodeError, ConfigReadError
from gatekeeper.config.types import ProxyConfig, file_key

JSON_EXTENSION = ".json"

logger = logging.getLogger(__name__)


def _empty_collections() -> dict[str, Any]:
    """Map every list and map key, by field name and file key, to its empty value."""
    empties: dict[str, Any] = {}
    for name, field in ProxyConfig.model_fields.items():
        origin = get_origin(field.annotation)
        if origin is tuple:
            empty: Any = []
        elif origin is Mapping:
            empty = {}
        else:
            continue
        empties[name] = empties[file_key(name)] = empty
    return empties


# A list or map key written without a value reads as empty.
EMPTY_COLLECTIONS = _empty_collections()


def _decode(path: Path, content: str) -> Any:
    """Decode as JSON for ``.json`` files and as YAML for everything else."""
    if path.suffix.lower() == JSON_EXTENSION:
        return json.loads(content)
    return yaml.safe_load(content)


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}"


def load_config_file(filename: str | Path, config: ProxyConfig) -> ProxyConfig:
    """Overlay the keys present in ``filename`` onto ``config``.

    Unknown keys are ignored and absent keys keep their current values.
    """
    path = Path(filename)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigReadError(
            f"unable to read the configuration file {path}: {exc.strerror or exc}"
        ) from exc
    except UnicodeDecodeError as exc:
        raise ConfigDecodeError(
            f"the configuration file {path} is not valid utf-8: {exc}"
        ) from exc

    try:
        document = _decode(path, content)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigDecodeError(
            f"unable to decode the configuration file {path}: {exc}"
        ) from exc

    if document is None:
        logger.debug("configuration file %s is empty", path)
        return config
    if not isinstance(document, dict):
        raise ConfigDecodeError(
            f"the configuration file {path} must contain a mapping of options"
        )

    document = {
        key: EMPTY_COLLECTIONS.get(key) if value is None else value
        for key, value in document.items()
    }

    try:
        overlay = ProxyConfig.model_validate(document)
    except ValidationError as exc:
        raise ConfigDecodeError(
            f"invalid value in the configuration file {path}, {_describe(exc)}"
        ) from exc

    updates = {name: getattr(overlay, name) for name in overlay.model_fields_set}
    logger.debug("configuration file %s sets %s", path, sorted(updates))
    return config.model_copy(update=updates)
