"""Decoding of ``key=value`` option lists and map merging."""

from collections.abc import Iterable

from gatekeeper.config.errors import KeyPairError


def decode_key_pairs(entries: Iterable[str]) -> dict[str, str]:
    """Turn ``["a=1", "b=2"]`` into ``{"a": "1", "b": "2"}``."""
    pairs: dict[str, str] = {}
    for entry in entries:
        key, sep, value = entry.partition("=")
        if not sep or not key:
            raise KeyPairError(f"invalid key-pair '{entry}', should be key=value")
        pairs[key] = value
    return pairs


def merge_maps(dest: dict[str, str], source: dict[str, str]) -> dict[str, str]:
    """Copy every item of ``source`` into ``dest``; source wins on collision."""
    for key, value in source.items():
        dest[key] = value
    return dest
