"""Tests for configuration file loading."""

import json
from datetime import timedelta
from pathlib import Path

import pytest

from gatekeeper.config.defaults import new_default_config
from gatekeeper.config.errors import ConfigDecodeError, ConfigReadError
from gatekeeper.config.loader import load_config_file

YAML_CONFIG = """
listen: 0.0.0.0:8443
upstream-url: http://backend:8080
client-id: proxy
scopes:
  - openid
  - email
match-claims:
  aud: proxy
  iss: https://idp.example.com/.*
cors-origins:
  - https://app.example.com
cors-max-age: 10m
upstream-timeout: 30s
resources:
  - uri: /admin/*
    methods: [GET, POST]
    roles: [admin]
  - uri: /health
    white-listed: true
some-unknown-key: ignored
"""


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content)
    return path


class TestLoadYaml:
    """Tests for YAML decoding."""

    def test_overlays_present_keys(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", YAML_CONFIG)
        config = load_config_file(path, new_default_config())
        assert config.listen == "0.0.0.0:8443"
        assert config.upstream_url == "http://backend:8080"
        assert config.scopes == ("openid", "email")
        assert config.match_claims == {
            "aud": "proxy",
            "iss": "https://idp.example.com/.*",
        }
        assert config.cors_origins == ("https://app.example.com",)
        assert config.cors_max_age == timedelta(minutes=10)
        assert config.upstream_timeout == timedelta(seconds=30)

    def test_parses_resources(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", YAML_CONFIG)
        config = load_config_file(path, new_default_config())
        admin, health = config.resources
        assert admin.uri == "/admin/*"
        assert admin.methods == ("GET", "POST")
        assert admin.roles == ("admin",)
        assert health.white_listed is True

    def test_absent_keys_keep_prior_values(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", "client-id: proxy\n")
        config = load_config_file(path, new_default_config())
        assert config.listen == "127.0.0.1:3000"
        assert config.cookie_access_name == "kc-access"
        assert config.secure_cookie is True

    def test_empty_file_changes_nothing(self, tmp_path: Path) -> None:
        base = new_default_config()
        path = _write(tmp_path, "config.yml", "")
        assert load_config_file(path, base) == base

    def test_input_snapshot_is_untouched(self, tmp_path: Path) -> None:
        base = new_default_config()
        path = _write(tmp_path, "config.yml", YAML_CONFIG)
        load_config_file(path, base)
        assert base.listen == "127.0.0.1:3000"
        assert base.match_claims == {}

    def test_numeric_values_become_strings(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yaml", "tags:\n  version: 2\n")
        config = load_config_file(path, new_default_config())
        assert config.tags == {"version": "2"}

    def test_keys_without_values_are_empty(self, tmp_path: Path) -> None:
        base = new_default_config().model_copy(update={"scopes": ("openid",)})
        content = "match-claims:\nscopes:\nresources:\nhostnames:\n"
        path = _write(tmp_path, "config.yml", content)
        config = load_config_file(path, base)
        assert config.match_claims == {}
        assert config.scopes == ()
        assert config.resources == ()
        assert config.hostnames == ()

    def test_integer_durations_are_nanoseconds(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", "upstream-timeout: 10000000000\n")
        config = load_config_file(path, new_default_config())
        assert config.upstream_timeout == timedelta(seconds=10)

    def test_fractional_durations_are_rejected(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", "cors-max-age: 1.5\n")
        with pytest.raises(ConfigDecodeError, match="cors-max-age"):
            load_config_file(path, new_default_config())

    def test_loaded_maps_are_read_only(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", YAML_CONFIG)
        config = load_config_file(path, new_default_config())
        with pytest.raises(TypeError):
            config.match_claims["aud"] = "(unclosed"  # type: ignore[index]

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", "listen: [unclosed\n")
        with pytest.raises(ConfigDecodeError, match="config.yml"):
            load_config_file(path, new_default_config())

    def test_non_mapping_document(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", "- listen\n- upstream\n")
        with pytest.raises(ConfigDecodeError, match="mapping"):
            load_config_file(path, new_default_config())

    def test_wrong_type_names_the_key(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.yml", "upstream-timeout: forever\n")
        with pytest.raises(ConfigDecodeError, match="upstream-timeout"):
            load_config_file(path, new_default_config())


class TestLoadJson:
    """Tests for the extension based decoder selection."""

    def test_json_extension_uses_json(self, tmp_path: Path) -> None:
        content = json.dumps({"listen": ":80", "add-claims": ["given_name"]})
        path = _write(tmp_path, "config.json", content)
        config = load_config_file(path, new_default_config())
        assert config.listen == ":80"
        assert config.add_claims == ("given_name",)

    def test_extension_match_ignores_case(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "CONFIG.JSON", '{"verbose": true}')
        assert load_config_file(path, new_default_config()).verbose is True

    def test_json_content_in_yaml_file_still_loads(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.conf", '{"listen": ":81", "verbose": true}')
        config = load_config_file(path, new_default_config())
        assert config.listen == ":81"
        assert config.verbose is True

    def test_yaml_syntax_in_json_file_fails(self, tmp_path: Path) -> None:
        path = _write(tmp_path, "config.json", "listen: ':80'\n")
        with pytest.raises(ConfigDecodeError, match="config.json"):
            load_config_file(path, new_default_config())


class TestReadErrors:
    """Tests for unreadable files."""

    def test_missing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "missing.yml"
        with pytest.raises(ConfigReadError, match="missing.yml"):
            load_config_file(path, new_default_config())

    def test_directory_is_not_readable(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigReadError):
            load_config_file(tmp_path, new_default_config())
