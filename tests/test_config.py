"""Tests for specbind.config -- file loading, env parsing, precedence."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from specbind.config import load_config, parse_headers, resolve_config
from specbind.exceptions import ConfigError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_json(path: Path, data: Any) -> Path:
    """Write a dict as JSON to *path*, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every test in an empty directory without SPECBIND_* variables."""
    for var in ("SPECBIND_CONFIG", "SPECBIND_BASE_URL", "SPECBIND_TIMEOUT", "SPECBIND_HEADERS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


class TestLoadConfig:
    def test_json(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "c.json", {"timeout": 5})
        assert load_config(path) == {"timeout": 5}

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("base_url: http://localhost\nverify_ssl: false\n", encoding="utf-8")
        assert load_config(path) == {"base_url": "http://localhost", "verify_ssl": False}

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "c.json"
        path.write_text("{bad", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid config"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "c.json", [1, 2])
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)


# ---------------------------------------------------------------------------
# parse_headers
# ---------------------------------------------------------------------------


class TestParseHeaders:
    def test_ordered_pairs(self) -> None:
        assert parse_headers("X-Api-Key: abc; Accept: application/json") == [
            ("X-Api-Key", "abc"),
            ("Accept", "application/json"),
        ]

    def test_value_may_contain_colon(self) -> None:
        assert parse_headers("Referer: http://x") == [("Referer", "http://x")]

    def test_blank_entries_ignored(self) -> None:
        assert parse_headers(";A: 1;;") == [("A", "1")]

    def test_invalid_entry(self) -> None:
        with pytest.raises(ConfigError, match="Invalid header"):
            parse_headers("no-colon-here")


# ---------------------------------------------------------------------------
# resolve_config precedence
# ---------------------------------------------------------------------------


class TestResolveConfig:
    def test_defaults(self) -> None:
        config = resolve_config()
        assert config.base_url is None
        assert config.default_headers == []
        assert config.timeout == 30.0
        assert config.lowercase_json_body is True

    def test_project_file(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "specbind.json", {"base_url": "http://project"})
        assert resolve_config().base_url == "http://project"

    def test_env_config_path(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write_json(tmp_path / "conf" / "other.json", {"timeout": 3})
        monkeypatch.setenv("SPECBIND_CONFIG", str(path))
        assert resolve_config().timeout == 3

    def test_env_beats_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        _write_json(tmp_path / "specbind.json", {"base_url": "http://file", "timeout": 1})
        monkeypatch.setenv("SPECBIND_BASE_URL", "http://env")
        monkeypatch.setenv("SPECBIND_HEADERS", "X-Key: k")
        config = resolve_config()
        assert config.base_url == "http://env"
        assert config.timeout == 1
        assert config.default_headers == [("X-Key", "k")]

    def test_overrides_beat_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECBIND_BASE_URL", "http://env")
        monkeypatch.setenv("SPECBIND_TIMEOUT", "9")
        config = resolve_config(base_url="http://override", timeout=None)
        assert config.base_url == "http://override"
        assert config.timeout == 9.0

    def test_explicit_path(self, tmp_path: Path) -> None:
        path = tmp_path / "explicit.yaml"
        path.write_text("lowercase_json_body: false\n", encoding="utf-8")
        assert resolve_config(path).lowercase_json_body is False

    def test_bad_timeout_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPECBIND_TIMEOUT", "soon")
        with pytest.raises(ConfigError, match="SPECBIND_TIMEOUT"):
            resolve_config()

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigError, match="Invalid configuration"):
            resolve_config(timeout="never")
