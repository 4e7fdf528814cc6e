"""Configuration loading with precedence resolution.

A :class:`~specbind.models.BinderConfig` is assembled from four layers,
highest precedence first:

1. Explicit keyword overrides passed to :func:`resolve_config`.
2. Environment variables: ``SPECBIND_BASE_URL``, ``SPECBIND_TIMEOUT`` and
   ``SPECBIND_HEADERS`` (``"Name: value;Other: value"``).
3. A JSON or YAML config file: the *path* argument, else
   ``SPECBIND_CONFIG``, else ``./specbind.json`` when present.
4. Model defaults.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import ValidationError

from specbind.exceptions import ConfigError
from specbind.models import BinderConfig

_PROJECT_CONFIG_FILENAME = "specbind.json"

ENV_CONFIG = "SPECBIND_CONFIG"
ENV_BASE_URL = "SPECBIND_BASE_URL"
ENV_TIMEOUT = "SPECBIND_TIMEOUT"
ENV_HEADERS = "SPECBIND_HEADERS"


# --- File layer ---


def load_config(path: Union[str, Path]) -> dict[str, Any]:
    """Read a config file and return its raw mapping.

    ``.yaml`` / ``.yml`` files are parsed with PyYAML, everything else as
    JSON.

    Raises:
        ConfigError: If the file is missing, unparsable, or not a mapping.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config at {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config at {path} must be a mapping, got {type(data).__name__}")
    return data


def _config_file(path: Optional[Union[str, Path]]) -> Optional[Path]:
    if path is not None:
        return Path(path)
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        return Path(env_path)
    project = Path.cwd() / _PROJECT_CONFIG_FILENAME
    return project if project.is_file() else None


# --- Environment layer ---


def parse_headers(value: str) -> list[tuple[str, str]]:
    """Parse ``"Name: value;Other: value"`` into ordered pairs.

    Raises:
        ConfigError: If an entry has no ``:`` or an empty name.
    """
    headers: list[tuple[str, str]] = []
    for entry in value.split(";"):
        if not entry.strip():
            continue
        name, sep, header_value = entry.partition(":")
        if not sep or not name.strip():
            raise ConfigError(f"Invalid header entry {entry!r}; expected 'Name: value'")
        headers.append((name.strip(), header_value.strip()))
    return headers


def _env_layer() -> dict[str, Any]:
    layer: dict[str, Any] = {}
    base_url = os.environ.get(ENV_BASE_URL)
    if base_url:
        layer["base_url"] = base_url
    timeout = os.environ.get(ENV_TIMEOUT)
    if timeout:
        try:
            layer["timeout"] = float(timeout)
        except ValueError as exc:
            raise ConfigError(f"{ENV_TIMEOUT} must be a number, got {timeout!r}") from exc
    headers = os.environ.get(ENV_HEADERS)
    if headers:
        layer["default_headers"] = parse_headers(headers)
    return layer


# --- Precedence resolution ---


def resolve_config(path: Optional[Union[str, Path]] = None, **overrides: Any) -> BinderConfig:
    """Resolve the effective configuration.

    Args:
        path: Config file to read instead of ``SPECBIND_CONFIG`` /
            ``./specbind.json``.
        **overrides: Field values that win over every other layer.
            ``None`` values are ignored.

    Raises:
        ConfigError: On unreadable files, bad environment values, or
            values that fail validation.
    """
    data: dict[str, Any] = {}
    config_file = _config_file(path)
    if config_file is not None:
        data.update(load_config(config_file))
    data.update(_env_layer())
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return BinderConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
