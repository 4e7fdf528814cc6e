"""Load API documents from a URL, local file, stdin, or an in-memory string.

This module is the thin I/O seam in front of the document adapter: it fetches
raw text, hands it to :mod:`json` or PyYAML, and checks that the result
declares a version the adapter understands (Swagger 2.0 or OpenAPI 3.x).

Public functions:

* :func:`load_spec` -- Load and parse a document from any supported source.
* :func:`parse_spec_text` -- Parse a document already held in memory.
* :func:`detect_spec_version` -- Return the declared ``swagger``/``openapi``
  version string, rejecting anything else.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specbind.exceptions import SpecParseError

logger = logging.getLogger(__name__)


def load_spec(source: str) -> dict[str, Any]:
    """Load an API document from URL, file path, or stdin (``'-'``).

    Args:
        source: A URL (http/https), file path, or ``'-'`` for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def parse_spec_text(content: str, hint: str = "") -> dict[str, Any]:
    """Parse document text that is already in memory.

    Args:
        content: JSON or YAML text.
        hint: ``"json"``, ``"yaml"`` or empty to auto-detect.

    Raises:
        SpecParseError: If the text is empty or not a JSON/YAML object.
    """
    if not content.strip():
        raise SpecParseError("Spec text is empty")
    return _parse_content(content, hint=hint)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return _parse_content(content, hint="")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document over HTTP, using the response content type as a format hint."""
    logger.debug("Fetching spec from %s", url)
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, falling back to YAML.

    JSON is tried first unless the hint says YAML: valid JSON is valid YAML,
    but the JSON parser is stricter and gives better error positions.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            json_error = exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        msg = "Failed to parse spec as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise SpecParseError(msg) from exc

    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {got})")
    return result


def detect_spec_version(spec: dict[str, Any]) -> str:
    """Return the document's declared version string.

    Swagger ``2.0`` and OpenAPI ``3.x`` are accepted.

    Raises:
        SpecParseError: If no version is declared or it is unsupported.
    """
    if "swagger" in spec:
        version = str(spec["swagger"])
        if version.startswith("2."):
            return version
        raise SpecParseError(f"Unsupported Swagger version: {version}")

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError(
            "Missing 'openapi' or 'swagger' field. Is this an API description document?"
        )

    version = str(version)
    if version.startswith("3."):
        return version

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version}. "
        "Only Swagger 2.0 and OpenAPI 3.x are supported."
    )
