"""Read raw OpenAPI documents from a URL, a local file, or stdin.

This is the only place where spectype touches the outside world on the input
side.  Whatever the source, the text is decoded as JSON or YAML and handed
back as a plain dictionary; nothing here knows about schemas or operations.

The two public functions are:

* :func:`load_spec` -- Read and decode a document from any supported source.
* :func:`validate_openapi_version` -- Return the ``openapi`` version string,
  rejecting Swagger 2.x documents and non-3.x versions.

The decoded dictionary is then passed to
:func:`~spectype.parser.document.parse_document`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from spectype.exceptions import SpecParseError

logger = logging.getLogger(__name__)

_YAML_SUFFIXES = (".yaml", ".yml")


def load_spec(source: str, timeout: float = 30.0) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, a file path, or stdin (``'-'``).

    Args:
        source: An ``http(s)://`` URL, a file path, or ``'-'`` for stdin.
        timeout: Seconds to wait for a remote document.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If the source cannot be read or decoded.
    """
    if source == "-":
        content, hint = _read_stdin(), ""
    elif source.startswith(("http://", "https://")):
        content, hint = _fetch_url(source, timeout)
    else:
        content, hint = _read_file(source)

    logger.debug("Read %d characters from %s (hint=%r)", len(content), source, hint)
    return _parse_content(content, hint=hint)


def _read_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return content


def _fetch_url(url: str, timeout: float) -> tuple[str, str]:
    """Download a document and derive a format hint from its content type."""
    try:
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "").lower()
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"
    else:
        hint = "yaml" if url.lower().endswith(_YAML_SUFFIXES) else ""
    return response.text, hint


def _read_file(path: str) -> tuple[str, str]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SpecParseError(f"Failed to read document {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Document is empty: {path}")

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return content, "json"
    if suffix in _YAML_SUFFIXES:
        return content, "yaml"
    return content, ""


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Decode *content* as JSON or YAML.

    JSON is attempted first unless the hint says YAML; since JSON is a subset
    of YAML the fallback still accepts anything JSON would have.  A ``json``
    hint disables the fallback so that broken JSON files report a JSON error.

    Raises:
        SpecParseError: If the content decodes to something other than a
            mapping, or cannot be decoded at all.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError(
        "Failed to parse document as JSON or YAML\n  " + "\n  ".join(errors)
    )


def _require_mapping(value: Any) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    got = "empty document" if value is None else type(value).__name__
    raise SpecParseError(f"Document must be a JSON/YAML object (got {got})")


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Return the document's ``openapi`` version string.

    Any 3.x version is accepted.

    Raises:
        SpecParseError: For Swagger 2.x documents, a missing ``openapi``
            field, or a major version other than 3.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x documents can be generated from. "
            "Consider converting with https://converter.swagger.io"
        )

    version = spec.get("openapi")
    if version is None:
        raise SpecParseError("Missing 'openapi' field. Is this an OpenAPI 3.x document?")

    version_str = str(version)
    if not version_str.startswith("3."):
        raise SpecParseError(
            f"Unsupported OpenAPI version: {version_str}. "
            "Only OpenAPI 3.0.x and 3.1.x are supported."
        )
    if not version_str.startswith(("3.0.", "3.1.")):
        logger.warning("OpenAPI %s is newer than 3.1; generating anyway", version_str)
    return version_str
