"""Helpers shared by the CLI sub-commands."""

from __future__ import annotations

from spectype.models import Document
from spectype.output import debug
from spectype.parser import load_spec, parse_document, validate_openapi_version


def load_document(source: str) -> Document:
    """Load, version-check and parse the document at *source*.

    Raises:
        SpecParseError: If the document cannot be read or is not OpenAPI 3.x.
    """
    debug(f"Loading document from {source}")
    raw = load_spec(source)
    version = validate_openapi_version(raw)
    document = parse_document(raw, version)
    debug(
        f"Parsed OpenAPI {version}: {len(document.schemas)} schema(s), "
        f"{len(document.operations)} operation(s)"
    )
    return document
