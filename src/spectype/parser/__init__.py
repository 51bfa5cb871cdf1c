"""OpenAPI document parser -- load a document and build the typed schema graph.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML, local file,
remote URL or stdin) into a :class:`~spectype.models.Document` whose schemas
are :data:`~spectype.models.SchemaNode` trees, and provides the
:class:`~spectype.parser.resolver.SchemaResolver` the generator uses to follow
references between them.

Typical usage::

    from spectype.parser import load_spec, validate_openapi_version, parse_document

    raw = load_spec("openapi.yaml")
    version = validate_openapi_version(raw)
    document = parse_document(raw, version)

Sub-modules:

* :mod:`~spectype.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~spectype.parser.resolver` -- Named-reference resolution, enumeration
  detection and identifier sanitisation.
* :mod:`~spectype.parser.document` -- Walks the raw document and produces
  the :class:`~spectype.models.Document`.
"""

from spectype.parser.document import parse_document, parse_schema
from spectype.parser.loader import load_spec, validate_openapi_version
from spectype.parser.resolver import SchemaResolver, sanitize_identifier

__all__ = [
    "load_spec",
    "validate_openapi_version",
    "parse_document",
    "parse_schema",
    "SchemaResolver",
    "sanitize_identifier",
]
