"""Follow named schema references and turn raw names into safe identifiers.

Schemas in a :class:`~spectype.models.Document` refer to each other through
:class:`~spectype.models.ReferenceSchema` nodes that carry a *name*, never an
inlined expansion.  That is what keeps self-referential graphs finite: the
mapper emits the name and stops.  :class:`SchemaResolver` is the one place
that looks a name up in the schema library, and it only ever follows chains
of pure aliases (``A -> B -> C``), so it terminates too.

Besides resolution this module owns naming:

* :func:`sanitize_identifier` -- map any string to an identifier that is
  valid in both TypeScript and Python.
* :func:`camel_case` / :func:`pascal_case` -- the projections used for
  method names and tag names.
* :func:`remove_tag_from_method_name` -- strip tag text out of a method name.
* :func:`resolve_pointer` -- RFC 6901 lookup for non-schema ``$ref`` values.
"""

from __future__ import annotations

import keyword
import logging
import re
from typing import Any, Mapping, Optional

from spectype.exceptions import (
    CircularReferenceError,
    SpecParseError,
    UnresolvedReferenceError,
)
from spectype.models import Document, PrimitiveSchema, ReferenceSchema, SchemaNode

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"

# Reserved in TypeScript (including strict mode) and therefore unusable as
# type or method names in generated code.  Python keywords are added below.
_TS_RESERVED = frozenset(
    {
        "break", "case", "catch", "class", "const", "continue", "debugger",
        "default", "delete", "do", "else", "enum", "export", "extends",
        "false", "finally", "for", "function", "if", "implements", "import",
        "in", "instanceof", "interface", "let", "new", "null", "package",
        "private", "protected", "public", "return", "static", "super",
        "switch", "this", "throw", "true", "try", "typeof", "var", "void",
        "while", "with", "yield",
    }
)

# Names the type library declares itself, plus the DateTime target.  Schemas
# with these names are suffixed like any other collision.
LIBRARY_NAMES = frozenset(
    {
        "readonlyP", "writeonlyP", "Id", "Primitive", "Without",
        "RemoveReadonly", "RemoveWriteonly", "InputView", "OutputView", "Date",
    }
)

_INVALID_CHARS = re.compile(r"[^A-Za-z0-9_]")
_SEPARATOR_RUN = re.compile(r"\W+(.)", re.ASCII)


def is_reserved_word(name: str) -> bool:
    return name in _TS_RESERVED or keyword.iskeyword(name)


def sanitize_identifier(raw: str) -> str:
    """Map *raw* to an identifier safe in TypeScript and Python.

    Rules applied in order:

    1. Every character outside ``[A-Za-z0-9_]`` becomes ``_``.
    2. A leading digit gets a ``_`` prefix.
    3. Reserved words get a trailing ``_``.
    4. Empty input becomes ``_``.

    Example::

        >>> sanitize_identifier("pet.v2-item")
        'pet_v2_item'
        >>> sanitize_identifier("2fa")
        '_2fa'
        >>> sanitize_identifier("class")
        'class_'
    """
    result = _INVALID_CHARS.sub("_", raw)
    if not result:
        return "_"
    if result[0].isdigit():
        result = "_" + result
    if is_reserved_word(result):
        result += "_"
    return result


def camel_case(raw: str) -> str:
    """Collapse separator runs, upper-casing the character after each one.

    The first character is lower-cased; the rest of the casing is kept, so
    ``"listPets"`` stays ``"listPets"`` and ``"list pets"`` becomes
    ``"listPets"``.  A trailing separator run is left alone.
    """
    camel = _SEPARATOR_RUN.sub(lambda match: match.group(1).upper(), raw)
    return camel[:1].lower() + camel[1:]


def pascal_case(raw: str) -> str:
    camel = camel_case(raw)
    return camel[:1].upper() + camel[1:]


def method_name_for(operation_id: str) -> str:
    return sanitize_identifier(camel_case(operation_id))


def tag_name_for(raw_tag: str) -> str:
    return sanitize_identifier(pascal_case(raw_tag))


def remove_tag_from_method_name(tag: str, method_name: str) -> str:
    """Remove every case-insensitive occurrence of *tag* (and one ``_`` after it).

    This is a plain substring removal, so a tag that appears mid-word is cut
    out of the word: tag ``User`` turns ``getSuperUserName`` into
    ``getSuperName``.
    """
    if not tag:
        return method_name
    return re.sub(re.escape(tag) + "_?", "", method_name, flags=re.IGNORECASE)


def schema_name_from_ref(ref: str) -> Optional[str]:
    """Return the schema name of a ``#/components/schemas/...`` ref, else ``None``."""
    if not ref.startswith(SCHEMA_REF_PREFIX):
        return None
    return _unescape_pointer_segment(ref[len(SCHEMA_REF_PREFIX):])


def _unescape_pointer_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def resolve_pointer(ref: str, root: Mapping[str, Any]) -> Any:
    """Resolve an internal JSON pointer (``#/a/b/0``) against *root*.

    Handles RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``).

    Raises:
        SpecParseError: If the reference is external, or a segment of the
            pointer does not exist in the document.
    """
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = _unescape_pointer_segment(raw_segment)
        if isinstance(current, Mapping):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into "
                f"{type(current).__name__}"
            )
    return current


def _assign_type_names(names: list[str]) -> dict[str, str]:
    """Give every schema name a unique identifier, in document order.

    Collisions after sanitisation get a numeric suffix: the first ``pet-item``
    keeps ``pet_item`` and a later ``pet.item`` becomes ``pet_item_2``.  Names
    in :data:`LIBRARY_NAMES` count as already taken.
    """
    assigned: dict[str, str] = {}
    taken: set[str] = set(LIBRARY_NAMES)
    for name in names:
        base = sanitize_identifier(name)
        candidate = base
        counter = 2
        while candidate in taken:
            candidate = f"{base}_{counter}"
            counter += 1
        if candidate != base:
            logger.debug("Schema name %r collides after sanitising; using %r", name, candidate)
        taken.add(candidate)
        assigned[name] = candidate
    return assigned


class SchemaResolver:
    """Lookup service over a document's schema library.

    Args:
        schemas: Named schemas, in document declaration order.

    Example::

        resolver = SchemaResolver.from_document(document)
        concrete = resolver.resolve(ReferenceSchema(target="Pet"))
        resolver.type_name("pet-item")   # -> "pet_item"
    """

    def __init__(self, schemas: Mapping[str, SchemaNode]):
        self._schemas: dict[str, SchemaNode] = dict(schemas)
        self._type_names = _assign_type_names(list(self._schemas))

    @classmethod
    def from_document(cls, document: Document) -> SchemaResolver:
        return cls(document.schemas)

    @property
    def schemas(self) -> dict[str, SchemaNode]:
        return dict(self._schemas)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def lookup(self, name: str, location: Optional[str] = None) -> SchemaNode:
        """Return the schema registered under *name*, without following it."""
        try:
            return self._schemas[name]
        except KeyError:
            raise UnresolvedReferenceError(
                f"Reference to unknown schema '{name}'",
                schema_name=name,
                location=location,
            ) from None

    def resolve(self, node: SchemaNode, location: Optional[str] = None) -> SchemaNode:
        """Follow *node* through any chain of references to a concrete schema.

        Non-reference nodes are returned unchanged.

        Raises:
            UnresolvedReferenceError: A target is missing from the library.
            CircularReferenceError: The chain loops back on itself before
                reaching a concrete schema.
        """
        chain: list[str] = []
        current = node
        while isinstance(current, ReferenceSchema):
            if current.target in chain:
                raise CircularReferenceError(chain + [current.target], location=location)
            chain.append(current.target)
            current = self.lookup(current.target, location=location)
        return current

    def is_enumeration(self, node: SchemaNode) -> bool:
        """True iff *node* resolves to a primitive carrying a literal-value set."""
        resolved = self.resolve(node)
        return isinstance(resolved, PrimitiveSchema) and bool(resolved.enum)

    def type_name(self, raw: str) -> str:
        """The identifier declared for schema *raw* in the type library."""
        name = self._type_names.get(raw)
        if name is None:
            return sanitize_identifier(raw)
        return name
