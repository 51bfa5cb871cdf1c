"""Map schema nodes onto target type trees.

:func:`map_schema` is a pure recursive function from a
:data:`~spectype.models.SchemaNode` to a :data:`~spectype.models.TypeNode`.
It never looks inside a referenced schema beyond asking the resolver whether
the reference is valid and whether it names an enumeration, so a schema that
refers to itself maps to a finite tree: the recursion stops at the name.

Rules are tried in this order:

1. reference -> :class:`~spectype.models.NamedType` (optionally wrapped in
   the projection of the active view, never for enumerations);
2. ``all-of`` -> :class:`~spectype.models.ProductType`;
3. ``one-of`` -> :class:`~spectype.models.SumType` (both degrade to the lone
   member when there is exactly one);
4. array -> :class:`~spectype.models.ArrayType`;
5. object -> :class:`~spectype.models.ObjectType`, dropping properties that
   belong only to the other side of the active view;
6. boolean / integer / number -> literal set or primitive;
7. ``date`` / ``date-time`` strings -> the builtin ``DateTime`` name;
8. string -> literal set or primitive;
9. anything else -> ``any``, with an ``unsupported-schema-shape`` note.

Rules 6 to 9 honour the ``nullable`` flag.  Each call returns the named
types it emitted alongside the tree; callers merge those sets themselves.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from spectype.models import (
    ArraySchema,
    ArrayType,
    CompositeSchema,
    Diagnostic,
    LiteralSetType,
    MappedType,
    MappingContext,
    NamedType,
    NullableType,
    ObjectSchema,
    ObjectType,
    PrimitiveSchema,
    PrimitiveType,
    ProductType,
    PropertyType,
    ReferenceSchema,
    SchemaNode,
    Severity,
    SumType,
    TypeNode,
    UntypedSchema,
    ViewFilter,
)
from spectype.parser.resolver import SchemaResolver

logger = logging.getLogger(__name__)

DATE_TIME = NamedType(name="DateTime", builtin=True)
ANY = PrimitiveType(primitive="any")

_DATE_FORMATS = frozenset({"date", "date-time"})


def map_schema(
    schema: SchemaNode,
    resolver: SchemaResolver,
    context: Optional[MappingContext] = None,
    location: str = "",
) -> MappedType:
    """Map *schema* under *context*.

    Args:
        schema: The node to map.
        resolver: Resolver over the document's schema library.
        context: Prefix, view filter and projection switches.  Defaults to
            a plain :class:`~spectype.models.MappingContext`.
        location: Document location of *schema*, used in notes and errors.

    Returns:
        A :class:`~spectype.models.MappedType` holding the type tree, the
        library names it references and any notes raised on the way.

    Raises:
        UnresolvedReferenceError: A reference names a missing schema.
        CircularReferenceError: A reference chain never reaches a schema.

    Example::

        mapped = map_schema(ReferenceSchema(target="Pet"), resolver,
                            MappingContext(view=ViewFilter.INPUT, wrap_views=True))
        mapped.type        # NamedType(name="Pet", view="input")
        mapped.references  # frozenset({"Pet"})
    """
    return _map(schema, resolver, context or MappingContext(), location)


def _map(
    node: SchemaNode,
    resolver: SchemaResolver,
    ctx: MappingContext,
    location: str,
) -> MappedType:
    if isinstance(node, ReferenceSchema):
        return _map_reference(node, resolver, ctx, location)
    if isinstance(node, CompositeSchema):
        return _map_composite(node, resolver, ctx, location)
    if isinstance(node, ArraySchema):
        items = _map(node.items, resolver, ctx, f"{location}/items")
        return MappedType(
            type=ArrayType(items=items.type),
            references=items.references,
            notes=items.notes,
        )
    if isinstance(node, ObjectSchema):
        return _map_object(node, resolver, ctx, location)
    if isinstance(node, PrimitiveSchema):
        return MappedType(type=_map_primitive(node))
    return _map_untyped(node, location)


def _map_reference(
    node: ReferenceSchema,
    resolver: SchemaResolver,
    ctx: MappingContext,
    location: str,
) -> MappedType:
    target = resolver.resolve(node, location=location or None)
    name = resolver.type_name(node.target)

    view = None
    is_enum = isinstance(target, PrimitiveSchema) and bool(target.enum)
    # Projections only make sense on object-like types
    if ctx.wrap_views and ctx.view != ViewFilter.NONE and not is_enum:
        view = ctx.view.value

    return MappedType(
        type=NamedType(name=name, prefix=ctx.prefix, view=view),
        references=frozenset({name}),
    )


def _map_composite(
    node: CompositeSchema,
    resolver: SchemaResolver,
    ctx: MappingContext,
    location: str,
) -> MappedType:
    keyword = "allOf" if node.mode == "all-of" else "oneOf"
    members = [
        _map(member, resolver, ctx, f"{location}/{keyword}/{index}")
        for index, member in enumerate(node.members)
    ]
    if not members:
        return _map_untyped(UntypedSchema(reason=f"empty {keyword}"), location)
    if len(members) == 1:
        return members[0]

    types = tuple(member.type for member in members)
    combined: TypeNode = ProductType(members=types) if node.mode == "all-of" else SumType(members=types)
    return _merged(combined, members)


def _map_object(
    node: ObjectSchema,
    resolver: SchemaResolver,
    ctx: MappingContext,
    location: str,
) -> MappedType:
    parts: list[MappedType] = []
    properties: dict[str, PropertyType] = {}

    for name, prop in node.properties.items():
        if ctx.view == ViewFilter.INPUT and prop.read_only:
            continue
        if ctx.view == ViewFilter.OUTPUT and prop.write_only:
            continue

        mapped = _map(prop.schema_, resolver, ctx, f"{location}/properties/{name}")
        parts.append(mapped)
        properties[name] = PropertyType(
            type=mapped.type,
            optional=not prop.required,
            readonly=prop.read_only,
            writeonly=prop.write_only,
            marked=ctx.mark_modifiers and (prop.read_only or prop.write_only),
        )

    index_signature = None
    additional = node.additional_properties
    if additional is not None and not isinstance(additional, bool):
        mapped = _map(additional, resolver, ctx, f"{location}/additionalProperties")
        parts.append(mapped)
        index_signature = mapped.type

    return _merged(ObjectType(properties=properties, index_signature=index_signature), parts)


def _map_primitive(node: PrimitiveSchema) -> TypeNode:
    if node.type in ("boolean", "integer", "number"):
        base: TypeNode = (
            LiteralSetType(values=node.enum) if node.enum else PrimitiveType(primitive=node.type)
        )
    elif node.format in _DATE_FORMATS:
        base = DATE_TIME
    elif node.enum:
        # A single value stays a one-value literal set, never a sum
        base = LiteralSetType(values=node.enum)
    else:
        base = PrimitiveType(primitive="string")
    return nullable(base, node.nullable)


def _map_untyped(node: UntypedSchema, location: str) -> MappedType:
    if not node.reason:
        logger.debug("%s: schema without a type maps to any", location or "<inline>")
        return MappedType(type=nullable(ANY, node.nullable))

    message = f"Unsupported schema shape ({node.reason}); mapped to any"
    logger.info("%s: %s", location or "<inline>", message)
    note = Diagnostic(
        severity=Severity.WARNING,
        code="unsupported-schema-shape",
        message=message,
        location=location,
    )
    return MappedType(type=nullable(ANY, node.nullable), notes=(note,))


def nullable(type_node: TypeNode, flag: bool) -> TypeNode:
    return NullableType(inner=type_node) if flag else type_node


def _merged(type_node: TypeNode, parts: Iterable[MappedType]) -> MappedType:
    references: set[str] = set()
    notes: list[Diagnostic] = []
    for part in parts:
        references |= part.references
        notes.extend(part.notes)
    return MappedType(type=type_node, references=frozenset(references), notes=tuple(notes))
