"""Assemble the declaration lists of the type library and the client.

Both functions return plain, ordered lists of declaration records; turning
them into text is the renderer's job (:mod:`spectype.render.typescript`).

:func:`synthesize_type_library` emits, in order:

1. the ``InputView``/``OutputView`` projection utilities, when enabled;
2. one declaration per named schema in document order -- an enum for string
   enumerations, an alias of a literal set for other enumerations, an alias of
   the mapped type for everything else.

:func:`synthesize_client` emits, in order:

1. the type-only import of every referenced library name, and its re-export;
2. one callable per distinct (path, method);
3. one tag group per tag, in first-seen order;
4. the shared ``pick`` helper, when any callable projects headers or query
   parameters out of ``params``.

A schema whose mapping hits a reference error is declared as ``any`` so
that client imports of its name still compile.  Method name
collisions are not recoverable and raise
:class:`~spectype.exceptions.DuplicateMethodNameError`.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional, Sequence

from spectype.exceptions import DuplicateMethodNameError, SchemaResolutionError
from spectype.generator.analyzer import resolution_diagnostic
from spectype.generator.type_mapper import ANY, map_schema
from spectype.models import (
    AnalyzedOperation,
    ArrayType,
    CallableDeclaration,
    Declaration,
    Diagnostic,
    Document,
    EnumDeclaration,
    EnumMember,
    ExportDeclaration,
    GeneratorConfig,
    HTTPMethod,
    ImportDeclaration,
    LiteralSetType,
    MappingContext,
    NamedType,
    NullableType,
    ObjectType,
    PickHelperDeclaration,
    PrimitiveSchema,
    PrimitiveType,
    ProductType,
    PropertyType,
    ResponseKind,
    SchemaNode,
    SumType,
    TagGroupDeclaration,
    TypeAliasDeclaration,
    TypeNode,
    ViewFilter,
    ViewUtilitiesDeclaration,
)
from spectype.parser.resolver import (
    SchemaResolver,
    remove_tag_from_method_name,
    sanitize_identifier,
)

logger = logging.getLogger(__name__)

DEFINITIONS_MODULE = "./definitions"
VIEW_NAMES = {"input": "InputView", "output": "OutputView"}

_PLACEHOLDER = re.compile(r"\{([^{}/]+)\}")


# ---------------------------------------------------------------------------
# Path templates
# ---------------------------------------------------------------------------


def path_placeholders(template: str) -> list[str]:
    """Placeholder names of *template* in order of first appearance."""
    names: list[str] = []
    for match in _PLACEHOLDER.finditer(template):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names


def expand_path_template(template: str, values: Mapping[str, Any]) -> str:
    """Substitute ``{name}`` placeholders with ``str(values[name])``.

    This is what the generated client does at call time.  Placeholders with
    no value are left untouched.

    Example::

        >>> expand_path_template("/users/{id}/posts/{postId}", {"id": "5", "postId": "9"})
        '/users/5/posts/9'
    """

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values:
            return match.group(0)
        return str(values[name])

    return _PLACEHOLDER.sub(_substitute, template)


# ---------------------------------------------------------------------------
# Type library
# ---------------------------------------------------------------------------


def synthesize_type_library(
    document: Document,
    resolver: SchemaResolver,
    modifiers: bool,
) -> tuple[list[Declaration], list[Diagnostic]]:
    """Build the type library declarations for every schema of *document*.

    Args:
        document: The parsed document.
        resolver: Resolver over ``document.schemas``.
        modifiers: Emit the projection utilities and mark readOnly/writeOnly
            properties so the utilities can strip them.

    Returns:
        The declarations and the diagnostics raised while mapping.
    """
    declarations: list[Declaration] = []
    diagnostics: list[Diagnostic] = []
    if modifiers:
        declarations.append(ViewUtilitiesDeclaration())

    context = MappingContext(mark_modifiers=modifiers)
    for raw_name, schema in document.schemas.items():
        name = resolver.type_name(raw_name)
        location = f"#/components/schemas/{raw_name}"

        if isinstance(schema, PrimitiveSchema) and schema.enum:
            declarations.append(_enumeration(name, schema.enum, location))
            continue

        try:
            mapped = map_schema(schema, resolver, context, location)
        except SchemaResolutionError as exc:
            # Still declared, so client imports of the name keep compiling
            logger.info("Declaring schema %s as any: %s", raw_name, exc)
            diagnostics.append(resolution_diagnostic(exc, location))
            declarations.append(TypeAliasDeclaration(name=name, type=ANY, source=location))
            continue

        diagnostics.extend(mapped.notes)
        declarations.append(TypeAliasDeclaration(name=name, type=mapped.type, source=location))

    return declarations, diagnostics


def _enumeration(name: str, values: tuple[Any, ...], location: str) -> Declaration:
    if all(isinstance(value, str) for value in values):
        return EnumDeclaration(name=name, members=enum_members(values), source=location)
    return TypeAliasDeclaration(name=name, type=LiteralSetType(values=values), source=location)


def enum_members(values: Sequence[str]) -> tuple[EnumMember, ...]:
    """Upper-cased, sanitised member names; repeats get a numeric suffix."""
    members: list[EnumMember] = []
    taken: set[str] = set()
    for value in values:
        base = sanitize_identifier(value.upper())
        member = base
        counter = 2
        while member in taken:
            member = f"{base}_{counter}"
            counter += 1
        taken.add(member)
        members.append(EnumMember(name=member, value=value))
    return tuple(members)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def synthesize_client(
    operations: Sequence[AnalyzedOperation],
    resolver: SchemaResolver,
    config: GeneratorConfig,
    modifiers: bool,
) -> tuple[list[Declaration], list[Diagnostic]]:
    """Build the client declarations from analysed operations.

    Args:
        operations: Output of
            :func:`~spectype.generator.analyzer.analyze_document`, in order.
        resolver: Resolver over the document's schemas.
        config: Generator options (tag stripping, type namespace).
        modifiers: Type bodies and results through the projection views.

    Raises:
        DuplicateMethodNameError: Two distinct operations share a method name,
            or two members of a tag group share an exposed name.
    """
    prefix = f"{config.type_namespace}." if config.type_namespace else ""
    diagnostics: list[Diagnostic] = []

    callables: dict[tuple[str, HTTPMethod], CallableDeclaration] = {}
    owners: dict[str, AnalyzedOperation] = {}
    groups: dict[str, dict[str, str]] = {}
    group_owners: dict[tuple[str, str], AnalyzedOperation] = {}
    references: set[str] = set()
    views: set[str] = set()

    for operation in operations:
        key = (operation.path, operation.method)
        if key not in callables:
            owner = owners.get(operation.method_name)
            if owner is not None:
                raise DuplicateMethodNameError(operation.method_name, owner.label, operation.label)
            owners[operation.method_name] = operation

            declaration, notes = _callable(operation, resolver, prefix, modifiers)
            callables[key] = declaration
            diagnostics.extend(notes)
            references |= operation.referenced_types
            for type_node in (declaration.data_type, declaration.return_type):
                views |= _views_used(type_node)

        exposed = exposed_name(operation, config.remove_tag_from_operation_id)
        members = groups.setdefault(operation.tag, {})
        previous = group_owners.get((operation.tag, exposed))
        if previous is not None and previous.method_name != operation.method_name:
            raise DuplicateMethodNameError(exposed, previous.label, operation.label, tag=operation.tag)
        group_owners[(operation.tag, exposed)] = operation
        members[exposed] = operation.method_name

    declarations: list[Declaration] = []
    type_names = sorted(references)
    if type_names or views:
        if prefix:
            declarations.append(
                ImportDeclaration(module=DEFINITIONS_MODULE, namespace=config.type_namespace)
            )
        else:
            declarations.append(
                ImportDeclaration(module=DEFINITIONS_MODULE, names=tuple(type_names + sorted(views)))
            )
    if type_names:
        declarations.append(ExportDeclaration(names=tuple(type_names), module=DEFINITIONS_MODULE))

    declarations.extend(callables.values())
    declarations.extend(
        TagGroupDeclaration(name=tag, members=members) for tag, members in groups.items()
    )
    if any(c.header_params or c.query_params for c in callables.values()):
        declarations.append(PickHelperDeclaration())

    return declarations, diagnostics


def exposed_name(operation: AnalyzedOperation, remove_tag: bool) -> str:
    """The key under which *operation* is exposed on its tag group."""
    if not remove_tag:
        return operation.method_name
    stripped = remove_tag_from_method_name(operation.tag, operation.method_name)
    if not stripped:
        return operation.method_name
    return sanitize_identifier(stripped)


def _callable(
    operation: AnalyzedOperation,
    resolver: SchemaResolver,
    prefix: str,
    modifiers: bool,
) -> tuple[CallableDeclaration, list[Diagnostic]]:
    notes: list[Diagnostic] = []

    def _typed(schema: Optional[SchemaNode], context: MappingContext, location: str) -> TypeNode:
        if schema is None:
            return PrimitiveType(primitive="unknown")
        try:
            mapped = map_schema(schema, resolver, context, location)
        except SchemaResolutionError as exc:
            notes.append(resolution_diagnostic(exc, location))
            return ANY
        notes.extend(mapped.notes)
        return mapped.type

    params_type = None
    if operation.parameters:
        params_context = MappingContext(prefix=prefix)
        params_type = ObjectType(
            properties={
                param.name: PropertyType(
                    type=_typed(
                        param.schema_, params_context, f"{operation.label} parameter '{param.name}'"
                    ),
                    optional=not param.required,
                )
                for param in operation.parameters
            }
        )

    data_type = None
    if operation.sends_data and operation.request_body is not None:
        data_type = _typed(
            operation.request_body,
            MappingContext(prefix=prefix, view=ViewFilter.INPUT, wrap_views=modifiers),
            f"{operation.label} request body",
        )

    if operation.response_kind == ResponseKind.JSON:
        if operation.success_schema is None:
            return_type: TypeNode = ANY
        else:
            return_type = _typed(
                operation.success_schema,
                MappingContext(prefix=prefix, view=ViewFilter.OUTPUT, wrap_views=modifiers),
                f"{operation.label} response",
            )
    elif operation.response_kind == ResponseKind.TEXT:
        return_type = PrimitiveType(primitive="string")
    elif operation.response_kind == ResponseKind.OPAQUE:
        return_type = PrimitiveType(primitive="unknown")
    else:
        return_type = PrimitiveType(primitive="void")

    declared = {param.name for param in operation.path_params}
    path_params = tuple(name for name in path_placeholders(operation.path) if name in declared)
    for param in operation.path_params:
        if param.name not in path_params:
            logger.debug("%s: path parameter %r has no placeholder", operation.label, param.name)

    declaration = CallableDeclaration(
        name=operation.method_name,
        operation_id=operation.operation_id,
        http_method=operation.method,
        path=operation.path,
        path_params=path_params,
        header_params=tuple(param.name for param in operation.header_params),
        query_params=tuple(param.name for param in operation.query_params),
        params_type=params_type,
        data_type=data_type,
        sends_data=operation.sends_data,
        return_type=return_type,
        response_kind=operation.response_kind,
        summary=operation.summary,
        deprecated=operation.deprecated,
    )
    return declaration, notes


def _views_used(type_node: Optional[TypeNode]) -> set[str]:
    """Names of the projection utilities appearing anywhere in *type_node*."""
    if type_node is None:
        return set()
    if isinstance(type_node, NamedType):
        return {VIEW_NAMES[type_node.view]} if type_node.view else set()
    if isinstance(type_node, ArrayType):
        return _views_used(type_node.items)
    if isinstance(type_node, NullableType):
        return _views_used(type_node.inner)
    if isinstance(type_node, (SumType, ProductType)):
        found: set[str] = set()
        for member in type_node.members:
            found |= _views_used(member)
        return found
    if isinstance(type_node, ObjectType):
        found = _views_used(type_node.index_signature)
        for prop in type_node.properties.values():
            found |= _views_used(prop.type)
        return found
    return set()
