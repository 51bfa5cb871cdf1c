"""Inspect commands -- look at a document the way the generator sees it.

Provides the ``spectype inspect`` sub-command group with read-only commands:
the analysed operations (method names, tags, success responses) and the
named schemas.  Nothing is rendered or written.
"""

from __future__ import annotations

import typer

from spectype.commands._common import load_document
from spectype.exceptions import SpectypeError
from spectype.generator import analyze_document
from spectype.models import (
    ArraySchema,
    CompositeSchema,
    ObjectSchema,
    PrimitiveSchema,
    ReferenceSchema,
    SchemaNode,
)
from spectype.output import error, get_output, info
from spectype.parser import SchemaResolver


inspect_app = typer.Typer(no_args_is_help=True)


@inspect_app.command("operations")
def inspect_operations(
    source: str = typer.Argument(..., help="OpenAPI document: file path, URL, or '-'."),
) -> None:
    """List the client methods the document produces.

    One row per (path, method, tag): the private method name, the tag group
    it is exposed under, and the response the method returns.

    Example::

        spectype inspect operations openapi.yaml
        spectype --json inspect operations openapi.yaml
    """
    try:
        document = load_document(source)
        resolver = SchemaResolver.from_document(document)
        analysis = analyze_document(document, resolver)
    except SpectypeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = get_output()
    for item in analysis.diagnostics:
        output.diagnostic(item)

    headers = ["Method", "Path", "Name", "Tag", "Response", "Deprecated"]
    rows: list[list[str]] = []
    for op in analysis.operations:
        response = op.success_status or "-"
        if op.success_status:
            response = f"{op.success_status} {op.response_kind.value}"
        rows.append([
            op.method.value.upper(),
            op.path,
            op.method_name,
            op.tag,
            response,
            "Yes" if op.deprecated else "",
        ])

    output.print_table(
        headers, rows, title=f"{document.info.title} -- Operations ({len(rows)})"
    )


@inspect_app.command("schemas")
def inspect_schemas(
    source: str = typer.Argument(..., help="OpenAPI document: file path, URL, or '-'."),
) -> None:
    """List the named schemas and the shape of each.

    Example::

        spectype inspect schemas openapi.yaml
    """
    try:
        document = load_document(source)
    except SpectypeError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if not document.schemas:
        info("No schemas defined in this document.")
        return

    resolver = SchemaResolver.from_document(document)
    headers = ["Schema", "Type name", "Kind", "Properties"]
    rows: list[list[str]] = []
    for name, schema in document.schemas.items():
        props = ""
        if isinstance(schema, ObjectSchema):
            prop_names = list(schema.properties)
            props = ", ".join(prop_names[:5])
            if len(prop_names) > 5:
                props += "..."
        rows.append([name, resolver.type_name(name), describe_schema(schema), props])

    get_output().print_table(headers, rows, title=f"Schemas ({len(rows)})")


def describe_schema(schema: SchemaNode) -> str:
    """Short human-readable shape of *schema* (``enum``, ``array``, ...)."""
    if isinstance(schema, PrimitiveSchema):
        return f"enum<{schema.type}>" if schema.enum else schema.type
    if isinstance(schema, ReferenceSchema):
        return f"-> {schema.target}"
    if isinstance(schema, CompositeSchema):
        return schema.mode
    if isinstance(schema, ArraySchema):
        return "array"
    if isinstance(schema, ObjectSchema):
        return "object"
    return "untyped"
