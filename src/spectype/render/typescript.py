"""Render declaration lists as TypeScript source.

Type trees are turned into text by :func:`render_type`, which the Jinja2
templates use as the ``ts_type`` filter; the file layout itself lives in
``render/templates/``:

* ``definitions.ts.j2`` -- the type library (projection utilities, enums,
  aliases);
* ``api.ts.j2`` -- the axios-backed client class with one private method per
  callable and one getter per tag group.

Rendering is deterministic: the same declarations always produce the same
bytes, so regenerated files only change when the document does.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from spectype.models import (
    Artifact,
    ArrayType,
    CallableDeclaration,
    Declaration,
    EnumDeclaration,
    ExportDeclaration,
    HTTPMethod,
    ImportDeclaration,
    LiteralSetType,
    NamedType,
    NullableType,
    ObjectType,
    PickHelperDeclaration,
    PrimitiveType,
    ProductType,
    PropertyType,
    SumType,
    TagGroupDeclaration,
    TypeAliasDeclaration,
    TypeNode,
    ViewUtilitiesDeclaration,
)


TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``render/templates/``)."""

HEADER = "/* tslint:disable */\n/* eslint-disable */\n"

INDENT = "  "

_BUILTIN_NAMES = {"DateTime": "Date"}
_VIEW_NAMES = {"input": "InputView", "output": "OutputView"}
_PRIMITIVE_NAMES = {"integer": "number"}
_REGEX_SPECIAL = re.compile(r"[\\^$.*+?()[\]{}|/]")

# axios shorthands; anything else goes through axios.request()
_AXIOS_METHODS = frozenset(
    {
        HTTPMethod.GET,
        HTTPMethod.POST,
        HTTPMethod.PUT,
        HTTPMethod.PATCH,
        HTTPMethod.DELETE,
        HTTPMethod.HEAD,
        HTTPMethod.OPTIONS,
    }
)


# ---------------------------------------------------------------------------
# Types
# ---------------------------------------------------------------------------


def quote(value: str) -> str:
    """Single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def render_literal(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return quote(str(value))


def render_type(node: TypeNode, indent: int = 0) -> str:
    """Render *node* as a TypeScript type expression.

    Args:
        node: The type tree.
        indent: Indentation level of the line the expression starts on;
            object types spread over several lines are indented from there.
    """
    if isinstance(node, NamedType):
        name = _BUILTIN_NAMES.get(node.name, node.name) if node.builtin else node.name
        qualified = f"{node.prefix}{name}" if not node.builtin else name
        if node.view:
            return f"{node.prefix}{_VIEW_NAMES[node.view]}<{qualified}>"
        return qualified
    if isinstance(node, PrimitiveType):
        return _PRIMITIVE_NAMES.get(node.primitive, node.primitive)
    if isinstance(node, LiteralSetType):
        return " | ".join(render_literal(value) for value in node.values)
    if isinstance(node, NullableType):
        return f"{render_type(node.inner, indent)} | null"
    if isinstance(node, ArrayType):
        return f"{_grouped(node.items, indent)}[]"
    if isinstance(node, SumType):
        return " | ".join(render_type(member, indent) for member in node.members)
    if isinstance(node, ProductType):
        return " & ".join(_grouped(member, indent) for member in node.members)
    if isinstance(node, ObjectType):
        return _render_object(node, indent)
    raise TypeError(f"Cannot render {type(node).__name__}")


def _grouped(node: TypeNode, indent: int) -> str:
    """Parenthesise *node* where an ``&`` or ``[]`` would bind to it wrongly."""
    rendered = render_type(node, indent)
    if isinstance(node, (SumType, ProductType, NullableType)):
        return f"({rendered})"
    if isinstance(node, LiteralSetType) and len(node.values) > 1:
        return f"({rendered})"
    return rendered


def _render_object(node: ObjectType, indent: int) -> str:
    if not node.properties and node.index_signature is None:
        return "{}"

    inner = INDENT * (indent + 1)
    lines = ["{"]
    for name, prop in node.properties.items():
        lines.append(f"{inner}{_render_property(name, prop, indent + 1)};")
    if node.index_signature is not None:
        lines.append(f"{inner}[key: string]: {render_type(node.index_signature, indent + 1)};")
    lines.append(INDENT * indent + "}")
    return "\n".join(lines)


def _render_property(name: str, prop: PropertyType, indent: int) -> str:
    key = f"{'readonly ' if prop.readonly else ''}{quote(name)}{'?' if prop.optional else ''}"
    rendered = render_type(prop.type, indent)
    if prop.marked and (prop.readonly or prop.writeonly):
        markers = []
        if prop.readonly:
            markers.append("readonlyP")
        if prop.writeonly:
            markers.append("writeonlyP")
        rendered = f"({rendered}) & " + " & ".join(markers)
    return f"{key}: {rendered}"


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------


def _create_jinja_env() -> Environment:
    """Jinja2 environment over ``render/templates/``.

    Autoescaping is off for ``.ts.j2`` templates, which produce TypeScript
    rather than HTML; undefined variables fail loudly.
    """
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("ts.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["ts_type"] = render_type
    env.filters["ts_literal"] = render_literal
    env.filters["quote"] = quote
    return env


def render_artifact(artifact: Artifact, client_name: str = "ApiClient") -> str:
    """Render a generated artifact to TypeScript text."""
    if artifact.name == "api":
        return render_api(artifact.declarations, client_name)
    return render_definitions(artifact.declarations)


def render_definitions(declarations: list[Declaration]) -> str:
    context = {
        "header": HEADER,
        "view_utilities": any(isinstance(d, ViewUtilitiesDeclaration) for d in declarations),
        "declarations": [
            d for d in declarations if isinstance(d, (EnumDeclaration, TypeAliasDeclaration))
        ],
    }
    return _create_jinja_env().get_template("definitions.ts.j2").render(**context)


def render_api(declarations: list[Declaration], client_name: str = "ApiClient") -> str:
    context = {
        "header": HEADER,
        "client_name": client_name,
        "imports": [_render_import(d) for d in declarations if isinstance(d, ImportDeclaration)],
        "exports": [_render_export(d) for d in declarations if isinstance(d, ExportDeclaration)],
        "callables": [
            _callable_context(d) for d in declarations if isinstance(d, CallableDeclaration)
        ],
        "groups": [d for d in declarations if isinstance(d, TagGroupDeclaration)],
        "pick": any(isinstance(d, PickHelperDeclaration) for d in declarations),
    }
    return _create_jinja_env().get_template("api.ts.j2").render(**context)


def _render_import(declaration: ImportDeclaration) -> str:
    if declaration.namespace:
        return f"import type * as {declaration.namespace} from {quote(declaration.module)};"
    return f"import type {{ {', '.join(declaration.names)} }} from {quote(declaration.module)};"


def _render_export(declaration: ExportDeclaration) -> str:
    names = ", ".join(declaration.names)
    if declaration.module:
        return f"export type {{ {names} }} from {quote(declaration.module)};"
    return f"export type {{ {names} }};"


def _callable_context(declaration: CallableDeclaration) -> dict[str, Any]:
    """Pre-render the pieces of one client method for the template."""
    parameters = []
    if declaration.params_type is not None:
        parameters.append(f"params: {render_type(declaration.params_type, 1)}")
    if declaration.data_type is not None:
        parameters.append(f"data: {render_type(declaration.data_type, 1)}")
    parameters.append("options?: AxiosRequestConfig")

    url = quote(declaration.path) + "".join(
        f".replace({_placeholder_pattern(name)}, String(params[{quote(name)}]))"
        for name in declaration.path_params
    )

    projections = []
    if declaration.header_params:
        projections.append(f"headers: {_pick(declaration.header_params)}")
    if declaration.query_params:
        projections.append(f"params: {_pick(declaration.query_params)}")
    if projections:
        config = f"Object.assign({{}}, {{ {', '.join(projections)} }}, options)"
    else:
        config = "options"

    return_type = render_type(declaration.return_type, 2)
    if declaration.http_method in _AXIOS_METHODS:
        target = f"this.axios.{declaration.http_method.value}<{return_type}>"
        arguments = [url]
        if declaration.sends_data:
            arguments.append("data" if declaration.data_type is not None else "{}")
        arguments.append(config)
    else:
        target = f"this.axios.request<{return_type}>"
        method = quote(declaration.http_method.value.upper())
        arguments = [f"{{ ...{config}, method: {method}, url: {url} }}"]

    return {
        "name": declaration.name,
        "doc": _doc_lines(declaration),
        "signature": ", ".join(parameters),
        "target": target,
        "arguments": arguments,
    }


def _placeholder_pattern(name: str) -> str:
    """Global regex literal matching every ``{name}`` in a path template."""
    escaped = _REGEX_SPECIAL.sub(lambda match: "\\" + match.group(0), "{" + name + "}")
    return f"/{escaped}/g"


def _pick(names: tuple[str, ...]) -> str:
    return f"pick(params, {', '.join(quote(name) for name in names)})"


def _doc_lines(declaration: CallableDeclaration) -> list[str]:
    lines: list[str] = []
    if declaration.summary:
        lines.extend(line.strip() for line in declaration.summary.replace("*/", "* /").splitlines())
    lines.append(f"{declaration.http_method.value.upper()} {declaration.path}")
    if declaration.deprecated:
        lines.append("@deprecated")
    return [line for line in lines if line]


def render_all(artifacts: list[Artifact], client_name: str = "ApiClient") -> dict[str, str]:
    """Render every artifact, keyed by its file name."""
    return {artifact.filename: render_artifact(artifact, client_name) for artifact in artifacts}
