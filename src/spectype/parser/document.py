"""Build a typed :class:`~spectype.models.Document` from a raw OpenAPI dict.

The raw dictionary comes from :func:`~spectype.parser.loader.load_spec`.  This
module walks it once and produces:

* ``schemas`` -- every entry of ``components/schemas`` as a
  :data:`~spectype.models.SchemaNode` tree, in declaration order;
* ``operations`` -- one :class:`~spectype.models.OperationInfo` per path and
  HTTP method, in document order.

Schema ``$ref`` values are **not** inlined: they become
:class:`~spectype.models.ReferenceSchema` nodes naming their target, which is
what lets cyclic schema graphs terminate later on.  References to reusable
parameters, request bodies, responses and path items are a different matter;
those are looked up by JSON pointer here, since nothing downstream cares
where they were declared.  A pointer that leads nowhere drops the affected
entry and is recorded in :attr:`~spectype.models.Document.notes`.

Parameter merging follows the OpenAPI specification: path-level parameters
provide defaults, and operation-level parameters override them when they
share the same ``name`` and ``in`` values.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from spectype.exceptions import SpecParseError
from spectype.models import (
    APIInfo,
    APIParameter,
    ArraySchema,
    CompositeSchema,
    Diagnostic,
    Document,
    HTTPMethod,
    MediaContent,
    ObjectSchema,
    OperationInfo,
    ParameterLocation,
    PrimitiveSchema,
    PropertySchema,
    ReferenceSchema,
    RequestBodyInfo,
    ResponseInfo,
    SchemaNode,
    Severity,
    UntypedSchema,
)
from spectype.parser.resolver import resolve_pointer, schema_name_from_ref

logger = logging.getLogger(__name__)

_PRIMITIVE_TYPES = frozenset({"string", "number", "integer", "boolean"})
_DATE_FORMATS = frozenset({"date", "date-time"})


def parse_document(raw_spec: dict[str, Any], openapi_version: str) -> Document:
    """Parse a decoded OpenAPI document.

    Args:
        raw_spec: The document as returned by
            :func:`~spectype.parser.loader.load_spec`.
        openapi_version: The validated version string, as returned by
            :func:`~spectype.parser.loader.validate_openapi_version`.

    Returns:
        The parsed :class:`~spectype.models.Document`.

    Example::

        raw = load_spec("petstore.yaml")
        document = parse_document(raw, validate_openapi_version(raw))
        for operation in document.operations:
            print(operation.label)
    """
    notes: list[Diagnostic] = []
    document = Document(
        openapi_version=openapi_version,
        info=_parse_info(raw_spec),
        schemas=_parse_schemas(raw_spec, notes),
        operations=_parse_operations(raw_spec, notes),
    )
    document.notes.extend(notes)
    return document


def _parse_info(raw_spec: dict[str, Any]) -> APIInfo:
    info = raw_spec.get("info") or {}
    if not isinstance(info, dict):
        return APIInfo()
    return APIInfo(
        title=str(info.get("title", "Untitled API")),
        version=str(info.get("version", "0.0.0")),
        description=info.get("description"),
    )


def _parse_schemas(raw_spec: dict[str, Any], notes: list[Diagnostic]) -> dict[str, SchemaNode]:
    components = raw_spec.get("components")
    raw_schemas = components.get("schemas") if isinstance(components, dict) else None
    if not isinstance(raw_schemas, dict):
        return {}

    schemas: dict[str, SchemaNode] = {}
    for name, raw_schema in raw_schemas.items():
        location = f"#/components/schemas/{name}"
        if not isinstance(raw_schema, dict):
            notes.append(
                _note("invalid-component", f"Schema '{name}' is not an object", location)
            )
            schemas[str(name)] = UntypedSchema(reason="not an object")
            continue
        schemas[str(name)] = parse_schema(raw_schema)
    return schemas


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


def parse_schema(raw: Any) -> SchemaNode:
    """Convert one raw JSON Schema object into a :data:`SchemaNode`.

    Precedence mirrors the type mapper: ``$ref``, ``allOf``,
    ``oneOf``/``anyOf``, array, object, primitive.  Anything left over
    becomes an :class:`~spectype.models.UntypedSchema`.

    OpenAPI 3.1 type arrays are understood: ``["string", "null"]`` is a
    nullable string, and several non-null types become a one-of composite.
    """
    if not isinstance(raw, dict):
        return UntypedSchema(reason=f"expected an object, got {type(raw).__name__}")

    nullable = raw.get("nullable") is True
    type_value = raw.get("type")
    if isinstance(type_value, list):
        if "null" in type_value:
            nullable = True
        concrete = [t for t in type_value if t != "null"]
        if len(concrete) > 1:
            return CompositeSchema(
                mode="one-of",
                members=tuple(parse_schema({**raw, "type": t}) for t in concrete),
                nullable=nullable,
            )
        type_value = concrete[0] if concrete else None

    if "$ref" in raw:
        ref = str(raw["$ref"])
        target = schema_name_from_ref(ref)
        return ReferenceSchema(target=ref if target is None else target, nullable=nullable)

    if isinstance(raw.get("allOf"), list):
        return CompositeSchema(
            mode="all-of",
            members=tuple(parse_schema(member) for member in raw["allOf"]),
            nullable=nullable,
        )
    for keyword in ("oneOf", "anyOf"):
        if isinstance(raw.get(keyword), list):
            return CompositeSchema(
                mode="one-of",
                members=tuple(parse_schema(member) for member in raw[keyword]),
                nullable=nullable,
            )

    if type_value == "array" or (type_value is None and "items" in raw):
        return ArraySchema(items=parse_schema(raw.get("items", {})), nullable=nullable)

    if type_value == "object" or (
        type_value is None and ("properties" in raw or "additionalProperties" in raw)
    ):
        return _parse_object(raw, nullable)

    enum_values = raw.get("enum")
    if isinstance(enum_values, list):
        if None in enum_values:
            nullable = True
        enum_values = [value for value in enum_values if value is not None]
        if type_value is None and enum_values:
            type_value = _infer_enum_type(enum_values[0])
    else:
        enum_values = None

    fmt = raw.get("format")
    if type_value is None and fmt in _DATE_FORMATS:
        type_value = "string"

    if type_value in _PRIMITIVE_TYPES:
        return PrimitiveSchema(
            type=type_value,
            format=str(fmt) if fmt is not None else None,
            enum=tuple(enum_values) if enum_values else None,
            nullable=nullable,
        )

    return UntypedSchema(reason=_untyped_reason(raw, type_value), nullable=nullable)


def _parse_object(raw: dict[str, Any], nullable: bool) -> ObjectSchema:
    required = raw.get("required")
    required_names = set(required) if isinstance(required, list) else set()

    raw_properties = raw.get("properties")
    if not isinstance(raw_properties, dict):
        raw_properties = {}

    properties: dict[str, PropertySchema] = {}
    for name, prop in raw_properties.items():
        prop_dict = prop if isinstance(prop, dict) else {}
        properties[str(name)] = PropertySchema(
            schema=parse_schema(prop),
            required=name in required_names,
            read_only=prop_dict.get("readOnly") is True,
            write_only=prop_dict.get("writeOnly") is True,
        )

    additional = raw.get("additionalProperties")
    if isinstance(additional, bool) or additional is None:
        additional_properties: Any = additional
    else:
        additional_properties = parse_schema(additional)

    return ObjectSchema(
        properties=properties,
        additional_properties=additional_properties,
        nullable=nullable,
    )


def _infer_enum_type(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "number"
    if isinstance(value, str):
        return "string"
    return None


def _untyped_reason(raw: dict[str, Any], type_value: Any) -> str:
    if type_value is not None:
        return f"unsupported type '{type_value}'"
    if "not" in raw:
        return "'not' schemas are not supported"
    if "const" in raw:
        return "'const' without a type"
    return ""


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def _parse_operations(raw_spec: dict[str, Any], notes: list[Diagnostic]) -> list[OperationInfo]:
    """Walk ``paths`` in document order and every HTTP method in fixed order."""
    paths = raw_spec.get("paths")
    if not isinstance(paths, dict):
        return []
    operations: list[OperationInfo] = []

    for path, path_item in paths.items():
        path_item = _dereference(path_item, raw_spec, notes, f"#/paths/{path}")
        if path_item is None:
            continue

        path_params = _dereference_list(
            path_item.get("parameters"), raw_spec, notes, f"#/paths/{path}/parameters"
        )

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue
            label = f"{method.value.upper()} {path}"

            op_params = _dereference_list(operation.get("parameters"), raw_spec, notes, label)
            merged = _merge_parameters(path_params, op_params)

            tags = operation.get("tags") or []
            operations.append(
                OperationInfo(
                    path=str(path),
                    method=method,
                    operation_id=operation.get("operationId"),
                    summary=operation.get("summary"),
                    description=operation.get("description"),
                    tags=tuple(str(tag) for tag in tags),
                    parameters=tuple(_parse_parameters(merged, label)),
                    request_body=_parse_request_body(
                        operation.get("requestBody"), raw_spec, notes, label
                    ),
                    responses=tuple(
                        _parse_responses(operation.get("responses"), raw_spec, notes, label)
                    ),
                    deprecated=operation.get("deprecated") is True,
                )
            )

    return operations


def _merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    overridden = {(param.get("name", ""), param.get("in", "")) for param in op_params}
    merged = [
        param
        for param in path_params
        if (param.get("name", ""), param.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _parse_parameters(params: list[dict[str, Any]], label: str) -> list[APIParameter]:
    parameters: list[APIParameter] = []
    for param in params:
        name = param.get("name")
        try:
            location = ParameterLocation(param.get("in", ""))
        except ValueError:
            logger.debug("%s: skipping parameter %r with location %r", label, name, param.get("in"))
            continue
        if not name:
            logger.debug("%s: skipping unnamed %s parameter", label, location.value)
            continue

        parameters.append(
            APIParameter(
                name=str(name),
                location=location,
                # Path parameters are always required
                required=location == ParameterLocation.PATH or param.get("required") is True,
                description=param.get("description"),
                deprecated=param.get("deprecated") is True,
                schema=parse_schema(param["schema"]) if "schema" in param else None,
            )
        )
    return parameters


def _parse_content(content: Any) -> tuple[MediaContent, ...]:
    if not isinstance(content, dict):
        return ()
    return tuple(
        MediaContent(
            media_type=str(media_type),
            schema=parse_schema(media["schema"])
            if isinstance(media, dict) and "schema" in media
            else None,
        )
        for media_type, media in content.items()
    )


def _parse_request_body(
    body: Any,
    raw_spec: dict[str, Any],
    notes: list[Diagnostic],
    label: str,
) -> Optional[RequestBodyInfo]:
    body = _dereference(body, raw_spec, notes, label)
    if body is None:
        return None
    return RequestBodyInfo(
        required=body.get("required") is True,
        description=body.get("description"),
        content=_parse_content(body.get("content")),
    )


def _parse_responses(
    responses: Any,
    raw_spec: dict[str, Any],
    notes: list[Diagnostic],
    label: str,
) -> list[ResponseInfo]:
    """Collect response entries, keeping their declaration order."""
    if not isinstance(responses, dict):
        return []

    result: list[ResponseInfo] = []
    for status_code, response in responses.items():
        response = _dereference(response, raw_spec, notes, label)
        if response is None:
            continue
        result.append(
            ResponseInfo(
                status_code=str(status_code),
                description=response.get("description"),
                content=_parse_content(response.get("content")),
            )
        )
    return result


# ---------------------------------------------------------------------------
# Component references
# ---------------------------------------------------------------------------


def _dereference(
    obj: Any,
    raw_spec: dict[str, Any],
    notes: list[Diagnostic],
    location: str,
) -> Optional[dict[str, Any]]:
    """Follow ``$ref`` chains on a non-schema object.

    Returns ``None`` (and records a note) when the pointer cannot be
    followed or leads to something that is not an object.
    """
    seen: set[str] = set()
    while isinstance(obj, dict) and "$ref" in obj:
        ref = str(obj["$ref"])
        if ref in seen:
            notes.append(_note("circular-reference", f"Reference cycle through '{ref}'", location))
            return None
        seen.add(ref)
        try:
            obj = resolve_pointer(ref, raw_spec)
        except SpecParseError as exc:
            notes.append(_note("unresolved-reference", exc.message, location))
            return None
    if obj is None:
        return None
    if not isinstance(obj, dict):
        notes.append(
            _note("invalid-component", f"Expected an object, got {type(obj).__name__}", location)
        )
        return None
    return obj


def _dereference_list(
    items: Any,
    raw_spec: dict[str, Any],
    notes: list[Diagnostic],
    location: str,
) -> list[dict[str, Any]]:
    if not isinstance(items, list):
        return []
    resolved = (_dereference(item, raw_spec, notes, location) for item in items)
    return [item for item in resolved if item is not None]


def _note(code: str, message: str, location: str) -> Diagnostic:
    logger.debug("%s: %s", location, message)
    return Diagnostic(severity=Severity.WARNING, code=code, message=message, location=location)
