"""Extract normalised per-operation facts from a parsed document.

:func:`analyze_document` visits every path in document order, every HTTP
method in the fixed order ``get, post, put, patch, delete, head, options,
trace``, and every tag of the operation (``["default"]`` when it declares
none), producing one :class:`~spectype.models.AnalyzedOperation` per
combination.  Each analysis depends on nothing but its own operation, so the
order of the output is the only thing the walk contributes.

Two behaviours are kept on purpose even though they look like defects:

* the *first* declared response is the success response, whatever its status
  code (a lone ``404`` entry still types the result);
* an operation without an ``operationId`` is named from its last path
  segment plus the method, with no guard against two paths sharing a tail.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from spectype.exceptions import (
    CircularReferenceError,
    MalformedOperationError,
    SchemaResolutionError,
)
from spectype.models import (
    AnalysisResult,
    AnalyzedOperation,
    APIParameter,
    Diagnostic,
    Document,
    HTTPMethod,
    MappingContext,
    MediaContent,
    OperationInfo,
    ParameterLocation,
    ResponseKind,
    SchemaNode,
    Severity,
    ViewFilter,
)
from spectype.generator.type_mapper import map_schema
from spectype.parser.resolver import SchemaResolver, method_name_for, tag_name_for

logger = logging.getLogger(__name__)

DEFAULT_TAG = "default"
JSON_MEDIA_TYPE = "application/json"
METHODS_WITH_DATA = frozenset({HTTPMethod.POST, HTTPMethod.PUT, HTTPMethod.PATCH})

_INPUT = MappingContext(view=ViewFilter.INPUT)
_OUTPUT = MappingContext(view=ViewFilter.OUTPUT)


def analyze_document(document: Document, resolver: SchemaResolver) -> AnalysisResult:
    """Analyse every (path, method, tag) combination of *document*.

    Operations without any response entry are skipped with an ``error``
    diagnostic; reference problems met while harvesting type names degrade
    to diagnostics as well.  Neither stops the walk.
    """
    operations: list[AnalyzedOperation] = []
    diagnostics: list[Diagnostic] = []

    for operation in document.operations:
        tags = operation.tags or (DEFAULT_TAG,)
        try:
            for raw_tag in tags:
                analysis, notes = analyze_operation(operation, resolver, raw_tag)
                operations.append(analysis)
                diagnostics.extend(notes)
        except MalformedOperationError as exc:
            logger.info("Skipping %s: %s", operation.label, exc.message)
            diagnostics.append(
                Diagnostic(
                    severity=Severity.ERROR,
                    code="malformed-operation",
                    message=exc.message,
                    location=operation.label,
                )
            )

    return AnalysisResult(operations=tuple(operations), diagnostics=tuple(diagnostics))


def synthesize_operation_id(path: str, method: HTTPMethod) -> str:
    """``/pets/{petId}`` + GET -> ``{petId}_get``."""
    return path.split("/")[-1] + "_" + method.value


def analyze_operation(
    operation: OperationInfo,
    resolver: SchemaResolver,
    raw_tag: str = DEFAULT_TAG,
) -> tuple[AnalyzedOperation, tuple[Diagnostic, ...]]:
    """Analyse *operation* as seen under *raw_tag*.

    Returns:
        The analysis and the diagnostics collected while harvesting the
        referenced type names.

    Raises:
        MalformedOperationError: The operation declares no responses.
    """
    if not operation.responses:
        raise MalformedOperationError(
            f"Operation {operation.label} declares no responses",
            location=operation.label,
        )

    operation_id = operation.operation_id
    synthesized = not operation_id
    if synthesized:
        operation_id = synthesize_operation_id(operation.path, operation.method)

    parameters = tuple(
        param for param in operation.parameters if param.location != ParameterLocation.COOKIE
    )

    sends_data = operation.method in METHODS_WITH_DATA
    body_schema: Optional[SchemaNode] = None
    if sends_data and operation.request_body is not None:
        body_media = pick_json_media(operation.request_body.content)
        if body_media is not None:
            body_schema = body_media.schema_

    success = operation.responses[0]
    kind, media_type, success_schema = classify_response(success.content)

    references, notes = _harvest_references(
        operation.label,
        resolver,
        params=[(param.name, param.schema_) for param in parameters],
        body=body_schema,
        response=success_schema,
    )

    analysis = AnalyzedOperation(
        method=operation.method,
        path=operation.path,
        operation_id=operation_id,
        operation_id_synthesized=synthesized,
        method_name=method_name_for(operation_id),
        tag=tag_name_for(raw_tag),
        raw_tag=raw_tag,
        parameters=parameters,
        path_params=_located(parameters, ParameterLocation.PATH),
        header_params=_located(parameters, ParameterLocation.HEADER),
        query_params=_located(parameters, ParameterLocation.QUERY),
        sends_data=sends_data,
        request_body=body_schema,
        success_status=success.status_code,
        success_media_type=media_type,
        success_schema=success_schema,
        response_kind=kind,
        referenced_types=references,
        summary=operation.summary,
        description=operation.description,
        deprecated=operation.deprecated,
    )
    return analysis, notes


def pick_json_media(content: Sequence[MediaContent]) -> Optional[MediaContent]:
    """``application/json`` if declared, else the first ``*json`` media type."""
    for media in content:
        if media.media_type == JSON_MEDIA_TYPE:
            return media
    for media in content:
        if "json" in media.media_type.lower():
            return media
    return None


def classify_response(
    content: Sequence[MediaContent],
) -> tuple[ResponseKind, Optional[str], Optional[SchemaNode]]:
    """Classify a response's content as json, text, opaque or void.

    Returns:
        The kind, the chosen media type and, for JSON, its schema.
    """
    if not content:
        return ResponseKind.VOID, None, None

    json_media = pick_json_media(content)
    if json_media is not None:
        return ResponseKind.JSON, json_media.media_type, json_media.schema_

    first = content[0].media_type
    if first.lower().startswith("text/"):
        return ResponseKind.TEXT, first, None
    return ResponseKind.OPAQUE, first, None


def _located(
    parameters: tuple[APIParameter, ...], location: ParameterLocation
) -> tuple[APIParameter, ...]:
    return tuple(param for param in parameters if param.location == location)


def _harvest_references(
    label: str,
    resolver: SchemaResolver,
    params: list[tuple[str, Optional[SchemaNode]]],
    body: Optional[SchemaNode],
    response: Optional[SchemaNode],
) -> tuple[frozenset[str], tuple[Diagnostic, ...]]:
    """Run every schema of the operation through the mapper for its names."""
    jobs: list[tuple[SchemaNode, MappingContext, str]] = [
        (schema, MappingContext(), f"{label} parameter '{name}'")
        for name, schema in params
        if schema is not None
    ]
    if body is not None:
        jobs.append((body, _INPUT, f"{label} request body"))
    if response is not None:
        jobs.append((response, _OUTPUT, f"{label} response"))

    references: set[str] = set()
    notes: list[Diagnostic] = []
    for schema, context, location in jobs:
        try:
            mapped = map_schema(schema, resolver, context, location)
        except SchemaResolutionError as exc:
            notes.append(resolution_diagnostic(exc, location))
            continue
        references |= mapped.references
        notes.extend(mapped.notes)

    return frozenset(references), tuple(notes)


def resolution_diagnostic(exc: SchemaResolutionError, location: str) -> Diagnostic:
    if isinstance(exc, CircularReferenceError):
        code = "circular-reference"
    else:
        code = "unresolved-reference"
    return Diagnostic(
        severity=Severity.ERROR,
        code=code,
        message=exc.message,
        location=exc.location or location,
    )
