"""Run the whole generation core over one document.

:func:`generate` wires resolver, analyzer and synthesizer together and
isolates the two artifacts from each other: if the client cannot be built
(say, two operations collapse to the same method name) the type library is
still produced, and vice versa.  Every failure and every degraded mapping is
reported on the returned :class:`~spectype.models.GenerationResult`; nothing
is raised for problems inside the document.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from spectype.exceptions import DuplicateMethodNameError, SpectypeError
from spectype.generator.analyzer import analyze_document
from spectype.generator.synthesizer import synthesize_client, synthesize_type_library
from spectype.models import (
    Artifact,
    ArtifactFailure,
    ArraySchema,
    CompositeSchema,
    Diagnostic,
    Document,
    GenerationResult,
    GeneratorConfig,
    ObjectSchema,
    SchemaNode,
    Severity,
)
from spectype.parser.resolver import SchemaResolver

logger = logging.getLogger(__name__)

DEFINITIONS_ARTIFACT = "definitions"
API_ARTIFACT = "api"


def generate(document: Document, config: Optional[GeneratorConfig] = None) -> GenerationResult:
    """Produce the declaration lists of both artifacts for *document*.

    Args:
        document: The parsed document.
        config: Generator options; defaults to :class:`GeneratorConfig()`.

    Returns:
        The artifacts that could be built, the diagnostics collected on the
        way (parser notes included, duplicates removed) and the artifacts
        that failed outright.

    Example::

        result = generate(parse_document(raw, version))
        if not result.ok:
            for failure in result.failures:
                print(failure.name, failure.message)
    """
    config = config or GeneratorConfig()
    resolver = SchemaResolver.from_document(document)

    if config.add_readonly_writeonly_modifiers is None:
        modifiers = uses_modifiers(document)
        logger.debug("readOnly/writeOnly usage detected: %s", modifiers)
    else:
        modifiers = config.add_readonly_writeonly_modifiers

    result = GenerationResult(modifiers=modifiers)
    diagnostics: list[Diagnostic] = list(document.notes)

    try:
        declarations, notes = synthesize_type_library(document, resolver, modifiers)
    except SpectypeError as exc:
        _record_failure(result, diagnostics, DEFINITIONS_ARTIFACT, exc)
    else:
        diagnostics.extend(notes)
        result.artifacts.append(
            Artifact(
                name=DEFINITIONS_ARTIFACT,
                filename=config.definitions_filename,
                declarations=declarations,
            )
        )

    analysis = analyze_document(document, resolver)
    diagnostics.extend(analysis.diagnostics)
    try:
        declarations, notes = synthesize_client(analysis.operations, resolver, config, modifiers)
    except SpectypeError as exc:
        _record_failure(result, diagnostics, API_ARTIFACT, exc)
    else:
        diagnostics.extend(notes)
        result.artifacts.append(
            Artifact(name=API_ARTIFACT, filename=config.api_filename, declarations=declarations)
        )

    result.diagnostics.extend(_unique(diagnostics))
    logger.debug(
        "Generated %d artifact(s), %d failure(s), %d diagnostic(s)",
        len(result.artifacts),
        len(result.failures),
        len(result.diagnostics),
    )
    return result


def _record_failure(
    result: GenerationResult,
    diagnostics: list[Diagnostic],
    name: str,
    exc: SpectypeError,
) -> None:
    logger.info("Artifact %s failed: %s", name, exc)
    location = exc.location or ""
    result.failures.append(ArtifactFailure(name=name, message=exc.message, location=location))
    code = "duplicate-method-name" if isinstance(exc, DuplicateMethodNameError) else "generation-failed"
    diagnostics.append(
        Diagnostic(severity=Severity.ERROR, code=code, message=exc.message, location=location)
    )


def _unique(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    seen: set[tuple[str, str, str]] = set()
    unique: list[Diagnostic] = []
    for diagnostic in diagnostics:
        key = (diagnostic.code, diagnostic.message, diagnostic.location)
        if key not in seen:
            seen.add(key)
            unique.append(diagnostic)
    return unique


# ---------------------------------------------------------------------------
# readOnly / writeOnly detection
# ---------------------------------------------------------------------------


def uses_modifiers(document: Document) -> bool:
    """True if any schema, request body or response uses readOnly/writeOnly.

    References are not followed: every named schema is inspected on its own
    anyway.
    """
    if any(_has_modifier(schema) for schema in document.schemas.values()):
        return True

    for operation in document.operations:
        if operation.request_body is not None and any(
            _has_modifier(media.schema_) for media in operation.request_body.content
        ):
            return True
        for response in operation.responses:
            if any(_has_modifier(media.schema_) for media in response.content):
                return True
    return False


def _has_modifier(node: Optional[SchemaNode]) -> bool:
    if isinstance(node, ObjectSchema):
        for prop in node.properties.values():
            if prop.read_only or prop.write_only or _has_modifier(prop.schema_):
                return True
        additional = node.additional_properties
        return not isinstance(additional, bool) and _has_modifier(additional)
    if isinstance(node, ArraySchema):
        return _has_modifier(node.items)
    if isinstance(node, CompositeSchema):
        return any(_has_modifier(member) for member in node.members)
    return False
