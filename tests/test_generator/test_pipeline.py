"""Tests for spectype.generator.pipeline."""

from __future__ import annotations

from spectype.generator import generate
from spectype.generator.pipeline import uses_modifiers
from spectype.models import GeneratorConfig, Severity, ViewUtilitiesDeclaration


def _ok(operation_id, **extra):
    return {"operationId": operation_id, "responses": {"200": {"description": "ok"}}, **extra}


class TestGenerate:
    """Test the end-to-end generation core."""

    def test_petstore_produces_both_artifacts(self, petstore) -> None:
        result = generate(petstore)
        assert result.ok
        assert [a.name for a in result.artifacts] == ["definitions", "api"]
        assert result.artifact("api").filename == "api.ts"
        assert result.diagnostics == []

    def test_modifiers_auto_detected(self, petstore) -> None:
        result = generate(petstore)
        assert result.modifiers
        assert isinstance(result.artifact("definitions").declarations[0], ViewUtilitiesDeclaration)

    def test_modifiers_forced_off(self, petstore) -> None:
        result = generate(petstore, GeneratorConfig(add_readonly_writeonly_modifiers=False))
        assert not result.modifiers
        assert not any(
            isinstance(d, ViewUtilitiesDeclaration)
            for d in result.artifact("definitions").declarations
        )

    def test_custom_filenames(self, petstore) -> None:
        config = GeneratorConfig(definitions_filename="types.ts", api_filename="client.ts")
        result = generate(petstore, config)
        assert [a.filename for a in result.artifacts] == ["types.ts", "client.ts"]

    def test_deterministic(self, petstore) -> None:
        assert generate(petstore) == generate(petstore)

    def test_duplicate_method_names_fail_only_the_client(self, make_document) -> None:
        document = make_document(
            paths={"/a": {"get": _ok("fetch")}, "/b": {"get": _ok("fetch")}},
            schemas={"Pet": {"type": "object"}},
        )
        result = generate(document)
        assert not result.ok
        assert [a.name for a in result.artifacts] == ["definitions"]
        assert [f.name for f in result.failures] == ["api"]
        assert result.failures[0].location == "GET /b"
        assert result.diagnostics[-1].code == "duplicate-method-name"
        assert result.diagnostics[-1].severity == Severity.ERROR

    def test_parser_notes_forwarded(self, make_document) -> None:
        document = make_document(paths={
            "/a": {
                "get": _ok("a", parameters=[{"$ref": "#/components/parameters/Missing"}])
            }
        })
        result = generate(document)
        assert result.ok
        assert [d.code for d in result.diagnostics] == ["unresolved-reference"]

    def test_repeated_diagnostics_reported_once(self, make_document) -> None:
        ghost = {
            "description": "ok",
            "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Ghost"}}},
        }
        document = make_document(paths={"/a": {"get": {"operationId": "a", "responses": {"200": ghost}}}})
        result = generate(document)
        # Seen by both the analyzer and the client synthesizer
        assert [d.code for d in result.diagnostics] == ["unresolved-reference"]
        assert result.ok

    def test_malformed_operation_skipped(self, make_document) -> None:
        document = make_document(paths={
            "/broken": {"get": {"operationId": "broken", "responses": {}}},
            "/ok": {"get": _ok("ok")},
        })
        result = generate(document)
        assert result.ok
        callables = [d.name for d in result.artifact("api").declarations if d.kind == "callable"]
        assert callables == ["ok"]
        assert result.diagnostics[0].code == "malformed-operation"


class TestUsesModifiers:
    """Test readOnly/writeOnly detection."""

    def test_no_modifiers(self, make_document) -> None:
        document = make_document(schemas={"A": {"type": "object", "properties": {"x": {}}}})
        assert not uses_modifiers(document)

    def test_nested_in_array_items(self, make_document) -> None:
        document = make_document(schemas={
            "A": {
                "type": "array",
                "items": {"type": "object", "properties": {"x": {"readOnly": True}}},
            }
        })
        assert uses_modifiers(document)

    def test_inside_composite(self, make_document) -> None:
        document = make_document(schemas={
            "A": {"allOf": [{"type": "object", "properties": {"x": {"writeOnly": True}}}]}
        })
        assert uses_modifiers(document)

    def test_inline_request_body(self, make_document) -> None:
        body = {
            "content": {
                "application/json": {
                    "schema": {"type": "object", "properties": {"id": {"readOnly": True}}}
                }
            }
        }
        document = make_document(paths={"/a": {"post": _ok("a", requestBody=body)}})
        assert uses_modifiers(document)
