"""Tests for spectype.generator.analyzer."""

from __future__ import annotations

from spectype.generator.analyzer import (
    analyze_document,
    classify_response,
    synthesize_operation_id,
)
from spectype.models import (
    HTTPMethod,
    MediaContent,
    PrimitiveSchema,
    ReferenceSchema,
    ResponseKind,
    Severity,
)
from spectype.parser import SchemaResolver


def _analyze(document):
    return analyze_document(document, SchemaResolver.from_document(document))


# ---------------------------------------------------------------------------
# Petstore
# ---------------------------------------------------------------------------


class TestAnalyzePetstore:
    """Test analysis of the petstore fixture."""

    def test_one_analysis_per_operation_and_tag(self, petstore, petstore_resolver) -> None:
        result = analyze_document(petstore, petstore_resolver)
        assert [op.method_name for op in result.operations] == [
            "listPets",
            "createPet",
            "showPetById",
            "deletePet",
            "postId_get",
            "health",
        ]
        assert result.diagnostics == ()

    def test_tag_is_pascal_cased(self, petstore, petstore_resolver) -> None:
        list_pets = analyze_document(petstore, petstore_resolver).operations[0]
        assert list_pets.tag == "Pet"
        assert list_pets.raw_tag == "pet"

    def test_untagged_operation_gets_default_tag(self, petstore, petstore_resolver) -> None:
        post = analyze_document(petstore, petstore_resolver).operations[4]
        assert post.raw_tag == "default"
        assert post.tag == "Default"

    def test_missing_operation_id_synthesized(self, petstore, petstore_resolver) -> None:
        post = analyze_document(petstore, petstore_resolver).operations[4]
        assert post.operation_id == "{postId}_get"
        assert post.operation_id_synthesized

    def test_parameters_partitioned_and_cookies_dropped(self, petstore, petstore_resolver) -> None:
        list_pets = analyze_document(petstore, petstore_resolver).operations[0]
        assert [p.name for p in list_pets.parameters] == ["limit", "X-Request-Id"]
        assert [p.name for p in list_pets.query_params] == ["limit"]
        assert [p.name for p in list_pets.header_params] == ["X-Request-Id"]
        assert list_pets.path_params == ()
        assert list_pets.has_params

    def test_request_body_for_post(self, petstore, petstore_resolver) -> None:
        create = analyze_document(petstore, petstore_resolver).operations[1]
        assert create.sends_data
        assert create.request_body == ReferenceSchema(target="Pet")

    def test_first_response_is_success(self, petstore, petstore_resolver) -> None:
        list_pets = analyze_document(petstore, petstore_resolver).operations[0]
        assert list_pets.success_status == "200"
        assert list_pets.response_kind == ResponseKind.JSON
        # The "default" Error response is not reachable from the result type
        assert list_pets.referenced_types == frozenset({"Pet"})

    def test_void_and_text_responses(self, petstore, petstore_resolver) -> None:
        operations = analyze_document(petstore, petstore_resolver).operations
        assert operations[3].response_kind == ResponseKind.VOID
        assert operations[3].deprecated
        assert operations[5].response_kind == ResponseKind.TEXT


# ---------------------------------------------------------------------------
# Edge cases
# ---------------------------------------------------------------------------


class TestAnalyzeEdgeCases:
    """Test quirks and degraded inputs."""

    def test_first_declared_response_wins_even_if_error(self, make_document) -> None:
        document = make_document(
            paths={
                "/pets/{id}": {
                    "get": {
                        "operationId": "getPet",
                        "responses": {
                            "404": {
                                "description": "missing",
                                "content": {
                                    "application/json": {
                                        "schema": {"$ref": "#/components/schemas/NotFound"}
                                    }
                                },
                            },
                            "200": {
                                "description": "ok",
                                "content": {
                                    "application/json": {
                                        "schema": {"$ref": "#/components/schemas/Pet"}
                                    }
                                },
                            },
                        },
                    }
                }
            },
            schemas={"Pet": {"type": "object"}, "NotFound": {"type": "object"}},
        )
        op = _analyze(document).operations[0]
        assert op.success_status == "404"
        assert op.success_schema == ReferenceSchema(target="NotFound")
        assert op.referenced_types == frozenset({"NotFound"})

    def test_one_entry_per_tag(self, make_document) -> None:
        document = make_document(paths={
            "/users": {
                "get": {
                    "operationId": "userList",
                    "tags": ["user", "admin"],
                    "responses": {"200": {"description": "ok"}},
                }
            }
        })
        operations = _analyze(document).operations
        assert [(op.tag, op.method_name) for op in operations] == [
            ("User", "userList"),
            ("Admin", "userList"),
        ]

    def test_operation_without_responses_skipped(self, make_document) -> None:
        document = make_document(paths={
            "/broken": {"get": {"operationId": "broken", "responses": {}}},
            "/ok": {"get": {"operationId": "ok", "responses": {"200": {"description": "ok"}}}},
        })
        result = _analyze(document)
        assert [op.method_name for op in result.operations] == ["ok"]
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].code == "malformed-operation"
        assert result.diagnostics[0].severity == Severity.ERROR
        assert result.diagnostics[0].location == "GET /broken"

    def test_body_ignored_for_get(self, make_document) -> None:
        document = make_document(paths={
            "/search": {
                "get": {
                    "operationId": "search",
                    "requestBody": {
                        "content": {"application/json": {"schema": {"type": "object"}}}
                    },
                    "responses": {"200": {"description": "ok"}},
                }
            }
        })
        op = _analyze(document).operations[0]
        assert not op.sends_data
        assert op.request_body is None

    def test_unresolved_reference_becomes_diagnostic(self, make_document) -> None:
        document = make_document(paths={
            "/ghosts": {
                "get": {
                    "operationId": "ghosts",
                    "responses": {
                        "200": {
                            "description": "ok",
                            "content": {
                                "application/json": {
                                    "schema": {"$ref": "#/components/schemas/Ghost"}
                                }
                            },
                        }
                    },
                }
            }
        })
        result = _analyze(document)
        assert len(result.operations) == 1
        assert result.operations[0].referenced_types == frozenset()
        assert result.diagnostics[0].code == "unresolved-reference"

    def test_synthesize_operation_id(self) -> None:
        assert synthesize_operation_id("/pets", HTTPMethod.GET) == "pets_get"
        assert synthesize_operation_id("/users/{id}", HTTPMethod.DELETE) == "{id}_delete"


class TestClassifyResponse:
    """Test success response classification."""

    def test_no_content_is_void(self) -> None:
        assert classify_response(()) == (ResponseKind.VOID, None, None)

    def test_json_preferred_over_earlier_media(self) -> None:
        schema = PrimitiveSchema(type="string")
        kind, media_type, found = classify_response((
            MediaContent(media_type="application/xml"),
            MediaContent(media_type="application/json", schema=schema),
        ))
        assert kind == ResponseKind.JSON
        assert media_type == "application/json"
        assert found == schema

    def test_vendor_json(self) -> None:
        kind, media_type, _ = classify_response((MediaContent(media_type="application/problem+json"),))
        assert kind == ResponseKind.JSON
        assert media_type == "application/problem+json"

    def test_text(self) -> None:
        assert classify_response((MediaContent(media_type="text/csv"),))[0] == ResponseKind.TEXT

    def test_opaque(self) -> None:
        kind, media_type, _ = classify_response((MediaContent(media_type="application/pdf"),))
        assert kind == ResponseKind.OPAQUE
        assert media_type == "application/pdf"
