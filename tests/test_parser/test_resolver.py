"""Tests for spectype.parser.resolver."""

from __future__ import annotations

import pytest

from spectype.exceptions import (
    CircularReferenceError,
    SpecParseError,
    UnresolvedReferenceError,
)
from spectype.models import ObjectSchema, PrimitiveSchema, ReferenceSchema
from spectype.parser.resolver import (
    SchemaResolver,
    camel_case,
    method_name_for,
    pascal_case,
    remove_tag_from_method_name,
    resolve_pointer,
    sanitize_identifier,
    schema_name_from_ref,
    tag_name_for,
)


# ---------------------------------------------------------------------------
# SchemaResolver
# ---------------------------------------------------------------------------


class TestSchemaResolver:
    """Test named-reference resolution."""

    def test_non_reference_returned_unchanged(self) -> None:
        node = PrimitiveSchema(type="string")
        assert SchemaResolver({}).resolve(node) is node

    def test_follows_alias_chain(self) -> None:
        pet = ObjectSchema()
        resolver = SchemaResolver({
            "A": ReferenceSchema(target="B"),
            "B": ReferenceSchema(target="Pet"),
            "Pet": pet,
        })
        assert resolver.resolve(ReferenceSchema(target="A")) == pet

    def test_unknown_target_raises(self) -> None:
        resolver = SchemaResolver({"Pet": ObjectSchema()})
        with pytest.raises(UnresolvedReferenceError, match="Ghost") as exc_info:
            resolver.resolve(ReferenceSchema(target="Ghost"), location="GET /ghosts")
        assert exc_info.value.schema_name == "Ghost"
        assert exc_info.value.location == "GET /ghosts"

    def test_alias_cycle_raises_with_chain(self) -> None:
        resolver = SchemaResolver({
            "A": ReferenceSchema(target="B"),
            "B": ReferenceSchema(target="A"),
        })
        with pytest.raises(CircularReferenceError) as exc_info:
            resolver.resolve(ReferenceSchema(target="A"))
        assert exc_info.value.chain == ["A", "B", "A"]

    def test_self_referencing_object_is_not_a_cycle(self, petstore_resolver) -> None:
        # User.friends refers back to User, but through an object property
        user = petstore_resolver.resolve(ReferenceSchema(target="User"))
        assert isinstance(user, ObjectSchema)

    def test_is_enumeration(self, petstore_resolver) -> None:
        assert petstore_resolver.is_enumeration(ReferenceSchema(target="PetStatus"))
        assert not petstore_resolver.is_enumeration(ReferenceSchema(target="Pet"))

    def test_contains(self, petstore_resolver) -> None:
        assert "Pet" in petstore_resolver
        assert "Ghost" not in petstore_resolver

    def test_type_names_deduplicated_in_order(self) -> None:
        resolver = SchemaResolver({
            "pet-item": ObjectSchema(),
            "pet.item": ObjectSchema(),
            "pet_item": ObjectSchema(),
        })
        assert resolver.type_name("pet-item") == "pet_item"
        assert resolver.type_name("pet.item") == "pet_item_2"
        assert resolver.type_name("pet_item") == "pet_item_3"

    def test_library_helper_names_are_taken(self) -> None:
        resolver = SchemaResolver({
            "Id": PrimitiveSchema(type="string"),
            "Date": ObjectSchema(),
            "InputView": ObjectSchema(),
        })
        assert resolver.type_name("Id") == "Id_2"
        assert resolver.type_name("Date") == "Date_2"
        assert resolver.type_name("InputView") == "InputView_2"

    def test_unknown_type_name_is_sanitised(self) -> None:
        assert SchemaResolver({}).type_name("my-type") == "my_type"


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


class TestSanitizeIdentifier:
    """Test identifier sanitisation."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Pet", "Pet"),
            ("pet.v2-item", "pet_v2_item"),
            ("2fa", "_2fa"),
            ("class", "class_"),
            ("delete", "delete_"),
            ("", "_"),
        ],
    )
    def test_sanitize(self, raw: str, expected: str) -> None:
        assert sanitize_identifier(raw) == expected


class TestCasing:
    """Test camel/pascal case projections."""

    def test_camel_case_keeps_existing_case(self) -> None:
        assert camel_case("listPets") == "listPets"

    def test_camel_case_collapses_separators(self) -> None:
        assert camel_case("list pets-by.owner") == "listPetsByOwner"

    def test_camel_case_lowers_first_character(self) -> None:
        assert camel_case("GetPet") == "getPet"

    def test_underscore_is_not_a_separator(self) -> None:
        assert camel_case("pets_get") == "pets_get"

    def test_pascal_case(self) -> None:
        assert pascal_case("pet store") == "PetStore"

    def test_method_name_for_reserved_word(self) -> None:
        assert method_name_for("delete") == "delete_"

    def test_tag_name_for(self) -> None:
        assert tag_name_for("user") == "User"
        assert tag_name_for("pet-store") == "PetStore"


class TestRemoveTagFromMethodName:
    """Test case-insensitive tag stripping."""

    def test_strips_prefix(self) -> None:
        assert remove_tag_from_method_name("User", "userList") == "List"

    def test_strips_one_trailing_underscore(self) -> None:
        assert remove_tag_from_method_name("User", "user_list") == "list"

    def test_strips_mid_word_occurrence(self) -> None:
        assert remove_tag_from_method_name("User", "getSuperUserName") == "getSuperName"

    def test_tag_with_regex_characters(self) -> None:
        assert remove_tag_from_method_name("a.b", "axbList") == "axbList"

    def test_empty_tag_is_noop(self) -> None:
        assert remove_tag_from_method_name("", "userList") == "userList"


# ---------------------------------------------------------------------------
# Pointers
# ---------------------------------------------------------------------------


class TestPointers:
    """Test JSON pointer resolution."""

    def test_schema_name_from_ref(self) -> None:
        assert schema_name_from_ref("#/components/schemas/Pet") == "Pet"
        assert schema_name_from_ref("#/components/schemas/a~1b") == "a/b"
        assert schema_name_from_ref("#/components/parameters/Limit") is None

    def test_resolve_pointer(self) -> None:
        root = {"components": {"parameters": {"Limit": {"name": "limit"}}}}
        assert resolve_pointer("#/components/parameters/Limit", root) == {"name": "limit"}

    def test_resolve_pointer_into_list(self) -> None:
        root = {"items": [{"a": 1}, {"b": 2}]}
        assert resolve_pointer("#/items/1", root) == {"b": 2}

    def test_external_ref_raises(self) -> None:
        with pytest.raises(SpecParseError, match="External"):
            resolve_pointer("other.yaml#/Pet", {})

    def test_missing_key_raises(self) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            resolve_pointer("#/components/missing", {"components": {}})
