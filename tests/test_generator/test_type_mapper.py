"""Tests for spectype.generator.type_mapper."""

from __future__ import annotations

import pytest

from spectype.exceptions import CircularReferenceError, UnresolvedReferenceError
from spectype.generator.type_mapper import ANY, DATE_TIME, map_schema
from spectype.models import (
    ArraySchema,
    ArrayType,
    CompositeSchema,
    LiteralSetType,
    MappingContext,
    NamedType,
    NullableType,
    ObjectSchema,
    ObjectType,
    PrimitiveSchema,
    PrimitiveType,
    ProductType,
    PropertySchema,
    ReferenceSchema,
    SumType,
    UntypedSchema,
    ViewFilter,
)
from spectype.parser import SchemaResolver


@pytest.fixture
def resolver() -> SchemaResolver:
    return SchemaResolver({
        "Pet": ObjectSchema(
            properties={
                "id": PropertySchema(schema=PrimitiveSchema(type="integer"), read_only=True),
                "name": PropertySchema(schema=PrimitiveSchema(type="string"), required=True),
                "password": PropertySchema(schema=PrimitiveSchema(type="string"), write_only=True),
            }
        ),
        "Status": PrimitiveSchema(type="string", enum=("on", "off")),
        "Node": ObjectSchema(
            properties={"children": PropertySchema(schema=ArraySchema(items=ReferenceSchema(target="Node")))}
        ),
        "Loop": ReferenceSchema(target="Loop"),
    })


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class TestReferences:
    """Test reference mapping and view wrapping."""

    def test_reference_maps_to_name(self, resolver) -> None:
        mapped = map_schema(ReferenceSchema(target="Pet"), resolver)
        assert mapped.type == NamedType(name="Pet")
        assert mapped.references == frozenset({"Pet"})

    def test_reference_carries_prefix(self, resolver) -> None:
        mapped = map_schema(ReferenceSchema(target="Pet"), resolver, MappingContext(prefix="Types."))
        assert mapped.type == NamedType(name="Pet", prefix="Types.")

    def test_view_wraps_reference(self, resolver) -> None:
        ctx = MappingContext(view=ViewFilter.INPUT, wrap_views=True)
        assert map_schema(ReferenceSchema(target="Pet"), resolver, ctx).type.view == "input"

    def test_view_not_wrapped_without_switch(self, resolver) -> None:
        ctx = MappingContext(view=ViewFilter.OUTPUT)
        assert map_schema(ReferenceSchema(target="Pet"), resolver, ctx).type.view is None

    def test_enumeration_never_wrapped(self, resolver) -> None:
        ctx = MappingContext(view=ViewFilter.OUTPUT, wrap_views=True)
        mapped = map_schema(ReferenceSchema(target="Status"), resolver, ctx)
        assert mapped.type == NamedType(name="Status")

    def test_unknown_reference_raises(self, resolver) -> None:
        with pytest.raises(UnresolvedReferenceError):
            map_schema(ReferenceSchema(target="Ghost"), resolver, location="#/x")

    def test_alias_cycle_raises(self, resolver) -> None:
        with pytest.raises(CircularReferenceError):
            map_schema(ReferenceSchema(target="Loop"), resolver)

    def test_self_referencing_schema_terminates(self, resolver) -> None:
        mapped = map_schema(resolver.lookup("Node"), resolver)
        children = mapped.type.properties["children"].type
        assert children == ArrayType(items=NamedType(name="Node"))
        assert mapped.references == frozenset({"Node"})


# ---------------------------------------------------------------------------
# Composites
# ---------------------------------------------------------------------------


class TestComposites:
    """Test allOf / oneOf mapping."""

    def test_all_of_is_product(self, resolver) -> None:
        node = CompositeSchema(
            mode="all-of",
            members=(ReferenceSchema(target="Pet"), ObjectSchema()),
        )
        mapped = map_schema(node, resolver)
        assert mapped.type == ProductType(members=(NamedType(name="Pet"), ObjectType()))

    def test_one_of_is_sum(self, resolver) -> None:
        node = CompositeSchema(
            mode="one-of",
            members=(PrimitiveSchema(type="string"), PrimitiveSchema(type="integer")),
        )
        mapped = map_schema(node, resolver)
        assert mapped.type == SumType(
            members=(PrimitiveType(primitive="string"), PrimitiveType(primitive="integer"))
        )

    @pytest.mark.parametrize("mode", ["all-of", "one-of"])
    def test_single_member_degrades(self, resolver, mode: str) -> None:
        node = CompositeSchema(mode=mode, members=(ReferenceSchema(target="Pet"),))
        assert map_schema(node, resolver).type == NamedType(name="Pet")

    def test_empty_composite_noted(self, resolver) -> None:
        mapped = map_schema(CompositeSchema(mode="all-of"), resolver, location="#/c")
        assert mapped.type == ANY
        assert mapped.notes[0].code == "unsupported-schema-shape"

    def test_references_merged(self, resolver) -> None:
        node = CompositeSchema(
            mode="one-of",
            members=(ReferenceSchema(target="Pet"), ReferenceSchema(target="Status")),
        )
        assert map_schema(node, resolver).references == frozenset({"Pet", "Status"})


# ---------------------------------------------------------------------------
# Objects and views
# ---------------------------------------------------------------------------


class TestObjects:
    """Test object mapping and view filtering."""

    def test_optional_follows_required(self, resolver) -> None:
        mapped = map_schema(resolver.lookup("Pet"), resolver)
        assert not mapped.type.properties["name"].optional
        assert mapped.type.properties["id"].optional

    def test_input_view_drops_read_only(self, resolver) -> None:
        ctx = MappingContext(view=ViewFilter.INPUT)
        props = map_schema(resolver.lookup("Pet"), resolver, ctx).type.properties
        assert list(props) == ["name", "password"]

    def test_output_view_drops_write_only(self, resolver) -> None:
        ctx = MappingContext(view=ViewFilter.OUTPUT)
        props = map_schema(resolver.lookup("Pet"), resolver, ctx).type.properties
        assert list(props) == ["id", "name"]

    def test_no_view_keeps_all_properties(self, resolver) -> None:
        props = map_schema(resolver.lookup("Pet"), resolver).type.properties
        assert list(props) == ["id", "name", "password"]

    def test_modifiers_marked_when_requested(self, resolver) -> None:
        ctx = MappingContext(mark_modifiers=True)
        props = map_schema(resolver.lookup("Pet"), resolver, ctx).type.properties
        assert props["id"].marked and props["id"].readonly
        assert props["password"].marked and props["password"].writeonly
        assert not props["name"].marked

    def test_modifiers_unmarked_by_default(self, resolver) -> None:
        props = map_schema(resolver.lookup("Pet"), resolver).type.properties
        assert props["id"].readonly
        assert not props["id"].marked

    def test_additional_properties_schema(self, resolver) -> None:
        node = ObjectSchema(additional_properties=PrimitiveSchema(type="integer"))
        mapped = map_schema(node, resolver)
        assert mapped.type == ObjectType(index_signature=PrimitiveType(primitive="integer"))

    def test_additional_properties_true_ignored(self, resolver) -> None:
        assert map_schema(ObjectSchema(additional_properties=True), resolver).type == ObjectType()


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------


class TestPrimitives:
    """Test primitive, literal and fallback mapping."""

    @pytest.mark.parametrize("primitive", ["boolean", "integer", "number", "string"])
    def test_plain_primitive(self, resolver, primitive: str) -> None:
        mapped = map_schema(PrimitiveSchema(type=primitive), resolver)
        assert mapped.type == PrimitiveType(primitive=primitive)

    def test_integer_enum_is_literal_set(self, resolver) -> None:
        mapped = map_schema(PrimitiveSchema(type="integer", enum=(1, 2, 3)), resolver)
        assert mapped.type == LiteralSetType(values=(1, 2, 3))

    def test_string_enum_single_value(self, resolver) -> None:
        mapped = map_schema(PrimitiveSchema(type="string", enum=("only",)), resolver)
        assert mapped.type == LiteralSetType(values=("only",))

    @pytest.mark.parametrize("fmt", ["date", "date-time"])
    def test_date_formats(self, resolver, fmt: str) -> None:
        mapped = map_schema(PrimitiveSchema(type="string", format=fmt), resolver)
        assert mapped.type == DATE_TIME

    def test_nullable_string(self, resolver) -> None:
        mapped = map_schema(PrimitiveSchema(type="string", nullable=True), resolver)
        assert mapped.type == NullableType(inner=PrimitiveType(primitive="string"))

    def test_nullable_integer(self, resolver) -> None:
        mapped = map_schema(PrimitiveSchema(type="integer", nullable=True), resolver)
        assert mapped.type == NullableType(inner=PrimitiveType(primitive="integer"))

    @pytest.mark.parametrize(
        "primitive, values",
        [("string", ("a", "b")), ("integer", (1, 2)), ("boolean", (True,))],
    )
    def test_nullable_enum_wraps_literal_set(self, resolver, primitive: str, values) -> None:
        node = PrimitiveSchema(type=primitive, enum=values, nullable=True)
        assert map_schema(node, resolver).type == NullableType(inner=LiteralSetType(values=values))

    def test_nullable_date(self, resolver) -> None:
        node = PrimitiveSchema(type="string", format="date", nullable=True)
        assert map_schema(node, resolver).type == NullableType(inner=DATE_TIME)

    def test_untyped_without_reason_is_silent_any(self, resolver) -> None:
        mapped = map_schema(UntypedSchema(), resolver)
        assert mapped.type == ANY
        assert mapped.notes == ()

    def test_unsupported_shape_noted(self, resolver) -> None:
        mapped = map_schema(UntypedSchema(reason="unsupported type 'file'"), resolver, location="#/f")
        assert mapped.type == ANY
        assert mapped.notes[0].location == "#/f"
        assert "file" in mapped.notes[0].message

    def test_nullable_untyped(self, resolver) -> None:
        mapped = map_schema(UntypedSchema(nullable=True), resolver)
        assert mapped.type == NullableType(inner=ANY)
