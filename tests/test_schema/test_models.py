"""Tests for schema models."""

import pytest
from pydantic import ValidationError

from kg_accessor.schema.models import (
    Cardinality,
    EntityKind,
    FieldSpec,
    RelationSpec,
    ScalarType,
    to_wire_label,
)


class TestWireLabel:
    """Test wire label derivation."""

    def test_plain_name(self):
        """Test that a plain name is upper-cased."""
        assert to_wire_label("subtopics") == "SUBTOPICS"

    def test_camel_case(self):
        """Test that camelCase boundaries become underscores."""
        assert to_wire_label("broaderSpaces") == "BROADER_SPACES"

    def test_snake_case(self):
        """Test that snake_case names keep their underscores."""
        assert to_wire_label("entity_page") == "ENTITY_PAGE"

    def test_spaces_and_dashes(self):
        """Test that spaces and dashes become underscores."""
        assert to_wire_label("row type") == "ROW_TYPE"
        assert to_wire_label("shown-columns") == "SHOWN_COLUMNS"


class TestScalarType:
    """Test scalar type parsing."""

    def test_parse_canonical_names(self):
        """Test parsing canonical type names in any case."""
        assert ScalarType.parse("string") is ScalarType.STRING
        assert ScalarType.parse("NUMBER") is ScalarType.NUMBER

    def test_parse_aliases(self):
        """Test parsing type aliases."""
        assert ScalarType.parse("text") is ScalarType.STRING
        assert ScalarType.parse("checkbox") is ScalarType.BOOLEAN
        assert ScalarType.parse("Web URL") is ScalarType.URL
        assert ScalarType.parse("image-reference") is ScalarType.IMAGE

    def test_parse_unknown(self):
        """Test that unknown type names are rejected."""
        with pytest.raises(ValueError, match="Unknown scalar type"):
            ScalarType.parse("polygon")


class TestRelationSpec:
    """Test relation declarations."""

    def test_defaults(self):
        """Test default label, cardinality and required flag."""
        spec = RelationSpec(name="subtopics", targets=["Topic"])

        assert spec.wire_label == "SUBTOPICS"
        assert spec.targets == ("Topic",)
        assert spec.cardinality is Cardinality.MANY
        assert spec.required is False

    def test_single_target_string(self):
        """Test that a single target may be given as a string."""
        spec = RelationSpec(name="cover", targets="Image", cardinality="one")
        assert spec.targets == ("Image",)
        assert spec.cardinality is Cardinality.ONE

    def test_explicit_wire_label_is_kept(self):
        """Test that an explicit wire label is not replaced."""
        spec = RelationSpec(name="attachments", wire_label="HAS_ATTACHMENT", targets=["Image"])
        assert spec.wire_label == "HAS_ATTACHMENT"

    def test_targets_keep_declaration_order(self):
        """Test that targets keep their declared order."""
        spec = RelationSpec(name="x", targets=["Person", "Image"])
        assert spec.targets == ("Person", "Image")

    def test_empty_targets_rejected(self):
        """Test that a relation needs at least one target."""
        with pytest.raises(ValidationError):
            RelationSpec(name="x", targets=[])

    def test_repeated_target_rejected(self):
        """Test that a target kind cannot be listed twice."""
        with pytest.raises(ValidationError):
            RelationSpec(name="x", targets=["Topic", "Topic"])

    def test_invalid_cardinality_rejected(self):
        """Test that only 'one' and 'many' are accepted."""
        with pytest.raises(ValidationError):
            RelationSpec(name="x", targets=["Topic"], cardinality="several")

    def test_quoted_label_plain_identifier(self):
        """Test that identifier labels are used as is."""
        spec = RelationSpec(name="subtopics", targets=["Topic"])
        assert spec.quoted_label == "SUBTOPICS"

    def test_quoted_label_escapes_backticks(self):
        """Test that other labels are back-tick quoted with back-ticks doubled."""
        spec = RelationSpec(name="x", wire_label="LS3-Fi`x", targets=["Topic"])
        assert spec.quoted_label == "`LS3-Fi``x`"

    def test_frozen(self):
        """Test that relation specs are immutable."""
        spec = RelationSpec(name="subtopics", targets=["Topic"])
        with pytest.raises(ValidationError):
            spec.wire_label = "OTHER"


class TestEntityKind:
    """Test kind model helpers."""

    def test_lookups(self):
        """Test field and relation lookups by name."""
        kind = EntityKind(
            name="Topic",
            fields={"name": FieldSpec(name="name", type=ScalarType.STRING)},
            relations={"subtopics": RelationSpec(name="subtopics", targets=["Topic"])},
        )

        assert kind.field("name").type is ScalarType.STRING
        assert kind.field("missing") is None
        assert kind.relation("subtopics").wire_label == "SUBTOPICS"
        assert kind.field_names() == ("name",)
        assert kind.relation_names() == ("subtopics",)
