"""Tests for FieldDefinition, ValidationRules and the per-type rule variants."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from formsmith.schemas.field import (
    DateRules,
    FieldDefinition,
    NoRules,
    NumberRules,
    TextareaRules,
    TextRules,
    ValidationRules,
    rules_for,
)
from formsmith.schemas.form import FormSchema


class TestFieldDefinitionDefaults:
    def test_minimal_field(self):
        f = FieldDefinition(id="1", type="text")
        assert f.label == ""
        assert f.required is False
        assert f.default_value == ""
        assert f.options is None
        assert f.validations is None
        assert f.is_derived is False
        assert f.parent_field_ids == []
        assert f.formula == ""

    def test_invalid_type_rejected(self):
        with pytest.raises(ValidationError):
            FieldDefinition(id="1", type="slider")

    def test_camel_case_input_accepted(self):
        f = FieldDefinition.model_validate({
            "id": "2",
            "type": "number",
            "defaultValue": "3",
            "isDerived": True,
            "parentFieldIds": ["1"],
            "formula": "Age * 2",
        })
        assert f.default_value == "3"
        assert f.is_derived is True
        assert f.parent_field_ids == ["1"]

    def test_unknown_keys_ignored(self):
        f = FieldDefinition.model_validate({"id": "1", "type": "text", "color": "red"})
        assert not hasattr(f, "color")

    def test_fields_are_immutable(self):
        f = FieldDefinition(id="1", type="text")
        with pytest.raises(ValidationError):
            f.label = "changed"


class TestDerivedInvariants:
    def test_derived_field_never_required(self):
        f = FieldDefinition(id="1", type="text", required=True, is_derived=True)
        assert f.required is False
        assert f.is_required is False

    def test_derived_from_wire_never_required(self):
        f = FieldDefinition.model_validate(
            {"id": "1", "type": "text", "required": True, "isDerived": True}
        )
        assert f.required is False

    def test_plain_field_keeps_required(self):
        f = FieldDefinition(id="1", type="text", required=True)
        assert f.is_required is True


class TestLabels:
    def test_display_label_fallback(self):
        assert FieldDefinition(id="1", type="number").display_label == "(No label) - number"

    def test_display_label_uses_label(self):
        assert FieldDefinition(id="1", type="number", label="Age").display_label == "Age"

    def test_message_label_fallback(self):
        assert FieldDefinition(id="1", type="text").message_label == "Field"

    def test_initial_value_checkbox(self):
        assert FieldDefinition(id="1", type="checkbox").initial_value == "false"

    def test_initial_value_default(self):
        f = FieldDefinition(id="1", type="text", default_value="hello")
        assert f.initial_value == "hello"


class TestRulesFor:
    def test_text_variant(self):
        f = FieldDefinition(
            id="1",
            type="text",
            validations=ValidationRules(min_length=2, email=True, min_number=5),
        )
        rules = rules_for(f)
        assert isinstance(rules, TextRules)
        assert rules.min_length == 2
        assert rules.email is True
        assert rules.password is False
        assert not hasattr(rules, "min_number")

    def test_textarea_drops_email(self):
        f = FieldDefinition(
            id="1", type="textarea", validations=ValidationRules(max_length=9, email=True)
        )
        rules = rules_for(f)
        assert isinstance(rules, TextareaRules)
        assert rules.max_length == 9
        assert not hasattr(rules, "email")

    def test_number_variant(self):
        f = FieldDefinition(
            id="1", type="number", validations=ValidationRules(min_number=1, min_length=4)
        )
        rules = rules_for(f)
        assert isinstance(rules, NumberRules)
        assert rules.min_number == 1

    def test_date_variant(self):
        f = FieldDefinition(
            id="1", type="date", validations=ValidationRules(max_date="2030-01-01")
        )
        assert rules_for(f) == DateRules(max_date="2030-01-01")

    @pytest.mark.parametrize("field_type", ["select", "radio", "checkbox"])
    def test_choice_fields_have_no_rules(self, field_type):
        f = FieldDefinition(id="1", type=field_type, validations=ValidationRules(min_length=3))
        assert isinstance(rules_for(f), NoRules)

    def test_derived_field_has_empty_rules(self):
        f = FieldDefinition(
            id="1", type="text", is_derived=True, validations=ValidationRules(min_length=3)
        )
        assert rules_for(f) == TextRules()


class TestFormSchema:
    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValidationError, match="Duplicate field ids"):
            FormSchema(
                id="s",
                name="Dupes",
                fields=[FieldDefinition(id="1", type="text"), FieldDefinition(id="1", type="number")],
            )

    def test_lookup_helpers(self):
        schema = FormSchema(
            id="s",
            name="Lookup",
            fields=[FieldDefinition(id="a", type="text"), FieldDefinition(id="b", type="date")],
        )
        assert schema.field_ids == ["a", "b"]
        assert schema.get_field("b").type == "date"
        assert schema.get_field("zzz") is None
        assert schema.index_of("b") == 1
        with pytest.raises(KeyError):
            schema.index_of("zzz")

    def test_to_dict_uses_wire_shape(self):
        schema = FormSchema(
            id="s",
            name="Wire",
            fields=[
                FieldDefinition(
                    id="1",
                    type="text",
                    label="Email",
                    validations=ValidationRules(email=True, min_length=3),
                ),
            ],
        )
        payload = schema.to_dict()
        assert set(payload) == {"id", "name", "createdAt", "fields"}
        assert isinstance(payload["createdAt"], str)
        field_payload = payload["fields"][0]
        assert field_payload["defaultValue"] == ""
        assert field_payload["isDerived"] is False
        assert field_payload["parentFieldIds"] == []
        assert field_payload["validations"] == {"email": True, "minLength": 3}
        assert "options" not in field_payload

    def test_round_trip_through_wire_shape(self):
        schema = FormSchema(
            id="s",
            name="Round trip",
            fields=[FieldDefinition(id="1", type="select", options=["A", "B"], required=True)],
        )
        assert FormSchema.model_validate(schema.to_dict()) == schema

    def test_snapshot_is_detached_copy(self):
        schema = FormSchema(id="s", name="Snap", fields=[FieldDefinition(id="1", type="radio", options=["x"])])
        snap = schema.snapshot()
        assert snap == schema
        assert snap.fields[0] is not schema.fields[0]
