"""Tests for FormSession (preview / data entry)."""

from __future__ import annotations

import pytest

from formsmith.core.exceptions import SchemaEditError
from formsmith.core.session import FormSession
from formsmith.schemas.field import FieldDefinition
from formsmith.schemas.form import FormSchema


@pytest.fixture
def schema() -> FormSchema:
    return FormSchema(
        id="s",
        name="Signup",
        fields=[
            FieldDefinition(id="name", type="text", label="Name", required=True, default_value="Guest"),
            FieldDefinition(id="age", type="number", label="Age"),
            FieldDefinition(id="terms", type="checkbox", label="Terms", required=True),
            FieldDefinition(
                id="left", type="number", label="Left", is_derived=True,
                parent_field_ids=["age"], formula="100 - Age",
            ),
        ],
    )


class TestInitialValues:
    def test_seeded_from_defaults(self, schema):
        session = FormSession(schema)
        assert session.values == {"name": "Guest", "age": "", "terms": "false", "left": ""}
        assert session.errors == {}


class TestEditing:
    def test_set_value_recomputes_derived(self, schema):
        session = FormSession(schema)
        session.set_value("age", "25")
        assert session.values["left"] == "75"

    def test_set_value_clears_field_error(self, schema):
        session = FormSession(schema)
        session.set_value("name", "")
        session.check()
        assert set(session.errors) == {"name", "terms"}
        session.set_value("name", "Ann")
        assert set(session.errors) == {"terms"}

    def test_derived_field_not_editable(self, schema):
        session = FormSession(schema)
        with pytest.raises(SchemaEditError, match="Derived fields"):
            session.set_value("left", "1")

    def test_unknown_field_rejected(self, schema):
        with pytest.raises(SchemaEditError, match="No field"):
            FormSession(schema).set_value("nope", "1")


class TestSubmit:
    def test_unchecked_required_checkbox_blocks(self, schema):
        result = FormSession(schema).submit()
        assert result.ok is False
        assert result.errors == {"terms": "Terms is required"}

    def test_valid_submission(self, schema):
        session = FormSession(schema)
        session.set_checked("terms", True)
        session.set_value("age", "40")
        result = session.submit()
        assert result.ok is True
        assert result.errors == {}
        assert result.values["left"] == "60"
