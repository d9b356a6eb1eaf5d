from dataclasses import dataclass
from datetime import date, datetime
from types import SimpleNamespace

import pytest

from endpoint_dsl.errors import DefinitionError
from endpoint_dsl.types import (
    UUID,
    Array,
    Boolean,
    Date,
    DateTime,
    Email,
    Float,
    Hash,
    Integer,
    Optional,
    String,
    from_json_schema,
    from_object,
    from_sample,
)
from endpoint_dsl.types.auto_derivation import infer_type


class TestInferType:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (True, Boolean),
            (3, Integer),
            (1.5, Float),
            (date(2024, 1, 2), Date),
            (datetime(2024, 1, 2, 3, 4), DateTime),
            ({"a": 1}, Hash),
            ("text", String),
            (None, String),
        ],
    )
    def test_scalars(self, value, expected):
        assert type(infer_type(value)) is expected

    def test_list_uses_first_item(self):
        t = infer_type([1, 2])
        assert isinstance(t, Array)
        assert isinstance(t.item_type, Integer)

    def test_empty_list_defaults_to_strings(self):
        assert isinstance(infer_type([]).item_type, String)


class TestFromSample:
    def test_derives_fields(self):
        t = from_sample({"id": 1, "name": "Ada", "active": True, "tags": ["x"]})
        assert list(t.field_types) == ["id", "name", "active", "tags"]
        assert t.validate({"id": 2, "name": "Bob", "active": False, "tags": []}).valid
        assert t.validate({"id": "2", "name": "Bob", "active": False, "tags": []}).errors == [
            "id: expected integer, got str"
        ]

    def test_only_and_except(self):
        sample = {"id": 1, "name": "Ada", "password": "secret"}
        assert list(from_sample(sample, only=["id", "name"]).field_types) == ["id", "name"]
        assert list(from_sample(sample, except_=["password"]).field_types) == ["id", "name"]

    def test_rejects_non_mapping(self):
        with pytest.raises(DefinitionError, match="expected a mapping"):
            from_sample([1, 2])


@dataclass
class Account:
    id: int
    balance: float
    _token: str = "hidden"


class TestFromObject:
    def test_namespace(self):
        t = from_object(SimpleNamespace(id=1, email="a@b.co"), except_=["email"])
        assert list(t.field_types) == ["id"]

    def test_dataclass_skips_private_attributes(self):
        t = from_object(Account(id=1, balance=2.5))
        assert set(t.field_types) == {"id", "balance"}
        assert isinstance(t.field_types["balance"], Float)

    def test_rejects_values_without_attributes(self):
        with pytest.raises(DefinitionError, match="cannot read attributes"):
            from_object(42)


USER_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "format": "uuid"},
        "email": {"type": "string", "format": "email", "description": "Login address"},
        "age": {"type": "integer"},
        "score": {"type": "number"},
        "born": {"type": "string", "format": "date"},
        "seen": {"type": "string", "format": "date-time"},
        "roles": {"type": "array", "items": {"type": "string"}},
        "address": {
            "type": "object",
            "properties": {"city": {"type": "string"}},
            "required": ["city"],
        },
    },
    "required": ["id", "email"],
}


class TestFromJsonSchema:
    def test_types_and_required(self):
        t = from_json_schema(USER_SCHEMA)
        fields = t.field_types
        assert isinstance(fields["id"], UUID)
        assert isinstance(fields["email"], Email)
        assert fields["email"].description == "Login address"
        assert isinstance(fields["age"], Optional)
        assert isinstance(fields["age"].inner, Integer)
        assert isinstance(fields["score"].inner, Float)
        assert isinstance(fields["born"].inner, Date)
        assert isinstance(fields["seen"].inner, DateTime)
        assert isinstance(fields["roles"].inner.item_type, String)
        assert isinstance(fields["address"].inner.field_types["city"], String)

    def test_validates_documents(self):
        t = from_json_schema(USER_SCHEMA)
        user = {"id": "123e4567-e89b-12d3-a456-426614174000", "email": "ada@example.com"}
        assert t.validate(user).valid
        assert t.validate({"email": "ada@example.com"}).errors == ["id: is required"]

    def test_filters(self):
        assert list(from_json_schema(USER_SCHEMA, only=["id", "age"]).field_types) == ["id", "age"]
        assert "email" not in from_json_schema(USER_SCHEMA, except_=["email"]).field_types

    def test_additional_properties_false(self):
        t = from_json_schema({"type": "object", "properties": {"a": {"type": "string"}}, "additionalProperties": False})
        assert t.additional_properties is False
        assert not t.validate({"a": "x", "b": "y"}).valid

    @pytest.mark.parametrize("document", [{"type": "array"}, {"properties": {}}, "object"])
    def test_rejects_non_object_schema(self, document):
        with pytest.raises(DefinitionError, match="must be an object type"):
            from_json_schema(document)
