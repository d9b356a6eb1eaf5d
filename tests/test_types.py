import uuid
from datetime import date, datetime, timezone

import pytest

from endpoint_dsl.errors import CoercionError, DefinitionError
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
    Object,
    Optional,
    String,
    array,
    hash_of,
    object_of,
    optional,
)


class TestString:
    def test_accepts_plain_string(self):
        result = String().validate("hello")
        assert result.valid is True
        assert result.errors == []

    def test_rejects_non_string(self):
        result = String().validate(42)
        assert result.valid is False
        assert result.errors == ["expected string, got int"]

    def test_reports_every_violated_constraint(self):
        t = String(min_length=5, pattern=r"^\d+$")
        result = t.validate("ab")
        assert result.errors == ["length must be >= 5", "must match pattern '^\\\\d+$'"]

    def test_enum_membership(self):
        t = String(enum=("red", "green"))
        assert t.validate("red").valid
        assert t.validate("blue").errors == ["must be one of: red, green"]

    def test_formats(self):
        assert String(format="email").validate("a@example.com").valid
        assert not String(format="email").validate("nope").valid
        assert String(format="uri").validate("https://example.com/x").valid
        assert String(format="ipv4").validate("10.0.0.1").valid
        assert not String(format="ipv4").validate("::1").valid
        assert String(format="ipv6").validate("::1").valid

    def test_coerce_stringifies(self):
        assert String().coerce(12) == "12"
        assert String().coerce("x") == "x"

    def test_coerce_none_raises(self):
        with pytest.raises(CoercionError, match="required value cannot be None"):
            String().coerce(None)

    def test_json_schema(self):
        t = String(min_length=1, max_length=10, enum=("a", "b")).describe("Name")
        assert t.to_json_schema() == {
            "type": "string",
            "minLength": 1,
            "maxLength": 10,
            "enum": ["a", "b"],
            "description": "Name",
        }


class TestInteger:
    def test_maximum_violation_names_bound(self):
        result = Integer(minimum=0, maximum=100).validate(150)
        assert result.valid is False
        assert result.errors == ["must be <= 100"]

    def test_rejects_bool_and_float(self):
        assert not Integer().validate(True).valid
        assert not Integer().validate(1.5).valid

    def test_exclusive_bounds_and_multiple(self):
        t = Integer(exclusive_minimum=0, multiple_of=5)
        assert t.validate(10).valid
        assert t.validate(0).errors == ["must be > 0"]
        assert t.validate(7).errors == ["must be a multiple of 5"]

    def test_coerce(self):
        assert Integer().coerce("42") == 42
        assert Integer().coerce(" 7 ") == 7
        assert Integer().coerce(3.9) == 3
        assert Integer().coerce(True) == 1

    def test_coerce_rejects_garbage(self):
        with pytest.raises(CoercionError) as exc_info:
            Integer().coerce("abc")
        assert exc_info.value.reason == "invalid integer format"
        assert exc_info.value.value == "abc"
        assert exc_info.value.target == "Integer"

    def test_json_schema_uses_openapi_30_exclusive_flags(self):
        schema = Integer(exclusive_maximum=10).to_json_schema()
        assert schema == {"type": "integer", "maximum": 10, "exclusiveMaximum": True}


class TestFloat:
    def test_accepts_int_and_float(self):
        assert Float().validate(1).valid
        assert Float().validate(1.5).valid
        assert not Float().validate(False).valid

    def test_coerce(self):
        assert Float().coerce("1.5") == 1.5
        assert Float().coerce(2) == 2.0
        with pytest.raises(CoercionError, match="invalid float format"):
            Float().coerce("x")

    def test_json_schema(self):
        assert Float(minimum=0).to_json_schema() == {"type": "number", "format": "double", "minimum": 0}

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, value):
        result = Float(minimum=0, maximum=10).validate(value)
        assert result.valid is False
        assert result.errors == ["must be a finite number"]

    @pytest.mark.parametrize("raw", ["nan", "inf", "-Infinity"])
    def test_coerce_non_finite_string(self, raw):
        with pytest.raises(CoercionError, match="value is not finite"):
            Float().coerce(raw)


class TestBoolean:
    @pytest.mark.parametrize("raw", ["true", "YES", " on ", "1", 1, True])
    def test_coerce_truthy(self, raw):
        assert Boolean().coerce(raw) is True

    @pytest.mark.parametrize("raw", ["false", "No", "off", "0", 0, False])
    def test_coerce_falsy(self, raw):
        assert Boolean().coerce(raw) is False

    def test_coerce_rejects_other_values(self):
        with pytest.raises(CoercionError):
            Boolean().coerce("maybe")
        with pytest.raises(CoercionError):
            Boolean().coerce(2)

    def test_validate_requires_real_bool(self):
        assert Boolean().validate(False).valid
        assert not Boolean().validate("true").valid


class TestDates:
    def test_date_accepts_object_and_iso_string(self):
        assert Date().validate(date(2024, 1, 31)).valid
        assert Date().validate("2024-01-31").valid
        assert not Date().validate("31/01/2024").valid

    def test_date_coerce(self):
        assert Date().coerce("2024-01-31") == date(2024, 1, 31)
        assert Date().coerce(datetime(2024, 1, 31, 12, 0)) == date(2024, 1, 31)
        assert Date().coerce(0) == date(1970, 1, 1)

    def test_date_coerce_failure_keeps_parser_reason(self):
        with pytest.raises(CoercionError) as exc_info:
            Date().coerce("not a date")
        assert exc_info.value.reason

    def test_date_strptime_format(self):
        t = Date(format="%d/%m/%Y")
        assert t.validate("2024-01-31").errors == ["date does not match format %d/%m/%Y"]

    def test_datetime_coerce_handles_z_suffix(self):
        value = DateTime().coerce("2024-01-31T10:00:00Z")
        assert value == datetime(2024, 1, 31, 10, 0, tzinfo=timezone.utc)

    def test_datetime_coerce_from_date_and_timestamp(self):
        assert DateTime().coerce(date(2024, 1, 31)) == datetime(2024, 1, 31)
        assert DateTime().coerce(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_datetime_rfc3339_requires_offset(self):
        t = DateTime(format="rfc3339")
        assert t.validate("2024-01-31T10:00:00Z").valid
        assert not t.validate("2024-01-31T10:00:00").valid

    def test_schemas(self):
        assert Date().to_json_schema() == {"type": "string", "format": "date"}
        assert DateTime().to_json_schema() == {"type": "string", "format": "date-time"}


class TestUUIDAndEmail:
    def test_uuid_validation(self):
        assert UUID().validate("not-a-uuid").valid is False
        assert UUID().validate("550e8400-e29b-41d4-a716-446655440000").valid is True

    def test_uuid_accepts_uuid_objects(self):
        assert UUID().validate(uuid.uuid4()).valid

    def test_uuid_coerce_normalizes(self):
        raw = " 550E8400-E29B-41D4-A716-446655440000 "
        assert UUID().coerce(raw) == "550e8400-e29b-41d4-a716-446655440000"

    def test_uuid_schema(self):
        schema = UUID().to_json_schema()
        assert schema["type"] == "string"
        assert schema["format"] == "uuid"

    def test_email(self):
        assert Email().validate("jane.doe+x@mail.example.org").valid
        assert Email().validate("jane@").errors == ["invalid email format"]
        assert Email().coerce("  jane@example.com ") == "jane@example.com"


class TestCoerceIdempotence:
    @pytest.mark.parametrize(
        "type_, raw",
        [
            (String(), 12),
            (Integer(), "42"),
            (Float(), "2.5"),
            (Boolean(), "yes"),
            (Date(), "2024-02-29"),
            (DateTime(), "2024-02-29T08:30:00+02:00"),
            (UUID(), "550E8400-E29B-41D4-A716-446655440000"),
            (Email(), " a@b.io "),
        ],
    )
    def test_coerce_twice_is_stable(self, type_, raw):
        once = type_.coerce(raw)
        assert type_.coerce(once) == once


class TestOptional:
    @pytest.mark.parametrize(
        "inner", [String(min_length=3), Integer(minimum=10), UUID(), Array(Integer(), min_items=2)]
    )
    def test_none_is_always_valid(self, inner):
        result = Optional(inner).validate(None)
        assert result.valid is True
        assert result.errors == []

    def test_delegates_for_present_values(self):
        assert Optional(Integer(maximum=5)).validate(9).errors == ["must be <= 5"]

    def test_coerce(self):
        assert Optional(Integer()).coerce(None) is None
        assert Optional(Integer()).coerce("3") == 3

    def test_schema_is_inner_schema(self):
        assert Optional(Integer()).to_json_schema() == {"type": "integer"}
        assert Optional(Integer()).is_optional is True
        assert Integer().is_optional is False


class TestArray:
    def test_error_names_the_index(self):
        result = Array(Integer()).validate([1, "x", 3])
        assert result.valid is False
        assert result.errors == ["item[1]: expected integer, got str"]

    def test_nested_path(self):
        t = Hash({"tags": Array(String(max_length=3))})
        result = t.validate({"tags": ["ok", "fine", "toolong"]})
        assert result.errors == ["tags[1]: length must be <= 3", "tags[2]: length must be <= 3"]

    def test_size_and_uniqueness(self):
        t = Array(Integer(), min_items=1, max_items=3, unique_items=True)
        assert t.validate([]).errors == ["must contain at least 1 items"]
        assert t.validate([1, 2, 3, 4]).errors == ["must contain at most 3 items"]
        assert t.validate([1, 1]).errors == ["items must be unique"]

    def test_rejects_non_list(self):
        assert Array(Integer()).validate("1,2").errors == ["expected array, got str"]

    def test_coerce_json_string_and_single_value(self):
        assert Array(Integer()).coerce("[1, \"2\"]") == [1, 2]
        assert Array(Integer()).coerce(7) == [7]

    def test_coerce_string_must_be_json_array(self):
        with pytest.raises(CoercionError, match="did not parse to list"):
            Array(Integer()).coerce("5")
        with pytest.raises(CoercionError, match="invalid JSON"):
            Array(Integer()).coerce("1,2")

    def test_coerce_failure_is_path_qualified(self):
        with pytest.raises(CoercionError) as exc_info:
            Array(Integer()).coerce(["1", "two"])
        assert exc_info.value.path == "[1]"
        assert str(exc_info.value).startswith("[1]: Cannot coerce 'two' to Integer")

    def test_schema(self):
        schema = Array(String(), min_items=1, unique_items=True).to_json_schema()
        assert schema == {"type": "array", "items": {"type": "string"}, "minItems": 1, "uniqueItems": True}


class TestHash:
    def test_required_key_enforced(self):
        result = Hash({"a": String()}).validate({})
        assert result.valid is False
        assert result.errors == ["a: is required"]

    def test_unknown_keys_tolerated(self):
        assert Hash({"a": String()}).validate({"a": "x", "b": "ignored"}).valid

    def test_optional_key_may_be_absent(self):
        assert Hash({"a": Optional(String())}).validate({}).valid

    def test_coerce_keeps_unknown_keys(self):
        t = Hash({"n": Integer()})
        assert t.coerce({"n": "1", "extra": "x"}) == {"n": 1, "extra": "x"}

    def test_coerce_json_string(self):
        assert Hash({"n": Integer()}).coerce('{"n": "4"}') == {"n": 4}

    def test_coerce_nested_failure_path(self):
        t = Hash({"user": Hash({"age": Integer()})})
        with pytest.raises(CoercionError) as exc_info:
            t.coerce({"user": {"age": "old"}})
        assert exc_info.value.path == "user.age"

    def test_schema(self):
        schema = Hash({"id": Integer(), "note": Optional(String())}).to_json_schema()
        assert schema == {
            "type": "object",
            "properties": {"id": {"type": "integer"}, "note": {"type": "string"}},
            "required": ["id"],
        }

    def test_closed_hash_rejects_unknown_keys(self):
        t = Hash({"a": String()}, additional_properties=False)
        result = t.validate({"a": "x", "b": 1, "c": 2})
        assert result.valid is False
        assert result.errors == ["unexpected fields: b, c"]
        assert t.validate({"a": "x"}).valid

    def test_closed_hash_error_is_located(self):
        t = Hash({"meta": Hash({"a": String()}, additional_properties=False)})
        assert t.validate({"meta": {"a": "x", "z": 1}}).errors == ["meta: unexpected fields: z"]

    def test_closed_hash_coerce_drops_unknown_keys(self):
        t = Hash({"n": Integer()}, additional_properties=False)
        assert t.coerce({"n": "1", "extra": "x"}) == {"n": 1}

    def test_closed_hash_schema(self):
        schema = Hash({"id": Integer()}, additional_properties=False).to_json_schema()
        assert schema["additionalProperties"] is False
        assert "additionalProperties" not in Hash({"id": Integer()}).to_json_schema()


class TestObject:
    def test_field_returns_new_object(self):
        base = Object()
        extended = base.field("name", "string")
        assert base.fields == ()
        assert [f.name for f in extended.fields] == ["name"]

    def test_optional_field_is_wrapped(self):
        t = Object().field("nick", "string", required=False)
        field = t.get_field("nick")
        assert field.required is False
        assert isinstance(field.type, Optional)

    def test_redeclaring_a_field_replaces_it_in_place(self):
        t = Object().field("a", "string").field("b", "integer").field("a", "boolean")
        assert [f.name for f in t.fields] == ["a", "b"]
        assert isinstance(t.get_field("a").type, Boolean)

    def test_coerce_drops_unknown_keys(self):
        t = Object().field("n", "integer")
        assert t.coerce({"n": "1", "extra": True}) == {"n": 1}

    def test_missing_required_field_during_coerce(self):
        with pytest.raises(CoercionError) as exc_info:
            Object().field("n", "integer").coerce({})
        assert exc_info.value.path == "n"
        assert exc_info.value.reason == "is required"

    def test_schema_keeps_declaration_order(self):
        t = Object().field("z", "string").field("a", "integer", required=False)
        schema = t.to_json_schema()
        assert list(schema["properties"]) == ["z", "a"]
        assert schema["required"] == ["z"]

    def test_field_metadata(self):
        t = Object().field("id", "uuid", description="Identifier", example="x")
        assert t.to_json_schema()["properties"]["id"]["description"] == "Identifier"


class TestMetadata:
    def test_with_metadata_returns_copy(self):
        base = Integer()
        described = base.with_metadata(description="Count", example=3)
        assert base.description is None
        assert described.to_json_schema() == {"type": "integer", "description": "Count", "example": 3}

    def test_with_example(self):
        base = String()
        sample = base.with_example("alice")
        assert base.example is None
        assert sample.example == "alice"
        assert sample.to_json_schema() == {"type": "string", "example": "alice"}

    def test_unknown_metadata_rejected(self):
        with pytest.raises(DefinitionError, match="unknown type metadata: colour"):
            Integer().with_metadata(colour="red")

    def test_types_are_immutable(self):
        t = String()
        with pytest.raises(Exception):
            t.min_length = 3

    def test_str(self):
        assert str(Integer(minimum=1)) == "Integer(minimum=1)"
        assert str(Array(String())) == "Array[String]"
        assert str(Optional(Integer())) == "Optional[Integer]"


class TestFactories:
    def test_array_resolves_shorthand(self):
        t = array("integer", min_items=1)
        assert isinstance(t.item_type, Integer)
        assert t.min_items == 1

    def test_hash_of_and_object_of(self):
        assert isinstance(hash_of({"a": "string"}).field_types["a"], String)
        obj = object_of({"a": "string", "b": optional("integer")})
        assert obj.get_field("a").required is True
        assert obj.get_field("b").required is False
