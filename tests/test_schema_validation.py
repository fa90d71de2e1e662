"""Tests for argument validation and coercion.

Tests cover:
- Required, unknown and null fields
- Defaults and their isolation between calls
- Type coercion rules
- Enum, bounds and item-count limits
- Nested objects and arrays
"""

import pytest
from jsonschema import Draft202012Validator

from ghl_mcp.mcp_server.errors import ValidationError
from ghl_mcp.mcp_server.tools.schemas import (
    TOOL_SCHEMAS,
    freeze_schema,
    thaw_schema,
    validate_arguments,
)

SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "minLength": 1, "maxLength": 5},
        "limit": {"type": "integer", "minimum": 1, "maximum": 100, "default": 10},
        "ratio": {"type": "number"},
        "flag": {"type": "boolean", "default": True},
        "kind": {"type": "string", "enum": ["a", "b"]},
        "ids": {"type": "array", "items": {"type": "string"}, "maxItems": 3, "default": []},
        "nested": {
            "type": "object",
            "properties": {"key": {"type": "string"}, "size": {"type": "integer"}},
            "required": ["key"],
        },
        "free": {"type": "object", "additionalProperties": True},
    },
    "required": ["name"],
}


@pytest.mark.unit
class TestRequiredAndUnknown:
    """Required and unknown field handling."""

    def test_none_args_is_empty(self):
        with pytest.raises(ValidationError, match="missing required field"):
            validate_arguments(None, SCHEMA)

    def test_non_mapping_rejected(self):
        with pytest.raises(ValidationError, match="must be an object"):
            validate_arguments(["name"], SCHEMA)

    def test_missing_required_named(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments({}, SCHEMA, tool_name="demo")
        assert "Invalid arguments for demo" in exc_info.value.message
        assert "name" in exc_info.value.message

    def test_null_counts_as_missing(self):
        with pytest.raises(ValidationError, match="name"):
            validate_arguments({"name": None}, SCHEMA)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError, match="unknown field.*bogus"):
            validate_arguments({"name": "x", "bogus": 1}, SCHEMA)

    def test_all_errors_collected(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments({"limit": 0, "kind": "z", "bogus": 1}, SCHEMA)
        assert len(exc_info.value.errors) == 4


@pytest.mark.unit
class TestDefaults:
    """Defaults are applied and copied."""

    def test_defaults_applied(self):
        result = validate_arguments({"name": "x"}, SCHEMA)
        assert result["limit"] == 10
        assert result["flag"] is True
        assert result["ids"] == []

    def test_optional_without_default_absent(self):
        result = validate_arguments({"name": "x"}, SCHEMA)
        assert "kind" not in result
        assert "nested" not in result

    def test_default_not_shared_between_calls(self):
        first = validate_arguments({"name": "x"}, SCHEMA)
        first["ids"].append("mutated")
        second = validate_arguments({"name": "x"}, SCHEMA)
        assert second["ids"] == []
        assert SCHEMA["properties"]["ids"]["default"] == []

    def test_input_not_mutated(self):
        args = {"name": "x", "nested": {"key": "k"}}
        result = validate_arguments(args, SCHEMA)
        result["nested"]["key"] = "changed"
        assert args["nested"]["key"] == "k"


@pytest.mark.unit
class TestCoercion:
    """Type coercion rules."""

    @pytest.mark.parametrize("raw,expected", [(5, 5), (5.0, 5), ("7", 7), (" 8 ", 8)])
    def test_integer_accepts(self, raw, expected):
        assert validate_arguments({"name": "x", "limit": raw}, SCHEMA)["limit"] == expected

    @pytest.mark.parametrize("raw", [True, 5.5, "abc", [1]])
    def test_integer_rejects(self, raw):
        with pytest.raises(ValidationError, match="limit"):
            validate_arguments({"name": "x", "limit": raw}, SCHEMA)

    def test_number_accepts_numeric_string(self):
        assert validate_arguments({"name": "x", "ratio": "0.5"}, SCHEMA)["ratio"] == 0.5

    def test_number_rejects_bool(self):
        with pytest.raises(ValidationError, match="ratio"):
            validate_arguments({"name": "x", "ratio": False}, SCHEMA)

    @pytest.mark.parametrize("raw,expected", [(False, False), ("true", True), ("FALSE", False)])
    def test_boolean_accepts(self, raw, expected):
        assert validate_arguments({"name": "x", "flag": raw}, SCHEMA)["flag"] is expected

    @pytest.mark.parametrize("raw", [1, "yes", 0.5])
    def test_boolean_rejects(self, raw):
        with pytest.raises(ValidationError, match="flag"):
            validate_arguments({"name": "x", "flag": raw}, SCHEMA)

    def test_string_must_be_string(self):
        with pytest.raises(ValidationError, match="'name' must be of type string"):
            validate_arguments({"name": 12}, SCHEMA)


@pytest.mark.unit
class TestConstraints:
    """Enum, bounds and nested validation."""

    def test_enum(self):
        with pytest.raises(ValidationError, match="must be one of 'a', 'b'"):
            validate_arguments({"name": "x", "kind": "c"}, SCHEMA)

    def test_integer_bounds(self):
        with pytest.raises(ValidationError, match=">= 1"):
            validate_arguments({"name": "x", "limit": 0}, SCHEMA)
        with pytest.raises(ValidationError, match="<= 100"):
            validate_arguments({"name": "x", "limit": 101}, SCHEMA)

    def test_string_length(self):
        with pytest.raises(ValidationError, match="at least 1"):
            validate_arguments({"name": ""}, SCHEMA)
        with pytest.raises(ValidationError, match="at most 5"):
            validate_arguments({"name": "toolong"}, SCHEMA)

    def test_max_items_names_limit(self):
        with pytest.raises(ValidationError, match="at most 3 items \\(got 4\\)"):
            validate_arguments({"name": "x", "ids": ["1", "2", "3", "4"]}, SCHEMA)

    def test_array_items_checked_with_index(self):
        with pytest.raises(ValidationError, match=r"ids\[1\]"):
            validate_arguments({"name": "x", "ids": ["1", 2]}, SCHEMA)

    def test_nested_object_paths(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_arguments({"name": "x", "nested": {"size": "big", "extra": 1}}, SCHEMA)
        message = exc_info.value.message
        assert "nested.key" in message
        assert "nested.size" in message
        assert "nested.extra" in message

    def test_free_form_object_kept(self):
        result = validate_arguments({"name": "x", "free": {"anything": [1, 2]}}, SCHEMA)
        assert result["free"] == {"anything": [1, 2]}

    def test_free_form_object_keeps_nulls(self):
        result = validate_arguments({"name": "x", "free": {"gone": None}}, SCHEMA)
        assert result["free"] == {"gone": None}

    def test_nested_defaults_and_coercion(self):
        result = validate_arguments({"name": "x", "nested": {"key": "k", "size": "3"}}, SCHEMA)
        assert result["nested"] == {"key": "k", "size": 3}


@pytest.mark.unit
class TestToolSchemas:
    """Declared tool schemas."""

    def test_every_schema_is_well_formed(self):
        for name, schema in TOOL_SCHEMAS.items():
            assert schema["name"] == name
            assert schema["description"]
            input_schema = schema["inputSchema"]
            Draft202012Validator.check_schema(input_schema)
            assert input_schema["type"] == "object"
            for field in input_schema.get("required", []):
                assert field in input_schema["properties"], f"{name}.{field}"

    def test_families(self):
        families = {schema["family"] for schema in TOOL_SCHEMAS.values()}
        assert families == {"social_media", "custom_fields", "blogs", "objects"}

    def test_frozen_schema_validates_like_the_original(self):
        frozen = freeze_schema(SCHEMA)
        assert validate_arguments({"name": "x"}, frozen) == validate_arguments({"name": "x"}, SCHEMA)
        with pytest.raises(ValidationError, match="at most 3 items"):
            validate_arguments({"name": "x", "ids": ["1", "2", "3", "4"]}, frozen)

    def test_freeze_is_deep(self):
        frozen = freeze_schema(SCHEMA)
        with pytest.raises(TypeError):
            frozen["properties"]["ids"]["maxItems"] = 1000
        assert frozen["required"] == ("name",)

    def test_thaw_round_trip(self):
        assert thaw_schema(freeze_schema(SCHEMA)) == SCHEMA
