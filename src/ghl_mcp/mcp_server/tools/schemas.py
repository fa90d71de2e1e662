"""Tool schema definitions and argument validation.

Every tool declares a JSON Schema style `inputSchema`. The same declaration
is advertised to MCP clients and used here to validate and coerce incoming
arguments before any handler runs.
"""

from types import MappingProxyType
from typing import Any, Iterable, Mapping

from jsonschema import Draft202012Validator
from jsonschema import ValidationError as SchemaViolation

from ..errors import ValidationError
from .blogs import SCHEMAS as BLOG_SCHEMAS
from .custom_fields import SCHEMAS as CUSTOM_FIELD_SCHEMAS
from .objects import SCHEMAS as OBJECT_SCHEMAS
from .social_media import SCHEMAS as SOCIAL_MEDIA_SCHEMAS

_FAMILIES: dict[str, dict[str, dict[str, Any]]] = {
    "social_media": SOCIAL_MEDIA_SCHEMAS,
    "custom_fields": CUSTOM_FIELD_SCHEMAS,
    "blogs": BLOG_SCHEMAS,
    "objects": OBJECT_SCHEMAS,
}


def _merge_families() -> dict[str, dict[str, Any]]:
    merged: dict[str, dict[str, Any]] = {}
    for family, schemas in _FAMILIES.items():
        for name, schema in schemas.items():
            if name in merged:
                raise ValueError(f"Duplicate tool schema '{name}' in family '{family}'")
            merged[name] = {**schema, "family": family}
    return merged


# Tool schema definitions following JSON Schema specification
TOOL_SCHEMAS: dict[str, dict[str, Any]] = _merge_families()


def freeze_schema(value: Any) -> Any:
    """Deep read-only copy: mappings become MappingProxyType, lists become tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze_schema(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze_schema(item) for item in value)
    return value


def thaw_schema(value: Any) -> Any:
    """Deep mutable copy made of plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw_schema(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw_schema(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_arguments(
    args: Mapping[str, Any] | None,
    input_schema: Mapping[str, Any],
    tool_name: str | None = None,
) -> dict[str, Any]:
    """Validate raw arguments and return a coerced copy with defaults applied.

    Null values count as absent. Scalar strings are coerced to the declared
    integer, number or boolean type and missing fields take their defaults;
    the result is then checked with jsonschema. Declared objects are closed
    unless they set `additionalProperties`. Every violation is collected and
    reported together.

    Args:
        args: Raw arguments from the caller (None means no arguments)
        input_schema: The tool's inputSchema
        tool_name: Used in the error message

    Returns:
        New dict of validated arguments

    Raises:
        ValidationError: Listing every invalid, missing or unknown field
    """
    if args is None:
        args = {}
    prefix = f"Invalid arguments for {tool_name}" if tool_name else "Invalid arguments"
    if not isinstance(args, Mapping):
        raise ValidationError(f"{prefix}: arguments must be an object")

    prepared = _prepare(thaw_schema(args), input_schema)
    validator = Draft202012Validator(_closed(thaw_schema(input_schema)))
    errors = _describe(sorted(validator.iter_errors(prepared), key=lambda e: e.json_path))

    if errors:
        raise ValidationError(f"{prefix}: {'; '.join(errors)}", errors=errors)
    return prepared


def _prepare(value: Any, rules: Mapping[str, Any]) -> Any:
    """Drop nulls, fill defaults and coerce scalars, following the schema."""
    expected = rules.get("type")

    # only objects with declared properties are rebuilt; free-form ones pass through
    if expected == "object" and isinstance(value, dict) and "properties" in rules:
        properties: Mapping[str, Any] = rules["properties"]
        result = {key: item for key, item in value.items() if item is not None}
        for name, child in properties.items():
            if name in result:
                result[name] = _prepare(result[name], child)
            elif "default" in child:
                result[name] = thaw_schema(child["default"])
        return result

    if expected == "array" and isinstance(value, list):
        item_rules = rules.get("items")
        if isinstance(item_rules, Mapping):
            return [_prepare(item, item_rules) for item in value]
        return value

    return _coerce(value, expected)


def _coerce(value: Any, expected: Any) -> Any:
    """Coerce a scalar to the declared type; anything else is left for jsonschema."""
    if isinstance(value, bool):
        return value

    if expected == "integer":
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return value

    elif expected == "number" and isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return value

    elif expected == "boolean" and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False

    return value


def _closed(rules: dict[str, Any]) -> dict[str, Any]:
    """Reject unknown keys in every object that declares its properties."""
    if "properties" in rules:
        rules.setdefault("additionalProperties", False)
        for child in rules["properties"].values():
            _closed(child)
    if isinstance(rules.get("items"), dict):
        _closed(rules["items"])
    return rules


def _describe(violations: Iterable[SchemaViolation]) -> list[str]:
    """One readable message per violation, naming the field path."""
    messages: list[str] = []
    for error in violations:
        path = _path(error.absolute_path)
        keyword = error.validator
        limit = error.validator_value

        if keyword == "required":
            # one error per missing name; report each name once per object
            for name in limit:
                message = f"missing required field: {_join(path, name)}"
                if name not in error.instance and message not in messages:
                    messages.append(message)
        elif keyword == "additionalProperties":
            known = error.schema.get("properties", {})
            names = ", ".join(_join(path, key) for key in error.instance if key not in known)
            messages.append(f"unknown field(s): {names}")
        elif keyword == "type":
            messages.append(
                f"'{path}' must be of type {limit} (got {type(error.instance).__name__})"
            )
        elif keyword == "enum":
            allowed = ", ".join(repr(v) for v in limit)
            messages.append(f"'{path}' must be one of {allowed} (got {error.instance!r})")
        elif keyword == "minimum":
            messages.append(f"'{path}' must be >= {limit} (got {error.instance})")
        elif keyword == "maximum":
            messages.append(f"'{path}' must be <= {limit} (got {error.instance})")
        elif keyword == "minLength":
            messages.append(f"'{path}' must be at least {limit} characters")
        elif keyword == "maxLength":
            messages.append(f"'{path}' must be at most {limit} characters")
        elif keyword == "minItems":
            messages.append(
                f"'{path}' requires at least {limit} items (got {len(error.instance)})"
            )
        elif keyword == "maxItems":
            messages.append(
                f"'{path}' accepts at most {limit} items (got {len(error.instance)})"
            )
        else:
            messages.append(f"'{path}': {error.message}")
    return messages


def _path(parts: Iterable[Any]) -> str:
    path = ""
    for part in parts:
        path = f"{path}[{part}]" if isinstance(part, int) else _join(path, part)
    return path


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name
