"""Custom field (v2) tools for custom objects and company fields."""

import logging
from typing import Any, Dict

from ..context import ToolContext
from ..envelope import ToolResult
from ..errors import ValidationError
from .normalize import as_list, compact, dig, first_present, record_id

logger = logging.getLogger(__name__)

DATA_TYPES = [
    "TEXT", "LARGE_TEXT", "NUMERICAL", "PHONE", "MONETORY", "CHECKBOX",
    "SINGLE_OPTIONS", "MULTIPLE_OPTIONS", "DATE", "TEXTBOX_LIST",
    "FILE_UPLOAD", "RADIO", "EMAIL",
]
OPTION_TYPES = {"SINGLE_OPTIONS", "MULTIPLE_OPTIONS", "RADIO", "CHECKBOX", "TEXTBOX_LIST"}
FILE_FORMATS = [
    ".pdf", ".docx", ".doc", ".jpg", ".jpeg", ".png", ".gif",
    ".csv", ".xlsx", ".xls", "all",
]

_LOCATION = {
    "type": "string",
    "description": "Location ID (uses default if not provided)",
}

_OBJECT_KEY = {
    "type": "string",
    "description": 'Object key. Format: "custom_object.{objectKey}" (e.g. "custom_object.pet")',
}

_OPTIONS = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "key": {"type": "string", "description": "Key of the option"},
            "label": {"type": "string", "description": "Label of the option"},
            "url": {"type": "string", "description": "URL associated with the option (RADIO only)"},
        },
        "required": ["key", "label"],
    },
    "description": "Options for SINGLE_OPTIONS, MULTIPLE_OPTIONS, RADIO, CHECKBOX, TEXTBOX_LIST",
}


def _field_properties() -> Dict[str, Any]:
    return {
        "name": {"type": "string", "description": "Field name"},
        "description": {"type": "string", "description": "Description of the field"},
        "placeholder": {"type": "string", "description": "Placeholder text"},
        "showInForms": {
            "type": "boolean",
            "default": True,
            "description": "Whether the field is shown in forms (default: true)",
        },
        "options": _OPTIONS,
        "acceptedFormats": {
            "type": "string",
            "enum": FILE_FORMATS,
            "description": "Allowed file formats (FILE_UPLOAD only)",
        },
        "maxFileLimit": {
            "type": "integer",
            "minimum": 1,
            "description": "Maximum number of files (FILE_UPLOAD only)",
        },
        "locationId": _LOCATION,
    }


SCHEMAS: Dict[str, Dict[str, Any]] = {
    "get_custom_field_by_id": {
        "name": "get_custom_field_by_id",
        "description": "Get a custom field or folder by its ID.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the custom field or folder"},
            },
            "required": ["id"],
        },
    },
    "create_custom_field": {
        "name": "create_custom_field",
        "description": (
            "Create a custom field for a custom object or company. "
            'Example: dataType="TEXT", fieldKey="custom_object.pet.breed". '
            "Option types need options; FILE_UPLOAD needs acceptedFormats and maxFileLimit."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "dataType": {"type": "string", "enum": DATA_TYPES, "description": "Type of field"},
                "fieldKey": {
                    "type": "string",
                    "description": 'Field key. Format: "custom_object.{objectKey}.{fieldKey}"',
                },
                "objectKey": _OBJECT_KEY,
                "parentId": {"type": "string", "description": "ID of the parent folder"},
                **_field_properties(),
                "allowCustomOption": {
                    "type": "boolean",
                    "description": "Allow custom option values (RADIO only)",
                },
            },
            "required": ["dataType", "fieldKey", "objectKey", "parentId"],
        },
    },
    "update_custom_field": {
        "name": "update_custom_field",
        "description": (
            "Update a custom field by ID. Options replace the existing list; "
            "include every option to keep."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the custom field to update"},
                **_field_properties(),
            },
            "required": ["id"],
        },
    },
    "delete_custom_field": {
        "name": "delete_custom_field",
        "description": "Delete a custom field by ID. This is permanent and deletes its data.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the custom field to delete"},
            },
            "required": ["id"],
        },
    },
    "get_custom_fields_by_object_key": {
        "name": "get_custom_fields_by_object_key",
        "description": "Get all custom fields and folders for an object.",
        "inputSchema": {
            "type": "object",
            "properties": {"objectKey": _OBJECT_KEY, "locationId": _LOCATION},
            "required": ["objectKey"],
        },
    },
    "create_custom_field_folder": {
        "name": "create_custom_field_folder",
        "description": "Create a folder to group custom fields.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "objectKey": _OBJECT_KEY,
                "name": {"type": "string", "description": "Name of the folder"},
                "locationId": _LOCATION,
            },
            "required": ["objectKey", "name"],
        },
    },
    "update_custom_field_folder": {
        "name": "update_custom_field_folder",
        "description": "Rename a custom field folder.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the folder"},
                "name": {"type": "string", "description": "New name for the folder"},
                "locationId": _LOCATION,
            },
            "required": ["id", "name"],
        },
    },
    "delete_custom_field_folder": {
        "name": "delete_custom_field_folder",
        "description": "Delete a custom field folder.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "ID of the folder"},
                "locationId": _LOCATION,
            },
            "required": ["id"],
        },
    },
}

FAILURE_MESSAGES: Dict[str, str] = {
    "get_custom_field_by_id": "Failed to get custom field",
    "create_custom_field": "Failed to create custom field",
    "update_custom_field": "Failed to update custom field",
    "delete_custom_field": "Failed to delete custom field",
    "get_custom_fields_by_object_key": "Failed to get custom fields",
    "create_custom_field_folder": "Failed to create custom field folder",
    "update_custom_field_folder": "Failed to update custom field folder",
    "delete_custom_field_folder": "Failed to delete custom field folder",
}


def extract_field(payload: Any) -> Dict[str, Any]:
    """The field (or folder) record; some responses wrap it under `field`."""
    field = first_present(payload, ("field",), ("folder",))
    if isinstance(field, dict):
        return field
    return payload if isinstance(payload, dict) else {}


def extract_fields_and_folders(payload: Any) -> Dict[str, Any]:
    return {
        "fields": as_list(dig(payload, "fields")),
        "folders": as_list(dig(payload, "folders")),
    }


def check_field_variant(args: Dict[str, Any]) -> None:
    """Enforce the fields that only apply to some data types.

    Raises:
        ValidationError: Naming the offending field combination
    """
    data_type = args["dataType"]
    errors = []

    if data_type == "FILE_UPLOAD":
        missing = [key for key in ("acceptedFormats", "maxFileLimit") if args.get(key) is None]
        if missing:
            errors.append(f"dataType=FILE_UPLOAD requires {' and '.join(missing)}")
    else:
        extra = [key for key in ("acceptedFormats", "maxFileLimit") if args.get(key) is not None]
        if extra:
            errors.append(f"{' and '.join(extra)} only apply to dataType=FILE_UPLOAD (got {data_type})")

    options = args.get("options")
    if data_type in OPTION_TYPES:
        if not options:
            errors.append(f"dataType={data_type} requires a non-empty options list")
    elif options is not None:
        errors.append(f"options do not apply to dataType={data_type}")

    if data_type != "RADIO":
        if args.get("allowCustomOption") is not None:
            errors.append(f"allowCustomOption only applies to dataType=RADIO (got {data_type})")
        if any(option.get("url") is not None for option in options or []):
            errors.append(f"option url only applies to dataType=RADIO (got {data_type})")

    if errors:
        raise ValidationError(
            f"Invalid arguments for create_custom_field: {'; '.join(errors)}",
            errors=errors,
        )


async def _call(ctx: ToolContext, capability: str, params: Dict[str, Any]) -> Any:
    return await ctx.call(capability, params, FAILURE_MESSAGES[capability])


async def get_custom_field_by_id(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    payload = await _call(ctx, "get_custom_field_by_id", {"id": args["id"]})
    return ToolResult(
        data={"field": extract_field(payload)},
        message="Custom field/folder retrieved successfully",
    )


async def create_custom_field(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Create a custom field after checking the type-specific fields."""
    check_field_variant(args)
    location_id = ctx.resolve_location(args.get("locationId"))

    payload = await _call(ctx, "create_custom_field", compact({
        "locationId": location_id,
        "dataType": args["dataType"],
        "fieldKey": args["fieldKey"],
        "objectKey": args["objectKey"],
        "parentId": args["parentId"],
        "name": args.get("name"),
        "description": args.get("description"),
        "placeholder": args.get("placeholder"),
        "showInForms": args["showInForms"],
        "options": args.get("options"),
        "acceptedFormats": args.get("acceptedFormats"),
        "maxFileLimit": args.get("maxFileLimit"),
        "allowCustomOption": args.get("allowCustomOption"),
    }))

    field = extract_field(payload)
    field_id = record_id(field)
    return ToolResult(
        data={"field": field, "fieldId": field_id},
        message=f"Custom field '{args['fieldKey']}' created successfully",
        metadata=compact({"fieldId": field_id}),
    )


async def update_custom_field(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "update_custom_field", compact({
        "id": args["id"],
        "locationId": location_id,
        "name": args.get("name"),
        "description": args.get("description"),
        "placeholder": args.get("placeholder"),
        "showInForms": args["showInForms"],
        "options": args.get("options"),
        "acceptedFormats": args.get("acceptedFormats"),
        "maxFileLimit": args.get("maxFileLimit"),
    }))
    return ToolResult(
        data={"field": extract_field(payload)},
        message="Custom field updated successfully",
    )


async def delete_custom_field(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    await _call(ctx, "delete_custom_field", {"id": args["id"]})
    return ToolResult(
        data={"id": args["id"], "deleted": True},
        message="Custom field deleted successfully",
    )


async def get_custom_fields_by_object_key(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    object_key = args["objectKey"]
    payload = await _call(
        ctx, "get_custom_fields_by_object_key",
        {"objectKey": object_key, "locationId": location_id},
    )
    result = extract_fields_and_folders(payload)
    field_count, folder_count = len(result["fields"]), len(result["folders"])
    return ToolResult(
        data=result,
        message=f"Retrieved {field_count} fields and {folder_count} folders for object '{object_key}'",
        metadata={"fieldCount": field_count, "folderCount": folder_count},
    )


async def create_custom_field_folder(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "create_custom_field_folder", {
        "objectKey": args["objectKey"],
        "name": args["name"],
        "locationId": location_id,
    })
    folder = extract_field(payload)
    return ToolResult(
        data={"folder": folder, "folderId": record_id(folder)},
        message=f"Custom field folder '{args['name']}' created successfully",
    )


async def update_custom_field_folder(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "update_custom_field_folder", {
        "id": args["id"],
        "name": args["name"],
        "locationId": location_id,
    })
    return ToolResult(
        data={"folder": extract_field(payload)},
        message=f"Custom field folder updated to '{args['name']}'",
    )


async def delete_custom_field_folder(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    await _call(ctx, "delete_custom_field_folder", {"id": args["id"], "locationId": location_id})
    return ToolResult(
        data={"id": args["id"], "deleted": True},
        message="Custom field folder deleted successfully",
    )


HANDLERS = {
    "get_custom_field_by_id": get_custom_field_by_id,
    "create_custom_field": create_custom_field,
    "update_custom_field": update_custom_field,
    "delete_custom_field": delete_custom_field,
    "get_custom_fields_by_object_key": get_custom_fields_by_object_key,
    "create_custom_field_folder": create_custom_field_folder,
    "update_custom_field_folder": update_custom_field_folder,
    "delete_custom_field_folder": delete_custom_field_folder,
}
