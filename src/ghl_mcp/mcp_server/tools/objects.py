"""Custom object tools: object schemas and their records.

Works for custom objects ("custom_objects.pet") as well as standard
objects ("contact", "opportunity", "business").
"""

import logging
from typing import Any, Dict

from ..constants import DEFAULT_LIMIT
from ..context import ToolContext
from ..envelope import ToolResult
from .normalize import as_count, as_list, compact, dig, require_mapping, require_value

logger = logging.getLogger(__name__)

_LOCATION = {
    "type": "string",
    "description": "Location ID (uses default if not provided)",
}

_LABELS = {
    "type": "object",
    "properties": {
        "singular": {"type": "string", "description": 'Singular name (e.g. "Pet")'},
        "plural": {"type": "string", "description": 'Plural name (e.g. "Pets")'},
    },
    "required": ["singular", "plural"],
    "description": "Singular and plural names of the object",
}

_SCHEMA_KEY = {"type": "string", "description": 'Schema key (e.g. "custom_objects.pet", "business")'}
_RECORD_ID = {"type": "string", "description": "Record ID"}


def _record_properties() -> Dict[str, Any]:
    return {
        "properties": {
            "type": "object",
            "additionalProperties": True,
            "description": 'Record properties as key-value pairs (e.g. {"name": "Buddy"})',
        },
        "owner": {
            "type": "array",
            "items": {"type": "string"},
            "maxItems": 1,
            "description": "User ID owning the record (max 1, custom objects only)",
        },
        "followers": {
            "type": "array",
            "items": {"type": "string"},
            "maxItems": 10,
            "description": "User IDs following the record (max 10)",
        },
        "locationId": _LOCATION,
    }


SCHEMAS: Dict[str, Dict[str, Any]] = {
    "get_all_objects": {
        "name": "get_all_objects",
        "description": "List all objects (standard and custom) of a location.",
        "inputSchema": {
            "type": "object",
            "properties": {"locationId": _LOCATION},
            "required": [],
        },
    },
    "create_object_schema": {
        "name": "create_object_schema",
        "description": (
            'Create a custom object schema, e.g. labels={singular:"Pet", plural:"Pets"}, key="pet".'
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "labels": _LABELS,
                "key": {
                    "type": "string",
                    "description": 'Unique object key (e.g. "pet"); the API adds the "custom_objects." prefix',
                },
                "description": {"type": "string", "description": "Description of the object"},
                "primaryDisplayPropertyDetails": {
                    "type": "object",
                    "properties": {
                        "key": {"type": "string", "description": 'Property key (e.g. "name")'},
                        "name": {"type": "string", "description": 'Display name (e.g. "Pet Name")'},
                        "dataType": {"type": "string", "enum": ["TEXT", "NUMERICAL"]},
                    },
                    "required": ["key", "name", "dataType"],
                    "description": "Primary display property",
                },
                "locationId": _LOCATION,
            },
            "required": ["labels", "key", "primaryDisplayPropertyDetails"],
        },
    },
    "get_object_schema": {
        "name": "get_object_schema",
        "description": "Get an object schema with its fields by key.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "key": {
                    "type": "string",
                    "description": 'Object key (e.g. "custom_objects.pet" or "contact")',
                },
                "fetchProperties": {
                    "type": "boolean",
                    "default": True,
                    "description": "Fetch all standard/custom fields (default: true)",
                },
                "locationId": _LOCATION,
            },
            "required": ["key"],
        },
    },
    "update_object_schema": {
        "name": "update_object_schema",
        "description": (
            "Update an object schema's labels, description and searchable properties. "
            "Only searchable properties can be used in search_object_records."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "key": {"type": "string", "description": "Object key to update"},
                "searchableProperties": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": 'Searchable field keys (e.g. ["custom_objects.pet.name"])',
                },
                "labels": _LABELS,
                "description": {"type": "string"},
                "locationId": _LOCATION,
            },
            "required": ["key", "searchableProperties"],
        },
    },
    "create_object_record": {
        "name": "create_object_record",
        "description": "Create a record in a custom or standard object.",
        "inputSchema": {
            "type": "object",
            "properties": {"schemaKey": _SCHEMA_KEY, **_record_properties()},
            "required": ["schemaKey", "properties"],
        },
    },
    "get_object_record": {
        "name": "get_object_record",
        "description": "Get a record by ID.",
        "inputSchema": {
            "type": "object",
            "properties": {"schemaKey": _SCHEMA_KEY, "recordId": _RECORD_ID},
            "required": ["schemaKey", "recordId"],
        },
    },
    "update_object_record": {
        "name": "update_object_record",
        "description": "Update a record's properties, owner or followers.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "schemaKey": _SCHEMA_KEY,
                "recordId": _RECORD_ID,
                **_record_properties(),
            },
            "required": ["schemaKey", "recordId"],
        },
    },
    "delete_object_record": {
        "name": "delete_object_record",
        "description": "Delete a record. This is permanent.",
        "inputSchema": {
            "type": "object",
            "properties": {"schemaKey": _SCHEMA_KEY, "recordId": _RECORD_ID},
            "required": ["schemaKey", "recordId"],
        },
    },
    "search_object_records": {
        "name": "search_object_records",
        "description": (
            'Search records by searchable properties. Query format: "field:value" '
            '(e.g. "name:Buddy").'
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "schemaKey": _SCHEMA_KEY,
                "query": {"type": "string", "description": "Search query"},
                "page": {
                    "type": "integer",
                    "minimum": 1,
                    "default": 1,
                    "description": "Page number (default: 1)",
                },
                "pageLimit": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 100,
                    "default": DEFAULT_LIMIT,
                    "description": "Records per page (default: 10)",
                },
                "searchAfter": {
                    "type": "array",
                    "items": {"type": "string"},
                    "default": [],
                    "description": "Pagination cursor returned by a previous search",
                },
                "locationId": _LOCATION,
            },
            "required": ["schemaKey", "query"],
        },
    },
}

FAILURE_MESSAGES: Dict[str, str] = {
    "get_all_objects": "Failed to get objects",
    "create_object_schema": "Failed to create object schema",
    "get_object_schema": "Failed to get object schema",
    "update_object_schema": "Failed to update object schema",
    "create_object_record": "Failed to create object record",
    "get_object_record": "Failed to get object record",
    "update_object_record": "Failed to update object record",
    "delete_object_record": "Failed to delete object record",
    "search_object_records": "Failed to search object records",
}


def extract_created_record(payload: Any) -> Dict[str, Any]:
    record = require_mapping(payload, ("record",))
    require_value(record, "id")
    return record


def extract_search(payload: Any) -> Dict[str, Any]:
    return {
        "records": as_list(dig(payload, "records")),
        "total": as_count(dig(payload, "total")),
    }


async def _call(ctx: ToolContext, capability: str, params: Dict[str, Any]) -> Any:
    return await ctx.call(capability, params, FAILURE_MESSAGES[capability])


async def get_all_objects(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "get_all_objects", {"locationId": location_id})
    objects = as_list(dig(payload, "objects"))
    return ToolResult(
        data={"objects": objects},
        message=f"Retrieved {len(objects)} objects for location",
        metadata={"count": len(objects)},
    )


async def create_object_schema(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "create_object_schema", compact({
        "labels": args["labels"],
        "key": args["key"],
        "description": args.get("description"),
        "locationId": location_id,
        "primaryDisplayPropertyDetails": args["primaryDisplayPropertyDetails"],
    }))
    obj = require_mapping(payload, ("object",))
    key = obj.get("key") or args["key"]
    return ToolResult(
        data={"object": obj},
        message=f"Custom object schema created successfully with key: {key}",
    )


async def get_object_schema(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "get_object_schema", {
        "key": args["key"],
        "locationId": location_id,
        "fetchProperties": args["fetchProperties"],
    })
    return ToolResult(
        data={
            "object": dig(payload, "object"),
            "fields": as_list(dig(payload, "fields")),
            "cache": dig(payload, "cache"),
        },
        message=f"Object schema retrieved successfully for key: {args['key']}",
    )


async def update_object_schema(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "update_object_schema", compact({
        "key": args["key"],
        "labels": args.get("labels"),
        "description": args.get("description"),
        "locationId": location_id,
        "searchableProperties": args["searchableProperties"],
    }))
    return ToolResult(
        data={"object": dig(payload, "object")},
        message=f"Object schema updated successfully for key: {args['key']}",
    )


async def create_object_record(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    schema_key = args["schemaKey"]
    payload = await _call(ctx, "create_object_record", compact({
        "schemaKey": schema_key,
        "properties": args["properties"],
        "locationId": location_id,
        "owner": args.get("owner"),
        "followers": args.get("followers"),
    }))
    record = extract_created_record(payload)
    return ToolResult(
        data={"record": record, "recordId": record["id"]},
        message=f"Record created successfully in {schema_key} with ID: {record['id']}",
        metadata={"recordId": record["id"]},
    )


async def get_object_record(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    payload = await _call(ctx, "get_object_record", {
        "schemaKey": args["schemaKey"],
        "recordId": args["recordId"],
    })
    return ToolResult(
        data={"record": require_mapping(payload, ("record",))},
        message=f"Record retrieved successfully from {args['schemaKey']}",
    )


async def update_object_record(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "update_object_record", compact({
        "schemaKey": args["schemaKey"],
        "recordId": args["recordId"],
        "properties": args.get("properties"),
        "locationId": location_id,
        "owner": args.get("owner"),
        "followers": args.get("followers"),
    }))
    return ToolResult(
        data={"record": dig(payload, "record"), "recordId": args["recordId"]},
        message=f"Record updated successfully in {args['schemaKey']}",
    )


async def delete_object_record(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    payload = await _call(ctx, "delete_object_record", {
        "schemaKey": args["schemaKey"],
        "recordId": args["recordId"],
    })
    deleted_id = dig(payload, "id") or args["recordId"]
    return ToolResult(
        data={"deletedId": deleted_id},
        message=f"Record deleted successfully from {args['schemaKey']}",
    )


async def search_object_records(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    schema_key = args["schemaKey"]
    payload = await _call(ctx, "search_object_records", {
        "schemaKey": schema_key,
        "locationId": location_id,
        "page": args["page"],
        "pageLimit": args["pageLimit"],
        "query": args["query"],
        "searchAfter": args["searchAfter"],
    })
    result = extract_search(payload)
    return ToolResult(
        data=result,
        message=f"Found {len(result['records'])} records in {schema_key} ({result['total']} total)",
        metadata={"total": result["total"], "returned": len(result["records"])},
    )


HANDLERS = {
    "get_all_objects": get_all_objects,
    "create_object_schema": create_object_schema,
    "get_object_schema": get_object_schema,
    "update_object_schema": update_object_schema,
    "create_object_record": create_object_record,
    "get_object_record": get_object_record,
    "update_object_record": update_object_record,
    "delete_object_record": delete_object_record,
    "search_object_records": search_object_records,
}
