"""Social media posting tools.

Post management, connected accounts, categories, tags and OAuth helpers for
the GHL social planner. Most payloads come back nested under `results`.
"""

import logging
from typing import Any, Dict

from ..constants import (
    DEFAULT_AUTHOR_ID,
    DEFAULT_LIMIT,
    DEFAULT_OFFSET,
    MAX_BULK_DELETE,
    SEARCH_WINDOW_DAYS,
)
from ..context import ToolContext
from ..envelope import ToolResult
from ..errors import ValidationError
from .normalize import (
    as_count,
    as_list,
    compact,
    dig,
    first_present,
    record_id,
    require_mapping,
    resolve_time_window,
)

logger = logging.getLogger(__name__)

POST_TYPES = ["post", "story", "reel"]
POST_STATUSES = ["draft", "scheduled", "published"]
SEARCH_TYPES = [
    "recent", "all", "scheduled", "draft", "failed",
    "in_review", "published", "in_progress", "deleted",
]
PLATFORMS = [
    "google", "facebook", "instagram", "linkedin",
    "twitter", "tiktok", "tiktok-business",
]

# platform -> backend capability listing connectable accounts after OAuth
PLATFORM_CAPABILITIES = {
    "google": "get_google_business_locations",
    "facebook": "get_facebook_pages",
    "instagram": "get_instagram_accounts",
    "linkedin": "get_linkedin_accounts",
    "twitter": "get_twitter_profile",
    "tiktok": "get_tiktok_profile",
    "tiktok-business": "get_tiktok_business_profile",
}

_LOCATION = {
    "type": "string",
    "description": "Location ID (uses default if not provided)",
}

_MEDIA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "url": {"type": "string", "description": "Media URL (must be publicly accessible)"},
            "caption": {"type": "string", "description": "Media caption"},
            "type": {"type": "string", "description": "Media MIME type (e.g. image/png)"},
        },
        "required": ["url"],
    },
    "description": "Media attachments (images/videos)",
}

_TIKTOK_DETAILS = {
    "type": "object",
    "properties": {
        "privacyLevel": {"type": "string"},
        "promoteOtherBrand": {"type": "boolean"},
        "enableComment": {"type": "boolean"},
        "enableDuet": {"type": "boolean"},
        "enableStitch": {"type": "boolean"},
        "videoDisclosure": {"type": "boolean"},
        "promoteYourBrand": {"type": "boolean"},
    },
    "description": "TikTok-specific post settings (only for TikTok accounts)",
}

_GMB_DETAILS = {
    "type": "object",
    "properties": {
        "gmbEventType": {"type": "string", "enum": ["STANDARD", "EVENT", "OFFER"]},
        "title": {"type": "string"},
        "actionType": {
            "type": "string",
            "enum": ["book", "order", "shop", "learn_more", "sign_up", "call"],
        },
    },
    "description": "Google Business Profile settings (only for GMB accounts)",
}


def _post_properties() -> Dict[str, Any]:
    return {
        "accountIds": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Social media account IDs to post to (see get_social_accounts)",
        },
        "summary": {"type": "string", "description": "Post content/caption text"},
        "type": {"type": "string", "enum": POST_TYPES, "description": "Type of content"},
        "media": _MEDIA,
        "status": {"type": "string", "enum": POST_STATUSES, "description": "Post status"},
        "scheduleDate": {
            "type": "string",
            "description": "Schedule date in ISO 8601 format (required when status is scheduled)",
        },
        "followUpComment": {"type": "string", "description": "Auto-comment after publishing"},
        "tags": {"type": "array", "items": {"type": "string"}, "description": "Tag IDs"},
        "categoryId": {"type": "string", "description": "Category ID"},
        "userId": {"type": "string", "description": "User ID"},
        "createdBy": {"type": "string", "description": "User ID who created the post"},
        "tiktokPostDetails": _TIKTOK_DETAILS,
        "gmbPostDetails": _GMB_DETAILS,
        "locationId": _LOCATION,
    }


def _listing_properties() -> Dict[str, Any]:
    return {
        "searchText": {"type": "string", "description": "Search text"},
        "limit": {
            "type": "integer",
            "minimum": 1,
            "maximum": 100,
            "default": DEFAULT_LIMIT,
            "description": "Number to return (default: 10)",
        },
        "skip": {
            "type": "integer",
            "minimum": 0,
            "default": DEFAULT_OFFSET,
            "description": "Number to skip (default: 0)",
        },
        "locationId": _LOCATION,
    }


SCHEMAS: Dict[str, Dict[str, Any]] = {
    "search_social_posts": {
        "name": "search_social_posts",
        "description": (
            "Search and filter social media posts across all connected platforms. "
            "Call with no parameters to list posts from the last 30 days."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": SEARCH_TYPES,
                    "default": "all",
                    "description": "Filter posts by status (default: all)",
                },
                "accounts": {
                    "type": "string",
                    "description": "Comma-separated account IDs to filter by",
                },
                "skip": {
                    "type": "integer",
                    "minimum": 0,
                    "default": DEFAULT_OFFSET,
                    "description": "Number of posts to skip (default: 0)",
                },
                "limit": {
                    "type": "integer",
                    "minimum": 1,
                    "maximum": 100,
                    "default": DEFAULT_LIMIT,
                    "description": "Number of posts to return (default: 10)",
                },
                "fromDate": {
                    "type": "string",
                    "description": "Start date in ISO format (defaults to 30 days ago)",
                },
                "toDate": {
                    "type": "string",
                    "description": "End date in ISO format (defaults to now)",
                },
                "includeUsers": {
                    "type": "boolean",
                    "default": True,
                    "description": "Include user data in response (default: true)",
                },
                "postType": {"type": "string", "enum": POST_TYPES, "description": "post, story or reel"},
                "locationId": _LOCATION,
            },
            "required": [],
        },
    },
    "create_social_post": {
        "name": "create_social_post",
        "description": (
            "Create a social media post for one or more connected accounts. "
            "Posts can be published immediately, scheduled, or saved as drafts."
        ),
        "inputSchema": {
            "type": "object",
            "properties": _post_properties(),
            "required": ["accountIds", "summary"],
        },
    },
    "get_social_post": {
        "name": "get_social_post",
        "description": "Get details of a specific social media post.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "postId": {"type": "string", "description": "Social media post ID"},
                "locationId": _LOCATION,
            },
            "required": ["postId"],
        },
    },
    "update_social_post": {
        "name": "update_social_post",
        "description": (
            "Update a draft or scheduled social media post. Published posts cannot be "
            "edited. Fields that are not given keep their current values."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "postId": {"type": "string", "description": "Social media post ID to update"},
                **_post_properties(),
                "scheduleTimeUpdated": {
                    "type": "boolean",
                    "description": "Set to true when changing the schedule time",
                },
            },
            "required": ["postId", "accountIds", "summary"],
        },
    },
    "delete_social_post": {
        "name": "delete_social_post",
        "description": "Delete a social media post by ID. This is permanent.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "postId": {"type": "string", "description": "Social media post ID to delete"},
                "locationId": _LOCATION,
            },
            "required": ["postId"],
        },
    },
    "bulk_delete_social_posts": {
        "name": "bulk_delete_social_posts",
        "description": (
            f"Delete up to {MAX_BULK_DELETE} social media posts at once. Reports the "
            "number of posts deleted, not per-post status."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "postIds": {
                    "type": "array",
                    "items": {"type": "string"},
                    "minItems": 0,
                    "maxItems": MAX_BULK_DELETE,
                    "description": f"Post IDs to delete (max {MAX_BULK_DELETE})",
                },
                "locationId": _LOCATION,
            },
            "required": ["postIds"],
        },
    },
    "get_social_accounts": {
        "name": "get_social_accounts",
        "description": "Get all connected social media accounts and groups.",
        "inputSchema": {
            "type": "object",
            "properties": {"locationId": _LOCATION},
            "required": [],
        },
    },
    "delete_social_account": {
        "name": "delete_social_account",
        "description": "Disconnect a social media account.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "accountId": {"type": "string", "description": "Account ID to delete"},
                "companyId": {"type": "string", "description": "Company ID"},
                "userId": {"type": "string", "description": "User ID"},
                "locationId": _LOCATION,
            },
            "required": ["accountId"],
        },
    },
    "get_social_categories": {
        "name": "get_social_categories",
        "description": "Get social media post categories.",
        "inputSchema": {
            "type": "object",
            "properties": _listing_properties(),
            "required": [],
        },
    },
    "get_social_category": {
        "name": "get_social_category",
        "description": "Get a specific social media category by ID.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "categoryId": {"type": "string", "description": "Category ID"},
                "locationId": _LOCATION,
            },
            "required": ["categoryId"],
        },
    },
    "get_social_tags": {
        "name": "get_social_tags",
        "description": "Get social media post tags.",
        "inputSchema": {
            "type": "object",
            "properties": _listing_properties(),
            "required": [],
        },
    },
    "get_social_tags_by_ids": {
        "name": "get_social_tags_by_ids",
        "description": "Get specific social media tags by their IDs.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "tagIds": {"type": "array", "items": {"type": "string"}, "description": "Tag IDs"},
                "locationId": _LOCATION,
            },
            "required": ["tagIds"],
        },
    },
    "start_social_oauth": {
        "name": "start_social_oauth",
        "description": "Start the OAuth flow to connect a social media platform.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "platform": {"type": "string", "enum": PLATFORMS, "description": "Social platform"},
                "userId": {"type": "string", "description": "User ID initiating OAuth"},
                "page": {"type": "string", "description": "Page context"},
                "reconnect": {"type": "boolean", "description": "Whether this is a reconnection"},
                "locationId": _LOCATION,
            },
            "required": ["platform", "userId"],
        },
    },
    "get_platform_accounts": {
        "name": "get_platform_accounts",
        "description": "List the pages/profiles available to connect for a platform after OAuth.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "platform": {"type": "string", "enum": PLATFORMS, "description": "Social platform"},
                "accountId": {"type": "string", "description": "OAuth account ID"},
                "locationId": _LOCATION,
            },
            "required": ["platform", "accountId"],
        },
    },
}

FAILURE_MESSAGES: Dict[str, str] = {
    "search_social_posts": "Failed to search social media posts",
    "create_social_post": "Failed to create social media post",
    "get_social_post": "Failed to get social media post",
    "update_social_post": "Failed to update social media post",
    "delete_social_post": "Failed to delete social media post",
    "bulk_delete_social_posts": "Failed to bulk delete social media posts",
    "get_social_accounts": "Failed to get social media accounts",
    "delete_social_account": "Failed to delete social media account",
    "get_social_categories": "Failed to get social media categories",
    "get_social_category": "Failed to get social media category",
    "get_social_tags": "Failed to get social media tags",
    "get_social_tags_by_ids": "Failed to get social media tags by IDs",
    "start_social_oauth": "Failed to start social media OAuth",
    "get_platform_accounts": "Failed to get platform accounts",
}


# ---------------------------------------------------------------------------
# Extraction (raw payload -> canonical shape)
# ---------------------------------------------------------------------------

def extract_post_search(payload: Any) -> Dict[str, Any]:
    """Posts and total count, nested under `results`."""
    posts = as_list(dig(payload, "results", "posts"))
    return {"posts": posts, "count": as_count(dig(payload, "results", "count"), len(posts))}


def extract_post(payload: Any) -> Dict[str, Any]:
    """A single post, found under `results.post` or `post`."""
    return require_mapping(payload, ("results", "post"), ("post",))


def extract_optional_post(payload: Any) -> Dict[str, Any] | None:
    post = first_present(payload, ("results", "post"), ("post",))
    return post if isinstance(post, dict) else None


def extract_deleted_count(payload: Any) -> int:
    return as_count(first_present(payload, ("deletedCount",), ("results", "deletedCount")))


def extract_accounts(payload: Any) -> Dict[str, Any]:
    return {
        "accounts": as_list(dig(payload, "results", "accounts")),
        "groups": as_list(dig(payload, "results", "groups")),
    }


def extract_collection(payload: Any, key: str) -> Dict[str, Any]:
    """A flat collection plus count; the count falls back to the list length."""
    items = as_list(first_present(payload, (key,), ("results", key)))
    count = as_count(first_present(payload, ("count",), ("results", "count")), len(items))
    return {key: items, "count": count}


def extract_category(payload: Any) -> Dict[str, Any]:
    return require_mapping(payload, ("category",), ("results", "category"))


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

async def _call(ctx: ToolContext, capability: str, params: Dict[str, Any], operation: str) -> Any:
    return await ctx.call(capability, params, FAILURE_MESSAGES[operation])


def _check_schedule(status: str | None, schedule_date: str | None) -> None:
    if status == "scheduled" and not schedule_date:
        raise ValidationError(
            "status='scheduled' requires scheduleDate",
            fields=["status", "scheduleDate"],
        )


def _optional_post_fields(args: Dict[str, Any]) -> Dict[str, Any]:
    return compact({
        "scheduleDate": args.get("scheduleDate"),
        "followUpComment": args.get("followUpComment"),
        "tags": args.get("tags"),
        "categoryId": args.get("categoryId"),
        "tiktokPostDetails": args.get("tiktokPostDetails"),
        "gmbPostDetails": args.get("gmbPostDetails"),
    })


async def search_social_posts(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Search posts inside a time window (defaults to the last 30 days)."""
    location_id = ctx.resolve_location(args.get("locationId"))
    from_date, to_date = resolve_time_window(
        args.get("fromDate"), args.get("toDate"), SEARCH_WINDOW_DAYS
    )
    logger.info(f"search_social_posts (type={args['type']}, {from_date} to {to_date})")

    payload = await _call(ctx, "search_social_posts", compact({
        "locationId": location_id,
        "type": args["type"],
        "accounts": args.get("accounts"),
        "skip": str(args["skip"]),
        "limit": str(args["limit"]),
        "fromDate": from_date,
        "toDate": to_date,
        "includeUsers": "true" if args["includeUsers"] else "false",
        "postType": args.get("postType"),
    }), "search_social_posts")

    result = extract_post_search(payload)
    count = result["count"]
    return ToolResult(
        data={**result, "fromDate": from_date, "toDate": to_date},
        message=f"Found {count} social media posts ({from_date} to {to_date})",
        metadata={"count": count, "returned": len(result["posts"])},
    )


async def create_social_post(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    status = args.get("status")
    _check_schedule(status, args.get("scheduleDate"))
    location_id = ctx.resolve_location(args.get("locationId"))

    # The API requires media as a list and non-empty userId/createdBy
    body = {
        "locationId": location_id,
        "accountIds": args["accountIds"],
        "summary": args["summary"],
        "type": args.get("type") or "post",
        "media": args.get("media") or [],
        "userId": args.get("userId") or args.get("createdBy") or DEFAULT_AUTHOR_ID,
        "createdBy": args.get("createdBy") or args.get("userId") or DEFAULT_AUTHOR_ID,
        **compact({"status": status}),
        **_optional_post_fields(args),
    }

    payload = await _call(ctx, "create_social_post", body, "create_social_post")
    post = extract_post(payload)
    post_id = record_id(post)

    suffix = " and scheduled" if status == "scheduled" else " as draft" if status == "draft" else ""
    return ToolResult(
        data={"post": post, "postId": post_id},
        message=f"Social media post created successfully{suffix}",
        metadata={"postId": post_id},
    )


async def get_social_post(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(
        ctx, "get_social_post",
        {"locationId": location_id, "postId": args["postId"]},
        "get_social_post",
    )
    post = extract_post(payload)
    return ToolResult(
        data={"post": post, "postId": record_id(post) or args["postId"]},
        message=f"Retrieved social media post {args['postId']}",
    )


async def update_social_post(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Update a post, keeping the current status/type/media/schedule unless changed.

    The existing post is read first so an update never publishes a draft
    by accident.
    """
    location_id = ctx.resolve_location(args.get("locationId"))
    post_id = args["postId"]

    existing_payload = await _call(
        ctx, "get_social_post",
        {"locationId": location_id, "postId": post_id},
        "update_social_post",
    )
    existing = extract_optional_post(existing_payload) or {}
    _check_schedule(
        args.get("status"), args.get("scheduleDate") or existing.get("scheduleDate")
    )

    body = {
        "locationId": location_id,
        "postId": post_id,
        "accountIds": args["accountIds"],
        "summary": args["summary"],
        "type": args.get("type") or existing.get("type") or "post",
        "media": args.get("media") or existing.get("media") or [],
        "userId": args.get("userId") or DEFAULT_AUTHOR_ID,
        "createdBy": args.get("createdBy") or args.get("userId") or DEFAULT_AUTHOR_ID,
        "status": args.get("status") or existing.get("status") or "draft",
        **_optional_post_fields(args),
        **compact({"scheduleTimeUpdated": args.get("scheduleTimeUpdated")}),
    }
    if not args.get("scheduleDate") and existing.get("scheduleDate"):
        body["scheduleDate"] = existing["scheduleDate"]

    payload = await _call(ctx, "update_social_post", body, "update_social_post")
    post = extract_optional_post(payload)
    suffix = " and rescheduled" if args.get("scheduleDate") else ""
    return ToolResult(
        data={"post": post, "postId": (record_id(post) if post else None) or post_id},
        message=f"Social media post updated successfully{suffix}",
    )


async def delete_social_post(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    await _call(
        ctx, "delete_social_post",
        {"locationId": location_id, "postId": args["postId"]},
        "delete_social_post",
    )
    return ToolResult(
        data={"postId": args["postId"], "deleted": True},
        message=f"Social media post {args['postId']} deleted successfully",
    )


async def bulk_delete_social_posts(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Delete several posts in one backend call.

    Only the aggregate deleted count is reported; the backend gives no
    per-post status.
    """
    post_ids = args["postIds"]

    if not post_ids:
        deleted = 0
    else:
        location_id = ctx.resolve_location(args.get("locationId"))
        payload = await _call(
            ctx, "bulk_delete_social_posts",
            {"locationId": location_id, "postIds": post_ids},
            "bulk_delete_social_posts",
        )
        deleted = extract_deleted_count(payload)

    return ToolResult(
        data={"deletedCount": deleted, "requestedCount": len(post_ids)},
        message=f"{deleted} social media posts deleted successfully",
        metadata={"deletedCount": deleted, "requestedCount": len(post_ids)},
    )


async def get_social_accounts(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(
        ctx, "get_social_accounts", {"locationId": location_id}, "get_social_accounts"
    )
    result = extract_accounts(payload)
    return ToolResult(
        data=result,
        message=(
            f"Retrieved {len(result['accounts'])} social media accounts "
            f"and {len(result['groups'])} groups"
        ),
        metadata={"accountCount": len(result["accounts"]), "groupCount": len(result["groups"])},
    )


async def delete_social_account(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    await _call(ctx, "delete_social_account", compact({
        "locationId": location_id,
        "accountId": args["accountId"],
        "companyId": args.get("companyId"),
        "userId": args.get("userId"),
    }), "delete_social_account")
    return ToolResult(
        data={"accountId": args["accountId"], "deleted": True},
        message=f"Social media account {args['accountId']} deleted successfully",
    )


async def _list_collection(
    args: Dict[str, Any], ctx: ToolContext, operation: str, key: str, label: str
) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, operation, compact({
        "locationId": location_id,
        "searchText": args.get("searchText"),
        "limit": args["limit"],
        "skip": args["skip"],
    }), operation)
    result = extract_collection(payload, key)
    return ToolResult(
        data=result,
        message=f"Retrieved {result['count']} social media {label}",
        metadata={"count": result["count"]},
    )


async def get_social_categories(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    return await _list_collection(args, ctx, "get_social_categories", "categories", "categories")


async def get_social_category(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(
        ctx, "get_social_category",
        {"locationId": location_id, "categoryId": args["categoryId"]},
        "get_social_category",
    )
    return ToolResult(
        data={"category": extract_category(payload)},
        message=f"Retrieved social media category {args['categoryId']}",
    )


async def get_social_tags(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    return await _list_collection(args, ctx, "get_social_tags", "tags", "tags")


async def get_social_tags_by_ids(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(
        ctx, "get_social_tags_by_ids",
        {"locationId": location_id, "tagIds": args["tagIds"]},
        "get_social_tags_by_ids",
    )
    result = extract_collection(payload, "tags")
    return ToolResult(
        data=result,
        message=f"Retrieved {result['count']} social media tags by IDs",
        metadata={"count": result["count"]},
    )


async def start_social_oauth(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "start_social_oauth", compact({
        "platform": args["platform"],
        "locationId": location_id,
        "userId": args["userId"],
        "page": args.get("page"),
        "reconnect": args.get("reconnect"),
    }), "start_social_oauth")
    return ToolResult(
        data={"platform": args["platform"], "oauthData": payload},
        message=f"OAuth process started for {args['platform']}",
    )


async def get_platform_accounts(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    platform = args["platform"]
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(
        ctx, PLATFORM_CAPABILITIES[platform],
        {"locationId": location_id, "accountId": args["accountId"]},
        "get_platform_accounts",
    )
    return ToolResult(
        data={"platform": platform, "platformAccounts": payload},
        message=f"Retrieved {platform} accounts for OAuth ID {args['accountId']}",
    )


HANDLERS = {
    "search_social_posts": search_social_posts,
    "create_social_post": create_social_post,
    "get_social_post": get_social_post,
    "update_social_post": update_social_post,
    "delete_social_post": delete_social_post,
    "bulk_delete_social_posts": bulk_delete_social_posts,
    "get_social_accounts": get_social_accounts,
    "delete_social_account": delete_social_account,
    "get_social_categories": get_social_categories,
    "get_social_category": get_social_category,
    "get_social_tags": get_social_tags,
    "get_social_tags_by_ids": get_social_tags_by_ids,
    "start_social_oauth": start_social_oauth,
    "get_platform_accounts": get_platform_accounts,
}
