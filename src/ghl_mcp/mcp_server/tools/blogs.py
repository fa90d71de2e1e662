"""Blog tools: posts, sites, authors, categories and slug checks."""

import logging
from typing import Any, Dict

from ..constants import DEFAULT_LIMIT, DEFAULT_OFFSET, ErrorMessage
from ..context import ToolContext
from ..envelope import ToolResult
from ..errors import BackendFailureError
from .normalize import as_list, compact, dig, iso_timestamp, record_id, require_mapping, require_value, utcnow

logger = logging.getLogger(__name__)

POST_STATUSES = ["DRAFT", "PUBLISHED", "SCHEDULED", "ARCHIVED"]

_LOCATION = {
    "type": "string",
    "description": "Location ID (uses default if not provided)",
}


def _page(limit_name: str, offset_name: str) -> Dict[str, Any]:
    return {
        limit_name: {
            "type": "integer",
            "minimum": 1,
            "maximum": 100,
            "default": DEFAULT_LIMIT,
            "description": "Number of items to retrieve (default: 10)",
        },
        offset_name: {
            "type": "integer",
            "minimum": 0,
            "default": DEFAULT_OFFSET,
            "description": "Number of items to skip (default: 0)",
        },
    }


SCHEMAS: Dict[str, Dict[str, Any]] = {
    "create_blog_post": {
        "name": "create_blog_post",
        "description": (
            "Create a blog post. Use get_blog_sites, get_blog_authors and "
            "get_blog_categories to find IDs, and check_url_slug to verify the slug."
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Blog post title"},
                "blogId": {"type": "string", "description": "Blog site ID"},
                "content": {"type": "string", "description": "Full HTML content"},
                "description": {"type": "string", "description": "Short description/excerpt"},
                "imageUrl": {"type": "string", "description": "Featured image URL"},
                "imageAltText": {"type": "string", "description": "Alt text for the featured image"},
                "urlSlug": {"type": "string", "description": "URL slug"},
                "author": {"type": "string", "description": "Author ID"},
                "categories": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Category IDs",
                },
                "tags": {"type": "array", "items": {"type": "string"}, "description": "Tags"},
                "status": {
                    "type": "string",
                    "enum": POST_STATUSES,
                    "default": "DRAFT",
                    "description": "Publication status (default: DRAFT)",
                },
                "canonicalLink": {"type": "string", "description": "Canonical URL for SEO"},
                "publishedAt": {
                    "type": "string",
                    "description": "ISO timestamp of publication (defaults to now)",
                },
                "locationId": _LOCATION,
            },
            "required": [
                "title", "blogId", "content", "description", "imageUrl",
                "imageAltText", "urlSlug", "author", "categories",
            ],
        },
    },
    "update_blog_post": {
        "name": "update_blog_post",
        "description": "Update a blog post. Only the fields given are changed.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "postId": {"type": "string", "description": "Blog post ID"},
                "blogId": {"type": "string", "description": "Blog site ID containing the post"},
                "title": {"type": "string"},
                "content": {"type": "string", "description": "HTML content"},
                "description": {"type": "string"},
                "imageUrl": {"type": "string"},
                "imageAltText": {"type": "string"},
                "urlSlug": {"type": "string"},
                "author": {"type": "string", "description": "Author ID"},
                "categories": {"type": "array", "items": {"type": "string"}},
                "tags": {"type": "array", "items": {"type": "string"}},
                "status": {"type": "string", "enum": POST_STATUSES},
                "canonicalLink": {"type": "string"},
                "publishedAt": {"type": "string"},
                "locationId": _LOCATION,
            },
            "required": ["postId", "blogId"],
        },
    },
    "get_blog_posts": {
        "name": "get_blog_posts",
        "description": "List blog posts of a blog site, optionally filtered by search term or status.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "blogId": {"type": "string", "description": "Blog site ID"},
                **_page("limit", "offset"),
                "searchTerm": {"type": "string", "description": "Filter by title or content"},
                "status": {"type": "string", "enum": POST_STATUSES},
                "locationId": _LOCATION,
            },
            "required": ["blogId"],
        },
    },
    "get_blog_sites": {
        "name": "get_blog_sites",
        "description": "List the blog sites of a location.",
        "inputSchema": {
            "type": "object",
            "properties": {
                **_page("limit", "skip"),
                "searchTerm": {"type": "string", "description": "Filter blogs by name"},
                "locationId": _LOCATION,
            },
            "required": [],
        },
    },
    "get_blog_authors": {
        "name": "get_blog_authors",
        "description": "List blog authors (to find author IDs).",
        "inputSchema": {
            "type": "object",
            "properties": {**_page("limit", "offset"), "locationId": _LOCATION},
            "required": [],
        },
    },
    "get_blog_categories": {
        "name": "get_blog_categories",
        "description": "List blog categories (to find category IDs).",
        "inputSchema": {
            "type": "object",
            "properties": {**_page("limit", "offset"), "locationId": _LOCATION},
            "required": [],
        },
    },
    "check_url_slug": {
        "name": "check_url_slug",
        "description": "Check whether a URL slug is available.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "urlSlug": {"type": "string", "description": "URL slug to check"},
                "postId": {
                    "type": "string",
                    "description": "Post ID to exclude from the check when updating",
                },
                "locationId": _LOCATION,
            },
            "required": ["urlSlug"],
        },
    },
}

FAILURE_MESSAGES: Dict[str, str] = {
    "create_blog_post": "Failed to create blog post",
    "update_blog_post": "Failed to update blog post",
    "get_blog_posts": "Failed to get blog posts",
    "get_blog_sites": "Failed to get blog sites",
    "get_blog_authors": "Failed to get blog authors",
    "get_blog_categories": "Failed to get blog categories",
    "check_url_slug": "Failed to check URL slug",
}


def extract_created_post(payload: Any) -> Dict[str, Any]:
    """The created post sits under a `data` wrapper and must carry an id."""
    post = require_mapping(payload, ("data",))
    require_value(post, "_id")
    return post


def extract_updated_post(payload: Any) -> Dict[str, Any]:
    return require_mapping(payload, ("updatedBlogPost",))


def extract_list(payload: Any, *path: str) -> list[Any]:
    return as_list(dig(payload, *path))


def is_slug_conflict(error: BackendFailureError) -> bool:
    if error.status_code == 409:
        return True
    text = error.message.lower()
    return "slug" in text or "already exists" in text


async def _call(ctx: ToolContext, capability: str, params: Dict[str, Any]) -> Any:
    return await ctx.call(capability, params, FAILURE_MESSAGES[capability])


async def create_blog_post(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    """Create a blog post; slug conflicts get a hint to use check_url_slug."""
    location_id = ctx.resolve_location(args.get("locationId"))
    body = compact({
        "title": args["title"],
        "locationId": location_id,
        "blogId": args["blogId"],
        "imageUrl": args["imageUrl"],
        "description": args["description"],
        "rawHTML": args["content"],
        "status": args["status"],
        "imageAltText": args["imageAltText"],
        "categories": args["categories"],
        "tags": args.get("tags") or [],
        "author": args["author"],
        "urlSlug": args["urlSlug"],
        "canonicalLink": args.get("canonicalLink"),
        "publishedAt": args.get("publishedAt") or iso_timestamp(utcnow()),
    })

    try:
        payload = await _call(ctx, "create_blog_post", body)
    except BackendFailureError as e:
        if not is_slug_conflict(e):
            raise
        logger.warning(f"Slug conflict creating blog post '{args['urlSlug']}'")
        raise BackendFailureError(
            ErrorMessage.SLUG_CONFLICT.format(slug=args["urlSlug"]),
            status_code=e.status_code,
            details={**e.details, "urlSlug": args["urlSlug"], "original_error": e.message},
        ) from e

    post = extract_created_post(payload)
    post_id = record_id(post)
    return ToolResult(
        data={"blogPost": post, "postId": post_id},
        message=f'Blog post "{args["title"]}" created successfully with ID: {post_id}',
        metadata={"postId": post_id},
    )


async def update_blog_post(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    body = {"postId": args["postId"], "locationId": location_id, "blogId": args["blogId"]}
    for key in (
        "title", "description", "imageUrl", "imageAltText", "urlSlug", "author",
        "categories", "tags", "status", "canonicalLink", "publishedAt",
    ):
        if args.get(key) is not None:
            body[key] = args[key]
    if args.get("content") is not None:
        body["rawHTML"] = args["content"]

    payload = await _call(ctx, "update_blog_post", body)
    return ToolResult(
        data={"blogPost": extract_updated_post(payload), "postId": args["postId"]},
        message="Blog post updated successfully",
    )


async def get_blog_posts(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "get_blog_posts", compact({
        "locationId": location_id,
        "blogId": args["blogId"],
        "limit": args["limit"],
        "offset": args["offset"],
        "searchTerm": args.get("searchTerm"),
        "status": args.get("status"),
    }))
    posts = extract_list(payload, "blogs")
    return ToolResult(
        data={"posts": posts, "count": len(posts)},
        message=f"Retrieved {len(posts)} blog posts from blog {args['blogId']}",
        metadata={"count": len(posts)},
    )


async def get_blog_sites(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "get_blog_sites", compact({
        "locationId": location_id,
        "skip": args["skip"],
        "limit": args["limit"],
        "searchTerm": args.get("searchTerm"),
    }))
    sites = extract_list(payload, "data")
    return ToolResult(
        data={"sites": sites, "count": len(sites)},
        message=f"Retrieved {len(sites)} blog sites",
        metadata={"count": len(sites)},
    )


async def get_blog_authors(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "get_blog_authors", {
        "locationId": location_id,
        "limit": args["limit"],
        "offset": args["offset"],
    })
    authors = extract_list(payload, "authors")
    return ToolResult(
        data={"authors": authors, "count": len(authors)},
        message=f"Retrieved {len(authors)} blog authors",
        metadata={"count": len(authors)},
    )


async def get_blog_categories(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    payload = await _call(ctx, "get_blog_categories", {
        "locationId": location_id,
        "limit": args["limit"],
        "offset": args["offset"],
    })
    categories = extract_list(payload, "categories")
    return ToolResult(
        data={"categories": categories, "count": len(categories)},
        message=f"Retrieved {len(categories)} blog categories",
        metadata={"count": len(categories)},
    )


async def check_url_slug(args: Dict[str, Any], ctx: ToolContext) -> ToolResult:
    location_id = ctx.resolve_location(args.get("locationId"))
    slug = args["urlSlug"]
    payload = await _call(ctx, "check_url_slug", compact({
        "locationId": location_id,
        "urlSlug": slug,
        "postId": args.get("postId"),
    }))
    exists = bool(require_value(payload, "exists"))
    message = f'URL slug "{slug}" is already in use' if exists else f'URL slug "{slug}" is available'
    return ToolResult(
        data={"urlSlug": slug, "exists": exists, "available": not exists},
        message=message,
    )


HANDLERS = {
    "create_blog_post": create_blog_post,
    "update_blog_post": update_blog_post,
    "get_blog_posts": get_blog_posts,
    "get_blog_sites": get_blog_sites,
    "get_blog_authors": get_blog_authors,
    "get_blog_categories": get_blog_categories,
    "check_url_slug": check_url_slug,
}
