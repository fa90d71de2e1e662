"""Constants for MCP Server.

This module defines the error codes, message templates and shared defaults
used throughout the MCP server to avoid magic strings.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Error code identifiers carried in failure envelopes."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    BACKEND_FAILURE = "BACKEND_FAILURE"
    UNEXPECTED_SHAPE = "UNEXPECTED_SHAPE"


class ErrorMessage:
    """Error message templates."""

    UNKNOWN_OPERATION = "Unknown operation: '{name}'"
    INVALID_ARGUMENTS = "Invalid arguments for {name}"
    MISSING_LOCATION = (
        "No location ID provided and no default location configured. "
        "Pass locationId or set GHL_LOCATION_ID."
    )
    UNEXPECTED_SHAPE = "Backend response is missing expected field '{path}'"
    SLUG_CONFLICT = (
        'Blog post slug already exists: "{slug}". '
        "Use check_url_slug to find an available slug or choose a different one."
    )


# Pagination defaults shared by list/search operations
DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0

# Search window for time-ranged searches
SEARCH_WINDOW_DAYS = 30

# Batch bounds
MAX_BULK_DELETE = 50

# Placeholder author the API requires when the caller gives none
DEFAULT_AUTHOR_ID = "mcp-server"
