"""Endpoint table for the GHL REST API.

Maps every backend capability to an HTTP method and path template.
Placeholders in the path are filled from the call parameters; whatever is
left goes to the query string (GET/DELETE) or the JSON body (POST/PUT).
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Endpoint:
    """A single remote capability."""

    method: str
    path: str
    # Keys that always travel in the query string, even for POST/PUT.
    query_keys: Tuple[str, ...] = ()


_SOCIAL = "/social-media-posting/{locationId}"
_OAUTH = "/social-media-posting/oauth/{locationId}"

ENDPOINTS: Dict[str, Endpoint] = {
    # Social media posting
    "search_social_posts": Endpoint("POST", f"{_SOCIAL}/posts/list"),
    "create_social_post": Endpoint("POST", f"{_SOCIAL}/posts"),
    "get_social_post": Endpoint("GET", f"{_SOCIAL}/posts/{{postId}}"),
    "update_social_post": Endpoint("PUT", f"{_SOCIAL}/posts/{{postId}}"),
    "delete_social_post": Endpoint("DELETE", f"{_SOCIAL}/posts/{{postId}}"),
    "bulk_delete_social_posts": Endpoint("POST", f"{_SOCIAL}/posts/bulk-delete"),
    "get_social_accounts": Endpoint("GET", f"{_SOCIAL}/accounts"),
    "delete_social_account": Endpoint("DELETE", f"{_SOCIAL}/accounts/{{accountId}}"),
    "get_social_categories": Endpoint("GET", f"{_SOCIAL}/categories"),
    "get_social_category": Endpoint("GET", f"{_SOCIAL}/categories/{{categoryId}}"),
    "get_social_tags": Endpoint("GET", f"{_SOCIAL}/tags"),
    "get_social_tags_by_ids": Endpoint("POST", f"{_SOCIAL}/tags/details"),
    "start_social_oauth": Endpoint("GET", "/social-media-posting/oauth/{platform}/start"),
    "get_google_business_locations": Endpoint("GET", f"{_OAUTH}/google/locations/{{accountId}}"),
    "get_facebook_pages": Endpoint("GET", f"{_OAUTH}/facebook/accounts/{{accountId}}"),
    "get_instagram_accounts": Endpoint("GET", f"{_OAUTH}/instagram/accounts/{{accountId}}"),
    "get_linkedin_accounts": Endpoint("GET", f"{_OAUTH}/linkedin/accounts/{{accountId}}"),
    "get_twitter_profile": Endpoint("GET", f"{_OAUTH}/twitter/accounts/{{accountId}}"),
    "get_tiktok_profile": Endpoint("GET", f"{_OAUTH}/tiktok/accounts/{{accountId}}"),
    "get_tiktok_business_profile": Endpoint("GET", f"{_OAUTH}/tiktok-business/accounts/{{accountId}}"),
    # Custom fields v2
    "get_custom_field_by_id": Endpoint("GET", "/custom-fields/{id}"),
    "create_custom_field": Endpoint("POST", "/custom-fields/"),
    "update_custom_field": Endpoint("PUT", "/custom-fields/{id}"),
    "delete_custom_field": Endpoint("DELETE", "/custom-fields/{id}"),
    "get_custom_fields_by_object_key": Endpoint("GET", "/custom-fields/object-key/{objectKey}"),
    "create_custom_field_folder": Endpoint("POST", "/custom-fields/folder"),
    "update_custom_field_folder": Endpoint("PUT", "/custom-fields/folder/{id}"),
    "delete_custom_field_folder": Endpoint("DELETE", "/custom-fields/folder/{id}"),
    # Blogs
    "create_blog_post": Endpoint("POST", "/blogs/posts"),
    "update_blog_post": Endpoint("PUT", "/blogs/posts/{postId}"),
    "get_blog_posts": Endpoint("GET", "/blogs/posts/all"),
    "get_blog_sites": Endpoint("GET", "/blogs/site/all"),
    "get_blog_authors": Endpoint("GET", "/blogs/authors"),
    "get_blog_categories": Endpoint("GET", "/blogs/categories"),
    "check_url_slug": Endpoint("GET", "/blogs/posts/url-slug-exists"),
    # Custom objects
    "get_all_objects": Endpoint("GET", "/objects/"),
    "create_object_schema": Endpoint("POST", "/objects/"),
    "get_object_schema": Endpoint("GET", "/objects/{key}"),
    "update_object_schema": Endpoint("PUT", "/objects/{key}"),
    "create_object_record": Endpoint("POST", "/objects/{schemaKey}/records"),
    "get_object_record": Endpoint("GET", "/objects/{schemaKey}/records/{recordId}"),
    "update_object_record": Endpoint(
        "PUT", "/objects/{schemaKey}/records/{recordId}", query_keys=("locationId",)
    ),
    "delete_object_record": Endpoint("DELETE", "/objects/{schemaKey}/records/{recordId}"),
    "search_object_records": Endpoint("POST", "/objects/{schemaKey}/records/search"),
}


def get_endpoint(capability: str) -> Endpoint:
    """Look up the endpoint for a capability.

    Raises:
        KeyError: If the capability is not mapped
    """
    try:
        return ENDPOINTS[capability]
    except KeyError:
        raise KeyError(f"No endpoint mapped for capability '{capability}'") from None
