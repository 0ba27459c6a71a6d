"""JSON payload parsing and serialization for the MCP tools.

Listings arrive in the catalog's camelCase shape (attributeGroups) or in
snake_case; both are accepted. Some MCP clients send object and array
parameters as JSON strings, which are decoded here too.
"""

import json
import logging
from typing import Any, Callable

from .config import MAX_LISTINGS_PER_REQUEST
from .engine import compatibility_badge
from .models import (
    Attribute,
    AttributeGroup,
    Build,
    Candidate,
    Category,
    CompatibilityResult,
    EvaluatedCandidate,
    Listing,
)

logger = logging.getLogger(__name__)

Tagger = Callable[[Listing, Category], Candidate]


class PayloadError(ValueError):
    """A tool argument could not be turned into engine input."""


def decode_json_param(value: Any, name: str) -> Any:
    """Decode a parameter that may come as a JSON string from some MCP clients."""
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except json.JSONDecodeError as e:
        logger.debug(f"Failed to parse {name} as JSON: {value[:100]!r}")
        raise PayloadError(f"{name} is not valid JSON") from e


def parse_category(value: Any) -> Category:
    if isinstance(value, Category):
        return value
    try:
        return Category(str(value).strip().lower())
    except ValueError:
        valid = ", ".join(c.value for c in Category)
        raise PayloadError(f"Unknown category {value!r}. Valid categories: {valid}") from None


def _attribute_groups(raw: Any) -> tuple[AttributeGroup, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise PayloadError("attributeGroups must be a list")
    groups = []
    for group in raw:
        if not isinstance(group, dict):
            raise PayloadError("Each attribute group must be an object")
        attributes = []
        for attr in group.get("attributes") or []:
            if not isinstance(attr, dict) or "name" not in attr:
                raise PayloadError("Each attribute must be an object with a name")
            value = attr.get("value")
            attributes.append(Attribute(str(attr["name"]), "" if value is None else str(value)))
        groups.append(AttributeGroup(str(group.get("name", "")), tuple(attributes)))
    return tuple(groups)


def _categories(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise PayloadError("categories must be a list")
    names = []
    for item in raw:
        if isinstance(item, dict):
            if item.get("name"):
                names.append(str(item["name"]))
        elif item is not None:
            names.append(str(item))
    return tuple(names)


def listing_from_dict(data: Any) -> Listing:
    """Build a Listing from a catalog item dict."""
    data = decode_json_param(data, "listing")
    if not isinstance(data, dict):
        raise PayloadError("listing must be an object")
    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise PayloadError("listing.title is required")

    raw_groups = data.get("attributeGroups", data.get("attribute_groups"))
    listing_id = data.get("id")
    return Listing(
        title=title,
        description=str(data.get("description") or ""),
        attribute_groups=_attribute_groups(raw_groups),
        categories=_categories(data.get("categories")),
        id="" if listing_id is None else str(listing_id),
    )


def listings_from_payload(data: Any) -> list[Listing]:
    data = decode_json_param(data, "listings")
    if not isinstance(data, list):
        raise PayloadError("listings must be a list")
    if len(data) > MAX_LISTINGS_PER_REQUEST:
        raise PayloadError(f"Too many listings (max {MAX_LISTINGS_PER_REQUEST} per request)")
    return [listing_from_dict(item) for item in data]


def build_from_payload(data: Any, tag: Tagger) -> dict[Category, Candidate]:
    """Parse {category: listing | [listing, ...]} into a Build.

    For multi-quantity categories (a list), the first entry represents the
    category. Empty lists and nulls leave the category unselected.
    """
    data = decode_json_param(data, "build")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PayloadError("build must be an object mapping category to listing")

    build: dict[Category, Candidate] = {}
    for key, value in data.items():
        category = parse_category(key)
        if isinstance(value, list):
            value = value[0] if value else None
        if value is None:
            continue
        build[category] = tag(listing_from_dict(value), category)
    return build


def result_to_dict(result: CompatibilityResult) -> dict[str, Any]:
    """Compatibility result plus its display badge."""
    badge = compatibility_badge(result)
    return {**result.to_dict(), "badge": {"label": badge.label, "color": badge.color}}


def evaluated_to_dict(item: EvaluatedCandidate) -> dict[str, Any]:
    listing = item.candidate.listing
    return {
        "id": listing.id or None,
        "title": listing.title,
        "spec": item.candidate.spec.to_dict(),
        "compatibility": result_to_dict(item.compatibility),
    }


def build_to_dict(build: Build) -> dict[str, Any]:
    """Selected categories and their specs, for echoing back to the caller."""
    return {
        category.value: {
            "id": candidate.listing.id or None,
            "title": candidate.listing.title,
            "spec": candidate.spec.to_dict(),
        }
        for category, candidate in build.items()
    }
