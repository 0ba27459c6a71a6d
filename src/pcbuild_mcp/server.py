"""PC Build MCP Server - Check PC component compatibility from retail listings."""

import logging
import time
from typing import Any

from fastmcp import FastMCP
from mcp.types import ToolAnnotations
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from . import __version__
from .cache import TTLCache, tag_with_cache
from .config import HTTP_PORT, RATE_LIMIT_REQUESTS, SPEC_CACHE_MAX_SIZE, SPEC_CACHE_TTL
from .engine import evaluate, filter_by_compatibility, summarize_build as summarize, with_included_psu
from .models import Candidate, Category, Listing
from .payloads import (
    PayloadError,
    build_from_payload,
    build_to_dict,
    evaluated_to_dict,
    listing_from_dict,
    listings_from_payload,
    parse_category,
    result_to_dict,
)

logger = logging.getLogger(__name__)

_spec_cache = TTLCache(ttl=SPEC_CACHE_TTL, max_size=SPEC_CACHE_MAX_SIZE)


def _tag(listing: Listing, category: Category) -> Candidate:
    return tag_with_cache(_spec_cache, listing, category)


# Create MCP server
mcp = FastMCP(
    name="pcbuild",
    instructions=(
        "PC build compatibility checks from unstructured retail listings. No auth required. "
        "Listings are objects with title, description, attributeGroups and categories. "
        "A build maps category (cpu, motherboard, ram, gpu, case, psu, storage, cooler) to a listing. "
        "Use filter_listings to rank search results against the current build and "
        "summarize_build before checkout. 'warn' and 'unknown' verdicts mean verify manually."
    ),
)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware - requests/minute per IP.

    Caps the number of tracked IPs and periodically drops stale ones so
    spoofed addresses cannot exhaust memory.
    """

    MAX_TRACKED_IPS = 10_000

    def __init__(self, app, requests_per_minute: int = RATE_LIMIT_REQUESTS):
        super().__init__(app)
        self.requests_per_minute = requests_per_minute
        self.request_counts: dict[str, list[float]] = {}
        self._last_cleanup = time.time()

    def _get_client_ip(self, request) -> str:
        """Client IP, preferring the rightmost X-Forwarded-For entry (set by our proxy)."""
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            ips = [ip.strip() for ip in forwarded.split(",")]
            return ips[-1] if ips else "unknown"
        return request.client.host if request.client else "unknown"

    def _cleanup_stale_ips(self, now: float) -> None:
        window_start = now - 60
        stale = [ip for ip, stamps in self.request_counts.items() if not stamps or stamps[-1] < window_start]
        for ip in stale:
            del self.request_counts[ip]

    def _check_rate_limit(self, client_ip: str) -> bool:
        """True when client_ip is over its budget for the last minute."""
        now = time.time()
        window_start = now - 60

        if now - self._last_cleanup > 60:
            self._cleanup_stale_ips(now)
            self._last_cleanup = now

        if len(self.request_counts) >= self.MAX_TRACKED_IPS:
            self._cleanup_stale_ips(now)
            if len(self.request_counts) >= self.MAX_TRACKED_IPS:
                return True

        recent = [t for t in self.request_counts.get(client_ip, []) if t > window_start]
        if len(recent) >= self.requests_per_minute:
            self.request_counts[client_ip] = recent
            return True
        recent.append(now)
        self.request_counts[client_ip] = recent
        return False

    async def dispatch(self, request, call_next):
        if request.url.path == "/health":
            return await call_next(request)

        if self._check_rate_limit(self._get_client_ip(request)):
            return JSONResponse(
                status_code=429,
                content={"error": "Rate limit exceeded", "retry_after": 60},
                headers={"Retry-After": "60"},
            )
        return await call_next(request)


_READ_ONLY = dict(
    readOnlyHint=True,
    destructiveHint=False,
    idempotentHint=True,
    openWorldHint=False,
)


# Tools

@mcp.tool(annotations=ToolAnnotations(title="Extract Component Specs", **_READ_ONLY))
async def extract_specs(listing: dict[str, Any] | str, category: str) -> dict:
    """Extract normalized engineering specs from one retail listing.

    Args:
        listing: Catalog item with title, description, attributeGroups, categories, id
        category: cpu, motherboard, ram, gpu, case, psu, storage or cooler

    Returns:
        Known spec fields only (socket, form_factor, gpu_length, ...). Missing fields are unknown.
    """
    try:
        parsed_category = parse_category(category)
        candidate = _tag(listing_from_dict(listing), parsed_category)
    except PayloadError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error(f"extract_specs failed: {type(e).__name__}: {e}")
        return {"error": "Spec extraction failed. Check server logs for details."}

    return {
        "category": parsed_category.value,
        "id": candidate.listing.id or None,
        "title": candidate.listing.title,
        "spec": candidate.spec.to_dict(),
    }


@mcp.tool(annotations=ToolAnnotations(title="Check Compatibility", **_READ_ONLY))
async def check_compatibility(
    listing: dict[str, Any] | str,
    category: str,
    build: dict[str, Any] | str | None = None,
) -> dict:
    """Check one listing against the components already selected.

    Args:
        listing: Candidate catalog item
        category: Category the candidate would fill
        build: Current selection, {category: listing} (a list uses its first entry)

    Returns:
        allowed, per-rule results, warnings, failures, has_unknown_checks and a display badge.
    """
    try:
        parsed_category = parse_category(category)
        candidate = _tag(listing_from_dict(listing), parsed_category)
        current = build_from_payload(build, _tag)
    except PayloadError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error(f"check_compatibility failed: {type(e).__name__}: {e}")
        return {"error": "Compatibility check failed. Check server logs for details."}

    result = evaluate(candidate, current)
    return {
        "category": parsed_category.value,
        "spec": candidate.spec.to_dict(),
        **result_to_dict(result),
    }


@mcp.tool(annotations=ToolAnnotations(title="Filter Listings by Compatibility", **_READ_ONLY))
async def filter_listings(
    listings: list[dict[str, Any]] | str,
    category: str,
    build: dict[str, Any] | str | None = None,
    include_incompatible: bool = False,
) -> dict:
    """Rank search results for one category against the current build.

    Order: fully compatible, then needs verification, then (if requested) incompatible.

    Args:
        listings: Catalog items to evaluate
        category: Category the listings would fill
        build: Current selection, {category: listing}
        include_incompatible: Keep listings with a failing rule (sorted last)
    """
    try:
        parsed_category = parse_category(category)
        parsed_listings = listings_from_payload(listings)
        current = build_from_payload(build, _tag)
    except PayloadError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error(f"filter_listings failed: {type(e).__name__}: {e}")
        return {"error": "Filtering failed. Check server logs for details."}

    evaluated = filter_by_compatibility(parsed_listings, parsed_category, current, include_incompatible)
    return {
        "category": parsed_category.value,
        "evaluated": len(parsed_listings),
        "returned": len(evaluated),
        "results": [evaluated_to_dict(item) for item in evaluated],
    }


@mcp.tool(annotations=ToolAnnotations(title="Summarize Build", **_READ_ONLY))
async def summarize_build(
    build: dict[str, Any] | str,
    use_included_psu: bool = True,
) -> dict:
    """Build-wide verdict: compatibility, completeness and missing categories.

    Args:
        build: Current selection, {category: listing | [listings]}
        use_included_psu: When no PSU is selected and the case bundles one, count the bundled PSU

    Returns:
        is_complete, is_compatible, deduplicated warnings and failures, missing_categories.
    """
    try:
        current = build_from_payload(build, _tag)
    except PayloadError as e:
        return {"error": str(e)}
    except Exception as e:
        logger.error(f"summarize_build failed: {type(e).__name__}: {e}")
        return {"error": "Build summary failed. Check server logs for details."}

    if use_included_psu:
        current = with_included_psu(current)
    return {
        **summarize(current).to_dict(),
        "build": build_to_dict(current),
    }


# Health check endpoint
async def health(request):
    return JSONResponse({
        "status": "healthy",
        "service": "pcbuild-mcp",
        "version": __version__,
        "spec_cache_entries": len(_spec_cache),
    })


# Create ASGI app
def create_app():
    """Create the ASGI application."""
    middleware = [
        Middleware(RateLimitMiddleware, requests_per_minute=RATE_LIMIT_REQUESTS),
    ]

    # Stateless: MCP clients do not reliably forward session cookies
    app = mcp.http_app(
        path="/mcp",
        middleware=middleware,
        transport="streamable-http",
        stateless_http=True,
    )
    app.routes.append(Route("/health", health))
    return app


app = create_app()


class _HealthFilterLog(logging.Filter):
    """Suppress /health access logs from container healthchecks."""

    def filter(self, record: logging.LogRecord) -> bool:
        return "/health" not in record.getMessage()


def main():
    """Run the server."""
    import uvicorn

    logging.getLogger("uvicorn.access").addFilter(_HealthFilterLog())
    logger.info(f"Starting pcbuild-mcp {__version__} on port {HTTP_PORT}")

    uvicorn.run(
        "pcbuild_mcp.server:app",
        host="0.0.0.0",
        port=HTTP_PORT,
        lifespan="on",
    )


if __name__ == "__main__":
    main()
