"""Tests for the MCP tool surface and HTTP plumbing."""

import json

import pytest
from pcbuild_mcp.engine import INCLUDED_PSU_ID
from pcbuild_mcp.server import (
    RateLimitMiddleware,
    check_compatibility,
    extract_specs,
    filter_listings,
    health,
    summarize_build,
)

BOARD = {"title": "Mother ASUS TUF GAMING B550-PLUS Socket AM4 DDR4"}


class TestExtractSpecsTool:

    @pytest.mark.asyncio
    async def test_extracts(self):
        result = await extract_specs(listing={"title": "AMD Ryzen 7 7800X3D", "id": "srv-cpu-1"}, category="CPU")
        assert result["category"] == "cpu"
        assert result["id"] == "srv-cpu-1"
        assert result["spec"]["socket"] == "AM5"
        assert result["spec"]["cpu_generation"] == "Ryzen 7000"

    @pytest.mark.asyncio
    async def test_unknown_category(self):
        result = await extract_specs(listing={"title": "x"}, category="monitor")
        assert "error" in result
        assert "Valid categories" in result["error"]

    @pytest.mark.asyncio
    async def test_missing_title(self):
        result = await extract_specs(listing={"description": "x"}, category="cpu")
        assert result == {"error": "listing.title is required"}


class TestCheckCompatibilityTool:

    @pytest.mark.asyncio
    async def test_socket_mismatch(self):
        result = await check_compatibility(
            listing={"title": "AMD Ryzen 7 7800X3D Socket AM5"},
            category="cpu",
            build={"motherboard": BOARD},
        )
        assert result["allowed"] is False
        assert result["failures"] == ["Socket mismatch: CPU uses AM5, motherboard uses AM4"]
        assert result["badge"]["label"] == "Incompatible"

    @pytest.mark.asyncio
    async def test_build_as_json_string(self):
        result = await check_compatibility(
            listing={"title": "AMD Ryzen 5 5600X Socket AM4"},
            category="cpu",
            build=json.dumps({"motherboard": BOARD}),
        )
        assert result["allowed"] is True
        assert result["badge"] == {"label": "Compatible", "color": "green"}

    @pytest.mark.asyncio
    async def test_no_build(self):
        result = await check_compatibility(listing={"title": "Fuente 650W"}, category="psu")
        assert result["allowed"] is True
        assert all(r["status"] == "pass" for r in result["results"])

    @pytest.mark.asyncio
    async def test_invalid_build(self):
        result = await check_compatibility(listing={"title": "x"}, category="cpu", build="{broken")
        assert result == {"error": "build is not valid JSON"}


class TestFilterListingsTool:

    LISTINGS = [
        {"id": "g1", "title": "Placa de Video RTX 4090", "description": "Longitud: 336mm"},
        {"id": "g2", "title": "Placa de Video RTX 4060", "description": "Longitud: 240mm"},
    ]
    BUILD = {"case": {"title": "Gabinete Mini-ITX", "description": "GPU hasta 300mm"}}

    @pytest.mark.asyncio
    async def test_filters(self):
        result = await filter_listings(listings=self.LISTINGS, category="gpu", build=self.BUILD)
        assert result["evaluated"] == 2
        assert result["returned"] == 1
        assert result["results"][0]["id"] == "g2"
        assert result["results"][0]["spec"]["gpu_length"] == 240

    @pytest.mark.asyncio
    async def test_include_incompatible(self):
        result = await filter_listings(
            listings=self.LISTINGS, category="gpu", build=self.BUILD, include_incompatible=True
        )
        assert [r["id"] for r in result["results"]] == ["g2", "g1"]
        assert result["results"][1]["compatibility"]["badge"]["color"] == "red"

    @pytest.mark.asyncio
    async def test_listings_must_be_list(self):
        result = await filter_listings(listings={"title": "x"}, category="gpu")
        assert result == {"error": "listings must be a list"}


class TestSummarizeBuildTool:

    BUILD = {"case": {"title": "Gabinete Sentey c/Fuente 600w"}}

    @pytest.mark.asyncio
    async def test_included_psu_used(self):
        result = await summarize_build(build=self.BUILD)
        assert "psu" not in result["missing_categories"]
        assert result["build"]["psu"]["id"] == INCLUDED_PSU_ID
        assert result["build"]["psu"]["spec"] == {"psu_wattage": 600}

    @pytest.mark.asyncio
    async def test_included_psu_ignored(self):
        result = await summarize_build(build=self.BUILD, use_included_psu=False)
        assert "psu" in result["missing_categories"]
        assert "psu" not in result["build"]

    @pytest.mark.asyncio
    async def test_missing_gpu(self):
        result = await summarize_build(build={"cpu": {"title": "AMD Ryzen 5 5600X Socket AM4"}})
        assert result["is_complete"] is False
        assert "gpu" in result["missing_categories"]


class TestHealth:

    @pytest.mark.asyncio
    async def test_health(self):
        response = await health(None)
        body = json.loads(response.body)
        assert body["status"] == "healthy"
        assert body["service"] == "pcbuild-mcp"
        assert isinstance(body["spec_cache_entries"], int)


class TestRateLimit:
    """Per-IP budget over a sliding minute."""

    def test_limit(self):
        limiter = RateLimitMiddleware(app=None, requests_per_minute=2)
        assert limiter._check_rate_limit("1.2.3.4") is False
        assert limiter._check_rate_limit("1.2.3.4") is False
        assert limiter._check_rate_limit("1.2.3.4") is True
        assert limiter._check_rate_limit("5.6.7.8") is False

    def test_stale_ips_dropped(self):
        limiter = RateLimitMiddleware(app=None, requests_per_minute=2)
        limiter.request_counts["9.9.9.9"] = [0.0]
        limiter._cleanup_stale_ips(1000.0)
        assert "9.9.9.9" not in limiter.request_counts
