"""Tests for the single-page UI and operational endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_index_page(client: AsyncClient):
    """UI shell is public; auth happens client-side via /api/me."""
    resp = await client.get("/")
    assert resp.status_code == 200
    assert "<title>multiprompt</title>" in resp.text


@pytest.mark.asyncio
async def test_static_assets(client: AsyncClient):
    assert (await client.get("/app.js")).status_code == 200
    assert (await client.get("/style.css")).status_code == 200


@pytest.mark.asyncio
async def test_api_routes_not_shadowed(client: AsyncClient):
    resp = await client.get("/api/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_metrics(client: AsyncClient):
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text


@pytest.mark.asyncio
async def test_settings_form_has_clear_controls(client: AsyncClient):
    """Each provider can drop its stored key or model from the UI."""
    resp = await client.get("/")
    assert resp.text.count('name="clearKey"') == 3
    assert resp.text.count('name="resetModel"') == 3


@pytest.mark.asyncio
async def test_settings_script_only_sends_edited_fields(client: AsyncClient):
    script = (await client.get("/app.js")).text
    assert "model.placeholder = s.model" in script
    assert "if (Object.keys(entry).length) body[fs.dataset.provider] = entry;" in script
