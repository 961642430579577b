"""Tests for serving the ClaimIQ page on its own hosts."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from petclaim.api.host_routing import ClaimIQHostMiddleware
from petclaim.main import app

pytestmark = pytest.mark.asyncio


@pytest.mark.parametrize(
    "host",
    [
        "claimiq.petclaimhelper.com",
        "www.claimiq.petclaimhelper.com",
        "claimiq.petclaimhelper.com:443",
    ],
)
async def test_claim_iq_hosts_get_the_static_page(host: str) -> None:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/health", headers={"host": host})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert "ClaimIQ" in response.text


async def test_other_hosts_fall_through_to_the_api(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health", headers={"host": "petclaimhelper.com"})
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_custom_page_and_hosts(tmp_path) -> None:
    page = tmp_path / "index.html"
    page.write_text("<h1>Custom</h1>", encoding="utf-8")
    inner = FastAPI()

    @inner.get("/")
    async def index() -> dict[str, str]:
        return {"app": "inner"}

    inner.add_middleware(ClaimIQHostMiddleware, hosts=["Promo.Example.com"], page_path=page)
    transport = ASGITransport(app=inner)
    async with AsyncClient(transport=transport, base_url="http://promo.example.com") as client:
        promo = await client.get("/")
    async with AsyncClient(transport=transport, base_url="http://other.example.com") as client:
        other = await client.get("/")

    assert promo.text == "<h1>Custom</h1>"
    assert other.json() == {"app": "inner"}
