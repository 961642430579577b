"""API tests for the public dose confirmation links."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update

from petclaim.api.v1.doses import LINK_INVALID_DETAIL
from petclaim.main import app
from petclaim.models import MedicationDose

pytestmark = pytest.mark.asyncio


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def test_lookup_by_token_returns_dose_summary(dose_context) -> None:
    async with _client() as client:
        response = await client.get(f"/api/v1/doses/by-token/{dose_context['token']}")

    assert response.status_code == 200
    payload = response.json()
    assert payload["dose"]["id"] == str(dose_context["dose_id"])
    assert payload["dose"]["status"] == "pending"
    assert payload["medication"]["medication_name"] == "Apoquel"
    assert payload["pet"]["name"] == "Biscuit"
    assert "one_time_token" not in payload["dose"]


async def test_lookup_by_short_code(dose_context) -> None:
    async with _client() as client:
        response = await client.get(
            f"/api/v1/doses/by-short-code/{dose_context['short_code']}"
        )
    assert response.status_code == 200
    assert response.json()["dose"]["id"] == str(dose_context["dose_id"])


async def test_unknown_token_is_gone(dose_context) -> None:
    async with _client() as client:
        response = await client.get("/api/v1/doses/by-token/does-not-exist")
    assert response.status_code == 410
    assert response.json() == {"detail": LINK_INVALID_DETAIL}


async def test_confirm_then_reuse_is_gone(dose_context) -> None:
    async with _client() as client:
        first = await client.post(
            "/api/v1/doses/confirm", json={"token": dose_context["token"]}
        )
        second = await client.post(
            "/api/v1/doses/confirm", json={"token": dose_context["token"]}
        )
        lookup = await client.get(f"/api/v1/doses/by-token/{dose_context['token']}")

    assert first.status_code == 200
    assert first.json()["dose"]["status"] == "confirmed"
    assert first.json()["dose"]["given_time"] is not None
    assert second.status_code == 410
    assert second.json()["detail"] == LINK_INVALID_DETAIL
    assert lookup.status_code == 410


async def test_confirm_by_short_code(dose_context) -> None:
    async with _client() as client:
        response = await client.post(
            "/api/v1/doses/confirm", json={"short_code": dose_context["short_code"]}
        )
    assert response.status_code == 200
    assert response.json()["dose"]["status"] == "confirmed"


async def test_expired_link_uses_same_response_as_unknown(dose_context) -> None:
    async with dose_context["sessionmaker"]() as session:
        await session.execute(
            update(MedicationDose)
            .where(MedicationDose.id == dose_context["dose_id"])
            .values(token_expires_at=datetime.now(UTC) - timedelta(hours=1))
        )
        await session.commit()

    async with _client() as client:
        lookup = await client.get(f"/api/v1/doses/by-token/{dose_context['token']}")
        confirm = await client.post(
            "/api/v1/doses/confirm", json={"token": dose_context["token"]}
        )

    assert lookup.status_code == 410
    assert confirm.status_code == 410
    assert lookup.json() == confirm.json() == {"detail": LINK_INVALID_DETAIL}


async def test_confirm_requires_a_credential(dose_context) -> None:
    async with _client() as client:
        response = await client.post("/api/v1/doses/confirm", json={})
    assert response.status_code == 400
