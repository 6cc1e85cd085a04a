from __future__ import annotations

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_empty_catalog_lists_nothing(client: AsyncClient) -> None:
    resp = await client.get("/programs")

    assert resp.status_code == 200
    assert resp.json() == {
        "items": [],
        "has_more": False,
        "next_cursor": None,
        "returned_count": 0,
        "cursor_reset": False,
    }


@pytest.mark.asyncio
async def test_request_id_header_is_propagated_or_generated(client: AsyncClient) -> None:
    with_header = await client.get("/programs", headers={"X-Request-ID": "req-test-123"})
    assert with_header.status_code == 200
    assert with_header.headers["x-request-id"] == "req-test-123"

    generated = await client.get("/programs")
    assert generated.status_code == 200
    assert generated.headers.get("x-request-id")
