import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_root(async_client: AsyncClient):
    resp = await async_client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "online"
    assert "x-request-id" in resp.headers
