# tests/services/test_storage_service.py
import httpx
import pytest

from lavanderia.core.exceptions import StoreError
from lavanderia.services.storage_service import StorageService

pytestmark = pytest.mark.asyncio


async def test_upload_returns_public_url(settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["upsert"] = request.headers["x-upsert"]
        return httpx.Response(200, json={"Key": "evidencias/p1/1.jpg"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        url = await StorageService(settings, client=http).upload("p1/1.jpg", b"data", "image/jpeg")

    assert seen == {"method": "POST", "path": "/storage/v1/object/evidencias/p1/1.jpg", "upsert": "false"}
    assert url == "https://storage.test/storage/v1/object/public/evidencias/p1/1.jpg"


async def test_upload_failure_raises(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(409, text="Duplicate"))
    async with httpx.AsyncClient(transport=transport) as http:
        with pytest.raises(StoreError):
            await StorageService(settings, client=http).upload("p1/1.jpg", b"data")


async def test_remove_is_best_effort(settings):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        assert await StorageService(settings, client=http).remove("p1/1.jpg") is False

    ok_transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[]))
    async with httpx.AsyncClient(transport=ok_transport) as http:
        assert await StorageService(settings, client=http).remove("p1/1.jpg") is True
