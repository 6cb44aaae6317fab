# tests/services/test_whatsapp_service.py
import httpx

from lavanderia.services.whatsapp_service import WhatsAppService, clean_phone_number


def configured(settings):
    return settings.model_copy(update={"META_ACCESS_TOKEN": "tok", "META_PHONE_NUMBER_ID": "123"})


def test_clean_phone_number():
    assert clean_phone_number("+52 (55) 1234-5678") == "525512345678"
    assert clean_phone_number(None) == ""


async def test_simulated_without_credentials(settings):
    service = WhatsAppService(settings)
    assert service.simulated
    assert await service.send("5512345678", "hola") is True


async def test_sends_text_payload(settings):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["json"] = request.read()
        return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        ok = await WhatsAppService(configured(settings), client=http).send("+52 55 1234 5678", "hola")

    assert ok is True
    assert seen["url"].endswith("/123/messages")
    assert seen["auth"] == "Bearer tok"
    assert b'"to":"525512345678"' in seen["json"].replace(b" ", b"")


async def test_provider_error_returns_false(settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": {"message": "bad", "code": 131}}))
    async with httpx.AsyncClient(transport=transport) as http:
        assert await WhatsAppService(configured(settings), client=http).send("5512345678", "hola") is False


async def test_network_error_returns_false(settings):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        assert await WhatsAppService(configured(settings), client=http).send("5512345678", "hola") is False


async def test_missing_recipient_returns_false(settings):
    assert await WhatsAppService(configured(settings)).send("", "hola") is False
