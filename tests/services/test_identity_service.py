# tests/services/test_identity_service.py
import time

import httpx
import pytest
from jose import jwt

from lavanderia.core.exceptions import Unauthenticated
from lavanderia.services.identity_service import IdentityService

pytestmark = pytest.mark.asyncio

SECRET = "test-jwt-secret"


def token(claims):
    base = {"aud": "authenticated", "exp": int(time.time()) + 600}
    return jwt.encode({**base, **claims}, SECRET, algorithm="HS256")


def local(settings):
    return IdentityService(settings.model_copy(update={"IDENTITY_JWT_SECRET": SECRET}))


async def test_local_verification(settings):
    user = await local(settings).verify(token({"sub": "user-9", "email": "u@x.mx"}))
    assert user.user_id == "user-9"
    assert user.email == "u@x.mx"


@pytest.mark.parametrize(
    "bad",
    [
        lambda: token({"sub": "u", "exp": int(time.time()) - 10}),
        lambda: token({"email": "no-sub@x.mx"}),
        lambda: token({"sub": "u", "aud": "other"}),
        lambda: jwt.encode({"sub": "u", "aud": "authenticated"}, "wrong-secret", algorithm="HS256"),
        lambda: "not-a-jwt",
    ],
)
async def test_local_verification_rejects(settings, bad):
    with pytest.raises(Unauthenticated):
        await local(settings).verify(bad())


async def test_remote_verification(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/user"
        if request.headers["Authorization"] == "Bearer good":
            return httpx.Response(200, json={"id": "user-1", "email": "a@b.mx"})
        return httpx.Response(401, json={"msg": "invalid JWT"})

    remote_settings = settings.model_copy(update={"IDENTITY_URL": "https://id.test", "IDENTITY_JWT_SECRET": None})
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        service = IdentityService(remote_settings, client=http)
        assert (await service.verify("good")).user_id == "user-1"
        with pytest.raises(Unauthenticated):
            await service.verify("bad")


async def test_sign_in_uses_password_grant(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["grant_type"] == "password"
        return httpx.Response(200, json={"access_token": "abc", "user": {"id": "user-1"}})

    remote_settings = settings.model_copy(update={"IDENTITY_URL": "https://id.test"})
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        result = await IdentityService(remote_settings, client=http).sign_in("a@b.mx", "pw")
    assert result.access_token == "abc"
    assert result.user == {"id": "user-1"}


async def test_sign_in_rejection_carries_provider_message(settings):
    transport = httpx.MockTransport(
        lambda request: httpx.Response(400, json={"error_description": "Invalid login credentials"})
    )
    remote_settings = settings.model_copy(update={"IDENTITY_URL": "https://id.test"})
    async with httpx.AsyncClient(transport=transport) as http:
        with pytest.raises(Unauthenticated, match="Invalid login credentials"):
            await IdentityService(remote_settings, client=http).sign_in("a@b.mx", "pw")
