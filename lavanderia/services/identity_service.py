# lavanderia/services/identity_service.py

from typing import Any, Dict, Optional

import httpx
from fastapi import Depends
from jose import JWTError, jwt
from loguru import logger
from pydantic import BaseModel

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.exceptions import Unauthenticated


class AuthenticatedUser(BaseModel):
    user_id: str
    email: Optional[str] = None


class SignInResult(BaseModel):
    access_token: Optional[str] = None
    user: Dict[str, Any]


class IdentityService:
    """
    Cliente do provedor de identidade hospedado.

    Login usa o grant de senha do provedor; tokens são verificados localmente
    quando o segredo JWT está configurado, e pelo provedor caso contrário.
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._client = client

    def _headers(self, token: Optional[str] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.IDENTITY_ANON_KEY:
            headers["apikey"] = self.settings.IDENTITY_ANON_KEY
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        if not self.settings.IDENTITY_URL:
            raise Unauthenticated("Proveedor de identidad no configurado")
        url = f"{self.settings.IDENTITY_URL.rstrip('/')}{path}"
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=15.0) as client:
            return await client.request(method, url, **kwargs)

    async def sign_in(self, email: str, password: str) -> SignInResult:
        log = logger.bind(service="IdentityService", email=email)
        log.info("Signing in against identity provider...")
        try:
            response = await self._request(
                "POST",
                "/auth/v1/token",
                params={"grant_type": "password"},
                headers=self._headers(),
                json={"email": email, "password": password},
            )
        except httpx.RequestError as e:
            log.error(f"Identity provider unreachable: {e}")
            raise Unauthenticated("Proveedor de identidad no disponible") from e

        data = _json_or_empty(response)
        if response.status_code >= 400:
            message = data.get("error_description") or data.get("msg") or data.get("message") or "Invalid login credentials"
            log.warning(f"Sign in rejected: {message}")
            raise Unauthenticated(message)

        log.success("Sign in accepted.")
        return SignInResult(access_token=data.get("access_token"), user=data.get("user") or {})

    async def verify(self, token: str) -> AuthenticatedUser:
        if not token:
            raise Unauthenticated("No token")
        if self.settings.IDENTITY_JWT_SECRET:
            return self._verify_locally(token)
        return await self._verify_remotely(token)

    def _verify_locally(self, token: str) -> AuthenticatedUser:
        log = logger.bind(service="AuthTokenValidation")
        try:
            payload = jwt.decode(
                token,
                self.settings.IDENTITY_JWT_SECRET,
                algorithms=[self.settings.JWT_ALGORITHM],
                audience=self.settings.IDENTITY_JWT_AUDIENCE,
            )
        except jwt.ExpiredSignatureError as e:
            log.warning("Token validation failed: Signature has expired.")
            raise Unauthenticated("Invalid token") from e
        except JWTError as e:
            log.warning(f"Invalid JWT token: {e}")
            raise Unauthenticated("Invalid token") from e

        user_id = payload.get("sub")
        if not user_id:
            log.warning("Token validation failed: 'sub' claim missing.")
            raise Unauthenticated("Invalid token")
        return AuthenticatedUser(user_id=user_id, email=payload.get("email"))

    async def _verify_remotely(self, token: str) -> AuthenticatedUser:
        log = logger.bind(service="AuthTokenValidation")
        try:
            response = await self._request("GET", "/auth/v1/user", headers=self._headers(token))
        except httpx.RequestError as e:
            log.error(f"Identity provider unreachable: {e}")
            raise Unauthenticated("Invalid token") from e

        data = _json_or_empty(response)
        if response.status_code >= 400 or not data.get("id"):
            log.warning(f"Provider rejected token (status {response.status_code}).")
            raise Unauthenticated("Invalid token")
        return AuthenticatedUser(user_id=data["id"], email=data.get("email"))


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


async def get_identity_service(settings: Settings = Depends(get_settings)) -> IdentityService:
    return IdentityService(settings)
