# lavanderia/services/storage_service.py

from typing import Dict, Optional

import httpx
from fastapi import Depends
from loguru import logger

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.exceptions import StoreError


class StorageService:
    """Relay de arquivos para o object storage hospedado (bucket de evidências)."""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.bucket = settings.STORAGE_BUCKET
        self._client = client

    def _base_url(self) -> str:
        if not self.settings.STORAGE_URL:
            raise StoreError("Storage no configurado")
        return f"{self.settings.STORAGE_URL.rstrip('/')}/storage/v1/object"

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        headers = {}
        if self.settings.STORAGE_SERVICE_KEY:
            headers["Authorization"] = f"Bearer {self.settings.STORAGE_SERVICE_KEY}"
            headers["apikey"] = self.settings.STORAGE_SERVICE_KEY
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=30.0) as client:
            return await client.request(method, url, **kwargs)

    def public_url(self, path: str) -> str:
        return f"{self._base_url()}/public/{self.bucket}/{path}"

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> str:
        """Sobe o arquivo (sem upsert) e retorna a URL pública."""
        log = logger.bind(service="StorageService", path=path)
        url = f"{self._base_url()}/{self.bucket}/{path}"
        try:
            response = await self._request(
                "POST",
                url,
                content=content,
                headers={**self._headers(content_type or "application/octet-stream"), "x-upsert": "false"},
            )
        except httpx.RequestError as e:
            log.error(f"Storage unreachable during upload: {e}")
            raise StoreError(f"Error subiendo archivo: {e}") from e

        if response.status_code >= 400:
            log.error(f"Storage rejected upload (status {response.status_code}): {response.text[:300]}")
            raise StoreError(f"Error subiendo archivo: {response.text[:200] or response.status_code}")

        log.info("File uploaded.")
        return self.public_url(path)

    async def remove(self, path: str) -> bool:
        """Remove o arquivo. Falhas são logadas e retornam False."""
        log = logger.bind(service="StorageService", path=path)
        try:
            url = f"{self._base_url()}/{self.bucket}"
            response = await self._request("DELETE", url, json={"prefixes": [path]}, headers=self._headers("application/json"))
        except (httpx.RequestError, StoreError) as e:
            log.warning(f"Could not remove stored file: {e}")
            return False

        if response.status_code >= 400:
            log.warning(f"Storage refused removal (status {response.status_code}).")
            return False
        log.info("Stored file removed.")
        return True


async def get_storage_service(settings: Settings = Depends(get_settings)) -> StorageService:
    return StorageService(settings)
