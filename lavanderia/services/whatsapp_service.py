# lavanderia/services/whatsapp_service.py

import json
import re
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends
from loguru import logger

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.logging_config import trace_id_var

META_GRAPH_API_BASE_URL = "https://graph.facebook.com"


def clean_phone_number(phone: Optional[str]) -> str:
    """Meta exige o número só com dígitos, com código de país e sem '+'."""
    return re.sub(r"\D", "", phone or "")


class WhatsAppService:
    """
    Envia mensagens de texto via Meta Graph API (WhatsApp).

    `send` nunca levanta exceção: falhas de rede ou erros reportados pela API
    são logados e retornam False, para não interromper envios em massa.
    Sem credenciais configuradas o envio é apenas simulado (modo desenvolvimento).
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.access_token = settings.META_ACCESS_TOKEN
        self.phone_number_id = settings.META_PHONE_NUMBER_ID
        self.api_url = f"{META_GRAPH_API_BASE_URL}/{settings.META_GRAPH_API_VERSION}/{self.phone_number_id}/messages"
        self._client = client

    @property
    def simulated(self) -> bool:
        return not (self.access_token and self.phone_number_id)

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if self._client is not None:
            return await self._client.post(self.api_url, headers=headers, json=payload)
        async with httpx.AsyncClient(timeout=25.0, http2=True) as client:
            return await client.post(self.api_url, headers=headers, json=payload)

    async def send(self, to: str, body: str) -> bool:
        recipient = clean_phone_number(to)
        log = logger.bind(trace_id=trace_id_var.get(), service="WhatsAppService", recipient=recipient)

        if not recipient or not body:
            log.error("Attempted to send WhatsApp message with missing recipient or text.")
            return False

        if self.simulated:
            log.info(f"[SIMULATED WA] To: {recipient} | Message: {body}")
            return True

        payload = {
            "messaging_product": "whatsapp",
            "to": recipient,
            "type": "text",
            "text": {"preview_url": False, "body": body},
        }

        log.info("Attempting to send WhatsApp text message via Meta API...")
        try:
            response = await self._post(payload)
        except httpx.TimeoutException:
            log.error("Timeout error sending WhatsApp message to Meta API.")
            return False
        except httpx.RequestError as e:
            log.error(f"HTTP request error sending WhatsApp message: {e}")
            return False

        response_data: Dict[str, Any] = {}
        try:
            response_data = response.json()
        except json.JSONDecodeError:
            log.error(f"Meta API returned non-JSON response (Status: {response.status_code}): {response.text[:500]}")

        if 200 <= response.status_code < 300:
            wami = (response_data.get("messages") or [{}])[0].get("id")
            log.success(f"WhatsApp message accepted by Meta API. WAMI: {wami}")
            return True

        error_info = response_data.get("error", {}) if isinstance(response_data, dict) else {}
        log.error(
            f"Failed to send WhatsApp message. Status={response.status_code}, "
            f"Code={error_info.get('code', response.status_code)}, "
            f"Message='{error_info.get('message', 'Unknown API error')}', "
            f"FBTrace={error_info.get('fbtrace_id', 'N/A')}"
        )
        return False


async def get_whatsapp_service(settings: Settings = Depends(get_settings)) -> WhatsAppService:
    return WhatsAppService(settings)
