# lavanderia/modules/notifications/services.py

import re
from datetime import date, timedelta
from typing import Dict, List, Optional

from fastapi import Depends
from loguru import logger
from motor.motor_asyncio import AsyncIOMotorDatabase

from lavanderia.core.config import Settings, get_settings
from lavanderia.modules.clients.models import ClientInDB
from lavanderia.modules.clients.repository import ClientRepository, get_client_repository
from lavanderia.services.whatsapp_service import WhatsAppService, get_whatsapp_service
from .notifier import BulkNotifier, BulkSendResult, MessageSender, OutboundMessage, get_shared_limiter

NAME_PLACEHOLDER = "[Nombre]"
MIN_PHONE_DIGITS = 10


def is_plausible_phone(phone: Optional[str]) -> bool:
    """Mais de 9 dígitos depois de remover tudo que não é dígito."""
    return len(re.sub(r"\D", "", phone or "")) >= MIN_PHONE_DIGITS


def first_name(nombre: Optional[str]) -> str:
    parts = (nombre or "").split()
    return parts[0] if parts else ""


def render_message(template: str, nombre: Optional[str]) -> str:
    return template.replace(NAME_PLACEHOLDER, first_name(nombre))


class NotificationService:
    def __init__(self, client_repo: ClientRepository, sender: MessageSender, settings: Settings):
        self.client_repo = client_repo
        self.sender = sender
        self.settings = settings

    def build_notifier(self) -> BulkNotifier:
        return BulkNotifier(
            self.sender,
            max_concurrency=self.settings.MESSAGE_MAX_CONCURRENCY,
            limiter=get_shared_limiter(self.settings.MESSAGE_PACING_SECONDS),
        )

    async def eligible_clients(self, org_id: str, last_visit_before: Optional[date] = None) -> List[ClientInDB]:
        clients = await self.client_repo.list_messaging_opt_in(org_id, last_visit_before)
        return [c for c in clients if is_plausible_phone(c.telefono)]

    async def send_bulk(
        self,
        org_id: str,
        template: str,
        last_visit_before: Optional[date] = None,
        notifier: Optional[BulkNotifier] = None,
    ) -> BulkSendResult:
        log = logger.bind(service="NotificationService", org_id=org_id)
        clients = await self.eligible_clients(org_id, last_visit_before)
        log.info(f"{len(clients)} eligible client(s) for bulk message.")

        messages = [OutboundMessage(to=c.telefono, body=render_message(template, c.nombre)) for c in clients]
        return await (notifier or self.build_notifier()).run(messages)


async def send_scheduled_messages(
    db: AsyncIOMotorDatabase,
    settings: Settings,
    sender: MessageSender,
    today: Optional[date] = None,
) -> Dict[str, BulkSendResult]:
    """Job diário: mesma elegibilidade do envio em massa, para cada organização configurada."""
    org_ids = settings.scheduled_org_ids
    if not org_ids:
        logger.warning("No organizations configured for scheduled messages (SCHEDULED_ORG_IDS / DEFAULT_ORG_ID).")
        return {}

    today = today or settings.today()
    last_visit_before = None
    if settings.SCHEDULED_INACTIVE_DAYS:
        last_visit_before = today - timedelta(days=settings.SCHEDULED_INACTIVE_DAYS)

    service = NotificationService(ClientRepository(db), sender, settings)
    results: Dict[str, BulkSendResult] = {}
    for org_id in org_ids:
        results[org_id] = await service.send_bulk(org_id, settings.SCHEDULED_MESSAGE_TEMPLATE, last_visit_before)
    return results


async def get_notification_service(
    client_repo: ClientRepository = Depends(get_client_repository),
    sender: WhatsAppService = Depends(get_whatsapp_service),
    settings: Settings = Depends(get_settings),
) -> NotificationService:
    return NotificationService(client_repo, sender, settings)
