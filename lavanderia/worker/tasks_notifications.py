# lavanderia/worker/tasks_notifications.py
import asyncio
import uuid
from typing import Dict, Optional

from loguru import logger

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.database import MongoDbContext
from lavanderia.core.logging_config import trace_id_var
from lavanderia.modules.notifications.services import send_scheduled_messages
from lavanderia.services.whatsapp_service import WhatsAppService
from lavanderia.worker.celery_app import celery_app


async def run_scheduled_messages(settings: Settings) -> Dict[str, dict]:
    """Abre uma conexão própria (fora do lifespan da API) e roda o envio agendado."""
    async with MongoDbContext(settings.MONGODB_URI, settings.mongodb_db_name) as mongo:
        results = await send_scheduled_messages(mongo.get_db(), settings, WhatsAppService(settings))
    return {org_id: result.model_dump() for org_id, result in results.items()}


@celery_app.task(bind=True, name="notifications.send_scheduled_messages", acks_late=True)
def send_scheduled_messages_task(self, trace_id: Optional[str] = None):
    """Envio diário para os clientes elegíveis de cada organização configurada."""
    current_trace_id = trace_id or f"task_{uuid.uuid4().hex[:12]}"
    token = trace_id_var.set(current_trace_id)
    log = logger.bind(trace_id=current_trace_id, task_name=self.name, job_id=self.request.id)
    log.info("Running scheduled messages job...")
    try:
        results = asyncio.run(run_scheduled_messages(get_settings()))
        log.success(f"Scheduled messages finished for {len(results)} organization(s).")
        return results
    finally:
        trace_id_var.reset(token)
