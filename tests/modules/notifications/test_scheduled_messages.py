# tests/modules/notifications/test_scheduled_messages.py
from datetime import date

from lavanderia.modules.clients.repository import ClientRepository
from lavanderia.modules.notifications.services import (
    NotificationService,
    first_name,
    is_plausible_phone,
    render_message,
    send_scheduled_messages,
)
from lavanderia.worker import tasks_notifications
from conftest import FakeSender, ORG_ID, OTHER_ORG_ID


async def seed_clients(db):
    await db["clientes"].insert_many(
        [
            {"org_id": ORG_ID, "nombre": "Ana María López", "telefono": "+52 55 1234 5678", "acepta_mensajes": True,
             "ultima_visita": "2024-05-01"},
            {"org_id": ORG_ID, "nombre": "Bruno Díaz", "telefono": "5512345679", "acepta_mensajes": True,
             "ultima_visita": "2024-06-10"},
            {"org_id": ORG_ID, "nombre": "Carla Ruiz", "telefono": "12345678", "acepta_mensajes": True},
            {"org_id": ORG_ID, "nombre": "Diego", "telefono": "5599998888", "acepta_mensajes": False},
            {"org_id": ORG_ID, "nombre": "Eva", "telefono": None, "acepta_mensajes": True},
            {"org_id": OTHER_ORG_ID, "nombre": "Fuera", "telefono": "5511112222", "acepta_mensajes": True},
        ]
    )


def test_phone_plausibility_and_template_helpers():
    assert is_plausible_phone("+52 (55) 1234-5678")
    assert not is_plausible_phone("12345678")
    assert not is_plausible_phone("123456789")
    assert not is_plausible_phone(None)
    assert first_name("  Ana María ") == "Ana"
    assert first_name("") == ""
    assert render_message("Hola [Nombre], [Nombre]!", "Ana López") == "Hola Ana, Ana!"


async def test_bulk_send_counts_only_plausible_opted_in_clients(db, settings):
    await seed_clients(db)
    sender = FakeSender(failing={"5512345679"})
    service = NotificationService(ClientRepository(db), sender, settings)

    result = await service.send_bulk(ORG_ID, "Hola [Nombre]")

    assert result.total_eligible == 2
    assert result.sent_count == 1
    assert result.failed_count == 1
    assert sorted(body for _, body in sender.sent) == ["Hola Ana", "Hola Bruno"]


async def test_scheduled_job_iterates_configured_orgs_with_inactivity_filter(db, settings):
    await seed_clients(db)
    sender = FakeSender()
    scheduled_settings = settings.model_copy(
        update={"SCHEDULED_ORG_IDS": f"{ORG_ID},{OTHER_ORG_ID}", "SCHEDULED_INACTIVE_DAYS": 30,
                "SCHEDULED_MESSAGE_TEMPLATE": "Te extrañamos [Nombre]"}
    )

    results = await send_scheduled_messages(db, scheduled_settings, sender, today=date(2024, 6, 15))

    # Bruno visitou há menos de 30 dias; Fuera não tem ultima_visita
    assert results[ORG_ID].total_eligible == 1
    assert results[OTHER_ORG_ID].total_eligible == 1
    assert sorted(body for _, body in sender.sent) == ["Te extrañamos Ana", "Te extrañamos Fuera"]


async def test_scheduled_job_defaults_to_default_org(db, settings):
    await seed_clients(db)
    sender = FakeSender()
    results = await send_scheduled_messages(db, settings, sender)
    assert list(results) == [ORG_ID]
    assert results[ORG_ID].sent_count == 2


async def test_scheduled_job_without_orgs_does_nothing(db, settings):
    sender = FakeSender()
    empty = settings.model_copy(update={"SCHEDULED_ORG_IDS": "", "DEFAULT_ORG_ID": None})
    assert await send_scheduled_messages(db, empty, sender) == {}
    assert sender.sent == []


def test_celery_task_runs_the_job(monkeypatch):
    async def fake_run(settings):
        return {ORG_ID: {"total_eligible": 2, "sent_count": 2, "failed_count": 0, "cancelled": False}}

    monkeypatch.setattr(tasks_notifications, "run_scheduled_messages", fake_run)
    result = tasks_notifications.send_scheduled_messages_task.apply().get()
    assert result[ORG_ID]["sent_count"] == 2


async def test_notifiers_share_the_process_pacing_limiter(db, settings):
    first = NotificationService(ClientRepository(db), FakeSender(), settings).build_notifier()
    second = NotificationService(ClientRepository(db), FakeSender(), settings).build_notifier()
    assert first.limiter is second.limiter
    assert first.limiter.interval == settings.MESSAGE_PACING_SECONDS
