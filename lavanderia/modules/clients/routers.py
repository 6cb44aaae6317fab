# lavanderia/modules/clients/routers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from loguru import logger

from lavanderia.core.exceptions import NotFound
from lavanderia.core.security import CurrentOrg
from lavanderia.modules.notifications.services import NotificationService, get_notification_service
from .models import ClientCreateAPI, ClientInDB, ClientUpdateAPI, MassMessageAPI
from .repository import ClientRepository, get_client_repository

clients_router = APIRouter()


@clients_router.get("", response_model=List[ClientInDB], summary="List clients", tags=["Clientes"])
async def list_clients_endpoint(
    org: CurrentOrg,
    q: Optional[str] = Query(None, description="Búsqueda por nombre o teléfono"),
    limit: int = Query(0, ge=0),
    offset: int = Query(0, ge=0),
    repo: ClientRepository = Depends(get_client_repository),
):
    return await repo.search(org.org_id, q=(q or "").strip() or None, skip=offset, limit=limit)


@clients_router.post(
    "",
    response_model=ClientInDB,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client",
    tags=["Clientes"],
)
async def create_client_endpoint(
    payload: ClientCreateAPI,
    org: CurrentOrg,
    repo: ClientRepository = Depends(get_client_repository),
):
    client = await repo.create_for_org(org.org_id, payload.to_document())
    logger.bind(org_id=org.org_id).info(f"Client created: {client.id}")
    return client


@clients_router.put("/{client_id}", response_model=ClientInDB, summary="Update a client", tags=["Clientes"])
async def update_client_endpoint(
    payload: ClientUpdateAPI,
    org: CurrentOrg,
    client_id: str = Path(...),
    repo: ClientRepository = Depends(get_client_repository),
):
    client = await repo.update_for_org(org.org_id, client_id, payload.to_document(exclude_unset=True))
    if client is None:
        raise NotFound("Cliente no encontrado")
    return client


@clients_router.delete("/{client_id}", summary="Delete a client", tags=["Clientes"])
async def delete_client_endpoint(
    org: CurrentOrg,
    client_id: str = Path(...),
    repo: ClientRepository = Depends(get_client_repository),
):
    if not await repo.delete_for_org(org.org_id, client_id):
        raise NotFound("Cliente no encontrado")
    logger.bind(org_id=org.org_id, client_id=client_id).info("Client deleted.")
    return {"ok": True}


@clients_router.post("/mass-message", summary="Send a WhatsApp message to every opted-in client", tags=["Clientes"])
async def mass_message_endpoint(
    payload: MassMessageAPI,
    org: CurrentOrg,
    service: NotificationService = Depends(get_notification_service),
):
    result = await service.send_bulk(org.org_id, payload.message)
    return {
        "total_eligible": result.total_eligible,
        "sent_count": result.sent_count,
        "failed_count": result.failed_count,
    }
