# lavanderia/modules/orders/routers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Path, Query, UploadFile, status

from lavanderia.core.exceptions import BadRequest
from lavanderia.core.security import CurrentOrg
from .models import EVIDENCE_KINDS, EvidenceInDB, OrderCreateAPI, OrderInDB, OrderRow, OrderUpdateAPI
from .services import OrderService, get_order_service

orders_router = APIRouter()


@orders_router.get("", response_model=List[OrderRow], summary="List orders", tags=["Pedidos"])
async def list_orders_endpoint(
    org: CurrentOrg,
    activo: Optional[str] = Query(None, description="true: en curso, false: historial"),
    q: Optional[str] = Query(None, description="Búsqueda por folio"),
    limit: int = Query(0, ge=0),
    offset: int = Query(0, ge=0),
    service: OrderService = Depends(get_order_service),
):
    activo_filter = {"true": True, "false": False}.get((activo or "").lower())
    return await service.list_rows(org.org_id, activo=activo_filter, q=(q or "").strip() or None, limit=limit, offset=offset)


@orders_router.post(
    "",
    response_model=OrderInDB,
    status_code=status.HTTP_201_CREATED,
    summary="Create an order",
    tags=["Pedidos"],
)
async def create_order_endpoint(
    payload: OrderCreateAPI,
    org: CurrentOrg,
    service: OrderService = Depends(get_order_service),
):
    return await service.create(org.org_id, payload)


@orders_router.get("/{order_id}", response_model=OrderRow, summary="Get one order", tags=["Pedidos"])
async def get_order_endpoint(
    org: CurrentOrg,
    order_id: str = Path(...),
    service: OrderService = Depends(get_order_service),
):
    return await service.get_row(org.org_id, order_id)


@orders_router.put("/{order_id}", response_model=OrderInDB, summary="Update order status or details", tags=["Pedidos"])
async def update_order_endpoint(
    payload: OrderUpdateAPI,
    org: CurrentOrg,
    order_id: str = Path(...),
    service: OrderService = Depends(get_order_service),
):
    return await service.update(org.org_id, order_id, payload)


@orders_router.delete("/{order_id}", summary="Delete an order and its evidence", tags=["Pedidos"])
async def delete_order_endpoint(
    org: CurrentOrg,
    order_id: str = Path(...),
    service: OrderService = Depends(get_order_service),
):
    await service.delete(org.org_id, order_id)
    return {"ok": True}


@orders_router.post(
    "/{order_id}/evidencia",
    response_model=EvidenceInDB,
    status_code=status.HTTP_201_CREATED,
    summary="Upload an evidence photo",
    tags=["Pedidos"],
)
async def upload_evidence_endpoint(
    org: CurrentOrg,
    order_id: str = Path(...),
    foto: Optional[UploadFile] = File(None),
    tipo: EVIDENCE_KINDS = Form("ingreso"),
    nota: Optional[str] = Form(None),
    service: OrderService = Depends(get_order_service),
):
    if foto is None:
        raise BadRequest("No se subió ningún archivo")
    # lê no máximo um byte além do limite; o serviço rejeita o excedente
    content = await foto.read(service.settings.EVIDENCE_MAX_BYTES + 1)
    return await service.add_evidence(
        org.org_id, order_id, content, foto.filename, foto.content_type, tipo=tipo, nota=nota
    )


@orders_router.get(
    "/{order_id}/evidencia",
    response_model=List[EvidenceInDB],
    summary="List evidence photos",
    tags=["Pedidos"],
)
async def list_evidence_endpoint(
    org: CurrentOrg,
    order_id: str = Path(...),
    service: OrderService = Depends(get_order_service),
):
    return await service.list_evidence(org.org_id, order_id)


@orders_router.delete("/{order_id}/evidencia/{evidence_id}", summary="Delete an evidence photo", tags=["Pedidos"])
async def delete_evidence_endpoint(
    org: CurrentOrg,
    order_id: str = Path(...),
    evidence_id: str = Path(...),
    service: OrderService = Depends(get_order_service),
):
    await service.delete_evidence(org.org_id, order_id, evidence_id)
    return {"ok": True}
