# lavanderia/modules/movements/routers.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from lavanderia.core.security import CurrentOrg
from lavanderia.modules.categories.models import MOVEMENT_KINDS
from .models import MovementCreateAPI, MovementInDB, MovementRow, MovementUpdateAPI
from .services import MovementService, get_movement_service

movements_router = APIRouter()


@movements_router.get("", response_model=List[MovementRow], summary="List ledger movements", tags=["Movimientos"])
async def list_movements_endpoint(
    org: CurrentOrg,
    desde: Optional[date] = Query(None),
    hasta: Optional[date] = Query(None),
    tipo: Optional[MOVEMENT_KINDS] = Query(None),
    categoria_id: Optional[str] = Query(None),
    metodo_pago: Optional[str] = Query(None),
    sucursal_id: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Texto en nota, método de pago, categoría o sucursal"),
    limit: int = Query(0, ge=0),
    offset: int = Query(0, ge=0),
    service: MovementService = Depends(get_movement_service),
):
    filters = {
        "tipo": tipo,
        "categoria_id": categoria_id,
        "metodo_pago": metodo_pago,
        "sucursal_id": sucursal_id,
    }
    return await service.list_rows(org.org_id, desde, hasta, filters, q=q, limit=limit, offset=offset)


@movements_router.post(
    "",
    response_model=MovementInDB,
    status_code=status.HTTP_201_CREATED,
    summary="Record a movement",
    tags=["Movimientos"],
)
async def create_movement_endpoint(
    payload: MovementCreateAPI,
    org: CurrentOrg,
    service: MovementService = Depends(get_movement_service),
):
    return await service.create(org.org_id, org.user.user_id, payload)


@movements_router.put("/{movement_id}", response_model=MovementInDB, summary="Update a movement", tags=["Movimientos"])
async def update_movement_endpoint(
    payload: MovementUpdateAPI,
    org: CurrentOrg,
    movement_id: str = Path(...),
    service: MovementService = Depends(get_movement_service),
):
    return await service.update(org.org_id, movement_id, payload)


@movements_router.delete("/{movement_id}", summary="Delete a movement", tags=["Movimientos"])
async def delete_movement_endpoint(
    org: CurrentOrg,
    movement_id: str = Path(...),
    service: MovementService = Depends(get_movement_service),
):
    await service.delete(org.org_id, movement_id)
    return {"ok": True}
