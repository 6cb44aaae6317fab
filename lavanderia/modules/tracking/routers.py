# lavanderia/modules/tracking/routers.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, Path, Request

from lavanderia.core.exceptions import NotFound
from lavanderia.core.rate_limit import limiter, tracking_rate_limit
from lavanderia.modules.clients.repository import ClientRepository, get_client_repository
from lavanderia.modules.notifications.services import first_name
from lavanderia.modules.orders.repository import (
    EvidenceRepository,
    OrderRepository,
    get_evidence_repository,
    get_order_repository,
)

tracking_router = APIRouter()


@tracking_router.get("/{folio}", summary="Public order status by folio", tags=["Rastreo"])
@limiter.limit(tracking_rate_limit)
async def track_order_endpoint(
    request: Request,
    folio: str = Path(..., min_length=1),
    order_repo: OrderRepository = Depends(get_order_repository),
    evidence_repo: EvidenceRepository = Depends(get_evidence_repository),
    client_repo: ClientRepository = Depends(get_client_repository),
) -> Dict[str, Any]:
    """Rota pública: expõe só o necessário para o cliente acompanhar o pedido."""
    order = await order_repo.find_by_folio(folio.strip())
    if order is None:
        raise NotFound("Pedido no encontrado")

    client = await client_repo.get_for_org(order.org_id, order.cliente_id) if order.cliente_id else None
    evidences = await evidence_repo.list_for_order(order.org_id, order.id)

    return {
        "folio": order.folio,
        "cliente": first_name(client.nombre if client else None) or "Cliente",
        "descripcion": order.descripcion,
        "estado": order.estado,
        "total": float(order.monto_total),
        "pendiente": float(order.saldo_pendiente),
        "fecha_entrega": order.fecha_entrega_estimada.isoformat() if order.fecha_entrega_estimada else None,
        "fotos": [{"url": e.url, "tipo": e.tipo, "nota": e.nota} for e in evidences],
    }
