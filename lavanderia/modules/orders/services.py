# lavanderia/modules/orders/services.py
import time
from typing import List, Optional

from fastapi import Depends
from loguru import logger

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.exceptions import BadRequest, NotFound
from lavanderia.core.folio import FolioGenerator, get_folio_generator
from lavanderia.core.repository import utcnow
from lavanderia.modules.clients.repository import ClientRepository, get_client_repository
from lavanderia.services.storage_service import StorageService, get_storage_service
from .models import CLIENTE_MANUAL, EvidenceInDB, OrderCreateAPI, OrderInDB, OrderRow, OrderUpdateAPI
from .repository import EvidenceRepository, OrderRepository, get_evidence_repository, get_order_repository


def file_extension(filename: Optional[str], default: str = "jpg") -> str:
    if filename and "." in filename:
        ext = filename.rsplit(".", 1)[-1].strip().lower()
        if ext.isalnum():
            return ext
    return default


class OrderService:
    def __init__(
        self,
        order_repo: OrderRepository,
        evidence_repo: EvidenceRepository,
        client_repo: ClientRepository,
        storage: StorageService,
        folios: FolioGenerator,
        settings: Settings,
    ):
        self.order_repo = order_repo
        self.evidence_repo = evidence_repo
        self.client_repo = client_repo
        self.storage = storage
        self.folios = folios
        self.settings = settings

    async def _rows(self, org_id: str, orders: List[OrderInDB]) -> List[OrderRow]:
        clients = await self.client_repo.by_ids(org_id, [o.cliente_id for o in orders if o.cliente_id])
        rows = []
        for order in orders:
            client = clients.get(order.cliente_id or "")
            rows.append(
                OrderRow(
                    **order.model_dump(),
                    cliente_nombre=(client.nombre if client else None) or CLIENTE_MANUAL,
                    cliente_telefono=(client.telefono if client else None) or "",
                )
            )
        return rows

    async def get_or_404(self, org_id: str, order_id: str) -> OrderInDB:
        order = await self.order_repo.get_for_org(org_id, order_id)
        if order is None:
            raise NotFound("Pedido no encontrado")
        return order

    async def list_rows(
        self, org_id: str, activo: Optional[bool] = None, q: Optional[str] = None, limit: int = 0, offset: int = 0
    ) -> List[OrderRow]:
        orders = await self.order_repo.search(org_id, activo=activo, q=q, skip=offset, limit=limit)
        return await self._rows(org_id, orders)

    async def get_row(self, org_id: str, order_id: str) -> OrderRow:
        order = await self.get_or_404(org_id, order_id)
        return (await self._rows(org_id, [order]))[0]

    async def create(self, org_id: str, payload: OrderCreateAPI) -> OrderInDB:
        data = payload.to_document()
        if data.get("cliente_id") and not await self.client_repo.exists_for_org(org_id, data["cliente_id"]):
            raise BadRequest("cliente_id inválido")

        # Folio sem checagem de unicidade; colisões são raras no volume de uma lavanderia
        data["folio"] = self.folios.generate()
        data["saldo_pendiente"] = data["monto_total"]
        data["estado"] = "pendiente"

        order = await self.order_repo.create_for_org(org_id, data)
        logger.bind(service="OrderService", org_id=org_id).info(f"Order {order.folio} created ({order.id}).")
        return order

    async def update(self, org_id: str, order_id: str, payload: OrderUpdateAPI) -> OrderInDB:
        data = payload.to_document(exclude_unset=True)
        if data.get("estado") == "entregado":
            data["fecha_entregado"] = utcnow()
        order = await self.order_repo.update_for_org(org_id, order_id, data)
        if order is None:
            raise NotFound("Pedido no encontrado")
        return order

    async def delete(self, org_id: str, order_id: str):
        await self.get_or_404(org_id, order_id)
        evidences = await self.evidence_repo.list_for_order(org_id, order_id)

        await self.order_repo.delete_for_org(org_id, order_id)
        await self.evidence_repo.delete_for_order(org_id, order_id)
        for evidence in evidences:
            if evidence.path:
                await self.storage.remove(evidence.path)
        logger.bind(service="OrderService", org_id=org_id).info(
            f"Order {order_id} deleted with {len(evidences)} evidence record(s)."
        )

    async def add_evidence(
        self,
        org_id: str,
        order_id: str,
        content: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        tipo: str = "ingreso",
        nota: Optional[str] = None,
    ) -> EvidenceInDB:
        await self.get_or_404(org_id, order_id)
        if not content:
            raise BadRequest("No se subió ningún archivo")
        if len(content) > self.settings.EVIDENCE_MAX_BYTES:
            max_mb = self.settings.EVIDENCE_MAX_BYTES // (1024 * 1024)
            raise BadRequest(f"Archivo demasiado grande (máximo {max_mb}MB)")

        path = f"{order_id}/{int(time.time() * 1000)}.{file_extension(filename)}"
        url = await self.storage.upload(path, content, content_type)

        evidence = await self.evidence_repo.create_for_org(
            org_id,
            {"pedido_id": order_id, "url": url, "path": path, "tipo": tipo or "ingreso", "nota": nota or ""},
        )
        logger.bind(service="OrderService", org_id=org_id).info(f"Evidence {evidence.id} stored at {path}.")
        return evidence

    async def list_evidence(self, org_id: str, order_id: str) -> List[EvidenceInDB]:
        await self.get_or_404(org_id, order_id)
        return await self.evidence_repo.list_for_order(org_id, order_id)

    async def delete_evidence(self, org_id: str, order_id: str, evidence_id: str):
        evidence = await self.evidence_repo.get_for_order(org_id, order_id, evidence_id)
        if evidence is None:
            raise NotFound("Evidencia no encontrada")
        await self.evidence_repo.delete_for_org(org_id, evidence_id)
        if evidence.path and not await self.storage.remove(evidence.path):
            logger.bind(service="OrderService", org_id=org_id).warning(
                f"Evidence {evidence_id} removed but file {evidence.path} remains in storage."
            )


async def get_order_service(
    order_repo: OrderRepository = Depends(get_order_repository),
    evidence_repo: EvidenceRepository = Depends(get_evidence_repository),
    client_repo: ClientRepository = Depends(get_client_repository),
    storage: StorageService = Depends(get_storage_service),
    folios: FolioGenerator = Depends(get_folio_generator),
    settings: Settings = Depends(get_settings),
) -> OrderService:
    return OrderService(order_repo, evidence_repo, client_repo, storage, folios, settings)
