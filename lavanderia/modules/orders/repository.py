# lavanderia/modules/orders/repository.py
import re
from typing import Any, Dict, List, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING

from lavanderia.core.database import get_database
from lavanderia.core.repository import OrgScopedRepository
from .models import ACTIVE_STATES, CLOSED_STATES, EvidenceInDB, OrderInDB


class OrderRepository(OrgScopedRepository[OrderInDB]):
    model = OrderInDB
    collection_name = "pedidos"

    async def search(
        self,
        org_id: str,
        activo: Optional[bool] = None,
        q: Optional[str] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[OrderInDB]:
        query: Dict[str, Any] = {}
        if activo is not None:
            query["estado"] = {"$in": list(ACTIVE_STATES if activo else CLOSED_STATES)}
        if q:
            query["folio"] = {"$regex": re.escape(q), "$options": "i"}
        return await self.list_for_org(org_id, query, skip=skip, limit=limit, sort=[("created_at", DESCENDING)])

    async def find_by_folio(self, folio: str) -> Optional[OrderInDB]:
        """Busca pública (sem org): folio exato sem diferenciar maiúsculas; o mais recente vence."""
        query = {"folio": {"$regex": f"^{re.escape(folio)}$", "$options": "i"}}
        return await self.get_by(query, sort=[("created_at", DESCENDING)])


class EvidenceRepository(OrgScopedRepository[EvidenceInDB]):
    model = EvidenceInDB
    collection_name = "pedido_evidencias"

    async def list_for_order(self, org_id: str, pedido_id: str) -> List[EvidenceInDB]:
        return await self.list_for_org(org_id, {"pedido_id": pedido_id}, sort=[("created_at", ASCENDING)])

    async def get_for_order(self, org_id: str, pedido_id: str, evidence_id: str) -> Optional[EvidenceInDB]:
        evidence = await self.get_for_org(org_id, evidence_id)
        return evidence if evidence and evidence.pedido_id == pedido_id else None

    async def delete_for_order(self, org_id: str, pedido_id: str) -> int:
        return await self.delete_by(self.scoped(org_id, {"pedido_id": pedido_id}))


async def get_order_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> OrderRepository:
    return OrderRepository(db)


async def get_evidence_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> EvidenceRepository:
    return EvidenceRepository(db)
