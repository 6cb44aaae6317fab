# lavanderia/modules/clients/repository.py
import re
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING

from lavanderia.core.database import get_database
from lavanderia.core.repository import OrgScopedRepository
from .models import ClientInDB


class ClientRepository(OrgScopedRepository[ClientInDB]):
    model = ClientInDB
    collection_name = "clientes"

    async def search(self, org_id: str, q: Optional[str] = None, skip: int = 0, limit: int = 0) -> List[ClientInDB]:
        """Lista clientes ordenados por nome; `q` busca em nome ou telefone."""
        query: Dict[str, Any] = {}
        if q:
            pattern = {"$regex": re.escape(q), "$options": "i"}
            query["$or"] = [{"nombre": pattern}, {"telefono": pattern}]
        return await self.list_for_org(org_id, query, skip=skip, limit=limit, sort=[("nombre", ASCENDING)])

    async def list_messaging_opt_in(self, org_id: str, last_visit_before: Optional[date] = None) -> List[ClientInDB]:
        """Clientes que aceitam mensagens e têm telefone (a plausibilidade é checada pelo serviço)."""
        query: Dict[str, Any] = {"acepta_mensajes": True, "telefono": {"$ne": None}}
        if last_visit_before is not None:
            query["$or"] = [
                {"ultima_visita": None},
                {"ultima_visita": {"$lt": last_visit_before.isoformat()}},
            ]
        return await self.list_for_org(org_id, query, sort=[("nombre", ASCENDING)])

    async def by_ids(self, org_id: str, ids: List[str]) -> Dict[str, ClientInDB]:
        """id -> cliente, para enriquecer listagens (ids inválidos são ignorados)."""
        obj_ids = [oid for oid in (self._to_objectid(i) for i in set(ids)) if oid]
        if not obj_ids:
            return {}
        return {c.id: c for c in await self.list_for_org(org_id, {"_id": {"$in": obj_ids}})}


async def get_client_repository(db: AsyncIOMotorDatabase = Depends(get_database)) -> ClientRepository:
    return ClientRepository(db)
