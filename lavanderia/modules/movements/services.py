# lavanderia/modules/movements/services.py
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import Depends
from loguru import logger

from lavanderia.core.config import Settings, get_settings
from lavanderia.core.exceptions import BadRequest, NotFound
from lavanderia.modules.branches.repository import BranchRepository, get_branch_repository
from lavanderia.modules.categories.repository import CategoryRepository, get_category_repository
from .models import SIN_CATEGORIA, SIN_SUCURSAL, MovementCreateAPI, MovementInDB, MovementRow, MovementUpdateAPI
from .repository import MovementRepository, get_movement_repository


def matches_text(row: MovementRow, needle: str) -> bool:
    haystack = (row.nota, row.metodo_pago, row.categoria_nombre, row.sucursal_nombre)
    return any(needle in (value or "").lower() for value in haystack)


class MovementService:
    def __init__(
        self,
        movement_repo: MovementRepository,
        category_repo: CategoryRepository,
        branch_repo: BranchRepository,
        settings: Settings,
    ):
        self.movement_repo = movement_repo
        self.category_repo = category_repo
        self.branch_repo = branch_repo
        self.settings = settings

    async def _check_references(self, org_id: str, data: Dict[str, Any]):
        """Sucursal e categoria informadas precisam existir na mesma organização."""
        if data.get("sucursal_id") and not await self.branch_repo.exists_for_org(org_id, data["sucursal_id"]):
            raise BadRequest("sucursal_id inválido")
        if data.get("categoria_id") and not await self.category_repo.exists_for_org(org_id, data["categoria_id"]):
            raise BadRequest("categoria_id inválido")

    async def list_rows(
        self,
        org_id: str,
        desde: Optional[date] = None,
        hasta: Optional[date] = None,
        filters: Optional[Dict[str, str]] = None,
        q: Optional[str] = None,
        limit: int = 0,
        offset: int = 0,
    ) -> List[MovementRow]:
        movements = await self.movement_repo.search(org_id, desde, hasta, filters)
        categories = await self.category_repo.name_map(org_id)
        branches = await self.branch_repo.name_map(org_id)

        rows = [
            MovementRow(
                **m.model_dump(),
                categoria_nombre=categories.get(m.categoria_id or "", SIN_CATEGORIA),
                sucursal_nombre=branches.get(m.sucursal_id or "", SIN_SUCURSAL),
            )
            for m in movements
        ]

        needle = (q or "").strip().lower()
        if needle:
            rows = [r for r in rows if matches_text(r, needle)]

        rows = rows[offset:]
        return rows[:limit] if limit else rows

    async def create(self, org_id: str, user_id: str, payload: MovementCreateAPI) -> MovementInDB:
        data = payload.to_document()
        await self._check_references(org_id, data)
        data.setdefault("fecha", self.settings.today())
        data["usuario_id"] = user_id

        movement = await self.movement_repo.create_for_org(org_id, data)
        logger.bind(service="MovementService", org_id=org_id).info(
            f"Movement {movement.id} created ({movement.tipo} {movement.monto})."
        )
        return movement

    async def update(self, org_id: str, movement_id: str, payload: MovementUpdateAPI) -> MovementInDB:
        data = payload.to_document(exclude_unset=True)
        await self._check_references(org_id, data)
        movement = await self.movement_repo.update_for_org(org_id, movement_id, data)
        if movement is None:
            raise NotFound("Movimiento no encontrado")
        return movement

    async def delete(self, org_id: str, movement_id: str):
        if not await self.movement_repo.delete_for_org(org_id, movement_id):
            raise NotFound("Movimiento no encontrado")
        logger.bind(service="MovementService", org_id=org_id).info(f"Movement {movement_id} deleted.")


async def get_movement_service(
    movement_repo: MovementRepository = Depends(get_movement_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    branch_repo: BranchRepository = Depends(get_branch_repository),
    settings: Settings = Depends(get_settings),
) -> MovementService:
    return MovementService(movement_repo, category_repo, branch_repo, settings)
