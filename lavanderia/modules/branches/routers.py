# lavanderia/modules/branches/routers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from loguru import logger

from lavanderia.core.exceptions import NotFound
from lavanderia.core.security import CurrentOrg
from lavanderia.modules.movements.repository import MovementRepository, get_movement_repository
from .models import BranchCreateAPI, BranchInDB, BranchUpdateAPI
from .repository import BranchRepository, get_branch_repository

branches_router = APIRouter()

TRUTHY = {"1", "true", "TRUE", "True"}


@branches_router.get("", response_model=List[BranchInDB], summary="List branches", tags=["Sucursales"])
async def list_branches_endpoint(
    org: CurrentOrg,
    activo: Optional[str] = Query(None, description="1/true para activas, cualquier otro valor para inactivas"),
    q: Optional[str] = Query(None, description="Búsqueda por nombre"),
    limit: int = Query(0, ge=0),
    offset: int = Query(0, ge=0),
    repo: BranchRepository = Depends(get_branch_repository),
):
    activo_filter = None if activo is None else activo in TRUTHY
    return await repo.search(org.org_id, activo=activo_filter, q=(q or "").strip() or None, skip=offset, limit=limit)


@branches_router.post(
    "",
    response_model=BranchInDB,
    status_code=status.HTTP_201_CREATED,
    summary="Create a branch",
    tags=["Sucursales"],
)
async def create_branch_endpoint(
    payload: BranchCreateAPI,
    org: CurrentOrg,
    repo: BranchRepository = Depends(get_branch_repository),
):
    branch = await repo.create_for_org(org.org_id, payload.to_document())
    logger.bind(org_id=org.org_id).info(f"Branch created: {branch.id}")
    return branch


@branches_router.put("/{branch_id}", response_model=BranchInDB, summary="Update a branch", tags=["Sucursales"])
async def update_branch_endpoint(
    payload: BranchUpdateAPI,
    org: CurrentOrg,
    branch_id: str = Path(...),
    repo: BranchRepository = Depends(get_branch_repository),
):
    branch = await repo.update_for_org(org.org_id, branch_id, payload.to_document(exclude_unset=True))
    if branch is None:
        raise NotFound("Sucursal no encontrada")
    return branch


@branches_router.delete("/{branch_id}", summary="Delete or archive a branch", tags=["Sucursales"])
async def delete_branch_endpoint(
    org: CurrentOrg,
    branch_id: str = Path(...),
    soft: Optional[str] = Query(None, description="1 para archivar (activo=false) en lugar de borrar"),
    repo: BranchRepository = Depends(get_branch_repository),
    movement_repo: MovementRepository = Depends(get_movement_repository),
):
    log = logger.bind(org_id=org.org_id, branch_id=branch_id)
    if soft == "1":
        if await repo.update_for_org(org.org_id, branch_id, {"activo": False}) is None:
            raise NotFound("Sucursal no encontrada")
        log.info("Branch archived.")
        return {"ok": True, "soft": True}

    if not await repo.delete_for_org(org.org_id, branch_id):
        raise NotFound("Sucursal no encontrada")
    # Movimientos que apuntaban a ella passam a "Sin sucursal"
    await movement_repo.clear_reference(org.org_id, "sucursal_id", branch_id)
    log.info("Branch deleted.")
    return {"ok": True}
