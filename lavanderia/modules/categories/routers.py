# lavanderia/modules/categories/routers.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from loguru import logger

from lavanderia.core.exceptions import NotFound
from lavanderia.core.security import CurrentOrg
from lavanderia.modules.movements.repository import MovementRepository, get_movement_repository
from .models import MOVEMENT_KINDS, CategoryCreateAPI, CategoryInDB, CategoryUpdateAPI
from .repository import CategoryRepository, get_category_repository

categories_router = APIRouter()


@categories_router.get("", response_model=List[CategoryInDB], summary="List categories", tags=["Categorías"])
async def list_categories_endpoint(
    org: CurrentOrg,
    tipo: Optional[MOVEMENT_KINDS] = Query(None),
    repo: CategoryRepository = Depends(get_category_repository),
):
    return await repo.list_sorted(org.org_id, tipo)


@categories_router.post(
    "",
    response_model=CategoryInDB,
    status_code=status.HTTP_201_CREATED,
    summary="Create a category",
    tags=["Categorías"],
)
async def create_category_endpoint(
    payload: CategoryCreateAPI,
    org: CurrentOrg,
    repo: CategoryRepository = Depends(get_category_repository),
):
    category = await repo.create_for_org(org.org_id, payload.to_document())
    logger.bind(org_id=org.org_id).info(f"Category created: {category.id}")
    return category


@categories_router.put("/{category_id}", response_model=CategoryInDB, summary="Update a category", tags=["Categorías"])
async def update_category_endpoint(
    payload: CategoryUpdateAPI,
    org: CurrentOrg,
    category_id: str = Path(...),
    repo: CategoryRepository = Depends(get_category_repository),
):
    category = await repo.update_for_org(org.org_id, category_id, payload.to_document(exclude_unset=True))
    if category is None:
        raise NotFound("Categoría no encontrada")
    return category


@categories_router.delete("/{category_id}", summary="Delete a category", tags=["Categorías"])
async def delete_category_endpoint(
    org: CurrentOrg,
    category_id: str = Path(...),
    repo: CategoryRepository = Depends(get_category_repository),
    movement_repo: MovementRepository = Depends(get_movement_repository),
):
    if not await repo.delete_for_org(org.org_id, category_id):
        raise NotFound("Categoría no encontrada")
    await movement_repo.clear_reference(org.org_id, "categoria_id", category_id)
    return {"ok": True}
