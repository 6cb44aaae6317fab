# lavanderia/modules/categories/models.py
from typing import Literal, Optional

from pydantic import Field

from lavanderia.models.api_common import DocumentModel, RequestSchema

MOVEMENT_KINDS = Literal["ingreso", "egreso"]


class CategoryInDB(DocumentModel):
    nombre: str
    tipo: MOVEMENT_KINDS
    activo: bool = True


class CategoryCreateAPI(RequestSchema):
    nombre: str = Field(..., min_length=1)
    tipo: MOVEMENT_KINDS
    activo: bool = True


class CategoryUpdateAPI(RequestSchema):
    nombre: Optional[str] = Field(None, min_length=1)
    tipo: Optional[MOVEMENT_KINDS] = None
    activo: Optional[bool] = None
