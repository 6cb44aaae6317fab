# lavanderia/modules/branches/models.py
from typing import Optional

from pydantic import Field

from lavanderia.models.api_common import DocumentModel, RequestSchema


class BranchInDB(DocumentModel):
    nombre: str
    activo: bool = True


class BranchCreateAPI(RequestSchema):
    nombre: str = Field(..., min_length=1)
    activo: bool = True


class BranchUpdateAPI(RequestSchema):
    nombre: Optional[str] = Field(None, min_length=1)
    activo: Optional[bool] = None
