# lavanderia/modules/clients/models.py
from datetime import date
from typing import ClassVar, FrozenSet, Optional

from pydantic import EmailStr, Field

from lavanderia.models.api_common import DocumentModel, RequestSchema


class ClientInDB(DocumentModel):
    nombre: str
    email: Optional[str] = None
    telefono: Optional[str] = None
    acepta_mensajes: bool = True
    notas: Optional[str] = None
    ultima_visita: Optional[date] = None


class ClientCreateAPI(RequestSchema):
    nombre: str = Field(..., min_length=1, description="Nombre completo del cliente")
    email: Optional[EmailStr] = None
    telefono: Optional[str] = Field(None, max_length=30)
    acepta_mensajes: bool = True
    notas: Optional[str] = None
    ultima_visita: Optional[date] = None


class ClientUpdateAPI(RequestSchema):
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset({"email", "telefono", "notas", "ultima_visita"})

    nombre: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    telefono: Optional[str] = Field(None, max_length=30)
    acepta_mensajes: Optional[bool] = None
    notas: Optional[str] = None
    ultima_visita: Optional[date] = None


class MassMessageAPI(RequestSchema):
    message: str = Field(..., min_length=1, description="Plantilla; [Nombre] se reemplaza por el primer nombre")
