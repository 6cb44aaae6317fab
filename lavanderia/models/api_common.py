# lavanderia/models/api_common.py

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, ClassVar, FrozenSet, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer

# ObjectId do Mongo exposto como string na API
PyObjectId = Annotated[str, BeforeValidator(lambda v: str(v) if v is not None else v)]

# Decimais armazenados como string, expostos como número no JSON
Money = Annotated[Decimal, PlainSerializer(lambda v: float(v), return_type=float, when_used="json")]


class DocumentModel(BaseModel):
    """Base para documentos lidos do banco (tenant-scoped)."""

    id: PyObjectId = Field(..., validation_alias=AliasChoices("_id", "id"))
    org_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RequestSchema(BaseModel):
    """Base para payloads de entrada: campos desconhecidos são rejeitados.

    `org_id` é aceito apenas como dica para resolver a organização no guard;
    nunca é gravado.
    """

    org_id: Optional[str] = Field(default=None, exclude=True)

    # campos que aceitam null explícito (ex: desvincular categoria)
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    def to_document(self, exclude_unset: bool = False) -> dict[str, Any]:
        data = self.model_dump(exclude_unset=exclude_unset, exclude={"org_id"})
        return {k: v for k, v in data.items() if v is not None or k in self.nullable_fields}
