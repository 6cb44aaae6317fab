# lavanderia/modules/organizations/models.py
from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from lavanderia.models.api_common import PyObjectId


class MembershipInDB(BaseModel):
    id: PyObjectId = Field(..., validation_alias=AliasChoices("_id", "id"))
    org_id: str
    user_id: str
    rol: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
