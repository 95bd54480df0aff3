from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from frame.models.user import UserRole


# Properties to return to client
class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    org_id: int
    name: str
    email: str
    role: UserRole
    active: bool = True
    created_at: Optional[datetime] = None


# Properties an owner may change on a team member
class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[UserRole] = None
    active: Optional[bool] = None
