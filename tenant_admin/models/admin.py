# tenant_admin/models/admin.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, Literal

AdminRole = Literal["admin", "staff", "support"]


class AdminOut(BaseModel):
    # admin_users documents also hold password_hash, never returned
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    email: EmailStr
    admin_role: AdminRole = "admin"
    # id of the matching user record on the hub, sent as referrer / act_as_manager
    user_id: Optional[str] = None
    # organization a support operator is currently attached to
    support_org_id: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
