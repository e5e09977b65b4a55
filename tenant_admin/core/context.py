# tenant_admin/core/context.py
from typing import Any, Dict, Optional

from pydantic import BaseModel

from tenant_admin.models.admin import AdminRole


class Actor(BaseModel):
    """The admin panel operator behind the current request."""

    id: str
    email: str
    role: AdminRole
    user_id: Optional[str] = None
    support_org_id: Optional[str] = None

    @property
    def is_support(self) -> bool:
        return self.role == "support"

    @property
    def hub_user_id(self) -> str:
        return self.user_id or self.id


class RequestContext(BaseModel):
    """Per-request capabilities handed to services instead of ambient globals."""

    actor: Actor
    support_enabled: bool = False

    def special_roles_metadata(self, **extra: Any) -> Dict[str, Any]:
        """_metadata sent with tenant-scoped reads so the hub scopes them to the actor."""
        return {"act_as_manager": self.actor.hub_user_id, **extra}
