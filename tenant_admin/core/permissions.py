# tenant_admin/core/permissions.py
from typing import Optional

from tenant_admin.core.context import Actor
from tenant_admin.core.errors import NotAuthorized

READ = "read"
MANAGE = "manage"

FULL_ACCESS_ROLES = ("admin", "staff")


def can(actor: Actor, action: str, organization_id: Optional[str] = None) -> bool:
    """
    admin / staff may do anything. support operators may only read the
    organization they are attached to.
    """
    if actor.role in FULL_ACCESS_ROLES:
        return True
    if actor.is_support:
        return action == READ and organization_id is not None and organization_id == actor.support_org_id
    return False


def authorize(actor: Actor, action: str, organization_id: Optional[str] = None) -> None:
    if not can(actor, action, organization_id):
        subject = f"organization {organization_id}" if organization_id else ""
        raise NotAuthorized(action, subject)
