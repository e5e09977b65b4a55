# tenant_admin/routes/render.py
from typing import Any, Dict, List, Optional, Union

from tenant_admin.models.organization import AppInstance, Organization
from tenant_admin.models.user import InvitedUser, OrgaInvite, StagedInvite, User


def render_app_instance(instance: AppInstance) -> Dict[str, Any]:
    return {
        "id": instance.id,
        "uid": instance.uid,
        "name": instance.name,
        "status": instance.status,
        "app_nid": instance.nid,
        "app_name": instance.app.name if instance.app else None,
        "created_at": instance.created_at.isoformat() if instance.created_at else None,
    }


def render_member(member: Union[User, OrgaInvite], organization: Optional[Organization] = None) -> Dict[str, Any]:
    if isinstance(member, User):
        return {
            "entity": "User",
            "id": member.id,
            "uid": member.uid,
            "name": member.name,
            "surname": member.surname,
            "email": member.email,
            "role": organization.role_of(member.id) if organization else None,
            "confirmed": member.confirmed,
        }
    user = member.user
    return {
        "entity": "OrgInvite",
        "id": member.id,
        "user_id": user.id if user else None,
        "name": user.name if user else None,
        "surname": user.surname if user else None,
        "email": member.user_email,
        "role": member.user_role,
        "status": member.status,
    }


def render_members(organization: Organization) -> Dict[str, Any]:
    members: List[Dict[str, Any]] = [render_member(u, organization) for u in organization.users]
    members.extend(render_member(i) for i in organization.orga_invites if i.open)
    return {"members": members}


def render_organization_summary(organization: Organization) -> Dict[str, Any]:
    return organization.model_dump(
        mode="json", exclude={"app_instances", "users", "orga_relations", "orga_invites", "main_address"}
    )


def render_organization(organization: Organization, active_apps: List[AppInstance]) -> Dict[str, Any]:
    data = render_organization_summary(organization)
    data["main_address"] = organization.main_address.model_dump(mode="json") if organization.main_address else None
    data["active_apps"] = [render_app_instance(i) for i in active_apps]
    data.update(render_members(organization))
    return {"organization": data}


def render_invite_result(result: Union[InvitedUser, StagedInvite]) -> Dict[str, Any]:
    if isinstance(result, InvitedUser):
        return {"user": render_member(result.user) | {"role": result.invite.user_role}}
    return {"user": render_member(result.invite)}
