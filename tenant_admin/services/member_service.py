# tenant_admin/services/member_service.py
import logging
from datetime import datetime, timezone
from typing import Optional, Union

from tenant_admin.core.context import RequestContext
from tenant_admin.core.security import generate_friendly_token, hash_password
from tenant_admin.db.hub import HubClient
from tenant_admin.models.organization import Organization
from tenant_admin.models.user import (
    InviteIn,
    InviteResult,
    InviteStatus,
    InvitedUser,
    MemberRef,
    OrgaInvite,
    OrgaRelation,
    StagedInvite,
    User,
)
from tenant_admin.models.utils import compact

logger = logging.getLogger(__name__)

MEMBER_DEPENDENCIES = ("users", "orga_invites", "orga_relations")

Member = Union[User, OrgaInvite]


class MemberService:
    """
    Organization membership: inviting users (creating them when needed),
    changing member roles and removing members.
    No emails are sent from here; invites are dispatched later by an explicit step.
    """

    def __init__(self, hub: HubClient, ctx: RequestContext) -> None:
        self.hub = hub
        self.ctx = ctx

    async def find_organization(self, org_id: str, *includes: str) -> Optional[Organization]:
        record = await (
            self.hub.query("organizations")
            .with_params(_metadata=self.ctx.special_roles_metadata())
            .includes(*includes)
            .find(org_id)
        )
        return Organization.model_validate(record) if record else None

    async def find_user_by_email(self, email: str) -> Optional[User]:
        record = await self.hub.query("users").includes("orga_relations").where(email=email).first()
        return User.model_validate(record) if record else None

    async def create_unconfirmed_user(self, attributes: dict) -> User:
        """
        Create a user without sending the confirmation notification, then clear the
        confirmation token and timestamp so the later "send invite" step can
        regenerate them and record when the invite actually went out.
        """
        now = datetime.now(timezone.utc)
        created = await self.hub.create(
            "users",
            {
                **compact(attributes),
                "encrypted_password": hash_password(generate_friendly_token()),
                "confirmation_token": generate_friendly_token(),
                "confirmation_sent_at": now.isoformat(),
            },
            meta={"skip_confirmation_notification": True},
        )
        user_id = created["id"]
        await self.hub.update("users", user_id, {"confirmation_token": None, "confirmation_sent_at": None})
        logger.info("Created unconfirmed user %s (%s)", user_id, attributes.get("email"))

        record = await self.hub.query("users").includes("orga_relations").find(user_id)
        return User.model_validate(record or {**created, "confirmation_token": None, "confirmation_sent_at": None})

    async def invite_member(self, org_id: str, invite_in: InviteIn) -> Optional[InviteResult]:
        """
        Find or create the user behind invite_in.email and stage an invitation to
        the organization. Returns None when the organization does not exist.

        Confirmed users come back as InvitedUser; unconfirmed ones as StagedInvite,
        since they have no membership of their own until they accept.
        """
        organization = await self.find_organization(org_id, "orga_relations")
        if organization is None:
            return None

        user = await self.find_user_by_email(invite_in.email)
        if user is None:
            user = await self.create_unconfirmed_user(invite_in.user_attributes())

        # TODO: user creation and invite creation are not atomic; a failing invite leaves the new user behind
        created = await self.hub.create(
            "orga_invites",
            {
                "organization_id": organization.id,
                "user_email": user.email,
                "user_role": invite_in.role,
                "referrer_id": self.ctx.actor.hub_user_id,
                "status": InviteStatus.STAGED.value,
            },
        )
        logger.info("Staged invite %s for %s to organization %s", created["id"], user.email, organization.id)

        record = await self.hub.query("orga_invites").includes("user").find(created["id"])
        invite = OrgaInvite.model_validate(record or created)

        if user.confirmed:
            return InvitedUser(user=user, invite=invite)
        return StagedInvite(invite=invite)

    @staticmethod
    def requested_member(organization: Organization, ref: MemberRef) -> Optional[Member]:
        """
        Look the member up by user id first: a user who changed their email but has
        not confirmed it yet cannot be found by email. Fall back to a pending invite;
        staged invites have not been sent yet and are left alone.
        """
        if ref.id:
            user = next((u for u in organization.users if u.id == ref.id), None)
            if user is not None:
                return user
        if ref.email:
            return next(
                (i for i in organization.orga_invites
                 if i.status == InviteStatus.PENDING.value and (i.user_email or "").lower() == ref.email.lower()),
                None,
            )
        return None

    async def update_member(self, org_id: str, ref: MemberRef, role: str) -> Optional[Organization]:
        organization = await self.find_organization(org_id, *MEMBER_DEPENDENCIES)
        if organization is None:
            return None
        member = self.requested_member(organization, ref)
        if member is None:
            raise LookupError("Member not found")

        if isinstance(member, User):
            relation = organization.relation_for(member.id)
            if relation is None:
                raise LookupError("Member not found")
            await self.hub.update("orga_relations", relation.id, {"role": role})
        else:
            await self.hub.update("orga_invites", member.id, {"user_role": role})
        logger.info("Set role %s for member %s of organization %s", role, member.id, org_id)

        return await self.find_organization(org_id, *MEMBER_DEPENDENCIES)

    async def remove_member(self, org_id: str, ref: MemberRef) -> Optional[Organization]:
        organization = await self.find_organization(org_id, *MEMBER_DEPENDENCIES)
        if organization is None:
            return None
        member = self.requested_member(organization, ref)
        if member is None:
            raise LookupError("Member not found")

        if isinstance(member, User):
            relation = organization.relation_for(member.id)
            if relation is not None:
                await self.hub.destroy("orga_relations", relation.id)
            logger.info("Removed user %s from organization %s", member.id, org_id)
        else:
            await self.hub.perform("PATCH", f"orga_invites/{member.id}/decline")
            logger.info("Declined invite %s to organization %s", member.id, org_id)

        return await self.find_organization(org_id, *MEMBER_DEPENDENCIES)

    async def add_member(self, organization: Organization, user: User, role: str) -> Optional[OrgaRelation]:
        """Attach user to organization unless already a member. Returns the new relation."""
        if organization.relation_for(user.id) is not None:
            return None
        created = await self.hub.create(
            "orga_relations", {"organization_id": organization.id, "user_id": user.id, "role": role}
        )
        relation = OrgaRelation.model_validate(
            {"organization_id": organization.id, "user_id": user.id, "role": role, **created}
        )
        organization.orga_relations.append(relation)
        return relation
