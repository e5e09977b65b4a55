# tenant_admin/models/user.py
from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, EmailStr, Field, model_validator

MemberRole = Literal["Member", "Power User", "Admin", "Super Admin"]


class InviteStatus(str, Enum):
    STAGED = "staged"
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"


# invites that still stand for a (future) member of the organization
OPEN_INVITE_STATUSES = (InviteStatus.STAGED.value, InviteStatus.PENDING.value)


class OrgaRelation(BaseModel):
    id: str
    user_id: Optional[str] = None
    organization_id: Optional[str] = None
    role: Optional[str] = None


class User(BaseModel):
    id: str
    uid: Optional[str] = None
    email: Optional[str] = None
    name: Optional[str] = None
    surname: Optional[str] = None
    phone: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    confirmation_token: Optional[str] = None
    confirmation_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    orga_relations: List[OrgaRelation] = Field(default_factory=list)

    @property
    def confirmed(self) -> bool:
        return self.confirmed_at is not None


class OrgaInvite(BaseModel):
    id: str
    organization_id: Optional[str] = None
    user_email: Optional[str] = None
    user_role: Optional[str] = None
    referrer_id: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[User] = None

    @property
    def open(self) -> bool:
        return self.status in OPEN_INVITE_STATUSES


class InviteIn(BaseModel):
    email: EmailStr
    name: Optional[str] = Field(None, max_length=255)
    surname: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=64)
    role: MemberRole = "Member"

    def user_attributes(self) -> Dict[str, Any]:
        return self.model_dump(include={"email", "name", "surname", "phone"}, exclude_none=True)


class InviteRequest(BaseModel):
    user: InviteIn


class MemberRef(BaseModel):
    """Identifies a member by user id, or a pending invite by email."""

    id: Optional[str] = None
    email: Optional[EmailStr] = None

    @model_validator(mode="after")
    def check_id_or_email(self) -> "MemberRef":
        if not self.id and not self.email:
            raise ValueError("member id or email is required")
        return self


class MemberUpdate(MemberRef):
    role: MemberRole


class UpdateMemberRequest(BaseModel):
    member: MemberUpdate


class RemoveMemberRequest(BaseModel):
    member: MemberRef


class InvitedUser(BaseModel):
    """Invite outcome for a user who already confirmed their account."""

    kind: Literal["user"] = "user"
    user: User
    invite: OrgaInvite


class StagedInvite(BaseModel):
    """Invite outcome for an unconfirmed user: the invitation stands in for the membership."""

    kind: Literal["invite"] = "invite"
    invite: OrgaInvite


InviteResult = Annotated[Union[InvitedUser, StagedInvite], Field(discriminator="kind")]
