# tenant_admin/models/organization.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from tenant_admin.models.user import OrgaInvite, OrgaRelation, User

# statuses in which an app instance counts as provisioned for its organization
ACTIVE_STATUSES = ("provisioning", "staged", "provisioned", "starting", "running", "stopping", "stopped",
                   "updating", "active")


class App(BaseModel):
    id: Optional[str] = None
    nid: Optional[str] = None
    name: Optional[str] = None
    logo: Optional[str] = None


class AppInstance(BaseModel):
    id: str
    uid: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    owner_id: Optional[str] = None
    app_nid: Optional[str] = None
    app: Optional[App] = None
    created_at: Optional[datetime] = None

    @property
    def active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def nid(self) -> Optional[str]:
        if self.app is not None and self.app.nid:
            return self.app.nid
        return self.app_nid


class MainAddress(BaseModel):
    id: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    state_code: Optional[str] = None
    country_code: Optional[str] = None


class Organization(BaseModel):
    id: str
    uid: Optional[str] = None
    name: Optional[str] = None
    account_frozen: bool = False
    soa_enabled: Optional[bool] = None
    demo_account: Optional[bool] = None
    billing_currency: Optional[str] = None
    external_id: Optional[str] = None
    industry: Optional[str] = None
    size: Optional[str] = None
    financial_year_end_month: Optional[int] = None
    financial_metrics: Optional[Dict[str, Any]] = None
    geo_country_code: Optional[str] = None
    geo_state_code: Optional[str] = None
    geo_city: Optional[str] = None
    geo_tz: Optional[str] = None
    geo_currency: Optional[str] = None
    belong_to_sub_tenant: Optional[bool] = None
    belong_to_account_manager: Optional[bool] = None
    created_at: Optional[datetime] = None
    main_address: Optional[MainAddress] = None
    app_instances: List[AppInstance] = Field(default_factory=list)
    users: List[User] = Field(default_factory=list)
    orga_relations: List[OrgaRelation] = Field(default_factory=list)
    orga_invites: List[OrgaInvite] = Field(default_factory=list)

    def active_app_instances(self) -> List[AppInstance]:
        return [instance for instance in self.app_instances if instance.active]

    def relation_for(self, user_id: str) -> Optional[OrgaRelation]:
        return next((r for r in self.orga_relations if r.user_id == user_id), None)

    def role_of(self, user_id: str) -> Optional[str]:
        relation = self.relation_for(user_id)
        return relation.role if relation else None


class ArrearsSituation(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    status: Optional[str] = None


class MainAddressIn(BaseModel):
    street: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)
    postal_code: Optional[str] = Field(None, max_length=32)
    state_code: Optional[str] = Field(None, max_length=16)
    country_code: Optional[str] = Field(None, pattern=r"^[A-Z]{2}$")


class OrganizationIn(BaseModel):
    # writable attributes of an organization plus the desired app list
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    billing_currency: Optional[str] = Field(None, pattern=r"^[A-Z]{3}$")
    main_address_attributes: Optional[MainAddressIn] = None
    app_nids: Optional[List[str]] = None

    @property
    def has_app_list(self) -> bool:
        # an explicit null counts as "present", an omitted key does not
        return "app_nids" in self.model_fields_set

    def desired_app_nids(self) -> List[str]:
        return list(self.app_nids or [])

    def writable_attributes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude={"app_nids"})


class OrganizationCreateIn(OrganizationIn):
    name: str = Field(..., min_length=1, max_length=255)


class OrganizationRequest(BaseModel):
    organization: OrganizationIn


class OrganizationCreateRequest(BaseModel):
    organization: OrganizationCreateIn
