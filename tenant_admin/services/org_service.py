# tenant_admin/services/org_service.py
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

from tenant_admin.core.context import RequestContext
from tenant_admin.db.hub import HubClient
from tenant_admin.db.jsonapi import Query
from tenant_admin.models.organization import (
    ACTIVE_STATUSES,
    AppInstance,
    ArrearsSituation,
    Organization,
    OrganizationIn,
)
from tenant_admin.models.query import QueryParams
from tenant_admin.services.app_list import reconcile_app_list

logger = logging.getLogger(__name__)

DEPENDENCIES = (
    "app_instances", "app_instances.app", "users", "orga_relations", "invoices",
    "credit_card", "orga_invites", "orga_invites.user", "main_address",
)

INDEX_FIELDS = (
    "uid", "name", "account_frozen", "soa_enabled", "mails", "logo", "latitude", "longitude",
    "geo_country_code", "geo_state_code", "geo_city", "geo_tz", "geo_currency", "metadata",
    "industry", "size", "financial_year_end_month", "credit_card", "financial_metrics",
    "created_at", "external_id", "belong_to_sub_tenant", "belong_to_account_manager", "demo_account",
)

SHOW_FIELDS = (
    "name", "uid", "soa_enabled", "created_at", "account_frozen", "financial_metrics",
    "billing_currency", "external_id", "app_instances", "orga_invites", "users", "orga_relations",
    "invoices", "credit_card", "demo_account", "main_address", "current_credit",
)


class OrganizationService:
    """
    Organization lifecycle operations for the admin panel (list, show, create,
    update, freeze). Tenant data lives on the hub; this class only builds the
    queries and drives the app-list reconciliation.
    """

    def __init__(self, hub: HubClient, ctx: RequestContext) -> None:
        self.hub = hub
        self.ctx = ctx

    def _scoped(self) -> Query:
        return self.hub.query("organizations").with_params(_metadata=self.ctx.special_roles_metadata())

    @staticmethod
    def _with_scope_filters(query: Query, sub_tenant_id: Optional[str], account_manager_id: Optional[str]) -> Query:
        if sub_tenant_id:
            query = query.with_params(sub_tenant_id=sub_tenant_id)
        if account_manager_id:
            query = query.with_params(account_manager_id=account_manager_id)
        return query

    @staticmethod
    def parse_terms(terms: str) -> Dict[str, Any]:
        """Search terms come as a JSON object; each key/value pair is searched separately."""
        try:
            parsed = json.loads(terms)
        except json.JSONDecodeError:
            raise ValueError("terms must be a JSON object")
        if not isinstance(parsed, dict):
            raise ValueError("terms must be a JSON object")
        return parsed

    async def list_organizations(
        self,
        query_params: QueryParams,
        terms: Optional[str] = None,
        external_id: Optional[str] = None,
        sub_tenant_id: Optional[str] = None,
        account_manager_id: Optional[str] = None,
    ) -> Tuple[List[Organization], int]:
        """
        Return (organizations, total count).
        - external_id: exact lookup used by support operators
        - terms: search mode, union of one query per term
        - otherwise: paginated index
        """
        if external_id:
            records = await self.hub.query("organizations").select(*INDEX_FIELDS).where(external_id=external_id).to_list()
            organizations = [Organization.model_validate(r) for r in records]
            return organizations, len(organizations)

        if terms is not None:
            found: Dict[str, Organization] = {}
            for key, value in self.parse_terms(terms).items():
                query = (
                    self._scoped()
                    .apply_query_params(query_params)
                    .select(*INDEX_FIELDS)
                    .where({key: value})
                )
                query = self._with_scope_filters(query, sub_tenant_id, account_manager_id)
                for record in await query.to_list():
                    found.setdefault(record["id"], Organization.model_validate(record))
            organizations = list(found.values())
            return organizations, len(organizations)

        query = self._scoped().apply_query_params(query_params).select(*INDEX_FIELDS)
        query = self._with_scope_filters(query, sub_tenant_id, account_manager_id)
        result = await query.all()
        return [Organization.model_validate(r) for r in result.records], result.record_count

    async def find_organization(self, org_id: str, *includes: str, fields: Tuple[str, ...] = ()) -> Optional[Organization]:
        query = self._scoped().includes(*includes)
        if fields:
            query = query.select(*fields)
        record = await query.find(org_id)
        return Organization.model_validate(record) if record else None

    async def get_active_apps(self, org_id: str) -> List[AppInstance]:
        records = await (
            self.hub.query("app_instances")
            .includes("app", "sync_status")
            .where({"owner.id": org_id, "status.in": list(ACTIVE_STATUSES), "fulfilled_only": True})
            .to_list()
        )
        instances = [AppInstance.model_validate(r) for r in records]
        return [instance for instance in instances if instance.active]

    async def get_organization(self, org_id: str) -> Optional[Tuple[Organization, List[AppInstance]]]:
        organization = await self.find_organization(org_id, *DEPENDENCIES, fields=SHOW_FIELDS)
        if organization is None:
            return None
        return organization, await self.get_active_apps(org_id)

    async def count(self) -> int:
        record = await (
            self.hub.query("tenant_reporting")
            .with_params(_metadata=self.ctx.special_roles_metadata())
            .first()
        )
        return int((record or {}).get("organizations_count") or 0)

    async def in_arrears(self) -> List[ArrearsSituation]:
        records = await self.hub.query("arrears_situations").to_list()
        return [ArrearsSituation.model_validate(r) for r in records]

    async def apply_app_list(self, organization: Organization, payload: OrganizationIn) -> None:
        # an absent app_nids key leaves the app list alone, an empty one clears it
        if not payload.has_app_list:
            return
        plan = await reconcile_app_list(self.hub, organization, payload.desired_app_nids())
        logger.info(
            "Reconciled apps for organization %s: kept=%d terminated=%d provisioned=%d",
            organization.id, len(plan.keep), len(plan.terminate), len(plan.provision),
        )

    async def create_organization(self, payload: OrganizationIn) -> Tuple[Organization, List[AppInstance]]:
        created = await self.hub.create("organizations", payload.writable_attributes())
        logger.info("Created organization %s (%s)", created["id"], payload.name)

        organization = await self.find_organization(created["id"], *DEPENDENCIES)
        if organization is None:
            organization = Organization.model_validate(created)
        await self.apply_app_list(organization, payload)

        organization = await self.find_organization(created["id"], *DEPENDENCIES) or organization
        return organization, organization.app_instances

    async def update_organization(
        self, org_id: str, payload: OrganizationIn
    ) -> Optional[Tuple[Organization, List[AppInstance]]]:
        organization = await self.find_organization(org_id, *DEPENDENCIES)
        if organization is None:
            return None

        await self.apply_app_list(organization, payload)
        attributes = payload.writable_attributes()
        if attributes:
            await self.hub.update("organizations", organization.id, attributes)

        organization = await self.find_organization(org_id, *DEPENDENCIES) or organization
        return organization, organization.active_app_instances()

    async def _set_frozen(self, org_id: str, frozen: bool) -> Optional[Organization]:
        organization = await self.find_organization(org_id, *DEPENDENCIES)
        if organization is None:
            return None
        action = "freeze" if frozen else "unfreeze"
        await self.hub.perform("PATCH", f"organizations/{organization.id}/{action}")
        logger.info("Organization %s: %s", organization.id, action)
        return organization.model_copy(update={"account_frozen": frozen})

    async def freeze(self, org_id: str) -> Optional[Organization]:
        return await self._set_frozen(org_id, True)

    async def unfreeze(self, org_id: str) -> Optional[Organization]:
        return await self._set_frozen(org_id, False)
