# tenant_admin/services/csv_importer.py
"""
Batch import of organizations and their users from a CSV file.

The whole file is validated before anything is written to the hub; any invalid
row aborts the import with CSVImportError listing every problem found.
"""
import csv
import io
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, EmailStr, Field, ValidationError

from tenant_admin.core.context import RequestContext
from tenant_admin.core.errors import CSVImportError
from tenant_admin.db.hub import HubClient
from tenant_admin.models.organization import Organization
from tenant_admin.models.user import MemberRole
from tenant_admin.services.member_service import MemberService

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("company_name", "email")
OPTIONAL_COLUMNS = ("external_id", "billing_currency", "name", "surname", "phone", "role")


class BatchRow(BaseModel):
    company_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    external_id: Optional[str] = None
    billing_currency: Optional[str] = Field(None, pattern=r"^[A-Z]{3}$")
    name: Optional[str] = None
    surname: Optional[str] = None
    phone: Optional[str] = None
    role: MemberRole = "Super Admin"

    def user_attributes(self) -> Dict[str, Any]:
        return self.model_dump(include={"email", "name", "surname", "phone"}, exclude_none=True)


def parse_rows(content: str) -> List[BatchRow]:
    reader = csv.DictReader(io.StringIO(content))
    headers = [h.strip() for h in (reader.fieldnames or [])]
    missing = [c for c in REQUIRED_COLUMNS if c not in headers]
    if missing:
        raise CSVImportError([{"row": 1, "field": c, "message": "missing column"} for c in missing])

    rows: List[BatchRow] = []
    errors: List[Dict[str, Any]] = []
    # row 1 is the header line
    for line_number, raw in enumerate(reader, start=2):
        # blank cells count as absent so column defaults apply
        values = {
            k.strip(): v.strip()
            for k, v in raw.items()
            if k and isinstance(v, str) and v.strip()
        }
        if not values:
            continue
        try:
            rows.append(BatchRow.model_validate(values))
        except ValidationError as e:
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"]) or "row"
                errors.append({"row": line_number, "field": field, "message": error["msg"]})

    if errors:
        raise CSVImportError(errors)
    if not rows:
        raise CSVImportError([{"row": 2, "field": "row", "message": "file contains no data rows"}])
    return rows


class CSVImporter:
    def __init__(self, hub: HubClient, ctx: RequestContext) -> None:
        self.hub = hub
        self.ctx = ctx
        self.members = MemberService(hub, ctx)

    async def _find_organization(self, row: BatchRow) -> Optional[Organization]:
        query = self.hub.query("organizations").includes("orga_relations")
        if row.external_id:
            query = query.where(external_id=row.external_id)
        else:
            query = query.where(name=row.company_name)
        record = await query.first()
        return Organization.model_validate(record) if record else None

    async def process(self, content: str) -> Dict[str, Any]:
        rows = parse_rows(content)
        report: Dict[str, Any] = {
            "organizations": {"created": [], "updated": []},
            "users": {"created": [], "updated": []},
        }
        # organizations seen in this file, keyed by external id and by name
        organizations: Dict[str, Organization] = {}
        reported_ids = set()

        for row in rows:
            organization = organizations.get(row.external_id or row.company_name)
            if organization is None:
                organization = await self._find_organization(row)
            if organization is None:
                attributes = {"name": row.company_name, "external_id": row.external_id,
                              "billing_currency": row.billing_currency}
                created = await self.hub.create("organizations", {k: v for k, v in attributes.items() if v})
                organization = Organization.model_validate(created)
                report["organizations"]["created"].append(_org_summary(organization))
                reported_ids.add(organization.id)
            elif organization.id not in reported_ids:
                report["organizations"]["updated"].append(_org_summary(organization))
                reported_ids.add(organization.id)
            for key in (row.external_id, row.company_name, organization.external_id):
                if key:
                    organizations.setdefault(key, organization)

            user = await self.members.find_user_by_email(row.email)
            if user is None:
                user = await self.members.create_unconfirmed_user(row.user_attributes())
                report["users"]["created"].append({"id": user.id, "email": user.email})
            else:
                report["users"]["updated"].append({"id": user.id, "email": user.email})

            await self.members.add_member(organization, user, row.role)

        logger.info(
            "Batch import: %d organizations created, %d users created",
            len(report["organizations"]["created"]), len(report["users"]["created"]),
        )
        return report


def _org_summary(organization: Organization) -> Dict[str, Any]:
    return {"id": organization.id, "uid": organization.uid, "name": organization.name,
            "external_id": organization.external_id}
