# tenant_admin/routes/organizations.py
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import BaseModel

from tenant_admin.core.deps import block_support_users, get_query_params, get_request_context
from tenant_admin.core.context import RequestContext
from tenant_admin.core.permissions import READ, authorize
from tenant_admin.db.hub import HubClient, get_hub
from tenant_admin.models.organization import OrganizationCreateRequest, OrganizationRequest
from tenant_admin.models.query import QueryParams
from tenant_admin.models.user import InviteRequest, RemoveMemberRequest, UpdateMemberRequest
from tenant_admin.routes.render import (
    render_invite_result,
    render_members,
    render_organization,
    render_organization_summary,
)
from tenant_admin.services.csv_importer import CSVImporter
from tenant_admin.services.member_service import MemberService
from tenant_admin.services.org_service import OrganizationService

router = APIRouter(prefix="/organizations", tags=["organizations"])

# batch import lives under the singular path
import_router = APIRouter(prefix="/organization", tags=["organizations"])

BATCH_EXAMPLE = "batch-example.csv"
ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"


class OrganizationsOut(BaseModel):
    organizations: List[dict]


class OrganizationOut(BaseModel):
    organization: dict


class CountOut(BaseModel):
    count: int


class ArrearsOut(BaseModel):
    in_arrears: List[dict]


class MembersOut(BaseModel):
    members: List[dict]


class InviteOut(BaseModel):
    user: dict


def not_found(thing: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{thing} not found")


@router.get("", response_model=OrganizationsOut)
async def list_organizations(
    response: Response,
    terms: Optional[str] = Query(None, description="JSON object of search terms, one query per key"),
    organization_external_id: Optional[str] = Query(None, description="Exact external id lookup (support)"),
    sub_tenant_id: Optional[str] = None,
    account_manager_id: Optional[str] = None,
    query_params: QueryParams = Depends(get_query_params),
    ctx: RequestContext = Depends(get_request_context),
    hub: HubClient = Depends(get_hub),
):
    # support operators may only look organizations up by external id
    if ctx.actor.is_support and not (organization_external_id and ctx.support_enabled):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    service = OrganizationService(hub, ctx)
    try:
        organizations, total = await service.list_organizations(
            query_params,
            terms=terms,
            external_id=organization_external_id,
            sub_tenant_id=sub_tenant_id,
            account_manager_id=account_manager_id,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    response.headers["X-Total-Count"] = str(total)
    return {"organizations": [render_organization_summary(o) for o in organizations]}


@router.get("/count", response_model=CountOut)
async def count_organizations(
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    return {"count": await OrganizationService(hub, ctx).count()}


@router.get("/in_arrears", response_model=ArrearsOut)
async def in_arrears(
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    arrears = await OrganizationService(hub, ctx).in_arrears()
    return {"in_arrears": [a.model_dump(mode="json") for a in arrears]}


@router.get("/download_batch_example", response_class=FileResponse)
async def download_batch_example(ctx: RequestContext = Depends(block_support_users)):
    path = ASSETS_DIR / BATCH_EXAMPLE
    return FileResponse(str(path), filename=BATCH_EXAMPLE, media_type="application/csv")


@router.get("/{org_id}", response_model=OrganizationOut)
async def get_organization(
    org_id: str,
    ctx: RequestContext = Depends(get_request_context),
    hub: HubClient = Depends(get_hub),
):
    authorize(ctx.actor, READ, org_id)
    result = await OrganizationService(hub, ctx).get_organization(org_id)
    if result is None:
        raise not_found("Organization")
    organization, active_apps = result
    return render_organization(organization, active_apps)


@router.post("", response_model=OrganizationOut, status_code=status.HTTP_201_CREATED)
async def create_organization(
    payload: OrganizationCreateRequest,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    organization, active_apps = await OrganizationService(hub, ctx).create_organization(payload.organization)
    return render_organization(organization, active_apps)


@router.patch("/{org_id}", response_model=OrganizationOut)
async def update_organization(
    org_id: str,
    payload: OrganizationRequest,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    result = await OrganizationService(hub, ctx).update_organization(org_id, payload.organization)
    if result is None:
        raise not_found("Organization")
    organization, active_apps = result
    return render_organization(organization, active_apps)


@router.post("/{org_id}/users", response_model=InviteOut)
async def invite_member(
    org_id: str,
    payload: InviteRequest,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    """
    Invite a user to the organization, creating the user if needed.
    No email is sent; invites are dispatched later.
    """
    result = await MemberService(hub, ctx).invite_member(org_id, payload.user)
    if result is None:
        raise not_found("Organization")
    return render_invite_result(result)


@router.put("/{org_id}/update_member", response_model=MembersOut)
async def update_member(
    org_id: str,
    payload: UpdateMemberRequest,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    try:
        organization = await MemberService(hub, ctx).update_member(org_id, payload.member, payload.member.role)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if organization is None:
        raise not_found("Organization")
    return render_members(organization)


@router.put("/{org_id}/remove_user", response_model=MembersOut)
async def remove_member(
    org_id: str,
    payload: RemoveMemberRequest,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    try:
        organization = await MemberService(hub, ctx).remove_member(org_id, payload.member)
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if organization is None:
        raise not_found("Organization")
    return render_members(organization)


@router.put("/{org_id}/freeze", response_model=OrganizationOut)
async def freeze_organization(
    org_id: str,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    organization = await OrganizationService(hub, ctx).freeze(org_id)
    if organization is None:
        raise not_found("Organization")
    return render_organization(organization, organization.active_app_instances())


@router.put("/{org_id}/unfreeze", response_model=OrganizationOut)
async def unfreeze_organization(
    org_id: str,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    organization = await OrganizationService(hub, ctx).unfreeze(org_id)
    if organization is None:
        raise not_found("Organization")
    return render_organization(organization, organization.active_app_instances())


@import_router.post("/batch_import")
async def batch_import(
    file: UploadFile = File(..., description="CSV file, see /organizations/download_batch_example"),
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    raw = await file.read()
    try:
        content = raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File must be UTF-8 encoded CSV")
    return {"import_report": await CSVImporter(hub, ctx).process(content)}
