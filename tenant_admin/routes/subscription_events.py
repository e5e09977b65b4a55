# tenant_admin/routes/subscription_events.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from tenant_admin.core.context import RequestContext
from tenant_admin.core.deps import block_support_users, get_request_context
from tenant_admin.core.permissions import READ, authorize
from tenant_admin.db.hub import HubClient, get_hub
from tenant_admin.services.subscription_event_service import SubscriptionEventService

router = APIRouter(tags=["subscription_events"])

NESTED = "/organizations/{organization_id}/subscriptions/{subscription_id}/subscription_events"


class SubscriptionEventsOut(BaseModel):
    subscription_events: List[dict]


class SubscriptionEventOut(BaseModel):
    subscription_event: dict


@router.get(NESTED, response_model=SubscriptionEventsOut)
async def list_subscription_events(
    organization_id: str,
    subscription_id: str,
    ctx: RequestContext = Depends(get_request_context),
    hub: HubClient = Depends(get_hub),
):
    authorize(ctx.actor, READ, organization_id)
    events = await SubscriptionEventService(hub, ctx).list_events(organization_id, subscription_id)
    return {"subscription_events": [e.model_dump(mode="json") for e in events]}


@router.get(NESTED + "/{event_id}", response_model=SubscriptionEventOut)
async def get_subscription_event(
    organization_id: str,
    subscription_id: str,
    event_id: str,
    ctx: RequestContext = Depends(get_request_context),
    hub: HubClient = Depends(get_hub),
):
    authorize(ctx.actor, READ, organization_id)
    event = await SubscriptionEventService(hub, ctx).get_event(event_id, organization_id, subscription_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription event not found")
    return {"subscription_event": event.model_dump(mode="json")}


@router.post("/subscription_events/{event_id}/approve", response_model=SubscriptionEventOut)
async def approve_subscription_event(
    event_id: str,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    event = await SubscriptionEventService(hub, ctx).approve(event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription event not found")
    return {"subscription_event": event.model_dump(mode="json")}


@router.post("/subscription_events/{event_id}/reject", response_model=SubscriptionEventOut)
async def reject_subscription_event(
    event_id: str,
    ctx: RequestContext = Depends(block_support_users),
    hub: HubClient = Depends(get_hub),
):
    event = await SubscriptionEventService(hub, ctx).reject(event_id)
    if event is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subscription event not found")
    return {"subscription_event": event.model_dump(mode="json")}
