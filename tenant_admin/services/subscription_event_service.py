# tenant_admin/services/subscription_event_service.py
import logging
from typing import List, Optional

from tenant_admin.core.context import RequestContext
from tenant_admin.db.hub import HubClient
from tenant_admin.models.subscription import SubscriptionEvent

logger = logging.getLogger(__name__)

INCLUDES = ("subscription", "subscription.organization", "subscription.product", "product_pricing")


class SubscriptionEventService:
    def __init__(self, hub: HubClient, ctx: RequestContext) -> None:
        self.hub = hub
        self.ctx = ctx

    async def list_events(self, organization_id: str, subscription_id: str) -> List[SubscriptionEvent]:
        records = await (
            self.hub.query("subscription_events")
            .includes(*INCLUDES)
            .where({"subscription.id": subscription_id})
            .with_params(_metadata=self.ctx.special_roles_metadata(organization_id=organization_id))
            .to_list()
        )
        return [SubscriptionEvent.model_validate(r) for r in records]

    async def get_event(self, event_id: str, organization_id: str, subscription_id: str) -> Optional[SubscriptionEvent]:
        record = await (
            self.hub.query("subscription_events")
            .includes(*INCLUDES)
            .where({"subscription.id": subscription_id})
            .with_params(_metadata=self.ctx.special_roles_metadata(organization_id=organization_id))
            .find(event_id)
        )
        return SubscriptionEvent.model_validate(record) if record else None

    async def _transition(self, event_id: str, action: str) -> Optional[SubscriptionEvent]:
        record = await self.hub.query("subscription_events").find(event_id)
        if record is None:
            return None
        updated = await self.hub.perform("POST", f"subscription_events/{event_id}/{action}")
        logger.info("Subscription event %s: %s", event_id, action)
        return SubscriptionEvent.model_validate(updated or record)

    async def approve(self, event_id: str) -> Optional[SubscriptionEvent]:
        return await self._transition(event_id, "approve")

    async def reject(self, event_id: str) -> Optional[SubscriptionEvent]:
        return await self._transition(event_id, "reject")
