# tenant_admin/models/subscription.py
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel


class Product(BaseModel):
    id: str
    nid: Optional[str] = None
    name: Optional[str] = None


class SubscriptionOrganization(BaseModel):
    id: str
    uid: Optional[str] = None
    name: Optional[str] = None


class Subscription(BaseModel):
    id: str
    status: Optional[str] = None
    organization: Optional[SubscriptionOrganization] = None
    product: Optional[Product] = None


class SubscriptionEvent(BaseModel):
    id: str
    event_type: Optional[str] = None
    status: Optional[str] = None
    message: Optional[str] = None
    obsolete: Optional[bool] = None
    created_at: Optional[datetime] = None
    subscription: Optional[Subscription] = None
    product_pricing: Optional[Dict[str, Any]] = None
