# tenant_admin/db/mongo.py
from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from tenant_admin.core.config import settings

ADMIN_USERS = "admin_users"

_client: Optional[AsyncIOMotorClient] = None

def init_client() -> None:
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(settings.MONGO_URI)

def get_client() -> AsyncIOMotorClient:
    if _client is None:
        # not created yet, prefer calling init_client in lifespan
        init_client()
    return _client

def close_client() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None

def get_master_db():
    client = get_client()
    return client[settings.MASTER_DB]

def get_admin_collection() -> AsyncIOMotorCollection:
    """Admin panel operators (email, password_hash, admin_role, support_org_id, hub user_id)."""
    return get_master_db()[ADMIN_USERS]
