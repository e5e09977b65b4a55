# tenant_admin/services/auth_service.py
import logging
from typing import Optional, Dict, Any

from tenant_admin.core.security import verify_password, create_access_token
from tenant_admin.db.mongo import get_admin_collection
from tenant_admin.models.utils import str_to_objid

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self):
        self.admins = get_admin_collection()

    async def find_admin_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """
        Find an active admin panel operator by email.
        """
        doc = await self.admins.find_one({"email": email, "is_active": True})
        return doc

    async def get_active_admin(self, admin_id: str) -> Optional[Dict[str, Any]]:
        obj_id = str_to_objid(admin_id)
        if obj_id is None:
            return None
        return await self.admins.find_one({"_id": obj_id, "is_active": True})

    async def authenticate_admin(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """
        Verify credentials. Returns the admin doc on success, None otherwise.
        """
        admin = await self.find_admin_by_email(email)
        if not admin:
            return None

        hashed = admin.get("password_hash")
        if not hashed:
            return None

        if not verify_password(password, hashed):
            logger.info("Failed login for %s", email)
            return None

        return admin

    async def create_token_for_admin(self, admin_doc: Dict[str, Any]) -> str:
        """
        Given a verified admin_doc, create a JWT token containing admin id and role.
        """
        admin_id = str(admin_doc["_id"])
        token = create_access_token(subject=admin_id, role=admin_doc.get("admin_role", "admin"))
        return token
