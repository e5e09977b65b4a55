# tenant_admin/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr

from tenant_admin.core.context import Actor
from tenant_admin.core.deps import get_current_admin
from tenant_admin.models.admin import AdminOut
from tenant_admin.models.utils import serialize_mongo_doc
from tenant_admin.services.auth_service import AuthService

router = APIRouter(prefix="/admin", tags=["auth"])


class AdminLoginIn(BaseModel):
    email: EmailStr
    password: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=TokenOut)
async def admin_login(payload: AdminLoginIn):
    auth = AuthService()
    admin_doc = await auth.authenticate_admin(payload.email, payload.password)
    if not admin_doc:
        # do not reveal whether email exists
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    token = await auth.create_token_for_admin(admin_doc)

    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=AdminOut, response_model_by_alias=False)
async def current_admin(actor: Actor = Depends(get_current_admin)):
    admin_doc = await AuthService().get_active_admin(actor.id)
    if not admin_doc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found or inactive")
    return AdminOut.model_validate(serialize_mongo_doc(admin_doc))
