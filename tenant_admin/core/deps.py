# tenant_admin/core/deps.py
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from jose import JWTError, ExpiredSignatureError

from tenant_admin.core.config import settings
from tenant_admin.core.context import Actor, RequestContext
from tenant_admin.core.security import decode_access_token
from tenant_admin.models.query import QueryParams
from tenant_admin.services.auth_service import AuthService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/admin/login")


async def get_current_admin(token: str = Depends(oauth2_scheme)) -> Actor:
    """
    Decode token and fetch the operator from the admin store. Raises HTTPException 401
    on invalid/expired token or unknown/inactive operator.
    """
    try:
        payload = decode_access_token(token)
    except ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    admin_id = payload.get("sub")
    if not admin_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token payload")

    admin_doc = await AuthService().get_active_admin(admin_id)
    if not admin_doc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Admin not found or inactive")

    return Actor(
        id=str(admin_doc["_id"]),
        email=admin_doc["email"],
        role=admin_doc.get("admin_role", "admin"),
        user_id=admin_doc.get("user_id"),
        support_org_id=admin_doc.get("support_org_id"),
    )


def get_request_context(actor: Actor = Depends(get_current_admin)) -> RequestContext:
    return RequestContext(actor=actor, support_enabled=settings.SUPPORT_ENABLED)


def block_support_users(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    """Support operators only get the routes that explicitly allow them."""
    if ctx.actor.is_support:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return ctx


def get_query_params(request: Request) -> QueryParams:
    try:
        return QueryParams.from_query_string(request.query_params)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.errors(include_url=False, include_context=False))
