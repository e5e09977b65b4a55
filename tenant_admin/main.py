# tenant_admin/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tenant_admin.core.config import settings
from tenant_admin.core.errors import CSVImportError, HubError, NotAuthorized, RecordInvalid, RecordNotFound
from tenant_admin.db import hub, mongo
from tenant_admin.routes.auth import router as auth_router
from tenant_admin.routes.organizations import import_router, router as organizations_router
from tenant_admin.routes.subscription_events import router as subscription_events_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("tenant_admin")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup: create clients and verify the admin store connection
    mongo.init_client()
    hub.init_client()
    try:
        await mongo.get_client().admin.command("ping")
        logger.info("Connected to MongoDB")
    except Exception as e:
        logger.warning("Mongo ping failed: %s", e)
    yield
    # shutdown: close clients
    await hub.close_client()
    mongo.close_client()
    logger.info("Connections closed")

app = FastAPI(title="Tenant admin API", lifespan=lifespan)


@app.exception_handler(RecordInvalid)
async def record_invalid_handler(request: Request, exc: RecordInvalid):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": exc.errors})


@app.exception_handler(RecordNotFound)
async def record_not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(HubError)
async def hub_error_handler(request: Request, exc: HubError):
    return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": exc.message})


@app.exception_handler(NotAuthorized)
async def not_authorized_handler(request: Request, exc: NotAuthorized):
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": "Forbidden"})


@app.exception_handler(CSVImportError)
async def csv_import_error_handler(request: Request, exc: CSVImportError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=exc.errors)


@app.get("/help")
async def root():
    return {"message": "Tenant admin API is running."}

@app.get("/ping")
async def ping():
    count = await mongo.get_admin_collection().count_documents({"is_active": True})
    return {"message": "pong", "active_admins": count}

app.include_router(auth_router)
app.include_router(organizations_router)
app.include_router(import_router)
app.include_router(subscription_events_router)
