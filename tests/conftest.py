"""
Shared pytest fixtures: a stub hub behind httpx.MockTransport, request
contexts for each admin role and a TestClient with auth and hub overridden.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from tenant_admin.core.context import Actor, RequestContext
from tenant_admin.core.deps import get_current_admin
from tenant_admin.db.hub import HubClient, get_hub
from tenant_admin.main import app
from tests.factories import HubStub


@pytest.fixture
def hub_stub() -> HubStub:
    return HubStub()


@pytest.fixture
def hub(hub_stub: HubStub) -> HubClient:
    client = httpx.AsyncClient(base_url="http://hub.test", transport=httpx.MockTransport(hub_stub))
    return HubClient(client)


@pytest.fixture
def actor() -> Actor:
    return Actor(id="adm-1", email="ops@acme.io", role="admin", user_id="usr-admin")


@pytest.fixture
def support_actor() -> Actor:
    return Actor(id="adm-2", email="support@acme.io", role="support", user_id="usr-support",
                 support_org_id="org-1")


@pytest.fixture
def ctx(actor: Actor) -> RequestContext:
    return RequestContext(actor=actor)


@pytest.fixture
def client(hub: HubClient, actor: Actor):
    app.dependency_overrides[get_current_admin] = lambda: actor
    app.dependency_overrides[get_hub] = lambda: hub
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def support_client(hub: HubClient, support_actor: Actor):
    app.dependency_overrides[get_current_admin] = lambda: support_actor
    app.dependency_overrides[get_hub] = lambda: hub
    yield TestClient(app)
    app.dependency_overrides.clear()
