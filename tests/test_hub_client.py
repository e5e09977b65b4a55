"""
Tests for the hub JSON-API client: request encoding and error mapping.
"""

import httpx
import pytest

from tenant_admin.core.errors import HubError, RecordInvalid, RecordNotFound
from tenant_admin.db.hub import HubClient
from tests.factories import body_of, document, resource


@pytest.mark.asyncio
async def test_find_filters_by_id_and_takes_one(hub, hub_stub):
    hub_stub.stub("GET", "/organizations", document([resource("organizations", "org-1", name="Acme")]))

    record = await hub.query("organizations").find("org-1")

    assert record["name"] == "Acme"
    request = hub_stub.requests[0]
    assert request.url.params["filter[id]"] == "org-1"
    assert request.url.params["page[number]"] == "1"
    assert request.url.params["page[size]"] == "1"


@pytest.mark.asyncio
async def test_find_returns_none_on_empty_result(hub, hub_stub):
    hub_stub.stub("GET", "/organizations", document([]))
    assert await hub.query("organizations").find("nope") is None


@pytest.mark.asyncio
async def test_all_exposes_record_count(hub, hub_stub):
    hub_stub.stub("GET", "/organizations", document([resource("organizations", "1")], meta={"record_count": 41}))
    result = await hub.query("organizations").all()
    assert result.record_count == 41


@pytest.mark.asyncio
async def test_create_sends_jsonapi_document(hub, hub_stub):
    hub_stub.stub("POST", "/users", document(resource("users", "u1", email="a@acme.io")), status=201)

    record = await hub.create("users", {"email": "a@acme.io"}, meta={"skip_confirmation_notification": True})

    assert record == {"id": "u1", "type": "users", "email": "a@acme.io"}
    sent = body_of(hub_stub.calls("POST", "/users")[0])
    assert sent == {
        "data": {"type": "users", "attributes": {"email": "a@acme.io"}},
        "meta": {"skip_confirmation_notification": True},
    }


@pytest.mark.asyncio
async def test_update_includes_id(hub, hub_stub):
    hub_stub.stub("PATCH", "/users/u1", document(resource("users", "u1")))
    await hub.update("users", "u1", {"confirmation_token": None})
    sent = body_of(hub_stub.calls("PATCH", "/users/u1")[0])
    assert sent["data"] == {"type": "users", "id": "u1", "attributes": {"confirmation_token": None}}


@pytest.mark.asyncio
async def test_perform_without_body(hub, hub_stub):
    hub_stub.stub("PATCH", "/organizations/org-1/freeze", None, status=204)
    assert await hub.perform("PATCH", "organizations/org-1/freeze") is None
    assert hub_stub.calls("PATCH", "/organizations/org-1/freeze")[0].content == b""


@pytest.mark.asyncio
async def test_validation_errors_raise_record_invalid(hub, hub_stub):
    errors = [{"title": "has already been taken", "source": {"pointer": "/data/attributes/email"}}]
    hub_stub.stub("POST", "/users", {"errors": errors}, status=422)

    with pytest.raises(RecordInvalid) as exc_info:
        await hub.create("users", {"email": "taken@acme.io"})

    assert exc_info.value.errors == errors
    assert exc_info.value.message == "has already been taken"


@pytest.mark.asyncio
async def test_not_found(hub, hub_stub):
    hub_stub.stub("DELETE", "/orga_relations/r1", {"errors": [{"title": "Not found"}]}, status=404)
    with pytest.raises(RecordNotFound):
        await hub.destroy("orga_relations", "r1")


@pytest.mark.asyncio
async def test_server_error(hub, hub_stub):
    hub_stub.stub("GET", "/organizations", {"errors": [{"title": "boom"}]}, status=500)
    with pytest.raises(HubError) as exc_info:
        await hub.query("organizations").to_list()
    assert exc_info.value.status_code == 500
    assert not isinstance(exc_info.value, (RecordInvalid, RecordNotFound))


@pytest.mark.asyncio
async def test_transport_error_becomes_hub_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    hub = HubClient(httpx.AsyncClient(base_url="http://hub.test", transport=httpx.MockTransport(handler)))
    with pytest.raises(HubError) as exc_info:
        await hub.query("organizations").to_list()
    assert exc_info.value.status_code == 502
