"""
Tests for subscription event routes.
"""

from tests.factories import document, empty, resource

EVENTS = "/organizations/org-1/subscriptions/sub-1/subscription_events"


def event_document(event_id="ev-1", status="pending"):
    organization = resource("organizations", "org-1", name="Acme")
    product = resource("products", "prod-1", nid="xero")
    subscription = resource("subscriptions", "sub-1", {"organization": organization, "product": product},
                            status="fulfilled")
    event = resource("subscription_events", event_id, {"subscription": subscription},
                     event_type="new", status=status)
    return document([event], [organization, product, subscription])


def test_index_scopes_query(client, hub_stub):
    hub_stub.stub("GET", "/subscription_events", event_document())

    response = client.get(EVENTS)

    assert response.status_code == 200
    events = response.json()["subscription_events"]
    assert events[0]["id"] == "ev-1"
    assert events[0]["subscription"]["product"]["nid"] == "xero"
    params = hub_stub.requests[0].url.params
    assert params["filter[subscription.id]"] == "sub-1"
    assert params["_metadata[act_as_manager]"] == "usr-admin"
    assert params["_metadata[organization_id]"] == "org-1"
    assert params["include"] == "subscription,subscription.organization,subscription.product,product_pricing"


def test_show(client, hub_stub):
    hub_stub.stub("GET", "/subscription_events", event_document())

    response = client.get(f"{EVENTS}/ev-1")

    assert response.status_code == 200
    assert response.json()["subscription_event"]["event_type"] == "new"
    params = hub_stub.requests[0].url.params
    assert params["filter[id]"] == "ev-1"
    assert params["page[size]"] == "1"


def test_show_not_found(client, hub_stub):
    hub_stub.stub("GET", "/subscription_events", empty())
    assert client.get(f"{EVENTS}/nope").status_code == 404


def test_approve(client, hub_stub):
    hub_stub.stub("GET", "/subscription_events", event_document())
    hub_stub.stub("POST", "/subscription_events/ev-1/approve", event_document(status="approved"))

    response = client.post("/subscription_events/ev-1/approve")

    assert response.status_code == 200
    assert len(hub_stub.calls("POST", "/subscription_events/ev-1/approve")) == 1


def test_reject_unknown_event(client, hub_stub):
    hub_stub.stub("GET", "/subscription_events", empty())
    assert client.post("/subscription_events/ev-9/reject").status_code == 404
    assert hub_stub.calls("POST", "/subscription_events/ev-9/reject") == []


def test_support_user_reads_own_organization_events(support_client, hub_stub):
    hub_stub.stub("GET", "/subscription_events", event_document())
    assert support_client.get(EVENTS).status_code == 200


def test_support_user_cannot_read_other_organization(support_client, hub_stub):
    response = support_client.get("/organizations/org-2/subscriptions/sub-1/subscription_events")
    assert response.status_code == 403
    assert hub_stub.requests == []


def test_support_user_cannot_approve(support_client, hub_stub):
    assert support_client.post("/subscription_events/ev-1/approve").status_code == 403
    assert hub_stub.requests == []
