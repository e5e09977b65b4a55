"""
Tests for admin tokens, request authentication and the permission gate.
"""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from tenant_admin.core.context import Actor, RequestContext
from tenant_admin.core.permissions import MANAGE, READ, can
from tenant_admin.core.security import (
    create_access_token,
    decode_access_token,
    generate_friendly_token,
    hash_password,
    verify_password,
)
from tenant_admin.main import app


def test_access_token_carries_subject_and_role():
    payload = decode_access_token(create_access_token("adm-1", "staff"))
    assert payload["sub"] == "adm-1"
    assert payload["role"] == "staff"
    assert payload["exp"] > payload["iat"]


def test_password_hashing():
    hashed = hash_password("s3cret")
    assert verify_password("s3cret", hashed)
    assert not verify_password("wrong", hashed)


def test_friendly_token_length():
    token = generate_friendly_token()
    assert len(token) == 20
    assert token != generate_friendly_token()


class TestAuthentication:
    def test_missing_token(self):
        assert TestClient(app).get("/organizations").status_code == 401

    def test_invalid_token(self):
        response = TestClient(app).get("/organizations", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid token"}

    def test_expired_token(self):
        token = create_access_token("adm-1", "admin", expires_delta=timedelta(minutes=-5))
        response = TestClient(app).get("/organizations", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json() == {"detail": "Token expired"}


class TestPermissions:
    @pytest.mark.parametrize("role", ["admin", "staff"])
    def test_full_access_roles(self, role):
        actor = Actor(id="a", email="a@acme.io", role=role)
        assert can(actor, MANAGE, "org-1")
        assert can(actor, READ)

    def test_support_reads_only_attached_organization(self, support_actor):
        assert can(support_actor, READ, "org-1")
        assert not can(support_actor, READ, "org-2")
        assert not can(support_actor, READ)
        assert not can(support_actor, MANAGE, "org-1")


def test_act_as_manager_metadata_prefers_hub_user_id(actor):
    ctx = RequestContext(actor=actor)
    assert ctx.special_roles_metadata() == {"act_as_manager": "usr-admin"}
    assert ctx.special_roles_metadata(organization_id="org-1") == {
        "act_as_manager": "usr-admin", "organization_id": "org-1",
    }
    no_hub_user = RequestContext(actor=Actor(id="adm-9", email="x@acme.io", role="admin"))
    assert no_hub_user.special_roles_metadata() == {"act_as_manager": "adm-9"}
