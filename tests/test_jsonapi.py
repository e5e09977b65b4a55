"""
Tests for JSON-API query encoding, document parsing and admin list params.
"""

import pytest
from pydantic import ValidationError
from starlette.datastructures import QueryParams as StarletteQueryParams

from tenant_admin.db.jsonapi import Query, flatten_params, parse_document
from tenant_admin.models.query import QueryParams
from tests.factories import document, resource


class TestFlattenParams:
    def test_nested_dicts_use_brackets(self):
        params = flatten_params({"filter": {"owner.id": 1, "name": "acme"}, "_metadata": {"act_as_manager": "u1"}})
        assert ("filter[owner.id]", "1") in params
        assert ("filter[name]", "acme") in params
        assert ("_metadata[act_as_manager]", "u1") in params

    def test_lists_are_comma_joined(self):
        assert flatten_params({"include": ["app_instances", "app_instances.app"]}) == [
            ("include", "app_instances,app_instances.app")
        ]

    def test_booleans_and_none(self):
        assert flatten_params({"fulfilled_only": True, "skip": None}) == [("fulfilled_only", "true")]

    def test_empty_nested_dict_adds_nothing(self):
        assert flatten_params({"_metadata": {}}) == []


class TestParseDocument:
    def test_resolves_included_relationships(self):
        app = resource("apps", "a1", nid="xero")
        instance = resource("app_instances", "i1", {"app": app}, status="running")
        org = resource("organizations", "o1", {"app_instances": [instance]}, name="Acme")

        records, meta = parse_document(document([org], [app, instance], meta={"record_count": 7}))

        assert meta == {"record_count": 7}
        assert records[0]["name"] == "Acme"
        assert records[0]["app_instances"][0]["status"] == "running"
        assert records[0]["app_instances"][0]["app"]["nid"] == "xero"

    def test_missing_included_resource_becomes_stub(self):
        org = resource("organizations", "o1", {"main_address": resource("addresses", "ad1")})
        records, _ = parse_document(document(org))
        assert records[0]["main_address"] == {"id": "ad1", "type": "addresses"}

    def test_null_relationship(self):
        org = resource("organizations", "o1", {"main_address": None})
        records, _ = parse_document(document(org))
        assert records[0]["main_address"] is None

    def test_ids_are_strings(self):
        records, _ = parse_document({"data": [{"type": "users", "id": 12, "attributes": {}}]})
        assert records[0]["id"] == "12"

    def test_empty_data(self):
        assert parse_document({"data": []}) == ([], {})
        assert parse_document({"data": None}) == ([], {})


class TestQuery:
    def test_builder_calls_do_not_mutate(self):
        base = Query(hub=None, resource="organizations")
        filtered = base.where(name="Acme")
        assert base.filters == {}
        assert filtered.filters == {"name": "Acme"}

    def test_to_params(self):
        query = (
            Query(hub=None, resource="organizations")
            .where({"owner.id": "o1"})
            .select("uid", "name")
            .includes("users", "orga_invites.user")
            .with_params(_metadata={"act_as_manager": "u1"})
            .page(2, 10)
            .order("-name")
        )
        params = dict(query.to_params())
        assert params == {
            "_metadata[act_as_manager]": "u1",
            "filter[owner.id]": "o1",
            "fields[organizations]": "uid,name",
            "include": "users,orga_invites.user",
            "page[number]": "2",
            "page[size]": "10",
            "sort": "-name",
        }

    def test_apply_query_params(self):
        qp = QueryParams(limit=20, offset=40, order_by="created_at.desc", where={"geo_city": "Paris"})
        params = dict(Query(hub=None, resource="organizations").apply_query_params(qp).to_params())
        assert params["page[number]"] == "3"
        assert params["page[size]"] == "20"
        assert params["sort"] == "-created_at"
        assert params["filter[geo_city]"] == "Paris"

    def test_apply_query_params_without_limit_has_no_paging(self):
        params = dict(Query(hub=None, resource="organizations").apply_query_params(QueryParams()).to_params())
        assert "page[number]" not in params
        assert "sort" not in params


class TestQueryParams:
    def test_from_query_string_collects_where(self):
        raw = StarletteQueryParams("limit=10&offset=0&order_by=name.asc&where[name.like]=ac%25&terms=x")
        qp = QueryParams.from_query_string(raw)
        assert qp.limit == 10
        assert qp.where == {"name.like": "ac%"}
        assert qp.sort() == "name"

    @pytest.mark.parametrize("order_by,expected", [
        ("name", "name"),
        ("name.desc", "-name"),
        ("name.asc", "name"),
    ])
    def test_sort(self, order_by, expected):
        assert QueryParams(order_by=order_by).sort() == expected

    def test_invalid_limit_rejected(self):
        with pytest.raises(ValidationError):
            QueryParams.from_query_string(StarletteQueryParams("limit=abc"))

    def test_page_number_defaults_to_first_page(self):
        assert QueryParams().page_number() == 1
        assert QueryParams(limit=25, offset=24).page_number() == 1
        assert QueryParams(limit=25, offset=25).page_number() == 2
