# tenant_admin/db/jsonapi.py
"""
JSON-API helpers for talking to the hub.

- flatten_params: nested dict -> bracketed query params (filter[name]=x)
- parse_document: JSON-API document -> plain records with relationships resolved
- Query: chainable read query (where / select / includes / page / order)
"""
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from tenant_admin.db.hub import HubClient
    from tenant_admin.models.query import QueryParams


def flatten_params(params: Dict[str, Any], prefix: Optional[str] = None) -> List[Tuple[str, str]]:
    """
    Turn {"filter": {"owner.id": 1}, "include": ["a", "b"]} into
    [("filter[owner.id]", "1"), ("include", "a,b")]. None values are dropped.
    """
    items: List[Tuple[str, str]] = []
    for key, value in params.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, dict):
            items.extend(flatten_params(value, name))
        elif isinstance(value, (list, tuple, set)):
            items.append((name, ",".join(str(v) for v in value)))
        elif isinstance(value, bool):
            items.append((name, "true" if value else "false"))
        else:
            items.append((name, str(value)))
    return items


def parse_document(document: Dict[str, Any]) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """
    Return (records, meta). Each record is a flat dict: id, type, attributes and
    relationships (resolved from "included" when present, else an id/type stub).
    """
    data = document.get("data")
    primary = data if isinstance(data, list) else ([data] if data else [])
    index: Dict[Tuple[str, str], Dict[str, Any]] = {}
    for resource in (document.get("included") or []) + primary:
        index[(resource["type"], str(resource["id"]))] = resource

    built: Dict[Tuple[str, str], Dict[str, Any]] = {}

    def build(resource: Dict[str, Any]) -> Dict[str, Any]:
        key = (resource["type"], str(resource["id"]))
        if key in built:
            return built[key]
        record: Dict[str, Any] = {"id": str(resource["id"]), "type": resource["type"]}
        built[key] = record
        record.update(resource.get("attributes") or {})
        for name, relationship in (resource.get("relationships") or {}).items():
            if "data" not in relationship:
                continue
            linkage = relationship["data"]
            if linkage is None:
                record[name] = None
            elif isinstance(linkage, list):
                record[name] = [resolve(item) for item in linkage]
            else:
                record[name] = resolve(linkage)
        return record

    def resolve(linkage: Dict[str, Any]) -> Dict[str, Any]:
        target = index.get((linkage["type"], str(linkage["id"])))
        if target is None:
            return {"id": str(linkage["id"]), "type": linkage["type"]}
        return build(target)

    records = [build(resource) for resource in primary]
    return records, document.get("meta") or {}


def resource_document(resource_type: str, attributes: Dict[str, Any], resource_id: Optional[str] = None,
                      meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {"type": resource_type, "attributes": attributes}
    if resource_id is not None:
        data["id"] = resource_id
    document: Dict[str, Any] = {"data": data}
    if meta:
        document["meta"] = meta
    return document


@dataclass
class QueryResult:
    records: List[Dict[str, Any]]
    meta: Dict[str, Any]

    @property
    def record_count(self) -> int:
        return int(self.meta.get("record_count", len(self.records)))


@dataclass(frozen=True)
class Query:
    """Immutable read query against one hub collection; every builder call returns a copy."""

    hub: "HubClient"
    resource: str
    filters: Dict[str, Any] = field(default_factory=dict)
    fields: Tuple[str, ...] = ()
    include: Tuple[str, ...] = ()
    params: Dict[str, Any] = field(default_factory=dict)
    page_number: Optional[int] = None
    page_size: Optional[int] = None
    sort: Tuple[str, ...] = ()

    def where(self, conditions: Optional[Dict[str, Any]] = None, **kwargs: Any) -> "Query":
        return replace(self, filters={**self.filters, **(conditions or {}), **kwargs})

    def select(self, *fields: str) -> "Query":
        return replace(self, fields=self.fields + tuple(fields))

    def includes(self, *relations: str) -> "Query":
        return replace(self, include=self.include + tuple(relations))

    def with_params(self, **params: Any) -> "Query":
        return replace(self, params={**self.params, **params})

    def page(self, number: int, size: int) -> "Query":
        return replace(self, page_number=number, page_size=size)

    def order(self, *sort: str) -> "Query":
        return replace(self, sort=self.sort + tuple(sort))

    def apply_query_params(self, query_params: "QueryParams") -> "Query":
        """Apply admin list params (limit/offset/order_by/where) to this query."""
        query = self.where(query_params.filters())
        if query_params.limit:
            query = query.page(query_params.page_number(), query_params.limit)
        if query_params.order_by:
            query = query.order(query_params.sort())
        return query

    def to_params(self) -> List[Tuple[str, str]]:
        params: Dict[str, Any] = dict(self.params)
        if self.filters:
            params["filter"] = self.filters
        if self.fields:
            params["fields"] = {self.resource: list(self.fields)}
        if self.include:
            params["include"] = list(self.include)
        if self.page_number is not None:
            params["page"] = {"number": self.page_number, "size": self.page_size}
        if self.sort:
            params["sort"] = list(self.sort)
        return flatten_params(params)

    async def all(self) -> QueryResult:
        document = await self.hub.request("GET", self.resource, params=self.to_params())
        records, meta = parse_document(document)
        return QueryResult(records=records, meta=meta)

    async def to_list(self) -> List[Dict[str, Any]]:
        return (await self.all()).records

    async def first(self) -> Optional[Dict[str, Any]]:
        records = await self.to_list()
        return records[0] if records else None

    async def find(self, record_id: str) -> Optional[Dict[str, Any]]:
        return await self.where(id=record_id).page(1, 1).first()
