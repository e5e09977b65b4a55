# tenant_admin/models/query.py
from typing import Dict, Optional

from pydantic import BaseModel, Field
from starlette.datastructures import QueryParams as StarletteQueryParams

WHERE_PREFIX = "where["


class QueryParams(BaseModel):
    """Admin list parameters, translated to JSON-API page/sort/filter."""

    limit: Optional[int] = Field(None, ge=1, le=1000)
    offset: int = Field(0, ge=0)
    order_by: Optional[str] = Field(None, pattern=r"^[\w.]+$")
    where: Dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_query_string(cls, params: StarletteQueryParams) -> "QueryParams":
        """Build from raw query params, collecting where[key]=value pairs."""
        where = {
            key[len(WHERE_PREFIX):-1]: value
            for key, value in params.multi_items()
            if key.startswith(WHERE_PREFIX) and key.endswith("]")
        }
        return cls(
            limit=params.get("limit") or None,
            offset=params.get("offset") or 0,
            order_by=params.get("order_by") or None,
            where=where,
        )

    def page_number(self) -> int:
        if not self.limit:
            return 1
        return self.offset // self.limit + 1

    def sort(self) -> str:
        # "name.desc" -> "-name", "name.asc" / "name" -> "name"
        field, _, direction = self.order_by.rpartition(".")
        if not field:
            return self.order_by
        if direction == "desc":
            return f"-{field}"
        if direction == "asc":
            return field
        return self.order_by

    def filters(self) -> Dict[str, str]:
        return dict(self.where)
