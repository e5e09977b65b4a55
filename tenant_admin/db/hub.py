# tenant_admin/db/hub.py
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx

from tenant_admin.core.config import settings
from tenant_admin.core.errors import HubError, RecordInvalid, RecordNotFound
from tenant_admin.db.jsonapi import Query, parse_document, resource_document

logger = logging.getLogger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

Params = Union[Dict[str, Any], Sequence[Tuple[str, str]], None]

_client: Optional[httpx.AsyncClient] = None


def init_client() -> None:
    global _client
    if _client is None:
        auth = (settings.HUB_API_KEY, settings.HUB_API_SECRET) if settings.HUB_API_KEY else None
        _client = httpx.AsyncClient(
            base_url=settings.HUB_API_URL,
            auth=auth,
            timeout=settings.HUB_TIMEOUT_SECONDS,
            headers={"Accept": JSONAPI_MEDIA_TYPE, "Content-Type": JSONAPI_MEDIA_TYPE},
        )


def get_client() -> httpx.AsyncClient:
    if _client is None:
        # prefer calling init_client in lifespan
        init_client()
    return _client


async def close_client() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


class HubClient:
    """
    Thin JSON-API client for the hub. Reads go through Query; writes are
    create / update / destroy plus custom member actions (perform).
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def request(
        self,
        method: str,
        path: str,
        params: Params = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self.client.request(method, path, params=params, json=payload)
        except httpx.HTTPError as e:
            logger.warning("Hub %s %s failed: %s", method, path, e)
            raise HubError(502, message=f"Hub unreachable: {e}") from e

        if response.status_code >= 400:
            errors = _error_list(response)
            logger.warning("Hub %s %s returned %s: %s", method, path, response.status_code, errors)
            if response.status_code == 404:
                raise RecordNotFound(404, errors=errors)
            if response.status_code == 422:
                raise RecordInvalid(422, errors=errors)
            raise HubError(response.status_code, errors=errors)

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def query(self, resource: str) -> Query:
        return Query(hub=self, resource=resource)

    async def create(self, resource: str, attributes: Dict[str, Any],
                     meta: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        document = await self.request("POST", resource, payload=resource_document(resource, attributes, meta=meta))
        return _single(document)

    async def update(self, resource: str, record_id: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
        document = await self.request(
            "PATCH", f"{resource}/{record_id}", payload=resource_document(resource, attributes, resource_id=record_id)
        )
        return _single(document)

    async def destroy(self, resource: str, record_id: str) -> None:
        await self.request("DELETE", f"{resource}/{record_id}")

    async def perform(self, method: str, path: str, attributes: Optional[Dict[str, Any]] = None,
                      resource: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """Call a custom action such as PATCH organizations/1/freeze. Returns the record if any."""
        payload = resource_document(resource or path.split("/")[0], attributes) if attributes is not None else None
        document = await self.request(method, path, payload=payload)
        return _single(document) if document.get("data") else None


def get_hub() -> HubClient:
    """FastAPI dependency: hub client bound to the shared connection pool."""
    return HubClient(get_client())


def _single(document: Dict[str, Any]) -> Dict[str, Any]:
    records, _ = parse_document(document)
    return records[0] if records else {}


def _error_list(response: httpx.Response) -> List[Dict[str, Any]]:
    try:
        body = response.json()
    except ValueError:
        return [{"title": response.text or response.reason_phrase}]
    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        return body["errors"]
    return [{"title": str(body)}]
