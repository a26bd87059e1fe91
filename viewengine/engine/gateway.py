# File: /viewengine/engine/gateway.py | Version: 1.0 | Title: View Persistence Gateway (contract + httpx and in-process implementations)
from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol

import httpx
from sqlalchemy.orm import Session

from viewengine.core.config import settings
from viewengine.core.exceptions import TransportError, error_from_payload
from viewengine.crud import saved_view as crud
from viewengine.schemas.query import ApplyViewOut
from viewengine.schemas.view import (
    CloneRequest,
    ReorderRequest,
    SavedViewCreate,
    SavedViewOut,
    SavedViewUpdate,
)

log = logging.getLogger(__name__)


class ViewGateway(Protocol):
    async def list(self, entity_type: str) -> List[SavedViewOut]: ...

    async def get(self, view_id: str) -> SavedViewOut: ...

    async def create(self, data: SavedViewCreate) -> SavedViewOut: ...

    async def update(self, view_id: str, data: SavedViewUpdate) -> SavedViewOut: ...

    async def delete(self, view_id: str) -> None: ...

    async def clone(self, view_id: str, name: Optional[str] = None) -> SavedViewOut: ...

    async def reorder(self, entity_type: str, ordered_ids: List[str]) -> List[SavedViewOut]: ...

    async def refresh_record_count(self, view_id: str) -> SavedViewOut: ...


class HttpViewGateway:
    """Talks to the /views API. Error responses come back as the matching ViewEngineError."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        *,
        token: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.API_BASE_URL,
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
        )
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    async def __aenter__(self) -> "HttpViewGateway":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        try:
            resp = await self._client.request(method, url, headers=self._headers, **kwargs)
        except httpx.TransportError as exc:
            log.warning("View API unreachable: %s %s (%s)", method, url, exc.__class__.__name__)
            raise TransportError(f"View service unreachable: {exc}") from exc

        if resp.status_code >= 400:
            try:
                payload = resp.json()
            except ValueError:
                payload = None
            raise error_from_payload(resp.status_code, payload)
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    async def list(self, entity_type: str) -> List[SavedViewOut]:
        data = await self._request("GET", "/views", params={"entity_type": entity_type})
        return [SavedViewOut.model_validate(d) for d in data]

    async def get(self, view_id: str) -> SavedViewOut:
        return SavedViewOut.model_validate(await self._request("GET", f"/views/{view_id}"))

    async def create(self, data: SavedViewCreate) -> SavedViewOut:
        body = data.model_dump(mode="json")
        return SavedViewOut.model_validate(await self._request("POST", "/views", json=body))

    async def update(self, view_id: str, data: SavedViewUpdate) -> SavedViewOut:
        body = data.model_dump(mode="json", exclude_unset=True)
        return SavedViewOut.model_validate(await self._request("PATCH", f"/views/{view_id}", json=body))

    async def delete(self, view_id: str) -> None:
        await self._request("DELETE", f"/views/{view_id}")

    async def clone(self, view_id: str, name: Optional[str] = None) -> SavedViewOut:
        body = CloneRequest(name=name).model_dump(mode="json")
        return SavedViewOut.model_validate(await self._request("POST", f"/views/{view_id}/clone", json=body))

    async def reorder(self, entity_type: str, ordered_ids: List[str]) -> List[SavedViewOut]:
        body = ReorderRequest(entity_type=entity_type, ordered_ids=ordered_ids).model_dump(mode="json")
        data = await self._request("POST", "/views/reorder", json=body)
        return [SavedViewOut.model_validate(d) for d in data]

    async def refresh_record_count(self, view_id: str) -> SavedViewOut:
        return SavedViewOut.model_validate(await self._request("POST", f"/views/{view_id}/count"))

    async def apply(self, view_id: str) -> ApplyViewOut:
        return ApplyViewOut.model_validate(await self._request("POST", f"/views/{view_id}/apply"))


class LocalViewGateway:
    """Same contract, in-process, straight onto the CRUD layer (scripts, tests, workers)."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    async def list(self, entity_type: str) -> List[SavedViewOut]:
        return [crud.to_out(v) for v in crud.list_views(self.db, self.user_id, entity_type)]

    async def get(self, view_id: str) -> SavedViewOut:
        return crud.to_out(crud.get_visible_view(self.db, self.user_id, view_id))

    async def create(self, data: SavedViewCreate) -> SavedViewOut:
        return crud.to_out(crud.create_view(self.db, self.user_id, data))

    async def update(self, view_id: str, data: SavedViewUpdate) -> SavedViewOut:
        return crud.to_out(crud.update_view(self.db, self.user_id, view_id, data))

    async def delete(self, view_id: str) -> None:
        crud.delete_view(self.db, self.user_id, view_id)

    async def clone(self, view_id: str, name: Optional[str] = None) -> SavedViewOut:
        return crud.to_out(crud.clone_view(self.db, self.user_id, view_id, name))

    async def reorder(self, entity_type: str, ordered_ids: List[str]) -> List[SavedViewOut]:
        return [crud.to_out(v) for v in crud.reorder_views(self.db, self.user_id, entity_type, ordered_ids)]

    async def refresh_record_count(self, view_id: str) -> SavedViewOut:
        return crud.to_out(crud.refresh_record_count(self.db, self.user_id, view_id))
