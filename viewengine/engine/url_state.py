# File: /viewengine/engine/url_state.py | Version: 1.0 | Title: URL State Synchronizer (query-string <-> view state)
"""
Query-string parameters:

  view      saved-view id
  filters   JSON FilterGroupSet (only when it differs from the loaded view)
  sortBy    sort column id; present but empty means "explicitly unsorted"
  sortOrder "desc" (asc is the default and omitted)
  q         search text
  page      omitted when 1
  pageSize  omitted when it equals DEFAULT_PAGE_SIZE
"""
from __future__ import annotations

import logging
from typing import Callable, List, Mapping, Optional, Union
from urllib.parse import parse_qsl, urlencode

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from viewengine.core.config import settings
from viewengine.schemas.filters import FilterGroup, filter_group_set_adapter
from viewengine.schemas.view import SortDirection, SortState

log = logging.getLogger(__name__)


class UrlState(BaseModel):
    view_id: Optional[str] = None
    # None means "not overridden": the loaded view's value applies
    filters: Optional[List[FilterGroup]] = None
    sort: Optional[SortState] = None
    search_query: str = ""
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default_factory=lambda: settings.DEFAULT_PAGE_SIZE, ge=1)


def to_params(state: UrlState) -> List[tuple]:
    params: List[tuple] = []
    if state.view_id:
        params.append(("view", state.view_id))
    if state.filters is not None:
        raw = filter_group_set_adapter.dump_json(state.filters, exclude_none=True)
        params.append(("filters", raw.decode("utf-8")))
    if state.sort is not None:
        params.append(("sortBy", state.sort.column_id or ""))
        if state.sort.column_id and state.sort.direction == SortDirection.desc:
            params.append(("sortOrder", SortDirection.desc.value))
    if state.search_query:
        params.append(("q", state.search_query))
    if state.page != 1:
        params.append(("page", str(state.page)))
    if state.page_size != settings.DEFAULT_PAGE_SIZE:
        params.append(("pageSize", str(state.page_size)))
    return params


def encode_url_state(state: UrlState) -> str:
    return urlencode(to_params(state))


def _positive_int(raw: Optional[str], default: int, upper: Optional[int] = None) -> int:
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        log.info("Ignoring malformed integer %r in URL", raw)
        return default
    if value < 1 or (upper is not None and value > upper):
        log.info("Ignoring out-of-range integer %r in URL", raw)
        return default
    return value


def decode_url_state(query: Union[str, Mapping[str, str]]) -> UrlState:
    """Malformed parameters are logged and fall back to their defaults."""
    if isinstance(query, str):
        params = dict(parse_qsl(query.lstrip("?"), keep_blank_values=True))
    else:
        params = dict(query)

    filters = None
    if "filters" in params:
        try:
            filters = filter_group_set_adapter.validate_json(params["filters"])
        except PydanticValidationError as exc:
            log.info("Ignoring malformed filters in URL: %s", exc.error_count())

    sort = None
    if "sortBy" in params:
        direction = (
            SortDirection.desc if params.get("sortOrder", "").lower() == "desc" else SortDirection.asc
        )
        sort = SortState(column_id=params["sortBy"] or None, direction=direction)

    return UrlState(
        view_id=params.get("view") or None,
        filters=filters,
        sort=sort,
        search_query=params.get("q", ""),
        page=_positive_int(params.get("page"), 1),
        page_size=_positive_int(
            params.get("pageSize"), settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE
        ),
    )


class UrlStateSynchronizer:
    """
    In-memory browser-history stand-in. ``push`` adds an entry (view switches),
    ``replace`` rewrites the current one (edits). ``on_change(mode, query)``
    lets a host mirror changes into a real location bar.
    """

    def __init__(
        self,
        initial: str = "",
        on_change: Optional[Callable[[str, str], None]] = None,
    ):
        self._history: List[str] = [initial.lstrip("?")]
        self.on_change = on_change

    @property
    def current(self) -> str:
        return self._history[-1]

    @property
    def history(self) -> List[str]:
        return list(self._history)

    def read(self) -> UrlState:
        return decode_url_state(self.current)

    def replace(self, state: UrlState) -> str:
        query = encode_url_state(state)
        if query != self.current:
            self._history[-1] = query
            self._notify("replace", query)
        return query

    def push(self, state: UrlState) -> str:
        query = encode_url_state(state)
        if query != self.current:
            self._history.append(query)
            self._notify("push", query)
        return query

    def back(self) -> UrlState:
        if len(self._history) > 1:
            self._history.pop()
        return self.read()

    def _notify(self, mode: str, query: str) -> None:
        if self.on_change is not None:
            self.on_change(mode, query)
