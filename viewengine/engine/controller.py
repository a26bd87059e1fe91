# File: /viewengine/engine/controller.py | Version: 1.0 | Title: View State Controller (runtime state, dirty tracking, async coordination)
"""
One controller per mounted module page.

All state changes go through named methods. Synchronous mutations validate
first and leave state untouched when they raise; on success they bump the
mutation generation, recompile the QueryRequest immediately and schedule a
debounced propagation to the query listener and the URL.

Async operations (load, save, count refresh, reorder, bulk actions) are the
only suspension points. A load whose generation was overtaken while it was in
flight is discarded and logged.
"""
from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, Field

from viewengine.core.config import settings
from viewengine.core.exceptions import (
    NotFoundError,
    PermissionDenied,
    StaleDataError,
    TransportError,
    ValidationError,
    ViewEngineError,
)
from viewengine.engine import columns as column_rules
from viewengine.engine.board import BoardLane, group_records, resolve_group_by
from viewengine.engine.bulk_actions import BulkActionOutcome, BulkActionRegistry, BulkOutcomeStatus
from viewengine.engine.compiler import build_query_request, compile_quick_filters, sanitize_filters
from viewengine.engine.debounce import Debouncer
from viewengine.engine.filter_model import FilterModel
from viewengine.engine.gateway import ViewGateway
from viewengine.engine.ordering import OptimisticOrder
from viewengine.engine.url_state import UrlState, UrlStateSynchronizer, decode_url_state
from viewengine.schemas.filters import FilterCondition, FilterGroup
from viewengine.schemas.module_config import ColumnDescriptor, ModuleViewConfig
from viewengine.schemas.query import QueryRequest, QueryResult
from viewengine.schemas.view import (
    ColumnState,
    SavedViewCreate,
    SavedViewOut,
    SavedViewUpdate,
    SortDirection,
    SortState,
    ViewMode,
    Visibility,
)

log = logging.getLogger(__name__)

QueryListener = Callable[[QueryRequest, int], Any]
StatusChangeHandler = Callable[[str, str, str], Awaitable[Any]]


class Phase(str, Enum):
    uninitialized = "uninitialized"
    hydrating = "hydrating"
    ready = "ready"


class Notice(BaseModel):
    level: str = "info"
    message: str
    code: Optional[str] = None


class RecordCountStatus(BaseModel):
    count: Optional[int] = None
    refreshed_at: Optional[datetime] = None
    stale: bool = True


class ViewSnapshot(BaseModel):
    """The persisted part of the runtime state; dirty = snapshot differs from baseline."""

    filters: List[FilterGroup] = Field(default_factory=list)
    column_state: ColumnState
    sort: SortState = Field(default_factory=SortState)
    view_mode: ViewMode = ViewMode.table
    board_group_by: Optional[str] = None


def _aware(ts: Optional[datetime]) -> Optional[datetime]:
    if ts is None:
        return None
    return ts if ts.tzinfo else ts.replace(tzinfo=UTC)


class ViewStateController:
    def __init__(
        self,
        config: ModuleViewConfig,
        gateway: ViewGateway,
        user_id: str,
        *,
        url: Optional[UrlStateSynchronizer] = None,
        bulk_actions: Optional[BulkActionRegistry] = None,
        on_query: Optional[QueryListener] = None,
        on_open_record: Optional[Callable[[str], Any]] = None,
        on_status_change: Optional[StatusChangeHandler] = None,
        debounce_seconds: Optional[float] = None,
        count_ttl_seconds: Optional[int] = None,
    ):
        self.config = config
        self.gateway = gateway
        self.user_id = user_id
        self.url = url or UrlStateSynchronizer()
        self.bulk_actions = bulk_actions or BulkActionRegistry()
        self.on_query = on_query
        self.on_open_record = on_open_record
        self.on_status_change = on_status_change
        self.count_ttl = timedelta(
            seconds=settings.RECORD_COUNT_TTL_SECONDS if count_ttl_seconds is None else count_ttl_seconds
        )
        delay = settings.FILTER_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self._debouncer = Debouncer(delay, self._propagate)

        self.phase = Phase.uninitialized
        self.generation = 0
        self.notices: List[Notice] = []

        self._views: Dict[str, SavedViewOut] = {}
        self._tab_order = OptimisticOrder()
        self._shared_ids: List[str] = []
        self._count_tokens: Dict[str, int] = {}
        self.active_view: Optional[SavedViewOut] = None

        self._baseline = self._default_snapshot()
        self._filters = FilterModel(config)
        self.column_state = self._baseline.column_state
        self.sort = SortState()
        self.view_mode = ViewMode.table
        self.board_group_by: Optional[str] = None
        self.quick_filters: Dict[str, Any] = {}
        self.search_query = ""
        self.page = 1
        self.page_size = settings.DEFAULT_PAGE_SIZE
        self._selection: Dict[str, None] = {}

        self.query: Optional[QueryRequest] = None
        self.results: Optional[QueryResult] = None

    # ==========================================================
    # Read-only derived state
    # ==========================================================
    @property
    def filters(self) -> List[FilterGroup]:
        return self._filters.groups

    @property
    def views(self) -> List[SavedViewOut]:
        """The caller's tabs in their current order, then views shared by others."""
        own = [self._views[i] for i in self._tab_order.current if i in self._views]
        return own + [self._views[i] for i in self._shared_ids if i in self._views]

    @property
    def selected_row_ids(self) -> frozenset:
        return frozenset(self._selection)

    @property
    def visible_columns(self) -> List[ColumnDescriptor]:
        return [self.config.get_property(cid) for cid in self.column_state.visible_column_ids]

    @property
    def is_dirty(self) -> bool:
        if self.active_view is None:
            return (
                self._snapshot() != self._default_snapshot()
                or bool(self.quick_filters)
                or bool(self.search_query)
            )
        return self._snapshot() != self._baseline

    @property
    def reorder_pending(self) -> bool:
        return self._tab_order.pending

    def pop_notices(self) -> List[Notice]:
        out, self.notices = self.notices, []
        return out

    def url_state(self) -> UrlState:
        current = self._snapshot()
        return UrlState(
            view_id=self.active_view.id if self.active_view else None,
            filters=current.filters if current.filters != self._baseline.filters else None,
            sort=current.sort if current.sort != self._baseline.sort else None,
            search_query=self.search_query,
            page=self.page,
            page_size=self.page_size,
        )

    # ==========================================================
    # Lifecycle
    # ==========================================================
    async def hydrate(
        self,
        url: Union[str, Mapping[str, str], None] = None,
        views: Optional[Iterable[SavedViewOut]] = None,
    ) -> None:
        """URL first, then the saved view it names (or the default one), then engine defaults."""
        self.phase = Phase.hydrating
        params = decode_url_state(url if url is not None else self.url.current)

        if views is None:
            try:
                views = await self.gateway.list(self.config.entity_type)
            except TransportError as exc:
                self._notify("error", f"Could not load saved views: {exc.message}", exc.code)
                self.phase = Phase.ready
                self._commit(reset_page=False, immediate=True)
                raise
        self._set_views(views)

        target = None
        if params.view_id:
            target = self._views.get(params.view_id)
            if target is None:
                self._notify("warning", "The linked view no longer exists; showing the default view.", NotFoundError.code)
        if target is None:
            target = self._fallback_view()
        self._load(target)

        # URL values win over the saved view's own
        try:
            if params.filters is not None:
                groups, problems = sanitize_filters(params.filters, self.config)
                self._filters.replace(groups)
                if problems:
                    self._notify("warning", "Some linked filter conditions were ignored.", ValidationError.code)
            if params.sort is not None:
                self.sort = column_rules.normalize_sort(params.sort, self.config)
        except ValidationError as exc:
            log.info("Ignoring linked view state: %s", exc.message)
            self._notify("warning", "The link could not be applied; showing the saved view.", exc.code)
        self.search_query = params.search_query
        self.page = params.page
        self.page_size = params.page_size

        self.phase = Phase.ready
        self._commit(reset_page=False, immediate=True)

    def close(self) -> None:
        self._debouncer.cancel()
        self.phase = Phase.uninitialized

    def flush(self) -> bool:
        """Run a pending debounced propagation right away."""
        return self._debouncer.flush()

    # ==========================================================
    # View switching
    # ==========================================================
    async def set_active_view(self, view_id: str) -> Optional[SavedViewOut]:
        self._require_ready()
        self.generation += 1
        started = self.generation
        try:
            view = await self.gateway.get(view_id)
        except NotFoundError:
            if started != self.generation:
                log.info("Discarding not-found for superseded load of %s", view_id)
                return None
            self._forget(view_id)
            self._notify("warning", "That view was deleted; switched to the default view.", NotFoundError.code)
            self._switch_to(self._fallback_view())
            return self.active_view
        except TransportError as exc:
            if started != self.generation:
                log.info("Discarding transport failure for superseded load of %s: %s", view_id, exc.message)
                return None
            self._notify("error", f"Could not load the view: {exc.message}", exc.code)
            raise

        if started != self.generation:
            log.info(
                "%s",
                StaleDataError(f"Discarding load of view {view_id}: generation {started} < {self.generation}"),
            )
            return None
        self._remember(view)
        self._switch_to(view)
        return view

    # ==========================================================
    # Filter mutations
    # ==========================================================
    def add_filter_group(self) -> FilterGroup:
        group = self._filters.add_group()
        self._commit()
        return group

    def duplicate_filter_group(self, group_id: str) -> FilterGroup:
        group = self._filters.duplicate_group(group_id)
        self._commit()
        return group

    def remove_filter_group(self, group_id: str) -> None:
        self._filters.remove_group(group_id)
        self._commit()

    def add_condition(self, group_id: str) -> FilterCondition:
        condition = self._filters.add_condition(group_id)
        self._commit()
        return condition

    def update_condition(self, group_id: str, condition_id: str, patch: Mapping[str, Any]) -> FilterCondition:
        condition = self._filters.update_condition(group_id, condition_id, patch)
        self._commit()
        return condition

    def remove_condition(self, group_id: str, condition_id: str) -> None:
        self._filters.remove_condition(group_id, condition_id)
        self._commit()

    def set_filters(self, groups: Iterable[FilterGroup]) -> None:
        self._filters.replace(groups)
        self._commit()

    def clear_filters(self) -> None:
        """Advanced filters, quick filters and search text go together."""
        self._filters.clear()
        self.quick_filters = {}
        self.search_query = ""
        self._commit()

    def set_quick_filter(self, property_id: str, value: Any) -> None:
        if property_id not in self.config.quick_filter_property_ids:
            raise ValidationError(f"{property_id!r} is not a quick filter for {self.config.entity_name}.")
        updated = dict(self.quick_filters)
        if value is None or value == "" or value == []:
            updated.pop(property_id, None)
        else:
            if not compile_quick_filters({property_id: value}, self.config):
                raise ValidationError(f"{value!r} is not a valid value for {property_id!r}.")
            updated[property_id] = value
        self.quick_filters = updated
        self._commit()

    def set_search_query(self, text: str) -> None:
        self.search_query = text or ""
        self._commit()

    # ==========================================================
    # Sort / columns / mode
    # ==========================================================
    def set_sort(self, column_id: Optional[str], direction: Union[SortDirection, str] = SortDirection.asc) -> None:
        sort = SortState(column_id=column_id, direction=SortDirection(direction))
        column_rules.validate_sort(sort, self.config)
        self.sort = sort
        self._commit()

    def set_column_state(self, state: ColumnState) -> None:
        column_rules.validate_column_state(state, self.config)
        self.column_state = state
        self._commit(reset_page=False)

    def set_column_visible(self, column_id: str, visible: bool) -> None:
        self.column_state = column_rules.set_column_visible(self.column_state, self.config, column_id, visible)
        self._commit(reset_page=False)

    def move_column(self, from_index: int, to_index: int) -> None:
        self.column_state = column_rules.move_column(self.column_state, self.config, from_index, to_index)
        self._commit(reset_page=False)

    def set_frozen_count(self, count: int) -> None:
        self.column_state = column_rules.set_frozen_count(self.column_state, count)
        self._commit(reset_page=False)

    def resize_column(self, column_id: str, width: int) -> None:
        self.column_state = column_rules.resize_column(self.column_state, self.config, column_id, width)
        self._commit(reset_page=False)

    def set_view_mode(self, mode: Union[ViewMode, str]) -> None:
        mode = ViewMode(mode)
        if mode == ViewMode.board:
            self.board_group_by = resolve_group_by(self.config, self.board_group_by)
        self.view_mode = mode
        self._commit(reset_page=False)

    def set_board_group_by(self, property_id: str) -> None:
        self.board_group_by = resolve_group_by(self.config, property_id)
        self._commit(reset_page=False)

    # ==========================================================
    # Paging & selection
    # ==========================================================
    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValidationError("Page numbers start at 1.")
        self.page = page
        self._commit(reset_page=False)

    def set_page_size(self, size: int) -> None:
        if not 1 <= size <= settings.MAX_PAGE_SIZE:
            raise ValidationError(f"Page size must be between 1 and {settings.MAX_PAGE_SIZE}.")
        self.page_size = size
        self._commit()

    def toggle_row_selection(self, record_id: str) -> bool:
        if record_id in self._selection:
            del self._selection[record_id]
            return False
        self._selection[record_id] = None
        return True

    def select_all_on_page(self, record_ids: Optional[Iterable[str]] = None) -> None:
        if record_ids is None:
            records = self.results.records if self.results else []
            record_ids = [str(r["id"]) for r in records if r.get("id") is not None]
        for rid in record_ids:
            self._selection[rid] = None

    def clear_selection(self) -> None:
        self._selection = {}

    # ==========================================================
    # Results & rendering events
    # ==========================================================
    def apply_results(self, result: QueryResult, generation: int) -> bool:
        """Accept executor output only for the latest generation."""
        if generation != self.generation:
            log.info(
                "%s",
                StaleDataError(f"Discarding results for generation {generation}; current is {self.generation}"),
            )
            return False
        self.results = result
        return True

    def board_lanes(self) -> List[BoardLane]:
        if self.view_mode != ViewMode.board:
            raise ValidationError("Board lanes are only available in board mode.")
        records = self.results.records if self.results else []
        return group_records(records, self.config, self.board_group_by)

    def on_row_click(self, record_id: str) -> Any:
        if self.on_open_record is not None:
            return self.on_open_record(record_id)
        return None

    async def on_status_drop(self, record_id: str, new_value: str) -> None:
        if self.view_mode != ViewMode.board:
            raise ValidationError("Cards can only be moved in board mode.")
        prop = self.config.get_property(resolve_group_by(self.config, self.board_group_by))
        if prop.options and new_value not in prop.option_values():
            raise ValidationError(f"{new_value!r} is not a valid {prop.display_name}.")
        if self.on_status_change is None:
            raise ValidationError("Moving cards is not supported here.")
        await self.on_status_change(record_id, prop.id, new_value)
        self._emit_query()

    # ==========================================================
    # Persistence
    # ==========================================================
    async def save(self) -> SavedViewOut:
        self._require_ready()
        view = self.active_view
        if view is None:
            raise ValidationError("No saved view is active; use save as to create one.")
        if view.owner_id != self.user_id:
            raise PermissionDenied(
                f"You can't update {view.name!r} because you don't own it. Clone it to make your own copy.",
                view_id=view.id,
            )

        sent = self._snapshot()
        payload = SavedViewUpdate(
            filters=sent.filters,
            column_state=sent.column_state,
            sort_state=sent.sort,
            view_mode=sent.view_mode,
            board_group_by=sent.board_group_by,
        )
        try:
            updated = await self.gateway.update(view.id, payload)
        except TransportError as exc:
            # nothing is lost, dirty stays true, caller may retry
            log.warning("Saving view %s failed: %s", view.id, exc.message)
            self._notify("error", "Could not save the view; your changes are still here.", exc.code)
            raise
        except ViewEngineError as exc:
            self._notify("error", exc.message, exc.code)
            raise

        self._remember(updated)
        if self.active_view is not None and self.active_view.id == updated.id:
            self.active_view = updated
            self._baseline = sent
        return updated

    async def save_as(
        self,
        name: str,
        visibility: Union[Visibility, str] = Visibility.private,
        *,
        description: Optional[str] = None,
        pinned: bool = True,
    ) -> SavedViewOut:
        self._require_ready()
        sent = self._snapshot()
        payload = SavedViewCreate(
            entity_type=self.config.entity_type,
            name=name,
            description=description,
            visibility=Visibility(visibility),
            filters=sent.filters,
            column_state=sent.column_state,
            sort_state=sent.sort,
            view_mode=sent.view_mode,
            board_group_by=sent.board_group_by,
            pinned=pinned,
        )
        try:
            created = await self.gateway.create(payload)
        except ViewEngineError as exc:
            self._notify("error", exc.message, exc.code)
            raise

        self.generation += 1
        self._remember(created)
        self.active_view = created
        self._baseline = sent
        self.url.push(self.url_state())
        return created

    async def delete_view(self, view_id: str) -> None:
        self._require_ready()
        try:
            await self.gateway.delete(view_id)
        except ViewEngineError as exc:
            self._notify("error", exc.message, exc.code)
            raise

        was_active = self.active_view is not None and self.active_view.id == view_id
        self._forget(view_id)
        if was_active:
            self.generation += 1
            self._switch_to(self._fallback_view())

    async def clone_view(self, view_id: Optional[str] = None, name: Optional[str] = None) -> SavedViewOut:
        self._require_ready()
        source_id = view_id or (self.active_view.id if self.active_view else None)
        if source_id is None:
            raise ValidationError("Choose a view to clone.")
        try:
            clone = await self.gateway.clone(source_id, name)
        except ViewEngineError as exc:
            self._notify("error", exc.message, exc.code)
            raise
        self.generation += 1
        self._remember(clone)
        self._switch_to(clone)
        return clone

    async def rename_view(self, view_id: str, name: str) -> SavedViewOut:
        self._require_ready()
        try:
            renamed = await self.gateway.update(view_id, SavedViewUpdate(name=name))
        except ViewEngineError as exc:
            self._notify("error", exc.message, exc.code)
            raise
        self._remember(renamed)
        if self.active_view is not None and self.active_view.id == view_id:
            self.active_view = renamed
        return renamed

    async def reorder_views(self, from_index: int, to_index: int) -> List[SavedViewOut]:
        """Optimistic: tabs move now, and move back if the gateway refuses."""
        self._require_ready()
        token = self._tab_order.propose(from_index, to_index)
        ordered = self._tab_order.current
        try:
            confirmed = await self.gateway.reorder(self.config.entity_type, ordered)
        except ViewEngineError as exc:
            if self._tab_order.revert(token):
                self._notify("error", f"Could not reorder views: {exc.message}", exc.code)
            raise
        if self._tab_order.confirm(token):
            for v in confirmed:
                self._views[v.id] = v
        return self.views

    async def refresh_record_count(self, view_id: Optional[str] = None) -> Optional[SavedViewOut]:
        target = view_id or (self.active_view.id if self.active_view else None)
        if target is None:
            raise ValidationError("No view to count.")
        token = self._count_tokens.get(target, 0) + 1
        self._count_tokens[target] = token
        try:
            refreshed = await self.gateway.refresh_record_count(target)
        except TransportError as exc:
            log.warning("Count refresh for %s failed: %s", target, exc.message)
            return None
        if self._count_tokens.get(target) != token:
            log.info("%s", StaleDataError(f"Discarding superseded count refresh for view {target}"))
            return None
        self._remember(refreshed)
        if self.active_view is not None and self.active_view.id == target:
            self.active_view = refreshed
        return refreshed

    def record_count_status(self, view_id: Optional[str] = None, now: Optional[datetime] = None) -> RecordCountStatus:
        target = view_id or (self.active_view.id if self.active_view else None)
        view = self._views.get(target) if target else None
        if view is None or view.cached_record_count is None:
            return RecordCountStatus()
        at = _aware(view.cached_record_count_at)
        now = now or datetime.now(UTC)
        return RecordCountStatus(
            count=view.cached_record_count,
            refreshed_at=at,
            stale=at is None or now - at > self.count_ttl,
        )

    async def run_bulk_action(self, action_id: str) -> BulkActionOutcome:
        snapshot = list(self._selection)
        outcome = await self.bulk_actions.run(self.config, action_id, snapshot)
        # only now, with an outcome in hand, may the live selection go
        self.clear_selection()
        if outcome.status != BulkOutcomeStatus.success:
            self._notify(
                "warning" if outcome.status == BulkOutcomeStatus.partial else "error",
                outcome.message or f"{action_id}: {len(outcome.failed_ids)} record(s) failed.",
            )
        self._emit_query()
        return outcome

    # ==========================================================
    # Internals
    # ==========================================================
    def _require_ready(self) -> None:
        if self.phase != Phase.ready:
            raise ValidationError("The view is still loading.")

    def _notify(self, level: str, message: str, code: Optional[str] = None) -> None:
        self.notices.append(Notice(level=level, message=message, code=code))

    def _default_snapshot(self) -> ViewSnapshot:
        return ViewSnapshot(column_state=column_rules.default_column_state(self.config))

    def _snapshot(self) -> ViewSnapshot:
        board = self.view_mode == ViewMode.board
        return ViewSnapshot(
            filters=self._filters.groups,
            column_state=self.column_state,
            sort=self.sort,
            view_mode=self.view_mode,
            board_group_by=self.board_group_by if board else None,
        )

    def _snapshot_of(self, view: Optional[SavedViewOut]) -> ViewSnapshot:
        if view is None:
            return self._default_snapshot()
        filters, problems = sanitize_filters(view.filters, self.config)
        if problems:
            self._notify("warning", f"{len(problems)} condition(s) in {view.name!r} no longer apply and were skipped.")
        mode = view.view_mode
        group_by = None
        if mode == ViewMode.board:
            try:
                group_by = resolve_group_by(self.config, view.board_group_by)
            except ValidationError:
                mode = ViewMode.table
        return ViewSnapshot(
            filters=filters,
            column_state=column_rules.normalize_column_state(view.column_state, self.config),
            sort=column_rules.normalize_sort(view.sort_state, self.config),
            view_mode=mode,
            board_group_by=group_by,
        )

    def _load(self, view: Optional[SavedViewOut]) -> None:
        snap = self._snapshot_of(view)
        self.active_view = view
        self._baseline = snap
        self._filters.replace(snap.filters)
        self.column_state = snap.column_state
        self.sort = snap.sort
        self.view_mode = snap.view_mode
        self.board_group_by = snap.board_group_by
        self.quick_filters = {}
        self.search_query = ""
        self.page = 1
        self.results = None
        self.clear_selection()

    def _switch_to(self, view: Optional[SavedViewOut]) -> None:
        self._load(view)
        self.url.push(self.url_state())
        self._commit(reset_page=False, immediate=True, url_mode=None)

    def _set_views(self, views: Iterable[SavedViewOut]) -> None:
        own, shared = [], []
        self._views = {}
        for v in views:
            self._views[v.id] = v
            (own if v.owner_id == self.user_id else shared).append(v)
        own.sort(key=lambda v: v.display_order)
        self._tab_order.reset([v.id for v in own])
        self._shared_ids = [v.id for v in shared]

    def _remember(self, view: SavedViewOut) -> None:
        known = view.id in self._views
        self._views[view.id] = view
        if known:
            return
        if view.owner_id == self.user_id:
            self._tab_order.reset(self._tab_order.current + [view.id])
        else:
            self._shared_ids.append(view.id)

    def _forget(self, view_id: str) -> None:
        self._views.pop(view_id, None)
        if view_id in self._shared_ids:
            self._shared_ids.remove(view_id)
        if view_id in self._tab_order.current:
            self._tab_order.reset([i for i in self._tab_order.current if i != view_id])

    def _fallback_view(self) -> Optional[SavedViewOut]:
        candidates = self.views
        for v in candidates:
            if v.is_default and v.owner_id == self.user_id:
                return v
        for v in candidates:
            if v.pinned:
                return v
        return candidates[0] if candidates else None

    def _build_query(self) -> QueryRequest:
        return build_query_request(
            self._filters.groups,
            self.config,
            quick_filters=self.quick_filters,
            sort=self.sort,
            search_query=self.search_query,
            page=self.page,
            page_size=self.page_size,
        )

    def _commit(self, reset_page: bool = True, immediate: bool = False, url_mode: Optional[str] = "replace") -> None:
        """Finish a mutation: new generation, fresh query, (debounced) propagation."""
        if reset_page:
            self.page = 1
        self.generation += 1
        self.query = self._build_query()
        if immediate:
            self._debouncer.cancel()
            self._propagate(self.generation, url_mode=url_mode)
        else:
            self._debouncer.schedule(self.generation)

    def _propagate(self, generation: int, url_mode: Optional[str] = "replace") -> None:
        if generation != self.generation:
            log.info("Skipping propagation for generation %s; current is %s", generation, self.generation)
            return
        if url_mode == "replace":
            self.url.replace(self.url_state())
        self._emit_query()

    def _emit_query(self) -> None:
        if self.on_query is not None and self.query is not None:
            self.on_query(self.query, self.generation)
