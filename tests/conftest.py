# ruff: noqa: E402
# File: /tests/conftest.py
import asyncio
import pathlib
import sys
from datetime import UTC, datetime
from typing import Dict, List, Optional

# Make repo root importable as "viewengine"
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from viewengine.core.exceptions import FallbackViewRequired, NotFoundError, PermissionDenied
from viewengine.db.base_class import Base
from viewengine.main import app
from viewengine.modules._base import column, options
from viewengine.schemas._base import gen_id
from viewengine.schemas.filters import PropertyType as T
from viewengine.schemas.module_config import BoardConfig, ModuleViewConfig
from viewengine.schemas.view import SavedViewCreate, SavedViewOut, SavedViewUpdate
from viewengine.security import token_for_user

TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def _create_schema():
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    connection = engine.connect()
    trans = connection.begin()
    try:
        session = TestingSessionLocal(bind=connection)
        yield session
    finally:
        session.close()
        trans.rollback()
        connection.close()


@pytest.fixture()
def client(db_session):
    from viewengine.db.session import get_db  # late import to avoid circulars

    def _override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    def _headers(user_id: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token_for_user(user_id)}"}

    return _headers


# ----------------------------
# A small module used by engine tests
# ----------------------------
@pytest.fixture()
def tickets_config() -> ModuleViewConfig:
    return ModuleViewConfig(
        entity_type="tickets",
        entity_name="Tickets",
        primary_column_id="number",
        columns=[
            column("number", "Ticket #", T.text, 120, visible=True),
            column("title", "Title", T.text, 250, visible=True),
            column(
                "status",
                "Status",
                T.enum,
                130,
                visible=True,
                opts=options(("OPEN", "Open"), ("CLOSED", "Closed")),
            ),
            column("createdAt", "Created", T.date, 150, visible=True),
            column("amount", "Amount", T.number, 100),
            column("urgent", "Urgent", T.boolean, 90, sortable=False),
            column("owner", "Owner", T.person, 150, accessor="owner.id"),
            column("notes", "Notes", T.text, 300, sortable=False, filterable=False),
        ],
        quick_filter_property_ids=["status", "urgent", "owner"],
        bulk_action_ids=["close", "export"],
        board_config=BoardConfig(groupable_by_property_ids=["status"], default_group_by="status"),
    )


@pytest.fixture()
def view_factory():
    def _make(owner_id: str = "u1", **fields) -> SavedViewOut:
        data = {
            "id": gen_id(),
            "entity_type": "tickets",
            "owner_id": owner_id,
            "name": "View",
            "pinned": True,
        }
        data.update(fields)
        return SavedViewOut.model_validate(data)

    return _make


class FakeGateway:
    """In-memory gateway with failure and latency injection."""

    def __init__(self, user_id: str, views: Optional[List[SavedViewOut]] = None):
        self.user_id = user_id
        self.views: Dict[str, SavedViewOut] = {v.id: v for v in views or []}
        self.fail_with: Optional[Exception] = None
        self.get_delays: Dict[str, float] = {}
        self.get_failures: Dict[str, Exception] = {}
        self.counts: Dict[str, int] = {}
        self.calls: List[str] = []

    async def _enter(self, name: str) -> None:
        self.calls.append(name)
        await asyncio.sleep(0)
        if self.fail_with is not None:
            raise self.fail_with

    def _own(self, entity_type: str) -> List[SavedViewOut]:
        own = [v for v in self.views.values() if v.owner_id == self.user_id and v.entity_type == entity_type]
        return sorted(own, key=lambda v: v.display_order)

    def _owned(self, view_id: str) -> SavedViewOut:
        v = self.views.get(view_id)
        if v is None:
            raise NotFoundError("View not found")
        if v.owner_id != self.user_id:
            raise PermissionDenied("Not your view")
        return v

    async def list(self, entity_type: str) -> List[SavedViewOut]:
        await self._enter("list")
        return [v for v in self.views.values() if v.entity_type == entity_type]

    async def get(self, view_id: str) -> SavedViewOut:
        await asyncio.sleep(self.get_delays.get(view_id, 0))
        if view_id in self.get_failures:
            raise self.get_failures[view_id]
        await self._enter("get")
        if view_id not in self.views:
            raise NotFoundError("View not found")
        return self.views[view_id]

    async def create(self, data: SavedViewCreate) -> SavedViewOut:
        await self._enter("create")
        body = data.model_dump()
        body.update(
            id=gen_id(),
            owner_id=self.user_id,
            display_order=len(self._own(data.entity_type)),
        )
        view = SavedViewOut.model_validate(body)
        self.views[view.id] = view
        return view

    async def update(self, view_id: str, data: SavedViewUpdate) -> SavedViewOut:
        await self._enter("update")
        current = self._owned(view_id)
        merged = current.model_dump()
        merged.update(data.model_dump(exclude_unset=True))
        view = SavedViewOut.model_validate(merged)
        self.views[view_id] = view
        return view

    async def delete(self, view_id: str) -> None:
        await self._enter("delete")
        v = self._owned(view_id)
        if v.pinned or v.is_default:
            others = [o for o in self._own(v.entity_type) if o.id != view_id and (o.pinned or o.is_default)]
            if not others:
                raise FallbackViewRequired("Last pinned view")
        del self.views[view_id]

    async def clone(self, view_id: str, name: Optional[str] = None) -> SavedViewOut:
        await self._enter("clone")
        src = self.views[view_id]
        body = src.model_dump()
        body.update(
            id=gen_id(),
            owner_id=self.user_id,
            name=name or f"{src.name} (Copy)",
            visibility="private",
            is_default=False,
            pinned=False,
            display_order=len(self._own(src.entity_type)),
        )
        view = SavedViewOut.model_validate(body)
        self.views[view.id] = view
        return view

    async def reorder(self, entity_type: str, ordered_ids: List[str]) -> List[SavedViewOut]:
        await self._enter("reorder")
        for i, vid in enumerate(ordered_ids):
            self.views[vid] = self._owned(vid).model_copy(update={"display_order": i})
        return self._own(entity_type)

    async def refresh_record_count(self, view_id: str) -> SavedViewOut:
        await self._enter("refresh_record_count")
        view = self.views[view_id].model_copy(
            update={
                "cached_record_count": self.counts.get(view_id, 0),
                "cached_record_count_at": datetime.now(UTC),
            }
        )
        self.views[view_id] = view
        return view


@pytest.fixture()
def gateway_factory():
    def _make(user_id: str = "u1", views: Optional[List[SavedViewOut]] = None) -> FakeGateway:
        return FakeGateway(user_id, views)

    return _make
