# File: /tests/test_url_state.py
from viewengine.engine.url_state import (
    UrlState,
    UrlStateSynchronizer,
    decode_url_state,
    encode_url_state,
)
from viewengine.modules._base import cond, group
from viewengine.schemas.filters import FilterOperator as Op
from viewengine.schemas.view import SortDirection, SortState


def test_round_trip_reproduces_state():
    state = UrlState(
        view_id="v-1",
        filters=[
            group(cond("status", Op.is_any_of, ["OPEN"])),
            group(cond("createdAt", Op.is_after, "2026-01-01")),
        ],
        sort=SortState(column_id="createdAt", direction=SortDirection.desc),
        search_query="vpn outage",
        page=3,
        page_size=50,
    )
    assert decode_url_state(encode_url_state(state)) == state


def test_defaults_are_omitted_and_rebuilt():
    query = encode_url_state(UrlState(view_id="v-1"))
    assert query == "view=v-1"
    decoded = decode_url_state("?" + query)
    assert decoded == UrlState(view_id="v-1")
    assert decoded.page == 1 and decoded.page_size == 25


def test_explicitly_unsorted_survives_round_trip():
    state = UrlState(sort=SortState())
    assert encode_url_state(state) == "sortBy="
    assert decode_url_state("sortBy=").sort == SortState()


def test_malformed_parameters_fall_back():
    decoded = decode_url_state({"filters": "{not json", "page": "-2", "pageSize": "5000", "view": ""})
    assert decoded.filters is None
    assert decoded.page == 1
    assert decoded.page_size == 25
    assert decoded.view_id is None


def test_synchronizer_push_and_replace():
    seen = []
    sync = UrlStateSynchronizer("?view=a", on_change=lambda mode, q: seen.append(mode))
    sync.replace(UrlState(view_id="a", search_query="x"))
    sync.push(UrlState(view_id="b"))
    sync.push(UrlState(view_id="b"))  # unchanged: no new entry
    assert sync.history == ["view=a&q=x", "view=b"]
    assert seen == ["replace", "push"]
    assert sync.back().view_id == "a"
