# File: /tests/test_views_api.py
from viewengine.crud import record_query
from viewengine.models.saved_view import SavedView


def _create(client, headers, **overrides):
    body = {"entity_type": "cases", "name": "Mine", "pinned": True}
    body.update(overrides)
    r = client.post("/views", json=body, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_requires_a_bearer_token(client):
    r = client.get("/views", params={"entity_type": "cases"})
    assert r.status_code == 401, r.text


def test_first_listing_materializes_default_views(client, auth_headers):
    r = client.get("/views", params={"entity_type": "cases"}, headers=auth_headers("u1"))
    assert r.status_code == 200, r.text
    views = r.json()
    assert [v["name"] for v in views] == ["All Cases", "My Cases", "Open Cases", "High Priority"]
    assert views[0]["is_default"] and all(v["is_system"] for v in views)
    assert [v["display_order"] for v in views] == [0, 1, 2, 3]

    my_cases = views[1]["filters"][0]["conditions"][0]
    assert my_cases["value"] == ["u1"]
    assert views[0]["column_state"]["visible_column_ids"][0] == "caseNumber"

    again = client.get("/views", params={"entity_type": "cases"}, headers=auth_headers("u1")).json()
    assert [v["id"] for v in again] == [v["id"] for v in views]


def test_unknown_entity_type_is_404(client, auth_headers):
    r = client.get("/views", params={"entity_type": "widgets"}, headers=auth_headers("u1"))
    assert r.status_code == 404, r.text
    assert r.json()["code"] == "not_found"


def test_create_rejects_illegal_operator(client, auth_headers):
    filters = [{"conditions": [{"property_id": "title", "operator": "is_greater_than", "value": 3}]}]
    r = client.post(
        "/views",
        json={"entity_type": "cases", "name": "Bad", "filters": filters},
        headers=auth_headers("u1"),
    )
    assert r.status_code == 400, r.text
    assert r.json()["code"] == "validation_error"


def test_create_rejects_too_many_groups(client, auth_headers):
    filters = [{"conditions": []}, {"conditions": []}, {"conditions": []}]
    r = client.post(
        "/views",
        json={"entity_type": "cases", "name": "Bad", "filters": filters},
        headers=auth_headers("u1"),
    )
    assert r.status_code == 400, r.text


def test_create_rejects_hidden_primary_column(client, auth_headers):
    r = client.post(
        "/views",
        json={
            "entity_type": "cases",
            "name": "Bad",
            "column_state": {"visible_column_ids": ["title"], "frozen_count": 0},
        },
        headers=auth_headers("u1"),
    )
    assert r.status_code == 400, r.text


def test_private_views_are_invisible_to_others(client, auth_headers):
    v = _create(client, auth_headers("u1"))
    r = client.get(f"/views/{v['id']}", headers=auth_headers("u2"))
    assert r.status_code == 404, r.text
    r = client.get(f"/views/{v['id']}", headers=auth_headers("u1"))
    assert r.status_code == 200, r.text


def test_shared_view_cannot_be_changed_by_others(client, auth_headers):
    v = _create(client, auth_headers("u1"), visibility="team")

    r = client.get(f"/views/{v['id']}", headers=auth_headers("u2"))
    assert r.status_code == 200, r.text

    r = client.patch(f"/views/{v['id']}", json={"name": "Hijack"}, headers=auth_headers("u2"))
    assert r.status_code == 403, r.text
    body = r.json()
    assert body["code"] == "permission_denied"
    assert body["suggestion"] == "clone"

    r = client.delete(f"/views/{v['id']}", headers=auth_headers("u2"))
    assert r.status_code == 403, r.text


def test_clone_makes_a_private_copy(client, auth_headers):
    v = _create(client, auth_headers("u1"), visibility="everyone", sort_state={"column_id": "title"})
    r = client.post(f"/views/{v['id']}/clone", headers=auth_headers("u2"))
    assert r.status_code == 200, r.text
    copy = r.json()
    assert copy["owner_id"] == "u2"
    assert copy["name"] == "Mine (Copy)"
    assert copy["visibility"] == "private"
    assert copy["pinned"] is False and copy["is_default"] is False
    assert copy["sort_state"]["column_id"] == "title"

    named = client.post(f"/views/{v['id']}/clone", json={"name": "Ours"}, headers=auth_headers("u2"))
    assert named.json()["name"] == "Ours"


def test_update_applies_only_sent_fields(client, auth_headers):
    v = _create(client, auth_headers("u1"), description="keep me")
    filters = [{"conditions": [{"property_id": "priority", "operator": "is_any_of", "value": ["high"]}]}]
    r = client.patch(
        f"/views/{v['id']}",
        json={"filters": filters, "sort_state": {"column_id": "createdAt", "direction": "desc"}},
        headers=auth_headers("u1"),
    )
    assert r.status_code == 200, r.text
    out = r.json()
    assert out["description"] == "keep me"
    assert out["filters"][0]["conditions"][0]["value"] == ["high"]
    assert out["sort_state"] == {"column_id": "createdAt", "direction": "desc"}


def test_update_repairs_stale_stored_filters(client, auth_headers, db_session):
    v = _create(client, auth_headers("u1"))
    row = db_session.get(SavedView, v["id"])
    row.filters = [
        {"id": "g1", "conditions": [{"id": "c1", "property_id": "retiredField", "operator": "is"}]}
    ]
    db_session.commit()

    r = client.patch(f"/views/{v['id']}", json={"name": "Renamed"}, headers=auth_headers("u1"))
    assert r.status_code == 200, r.text
    assert r.json()["name"] == "Renamed"
    assert r.json()["filters"] == [{"id": "g1", "conditions": []}]


def test_only_one_default_view_per_owner(client, auth_headers):
    a = _create(client, auth_headers("u1"), name="A", is_default=True)
    b = _create(client, auth_headers("u1"), name="B", is_default=True)
    assert client.get(f"/views/{a['id']}", headers=auth_headers("u1")).json()["is_default"] is False
    assert client.get(f"/views/{b['id']}", headers=auth_headers("u1")).json()["is_default"] is True


def test_last_pinned_view_cannot_be_deleted(client, auth_headers):
    only = _create(client, auth_headers("u3"), is_default=True)
    r = client.delete(f"/views/{only['id']}", headers=auth_headers("u3"))
    assert r.status_code == 409, r.text
    assert r.json()["code"] == "fallback_required"

    other = _create(client, auth_headers("u3"), name="Other")
    r = client.delete(f"/views/{only['id']}", headers=auth_headers("u3"))
    assert r.status_code == 200, r.text
    assert client.get(f"/views/{other['id']}", headers=auth_headers("u3")).json()["display_order"] == 0


def test_unpinned_view_can_always_be_deleted(client, auth_headers):
    loose = _create(client, auth_headers("u3"), pinned=False)
    r = client.delete(f"/views/{loose['id']}", headers=auth_headers("u3"))
    assert r.status_code == 200, r.text
    assert client.get(f"/views/{loose['id']}", headers=auth_headers("u3")).status_code == 404


def test_reorder_is_all_or_nothing(client, auth_headers):
    h = auth_headers("u1")
    ids = [v["id"] for v in client.get("/views", params={"entity_type": "cases"}, headers=h).json()]

    r = client.post("/views/reorder", json={"entity_type": "cases", "ordered_ids": ids[::-1]}, headers=h)
    assert r.status_code == 200, r.text
    assert [v["id"] for v in r.json()] == ids[::-1]

    r = client.post("/views/reorder", json={"entity_type": "cases", "ordered_ids": ids[:2]}, headers=h)
    assert r.status_code == 400, r.text
    listed = client.get("/views", params={"entity_type": "cases"}, headers=h).json()
    assert [v["id"] for v in listed] == ids[::-1]


def test_reorder_with_someone_elses_view_is_forbidden(client, auth_headers):
    theirs = _create(client, auth_headers("u2"), visibility="team")
    h = auth_headers("u1")
    ids = [v["id"] for v in client.get("/views", params={"entity_type": "cases"}, headers=h).json()]
    mine = [i for i in ids if i != theirs["id"]]
    r = client.post(
        "/views/reorder", json={"entity_type": "cases", "ordered_ids": mine + [theirs["id"]]}, headers=h
    )
    assert r.status_code == 403, r.text


def test_apply_compiles_and_tracks_usage(client, auth_headers):
    h = auth_headers("u1")
    views = client.get("/views", params={"entity_type": "cases"}, headers=h).json()
    open_cases = views[2]
    r = client.post(f"/views/{open_cases['id']}/apply", params={"page": 2, "page_size": 10}, headers=h)
    assert r.status_code == 200, r.text
    out = r.json()
    assert out["view"]["use_count"] == 1
    assert out["query"]["page"] == 2 and out["query"]["page_size"] == 10
    assert out["query"]["sort_field"] == "priority"
    assert out["query"]["sort_direction"] == "desc"
    branch = out["query"]["filters"]["branches"][0]
    assert branch[0]["field"] == "status"
    assert branch[0]["value"] == ["open", "in_progress"]
    assert out["invalid_conditions"] == []


def test_count_needs_a_registered_source(client, auth_headers, monkeypatch):
    v = _create(client, auth_headers("u1"))
    r = client.post(f"/views/{v['id']}/count", headers=auth_headers("u1"))
    assert r.status_code == 400, r.text

    monkeypatch.setitem(record_query._COUNTERS, "cases", lambda db, request: 17)
    r = client.post(f"/views/{v['id']}/count", headers=auth_headers("u1"))
    assert r.status_code == 200, r.text
    assert r.json()["cached_record_count"] == 17
    assert r.json()["cached_record_count_at"] is not None


def test_module_endpoints(client, auth_headers):
    h = auth_headers("u1")
    modules = client.get("/modules", headers=h).json()
    assert {m["entity_type"] for m in modules} == {
        "cases", "investigations", "disclosures", "intake_forms", "policies"
    }
    ops = client.get("/modules/operators", headers=h).json()
    assert {"operator": "is_between", "label": "is between", "values": "two"} in ops["date"]
    cfg = client.get("/modules/cases", headers=h).json()
    assert cfg["primary_column_id"] == "caseNumber"
    assert client.get("/modules/widgets", headers=h).status_code == 404


def test_health(client):
    assert client.get("/healthz").json() == {"status": "ok"}
