import os
import uuid


def get_client():
    # Use in-memory sqlite for tests
    os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
    # Import after env is set so engine is created with sqlite
    from habit_tracker.main import app  # noqa: WPS433
    from fastapi.testclient import TestClient  # noqa: WPS433
    return TestClient(app)


def sign_in(client, year=2026):
    user_id = f"user-{uuid.uuid4().hex[:8]}"
    assert client.put("/session/year", json={"year": year}).status_code == 200
    r = client.post("/session/", json={"user_id": user_id})
    assert r.status_code == 200, r.text
    assert r.json()["outcome"] == "confirmed"
    return user_id


def add_habit(client, **payload):
    r = client.post("/habits/", params={"wait": True}, json=payload)
    assert r.status_code == 200, r.text
    assert r.json()["outcome"] == "confirmed"
    return next(h for h in r.json()["state"]["habits"] if h["name"] == payload["name"])


def test_root_ok():
    client = get_client()
    r = client.get("/")
    assert r.status_code == 200
    data = r.json()
    assert "message" in data


def test_writes_need_a_session():
    client = get_client()
    client.delete("/session/")
    r = client.post("/habits/", json={"name": "Stretch"})
    assert r.status_code == 409


def test_new_user_starts_empty():
    client = get_client()
    sign_in(client)
    assert client.get("/habits/").json() == []
    status = client.get("/session/status").json()
    assert status["ready"] is True
    assert status["label"] == "Synced"


def test_log_values_and_read_back():
    client = get_client()
    sign_in(client)
    pushups = add_habit(client, name="Pushups", unit="reps", goals={"daily": 50})
    hid = pushups["id"]
    assert pushups["sort_index"] == 0

    r = client.put(f"/entries/2026-03-01/{hid}", params={"wait": True}, json={"value": "12.5"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["outcome"] == "confirmed"
    assert body["state"]["entries"]["2026-03-01"][hid] == {"value": 12.5}
    assert body["state"]["habits"][0]["decimals"] == 1

    r = client.post(f"/entries/2026-03-02/{hid}/bump", params={"wait": True}, json={"delta": 10})
    assert r.json()["state"]["entries"]["2026-03-02"][hid] == {"value": 10}

    stats = client.get(f"/habits/{hid}/stats").json()
    assert stats["total"] == 22.5
    assert stats["days_logged"] == 2
    assert stats["best"] == 12.5

    series = client.get(f"/habits/{hid}/series").json()
    assert series[0]["date"] == "2026-01-01"
    assert series[0]["goal_cum"] == 50

    hist = client.get("/entries/history", params={"month": "03"}).json()
    assert [d["date"] for d in hist] == ["2026-03-02", "2026-03-01"]
    assert hist[1]["items"][0]["value"] == "12.5 reps"

    # a reload brings back what the remote stored
    r = client.post("/session/refresh")
    assert r.json()["outcome"] == "confirmed"
    assert r.json()["state"]["entries"]["2026-03-01"][hid] == {"value": 12.5}


def test_remove_log_and_delete_habit():
    client = get_client()
    sign_in(client)
    hid = add_habit(client, name="Read", kind="checkbox")["id"]
    client.put(f"/entries/2026-03-01/{hid}", params={"wait": True}, json={"value": True})

    r = client.delete(f"/entries/2026-03-01/{hid}", params={"wait": True})
    assert r.json()["state"]["entries"] == {}

    r = client.delete(f"/habits/{hid}", params={"wait": True})
    assert r.status_code == 200
    assert client.get("/habits/").json() == []
    assert client.delete(f"/habits/{hid}").status_code == 404


def test_update_habit():
    client = get_client()
    sign_in(client)
    hid = add_habit(client, name="Run", unit="km")["id"]
    r = client.patch(f"/habits/{hid}", params={"wait": True}, json={"name": "Running", "goals": {"yearly": 1000}})
    assert r.status_code == 200, r.text
    habit = r.json()["state"]["habits"][0]
    assert habit["name"] == "Running"
    assert habit["goals"]["yearly"] == 1000
    assert habit["unit"] == "km"


def test_bad_entry_requests():
    client = get_client()
    sign_in(client)
    hid = add_habit(client, name="Water")["id"]
    assert client.put(f"/entries/2026-3-1/{hid}", json={"value": 1}).status_code == 422
    assert client.put("/entries/2026-03-01/missing", json={"value": 1}).status_code == 404
    assert client.get("/entries/history", params={"month": "13"}).status_code == 422


def test_reorder_and_drag():
    client = get_client()
    sign_in(client)
    a = add_habit(client, name="A")["id"]
    b = add_habit(client, name="B")["id"]
    c = add_habit(client, name="C")["id"]

    r = client.post("/habits/reorder", params={"wait": True}, json={"from_id": a, "to_id": c})
    assert [h["id"] for h in r.json()["state"]["habits"]] == [b, c, a]

    client.post("/habits/drag/start", json={"habit_id": a})
    preview = client.post("/habits/drag/over", json={"habit_id": b}).json()
    assert [h["id"] for h in preview] == [a, b, c]
    r = client.post("/habits/drag/end", params={"wait": True})
    assert r.json()["outcome"] == "confirmed"

    r = client.post("/session/refresh")
    assert [(h["id"], h["sort_index"]) for h in r.json()["state"]["habits"]] == [(a, 0), (b, 1), (c, 2)]


def test_summary_years_and_export():
    client = get_client()
    sign_in(client)
    small = add_habit(client, name="Small")["id"]
    big = add_habit(client, name="Big")["id"]
    client.put(f"/entries/2026-02-01/{small}", params={"wait": True}, json={"value": 1})
    client.put(f"/entries/2026-02-01/{big}", params={"wait": True}, json={"value": 100})

    summary = client.get("/state/summary").json()
    assert [s["habit"]["id"] for s in summary] == [big, small]

    years = client.get("/state/years").json()
    assert len(years) == 3
    assert years == list(range(years[0], years[0] + 3))

    r = client.get("/state/export")
    assert r.status_code == 200
    assert 'filename="habit_tracker_' in r.headers["content-disposition"]
    assert "habits" in r.json()


def test_share_link_and_public_view():
    client = get_client()
    sign_in(client)
    hid = add_habit(client, name="Pushups", unit="reps")["id"]
    client.put(f"/entries/2026-03-01/{hid}", params={"wait": True}, json={"value": 30})

    r = client.post("/share")
    assert r.status_code == 200, r.text
    link = r.json()
    assert link["url"].endswith(f"/view/{link['token']}")

    view = client.get(f"/view/{link['token']}", params={"year": 2026}).json()
    assert [h["id"] for h in view["habits"]] == [hid]
    assert view["summary"][0]["stats"]["total"] == 30
    assert view["recent"][0]["date"] == "2026-03-01"

    assert client.get("/view/not-a-token", params={"year": 2026}).status_code == 404
