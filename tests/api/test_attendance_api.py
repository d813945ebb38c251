from timekeeper.core.enums import ClockKind

from fakes import utc


def test_requests_without_session_are_unauthorized(app):
    client = app.test_client()

    resp = client.post("/api/clock", json={"type": "IN"})

    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Login required"}


def test_unknown_session_user_is_unauthorized(app, login):
    client = login(app.test_client(), 404)

    assert client.get("/api/punch-status").status_code == 401


def test_clock_in_records_request_metadata(app, login, stores):
    client = login(app.test_client(), 1)

    resp = client.post(
        "/api/clock",
        json={"type": "in", "deviceFingerprint": "fp-1"},
        headers={"X-Forwarded-For": "::ffff:203.0.113.7, 10.0.0.1", "User-Agent": "kiosk/1.0"},
    )

    assert resp.status_code == 201
    event = stores["clock"].get(resp.get_json()["event"]["eventId"])
    assert event.kind == ClockKind.IN
    assert event.metadata.ip_address == "203.0.113.7"
    assert event.metadata.device_fingerprint == "fp-1"
    assert event.metadata.user_agent == "kiosk/1.0"
    assert client.get("/api/punch-status").get_json()["clockedIn"] is True


def test_clock_for_another_worker_is_forbidden(app, login):
    client = login(app.test_client(), 2)

    resp = client.post("/api/clock", json={"userId": 1, "type": "IN"})

    assert resp.status_code == 403


def test_clock_list_rejects_bad_date(app, login):
    client = login(app.test_client(), 1)

    resp = client.get("/api/clock?date=10/03/2024")

    assert resp.status_code == 400
    assert "date" in resp.get_json()["error"]


def test_admin_edits_clock_event(app, login, stores):
    event = stores["clock"].add(1, ClockKind.IN, utc(2024, 3, 10, 1, 0))
    client = login(app.test_client(), 99)

    resp = client.put(
        f"/api/clock/{event.event_id}",
        json={"timestamp": "2024-03-10T08:30:00+08:00", "editReason": "badge reader down"},
    )

    body = resp.get_json()["event"]
    assert resp.status_code == 200
    assert body["isEdited"] is True
    assert body["timestamp"] == "2024-03-10T00:30:00+00:00"
    assert body["originalTimestamp"] == "2024-03-10T01:00:00+00:00"


def test_worker_cannot_edit_clock_event(app, login, stores):
    event = stores["clock"].add(1, ClockKind.IN, utc(2024, 3, 10, 1, 0))
    client = login(app.test_client(), 1)

    resp = client.put(f"/api/clock/{event.event_id}", json={"timestamp": "2024-03-10T00:30:00Z", "editReason": "x"})

    assert resp.status_code == 403


def test_worklog_start_auto_closes_previous(app, login, stores):
    client = login(app.test_client(), 1)
    task = {"projectName": "Portal", "category": "DEV", "content": "coding"}

    first = client.post("/api/worklog", json={**task, "projectCode": "P1", "startTime": "2024-03-10T09:00:00+08:00"})
    second = client.post("/api/worklog", json={**task, "projectCode": "P2", "startTime": "2024-03-10T10:00:00+08:00"})

    assert first.status_code == 201 and second.status_code == 201
    closed = second.get_json()["autoClosed"]
    assert [s["sessionId"] for s in closed] == [first.get_json()["session"]["sessionId"]]
    assert closed[0]["endTime"] == "2024-03-10T02:00:00+00:00"
    assert stores["work"].open_count(1) == 1

    listing = client.get("/api/worklog?date=2024-03-10").get_json()
    assert [s["projectCode"] for s in listing["sessions"]] == ["P1", "P2"]
    assert listing["open"]["projectCode"] == "P2"


def test_worklog_stop_twice_conflicts(app, login):
    client = login(app.test_client(), 1)
    started = client.post(
        "/api/worklog",
        json={"projectCode": "P1", "projectName": "Portal", "category": "DEV", "content": "coding"},
    ).get_json()["session"]

    assert client.put(f"/api/worklog/{started['sessionId']}", json={}).status_code == 200
    assert client.put(f"/api/worklog/{started['sessionId']}", json={}).status_code == 409


def test_worklog_delete_preview_matches_delete(app, login, stores):
    s = stores["work"].seed(1, "P1", utc(2024, 3, 10, 1, 0), utc(2024, 3, 10, 5, 0))
    stores["clock"].add(1, ClockKind.IN, utc(2024, 3, 10, 1, 0))
    stores["clock"].add(1, ClockKind.OUT, utc(2024, 3, 10, 5, 0))
    client = login(app.test_client(), 1)

    preview = client.get(f"/api/worklog/{s.session_id}/delete-preview").get_json()
    deleted = client.delete(f"/api/worklog/{s.session_id}").get_json()

    assert preview["clockEventCount"] == 2
    assert deleted == {"deleted": s.session_id, "clockEventsDeleted": 2}
    assert client.delete(f"/api/worklog/{s.session_id}").status_code == 404


def test_worklog_merge(app, login, stores):
    stores["work"].seed(1, "P1", utc(2024, 3, 10, 1, 0), utc(2024, 3, 10, 2, 0))
    stores["work"].seed(1, "P1", utc(2024, 3, 10, 2, 0), utc(2024, 3, 10, 3, 0))
    client = login(app.test_client(), 1)

    resp = client.post("/api/worklog/merge", json={"date": "2024-03-10"})

    assert resp.get_json()["merged"][0]["originalCount"] == 2


def test_worklog_merge_preview_leaves_sessions_alone(app, login, stores):
    stores["work"].seed(1, "P1", utc(2024, 3, 10, 1, 0), utc(2024, 3, 10, 2, 0))
    stores["work"].seed(1, "P1", utc(2024, 3, 10, 2, 0), utc(2024, 3, 10, 3, 0))
    client = login(app.test_client(), 1)

    resp = client.post("/api/worklog/merge/preview", json={"date": "2024-03-10"})

    group = resp.get_json()["groups"][0]
    assert len(group["sessions"]) == 2
    assert (group["startTime"], group["endTime"]) == ("2024-03-10T01:00:00+00:00", "2024-03-10T03:00:00+00:00")
    assert len(stores["work"].rows) == 2


def test_worklog_completed_entry_splits_covering_session(app, login, stores):
    covering = stores["work"].seed(1, "P1", utc(2024, 3, 10, 1, 0), utc(2024, 3, 10, 4, 0))
    client = login(app.test_client(), 1)

    resp = client.post(
        "/api/worklog",
        json={
            "projectCode": "P2",
            "projectName": "Portal",
            "category": "MEETING",
            "content": "standup",
            "startTime": "2024-03-10T10:00:00+08:00",
            "endTime": "2024-03-10T11:00:00+08:00",
        },
    )

    body = resp.get_json()
    assert resp.status_code == 201
    assert body["session"]["endTime"] == "2024-03-10T03:00:00+00:00"
    assert body["resolved"] == [{"sessionId": covering.session_id, "action": "SPLIT"}]
    assert stores["work"].get(covering.session_id).end_time == utc(2024, 3, 10, 2, 0)
    assert len(stores["work"].rows) == 3


def test_worklog_end_time_without_start_is_rejected(app, login, stores):
    client = login(app.test_client(), 1)

    resp = client.post(
        "/api/worklog",
        json={"projectCode": "P1", "projectName": "Portal", "category": "DEV", "content": "coding",
              "endTime": "2024-03-10T11:00:00+08:00"},
    )

    assert resp.status_code == 400
    assert stores["work"].rows == {}


def test_overtime_start_end(app, login, stores):
    client = login(app.test_client(), 1)

    started = client.post("/api/overtime/start", json={"reason": "release", "deviceFingerprint": "fp-9"})
    assert started.status_code == 201
    assert client.get("/api/overtime").get_json()["open"]["reason"] == "release"

    ended = client.post("/api/overtime/end", json={"deviceFingerprint": "fp-10"})
    assert ended.get_json()["session"]["endMetadata"]["deviceFingerprint"] == "fp-10"
    assert client.post("/api/overtime/end", json={}).status_code == 409


def test_unknown_route_is_json_404(app):
    resp = app.test_client().get("/api/nope")

    assert resp.status_code == 404
    assert "error" in resp.get_json()
