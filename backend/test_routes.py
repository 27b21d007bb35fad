from services.day_log_service import today_str


def _register(client, username="alice"):
    resp = client.post("/api/v1/auth/register", json={"username": username, "password": "hunter22"})
    assert resp.status_code == 200
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


def _habit_id(client, headers, slug):
    habits = client.get("/api/v1/habits", headers=headers).json()
    return next(h["id"] for h in habits if h["slug"] == slug)


def test_health(client):
    assert client.get("/api/v1/health-check").json()["status"] == "ok"
    assert client.get("/api/v1/debug/token").status_code == 404
    assert client.get("/api/v1/notifications").status_code == 401


def test_auth_flow(client):
    headers = _register(client)
    assert client.get("/api/v1/auth/me", headers=headers).json()["data"]["username"] == "alice"
    assert client.post("/api/v1/auth/register", json={"username": "alice", "password": "x"}).status_code == 400
    assert client.post("/api/v1/auth/login", json={"username": "alice", "password": "wrong"}).status_code == 401
    assert client.post("/api/v1/auth/login", json={"username": "alice", "password": "hunter22"}).status_code == 200
    assert client.get("/api/v1/checkin/state").status_code == 401


def test_habits_seeded_and_filtered(client):
    headers = _register(client)
    assert len(client.get("/api/v1/habits", headers=headers).json()) == 21
    morning = client.get("/api/v1/habits", params={"stack": "morning"}, headers=headers).json()
    assert morning and all(h["stack"] == "morning" and h["is_active"] for h in morning)
    assert client.get("/api/v1/habits", params={"stack": "night"}, headers=headers).status_code == 400

    resp = client.post("/api/v1/habits", json={"name": "Prayer", "slug": "prayer"}, headers=headers)
    assert resp.status_code == 400
    assert client.patch("/api/v1/habits/unknown", json={"is_active": False}, headers=headers).status_code == 404


def test_submit_twice_keeps_total(client):
    headers = _register(client)
    prayer = _habit_id(client, headers, "prayer")

    body = {"entries": {prayer: {"status": "done"}}}
    first = client.post("/api/v1/checkin", json=body, headers=headers).json()["data"]["result"]
    assert first["xp_delta"] == 10
    second = client.post("/api/v1/checkin", json=body, headers=headers).json()["data"]["result"]
    assert second["xp_delta"] == 0

    state = client.get("/api/v1/checkin/state", headers=headers).json()
    assert state["total_xp"] == 10
    assert state["streaks"]["prayer"] == 1
    assert state["days_logged"] == 1

    log = client.get(f"/api/v1/checkin/logs/{today_str()}", headers=headers).json()
    assert log["log"]["entries"][prayer]["status"] == "done"
    assert client.get("/api/v1/checkin/logs/1999-01-01", headers=headers).status_code == 404


def test_later_creates_reminder(client):
    headers = _register(client)
    journal = _habit_id(client, headers, "journal")
    client.post("/api/v1/checkin", json={"entries": {journal: {"status": "later"}}}, headers=headers)
    client.post("/api/v1/checkin", json={"entries": {journal: {"status": "later"}}}, headers=headers)

    notes = client.get("/api/v1/notifications", headers=headers).json()
    assert len(notes) == 1 and notes[0]["reference_id"] == journal
    assert client.put(f"/api/v1/notifications/{notes[0]['id']}/read", headers=headers).status_code == 200
    assert client.get("/api/v1/notifications", params={"unread_only": True}, headers=headers).json() == []


def test_edit_and_recalculate(client):
    headers = _register(client)
    prayer = _habit_id(client, headers, "prayer")
    assert client.put("/api/v1/checkin/logs/2024-01-01", json={}, headers=headers).status_code == 404

    client.post("/api/v1/checkin", json={"entries": {prayer: {"status": "done"}}}, headers=headers)
    resp = client.put(f"/api/v1/checkin/logs/{today_str()}", json={"entries": {prayer: {"status": "missed"}}}, headers=headers)
    assert resp.json()["data"]["result"]["total_xp"] == 0

    data = client.post("/api/v1/checkin/recalculate", headers=headers).json()["data"]
    assert data["total_xp"] == 0 and data["streaks"]["prayer"] == 0


def test_sprint_lifecycle(client):
    headers = _register(client)
    body = {"name": "Exams", "intensity": "critical", "deadline": "2999-12-31"}
    assert client.post("/api/v1/sprints/start", json=body, headers=headers).status_code == 200
    assert client.post("/api/v1/sprints/start", json=body, headers=headers).status_code == 400

    ctx = client.get("/api/v1/checkin/context", params={"stack": "morning"}, headers=headers).json()
    assert ctx["sprint"]["single_checkin"]
    stacks = {h["stack"] for h in ctx["habits"]}
    assert stacks == {"morning", "midday", "evening"}
    assert all(h["is_bare_minimum"] or h["category"] == "bad" for h in ctx["habits"])

    ended = client.post("/api/v1/sprints/end", json={"status": "cancelled"}, headers=headers).json()["data"]
    assert ended["status"] == "cancelled"
    assert client.post("/api/v1/sprints/end", headers=headers).status_code == 404
    assert len(client.get("/api/v1/sprints/history", headers=headers).json()) == 1


def test_admin_tasks_feed_checkin(client):
    headers = _register(client)
    task = client.post("/api/v1/tasks", json={"title": "Pay rent"}, headers=headers).json()["data"]
    assert client.post(f"/api/v1/tasks/{task['id']}/toggle", headers=headers).json()["data"]["completed"]

    result = client.post("/api/v1/checkin", json={}, headers=headers).json()["data"]
    assert result["log"]["admin_summary"]["completed"] == 1
    assert result["result"]["day_xp"] == 5 + 25

    assert client.delete(f"/api/v1/tasks/{task['id']}", headers=headers).status_code == 200
    assert client.delete(f"/api/v1/tasks/{task['id']}", headers=headers).status_code == 404

    # the deleted task no longer earns XP on the next check-in
    result = client.post("/api/v1/checkin", json={}, headers=headers).json()["data"]
    assert result["log"]["admin_summary"]["total"] == 0
    assert result["result"]["day_xp"] == 0
    assert client.get("/api/v1/checkin/state", headers=headers).json()["total_xp"] == 0


def test_defer_habit_to_evening(client):
    headers = _register(client)
    journal = _habit_id(client, headers, "journal")
    assert client.post(f"/api/v1/habits/{journal}/defer", json={"to_stack": "morning"}, headers=headers).status_code == 400
    assert client.post("/api/v1/habits/nope/defer", json={"to_stack": "evening"}, headers=headers).status_code == 404
    assert client.post(f"/api/v1/habits/{journal}/defer", json={"to_stack": "evening"}, headers=headers).status_code == 200

    deferred = client.get("/api/v1/habits/deferred", headers=headers).json()
    assert [d["habit_id"] for d in deferred] == [journal]
    morning = client.get("/api/v1/checkin/context", params={"stack": "morning"}, headers=headers).json()
    assert journal not in {h["id"] for h in morning["habits"]}
    evening = client.get("/api/v1/checkin/context", params={"stack": "evening"}, headers=headers).json()
    assert journal in {h["id"] for h in evening["habits"]}

    assert client.delete(f"/api/v1/habits/{journal}/defer", headers=headers).status_code == 200
    assert client.delete(f"/api/v1/habits/{journal}/defer", headers=headers).status_code == 404
    assert client.get("/api/v1/habits/deferred", headers=headers).json() == []
