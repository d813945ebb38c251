LEAVE = {
    "agentId": 2,
    "leaveType": "annual",
    "reason": "family trip",
    "startDate": "2024-03-11",
    "endDate": "2024-03-11",
    "startTime": "09:00",
    "endTime": "17:00",
}


def _create(client):
    resp = client.post("/api/leaves", json=LEAVE)
    assert resp.status_code == 201
    return resp.get_json()["leave"]


def test_two_stage_approval_over_http(app, login):
    leave = _create(login(app.test_client(), 1))
    assert leave["status"] == "PENDING_AGENT"
    assert leave["totalHours"] == 8

    agent = login(app.test_client(), 2)
    assert [x["requestId"] for x in agent.get("/api/leaves?scope=agent").get_json()["leaves"]] == [leave["requestId"]]
    confirmed = agent.put(f"/api/leaves/{leave['requestId']}/agent", json={"action": "approve"}).get_json()["leave"]
    assert confirmed["status"] == "PENDING_ADMIN"
    assert confirmed["agentApproved"] is True

    boss = login(app.test_client(), 99)
    approved = boss.put(f"/api/leaves/{leave['requestId']}/admin", json={"action": "approve"}).get_json()["leave"]
    assert approved["status"] == "APPROVED"


def test_admin_after_agent_reject_conflicts(app, login):
    leave = _create(login(app.test_client(), 1))
    login(app.test_client(), 2).put(f"/api/leaves/{leave['requestId']}/agent", json={"action": "reject"})

    resp = login(app.test_client(), 99).put(f"/api/leaves/{leave['requestId']}/admin", json={"action": "approve"})

    assert resp.status_code == 409


def test_requester_cannot_act_as_agent(app, login):
    client = login(app.test_client(), 1)
    leave = _create(client)

    resp = client.put(f"/api/leaves/{leave['requestId']}/agent", json={"action": "approve"})

    assert resp.status_code == 403


def test_invalid_leave_payloads(app, login):
    client = login(app.test_client(), 1)

    assert client.post("/api/leaves", json={**LEAVE, "startTime": "9am"}).status_code == 400
    assert client.post("/api/leaves", json={**LEAVE, "agentId": 1}).status_code == 400
    assert client.put("/api/leaves/1/agent", json={"action": "maybe"}).status_code == 400
    assert client.get("/api/leaves?scope=everyone").status_code == 400


def test_admin_list_requires_admin(app, login):
    assert login(app.test_client(), 1).get("/api/leaves?scope=admin").status_code == 403
    assert login(app.test_client(), 99).get("/api/leaves?scope=admin").status_code == 200


def test_leave_visibility(app, login):
    leave = _create(login(app.test_client(), 1))

    assert login(app.test_client(), 2).get(f"/api/leaves/{leave['requestId']}").status_code == 200
    assert login(app.test_client(), 99).get(f"/api/leaves/{leave['requestId']}").status_code == 200
    assert login(app.test_client(), 99).get("/api/leaves/404").status_code == 404
