"""End-to-end API tests: login, report drafts, tasks, rewards and notifications."""
import pytest

from app.domain.reports.drafts import draft_registry


@pytest.fixture(autouse=True)
async def reset_drafts():
    draft_registry._drafts.clear()
    yield
    draft_registry._drafts.clear()


async def submit_report(client, headers, png, location="Riverside Walk", **fields):
    response = await client.post("/v1/reports/drafts", json={"image": png}, headers=headers)
    assert response.status_code == 201, response.text
    draft_id = response.json()["id"]

    response = await client.post(f"/v1/reports/drafts/{draft_id}/verify", headers=headers)
    assert response.status_code == 200, response.text
    assert response.json()["state"] == "verified"

    response = await client.post(
        f"/v1/reports/drafts/{draft_id}/submit", json={"location": location, **fields}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_login_creates_user_once(client, login):
    first = await login("Alice@TrashTrack.io")
    second = await login("alice@trashtrack.io", name="Alice")

    assert first.user["id"] == second.user["id"]
    assert first.user["email"] == "alice@trashtrack.io"
    assert first.user["name"] == "Anonymous User"
    assert first.tokens["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_me_requires_token(client, login):
    assert (await client.get("/v1/auth/me")).status_code == 401
    bad = await client.get("/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert bad.status_code == 401

    alice = await login("alice@trashtrack.io", name="Alice")
    response = await client.get("/v1/auth/me", headers=alice.headers)

    assert response.status_code == 200
    assert response.json() == {
        "id": alice.user["id"],
        "email": "alice@trashtrack.io",
        "name": "Alice",
        "balance": 0,
        "unread_notifications": 0,
    }


@pytest.mark.asyncio
async def test_refresh_token(client, login):
    alice = await login("alice@trashtrack.io")

    response = await client.post("/v1/auth/refresh", json={"refresh_token": alice.tokens["refresh_token"]})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == alice.user["id"]

    wrong_type = await client.post("/v1/auth/refresh", json={"refresh_token": alice.tokens["access_token"]})
    assert wrong_type.status_code == 401


@pytest.mark.asyncio
async def test_report_flow_awards_points_and_notifies(client, login, png):
    alice = await login("alice@trashtrack.io")

    report = await submit_report(client, alice.headers, png, waste_type="Plastic Bottles", amount="4 kg")

    assert report["status"] == "pending"
    assert report["has_image"] is True
    assert report["waste_type"] == "Plastic Bottles"
    assert "wasteType" in report["verification_result"]

    me = (await client.get("/v1/auth/me", headers=alice.headers)).json()
    assert me["balance"] == 10
    assert me["unread_notifications"] == 1

    unread = (await client.get("/v1/notifications/unread", headers=alice.headers)).json()
    assert unread[0]["message"] == "🎉 You've earned 10 points for reporting Plastic Bottles (4 kg)!"

    response = await client.patch(f"/v1/notifications/{unread[0]['id']}/read", headers=alice.headers)
    assert response.json() == {"ok": True}
    assert (await client.get("/v1/notifications/unread-count", headers=alice.headers)).json() == {"unread": 0}

    mine = (await client.get("/v1/reports/mine", headers=alice.headers)).json()
    assert [r["id"] for r in mine] == [report["id"]]


@pytest.mark.asyncio
async def test_submit_before_verify_is_rejected(client, login, png):
    alice = await login("alice@trashtrack.io")
    draft = (await client.post("/v1/reports/drafts", json={"image": png}, headers=alice.headers)).json()

    response = await client.post(
        f"/v1/reports/drafts/{draft['id']}/submit", json={"location": "Park"}, headers=alice.headers
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Please verify waste before submitting"


@pytest.mark.asyncio
async def test_drafts_are_private(client, login, png):
    alice = await login("alice@trashtrack.io")
    bob = await login("bob@trashtrack.io")
    draft = (await client.post("/v1/reports/drafts", json={"image": png}, headers=alice.headers)).json()

    response = await client.get(f"/v1/reports/drafts/{draft['id']}", headers=bob.headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_non_image_upload_is_rejected(client, login):
    alice = await login("alice@trashtrack.io")

    response = await client.post(
        "/v1/reports/drafts", json={"image": "data:text/plain;base64,aGVsbG8="}, headers=alice.headers
    )

    assert response.status_code == 422
    assert response.json()["detail"] == "Please select an image file (JPEG, PNG, etc.)"


@pytest.mark.asyncio
async def test_collect_and_redeem(client, login, png):
    alice = await login("alice@trashtrack.io")
    bob = await login("bob@trashtrack.io", name="Bob")
    report = await submit_report(client, alice.headers, png, waste_type="Metal Cans", amount="5 kg")

    page = (await client.get("/v1/tasks", params={"search": "metal"}, headers=bob.headers)).json()
    assert page["total"] == 1
    assert page["pending"] == 1

    claimed = await client.post(f"/v1/tasks/{report['id']}/claim", headers=bob.headers)
    assert claimed.json()["status"] == "in_progress"

    response = await client.post(f"/v1/tasks/{report['id']}/verify", json={"image": png}, headers=bob.headers)
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["reward"] == 3
    assert body["balance"] == 3
    assert body["task"]["status"] == "verified"

    again = await client.post(f"/v1/tasks/{report['id']}/verify", json={"image": png}, headers=bob.headers)
    assert again.status_code == 409

    collected = (await client.get("/v1/tasks/collected", headers=bob.headers)).json()
    assert [c["report_id"] for c in collected] == [report["id"]]

    redeemed = await client.post("/v1/rewards/redeem", json={"reward_id": 0}, headers=bob.headers)
    assert redeemed.status_code == 200
    assert redeemed.json()["balance"] == 0
    assert redeemed.json()["transaction"]["description"] == "Redeemed all points: 3"

    nothing = await client.post("/v1/rewards/redeem", json={"reward_id": 0}, headers=bob.headers)
    assert nothing.status_code == 422

    board = (await client.get("/v1/rewards/leaderboard", headers=bob.headers)).json()
    assert board[0]["user_id"] == alice.user["id"]


@pytest.mark.asyncio
async def test_verify_requires_assigned_collector(client, login, png):
    alice = await login("alice@trashtrack.io")
    bob = await login("bob@trashtrack.io")
    report = await submit_report(client, alice.headers, png)
    await client.post(f"/v1/tasks/{report['id']}/claim", headers=alice.headers)

    response = await client.post(f"/v1/tasks/{report['id']}/verify", json={"image": png}, headers=bob.headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_task_status_validation(client, login, png):
    alice = await login("alice@trashtrack.io")
    report = await submit_report(client, alice.headers, png)

    bad = await client.patch(f"/v1/tasks/{report['id']}/status", json={"status": "lost"}, headers=alice.headers)
    assert bad.status_code == 422

    ok = await client.patch(f"/v1/tasks/{report['id']}/status", json={"status": "completed"}, headers=alice.headers)
    assert ok.json()["status"] == "completed"

    missing = await client.post("/v1/tasks/9999/claim", headers=alice.headers)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_rewards_dashboard(client, login, png):
    alice = await login("alice@trashtrack.io")
    await submit_report(client, alice.headers, png)

    dashboard = (await client.get("/v1/rewards/dashboard", headers=alice.headers)).json()

    assert dashboard["balance"] == 10
    assert dashboard["reconciliation"]["in_sync"] is True
    assert [t["type"] for t in dashboard["transactions"]] == ["earned_report"]
    assert all(r["id"] != 0 for r in dashboard["rewards"])

    available = (await client.get("/v1/rewards/available", headers=alice.headers)).json()
    assert available[0] == {
        "id": 0,
        "name": "Your Points",
        "cost": 10,
        "description": "Redeem your earned points",
        "collection_info": "Points earned from reporting and collecting waste",
    }


@pytest.mark.asyncio
async def test_other_users_notification_is_not_found(client, login, png):
    alice = await login("alice@trashtrack.io")
    bob = await login("bob@trashtrack.io")
    await submit_report(client, alice.headers, png)
    notification = (await client.get("/v1/notifications", headers=alice.headers)).json()[0]

    response = await client.patch(f"/v1/notifications/{notification['id']}/read", headers=bob.headers)
    assert response.status_code == 404

    marked = (await client.post("/v1/notifications/read-all", headers=alice.headers)).json()
    assert marked == {"ok": True, "updated": 1}


@pytest.mark.asyncio
async def test_client_config(client):
    config = (await client.get("/v1/config/client")).json()

    assert config["notification_poll_interval_seconds"] == 5
    assert config["tasks_page_size"] == 5
    assert config["websocket_path"] == "/v1/ws/events"
