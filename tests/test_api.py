"""
End-to-end tests through the HTTP surface.
"""

from datetime import date, timedelta

import pytest
from httpx import ASGITransport, AsyncClient


class TestStatusRoutes:
    @pytest.mark.asyncio
    async def test_root_and_health(self, client):
        root = await client.get("/")
        assert root.status_code == 200
        assert root.json()["message"] == "TaskFlow backend running"

        health = await client.get("/api/health")
        assert health.status_code == 200
        assert health.json()["status"] == "OK"
        assert "X-Process-Time" in health.headers

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        resp = await client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.json() == {"message": "Route not found"}

    @pytest.mark.asyncio
    async def test_unhandled_error_is_generic_500(self, app):
        async def explode():
            raise RuntimeError("secret internals")

        app.add_api_route("/api/explode", explode)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as http:
            resp = await http.get("/api/explode")
        assert resp.status_code == 500
        assert resp.json() == {"message": "Internal Server Error"}
        assert "secret" not in resp.text


class TestAuthRoutes:
    @pytest.mark.asyncio
    async def test_register_and_login(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"username": "alice", "email": "alice@example.com", "password": "secret123"},
        )
        assert resp.status_code == 201
        assert resp.json() == {"message": "Registration successful"}

        resp = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "secret123"}
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"
        assert body["username"] == "alice"
        assert body["email"] == "alice@example.com"
        assert body["access_token"]

    @pytest.mark.asyncio
    async def test_register_validation_lists_all_errors(self, client):
        resp = await client.post(
            "/api/auth/register",
            json={"username": "al", "email": "nope", "password": "123"},
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["message"] == "Invalid input"
        assert len(body["errors"]) == 3

    @pytest.mark.asyncio
    async def test_register_duplicate(self, client):
        payload = {"username": "alice", "email": "alice@example.com", "password": "secret123"}
        await client.post("/api/auth/register", json=payload)
        resp = await client.post("/api/auth/register", json={**payload, "username": "alice2"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Email or Username already exists"

    @pytest.mark.asyncio
    async def test_bad_login(self, client, login_as):
        await login_as("alice", "alice@example.com")
        wrong = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "wrong-pass"}
        )
        unknown = await client.post(
            "/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"}
        )
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json() == {"message": "Incorrect email or password"}

    @pytest.mark.asyncio
    async def test_forgot_password(self, client):
        resp = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
        assert resp.status_code == 200
        assert "password reset" in resp.json()["message"]

    @pytest.mark.asyncio
    async def test_invalid_json(self, client):
        resp = await client.post(
            "/api/auth/login",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"message": "Invalid JSON payload"}


class TestIdentityMiddleware:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("headers", [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer"}])
    async def test_missing_token(self, client, headers):
        resp = await client.get("/api/tasks", headers=headers)
        assert resp.status_code == 401
        assert resp.json() == {"message": "No token provided"}

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        resp = await client.get("/api/tasks", headers={"Authorization": "Bearer forged.token"})
        assert resp.status_code == 401
        assert resp.json() == {"message": "Invalid or expired token"}


class TestTaskRoutes:
    @pytest.mark.asyncio
    async def test_crud_flow(self, client, login_as):
        headers = await login_as("alice", "alice@example.com")

        resp = await client.post("/api/tasks", json={"title": "Write report"}, headers=headers)
        assert resp.status_code == 201
        task = resp.json()
        assert task["completed"] is False
        assert task["priority"] == "medium"
        assert task["status"] == "pending"
        assert task["description"] == ""
        assert task["dueDate"] is None
        assert task["created_at"]

        resp = await client.put(
            f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=headers
        )
        assert resp.status_code == 200
        assert resp.json()["completed"] is True

        resp = await client.get("/api/tasks", headers=headers)
        assert [t["id"] for t in resp.json()] == [task["id"]]

        resp = await client.delete(f"/api/tasks/{task['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Task deleted"}

        resp = await client.get("/api/tasks", headers=headers)
        assert resp.json() == []

    @pytest.mark.asyncio
    async def test_missing_title(self, client, login_as):
        headers = await login_as("alice", "alice@example.com")
        resp = await client.post("/api/tasks", json={"description": "no title"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Task title is required"

    @pytest.mark.asyncio
    async def test_other_users_task_is_invisible(self, client, login_as):
        alice = await login_as("alice", "alice@example.com")
        bob = await login_as("bob", "bob@example.com")

        task = (await client.post("/api/tasks", json={"title": "private"}, headers=alice)).json()

        assert (await client.get("/api/tasks", headers=bob)).json() == []
        resp = await client.put(f"/api/tasks/{task['id']}", json={"title": "mine"}, headers=bob)
        assert resp.status_code == 404
        assert resp.json() == {"message": "Task not found"}
        resp = await client.delete(f"/api/tasks/{task['id']}", headers=bob)
        assert resp.status_code == 404

    @pytest.mark.asyncio
    @pytest.mark.parametrize("task_id", ["0", "-1", str(2**63), "99999999999999999999999"])
    async def test_out_of_range_task_id(self, client, login_as, task_id):
        headers = await login_as("alice", "alice@example.com")
        resp = await client.put(f"/api/tasks/{task_id}", json={"title": "x"}, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid input"
        resp = await client.delete(f"/api/tasks/{task_id}", headers=headers)
        assert resp.status_code == 400

    @pytest.mark.asyncio
    async def test_due_soon(self, client, login_as):
        headers = await login_as("alice", "alice@example.com")
        tomorrow = (date.today() + timedelta(days=1)).isoformat()

        due = (await client.post(
            "/api/tasks", json={"title": "soon", "dueDate": tomorrow}, headers=headers
        )).json()
        await client.post(
            "/api/tasks",
            json={"title": "done", "dueDate": tomorrow, "status": "completed"},
            headers=headers,
        )

        resp = await client.get("/api/tasks/due-soon", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert [t["id"] for t in body] == [due["id"]]
        assert body[0]["daysUntilDue"] == 1
        assert body[0]["dueDate"] == tomorrow


class TestMeRoutes:
    @pytest.mark.asyncio
    async def test_profile_and_delete_account(self, client, login_as):
        headers = await login_as("alice", "alice@example.com")
        await client.post("/api/tasks", json={"title": "t"}, headers=headers)

        resp = await client.get("/api/me", headers=headers)
        assert resp.json() == {
            "username": "alice",
            "email": "alice@example.com",
            "browser_notifications": True,
        }

        resp = await client.put("/api/me", json={"browser_notifications": False}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["browser_notifications"] is False

        resp = await client.delete("/api/me/delete-account", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "Account and all data deleted successfully"}

        resp = await client.post(
            "/api/auth/login", json={"email": "alice@example.com", "password": "secret123"}
        )
        assert resp.status_code == 401

        # the token is still validly signed, but the account is gone
        resp = await client.delete("/api/me/delete-account", headers=headers)
        assert resp.status_code == 404

        resp = await client.post("/api/tasks", json={"title": "after"}, headers=headers)
        assert resp.status_code == 404
        assert resp.json() == {"message": "User not found"}
