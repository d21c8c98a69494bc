"""End-to-end task lifecycle through the HTTP surface."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tests.helpers import bearer

if TYPE_CHECKING:
    from httpx import AsyncClient


class TestLifecycle:
    """Account and task flows across several requests."""

    @pytest.mark.unit
    async def test_register_create_complete_delete(self, client: AsyncClient) -> None:
        """Register, create, mark not done, delete, then update the deleted task."""
        register = await client.post(
            "/users/register",
            json={"email": "user_x@test.com", "password": "26598677"},
        )
        assert register.status_code == 201
        headers = bearer(register.json()["accessToken"])

        created = await client.post("/tasks", json={"title": "Task A"}, headers=headers)
        assert created.status_code == 201
        task_id = created.json()["_id"]

        listed = await client.get("/tasks", headers=headers)
        assert [task["title"] for task in listed.json()] == ["Task A"]

        done = await client.patch(f"/tasks/done/{task_id}", json={}, headers=headers)
        assert done.status_code == 200
        assert done.json()["done"] is False

        stored = (await client.get("/tasks", headers=headers)).json()
        assert stored[0]["_id"] == task_id
        assert stored[0]["done"] is False
        assert stored[0]["updatedBy"] is not None

        deleted = await client.delete(f"/tasks/{task_id}", headers=headers)
        assert deleted.status_code == 200

        update = await client.patch(f"/tasks/{task_id}", json={"title": "Task B"}, headers=headers)
        assert update.status_code == 404

    @pytest.mark.unit
    async def test_duplicate_registration_then_bad_login(self, client: AsyncClient) -> None:
        """Authority failures keep their codes end to end."""
        first = await client.post(
            "/users/register",
            json={"email": "user_x@test.com", "password": "26598677"},
        )
        assert first.status_code == 201

        second = await client.post(
            "/users/register",
            json={"email": "user_x@test.com", "password": "26598677"},
        )
        assert second.status_code == 409

        login = await client.post(
            "/users/login",
            json={"email": "user_x@test.com", "password": "not-the-password"},
        )
        assert login.status_code == 401
        assert login.json()["error"] == "auth/invalid-credential"

    @pytest.mark.unit
    async def test_logout_then_relogin_keeps_tasks(self, client: AsyncClient) -> None:
        """Tasks belong to the account, not to the session."""
        register = await client.post(
            "/users/register",
            json={"email": "keeper@test.com", "password": "26598677"},
        )
        token = register.json()["accessToken"]
        await client.post("/tasks", json={"title": "Persist me"}, headers=bearer(token))

        await client.post("/users/logout", headers=bearer(token))
        login = await client.post(
            "/users/login",
            json={"email": "keeper@test.com", "password": "26598677"},
        )
        new_token = login.json()["accessToken"]

        listed = await client.get("/tasks", headers=bearer(new_token))
        assert [task["title"] for task in listed.json()] == ["Persist me"]
