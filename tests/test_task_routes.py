from __future__ import annotations

import pytest

pytestmark = pytest.mark.api


async def create_task(client, headers, **fields):
    response = await client.post("/v1/tasks", json={"title": "Pay rent", **fields}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()


class TestTasks:
    async def test_create_defaults(self, client, auth_headers):
        task = await create_task(client, auth_headers)

        assert task["priority"] == "medium"
        assert task["completed"] is False
        assert task["due_date"] is None

    async def test_priority_normalized(self, client, auth_headers):
        assert (await create_task(client, auth_headers, priority="HIGH"))["priority"] == "high"
        assert (await create_task(client, auth_headers, priority="urgent"))["priority"] == "medium"

    async def test_toggle(self, client, auth_headers):
        task = await create_task(client, auth_headers, due_date="2026-03-20")

        response = await client.post(f"/v1/tasks/{task['id']}/toggle", headers=auth_headers)
        assert response.json()["completed"] is True

        response = await client.post(f"/v1/tasks/{task['id']}/toggle", headers=auth_headers)
        assert response.json()["completed"] is False
        assert response.json()["due_date"] == "2026-03-20"

    async def test_completed_filter(self, client, auth_headers):
        done = await create_task(client, auth_headers, title="File taxes", completed=True)
        todo = await create_task(client, auth_headers, title="Call mom")

        response = await client.get("/v1/tasks", params={"completed": "true"}, headers=auth_headers)
        assert [item["id"] for item in response.json()["items"]] == [done["id"]]

        response = await client.get("/v1/tasks", params={"completed": "false"}, headers=auth_headers)
        assert [item["id"] for item in response.json()["items"]] == [todo["id"]]

    async def test_patch(self, client, auth_headers):
        task = await create_task(client, auth_headers)

        response = await client.patch(
            f"/v1/tasks/{task['id']}",
            json={"title": "Pay rent early", "priority": "low", "due_date": None},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json()["title"] == "Pay rent early"
        assert response.json()["priority"] == "low"

    async def test_blank_title_rejected(self, client, auth_headers):
        task = await create_task(client, auth_headers)

        response = await client.patch(f"/v1/tasks/{task['id']}", json={"title": ""}, headers=auth_headers)

        assert response.status_code == 400

    async def test_delete_and_ownership(self, client, auth_headers, other_headers):
        task = await create_task(client, auth_headers)

        response = await client.delete(f"/v1/tasks/{task['id']}", headers=other_headers)
        assert response.status_code == 404

        response = await client.delete(f"/v1/tasks/{task['id']}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f"/v1/tasks/{task['id']}", headers=auth_headers)
        assert response.status_code == 404
