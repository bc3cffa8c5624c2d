from __future__ import annotations

import pytest

pytestmark = pytest.mark.api


@pytest.fixture
async def entries(client, auth_headers):
    created = []
    for payload in (
        {
            "title": "Morning pages",
            "content": "Slept well, coffee on the balcony.",
            "mood": "Happy",
            "tags": ["morning", "#gratitude", "Morning"],
            "entry_date": "2026-03-14",
        },
        {
            "title": "Rough Monday",
            "content": "Missed the train.",
            "mood": "tired",
            "tags": ["work"],
            "entry_date": "2026-03-15",
        },
    ):
        response = await client.post("/v1/journal", json=payload, headers=auth_headers)
        assert response.status_code == 200, response.text
        created.append(response.json())
    return created


class TestJournal:
    async def test_create_normalizes_fields(self, entries):
        first = entries[0]

        assert first["mood"] == "happy"
        assert first["tags"] == ["morning", "gratitude"]
        assert first["entry_date"] == "2026-03-14"

    async def test_list_newest_first(self, client, auth_headers, entries):
        response = await client.get("/v1/journal", headers=auth_headers)

        assert [item["title"] for item in response.json()["items"]] == ["Rough Monday", "Morning pages"]

    @pytest.mark.parametrize(
        "params,expected",
        [
            ({"mood": "tired"}, ["Rough Monday"]),
            ({"tag": "Gratitude"}, ["Morning pages"]),
            ({"q": "balcony"}, ["Morning pages"]),
            ({"q": "MONDAY"}, ["Rough Monday"]),
            ({"limit": 1}, ["Rough Monday"]),
        ],
    )
    async def test_filters(self, client, auth_headers, entries, params, expected):
        response = await client.get("/v1/journal", params=params, headers=auth_headers)

        assert [item["title"] for item in response.json()["items"]] == expected

    @pytest.mark.parametrize(
        "term,expected",
        [
            ("50%", ["Halfway"]),
            ("a_b", ["Snake case"]),
            ("\\", ["Paths"]),
        ],
    )
    async def test_search_treats_wildcards_literally(self, client, auth_headers, term, expected):
        for title, content in (
            ("Halfway", "Project is 50% done."),
            ("Big list", "500 things to sort."),
            ("Snake case", "Renamed a_b everywhere."),
            ("Plain", "Wrote aXb on the board."),
            ("Paths", "C:\\temp was full."),
        ):
            response = await client.post(
                "/v1/journal",
                json={"title": title, "content": content, "entry_date": "2026-03-15"},
                headers=auth_headers,
            )
            assert response.status_code == 200, response.text

        response = await client.get("/v1/journal", params={"q": term}, headers=auth_headers)

        assert response.status_code == 200
        assert [item["title"] for item in response.json()["items"]] == expected

    async def test_title_required(self, client, auth_headers):
        response = await client.post("/v1/journal", json={"title": " ", "content": "x"}, headers=auth_headers)

        assert response.status_code == 400

    async def test_update_and_delete(self, client, auth_headers, entries):
        entry_id = entries[0]["id"]

        response = await client.patch(
            f"/v1/journal/{entry_id}",
            json={"tags": ["weekend"], "mood": None},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["tags"] == ["weekend"]
        assert response.json()["mood"] is None
        assert response.json()["title"] == "Morning pages"

        response = await client.delete(f"/v1/journal/{entry_id}", headers=auth_headers)
        assert response.status_code == 200

        response = await client.get(f"/v1/journal/{entry_id}", headers=auth_headers)
        assert response.status_code == 404

    async def test_entries_are_private(self, client, other_headers, entries):
        response = await client.get(f"/v1/journal/{entries[0]['id']}", headers=other_headers)

        assert response.status_code == 404

    async def test_export(self, client, auth_headers, entries):
        response = await client.get("/v1/journal/export", headers=auth_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "journal.txt" in response.headers["content-disposition"]
        body = response.text
        assert body.index("Title: Rough Monday") < body.index("Title: Morning pages")
        assert "Tags: morning, gratitude" in body
        assert "\n\n---\n\n" in body

    async def test_export_empty(self, client, auth_headers):
        response = await client.get("/v1/journal/export", headers=auth_headers)

        assert response.status_code == 200
        assert response.text == ""
