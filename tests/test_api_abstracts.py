"""
Abstracts API through TestClient, against a fresh SQLite file per test.
"""

from app.core.errors import StoreError
from tests.factories import abstract_payload, review_payload


def _create(client, **overrides) -> dict:
    response = client.post("/abstracts", json=abstract_payload(**overrides))
    assert response.status_code == 201, response.json()
    return response.json()["abstract"]


class TestSubmission:
    def test_track_1_scenario(self, client):
        response = client.post("/abstracts", json=abstract_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "submitted"
        assert body["message"] == "Abstract submitted successfully and is under review"
        assert body["abstract"]["track"] == "track_1"
        assert body["abstract"]["reviews"] == []

    def test_unknown_subcategory(self, client):
        response = client.post("/abstracts", json=abstract_payload(subcategory="Not A Real Topic"))
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid subcategory for selected track"
        assert body["details"]["code"] == "INVALID_SUBCATEGORY"
        assert "timestamp" in body

    def test_missing_fields(self, client):
        response = client.post("/abstracts", json={"title": "Only a title here"})
        assert response.status_code == 400
        assert response.json()["details"]["code"] == "MISSING_FIELD"

    def test_wrongly_typed_body_is_a_400(self, client):
        response = client.post("/abstracts", json=abstract_payload(keywords="diagnostics"))
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_tracks_listing(self, client):
        data = client.get("/abstracts/tracks").json()
        assert data["tracks"][0]["value"] == "track_1"
        assert "crossCuttingThemes" in data


class TestReadAndUpdate:
    def test_get_includes_reviews(self, client):
        created = _create(client)
        client.post("/reviews", json={"abstract_id": created["id"], **review_payload()})
        body = client.get(f"/abstracts/{created['id']}").json()
        assert body["status"] == "under_review"
        assert [r["reviewer_email"] for r in body["reviews"]] == ["grace@example.org"]

    def test_get_missing(self, client):
        response = client.get("/abstracts/4242")
        assert response.status_code == 404
        assert response.json()["error"] == "Abstract not found"

    def test_put_replaces_content(self, client):
        created = _create(client)
        response = client.put(
            f"/abstracts/{created['id']}",
            json=abstract_payload(title="Integrated referral, revised", status="revision_required"),
        )
        assert response.status_code == 200
        abstract = response.json()["abstract"]
        assert abstract["title"] == "Integrated referral, revised"
        assert abstract["status"] == "revision_required"

    def test_put_is_revalidated(self, client):
        created = _create(client)
        response = client.put(f"/abstracts/{created['id']}", json=abstract_payload(track="nowhere"))
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid track"

    def test_put_missing(self, client):
        assert client.put("/abstracts/999", json=abstract_payload()).status_code == 404

    def test_status_patch(self, client):
        created = _create(client)
        response = client.patch(
            f"/abstracts/{created['id']}/status",
            json={"status": "accepted", "admin_notes": "Strong fit", "review_comments": "Well done"},
        )
        assert response.status_code == 200
        abstract = response.json()["abstract"]
        assert abstract["status"] == "accepted"
        assert abstract["admin_notes"] == "Strong fit"
        assert abstract["reviewer_comments"] == "Well done"

    def test_status_patch_rejects_unknown_status(self, client):
        created = _create(client)
        response = client.patch(f"/abstracts/{created['id']}/status", json={"status": "pending"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid status"


class TestListing:
    def test_pagination_envelope(self, client):
        for i in range(3):
            _create(client, title=f"Referral study number {i}")
        body = client.get("/abstracts", params={"limit": 2, "sortBy": "title", "sortOrder": "ASC"}).json()
        assert body["pagination"] == {"total": 3, "page": 1, "limit": 2, "pages": 2}
        assert [a["title"] for a in body["abstracts"]] == ["Referral study number 0", "Referral study number 1"]
        assert "reviews" not in body["abstracts"][0]

    def test_by_track_resolves_names(self, client):
        created = _create(client)
        client.patch(f"/abstracts/{created['id']}/status", json={"status": "accepted"})
        by_value = client.get("/abstracts/track/track_1").json()
        by_name = client.get("/abstracts/track/Integrated Diagnostics, AMR, and Epidemic Readiness").json()
        assert by_value["count"] == 1
        assert by_name["count"] == 1
        assert client.get("/abstracts/track/track_1", params={"status": "submitted"}).json()["count"] == 0

    def test_stats_overview(self, client):
        _create(client)
        _create(client, submission_type="poster", format="poster")
        body = client.get("/abstracts/stats/overview").json()
        assert body["overview"]["total_submissions"] == 2
        assert body["overview"]["submitted"] == 2
        assert body["overview"]["posters"] == 1
        assert body["by_track"] == [{"track": "track_1", "count": 2}]


class TestDelete:
    def test_delete_removes_reviews(self, client):
        created = _create(client)
        client.post("/reviews", json={"abstract_id": created["id"], **review_payload()})

        response = client.delete(f"/abstracts/{created['id']}")
        assert response.status_code == 200
        assert response.json()["deleted"] == {"id": created["id"]}

        assert client.get(f"/abstracts/{created['id']}").status_code == 404
        assert client.get("/reviews", params={"abstract_id": created["id"]}).json() == []

    def test_delete_missing(self, client):
        assert client.delete("/abstracts/31337").status_code == 404


class TestBulk:
    def test_bulk_status_counts_existing_ids(self, client):
        ids = [_create(client)["id"] for _ in range(3)]
        response = client.patch("/abstracts/bulk/status", json={"ids": ids + [998, 999], "status": "accepted"})
        assert response.status_code == 200
        assert response.json()["updated"] == 3
        assert response.json()["message"] == "3 abstracts updated successfully"

    def test_bulk_delete(self, client):
        ids = [_create(client)["id"] for _ in range(2)]
        response = client.request("DELETE", "/abstracts/bulk", json={"ids": ids})
        assert response.json()["deleted"] == 2
        assert client.get("/abstracts").json()["pagination"]["total"] == 0

    def test_bulk_requires_ids(self, client):
        response = client.patch("/abstracts/bulk/status", json={"ids": [], "status": "accepted"})
        assert response.status_code == 400
        assert response.json()["error"] == "IDs array is required"

    def test_bulk_limit(self, client):
        response = client.request("DELETE", "/abstracts/bulk", json={"ids": list(range(1, 12))})
        assert response.status_code == 400
        assert response.json()["details"] == {"size": 11, "limit": 10}


def test_unknown_route(client):
    response = client.get("/nothing-here")
    assert response.status_code == 404
    assert response.json()["error"] == "Route not found"


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"


def test_store_errors_are_redacted(client, monkeypatch):
    async def failing_get(abstract_id):
        raise StoreError("Database error in SubmissionStore.get: connection refused to 10.0.0.5")

    monkeypatch.setattr(client.app.state.store, "get", failing_get)
    response = client.get("/abstracts/1")
    assert response.status_code == 500
    assert response.json()["error"] == "Internal server error"
    assert "10.0.0.5" not in response.text


def test_non_text_author_field_is_a_400(client):
    payload = abstract_payload()
    payload["authors"][1]["affiliation"] = {"org": "KEMRI"}
    response = client.post("/abstracts", json=payload)
    assert response.status_code == 400
    assert response.json()["details"]["code"] == "INVALID_AUTHOR"


def test_timestamps_match_between_create_and_fetch(client):
    created = _create(client)
    fetched = client.get(f"/abstracts/{created['id']}").json()
    assert fetched["created_at"] == created["created_at"]
    assert fetched["updated_at"] == created["updated_at"]
    listed = client.get("/abstracts").json()["abstracts"][0]
    assert listed["created_at"] == created["created_at"]


def test_search_treats_wildcards_literally(client):
    _create(client)
    assert client.get("/abstracts", params={"search": "%"}).json()["pagination"]["total"] == 0
    assert client.get("/abstracts", params={"search": "_"}).json()["pagination"]["total"] == 0
    assert client.get("/abstracts", params={"search": "REFERRAL"}).json()["pagination"]["total"] == 1
