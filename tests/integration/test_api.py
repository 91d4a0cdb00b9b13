"""
HTTP surface tests for the rate aggregation API.

Run against the FastAPI app with its database dependency bound to the
per-test in-memory session.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

API = "/api/v1"


def _payload(**overrides) -> dict:
    body = {
        "skill_name": "React",
        "location_name": "Remote",
        "hourly_rate": 85,
        "seniority_level": "senior",
        "project_type": "hourly",
        "years_experience": 6,
    }
    body.update(overrides)
    return body


def test_root_and_health(client) -> None:
    assert client.get("/").json()["status"] == "running"

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == {"connected": True}
    assert "X-Request-ID" in response.headers


def test_debug_setting_reaches_the_app(monkeypatch) -> None:
    import main
    from config import Settings

    monkeypatch.setattr(main, "settings", Settings(debug=True))

    assert main.create_app().debug is True
    assert main.app.debug is False


def test_reference_catalogs(client) -> None:
    skills = client.get(f"{API}/skills").json()
    locations = client.get(f"{API}/locations").json()

    assert "React" in {item["name"] for item in skills["skills"]}
    remote = [item for item in locations["locations"] if item["is_remote"]]
    assert [item["label"] for item in remote] == ["Remote"]


def test_market_rates_endpoint(client, add_approved, reference_data) -> None:
    for rate in (40, 60, 80, 100):
        add_approved(rate)
    react = reference_data["skills"]["React"]
    remote = reference_data["locations"]["Remote"]

    body = client.get(f"{API}/rates/{react.id}", params={"location_id": remote.id}).json()

    assert body["skill"] == "React"
    assert body["location"] == "Remote"
    assert (body["p25"], body["p50"], body["p75"], body["p90"], body["sample_count"]) == (55.0, 70.0, 85.0, 94.0, 4)


def test_market_rates_without_data(client, reference_data) -> None:
    body = client.get(f"{API}/rates/{reference_data['skills']['SEO'].id}").json()

    assert body["sample_count"] == 0
    assert body["p50"] == 0
    assert body["location"] == "Global"


def test_unknown_skill_or_location_is_404(client, reference_data) -> None:
    missing_skill = client.get(f"{API}/rates/99999")
    missing_location = client.get(
        f"{API}/rates/{reference_data['skills']['React'].id}/trend", params={"location_id": 99999}
    )

    assert missing_skill.status_code == 404
    assert missing_skill.json()["error"]["type"] == "not_found"
    assert missing_location.status_code == 404


def test_distribution_trend_and_geo_endpoints(client, add_approved, reference_data) -> None:
    add_approved(12, city="Remote", created_at=datetime(2026, 1, 5, tzinfo=timezone.utc))
    add_approved(15, city="Remote", created_at=datetime(2026, 1, 25, tzinfo=timezone.utc))
    add_approved(55, city="London", created_at=datetime(2026, 3, 1, tzinfo=timezone.utc))
    skill_id = reference_data["skills"]["React"].id

    distribution = client.get(f"{API}/rates/{skill_id}/distribution", params={"bucket_width": 10}).json()
    trend = client.get(f"{API}/rates/{skill_id}/trend").json()
    geo = client.get(f"{API}/rates/{skill_id}/geo").json()
    thin = client.get(f"{API}/rates/{skill_id}/geo", params={"min_samples": 2}).json()

    assert [bucket["frequency"] for bucket in distribution["buckets"]] == [2, 0, 0, 0, 1]
    assert [point["period"] for point in trend["points"]] == ["2026-01", "2026-03"]
    assert trend["displayable"] is True
    assert [point["location_name"] for point in geo["locations"]] == ["London, UK", "Remote"]
    assert [point["location_name"] for point in thin["locations"]] == ["Remote"]


def test_geo_min_samples_applies_before_top_n(client, add_approved, reference_data) -> None:
    for city, rate in (("San Francisco", 300), ("New York", 280), ("London", 260)):
        add_approved(rate, city=city)
    for rate in (90, 110):
        add_approved(rate, city="Berlin")
    for rate in (60, 70):
        add_approved(rate, city="Remote")
    skill_id = reference_data["skills"]["React"].id

    response = client.get(f"{API}/rates/{skill_id}/geo", params={"top_n": 2, "min_samples": 2})

    assert response.status_code == 200
    assert [point["location_name"] for point in response.json()["locations"]] == ["Berlin, Germany", "Remote"]


def test_distribution_boundary_rates_open_new_buckets(client, add_approved, reference_data) -> None:
    add_approved(5.05)
    add_approved(35.05)
    skill_id = reference_data["skills"]["React"].id

    body = client.get(f"{API}/rates/{skill_id}/distribution", params={"bucket_width": 10}).json()

    assert [bucket["frequency"] for bucket in body["buckets"]] == [1, 0, 0, 1]
    assert body["buckets"][-1]["floor"] == 35.05


def test_invalid_query_parameters_are_422(client, reference_data) -> None:
    skill_id = reference_data["skills"]["React"].id

    assert client.get(f"{API}/rates/{skill_id}/distribution", params={"bucket_width": 0}).status_code == 422
    assert client.get(f"{API}/rates/{skill_id}/distribution", params={"bucket_width": 0.001}).status_code == 422
    assert client.get(f"{API}/rates/{skill_id}", params={"seniority": "wizard"}).status_code == 422
    assert client.get(f"{API}/rates/{skill_id}/geo", params={"top_n": 0}).status_code == 422


def test_search_endpoint_is_not_shadowed_by_skill_route(client, add_approved) -> None:
    add_approved(75, skill="React")

    response = client.get(f"{API}/rates/search", params={"q": "react"})

    assert response.status_code == 200
    assert response.json()["results"][0]["skill"] == "React"


def test_submission_is_accepted_and_queued(client) -> None:
    response = client.post(f"{API}/submissions", json=_payload())

    assert response.status_code == 202
    assert response.json()["accepted"] is True
    queue = client.get(f"{API}/moderation/submissions").json()
    assert queue["count"] == 1
    assert queue["submissions"][0]["is_approved"] is False


def test_honeypot_response_matches_real_acceptance(client) -> None:
    real = client.post(f"{API}/submissions", json=_payload())
    bait = client.post(f"{API}/submissions", json=_payload(website_url_hp="http://spam.example"))

    assert bait.status_code == real.status_code
    assert bait.json() == real.json()
    assert client.get(f"{API}/moderation/submissions").json()["count"] == 1


def test_submission_validation_errors_name_the_field(client) -> None:
    response = client.post(f"{API}/submissions", json=_payload(hourly_rate=1000))
    unknown = client.post(f"{API}/submissions", json=_payload(skill_name="Alchemy"))
    bad_enum = client.post(f"{API}/submissions", json=_payload(project_type="retainer"))

    assert response.status_code == 422
    assert response.json()["error"] | {"request_id": None} == {
        "type": "out_of_range",
        "message": "Hourly rate must be between 5 and 500.",
        "field": "hourly_rate",
        "request_id": None,
    }
    assert unknown.json()["error"]["type"] == "reference_not_found"
    assert bad_enum.json()["error"]["field"] == "project_type"


def test_forwarded_origin_drives_rate_limiting(client) -> None:
    headers = {"X-Forwarded-For": "203.0.113.50, 10.0.0.1"}
    for _ in range(4):
        assert client.post(f"{API}/submissions", json=_payload(), headers=headers).status_code == 202

    queue = client.get(f"{API}/moderation/submissions").json()["submissions"]

    assert sorted(item["fraud_score"] for item in queue) == [0.0, 0.0, 0.0, 0.5]


def test_blocked_origin_is_flagged(client) -> None:
    response = client.post(f"{API}/submissions", json=_payload(), headers={"X-Forwarded-For": "0.0.0.0"})

    assert response.status_code == 200
    assert response.json()["accepted"] is False


def test_moderation_decision_flow(client, reference_data) -> None:
    client.post(f"{API}/submissions", json=_payload(hourly_rate=120))
    submission_id = client.get(f"{API}/moderation/submissions").json()["submissions"][0]["id"]
    url = f"{API}/moderation/submissions/{submission_id}/decision"

    approved = client.post(url, json={"decision": "approve", "moderator": "ops"})
    again = client.post(url, json={"decision": "approve"})
    rates = client.get(f"{API}/rates/{reference_data['skills']['React'].id}").json()
    rejected = client.post(url, json={"decision": "reject"})
    missing = client.post(url, json={"decision": "reject"})

    assert approved.json()["outcome"] == "approved"
    assert approved.json()["approved_at"] is not None
    assert again.json()["outcome"] == "already_approved"
    assert rates["sample_count"] == 1
    assert rejected.json()["outcome"] == "rejected"
    assert missing.status_code == 404


def test_moderation_rejects_unknown_decision(client) -> None:
    response = client.post(
        f"{API}/moderation/submissions/{uuid.uuid4()}/decision", json={"decision": "maybe"}
    )

    assert response.status_code == 422
    assert response.json()["error"]["type"] == "validation_error"


def test_rate_calculator_with_market_benchmark(client, add_approved, reference_data) -> None:
    for rate in (50, 80, 120, 150):
        add_approved(rate)

    response = client.post(
        f"{API}/tools/rate-calculator", json={"skill_id": reference_data["skills"]["React"].id}
    )
    invalid = client.post(f"{API}/tools/rate-calculator", json={"hours_per_day": 0})

    body = response.json()
    assert body["hourly_rate"] == 129
    assert body["market"]["sample_count"] == 4
    assert invalid.status_code == 422


def test_posting_ingestion_endpoint(client) -> None:
    response = client.post(
        f"{API}/ingestion/postings",
        json={"postings": [{"title": "Senior React Developer", "location": "Remote", "text": "$90/hr"}]},
    )

    assert response.status_code == 200
    assert response.json()["stored"] == 1
    assert client.get(f"{API}/moderation/submissions").json()["count"] == 1
