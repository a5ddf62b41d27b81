import uuid
import pytest
from conftest import SILLY_DESCRIPTION, VALID_DESCRIPTION, make_record

BASE = "/api/v1"


def payload(**overrides):
    body = {
        "applicantName": "John Cleese",
        "walkName": "The Ministry March",
        "description": SILLY_DESCRIPTION,
        "hasBriefcase": True,
        "involvesHopping": True,
        "numberOfTwirls": 5,
    }
    body.update(overrides)
    return body


def test_submit_application_created(client):
    r = client.post(f"{BASE}/applications", json=payload())
    assert r.status_code == 201
    data = r.json()
    assert data["status"] == "submitted"
    assert data["initialSillinessScore"] == 105
    assert data["message"] == "Application successfully submitted for preliminary review"
    assert data["requestId"].startswith("req_")
    assert uuid.UUID(data["applicationId"])
    assert "submittedAt" in data
    assert r.headers["X-Request-ID"] == data["requestId"]
    assert r.headers["X-Application-ID"] == data["applicationId"]
    assert r.headers["X-Silliness-Score"] == "105"


def test_low_score_reports_pending_info(client):
    r = client.post(f"{BASE}/applications", json=payload(
        description=VALID_DESCRIPTION, hasBriefcase=False, involvesHopping=False, numberOfTwirls=0))
    assert r.status_code == 201
    assert r.json()["status"] == "pending_info"


def test_fetch_submitted_application(client):
    created = client.post(f"{BASE}/applications", json=payload()).json()
    r = client.get(f"{BASE}/applications/{created['applicationId']}")
    assert r.status_code == 200
    data = r.json()
    assert data["walkName"] == "The Ministry March"
    assert data["numberOfTwirls"] == 5
    assert data["status"] == "submitted"


def test_fetch_by_uppercase_and_hyphenless_id(client):
    created = client.post(f"{BASE}/applications", json=payload()).json()
    app_id = created["applicationId"]
    for spelling in (app_id.upper(), uuid.UUID(app_id).hex):
        r = client.get(f"{BASE}/applications/{spelling}")
        assert r.status_code == 200
        assert r.json()["applicationId"] == app_id


def test_fetch_unknown_application(client):
    r = client.get(f"{BASE}/applications/{uuid.uuid4()}")
    assert r.status_code == 404
    data = r.json()
    assert data["status"] == 404
    assert data["error"] == "Not Found"
    assert data["message"] == "Application not found"
    assert data["path"].startswith(f"{BASE}/applications/")
    assert data["requestId"] == r.headers["X-Request-ID"]
    assert client.get(f"{BASE}/applications/not-a-uuid").status_code == 404


def test_unknown_route_uses_error_body(client):
    r = client.get(f"{BASE}/walks")
    assert r.status_code == 404
    assert r.json()["path"] == f"{BASE}/walks"
    assert "requestId" in r.json()


def test_security_violation_is_generic(client):
    r = client.post(f"{BASE}/applications", json=payload(
        description="A walk with many steps <script>alert(1)</script> and then a long pause at the end"))
    assert r.status_code == 400
    data = r.json()
    assert data["error"] == "Bad Request"
    assert data["message"] == "Request cannot be processed"
    assert data["path"] == f"{BASE}/applications"
    assert "fieldErrors" not in data
    assert "XSS" not in r.text
    assert "<script" not in r.text


def test_invalid_name_characters_are_generic(client):
    r = client.post(f"{BASE}/applications", json=payload(applicantName="John Cleese 2"))
    assert r.status_code == 400
    assert r.json()["message"] == "Request cannot be processed"
    assert "INVALID_CHARACTERS" not in r.text


def test_duplicate_returns_conflict(client):
    assert client.post(f"{BASE}/applications", json=payload()).status_code == 201
    r = client.post(f"{BASE}/applications", json=payload(
        applicantName="JOHN CLEESE", walkName="the ministry march"))
    assert r.status_code == 409
    assert r.json()["message"] == "Application already exists"


def test_insufficient_detail_is_disclosed(client):
    r = client.post(f"{BASE}/applications", json=payload(description="x" * 60))
    assert r.status_code == 400
    assert r.json()["error"] == "Validation Failed"
    assert r.json()["message"] == "Description lacks sufficient detail for review"


def test_frequency_limit(client, session_factory):
    db = session_factory()
    try:
        for walk in ("Walk One", "Walk Two", "Walk Three"):
            make_record(db, applicant_name="Eric Idle", walk_name=walk)
    finally:
        db.close()
    r = client.post(f"{BASE}/applications", json=payload(applicantName="Eric Idle", walkName="Walk Four"))
    assert r.status_code == 400
    assert r.json()["message"] == "Maximum submissions exceeded for this period"


def test_missing_fields_list_field_errors(client):
    r = client.post(f"{BASE}/applications", json={"applicantName": "John Cleese"})
    assert r.status_code == 400
    data = r.json()
    assert data["message"] == "Request contains invalid data"
    fields = {e["field"] for e in data["fieldErrors"]}
    assert fields == {"walkName", "description", "hasBriefcase", "involvesHopping", "numberOfTwirls"}


def test_malformed_types_are_bad_request(client):
    r = client.post(f"{BASE}/applications", json=payload(numberOfTwirls="lots"))
    assert r.status_code == 400
    data = r.json()
    assert data["message"] == "Request contains invalid data"
    assert data["fieldErrors"] == [{"field": "numberOfTwirls", "message": "Invalid value"}]
    assert "lots" not in r.text


@pytest.mark.parametrize("overrides,field", [
    ({"numberOfTwirls": True}, "numberOfTwirls"),
    ({"numberOfTwirls": "5"}, "numberOfTwirls"),
    ({"hasBriefcase": 1}, "hasBriefcase"),
    ({"involvesHopping": "yes"}, "involvesHopping"),
])
def test_booleans_and_counts_are_not_coerced(client, overrides, field):
    r = client.post(f"{BASE}/applications", json=payload(**overrides))
    assert r.status_code == 400
    data = r.json()
    assert data["message"] == "Request contains invalid data"
    assert [e["field"] for e in data["fieldErrors"]] == [field]
    assert client.get(f"{BASE}/applications", params={"minScore": 0}).json() == []


def test_statistics(client):
    client.post(f"{BASE}/applications", json=payload())
    client.post(f"{BASE}/applications", json=payload(
        applicantName="Michael Palin", description=VALID_DESCRIPTION,
        hasBriefcase=False, involvesHopping=False, numberOfTwirls=0))
    r = client.get(f"{BASE}/statistics", params={"days": 7})
    assert r.status_code == 200
    assert r.headers["Cache-Control"] == "private, max-age=300"
    assert r.json() == {
        "days": 7,
        "total": 2,
        "averageScore": 62.5,
        "maxScore": 105,
        "briefcaseCount": 1,
        "hoppingCount": 1,
    }


def test_statistics_rejects_bad_window(client):
    r = client.get(f"{BASE}/statistics", params={"days": 0})
    assert r.status_code == 400
    assert r.json()["message"] == "Statistics window must be between 1 and 365 days"


def test_top_applications(client):
    client.post(f"{BASE}/applications", json=payload())
    client.post(f"{BASE}/applications", json=payload(
        applicantName="Michael Palin", description=VALID_DESCRIPTION,
        hasBriefcase=False, involvesHopping=False, numberOfTwirls=0))
    r = client.get(f"{BASE}/applications", params={"minScore": 40})
    assert r.status_code == 200
    assert [a["applicantName"] for a in r.json()] == ["John Cleese"]


def test_health(client):
    r = client.get(f"{BASE}/health")
    assert r.status_code == 200
    assert r.json()["status"] == "UP"
    assert "X-Request-ID" in r.headers
