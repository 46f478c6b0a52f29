"""Tarama geçmişi, rapor HTML/PDF ve paylaşım linkleri."""
from fastapi.testclient import TestClient

from tonguemap.api import scans as scans_api
from tonguemap.services.mock_analysis import mock_tongue_analysis

LEGACY_RESULT = {
    "primaryPattern": "Liver Qi Stagnation",
    "secondaryPatterns": ["Blood Deficiency"],
    "coat": "Thin white",
    "color": "Pale red",
    "shape": "Normal",
    "moisture": "Moist",
    "recommendations": "Regular exercise",
    "recommendedFormula": "Xiao Yao San",
    "severity": "mild",
    "tongueZones": {"tip": "Red", "center": "Normal", "root": "Thin coat", "sides": "Slightly red"},
}


def _save(client: TestClient, headers: dict, result: dict) -> dict:
    r = client.post("/api/scans", json={"result": result, "imageUrl": "https://img.test/1.jpg"}, headers=headers)
    assert r.status_code == 200, r.text
    return r.json()


def test_save_requires_auth(client: TestClient):
    r = client.post("/api/scans", json={"result": LEGACY_RESULT})
    assert r.status_code == 401


def test_save_current_format(client: TestClient, auth_headers: dict):
    saved = _save(client, auth_headers, mock_tongue_analysis())
    assert saved["id"] > 0
    assert saved["created_at"]
    items = client.get("/api/scans", headers=auth_headers).json()
    assert len(items) == 1
    item = items[0]
    assert item["format"] == "current"
    assert item["primary_pattern"] == "Spleen Qi Deficiency with Dampness"
    assert item["severity"] == "moderate"
    assert item["image_url"] == "https://img.test/1.jpg"


def test_save_legacy_format(client: TestClient, auth_headers: dict):
    saved = _save(client, auth_headers, LEGACY_RESULT)
    detail = client.get(f"/api/scans/{saved['id']}", headers=auth_headers).json()
    assert detail["format"] == "legacy"
    assert detail["coat"] == "Thin white"
    assert detail["recommended_formula"] == "Xiao Yao San"
    assert detail["result"] == LEGACY_RESULT


def test_history_newest_first(client: TestClient, auth_headers: dict):
    first = _save(client, auth_headers, LEGACY_RESULT)
    second = _save(client, auth_headers, mock_tongue_analysis())
    ids = [i["id"] for i in client.get("/api/scans", headers=auth_headers).json()]
    assert ids == [second["id"], first["id"]]
    assert len(client.get("/api/scans?limit=1", headers=auth_headers).json()) == 1


def test_other_user_cannot_read_scan(client: TestClient, auth_headers: dict, login_as):
    saved = _save(client, auth_headers, LEGACY_RESULT)
    other = login_as("other@example.com")
    assert client.get(f"/api/scans/{saved['id']}", headers=other).status_code == 404
    assert client.get(f"/api/scans/{saved['id']}/report", headers=other).status_code == 404
    assert client.get("/api/scans", headers=other).json() == []


def test_report_html(client: TestClient, auth_headers: dict):
    saved = _save(client, auth_headers, mock_tongue_analysis())
    r = client.get(f"/api/scans/{saved['id']}/report", headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "Spleen Qi Deficiency with Dampness" in r.text
    assert "88% confidence" in r.text


def test_report_pdf(client: TestClient, auth_headers: dict, monkeypatch):
    rendered = []

    def fake_pdf(result, report_date=None):
        rendered.append(result)
        return b"%PDF-1.7 test"

    monkeypatch.setattr(scans_api, "build_report_pdf", fake_pdf)
    saved = _save(client, auth_headers, LEGACY_RESULT)
    r = client.get(f"/api/scans/{saved['id']}/pdf", headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert "attachment" in r.headers["content-disposition"]
    assert r.content.startswith(b"%PDF")
    assert rendered == [LEGACY_RESULT]


def test_share_link_is_public(client: TestClient, auth_headers: dict):
    saved = _save(client, auth_headers, LEGACY_RESULT)
    r = client.post(f"/api/scans/{saved['id']}/share", headers=auth_headers)
    assert r.status_code == 200
    token = r.json()["token"]
    page = client.get(f"/share/{token}")
    assert page.status_code == 200
    assert "Liver Qi Stagnation" in page.text


def test_unknown_share_token(client: TestClient):
    r = client.get("/share/does-not-exist")
    assert r.status_code == 404
    assert "error" in r.json()


def test_save_current_format_with_null_sections(client: TestClient, auth_headers: dict):
    result = mock_tongue_analysis()
    result["patternDifferentiation"]["secondaryPatterns"] = None
    result["acupuncture"]["moxibustion"]["recommended"] = None
    saved = _save(client, auth_headers, result)
    r = client.get(f"/api/scans/{saved['id']}/report", headers=auth_headers)
    assert r.status_code == 200
    assert "Spleen Qi Deficiency with Dampness" in r.text
