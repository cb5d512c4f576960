"""
Floor-plan analysis tests - AI client, analysis sessions, /api/analyze.

Tests:
1-4.   Response parsing (camelCase JSON, unknown room types, bad JSON, bad schema)
5-8.   Gemini call error mapping (missing key, 5xx/429 retryable, 4xx permanent, network)
9-11.  Analysis session tickets (commit, supersede, clear)
12-15. POST /api/analyze (success, upload validation, user key)
16-18. AI failure status codes, failures keep the prior analysis
19.    A superseded request gets 409
20-22. GET / DELETE /api/analysis/current, reads never create a session
"""

import io
import json
import urllib.error
from unittest.mock import patch, MagicMock

import pytest

from floorplan_estimator import analysis_service
from floorplan_estimator.analysis_service import (
    AnalysisNotConfigured, AnalysisServiceError, AnalysisSession, find_session, get_session,
    parse_analysis,
)


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def _upload(client, headers, filename="plan.png", content=PNG_BYTES, area_unit="sqm"):
    return client.post(
        "/api/analyze",
        files={"file": (filename, content, "application/octet-stream")},
        data={"area_unit": area_unit},
        headers=headers,
    )


def _gemini_response(text):
    payload = {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    response = MagicMock()
    response.read.return_value = json.dumps(payload).encode("utf-8")
    response.__enter__.return_value = response
    return response


# ============================================================
# Response parsing
# ============================================================

def test_parse_analysis_accepts_camel_case(sample_analysis_camel, sample_analysis):
    assert parse_analysis(json.dumps(sample_analysis_camel)) == sample_analysis


def test_parse_analysis_coerces_unknown_room_type():
    text = json.dumps({
        "summary": {"totalAreaSqM": 40, "totalWallLengthM": 30, "wallThicknessM": 0.2},
        "rooms": [
            {"name": "Puja", "type": "Prayer Room", "areaSqM": 4, "perimeterM": 8},
            {"name": "Loo", "type": "bathroom", "areaSqM": 3},
        ],
        "elements": {"doors": 2, "windows": 1},
    })
    rooms = parse_analysis(text)["rooms"]
    assert rooms[0]["type"] == "Other"
    assert rooms[1]["type"] == "Bathroom"
    assert rooms[1]["perimeter_m"] is None


def test_parse_analysis_rejects_invalid_json():
    with pytest.raises(AnalysisServiceError) as exc:
        parse_analysis("not json {")
    assert exc.value.retryable is False


def test_parse_analysis_rejects_schema_mismatch():
    with pytest.raises(AnalysisServiceError):
        parse_analysis(json.dumps({"rooms": []}))
    with pytest.raises(AnalysisServiceError):
        parse_analysis(json.dumps({
            "summary": {"totalAreaSqM": -5, "totalWallLengthM": 30, "wallThicknessM": 0.2},
        }))


# ============================================================
# Gemini call
# ============================================================

def test_missing_api_key_is_not_configured():
    with patch.object(analysis_service.settings, "GEMINI_API_KEY", ""):
        with pytest.raises(AnalysisNotConfigured):
            analysis_service.analyze_floor_plan(PNG_BYTES, "image/png")


@pytest.mark.parametrize("code,retryable", [(503, True), (500, True), (429, True), (400, False), (403, False)])
def test_http_errors_map_to_retryability(code, retryable):
    error = urllib.error.HTTPError("https://example", code, "err", {}, io.BytesIO(b"boom"))
    with patch("urllib.request.urlopen", side_effect=error):
        with pytest.raises(AnalysisServiceError) as exc:
            analysis_service.analyze_floor_plan(PNG_BYTES, "image/png")
    assert exc.value.retryable is retryable
    assert str(code) in exc.value.message


def test_network_failure_is_retryable():
    with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("connection refused")):
        with pytest.raises(AnalysisServiceError) as exc:
            analysis_service.analyze_floor_plan(PNG_BYTES, "image/png")
    assert exc.value.retryable is True


def test_successful_call_returns_validated_analysis(sample_analysis_camel, sample_analysis):
    response = _gemini_response(json.dumps(sample_analysis_camel))
    with patch("urllib.request.urlopen", return_value=response) as urlopen:
        assert analysis_service.analyze_floor_plan(PNG_BYTES, "image/png") == sample_analysis
    sent = json.loads(urlopen.call_args[0][0].data)
    inline = sent["contents"][0]["parts"][0]["inline_data"]
    assert inline["mime_type"] == "image/png"
    assert sent["generationConfig"]["responseMimeType"] == "application/json"


def test_empty_candidates_is_an_error():
    response = MagicMock()
    response.read.return_value = b'{"candidates": []}'
    response.__enter__.return_value = response
    with patch("urllib.request.urlopen", return_value=response):
        with pytest.raises(AnalysisServiceError, match="No data returned from AI"):
            analysis_service.analyze_floor_plan(PNG_BYTES, "image/png")


# ============================================================
# Analysis sessions
# ============================================================

def test_session_commit_replaces_analysis(sample_analysis):
    session = AnalysisSession()
    ticket = session.begin()
    assert session.commit(ticket, sample_analysis, "plan.png") is True
    assert session.raw_analysis == sample_analysis
    assert session.file_name == "plan.png"


def test_stale_ticket_cannot_commit(sample_analysis):
    session = AnalysisSession()
    stale = session.begin()
    fresh = session.begin()
    assert session.commit(stale, sample_analysis, "old.png") is False
    assert session.raw_analysis is None
    assert session.commit(fresh, sample_analysis, "new.png") is True
    assert session.file_name == "new.png"


def test_clear_invalidates_in_flight_request(sample_analysis):
    session = AnalysisSession()
    ticket = session.begin()
    session.clear()
    assert session.commit(ticket, sample_analysis) is False
    assert session.raw_analysis is None


# ============================================================
# POST /api/analyze
# ============================================================

def test_analyze_stores_current_analysis(client, user_headers, sample_analysis):
    with patch.object(analysis_service, "analyze_floor_plan", return_value=sample_analysis) as mock:
        resp = _upload(client, user_headers, filename="Plan.PNG", area_unit="sqft")
    assert resp.status_code == 200
    data = resp.json()
    assert data["analysis"] == sample_analysis
    assert data["suggested_calibration_area"] == "1076.4"
    assert mock.call_args[0][1] == "image/png"
    assert get_session("test-user-1").raw_analysis == sample_analysis


def test_analyze_rejects_unsupported_file_type(client, user_headers):
    resp = _upload(client, user_headers, filename="plan.dwg")
    assert resp.status_code == 400
    assert "not allowed" in resp.json()["detail"]


def test_analyze_rejects_empty_and_oversized_files(client, user_headers):
    assert _upload(client, user_headers, content=b"").status_code == 400
    with patch.object(analysis_service.settings, "MAX_UPLOAD_MB", 0):
        resp = _upload(client, user_headers)
    assert resp.status_code == 400
    assert "too large" in resp.json()["detail"]


def test_analyze_requires_user_key(client):
    resp = _upload(client, {})
    assert resp.status_code == 401


@pytest.mark.parametrize("error,status", [
    (AnalysisServiceError("Gemini API error 503", retryable=True), 503),
    (AnalysisServiceError("No data returned from AI"), 502),
    (AnalysisNotConfigured("GEMINI_API_KEY not configured"), 500),
])
def test_ai_failures_map_to_status(client, user_headers, error, status):
    with patch.object(analysis_service, "analyze_floor_plan", side_effect=error):
        resp = _upload(client, user_headers)
    assert resp.status_code == status
    assert resp.json()["detail"] == error.message


def test_failed_analysis_keeps_previous_one(client, user_headers, sample_analysis):
    with patch.object(analysis_service, "analyze_floor_plan", return_value=sample_analysis):
        assert _upload(client, user_headers, filename="first.pdf").status_code == 200
    with patch.object(analysis_service, "analyze_floor_plan",
                      side_effect=AnalysisServiceError("timeout", retryable=True)):
        assert _upload(client, user_headers, filename="second.pdf").status_code == 503
    current = client.get("/api/analysis/current", headers=user_headers).json()
    assert current["file_name"] == "first.pdf"
    assert current["analysis"] == sample_analysis


def test_analyses_are_scoped_per_user(client, user_headers, other_user_headers, sample_analysis):
    with patch.object(analysis_service, "analyze_floor_plan", return_value=sample_analysis):
        _upload(client, user_headers)
    assert client.get("/api/analysis/current", headers=other_user_headers).status_code == 404


def test_superseded_request_gets_409(client, user_headers, sample_analysis):
    def newer_request_starts(file_bytes, mime_type):
        get_session("test-user-1").begin()
        return sample_analysis

    with patch.object(analysis_service, "analyze_floor_plan", side_effect=newer_request_starts):
        resp = _upload(client, user_headers)
    assert resp.status_code == 409
    assert get_session("test-user-1").raw_analysis is None


def test_get_current_analysis_404_when_empty(client, user_headers):
    resp = client.get("/api/analysis/current", headers=user_headers)
    assert resp.status_code == 404


def test_clear_current_analysis(client, user_headers, sample_analysis):
    with patch.object(analysis_service, "analyze_floor_plan", return_value=sample_analysis):
        _upload(client, user_headers)
    resp = client.delete("/api/analysis/current", headers=user_headers)
    assert resp.status_code == 200
    assert client.get("/api/analysis/current", headers=user_headers).status_code == 404


def test_reading_analysis_does_not_create_a_session(client):
    headers = {"X-User-Key": "read-only-visitor"}
    assert client.get("/api/analysis/current", headers=headers).status_code == 404
    assert client.delete("/api/analysis/current", headers=headers).status_code == 200
    assert client.post("/api/estimate/", json={}, headers=headers).status_code == 404
    assert find_session("read-only-visitor") is None
    assert "read-only-visitor" not in analysis_service._sessions
