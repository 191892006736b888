"""
Tests for live sessions: interviewer prompt, integrity monitor and finishing.
"""
import json

import pytest

from app.db.models.interview import Interview
from app.db.models.interview_session import InterviewSession
from app.llm.provider import LLMProviderError
from app.schemas.interview import InterviewConfig
from app.schemas.session import Landmark
from app.services import feedback_service, session_service
from app.services.session_service import (
    build_system_prompt,
    look_away_reason,
    session_duration_seconds,
    WARNING_THRESHOLD,
)


def _face(nose_x=0.5, left_x=0.3, right_x=0.7):
    points = [Landmark(x=0.5, y=0.5) for _ in range(468)]
    points[1] = Landmark(x=nose_x, y=0.5)
    points[234] = Landmark(x=left_x, y=0.5)
    points[454] = Landmark(x=right_x, y=0.5)
    return points


def _as_json(landmarks):
    return [{"x": p.x, "y": p.y, "z": p.z} for p in landmarks]


@pytest.fixture
def started(client, auth_headers, interview_config):
    response = client.post("/sessions", headers=auth_headers, json={"config": interview_config})
    assert response.status_code == 201
    return response.json()["sessionId"]


def test_system_prompt_contents():
    config = InterviewConfig(
        candidate_name="Asha Rao",
        job_role="Data Engineer",
        experience_level="Lead",
        interview_type="behavioral",
        company_name="Acme",
        skills="Spark, Airflow",
        resume_text="R" * 5000,
        job_description="J" * 500,
    )

    prompt = build_system_prompt(config)

    assert prompt.startswith("You are a seasoned Behavioral Interviewer at Acme.")
    assert "- Name: Asha Rao" in prompt
    assert "- Key Skills: Spark, Airflow" in prompt
    assert "lead/principal level candidate" in prompt
    assert "STAR method" in prompt
    assert "R" * 4000 in prompt and "R" * 4001 not in prompt
    assert "J" * 300 in prompt and "J" * 301 not in prompt
    assert "Thank you for your time today, Asha Rao. We'll be in touch soon." in prompt


def test_system_prompt_defaults_company():
    config = InterviewConfig(candidate_name="Ravi", job_role="SRE", interview_type="hr")
    prompt = build_system_prompt(config)

    assert prompt.startswith("You are a seasoned HR Round Interviewer at a leading technology company.")
    assert "- Company:" not in prompt
    assert "RESUME / CV CONTEXT" not in prompt


def test_session_duration_uses_config():
    config = InterviewConfig(candidate_name="A", job_role="B", interview_type="system-design", duration=45)
    assert session_duration_seconds(config) == 2700


@pytest.mark.parametrize("landmarks,expected", [
    (None, "Face not detected."),
    ([], "Face not detected."),
    (_face(), None),
    (_face(nose_x=0.34, left_x=0.3, right_x=0.7), "Please look at the screen."),
    (_face(nose_x=0.66, left_x=0.3, right_x=0.7), "Please look at the screen."),
    (_face(nose_x=0.4, left_x=0.3, right_x=0.7), None),
])
def test_look_away_reason(landmarks, expected):
    assert look_away_reason(landmarks) == expected


def test_start_session(client, db, auth_headers, interview_config):
    response = client.post("/sessions", headers=auth_headers, json={"config": interview_config})

    assert response.status_code == 201
    body = response.json()
    assert body["voice"] == "Kore"
    assert body["durationSeconds"] == 1800
    assert body["warningThreshold"] == 4
    assert "Backend Engineer" in body["systemPrompt"]

    session = db.query(InterviewSession).filter(InterviewSession.id == body["sessionId"]).first()
    assert session.status == "in_progress"
    assert session.anti_cheat is True


def test_start_session_blocked_when_limit_reached(client, db, test_user, auth_headers, interview_config):
    db.add(Interview(user_id=test_user.id, config=interview_config))
    db.commit()

    response = client.post("/sessions", headers=auth_headers, json={"config": interview_config})

    assert response.status_code == 429
    assert response.json()["detail"]["code"] == "PAYWALL"


def test_violations_disqualify_at_threshold(client, auth_headers, started):
    for count in range(1, WARNING_THRESHOLD + 1):
        response = client.post(f"/sessions/{started}/violations", headers=auth_headers,
                                json={"reason": "Tab switch detected!"})
        body = response.json()
        assert body["counted"] is True
        assert body["state"]["warningCount"] == count

    assert body["state"]["status"] == "terminated"
    assert body["state"]["disqualified"] is True
    assert body["state"]["warningsRemaining"] == 0

    after = client.post(f"/sessions/{started}/violations", headers=auth_headers,
                        json={"reason": "Exited full screen mode."}).json()
    assert after["counted"] is False
    assert after["state"]["warningCount"] == WARNING_THRESHOLD


def test_violations_ignored_while_paused(client, auth_headers, started):
    assert client.post(f"/sessions/{started}/pause", headers=auth_headers).json()["status"] == "paused"

    body = client.post(f"/sessions/{started}/violations", headers=auth_headers,
                       json={"reason": "Focus lost! Please stay on this window."}).json()
    assert body["counted"] is False
    assert body["state"]["warningCount"] == 0

    assert client.post(f"/sessions/{started}/resume", headers=auth_headers).json()["status"] == "in_progress"


def test_violations_ignored_without_anti_cheat(client, auth_headers, interview_config):
    session_id = client.post("/sessions", headers=auth_headers,
                             json={"config": interview_config, "antiCheat": False}).json()["sessionId"]

    body = client.post(f"/sessions/{session_id}/violations", headers=auth_headers,
                       json={"reason": "Tab switch detected!"}).json()
    assert body["counted"] is False


def test_resume_requires_paused_session(client, auth_headers, started):
    assert client.post(f"/sessions/{started}/resume", headers=auth_headers).status_code == 409


def test_attention_window(client, auth_headers, started):
    url = f"/sessions/{started}/attention"

    first = client.post(url, headers=auth_headers, json={"landmarks": None, "timestampMs": 1000}).json()
    assert first["counted"] is False

    within = client.post(url, headers=auth_headers, json={"landmarks": None, "timestampMs": 3900}).json()
    assert within["counted"] is False

    past = client.post(url, headers=auth_headers, json={"landmarks": None, "timestampMs": 4100}).json()
    assert past["counted"] is True
    assert past["warning"] == "Attention Alert: Face not detected."
    assert past["state"]["warningCount"] == 1

    # window restarted at 4100
    again = client.post(url, headers=auth_headers, json={"landmarks": None, "timestampMs": 7000}).json()
    assert again["counted"] is False


def test_looking_at_screen_resets_window(client, auth_headers, started):
    url = f"/sessions/{started}/attention"
    turned = _as_json(_face(nose_x=0.32))

    client.post(url, headers=auth_headers, json={"landmarks": turned, "timestampMs": 0})
    client.post(url, headers=auth_headers, json={"landmarks": _as_json(_face()), "timestampMs": 2000})
    client.post(url, headers=auth_headers, json={"landmarks": turned, "timestampMs": 2500})
    body = client.post(url, headers=auth_headers, json={"landmarks": turned, "timestampMs": 5000}).json()

    assert body["counted"] is False

    body = client.post(url, headers=auth_headers, json={"landmarks": turned, "timestampMs": 5600}).json()
    assert body["warning"] == "Attention Alert: Please look at the screen."


def test_attention_ignored_while_paused(client, auth_headers, started):
    url = f"/sessions/{started}/attention"
    client.post(f"/sessions/{started}/pause", headers=auth_headers)

    for timestamp in (0, 5000, 10000):
        body = client.post(url, headers=auth_headers, json={"landmarks": None, "timestampMs": timestamp}).json()
        assert body["counted"] is False
    assert body["state"]["warningCount"] == 0

    client.post(f"/sessions/{started}/resume", headers=auth_headers)
    # paused frames did not open a window
    body = client.post(url, headers=auth_headers, json={"landmarks": None, "timestampMs": 11000}).json()
    assert body["counted"] is False


def test_attention_ignored_after_disqualification(client, auth_headers, started):
    for _ in range(WARNING_THRESHOLD):
        client.post(f"/sessions/{started}/violations", headers=auth_headers, json={"reason": "Tab switch detected!"})

    url = f"/sessions/{started}/attention"
    for timestamp in (0, 5000):
        body = client.post(url, headers=auth_headers, json={"landmarks": None, "timestampMs": timestamp}).json()
        assert body["counted"] is False

    assert body["state"]["status"] == "terminated"
    assert body["state"]["warningCount"] == WARNING_THRESHOLD

def test_get_session_state_and_ownership(client, db, auth_headers, started):
    state = client.get(f"/sessions/{started}", headers=auth_headers).json()
    assert state["status"] == "in_progress"
    assert state["warningsRemaining"] == WARNING_THRESHOLD

    assert client.get("/sessions/unknown", headers=auth_headers).status_code == 404


def _transcript():
    return [
        {"id": "1", "speaker": "ai", "text": "Why this role?", "timestamp": "2026-02-13T10:00:00Z"},
        {"id": "2", "speaker": "user", "text": "I like backend work.", "timestamp": "2026-02-13T10:00:06Z"},
    ]


def test_finish_session_saves_interview(client, db, auth_headers, started, monkeypatch):
    def provider():
        raise LLMProviderError("Gemini API Key is missing")
    monkeypatch.setattr(feedback_service, "get_llm_provider", provider)

    response = client.post(f"/sessions/{started}/finish", headers=auth_headers, json={
        "transcript": _transcript(),
        "duration": 640,
        "questionsAsked": 3,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["duration"] == 640
    assert body["questionsAsked"] == 3
    assert body["overallScore"] == 50
    assert len(body["transcript"]) == 2

    db.expire_all()
    session = db.query(InterviewSession).filter(InterviewSession.id == started).first()
    assert session.status == "completed"
    assert session.interview_id == body["id"]

    again = client.post(f"/sessions/{started}/finish", headers=auth_headers, json={"transcript": []})
    assert again.status_code == 409


def test_finish_disqualified_session_is_terminated(client, db, auth_headers, started, monkeypatch):
    monkeypatch.setattr(session_service.feedback_service, "generate_interview_feedback",
                        lambda transcript, config, provider=None: feedback_service.fallback_result())
    for _ in range(WARNING_THRESHOLD):
        client.post(f"/sessions/{started}/violations", headers=auth_headers, json={"reason": "Tab switch detected!"})

    body = client.post(f"/sessions/{started}/finish", headers=auth_headers,
                       json={"transcript": _transcript()}).json()

    assert body["status"] == "terminated"
    assert body["warningCount"] == WARNING_THRESHOLD
    assert body["duration"] >= 0
