"""
Tests for interview history endpoints.
"""
from datetime import timedelta

from app.db.base import utcnow
from app.db.models.interview import Interview, InterviewTranscript


def _payload(config, **overrides):
    payload = {
        "config": config,
        "duration": 1200,
        "questionsAsked": 5,
        "warningCount": 1,
        "overallScore": 78,
        "metrics": {
            "communication": 80,
            "technicalKnowledge": 75,
            "problemSolving": 70,
            "confidence": 85,
            "clarity": 80,
            "overallScore": 78,
        },
        "feedback": {
            "summary": "Solid answers.",
            "strengths": ["Clear"],
            "areasToImprove": ["Depth"],
            "tips": ["Practice system design"],
        },
        "transcript": [
            {"id": "1", "speaker": "ai", "text": "Tell me about yourself.", "timestamp": "2026-02-13T10:00:00Z"},
            {"id": "2", "speaker": "user", "text": "I build APIs.", "timestamp": "2026-02-13T10:00:10Z"},
        ],
    }
    payload.update(overrides)
    return payload


def test_save_interview(client, db, auth_headers, interview_config):
    response = client.post("/interviews", headers=auth_headers, json=_payload(interview_config))

    assert response.status_code == 201
    interview_id = response.json()["id"]

    interview = db.query(Interview).filter(Interview.id == interview_id).first()
    assert interview.status == "completed"
    assert interview.config["jobRole"] == "Backend Engineer"
    assert interview.metrics["technicalKnowledge"] == 75
    assert len(interview.transcript.entries) == 2


def test_save_interview_defaults(client, db, auth_headers, interview_config):
    response = client.post("/interviews", headers=auth_headers, json={"config": interview_config})

    interview = db.query(Interview).filter(Interview.id == response.json()["id"]).first()
    assert interview.status == "completed"
    assert interview.questions_asked == 0
    assert interview.warning_count == 0
    assert interview.overall_score is None
    # empty transcript is not stored
    assert db.query(InterviewTranscript).count() == 0


def test_save_interview_rejects_unknown_type(client, auth_headers, interview_config):
    interview_config["interviewType"] = "trivia"
    response = client.post("/interviews", headers=auth_headers, json={"config": interview_config})
    assert response.status_code == 422


def test_history_requires_paid_plan(client, auth_headers):
    response = client.get("/interviews", headers=auth_headers)

    assert response.status_code == 402
    detail = response.json()["detail"]
    assert detail["code"] == "PAYWALL"
    assert detail["feature"] == "interview_history"


def test_history_newest_first_with_filters(client, db, test_user, auth_headers, subscribe, interview_config):
    subscribe(test_user, "plan_mock_monthly")
    now = utcnow()
    for offset, (role, kind) in enumerate([
        ("Backend Engineer", "technical"),
        ("Product Manager", "behavioral"),
        ("Senior backend developer", "system-design"),
    ]):
        db.add(Interview(
            user_id=test_user.id,
            config={**interview_config, "jobRole": role, "interviewType": kind},
            created_at=now - timedelta(hours=offset),
        ))
    db.commit()

    everything = client.get("/interviews", headers=auth_headers).json()
    assert [i["config"]["jobRole"] for i in everything] == [
        "Backend Engineer", "Product Manager", "Senior backend developer",
    ]
    assert "createdAt" in everything[0]

    by_type = client.get("/interviews", headers=auth_headers, params={"type": "behavioral"}).json()
    assert [i["config"]["interviewType"] for i in by_type] == ["behavioral"]

    searched = client.get("/interviews", headers=auth_headers, params={"search": "BACKEND"}).json()
    assert len(searched) == 2

    all_types = client.get("/interviews", headers=auth_headers, params={"type": "all"}).json()
    assert len(all_types) == 3


def test_detail_includes_transcript_for_paid_user(client, test_user, auth_headers, subscribe, interview_config):
    subscribe(test_user, "plan_mock_monthly")
    interview_id = client.post("/interviews", headers=auth_headers, json=_payload(interview_config)).json()["id"]

    response = client.get(f"/interviews/{interview_id}", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["overallScore"] == 78
    assert body["scoreLabel"] == "Good"
    assert body["metrics"]["problemSolving"] == 70
    assert body["feedback"]["areasToImprove"] == ["Depth"]
    assert [t["speaker"] for t in body["transcript"]] == ["ai", "user"]


def test_detail_trimmed_for_free_user(client, auth_headers, interview_config):
    interview_id = client.post("/interviews", headers=auth_headers, json=_payload(interview_config)).json()["id"]

    body = client.get(f"/interviews/{interview_id}", headers=auth_headers).json()

    assert body["overallScore"] == 78
    assert body["metrics"] is None
    assert body["feedback"] is None


def test_detail_of_another_users_interview_is_404(client, db, auth_headers, interview_config):
    from app.db.models.user import User
    other = User(email="other@example.com", full_name="Other")
    db.add(other)
    db.commit()
    interview = Interview(user_id=other.id, config=interview_config)
    db.add(interview)
    db.commit()

    assert client.get(f"/interviews/{interview.id}", headers=auth_headers).status_code == 404
    assert client.get("/interviews/does-not-exist", headers=auth_headers).status_code == 404


def test_clear_history(client, db, test_user, auth_headers, interview_config):
    client.post("/interviews", headers=auth_headers, json=_payload(interview_config))
    client.post("/interviews", headers=auth_headers, json=_payload(interview_config))

    response = client.delete("/interviews", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"deleted": 2}
    db.expire_all()
    assert db.query(Interview).filter(Interview.user_id == test_user.id).count() == 0
    assert db.query(InterviewTranscript).count() == 0


def test_limit_endpoint(client, auth_headers, interview_config):
    assert client.get("/interviews/limit", headers=auth_headers).json() == {
        "allowed": True, "remaining": 1, "total": 0,
    }

    client.post("/interviews", headers=auth_headers, json={"config": interview_config})

    assert client.get("/interviews/limit", headers=auth_headers).json() == {
        "allowed": False, "remaining": 0, "total": 1,
    }
