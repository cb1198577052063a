import json

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from main import app
from primoboost.api import dependencies
from primoboost.config.settings import get_settings
from primoboost.core.jobs_service import JOBS_TABLE
from primoboost.core.llm_client import LLMClient
from primoboost.core.payment_service import RazorpayGateway
from primoboost.storage.database import InMemoryDatabase
from tests.conftest import bank_rows, chat_response

MIXED_CONFIG = {"interview_category": "mixed", "duration_minutes": 10}


@pytest.fixture
def llm_responses():
    """Queued upstream responses; feedback JSON when empty."""
    return []


@pytest.fixture
def llm_requests():
    return []


@pytest.fixture
def database():
    return InMemoryDatabase({
        "interview_questions": bank_rows(),
        JOBS_TABLE: [{
            "id": "job-1",
            "company_name": "Acme",
            "role_title": "Backend Engineer",
            "domain": "Backend",
            "short_description": "Python services",
            "eligible_years": "2024, 2025",
            "posted_date": "2025-10-01T00:00:00+00:00",
            "is_active": True,
        }],
    })


@pytest.fixture
def client(monkeypatch, database, make_llm, llm_responses, llm_requests):
    def llm_handler(request):
        llm_requests.append(json.loads(request.content))
        if llm_responses:
            response = llm_responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return chat_response({"score": 80, "feedback": "Good answer"})

    def gateway_handler(request):
        body = json.loads(request.content)
        return httpx.Response(200, json={"id": "order_1", "amount": body["amount"], "currency": "INR"})

    monkeypatch.setattr(dependencies, "_database", database)
    monkeypatch.setattr(dependencies, "_llm_client", make_llm(llm_handler))
    monkeypatch.setattr(dependencies, "_payment_gateway", RazorpayGateway(
        "rzp_test_key", "rzp_test_secret", transport=httpx.MockTransport(gateway_handler)
    ))
    monkeypatch.setattr(dependencies, "_orchestrator", None)
    monkeypatch.setattr(dependencies, "_question_service", None)

    with TestClient(app) as test_client:
        yield test_client


def create_session(client, config=MIXED_CONFIG) -> str:
    response = client.post("/api/interview/sessions", json={"user_id": "user-1", "config": config})
    assert response.status_code == 200
    return response.json()["session_id"]


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestInterviewEndpoints:
    def test_create_session(self, client):
        response = client.post("/api/interview/sessions", json={"user_id": "user-1", "config": MIXED_CONFIG})

        data = response.json()
        assert response.status_code == 200
        assert data["stage"] == "ready"
        assert data["total_questions"] == 3
        assert data["duration_minutes"] == 10

    def test_create_session_validation(self, client):
        response = client.post("/api/interview/sessions", json={
            "user_id": "user-1",
            "config": {"interview_category": "hr", "session_type": "company-based"},
        })
        assert response.status_code == 422

    def test_create_session_unknown_resume(self, client):
        response = client.post("/api/interview/sessions", json={
            "user_id": "user-1", "config": MIXED_CONFIG, "resume_id": "missing",
        })
        assert response.status_code == 404
        assert response.json()["detail"] == "Resume not found"

    def test_answer_flow(self, client):
        session_id = create_session(client)

        question = client.post(f"/api/interview/{session_id}/question").json()
        assert question["action"] == "question"
        assert question["question_number"] == 1

        listening = client.post(f"/api/interview/{session_id}/listen")
        assert listening.status_code == 200

        transcript = client.post(f"/api/interview/{session_id}/transcript", json={"transcript": "My answer"})
        assert transcript.json() == {"status": "ok"}

        level = client.post(f"/api/interview/{session_id}/audio-level", json={"volume_db": -20})
        assert level.json()["speaking"] is True

        feedback = client.post(f"/api/interview/{session_id}/answer", json={}).json()
        assert feedback["action"] == "feedback"
        assert feedback["feedback"]["score"] == 80
        assert feedback["has_next_question"] is True

        next_question = client.post(f"/api/interview/{session_id}/next").json()
        assert next_question["question_number"] == 2

        status = client.get(f"/api/interview/{session_id}/status").json()
        assert status["stage"] == "question"
        assert status["question_number"] == 2

        result = client.post(f"/api/interview/{session_id}/end").json()
        assert result["action"] == "complete"
        assert result["status"] == "abandoned"
        assert result["overall_score"] is None
        assert result["questions_answered"] == 1
        assert client.get(f"/api/interview/{session_id}/status").json()["status"] == "abandoned"

    def test_invalid_stage_transition(self, client):
        session_id = create_session(client)
        response = client.post(f"/api/interview/{session_id}/next")
        assert response.status_code == 400

    def test_unknown_session(self, client):
        assert client.post("/api/interview/missing/question").status_code == 404
        assert client.get("/api/interview/missing/status").status_code == 404

    def test_violation_pauses(self, client):
        session_id = create_session(client)
        client.post(f"/api/interview/{session_id}/question")

        response = client.post(
            f"/api/interview/{session_id}/violations", json={"type": "fullscreen_exit"}
        )

        data = response.json()
        assert data["paused"] is True
        assert data["fullscreen_exits"] == 1
        assert data["message"] == "You exited full-screen mode. Please return to full-screen to continue."

        resumed = client.post(f"/api/interview/{session_id}/resume").json()
        assert resumed["paused"] is False


class TestInterviewWebSocket:
    def test_ping(self, client):
        session_id = create_session(client)
        with client.websocket_connect(f"/api/interview/ws/{session_id}") as websocket:
            websocket.send_json({"type": "ping"})
            assert websocket.receive_json() == {"type": "pong"}

    def test_violation_message(self, client):
        session_id = create_session(client)
        with client.websocket_connect(f"/api/interview/ws/{session_id}") as websocket:
            websocket.send_json({"type": "violation", "violation_type": "tab_switch"})
            reply = websocket.receive_json()

        assert reply["type"] == "violation"
        assert reply["data"]["tab_switch_count"] == 1
        assert reply["data"]["paused"] is True

    def test_errors_are_replied(self, client):
        session_id = create_session(client)
        with client.websocket_connect(f"/api/interview/ws/{session_id}") as websocket:
            websocket.send_json({"type": "dance"})
            assert websocket.receive_json() == {"type": "error", "message": "Unknown message type: dance"}

            websocket.send_json({"type": "violation", "violation_type": "bogus"})
            assert websocket.receive_json()["type"] == "error"

    def test_malformed_frames_keep_connection_open(self, client):
        session_id = create_session(client)
        with client.websocket_connect(f"/api/interview/ws/{session_id}") as websocket:
            websocket.send_text("not json")
            assert websocket.receive_json() == {"type": "error", "message": "Message must be valid JSON"}

            websocket.send_text("[1, 2]")
            assert websocket.receive_json() == {"type": "error", "message": "Message must be a JSON object"}

            websocket.send_json({"type": "violation", "violation_type": "tab_switch", "duration_seconds": None})
            assert websocket.receive_json()["type"] == "error"

            websocket.send_json({"type": "ping"})
            assert websocket.receive_json() == {"type": "pong"}

    def test_stage_changes_are_pushed(self, client):
        session_id = create_session(client)
        with client.websocket_connect(f"/api/interview/ws/{session_id}") as websocket:
            client.post(f"/api/interview/{session_id}/question")
            assert websocket.receive_json() == {
                "type": "stage_change",
                "data": {"from": "ready", "to": "question"},
            }

    def test_unknown_session_is_closed(self, client):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect("/api/interview/ws/missing") as websocket:
                websocket.receive_json()
        assert exc_info.value.code == 4004


class TestResumeEndpoints:
    def test_analyze_and_fetch(self, client):
        response = client.post("/api/resume/analyze", json={
            "user_id": "user-1",
            "file_name": "resume.txt",
            "text": "Python developer with 3 years of experience",
        })
        assert response.status_code == 200
        resume = response.json()
        assert resume["skills_detected"] == ["Python"]
        assert resume["experience_level"] == "mid"

        fetched = client.get(f"/api/resume/{resume['id']}")
        assert fetched.json()["id"] == resume["id"]

    def test_analyze_rejects_file_type(self, client):
        response = client.post("/api/resume/analyze", json={
            "user_id": "user-1", "file_name": "resume.exe", "text": "text",
        })
        assert response.status_code == 400

    def test_optimize(self, client, llm_responses):
        llm_responses.append(chat_response({"name": "Jane", "summary": "Engineer"}))
        response = client.post("/api/resume/optimize", json={
            "resume": "Jane, engineer", "job_description": "Backend role", "user_type": "fresher",
        })
        assert response.json() == {"name": "Jane", "summary": "Engineer", "origin": "jd_optimized"}

    def test_optimize_upstream_failure(self, client, llm_responses):
        llm_responses.append(httpx.Response(402, json={"error": {"message": "No credits"}}))
        response = client.post("/api/resume/optimize", json={"resume": "r", "job_description": "jd"})
        assert response.status_code == 502
        assert response.json()["detail"].startswith("Insufficient Credits: No credits")

    def test_follow_up_question(self, client, llm_responses):
        resume_id = client.post("/api/resume/analyze", json={
            "user_id": "user-1", "file_name": "resume.txt", "text": "Python developer",
        }).json()["id"]
        llm_responses.append(chat_response({"question_text": "Why that index?", "category": "Technical"}))

        response = client.post("/api/questions/follow-up", json={
            "question_id": "technical-0", "answer": "I added an index", "resume_id": resume_id,
        })

        assert response.status_code == 200
        assert response.json()["source_question_id"] == "technical-0"
        assert response.json()["is_dynamic"] is True


class TestJobsEndpoints:
    def test_list_and_tags(self, client):
        jobs = client.get("/api/jobs/").json()
        assert [job["id"] for job in jobs] == ["job-1"]

        tags = client.get("/api/jobs/job-1/tags").json()
        assert tags["skill_tags"] == ["Backend", "PYTHON"]
        assert tags["eligible_year_tags"] == ["2024", "2025"]

    def test_apply(self, client):
        response = client.post("/api/jobs/job-1/apply", json={"user_id": "user-1", "method": "auto"})
        assert response.json()["status"] == "submitted"
        assert client.post("/api/jobs/missing/apply", json={"user_id": "user-1"}).status_code == 404

    def test_company_description(self, client, llm_responses):
        llm_responses.append(chat_response("Acme builds things."))
        response = client.post("/api/jobs/job-1/company-description")
        assert response.json() == {"job_id": "job-1", "company_description": "Acme builds things."}


class TestPaymentEndpoints:
    def test_create_order_uses_forwarded_ip(self, client, database):
        response = client.post(
            "/api/payments/orders",
            json={"user_id": "user-1", "plan_id": "pro", "amount": 1000, "coupon_code": "diwali"},
            headers={"x-forwarded-for": "203.0.113.7"},
        )

        assert response.status_code == 200
        assert response.json()["order_id"] == "order_1"
        assert database.rows("ip_coupon_usage")[0]["ip_address"] == "203.0.113.7"

    def test_coupon_error_is_bad_request(self, client):
        body = {"user_id": "user-1", "plan_id": "pro", "amount": 1000, "coupon_code": "welcome"}
        client.post("/api/payments/orders", json=body)
        response = client.post("/api/payments/orders", json=body)
        assert response.status_code == 400
        assert response.json()["detail"] == 'Coupon "welcome" has already been used by this account.'

    def test_verify_rejects_bad_signature(self, client):
        response = client.post("/api/payments/verify", json={
            "order_id": "order_1", "payment_id": "pay_1", "signature": "bad",
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid payment signature."

    def test_offer(self, client):
        data = client.get("/api/payments/offer").json()
        assert data["coupon_code"] == "diwali"
        assert data["discount_percent"] == 90


class TestAIProxy:
    def test_passthrough(self, client, llm_responses, llm_requests):
        upstream = {"choices": [{"message": {"content": "hi"}}], "usage": {"total_tokens": 5}}
        llm_responses.append(httpx.Response(200, json=upstream))

        response = client.post("/api/ai/enrich", json={"messages": [{"role": "user", "content": "hello"}]})

        assert response.status_code == 200
        assert response.json() == upstream
        assert llm_requests[0] == {
            "model": "gpt-4o",
            "messages": [{"role": "user", "content": "hello"}],
            "temperature": 0.7,
            "max_tokens": 2000,
        }

    def test_messages_required(self, client):
        response = client.post("/api/ai/enrich", json={"prompt": "hello"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request: messages array required"}

    def test_upstream_error(self, client, llm_responses):
        llm_responses.append(httpx.Response(429, json={"error": {"message": "Rate limited"}}))

        response = client.post("/api/ai/enrich", json={"messages": []})

        assert response.status_code == 429
        assert response.json() == {
            "error": "Rate limited",
            "code": 429,
            "details": {"error": {"message": "Rate limited"}},
        }

    def test_timeout(self, client, llm_responses):
        llm_responses.append(httpx.ReadTimeout("timed out"))
        response = client.post("/api/ai/enrich", json={"messages": []})
        assert response.status_code == 504
        assert response.json() == {"error": "Request timeout after 30 seconds"}

    def test_not_configured(self, client, monkeypatch):
        monkeypatch.setenv("LLM_API_KEY", "")
        get_settings.cache_clear()
        monkeypatch.setattr(dependencies, "_llm_client", LLMClient(
            transport=httpx.MockTransport(lambda request: chat_response("unused"))
        ))

        response = client.post("/api/ai/enrich", json={"messages": []})

        assert response.status_code == 500
        assert response.json() == {"error": "Server configuration error"}
        assert client.get("/api/ai/health").json()["agent_router_configured"] is False


class TestMetadata:
    def test_durations(self, client):
        durations = client.get("/api/metadata/durations").json()
        assert [d["minutes"] for d in durations] == [5, 10, 15, 20, 30, 45, 60]

    def test_interview_categories(self, client):
        categories = client.get("/api/metadata/interview-categories").json()
        assert [c["name"] for c in categories] == ["Technical", "HR", "Mixed"]
