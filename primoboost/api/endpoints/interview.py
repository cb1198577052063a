"""
Interview API endpoints

Handles the mock-interview room:
- Creating sessions
- Presenting questions and capturing answers
- Skips, pauses and anti-cheating violations
- Ending interviews
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, Field

from primoboost.api.dependencies import get_orchestrator, get_resume_analyzer
from primoboost.core.interview_orchestrator import (
    InterviewOrchestrator,
    InterviewSetupError,
    SessionNotFoundError,
    StageTransitionError,
)
from primoboost.models.interview import InterviewConfig, InterviewStage, ViolationType

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# REQUEST/RESPONSE MODELS
# ============================================================================

class CreateSessionRequest(BaseModel):
    """Request model for a new interview session."""
    user_id: str
    config: InterviewConfig
    resume_id: str | None = None


class CreateSessionResponse(BaseModel):
    """Response model for session creation."""
    session_id: str
    stage: str
    total_questions: int
    duration_minutes: int
    message: str


class AudioLevelRequest(BaseModel):
    """Microphone volume sample from the browser, in dBFS."""
    volume_db: float


class TranscriptRequest(BaseModel):
    transcript: str


class SubmitAnswerRequest(BaseModel):
    """Request model for submitting an answer."""
    transcript: str | None = None
    auto_submitted: bool = False


class ViolationRequest(BaseModel):
    type: ViolationType
    duration_seconds: float = Field(default=0.0, ge=0)


async def _run(call) -> dict[str, Any]:
    """Await an orchestrator call, mapping its errors onto HTTP errors."""
    try:
        return await call
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except StageTransitionError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ============================================================================
# REST ENDPOINTS
# ============================================================================

@router.post("/sessions", response_model=CreateSessionResponse)
async def create_session(request: CreateSessionRequest) -> CreateSessionResponse:
    """
    Create a new interview session and load its questions.

    With a resume, questions are a mix of ranked bank questions and
    AI-generated personalized questions.
    """
    resume = None
    if request.resume_id:
        resume = await get_resume_analyzer().get_resume(request.resume_id)
        if not resume:
            raise HTTPException(status_code=404, detail="Resume not found")

    orchestrator = get_orchestrator()
    try:
        session = await orchestrator.create_session(request.user_id, request.config, resume)
    except InterviewSetupError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CreateSessionResponse(
        session_id=session.session_id,
        stage=session.stage.value,
        total_questions=len(session.questions),
        duration_minutes=session.config.duration_minutes,
        message="Interview session created. Call /question to begin.",
    )


@router.post("/{session_id}/question")
async def start_question(session_id: str) -> dict[str, Any]:
    """Present the next question for the browser to read out."""
    return await _run(get_orchestrator().start_question(session_id))


@router.post("/{session_id}/listen")
async def begin_listening(session_id: str) -> dict[str, Any]:
    """Start capturing the answer once the question has been read out."""
    return await _run(get_orchestrator().begin_listening(session_id))


@router.post("/{session_id}/audio-level")
async def record_audio_level(session_id: str, request: AudioLevelRequest) -> dict[str, Any]:
    return await _run(get_orchestrator().record_audio_level(session_id, request.volume_db))


@router.post("/{session_id}/transcript")
async def update_transcript(session_id: str, request: TranscriptRequest) -> dict[str, Any]:
    await _run(get_orchestrator().update_transcript(session_id, request.transcript))
    return {"status": "ok"}


@router.post("/{session_id}/answer")
async def submit_answer(session_id: str, request: SubmitAnswerRequest) -> dict[str, Any]:
    """
    Submit the answer to the current question.

    The answer is analyzed and the feedback returned.
    """
    return await _run(get_orchestrator().submit_answer(
        session_id,
        transcript=request.transcript,
        auto_submitted=request.auto_submitted,
    ))


@router.post("/{session_id}/skip")
async def skip_question(session_id: str) -> dict[str, Any]:
    return await _run(get_orchestrator().skip_question(session_id))


@router.post("/{session_id}/next")
async def next_question(session_id: str) -> dict[str, Any]:
    return await _run(get_orchestrator().next_question(session_id))


@router.post("/{session_id}/pause")
async def pause_interview(session_id: str) -> dict[str, Any]:
    return await _run(get_orchestrator().pause(session_id))


@router.post("/{session_id}/resume")
async def resume_interview(session_id: str) -> dict[str, Any]:
    return await _run(get_orchestrator().resume(session_id))


@router.post("/{session_id}/violations")
async def record_violation(session_id: str, request: ViolationRequest) -> dict[str, Any]:
    """Record a tab switch, window blur or full-screen exit. Pauses the interview."""
    return await _run(get_orchestrator().record_violation(
        session_id, request.type, request.duration_seconds
    ))


@router.post("/{session_id}/end")
async def end_interview(session_id: str) -> dict[str, Any]:
    """
    End the interview early.

    The session is stored as abandoned with its duration and security
    counters; it is not scored.
    """
    return await _run(get_orchestrator().end_interview(session_id))


@router.get("/{session_id}/status")
async def get_session_status(session_id: str) -> dict[str, Any]:
    """Get the current status of an interview session."""
    try:
        return get_orchestrator().get_status(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


# ============================================================================
# WEBSOCKET ENDPOINT
# ============================================================================

async def _handle_message(
    orchestrator: InterviewOrchestrator,
    session_id: str,
    data: dict[str, Any],
) -> dict[str, Any] | None:
    """Dispatch one client message. Returns the reply, if any."""
    message_type = data.get("type")

    if message_type == "audio_level":
        result = await orchestrator.record_audio_level(session_id, float(data.get("volume_db", -100)))
        if result.get("auto_submitted"):
            return {"type": "auto_submitted", "data": result["result"]}
        return {"type": "audio_level", "data": result}

    if message_type == "transcript":
        await orchestrator.update_transcript(session_id, data.get("transcript", ""))
        return None

    if message_type == "violation":
        result = await orchestrator.record_violation(
            session_id,
            ViolationType(data.get("violation_type")),
            float(data.get("duration_seconds", 0)),
        )
        return {"type": "violation", "data": result}

    if message_type == "ping":
        return {"type": "pong"}

    return {"type": "error", "message": f"Unknown message type: {message_type}"}


@router.websocket("/ws/{session_id}")
async def websocket_interview(websocket: WebSocket, session_id: str):
    """
    WebSocket endpoint for the real-time parts of the interview room.

    Message types:
    - audio_level: Microphone volume sample ({"volume_db": -32.5})
    - transcript: Interim or final speech recognition transcript
    - violation: Tab switch, window blur or full-screen exit
    - ping

    Server sends:
    - stage_change: Session stage updated
    - audio_level: Speaking state and silence countdown
    - auto_submitted: Answer submitted after sustained silence
    - violation: Warning message and counters
    - error: Error occurred
    """
    await websocket.accept()

    orchestrator = get_orchestrator()
    if not orchestrator.get_session(session_id):
        await websocket.close(code=4004, reason="Session not found")
        return

    async def send_stage_change(changed_id: str, old_stage: InterviewStage, new_stage: InterviewStage):
        if changed_id == session_id:
            await websocket.send_json({
                "type": "stage_change",
                "data": {"from": old_stage.value, "to": new_stage.value},
            })

    orchestrator.on_stage_change(send_stage_change)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                logger.warning(f"Malformed WebSocket message for session {session_id}: {raw[:100]}")
                await websocket.send_json({"type": "error", "message": "Message must be valid JSON"})
                continue

            try:
                if not isinstance(data, dict):
                    raise ValueError("Message must be a JSON object")
                reply = await _handle_message(orchestrator, session_id, data)
            except (StageTransitionError, ValueError, TypeError) as e:
                reply = {"type": "error", "message": str(e)}
            if reply:
                await websocket.send_json(reply)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for session {session_id}")
    finally:
        orchestrator.remove_stage_change_callback(send_stage_change)
