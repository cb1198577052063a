"""
Interview Orchestrator - Stage machine for mock-interview sessions.

This is the central coordinator for the interview room. The browser
handles the camera, microphone, speech recognition and speech synthesis;
the orchestrator owns the workflow around them:
- stage transitions and question progression
- answer capture (transcripts, volume levels, silence auto-submit)
- the interview countdown
- anti-cheating violations (tab switches, window blur, full-screen exits)
- persistence of sessions and responses
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from primoboost.config.settings import get_settings
from primoboost.core.feedback_service import NO_ANSWER, SKIPPED_ANSWER, FeedbackService
from primoboost.core.question_service import QuestionService, room_categories_for_config
from primoboost.core.speech_activity import SpeechActivityDetector
from primoboost.core.timers import ListeningMonitor, SessionClock
from primoboost.models.feedback import AnswerFeedback, InterviewResponseRecord
from primoboost.models.interview import (
    InterviewConfig,
    InterviewSession,
    InterviewStage,
    SessionStatus,
    Violation,
    ViolationType,
)
from primoboost.models.resume import UserResume
from primoboost.storage.database import Database

logger = logging.getLogger(__name__)

SESSIONS_TABLE = "mock_interview_sessions"
RESPONSES_TABLE = "interview_responses"

VIOLATION_MESSAGES = {
    ViolationType.TAB_SWITCH: "You switched tabs. Please stay on this page during the interview.",
    ViolationType.WINDOW_BLUR: "You switched to another application. Please stay focused on the interview.",
    ViolationType.FULLSCREEN_EXIT: "You exited full-screen mode. Please return to full-screen to continue.",
}


class StageTransitionError(Exception):
    """Raised when an invalid stage transition is attempted."""
    pass


class SessionNotFoundError(Exception):
    """Raised when a session ID is unknown."""
    pass


class InterviewSetupError(Exception):
    """Raised when a session cannot be prepared."""
    pass


@dataclass
class _SessionRuntime:
    """Timers and the answer lock attached to a live session."""

    clock: SessionClock
    detector: SpeechActivityDetector
    monitor: ListeningMonitor | None = None
    # Held while an answer is saved and while the session is ended
    answer_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InterviewOrchestrator:
    """
    Manages the interview room using a stage machine.

    Stages:
        LOADING → READY → QUESTION → LISTENING → PROCESSING → FEEDBACK
                              ↑          │                        │
                              └── skip ──┘                        ↓
                                                       (QUESTION | COMPLETED)

    COMPLETED is reachable from every stage so the interview can end on
    user request or when time runs out.
    """

    VALID_TRANSITIONS: dict[InterviewStage, list[InterviewStage]] = {
        InterviewStage.LOADING: [InterviewStage.READY, InterviewStage.COMPLETED],
        InterviewStage.READY: [InterviewStage.QUESTION, InterviewStage.COMPLETED],
        InterviewStage.QUESTION: [InterviewStage.LISTENING, InterviewStage.QUESTION, InterviewStage.COMPLETED],
        InterviewStage.LISTENING: [InterviewStage.PROCESSING, InterviewStage.QUESTION, InterviewStage.COMPLETED],
        InterviewStage.PROCESSING: [InterviewStage.FEEDBACK, InterviewStage.QUESTION, InterviewStage.COMPLETED],
        InterviewStage.FEEDBACK: [InterviewStage.QUESTION, InterviewStage.COMPLETED],
        InterviewStage.COMPLETED: [],  # Terminal stage
    }

    def __init__(
        self,
        database: Database,
        question_service: QuestionService,
        feedback_service: FeedbackService,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the orchestrator with component dependencies.

        Args:
            database: Hosted database client
            question_service: Question bank / generation
            feedback_service: Answer evaluation
            clock: Monotonic clock used by the countdown and silence detection
        """
        self.database = database
        self.question_service = question_service
        self.feedback_service = feedback_service
        self.settings = get_settings()
        self._clock = clock

        # Live sessions (the database keeps the durable record)
        self._sessions: dict[str, InterviewSession] = {}
        self._runtime: dict[str, _SessionRuntime] = {}

        # Event callbacks
        self._stage_change_callbacks: list[Callable[[str, InterviewStage, InterviewStage], Awaitable[None]]] = []

    # =========================================================================
    # SESSION MANAGEMENT
    # =========================================================================

    async def create_session(
        self,
        user_id: str,
        config: InterviewConfig,
        resume: UserResume | None = None,
    ) -> InterviewSession:
        """
        Create a session, load its questions and move it to READY.

        Raises:
            InterviewSetupError: If no questions match the configuration
        """
        row = await self.database.insert(SESSIONS_TABLE, {
            "user_id": user_id,
            "session_type": config.session_type.value,
            "interview_category": config.interview_category.value,
            "company_name": config.company_name,
            "target_role": config.target_role,
            "domain": config.domain,
            "duration_minutes": config.duration_minutes,
            "resume_id": resume.id if resume else None,
            "status": SessionStatus.IN_PROGRESS.value,
            "started_at": datetime.now(timezone.utc).isoformat(),
        })

        session = InterviewSession(
            session_id=row["id"],
            user_id=user_id,
            config=config,
            resume_id=resume.id if resume else None,
        )

        # Load questions
        session.status_message = "Loading interview questions..."
        count = self.settings.interview_question_count
        if resume:
            questions = await self.question_service.select_questions_for_interview(config, resume, count)
        else:
            questions = await self.question_service.get_questions(
                room_categories_for_config(config), count, config.company_name
            )

        if not questions:
            session.status = SessionStatus.CANCELLED
            await self.database.update(SESSIONS_TABLE, {"status": session.status.value}, {"id": session.session_id})
            raise InterviewSetupError("No questions available for this configuration")

        session.questions = questions
        self._sessions[session.session_id] = session
        self._runtime[session.session_id] = _SessionRuntime(
            clock=SessionClock(session.total_seconds, clock=self._clock),
            detector=SpeechActivityDetector(
                volume_threshold_db=self.settings.volume_threshold_db,
                silence_threshold_seconds=self.settings.silence_threshold_seconds,
                min_speech_seconds=self.settings.min_speech_seconds,
                frame_seconds=self.settings.silence_poll_interval_seconds,
                clock=self._clock,
            ),
        )

        await self.transition_stage(session.session_id, InterviewStage.READY)
        session.status_message = "Ready to start interview"

        logger.info(f"Created interview session {session.session_id} with {len(questions)} questions")
        return session

    def get_session(self, session_id: str) -> InterviewSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def _require_session(self, session_id: str) -> InterviewSession:
        session = self.get_session(session_id)
        if not session:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return session

    def time_remaining(self, session_id: str) -> float:
        runtime = self._runtime.get(session_id)
        return runtime.clock.time_remaining if runtime else 0.0

    # =========================================================================
    # STAGE MACHINE
    # =========================================================================

    async def transition_stage(self, session_id: str, new_stage: InterviewStage) -> InterviewSession:
        """
        Move a session to a new stage.

        Raises:
            StageTransitionError: If transition is invalid
        """
        session = self._require_session(session_id)
        old_stage = session.stage

        valid_next_stages = self.VALID_TRANSITIONS.get(old_stage, [])
        if new_stage not in valid_next_stages:
            raise StageTransitionError(
                f"Invalid transition from {old_stage.value} to {new_stage.value}. "
                f"Valid transitions: {[s.value for s in valid_next_stages]}"
            )

        session.stage = new_stage
        if new_stage == InterviewStage.COMPLETED:
            session.completed_at = datetime.now(timezone.utc)

        # Notify callbacks
        for callback in self._stage_change_callbacks:
            try:
                await callback(session_id, old_stage, new_stage)
            except Exception as e:
                logger.error(f"Stage change callback error: {e}")

        logger.info(f"Session {session_id}: {old_stage.value} → {new_stage.value}")
        return session

    # =========================================================================
    # INTERVIEW FLOW
    # =========================================================================

    async def start_question(self, session_id: str) -> dict[str, Any]:
        """Present a question. Returns question data for speech synthesis."""
        session = self._require_session(session_id)
        if session.stage == InterviewStage.FEEDBACK:
            return await self._advance(session)
        if session.stage != InterviewStage.READY:
            raise StageTransitionError(f"Cannot start interview in stage: {session.stage.value}")

        await self.transition_stage(session_id, InterviewStage.QUESTION)
        return self._question_result(session)

    async def begin_listening(self, session_id: str) -> dict[str, Any]:
        """Start capturing the answer to the current question."""
        session = self._require_session(session_id)
        runtime = self._runtime[session_id]

        await self.transition_stage(session_id, InterviewStage.LISTENING)

        session.answer.transcript = ""
        session.answer.started_at = self._clock()
        session.status_message = "Listening to your answer..."
        runtime.detector.start()

        if session.paused:
            runtime.detector.stop()
        else:
            self._start_timers(session_id)

        return {
            "stage": session.stage.value,
            "time_remaining": int(runtime.clock.time_remaining),
            "silence_countdown": runtime.detector.silence_countdown,
        }

    async def record_audio_level(self, session_id: str, volume_db: float) -> dict[str, Any]:
        """
        Feed one microphone volume sample (dBFS) from the browser.

        Submits the answer when the silence rule fires.
        """
        session = self._require_session(session_id)
        runtime = self._runtime[session_id]

        if session.stage != InterviewStage.LISTENING or session.paused:
            return {"speaking": False, "ignored": True, "stage": session.stage.value}

        if runtime.clock.expired:
            result = await self.end_interview(session_id, reason="time_up")
            return {"speaking": False, "auto_submitted": False, "result": result}

        speaking = runtime.detector.process_level(volume_db)
        if runtime.detector.should_auto_submit():
            runtime.detector.mark_auto_submitted()
            result = await self.submit_answer(session_id, auto_submitted=True)
            return {"speaking": False, "auto_submitted": True, "result": result}

        return {
            "speaking": speaking,
            "auto_submitted": False,
            "silence_countdown": round(runtime.detector.silence_countdown, 1),
            "time_remaining": int(runtime.clock.time_remaining),
        }

    async def update_transcript(self, session_id: str, transcript: str) -> None:
        """Store the interim or final browser transcript for the current answer."""
        session = self._require_session(session_id)
        if session.stage != InterviewStage.LISTENING:
            raise StageTransitionError(f"Cannot update transcript in stage: {session.stage.value}")
        session.answer.transcript = transcript

    async def submit_answer(
        self,
        session_id: str,
        transcript: str | None = None,
        auto_submitted: bool = False,
    ) -> dict[str, Any]:
        """
        Finish the current answer, analyze it and save the response.

        Returns:
            Feedback for the answer, or the next action if processing failed
        """
        session = self._require_session(session_id)
        runtime = self._runtime[session_id]
        question = session.get_current_question()

        started_at = session.answer.started_at or self._clock()
        response_duration = int(self._clock() - started_at)
        silence_duration = runtime.detector.silence_duration if auto_submitted else 0.0

        await self.transition_stage(session_id, InterviewStage.PROCESSING)
        self._stop_timers(session_id)
        session.status_message = (
            "Auto-submitting your answer..." if auto_submitted else "Processing your answer..."
        )

        answer_text = (transcript or session.answer.transcript or "").strip() or NO_ANSWER

        try:
            feedback = await self.feedback_service.analyze_answer(
                question.question_text,
                answer_text,
                question.category.value,
                question.difficulty.value,
            )

            async with runtime.answer_lock:
                # Ended while the answer was being analyzed; the stored result stays final
                if session.stage == InterviewStage.COMPLETED:
                    logger.info(f"Session {session_id} ended during processing, answer not saved")
                    return self._completion_result(session, reason="already_ended")

                await self._save_response(
                    session,
                    answer_text,
                    feedback,
                    response_duration=response_duration,
                    auto_submitted=auto_submitted,
                    silence_duration=silence_duration,
                )

                await self.transition_stage(session_id, InterviewStage.FEEDBACK)
            session.status_message = "Feedback generated"

            return {
                "action": "feedback",
                "question_id": question.id,
                "question_number": session.current_question_index + 1,
                "auto_submitted": auto_submitted,
                "response_duration_seconds": response_duration,
                "feedback": feedback.model_dump(),
                "has_next_question": session.has_next_question(),
            }
        except Exception as e:
            logger.error(f"Error processing answer for session {session_id}: {e}")
            if session.stage == InterviewStage.COMPLETED:
                return self._completion_result(session, reason="already_ended")
            session.status_message = "Failed to process answer. Moving to next question."
            return await self._advance(session)

    async def next_question(self, session_id: str) -> dict[str, Any]:
        """Move on after feedback: next question, or complete after the last one."""
        session = self._require_session(session_id)
        if session.stage != InterviewStage.FEEDBACK:
            raise StageTransitionError(f"Cannot move to next question in stage: {session.stage.value}")
        return await self._advance(session)

    async def skip_question(self, session_id: str) -> dict[str, Any]:
        """Skip the current question, recording a zero-score response."""
        session = self._require_session(session_id)
        if session.skipping:
            return {"action": "ignored", "message": "Skip already in progress"}
        if session.stage not in (InterviewStage.QUESTION, InterviewStage.LISTENING):
            raise StageTransitionError(f"Cannot skip question in stage: {session.stage.value}")

        session.skipping = True
        session.status_message = "Skipping question..."
        self._stop_timers(session_id)
        question = session.get_current_question()

        try:
            session.skipped_questions.append(question.id)
            await self.database.update(
                SESSIONS_TABLE,
                {"skipped_questions": session.skipped_questions, "skip_count": session.skip_count},
                {"id": session_id},
            )
            await self._save_response(session, SKIPPED_ANSWER, self.feedback_service.skipped_feedback())
        except Exception as e:
            logger.error(f"Error saving skipped question: {e}")

        try:
            return await self._advance(session)
        finally:
            session.skipping = False

    async def pause(self, session_id: str) -> dict[str, Any]:
        """Pause the countdown and silence detection."""
        session = self._require_session(session_id)
        if session.stage == InterviewStage.COMPLETED:
            return self.get_status(session_id)

        session.paused = True
        if session.stage == InterviewStage.LISTENING:
            self._stop_timers(session_id)
        logger.info(f"Session {session_id} paused")
        return self.get_status(session_id)

    async def resume(self, session_id: str) -> dict[str, Any]:
        """Resume after a pause."""
        session = self._require_session(session_id)
        if not session.paused:
            return self.get_status(session_id)

        session.paused = False
        if session.stage == InterviewStage.LISTENING:
            self._runtime[session_id].detector.resume()
            self._start_timers(session_id)
        logger.info(f"Session {session_id} resumed")
        return self.get_status(session_id)

    async def record_violation(
        self,
        session_id: str,
        violation_type: ViolationType,
        duration_seconds: float = 0.0,
    ) -> dict[str, Any]:
        """
        Record an anti-cheating violation and pause the interview.

        Returns:
            The warning to show and the updated counters
        """
        session = self._require_session(session_id)
        if session.stage == InterviewStage.COMPLETED:
            return {"message": None, "paused": False, "ignored": True}

        violation = Violation(type=violation_type, duration_seconds=max(0.0, duration_seconds))
        session.security.record(violation)
        logger.warning(
            f"Session {session_id} violation: {violation_type.value}, "
            f"duration {violation.duration_seconds}s"
        )

        await self.pause(session_id)

        try:
            await self.database.update(SESSIONS_TABLE, self._security_columns(session), {"id": session_id})
        except Exception as e:
            logger.error(f"Failed to persist violation counters: {e}")

        return {
            "message": VIOLATION_MESSAGES[violation_type],
            "paused": True,
            "tab_switch_count": session.security.tab_switch_count,
            "fullscreen_exits": session.security.fullscreen_exits,
            "total_violation_time": session.security.total_violation_time,
        }

    async def end_interview(self, session_id: str, reason: str = "user_ended") -> dict[str, Any]:
        """End the interview now. Repeated calls return the stored result."""
        session = self._require_session(session_id)
        async with self._runtime[session_id].answer_lock:
            if session.stage == InterviewStage.COMPLETED:
                return self._completion_result(session, reason="already_ended")
            return await self._complete(session, reason=reason)

    def get_status(self, session_id: str) -> dict[str, Any]:
        """Current state of a session."""
        session = self._require_session(session_id)
        runtime = self._runtime[session_id]
        return {
            "session_id": session.session_id,
            "stage": session.stage.value,
            "status": session.status.value,
            "paused": session.paused,
            "status_message": session.status_message,
            "question_number": session.current_question_index + 1,
            "total_questions": len(session.questions),
            "time_remaining": int(runtime.clock.time_remaining),
            "silence_countdown": round(runtime.detector.silence_countdown, 1),
            "skip_count": session.skip_count,
            "tab_switch_count": session.security.tab_switch_count,
            "fullscreen_exits": session.security.fullscreen_exits,
            "overall_score": session.overall_score,
        }

    # =========================================================================
    # HELPER METHODS
    # =========================================================================

    def _start_timers(self, session_id: str) -> None:
        runtime = self._runtime[session_id]
        runtime.clock.start()
        runtime.monitor = ListeningMonitor(
            clock=runtime.clock,
            detector=runtime.detector,
            on_expire=lambda: self._on_time_up(session_id),
            on_silence=lambda: self._on_silence(session_id),
            poll_interval=self.settings.silence_poll_interval_seconds,
        )
        runtime.monitor.start()

    def _stop_timers(self, session_id: str) -> None:
        runtime = self._runtime[session_id]
        if runtime.monitor:
            runtime.monitor.cancel()
            runtime.monitor = None
        runtime.clock.stop()
        runtime.detector.stop()

    async def _on_time_up(self, session_id: str) -> None:
        try:
            await self.end_interview(session_id, reason="time_up")
        except Exception as e:
            logger.error(f"Failed to end interview {session_id} on time up: {e}")

    async def _on_silence(self, session_id: str) -> None:
        try:
            await self.submit_answer(session_id, auto_submitted=True)
        except StageTransitionError as e:
            # The answer was already submitted by the client
            logger.debug(f"Auto-submit skipped for {session_id}: {e}")

    async def _advance(self, session: InterviewSession) -> dict[str, Any]:
        """Go to the next question, or complete after the last one."""
        if not session.has_next_question():
            return await self._complete(session, reason="all_questions_answered")

        session.current_question_index += 1
        session.answer.transcript = ""
        session.answer.started_at = None
        await self.transition_stage(session.session_id, InterviewStage.QUESTION)
        return self._question_result(session)

    def _question_result(self, session: InterviewSession) -> dict[str, Any]:
        session.status_message = (
            f"Question {session.current_question_index + 1} of {len(session.questions)}"
        )
        return {
            "action": "question",
            **session.question_payload(self.time_remaining(session.session_id)),
        }

    async def _save_response(
        self,
        session: InterviewSession,
        answer_text: str,
        feedback: AnswerFeedback,
        response_duration: int = 0,
        auto_submitted: bool = False,
        silence_duration: float = 0.0,
    ) -> None:
        question = session.get_current_question()
        record = InterviewResponseRecord(
            session_id=session.session_id,
            question_id=question.id,
            question_order=session.current_question_index + 1,
            user_answer_text=answer_text,
            audio_transcript=answer_text,
            ai_feedback_json=feedback,
            individual_score=feedback.score,
            tone_rating=feedback.tone_confidence_rating,
            confidence_rating=feedback.score,
            response_duration_seconds=response_duration,
            auto_submitted=auto_submitted,
            silence_duration=round(silence_duration, 1),
        )
        try:
            await self.database.insert(RESPONSES_TABLE, record.model_dump())
        except Exception as e:
            logger.error(f"Error saving response: {e}")

    def _security_columns(self, session: InterviewSession) -> dict[str, Any]:
        security = session.security
        return {
            "tab_switch_count": security.tab_switch_count,
            "fullscreen_exits": security.fullscreen_exits,
            "total_violation_time": security.total_violation_time,
            "violations_log": [v.model_dump(mode="json") for v in security.violations_log],
        }

    async def _complete(self, session: InterviewSession, reason: str) -> dict[str, Any]:
        """
        Finish the interview and persist the result.

        Ending early at the user's request stores the session as abandoned
        without a score. Running out of time or answering the last question
        stores it as completed and scores every saved response.
        """
        session_id = session.session_id
        self._stop_timers(session_id)
        await self.transition_stage(session_id, InterviewStage.COMPLETED)
        session.status_message = "Completing interview..."

        runtime = self._runtime[session_id]
        session.actual_duration_seconds = int(session.total_seconds - runtime.clock.time_remaining)
        session.status = (
            SessionStatus.ABANDONED if reason == "user_ended" else SessionStatus.COMPLETED
        )

        try:
            responses = await self.database.select(RESPONSES_TABLE, filters={"session_id": session_id})
        except Exception as e:
            logger.error(f"Failed to load responses for session {session_id}: {e}")
            responses = []
        session.questions_answered = sum(
            1 for r in responses if r.get("question_id") not in session.skipped_questions
        )

        row: dict[str, Any] = {
            "status": session.status.value,
            "actual_duration_seconds": session.actual_duration_seconds,
            "completed_at": session.completed_at.isoformat(),
            **self._security_columns(session),
        }
        if session.status == SessionStatus.COMPLETED:
            session.overall_score = self.feedback_service.calculate_overall_score(responses)
            row["overall_score"] = session.overall_score

        try:
            await self.database.update(SESSIONS_TABLE, row, {"id": session_id})
        except Exception as e:
            logger.error(f"Failed to save {session.status.value} session {session_id}: {e}")

        session.status_message = (
            "Interview completed" if session.status == SessionStatus.COMPLETED else "Interview ended"
        )
        logger.info(
            f"Session {session_id} {session.status.value} ({reason}): score={session.overall_score}, "
            f"duration={session.actual_duration_seconds}s"
        )
        return self._completion_result(session, reason=reason)

    def _completion_result(self, session: InterviewSession, reason: str) -> dict[str, Any]:
        return {
            "action": "complete",
            "reason": reason,
            "session_id": session.session_id,
            "status": session.status.value,
            "overall_score": session.overall_score,
            "actual_duration_seconds": session.actual_duration_seconds,
            "questions_answered": session.questions_answered,
            "skip_count": session.skip_count,
            "tab_switch_count": session.security.tab_switch_count,
            "fullscreen_exits": session.security.fullscreen_exits,
            "total_violation_time": session.security.total_violation_time,
        }

    async def close(self) -> None:
        """Cancel every running listening monitor."""
        for session_id in list(self._runtime):
            self._stop_timers(session_id)

    # =========================================================================
    # EVENT CALLBACKS
    # =========================================================================

    def on_stage_change(
        self,
        callback: Callable[[str, InterviewStage, InterviewStage], Awaitable[None]]
    ) -> None:
        """Register a callback for stage changes."""
        self._stage_change_callbacks.append(callback)

    def remove_stage_change_callback(self, callback) -> None:
        if callback in self._stage_change_callbacks:
            self._stage_change_callbacks.remove(callback)
