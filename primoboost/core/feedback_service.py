"""
Feedback Service for PrimoBoost

Scores mock-interview answers with the LLM and aggregates the
per-answer scores into an interview score.
"""

import logging
from typing import Any, Iterable

from pydantic import ValidationError

from primoboost.core.llm_client import LLMClient, LLMError
from primoboost.models.feedback import AnswerFeedback
from primoboost.prompts.evaluator import EvaluatorPrompts

logger = logging.getLogger(__name__)

NO_ANSWER = "No answer provided"
SKIPPED_ANSWER = "[Question Skipped]"


class FeedbackService:
    """
    Answer evaluation component.

    If the LLM is unavailable or returns something unusable, a heuristic
    evaluation is used so the interview can continue.
    """

    def __init__(self, llm_client: LLMClient | None = None):
        self.llm_client = llm_client
        self.prompts = EvaluatorPrompts()

    async def analyze_answer(
        self,
        question_text: str,
        answer: str,
        category: str,
        difficulty: str,
    ) -> AnswerFeedback:
        """
        Evaluate a single answer.

        Args:
            question_text: The question that was asked
            answer: Candidate's transcript
            category: Question category
            difficulty: Question difficulty

        Returns:
            AnswerFeedback with a 0-100 score
        """
        if not answer.strip() or answer.strip() == NO_ANSWER:
            return AnswerFeedback(
                score=0,
                feedback="No answer was captured for this question.",
                improvements=["Answer the question out loud so it can be evaluated"],
                tone_confidence_rating="N/A",
            )

        if self.llm_client:
            prompt = self.prompts.analyze_answer_prompt(question_text, answer, category, difficulty)
            try:
                data = await self.llm_client.complete_json(
                    prompt,
                    temperature=0.3,
                    trace_name="answer_feedback",
                )
                return self._parse_feedback(data)
            except (LLMError, ValidationError, TypeError, ValueError) as e:
                logger.error(f"Answer analysis failed, using heuristic feedback: {e}")

        return self._heuristic_feedback(answer)

    def _parse_feedback(self, data: Any) -> AnswerFeedback:
        if not isinstance(data, dict):
            raise TypeError("Feedback response is not a JSON object")
        score = int(round(float(data.get("score", 0))))
        return AnswerFeedback(
            score=max(0, min(100, score)),
            feedback=str(data.get("feedback") or "Feedback generated."),
            strengths=[str(s) for s in data.get("strengths") or []],
            improvements=[str(s) for s in data.get("improvements") or []],
            tone_confidence_rating=str(data.get("tone_confidence_rating") or "Average"),
        )

    def _heuristic_feedback(self, answer: str) -> AnswerFeedback:
        """Approximate feedback from answer length and structure."""
        words = answer.split()
        word_count = len(words)
        sentence_count = answer.count(".") + answer.count("?") + answer.count("!")

        # Base score on response length, capped for very long answers
        base_score = min(70, max(20, word_count // 2))
        structure_bonus = 10 if sentence_count >= 3 else 0
        example_bonus = 10 if any(w.lower() in ("example", "instance", "project") for w in words) else 0
        score = min(90, base_score + structure_bonus + example_bonus)

        strengths = ["Answer provided"]
        improvements = []
        if word_count < 40:
            improvements.append("Give a longer, more detailed answer")
        if not example_bonus:
            improvements.append("Support your answer with a concrete example")
        if not structure_bonus:
            improvements.append("Structure the answer into clear points")

        return AnswerFeedback(
            score=score,
            feedback="Detailed AI feedback is unavailable right now. This is an estimate based on your answer's length and structure.",
            strengths=strengths,
            improvements=improvements,
            tone_confidence_rating="Average",
        )

    def skipped_feedback(self) -> AnswerFeedback:
        """Feedback stored for a skipped question."""
        return AnswerFeedback(
            score=0,
            feedback="Question was skipped by the user.",
            strengths=[],
            improvements=[],
            tone_confidence_rating="N/A",
        )

    @staticmethod
    def calculate_overall_score(responses: Iterable[dict[str, Any]]) -> int:
        """Rounded mean of individual scores; skipped answers count as 0."""
        scores = [float(r.get("individual_score") or 0) for r in responses]
        if not scores:
            return 0
        return round(sum(scores) / len(scores))
