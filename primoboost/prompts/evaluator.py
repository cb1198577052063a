"""
AI Evaluator Prompt Templates

Contains the prompt used to score a single mock-interview answer and
produce candidate-facing feedback.
"""


class EvaluatorPrompts:
    """
    Prompt templates for AI evaluation of answers.

    Key principles:
    - Score on a 0-100 scale
    - Name concrete strengths and improvements
    - Comment on tone and confidence, not just content
    """

    SYSTEM_CONTEXT = """You are an experienced interviewer giving feedback on a mock-interview answer.
Be encouraging but honest. Feedback is shown directly to the candidate."""

    SCORING_GUIDE = """
=== SCORING GUIDE (0-100) ===
- 85-100: Complete, well-structured, specific examples, confident delivery
- 70-84: Solid answer with minor gaps
- 50-69: Partially answers the question, lacks depth or structure
- 25-49: Vague or largely off-topic
- 0-24: No meaningful answer
"""

    def analyze_answer_prompt(
        self,
        question_text: str,
        answer: str,
        category: str,
        difficulty: str,
    ) -> str:
        """Prompt for scoring one answer."""
        return f"""{self.SYSTEM_CONTEXT}

Question ({category}, {difficulty}):
{question_text}

Candidate's Answer:
{answer}
{self.SCORING_GUIDE}
Respond with ONLY a JSON object:
{{
  "score": 0-100,
  "feedback": "2-3 sentences of overall feedback",
  "strengths": ["strength1", "strength2"],
  "improvements": ["improvement1", "improvement2"],
  "tone_confidence_rating": "Excellent|Good|Average|Needs Improvement"
}}"""
