# ent_prep/services/feedback_service.py
from typing import List, Optional, Sequence
import logging

from openai import OpenAI
from sqlalchemy.orm import Session

from ..core.config import get_settings
from ..models.ent_models import DBTestAttempt, DBUser
from ..schemas.feedback_schemas import Feedback, SubjectPerformance
from .analytics import overall_ratio, subject_performance
from .auth_service import attempt_from_db
from .errors import NotFoundError
from .test_service import TestService

logger = logging.getLogger(__name__)

FEEDBACK_AREAS_LIMIT = 3
STRENGTH_THRESHOLD = 60.0

NO_DATA_OVERVIEW = "You haven't taken any tests yet. Start practicing to get personalized feedback!"
NO_DATA_RECOMMENDATION = "Begin by taking a few tests to establish your baseline knowledge."


def overview_for(average_percentage: float, full_name: Optional[str] = None) -> str:
    """Pick the overview sentence for an average-score band."""
    if average_percentage < 50:
        tail = ("You're still developing your knowledge in many areas. "
                "Focus on building a strong foundation in the basics.")
    elif average_percentage < 70:
        tail = "You're showing good progress but have room for improvement in several areas."
    elif average_percentage < 90:
        tail = ("You're performing well across most tests with a few areas "
                "that could use additional focus.")
    else:
        tail = "Excellent work! You're demonstrating mastery across most subject areas."

    overview = f"Your average score is {average_percentage:.2f}%. {tail}"
    if full_name:
        overview = f"{full_name}, your average score is {average_percentage:.2f}%. {tail}"
    return overview


def recommendations_for(average_percentage: float, weaknesses: Sequence[SubjectPerformance]) -> List[str]:
    if average_percentage < 50:
        recommendations = [
            "Focus on improving your basic understanding in the weak areas.",
            "Consider reviewing foundational concepts before proceeding to more complex topics.",
        ]
    elif average_percentage < 70:
        recommendations = [
            "Continue practicing in your weaker areas to strengthen your knowledge.",
            "Try more varied test types to broaden your understanding.",
        ]
    else:
        recommendations = [
            "Challenge yourself with more difficult tests to further enhance your skills.",
            "Consider helping others or explaining concepts to solidify your understanding.",
        ]
    recommendations.extend(f"Dedicate more study time to {area.title}." for area in weaknesses)
    return recommendations


def format_subject(subject: SubjectPerformance) -> str:
    return (f"{subject.title}: {subject.percentageScore:.1f}% "
            f"({subject.totalScore:g}/{subject.totalQuestions})")


def build_feedback(
    attempts: Sequence,
    tests: Sequence,
    full_name: Optional[str] = None,
    limit: int = FEEDBACK_AREAS_LIMIT,
    threshold: float = STRENGTH_THRESHOLD,
) -> Feedback:
    """Deterministic feedback over a user's attempts."""
    attempts = list(attempts)
    subjects = subject_performance(attempts, tests)
    # attempts for tests missing from the catalog do not count as data
    if not subjects:
        return Feedback(
            overview=NO_DATA_OVERVIEW,
            strengths=[],
            weaknesses=[],
            recommendations=[NO_DATA_RECOMMENDATION],
        )

    average_percentage = overall_ratio(attempts) * 100

    best_first = sorted(subjects, key=lambda s: s.averageScore, reverse=True)
    strengths = [s for s in best_first[:limit] if s.percentageScore >= threshold]
    worst_first = sorted(subjects, key=lambda s: s.averageScore)
    weaknesses = [s for s in worst_first[:limit] if s.percentageScore < threshold]

    return Feedback(
        overview=overview_for(average_percentage, full_name),
        strengths=[format_subject(s) for s in strengths],
        weaknesses=[format_subject(s) for s in weaknesses],
        recommendations=recommendations_for(average_percentage, weaknesses),
    )


def get_llm_client() -> Optional[OpenAI]:
    api_key = get_settings().OPENAI_API_KEY
    if not api_key:
        return None
    return OpenAI(api_key=api_key)


class FeedbackService:
    def __init__(self, db: Session, llm_client: Optional[OpenAI] = None, model: Optional[str] = None):
        self.db = db
        self.client = llm_client
        self.model = model or get_settings().OPENAI_MODEL

    def _generate_detailed_overview(self, feedback: Feedback) -> Optional[str]:
        """Ask the LLM for a short narrative; None when unavailable or failing."""
        if self.client is None:
            return None

        prompt = f"""A student preparing for the Unified National Testing (ENT) has these results:

Overview: {feedback.overview}
Strong subjects:
{chr(10).join(f"- {s}" for s in feedback.strengths) or "- none yet"}
Weak subjects:
{chr(10).join(f"- {w}" for w in feedback.weaknesses) or "- none yet"}

Write 3-4 encouraging sentences with concrete study advice. Do not invent scores."""

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": "You are a supportive exam preparation tutor."},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.5,
                max_tokens=300,
            )
            content = response.choices[0].message.content
            return content.strip() if content else None
        except Exception as e:
            logger.error(f"Error generating detailed overview: {str(e)}")
            return None

    def generate(self, user: DBUser) -> Feedback:
        tests = TestService(self.db).list_tests()
        if not tests:
            raise NotFoundError("No tests found")

        rows = (
            self.db.query(DBTestAttempt)
            .filter(DBTestAttempt.user_id == user.id)
            .order_by(DBTestAttempt.id.asc())
            .all()
        )
        attempts = [attempt_from_db(a) for a in rows]

        feedback = build_feedback(attempts, tests, full_name=user.full_name)
        if attempts:
            feedback.detailedOverview = self._generate_detailed_overview(feedback)
        return feedback
