# ent_prep/schemas/feedback_schemas.py
from typing import List, Optional

from pydantic import BaseModel


class SubjectPerformance(BaseModel):
    testId: int
    title: str
    totalScore: float
    totalQuestions: int
    attempts: int
    averageScore: float  # ratio in [0, 1]

    @property
    def percentageScore(self) -> float:
        return self.averageScore * 100


class Feedback(BaseModel):
    overview: str
    strengths: List[str]
    weaknesses: List[str]
    recommendations: List[str]
    detailedOverview: Optional[str] = None
