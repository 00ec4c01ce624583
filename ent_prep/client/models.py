# ent_prep/client/models.py
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..schemas.test_schemas import Test, TestAttempt, PerformanceSummary

QUESTIONS_PER_TEST = 10


class ApiServiceConfig(BaseModel):
    useBackend: bool


class ApiConfig(BaseModel):
    auth: ApiServiceConfig = Field(default_factory=lambda: ApiServiceConfig(useBackend=True))
    tests: ApiServiceConfig = Field(default_factory=lambda: ApiServiceConfig(useBackend=False))
    aiHelper: ApiServiceConfig = Field(default_factory=lambda: ApiServiceConfig(useBackend=False))


class StoredUser(BaseModel):
    """The logged-in user blob kept in device storage."""
    id: int
    username: str
    fullName: str
    email: str
    testHistory: List[TestAttempt] = []
    token: Optional[str] = None
    password: Optional[str] = None  # only present for bundled demo users


class TestResult(TestAttempt):
    """A locally recorded attempt; ``totalQuestions`` defaults to the answer count."""
    questionIds: Optional[List[int]] = None

    @model_validator(mode="before")
    @classmethod
    def fill_total_questions(cls, data):
        if isinstance(data, dict) and data.get("totalQuestions") is None:
            data = {**data, "totalQuestions": len(data.get("answers") or []) or QUESTIONS_PER_TEST}
        return data


class Dashboard(BaseModel):
    tests: List[Test]
    performance: PerformanceSummary
