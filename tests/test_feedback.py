from types import SimpleNamespace

import pytest

from ent_prep.routers.ai_router import get_feedback_service
from ent_prep.schemas.test_schemas import Test, TestAttempt
from ent_prep.services.feedback_service import (
    NO_DATA_OVERVIEW,
    FeedbackService,
    build_feedback,
    overview_for,
)

CATALOG = [
    Test(id=1, title="History", description="h"),
    Test(id=2, title="Maths", description="m"),
    Test(id=3, title="Physics", description="p"),
]


def attempt(test_id, score, total):
    return TestAttempt(testId=test_id, score=score, totalQuestions=total, date="2025-05-20")


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_llm(content=None, error=None):
    return SimpleNamespace(chat=SimpleNamespace(completions=FakeCompletions(content, error)))


@pytest.mark.parametrize("percentage, phrase", [
    (30, "still developing"),
    (55, "good progress"),
    (80, "performing well"),
    (95, "Excellent work"),
])
def test_overview_bands(percentage, phrase):
    assert phrase in overview_for(percentage)
    assert overview_for(percentage).startswith(f"Your average score is {percentage:.2f}%.")


def test_overview_band_edges():
    assert "good progress" in overview_for(50)
    assert "performing well" in overview_for(70)
    assert "Excellent work" in overview_for(90)


def test_overview_names_user():
    assert overview_for(95, "Aruzhan").startswith("Aruzhan, your average score is 95.00%.")


def test_no_attempts_gives_no_data_feedback():
    feedback = build_feedback([], CATALOG)

    assert feedback.overview == NO_DATA_OVERVIEW
    assert feedback.strengths == []
    assert feedback.weaknesses == []
    assert len(feedback.recommendations) == 1


def test_strengths_and_weaknesses_split_on_threshold():
    attempts = [attempt(1, 9, 10), attempt(2, 2, 10), attempt(3, 7, 10)]

    feedback = build_feedback(attempts, CATALOG)

    assert feedback.strengths == ["History: 90.0% (9/10)", "Physics: 70.0% (7/10)"]
    assert feedback.weaknesses == ["Maths: 20.0% (2/10)"]
    assert feedback.recommendations[-1] == "Dedicate more study time to Maths."
    # overall 18/30
    assert "60.00%" in feedback.overview


def test_low_band_recommendations():
    feedback = build_feedback([attempt(2, 1, 10)], CATALOG)

    assert feedback.recommendations[0].startswith("Focus on improving your basic understanding")
    assert feedback.strengths == []


def test_service_adds_detailed_overview_from_llm(db_session, seeded, client, auth_headers):
    llm = fake_llm(content="  Keep going!  ")
    client.post(
        "/auth/test-history",
        json={"testId": 1, "date": "d", "score": 3, "totalQuestions": 4},
        headers=auth_headers,
    )
    client.app.dependency_overrides[get_feedback_service] = lambda: FeedbackService(db_session, llm_client=llm)

    body = client.post("/ai/feedback", headers=auth_headers).json()

    assert body["detailedOverview"] == "Keep going!"
    assert body["strengths"] == ["History of Kazakhstan: 75.0% (3/4)"]
    assert len(llm.chat.completions.calls) == 1


def test_service_ignores_llm_failure(db_session, seeded, client, auth_headers):
    llm = fake_llm(error=RuntimeError("quota exceeded"))
    client.post(
        "/auth/test-history",
        json={"testId": 1, "date": "d", "score": 1, "totalQuestions": 4},
        headers=auth_headers,
    )
    client.app.dependency_overrides[get_feedback_service] = lambda: FeedbackService(db_session, llm_client=llm)

    response = client.post("/ai/feedback", headers=auth_headers)

    assert response.status_code == 200
    assert "detailedOverview" not in response.json()
    assert response.json()["weaknesses"] == ["History of Kazakhstan: 25.0% (1/4)"]


def test_feedback_endpoint_without_attempts(client, seeded, auth_headers):
    body = client.post("/ai/feedback", headers=auth_headers).json()

    assert body["overview"] == NO_DATA_OVERVIEW


def test_feedback_endpoint_without_tests(client, auth_headers):
    response = client.post("/ai/feedback", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "No tests found"}


def test_attempts_only_for_unknown_tests_give_no_data_feedback():
    feedback = build_feedback([attempt(99, 1, 10)], CATALOG)

    assert feedback.overview == NO_DATA_OVERVIEW
    assert feedback.strengths == []
    assert feedback.weaknesses == []
