import pytest

from conftest import register
from ent_prep.schemas.test_schemas import Test, TestAttempt, TestHistoryEntry, TestSubmission
from ent_prep.services.test_service import TestService


def add_history(client, headers, test_id, score, total, date="2025-05-20"):
    entry = {"testId": test_id, "date": date, "score": score, "totalQuestions": total}
    response = client.post("/auth/test-history", json=entry, headers=headers)
    assert response.status_code == 200


def test_tests_require_auth(client, seeded):
    assert client.get("/tests").status_code == 401


def test_get_tests_ordered_with_questions(client, seeded, auth_headers):
    response = client.get("/tests", headers=auth_headers)

    assert response.status_code == 200
    tests = response.json()
    assert [t["id"] for t in tests] == [1, 2, 3, 4, 5]
    assert tests[0]["title"] == "History of Kazakhstan"
    assert [q["id"] for q in tests[0]["questions"]] == [101, 102, 103, 104]
    assert tests[0]["questions"][0]["correctAnswer"] == 2


def test_get_test_by_id(client, seeded, auth_headers):
    response = client.get("/tests/4", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["title"] == "Physics"


def test_get_missing_test_is_404(client, seeded, auth_headers):
    response = client.get("/tests/999", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Test not found"}


def test_submit_then_fetch_results(client, seeded, auth_headers):
    submission = {"testId": 2, "score": 7, "answers": [0, 1, 2, 3, 0, 1, 2, 3, 0, 1], "date": "2025-05-20"}

    response = client.post("/tests/results", json=submission, headers=auth_headers)
    assert response.json() == {"success": True}

    results = client.get("/tests/results", headers=auth_headers).json()
    assert len(results) == 1
    assert results[0]["testId"] == 2
    assert results[0]["score"] == 7
    assert results[0]["totalQuestions"] == 10
    assert results[0]["answers"] == submission["answers"]


def test_submit_for_missing_test_is_404(client, seeded, auth_headers):
    submission = {"testId": 42, "score": 1, "answers": [0], "date": "2025-05-20"}

    response = client.post("/tests/results", json=submission, headers=auth_headers)

    assert response.status_code == 404


def test_submit_rejects_score_above_answer_count(client, seeded, auth_headers):
    submission = {"testId": 1, "score": 3, "answers": [0, 1], "date": "2025-05-20"}

    response = client.post("/tests/results", json=submission, headers=auth_headers)

    assert response.status_code == 400
    assert client.get("/tests/results", headers=auth_headers).json() == []


def test_submit_without_answers_uses_test_length(client, seeded, auth_headers):
    submission = {"testId": 1, "score": 3, "date": "2025-05-20"}

    client.post("/tests/results", json=submission, headers=auth_headers)

    results = client.get("/tests/results", headers=auth_headers).json()
    assert results[0]["totalQuestions"] == 4


def test_submit_with_question_ids_recomputes_score(client, seeded, auth_headers):
    # 101 -> correct 2, 102 -> correct 1
    submission = {"testId": 1, "score": 2, "answers": [2, 0], "questionIds": [101, 102], "date": "2025-05-20"}

    response = client.post("/tests/results", json=submission, headers=auth_headers)
    assert response.status_code == 200

    result = client.get("/tests/results", headers=auth_headers).json()[0]
    assert result["score"] == 1
    assert result["totalQuestions"] == 2


def test_submit_with_foreign_question_ids_is_rejected(client, seeded, auth_headers):
    submission = {"testId": 1, "score": 1, "answers": [1], "questionIds": [201], "date": "2025-05-20"}

    response = client.post("/tests/results", json=submission, headers=auth_headers)

    assert response.status_code == 400


def test_results_are_newest_first_and_filter_by_test(client, seeded, auth_headers):
    add_history(client, auth_headers, 1, 2, 4, date="first")
    add_history(client, auth_headers, 2, 3, 4, date="second")
    add_history(client, auth_headers, 1, 4, 4, date="third")

    all_results = client.get("/tests/results", headers=auth_headers).json()
    assert [r["date"] for r in all_results] == ["third", "second", "first"]

    by_test = client.get("/tests/1/results", headers=auth_headers).json()
    assert [r["date"] for r in by_test] == ["third", "first"]


def test_results_are_scoped_to_user(client, seeded, auth_headers):
    add_history(client, auth_headers, 1, 2, 4)
    other = register(client, username="other", email="other@example.com").json()
    other_headers = {"Authorization": f"Bearer {other['token']}"}

    assert client.get("/tests/results", headers=other_headers).json() == []


def test_performance_with_no_attempts(client, seeded, auth_headers):
    response = client.get("/tests/performance", headers=auth_headers)

    assert response.json() == {"totalTests": 0, "averageScore": 0, "weakestAreas": []}


def test_performance_aggregates_by_subject(client, seeded, auth_headers):
    add_history(client, auth_headers, 1, 8, 10)
    add_history(client, auth_headers, 1, 6, 10)
    add_history(client, auth_headers, 2, 2, 10)

    body = client.get("/tests/performance", headers=auth_headers).json()

    assert body["totalTests"] == 3
    assert body["averageScore"] == pytest.approx(16 / 30)
    weakest = body["weakestAreas"]
    assert [w["testId"] for w in weakest] == [2, 1]
    assert weakest[0]["title"] == "Mathematical Literacy"
    assert weakest[0]["averageScore"] == pytest.approx(0.2)
    assert weakest[1]["averageScore"] == pytest.approx(0.7)


def test_performance_filters_by_test_ids(client, seeded, auth_headers):
    add_history(client, auth_headers, 1, 8, 10)
    add_history(client, auth_headers, 2, 2, 10)
    add_history(client, auth_headers, 3, 5, 10)

    body = client.get("/tests/performance?testIds=1,3", headers=auth_headers).json()

    assert body["totalTests"] == 2
    assert {w["testId"] for w in body["weakestAreas"]} == {1, 3}


def test_performance_rejects_malformed_test_ids(client, seeded, auth_headers):
    response = client.get("/tests/performance?testIds=1,abc", headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_get_test_failure_is_server_error(client, seeded, auth_headers, monkeypatch):
    def broken(self, test_id):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(TestService, "get_test", broken)

    response = client.get("/tests/1", headers=auth_headers)

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error"}


def test_test_named_classes_are_not_collected():
    for cls in (Test, TestAttempt, TestHistoryEntry, TestSubmission, TestService):
        assert cls.__test__ is False
