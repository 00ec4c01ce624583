# ent_prep/services/analytics.py
"""Per-subject and overall score aggregation over test attempts.

Attempts and tests are read by attribute (``testId``, ``score``,
``totalQuestions`` / ``id``, ``title``), so both the API schemas and the
client's cached records can be passed in directly.
"""
from typing import Dict, Iterable, List, Optional, Sequence

from ..schemas.feedback_schemas import SubjectPerformance
from ..schemas.test_schemas import PerformanceSummary, WeakArea

WEAKEST_AREAS_LIMIT = 3


def _ratio(score: float, total: int) -> float:
    return score / total if total > 0 else 0.0


def filter_attempts(attempts: Iterable, test_ids: Optional[Iterable[int]] = None) -> list:
    attempts = list(attempts)
    if test_ids is None:
        return attempts
    wanted = set(test_ids)
    return [a for a in attempts if a.testId in wanted]


def subject_performance(attempts: Iterable, tests: Sequence) -> List[SubjectPerformance]:
    """Group attempts by test id, in order of first appearance.

    Subjects with no attempts never appear; attempts for tests missing from
    the catalog are dropped.
    """
    titles = {t.id: t.title for t in tests}
    groups: Dict[int, Dict[str, float]] = {}
    for attempt in attempts:
        group = groups.setdefault(attempt.testId, {"score": 0.0, "total": 0, "count": 0})
        group["score"] += attempt.score
        group["total"] += attempt.totalQuestions
        group["count"] += 1

    performance = []
    for test_id, group in groups.items():
        if test_id not in titles:
            continue
        performance.append(SubjectPerformance(
            testId=test_id,
            title=titles[test_id],
            totalScore=group["score"],
            totalQuestions=int(group["total"]),
            attempts=int(group["count"]),
            averageScore=_ratio(group["score"], int(group["total"])),
        ))
    return performance


def overall_ratio(attempts: Iterable) -> float:
    score = 0.0
    total = 0
    for attempt in attempts:
        score += attempt.score
        total += attempt.totalQuestions
    return _ratio(score, total)


def summarize_performance(
    attempts: Iterable,
    tests: Sequence,
    test_ids: Optional[Iterable[int]] = None,
    limit: int = WEAKEST_AREAS_LIMIT,
) -> PerformanceSummary:
    attempts = filter_attempts(attempts, test_ids)
    if not attempts:
        return PerformanceSummary(totalTests=0, averageScore=0, weakestAreas=[])

    # sorted() is stable, so ties keep first-appearance order
    ranked = sorted(subject_performance(attempts, tests), key=lambda s: s.averageScore)
    weakest = [
        WeakArea(testId=s.testId, title=s.title, averageScore=s.averageScore)
        for s in ranked[:limit]
    ]
    return PerformanceSummary(
        totalTests=len(attempts),
        averageScore=overall_ratio(attempts),
        weakestAreas=weakest,
    )
