# ent_prep/client/tests.py
import asyncio
import logging
import random
from typing import List, Optional, Sequence

from pydantic import TypeAdapter, ValidationError

from ..fixtures import load_bundled_tests
from ..schemas.test_schemas import PerformanceSummary, Test, TestAttempt
from ..services.analytics import summarize_performance
from .api import ApiClient, ApiError
from .auth import AuthGateway
from .config import FeatureFlags
from .models import QUESTIONS_PER_TEST, Dashboard, StoredUser, TestResult
from .storage import (
    TEST_RESULTS_KEY,
    USER_STORAGE_KEY,
    KeyValueStorage,
    read_json_model,
    write_json_model,
)

logger = logging.getLogger(__name__)

_tests_adapter = TypeAdapter(List[Test])
_results_adapter = TypeAdapter(List[TestResult])


class TestGateway:
    """Subject tests and attempt records, from the backend or bundled data."""

    __test__ = False

    def __init__(
        self,
        api: ApiClient,
        storage: KeyValueStorage,
        flags: FeatureFlags,
        auth: AuthGateway,
        rng: Optional[random.Random] = None,
    ):
        self.api = api
        self.storage = storage
        self.flags = flags
        self.auth = auth
        self.rng = rng or random.Random()

    def _with_random_questions(self, test: Test, count: int = QUESTIONS_PER_TEST) -> Test:
        questions = self.rng.sample(test.questions, k=min(count, len(test.questions)))
        return test.model_copy(update={"questions": questions})

    async def get_tests(self) -> List[Test]:
        config = await self.flags.get()
        if config.tests.useBackend:
            try:
                return _tests_adapter.validate_python(await self.api.call("/tests"))
            except (ApiError, ValidationError) as e:
                logger.error(f"API call failed in get_tests, falling back to local data: {e}")
        return load_bundled_tests()

    async def get_test_by_id(self, test_id: int) -> Optional[Test]:
        """The test with a random selection of at most QUESTIONS_PER_TEST questions."""
        config = await self.flags.get()
        if config.tests.useBackend:
            try:
                test = Test.model_validate(await self.api.call(f"/tests/{test_id}"))
                return self._with_random_questions(test)
            except ApiError as e:
                if e.status_code == 404:
                    return None
                logger.error(f"API call failed in get_test_by_id({test_id}), falling back to local data: {e}")
            except ValidationError as e:
                logger.error(f"Malformed test {test_id} from API, falling back to local data: {e}")

        test = next((t for t in load_bundled_tests() if t.id == test_id), None)
        return self._with_random_questions(test) if test else None

    async def _local_results(self) -> List[TestResult]:
        return await read_json_model(self.storage, TEST_RESULTS_KEY, List[TestResult]) or []

    async def save_test_result(self, result: TestResult) -> bool:
        """Always keep a local copy; post to the backend when enabled."""
        config = await self.flags.get()

        saved_locally = True
        try:
            results = await self._local_results()
            results.append(result)
            await write_json_model(self.storage, TEST_RESULTS_KEY, results, List[TestResult])
        except OSError as e:
            logger.error(f"Error saving test result locally: {e}")
            saved_locally = False

        if config.tests.useBackend:
            body = result.model_dump(include={"testId", "score", "answers", "date", "questionIds"}, exclude_none=True)
            try:
                await self.api.call("/tests/results", "POST", json=body)
            except ApiError as e:
                logger.error(f"API call failed in save_test_result: {e}")
                return saved_locally
            return True
        return saved_locally

    async def get_test_results(self) -> List[TestAttempt]:
        config = await self.flags.get()
        if config.tests.useBackend:
            try:
                return _results_adapter.validate_python(await self.api.call("/tests/results"))
            except (ApiError, ValidationError) as e:
                logger.error(f"API call failed in get_test_results, falling back to local storage: {e}")
        return await self._local_results()

    async def get_test_results_by_test_id(self, test_id: int) -> List[TestAttempt]:
        config = await self.flags.get()
        if config.tests.useBackend:
            try:
                return _results_adapter.validate_python(await self.api.call(f"/tests/{test_id}/results"))
            except (ApiError, ValidationError) as e:
                logger.error(f"Get test results by test ID error: {e}")
        return [r for r in await self._local_results() if r.testId == test_id]

    async def analyze_performance(self, test_ids: Optional[Sequence[int]] = None) -> PerformanceSummary:
        config = await self.flags.get()
        if config.tests.useBackend:
            params = {"testIds": ",".join(str(i) for i in test_ids)} if test_ids else None
            try:
                return PerformanceSummary.model_validate(
                    await self.api.call("/tests/performance", params=params)
                )
            except (ApiError, ValidationError) as e:
                logger.error(f"Analyze performance API error, using local results: {e}")

        results = await self._local_results()
        return summarize_performance(results, load_bundled_tests(), test_ids=test_ids)

    async def load_dashboard(self, test_ids: Optional[Sequence[int]] = None) -> Dashboard:
        """Fetch the catalog and the performance summary concurrently."""
        tests, performance = await asyncio.gather(
            self.get_tests(),
            self.analyze_performance(test_ids),
        )
        return Dashboard(tests=tests, performance=performance)

    async def synchronize_test_data(self) -> bool:
        """Copy locally stored results into the cached user's history."""
        user = await self.auth.get_current_user()
        if user is None:
            return False

        results = await self._local_results()
        seen = {f"{h.testId}:{h.date}" for h in user.testHistory}
        added = []
        for result in results:
            key = f"{result.testId}:{result.date}"
            if key in seen:
                continue
            added.append(TestAttempt(
                testId=result.testId,
                date=result.date,
                score=result.score,
                totalQuestions=result.totalQuestions,
            ))
            seen.add(key)

        if added:
            try:
                user.testHistory.extend(added)
                await write_json_model(self.storage, USER_STORAGE_KEY, user, StoredUser)
            except OSError as e:
                logger.error(f"Error synchronizing test data: {e}")
                return False
        return True
