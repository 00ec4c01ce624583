# ent_prep/client/feedback.py
import logging

from pydantic import ValidationError

from ..schemas.feedback_schemas import Feedback
from ..services.feedback_service import build_feedback
from .api import ApiClient, ApiError
from .auth import AuthGateway
from .config import FeatureFlags
from .tests import TestGateway

logger = logging.getLogger(__name__)

UNAVAILABLE_FEEDBACK = Feedback(
    overview="Could not reach the AI helper. Please try again later.",
    strengths=[],
    weaknesses=[],
    recommendations=["Check your internet connection."],
)


class FeedbackGateway:
    def __init__(self, api: ApiClient, flags: FeatureFlags, auth: AuthGateway, tests: TestGateway):
        self.api = api
        self.flags = flags
        self.auth = auth
        self.tests = tests

    async def generate_feedback(self) -> Feedback:
        config = await self.flags.get()

        if config.aiHelper.useBackend:
            try:
                return Feedback.model_validate(await self.api.call("/ai/feedback", "POST"))
            except (ApiError, ValidationError) as e:
                logger.error(f"Generate AI feedback error: {e}")
                return UNAVAILABLE_FEEDBACK.model_copy(deep=True)

        user = await self.auth.get_current_user()
        if user is None:
            return build_feedback([], [])
        catalog = await self.tests.get_tests()
        return build_feedback(user.testHistory, catalog, full_name=user.fullName)
