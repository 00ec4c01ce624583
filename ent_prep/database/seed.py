# ent_prep/database/seed.py
import logging

from sqlalchemy.orm import Session

from ..fixtures import load_bundled_tests
from ..services.test_service import TestService

logger = logging.getLogger(__name__)


def seed_tests(db: Session) -> int:
    """Load the bundled subject tests into an empty or partial catalog."""
    added = TestService(db).add_tests(load_bundled_tests())
    if added:
        logger.info(f"Seeded {added} tests from bundled fixtures")
    return added
