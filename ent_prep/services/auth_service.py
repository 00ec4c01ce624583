# ent_prep/services/auth_service.py
import logging
from typing import List

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.security import create_token, hash_password, verify_password
from ..models.ent_models import DBTestAttempt, DBUser
from ..schemas.auth_schemas import User, UserLogin, UserRegister
from ..schemas.test_schemas import TestAttempt, TestHistoryEntry
from .errors import DuplicateUserError, InvalidCredentialsError

logger = logging.getLogger(__name__)


def attempt_from_db(db_attempt: DBTestAttempt) -> TestAttempt:
    return TestAttempt(
        id=db_attempt.id,
        testId=db_attempt.test_id,
        date=db_attempt.date,
        score=db_attempt.score,
        totalQuestions=db_attempt.total_questions,
        answers=db_attempt.answers or [],
    )


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _convert_from_db_model(self, db_user: DBUser, with_token: bool = False) -> User:
        """Convert database model to API model"""
        history: List[TestAttempt] = [attempt_from_db(a) for a in db_user.test_history]
        return User(
            id=db_user.id,
            username=db_user.username,
            fullName=db_user.full_name,
            email=db_user.email,
            testHistory=history,
            token=create_token(db_user.id) if with_token else None,
        )

    def register(self, payload: UserRegister) -> User:
        """Create a user; username and email must both be unused."""
        existing = self.db.query(DBUser).filter(
            or_(DBUser.email == payload.email, DBUser.username == payload.username)
        ).first()
        if existing:
            raise DuplicateUserError("User already exists")

        db_user = DBUser(
            username=payload.username,
            password=hash_password(payload.password),
            full_name=payload.fullName,
            email=payload.email,
        )
        try:
            self.db.add(db_user)
            self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent registration
            self.db.rollback()
            logger.warning(f"Duplicate registration for {payload.username}")
            raise DuplicateUserError("User already exists")
        except Exception as e:
            logger.error(f"Error creating user {payload.username}: {str(e)}")
            self.db.rollback()
            raise
        self.db.refresh(db_user)

        logger.info(f"Registered user {db_user.id} ({db_user.username})")
        return self._convert_from_db_model(db_user, with_token=True)

    def login(self, payload: UserLogin) -> User:
        db_user = self.db.query(DBUser).filter(DBUser.username == payload.username).first()
        if not db_user or not verify_password(payload.password, db_user.password):
            raise InvalidCredentialsError("Invalid username or password")
        return self._convert_from_db_model(db_user, with_token=True)

    def get_profile(self, db_user: DBUser) -> User:
        return self._convert_from_db_model(db_user)

    def add_test_history(self, db_user: DBUser, entry: TestHistoryEntry) -> TestAttempt:
        db_attempt = DBTestAttempt(
            user_id=db_user.id,
            test_id=entry.testId,
            date=entry.date,
            score=entry.score,
            total_questions=entry.totalQuestions,
            answers=entry.answers,
        )
        try:
            self.db.add(db_attempt)
            self.db.commit()
        except Exception as e:
            logger.error(f"Error adding test history for user {db_user.id}: {str(e)}")
            self.db.rollback()
            raise
        self.db.refresh(db_attempt)
        return attempt_from_db(db_attempt)
