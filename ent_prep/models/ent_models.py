# ent_prep/models/ent_models.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, ForeignKey, JSON, Text, DateTime
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow():
    return datetime.now(timezone.utc)


class DBUser(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(30), nullable=False, unique=True, index=True)
    password = Column(String(100), nullable=False)  # bcrypt hash
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False, unique=True, index=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    test_history = relationship(
        "DBTestAttempt",
        back_populates="user",
        order_by="DBTestAttempt.id",
    )


class DBTest(Base):
    __tablename__ = "tests"

    id = Column(Integer, primary_key=True, autoincrement=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    questions = relationship(
        "DBQuestion",
        back_populates="test",
        cascade="all, delete-orphan",
        order_by="DBQuestion.id",
    )


class DBQuestion(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=False)
    test_id = Column(Integer, ForeignKey("tests.id"))
    text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # ordered option strings
    correct_answer = Column(Integer, nullable=False)  # index into options

    test = relationship("DBTest", back_populates="questions")


class DBTestAttempt(Base):
    __tablename__ = "test_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    test_id = Column(Integer, nullable=False, index=True)
    date = Column(String, nullable=False)
    score = Column(Float, nullable=False)
    total_questions = Column(Integer, nullable=False)
    answers = Column(JSON, default=list)
    created_at = Column(DateTime, default=_utcnow)

    user = relationship("DBUser", back_populates="test_history")
