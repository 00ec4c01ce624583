# ent_prep/schemas/auth_schemas.py
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from .test_schemas import TestAttempt

REGISTRATION_REQUIREMENTS = {
    "username": "Must be between 3-30 characters",
    "password": "Must be between 6-100 characters",
    "email": "Must be a valid email address",
}


class UserRegister(BaseModel):
    username: str = Field(min_length=3, max_length=30)
    password: str = Field(min_length=6, max_length=100)
    fullName: str = Field(min_length=1)
    email: EmailStr


class UserLogin(BaseModel):
    username: str
    password: str


class User(BaseModel):
    id: int
    username: str
    fullName: str
    email: str
    testHistory: List[TestAttempt] = []
    token: Optional[str] = None
