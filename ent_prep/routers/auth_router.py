# ent_prep/routers/auth_router.py
from fastapi import APIRouter, HTTPException, Depends, status
import logging
from sqlalchemy.orm import Session

from ..core.security import get_current_user
from ..database.database import get_db
from ..models.ent_models import DBUser
from ..schemas.auth_schemas import User, UserLogin, UserRegister
from ..schemas.test_schemas import SuccessResponse, TestHistoryEntry
from ..services.auth_service import AuthService
from ..services.errors import DuplicateUserError, InvalidCredentialsError

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=User, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserRegister, db: Session = Depends(get_db)) -> User:
    """Register a new user and return it with a session token."""
    try:
        user = AuthService(db).register(payload)
        logger.info(f"Registered user with ID: {user.id}")
        return user
    except DuplicateUserError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error in register_user: {str(e)}")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/login", response_model=User)
async def login_user(payload: UserLogin, db: Session = Depends(get_db)) -> User:
    """Authenticate by username and password."""
    try:
        return AuthService(db).login(payload)
    except InvalidCredentialsError as e:
        logger.info(f"Failed login for username: {payload.username}")
        raise HTTPException(status_code=401, detail=str(e))
    except Exception as e:
        logger.error(f"Error in login_user: {str(e)}")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/logout", response_model=SuccessResponse)
async def logout_user(user: DBUser = Depends(get_current_user)) -> SuccessResponse:
    # Tokens are stateless; the client drops its copy.
    return SuccessResponse()


@router.get("/current-user", response_model=User, response_model_exclude_none=True)
async def get_current_user_profile(
    user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    try:
        return AuthService(db).get_profile(user)
    except Exception as e:
        logger.error(f"Error in get_current_user_profile: {str(e)}")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/test-history", response_model=SuccessResponse)
async def add_test_history(
    entry: TestHistoryEntry,
    user: DBUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SuccessResponse:
    """Append a completed attempt to the acting user's history."""
    try:
        AuthService(db).add_test_history(user, entry)
        return SuccessResponse()
    except Exception as e:
        logger.error(f"Error in add_test_history: {str(e)}")
        raise HTTPException(status_code=500, detail="Server error")
