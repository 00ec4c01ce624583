# ent_prep/routers/ai_router.py
from fastapi import APIRouter, HTTPException, Depends
import logging
from sqlalchemy.orm import Session

from ..core.security import get_current_user
from ..database.database import get_db
from ..models.ent_models import DBUser
from ..schemas.feedback_schemas import Feedback
from ..services.errors import NotFoundError
from ..services.feedback_service import FeedbackService, get_llm_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])


def get_feedback_service(db: Session = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db, llm_client=get_llm_client())


@router.post("/feedback", response_model=Feedback, response_model_exclude_none=True)
async def generate_feedback(
    user: DBUser = Depends(get_current_user),
    service: FeedbackService = Depends(get_feedback_service),
) -> Feedback:
    """Generate performance feedback for the acting user."""
    try:
        logger.info(f"Generating feedback for user ID: {user.id}")
        return service.generate(user)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Error generating feedback: {str(e)}")
        raise HTTPException(status_code=500, detail="Server error")
