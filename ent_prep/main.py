# ent_prep/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings
from .database.database import SessionLocal, init_db
from .database.seed import seed_tests
from .schemas.auth_schemas import REGISTRATION_REQUIREMENTS

# Import routers
from .routers.auth_router import router as auth_router
from .routers.test_router import router as test_router
from .routers.ai_router import router as ai_router

settings = get_settings()

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if settings.SEED_TESTS:
        db = SessionLocal()
        try:
            seed_tests(db)
        finally:
            db.close()
    if len(settings.JWT_SECRET.encode("utf-8")) < 32:
        logger.warning("JWT_SECRET is shorter than 32 bytes; use a longer secret for HS256")
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY not set; AI feedback will not include a detailed overview")
    yield


app = FastAPI(title=settings.API_TITLE, version=settings.API_VERSION, lifespan=lifespan)

# CORS middleware configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    logger.info(f"Validation error on {request.url.path}: {errors}")
    content = {"success": False, "message": "Validation error", "errors": errors}
    if request.url.path == "/auth/register":
        content["requirements"] = REGISTRATION_REQUIREMENTS
    return JSONResponse(status_code=400, content=content)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"success": False, "message": "Internal Server Error"})


# Include routers
app.include_router(auth_router)
app.include_router(test_router)
app.include_router(ai_router)


@app.get("/")
async def root():
    return {"message": "ENT Prep API is running"}


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
