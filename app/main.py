import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text

from .config import settings
from .database import SessionLocal, engine, get_db
from .core.middleware import ExceptionHandlingMiddleware, register_exception_handlers
from .models import Base
from .schemas.result import Result, Error, ErrorCategory
from .scheduler import job_scheduler
from .services.question_bank import seed_question_bank

# Import routes
from .api.v1 import profiles, rooms, questions, planner, moments, notifications, progress, feed, jobs

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)

    if settings.SEED_QUESTIONS:
        db = SessionLocal()
        try:
            seed_question_bank(db)
        finally:
            db.close()

    if settings.SCHEDULER_ENABLED:
        job_scheduler.start()
    yield
    job_scheduler.stop()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    description="The Two of Us API - daily questions, planner, memories and reminders for couples",
    lifespan=lifespan,
)

# Add exception handling middleware FIRST
app.add_middleware(ExceptionHandlingMiddleware, log_internal_errors=True)
register_exception_handlers(app, log_internal_errors=True)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(profiles.router, prefix=f"{settings.API_V1_STR}/profiles", tags=["profiles"])
app.include_router(rooms.router, prefix=f"{settings.API_V1_STR}/rooms", tags=["rooms"])
app.include_router(
    questions.router,
    prefix=f"{settings.API_V1_STR}/questions",
    tags=["questions"]
)
app.include_router(
    planner.router,
    prefix=f"{settings.API_V1_STR}/planner",
    tags=["planner"]
)
app.include_router(moments.router, prefix=f"{settings.API_V1_STR}", tags=["moments"])
app.include_router(
    notifications.router,
    prefix=f"{settings.API_V1_STR}/notifications",
    tags=["notifications"]
)
app.include_router(progress.router, prefix=f"{settings.API_V1_STR}/progress", tags=["progress"])
app.include_router(feed.router, prefix=f"{settings.API_V1_STR}/feed", tags=["feed"])
app.include_router(jobs.router, prefix=f"{settings.API_V1_STR}/jobs", tags=["jobs"])


@app.get("/", response_model=Result[dict])
async def root():
    """Root endpoint with API information"""
    return Result.successful(
        data={
            "message": f"Welcome to {settings.PROJECT_NAME} API",
            "version": settings.VERSION,
            "docs": "/docs",
            "status": "online",
        }
    )


@app.get("/health", response_model=Result[dict])
async def health_check(db: Session = Depends(get_db)):
    """Health check endpoint for the hosting platform and monitoring"""
    try:
        db.execute(text("SELECT 1"))
        return Result.successful(data={"status": "healthy", "database": "connected"})
    except Exception as e:
        logger.error("Health check failed", exc_info=True)
        return Result.failure(
            error=Error(
                message=f"Health check failed: {str(e)}",
                status_code=503,
                category=ErrorCategory.INTERNAL,
            )
        )
