import logging
from contextlib import asynccontextmanager

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI

from app.config.settings import settings
from app.database import SessionLocal
from app.services.scheduler import scheduler_health, schedule_daily_digest

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One scheduler for the whole process, registered at startup and only
    # shut down when the process exits
    scheduler = AsyncIOScheduler(timezone=settings.DIGEST_TIMEZONE)
    schedule_daily_digest(scheduler, settings, SessionLocal)
    scheduler.start()
    app.state.scheduler = scheduler
    logger.info("Task scheduler started successfully")
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Task scheduler stopped")


app = FastAPI(title="Task Tracker", lifespan=lifespan)


@app.get("/")
def root():
    return {"message": "Task Tracker API is running"}


@app.get("/health")
def health():
    return {
        "status": "healthy",
        "scheduler": scheduler_health(app.state.scheduler),
    }
