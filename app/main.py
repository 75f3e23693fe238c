"""
FastAPI application entry point.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from app import config
from app.database import init_db
from app.logging_config import setup_logging
from app.routers import attendance, calculator, catalog, clients, equipment, jobs

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info(f"{config.APP_NAME} started")
    yield


def create_app() -> FastAPI:
    application = FastAPI(title=config.APP_NAME, lifespan=lifespan)
    application.include_router(clients.router)
    application.include_router(jobs.router)
    application.include_router(catalog.router)
    application.include_router(equipment.router)
    application.include_router(attendance.router)
    application.include_router(calculator.router)

    @application.get("/health")
    async def health():
        return {"status": "ok"}

    return application


app = create_app()
