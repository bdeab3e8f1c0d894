# featured_slots/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from featured_slots.api.v1.api import api_router
from featured_slots.core.config import settings
from featured_slots.scheduler import get_scheduler_status, init_scheduler, shutdown_scheduler

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Featured slots service starting up...")
    if settings.ENABLE_SCHEDULER:
        init_scheduler()
    yield
    logger.info("Featured slots service shutting down...")
    shutdown_scheduler()


app = FastAPI(
    title="Featured Slots Service",
    version="1.0.0",
    description="""
        Capacity-bounded scheduling of featured placements.

        ## Pools

        * **spotlight**: homepage spotlight slots
        * **promoted**: promoted listing slots

        Requests queue FIFO by requested start; each pool never shows more
        than its configured number of items at once.

        ## Authentication

        Admin and internal endpoints require the `X-Internal-Api-Key` header.
        `/slots/{tier}/projection` and `/health` are public.
        """,
    lifespan=lifespan,
)

origins = [
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
def health():
    return {"status": "ok", "scheduler": get_scheduler_status()["status"]}
