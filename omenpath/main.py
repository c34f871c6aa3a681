import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from omenpath.api import convert_router, health_router
from omenpath.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Apply the configured log level and report the Scryfall endpoint."""
    logging.getLogger("omenpath").setLevel(settings.log_level.upper())
    logger.info("Using Scryfall at %s", settings.scryfall_api_url)
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("omenpath"),
    lifespan=lifespan,
)

app.include_router(convert_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
