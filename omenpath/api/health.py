"""
Health check endpoints.

Provides liveness and readiness probes. Readiness checks that Scryfall
answers, since no conversion can succeed without it.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from omenpath.services.scryfall_client import ScryfallClient, get_scryfall_client

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Probe result, with Scryfall reachability on /ready."""

    status: str
    scryfall: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Answers as long as the process is serving requests.
    Scryfall is not contacted.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    client: Annotated[ScryfallClient, Depends(get_scryfall_client)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns ready if Scryfall is reachable. Returns 503 otherwise.
    """
    if await client.check_health():
        return HealthResponse(status="ready", scryfall="reachable")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="not ready", scryfall="unreachable")
