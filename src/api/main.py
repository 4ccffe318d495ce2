"""FastAPI application entry point for the parliament session service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.api.middleware import LoggingMiddleware, MetricsMiddleware
from src.api.routes import (
    auth_router,
    chamber_router,
    events_router,
    health_router,
    members_router,
    metrics_router,
    proposals_router,
    seats_router,
    votes_router,
    voting_router,
)
from src.api.startup import configure_logging, initialize_session, shutdown_session


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    await initialize_session()
    yield
    await shutdown_session()


app = FastAPI(
    title="Parliament Session API",
    description="Seat registry, proposals and weighted voting for a parliamentary session",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(metrics_router)
app.include_router(auth_router)
app.include_router(members_router)
app.include_router(seats_router)
app.include_router(proposals_router)
app.include_router(votes_router)
app.include_router(voting_router)
app.include_router(chamber_router)
app.include_router(events_router)
