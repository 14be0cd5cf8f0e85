"""Bakeline FastAPI Application."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bakeline.api.v1 import records_router, units_router
from bakeline.core.config import get_settings
from bakeline.core.events import EventBus, LotTransitionRecordedEvent, RecordSubmittedEvent
from bakeline.core.logging import configure_logging
from bakeline.core.records import (
    LotTransitionTracker,
    RecordBuilder,
    SubmissionService,
    UnitRegistry,
)
from bakeline.db.database import get_database

logger = structlog.get_logger(__name__)


async def log_record_submitted(event: RecordSubmittedEvent) -> None:
    logger.info(
        "record_submitted_event",
        record_id=event.record_id,
        panel=event.panel,
        unit=event.unit,
        overall_ms=event.overall_ms,
    )


async def log_lot_transition(event: LotTransitionRecordedEvent) -> None:
    logger.info(
        "lot_transition_recorded",
        lot_id=event.lot_id,
        from_panel=event.from_panel,
        to_panel=event.to_panel,
        delta_ms=event.delta_ms,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    settings = get_settings()
    configure_logging(settings.log_format, settings.log_level)
    logger.info("starting_bakeline", version=settings.app_version)

    db = get_database()
    await db.create_tables()

    event_bus = EventBus()
    event_bus.subscribe(RecordSubmittedEvent, log_record_submitted)
    event_bus.subscribe(LotTransitionRecordedEvent, log_lot_transition)

    # Tracker state lives exactly as long as the service that owns it
    app.state.event_bus = event_bus
    app.state.unit_registry = UnitRegistry.from_settings(settings)
    app.state.submission_service = SubmissionService(
        tracker=LotTransitionTracker(),
        builder=RecordBuilder(),
        event_bus=event_bus,
    )

    logger.info("bakeline_startup_complete", units=len(app.state.unit_registry.all()))

    yield

    logger.info("shutting_down_bakeline")
    await event_bus.shutdown()
    await db.dispose()


app = FastAPI(
    title="Bakeline",
    description="Production timing and SPC analytics for a bakery line",
    version=get_settings().app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(records_router)
app.include_router(units_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "name": "Bakeline",
        "version": get_settings().app_version,
        "docs": "/docs",
    }
