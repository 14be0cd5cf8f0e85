"""FastAPI dependency injection functions.

Provides database sessions, repositories, and the process-lifetime
services stored on ``app.state`` by the application lifespan.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from bakeline.core.exceptions import InvalidArgumentError
from bakeline.core.records import SubmissionService, UnitRegistry
from bakeline.db.database import get_session
from bakeline.db.repositories import RecordRepository


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Canonical session dependency for all endpoints."""
    async for session in get_session():
        yield session


async def get_record_repo(
    session: AsyncSession = Depends(get_db_session),
) -> RecordRepository:
    return RecordRepository(session)


def get_unit_registry(request: Request) -> UnitRegistry:
    return request.app.state.unit_registry


def get_submission_service(request: Request) -> SubmissionService:
    return request.app.state.submission_service


def bad_request(error: InvalidArgumentError) -> HTTPException:
    """Map a boundary validation failure to a 400 response."""
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
