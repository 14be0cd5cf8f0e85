"""Database layer: engine/session management, models and repositories."""

from bakeline.db.database import DatabaseConfig, get_database, get_session, set_database
from bakeline.db.models import Base, ProductionRecord

__all__ = [
    "Base",
    "DatabaseConfig",
    "ProductionRecord",
    "get_database",
    "get_session",
    "set_database",
]
