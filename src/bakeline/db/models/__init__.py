"""SQLAlchemy ORM models for the Bakeline database schema."""

from bakeline.db.models.base import Base
from bakeline.db.models.record import ProductionRecord

__all__ = [
    "Base",
    "ProductionRecord",
]
