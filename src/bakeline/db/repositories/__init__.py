"""Repository pattern implementation for Bakeline database operations.

Repositories:
    - BaseRepository: Generic CRUD operations for all models
    - RecordRepository: Production record storage and filtered reads
"""

from bakeline.db.repositories.base import BaseRepository
from bakeline.db.repositories.record import RecordRepository

__all__ = [
    "BaseRepository",
    "RecordRepository",
]
