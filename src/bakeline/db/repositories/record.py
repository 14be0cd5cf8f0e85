"""Repository for persisted production records."""

from collections.abc import Mapping
from datetime import date
from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bakeline.db.derivation import derive_record_columns
from bakeline.db.models.record import ProductionRecord
from bakeline.db.repositories.base import BaseRepository


class RecordRepository(BaseRepository[ProductionRecord]):
    """Storage and filtered reads of production records.

    Listing returns newest first; analytics reads return oldest first so
    control charts plot in creation order.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ProductionRecord)

    async def create_from_payload(self, payload: Mapping[str, Any]) -> ProductionRecord:
        """Store a submission payload with its derived columns.

        Example:
            record = await repo.create_from_payload(process_record.to_dict())
            print(record.overall_ms)
        """
        columns = derive_record_columns(payload)
        return await self.create(data=dict(payload), **columns)

    def _filtered(
        self,
        panel: str | None = None,
        lot_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> Select[tuple[ProductionRecord]]:
        stmt = select(ProductionRecord)
        if panel:
            stmt = stmt.where(ProductionRecord.panel == panel)
        if lot_id:
            stmt = stmt.where(ProductionRecord.lot_id == lot_id)
        if date_from is not None:
            stmt = stmt.where(ProductionRecord.shift_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(ProductionRecord.shift_date <= date_to)
        return stmt

    async def list_records(
        self,
        panel: str | None = None,
        lot_id: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[ProductionRecord], int]:
        """List records newest first.

        Returns:
            Tuple of (page of records, total matching count)
        """
        stmt = self._filtered(panel, lot_id, date_from, date_to)
        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = stmt.order_by(
            ProductionRecord.created_at.desc(), ProductionRecord.id.desc()
        ).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def get_for_analytics(
        self,
        panel: str | None = None,
        date_from: date | None = None,
        date_to: date | None = None,
    ) -> list[ProductionRecord]:
        """Fetch the records an analytics view is computed over, oldest first."""
        stmt = self._filtered(panel, None, date_from, date_to).order_by(
            ProductionRecord.created_at, ProductionRecord.id
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_all(self) -> int:
        """Delete every record and return how many were removed."""
        result = await self.session.execute(delete(ProductionRecord))
        await self.session.flush()
        return result.rowcount or 0
