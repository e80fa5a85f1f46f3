from typing import Any

from sqlalchemy import ColumnElement, and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from expense_categorizer.db.tables import TransactionRecord
from expense_categorizer.domain.policy import REVIEW_CONFIDENCE_THRESHOLD
from expense_categorizer.repositories.base import BaseRepository

# Columns reconciliation and review actions may write.
UPDATABLE_FIELDS = frozenset({
    "category_id",
    "merchant",
    "ai_confidence",
    "ai_reasoning",
    "ai_suggested_category",
    "ai_run_id",
})


def uncategorized() -> ColumnElement[bool]:
    return TransactionRecord.category_id.is_(None)


def needs_review() -> ColumnElement[bool]:
    """Uncategorized, or scored by the model below the review threshold."""
    return or_(
        uncategorized(),
        and_(
            TransactionRecord.ai_confidence.is_not(None),
            TransactionRecord.ai_confidence < REVIEW_CONFIDENCE_THRESHOLD,
        ),
    )


def _newest_first() -> tuple[Any, ...]:
    return (TransactionRecord.date.desc(), TransactionRecord.id)


class TransactionRepository(BaseRepository[TransactionRecord]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, TransactionRecord)

    async def list_matching(
        self,
        owner_id: str,
        predicate: ColumnElement[bool],
        limit: int,
    ) -> list[TransactionRecord]:
        result = await self.db.execute(
            select(TransactionRecord)
            .where(TransactionRecord.owner_id == owner_id, predicate)
            .order_by(*_newest_first())
            .limit(limit)
        )
        return list(result.unique().scalars().all())

    async def count_matching(self, owner_id: str, predicate: ColumnElement[bool]) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(TransactionRecord)
            .where(TransactionRecord.owner_id == owner_id, predicate)
        )
        return int(result.scalar_one())

    async def get_for_owner(self, owner_id: str, transaction_id: str) -> TransactionRecord | None:
        result = await self.db.execute(
            select(TransactionRecord).where(
                TransactionRecord.id == transaction_id,
                TransactionRecord.owner_id == owner_id,
            )
        )
        return result.unique().scalar_one_or_none()

    async def apply_changes(self, transaction_id: str, values: dict[str, Any]) -> bool:
        """Write ``values`` to one row and commit. Returns False when the row is gone."""
        unknown = set(values) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        result = await self.db.execute(
            update(TransactionRecord)
            .where(TransactionRecord.id == transaction_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0
