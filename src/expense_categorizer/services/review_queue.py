from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.core import settings
from expense_categorizer.db.tables import TransactionRecord
from expense_categorizer.logger import get_logger
from expense_categorizer.models import ReviewItem
from expense_categorizer.repositories.transactions import TransactionRepository, needs_review

logger = get_logger(__name__)


def to_review_item(record: TransactionRecord) -> ReviewItem:
    item = ReviewItem.model_validate(record)
    item.category_name = record.category.name if record.category else None
    return item


class ReviewQueue:
    """Read-only view of transactions that need a human decision."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], limit: int | None = None):
        self.session_factory = session_factory
        self.limit = limit or settings.review_queue_limit()

    async def count(self, owner_id: str) -> int:
        async with self.session_factory() as session:
            total = await TransactionRepository(session).count_matching(owner_id, needs_review())
        logger.debug("[REVIEW] Owner %s has %d transaction(s) to review.", owner_id, total)
        return total

    async def list_items(self, owner_id: str) -> list[ReviewItem]:
        async with self.session_factory() as session:
            records = await TransactionRepository(session).list_matching(owner_id, needs_review(), self.limit)
            return [to_review_item(record) for record in records]
