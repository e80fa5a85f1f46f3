from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.core.errors import DispositionError, NotFoundError
from expense_categorizer.domain.categories import resolve_category
from expense_categorizer.logger import get_logger
from expense_categorizer.models import Category, ReviewItem
from expense_categorizer.repositories.categories import CategoryRepository
from expense_categorizer.repositories.transactions import TransactionRepository
from expense_categorizer.services.review_queue import to_review_item

logger = get_logger(__name__)


class ReviewActions:
    """Human dispositions for review queue entries."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def list_categories(self) -> list[Category]:
        async with self.session_factory() as session:
            records = await CategoryRepository(session).list_all()
        return [Category.model_validate(record) for record in records]

    async def set_category(self, owner_id: str, transaction_id: str, category_id: str | None) -> ReviewItem:
        async with self.session_factory() as session:
            transactions = TransactionRepository(session)
            if await transactions.get_for_owner(owner_id, transaction_id) is None:
                raise NotFoundError(f"Transaction {transaction_id} not found")
            if category_id is not None and await CategoryRepository(session).get_by_id(category_id) is None:
                raise DispositionError(f"Category {category_id} not found")
            await transactions.apply_changes(transaction_id, {"category_id": category_id})
            logger.info("[REVIEW] Transaction %s category set to %s.", transaction_id, category_id)
            return await self._reload(session, owner_id, transaction_id)

    async def approve_suggestion(self, owner_id: str, transaction_id: str) -> ReviewItem:
        async with self.session_factory() as session:
            record = await TransactionRepository(session).get_for_owner(owner_id, transaction_id)
            if record is None:
                raise NotFoundError(f"Transaction {transaction_id} not found")
            suggestion = record.ai_suggested_category
            if not suggestion:
                raise DispositionError("No suggested category to approve")
            catalog = [Category.model_validate(c) for c in await CategoryRepository(session).list_all()]
        category_id = resolve_category(suggestion, catalog)
        if category_id is None:
            raise DispositionError(f"Category '{suggestion}' not found")
        return await self.set_category(owner_id, transaction_id, category_id)

    @staticmethod
    async def _reload(session: AsyncSession, owner_id: str, transaction_id: str) -> ReviewItem:
        session.expire_all()
        record = await TransactionRepository(session).get_for_owner(owner_id, transaction_id)
        if record is None:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        return to_review_item(record)
