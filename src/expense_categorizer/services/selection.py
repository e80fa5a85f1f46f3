from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.domain.policy import BATCH_SIZE
from expense_categorizer.logger import get_logger
from expense_categorizer.models import Category, RunKind, Transaction
from expense_categorizer.repositories.categories import CategoryRepository
from expense_categorizer.repositories.transactions import TransactionRepository, needs_review, uncategorized

logger = get_logger(__name__)


class CandidateSelector:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession], batch_size: int = BATCH_SIZE):
        self.session_factory = session_factory
        self.batch_size = min(batch_size, BATCH_SIZE)

    async def select(self, owner_id: str, kind: RunKind) -> list[Transaction]:
        predicate = needs_review() if kind is RunKind.RETRY_REVIEW else uncategorized()
        async with self.session_factory() as session:
            records = await TransactionRepository(session).list_matching(owner_id, predicate, self.batch_size)
        candidates = [Transaction.model_validate(record) for record in records]
        logger.info("[SELECT] %s: %d candidate(s) for owner %s.", kind.value, len(candidates), owner_id)
        return candidates

    async def load_catalog(self) -> list[Category]:
        async with self.session_factory() as session:
            records = await CategoryRepository(session).list_all()
        catalog = [Category.model_validate(record) for record in records]
        logger.debug("[SELECT] Loaded %d categories.", len(catalog))
        return catalog
