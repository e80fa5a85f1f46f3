from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.domain.categories import DEFAULT_CATEGORIES
from expense_categorizer.logger import get_logger
from expense_categorizer.repositories.categories import CategoryRepository

logger = get_logger(__name__)


async def seed_default_categories(
    session_factory: async_sessionmaker[AsyncSession],
    names: Iterable[str] = DEFAULT_CATEGORIES,
) -> int:
    async with session_factory() as session:
        created = await CategoryRepository(session).ensure(names)
    if created:
        logger.info("[SEED] Added %d categories: %s", len(created), ", ".join(c.name for c in created))
    else:
        logger.debug("[SEED] Category catalog already seeded.")
    return len(created)
