from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from expense_categorizer.db.tables import CategoryRecord
from expense_categorizer.repositories.base import BaseRepository


class CategoryRepository(BaseRepository[CategoryRecord]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, CategoryRecord)

    async def list_all(self) -> list[CategoryRecord]:
        result = await self.db.execute(select(CategoryRecord).order_by(CategoryRecord.name))
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> CategoryRecord | None:
        result = await self.db.execute(
            select(CategoryRecord).where(func.lower(CategoryRecord.name) == name.strip().lower())
        )
        return result.scalar_one_or_none()

    async def ensure(self, names: Iterable[str]) -> list[CategoryRecord]:
        """Insert any names not already present, matching existing names case-insensitively."""
        created: list[CategoryRecord] = []
        for name in names:
            if await self.get_by_name(name):
                continue
            record = CategoryRecord(name=name)
            self.db.add(record)
            created.append(record)
        if created:
            await self.db.commit()
        return created
