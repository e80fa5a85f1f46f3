from sqlalchemy.ext.asyncio import AsyncSession

from expense_categorizer.db.tables import ClassificationRunRecord
from expense_categorizer.repositories.base import BaseRepository


class ClassificationRunRepository(BaseRepository[ClassificationRunRecord]):
    """Runs are append-only, so there is no update or delete here."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, ClassificationRunRecord)

    async def add(self, owner_id: str, kind: str, output: str) -> ClassificationRunRecord:
        return await self.create(ClassificationRunRecord(owner_id=owner_id, kind=kind, output=output))
