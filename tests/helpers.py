import json
import re
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.classifiers.base import Classifier
from expense_categorizer.db.tables import CategoryRecord, ClassificationRunRecord, TransactionRecord

OWNER = "owner-1"
BASE_DATE = datetime(2024, 3, 31, 12, 0, tzinfo=timezone.utc)


class FakeClassifier(Classifier):
    """Returns canned text, or text built from the prompt."""

    def __init__(self, response: str | Callable[[str], str] | Exception = "[]"):
        self.response = response
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if isinstance(self.response, Exception):
            raise self.response
        if callable(self.response):
            return self.response(prompt)
        return self.response


def results_json(entries: Sequence[dict[str, Any]]) -> str:
    return json.dumps(list(entries))


async def add_transactions(
    factory: async_sessionmaker[AsyncSession],
    count: int,
    owner_id: str = OWNER,
    **overrides: Any,
) -> list[str]:
    """Insert ``count`` transactions, newest first, and return their ids in that order."""
    records = []
    for index in range(count):
        values: dict[str, Any] = {
            "owner_id": owner_id,
            "date": BASE_DATE - timedelta(days=index),
            "description": f"Purchase {index}",
            "amount_cents": 1000 + index,
        }
        values.update(overrides)
        records.append(TransactionRecord(**values))
    async with factory() as session:
        session.add_all(records)
        await session.commit()
        return [record.id for record in records]


async def get_transaction(factory: async_sessionmaker[AsyncSession], transaction_id: str) -> TransactionRecord:
    async with factory() as session:
        result = await session.execute(select(TransactionRecord).where(TransactionRecord.id == transaction_id))
        return result.unique().scalar_one()


async def category_id(factory: async_sessionmaker[AsyncSession], name: str) -> str:
    async with factory() as session:
        result = await session.execute(select(CategoryRecord).where(CategoryRecord.name == name))
        return result.scalar_one().id


async def list_runs(factory: async_sessionmaker[AsyncSession]) -> list[ClassificationRunRecord]:
    async with factory() as session:
        result = await session.execute(select(ClassificationRunRecord).order_by(ClassificationRunRecord.created_at))
        return list(result.scalars().all())


def prompt_ids(prompt: str) -> list[str]:
    """Transaction ids embedded in a categorization or review prompt, in prompt order."""
    match = re.search(r"Transactions to (?:categorize|review):\n(\[.*?\n\])", prompt, re.S)
    if not match:
        return []
    return [row["transactionId"] for row in json.loads(match.group(1))]
