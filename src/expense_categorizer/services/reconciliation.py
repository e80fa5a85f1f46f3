import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.core import settings
from expense_categorizer.core.errors import RowUpdateError
from expense_categorizer.domain.categories import resolve_category
from expense_categorizer.domain.context import RunContext
from expense_categorizer.domain.policy import should_apply
from expense_categorizer.logger import get_logger
from expense_categorizer.models import Category, ClassificationResult, RunKind, Transaction
from expense_categorizer.repositories.transactions import TransactionRepository

logger = get_logger(__name__)


@dataclass(frozen=True)
class PlannedUpdate:
    transaction_id: str
    values: dict[str, Any]
    applies_category: bool


@dataclass
class ReconciliationOutcome:
    processed: int
    categorized: int = 0
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def plan_update(
    ctx: RunContext,
    candidate: Transaction,
    result: ClassificationResult,
    catalog: Sequence[Category],
) -> PlannedUpdate:
    values: dict[str, Any] = {"ai_confidence": result.confidence}
    if ctx.run_id is not None:
        values["ai_run_id"] = ctx.run_id

    category_id = resolve_category(result.category, catalog)
    if result.category and category_id is None:
        logger.warning(
            "[RECONCILE] Category '%s' not in catalog for transaction %s.",
            result.category,
            candidate.id,
        )

    applies = category_id is not None and should_apply(ctx.kind, result.confidence)
    if applies:
        values["category_id"] = category_id

    if ctx.kind is RunKind.RETRY_REVIEW:
        values["ai_suggested_category"] = result.category
        values["ai_reasoning"] = result.reasoning

    if not candidate.merchant and result.merchant:
        values["merchant"] = result.merchant

    return PlannedUpdate(transaction_id=candidate.id, values=values, applies_category=applies)


def plan_updates(
    ctx: RunContext,
    candidates: Sequence[Transaction],
    results: Sequence[ClassificationResult],
    catalog: Sequence[Category],
) -> tuple[list[PlannedUpdate], list[str]]:
    """Match results to candidates. Returns the planned updates and the skipped result ids."""
    by_id = {candidate.id: candidate for candidate in candidates}
    planned: list[PlannedUpdate] = []
    seen: set[str] = set()
    skipped: list[str] = []

    for result in results:
        candidate = by_id.get(result.transaction_id)
        if candidate is None:
            logger.warning("[RECONCILE] Result for unknown transaction %s; skipping.", result.transaction_id)
            skipped.append(result.transaction_id)
            continue
        if result.transaction_id in seen:
            logger.warning("[RECONCILE] Duplicate result for transaction %s; skipping.", result.transaction_id)
            skipped.append(result.transaction_id)
            continue
        seen.add(result.transaction_id)
        planned.append(plan_update(ctx, candidate, result, catalog))

    return planned, skipped


class ReconciliationEngine:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        concurrency: int | None = None,
    ):
        self.session_factory = session_factory
        self.concurrency = concurrency or settings.reconcile_concurrency()

    async def reconcile(
        self,
        ctx: RunContext,
        candidates: Sequence[Transaction],
        results: Sequence[ClassificationResult],
        catalog: Sequence[Category],
    ) -> ReconciliationOutcome:
        planned, skipped = plan_updates(ctx, candidates, results, catalog)
        outcome = ReconciliationOutcome(processed=len(candidates), skipped=skipped)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(update: PlannedUpdate) -> None:
            async with semaphore:
                await self._apply(update)

        # Rows are independent; one failure must not cancel its siblings.
        settled = await asyncio.gather(*(run(update) for update in planned), return_exceptions=True)

        for update, outcome_value in zip(planned, settled):
            if isinstance(outcome_value, BaseException):
                error = (
                    outcome_value
                    if isinstance(outcome_value, RowUpdateError)
                    else RowUpdateError(update.transaction_id, outcome_value)
                )
                logger.error("[RECONCILE] %s", error)
                outcome.failed.append(update.transaction_id)
                continue
            if update.applies_category:
                outcome.categorized += 1

        logger.info(
            "[RECONCILE] %s run %s: categorized %d of %d (%d failed, %d skipped).",
            ctx.label,
            ctx.run_id,
            outcome.categorized,
            outcome.processed,
            len(outcome.failed),
            len(outcome.skipped),
        )
        return outcome

    async def _apply(self, update: PlannedUpdate) -> None:
        async with self.session_factory() as session:
            updated = await TransactionRepository(session).apply_changes(update.transaction_id, update.values)
        if not updated:
            raise RowUpdateError(update.transaction_id, LookupError("transaction no longer exists"))
