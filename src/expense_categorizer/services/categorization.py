import asyncio
from dataclasses import dataclass

from expense_categorizer.classifiers.base import Classifier
from expense_categorizer.core.errors import CategorizationError, ServiceError
from expense_categorizer.domain.categories import category_names
from expense_categorizer.domain.context import RunContext
from expense_categorizer.domain.prompts import build_prompt
from expense_categorizer.logger import get_logger
from expense_categorizer.models import RunKind
from expense_categorizer.services.audit import AuditRecorder
from expense_categorizer.services.leases import OwnerLeases
from expense_categorizer.services.reconciliation import ReconciliationEngine
from expense_categorizer.services.selection import CandidateSelector
from expense_categorizer.services.validation import parse_results

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunSummary:
    processed: int
    categorized: int
    run_id: str | None
    duration_ms: int


class CategorizationPipeline:
    def __init__(
        self,
        selector: CandidateSelector,
        classifier: Classifier | None,
        audit: AuditRecorder,
        engine: ReconciliationEngine,
        leases: OwnerLeases | None = None,
    ) -> None:
        self.selector = selector
        self.classifier = classifier
        self.audit = audit
        self.engine = engine
        self.leases = leases or OwnerLeases()

    async def categorize(self, owner_id: str) -> RunSummary:
        return await self.run(owner_id, RunKind.CATEGORIZE)

    async def retry_review(self, owner_id: str) -> RunSummary:
        return await self.run(owner_id, RunKind.RETRY_REVIEW)

    async def run(self, owner_id: str, kind: RunKind) -> RunSummary:
        ctx = RunContext(owner_id=owner_id, kind=kind)
        logger.info("[PIPELINE] Starting %s run for owner %s.", ctx.label, owner_id)

        async with self.leases.hold(owner_id):
            try:
                return await self._run(ctx)
            except CategorizationError as exc:
                logger.error("[PIPELINE] %s run failed: %s", ctx.label, exc.message)
                await self._record_failure(ctx, exc)
                raise
            except Exception as exc:
                logger.exception("[PIPELINE] %s run failed unexpectedly.", ctx.label)
                await self._record_failure(ctx, exc)
                raise CategorizationError(f"Categorization failed: {exc}") from exc

    async def _run(self, ctx: RunContext) -> RunSummary:
        candidates = await self.selector.select(ctx.owner_id, ctx.kind)
        if not candidates:
            return RunSummary(processed=0, categorized=0, run_id=None, duration_ms=ctx.elapsed_ms())

        catalog = await self.selector.load_catalog()
        prompt = build_prompt(ctx.kind, candidates, category_names(catalog))

        if self.classifier is None:
            raise ServiceError("Classification service is not configured (OPENAI_API_KEY is unset)")
        raw_text = await asyncio.to_thread(self.classifier.complete, prompt)

        results = parse_results(raw_text, ctx.kind)
        await self.audit.record_success(ctx, results)

        outcome = await self.engine.reconcile(ctx, candidates, results, catalog)
        summary = RunSummary(
            processed=outcome.processed,
            categorized=outcome.categorized,
            run_id=ctx.run_id,
            duration_ms=ctx.elapsed_ms(),
        )
        logger.info(
            "[PIPELINE] %s run %s completed in %d ms. Categorized %d of %d.",
            ctx.label,
            summary.run_id,
            summary.duration_ms,
            summary.categorized,
            summary.processed,
        )
        return summary

    async def _record_failure(self, ctx: RunContext, error: BaseException) -> None:
        # A run already recorded for this invocation must not be duplicated.
        if ctx.run_id is None:
            await self.audit.record_failure(ctx, error)
