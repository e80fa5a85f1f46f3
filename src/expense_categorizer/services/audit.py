import json
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from expense_categorizer.core.errors import AuditWriteError, CategorizationError, ValidationError
from expense_categorizer.domain.context import RunContext
from expense_categorizer.logger import get_logger
from expense_categorizer.models import ClassificationResult
from expense_categorizer.repositories.runs import ClassificationRunRepository

logger = get_logger(__name__)


def error_payload(error: BaseException) -> dict[str, Any]:
    message = error.message if isinstance(error, CategorizationError) else str(error)
    payload: dict[str, Any] = {
        "error": message or type(error).__name__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if isinstance(error, CategorizationError):
        payload["code"] = error.error_code
    if isinstance(error, ValidationError):
        payload["raw"] = error.raw_text
    return payload


class AuditRecorder:
    """Writes one ClassificationRun per invocation. Never raises."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def record_success(self, ctx: RunContext, results: Sequence[ClassificationResult]) -> str | None:
        return await self._write(ctx, [result.to_payload() for result in results])

    async def record_failure(self, ctx: RunContext, error: BaseException) -> str | None:
        return await self._write(ctx, error_payload(error))

    async def _write(self, ctx: RunContext, payload: Any) -> str | None:
        output = json.dumps(payload, indent=2, ensure_ascii=False)
        try:
            async with self.session_factory() as session:
                run = await ClassificationRunRepository(session).add(ctx.owner_id, ctx.kind.value, output)
        except Exception as exc:
            failure = AuditWriteError(f"Could not record {ctx.label} run for owner {ctx.owner_id}: {exc}")
            logger.error("[AUDIT] %s", failure)
            return None
        ctx.run_id = run.id
        logger.info("[AUDIT] Recorded %s run %s.", ctx.label, run.id)
        return run.id
