from typing import Annotated

from fastapi import APIRouter, Depends

from expense_categorizer.api.dependencies import get_owner_id, get_pipeline
from expense_categorizer.api.schemas import RunResponse
from expense_categorizer.services.categorization import CategorizationPipeline

router = APIRouter(prefix="/api/ai")


@router.post("/categorize", response_model=RunResponse)
async def categorize_transactions(
    owner_id: Annotated[str, Depends(get_owner_id)],
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> RunResponse:
    summary = await pipeline.categorize(owner_id)
    if summary.processed == 0:
        return RunResponse.from_summary(summary, "No uncategorized transactions found")
    return RunResponse.from_summary(summary, "Categorization completed")


@router.post("/retry-review", response_model=RunResponse)
async def retry_review_queue(
    owner_id: Annotated[str, Depends(get_owner_id)],
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> RunResponse:
    summary = await pipeline.retry_review(owner_id)
    if summary.processed == 0:
        return RunResponse.from_summary(summary, "No transactions in review queue")
    return RunResponse.from_summary(summary, f"AI review completed for {summary.processed} transactions")
