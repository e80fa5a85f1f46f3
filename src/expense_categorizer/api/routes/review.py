from typing import Annotated

from fastapi import APIRouter, Depends

from expense_categorizer.api.dependencies import get_owner_id, get_review_actions, get_review_queue
from expense_categorizer.api.schemas import (
    CategoriesResponse,
    ReviewCountResponse,
    ReviewEntry,
    ReviewQueueResponse,
    SetCategoryRequest,
    TransactionResponse,
)
from expense_categorizer.services.review_actions import ReviewActions
from expense_categorizer.services.review_queue import ReviewQueue

router = APIRouter(prefix="/api")


@router.get("/transactions/review-count", response_model=ReviewCountResponse)
async def review_count(
    owner_id: Annotated[str, Depends(get_owner_id)],
    review_queue: Annotated[ReviewQueue, Depends(get_review_queue)],
) -> ReviewCountResponse:
    return ReviewCountResponse(count=await review_queue.count(owner_id))


@router.get("/transactions/review-queue", response_model=ReviewQueueResponse)
async def review_queue_listing(
    owner_id: Annotated[str, Depends(get_owner_id)],
    review_queue: Annotated[ReviewQueue, Depends(get_review_queue)],
) -> ReviewQueueResponse:
    items = await review_queue.list_items(owner_id)
    return ReviewQueueResponse(data=[ReviewEntry.from_item(item) for item in items])


@router.get("/categories", response_model=CategoriesResponse, dependencies=[Depends(get_owner_id)])
async def list_categories(
    actions: Annotated[ReviewActions, Depends(get_review_actions)],
) -> CategoriesResponse:
    return CategoriesResponse(data=await actions.list_categories())


@router.post("/transactions/{transaction_id}/category", response_model=TransactionResponse)
async def set_transaction_category(
    transaction_id: str,
    req: SetCategoryRequest,
    owner_id: Annotated[str, Depends(get_owner_id)],
    actions: Annotated[ReviewActions, Depends(get_review_actions)],
) -> TransactionResponse:
    item = await actions.set_category(owner_id, transaction_id, req.category_id)
    return TransactionResponse(data=ReviewEntry.from_item(item))


@router.post("/transactions/{transaction_id}/approve-suggestion", response_model=TransactionResponse)
async def approve_suggestion(
    transaction_id: str,
    owner_id: Annotated[str, Depends(get_owner_id)],
    actions: Annotated[ReviewActions, Depends(get_review_actions)],
) -> TransactionResponse:
    item = await actions.approve_suggestion(owner_id, transaction_id)
    return TransactionResponse(data=ReviewEntry.from_item(item))
