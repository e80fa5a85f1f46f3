from typing import Annotated

from fastapi import Header, HTTPException, Request

from expense_categorizer.core.errors import AuthError
from expense_categorizer.services.categorization import CategorizationPipeline
from expense_categorizer.services.review_actions import ReviewActions
from expense_categorizer.services.review_queue import ReviewQueue


def get_owner_id(x_owner_id: Annotated[str | None, Header()] = None) -> str:
    """Owner identity as asserted by the upstream auth proxy."""
    owner_id = (x_owner_id or "").strip()
    if not owner_id:
        raise AuthError("You must be logged in to use AI categorization")
    return owner_id


def get_pipeline(request: Request) -> CategorizationPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if not pipeline:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return pipeline


def get_review_queue(request: Request) -> ReviewQueue:
    review_queue = getattr(request.app.state, "review_queue", None)
    if not review_queue:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return review_queue


def get_review_actions(request: Request) -> ReviewActions:
    review_actions = getattr(request.app.state, "review_actions", None)
    if not review_actions:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return review_actions
