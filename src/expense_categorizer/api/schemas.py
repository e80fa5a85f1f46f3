from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from expense_categorizer.models import Category, ReviewItem
from expense_categorizer.services.categorization import RunSummary


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RunResponse(CamelModel):
    success: bool = True
    message: str
    processed_count: int
    categorized_count: int
    run_id: str | None = None
    duration_ms: int | None = None

    @classmethod
    def from_summary(cls, summary: RunSummary, message: str) -> "RunResponse":
        return cls(
            message=message,
            processed_count=summary.processed,
            categorized_count=summary.categorized,
            run_id=summary.run_id,
            duration_ms=summary.duration_ms,
        )


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: str


class ReviewCountResponse(BaseModel):
    success: bool = True
    count: int


class ReviewEntry(CamelModel):
    id: str
    date: datetime
    description: str
    amount_cents: int
    merchant: str | None
    category_id: str | None
    category_name: str | None
    ai_confidence: float | None
    ai_reasoning: str | None
    ai_suggested_category: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_item(cls, item: ReviewItem) -> "ReviewEntry":
        return cls.model_validate(item.model_dump())


class ReviewQueueResponse(BaseModel):
    success: bool = True
    data: list[ReviewEntry]


class CategoriesResponse(BaseModel):
    success: bool = True
    data: list[Category]


class SetCategoryRequest(CamelModel):
    category_id: str | None = Field(default=None)


class TransactionResponse(BaseModel):
    success: bool = True
    data: ReviewEntry
