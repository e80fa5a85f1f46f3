from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


class RunKind(str, Enum):
    CATEGORIZE = "categorize"
    RETRY_REVIEW = "retry-review"


class Category(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class Transaction(BaseModel):
    """Read-only view of a stored transaction.

    ``amount_cents`` is signed: positive for expenses, negative for income.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    date: datetime
    description: str
    amount_cents: int
    merchant: Optional[str] = None
    category_id: Optional[str] = None
    ai_confidence: Optional[float] = None
    ai_reasoning: Optional[str] = None
    ai_suggested_category: Optional[str] = None
    ai_run_id: Optional[str] = None


class ClassificationResult(BaseModel):
    """One entry of the model's answer for the fresh categorization prompt."""

    model_config = ConfigDict(populate_by_name=True)

    transaction_id: StrictStr = Field(alias="transactionId")
    category: Optional[StrictStr]
    confidence: float = Field(ge=0.0, le=1.0)
    merchant: Optional[StrictStr] = None
    reasoning: Optional[StrictStr] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def _confidence_is_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("confidence must be a number")
        return value

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(by_alias=True)
        for key in ("merchant", "reasoning"):
            if payload.get(key) is None:
                payload.pop(key, None)
        return payload


class RetryClassificationResult(ClassificationResult):
    """Review-mode entry; the model must justify its choice."""

    reasoning: StrictStr


class ReviewItem(Transaction):
    category_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
