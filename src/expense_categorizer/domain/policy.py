from expense_categorizer.models import RunKind

BATCH_SIZE = 50

# Rows below this confidence stay in the review queue even when categorized.
REVIEW_CONFIDENCE_THRESHOLD = 0.6

FRESH_APPLY_THRESHOLD = 0.6
RETRY_APPLY_THRESHOLD = 0.8


def apply_threshold(kind: RunKind) -> float:
    if kind is RunKind.RETRY_REVIEW:
        return RETRY_APPLY_THRESHOLD
    return FRESH_APPLY_THRESHOLD


def should_apply(kind: RunKind, confidence: float) -> bool:
    return confidence >= apply_threshold(kind)
