import json
from collections.abc import Sequence
from decimal import Decimal

from expense_categorizer.models import RunKind, Transaction

SYSTEM_INSTRUCTIONS = (
    "You are a helpful assistant that returns only valid JSON. Never include markdown code blocks "
    "or any text outside the JSON. Return a JSON array when requested."
)

NO_CATEGORIES = "None (you may suggest new categories)"


def format_amount(amount_cents: int) -> str:
    """Minor units to a two-decimal string, keeping the sign."""
    return f"{Decimal(amount_cents) / 100:.2f}"


def serialize_candidates(transactions: Sequence[Transaction]) -> str:
    rows = [
        {
            "transactionId": t.id,
            "date": t.date.isoformat(),
            "description": t.description,
            "amount": format_amount(t.amount_cents),
            "merchant": t.merchant or None,
        }
        for t in transactions
    ]
    return json.dumps(rows, indent=2, ensure_ascii=False)


def _vocabulary(category_names: Sequence[str]) -> str:
    return ", ".join(category_names) if category_names else NO_CATEGORIES


def build_categorization_prompt(transactions: Sequence[Transaction], category_names: Sequence[str]) -> str:
    return f"""You are an expense categorization assistant. Analyze the following transactions and categorize them using the available categories.

Available categories: {_vocabulary(category_names)}

Transactions to categorize:
{serialize_candidates(transactions)}

You MUST return a STRICT JSON array with this EXACT structure:
[
  {{
    "transactionId": "string (required)",
    "category": "string or null (required, must match one of the available categories, or null if no good match)",
    "confidence": number (required, between 0.0 and 1.0),
    "merchant": "string (optional, your best guess at the merchant name)"
  }}
]

Rules:
1. Return ONLY a JSON array, no markdown, no code blocks, no explanations, no wrapping object
2. category must match one of the available categories (case-insensitive), or be null if no good match exists
3. confidence must be between 0.0 and 1.0; only go above 0.8 when you are very certain
4. Include EVERY transaction exactly once, using its transactionId
5. The response MUST start with [

Return the JSON array now:"""


def build_retry_prompt(transactions: Sequence[Transaction], category_names: Sequence[str]) -> str:
    return f"""You are an expense categorization assistant. These transactions need review because they were previously categorized with low confidence or are uncategorized. Provide your best-guess category and a brief reasoning.

Available categories: {_vocabulary(category_names)}

Transactions to review:
{serialize_candidates(transactions)}

You MUST return a STRICT JSON array with this EXACT structure:
[
  {{
    "transactionId": "string (required)",
    "category": "string or null (required, must match one of the available categories, or null if no good match)",
    "confidence": number (required, between 0.0 and 1.0),
    "reasoning": "string (required, 1-2 sentences explaining your decision)"
  }}
]

Rules:
1. Return ONLY a JSON array, no markdown, no code blocks, no explanations, no wrapping object
2. category must match one of the available categories (case-insensitive), or be null if no good match exists
3. confidence must be between 0.0 and 1.0
4. reasoning must be 1-2 sentences explaining the chosen category, or why there is none
5. Include EVERY transaction exactly once, using its transactionId
6. The response MUST start with [

Return the JSON array now:"""


def build_prompt(kind: RunKind, transactions: Sequence[Transaction], category_names: Sequence[str]) -> str:
    if kind is RunKind.RETRY_REVIEW:
        return build_retry_prompt(transactions, category_names)
    return build_categorization_prompt(transactions, category_names)
