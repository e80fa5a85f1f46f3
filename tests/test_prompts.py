import json
import re
from datetime import datetime, timezone

from expense_categorizer.domain.prompts import (
    NO_CATEGORIES,
    build_prompt,
    format_amount,
    serialize_candidates,
)
from expense_categorizer.models import RunKind, Transaction


def _tx(id: str, amount_cents: int, merchant: str | None = None) -> Transaction:
    return Transaction(
        id=id,
        owner_id="owner",
        date=datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc),
        description=f"Card payment {id}",
        amount_cents=amount_cents,
        merchant=merchant,
    )


def test_format_amount_keeps_sign() -> None:
    assert format_amount(1234) == "12.34"
    assert format_amount(-250000) == "-2500.00"
    assert format_amount(5) == "0.05"
    assert format_amount(0) == "0.00"


def test_serialize_candidates_fields() -> None:
    rows = json.loads(serialize_candidates([_tx("a", 1999, "Tesco"), _tx("b", -500)]))

    assert rows[0] == {
        "transactionId": "a",
        "date": "2024-01-15T09:30:00+00:00",
        "description": "Card payment a",
        "amount": "19.99",
        "merchant": "Tesco",
    }
    assert rows[1]["merchant"] is None
    assert rows[1]["amount"] == "-5.00"


def _embedded_rows(prompt: str) -> list[dict]:
    match = re.search(r"Transactions to (?:categorize|review):\n(\[.*?\n\])", prompt, re.S)
    assert match
    return json.loads(match.group(1))


def test_fresh_prompt_requests_merchant() -> None:
    prompt = build_prompt(RunKind.CATEGORIZE, [_tx("a", 100)], ["Groceries", "Dining"])

    assert "Available categories: Groceries, Dining" in prompt
    assert '"merchant"' in prompt
    assert '"reasoning"' not in prompt
    assert [row["transactionId"] for row in _embedded_rows(prompt)] == ["a"]


def test_retry_prompt_requests_reasoning() -> None:
    prompt = build_prompt(RunKind.RETRY_REVIEW, [_tx("a", 100), _tx("b", 200)], ["Rent"])

    assert '"reasoning"' in prompt
    assert "1-2 sentences" in prompt
    assert [row["transactionId"] for row in _embedded_rows(prompt)] == ["a", "b"]


def test_prompt_with_empty_catalog() -> None:
    prompt = build_prompt(RunKind.CATEGORIZE, [_tx("a", 100)], [])

    assert f"Available categories: {NO_CATEGORIES}" in prompt


def test_prompt_states_output_contract() -> None:
    prompt = build_prompt(RunKind.CATEGORIZE, [_tx("a", 100)], ["Rent"])

    assert "no wrapping object" in prompt
    assert "exactly once" in prompt
    assert "case-insensitive" in prompt
