from expense_categorizer.domain.categories import resolve_category
from expense_categorizer.domain.policy import should_apply
from expense_categorizer.models import Category, RunKind

CATALOG = [
    Category(id="c-groceries", name="Groceries"),
    Category(id="c-dining", name="Dining"),
]


def test_resolve_is_case_insensitive() -> None:
    assert resolve_category("Groceries", CATALOG) == "c-groceries"
    assert resolve_category("groceries", CATALOG) == "c-groceries"
    assert resolve_category("GROCERIES", CATALOG) == "c-groceries"
    assert resolve_category("  dining ", CATALOG) == "c-dining"


def test_resolve_unknown_or_empty() -> None:
    assert resolve_category("Travel", CATALOG) is None
    assert resolve_category(None, CATALOG) is None
    assert resolve_category("", CATALOG) is None
    assert resolve_category("Groceries", []) is None


def test_fresh_threshold_boundary() -> None:
    assert should_apply(RunKind.CATEGORIZE, 0.6)
    assert should_apply(RunKind.CATEGORIZE, 1.0)
    assert not should_apply(RunKind.CATEGORIZE, 0.59)
    assert not should_apply(RunKind.CATEGORIZE, 0.0)


def test_retry_threshold_boundary() -> None:
    assert should_apply(RunKind.RETRY_REVIEW, 0.8)
    assert not should_apply(RunKind.RETRY_REVIEW, 0.79)
    assert not should_apply(RunKind.RETRY_REVIEW, 0.6)
