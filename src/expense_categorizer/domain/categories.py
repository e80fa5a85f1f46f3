from collections.abc import Iterable

from expense_categorizer.models import Category

DEFAULT_CATEGORIES = (
    "Groceries",
    "Dining",
    "Rent",
    "Utilities",
    "Transport",
    "Shopping",
    "Subscriptions",
    "Income",
    "Other",
)


def normalize_name(name: str) -> str:
    return name.strip().casefold()


def resolve_category(name: str | None, catalog: Iterable[Category]) -> str | None:
    """Return the id of the catalog entry matching ``name``, ignoring case."""
    if not name:
        return None
    wanted = normalize_name(name)
    if not wanted:
        return None
    for category in catalog:
        if normalize_name(category.name) == wanted:
            return category.id
    return None


def category_names(catalog: Iterable[Category]) -> list[str]:
    return [category.name for category in catalog]
