"""Category resolution for new expenses.

Two paths map an expense to a category id:

* keyword path: the description is lower-cased and each category's comma-separated
  keywords are tested as substrings, in the category store's natural order. The
  **first** category with a matching keyword wins, even if a later category has a
  longer or more specific keyword. E.g. with the default table "movie ticket" resolves
  to Transportation ("ticket"), not Entertainment ("movie"), because Transportation
  comes first.
* name path: a category name suggested by the LLM is compared case-insensitively with
  the known names.

Both fall back to the category literally named ``Miscellaneous``; if that category does
not exist the result is ``None`` and the expense is stored uncategorized.
"""

from collections.abc import Sequence

from app.core.db import Category
from app.core.utils import get_logger

logger = get_logger("money-whisper.ingestion")

MISCELLANEOUS = "Miscellaneous"


def split_keywords(keywords: str | None) -> list[str]:
    """Split a comma-separated keyword field into trimmed, lower-cased, non-empty keywords."""
    if not keywords:
        return []
    return [kw.strip() for kw in keywords.lower().split(",") if kw.strip()]


def find_miscellaneous(categories: Sequence[Category]) -> Category | None:
    """Return the category named exactly "Miscellaneous", if present."""
    return next((category for category in categories if category.name == MISCELLANEOUS), None)


def _fallback_id(categories: Sequence[Category]) -> str | None:
    misc = find_miscellaneous(categories)
    if misc is None:
        logger.warning(f"No '{MISCELLANEOUS}' category defined; leaving expense uncategorized")
        return None
    return misc.id


def categorize_by_keywords(description: str, categories: Sequence[Category]) -> str | None:
    """Return the id of the first category with a keyword contained in the description."""
    lowered = description.lower()
    for category in categories:
        for keyword in split_keywords(category.keywords):
            if keyword in lowered:
                logger.info(f"Keyword '{keyword}' matched category '{category.name}' for '{description}'")
                return category.id
    return _fallback_id(categories)


def categorize_by_name(category_name: str | None, categories: Sequence[Category]) -> str | None:
    """Return the id of the category whose name equals category_name, ignoring case."""
    if category_name:
        wanted = category_name.strip().lower()
        for category in categories:
            if category.name.lower() == wanted:
                return category.id
        logger.info(f"Suggested category '{category_name}' is unknown; falling back to {MISCELLANEOUS}")
    return _fallback_id(categories)


class Categorizer:
    """Resolve a category id for a description, preferring an AI-suggested name when given."""

    def __init__(self, categories: Sequence[Category]) -> None:
        """Initialize with the category list in natural order."""
        self.categories = list(categories)

    def resolve(self, description: str, suggested_name: str | None = None) -> str | None:
        """Use the name path when the LLM suggested a category, otherwise the keyword path."""
        if suggested_name is not None:
            return categorize_by_name(suggested_name, self.categories)
        return categorize_by_keywords(description, self.categories)
