"""Spending aggregation: date windows and per-category totals for the insights views."""

import calendar
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal

from app.core.db import Category, CategoryStore, Expense, ExpenseStore
from app.core.models import DEFAULT_COLOR, DEFAULT_ICON, CategoryInsight, ExpenseOut, InsightsResponse
from app.core.utils import get_logger, local_now, to_money
from app.services.categorizer import find_miscellaneous

logger = get_logger("money-whisper.insights")

INSIGHTS_LOOKBACK_MONTHS = 3


def start_of_day(moment: datetime) -> datetime:
    """Return midnight at the start of moment's day."""
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(moment: datetime) -> datetime:
    """Return the last representable instant of moment's day."""
    return moment.replace(hour=23, minute=59, second=59, microsecond=999999)


def subtract_months(moment: datetime, months: int) -> datetime:
    """Move back whole calendar months, clamping the day to the target month's length."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def today_window(now: datetime | None = None) -> tuple[datetime, datetime]:
    """Inclusive bounds of the current day."""
    now = now or local_now()
    return start_of_day(now), end_of_day(now)


def month_window(now: datetime | None = None) -> tuple[datetime, datetime]:
    """From the first instant of the current month through now."""
    now = now or local_now()
    return start_of_day(now.replace(day=1)), now


def parse_date_param(value: str | None) -> datetime | None:
    """Parse an ISO-8601 date or datetime query value; None if absent or invalid."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        logger.warning(f"Ignoring unparseable date parameter: {value!r}")
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def insights_window(
    start_param: str | None,
    end_param: str | None,
    now: datetime | None = None,
) -> tuple[datetime, datetime]:
    """Resolve the insights date range, defaulting to the last three months through today."""
    now = now or local_now()
    start = parse_date_param(start_param)
    end = parse_date_param(end_param)
    start_date = start_of_day(start) if start else start_of_day(subtract_months(now, INSIGHTS_LOOKBACK_MONTHS))
    end_date = end_of_day(end) if end else end_of_day(now)
    return start_date, end_date


def bucket_id_for(expense: Expense, known_ids: set[str], misc_id: str | None) -> str | None:
    """Category bucket an expense counts toward.

    Expenses without a category, or pointing at a category that no longer exists, are
    folded into Miscellaneous. Without a Miscellaneous category they have no bucket.
    """
    if expense.category_id and expense.category_id in known_ids:
        return expense.category_id
    return misc_id


def compute_category_insights(
    expenses: Sequence[Expense],
    categories: Sequence[Category],
) -> tuple[Decimal, list[CategoryInsight]]:
    """Total every expense and break it down over all categories, largest first.

    Every category is present in the result, including those with no spending. Every
    expense counts toward the grand total, even one with no bucket. Ties keep the
    category order.
    """
    known_ids = {category.id for category in categories}
    misc = find_miscellaneous(categories)
    misc_id = misc.id if misc else None

    total = Decimal(0)
    amounts: dict[str, Decimal] = {}
    for expense in expenses:
        amount = to_money(expense.amount)
        total += amount
        bucket = bucket_id_for(expense, known_ids, misc_id)
        if bucket is None:
            logger.warning(f"Expense {expense.id} has no category bucket; counted in total only")
            continue
        amounts[bucket] = amounts.get(bucket, Decimal(0)) + amount

    insights = []
    for category in categories:
        amount = amounts.get(category.id, Decimal(0))
        percentage = float(amount / total * 100) if total > 0 else 0.0
        insights.append(
            CategoryInsight(
                id=category.id,
                name=category.name,
                icon=category.icon or DEFAULT_ICON,
                color=category.color or DEFAULT_COLOR,
                amount=float(amount),
                percentage=percentage,
            )
        )
    insights.sort(key=lambda insight: insight.amount, reverse=True)
    return total, insights


class InsightsService:
    """Aggregate stored expenses over a date range."""

    def __init__(self, category_store: CategoryStore, expense_store: ExpenseStore) -> None:
        """Initialize with the category and expense stores."""
        self.category_store = category_store
        self.expense_store = expense_store

    def aggregate(self, start: datetime, end: datetime, category_id: str | None = None) -> InsightsResponse:
        """Return totals per category plus the matching expenses (newest first)."""
        suffix = f" for category {category_id}" if category_id else ""
        logger.info(f"Searching for expenses between {start.isoformat()} and {end.isoformat()}{suffix}")
        categories = self.category_store.list_categories()
        expenses = self.expense_store.list_between(start, end, category_id)
        logger.info(f"Found {len(expenses)} expenses{suffix}")
        total, insights = compute_category_insights(expenses, categories)
        by_id = {category.id: category for category in categories}
        return InsightsResponse(
            start_date=start,
            end_date=end,
            total_amount=float(total),
            category_data=insights,
            expenses=[ExpenseOut.from_record(expense, by_id.get(expense.category_id)) for expense in expenses],
        )

    def expenses_for_day(self, now: datetime | None = None) -> list[ExpenseOut]:
        """Today's expenses, oldest first, enriched with their category."""
        start, end = today_window(now)
        categories = self.category_store.list_categories()
        by_id = {category.id: category for category in categories}
        expenses = self.expense_store.list_between(start, end, newest_first=False)
        return [ExpenseOut.from_record(expense, by_id.get(expense.category_id)) for expense in expenses]
