"""Tests for aggregation windows and per-category insights."""

from datetime import datetime
from decimal import Decimal

import pytest
from conftest import make_expense

from app.core.db import Category, CategoryStore, ExpenseStore
from app.services.insights import (
    InsightsService,
    compute_category_insights,
    insights_window,
    month_window,
    subtract_months,
    today_window,
)

NOW = datetime(2026, 10, 17, 14, 30)


def _two_categories() -> list[Category]:
    return [Category(id="a", name="A"), Category(id="b", name="B")]


def test_sorted_descending_with_percentages() -> None:
    cats = _two_categories()
    expenses = [make_expense("x", 100, cats[0], NOW), make_expense("y", 300, cats[1], NOW)]

    total, insights = compute_category_insights(expenses, cats)

    assert total == Decimal("400.00")
    assert [(i.id, i.amount, i.percentage) for i in insights] == [("b", 300.0, 75.0), ("a", 100.0, 25.0)]


def test_every_category_present_when_no_expenses(categories: list[Category]) -> None:
    total, insights = compute_category_insights([], categories)

    assert total == 0
    assert len(insights) == len(categories)
    assert all(i.amount == 0 and i.percentage == 0 for i in insights)
    # Stable sort keeps natural order for equal amounts.
    assert [i.id for i in insights] == [c.id for c in categories]


def test_ties_keep_category_order() -> None:
    cats = [Category(id=c, name=c.upper()) for c in "abcd"]
    expenses = [make_expense("x", 50, cats[2], NOW), make_expense("y", 50, cats[1], NOW)]

    _, insights = compute_category_insights(expenses, cats)

    assert [i.id for i in insights] == ["b", "c", "a", "d"]


def test_totals_and_percentages_add_up(by_name: dict[str, Category], categories: list[Category]) -> None:
    expenses = [
        make_expense("milk", 60, by_name["Groceries"], NOW),
        make_expense("rice", 140.5, by_name["Groceries"], NOW),
        make_expense("uber", 230, by_name["Transportation"], NOW),
        make_expense("rent", 15000, by_name["Housing"], NOW),
        make_expense("gift", 499.99, by_name["Miscellaneous"], NOW),
    ]

    total, insights = compute_category_insights(expenses, categories)

    assert total == Decimal("15930.49")
    assert sum(i.amount for i in insights) == pytest.approx(float(total))
    assert sum(i.percentage for i in insights) == pytest.approx(100.0)
    assert insights[0].name == "Housing"


def test_uncategorized_expenses_fold_into_miscellaneous(
    by_name: dict[str, Category], categories: list[Category]
) -> None:
    orphan = make_expense("mystery", 40, None, NOW)
    dangling = make_expense("deleted category", 10, None, NOW)
    dangling.category_id = "no-such-category"
    expenses = [orphan, dangling, make_expense("tea", 50, by_name["Dining Out"], NOW)]

    total, insights = compute_category_insights(expenses, categories)

    amounts = {i.name: i.amount for i in insights}
    assert total == Decimal("100.00")
    assert amounts["Miscellaneous"] == 50.0
    assert amounts["Dining Out"] == 50.0
    assert sum(amounts.values()) == float(total)


def test_uncategorized_without_miscellaneous_counts_in_total_only() -> None:
    cats = _two_categories()
    expenses = [make_expense("x", 100, cats[0], NOW), make_expense("y", 100, None, NOW)]

    total, insights = compute_category_insights(expenses, cats)

    assert total == Decimal("200.00")
    assert [(i.id, i.amount, i.percentage) for i in insights] == [("a", 100.0, 50.0), ("b", 0.0, 0.0)]


def test_today_window_is_inclusive_day() -> None:
    start, end = today_window(NOW)
    assert start == datetime(2026, 10, 17)
    assert end == datetime(2026, 10, 17, 23, 59, 59, 999999)


def test_month_window_runs_from_first_day_to_now() -> None:
    assert month_window(NOW) == (datetime(2026, 10, 1), NOW)


def test_insights_window_defaults_to_last_three_months() -> None:
    start, end = insights_window(None, None, NOW)
    assert start == datetime(2026, 7, 17)
    assert end == datetime(2026, 10, 17, 23, 59, 59, 999999)


def test_insights_window_parses_and_falls_back() -> None:
    start, end = insights_window("2026-10-01", "not-a-date", NOW)
    assert start == datetime(2026, 10, 1)
    assert end == datetime(2026, 10, 17, 23, 59, 59, 999999)


def test_subtract_months_clamps_day() -> None:
    assert subtract_months(datetime(2026, 5, 31, 9, 0), 3) == datetime(2026, 2, 28, 9, 0)
    assert subtract_months(datetime(2026, 1, 15), 3) == datetime(2025, 10, 15)


def test_service_aggregates_stored_expenses(
    category_store: CategoryStore, expense_store: ExpenseStore, by_name: dict[str, Category]
) -> None:
    groceries, transport = by_name["Groceries"], by_name["Transportation"]
    expense_store.add(make_expense("milk", 100, groceries, datetime(2026, 10, 1, 9, 0)))
    expense_store.add(make_expense("bus", 300, transport, datetime(2026, 10, 17, 23, 0)))
    expense_store.add(make_expense("old", 999, transport, datetime(2026, 9, 30, 23, 59)))
    service = InsightsService(category_store, expense_store)

    start, end = insights_window("2026-10-01", "2026-10-17", NOW)
    result = service.aggregate(start, end)

    assert result.total_amount == 400.0
    assert [(c.name, c.amount, c.percentage) for c in result.category_data[:2]] == [
        ("Transportation", 300.0, 75.0),
        ("Groceries", 100.0, 25.0),
    ]
    assert [e.description for e in result.expenses] == ["bus", "milk"]
    assert result.expenses[0].category.name == "Transportation"
    # Same parameters, no writes in between: same answer.
    assert service.aggregate(start, end) == result


def test_service_filters_by_category(
    category_store: CategoryStore, expense_store: ExpenseStore, by_name: dict[str, Category]
) -> None:
    expense_store.add(make_expense("milk", 100, by_name["Groceries"], NOW))
    expense_store.add(make_expense("bus", 300, by_name["Transportation"], NOW))
    service = InsightsService(category_store, expense_store)

    start, end = today_window(NOW)
    result = service.aggregate(start, end, by_name["Groceries"].id)

    assert result.total_amount == 100.0
    assert [e.description for e in result.expenses] == ["milk"]
    assert result.category_data[0].percentage == 100.0
    assert len(result.category_data) == len(by_name)


def test_service_empty_day(category_store: CategoryStore, expense_store: ExpenseStore, categories: list) -> None:
    service = InsightsService(category_store, expense_store)

    result = service.aggregate(*today_window(NOW))

    assert result.total_amount == 0
    assert result.expenses == []
    assert len(result.category_data) == len(categories)
    assert all(c.amount == 0 and c.percentage == 0 for c in result.category_data)
