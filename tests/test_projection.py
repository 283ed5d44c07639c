"""Tests for the month-end projection agent."""

import json
from datetime import datetime
from decimal import Decimal

import pytest
from conftest import FakeGroq, make_expense

from app.agents.llm import LLMClient
from app.agents.projection_agent import (
    ProjectionAgent,
    bucket_month_expenses,
    build_projection_prompt,
    parse_projection,
)
from app.core.db import Category
from app.core.errors import LLMCallFailedError
from app.core.models import ProjectionFailed, ProjectionReady
from app.core.settings import Settings

NOW = datetime(2026, 10, 17, 18, 0)

REPLY = {
    "totalProjection": 12500,
    "analysis": "Groceries are bought weekly. Rent is already paid.",
    "categories": [
        {"name": "Groceries", "icon": "🛒", "currentTotal": 700, "projectedTotal": 1400, "reasoning": "Weekly shop."},
    ],
}


@pytest.fixture
def month_expenses(by_name: dict[str, Category]) -> list:
    return [
        make_expense("vegetables", 200, by_name["Groceries"], datetime(2026, 10, 15, 10, 0)),
        make_expense("gift wrap", 80, None, datetime(2026, 10, 9, 12, 0)),
        make_expense("milk", 500, by_name["Groceries"], datetime(2026, 10, 3, 8, 0)),
    ]


def test_buckets_group_and_total(month_expenses: list, categories: list[Category]) -> None:
    total, buckets = bucket_month_expenses(month_expenses, categories)

    assert total == Decimal("780.00")
    assert [(b.name, b.total) for b in buckets] == [("Groceries", Decimal("700.00")), ("Miscellaneous", Decimal("80.00"))]
    assert [e.description for e in buckets[0].items] == ["vegetables", "milk"]


def test_buckets_without_miscellaneous_use_uncategorized() -> None:
    food = Category(id="food", name="Food", icon=None)
    expenses = [make_expense("bread", 40, food, NOW), make_expense("??", 10, None, NOW)]

    _, buckets = bucket_month_expenses(expenses, [food])

    assert [(b.name, b.icon) for b in buckets] == [("Food", "📊"), ("Uncategorized", "📊")]


def test_prompt_embeds_dates_items_and_totals(month_expenses: list, categories: list[Category]) -> None:
    total, buckets = bucket_month_expenses(month_expenses, categories)

    prompt = build_projection_prompt(buckets, total, NOW)

    assert "Today's date: October 17, 2026" in prompt
    assert "Days elapsed in current month: 17 out of 31 days" in prompt
    assert "Groceries (🛒): ₹700.00" in prompt
    assert "- vegetables: ₹200.00 (Oct 15)" in prompt
    assert "- milk: ₹500.00 (Oct 3)" in prompt
    assert "Total spent so far: ₹780.00" in prompt
    assert '"totalProjection": number' in prompt


def test_parse_projection_accepts_fenced_json() -> None:
    result = parse_projection(f"```json\n{json.dumps(REPLY)}\n```")

    assert isinstance(result, ProjectionReady)
    assert result.report.total_projection == 12500
    assert result.report.categories[0].projected_total == 1400


@pytest.mark.parametrize("raw", ["The projection is 12500.", '{"analysis": "missing total"}', "[]"])
def test_parse_projection_failure_keeps_raw_text(raw: str) -> None:
    result = parse_projection(raw)

    assert isinstance(result, ProjectionFailed)
    assert result.raw_response == raw


def test_project_augments_report(
    fake_groq: FakeGroq, settings: Settings, month_expenses: list, categories: list[Category]
) -> None:
    fake_groq.queue(json.dumps(REPLY))
    agent = ProjectionAgent(LLMClient(fake_groq, settings), settings)

    result = agent.project(month_expenses, categories, NOW)

    assert isinstance(result, ProjectionReady)
    report = result.report
    assert report.current_date == "October 17, 2026"
    assert report.days_remaining == 14
    assert report.total_spent_so_far == 780.0
    call = fake_groq.calls[0]
    assert call["temperature"] == 0.2
    assert call["max_completion_tokens"] == 1500


def test_project_does_not_retry_malformed_reply(
    fake_groq: FakeGroq, settings: Settings, month_expenses: list, categories: list[Category]
) -> None:
    fake_groq.queue("not json", json.dumps(REPLY))
    agent = ProjectionAgent(LLMClient(fake_groq, settings), settings)

    result = agent.project(month_expenses, categories, NOW)

    assert isinstance(result, ProjectionFailed)
    assert result.raw_response == "not json"
    assert len(fake_groq.calls) == 1


def test_project_surfaces_llm_failure(fake_groq: FakeGroq, settings: Settings, categories: list[Category]) -> None:
    fake_groq.queue(RuntimeError("rate limited"))
    agent = ProjectionAgent(LLMClient(fake_groq, settings), settings)

    with pytest.raises(LLMCallFailedError):
        agent.project([], categories, NOW)
