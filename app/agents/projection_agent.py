"""ProjectionAgent: LLM-backed end-of-month spending projection.

The agent groups the current month's expenses by category, renders them into a fixed
prompt, asks the model for a JSON projection and validates the reply. A reply that is not
valid projection JSON comes back as ``ProjectionFailed`` carrying the raw text.
"""

import calendar
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from pydantic import ValidationError

from app.agents.llm import LLMClient
from app.agents.prompts import PROJECTION_CATEGORY_TEMPLATE, PROJECTION_ITEM_TEMPLATE, PROJECTION_PROMPT_TEMPLATE
from app.core.db import Category, Expense
from app.core.models import DEFAULT_ICON, ProjectionFailed, ProjectionReady, ProjectionReport, ProjectionResult
from app.core.settings import Settings
from app.core.utils import get_logger, local_now, strip_code_fences, to_money, truncate
from app.services.categorizer import find_miscellaneous
from app.services.insights import bucket_id_for

logger = get_logger("money-whisper.agent")

UNCATEGORIZED = "Uncategorized"


@dataclass
class CategoryBucket:
    """Running total and itemized expenses of one category for the month."""

    id: str
    name: str
    icon: str
    total: Decimal = Decimal(0)
    items: list[Expense] = field(default_factory=list)


def format_long_date(moment: datetime) -> str:
    """E.g. "October 17, 2026"."""
    return f"{moment:%B} {moment.day}, {moment.year}"


def format_short_date(moment: datetime) -> str:
    """E.g. "Oct 3"."""
    return f"{moment:%b} {moment.day}"


def bucket_month_expenses(
    expenses: Sequence[Expense],
    categories: Sequence[Category],
) -> tuple[Decimal, list[CategoryBucket]]:
    """Group expenses by category in order of first appearance; return (grand total, buckets).

    Uncategorized expenses follow the insights rule: they join Miscellaneous when it
    exists, else an "Uncategorized" bucket.
    """
    by_id = {category.id: category for category in categories}
    known_ids = set(by_id)
    misc = find_miscellaneous(categories)
    misc_id = misc.id if misc else None
    buckets: dict[str, CategoryBucket] = {}
    total = Decimal(0)
    for expense in expenses:
        amount = to_money(expense.amount)
        total += amount
        bucket_id = bucket_id_for(expense, known_ids, misc_id)
        if bucket_id is None:
            key, name, icon = UNCATEGORIZED, UNCATEGORIZED, DEFAULT_ICON
        else:
            category = by_id[bucket_id]
            key, name, icon = bucket_id, category.name, category.icon or DEFAULT_ICON
        bucket = buckets.setdefault(key, CategoryBucket(id=key, name=name, icon=icon))
        bucket.total += amount
        bucket.items.append(expense)
    return total, list(buckets.values())


def build_projection_prompt(
    buckets: Sequence[CategoryBucket],
    total_spent: Decimal,
    now: datetime,
    currency: str = "₹",
) -> str:
    """Render the projection prompt for the month containing now."""
    total_days = calendar.monthrange(now.year, now.month)[1]
    sections = []
    for bucket in buckets:
        items = "\n  ".join(
            PROJECTION_ITEM_TEMPLATE.format(
                description=expense.description,
                currency=currency,
                amount=f"{to_money(expense.amount):.2f}",
                date=format_short_date(expense.date),
            )
            for expense in bucket.items
        )
        sections.append(
            PROJECTION_CATEGORY_TEMPLATE.format(
                name=bucket.name,
                icon=bucket.icon,
                currency=currency,
                total=f"{bucket.total:.2f}",
                items=items,
            )
        )
    return PROJECTION_PROMPT_TEMPLATE.format(
        current_date=format_long_date(now),
        days_elapsed=now.day,
        total_days=total_days,
        category_sections="\n".join(sections),
        currency=currency,
        total_spent=f"{total_spent:.2f}",
    )


def parse_projection(raw_output: str) -> ProjectionResult:
    """Strip code fences and validate the reply against the projection schema."""
    cleaned = strip_code_fences(raw_output)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.warning(f"Error parsing LLM response: {exc}. Raw LLM response: {raw_output}")
        return ProjectionFailed(reason=f"Invalid JSON: {exc}", raw_response=raw_output)
    try:
        report = ProjectionReport.model_validate(data)
    except ValidationError as exc:
        logger.warning(f"LLM projection failed validation: {exc}. Raw LLM response: {raw_output}")
        return ProjectionFailed(reason="Projection JSON does not match the expected schema", raw_response=raw_output)
    return ProjectionReady(report=report)


class ProjectionAgent:
    """Agent that projects this month's total spending from the expenses so far."""

    def __init__(self, llm: LLMClient, settings: Settings) -> None:
        """Initialize the agent with an LLM client and settings."""
        self.llm = llm
        self.settings = settings

    def project(
        self,
        expenses: Sequence[Expense],
        categories: Sequence[Category],
        now: datetime | None = None,
    ) -> ProjectionResult:
        """Build the prompt, call the LLM once and return the parsed, augmented report."""
        now = now or local_now()
        total_days = calendar.monthrange(now.year, now.month)[1]
        total_spent, buckets = bucket_month_expenses(expenses, categories)
        prompt = build_projection_prompt(buckets, total_spent, now, self.settings.currency_symbol)
        logger.info(f"AGENT: Projecting month from {len(expenses)} expenses in {len(buckets)} categories")
        raw_output = self.llm.generate(
            prompt,
            temperature=self.settings.projection_temperature,
            max_tokens=self.settings.projection_max_completion_tokens,
        )
        logger.info(f"OUTPUT: {truncate(raw_output)}")
        result = parse_projection(raw_output)
        if isinstance(result, ProjectionReady):
            result.report.current_date = format_long_date(now)
            result.report.days_remaining = total_days - now.day
            result.report.total_spent_so_far = float(total_spent)
        return result
