"""Pydantic models for the MoneyWhisper API.

This module defines the request/response schemas exposed over HTTP, the structured
candidate produced by text extraction, and the tagged success/failure results returned
by the LLM-backed extraction and projection agents. Wire field names are camelCase.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_ICON = "📊"
DEFAULT_COLOR = "#9E9E9E"


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases, populated by either name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Requests ---


class ExpenseTextRequest(BaseModel):
    """Free-text expense description posted by the user."""

    text: str | None = None


# --- Categories and expenses ---


class CategorySummary(CamelModel):
    """Display fields of a category attached to an expense."""

    name: str
    icon: str = DEFAULT_ICON
    color: str = DEFAULT_COLOR


class CategoryOut(CategorySummary):
    """A category as listed by GET /categories."""

    id: str

    @classmethod
    def from_record(cls, category: object) -> "CategoryOut":
        """Build from a Category row, applying display defaults."""
        return cls(
            id=category.id,
            name=category.name,
            icon=category.icon or DEFAULT_ICON,
            color=category.color or DEFAULT_COLOR,
        )


class CategoryListResponse(CamelModel):
    """Response of GET /categories."""

    categories: list[CategoryOut]


class ExpenseOut(CamelModel):
    """A persisted expense, optionally enriched with its category's display fields."""

    id: str
    description: str
    amount: float
    category_id: str | None = None
    date: datetime
    payment_method: str | None = None
    location: str | None = None
    notes: str | None = None
    auto_categorized: bool = True
    category: CategorySummary | None = None

    @classmethod
    def from_record(cls, expense: object, category: object | None = None) -> "ExpenseOut":
        """Build from an Expense row and the Category row it references, if any."""
        summary = None
        if category is not None:
            summary = CategorySummary(
                name=category.name,
                icon=category.icon or DEFAULT_ICON,
                color=category.color or DEFAULT_COLOR,
            )
        return cls(
            id=expense.id,
            description=expense.description,
            amount=float(expense.amount),
            category_id=expense.category_id,
            date=expense.date,
            payment_method=expense.payment_method,
            location=expense.location,
            notes=expense.notes,
            auto_categorized=bool(expense.auto_categorized),
            category=summary,
        )


class ExpenseCreatedResponse(CamelModel):
    """Response of the ingestion endpoints."""

    success: bool = True
    expense: ExpenseOut


class ExpenseListResponse(CamelModel):
    """Response of GET /expenses."""

    success: bool = True
    expenses: list[ExpenseOut]


# --- Insights ---


class CategoryInsight(CamelModel):
    """Per-category total and share of the grand total over a date range."""

    id: str
    name: str
    icon: str = DEFAULT_ICON
    color: str = DEFAULT_COLOR
    amount: float
    percentage: float


class InsightsResponse(CamelModel):
    """Aggregation result for a date range and optional category filter."""

    start_date: datetime
    end_date: datetime
    total_amount: float
    category_data: list[CategoryInsight]
    expenses: list[ExpenseOut]


# --- Extraction ---


class ExtractionCandidate(CamelModel):
    """Structured fields pulled out of a free-text expense description."""

    description: str
    amount: float
    location: str | None = None
    category_name: str | None = None


class Extracted(BaseModel):
    """Extraction succeeded."""

    kind: Literal["extracted"] = "extracted"
    candidate: ExtractionCandidate


class NoMatch(BaseModel):
    """Extraction found no usable candidate."""

    kind: Literal["no_match"] = "no_match"
    reason: str
    raw_response: str | None = None


ExtractionResult = Extracted | NoMatch


# --- Projections ---


class ProjectionCategory(CamelModel):
    """Projected end-of-month spend for one category."""

    name: str
    icon: str = DEFAULT_ICON
    current_total: float = 0.0
    projected_total: float
    reasoning: str = ""


class ProjectionReport(CamelModel):
    """End-of-month spending projection returned by the LLM, plus local context."""

    total_projection: float
    analysis: str = ""
    categories: list[ProjectionCategory] = Field(default_factory=list)
    current_date: str | None = None
    days_remaining: int | None = None
    total_spent_so_far: float | None = None


class ProjectionReady(BaseModel):
    """Projection parsed successfully."""

    kind: Literal["ready"] = "ready"
    report: ProjectionReport


class ProjectionFailed(BaseModel):
    """Projection reply could not be parsed."""

    kind: Literal["failed"] = "failed"
    reason: str
    raw_response: str


ProjectionResult = ProjectionReady | ProjectionFailed


class ProjectionResponse(CamelModel):
    """Response of GET /expense-projections."""

    success: bool = True
    projections: ProjectionReport


class ErrorResponse(CamelModel):
    """JSON error envelope returned for every failed request."""

    success: bool = False
    error: str
    raw_response: str | None = None
