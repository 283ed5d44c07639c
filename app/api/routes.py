"""FastAPI endpoints for the MoneyWhisper API.

This module defines the API routes for ingesting free-text expenses, listing today's
expenses and the categories, category insights over a date range, month-end projections
and health checks. It wires together the stores, agents and services through the
dependencies module. Failures are raised as ``MoneyWhisperError`` subclasses and rendered
as JSON envelopes by the handlers registered in ``main.py``.
"""

from fastapi import APIRouter, Depends, Query

from app.agents.projection_agent import ProjectionAgent
from app.api.dependencies import (
    get_category_store,
    get_expense_store,
    get_insights_service,
    get_llm_pipeline,
    get_projection_agent,
    get_rules_pipeline,
)
from app.core.db import CategoryStore, ExpenseStore
from app.core.errors import ProjectionParseFailedError
from app.core.models import (
    CategoryListResponse,
    CategoryOut,
    ErrorResponse,
    ExpenseCreatedResponse,
    ExpenseListResponse,
    ExpenseOut,
    ExpenseTextRequest,
    InsightsResponse,
    ProjectionFailed,
    ProjectionResponse,
)
from app.core.utils import get_logger
from app.services.ingestion import IngestionPipeline
from app.services.insights import InsightsService, insights_window, month_window

router = APIRouter()
logger = get_logger("money-whisper.api")

INGEST_RESPONSES = {
    200: {
        "description": "Expense extracted, categorized and saved.",
        "content": {
            "application/json": {
                "example": {
                    "success": True,
                    "expense": {
                        "id": "3f1c5a8e-2b7d-4c1e-9a6f-0d4b8e2c7a91",
                        "description": "pizza",
                        "amount": 300.0,
                        "categoryId": "a9d2f4c6-1e3b-4f5a-8c7d-6b0e2a4c8f13",
                        "date": "2026-10-17T13:05:22",
                        "location": "Dominos",
                        "autoCategorized": True,
                    },
                }
            }
        },
    },
    400: {"model": ErrorResponse, "description": "Blank input or no expense could be extracted."},
    500: {"model": ErrorResponse, "description": "Storage or LLM failure."},
}


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get(
    "/categories",
    response_model=CategoryListResponse,
    summary="List categories",
    description="Return every category with its display icon and color, in categorization order.",
    responses={500: {"model": ErrorResponse, "description": "Failed to fetch categories."}},
)
def list_categories(store: CategoryStore = Depends(get_category_store)) -> CategoryListResponse:
    """List all categories."""
    categories = store.list_categories()
    return CategoryListResponse(categories=[CategoryOut.from_record(category) for category in categories])


@router.get(
    "/expenses",
    response_model=ExpenseListResponse,
    summary="List today's expenses",
    description="Return the expenses recorded today (local time), oldest first, with their category.",
    responses={500: {"model": ErrorResponse, "description": "Failed to fetch expenses."}},
)
def list_today_expenses(service: InsightsService = Depends(get_insights_service)) -> ExpenseListResponse:
    """List today's expenses."""
    return ExpenseListResponse(expenses=service.expenses_for_day())


@router.post(
    "/expense",
    response_model=ExpenseCreatedResponse,
    summary="Add an expense from free text (LLM extraction)",
    description=(
        "Extract description, amount, location and category from a free-text purchase such as "
        '`"pizza for 300 rupees at Dominos"` using the LLM, then save it.\n\n'
        "**Request:** `{ 'text': '<purchase description>' }`\n\n"
        "**Response:**\n"
        "- 200 OK: the saved expense.\n"
        "- 400 Bad Request: blank text or nothing could be extracted.\n"
        "- 500 Internal Server Error: LLM or storage failure."
    ),
    responses=INGEST_RESPONSES,
)
def create_expense(
    payload: ExpenseTextRequest,
    pipeline: IngestionPipeline = Depends(get_llm_pipeline),
) -> ExpenseCreatedResponse:
    """Ingest an expense with the LLM extraction agent."""
    logger.info("Received expense ingestion request (llm)")
    expense = pipeline.ingest(payload.text)
    return ExpenseCreatedResponse(expense=ExpenseOut.from_record(expense))


@router.post(
    "/extract-data",
    response_model=ExpenseCreatedResponse,
    summary="Add an expense from free text (pattern extraction)",
    description=(
        'Parse text of the form `"<item> [at <place>] for <amount> rupees"` without calling the LLM, '
        "categorize it by keywords and save it.\n\n"
        "**Response:**\n"
        "- 200 OK: the saved expense.\n"
        "- 400 Bad Request: blank text or the text does not match the pattern.\n"
        "- 500 Internal Server Error: storage failure."
    ),
    responses=INGEST_RESPONSES,
)
def extract_data(
    payload: ExpenseTextRequest,
    pipeline: IngestionPipeline = Depends(get_rules_pipeline),
) -> ExpenseCreatedResponse:
    """Ingest an expense with the regex extractor."""
    logger.info("Received expense ingestion request (rules)")
    expense = pipeline.ingest(payload.text)
    return ExpenseCreatedResponse(expense=ExpenseOut.from_record(expense))


@router.get(
    "/insights",
    response_model=InsightsResponse,
    summary="Category insights for a date range",
    description=(
        "Total spending and per-category breakdown between `startDate` and `endDate` (inclusive, ISO dates). "
        "Defaults to the last three months through today. Every category is listed, sorted by amount "
        "descending. Uncategorized expenses are counted under Miscellaneous."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid query parameters."},
        500: {"model": ErrorResponse, "description": "Failed to fetch insights data."},
    },
)
def get_insights(
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    category_id: str | None = Query(None, alias="categoryId"),
    service: InsightsService = Depends(get_insights_service),
) -> InsightsResponse:
    """Aggregate expenses per category over a date range."""
    start, end = insights_window(start_date, end_date)
    return service.aggregate(start, end, category_id or None)


@router.get(
    "/expense-projections",
    response_model=ProjectionResponse,
    summary="Project this month's spending",
    description=(
        "Send this month's expenses, grouped by category, to the LLM and return its projection of the "
        "month-end total with per-category reasoning.\n\n"
        "- 500 Internal Server Error: LLM failure or unparseable reply (`rawResponse` holds the model text)."
    ),
    responses={500: {"model": ErrorResponse, "description": "Failed to generate projections."}},
)
def get_expense_projections(
    categories: CategoryStore = Depends(get_category_store),
    expenses: ExpenseStore = Depends(get_expense_store),
    agent: ProjectionAgent = Depends(get_projection_agent),
) -> ProjectionResponse:
    """Project total spending for the current month."""
    start, now = month_window()
    month_expenses = expenses.list_between(start, now)
    result = agent.project(month_expenses, categories.list_categories(), now)
    if isinstance(result, ProjectionFailed):
        raise ProjectionParseFailedError(raw_response=result.raw_response)
    return ProjectionResponse(projections=result.report)
