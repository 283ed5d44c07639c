"""FastAPI dependencies for DI (settings, DB stores, LLM client, agents, pipelines).

This module provides dependency injection helpers for settings, per-request database
sessions, the Groq client and the agents built on it, enabling modular and testable API
endpoints. Tests override ``get_db_session`` and ``get_llm_client``.
"""

from fastapi import Depends
from groq import Groq
from sqlalchemy.orm import Session

from app.agents.llm import LLMClient
from app.agents.projection_agent import ProjectionAgent
from app.agents.registry import AgentRegistry
from app.core.db import CategoryStore, ExpenseStore, get_db_session
from app.core.errors import LLMCallFailedError
from app.core.settings import Settings, get_settings
from app.services.ingestion import IngestionPipeline
from app.services.insights import InsightsService


def get_groq_client(settings: Settings = Depends(get_settings)) -> Groq:
    """Provide a Groq SDK client with a bounded request timeout and no automatic retries."""
    if not settings.groq_api_key:
        msg = "GROQ_API_KEY is not configured"
        raise LLMCallFailedError(msg)
    return Groq(api_key=settings.groq_api_key, timeout=settings.llm_timeout_seconds, max_retries=0)


def get_llm_client(
    client: Groq = Depends(get_groq_client),
    settings: Settings = Depends(get_settings),
) -> LLMClient:
    """Provide the LLM wrapper used by every agent."""
    return LLMClient(client, settings)


def get_category_store(session: Session = Depends(get_db_session)) -> CategoryStore:
    """Provide the category store bound to the request session."""
    return CategoryStore(session)


def get_expense_store(session: Session = Depends(get_db_session)) -> ExpenseStore:
    """Provide the expense store bound to the request session."""
    return ExpenseStore(session)


def get_insights_service(
    categories: CategoryStore = Depends(get_category_store),
    expenses: ExpenseStore = Depends(get_expense_store),
) -> InsightsService:
    """Provide the aggregation service."""
    return InsightsService(categories, expenses)


def get_llm_pipeline(
    llm: LLMClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
    categories: CategoryStore = Depends(get_category_store),
    expenses: ExpenseStore = Depends(get_expense_store),
) -> IngestionPipeline:
    """Provide an ingestion pipeline driven by the LLM extraction agent."""
    extractor = AgentRegistry.create("llm", llm=llm, settings=settings)
    return IngestionPipeline(extractor, categories, expenses)


def get_rules_pipeline(
    categories: CategoryStore = Depends(get_category_store),
    expenses: ExpenseStore = Depends(get_expense_store),
) -> IngestionPipeline:
    """Provide an ingestion pipeline driven by the regex extractor."""
    return IngestionPipeline(AgentRegistry.create("rules"), categories, expenses)


def get_projection_agent(
    llm: LLMClient = Depends(get_llm_client),
    settings: Settings = Depends(get_settings),
) -> ProjectionAgent:
    """Provide the projection agent."""
    return ProjectionAgent(llm, settings)
