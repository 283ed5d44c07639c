"""Shared fixtures: in-memory database, seeded categories, fake Groq client, API client."""

from collections.abc import Generator, Iterator
from datetime import datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.agents.llm import LLMClient
from app.api.dependencies import get_llm_client
from app.core.db import Base, Category, CategoryStore, Expense, ExpenseStore, get_db_session
from app.core.seed import seed_categories
from app.core.settings import Settings, get_settings
from app.core.utils import new_id, to_money
from main import app

CHUNK_SIZE = 7


class FakeCompletions:
    """Stand-in for ``groq.Groq().chat.completions`` replaying queued replies."""

    def __init__(self) -> None:
        self.replies: list[str | Exception] = []
        self.calls: list[dict] = []

    def create(self, **kwargs: object) -> object:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if kwargs.get("stream"):
            return [
                SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=reply[i : i + CHUNK_SIZE]))])
                for i in range(0, len(reply), CHUNK_SIZE)
            ]
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeGroq:
    """Minimal Groq client double."""

    def __init__(self) -> None:
        self.completions = FakeCompletions()
        self.chat = SimpleNamespace(completions=self.completions)

    def queue(self, *replies: str | Exception) -> None:
        self.completions.replies.extend(replies)

    @property
    def calls(self) -> list[dict]:
        return self.completions.calls


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, groq_api_key="test-key", llm_stream=True)


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Iterator[Session]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def category_store(session: Session) -> CategoryStore:
    return CategoryStore(session)


@pytest.fixture
def expense_store(session: Session) -> ExpenseStore:
    return ExpenseStore(session)


@pytest.fixture
def categories(category_store: CategoryStore) -> list[Category]:
    seed_categories(category_store)
    return category_store.list_categories()


@pytest.fixture
def by_name(categories: list[Category]) -> dict[str, Category]:
    return {category.name: category for category in categories}


@pytest.fixture
def fake_groq() -> FakeGroq:
    return FakeGroq()


@pytest.fixture
def llm(fake_groq: FakeGroq, settings: Settings) -> LLMClient:
    return LLMClient(fake_groq, settings)


@pytest.fixture
def client(session: Session, categories: list[Category], llm: LLMClient, settings: Settings) -> Iterator[TestClient]:
    _ = categories

    def override_session() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_llm_client] = lambda: llm
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_expense(
    description: str,
    amount: float | str,
    category: Category | None,
    date: datetime,
    **fields: object,
) -> Expense:
    """Build an unsaved Expense row."""
    return Expense(
        id=new_id(),
        description=description,
        amount=to_money(amount),
        category_id=category.id if category else None,
        date=date,
        auto_categorized=True,
        **fields,
    )
