"""DB models and store helpers for the MoneyWhisper API."""

from collections.abc import Generator, Iterable
from datetime import datetime

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.errors import StorageFailedError
from app.core.utils import get_logger, local_now

Base = declarative_base()

logger = get_logger("money-whisper.db")

IN_MEMORY_SQLITE_URLS = ("sqlite://", "sqlite:///:memory:")


class Category(Base):
    """A spending category with the keywords used for automatic categorization."""

    __tablename__ = "categories"
    id = Column(String, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    icon = Column(String, nullable=True)
    color = Column(String, nullable=True)
    keywords = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)


class Expense(Base):
    """A single purchase, optionally linked to a category."""

    __tablename__ = "expenses"
    id = Column(String, primary_key=True)
    description = Column(Text, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category_id = Column(String, ForeignKey("categories.id"), nullable=True)
    date = Column(DateTime, nullable=False, default=local_now, index=True)
    payment_method = Column(String, nullable=True)
    location = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    auto_categorized = Column(Boolean, default=True)
    created_at = Column(DateTime, nullable=False, default=local_now)
    updated_at = Column(DateTime, nullable=False, default=local_now, onupdate=local_now)


def get_engine(url: str | None = None) -> Engine:
    """Create a SQLAlchemy engine using the configured database URL."""
    if url is None:
        from app.core.settings import get_settings

        url = get_settings().database_url
    if not url.startswith("sqlite"):
        return create_engine(url)
    connect_args = {"check_same_thread": False}
    if url in IN_MEMORY_SQLITE_URLS:
        # One shared connection, otherwise each pooled connection sees its own empty database.
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)
    return create_engine(url, connect_args=connect_args)


engine = get_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db_session() -> Generator[Session, None, None]:
    """Yield a SQLAlchemy session for the duration of one request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


class CategoryStore:
    """Read access to the category reference table (plus seeding)."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def list_categories(self) -> list[Category]:
        """Return every category in its natural (position, name) order."""
        stmt = select(Category).order_by(Category.position, Category.name)
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as exc:
            logger.exception("Failed to load categories")
            raise StorageFailedError(f"Failed to fetch categories: {exc}") from exc

    def count(self) -> int:
        """Return the number of stored categories."""
        try:
            return self.session.scalar(select(func.count()).select_from(Category)) or 0
        except SQLAlchemyError as exc:
            raise StorageFailedError(f"Failed to count categories: {exc}") from exc

    def add_many(self, categories: Iterable[Category]) -> None:
        """Insert categories in one transaction."""
        try:
            self.session.add_all(list(categories))
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Failed to insert categories")
            raise StorageFailedError(f"Failed to insert categories: {exc}") from exc


class ExpenseStore:
    """Range queries and inserts on the expenses table."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def list_between(
        self,
        start: datetime,
        end: datetime,
        category_id: str | None = None,
        *,
        newest_first: bool = True,
    ) -> list[Expense]:
        """Return expenses dated within [start, end], optionally for one category."""
        stmt = select(Expense).where(Expense.date >= start, Expense.date <= end)
        if category_id:
            stmt = stmt.where(Expense.category_id == category_id)
        order = Expense.date.desc() if newest_first else Expense.date.asc()
        stmt = stmt.order_by(order)
        try:
            return list(self.session.scalars(stmt))
        except SQLAlchemyError as exc:
            logger.exception("Failed to query expenses")
            raise StorageFailedError(f"Failed to fetch expenses: {exc}") from exc

    def add(self, expense: Expense) -> Expense:
        """Persist a single expense; nothing is written if the commit fails."""
        try:
            self.session.add(expense)
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception(f"Failed to insert expense {expense.id}")
            raise StorageFailedError(f"Failed to save expense: {exc}") from exc
        self.session.refresh(expense)
        return expense
