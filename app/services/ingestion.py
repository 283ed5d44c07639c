"""Ingestion pipeline: free text -> extraction -> categorization -> persisted expense."""

from app.agents.base import BaseExtractor
from app.core.db import CategoryStore, Expense, ExpenseStore
from app.core.errors import ExtractionFailedError, InvalidInputError
from app.core.models import NoMatch
from app.core.utils import get_logger, local_now, new_id, to_money, truncate
from app.services.categorizer import Categorizer

logger = get_logger("money-whisper.ingestion")


class IngestionPipeline:
    """Turn a raw purchase description into a stored Expense."""

    def __init__(self, extractor: BaseExtractor, category_store: CategoryStore, expense_store: ExpenseStore) -> None:
        """Initialize the pipeline with an extractor and the two stores."""
        self.extractor = extractor
        self.category_store = category_store
        self.expense_store = expense_store

    def ingest(self, raw_text: object) -> Expense:
        """Extract, categorize and persist one expense.

        Raises InvalidInputError for blank input, ExtractionFailedError when no candidate
        is found and StorageFailedError when the insert fails. Nothing is written unless
        every step succeeds.
        """
        if not isinstance(raw_text, str) or not raw_text.strip():
            raise InvalidInputError
        text = raw_text.strip()
        logger.info(f"Ingesting expense text: {truncate(text)}")

        categories = self.category_store.list_categories()
        result = self.extractor.extract(text, categories)
        if isinstance(result, NoMatch):
            logger.warning(f"Extraction failed for {text!r}: {result.reason}")
            raise ExtractionFailedError(raw_response=result.raw_response)
        candidate = result.candidate

        category_id = Categorizer(categories).resolve(candidate.description, candidate.category_name)
        if category_id is None:
            logger.info(f"Expense '{candidate.description}' left uncategorized")

        expense = Expense(
            id=new_id(),
            description=candidate.description,
            amount=to_money(candidate.amount),
            category_id=category_id,
            location=candidate.location,
            date=local_now(),
            auto_categorized=True,
        )
        saved = self.expense_store.add(expense)
        logger.info(f"Saved expense {saved.id}: {saved.description} {saved.amount} (category={category_id})")
        return saved
