"""Base agent abstraction for expense text extractors.

This module defines the abstract base class for all extractors, enforcing a standard
interface for turning free-text purchase descriptions into structured candidates.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from app.core.db import Category
from app.core.models import ExtractionResult


class BaseExtractor(ABC):
    """Abstract base class for all extractors."""

    @abstractmethod
    def extract(self, text: str, categories: Sequence[Category]) -> ExtractionResult:
        """Extract a structured candidate from raw text; never raises for malformed input."""
