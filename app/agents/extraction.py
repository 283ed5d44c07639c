"""Expense text extraction: a regex extractor and an LLM-backed extraction agent.

Both turn free text such as ``"pizza for 300 rupees at Dominos"`` into an
``ExtractionCandidate`` and report failure as a ``NoMatch`` result rather than raising.
The only exception that escapes is ``LLMCallFailedError`` when the provider call itself
fails.
"""

import json
import math
import re
from collections.abc import Sequence

from pydantic import ValidationError

from app.agents.base import BaseExtractor
from app.agents.llm import LLMClient
from app.agents.prompts import CATEGORY_OPTION_TEMPLATE, EXTRACTION_PROMPT_TEMPLATE
from app.core.db import Category
from app.core.models import DEFAULT_ICON, Extracted, ExtractionCandidate, ExtractionResult, NoMatch
from app.core.settings import Settings
from app.core.utils import get_logger, strip_code_fences, truncate

logger = get_logger("money-whisper.agent")

# "<description> for <amount> rupees|rs|rupee|r [at <location>]"
EXPENSE_PATTERN = re.compile(r"(.+) for (\d+(?:\.\d+)?) (?:rupees|rs|rupee|r)(?:\s+at\s+(.+))?", re.IGNORECASE)
LOCATION_SUFFIX = re.compile(r" at (.+)$", re.IGNORECASE)
# Largest value a DECIMAL(10, 2) column holds.
MAX_AMOUNT = 99_999_999.99


def _validated(candidate: ExtractionCandidate, raw_response: str | None = None) -> ExtractionResult:
    """Reject candidates that would violate the expense invariants."""
    if not candidate.description.strip():
        return NoMatch(reason="Extracted description is empty", raw_response=raw_response)
    if not math.isfinite(candidate.amount):
        return NoMatch(reason=f"Extracted amount is not a finite number: {candidate.amount}", raw_response=raw_response)
    if candidate.amount < 0:
        return NoMatch(reason=f"Extracted amount is negative: {candidate.amount}", raw_response=raw_response)
    if candidate.amount > MAX_AMOUNT:
        return NoMatch(reason=f"Extracted amount is too large: {candidate.amount}", raw_response=raw_response)
    return Extracted(candidate=candidate)


class RuleBasedExtractor(BaseExtractor):
    """Pattern-matching extractor for "<item> for <amount> rupees" style input."""

    def extract(self, text: str, categories: Sequence[Category] = ()) -> ExtractionResult:
        """Match the expense pattern and split an optional " at <location>" clause off the description."""
        _ = categories
        match = EXPENSE_PATTERN.search(text or "")
        if not match:
            return NoMatch(reason="Text does not match '<description> for <amount> rupees'")
        description, amount_str, trailing_location = match.groups()
        location = None
        location_match = LOCATION_SUFFIX.search(description)
        if location_match:
            location = location_match.group(1).strip()
            description = description[: location_match.start()]
        elif trailing_location:
            location = trailing_location.strip()
        candidate = ExtractionCandidate(
            description=description.strip(),
            amount=float(amount_str),
            location=location or None,
        )
        return _validated(candidate)


class LLMExtractionAgent(BaseExtractor):
    """Agent that asks the LLM to extract expense fields and pick a category name."""

    def __init__(self, llm: LLMClient, settings: Settings) -> None:
        """Initialize the agent with an LLM client and settings."""
        self.llm = llm
        self.settings = settings

    def build_prompt(self, text: str, categories: Sequence[Category]) -> str:
        """Embed the user text and the full category list into the extraction prompt."""
        category_options = "\n".join(
            CATEGORY_OPTION_TEMPLATE.format(
                name=category.name,
                icon=category.icon or DEFAULT_ICON,
                keywords=category.keywords or "",
            )
            for category in categories
        )
        return EXTRACTION_PROMPT_TEMPLATE.format(text=text, category_options=category_options)

    def extract(self, text: str, categories: Sequence[Category]) -> ExtractionResult:
        """Call the LLM and parse its JSON reply into a candidate."""
        logger.info(f"INPUT: {truncate(text)}")
        prompt = self.build_prompt(text, categories)
        raw_output = self.llm.generate(
            prompt,
            temperature=self.settings.extraction_temperature,
            max_tokens=self.settings.extraction_max_completion_tokens,
        )
        logger.info(f"OUTPUT: {truncate(raw_output)}")
        cleaned = strip_code_fences(raw_output)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            logger.warning(f"Failed to parse LLM extraction JSON: {exc}. Raw AI response: {raw_output}")
            return NoMatch(reason=f"Invalid JSON from LLM: {exc}", raw_response=raw_output)
        if not isinstance(data, dict):
            logger.warning(f"LLM extraction reply is not a JSON object. Raw AI response: {raw_output}")
            return NoMatch(reason="LLM reply is not a JSON object", raw_response=raw_output)
        try:
            candidate = ExtractionCandidate.model_validate(data)
        except ValidationError as exc:
            logger.warning(f"LLM extraction JSON failed validation: {exc}. Raw AI response: {raw_output}")
            return NoMatch(reason="LLM reply is missing required fields", raw_response=raw_output)
        if candidate.location is not None and not candidate.location.strip():
            candidate.location = None
        logger.info(f"AGENT: Extracted expense: {candidate.model_dump()}")
        return _validated(candidate, raw_output)
