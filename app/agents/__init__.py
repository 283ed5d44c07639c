"""Agents package: extractor registry, base class, and the LLM-backed extraction and projection agents."""

from .base import BaseExtractor  # noqa: F401
from .extraction import LLMExtractionAgent, RuleBasedExtractor
from .registry import AgentRegistry

AgentRegistry.register("rules", RuleBasedExtractor)
AgentRegistry.register("llm", LLMExtractionAgent)
