"""Agent registry for managing extractor types and instances.

This module provides a registry for extractor classes, allowing registration and retrieval
of extractor implementations by name (``"rules"``, ``"llm"``). The API layer picks an
extractor per endpoint through it.
"""

from typing import ClassVar

from app.agents.base import BaseExtractor


class AgentRegistry:
    """Registry for extractor classes."""

    _registry: ClassVar[dict[str, type[BaseExtractor]]] = {}

    @classmethod
    def register(cls, name: str, agent_cls: type[BaseExtractor]) -> None:
        """Register an extractor class with a given name."""
        cls._registry[name] = agent_cls

    @classmethod
    def get(cls, name: str) -> type[BaseExtractor]:
        """Retrieve an extractor class by name."""
        return cls._registry[name]

    @classmethod
    def available(cls) -> list[str]:
        """List all available extractor names."""
        return list(cls._registry.keys())

    @classmethod
    def create(cls, name: str, **kwargs: object) -> BaseExtractor:
        """Instantiate the extractor registered under name."""
        return cls.get(name)(**kwargs)
