"""Lookup table of every selectable provider.

The registry maps ``(category, identifier)`` to a provider. It is populated
once, when the default registry is first requested, and never changes
afterwards. A duplicate identifier is a programming error and stops the CLI
from starting; an unknown identifier raises ``UnknownProviderError`` with the
accepted values so the caller can show an actionable message.
"""

from enum import Enum
from functools import lru_cache
from typing import Iterable

from better_agents.providers.base import Provider
from better_agents.providers.coding_assistants import (
    CODING_ASSISTANTS,
    CodingAssistantProvider,
)
from better_agents.providers.frameworks import FRAMEWORKS, FrameworkProvider
from better_agents.providers.languages import LANGUAGES, LanguageProvider
from better_agents.providers.llm_providers import LLM_PROVIDERS, LLMProvider


class ProviderCategory(str, Enum):
    LANGUAGE = "language"
    FRAMEWORK = "framework"
    CODING_ASSISTANT = "coding-assistant"
    LLM_PROVIDER = "llm-provider"


class DuplicateProviderError(RuntimeError):
    def __init__(self, category: ProviderCategory, identifier: str):
        super().__init__(
            f"Provider '{identifier}' is already registered as a {category.value}."
        )
        self.category = category
        self.identifier = identifier


class UnknownProviderError(ValueError):
    def __init__(
        self, category: ProviderCategory, identifier: str, valid: Iterable[str]
    ):
        self.category = category
        self.identifier = identifier
        self.valid = sorted(valid)
        super().__init__(
            f"Unknown {category.value} '{identifier}'. "
            f"Valid options: {', '.join(self.valid)}"
        )


class ProviderRegistry:
    def __init__(self) -> None:
        self._providers: dict[ProviderCategory, dict[str, Provider]] = {
            category: {} for category in ProviderCategory
        }

    def register(
        self, category: ProviderCategory, identifier: str, provider: Provider
    ) -> None:
        entries = self._providers[category]
        if identifier in entries:
            raise DuplicateProviderError(category, identifier)
        entries[identifier] = provider

    def lookup(self, category: ProviderCategory, identifier: str) -> Provider:
        entries = self._providers[category]
        try:
            return entries[identifier]
        except KeyError:
            raise UnknownProviderError(category, identifier, entries) from None

    def identifiers(self, category: ProviderCategory) -> list[str]:
        """Registered identifiers in registration order."""
        return list(self._providers[category])

    def providers(self, category: ProviderCategory) -> list[Provider]:
        return list(self._providers[category].values())

    # Typed shortcuts for the four categories.

    def language(self, identifier: str) -> LanguageProvider:
        return self.lookup(ProviderCategory.LANGUAGE, identifier)  # type: ignore[return-value]

    def framework(self, identifier: str) -> FrameworkProvider:
        return self.lookup(ProviderCategory.FRAMEWORK, identifier)  # type: ignore[return-value]

    def coding_assistant(self, identifier: str) -> CodingAssistantProvider:
        return self.lookup(ProviderCategory.CODING_ASSISTANT, identifier)  # type: ignore[return-value]

    def llm_provider(self, identifier: str) -> LLMProvider:
        return self.lookup(ProviderCategory.LLM_PROVIDER, identifier)  # type: ignore[return-value]

    def frameworks_for_language(self, language: str) -> list[FrameworkProvider]:
        return [
            framework
            for framework in self.providers(ProviderCategory.FRAMEWORK)
            if getattr(framework, "language", None) == language
        ]


def build_registry() -> ProviderRegistry:
    registry = ProviderRegistry()
    groups: list[tuple[ProviderCategory, Iterable[Provider]]] = [
        (ProviderCategory.LANGUAGE, LANGUAGES),
        (ProviderCategory.FRAMEWORK, FRAMEWORKS),
        (ProviderCategory.CODING_ASSISTANT, CODING_ASSISTANTS),
        (ProviderCategory.LLM_PROVIDER, LLM_PROVIDERS),
    ]
    for category, providers in groups:
        for provider in providers:
            registry.register(category, provider.id, provider)
    return registry


@lru_cache(maxsize=None)
def get_registry() -> ProviderRegistry:
    """The process-wide registry of built-in providers."""
    return build_registry()
