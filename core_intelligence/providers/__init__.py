"""
Abstract base classes for swappable providers.
Enables dependency injection and flexible component swapping.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging

from llama_index.core.llms import ChatMessage as LLMMessage, MessageRole


class BaseProvider(ABC):
    """Base class for all providers."""

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    @abstractmethod
    def initialize(self) -> None:
        """Initialize provider. Called after instantiation."""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is available and credentials are valid."""
        pass


class LLMProviderBase(BaseProvider):
    """Abstract base for LLM providers."""

    @abstractmethod
    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate response from LLM."""
        pass

    @staticmethod
    def build_messages(prompt: str, system_prompt: Optional[str] = None) -> List[LLMMessage]:
        """System instruction (if any) followed by the user prompt."""
        messages = []
        if system_prompt:
            messages.append(LLMMessage(role=MessageRole.SYSTEM, content=system_prompt))
        messages.append(LLMMessage(role=MessageRole.USER, content=prompt))
        return messages


class ProviderFactory(ABC):
    """Base factory for creating providers."""

    @staticmethod
    @abstractmethod
    def create(**kwargs) -> BaseProvider:
        """Create and initialize provider instance."""
        pass
