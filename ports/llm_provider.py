"""
Port interface for LLM operations.

core_intelligence/providers/ implements the concrete versions. This port
formalises the contract so services depend on the interface, not the impl.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class LLMProviderPort(Protocol):
    """Abstract interface for LLM text generation."""

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate text from a prompt.

        Args:
            prompt: User message.
            system_prompt: Optional system instruction sent ahead of the prompt.

        Returns:
            Generated text string.
        """
        ...
