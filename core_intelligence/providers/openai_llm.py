"""
OpenAI LLM provider implementation.
"""

from typing import Optional
from llama_index.llms.openai import OpenAI
from core_intelligence.providers import LLMProviderBase
from shared_utils.constants import Defaults, LogScope


class OpenAILLMProvider(LLMProviderBase):
    """OpenAI chat-completion provider."""

    def __init__(
        self,
        model_id: str,
        api_key: str,
        timeout: float = Defaults.REQUEST_TIMEOUT,
        max_retries: int = Defaults.MAX_RETRIES,
    ):
        super().__init__(name=f"OpenAILLM({model_id})")
        self.model_id = model_id
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries
        self._llm = None

    def initialize(self) -> None:
        """Initialize OpenAI LLM client."""
        try:
            self._llm = OpenAI(
                model=self.model_id,
                api_key=self.api_key,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
            self.logger.info(
                "Initialized OpenAI LLM provider",
                extra={
                    "scope": LogScope.PROVIDER,
                    "model_id": self.model_id
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize OpenAI LLM provider",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if OpenAI LLM is available."""
        return self._llm is not None

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate response from LLM."""
        if not self.is_available():
            raise RuntimeError("OpenAI LLM provider not initialized")

        try:
            response = self._llm.chat(self.build_messages(prompt, system_prompt))
            return response.message.content or ""
        except Exception as e:
            self.logger.error(
                "LLM generation failed",
                extra={"scope": LogScope.PROVIDER, "model_id": self.model_id, "error": str(e)}
            )
            raise
