"""
Bedrock LLM provider implementation.
"""

from typing import Optional
from llama_index.llms.bedrock import Bedrock
from core_intelligence.providers import LLMProviderBase
from shared_utils.constants import Defaults, LogScope


class BedrockLLMProvider(LLMProviderBase):
    """AWS Bedrock LLM provider."""

    def __init__(
        self,
        model_id: str,
        region: str,
        timeout: float = Defaults.REQUEST_TIMEOUT,
        max_retries: int = Defaults.MAX_RETRIES,
    ):
        super().__init__(name=f"BedrockLLM({model_id})")
        self.model_id = model_id
        self.region = region
        self.timeout = timeout
        self.max_retries = max_retries
        self._llm = None

    def initialize(self) -> None:
        """Initialize Bedrock LLM client."""
        try:
            self._llm = Bedrock(
                model=self.model_id,
                region_name=self.region,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
            self.logger.info(
                "Initialized Bedrock LLM provider",
                extra={
                    "scope": LogScope.PROVIDER,
                    "model_id": self.model_id,
                    "region": self.region
                }
            )
        except Exception as e:
            self.logger.error(
                "Failed to initialize Bedrock LLM provider",
                extra={"scope": LogScope.PROVIDER, "error": str(e)}
            )
            raise

    def is_available(self) -> bool:
        """Check if Bedrock LLM is available."""
        return self._llm is not None

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate response from LLM."""
        if not self.is_available():
            raise RuntimeError("Bedrock LLM provider not initialized")

        try:
            response = self._llm.chat(self.build_messages(prompt, system_prompt))
            return response.message.content or ""
        except Exception as e:
            self.logger.error(
                "LLM generation failed",
                extra={"scope": LogScope.PROVIDER, "model_id": self.model_id, "error": str(e)}
            )
            raise
