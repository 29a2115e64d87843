"""
Factory for creating configured provider instances.
Handles provider instantiation with dependency injection.
"""

from typing import Optional
import logging

from core_intelligence.providers import LLMProviderBase, ProviderFactory
from core_intelligence.providers.bedrock_llm import BedrockLLMProvider
from core_intelligence.providers.openai_llm import OpenAILLMProvider
from shared_utils.config_loader import Settings, get_settings
from shared_utils.constants import LLMProvider, LogScope
from shared_utils.error_handler import ConfigurationError


logger = logging.getLogger(__name__)


class LLMProviderFactory(ProviderFactory):
    """Factory for creating LLM providers."""

    @staticmethod
    def create(settings: Optional[Settings] = None) -> LLMProviderBase:
        """Create configured LLM provider.

        Returns:
            Initialized LLM provider.

        Raises:
            ConfigurationError: If config is invalid.
        """
        settings = settings or get_settings()
        llm_provider = settings.llm_provider

        logger.info(
            "Creating LLM provider",
            extra={"scope": LogScope.CONFIG, "provider": llm_provider}
        )

        try:
            if llm_provider == LLMProvider.OPENAI:
                if not settings.openai_api_key:
                    raise ConfigurationError("OPENAI_API_KEY not configured")

                provider = OpenAILLMProvider(
                    model_id=settings.openai_llm_model_id,
                    api_key=settings.openai_api_key,
                    timeout=settings.http_timeout_seconds,
                )
                provider.initialize()
                return provider

            elif llm_provider == LLMProvider.BEDROCK:
                if not settings.bedrock_region or not settings.bedrock_llm_model_id:
                    raise ConfigurationError("BEDROCK_REGION or BEDROCK_LLM_MODEL_ID not configured")

                provider = BedrockLLMProvider(
                    model_id=settings.bedrock_llm_model_id,
                    region=settings.bedrock_region,
                    timeout=settings.http_timeout_seconds,
                )
                provider.initialize()
                return provider
            else:
                raise ConfigurationError(f"Unknown LLM provider: {llm_provider}")

        except Exception as e:
            logger.error(
                "Failed to create LLM provider",
                extra={"scope": LogScope.CONFIG, "provider": llm_provider, "error": str(e)}
            )
            raise
