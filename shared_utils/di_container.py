"""
Dependency injection container for managing application dependencies.
Centralizes provider, adapter and service creation and lifecycle.

Store adapters are chosen from DATABASE_URI: ``memory://`` gives the
in-memory stores, ``dynamodb://[host:port]`` the DynamoDB tables.
"""

from typing import Optional
import logging

from core_intelligence.providers import LLMProviderBase
from core_intelligence.providers.factory import LLMProviderFactory
from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope, StorageBackend


logger = logging.getLogger(__name__)


class DIContainer:
    """Singleton dependency injection container."""

    _instance: Optional['DIContainer'] = None
    _llm_provider: Optional[LLMProviderBase] = None

    # adapter singletons
    _meeting_store: Optional[object] = None
    _action_item_store: Optional[object] = None
    _notetaker: Optional[object] = None

    # service singletons
    _summarization_service: Optional[object] = None
    _action_item_service: Optional[object] = None
    _meeting_service: Optional[object] = None
    _webhook_service: Optional[object] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def reset(self):
        """Reset container (useful for testing)."""
        self._llm_provider = None
        self._meeting_store = None
        self._action_item_store = None
        self._notetaker = None
        self._summarization_service = None
        self._action_item_service = None
        self._meeting_service = None
        self._webhook_service = None

    def get_llm_provider(self) -> LLMProviderBase:
        """Get or create LLM provider (lazy singleton).

        Returns:
            Initialized LLM provider.

        Raises:
            RuntimeError: If provider initialization fails.
        """
        if self._llm_provider is None:
            logger.info(
                "Initializing LLM provider",
                extra={"scope": LogScope.CONFIG}
            )
            try:
                self._llm_provider = LLMProviderFactory.create()
            except Exception as e:
                logger.error(
                    "Failed to initialize LLM provider",
                    extra={"scope": LogScope.CONFIG, "error": str(e)}
                )
                raise RuntimeError(f"LLM provider initialization failed: {e}") from e

        return self._llm_provider

    # ------------------------------------------------------------------
    # Adapter accessors
    # ------------------------------------------------------------------

    def get_meeting_store(self):
        """Get or create the meeting store adapter (lazy singleton)."""
        if self._meeting_store is None:
            settings = get_settings()
            if settings.storage_backend == StorageBackend.MEMORY:
                from adapters.in_memory_store import InMemoryMeetingStoreAdapter
                self._meeting_store = InMemoryMeetingStoreAdapter()
                logger.info("Initialized InMemoryMeetingStoreAdapter (local dev)")
            else:
                from adapters.dynamo_meeting_store import DynamoMeetingStoreAdapter
                self._meeting_store = DynamoMeetingStoreAdapter(
                    table_name=settings.dynamodb_meetings_table,
                    region=settings.aws_region,
                    endpoint_url=settings.dynamodb_endpoint_url,
                )
                logger.info("Initialized DynamoMeetingStoreAdapter")
        return self._meeting_store

    def get_action_item_store(self):
        """Get or create the action item store adapter (lazy singleton)."""
        if self._action_item_store is None:
            settings = get_settings()
            if settings.storage_backend == StorageBackend.MEMORY:
                from adapters.in_memory_store import InMemoryActionItemStoreAdapter
                self._action_item_store = InMemoryActionItemStoreAdapter()
                logger.info("Initialized InMemoryActionItemStoreAdapter (local dev)")
            else:
                from adapters.dynamo_action_item_store import DynamoActionItemStoreAdapter
                self._action_item_store = DynamoActionItemStoreAdapter(
                    table_name=settings.dynamodb_action_items_table,
                    region=settings.aws_region,
                    endpoint_url=settings.dynamodb_endpoint_url,
                )
                logger.info("Initialized DynamoActionItemStoreAdapter")
        return self._action_item_store

    def get_notetaker(self):
        """Get or create NylasNotetakerAdapter (lazy singleton)."""
        if self._notetaker is None:
            from adapters.nylas_notetaker import NylasNotetakerAdapter

            settings = get_settings()
            self._notetaker = NylasNotetakerAdapter(
                api_key=settings.nylas_api_key,
                api_base=settings.nylas_api_base,
                timeout=settings.http_timeout_seconds,
                display_name=settings.notetaker_display_name,
            )
            logger.info("Initialized NylasNotetakerAdapter")
        return self._notetaker

    # ------------------------------------------------------------------
    # Service accessors
    # ------------------------------------------------------------------

    def get_summarization_service(self):
        """Get or create SummarizationService (lazy singleton)."""
        if self._summarization_service is None:
            from services.summarization_service import SummarizationService

            self._summarization_service = SummarizationService(
                provider_factory=self.get_llm_provider,
            )
            logger.info("Initialized SummarizationService")
        return self._summarization_service

    def get_action_item_service(self):
        """Get or create ActionItemService (lazy singleton)."""
        if self._action_item_service is None:
            from services.action_item_service import ActionItemService

            self._action_item_service = ActionItemService(
                action_item_store=self.get_action_item_store(),
                meeting_store=self.get_meeting_store(),
            )
            logger.info("Initialized ActionItemService")
        return self._action_item_service

    def get_meeting_service(self):
        """Get or create MeetingService (lazy singleton)."""
        if self._meeting_service is None:
            from services.meeting_service import MeetingService

            self._meeting_service = MeetingService(
                meeting_store=self.get_meeting_store(),
                action_item_service=self.get_action_item_service(),
                summarization_service=self.get_summarization_service(),
                notetaker=self.get_notetaker(),
            )
            logger.info("Initialized MeetingService")
        return self._meeting_service

    def get_webhook_service(self):
        """Get or create WebhookService (lazy singleton)."""
        if self._webhook_service is None:
            from services.webhook_service import WebhookService

            settings = get_settings()
            self._webhook_service = WebhookService(
                meeting_store=self.get_meeting_store(),
                notetaker=self.get_notetaker(),
                webhook_secret=settings.nylas_webhook_secret,
            )
            logger.info("Initialized WebhookService")
        return self._webhook_service


# Global singleton instance
_container = DIContainer()


def get_di_container() -> DIContainer:
    """Get global DI container instance."""
    return _container
