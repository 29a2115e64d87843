"""
Constants management.
Centralized configuration for all magic values, model IDs, and defaults.
"""

from enum import Enum
from typing import Final


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    # Short aliases accepted from the environment
    DEV = "dev"
    STAGE = "stage"
    PROD = "prod"


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    BEDROCK = "bedrock"


class StorageBackend(str, Enum):
    """Supported document store backends (DATABASE_URI scheme)."""
    MEMORY = "memory"
    DYNAMODB = "dynamodb"


# Model IDs
class ModelIDs:
    """Centralized model identifiers."""
    OPENAI_GPT_4O_MINI: Final[str] = "gpt-4o-mini"
    BEDROCK_CLAUDE_3_HAIKU: Final[str] = "anthropic.claude-3-haiku-20240307-v1:0"


# Default values
class Defaults:
    """Defaults shared across services."""
    MAX_RETRIES: Final[int] = 3
    RETRY_DELAY_SECONDS: Final[float] = 2.0
    REQUEST_TIMEOUT: Final[float] = 30.0
    LOG_LEVEL: Final[str] = "INFO"
    AWS_REGION: Final[str] = "eu-west-2"
    NYLAS_API_BASE: Final[str] = "https://api.us.nylas.com/v3"
    NOTETAKER_DISPLAY_NAME: Final[str] = "Notetaker Bot (Recording & Transcribing)"
    UNKNOWN_MEETING_TITLE: Final[str] = "Unknown Meeting"
    SUMMARY_MAX_WORDS: Final[int] = 700


# Database settings
class DatabaseConfig:
    """Document store configuration."""
    MEETINGS_TABLE: Final[str] = "Meetings"
    ACTION_ITEMS_TABLE: Final[str] = "ActionItems"
    MEMORY_URI: Final[str] = "memory://"


# Logging scopes
class LogScope:
    """Standardized logging scope names."""
    CONFIG = "config_loader"
    API = "api"
    VALIDATION = "validation"
    ERROR_HANDLER = "error_handler"
    PROVIDER = "provider"
    ADAPTER = "adapter"
    WORKER = "worker"
    MEETING_SERVICE = "meeting_service"
    ACTION_ITEM_SERVICE = "action_item_service"
    SUMMARIZATION = "summarization"
    NOTETAKER = "notetaker"
    WEBHOOK = "webhook"


# API endpoints and paths
class APIEndpoints:
    """API route definitions."""
    HEALTH = "/health"
    MEETINGS = "/api/meetings"
    ACTION_ITEMS = "/api/action-items"
    NYLAS_WEBHOOK = "/webhooks/nylas"


# Nylas Notetaker integration
class NylasEvents:
    """Webhook trigger types the notetaker integration subscribes to."""
    NOTETAKER_CREATED: Final[str] = "notetaker.created"
    NOTETAKER_MEDIA: Final[str] = "notetaker.media"
    NOTETAKER_MEETING_STATE: Final[str] = "notetaker.meeting_state"
    SIGNATURE_HEADER: Final[str] = "x-nylas-signature"

    @classmethod
    def subscribed(cls) -> list[str]:
        return [cls.NOTETAKER_CREATED, cls.NOTETAKER_MEDIA, cls.NOTETAKER_MEETING_STATE]


# Error codes
class ErrorCode(str, Enum):
    """Standardized error codes for consistency."""
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    NO_TRANSCRIPT = "NO_TRANSCRIPT"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    UPSTREAM_FAILED = "UPSTREAM_FAILED"
    PROCESSING_FAILED = "PROCESSING_FAILED"
    RATE_LIMITED = "RATE_LIMITED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
