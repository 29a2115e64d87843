from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field, field_validator, ConfigDict
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse
import os
import json
import boto3

from shared_utils.constants import (
    DatabaseConfig,
    Defaults,
    Environment,
    LLMProvider,
    LogScope,
    ModelIDs,
    StorageBackend,
)
from shared_utils.logging_utils import get_scoped_logger

logger = get_scoped_logger(LogScope.CONFIG)

_ENVIRONMENT_ALIASES = {
    Environment.DEV.value: Environment.DEVELOPMENT.value,
    Environment.STAGE.value: Environment.STAGING.value,
    Environment.PROD.value: Environment.PRODUCTION.value,
}


def get_secret_from_aws(secret_name: str, region: str = Defaults.AWS_REGION) -> str:
    """Fetch the OpenAI API key from AWS Secrets Manager.

    Args:
        secret_name: Name of the secret in Secrets Manager
        region: AWS region

    Returns:
        Secret value or empty string if fetch fails
    """
    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=secret_name)
        if "SecretString" in response:
            secret = json.loads(response["SecretString"])
            return secret.get("openai_api_key", "")
        return ""
    except Exception as e:
        logger.warning("secret_fetch_failed", secret_name=secret_name, error=str(e))
        return ""


class Settings(BaseSettings):
    """Application configuration with environment variable precedence.

    Precedence: 1) Environment Variables > 2) .env file > 3) Class defaults

    Secrets (API keys, webhook secret) have no defaults; leaving them unset
    switches the matching integration into a logged permissive mode.
    """
    # Application metadata
    app_name: str = "Meeting Notes API"
    app_version: str = "1.0.0"
    app_description: str = "Meeting notes, transcription webhooks and AI action items"
    environment: str = "development"
    log_level: str = Defaults.LOG_LEVEL

    # API Base URL Configuration
    api_host: str = "localhost"
    api_port: int = 4000
    api_protocol: str = "http"
    cors_allow_origins: str = "*"  # comma-separated
    rate_limit_enabled: bool = True
    process_rate_limit: str = "20/minute"

    # LLM Configuration
    llm_provider: str = LLMProvider.OPENAI.value
    openai_api_key: Optional[str] = None
    openai_secret_name: Optional[str] = None
    openai_llm_model_id: str = Field(
        default=ModelIDs.OPENAI_GPT_4O_MINI,
        validation_alias=AliasChoices("openai_llm_model_id", "openai_model_summary"),
    )
    bedrock_region: str = Defaults.AWS_REGION
    bedrock_llm_model_id: str = ModelIDs.BEDROCK_CLAUDE_3_HAIKU

    # Document store
    database_uri: str = DatabaseConfig.MEMORY_URI
    aws_region: str = Defaults.AWS_REGION
    dynamodb_meetings_table: str = DatabaseConfig.MEETINGS_TABLE
    dynamodb_action_items_table: str = DatabaseConfig.ACTION_ITEMS_TABLE

    # Notetaker (Nylas)
    nylas_api_key: Optional[str] = None
    nylas_api_base: str = Defaults.NYLAS_API_BASE
    nylas_webhook_secret: Optional[str] = None
    webhook_url: Optional[str] = None
    notetaker_display_name: str = Defaults.NOTETAKER_DISPLAY_NAME
    http_timeout_seconds: float = Defaults.REQUEST_TIMEOUT

    model_config = ConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    @field_validator('llm_provider')
    @classmethod
    def validate_llm_provider(cls, v: str) -> str:
        """Validate LLM provider is supported."""
        valid_providers = {p.value for p in LLMProvider}
        if v.lower() not in valid_providers:
            raise ValueError(f"llm_provider must be one of {valid_providers}, got {v}")
        return v.lower()

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is recognized (short forms accepted)."""
        value = _ENVIRONMENT_ALIASES.get(v.lower(), v.lower())
        valid_envs = set(_ENVIRONMENT_ALIASES.values())
        if value not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}, got {v}")
        return value

    @field_validator('database_uri')
    @classmethod
    def validate_database_uri(cls, v: str) -> str:
        """Only memory:// and dynamodb:// stores are supported."""
        scheme = urlparse(v).scheme.lower()
        valid_schemes = {b.value for b in StorageBackend}
        if scheme not in valid_schemes:
            raise ValueError(f"database_uri scheme must be one of {valid_schemes}, got {v}")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def storage_backend(self) -> StorageBackend:
        return StorageBackend(urlparse(self.database_uri).scheme.lower())

    @property
    def dynamodb_endpoint_url(self) -> str:
        """Custom endpoint from ``dynamodb://host:port`` (empty means AWS)."""
        netloc = urlparse(self.database_uri).netloc
        return f"http://{netloc}" if netloc else ""

    @property
    def webhook_signature_mode(self) -> str:
        return "enforced" if self.nylas_webhook_secret else "disabled"

    @property
    def notetaker_mode(self) -> str:
        return "enabled" if self.nylas_api_key else "disabled"

    def get_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allow_origins.split(",") if o.strip()]

    def get_api_base_url(self) -> str:
        """Get full API base URL constructed from host, port and protocol.

        Returns:
            Full API base URL (e.g., "http://localhost:4000")
        """
        # Don't add port if it's standard (80 for http, 443 for https)
        port_str = "" if (
            (self.api_protocol == "http" and self.api_port == 80) or
            (self.api_protocol == "https" and self.api_port == 443)
        ) else f":{self.api_port}"

        return f"{self.api_protocol}://{self.api_host}{port_str}"


@lru_cache()
def get_settings() -> Settings:
    """Load and cache application settings.

    If the OpenAI provider is configured without a key and OPENAI_SECRET_NAME
    is provided, fetches the API key from AWS Secrets Manager.

    Returns:
        Validated Settings instance

    Raises:
        ValueError: If settings are invalid
    """
    settings = Settings()

    if (
        settings.llm_provider == LLMProvider.OPENAI.value
        and not settings.openai_api_key
        and settings.openai_secret_name
    ):
        secret_key = get_secret_from_aws(settings.openai_secret_name, settings.aws_region)
        if secret_key:
            settings.openai_api_key = secret_key
            os.environ["OPENAI_API_KEY"] = secret_key
            logger.debug("fetched_openai_key_from_secrets_manager")

    # Log loaded configuration (secrets are never logged)
    logger.info(
        "configuration_loaded",
        environment=settings.environment,
        llm_provider=settings.llm_provider,
        storage_backend=settings.storage_backend.value,
        webhook_signature_mode=settings.webhook_signature_mode,
        notetaker_mode=settings.notetaker_mode,
    )
    if settings.webhook_signature_mode == "disabled":
        logger.warning(
            "webhook_signature_verification_disabled",
            reason="NYLAS_WEBHOOK_SECRET not set; inbound webhooks are accepted unsigned",
        )
    if settings.notetaker_mode == "disabled":
        logger.warning(
            "notetaker_disabled",
            reason="NYLAS_API_KEY not set; bot invitations and transcript fetches are skipped",
        )

    return settings
