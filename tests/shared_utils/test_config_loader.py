"""
Tests for shared_utils.config_loader.

Covers the field validators, DATABASE_URI derived properties, integration
modes, get_api_base_url(), get_settings() caching and get_secret_from_aws().
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from conftest import BASE_SETTINGS_KWARGS
from shared_utils.config_loader import Settings, get_settings, get_secret_from_aws
from shared_utils.constants import StorageBackend


def _settings(**overrides) -> Settings:
    kw = {**BASE_SETTINGS_KWARGS, **overrides}
    return Settings(**kw)


# ---------------------------------------------------------------------------
# validate_llm_provider
# ---------------------------------------------------------------------------


class TestValidateLLMProvider:
    def test_openai_valid(self) -> None:
        assert _settings(llm_provider="openai").llm_provider == "openai"

    def test_case_insensitive(self) -> None:
        assert _settings(llm_provider="BEDROCK").llm_provider == "bedrock"

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError, match="llm_provider"):
            _settings(llm_provider="google")


# ---------------------------------------------------------------------------
# validate_environment
# ---------------------------------------------------------------------------


class TestValidateEnvironment:
    @pytest.mark.parametrize("value", ["development", "staging", "production"])
    def test_valid(self, value) -> None:
        assert _settings(environment=value).environment == value

    @pytest.mark.parametrize(
        "alias,expected",
        [("dev", "development"), ("stage", "staging"), ("PROD", "production")],
    )
    def test_short_forms(self, alias, expected) -> None:
        assert _settings(environment=alias).environment == expected

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError, match="environment"):
            _settings(environment="qa")

    def test_is_production(self) -> None:
        assert _settings(environment="prod").is_production is True
        assert _settings().is_production is False


# ---------------------------------------------------------------------------
# DATABASE_URI
# ---------------------------------------------------------------------------


class TestDatabaseUri:
    def test_memory(self) -> None:
        s = _settings(database_uri="memory://")
        assert s.storage_backend == StorageBackend.MEMORY
        assert s.dynamodb_endpoint_url == ""

    def test_dynamodb_aws(self) -> None:
        s = _settings(database_uri="dynamodb://")
        assert s.storage_backend == StorageBackend.DYNAMODB
        assert s.dynamodb_endpoint_url == ""

    def test_dynamodb_local_endpoint(self) -> None:
        s = _settings(database_uri="dynamodb://localhost:8000")
        assert s.storage_backend == StorageBackend.DYNAMODB
        assert s.dynamodb_endpoint_url == "http://localhost:8000"

    def test_unsupported_scheme_raises(self) -> None:
        with pytest.raises(ValueError, match="database_uri"):
            _settings(database_uri="mongodb://localhost:27017/notes")


# ---------------------------------------------------------------------------
# Integration modes
# ---------------------------------------------------------------------------


class TestIntegrationModes:
    def test_webhook_signature_mode(self) -> None:
        assert _settings(nylas_webhook_secret=None).webhook_signature_mode == "disabled"
        assert _settings(nylas_webhook_secret="s3cret").webhook_signature_mode == "enforced"

    def test_notetaker_mode(self) -> None:
        assert _settings(nylas_api_key=None).notetaker_mode == "disabled"
        assert _settings(nylas_api_key="key").notetaker_mode == "enabled"

    def test_cors_origins_split(self) -> None:
        s = _settings(cors_allow_origins="http://a.test, http://b.test,")
        assert s.get_cors_origins() == ["http://a.test", "http://b.test"]

    def test_summary_model_alias(self) -> None:
        with patch.dict(os.environ, {"OPENAI_MODEL_SUMMARY": "gpt-4.1-mini"}):
            s = Settings(**BASE_SETTINGS_KWARGS)
        assert s.openai_llm_model_id == "gpt-4.1-mini"


# ---------------------------------------------------------------------------
# get_api_base_url
# ---------------------------------------------------------------------------


class TestGetApiBaseUrl:
    def test_default(self) -> None:
        assert _settings().get_api_base_url() == "http://localhost:4000"

    def test_http_port_80_omitted(self) -> None:
        assert _settings(api_port=80).get_api_base_url() == "http://localhost"

    def test_https_port_443_omitted(self) -> None:
        s = _settings(api_protocol="https", api_host="notes.example.com", api_port=443)
        assert s.get_api_base_url() == "https://notes.example.com"

    def test_custom_port_kept(self) -> None:
        s = _settings(api_protocol="https", api_port=8443)
        assert s.get_api_base_url() == "https://localhost:8443"


# ---------------------------------------------------------------------------
# get_settings
# ---------------------------------------------------------------------------


class TestGetSettings:
    def setup_method(self) -> None:
        get_settings.cache_clear()

    def teardown_method(self) -> None:
        get_settings.cache_clear()

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    @patch("shared_utils.config_loader.get_secret_from_aws", return_value="sk-from-aws")
    def test_fetches_openai_key_from_secret(self, mock_secret) -> None:
        env = {"LLM_PROVIDER": "openai", "OPENAI_SECRET_NAME": "notes/openai"}
        with patch.dict(os.environ, env):
            os.environ.pop("OPENAI_API_KEY", None)
            settings = get_settings()
            assert os.environ["OPENAI_API_KEY"] == "sk-from-aws"
            os.environ.pop("OPENAI_API_KEY", None)

        assert settings.openai_api_key == "sk-from-aws"
        mock_secret.assert_called_once_with("notes/openai", settings.aws_region)

    @patch("shared_utils.config_loader.get_secret_from_aws")
    def test_skips_secret_when_key_present(self, mock_secret) -> None:
        env = {"LLM_PROVIDER": "openai", "OPENAI_API_KEY": "sk-env", "OPENAI_SECRET_NAME": "x"}
        with patch.dict(os.environ, env):
            settings = get_settings()

        assert settings.openai_api_key == "sk-env"
        mock_secret.assert_not_called()


# ---------------------------------------------------------------------------
# get_secret_from_aws
# ---------------------------------------------------------------------------


class TestGetSecretFromAws:
    @patch("shared_utils.config_loader.boto3.client")
    def test_reads_openai_key(self, mock_client) -> None:
        client = MagicMock()
        client.get_secret_value.return_value = {"SecretString": '{"openai_api_key": "sk-1"}'}
        mock_client.return_value = client

        assert get_secret_from_aws("notes/openai", "eu-west-2") == "sk-1"
        mock_client.assert_called_once_with("secretsmanager", region_name="eu-west-2")

    @patch("shared_utils.config_loader.boto3.client")
    def test_binary_secret_is_empty(self, mock_client) -> None:
        mock_client.return_value.get_secret_value.return_value = {"SecretBinary": b"..."}
        assert get_secret_from_aws("notes/openai") == ""

    @patch("shared_utils.config_loader.boto3.client")
    def test_failure_is_empty(self, mock_client) -> None:
        mock_client.return_value.get_secret_value.side_effect = RuntimeError("denied")
        assert get_secret_from_aws("notes/openai") == ""
