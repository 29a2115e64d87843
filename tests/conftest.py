"""
Root conftest.py: shared fixtures for the entire test suite.

Guidelines:
    • No __init__.py in test sub-directories (avoids shadowing root packages).
    • pytest.ini_options lives in pyproject.toml with pythonpath=["."].
    • Markers: integration.
    • Settings come from the environment set below: in-memory store, no rate
      limiting, no notetaker key, no webhook secret.
"""

import os

os.environ.setdefault("DATABASE_URI", "memory://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LLM_PROVIDER", "openai")

from datetime import datetime, timezone
from typing import Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from adapters.in_memory_store import (
    InMemoryActionItemStoreAdapter,
    InMemoryMeetingStoreAdapter,
)
from domain.models import Meeting, MeetingStatus, TranscriptionResult
from services.action_item_service import ActionItemService
from services.meeting_service import MeetingService
from services.summarization_service import SummarizationService
from services.webhook_service import WebhookService


# ---------------------------------------------------------------------------
# Marker registration
# ---------------------------------------------------------------------------

def pytest_configure(config):
    config.addinivalue_line("markers", "integration: mark test as integration test")


# ---------------------------------------------------------------------------
# Minimal required settings kwargs for Settings(**BASE_SETTINGS_KWARGS)
# ---------------------------------------------------------------------------

BASE_SETTINGS_KWARGS: Dict[str, str] = {
    "llm_provider": "bedrock",
    "bedrock_region": "eu-west-2",
    "bedrock_llm_model_id": "anthropic.claude-3-haiku-20240307-v1:0",
    "environment": "development",
    "database_uri": "memory://",
}


@pytest.fixture()
def base_settings_kwargs() -> Dict[str, str]:
    """Provide the minimal kwargs needed to instantiate ``Settings``."""
    return {**BASE_SETTINGS_KWARGS}


# ---------------------------------------------------------------------------
# Sample transcript + LLM replies
# ---------------------------------------------------------------------------

SAMPLE_TRANSCRIPT_TEXT = (
    "Alice: Welcome to the board meeting.\n"
    "Bob: The donor report is late; I will send it by Friday.\n"
    "Alice: Carol, please book the venue for the gala.\n"
    "Carol: Will do. We should also review the budget next month.\n"
)

SAMPLE_SUMMARY = (
    "**Goals**\n- Prepare the gala\n\n"
    "**Decisions**\n- Carol books the venue\n\n"
    "**Risks**\n- Donor report is late\n\n"
    "**Next Steps**\n- Bob sends the report"
)

SAMPLE_EXTRACTION = (
    '{"items": ['
    '{"text": "Send the donor report", "priority": "High", '
    '"dueDate": "2026-03-06T17:00:00Z", "assignee": "Bob"},'
    '{"text": "Book the gala venue", "priority": "Medium", "assignee": "Carol"},'
    '{"text": "Review the budget", "priority": "Low"}'
    "]}"
)


class FakeLLM:
    """LLMProviderPort double that replays canned replies in order."""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: List[Dict[str, Optional[str]]] = []

    def generate(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        if self.error is not None:
            raise self.error
        return self.replies.pop(0) if self.replies else ""


@pytest.fixture()
def fake_llm() -> FakeLLM:
    """LLM that answers one summary then one extraction."""
    return FakeLLM([SAMPLE_SUMMARY, SAMPLE_EXTRACTION])


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

@pytest.fixture()
def meeting_store() -> InMemoryMeetingStoreAdapter:
    return InMemoryMeetingStoreAdapter()


@pytest.fixture()
def action_item_store() -> InMemoryActionItemStoreAdapter:
    return InMemoryActionItemStoreAdapter()


@pytest.fixture()
def mock_notetaker() -> MagicMock:
    """Notetaker mock: bot invites succeed, no transcript is available."""
    mock = MagicMock()
    mock.enabled = True
    mock.invite_bot.return_value = "nt-1"
    mock.fetch_transcription.return_value = TranscriptionResult()
    mock.download_text.return_value = SAMPLE_TRANSCRIPT_TEXT
    mock.setup_webhooks.return_value = True
    return mock


# ---------------------------------------------------------------------------
# Services wired over the in-memory stores
# ---------------------------------------------------------------------------

@pytest.fixture()
def action_item_service(action_item_store, meeting_store) -> ActionItemService:
    return ActionItemService(action_item_store=action_item_store, meeting_store=meeting_store)


@pytest.fixture()
def summarization_service(fake_llm) -> SummarizationService:
    return SummarizationService(llm_provider=fake_llm)


@pytest.fixture()
def meeting_service(
    meeting_store, action_item_service, summarization_service, mock_notetaker
) -> MeetingService:
    return MeetingService(
        meeting_store=meeting_store,
        action_item_service=action_item_service,
        summarization_service=summarization_service,
        notetaker=mock_notetaker,
    )


@pytest.fixture()
def webhook_service(meeting_store, mock_notetaker) -> WebhookService:
    return WebhookService(meeting_store=meeting_store, notetaker=mock_notetaker)


# ---------------------------------------------------------------------------
# Domain object factories
# ---------------------------------------------------------------------------

@pytest.fixture()
def make_meeting(meeting_store):
    """Store and return a Meeting; keyword overrides are applied as-is."""

    def _make(**overrides) -> Meeting:
        fields = {
            "title": "Board meeting",
            "date": datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc),
            "duration": 45,
            "status": MeetingStatus.PENDING,
        }
        fields.update(overrides)
        meeting = Meeting(**fields)
        meeting_store.put_meeting(meeting)
        return meeting

    return _make
