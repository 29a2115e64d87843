"""
Tests for worker.entrypoint.main().

Covers:
  - Happy path (MEETING_ID set, processing succeeds, exit 0)
  - Missing or blank MEETING_ID (exit 1, nothing processed)
  - Processing failure (exception, exit 1)
"""

import os
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from domain.models import ActionItem, MeetingDetail, MeetingStatus
from shared_utils.error_handler import ConflictError
from worker.entrypoint import main


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _processed_meeting() -> MeetingDetail:
    return MeetingDetail(
        meeting_id="m-1",
        title="Board meeting",
        date=datetime(2026, 3, 2, 15, 0, tzinfo=timezone.utc),
        duration=45,
        status=MeetingStatus.COMPLETED,
        action_items=[ActionItem(meeting_id="m-1", text="Send the donor report", priority="High")],
    )


@pytest.fixture()
def container():
    container = MagicMock()
    with patch("worker.entrypoint.get_di_container", return_value=container), \
            patch("worker.entrypoint.get_settings") as mock_settings, \
            patch("worker.entrypoint.configure_logging"):
        mock_settings.return_value.log_level = "INFO"
        yield container


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestWorkerMain:
    @patch.dict(os.environ, {"MEETING_ID": "m-1"}, clear=False)
    def test_success(self, container) -> None:
        service = container.get_meeting_service.return_value
        service.process_meeting.return_value = _processed_meeting()

        assert main() == 0
        service.process_meeting.assert_called_once_with("m-1")

    @patch.dict(os.environ, {"MEETING_ID": "  m-1  "}, clear=False)
    def test_strips_meeting_id(self, container) -> None:
        service = container.get_meeting_service.return_value
        service.process_meeting.return_value = _processed_meeting()

        main()

        service.process_meeting.assert_called_once_with("m-1")

    @patch.dict(os.environ, {}, clear=False)
    def test_missing_meeting_id(self, container, capsys) -> None:
        os.environ.pop("MEETING_ID", None)

        assert main() == 1
        assert "MEETING_ID" in capsys.readouterr().err
        container.get_meeting_service.assert_not_called()

    @patch.dict(os.environ, {"MEETING_ID": "   "}, clear=False)
    def test_blank_meeting_id(self, container) -> None:
        assert main() == 1
        container.get_meeting_service.assert_not_called()

    @patch.dict(os.environ, {"MEETING_ID": "m-1"}, clear=False)
    def test_processing_failure(self, container) -> None:
        service = container.get_meeting_service.return_value
        service.process_meeting.side_effect = ConflictError("Meeting has already been processed")

        assert main() == 1

    @patch.dict(os.environ, {"MEETING_ID": "m-1"}, clear=False)
    def test_container_failure(self, container) -> None:
        container.get_meeting_service.side_effect = RuntimeError("LLM provider initialization failed")

        assert main() == 1
