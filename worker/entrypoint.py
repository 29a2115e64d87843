"""
Worker entrypoint for offline meeting processing.

Run as ``python -m worker.entrypoint`` (or as a container task) with:
    MEETING_ID   the meeting to process

The worker:
    1. Runs MeetingService.process_meeting() against the configured store.
    2. Exits 0 on success, 1 on failure.

All logging is JSON (structlog).
"""

from __future__ import annotations

import os
import sys

from shared_utils.config_loader import get_settings
from shared_utils.constants import LogScope
from shared_utils.logging_utils import configure_logging, get_scoped_logger
from shared_utils.di_container import get_di_container

logger = get_scoped_logger(LogScope.WORKER)


def main() -> int:
    """Worker main: read env vars, build deps, run the pipeline."""
    meeting_id = os.environ.get("MEETING_ID", "").strip()

    if not meeting_id:
        logger.error("worker_missing_env", meeting_id=meeting_id)
        print("ERROR: MEETING_ID env var is required", file=sys.stderr)
        return 1

    configure_logging(get_settings().log_level)
    logger.info("worker_started", meeting_id=meeting_id)

    try:
        meeting_svc = get_di_container().get_meeting_service()
        meeting = meeting_svc.process_meeting(meeting_id)

        logger.info(
            "worker_completed",
            meeting_id=meeting_id,
            status=meeting.status.value,
            action_items=len(meeting.action_items),
        )
        return 0

    except Exception as exc:
        logger.error(
            "worker_failed",
            meeting_id=meeting_id,
            error=str(exc),
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
