"""Worker process for scheduled overtime and escalation jobs.

Runs an asyncio loop that, every ``worker_interval_seconds``, rolls
month-to-date overtime into the current month and publishes escalation
notices for overdue tasks.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date

from punchclock.config import get_settings
from punchclock.db import get_session_factory
from punchclock.main import configure_logging

logger = logging.getLogger(__name__)


async def run_once(today: date) -> None:
    """Run every scheduled job for ``today``. A failing job does not stop the others."""
    from punchclock.services.escalation import scan_escalations
    from punchclock.services.overtime import reset_monthly_overtime

    session_factory = get_session_factory()

    try:
        async with session_factory() as session:
            await reset_monthly_overtime(session)
    except Exception:
        logger.exception("Monthly overtime reset failed")

    try:
        async with session_factory() as session:
            scan = await scan_escalations(session, today)
        logger.info(
            "Escalation scan for %s: scanned=%d overdue=%d notified=%d",
            today,
            scan.scanned,
            scan.overdue,
            scan.notified,
        )
    except Exception:
        logger.exception("Escalation scan failed for %s", today)


async def run_worker_loop() -> None:
    """Main worker loop."""
    interval = get_settings().worker_interval_seconds
    logger.info("Punchclock worker started (interval=%ds)", interval)

    while True:
        await run_once(date.today())
        await asyncio.sleep(interval)


def main() -> None:
    """Entry point for the worker process."""
    configure_logging(get_settings().log_level)
    asyncio.run(run_worker_loop())


if __name__ == "__main__":
    main()
