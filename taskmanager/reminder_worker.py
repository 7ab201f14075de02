"""
Reminder worker.

Periodically scans for open tasks coming due and sends a reminder for each.
Run with ``python -m taskmanager.reminder_worker`` (add ``--once`` for a
single pass, e.g. from cron).
"""
import asyncio
import sys

from sqlalchemy.engine import Engine
from sqlmodel import Session

from taskmanager.config import Settings
from taskmanager.db.config import build_engine
from taskmanager.repositories import SqlTaskRepository
from taskmanager.services.reminder_service import ReminderService
from taskmanager.utils.datetime import Clock, utcnow
from taskmanager.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def run_reminder_cycle(engine: Engine, settings: Settings, clock: Clock = utcnow) -> int:
    """Run one scan over a fresh session and return the number of reminders sent."""
    with Session(engine) as session:
        service = ReminderService(
            SqlTaskRepository(session, clock),
            clock=clock,
            window_hours=settings.reminder_window_hours,
        )
        return service.schedule_reminders()


async def main(once: bool = False) -> None:
    """Main entry point for the reminder worker."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    engine = build_engine(settings.database_url)

    logger.info("Starting reminder worker", interval_seconds=settings.reminder_interval_seconds)
    while True:
        try:
            await asyncio.to_thread(run_reminder_cycle, engine, settings)
        except Exception:
            logger.exception("Reminder cycle failed")
            if once:
                raise

        if once:
            return
        await asyncio.sleep(settings.reminder_interval_seconds)


if __name__ == "__main__":
    asyncio.run(main(once="--once" in sys.argv[1:]))
