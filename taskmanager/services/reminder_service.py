"""Reminder Service."""
from datetime import timedelta
from typing import List

from taskmanager.models.task import Task
from taskmanager.repositories.base import TaskRepository
from taskmanager.utils.datetime import Clock, utcnow
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)


class ReminderService:
    """Finds open tasks coming due and sends (logs) a reminder for each."""

    def __init__(self, tasks: TaskRepository, clock: Clock = utcnow, window_hours: int = 24):
        self.tasks = tasks
        self.clock = clock
        self.window = timedelta(hours=window_hours)

    def due_soon(self) -> List[Task]:
        """
        Open tasks due after now and no later than now + window.

        Tasks due exactly now or earlier are overdue, not upcoming.
        """
        now = self.clock()
        tasks = self.tasks.find_due_between(now, now + self.window)
        logger.debug("Tasks needing reminder found", count=len(tasks))
        return tasks

    def send_reminder(self, task_id: int, user_id: str) -> bool:
        """
        Deliver a reminder for one task.

        Args:
            task_id: ID of task to remind about
            user_id: Owner the reminder is addressed to

        Returns:
            True if a reminder went out, False if the task is gone
        """
        logger.info("Sending reminder for task", task_id=task_id, user_id=user_id)

        task = self.tasks.find_by_id(task_id)
        if not task or task.user_id != user_id:
            logger.warning("Task not found for reminder", task_id=task_id, user_id=user_id)
            return False

        # Delivery channel (email, push) lives outside this service
        logger.info(
            "Reminder sent",
            task_id=task_id,
            user_id=user_id,
            title=task.title,
            due_date=task.due_date.isoformat() if task.due_date else None,
        )
        return True

    def schedule_reminders(self) -> int:
        """
        Send reminders for every task coming due.

        Returns:
            Number of reminders sent
        """
        logger.info("Starting reminder scheduling process")

        sent = 0
        for task in self.due_soon():
            try:
                if self.send_reminder(task.id, task.user_id):
                    sent += 1
            except Exception:
                # One bad row must not abort the batch
                logger.exception("Failed to send reminder", task_id=task.id)

        logger.info("Reminder scheduling completed", sent=sent)
        return sent
