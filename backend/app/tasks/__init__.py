# This file makes the tasks directory a Python package
# Import all task modules to ensure they are registered with Celery

from .mail_tasks import send_email_task
from .stats_tasks import rebuild_quiz_stats_task

__all__ = [
    'send_email_task',
    'rebuild_quiz_stats_task',
]
