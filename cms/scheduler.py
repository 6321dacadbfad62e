# =============================================================================
# File: cms/scheduler.py
# Purpose: Background task scheduler bootstrap (default tasks + running flag).
# Notes:
# - Task execution lives elsewhere; this module only makes sure the default
#   tasks exist and that the scheduler is flagged as started once per process.
# - start_scheduler() can be called on every admin page load: it never
#   creates a task twice and never "restarts" a running scheduler.
# =============================================================================
from __future__ import annotations

import datetime as dt
import logging
import threading

from sqlalchemy.orm import Session

from .models import ScheduledTask

log = logging.getLogger(__name__)

CLEANUP_TASK_TYPE = "cleanupUnusedImages"

DEFAULT_TASKS = [
    {
        "task_type": CLEANUP_TASK_TYPE,
        "name": "清理未使用图片",
        "description": "定期清理系统中未被使用的图片文件，释放存储空间",
        "schedule": "0 2 * * *",  # every day at 02:00
        "run_hour": 2,
    },
]


def next_daily_run(hour: int, now: dt.datetime | None = None) -> dt.datetime:
    """Next occurrence of hour:00 strictly after `now`."""
    now = now or dt.datetime.now()
    candidate = now.replace(hour=hour, minute=0, second=0, microsecond=0)
    if candidate <= now:
        candidate += dt.timedelta(days=1)
    return candidate


class TaskScheduler:
    """Process-wide running flag, guarded by a lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self.is_running = False
        self.started_at: dt.datetime | None = None

    def start(self) -> bool:
        """Flag as running. Returns False if it already was."""
        with self._lock:
            if self.is_running:
                return False
            self.is_running = True
            self.started_at = dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
        log.info("Task scheduler started")
        return True

    def stop(self) -> None:
        with self._lock:
            self.is_running = False
            self.started_at = None
        log.info("Task scheduler stopped")


scheduler = TaskScheduler()


def ensure_default_tasks(session: Session, now: dt.datetime | None = None) -> list[str]:
    """Create missing default tasks. Returns the task types created."""
    types = [t["task_type"] for t in DEFAULT_TASKS]
    existing = {
        row.task_type
        for row in session.query(ScheduledTask)
        .filter(ScheduledTask.task_type.in_(types))
        .all()
    }

    created: list[str] = []
    for cfg in DEFAULT_TASKS:
        if cfg["task_type"] in existing:
            continue
        session.add(
            ScheduledTask(
                task_type=cfg["task_type"],
                name=cfg["name"],
                description=cfg["description"],
                schedule=cfg["schedule"],
                is_enabled=True,
                status="idle",
                next_run=next_daily_run(cfg["run_hour"], now),
                config={},
            )
        )
        created.append(cfg["task_type"])
        log.info("Default scheduled task created: %s", cfg["task_type"])

    if created:
        session.commit()
    return created


def start_scheduler(session: Session) -> dict:
    """Make sure default tasks exist, then flag the scheduler as running."""
    created = ensure_default_tasks(session)
    started = scheduler.start()
    if not started:
        log.info("Task scheduler already running, nothing to do")
    return {"started": started, "already_running": not started, "created": created}
