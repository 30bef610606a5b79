"""Explicit lifecycle for Celery beat jobs.

A :class:`PeriodicJob` owns one beat entry. ``start()`` registers it on
the Celery app and ``stop()`` removes it, so a job is scheduled because
someone started it rather than because a module happened to be imported.
The beat process reads the schedule after ``on_after_configure`` fired.
"""

from __future__ import annotations

import logging
from typing import Any

from celery import Celery  # type: ignore

logger = logging.getLogger(__name__)


class PeriodicJob:
    def __init__(
        self,
        app: Celery,
        *,
        name: str,
        task: str,
        interval: float,
        expires: float | None = None,
        kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.app = app
        self.name = name
        self.task = task
        self.interval = float(interval)
        # A run that sat in the queue for a whole interval is superseded by the next one.
        self.expires = expires if expires is not None else self.interval * 0.9
        self.kwargs = kwargs or {}
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return
        self.app.add_periodic_task(
            self.interval,
            self.app.signature(self.task, kwargs=self.kwargs),
            name=self.name,
            expires=self.expires,
        )
        self._running = True
        logger.info(f"Periodic job {self.name} scheduled every {self.interval:.0f}s")

    def stop(self) -> None:
        if not self._running:
            return
        self.app.conf.beat_schedule.pop(self.name, None)
        self._running = False
        logger.info(f"Periodic job {self.name} stopped")
