# =============================================================================
# File: cms/bootstrap.py
# Purpose: Fire-and-forget scheduler init, once per admin page.
# =============================================================================
from __future__ import annotations

import logging
import threading
from typing import Callable

import httpx

log = logging.getLogger(__name__)

IDLE = "idle"
REQUESTED = "initialization-requested"

DEFAULT_INIT_URL = "/api/admin/scheduler/init"
ADMIN_PREFIX = "/admin"


def http_poster(base_url: str, cookies: dict | None = None, timeout: float = 10.0):
    """Build a post(url) callable backed by httpx.

    Cookies are forwarded so the init endpoint sees the same admin user
    as the page that triggered it.
    """
    def post(url: str) -> httpx.Response:
        with httpx.Client(base_url=base_url, cookies=cookies, timeout=timeout) as client:
            return client.post(url)

    return post


class SchedulerBootstrapper:
    """
    Two states: IDLE -> REQUESTED, never back.

    mount(path) asks for initialization at most once per instance, and only
    for admin paths. The request runs in a daemon thread; nobody waits on
    its result. Errors are logged, never retried, never raised.
    """

    def __init__(
        self,
        post: Callable[[str], object],
        init_url: str = DEFAULT_INIT_URL,
        admin_prefix: str = ADMIN_PREFIX,
    ):
        self._post = post
        self.init_url = init_url
        self.admin_prefix = admin_prefix
        self.state = IDLE
        self._mounted = False

    def mount(self, path: str) -> threading.Thread | None:
        if self._mounted:
            return None
        self._mounted = True

        if not (path or "").startswith(self.admin_prefix):
            return None

        self.state = REQUESTED
        thread = threading.Thread(
            target=self._run, name="scheduler-init", daemon=True
        )
        thread.start()
        return thread

    def _run(self) -> None:
        try:
            resp = self._post(self.init_url)
        except Exception:
            log.exception("❌ 初始化定时任务调度器失败")
            return

        status = getattr(resp, "status_code", None)
        if status is not None and not 200 <= status < 300:
            log.warning("❌ 初始化定时任务调度器失败 (HTTP %s)", status)
            return
        log.info("✅ 定时任务调度器已初始化")
