from __future__ import annotations

import logging
import threading
from typing import Optional

import requests

from .core.constants import DEFAULT_SELF_PING_SECONDS

logger = logging.getLogger(__name__)


class SelfPinger:
    """Background thread that GETs a health URL every ``interval`` seconds.

    Keeps free-tier hosts from idling the service out.
    """

    def __init__(self, url: str, *, interval: float = DEFAULT_SELF_PING_SECONDS, timeout: float = 10):
        self.url = url
        self.interval = float(interval)
        self.timeout = float(timeout)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def ping(self) -> bool:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Self-ping to %s failed: %s", self.url, e)
            return False

        if resp.ok:
            logger.info("Self-ping successful: %s", resp.status_code)
            return True
        logger.warning("Self-ping to %s returned %s", self.url, resp.status_code)
        return False

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.ping()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="self-ping", daemon=True)
        self._thread.start()
        logger.info("Self-ping every %ss to %s", self.interval, self.url)

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.timeout)
