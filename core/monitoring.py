"""Failure monitoring for the remote surfaces (news list, summarize, indices)."""

import logging
import time
from typing import Dict, Optional

log = logging.getLogger("newsdesk.monitoring")


class HealthMonitor:
    """Tracks consecutive failures per surface and flags when to alert."""

    def __init__(self, alert_threshold: int = 5):
        self.alert_threshold = alert_threshold
        self._consecutive_failures: Dict[str, int] = {}
        self._alerted: Dict[str, bool] = {}
        self._last_error: Dict[str, str] = {}
        self._last_success_time: Dict[str, float] = {}

    def record_success(self, surface: str) -> None:
        prev = self._consecutive_failures.get(surface, 0)
        if prev > 0:
            log.info("%s: reprise apres %d echec(s) consecutif(s).", surface, prev)
        self._consecutive_failures[surface] = 0
        self._alerted[surface] = False
        self._last_error.pop(surface, None)
        self._last_success_time[surface] = time.monotonic()

    def record_failure(self, surface: str, message: str = "") -> bool:
        """Record a failure. Returns True if alert threshold was just crossed."""
        count = self._consecutive_failures.get(surface, 0) + 1
        self._consecutive_failures[surface] = count
        if message:
            self._last_error[surface] = message
        log.warning("%s: echec #%d consecutif (%s).", surface, count, message or "?")

        if count >= self.alert_threshold and not self._alerted.get(surface, False):
            self._alerted[surface] = True
            log.error(
                "ALERTE: %s a echoue %d fois consecutivement! Derniere erreur: %s",
                surface, count, message or "?",
            )
            return True
        return False

    def seconds_since_success(self, surface: str) -> Optional[float]:
        last = self._last_success_time.get(surface)
        if last is None:
            return None
        return time.monotonic() - last

    def get_failures(self, surface: str) -> int:
        return self._consecutive_failures.get(surface, 0)

    def get_last_error(self, surface: str) -> str:
        return self._last_error.get(surface, "")

    def get_status(self) -> Dict[str, int]:
        return dict(self._consecutive_failures)
