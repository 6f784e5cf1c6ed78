"""Rate limiting for Firebase key-set refreshes.

RefreshGate keeps callers from hammering Google's key endpoint, whether
through traffic spikes, retry loops, or attackers sending tokens with made-up
kids that trigger refresh-on-miss logic in the application.

At most one refresh is allowed per interval; denied attempts are counted and
logged once they reach the alert threshold.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Final

logger = logging.getLogger(__name__)

_DEFAULT_INTERVAL: Final[float] = 60.0
"""Default minimum interval between refreshes in seconds."""

_DEFAULT_ALERT_THRESHOLD: Final[int] = 20
"""Default number of denials (since the last allowed refresh) before logging a warning."""


class RefreshGate:
    """Thread-safe minimum-interval gate for key-set refreshes.

    Attributes:
        _min_interval: Minimum seconds between allowed refreshes.
        _alert_threshold: Number of denials before warning.
        _lock: Thread synchronization lock.
        _next_allowed_at: Unix timestamp when next refresh is allowed.
        _denied: Count of denied attempts since last allow.
    """

    def __init__(
        self,
        min_interval: float = _DEFAULT_INTERVAL,
        alert_threshold: int = _DEFAULT_ALERT_THRESHOLD,
    ) -> None:
        """Initialize the refresh gate.

        Args:
            min_interval: Minimum seconds between allowed refreshes. Google
                rotates Firebase keys every few hours, so minutes are safe.
            alert_threshold: Denials before a warning is logged.

        Raises:
            ValueError: If min_interval or alert_threshold are invalid.
        """
        if min_interval <= 0:
            raise ValueError(f"min_interval must be positive, got {min_interval}")
        if alert_threshold < 1:
            raise ValueError(f"alert_threshold must be at least 1, got {alert_threshold}")

        self._min_interval = min_interval
        self._alert_threshold = alert_threshold

        self._lock = threading.Lock()
        self._next_allowed_at: float = 0.0
        self._denied: int = 0

    @property
    def denied(self) -> int:
        """Denied attempts since the last allowed refresh."""
        return self._denied

    def allow(self) -> bool:
        """Return True if a refresh may run now, and start a new interval.

        Side Effects:
            - On True: resets the interval and the denial counter
            - On False: increments the denial counter, warning once it
              reaches the alert threshold
        """
        now = time.time()

        with self._lock:
            if now < self._next_allowed_at:
                self._denied += 1
                if self._denied == self._alert_threshold:
                    logger.warning(
                        "Key-set refresh throttled %d times in the last %.0fs",
                        self._denied,
                        self._min_interval,
                    )
                return False

            self._next_allowed_at = now + self._min_interval
            self._denied = 0
            return True
