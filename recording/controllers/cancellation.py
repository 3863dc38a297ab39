"""
Cancellation Token

Shared "please stop" flag between the recording loop and whatever wants to
stop it (cancel key in the preview, SIGINT/SIGTERM handlers).

The loop polls the token once per iteration, so a request takes effect
within one capture interval.
"""

import logging
import threading
from typing import Optional


class CancellationToken:
    """
    One-way cancellation flag.

    Safe to set from a signal handler or another thread; once requested it
    stays requested.

    Usage:
        token = CancellationToken()
        signal.signal(signal.SIGINT, lambda *_: token.request("SIGINT"))
        while not token.is_requested():
            ...
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def request(self, reason: str = "requested") -> None:
        """Ask the recording loop to stop"""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        self.logger.info(f"Cancellation requested ({reason})")

    def is_requested(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """What triggered the cancellation, or None"""
        return self._reason
