"""
Mock Preview Implementation

Headless preview for tests and for machines without a display.
Counts shown images and replays scripted key presses.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from recording.interfaces.preview_interface import NO_KEY, PreviewInterface


class MockPreview(PreviewInterface):
    """
    Headless preview.

    Usage:
        preview = MockPreview(keys=[-1, -1, 27])  # ESC on third poll
        preview = MockPreview(key_after_polls=(10, 27))
    """

    def __init__(
        self,
        keys: Optional[Sequence[int]] = None,
        key_after_polls: Optional[tuple[int, int]] = None,
    ):
        """
        Initialize mock preview.

        Args:
            keys: Key codes returned by successive poll_key() calls;
                  NO_KEY once exhausted
            key_after_polls: (n, key) - return key on the n-th poll (1-based)
        """
        self.logger = logging.getLogger(__name__)
        self._keys = list(keys) if keys else []
        self._key_after_polls = key_after_polls

        self._shown = 0
        self._polls = 0
        self._last_image: Optional[np.ndarray] = None
        self._closed = False

    def show(self, image: np.ndarray) -> None:
        self._shown += 1
        self._last_image = image

    def poll_key(self) -> int:
        self._polls += 1
        if self._keys:
            return self._keys.pop(0)
        if self._key_after_polls and self._polls == self._key_after_polls[0]:
            return self._key_after_polls[1]
        return NO_KEY

    def close(self) -> None:
        self._closed = True

    # =========================================================================
    # TESTING HELPER METHODS (not part of PreviewInterface)
    # =========================================================================

    def get_shown_count(self) -> int:
        """Number of images passed to show()"""
        return self._shown

    def get_poll_count(self) -> int:
        """Number of poll_key() calls"""
        return self._polls

    def get_last_image(self) -> Optional[np.ndarray]:
        """Most recent image passed to show()"""
        return self._last_image

    def is_closed(self) -> bool:
        return self._closed
