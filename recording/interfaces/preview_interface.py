"""
Preview Interface

Abstract interface for the live preview window.

The recording loop treats the preview as a presentation callback: it hands
over a ready-to-show image and asks for the last key pressed. Window creation
and teardown stay with the implementation.
"""

from abc import ABC, abstractmethod

import numpy as np

# Returned by poll_key() when no key was pressed
NO_KEY = -1


class PreviewInterface(ABC):
    """Abstract base class for live preview displays"""

    @abstractmethod
    def show(self, image: np.ndarray) -> None:
        """
        Present one image.

        Args:
            image: Display-ready image (H x W x 3, uint8)
        """
        pass

    @abstractmethod
    def poll_key(self) -> int:
        """
        Return the key pressed since the last poll.

        Must not block for longer than a few milliseconds.

        Returns:
            Key code, or NO_KEY if nothing was pressed
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Tear down the preview. Safe to call more than once."""
        pass
