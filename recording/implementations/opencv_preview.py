"""
OpenCV Preview Implementation

Live preview window using cv2.imshow, with key polling via cv2.waitKey.
"""

import logging

import cv2
import numpy as np

from config.settings import PREVIEW_WINDOW_NAME
from recording.interfaces.preview_interface import NO_KEY, PreviewInterface


class OpenCVPreview(PreviewInterface):
    """
    Preview window backed by OpenCV's HighGUI.

    Usage:
        preview = OpenCVPreview()
        preview.show(image)
        if preview.poll_key() == 27:
            ...
        preview.close()
    """

    def __init__(self, window_name: str = PREVIEW_WINDOW_NAME, wait_ms: int = 1):
        """
        Initialize preview.

        Args:
            window_name: Title of the preview window
            wait_ms: How long poll_key() lets HighGUI process events
        """
        self.logger = logging.getLogger(__name__)
        self.window_name = window_name
        self.wait_ms = wait_ms
        self._window_created = False

    def show(self, image: np.ndarray) -> None:
        if not self._window_created:
            cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
            self._window_created = True
            self.logger.debug(f"Preview window created: {self.window_name}")
        cv2.imshow(self.window_name, image)

    def poll_key(self) -> int:
        # waitKey also pumps the window event loop
        key = cv2.waitKey(self.wait_ms)
        if key == -1:
            return NO_KEY
        return key & 0xFF

    def close(self) -> None:
        if not self._window_created:
            return
        try:
            cv2.destroyWindow(self.window_name)
        except cv2.error as e:
            self.logger.debug(f"Preview window already gone: {e}")
        self._window_created = False
