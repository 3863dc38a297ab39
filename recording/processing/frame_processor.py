"""
Frame Processor

Stateless transforms applied to each captured frame set:
- Infrared channel -> histogram-equalized, false-color image for the preview
- Color channel -> passed through unchanged for the encoder (already BGR)
"""

from typing import Optional

import cv2
import numpy as np

from config.settings import PREVIEW_COLORMAP


class MalformedBufferError(ValueError):
    """Buffer has the wrong shape or dtype for the requested transform"""
    pass


class FrameProcessor:
    """
    Turns captured channels into display-ready and encode-ready images.

    Holds configuration only; every call is independent.

    Usage:
        processor = FrameProcessor()
        preview_image = processor.to_display(frame_set.display_channel)
        encode_image = processor.to_encode(frame_set.encode_channel)
    """

    def __init__(
        self,
        colormap: str = PREVIEW_COLORMAP,
        frame_size: Optional[tuple[int, int]] = None,
    ):
        """
        Initialize processor.

        Args:
            colormap: OpenCV palette name without prefix (e.g., "JET")
            frame_size: Expected (width, height) of the encode channel,
                        or None to accept any size

        Raises:
            ValueError: If the palette name is unknown
        """
        palette = getattr(cv2, f"COLORMAP_{colormap.upper()}", None)
        if palette is None:
            raise ValueError(f"Unknown colormap: {colormap}")

        self.colormap = colormap.upper()
        self._palette = palette
        self.frame_size = frame_size

    def to_display(self, channel: np.ndarray) -> np.ndarray:
        """
        Equalize an intensity image and map it through the palette.

        Args:
            channel: H x W uint8 intensity image

        Returns:
            H x W x 3 uint8 BGR image

        Raises:
            MalformedBufferError: If channel is not a 2-D uint8 buffer
        """
        if channel.ndim != 2 or channel.dtype != np.uint8:
            raise MalformedBufferError(
                f"Display channel must be 2-D uint8, got {channel.shape} {channel.dtype}"
            )

        equalized = cv2.equalizeHist(channel)
        return cv2.applyColorMap(equalized, self._palette)

    def to_encode(self, channel: np.ndarray) -> np.ndarray:
        """
        Validate the color image and return it unmodified.

        Raises:
            MalformedBufferError: If channel is not H x W x 3 uint8, or does
                not match frame_size
        """
        if channel.ndim != 3 or channel.shape[2] != 3 or channel.dtype != np.uint8:
            raise MalformedBufferError(
                f"Encode channel must be H x W x 3 uint8, got {channel.shape} {channel.dtype}"
            )

        if self.frame_size is not None:
            width, height = self.frame_size
            if channel.shape[:2] != (height, width):
                raise MalformedBufferError(
                    f"Encode channel is {channel.shape[1]}x{channel.shape[0]}, "
                    f"expected {width}x{height}"
                )

        return channel
