"""
Frame Set Model

One synchronized capture from the camera: an infrared image for the live
preview, a color image for the recording, and the device timestamp they share.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class FrameSet:
    """
    A single timestamped capture.

    Produced once per FrameSourceInterface.capture() call. The buffers belong
    to the caller; keep a copy if the data must outlive the next capture.
    """

    timestamp_ms: float  # Device timestamp of the color frame
    display_channel: np.ndarray  # H x W, uint8 (infrared intensity)
    encode_channel: np.ndarray  # H x W x 3, uint8 (BGR)
    frame_number: int = 0  # Sequence number reported by the source

    @property
    def width(self) -> int:
        return int(self.encode_channel.shape[1])

    @property
    def height(self) -> int:
        return int(self.encode_channel.shape[0])
