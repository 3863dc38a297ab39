"""
Video Sink Interface

Abstract interface for video output backends.
Defines the contract that any encoder/container writer must follow.

Two real backends satisfy it: a container writer that accepts decoded BGR
images directly (OpenCV), and an encode pipeline that converts each image to
the codec's pixel layout before encoding and muxing (PyAV). The latter may
hold frames internally, so one write_frame() call does not necessarily
produce one packet right away.

Guarantees every backend must keep:
1. Frames are written in submission order
2. close() flushes anything still buffered before finalizing the file
3. No frame is dropped by the sink - pacing decisions belong to FramePacer
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import numpy as np


class VideoSinkInterface(ABC):
    """
    Abstract base class for video output backends.

    One instance writes one file: open() -> write_frame()... -> close().
    """

    @abstractmethod
    def open(
        self,
        output_file: Path,
        width: int,
        height: int,
        fps: float,
        codec: Optional[str] = None,
    ) -> None:
        """
        Create the output file and prepare the encoder.

        Args:
            output_file: Path where the video will be saved
            width: Frame width in pixels
            height: Frame height in pixels
            fps: Nominal output frame rate
            codec: Backend codec name, or None for the backend default

        Raises:
            SinkUnavailableError: If the file or encoder cannot be opened

        Example:
            sink.open(Path("records/2025-01-15_14-30-22.avi"), 640, 480, 30)
        """
        pass

    @abstractmethod
    def write_frame(self, image: np.ndarray) -> None:
        """
        Submit one BGR frame (H x W x 3, uint8).

        Raises:
            SinkError: If the sink is not open or the frame size does not
                match the size given to open()
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Flush buffered output and finalize the file.

        Only the first call does any work; later calls return immediately.
        """
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """
        Check if the sink accepts frames.

        Returns:
            True between a successful open() and close()
        """
        pass

    @abstractmethod
    def get_output_file(self) -> Optional[Path]:
        """
        Get path of the file being written.

        Returns:
            Path given to open(), or None if never opened
        """
        pass

    @abstractmethod
    def get_frames_submitted(self) -> int:
        """Number of frames passed to write_frame()"""
        pass

    @abstractmethod
    def get_frames_written(self) -> int:
        """
        Number of frames the backend has actually emitted.

        May lag get_frames_submitted() while the encoder is buffering;
        after close() the two must be equal.
        """
        pass

    @property
    @abstractmethod
    def default_codec(self) -> str:
        """Codec used when open() is called with codec=None"""
        pass

    def _check_frame(self, image: np.ndarray, width: int, height: int) -> None:
        """Reject frames the backend would otherwise drop silently"""
        if not self.is_open():
            raise SinkError("Sink is not open")
        expected = (height, width, 3)
        if image.ndim != 3 or image.shape != expected:
            raise SinkError(
                f"Frame shape {image.shape} does not match sink size {expected}"
            )


class SinkError(Exception):
    """
    Exception raised for video sink errors.

    Examples:
    - Writing to a closed sink
    - Frame size mismatch
    - Encoder failure
    """
    pass


class SinkUnavailableError(SinkError):
    """Output file or encoder could not be opened"""
    pass
