"""
OpenCV Video Sink Implementation

Simple container writer using cv2.VideoWriter.
Accepts decoded BGR images directly; OpenCV handles encoding internally.

This wraps cv2.VideoWriter to match our VideoSinkInterface.
"""

import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from config.settings import VIDEO_FOURCC
from recording.interfaces.video_sink_interface import (
    SinkUnavailableError,
    VideoSinkInterface,
)


class OpenCVVideoSink(VideoSinkInterface):
    """
    Video sink using cv2.VideoWriter.

    Usage:
        sink = OpenCVVideoSink()
        sink.open(Path("video.avi"), 640, 480, 30)
        sink.write_frame(image)
        sink.close()
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

        # State tracking
        self._writer: Optional[cv2.VideoWriter] = None
        self._output_file: Optional[Path] = None
        self._width = 0
        self._height = 0
        self._frames_submitted = 0
        self._closed = False

    @property
    def default_codec(self) -> str:
        return VIDEO_FOURCC

    def open(
        self,
        output_file: Path,
        width: int,
        height: int,
        fps: float,
        codec: Optional[str] = None,
    ) -> None:
        if self._writer is not None or self._closed:
            raise SinkUnavailableError("Sink already used; create a new one per file")

        fourcc_name = codec or self.default_codec
        if len(fourcc_name) != 4:
            raise SinkUnavailableError(f"Invalid FourCC code: {fourcc_name!r}")

        output_file.parent.mkdir(parents=True, exist_ok=True)

        writer = cv2.VideoWriter(
            str(output_file),
            cv2.VideoWriter_fourcc(*fourcc_name),
            float(fps),
            (width, height),
            True,  # Color frames
        )

        if not writer.isOpened():
            writer.release()
            raise SinkUnavailableError(
                f"Could not open the output video for write: {output_file} "
                f"(codec: {fourcc_name})",
            )

        self._writer = writer
        self._output_file = output_file
        self._width = width
        self._height = height

        self.logger.info(
            f"OpenCV sink opened: {output_file} "
            f"({width}x{height} @ {fps}fps, {fourcc_name})",
        )

    def write_frame(self, image: np.ndarray) -> None:
        self._check_frame(image, self._width, self._height)
        self._writer.write(image)
        self._frames_submitted += 1

    def close(self) -> None:
        if self._writer is None:
            return

        # release() writes the AVI index; VideoWriter does not buffer frames
        self._writer.release()
        self._writer = None
        self._closed = True

        self.logger.info(
            f"OpenCV sink closed: {self._output_file} "
            f"({self._frames_submitted} frames)",
        )

    def is_open(self) -> bool:
        return self._writer is not None

    def get_output_file(self) -> Optional[Path]:
        return self._output_file

    def get_frames_submitted(self) -> int:
        return self._frames_submitted

    def get_frames_written(self) -> int:
        # VideoWriter.write() is synchronous
        return self._frames_submitted
