"""
PyAV Video Sink Implementation

Two-stage encode pipeline using PyAV (FFmpeg bindings):
1. Convert each BGR image into the codec's pixel layout (yuv420p)
2. Hand it to the encoder and mux whatever packets come out

The encoder may hold frames back (lookahead, reordering), so packets are
emitted asynchronously relative to write_frame() calls. close() drains the
encoder before the container trailer is written.
"""

import logging
from fractions import Fraction
from pathlib import Path
from typing import Optional

import av
import numpy as np

from config.settings import PYAV_CODEC, PYAV_PIXEL_FORMAT
from recording.interfaces.video_sink_interface import (
    SinkError,
    SinkUnavailableError,
    VideoSinkInterface,
)


class PyAVVideoSink(VideoSinkInterface):
    """
    Video sink using a PyAV encoder and container.

    Usage:
        sink = PyAVVideoSink()
        sink.open(Path("video.avi"), 640, 480, 30)
        sink.write_frame(image)
        sink.close()  # Flushes delayed packets, writes trailer
    """

    def __init__(self, pixel_format: str = PYAV_PIXEL_FORMAT):
        """
        Initialize PyAV sink.

        Args:
            pixel_format: Pixel layout the encoder expects
        """
        self.logger = logging.getLogger(__name__)
        self.pixel_format = pixel_format

        # State tracking
        self._container = None
        self._stream = None
        self._output_file: Optional[Path] = None
        self._width = 0
        self._height = 0
        self._frames_submitted = 0
        self._packets_muxed = 0
        self._time_base: Optional[Fraction] = None
        self._closed = False

    @property
    def default_codec(self) -> str:
        return PYAV_CODEC

    def open(
        self,
        output_file: Path,
        width: int,
        height: int,
        fps: float,
        codec: Optional[str] = None,
    ) -> None:
        if self._container is not None or self._closed:
            raise SinkUnavailableError("Sink already used; create a new one per file")

        codec_name = codec or self.default_codec
        output_file.parent.mkdir(parents=True, exist_ok=True)

        rate = Fraction(fps).limit_denominator(1001)

        container = None
        try:
            container = av.open(str(output_file), mode="w")
            stream = container.add_stream(codec_name, rate=rate)
            stream.width = width
            stream.height = height
            stream.pix_fmt = self.pixel_format
        except (av.FFmpegError, ValueError, OSError) as e:
            if container is not None:
                container.close()
            raise SinkUnavailableError(
                f"Could not open the output video for write: {output_file} "
                f"(codec: {codec_name}): {e}",
            ) from e

        self._container = container
        self._stream = stream
        self._time_base = 1 / rate
        self._output_file = output_file
        self._width = width
        self._height = height

        self.logger.info(
            f"PyAV sink opened: {output_file} "
            f"({width}x{height} @ {fps}fps, {codec_name}/{self.pixel_format})",
        )

    def write_frame(self, image: np.ndarray) -> None:
        self._check_frame(image, self._width, self._height)

        # Stage 1: color conversion into the encoder's layout
        frame = av.VideoFrame.from_ndarray(image, format="bgr24")
        frame = frame.reformat(format=self.pixel_format)
        frame.pts = self._frames_submitted
        frame.time_base = self._time_base

        # Stage 2: encode; zero or more packets may come out
        try:
            self._mux(self._stream.encode(frame))
        except av.FFmpegError as e:
            raise SinkError(f"Encoding failed at frame {self._frames_submitted}: {e}") from e

        self._frames_submitted += 1

    def close(self) -> None:
        if self._container is None:
            return

        try:
            # Drain frames still held by the encoder
            self._mux(self._stream.encode(None))
        finally:
            self._container.close()
            self._container = None
            self._stream = None
            self._closed = True

        self.logger.info(
            f"PyAV sink closed: {self._output_file} "
            f"({self._frames_submitted} frames, {self._packets_muxed} packets)",
        )

    def _mux(self, packets) -> None:
        for packet in packets:
            self._container.mux(packet)
            self._packets_muxed += 1

    def is_open(self) -> bool:
        return self._container is not None

    def get_output_file(self) -> Optional[Path]:
        return self._output_file

    def get_frames_submitted(self) -> int:
        return self._frames_submitted

    def get_frames_written(self) -> int:
        """Packets muxed so far (one per frame for intra/P-frame codecs)"""
        return self._packets_muxed
