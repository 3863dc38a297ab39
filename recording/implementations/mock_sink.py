"""
Mock Video Sink Implementation

Simulated video sink for testing without an encoder.
Keeps submitted frames in memory and mimics encoder buffering delay.

This is a "Fake" (test double) - it has working logic but no real codec.
"""

import logging
from collections import deque
from pathlib import Path
from typing import Optional

import numpy as np

from recording.interfaces.video_sink_interface import (
    SinkUnavailableError,
    VideoSinkInterface,
)


class MockVideoSink(VideoSinkInterface):
    """
    Mock video sink for testing.

    Frames pass through a delay line of buffer_depth slots before they count
    as written, the way a real encoder holds frames for lookahead. close()
    flushes the delay line and writes a small placeholder file.

    Usage:
        sink = MockVideoSink(buffer_depth=2)
        sink.open(Path("test.avi"), 640, 480, 30)
        sink.write_frame(image)       # submitted=1, written=0
        sink.close()                  # written=1
    """

    def __init__(self, buffer_depth: int = 0, keep_frames: bool = True):
        """
        Initialize mock sink.

        Args:
            buffer_depth: Frames held back before they count as written
            keep_frames: If False, only count written frames (long tests)
        """
        self.logger = logging.getLogger(__name__)
        self.buffer_depth = buffer_depth
        self.keep_frames = keep_frames

        # State tracking
        self._is_open = False
        self._output_file: Optional[Path] = None
        self._width = 0
        self._height = 0
        self._fps = 0.0
        self._codec: Optional[str] = None
        self._pending: deque = deque()
        self._written: list[np.ndarray] = []
        self._written_count = 0
        self._frames_submitted = 0
        self._close_calls = 0
        self._finalize_count = 0

        # Configuration for test scenarios
        self._should_fail_open = False
        self._close_error: Optional[Exception] = None

    @property
    def default_codec(self) -> str:
        return "MOCK"

    def open(
        self,
        output_file: Path,
        width: int,
        height: int,
        fps: float,
        codec: Optional[str] = None,
    ) -> None:
        if self._should_fail_open:
            self.logger.error("[MOCK] Simulated open failure")
            raise SinkUnavailableError(f"[MOCK] Could not open {output_file}")

        if self._is_open or self._finalize_count:
            raise SinkUnavailableError("[MOCK] Sink already used")

        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.touch()

        self._is_open = True
        self._output_file = output_file
        self._width = width
        self._height = height
        self._fps = fps
        self._codec = codec or self.default_codec

        self.logger.info(f"[MOCK] Sink opened: {output_file} ({width}x{height} @ {fps}fps)")

    def write_frame(self, image: np.ndarray) -> None:
        self._check_frame(image, self._width, self._height)

        self._pending.append(image.copy() if self.keep_frames else image)
        self._frames_submitted += 1

        while len(self._pending) > self.buffer_depth:
            self._emit(self._pending.popleft())

    def close(self) -> None:
        self._close_calls += 1
        if not self._is_open:
            return

        # Flush the delay line in submission order
        while self._pending:
            self._emit(self._pending.popleft())

        self._is_open = False

        if self._close_error is not None:
            self.logger.error(f"[MOCK] Simulated finalize failure: {self._close_error}")
            raise self._close_error

        self._finalize_count += 1
        self._write_placeholder()

        self.logger.info(
            f"[MOCK] Sink closed: {self._output_file} ({self._written_count} frames)",
        )

    def _emit(self, image: np.ndarray) -> None:
        self._written_count += 1
        if self.keep_frames:
            self._written.append(image)

    def _write_placeholder(self) -> None:
        """Write a small header so the file is non-empty"""
        with open(self._output_file, "wb") as f:
            f.write(b"RIFF\x00\x00\x00\x00AVI LIST")
            f.write(
                f"{self._width}x{self._height}@{self._fps}:{self._written_count}".encode(),
            )

    def is_open(self) -> bool:
        return self._is_open

    def get_output_file(self) -> Optional[Path]:
        return self._output_file

    def get_frames_submitted(self) -> int:
        return self._frames_submitted

    def get_frames_written(self) -> int:
        return self._written_count

    # =========================================================================
    # TESTING HELPER METHODS (not part of VideoSinkInterface)
    # =========================================================================

    def simulate_open_failure(self) -> None:
        """
        Configure mock to fail on next open() call.

        Example:
            mock.simulate_open_failure()
            with pytest.raises(SinkUnavailableError):
                mock.open(Path("test.avi"), 640, 480, 30)
        """
        self._should_fail_open = True
        self.logger.debug("[MOCK] Configured to fail on open")

    def simulate_close_failure(self, error: Optional[Exception] = None) -> None:
        """
        Configure mock to fail while finalizing the file in close().

        The delay line is still flushed, but the file is never finalized.

        Example:
            mock.simulate_close_failure(OSError("disk full"))
        """
        self._close_error = error or OSError("[MOCK] Trailer write failed")
        self.logger.debug("[MOCK] Configured to fail on close")

    def get_written_frames(self) -> list[np.ndarray]:
        """Frames emitted so far, in output order"""
        return list(self._written)

    def get_pending_count(self) -> int:
        """Frames submitted but still held in the delay line"""
        return len(self._pending)

    def get_close_calls(self) -> int:
        """How many times close() was called"""
        return self._close_calls

    def get_finalize_count(self) -> int:
        """How many times the file was actually finalized (should be 0 or 1)"""
        return self._finalize_count

    def get_open_params(self) -> dict:
        """Parameters received by open()"""
        return {
            "width": self._width,
            "height": self._height,
            "fps": self._fps,
            "codec": self._codec,
        }
