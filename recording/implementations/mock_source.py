"""
Mock Frame Source Implementation

Simulated camera for testing without a RealSense device.
Produces synthetic frame sets with generated or scripted timestamps.

This is a "Fake" (test double) - it has working logic but no real hardware.
"""

import logging
import time
from typing import Optional, Sequence

import numpy as np

from config.settings import VIDEO_FPS, VIDEO_HEIGHT, VIDEO_WIDTH
from recording.interfaces.frame_source_interface import (
    CaptureError,
    CaptureFailureError,
    DeviceUnavailableError,
    FrameSourceInterface,
)
from recording.models.frame_set import FrameSet


class MockFrameSource(FrameSourceInterface):
    """
    Mock frame source for testing.

    Each capture returns a frame set whose encode channel is filled with
    (frame_number % 256), so tests can tell which capture ended up in the
    output.

    Usage:
        source = MockFrameSource(simulate_timing=False)
        source.start()
        frame_set = source.capture()  # timestamp 0.0
        frame_set = source.capture()  # timestamp 33.33...
    """

    def __init__(
        self,
        simulate_timing: bool = False,
        frame_interval_ms: float = 1000.0 / VIDEO_FPS,
        width: int = VIDEO_WIDTH,
        height: int = VIDEO_HEIGHT,
        timestamps: Optional[Sequence[float]] = None,
    ):
        """
        Initialize mock source.

        Args:
            simulate_timing: If True, capture() sleeps one frame interval
                           like a real camera. If False, returns instantly.
            frame_interval_ms: Spacing of generated timestamps
            width: Frame width in pixels
            height: Frame height in pixels
            timestamps: Optional scripted timestamps; once used up,
                        generation continues from the last one
        """
        self.logger = logging.getLogger(__name__)
        self.simulate_timing = simulate_timing
        self.frame_interval_ms = frame_interval_ms
        self.width = width
        self.height = height

        # State tracking
        self._streaming = False
        self._streams: list[tuple] = []
        self._frame_number = 0
        self._last_timestamp_ms: Optional[float] = None
        self._scripted = list(timestamps) if timestamps is not None else []

        # Device options with their current values
        self._options = {
            "enable_auto_exposure": 0.0,
            "emitter_enabled": 1.0,
        }

        # Configuration for test scenarios
        self._device_missing = False
        self._fail_after_frames: Optional[int] = None

        self.logger.info(
            f"Mock Source initialized (simulate_timing: {simulate_timing}, "
            f"interval: {frame_interval_ms:.2f}ms)",
        )

    def enable_stream(
        self,
        channel: str,
        width: int,
        height: int,
        pixel_format: str,
        fps: int,
        index: Optional[int] = None,
    ) -> None:
        if self._streaming:
            raise CaptureError("Cannot enable streams while streaming")
        self._streams.append((channel, width, height, pixel_format, fps, index))

    def start(self) -> None:
        if self._device_missing:
            raise DeviceUnavailableError("[MOCK] Simulated missing device")

        self._streaming = True
        self.logger.info("[MOCK] Streaming started")

    def stop(self) -> None:
        if self._streaming:
            self.logger.info("[MOCK] Streaming stopped")
        self._streaming = False

    def is_streaming(self) -> bool:
        return self._streaming

    def capture(self) -> FrameSet:
        """Generate the next synthetic frame set"""
        if not self._streaming:
            raise CaptureFailureError("[MOCK] Source is not streaming")

        if (
            self._fail_after_frames is not None
            and self._frame_number >= self._fail_after_frames
        ):
            raise CaptureFailureError("[MOCK] Simulated capture failure")

        if self.simulate_timing:
            time.sleep(self.frame_interval_ms / 1000.0)

        timestamp = self._next_timestamp()
        frame_number = self._frame_number
        self._frame_number += 1
        self._last_timestamp_ms = timestamp

        # Diagonal gradient that shifts every frame (gives equalizeHist work)
        ramp = np.add.outer(np.arange(self.height), np.arange(self.width))
        display = ((ramp + frame_number) % 256).astype(np.uint8)
        encode = np.full(
            (self.height, self.width, 3),
            frame_number % 256,
            dtype=np.uint8,
        )

        return FrameSet(
            timestamp_ms=timestamp,
            display_channel=display,
            encode_channel=encode,
            frame_number=frame_number,
        )

    def _next_timestamp(self) -> float:
        if self._scripted:
            return float(self._scripted.pop(0))
        if self._last_timestamp_ms is None:
            return 0.0
        return self._last_timestamp_ms + self.frame_interval_ms

    def supports_option(self, name: str) -> bool:
        return name in self._options

    def get_option(self, name: str) -> float:
        if name not in self._options:
            raise CaptureError(f"[MOCK] Option not supported: {name}")
        return self._options[name]

    def set_option(self, name: str, value: float) -> None:
        if name not in self._options:
            raise CaptureError(f"[MOCK] Option not supported: {name}")
        self._options[name] = float(value)
        self.logger.info(f"[MOCK] Option set: {name} = {value}")

    def is_available(self) -> bool:
        """Mock source is available unless a missing device is simulated"""
        return not self._device_missing

    # =========================================================================
    # TESTING HELPER METHODS (not part of FrameSourceInterface)
    # =========================================================================
    # These methods are ONLY for testing - configure mock behavior

    def simulate_device_missing(self) -> None:
        """
        Configure mock to fail on next start() call.

        Example:
            mock.simulate_device_missing()
            with pytest.raises(DeviceUnavailableError):
                mock.start()
        """
        self._device_missing = True
        self.logger.debug("[MOCK] Configured as missing device")

    def simulate_capture_failure(self, after_frames: int = 0) -> None:
        """
        Configure mock to fail once it has produced after_frames frame sets.

        Example:
            mock.simulate_capture_failure(after_frames=5)
        """
        self._fail_after_frames = after_frames
        self.logger.debug(f"[MOCK] Configured to fail after {after_frames} frames")

    def get_simulated_time(self) -> float:
        """
        Device time of the last capture, in seconds.

        Handy as a session clock so elapsed time follows frame timestamps.
        """
        if self._last_timestamp_ms is None:
            return 0.0
        return self._last_timestamp_ms / 1000.0

    def get_capture_count(self) -> int:
        """Number of frame sets produced so far"""
        return self._frame_number

    def get_enabled_streams(self) -> list[tuple]:
        """Stream requests received via enable_stream()"""
        return list(self._streams)
