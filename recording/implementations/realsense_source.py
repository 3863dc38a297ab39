"""
RealSense Frame Source Implementation

Real frame source using the Intel RealSense SDK (pyrealsense2).
Streams infrared, depth and color, and returns the infrared image with the
color image as one FrameSet per wait-for-frames call.

This wraps pyrealsense2 to match our FrameSourceInterface.
"""

import logging
from typing import Optional

import numpy as np

try:
    import pyrealsense2 as rs

    REALSENSE_AVAILABLE = True
except ImportError:
    REALSENSE_AVAILABLE = False

from config.settings import CAPTURE_TIMEOUT_MS, INFRARED_STREAM_INDEX
from recording.constants import (
    CHANNEL_COLOR,
    CHANNEL_DEPTH,
    CHANNEL_INFRARED,
    DEFAULT_STREAMS,
)
from recording.interfaces.frame_source_interface import (
    CaptureError,
    CaptureFailureError,
    DeviceUnavailableError,
    FrameSourceInterface,
)
from recording.models.frame_set import FrameSet


class RealSenseFrameSource(FrameSourceInterface):
    """
    Frame source backed by a RealSense camera.

    Usage:
        source = RealSenseFrameSource()
        source.start()
        if source.supports_option("enable_auto_exposure"):
            source.set_option("enable_auto_exposure", 1)
        frame_set = source.capture()
        source.stop()
    """

    def __init__(
        self,
        timeout_ms: int = CAPTURE_TIMEOUT_MS,
        infrared_index: int = INFRARED_STREAM_INDEX,
        use_default_streams: bool = True,
    ):
        """
        Initialize RealSense source.

        Args:
            timeout_ms: Maximum wait for one frame set
            infrared_index: Which IR imager feeds the display channel
            use_default_streams: Enable the standard IR/depth/color streams

        Raises:
            DeviceUnavailableError: If pyrealsense2 is not installed
        """
        self.logger = logging.getLogger(__name__)

        if not REALSENSE_AVAILABLE:
            raise DeviceUnavailableError(
                "pyrealsense2 not available. Install with: pip install pyrealsense2",
            )

        self.timeout_ms = timeout_ms
        self.infrared_index = infrared_index

        # Streams requested before start()
        self._streams: list[tuple] = []

        # Device handles (set by start())
        self._pipeline = None
        self._profile = None

        if use_default_streams:
            for channel, width, height, fmt, fps, index in DEFAULT_STREAMS:
                self.enable_stream(channel, width, height, fmt, fps, index)

        self.logger.info(
            f"RealSense source initialized (timeout: {timeout_ms}ms, "
            f"streams: {len(self._streams)})",
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
        """Queue a stream request; applied on start()"""
        if self.is_streaming():
            raise CaptureError("Cannot enable streams while streaming")

        if channel not in (CHANNEL_INFRARED, CHANNEL_DEPTH, CHANNEL_COLOR):
            raise CaptureError(f"Unknown channel: {channel}")

        self._streams.append((channel, width, height, pixel_format, fps, index))
        self.logger.debug(
            f"Stream enabled: {channel} {width}x{height} {pixel_format} @ {fps}fps",
        )

    def start(self) -> None:
        """
        Open the first connected device and start streaming.
        """
        if self.is_streaming():
            self.logger.warning("Already streaming")
            return

        if not self.is_available():
            raise DeviceUnavailableError("No RealSense device connected")

        config = rs.config()
        for channel, width, height, fmt, fps, index in self._streams:
            stream = getattr(rs.stream, channel)
            pixel_format = getattr(rs.format, fmt)
            if index is None:
                config.enable_stream(stream, width, height, pixel_format, fps)
            else:
                config.enable_stream(stream, index, width, height, pixel_format, fps)

        pipeline = rs.pipeline()
        try:
            self._profile = pipeline.start(config)
        except RuntimeError as e:
            raise DeviceUnavailableError(f"Failed to start streaming: {e}") from e

        self._pipeline = pipeline

        device = self._profile.get_device()
        self.logger.info(
            f"Streaming started: {device.get_info(rs.camera_info.name)} "
            f"(serial: {device.get_info(rs.camera_info.serial_number)})",
        )

    def stop(self) -> None:
        """Stop the pipeline and release the device"""
        if not self.is_streaming():
            return

        try:
            self._pipeline.stop()
            self.logger.info("Streaming stopped")
        except RuntimeError as e:
            self.logger.error(f"Error stopping pipeline: {e}")
        finally:
            self._pipeline = None
            self._profile = None

    def is_streaming(self) -> bool:
        return self._pipeline is not None

    def capture(self) -> FrameSet:
        """
        Wait for the next synchronized frame set.

        The color frame's timestamp is used for pacing.
        """
        if not self.is_streaming():
            raise CaptureFailureError("Source is not streaming")

        try:
            frames = self._pipeline.wait_for_frames(self.timeout_ms)
        except RuntimeError as e:
            raise CaptureFailureError(f"wait_for_frames failed: {e}") from e

        infrared = frames.get_infrared_frame(self.infrared_index)
        color = frames.get_color_frame()
        if not infrared or not color:
            raise CaptureFailureError("Frame set is missing infrared or color frame")

        # Copy out of the SDK's frame pool so the buffers outlive the frames
        return FrameSet(
            timestamp_ms=color.get_timestamp(),
            display_channel=np.array(infrared.get_data(), dtype=np.uint8, copy=True),
            encode_channel=np.array(color.get_data(), dtype=np.uint8, copy=True),
            frame_number=color.get_frame_number(),
        )

    def supports_option(self, name: str) -> bool:
        return self._find_sensor(name) is not None

    def get_option(self, name: str) -> float:
        sensor = self._require_sensor(name)
        return sensor.get_option(getattr(rs.option, name))

    def set_option(self, name: str, value: float) -> None:
        sensor = self._require_sensor(name)
        try:
            sensor.set_option(getattr(rs.option, name), value)
        except RuntimeError as e:
            raise CaptureError(f"Device rejected {name}={value}: {e}") from e
        self.logger.info(f"Option set: {name} = {value}")

    def is_available(self) -> bool:
        """Check that at least one RealSense device is connected"""
        try:
            return len(rs.context().query_devices()) > 0
        except RuntimeError as e:
            self.logger.warning(f"Device query failed: {e}")
            return False

    def _find_sensor(self, name: str):
        """First sensor on the active device that supports the option"""
        if not self.is_streaming():
            return None

        option = getattr(rs.option, name, None)
        if option is None:
            return None

        for sensor in self._profile.get_device().query_sensors():
            if sensor.supports(option):
                return sensor
        return None

    def _require_sensor(self, name: str):
        sensor = self._find_sensor(name)
        if sensor is None:
            raise CaptureError(f"Option not supported: {name}")
        return sensor
