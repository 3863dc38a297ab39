"""
Frame Source Interface

Abstract interface for camera frame sources.
Defines the contract that any camera wrapper must follow.

This demonstrates Dependency Inversion Principle - high-level code
(RecordingSession) depends on this abstraction, not on pyrealsense2 directly.

Why an interface?
1. Testability: Can use MockFrameSource instead of a real camera
2. Flexibility: Easy to swap RealSense for another synchronized camera
3. Clear contract: Documents exactly what a frame source must do
"""

from abc import ABC, abstractmethod
from typing import Optional

from recording.models.frame_set import FrameSet


class FrameSourceInterface(ABC):
    """
    Abstract base class for synchronized camera frame sources.

    Lifecycle: enable_stream()... -> start() -> capture()... -> stop()
    """

    @abstractmethod
    def enable_stream(
        self,
        channel: str,
        width: int,
        height: int,
        pixel_format: str,
        fps: int,
        index: Optional[int] = None,
    ) -> None:
        """
        Request a stream before start().

        Args:
            channel: "infrared", "depth" or "color"
            width: Stream width in pixels
            height: Stream height in pixels
            pixel_format: Device format name (e.g., "y8", "z16", "bgr8")
            fps: Stream frame rate
            index: Sensor index for channels with more than one imager

        Raises:
            CaptureError: If called while streaming

        Example:
            source.enable_stream("color", 640, 480, "bgr8", 30)
        """
        pass

    @abstractmethod
    def start(self) -> None:
        """
        Open the device and start streaming all enabled streams.

        Raises:
            DeviceUnavailableError: If no camera is connected
            CaptureError: If streaming could not be started
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        """
        Stop streaming and release the device.

        Safe to call when not streaming.
        """
        pass

    @abstractmethod
    def is_streaming(self) -> bool:
        """
        Check if the source is started.

        Returns:
            True between a successful start() and stop()
        """
        pass

    @abstractmethod
    def capture(self) -> FrameSet:
        """
        Block until the next synchronized frame set arrives.

        Returns:
            FrameSet with timestamp, display channel and encode channel

        Raises:
            CaptureFailureError: If waiting for frames failed or timed out
        """
        pass

    def warm_up(self, frame_count: int) -> int:
        """
        Capture and discard frames so exposure can settle.

        Args:
            frame_count: Number of frame sets to drop

        Returns:
            Number of frame sets dropped
        """
        for _ in range(frame_count):
            self.capture()
        return max(frame_count, 0)

    @abstractmethod
    def supports_option(self, name: str) -> bool:
        """
        Check if the device exposes a capture option.

        Args:
            name: Option name (e.g., "enable_auto_exposure")

        Returns:
            True if get_option/set_option may be used for this option
        """
        pass

    @abstractmethod
    def get_option(self, name: str) -> float:
        """
        Read the current value of a capture option.

        Raises:
            CaptureError: If the option is not supported
        """
        pass

    @abstractmethod
    def set_option(self, name: str, value: float) -> None:
        """
        Change a capture option.

        Raises:
            CaptureError: If the option is not supported or rejected
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if a device can be opened.

        Returns:
            True if the driver is installed and a device is connected
        """
        pass

    def cleanup(self) -> None:
        """
        Stop streaming and release resources.

        Called when shutting down. This should never raise exceptions.
        """
        if self.is_streaming():
            self.stop()


class CaptureError(Exception):
    """
    Exception raised for frame source errors.

    Examples:
    - Camera not found
    - Option not supported
    - Frame wait timed out
    """
    pass


class DeviceUnavailableError(CaptureError):
    """No camera connected, or camera driver not installed"""
    pass


class CaptureFailureError(CaptureError):
    """Waiting for the next frame set failed (timeout, disconnect, ...)"""
    pass
