"""
Recording Factory

Factory pattern for creating recording implementations.
Builds the RealSense source (or the mock source when asked for one), and
sinks and previews by backend name.

Single place to decide implementation; the controllers only see interfaces.
"""

import logging
import os
from typing import Literal, Union

from config.settings import VIDEO_FPS
from recording.constants import SinkBackend
from recording.implementations.mock_preview import MockPreview
from recording.implementations.mock_sink import MockVideoSink
from recording.implementations.mock_source import MockFrameSource
from recording.implementations.opencv_preview import OpenCVPreview
from recording.implementations.opencv_sink import OpenCVVideoSink
from recording.implementations.pyav_sink import PyAVVideoSink
from recording.implementations.realsense_source import RealSenseFrameSource
from recording.interfaces.frame_source_interface import (
    DeviceUnavailableError,
    FrameSourceInterface,
)
from recording.interfaces.preview_interface import PreviewInterface
from recording.interfaces.video_sink_interface import VideoSinkInterface

# Type aliases for better type hints
SourceMode = Literal["auto", "real", "mock"]
PreviewMode = Literal["auto", "window", "headless"]


class RecordingFactory:
    """
    Factory for creating recording component implementations.

    Usage:
        # Real device (raises DeviceUnavailableError if missing)
        source = RecordingFactory.create_source()

        # Development: RealSense if connected, mock otherwise
        source = RecordingFactory.create_source(mode="auto")

        # Sinks by backend name
        sink = RecordingFactory.create_sink("pyav")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_source(
        cls,
        mode: SourceMode = "real",
        simulate_timing: bool = True,
    ) -> FrameSourceInterface:
        """
        Create a frame source instance.

        Args:
            mode: "real" (RealSense), "mock" (mock), or "auto" (RealSense
                if connected, mock otherwise)
            simulate_timing: For the mock source, sleep one frame interval
                per capture

        Returns:
            FrameSourceInterface implementation

        Raises:
            DeviceUnavailableError: If mode="real" and no device is usable
            ValueError: If mode is unknown
        """
        if mode == "mock":
            cls._logger.info(f"Creating Mock Source (simulate_timing: {simulate_timing})")
            return MockFrameSource(
                simulate_timing=simulate_timing,
                frame_interval_ms=1000.0 / VIDEO_FPS,
            )

        if mode == "real":
            source = RealSenseFrameSource()
            if not source.is_available():
                raise DeviceUnavailableError("No RealSense device connected")
            cls._logger.info("Creating RealSense Source")
            return source

        if mode != "auto":
            raise ValueError(f"Unknown source mode: {mode}")

        # mode == "auto" - try real first, fall back to mock
        try:
            source = RealSenseFrameSource()
            if source.is_available():
                cls._logger.info("Creating RealSense Source (auto-detected)")
                return source
            cls._logger.warning("No RealSense device connected, using Mock Source")
        except DeviceUnavailableError as e:
            cls._logger.warning(f"RealSense not available ({e}), using Mock Source")

        return MockFrameSource(simulate_timing=simulate_timing)

    @classmethod
    def create_sink(
        cls,
        backend: Union[SinkBackend, str] = SinkBackend.OPENCV,
    ) -> VideoSinkInterface:
        """
        Create an unopened video sink.

        Args:
            backend: SinkBackend member or its value ("opencv", "pyav", "mock")

        Returns:
            VideoSinkInterface implementation

        Raises:
            ValueError: If backend is unknown
        """
        backend = SinkBackend(backend)

        if backend == SinkBackend.OPENCV:
            return OpenCVVideoSink()
        if backend == SinkBackend.PYAV:
            return PyAVVideoSink()
        return MockVideoSink()

    @classmethod
    def create_preview(cls, mode: PreviewMode = "auto") -> PreviewInterface:
        """
        Create a live preview.

        "auto" opens a window when a display is available and runs
        headless otherwise.

        Raises:
            ValueError: If mode is unknown
        """
        if mode == "headless":
            cls._logger.info("Preview disabled (headless)")
            return MockPreview()

        if mode == "window":
            return OpenCVPreview()

        if mode != "auto":
            raise ValueError(f"Unknown preview mode: {mode}")

        if cls.is_display_available():
            return OpenCVPreview()

        cls._logger.warning("No display available, running headless")
        return MockPreview()

    @classmethod
    def is_display_available(cls) -> bool:
        """Whether a GUI window can be opened (X11/Wayland on Linux)"""
        if os.name == "nt":
            return True
        return bool(os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY"))

    @classmethod
    def is_real_source_available(cls) -> dict[str, bool]:
        """
        Check if a real frame source is available.

        Useful for diagnostics and configuration display.

        Returns:
            Dictionary with availability status:
            {
                'sdk': True/False,
                'device': True/False
            }
        """
        status = {
            'sdk': False,
            'device': False,
        }

        try:
            source = RealSenseFrameSource(use_default_streams=False)
            status['sdk'] = True
            status['device'] = source.is_available()
        except DeviceUnavailableError as e:
            cls._logger.debug(f"RealSense SDK not available: {e}")

        return status
