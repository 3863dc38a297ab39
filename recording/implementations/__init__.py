"""
Recording Implementations Package

Exposes concrete implementations of recording interfaces.

RealSenseFrameSource, OpenCV* and PyAVVideoSink need their libraries at
import time; RealSenseFrameSource raises DeviceUnavailableError when
constructed without pyrealsense2.
"""

from recording.implementations.mock_preview import MockPreview
from recording.implementations.mock_sink import MockVideoSink
from recording.implementations.mock_source import MockFrameSource
from recording.implementations.opencv_preview import OpenCVPreview
from recording.implementations.opencv_sink import OpenCVVideoSink
from recording.implementations.pyav_sink import PyAVVideoSink
from recording.implementations.realsense_source import RealSenseFrameSource

# Public API
__all__ = [
    "MockFrameSource",
    "MockPreview",
    "MockVideoSink",
    "OpenCVPreview",
    "OpenCVVideoSink",
    "PyAVVideoSink",
    "RealSenseFrameSource",
]
