"""
Recording Interfaces Package

Exposes abstract interfaces for recording components.
"""

from recording.interfaces.frame_source_interface import (
    CaptureError,
    CaptureFailureError,
    DeviceUnavailableError,
    FrameSourceInterface,
)
from recording.interfaces.preview_interface import NO_KEY, PreviewInterface
from recording.interfaces.video_sink_interface import (
    SinkError,
    SinkUnavailableError,
    VideoSinkInterface,
)

# Public API
__all__ = [
    "NO_KEY",
    # Exceptions
    "CaptureError",
    "CaptureFailureError",
    "DeviceUnavailableError",
    "SinkError",
    "SinkUnavailableError",
    # Interfaces
    "FrameSourceInterface",
    "PreviewInterface",
    "VideoSinkInterface",
]
