"""
Recording Module

Frame-paced, segmented recording from a depth camera.

Captures infrared + color frame sets, shows the infrared channel as a live
preview, and writes the color channel to fixed-rate video files that rotate
every segment. Frame pacing repeats or skips captures so playback time
matches wall-clock time even when the camera stalls.

Public API:
    - RecordingFactory: Creates sources, sinks and previews
    - RecordingController: Back-to-back segment loop
    - RecordingSession: One segment (capture -> pace -> write)
    - FramePacer / repeat_count: Output-slot arithmetic
    - CancellationToken: Shared stop flag
    - FrameSourceInterface / VideoSinkInterface / PreviewInterface: Contracts
    - CaptureError / SinkError: Exception hierarchies
    - SessionState: Segment end states

Usage:
    from recording import CancellationToken, RecordingController, RecordingFactory

    source = RecordingFactory.create_source()
    source.start()
    controller = RecordingController(
        source,
        sink_factory=lambda: RecordingFactory.create_sink("opencv"),
        cancel_token=CancellationToken(),
    )
    results = controller.run()
"""

from recording.constants import PacingMode, SessionState, SinkBackend
from recording.controllers.cancellation import CancellationToken
from recording.controllers.frame_pacer import FramePacer, repeat_count
from recording.controllers.recording_controller import RecordingController
from recording.controllers.recording_session import RecordingSession
from recording.factory import RecordingFactory
from recording.interfaces.frame_source_interface import (
    CaptureError,
    CaptureFailureError,
    DeviceUnavailableError,
    FrameSourceInterface,
)
from recording.interfaces.preview_interface import PreviewInterface
from recording.interfaces.video_sink_interface import (
    SinkError,
    SinkUnavailableError,
    VideoSinkInterface,
)
from recording.models.frame_set import FrameSet
from recording.models.session_result import SessionResult
from recording.processing.frame_processor import FrameProcessor
from recording.utils.recording_utils import generate_filename

__all__ = [
    "CancellationToken",
    "CaptureError",
    "CaptureFailureError",
    "DeviceUnavailableError",
    "FrameProcessor",
    "FramePacer",
    "FrameSet",
    "FrameSourceInterface",
    "PacingMode",
    "PreviewInterface",
    "RecordingController",
    "RecordingFactory",
    "RecordingSession",
    "SessionResult",
    "SessionState",
    "SinkBackend",
    "SinkError",
    "SinkUnavailableError",
    "VideoSinkInterface",
    "generate_filename",
    "repeat_count",
]
