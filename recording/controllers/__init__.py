"""
Recording Controllers Package

Pacing, per-segment sessions and the segment loop.
"""

from recording.controllers.cancellation import CancellationToken
from recording.controllers.frame_pacer import (
    FramePacer,
    PacingDecision,
    PacingState,
    repeat_count,
)
from recording.controllers.recording_controller import RecordingController
from recording.controllers.recording_session import RecordingSession

# Public API
__all__ = [
    "CancellationToken",
    "FramePacer",
    "PacingDecision",
    "PacingState",
    "RecordingController",
    "RecordingSession",
    "repeat_count",
]
