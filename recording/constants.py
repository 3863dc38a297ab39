"""
Recording Constants

Enums, stream layout and small helpers for the recording pipeline.

Note: Configuration values (durations, output format, device toggles) live in
config/settings.py. This file only contains enums, the fixed stream table and
utility functions.
"""

from enum import Enum

from config.settings import (
    INFRARED_STREAM_INDEX,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)

# =============================================================================
# SESSION STATE TRACKING
# =============================================================================


class SessionState(Enum):
    """
    States a recording session can be in.

    Lifecycle: PENDING -> RUNNING -> TIMED_OUT | CANCELLED | FAILED
    All three exit states are terminal.
    """

    PENDING = "pending"  # Constructed, run() not called yet
    RUNNING = "running"  # Capture loop active, sink open
    TIMED_OUT = "timed_out"  # Segment duration reached
    CANCELLED = "cancelled"  # Cancel key or shutdown signal observed
    FAILED = "failed"  # Capture failed mid-segment

    @property
    def is_terminal(self) -> bool:
        return self in (
            SessionState.TIMED_OUT,
            SessionState.CANCELLED,
            SessionState.FAILED,
        )


class PacingMode(Enum):
    """
    How FramePacer turns timestamp gaps into repeat counts.

    SLOT carries the sub-interval remainder from one transition to the next,
    so the output never drifts behind wall-clock time. INTERVAL floors each
    gap on its own and drops the remainder.
    """

    SLOT = "slot"
    INTERVAL = "interval"


class SinkBackend(Enum):
    """Available VideoSink implementations."""

    OPENCV = "opencv"  # cv2.VideoWriter container writer
    PYAV = "pyav"  # PyAV encode + mux pipeline
    MOCK = "mock"  # In-memory fake for tests


# =============================================================================
# CAMERA STREAMS
# =============================================================================

# Channel names used by FrameSourceInterface.enable_stream()
CHANNEL_INFRARED = "infrared"
CHANNEL_DEPTH = "depth"
CHANNEL_COLOR = "color"

# (channel, width, height, pixel format, fps, stream index)
# Depth must be enabled alongside infrared or the IR stream will not run.
DEFAULT_STREAMS = [
    (CHANNEL_INFRARED, VIDEO_WIDTH, VIDEO_HEIGHT, "y8", VIDEO_FPS, INFRARED_STREAM_INDEX),
    (CHANNEL_DEPTH, VIDEO_WIDTH, VIDEO_HEIGHT, "z16", VIDEO_FPS, None),
    (CHANNEL_COLOR, VIDEO_WIDTH, VIDEO_HEIGHT, "bgr8", VIDEO_FPS, None),
]


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Example:
        format_duration(630) -> "10:30"
        format_duration(90) -> "1:30"
    """
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"
