"""
Recording Models Package

Data classes passed between recording components.
"""

from recording.models.frame_set import FrameSet
from recording.models.session_result import SessionResult

# Public API
__all__ = [
    "FrameSet",
    "SessionResult",
]
