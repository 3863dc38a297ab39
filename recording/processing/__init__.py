"""
Frame Processing Package

Per-frame image transforms used by the recording loop.
"""

from recording.processing.frame_processor import FrameProcessor, MalformedBufferError

__all__ = [
    "FrameProcessor",
    "MalformedBufferError",
]
