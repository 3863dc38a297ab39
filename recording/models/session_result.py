"""
Session Result Model

Summary of one finished recording segment.
"""

from dataclasses import dataclass
from pathlib import Path

from recording.constants import SessionState


@dataclass
class SessionResult:
    """
    What happened during one RecordingSession.

    Kept by RecordingController for every segment it runs.
    """

    output_file: Path
    state: SessionState
    frames_captured: int = 0  # Frame sets pulled from the source
    frames_written: int = 0  # Frames handed to the sink (after pacing)
    frames_skipped: int = 0  # Captures that arrived too early to be written
    max_repeat: int = 0  # Largest repeat count seen (stall indicator)
    elapsed_seconds: float = 0.0

    @property
    def timed_out(self) -> bool:
        """True if the segment ended by reaching its duration limit"""
        return self.state == SessionState.TIMED_OUT

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/status output"""
        return {
            "output_file": str(self.output_file),
            "state": self.state.value,
            "frames_captured": self.frames_captured,
            "frames_written": self.frames_written,
            "frames_skipped": self.frames_skipped,
            "max_repeat": self.max_repeat,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
        }
