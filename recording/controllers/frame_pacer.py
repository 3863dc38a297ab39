"""
Frame Pacer

Decides how many output frames each captured frame must cover so the
recording plays back at a constant rate, whatever the real capture timing.

Policy: when a new frame set arrives, the *previous* encode image is written
once per output slot that elapsed since it was captured. The new image waits
for its own slots to pass. This costs one frame of latency and buys constant
pacing:
- Camera stalls -> the stale image is repeated, wall-clock duration is kept
- Camera faster than target -> repeat count 0, the capture is skipped in the
  output (it still becomes the new "previous" image)
"""

import logging
import math
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from recording.constants import PacingMode

# Absorbs float rounding in accumulated timestamps (ms)
PACING_TOLERANCE_MS = 1e-6


def repeat_count(
    previous_timestamp_ms: float,
    current_timestamp_ms: float,
    frame_interval_ms: float,
) -> int:
    """
    Number of output frame slots between two captures.

    floor((current - previous) / interval), never negative.

    Args:
        previous_timestamp_ms: Timestamp of the earlier capture
        current_timestamp_ms: Timestamp of the later capture
        frame_interval_ms: Output frame interval (1000 / fps)

    Returns:
        Slot count >= 0

    Raises:
        ValueError: If frame_interval_ms is not positive

    Example:
        repeat_count(16, 50, 1000 / 30) -> 1
        repeat_count(0, 16, 1000 / 30) -> 0
    """
    if frame_interval_ms <= 0:
        raise ValueError(f"Frame interval must be positive, got {frame_interval_ms}")

    gap = current_timestamp_ms - previous_timestamp_ms
    if gap <= 0:
        return 0
    return int(math.floor(gap / frame_interval_ms))


@dataclass
class PacingState:
    """
    Pacing memory of one recording session.

    Owned by a single RecordingSession and dropped with it, so nothing leaks
    from one segment into the next.
    """

    last_timestamp_ms: float
    last_encode_snapshot: np.ndarray  # Private copy of the previous color image
    carry_ms: float = 0.0  # Elapsed time not yet covered by an output slot


class PacingDecision(NamedTuple):
    """Result of one pacing step"""

    repeat_count: int
    frame: np.ndarray  # Image to write repeat_count times


class FramePacer:
    """
    Per-session pacing calculator.

    Usage:
        pacer = FramePacer(FramePacer.frame_interval_ms(30))
        state = pacer.start(first.timestamp_ms, first.encode_channel)
        decision = pacer.pace(state, nxt.timestamp_ms, nxt.encode_channel)
        for _ in range(decision.repeat_count):
            sink.write_frame(decision.frame)
    """

    def __init__(self, frame_interval_ms: float, mode: PacingMode = PacingMode.SLOT):
        """
        Initialize pacer.

        Args:
            frame_interval_ms: Output frame interval in milliseconds
            mode: SLOT (carry remainders) or INTERVAL (floor each gap)

        Raises:
            ValueError: If frame_interval_ms is not positive
        """
        if frame_interval_ms <= 0:
            raise ValueError(f"Frame interval must be positive, got {frame_interval_ms}")

        self.logger = logging.getLogger(__name__)
        self.interval_ms = frame_interval_ms
        self.mode = mode

        # Statistics
        self.transitions = 0
        self.frames_skipped = 0
        self.frames_repeated = 0  # Total writes requested
        self.max_repeat = 0

    @staticmethod
    def frame_interval_ms(fps: float) -> float:
        """Output frame interval for a target rate"""
        if fps <= 0:
            raise ValueError(f"Frame rate must be positive, got {fps}")
        return 1000.0 / fps

    repeat_count = staticmethod(repeat_count)

    def start(self, timestamp_ms: float, image: np.ndarray) -> PacingState:
        """
        Establish the baseline from the first capture of a session.

        The baseline itself is never written; it becomes the "previous"
        image for the first real transition.
        """
        return PacingState(
            last_timestamp_ms=timestamp_ms,
            last_encode_snapshot=image.copy(),
        )

    def pace(
        self,
        state: PacingState,
        timestamp_ms: float,
        image: np.ndarray,
    ) -> PacingDecision:
        """
        Advance the pacing state by one capture.

        Returns the previous image together with how many times to write it,
        then stores the new capture as the previous image.
        """
        current = timestamp_ms
        gap = current - state.last_timestamp_ms

        if gap < 0:
            # Source clock went backwards; restart pacing from here
            self.logger.warning(
                f"Non-monotonic timestamp: {state.last_timestamp_ms:.3f} -> "
                f"{current:.3f}, writing nothing",
            )
            count = 0
            carry = 0.0
        else:
            elapsed = gap + state.carry_ms if self.mode == PacingMode.SLOT else gap
            count = int(math.floor((elapsed + PACING_TOLERANCE_MS) / self.interval_ms))
            carry = max(elapsed - count * self.interval_ms, 0.0)
            if self.mode == PacingMode.INTERVAL:
                carry = 0.0

        stale = state.last_encode_snapshot

        state.last_timestamp_ms = current
        state.last_encode_snapshot = image.copy()
        state.carry_ms = carry

        self._record(count)
        return PacingDecision(count, stale)

    def _record(self, count: int) -> None:
        self.transitions += 1
        self.frames_repeated += count
        if count == 0:
            self.frames_skipped += 1
        elif count > 1:
            self.logger.debug(f"Frame repeated {count} times")
        self.max_repeat = max(self.max_repeat, count)
