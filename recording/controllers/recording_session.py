"""
Recording Session

Records one bounded-duration segment: opens a video sink, runs the
capture -> process -> pace -> write loop, and finalizes the file.
Reports why it ended so the controller can decide whether to rotate.

SOLID Principles:
- Single Responsibility: Only manages one segment's lifecycle
- Dependency Inversion: Depends on FrameSource/VideoSink/Preview interfaces
- Open/Closed: Callbacks for start/complete events
"""

import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from config.settings import (
    CANCEL_KEY,
    PACING_MODE,
    SEGMENT_DURATION,
    VIDEO_FPS,
    VIDEO_HEIGHT,
    VIDEO_WIDTH,
)
from recording.constants import PacingMode, SessionState, format_duration
from recording.controllers.cancellation import CancellationToken
from recording.controllers.frame_pacer import FramePacer, PacingState
from recording.interfaces.frame_source_interface import (
    CaptureFailureError,
    FrameSourceInterface,
)
from recording.interfaces.preview_interface import PreviewInterface
from recording.interfaces.video_sink_interface import SinkError, VideoSinkInterface
from recording.models.session_result import SessionResult
from recording.processing.frame_processor import FrameProcessor


class RecordingSession:
    """
    Manages a single recording segment.

    Features:
    - Constant output rate via FramePacer (repeats/skips captured frames)
    - Live preview of the infrared channel on every capture
    - Auto-stop at the segment time limit
    - Cancellation via key press or CancellationToken
    - Sink finalized exactly once, whatever ends the segment

    Usage:
        session = RecordingSession(
            source, sink, Path("records/2025-01-15_14-30-22.avi"),
            time_limit=300, preview=preview, cancel_token=token,
        )
        state = session.run()  # Blocks until TIMED_OUT or CANCELLED
    """

    def __init__(
        self,
        source: FrameSourceInterface,
        sink: VideoSinkInterface,
        output_file: Path,
        time_limit: float = SEGMENT_DURATION,
        processor: Optional[FrameProcessor] = None,
        preview: Optional[PreviewInterface] = None,
        cancel_token: Optional[CancellationToken] = None,
        width: int = VIDEO_WIDTH,
        height: int = VIDEO_HEIGHT,
        fps: float = VIDEO_FPS,
        codec: Optional[str] = None,
        pacing_mode: Optional[PacingMode] = None,
        cancel_key: int = CANCEL_KEY,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize recording session.

        Args:
            source: Started frame source (shared across segments)
            sink: Unopened video sink, owned by this session
            output_file: Path of the segment file
            time_limit: Segment duration in seconds
            processor: Frame processor, or None for default
            preview: Live preview, or None to run without one
            cancel_token: Shared cancellation flag, or None for a private one
            width: Output width in pixels
            height: Output height in pixels
            fps: Output frame rate
            codec: Sink codec, or None for the backend default
            pacing_mode: SLOT or INTERVAL pacing, or None for PACING_MODE
            cancel_key: Preview key code that cancels recording
            clock: Monotonic time source in seconds

        Raises:
            ValueError: If time_limit or fps is not positive, or the pacing
                mode is unknown
        """
        if time_limit <= 0:
            raise ValueError(f"Time limit must be positive, got {time_limit}")

        self.logger = logging.getLogger(__name__)
        self.source = source
        self.sink = sink
        self.output_file = output_file
        self.time_limit = time_limit
        self.processor = processor or FrameProcessor()
        self.preview = preview
        self.cancel_token = cancel_token or CancellationToken()
        self.width = width
        self.height = height
        self.fps = fps
        self.codec = codec
        self.cancel_key = cancel_key
        self._clock = clock

        self.frame_interval_ms = FramePacer.frame_interval_ms(fps)
        if pacing_mode is None:
            pacing_mode = PacingMode(PACING_MODE)
        self.pacer = FramePacer(self.frame_interval_ms, pacing_mode)

        # Session state
        self.state = SessionState.PENDING
        self._pacing: Optional[PacingState] = None
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None
        self._frames_captured = 0
        self._frames_written = 0

        # Callbacks for events
        self.on_start: Optional[Callable[[Path], None]] = None
        self.on_complete: Optional[Callable[[SessionResult], None]] = None

    def run(self) -> SessionState:
        """
        Record until the time limit is reached or cancellation is observed.

        Returns:
            Terminal state: TIMED_OUT or CANCELLED

        Raises:
            SinkUnavailableError: If the sink cannot be opened (no capture done)
            SinkError: If the sink cannot be finalized (state becomes FAILED)
            CaptureFailureError: If a capture fails (state becomes FAILED)
            RuntimeError: If the session has already been run
        """
        if self.state != SessionState.PENDING:
            raise RuntimeError(f"Session already run (state: {self.state.value})")

        self.logger.info(
            f"Start recording: {self.output_file} "
            f"({format_duration(self.time_limit)}, "
            f"{self.width}x{self.height} @ {self.fps}fps)",
        )

        # Fails fast before any capture
        self.sink.open(self.output_file, self.width, self.height, self.fps, self.codec)

        self.state = SessionState.RUNNING
        self._start_time = self._clock()
        self._trigger_start_callback()

        ended_normally = False
        try:
            while self.state == SessionState.RUNNING:
                self._step()
            ended_normally = True
        except CaptureFailureError as e:
            self.logger.error(f"Capture failed, ending segment: {e}")
            self.state = SessionState.FAILED
            raise
        finally:
            if self.state == SessionState.RUNNING:
                self.state = SessionState.FAILED
            self._finish(raise_close_error=ended_normally)

        return self.state

    def _step(self) -> None:
        """One loop iteration: poll, capture, preview, pace, write, check time"""
        if self._cancel_observed():
            self.logger.info("Cancellation observed, stopping segment")
            self.state = SessionState.CANCELLED
            return

        frame_set = self.source.capture()
        self._frames_captured += 1

        if self.preview is not None:
            self.preview.show(self.processor.to_display(frame_set.display_channel))

        image = self.processor.to_encode(frame_set.encode_channel)

        if self._pacing is None:
            # First capture is the baseline: nothing written yet
            self._pacing = self.pacer.start(frame_set.timestamp_ms, image)
        else:
            decision = self.pacer.pace(self._pacing, frame_set.timestamp_ms, image)
            for _ in range(decision.repeat_count):
                self.sink.write_frame(decision.frame)
            self._frames_written += decision.repeat_count

        if self.get_elapsed_time() >= self.time_limit:
            self.logger.info("Duration limit reached, ending segment")
            self.state = SessionState.TIMED_OUT

    def _cancel_observed(self) -> bool:
        if self.preview is not None and self.preview.poll_key() == self.cancel_key:
            self.cancel_token.request("cancel key")
        return self.cancel_token.is_requested()

    def _finish(self, raise_close_error: bool = True) -> None:
        """
        Finalize the sink and drop pacing state.

        A failed close marks the segment FAILED. The error is raised as
        SinkError after the complete callback, unless another error is
        already propagating out of run().
        """
        self._end_time = self._clock()
        self._pacing = None

        close_error = None
        try:
            self.sink.close()
        except Exception as e:
            self.logger.error(f"Error finalizing {self.output_file}: {e}")
            self.state = SessionState.FAILED
            close_error = e

        result = self.get_result()
        self.logger.info(
            f"Segment finished: {self.output_file.name} "
            f"(state: {result.state.value}, captured: {result.frames_captured}, "
            f"written: {result.frames_written}, skipped: {result.frames_skipped}, "
            f"max repeat: {result.max_repeat})",
        )
        self._trigger_complete_callback(result)

        if close_error is not None and raise_close_error:
            if isinstance(close_error, SinkError):
                raise close_error
            raise SinkError(
                f"Could not finalize {self.output_file}: {close_error}"
            ) from close_error

    def get_elapsed_time(self) -> float:
        """
        Get elapsed recording time in seconds.

        Returns:
            Seconds since the sink was opened, frozen once the session ends
        """
        if self._start_time is None:
            return 0.0
        end = self._end_time if self._end_time is not None else self._clock()
        return end - self._start_time

    def get_remaining_time(self) -> float:
        """Seconds until the time limit, or 0.0 once ended"""
        if self.state != SessionState.RUNNING:
            return 0.0
        return max(0.0, self.time_limit - self.get_elapsed_time())

    def get_result(self) -> SessionResult:
        """Summary of the session so far"""
        return SessionResult(
            output_file=self.output_file,
            state=self.state,
            frames_captured=self._frames_captured,
            frames_written=self._frames_written,
            frames_skipped=self.pacer.frames_skipped,
            max_repeat=self.pacer.max_repeat,
            elapsed_seconds=self.get_elapsed_time(),
        )

    def get_status(self) -> Dict[str, Any]:
        """
        Get complete session status.

        Returns:
            Dictionary with status information
        """
        return {
            "state": self.state.value,
            "finished": self.state.is_terminal,
            "output_file": str(self.output_file),
            "elapsed_time": self.get_elapsed_time(),
            "remaining_time": self.get_remaining_time(),
            "time_limit": self.time_limit,
            "frames_captured": self._frames_captured,
            "frames_written": self._frames_written,
            "frames_skipped": self.pacer.frames_skipped,
            "pacing_mode": self.pacer.mode.value,
        }

    # =========================================================================
    # CALLBACK TRIGGERS
    # =========================================================================

    def _trigger_start_callback(self) -> None:
        """Trigger on_start callback"""
        if self.on_start:
            try:
                self.on_start(self.output_file)
            except Exception as e:
                self.logger.error(f"Error in start callback: {e}")

    def _trigger_complete_callback(self, result: SessionResult) -> None:
        """Trigger on_complete callback"""
        if self.on_complete:
            try:
                self.on_complete(result)
            except Exception as e:
                self.logger.error(f"Error in complete callback: {e}")
