"""
Recording Controller

Runs back-to-back RecordingSessions, one file per segment, until a
session ends for any reason other than its time limit.

SOLID Principles:
- Single Responsibility: Only sequences segments and names their files
- Dependency Inversion: Gets a sink factory, not a concrete sink class
"""

import logging
import time
from pathlib import Path
from typing import Callable, List, Optional

from config.settings import SEGMENT_DURATION
from recording.constants import SessionState
from recording.controllers.cancellation import CancellationToken
from recording.controllers.recording_session import RecordingSession
from recording.interfaces.frame_source_interface import FrameSourceInterface
from recording.interfaces.preview_interface import PreviewInterface
from recording.interfaces.video_sink_interface import VideoSinkInterface
from recording.models.session_result import SessionResult
from recording.processing.frame_processor import FrameProcessor
from recording.utils.recording_utils import (
    format_file_size,
    generate_filename,
    get_records_dir,
)


class RecordingController:
    """
    Segment loop.

    The frame source is started once by the caller and shared by every
    segment; each segment gets a fresh sink from sink_factory and its own
    pacing state.

    Usage:
        controller = RecordingController(
            source,
            sink_factory=lambda: RecordingFactory.create_sink("opencv"),
            base_path=Path("."),
            segment_duration=300,
            preview=preview,
            cancel_token=token,
        )
        results = controller.run()  # Returns when a segment is cancelled
    """

    def __init__(
        self,
        source: FrameSourceInterface,
        sink_factory: Callable[[], VideoSinkInterface],
        base_path: Path = Path("."),
        segment_duration: float = SEGMENT_DURATION,
        processor: Optional[FrameProcessor] = None,
        preview: Optional[PreviewInterface] = None,
        cancel_token: Optional[CancellationToken] = None,
        max_segments: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        **session_options,
    ):
        """
        Initialize controller.

        Args:
            source: Started frame source
            sink_factory: Returns a new unopened sink per segment
            base_path: Directory that holds (or will hold) records/
            segment_duration: Length of each segment in seconds
            processor: Frame processor shared by all segments
            preview: Live preview shared by all segments
            cancel_token: Shared cancellation flag
            max_segments: Stop after this many segments (None = unlimited)
            clock: Monotonic time source in seconds
            **session_options: Passed through to RecordingSession
                (width, height, fps, codec, pacing_mode, cancel_key)

        Raises:
            ValueError: If segment_duration or max_segments is not positive
        """
        if segment_duration <= 0:
            raise ValueError(
                f"Segment duration must be positive, got {segment_duration}"
            )
        if max_segments is not None and max_segments <= 0:
            raise ValueError(f"max_segments must be positive, got {max_segments}")

        self.logger = logging.getLogger(__name__)
        self.source = source
        self.sink_factory = sink_factory
        self.base_path = base_path
        self.segment_duration = segment_duration
        self.processor = processor or FrameProcessor()
        self.preview = preview
        self.cancel_token = cancel_token or CancellationToken()
        self.max_segments = max_segments
        self._clock = clock
        self._session_options = session_options

        self._results: List[SessionResult] = []
        self._current: Optional[RecordingSession] = None

    def run(self) -> List[SessionResult]:
        """
        Record segments until one is cancelled (or max_segments is reached).

        Returns:
            One SessionResult per segment, in order

        Raises:
            OSError: If the records directory cannot be created
            SinkUnavailableError: If a segment's sink cannot be opened
            CaptureFailureError: If a capture fails mid-segment
            SinkError: If a segment file cannot be finalized
        """
        records_dir = get_records_dir(self.base_path)
        self.logger.info(
            f"Recording to {records_dir} in {self.segment_duration:g}s segments"
        )

        while True:
            output_file = generate_filename(records_dir)
            session = RecordingSession(
                self.source,
                self.sink_factory(),
                output_file,
                time_limit=self.segment_duration,
                processor=self.processor,
                preview=self.preview,
                cancel_token=self.cancel_token,
                clock=self._clock,
                **self._session_options,
            )
            session.on_complete = self._on_segment_complete
            self._current = session

            try:
                state = session.run()
            finally:
                self._current = None

            if state != SessionState.TIMED_OUT:
                break

            if self.max_segments is not None and len(self._results) >= self.max_segments:
                self.logger.info(f"Reached {self.max_segments} segments, stopping")
                break

            self.logger.info("Rotating to next segment")

        return list(self._results)

    def _on_segment_complete(self, result: SessionResult) -> None:
        self._results.append(result)
        self.logger.debug(f"Segment result: {result.to_dict()}")
        if result.output_file.exists():
            size = format_file_size(result.output_file.stat().st_size)
            self.logger.info(f"Saved {result.output_file.name} ({size})")

    def get_results(self) -> List[SessionResult]:
        """Results of the segments finished so far"""
        return list(self._results)

    def get_current_session(self) -> Optional[RecordingSession]:
        """Segment currently recording, or None"""
        return self._current
