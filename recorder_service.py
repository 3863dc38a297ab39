"""
Recorder Service

Main entry point for the depth camera recorder.
Wires the frame source, preview and sink factory into a RecordingController
and runs segments until the cancel key or a shutdown signal.

Startup Flow:
    create source -> start streaming -> apply device options
        -> drop warm-up frames -> segment loop -> stop streaming

Exit codes:
    0 - Normal shutdown (cancel key, SIGINT, SIGTERM, segment limit)
    1 - Device unavailable, output file could not be opened or finalized,
        capture failure, or any other fatal error
"""

import argparse
import logging
import logging.handlers
import signal
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

from config.settings import (
    CAMERA_OPTIONS,
    LOG_BACKUP_COUNT,
    LOG_DIR,
    LOG_FALLBACK_DIR,
    LOG_SERVICE_FILE,
    PACING_MODE,
    RECORDS_BASE_PATH,
    RECORDS_DIR_NAME,
    SEGMENT_DURATION,
    SINK_BACKEND,
    SOURCE_MODE,
    WARMUP_FRAMES,
)
from recording import (
    CancellationToken,
    CaptureFailureError,
    DeviceUnavailableError,
    FrameSourceInterface,
    PacingMode,
    PreviewInterface,
    RecordingController,
    RecordingFactory,
    SessionResult,
    SinkError,
    SinkUnavailableError,
    VideoSinkInterface,
)
from recording.utils import get_recording_files


class RecorderService:
    """
    Main service coordinator.

    Wires together:
    - Frame source (RealSense, or mock when asked for), started once for
      all segments
    - Preview window (or headless)
    - Sink factory (one new sink per segment)
    - Shutdown signals -> CancellationToken

    Usage:
        service = RecorderService()
        results = service.run()  # Blocks until cancelled
    """

    def __init__(
        self,
        base_path: Path = RECORDS_BASE_PATH,
        segment_duration: float = SEGMENT_DURATION,
        source_mode: str = SOURCE_MODE,
        sink_backend: str = SINK_BACKEND,
        preview_mode: str = "auto",
        pacing_mode: Optional[PacingMode] = None,
        max_segments: Optional[int] = None,
        warmup_frames: int = WARMUP_FRAMES,
        camera_options: Optional[Dict[str, float]] = None,
        source: Optional[FrameSourceInterface] = None,
        preview: Optional[PreviewInterface] = None,
        sink_factory: Optional[Callable[[], VideoSinkInterface]] = None,
        cancel_token: Optional[CancellationToken] = None,
        **controller_options,
    ):
        """
        Initialize service components.

        Components passed in are used as-is; the rest are built by
        RecordingFactory from the mode/backend names.

        Raises:
            DeviceUnavailableError: If source_mode="real" (the default) and no
                device is connected
            ValueError: If a mode or backend name is unknown
        """
        if pacing_mode is None:
            pacing_mode = PacingMode(PACING_MODE)

        self.logger = logging.getLogger(__name__)
        self.logger.info("Initializing Recorder Service...")

        self.base_path = base_path
        self.warmup_frames = warmup_frames
        self.camera_options = dict(CAMERA_OPTIONS if camera_options is None else camera_options)
        self.cancel_token = cancel_token or CancellationToken()

        self.source = source or RecordingFactory.create_source(source_mode)
        self.preview = preview or RecordingFactory.create_preview(preview_mode)
        self.sink_factory = sink_factory or (
            lambda: RecordingFactory.create_sink(sink_backend)
        )

        self.controller = RecordingController(
            self.source,
            self.sink_factory,
            base_path=base_path,
            segment_duration=segment_duration,
            preview=self.preview,
            cancel_token=self.cancel_token,
            max_segments=max_segments,
            pacing_mode=pacing_mode,
            **controller_options,
        )

        self._previous_handlers: Dict[int, object] = {}

        self.logger.info(
            f"Recorder Service initialized (segment: {segment_duration:g}s, "
            f"pacing: {pacing_mode.value})",
        )

    def run(self) -> List[SessionResult]:
        """
        Start the camera and record segments until cancelled.

        Returns:
            One SessionResult per finished segment

        Raises:
            DeviceUnavailableError: If streaming cannot start
            SinkUnavailableError: If a segment file cannot be opened
            SinkError: If a segment file cannot be finalized
            CaptureFailureError: If a capture fails (warm-up or recording)
        """
        self._install_signal_handlers()
        try:
            self.source.start()
            self._apply_camera_options()

            dropped = self.source.warm_up(self.warmup_frames)
            self.logger.info(f"Dropped {dropped} warm-up frames")

            return self.controller.run()
        finally:
            self._shutdown()

    def _apply_camera_options(self) -> None:
        """Apply each configured option the device supports"""
        for name, value in self.camera_options.items():
            if not self.source.supports_option(name):
                self.logger.info(f"Option {name} not supported by device, skipping")
                continue
            self.source.set_option(name, value)

    # =========================================================================
    # SHUTDOWN HANDLING
    # =========================================================================

    def _install_signal_handlers(self) -> None:
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, self._signal_handler)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def _signal_handler(self, signum, _frame):
        """
        Handle shutdown signals.

        The current segment is finalized at the next loop iteration.

        Args:
            signum: Signal number
            _frame: Current stack frame (unused, required by signal API)
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received signal {signal_name}, shutting down...")
        self.cancel_token.request(signal_name)

    def _shutdown(self) -> None:
        """Release the camera and preview window"""
        self.logger.info("Shutting down Recorder Service...")
        self._restore_signal_handlers()

        self.source.cleanup()
        self.preview.close()

        records_dir = self.base_path / RECORDS_DIR_NAME
        count = len(get_recording_files(records_dir))
        self.logger.info(
            f"Recorder Service shutdown complete ({count} files in {records_dir})",
        )


def setup_logging(debug: bool = False, log_dir: str = LOG_DIR) -> None:
    """
    Setup logging with rotation.

    Logs to both console and file with rotation:
    - Daily rotation
    - Keep LOG_BACKUP_COUNT days of logs
    - Falls back to ./logs when log_dir is not writable
    """
    level = logging.DEBUG if debug else logging.INFO

    logger = logging.getLogger()
    logger.setLevel(level)

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(message)s | %(name)s")

    # Console handler (stdout)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = Path(log_dir) / LOG_SERVICE_FILE
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(log_file),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except (PermissionError, FileNotFoundError):
        logs_dir = Path(LOG_FALLBACK_DIR)
        logs_dir.mkdir(exist_ok=True)

        fallback_log = logs_dir / LOG_SERVICE_FILE
        logger.warning(f"Cannot write to {log_file}, using fallback: {fallback_log}")
        logger.info(
            f"To fix: sudo mkdir -p {log_dir} && sudo chown $(whoami) {log_dir}",
        )

        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(fallback_log),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )

    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Record a depth camera's color stream in fixed-rate segments",
    )
    parser.add_argument(
        "--base-path",
        type=Path,
        default=RECORDS_BASE_PATH,
        help="Directory that holds records/ (default: %(default)s)",
    )
    parser.add_argument(
        "--segment-duration",
        type=float,
        default=SEGMENT_DURATION,
        help="Segment length in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--max-segments",
        type=int,
        default=None,
        help="Stop after this many segments (default: unlimited)",
    )
    parser.add_argument(
        "--source",
        choices=["auto", "real", "mock"],
        default=SOURCE_MODE,
        help="Frame source (default: %(default)s)",
    )
    parser.add_argument(
        "--sink",
        choices=["opencv", "pyav", "mock"],
        default=SINK_BACKEND,
        help="Video sink backend (default: %(default)s)",
    )
    parser.add_argument(
        "--pacing",
        choices=[mode.value for mode in PacingMode],
        default=PACING_MODE,
        help="Frame pacing mode (default: %(default)s)",
    )
    parser.add_argument(
        "--warmup-frames",
        type=int,
        default=WARMUP_FRAMES,
        help="Frames dropped after start while exposure settles (default: %(default)s)",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without a preview window",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the service.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("Depth Camera Recorder Starting")
    logger.info("=" * 60)

    try:
        service = RecorderService(
            base_path=args.base_path,
            segment_duration=args.segment_duration,
            source_mode=args.source,
            sink_backend=args.sink,
            preview_mode="headless" if args.headless else "auto",
            pacing_mode=PacingMode(args.pacing),
            max_segments=args.max_segments,
            warmup_frames=args.warmup_frames,
        )
        results = service.run()
    except DeviceUnavailableError as e:
        logger.critical(f"Camera unavailable: {e}")
        return 1
    except SinkUnavailableError as e:
        logger.critical(f"Could not open the output video for write: {e}")
        return 1
    except SinkError as e:
        logger.critical(f"Could not finalize the output video: {e}")
        return 1
    except CaptureFailureError as e:
        logger.critical(f"Capture failed: {e}")
        return 1
    except Exception as e:
        logger.critical(f"Fatal error in main: {e}", exc_info=True)
        return 1

    logger.info(f"Recorded {len(results)} segment(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
