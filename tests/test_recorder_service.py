"""
Recorder Service Tests

Tests for the service entry point showing:
- Startup sequence (options, warm-up, segment loop, shutdown)
- Shutdown signals cancel the current segment
- Exit codes for fatal errors

To run:
    pytest tests/test_recorder_service.py -v
"""

import signal

import pytest

import recorder_service
from recorder_service import RecorderService, main, parse_args
from recording.constants import PacingMode, SessionState
from recording.implementations.mock_preview import MockPreview
from recording.implementations.mock_sink import MockVideoSink
from recording.implementations import realsense_source
from recording.implementations.mock_source import MockFrameSource

ESC = 27


@pytest.fixture
def source():
    return MockFrameSource(simulate_timing=False, width=32, height=24)


def _service(source, base_path, **kwargs):
    kwargs.setdefault("preview", MockPreview())
    kwargs.setdefault("sink_factory", MockVideoSink)
    kwargs.setdefault("segment_duration", 0.5)
    kwargs.setdefault("warmup_frames", 40)
    return RecorderService(
        base_path=base_path,
        source=source,
        clock=source.get_simulated_time,
        width=32,
        height=24,
        **kwargs,
    )


# =============================================================================
# STARTUP / SHUTDOWN TESTS
# =============================================================================


@pytest.mark.unit_integration
def test_service_records_segments(source, tmp_path):
    """Test the full startup sequence and segment loop."""
    preview = MockPreview()
    service = _service(source, tmp_path, preview=preview, max_segments=2)

    results = service.run()

    assert [r.state for r in results] == [SessionState.TIMED_OUT] * 2
    assert len(list((tmp_path / "records").glob("*.avi"))) == 2
    assert source.is_streaming() is False
    assert preview.is_closed() is True


@pytest.mark.unit_integration
def test_service_drops_warmup_frames(source, tmp_path):
    """Test warm-up frames are captured but never recorded."""
    preview = MockPreview(key_after_polls=(1, ESC))
    service = _service(source, tmp_path, preview=preview, warmup_frames=40)

    results = service.run()

    assert source.get_capture_count() == 40
    assert results[0].frames_captured == 0
    assert results[0].state == SessionState.CANCELLED


@pytest.mark.unit_integration
def test_service_applies_supported_options(source, tmp_path):
    """Test supported options are set and unsupported ones skipped."""
    service = _service(
        source,
        tmp_path,
        preview=MockPreview(key_after_polls=(1, ESC)),
        camera_options={"enable_auto_exposure": 1.0, "laser_power": 150.0},
    )

    service.run()

    assert source.get_option("enable_auto_exposure") == 1.0
    assert source.supports_option("laser_power") is False


@pytest.mark.unit_integration
def test_signal_cancels_recording(source, tmp_path):
    """Test SIGTERM finalizes the current segment and stops the loop."""
    service = _service(source, tmp_path)

    # Deliver the signal from inside the loop, once recording has started
    original_capture = source.capture

    def capture_then_signal():
        frame_set = original_capture()
        if source.get_capture_count() == 60:
            signal.raise_signal(signal.SIGTERM)
        return frame_set

    source.capture = capture_then_signal
    results = service.run()

    assert results[-1].state == SessionState.CANCELLED
    assert service.cancel_token.reason == "SIGTERM"


@pytest.mark.unit_integration
def test_signal_handlers_restored(source, tmp_path):
    """Test the previous SIGINT handler is back after run."""
    before = signal.getsignal(signal.SIGINT)
    service = _service(source, tmp_path, max_segments=1)

    service.run()

    assert signal.getsignal(signal.SIGINT) is before


@pytest.mark.unit_integration
def test_missing_device_stops_before_recording(tmp_path):
    """Test a missing camera raises before any file is created."""
    source = MockFrameSource(width=32, height=24)
    source.simulate_device_missing()
    service = _service(source, tmp_path)

    with pytest.raises(recorder_service.DeviceUnavailableError):
        service.run()

    assert not (tmp_path / "records").exists()


# =============================================================================
# CLI TESTS
# =============================================================================


@pytest.mark.unit
def test_parse_args_defaults():
    """Test default command line values."""
    args = parse_args([])

    assert args.headless is False
    assert args.max_segments is None
    assert args.source == "real"
    assert args.pacing in {mode.value for mode in PacingMode}


@pytest.mark.unit
def test_parse_args_values(tmp_path):
    """Test command line overrides."""
    args = parse_args([
        "--base-path", str(tmp_path),
        "--segment-duration", "10",
        "--sink", "pyav",
        "--source", "mock",
        "--pacing", "interval",
        "--max-segments", "3",
        "--headless",
    ])

    assert args.base_path == tmp_path
    assert args.segment_duration == 10.0
    assert args.sink == "pyav"
    assert args.source == "mock"
    assert args.pacing == "interval"
    assert args.max_segments == 3
    assert args.headless is True


@pytest.fixture
def quiet_logging(monkeypatch):
    """Keep main() from attaching file handlers during tests"""
    monkeypatch.setattr(recorder_service, "setup_logging", lambda debug=False: None)


@pytest.mark.unit_integration
def test_main_exit_code_success(tmp_path, quiet_logging):
    """Test a normal run exits 0."""
    code = main([
        "--base-path", str(tmp_path),
        "--source", "mock",
        "--sink", "mock",
        "--headless",
        "--segment-duration", "0.2",
        "--warmup-frames", "0",
        "--max-segments", "1",
    ])

    assert code == 0
    assert len(list((tmp_path / "records").glob("*.avi"))) == 1


@pytest.mark.unit_integration
def test_main_exit_code_device_missing(tmp_path, quiet_logging, monkeypatch):
    """Test a missing camera exits 1."""

    def missing(cls, mode="auto", simulate_timing=True):
        source = MockFrameSource()
        source.simulate_device_missing()
        return source

    monkeypatch.setattr(
        recorder_service.RecordingFactory, "create_source", classmethod(missing),
    )

    code = main(["--base-path", str(tmp_path), "--headless", "--sink", "mock"])

    assert code == 1


@pytest.mark.unit_integration
def test_main_exit_code_sink_unavailable(tmp_path, quiet_logging, monkeypatch):
    """Test an unopenable output file exits 1 without recording."""

    def broken_sink(cls, backend="opencv"):
        sink = MockVideoSink()
        sink.simulate_open_failure()
        return sink

    monkeypatch.setattr(
        recorder_service.RecordingFactory, "create_sink", classmethod(broken_sink),
    )

    code = main([
        "--base-path", str(tmp_path),
        "--source", "mock",
        "--headless",
        "--segment-duration", "0.2",
        "--warmup-frames", "0",
    ])

    assert code == 1


@pytest.mark.unit_integration
def test_main_without_camera_records_nothing(tmp_path, quiet_logging, monkeypatch):
    """Test the default source never falls back to synthetic frames."""
    monkeypatch.setattr(realsense_source, "REALSENSE_AVAILABLE", False)

    code = main([
        "--base-path", str(tmp_path),
        "--headless",
        "--segment-duration", "0.2",
        "--warmup-frames", "0",
        "--max-segments", "1",
    ])

    assert code == 1
    assert not (tmp_path / "records").exists()


@pytest.mark.unit_integration
def test_main_exit_code_finalize_failure(tmp_path, quiet_logging, monkeypatch):
    """Test a segment that cannot be finalized exits 1 without rotating."""
    sinks = []

    def failing_close(cls, backend="opencv"):
        sink = MockVideoSink()
        sink.simulate_close_failure(OSError("disk full while writing trailer"))
        sinks.append(sink)
        return sink

    monkeypatch.setattr(
        recorder_service.RecordingFactory, "create_sink", classmethod(failing_close),
    )

    code = main([
        "--base-path", str(tmp_path),
        "--source", "mock",
        "--headless",
        "--segment-duration", "0.2",
        "--warmup-frames", "0",
        "--max-segments", "3",
    ])

    assert code == 1
    assert len(sinks) == 1
