"""
Recording Controller Tests

Tests for RecordingController showing:
- Segment rotation into distinct files
- Stopping on cancellation
- Error propagation between segments

To run:
    pytest tests/recording/controllers/test_recording_controller.py -v
"""

import pytest

from recording.constants import SessionState
from recording.controllers.recording_controller import RecordingController
from recording.implementations.mock_preview import MockPreview
from recording.implementations.mock_sink import MockVideoSink
from recording.interfaces.frame_source_interface import CaptureFailureError
from recording.interfaces.video_sink_interface import SinkError, SinkUnavailableError

ESC = 27


def _controller(source, base_path, sinks=None, **kwargs):
    """Controller with small frames and the source's timestamps as clock"""
    created = [] if sinks is None else sinks

    def sink_factory():
        sink = MockVideoSink()
        created.append(sink)
        return sink

    kwargs.setdefault("segment_duration", 0.5)
    kwargs.setdefault("preview", MockPreview())
    return RecordingController(
        source,
        sink_factory,
        base_path=base_path,
        clock=source.get_simulated_time,
        width=source.width,
        height=source.height,
        **kwargs,
    )


# =============================================================================
# INITIALIZATION TESTS
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("duration", [0, -1])
def test_controller_rejects_bad_duration(mock_source, temp_recording_dir, duration):
    """Test segment duration must be positive."""
    with pytest.raises(ValueError):
        _controller(mock_source, temp_recording_dir, segment_duration=duration)


@pytest.mark.unit
def test_controller_rejects_bad_max_segments(mock_source, temp_recording_dir):
    """Test max_segments must be positive."""
    with pytest.raises(ValueError):
        _controller(mock_source, temp_recording_dir, max_segments=0)


# =============================================================================
# SEGMENT ROTATION TESTS
# =============================================================================


@pytest.mark.unit
def test_three_segments_produce_distinct_files(mock_source, temp_recording_dir):
    """Test consecutive segments are written to separate files."""
    sinks = []
    controller = _controller(mock_source, temp_recording_dir, sinks=sinks, max_segments=3)

    results = controller.run()

    files = [result.output_file for result in results]
    assert len(results) == 3
    assert len(set(files)) == 3
    assert all(path.parent == temp_recording_dir / "records" for path in files)
    assert all(path.exists() for path in files)
    assert all(result.state == SessionState.TIMED_OUT for result in results)
    assert all(sink.get_finalize_count() == 1 for sink in sinks)


@pytest.mark.unit
def test_records_directory_created(mock_source, temp_recording_dir):
    """Test records/ is created under the base path."""
    controller = _controller(mock_source, temp_recording_dir, max_segments=1)

    controller.run()

    assert (temp_recording_dir / "records").is_dir()


@pytest.mark.unit
def test_segments_have_fresh_pacing(mock_source, temp_recording_dir):
    """Test each segment starts with its own baseline capture."""
    controller = _controller(mock_source, temp_recording_dir, max_segments=2)

    results = controller.run()

    for result in results:
        # Baseline capture of each segment is never written
        assert result.frames_written <= result.frames_captured - 1


@pytest.mark.unit
def test_cancel_stops_rotation(mock_source, temp_recording_dir, cancel_token):
    """Test cancelling inside the second segment ends the loop."""
    preview = MockPreview(key_after_polls=(25, ESC))
    controller = _controller(
        mock_source, temp_recording_dir, preview=preview, cancel_token=cancel_token,
    )

    results = controller.run()

    assert [result.state for result in results] == [
        SessionState.TIMED_OUT,
        SessionState.CANCELLED,
    ]
    assert cancel_token.is_requested()
    assert controller.get_current_session() is None


@pytest.mark.unit
def test_get_results_returns_copy(mock_source, temp_recording_dir):
    """Test results list cannot be changed from outside."""
    controller = _controller(mock_source, temp_recording_dir, max_segments=1)
    controller.run()

    controller.get_results().clear()

    assert len(controller.get_results()) == 1


@pytest.mark.unit
def test_results_are_terminal_summaries(mock_source, temp_recording_dir):
    """Test each result ends in a terminal state with a loggable summary."""
    controller = _controller(mock_source, temp_recording_dir, max_segments=2)

    results = controller.run()

    for result in results:
        summary = result.to_dict()
        assert result.state.is_terminal
        assert summary["state"] == "timed_out"
        assert summary["output_file"] == str(result.output_file)
        assert summary["frames_written"] == result.frames_written
        assert summary["elapsed_seconds"] >= 0.5


# =============================================================================
# ERROR HANDLING TESTS
# =============================================================================


@pytest.mark.unit
def test_sink_failure_on_later_segment(mock_source, temp_recording_dir):
    """Test a sink that cannot open stops the loop with an error."""
    sinks = [MockVideoSink(), MockVideoSink()]
    sinks[1].simulate_open_failure()
    remaining = list(sinks)

    controller = RecordingController(
        mock_source,
        lambda: remaining.pop(0),
        base_path=temp_recording_dir,
        segment_duration=0.5,
        preview=MockPreview(),
        clock=mock_source.get_simulated_time,
        width=mock_source.width,
        height=mock_source.height,
    )

    with pytest.raises(SinkUnavailableError):
        controller.run()

    assert len(controller.get_results()) == 1
    assert sinks[0].get_finalize_count() == 1


@pytest.mark.unit
def test_capture_failure_propagates(mock_source, temp_recording_dir):
    """Test a capture failure ends the loop with the segment finalized."""
    sinks = []
    mock_source.simulate_capture_failure(after_frames=20)
    controller = _controller(mock_source, temp_recording_dir, sinks=sinks)

    with pytest.raises(CaptureFailureError):
        controller.run()

    results = controller.get_results()
    assert results[-1].state == SessionState.FAILED
    assert all(sink.get_finalize_count() == 1 for sink in sinks)


@pytest.mark.unit
def test_finalize_failure_stops_rotation(mock_source, temp_recording_dir):
    """Test a segment that cannot be finalized ends the loop instead of rotating."""
    sinks = []

    def sink_factory():
        sink = MockVideoSink()
        sink.simulate_close_failure(OSError("disk full while writing trailer"))
        sinks.append(sink)
        return sink

    controller = RecordingController(
        mock_source,
        sink_factory,
        base_path=temp_recording_dir,
        segment_duration=0.5,
        preview=MockPreview(),
        max_segments=3,
        clock=mock_source.get_simulated_time,
        width=mock_source.width,
        height=mock_source.height,
    )

    with pytest.raises(SinkError):
        controller.run()

    assert len(sinks) == 1
    assert [r.state for r in controller.get_results()] == [SessionState.FAILED]
    assert controller.get_current_session() is None
