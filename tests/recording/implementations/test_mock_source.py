"""
Mock Frame Source Tests

Tests for MockFrameSource showing:
- Streaming lifecycle
- Generated and scripted timestamps
- Device options
- Simulated failures

To run:
    pytest tests/recording/implementations/test_mock_source.py -v
"""

import pytest

from recording.constants import DEFAULT_STREAMS
from recording.implementations.mock_source import MockFrameSource
from recording.interfaces.frame_source_interface import (
    CaptureError,
    CaptureFailureError,
    DeviceUnavailableError,
)

# =============================================================================
# LIFECYCLE TESTS
# =============================================================================


@pytest.mark.unit
def test_source_start_stop():
    """Test streaming flag follows start/stop."""
    source = MockFrameSource(width=8, height=6)

    assert source.is_streaming() is False
    source.start()
    assert source.is_streaming() is True
    source.stop()
    assert source.is_streaming() is False


@pytest.mark.unit
def test_capture_requires_streaming():
    """Test capture before start is a capture failure."""
    source = MockFrameSource(width=8, height=6)

    with pytest.raises(CaptureFailureError):
        source.capture()


@pytest.mark.unit
def test_enable_stream_records_requests():
    """Test stream requests are kept in order."""
    source = MockFrameSource(width=8, height=6)

    for stream in DEFAULT_STREAMS:
        source.enable_stream(*stream)

    assert source.get_enabled_streams() == DEFAULT_STREAMS


@pytest.mark.unit
def test_enable_stream_rejected_while_streaming(mock_source):
    """Test streams cannot change while streaming."""
    with pytest.raises(CaptureError):
        mock_source.enable_stream("color", 640, 480, "bgr8", 30)


@pytest.mark.unit
def test_cleanup_stops_streaming(mock_source):
    """Test cleanup releases a started source."""
    mock_source.cleanup()

    assert mock_source.is_streaming() is False


# =============================================================================
# FRAME CONTENT TESTS
# =============================================================================


@pytest.mark.unit
def test_frame_set_layout(mock_source):
    """Test channel shapes and dtypes."""
    frame_set = mock_source.capture()

    assert frame_set.display_channel.shape == (24, 32)
    assert frame_set.encode_channel.shape == (24, 32, 3)
    assert frame_set.width == 32
    assert frame_set.height == 24


@pytest.mark.unit
def test_generated_timestamps(mock_source):
    """Test timestamps start at zero and advance one interval."""
    first = mock_source.capture()
    second = mock_source.capture()

    assert first.timestamp_ms == 0.0
    assert second.timestamp_ms == pytest.approx(1000.0 / 30)
    assert mock_source.get_simulated_time() == pytest.approx(1 / 30)


@pytest.mark.unit
def test_scripted_timestamps_then_generated(scripted_source):
    """Test scripted timestamps are used first, then generation continues."""
    source = scripted_source([5, 100])

    stamps = [source.capture().timestamp_ms for _ in range(3)]

    assert stamps[:2] == [5.0, 100.0]
    assert stamps[2] == pytest.approx(100 + 1000.0 / 30)


@pytest.mark.unit
def test_encode_channel_identifies_frame(mock_source):
    """Test encode channel value equals the frame number."""
    frames = [mock_source.capture() for _ in range(3)]

    assert [int(f.encode_channel[0, 0, 0]) for f in frames] == [0, 1, 2]
    assert [f.frame_number for f in frames] == [0, 1, 2]


@pytest.mark.unit
def test_warm_up_discards_frames(mock_source):
    """Test warm-up consumes the requested number of captures."""
    dropped = mock_source.warm_up(40)

    assert dropped == 40
    assert mock_source.get_capture_count() == 40


# =============================================================================
# OPTION TESTS
# =============================================================================


@pytest.mark.unit
def test_supported_option_round_trip(mock_source):
    """Test setting a supported option."""
    assert mock_source.supports_option("enable_auto_exposure")

    mock_source.set_option("enable_auto_exposure", 1)

    assert mock_source.get_option("enable_auto_exposure") == 1.0


@pytest.mark.unit
def test_unsupported_option(mock_source):
    """Test unknown options are reported and rejected."""
    assert mock_source.supports_option("laser_power") is False

    with pytest.raises(CaptureError):
        mock_source.set_option("laser_power", 150)


# =============================================================================
# SIMULATED FAILURE TESTS
# =============================================================================


@pytest.mark.unit
def test_simulate_device_missing():
    """Test missing device fails start."""
    source = MockFrameSource(width=8, height=6)
    source.simulate_device_missing()

    assert source.is_available() is False
    with pytest.raises(DeviceUnavailableError):
        source.start()


@pytest.mark.unit
def test_simulate_capture_failure(mock_source):
    """Test capture fails after the configured number of frames."""
    mock_source.simulate_capture_failure(after_frames=2)

    mock_source.capture()
    mock_source.capture()
    with pytest.raises(CaptureFailureError):
        mock_source.capture()
