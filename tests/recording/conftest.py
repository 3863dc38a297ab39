"""
Recording Test Configuration and Fixtures

Shared fixtures for recording module tests.

Most fixtures use small frames (32x24) so pacing tests that write
hundreds of frames stay fast.
"""

import shutil
import tempfile
from pathlib import Path

import pytest

from recording.controllers.cancellation import CancellationToken
from recording.controllers.recording_session import RecordingSession
from recording.implementations.mock_preview import MockPreview
from recording.implementations.mock_sink import MockVideoSink
from recording.implementations.mock_source import MockFrameSource

TEST_WIDTH = 32
TEST_HEIGHT = 24


# =============================================================================
# SOURCE FIXTURES
# =============================================================================


@pytest.fixture
def mock_source():
    """
    Provide a started MockFrameSource without timing simulation.

    Timestamps advance by exactly 1000/30 ms per capture.

    Usage:
        def test_capture(mock_source):
            frame_set = mock_source.capture()
    """
    source = MockFrameSource(
        simulate_timing=False,
        width=TEST_WIDTH,
        height=TEST_HEIGHT,
    )
    source.start()
    yield source
    source.cleanup()


@pytest.fixture
def scripted_source():
    """
    Provide a factory for started sources with scripted timestamps.

    Usage:
        def test_stall(scripted_source):
            source = scripted_source([0, 16, 50, 83])
    """
    sources = []

    def _create(timestamps):
        source = MockFrameSource(
            simulate_timing=False,
            width=TEST_WIDTH,
            height=TEST_HEIGHT,
            timestamps=timestamps,
        )
        source.start()
        sources.append(source)
        return source

    yield _create

    for source in sources:
        source.cleanup()


# =============================================================================
# SINK / PREVIEW FIXTURES
# =============================================================================


@pytest.fixture
def mock_sink():
    """Provide an unopened MockVideoSink with no encoder delay"""
    return MockVideoSink()


@pytest.fixture
def mock_preview():
    """Provide a headless preview that never reports a key"""
    return MockPreview()


@pytest.fixture
def cancel_token():
    """Provide a fresh CancellationToken"""
    return CancellationToken()


# =============================================================================
# SESSION FIXTURES
# =============================================================================


@pytest.fixture
def make_session(temp_recording_dir, mock_preview, cancel_token):
    """
    Provide a factory for RecordingSession sized for the test frames.

    Defaults to the shared preview and cancel token; any keyword can be
    overridden.

    Usage:
        def test_session(make_session, mock_source, mock_sink):
            session = make_session(mock_source, mock_sink, time_limit=1.0)
            session.run()
    """

    def _create(source, sink, **kwargs):
        kwargs.setdefault("output_file", temp_recording_dir / "segment.avi")
        kwargs.setdefault("preview", mock_preview)
        kwargs.setdefault("cancel_token", cancel_token)
        kwargs.setdefault("width", TEST_WIDTH)
        kwargs.setdefault("height", TEST_HEIGHT)
        kwargs.setdefault("fps", 30)
        output_file = kwargs.pop("output_file")
        return RecordingSession(source, sink, output_file, **kwargs)

    return _create


# =============================================================================
# TEMPORARY FILE/DIRECTORY FIXTURES
# =============================================================================


@pytest.fixture
def temp_video_file():
    """
    Provide temporary file path for video output.

    File is automatically cleaned up after test.
    """
    temp_dir = Path(tempfile.mkdtemp())
    video_file = temp_dir / "test_recording.avi"

    yield video_file

    # Cleanup
    if temp_dir.exists():
        shutil.rmtree(temp_dir)


@pytest.fixture
def temp_recording_dir():
    """
    Provide temporary directory for multiple recordings.

    Directory is automatically cleaned up after test.
    """
    temp_dir = Path(tempfile.mkdtemp())

    yield temp_dir

    # Cleanup
    if temp_dir.exists():
        shutil.rmtree(temp_dir)


# =============================================================================
# CALLBACK TRACKING FIXTURES
# =============================================================================


@pytest.fixture
def callback_tracker():
    """
    Provide helper for tracking callback calls.

    Usage:
        def test_callback(session, callback_tracker):
            session.on_complete = callback_tracker.track
            session.run()
            assert callback_tracker.was_called()
    """

    class CallbackTracker:
        def __init__(self):
            self.calls = []

        def track(self, *args, **kwargs):
            """Record a callback invocation"""
            self.calls.append({"args": args, "kwargs": kwargs})

        def was_called(self) -> bool:
            return len(self.calls) > 0

        def get_call_count(self) -> int:
            return len(self.calls)

        def get_last_call(self):
            return self.calls[-1] if self.calls else None

    return CallbackTracker()


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_configure(config):
    """
    Configure pytest with custom markers for recording tests.
    """
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "unit_integration: Integration tests")
    config.addinivalue_line("markers", "slow: Slow tests (real-time waits)")
    config.addinivalue_line("markers", "requires_codec: Tests writing real video files")
