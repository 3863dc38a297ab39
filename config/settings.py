"""
Central Configuration File

ALL configuration values live here. This is the single source of truth.

Guidelines:
- Machine-specific overrides belong in .env, NOT here
- Import these settings in modules: from config.settings import VIDEO_FPS
- Output format (resolution, rate) is fixed; only paths, backends and
  device toggles are meant to be overridden
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# =============================================================================
# VIDEO OUTPUT CONFIGURATION
# =============================================================================

# Fixed target format - every segment is written at this size and rate
VIDEO_WIDTH = 640
VIDEO_HEIGHT = 480
VIDEO_FPS = 30

# OpenCV container writer codec (FourCC) - XVID in an AVI container
VIDEO_FOURCC = "XVID"

# PyAV encoder settings (staged pipeline backend)
PYAV_CODEC = "mpeg4"
PYAV_PIXEL_FORMAT = "yuv420p"

# Which sink backend to use: "opencv", "pyav" or "mock"
SINK_BACKEND = os.getenv("SINK_BACKEND", "opencv")

# Frame pacing: "slot" keeps the fractional remainder between captures,
# "interval" floors every gap independently
PACING_MODE = os.getenv("PACING_MODE", "slot")

# =============================================================================
# SEGMENT CONFIGURATION
# =============================================================================

# Length of one output file before rotating to the next (seconds)
SEGMENT_DURATION = float(os.getenv("SEGMENT_DURATION", "300"))

# =============================================================================
# STORAGE CONFIGURATION
# =============================================================================

# Segments are written to <RECORDS_BASE_PATH>/<RECORDS_DIR_NAME>/
RECORDS_BASE_PATH = Path(os.getenv("RECORDS_BASE_PATH", "."))
RECORDS_DIR_NAME = "records"

# Video File Naming (second resolution, no colons so it works on FAT/NTFS)
FILENAME_FORMAT = "%Y-%m-%d_%H-%M-%S"
VIDEO_FILENAME_EXTENSION = "avi"

# =============================================================================
# CAMERA CONFIGURATION
# =============================================================================

# Which frame source to use: "real" (RealSense), "mock", or "auto"
# (RealSense if connected, mock otherwise; development only)
SOURCE_MODE = os.getenv("SOURCE_MODE", "real")

# Frames dropped after start so exposure can settle
WARMUP_FRAMES = int(os.getenv("WARMUP_FRAMES", "40"))

# Upper bound on a single wait-for-frames call (milliseconds)
CAPTURE_TIMEOUT_MS = int(os.getenv("CAPTURE_TIMEOUT_MS", "5000"))

# Infrared stream index (left imager)
INFRARED_STREAM_INDEX = 1

# Device options applied after start, keyed by pyrealsense2 option name.
# Each is only applied when the sensor reports support for it.
CAMERA_OPTIONS = {
    "enable_auto_exposure": 1.0,  # Outdoor use
}

# Emitter is left as the device default unless explicitly configured.
# Set EMITTER_ENABLED=0 to switch the IR projector off (outdoor use).
_emitter = os.getenv("EMITTER_ENABLED")
if _emitter is not None:
    CAMERA_OPTIONS["emitter_enabled"] = float(_emitter)

# =============================================================================
# PREVIEW CONFIGURATION
# =============================================================================

PREVIEW_WINDOW_NAME = "Display Image"

# Palette applied to the equalized infrared image (cv2.COLORMAP_<name>)
PREVIEW_COLORMAP = os.getenv("PREVIEW_COLORMAP", "JET")

# Key that cancels recording when pressed in the preview window (27 = ESC)
CANCEL_KEY = int(os.getenv("CANCEL_KEY", "27"))

# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

LOG_DIR = os.getenv("LOG_DIR", "/var/log/depth-recorder")
LOG_SERVICE_FILE = "service.log"
LOG_FALLBACK_DIR = "logs"
LOG_BACKUP_COUNT = 7
