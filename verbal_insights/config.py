"""
Verbal Insights Configuration
=============================

This file contains ALL configuration for the speech coaching tool.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize the coach
# =============================================================================

# REQUIRED: Set your Google Cloud project
GOOGLE_CLOUD_PROJECT = "your-project-id"  # Change this!
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Speech settings
LANGUAGE_CODE = "en-US"

# Interview mode
MAX_GENERATED_QUESTIONS = 3

# Report settings
WORKDIR = "./_reports"
REPORT_FILENAME = "verbal-insights-report.pdf"
REPORT_BRAND = "Cognisys AI"
REPORT_TITLE = "Verbal Insights: Speech Analysis Report"
REPORT_LOGO_URL = None  # Optional: URL of a PNG logo for the report header

# Recording settings
RECORDING_FILENAME = "recording.webm"
RECORDING_MIME_TYPE = "audio/webm"

# Logging
LOG_FILE = "./_reports/verbal_insights.log"
LOG_LEVEL = "WARNING"  # Console level; the log file always gets DEBUG


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# LLM
VERTEX_LOCATION = "us-central1"
MODEL_NAME = "gemini-2.5-flash"
LLM_TIMEOUT = 120
MAX_OUTPUT_TOKENS = 8192
LLM_SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]

# Resume intake runs both extraction legs at once
RESUME_EXTRACTION_WORKERS = 2

# Speech recognition error codes
RECOVERABLE_RECOGNITION_ERRORS = ("no-speech", "aborted", "network")
PERMISSION_RECOGNITION_ERRORS = ("not-allowed", "service-not-allowed")

# Local transcript segmentation
FILLER_WORDS = ("um", "uh", "ah", "er", "hmm", "like")
PAUSE_MARKER_PATTERN = r"\[PAUSE:[^\]]*\]"

# PDF layout (millimetres, A4)
PDF_MARGIN_MM = 15
PDF_LINE_HEIGHT_MM = 7
PDF_LOGO_SIZE_MM = 15
PDF_LOGO_TIMEOUT = 5
PDF_RULE_GRAY = 0.78

# Upload
DEFAULT_UPLOAD_MIME_TYPE = "application/octet-stream"
# Checked before mimetypes, which reports some of these as video
AUDIO_EXTENSION_TYPES = {
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".m4a": "audio/mp4",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
}


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    google_cloud_project: str
    google_application_credentials: Optional[str] = None
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME
    language_code: str = LANGUAGE_CODE
    workdir: str = WORKDIR
    report_logo_url: Optional[str] = REPORT_LOGO_URL
    log_file: Optional[str] = LOG_FILE
    log_level: str = LOG_LEVEL

    @property
    def report_path(self) -> str:
        """Default location for exported reports."""
        return os.path.join(self.workdir, REPORT_FILENAME)

    @property
    def recording_path(self) -> str:
        """Default location for downloaded recordings."""
        return os.path.join(self.workdir, RECORDING_FILENAME)


def get_config() -> Config:
    """Load configuration."""
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS

    if project == "your-project-id":
        raise ValueError("Please set GOOGLE_CLOUD_PROJECT in config.py or as environment variable")

    return Config(
        google_cloud_project=project,
        google_application_credentials=credentials,
        model_name=os.getenv("VERBAL_INSIGHTS_MODEL") or MODEL_NAME,
        log_level=os.getenv("VERBAL_INSIGHTS_LOG_LEVEL") or LOG_LEVEL,
        report_logo_url=os.getenv("VERBAL_INSIGHTS_LOGO_URL") or REPORT_LOGO_URL,
    )
