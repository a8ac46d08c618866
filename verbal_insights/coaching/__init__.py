"""Speech coaching components.

This module contains the business logic for acquiring speech samples,
running model analyses, preparing interviews and reporting results.
"""

# Facade
from .coach import SpeechCoach

# Data models
from .models import (
    AnalysisMode, InputTab, SampleKind, SpeechSample,
    AnalysisRequest, Notification, ResumeIntake
)

# Structured schemas
from .schemas import (
    AnalysisResult, SpeechMetadata, CriterionEvaluation, HighlightedSegment,
    EvaluationCategory, EvaluationCriterion, SegmentType, CRITERIA_BY_CATEGORY,
    ExtractedResumeInfo, ExtractedText, InterviewQuestion, QuestionSet,
    parse_llm_payload, segment_transcript
)

# Errors
from .errors import (
    CoachingError, CaptureError, ServiceError,
    SessionValidationError, SessionStateError, SessionBusyError
)

# Capture, session and services
from .capture import (
    SpeechSampleProvider, TranscriptFold, RecognitionResult,
    RecognizerBackend, UnsupportedRecognizer, MicrophoneBackend, MicrophoneStream
)
from .session import CoachingSession, InterviewStage
from .flows import CoachingFlows
from .services import ResumeIntakeService, AnalysisService

# Event system
from .events import (
    CoachingEventBus, EventLogger, SessionMetrics, EventType, CoachingEvent
)

__all__ = [
    # Facade
    "SpeechCoach",

    # Data models
    "AnalysisMode", "InputTab", "SampleKind", "SpeechSample",
    "AnalysisRequest", "Notification", "ResumeIntake",

    # Schemas
    "AnalysisResult", "SpeechMetadata", "CriterionEvaluation", "HighlightedSegment",
    "EvaluationCategory", "EvaluationCriterion", "SegmentType", "CRITERIA_BY_CATEGORY",
    "ExtractedResumeInfo", "ExtractedText", "InterviewQuestion", "QuestionSet",
    "parse_llm_payload", "segment_transcript",

    # Errors
    "CoachingError", "CaptureError", "ServiceError",
    "SessionValidationError", "SessionStateError", "SessionBusyError",

    # Capture, session and services
    "SpeechSampleProvider", "TranscriptFold", "RecognitionResult",
    "RecognizerBackend", "UnsupportedRecognizer", "MicrophoneBackend", "MicrophoneStream",
    "CoachingSession", "InterviewStage", "CoachingFlows",
    "ResumeIntakeService", "AnalysisService",

    # Events
    "CoachingEventBus", "EventLogger", "SessionMetrics", "EventType", "CoachingEvent"
]
