"""
Data models for the speech coaching session.
"""
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Dict, Any

from ..infrastructure.media import is_audio_data_uri
from .schemas import ExtractedResumeInfo


class AnalysisMode(str, Enum):
    """Framing applied when the speech is scored."""
    PRESENTATION = "Presentation Mode"
    INTERVIEW = "Interview Mode"
    REHEARSAL = "Rehearsal Mode"

    @property
    def label(self) -> str:
        """Short user-facing name."""
        return self.value.replace(" Mode", "")

    @property
    def evaluation_mode(self) -> "AnalysisMode":
        """
        Mode the evaluator is asked to apply.

        The evaluator only knows plain presentation scoring and
        question/ideal-answer comparison; Interview is a comparison.
        """
        if self is AnalysisMode.INTERVIEW:
            return AnalysisMode.REHEARSAL
        return self

    @classmethod
    def parse(cls, value: str) -> "AnalysisMode":
        """Accept 'interview', 'Interview' or 'Interview Mode'."""
        needle = (value or "").strip().lower()
        for mode in cls:
            if needle in (mode.value.lower(), mode.label.lower()):
                return mode
        raise ValueError(f"Unknown analysis mode: {value!r}")


class InputTab(str, Enum):
    """Speech acquisition tabs."""
    LIVE = "live"
    RECORD = "record"
    UPLOAD = "upload"


class SampleKind(str, Enum):
    TEXT = "text"
    AUDIO_DATA_URI = "audio_data_uri"


@dataclass(frozen=True)
class SpeechSample:
    """The text or audio payload evaluated in one analysis request."""
    kind: SampleKind
    value: str

    @classmethod
    def text(cls, value: str) -> "SpeechSample":
        return cls(SampleKind.TEXT, value)

    @classmethod
    def audio(cls, data_uri: str) -> "SpeechSample":
        if not is_audio_data_uri(data_uri):
            raise ValueError("Audio samples must be 'data:audio/...' URIs")
        return cls(SampleKind.AUDIO_DATA_URI, data_uri)

    @classmethod
    def from_payload(cls, payload: str) -> "SpeechSample":
        """Tag a raw payload: audio data URIs are audio, everything else text."""
        if is_audio_data_uri(payload):
            return cls(SampleKind.AUDIO_DATA_URI, payload)
        return cls(SampleKind.TEXT, payload)

    @property
    def is_audio(self) -> bool:
        return self.kind is SampleKind.AUDIO_DATA_URI

    @property
    def is_empty(self) -> bool:
        return not self.value.strip()


@dataclass(frozen=True)
class AnalysisRequest:
    """Request sent to the evaluator; built fresh for every analysis."""
    speech_sample: SpeechSample
    mode: AnalysisMode
    display_mode: AnalysisMode
    question: Optional[str] = None
    perfect_answer: Optional[str] = None

    def with_mode(self, mode: AnalysisMode) -> "AnalysisRequest":
        """Copy of this request with a different evaluation mode."""
        return replace(self, mode=mode)

    def to_payload(self) -> Dict[str, Any]:
        """Wire form of the request."""
        payload: Dict[str, Any] = {
            "speechSample": self.speech_sample.value,
            "mode": self.mode.value,
        }
        if self.question:
            payload["question"] = self.question
        if self.perfect_answer:
            payload["perfectAnswer"] = self.perfect_answer
        return payload


@dataclass(frozen=True)
class Notification:
    """Transient message surfaced to the user."""
    level: str
    title: str
    description: str = ""

    @classmethod
    def info(cls, title: str, description: str = "") -> "Notification":
        return cls("info", title, description)

    @classmethod
    def warning(cls, title: str, description: str = "") -> "Notification":
        return cls("warning", title, description)

    @classmethod
    def error(cls, title: str, description: str = "") -> "Notification":
        return cls("error", title, description)


@dataclass(frozen=True)
class ResumeIntake:
    """Both outputs of resume extraction, committed together."""
    structured: ExtractedResumeInfo
    text: str
    file_name: str = ""
