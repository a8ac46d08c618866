"""
Structured schemas for everything exchanged with the model.

Field names on the wire are camelCase; Python attributes are snake_case.
"""
import logging
import re
import string
from collections import OrderedDict
from enum import Enum
from typing import Optional, Dict, Any, List, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ..config import FILLER_WORDS, PAUSE_MARKER_PATTERN, MAX_GENERATED_QUESTIONS
from ..infrastructure.llm import extract_json_object

logger = logging.getLogger("schemas")

ModelT = TypeVar("ModelT", bound=BaseModel)

_PAUSE_RE = re.compile(PAUSE_MARKER_PATTERN)
_PUNCTUATION = str.maketrans("", "", string.punctuation.replace("'", ""))


class WireModel(BaseModel):
    """Base for models that speak camelCase JSON."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# =============================================================================
# Speech analysis
# =============================================================================

class EvaluationCategory(str, Enum):
    DELIVERY = "Delivery"
    LANGUAGE = "Language"
    CONTENT = "Content"


class EvaluationCriterion(str, Enum):
    # Delivery
    FLUENCY = "Fluency"
    PACING = "Pacing"
    CLARITY = "Clarity"
    CONFIDENCE = "Confidence"
    EMOTIONAL_TONE = "Emotional Tone"
    # Language
    GRAMMAR = "Grammar"
    VOCABULARY = "Vocabulary"
    WORD_CHOICE = "Word Choice"
    CONCISENESS = "Conciseness"
    FILLER_WORDS = "Filler Words"
    # Content
    RELEVANCE = "Relevance"
    ORGANIZATION = "Organization"
    ACCURACY = "Accuracy"
    DEPTH = "Depth"
    PERSUASIVENESS = "Persuasiveness"


CRITERIA_BY_CATEGORY: Dict[EvaluationCategory, List[EvaluationCriterion]] = {
    EvaluationCategory.DELIVERY: [
        EvaluationCriterion.FLUENCY, EvaluationCriterion.PACING, EvaluationCriterion.CLARITY,
        EvaluationCriterion.CONFIDENCE, EvaluationCriterion.EMOTIONAL_TONE,
    ],
    EvaluationCategory.LANGUAGE: [
        EvaluationCriterion.GRAMMAR, EvaluationCriterion.VOCABULARY, EvaluationCriterion.WORD_CHOICE,
        EvaluationCriterion.CONCISENESS, EvaluationCriterion.FILLER_WORDS,
    ],
    EvaluationCategory.CONTENT: [
        EvaluationCriterion.RELEVANCE, EvaluationCriterion.ORGANIZATION, EvaluationCriterion.ACCURACY,
        EvaluationCriterion.DEPTH, EvaluationCriterion.PERSUASIVENESS,
    ],
}


class SegmentType(str, Enum):
    DEFAULT = "default"
    FILLER = "filler"
    PAUSE = "pause"


class HighlightedSegment(WireModel):
    text: str
    type: SegmentType = SegmentType.DEFAULT


class SpeechMetadata(WireModel):
    word_count: int = Field(ge=0)
    filler_word_count: int = Field(ge=0)
    speech_rate_wpm: float = Field(alias="speechRateWPM", ge=0)
    average_pause_duration_ms: float = Field(ge=0)
    pitch_variance: float
    audio_duration_seconds: Optional[float] = None
    pace_score: float = Field(ge=0, le=100)
    clarity_score: float = Field(ge=0, le=100)
    pause_percentage: float = Field(ge=0, le=100)


class CriterionEvaluation(WireModel):
    category: EvaluationCategory
    criteria: EvaluationCriterion
    score: float = Field(ge=0, le=10)
    evaluation: str
    comparison: Optional[str] = None
    feedback: str

    @field_validator("comparison", mode="before")
    @classmethod
    def blank_comparison_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class AnalysisResult(WireModel):
    """The evaluator's structured output."""
    metadata: SpeechMetadata
    highlighted_transcription: Optional[List[HighlightedSegment]] = None
    evaluation_criteria: List[CriterionEvaluation]
    total_score: float = Field(ge=0, le=100)
    overall_assessment: str
    suggested_speech: Optional[str] = None

    @field_validator("suggested_speech", mode="before")
    @classmethod
    def blank_suggestion_is_absent(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def grouped_criteria(self) -> "OrderedDict[EvaluationCategory, List[CriterionEvaluation]]":
        """Criteria grouped by category, in order of first appearance."""
        groups: "OrderedDict[EvaluationCategory, List[CriterionEvaluation]]" = OrderedDict()
        for item in self.evaluation_criteria:
            groups.setdefault(item.category, []).append(item)
        return groups

    def full_transcript(self) -> str:
        """Transcript text, pause annotations included."""
        return join_segments(self.highlighted_transcription or [])

    def filler_segments(self) -> List[HighlightedSegment]:
        return [s for s in self.highlighted_transcription or [] if s.type is SegmentType.FILLER]


# =============================================================================
# Highlighted transcript helpers
# =============================================================================

def join_segments(segments: List[HighlightedSegment]) -> str:
    """Concatenate segment texts into one space-separated transcript."""
    return " ".join(s.text.strip() for s in segments if s.text.strip())


def normalize_transcript(text: str) -> str:
    """Lower-case, drop punctuation and pause markers, collapse whitespace."""
    without_pauses = _PAUSE_RE.sub(" ", text or "")
    return " ".join(without_pauses.lower().translate(_PUNCTUATION).split())


def segments_match_transcript(segments: Optional[List[HighlightedSegment]], transcript: str) -> bool:
    """True when the segments rebuild the transcript (pause markers aside)."""
    if not segments:
        return not normalize_transcript(transcript)
    return normalize_transcript(join_segments(segments)) == normalize_transcript(transcript)


def is_filler_token(token: str) -> bool:
    return token.lower().strip(string.punctuation) in FILLER_WORDS


def segment_transcript(transcript: str) -> List[HighlightedSegment]:
    """
    Split a transcript into default/filler/pause segments.
    Runs of ordinary words collapse into a single default segment.
    """
    segments: List[HighlightedSegment] = []
    pending: List[str] = []

    def flush():
        if pending:
            segments.append(HighlightedSegment(text=" ".join(pending), type=SegmentType.DEFAULT))
            pending.clear()

    position = 0
    for match in _PAUSE_RE.finditer(transcript or ""):
        for token in transcript[position:match.start()].split():
            if is_filler_token(token):
                flush()
                segments.append(HighlightedSegment(text=token, type=SegmentType.FILLER))
            else:
                pending.append(token)
        flush()
        segments.append(HighlightedSegment(text=match.group(0), type=SegmentType.PAUSE))
        position = match.end()

    for token in (transcript or "")[position:].split():
        if is_filler_token(token):
            flush()
            segments.append(HighlightedSegment(text=token, type=SegmentType.FILLER))
        else:
            pending.append(token)
    flush()
    return segments


# =============================================================================
# Resume extraction
# =============================================================================

class AbsentWhenEmpty(WireModel):
    """Null values and empty collections from the model mean 'not found'."""

    @model_validator(mode="before")
    @classmethod
    def drop_empty_fields(cls, data):
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v not in (None, "", [], {})}
        return data


class ContactInfo(AbsentWhenEmpty):
    email: Optional[str] = None
    phone: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None


class ExperienceEntry(AbsentWhenEmpty):
    job_title: str
    company: str
    location: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    responsibilities: List[str] = Field(default_factory=list)


class EducationEntry(AbsentWhenEmpty):
    institution: str
    degree: str
    major: Optional[str] = None
    graduation_date: Optional[str] = None


class ProjectEntry(AbsentWhenEmpty):
    name: str
    description: str
    technologies: Optional[List[str]] = None


_REQUIRED_ENTRY_FIELDS = {
    "experience": ("job_title", "company"),
    "education": ("institution", "degree"),
    "projects": ("name", "description"),
}


def _has_value(entry: Dict[str, Any], name: str) -> bool:
    value = entry.get(to_camel(name), entry.get(name))
    return value is not None and (not isinstance(value, str) or bool(value.strip()))


class ExtractedResumeInfo(AbsentWhenEmpty):
    """Structured resume fields; a field is present only if the resume has it."""
    name: Optional[str] = None
    contact: Optional[ContactInfo] = None
    summary: Optional[str] = None
    experience: Optional[List[ExperienceEntry]] = None
    education: Optional[List[EducationEntry]] = None
    skills: Optional[List[str]] = None
    projects: Optional[List[ProjectEntry]] = None
    certifications: Optional[List[str]] = None

    @field_validator("experience", "education", "projects", mode="before")
    @classmethod
    def drop_incomplete_entries(cls, v, info):
        if not isinstance(v, list):
            return v
        required = _REQUIRED_ENTRY_FIELDS[info.field_name]
        kept = []
        for entry in v:
            if isinstance(entry, dict) and not all(_has_value(entry, name) for name in required):
                logger.warning("Dropping %s entry without %s: %r",
                               info.field_name, " and ".join(to_camel(n) for n in required), entry)
                continue
            kept.append(entry)
        return kept or None

    @field_validator("contact", mode="after")
    @classmethod
    def empty_contact_is_absent(cls, v):
        if v is not None and not v.model_dump(exclude_none=True):
            return None
        return v

    def job_titles(self) -> List[str]:
        return [entry.job_title for entry in self.experience or []]

    def question_summary(self) -> str:
        """Short summary used to steer question generation."""
        if self.summary:
            return self.summary
        return f"The candidate's experience includes: {', '.join(self.job_titles())}."


class ExtractedText(WireModel):
    text: str


# =============================================================================
# Question generation and summaries
# =============================================================================

class InterviewQuestion(WireModel):
    """A question with the ideal answer it is compared against."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    question: str
    answer: str


class QuestionSet(WireModel):
    questions: List[InterviewQuestion] = Field(default_factory=list, max_length=MAX_GENERATED_QUESTIONS)

    @field_validator("questions", mode="before")
    @classmethod
    def keep_first_questions(cls, v):
        if isinstance(v, list) and len(v) > MAX_GENERATED_QUESTIONS:
            logger.warning("Model returned %d questions, keeping the first %d",
                           len(v), MAX_GENERATED_QUESTIONS)
            return v[:MAX_GENERATED_QUESTIONS]
        return v


class SpeechSummary(WireModel):
    summary: str


# =============================================================================
# Parsing
# =============================================================================

def parse_llm_payload(raw: Any, model: Type[ModelT]) -> ModelT:
    """
    Validate a model response against a schema.

    Args:
        raw: Raw response text or an already-decoded JSON object
        model: Schema to validate against

    Returns:
        Validated model instance

    Raises:
        ValueError: If the response is not JSON or does not fit the schema
    """
    data = extract_json_object(raw) if isinstance(raw, str) else raw
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid {model.__name__} structure: {e}")
