"""
Testing infrastructure with mock backends for the speech coach.
"""
import threading
from typing import Dict, Any, List, Optional, Sequence, Union

from .capture import (
    EndHandler, ErrorHandler, MicrophoneBackend, MicrophoneStream,
    RecognitionResult, RecognizerBackend, ResultHandler,
)
from .schemas import CRITERIA_BY_CATEGORY, is_filler_token, segment_transcript
from ..config import RECORDING_MIME_TYPE

MockResponse = Union[Dict[str, Any], str, Exception]


class MockLLMClient:
    """
    Mock LLM client for testing.

    Responses are queued per operation name, so concurrent calls get
    deterministic answers. A queued exception is raised instead of returned.
    The last response of an operation is reused once its queue is drained.
    """

    def __init__(self, responses: Optional[Dict[str, Sequence[MockResponse]]] = None):
        self.responses: Dict[str, List[MockResponse]] = {
            operation: list(queue) for operation, queue in (responses or {}).items()
        }
        self.request_history: List[Dict[str, Any]] = []
        self._lock = threading.Lock()

    def queue(self, operation: str, *responses: MockResponse):
        self.responses.setdefault(operation, []).extend(responses)

    def generate_json(self, prompt: str, media=None, operation: str = "generate", **kwargs) -> Dict[str, Any]:
        with self._lock:
            self.request_history.append({
                "operation": operation,
                "prompt": prompt,
                "media": list(media or []),
                "kwargs": kwargs,
            })
            queue = self.responses.get(operation)
            if not queue:
                raise RuntimeError(f"No mock response for {operation}")
            response = queue.pop(0) if len(queue) > 1 else queue[0]

        if isinstance(response, Exception):
            raise response
        return response

    def calls(self, operation: Optional[str] = None) -> List[Dict[str, Any]]:
        """Recorded requests, optionally for one operation."""
        return [r for r in self.request_history if operation is None or r["operation"] == operation]


class MockRecognizer(RecognizerBackend):
    """Recognizer whose events are pushed by the test."""

    def __init__(self, supported: bool = True, language_code: str = "en-US"):
        super().__init__(language_code)
        self.supported = supported
        self.active = False
        self.start_count = 0
        self.stop_count = 0
        self._handlers = None

    def start(self, on_result: ResultHandler, on_error: ErrorHandler, on_end: EndHandler) -> None:
        self.active = True
        self.start_count += 1
        self._handlers = (on_result, on_error, on_end)

    def stop(self) -> None:
        self.stop_count += 1
        self.active = False

    def emit_results(self, results: Sequence[RecognitionResult], result_index: int = 0):
        self._handlers[0](list(results), result_index)

    def emit_error(self, code: str):
        self._handlers[1](code)

    def emit_end(self):
        self.active = False
        self._handlers[2]()


class MockMicrophoneStream(MicrophoneStream):

    def __init__(self, chunks: Sequence[bytes], mime_type: str = RECORDING_MIME_TYPE):
        self.chunks = list(chunks)
        self.mime_type = mime_type
        self.started = False
        self.stopped = False
        self.released = False
        self._on_data = None

    def start(self, on_data) -> None:
        self.started = True
        self._on_data = on_data

    def push(self, chunk: bytes):
        self._on_data(chunk)

    def stop(self) -> None:
        # Deliver whatever was "recorded" on stop, like a browser recorder
        if not self.stopped:
            for chunk in self.chunks:
                self._on_data(chunk)
        self.stopped = True

    def release(self) -> None:
        self.released = True


class MockMicrophone(MicrophoneBackend):
    """Microphone that hands out scripted streams or denies access."""

    def __init__(self, chunks: Sequence[bytes] = (b"RIFF", b"mock-audio"),
                 mime_type: str = RECORDING_MIME_TYPE, deny: bool = False):
        self.chunks = list(chunks)
        self.mime_type = mime_type
        self.deny = deny
        self.streams: List[MockMicrophoneStream] = []

    def acquire(self) -> MicrophoneStream:
        if self.deny:
            raise PermissionError("Permission denied by user")
        stream = MockMicrophoneStream(self.chunks, self.mime_type)
        self.streams.append(stream)
        return stream

    @property
    def last_stream(self) -> Optional[MockMicrophoneStream]:
        return self.streams[-1] if self.streams else None


# =============================================================================
# Payload factories
# =============================================================================

def create_analysis_payload(transcript: str = "I think um this project was uh successful",
                            total_score: float = 72,
                            with_comparison: bool = False,
                            highlighted: Optional[List[Dict[str, str]]] = None,
                            audio_duration: Optional[float] = None,
                            suggested_speech: Optional[str] = "I think this project was successful.") -> Dict[str, Any]:
    """A valid analyze_speech response for the given transcript."""
    tokens = transcript.split()
    fillers = sum(1 for t in tokens if is_filler_token(t))
    if highlighted is None:
        highlighted = [s.to_wire() for s in segment_transcript(transcript)]

    criteria = []
    for category, names in CRITERIA_BY_CATEGORY.items():
        for criterion in names:
            entry = {
                "category": category.value,
                "criteria": criterion.value,
                "score": 7,
                "evaluation": f"{criterion.value} was generally good.",
                "feedback": f"Keep working on {criterion.value.lower()}.",
            }
            if with_comparison:
                entry["comparison"] = f"Your {criterion.value.lower()} was close to the ideal answer."
            criteria.append(entry)

    metadata = {
        "wordCount": len(tokens),
        "fillerWordCount": fillers,
        "speechRateWPM": 145,
        "averagePauseDurationMs": 350,
        "pitchVariance": 12.5,
        "paceScore": 80,
        "clarityScore": 75,
        "pausePercentage": 8.5,
    }
    if audio_duration is not None:
        metadata["audioDurationSeconds"] = audio_duration

    payload = {
        "metadata": metadata,
        "highlightedTranscription": highlighted,
        "evaluationCriteria": criteria,
        "totalScore": total_score,
        "overallAssessment": "A clear message with a few hesitations.",
    }
    if suggested_speech is not None:
        payload["suggestedSpeech"] = suggested_speech
    return payload


def create_resume_payload(with_summary: bool = True) -> Dict[str, Any]:
    """A resume extraction response with the usual model noise (nulls, empty lists)."""
    payload = {
        "name": "Alex Morgan",
        "contact": {"email": "alex@example.com", "phone": None, "linkedin": "", "website": None},
        "experience": [
            {"jobTitle": "Software Engineer", "company": "Acme", "startDate": "2019",
             "endDate": "2022", "responsibilities": ["Built APIs", "Mentored juniors"]},
            {"jobTitle": "Data Analyst", "company": "Globex", "location": None, "responsibilities": []},
        ],
        "education": [{"institution": "State University", "degree": "BSc", "major": "Computer Science"}],
        "skills": ["Python", "SQL"],
        "projects": [],
        "certifications": None,
    }
    if with_summary:
        payload["summary"] = "Engineer with five years of backend experience."
    return payload


def create_text_payload(text: str = "Alex Morgan\nSoftware Engineer at Acme\nBuilt APIs") -> Dict[str, Any]:
    return {"text": text}


def create_questions_payload(count: int = 3) -> Dict[str, Any]:
    questions = [
        {"question": "Tell me about yourself.",
         "answer": "I am a software engineer who builds reliable APIs."},
        {"question": "What was your biggest achievement at Acme?",
         "answer": "I built the public API that now serves all of our customers."},
        {"question": "Why did you move from analysis into engineering?",
         "answer": "I wanted to build the tools I was using every day."},
        {"question": "How do you mentor junior developers?",
         "answer": "I pair with them weekly and review their code in detail."},
    ]
    while len(questions) < count:
        n = len(questions) + 1
        questions.append({"question": f"Question {n}?", "answer": f"Answer {n}."})
    return {"questions": questions[:count]}


def create_mock_llm_client(**overrides: Sequence[MockResponse]) -> MockLLMClient:
    """Mock client answering every operation with a valid payload."""
    responses: Dict[str, Sequence[MockResponse]] = {
        "analyze_speech": [create_analysis_payload()],
        "extract_resume_info": [create_resume_payload()],
        "extract_text_from_file": [create_text_payload()],
        "generate_questions_from_resume": [create_questions_payload()],
        "summarize_speech": [{"summary": "The speaker considers the project a success."}],
    }
    responses.update(overrides)
    return MockLLMClient(responses)
