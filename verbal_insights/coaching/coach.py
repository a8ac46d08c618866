"""
Speech coach facade wiring capture, session, services and reporting.
"""
import logging
import os
import time
import uuid
from typing import Callable, Dict, List, Optional, TypeVar, Union

from .capture import MicrophoneBackend, RecognizerBackend, SpeechSampleProvider, UnsupportedRecognizer
from .errors import CaptureError, CoachingError, ServiceError, SessionStateError
from .events import (
    CoachingEventBus, EventLogger, SessionMetrics,
    ModeChangedEvent, InputTabChangedEvent, SampleUpdatedEvent,
    ResumeExtractedEvent, QuestionsGeneratedEvent, QuestionSelectedEvent,
    AnalysisCompletedEvent, ReportExportedEvent, NotificationEvent, ErrorOccurredEvent,
)
from .flows import CoachingFlows
from .models import AnalysisMode, InputTab, Notification, ResumeIntake, SpeechSample
from .schemas import AnalysisResult, InterviewQuestion
from .services import AnalysisService, ResumeIntakeService
from .session import CoachingSession
from ..config import (
    Config, VERTEX_LOCATION, MODEL_NAME, LANGUAGE_CODE, WORKDIR, REPORT_FILENAME, RECORDING_FILENAME, REPORT_LOGO_URL,
)
from ..infrastructure.llm import VertexRestClient
from ..infrastructure.report import ReportExporter
from ..utils import setup_logging

logger = logging.getLogger("coach")

T = TypeVar("T")


class SpeechCoach:
    """
    Speech coaching session with event-driven reporting.

    Every user action either succeeds and emits a domain event, or fails
    with a Notification and leaves the session as it was before the call.
    """

    def __init__(self,
                 project_id: Optional[str] = None,
                 location: str = VERTEX_LOCATION,
                 model_name: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 mode: AnalysisMode = AnalysisMode.PRESENTATION,
                 language_code: str = LANGUAGE_CODE,
                 workdir: str = WORKDIR,
                 report_logo_url: Optional[str] = REPORT_LOGO_URL,
                 log_file: Optional[str] = None,
                 log_level: str = "WARNING",
                 llm_client=None,
                 recognizer: Optional[RecognizerBackend] = None,
                 microphone: Optional[MicrophoneBackend] = None,
                 exporter: Optional[ReportExporter] = None):

        self.workdir = workdir
        self.log_file = log_file
        if log_file:
            setup_logging(log_file, console_level=log_level)

        self.session_id = uuid.uuid4().hex[:12]

        # Initialize event system
        self.event_bus = CoachingEventBus()
        self.event_logger = EventLogger()
        self.metrics = SessionMetrics()
        self.event_bus.subscribe_all(self.event_logger.handle_event)
        self.event_bus.subscribe_all(self.metrics.handle_event)
        self.notifications: List[Notification] = []

        # Initialize LLM and services
        if llm_client is None:
            if not project_id:
                raise ValueError("project_id is required for LLM functionality")
            llm_client = VertexRestClient(
                project=project_id,
                location=location,
                model=model_name,
                credentials_json=credentials_json
            )
        self.llm_client = llm_client
        self.flows = CoachingFlows(llm_client)
        self.resume_service = ResumeIntakeService(self.flows)
        self.analysis_service = AnalysisService(self.flows)
        self.exporter = exporter or ReportExporter(logo_url=report_logo_url)

        self.session = CoachingSession(mode)
        if recognizer is None:
            recognizer = UnsupportedRecognizer(language_code)
        recognizer.language_code = language_code
        self.provider = SpeechSampleProvider(
            on_sample=self._on_sample,
            notify=self._on_capture_error,
            recognizer=recognizer,
            microphone=microphone,
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "SpeechCoach":
        """Build a coach from a Config; keyword arguments override it."""
        options = dict(
            project_id=config.google_cloud_project,
            location=config.vertex_location,
            model_name=config.model_name,
            credentials_json=config.google_application_credentials,
            language_code=config.language_code,
            workdir=config.workdir,
            report_logo_url=config.report_logo_url,
            log_file=config.log_file,
            log_level=config.log_level,
        )
        options.update(kwargs)
        return cls(**options)

    # =========================================================================
    # Mode and input
    # =========================================================================

    def change_mode(self, mode: Union[AnalysisMode, str]) -> bool:
        def action():
            new_mode = mode if isinstance(mode, AnalysisMode) else AnalysisMode.parse(mode)
            self.session.change_mode(new_mode)
            self.provider.clear()
            self._emit(ModeChangedEvent(self.session_id, time.time(), new_mode.value))
            return True
        return bool(self._attempt("session", action))

    @property
    def mode(self) -> AnalysisMode:
        return self.session.mode

    def switch_input_tab(self, tab: Union[InputTab, str]) -> bool:
        def action():
            new_tab = InputTab(tab)
            self.provider.switch_tab(new_tab)
            self._emit(InputTabChangedEvent(self.session_id, time.time(), new_tab.value))
            return True
        return bool(self._attempt("capture", action))

    def set_rehearsal_question(self, text: str):
        self.session.set_question(text)

    def set_perfect_answer(self, text: str):
        self.session.set_perfect_answer(text)

    # =========================================================================
    # Capture
    # =========================================================================

    def start_listening(self) -> bool:
        def action():
            self._require_answer_capture()
            self.provider.start_listening()
            return True
        return bool(self._attempt("capture", action))

    def stop_listening(self):
        self.provider.stop_listening()

    def toggle_listening(self) -> bool:
        """Returns the listening state after the toggle."""
        if self.provider.is_listening:
            self.stop_listening()
        else:
            self.start_listening()
        return self.provider.is_listening

    def edit_transcript(self, text: str) -> bool:
        def action():
            self._require_answer_capture()
            self.provider.edit_transcript(text)
            return True
        return bool(self._attempt("capture", action))

    def start_recording(self) -> bool:
        def action():
            self._require_answer_capture()
            self.provider.start_recording()
            return True
        return bool(self._attempt("capture", action))

    def stop_recording(self) -> Optional[SpeechSample]:
        return self._attempt("capture", self.provider.stop_recording)

    def upload_audio(self, source: Union[str, bytes], mime_type: Optional[str] = None,
                     file_name: Optional[str] = None) -> Optional[SpeechSample]:
        def action():
            self._require_answer_capture()
            return self.provider.upload_audio(source, mime_type=mime_type, file_name=file_name)
        return self._attempt("capture", action)

    def save_recording(self, path: Optional[str] = None) -> Optional[str]:
        def action():
            target = path or os.path.join(self.workdir, self.provider.audio_file_name or RECORDING_FILENAME)
            return self.provider.save_recording(target)
        return self._attempt("capture", action)

    def _require_answer_capture(self):
        if not self.session.can_capture_answer:
            raise SessionStateError("Select a question first", "Pick an interview question before answering.")

    # =========================================================================
    # Interview preparation
    # =========================================================================

    def upload_resume(self, source: str, file_name: Optional[str] = None) -> Optional[ResumeIntake]:
        """Extract a resume; nothing changes if extraction fails."""
        def action():
            if self.session.mode is not AnalysisMode.INTERVIEW:
                raise SessionStateError("Not in Interview mode", "Switch to Interview mode to upload a resume.")
            with self._task("Extracting resume info..."):
                intake = self.resume_service.extract(source, file_name=file_name)
            self.session.commit_resume(intake)

            structured = intake.structured
            sections = sorted(structured.model_dump(exclude_none=True).keys())
            self._emit(ResumeExtractedEvent(
                self.session_id, time.time(), intake.file_name, sections, len(intake.text)
            ))
            self._notify(Notification.info(
                "Resume Info Extracted", "Review the extracted information, then generate questions."
            ))
            return intake
        return self._attempt("resume", action)

    def clear_resume(self):
        self.session.clear_resume()

    def generate_questions(self) -> Optional[List[InterviewQuestion]]:
        """Generate questions; the previous list survives a failure."""
        def action():
            if not self.session.can_generate_questions:
                raise SessionStateError("Upload a resume first", "Questions are generated from an extracted resume.")
            resume = self.session.resume
            with self._task("Generating questions..."):
                questions = self.resume_service.generate_questions(resume.structured, resume.text)
            self.session.replace_questions(questions)

            self._emit(QuestionsGeneratedEvent(
                self.session_id, time.time(), [q.question for q in self.session.generated_questions]
            ))
            self._notify(Notification.info("Questions Generated", "Select a question below to start practicing."))
            return list(self.session.generated_questions)
        return self._attempt("questions", action)

    def select_question(self, index: int) -> Optional[InterviewQuestion]:
        def action():
            question = self.session.select_question(index)
            self._emit(QuestionSelectedEvent(self.session_id, time.time(), index, question.question))
            return question
        return self._attempt("session", action)

    def toggle_ideal_answer(self) -> bool:
        return bool(self._attempt("session", self.session.toggle_ideal_answer))

    # =========================================================================
    # Analysis and reporting
    # =========================================================================

    def analyze(self) -> Optional[AnalysisResult]:
        """Validate, send one analysis request and keep the result."""
        def action():
            request = self.analysis_service.build_request(self.session)
            with self._task("Analyzing speech..."):
                result = self.analysis_service.analyze(request)
            self.session.analysis_result = result
            self.session.last_request = request

            self._emit(AnalysisCompletedEvent(
                self.session_id, time.time(), request.display_mode.value, request.mode.value,
                result.total_score, result.metadata.filler_word_count
            ))
            return result
        return self._attempt("analysis", action)

    def export_report(self, path: Optional[str] = None) -> Optional[str]:
        """Write the current result as a PDF and return its path."""
        def action():
            result = self.session.analysis_result
            if result is None:
                raise SessionStateError("Nothing to export", "Analyze a speech sample first.")
            target = path or os.path.join(self.workdir, REPORT_FILENAME)
            try:
                data = self.exporter.export(result, target)
            except OSError as e:
                raise ServiceError("export_report", "Export Failed", f"Could not write the report: {e}")
            self._emit(ReportExportedEvent(
                self.session_id, time.time(), target, len(data), self.exporter.page_count
            ))
            return target
        return self._attempt("report", action)

    def summarize_transcript(self) -> Optional[str]:
        """Summarize the typed transcript, or the analyzed one if there is none."""
        def action():
            sample = self.session.sample
            if sample is not None and not sample.is_audio and not sample.is_empty:
                text = sample.value
            elif self.session.analysis_result and self.session.analysis_result.highlighted_transcription:
                text = self.session.analysis_result.full_transcript()
            else:
                raise SessionStateError("Nothing to summarize", "Provide a transcript or analyze a recording first.")
            with self._task("Summarizing speech..."):
                return self.analysis_service.summarize(text)
        return self._attempt("summary", action)

    # =========================================================================
    # Callbacks and error handling
    # =========================================================================

    def _on_sample(self, sample: Optional[SpeechSample]):
        self.session.set_sample(sample)
        self._emit(SampleUpdatedEvent(
            self.session_id, time.time(),
            sample.kind.value if sample else None,
            len(sample.value) if sample else 0,
        ))

    def _on_capture_error(self, error: CaptureError):
        self._report_error(error, "capture")

    def _attempt(self, component: str, action: Callable[[], T]) -> Optional[T]:
        """Run a user action, turning coaching errors into notifications."""
        try:
            return action()
        except CoachingError as e:
            self._report_error(e, component)
            return None

    def _task(self, message: str) -> "_BusyTask":
        return _BusyTask(self.session, message)

    def _report_error(self, error: CoachingError, component: str):
        logger.error("%s failed: %s", component, error)
        self._emit(ErrorOccurredEvent(
            self.session_id, time.time(), type(error).__name__, str(error), component
        ))
        if isinstance(error, CaptureError) and error.permission_denied:
            self._notify(Notification.warning(error.title, error.description))
        else:
            self._notify(Notification.error(error.title, error.description))

    def _notify(self, notification: Notification):
        self.notifications.append(notification)
        self._emit(NotificationEvent(
            self.session_id, time.time(), notification.level, notification.title, notification.description
        ))

    def _emit(self, event):
        self.event_bus.emit(event)

    # =========================================================================
    # Display
    # =========================================================================

    def display_result(self, result: Optional[AnalysisResult] = None):
        """Print a console summary of an analysis result."""
        result = result or self.session.analysis_result
        if result is None:
            print("No analysis yet.")
            return

        request = self.session.last_request
        md = result.metadata
        print("\n" + "=" * 50)
        print("🎯 SPEECH ANALYSIS COMPLETE")
        print("=" * 50)
        if request:
            print(f"🎙️  Mode: {request.display_mode.value}")
        print(f"🔢 Total Score: {result.total_score:g}/100")
        print(f"📝 Assessment: {result.overall_assessment}")
        print(f"📊 Words: {md.word_count} | Fillers: {md.filler_word_count} | "
              f"Rate: {md.speech_rate_wpm:g} WPM | Pace: {md.pace_score:g}/100 | "
              f"Clarity: {md.clarity_score:g}/100 | Pauses: {md.pause_percentage:.1f}%")
        if md.audio_duration_seconds:
            print(f"⏱️  Audio Duration: {md.audio_duration_seconds:.2f}s")

        if result.highlighted_transcription:
            fillers = [s.text for s in result.filler_segments()]
            print(f"💬 \"{result.full_transcript()}\"")
            if fillers:
                print(f"   Fillers: {', '.join(fillers)}")

        for category, items in result.grouped_criteria().items():
            print(f"\n{category.value}")
            for item in items:
                print(f"  • {item.criteria.value}: {item.score:g}/10 - {item.feedback}")

        if result.suggested_speech:
            print(f"\n💡 Suggested delivery: {result.suggested_speech}")

        if self.log_file:
            print(f"\n📁 Full details logged to: {self.log_file}")

    def get_metrics(self) -> Dict[str, int]:
        """Get current session metrics."""
        return self.metrics.get_metrics()

    def reset_metrics(self):
        self.metrics.reset()

    def close(self):
        """Stop capture and release the microphone."""
        self.provider.clear()


class _BusyTask:
    """Holds the session busy flag for the duration of a blocking call."""

    def __init__(self, session: CoachingSession, message: str):
        self.session = session
        self.message = message

    def __enter__(self):
        self.session.begin_task(self.message)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.session.end_task()
        return False
