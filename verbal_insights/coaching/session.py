"""
Per-session state of the speech coach.

Everything lives in memory and is discarded on mode change.
"""
import logging
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .errors import SessionBusyError, SessionStateError, SessionValidationError
from .models import AnalysisMode, AnalysisRequest, ResumeIntake, SpeechSample
from .schemas import AnalysisResult, InterviewQuestion
from ..config import MAX_GENERATED_QUESTIONS

logger = logging.getLogger("session")


class InterviewStage(str, Enum):
    NO_RESUME = "no_resume"
    RESUME_UPLOADED = "resume_uploaded"
    QUESTIONS_GENERATED = "questions_generated"
    QUESTION_SELECTED = "question_selected"


class CoachingSession:
    """
    State machine over mode, sample and the interview sub-flow.

    Interview is strictly sequential: resume, then questions, then a
    selected question, then an answer.
    """

    def __init__(self, mode: AnalysisMode = AnalysisMode.PRESENTATION):
        self.mode = mode
        self.sample: Optional[SpeechSample] = None

        # Rehearsal inputs
        self.question = ""
        self.perfect_answer = ""

        # Interview inputs
        self.resume: Optional[ResumeIntake] = None
        self.generated_questions: Tuple[InterviewQuestion, ...] = ()
        self.selected_index: Optional[int] = None
        self.show_ideal_answer = False

        self.analysis_result: Optional[AnalysisResult] = None
        self.last_request: Optional[AnalysisRequest] = None

        self.is_loading = False
        self.loading_message: Optional[str] = None

    # -------------------------------------------------------------------------
    # Mode and sample
    # -------------------------------------------------------------------------

    def change_mode(self, mode: AnalysisMode):
        """Switch mode, dropping the sample, result and state the new mode doesn't use."""
        self._ensure_idle()
        mode = AnalysisMode(mode)
        self.mode = mode
        self.sample = None
        self.analysis_result = None
        if mode is not AnalysisMode.INTERVIEW:
            self.clear_resume()
        if mode is not AnalysisMode.REHEARSAL:
            self.question = ""
            self.perfect_answer = ""
        logger.info("Mode changed to %s", mode.value)

    def set_sample(self, sample: Optional[SpeechSample]):
        self.sample = sample

    def set_question(self, text: str):
        self.question = text or ""

    def set_perfect_answer(self, text: str):
        self.perfect_answer = text or ""

    # -------------------------------------------------------------------------
    # Interview sub-flow
    # -------------------------------------------------------------------------

    @property
    def interview_stage(self) -> InterviewStage:
        if self.resume is None:
            return InterviewStage.NO_RESUME
        if not self.generated_questions:
            return InterviewStage.RESUME_UPLOADED
        if self.selected_index is None:
            return InterviewStage.QUESTIONS_GENERATED
        return InterviewStage.QUESTION_SELECTED

    @property
    def active_question(self) -> Optional[InterviewQuestion]:
        if self.selected_index is None:
            return None
        return self.generated_questions[self.selected_index]

    @property
    def can_generate_questions(self) -> bool:
        return self.mode is AnalysisMode.INTERVIEW and self.resume is not None

    @property
    def can_capture_answer(self) -> bool:
        """Interview answers are captured only after a question is picked."""
        if self.mode is not AnalysisMode.INTERVIEW:
            return True
        return self.active_question is not None

    def commit_resume(self, intake: ResumeIntake):
        """Store both extraction outputs at once; old questions no longer apply."""
        if self.mode is not AnalysisMode.INTERVIEW:
            raise SessionStateError("Not in Interview mode", "Resumes are only used in Interview mode.")
        self.resume = intake
        self.generated_questions = ()
        self.selected_index = None
        self.show_ideal_answer = False
        logger.info("Resume committed (%s, %d chars of text)", intake.file_name or "unnamed", len(intake.text))

    def clear_resume(self):
        self.resume = None
        self.generated_questions = ()
        self.selected_index = None
        self.show_ideal_answer = False

    def replace_questions(self, questions: Sequence[InterviewQuestion]):
        """Replace the whole question list and clear the selection."""
        if not self.can_generate_questions:
            raise SessionStateError("Upload a resume first", "Questions are generated from an extracted resume.")
        if len(questions) > MAX_GENERATED_QUESTIONS:
            logger.warning("Keeping the first %d of %d questions", MAX_GENERATED_QUESTIONS, len(questions))
        self.generated_questions = tuple(questions[:MAX_GENERATED_QUESTIONS])
        self.selected_index = None
        self.show_ideal_answer = False

    def select_question(self, index: int) -> InterviewQuestion:
        self._ensure_idle()
        if not self.generated_questions:
            raise SessionStateError("No questions", "Generate questions before selecting one.")
        if not 0 <= index < len(self.generated_questions):
            raise SessionStateError(
                "No such question",
                f"Pick a question between 1 and {len(self.generated_questions)}.",
            )
        self.selected_index = index
        self.show_ideal_answer = False
        return self.generated_questions[index]

    def toggle_ideal_answer(self) -> bool:
        if self.active_question is None:
            raise SessionStateError("No question selected", "Select a question to see its ideal answer.")
        self.show_ideal_answer = not self.show_ideal_answer
        return self.show_ideal_answer

    # -------------------------------------------------------------------------
    # Validation gate
    # -------------------------------------------------------------------------

    def missing_fields(self) -> List[str]:
        """Names of the inputs the current mode still needs."""
        missing = []
        if self.sample is None or self.sample.is_empty:
            missing.append("speech sample")
        if self.mode is AnalysisMode.REHEARSAL:
            if not self.question.strip():
                missing.append("question")
            if not self.perfect_answer.strip():
                missing.append("perfect answer")
        elif self.mode is AnalysisMode.INTERVIEW:
            if self.active_question is None:
                missing.append("selected interview question")
        return missing

    @property
    def can_analyze(self) -> bool:
        return not self.is_loading and not self.missing_fields()

    def require_ready(self):
        """Raise SessionValidationError naming every missing input."""
        missing = self.missing_fields()
        if missing:
            raise SessionValidationError(missing)

    # -------------------------------------------------------------------------
    # Busy flag
    # -------------------------------------------------------------------------

    def begin_task(self, message: str):
        self._ensure_idle()
        self.is_loading = True
        self.loading_message = message
        logger.debug("Task started: %s", message)

    def end_task(self):
        self.is_loading = False
        self.loading_message = None

    def _ensure_idle(self):
        if self.is_loading:
            raise SessionBusyError("Please wait", f"{self.loading_message or 'A task'} is still running.")
