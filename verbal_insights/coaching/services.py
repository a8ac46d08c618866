"""
Service classes for the coaching session.
"""
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .errors import ServiceError
from .flows import CoachingFlows
from .models import AnalysisMode, AnalysisRequest, ResumeIntake
from .schemas import (
    AnalysisResult, ExtractedResumeInfo, InterviewQuestion, SegmentType,
    segment_transcript, segments_match_transcript,
)
from .session import CoachingSession
from ..config import RESUME_EXTRACTION_WORKERS
from ..infrastructure.media import file_to_data_uri, is_data_uri

logger = logging.getLogger("services")


class ResumeIntakeService:
    """Turns a resume file into structured fields, plain text and questions."""

    def __init__(self, flows: CoachingFlows, workers: int = RESUME_EXTRACTION_WORKERS):
        self.flows = flows
        self.workers = workers

    def extract(self, source: str, file_name: Optional[str] = None) -> ResumeIntake:
        """
        Run structured and plain-text extraction concurrently.

        Args:
            source: Path to the resume, or the resume as a data URI
            file_name: Display name, taken from the path if omitted

        Returns:
            ResumeIntake holding both outputs

        Raises:
            ServiceError: If reading the file or either extraction fails
        """
        try:
            if is_data_uri(source):
                data_uri = source
            else:
                data_uri = file_to_data_uri(source)
                file_name = file_name or os.path.basename(source)
        except OSError as e:
            logger.error("Could not read resume %s: %s", source, e)
            raise ServiceError("extract_resume", "Resume Extraction Failed", f"Could not read the resume file: {e}")

        logger.info("Extracting resume %s", file_name or "(data uri)")
        try:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                structured_future = pool.submit(self.flows.extract_resume_info, data_uri)
                text_future = pool.submit(self.flows.extract_text_from_file, data_uri)
                structured = structured_future.result()
                text = text_future.result()
        except Exception as e:
            logger.error("Resume extraction failed: %s", e)
            logger.debug("Resume extraction traceback", exc_info=True)
            raise ServiceError(
                "extract_resume",
                "Resume Extraction Failed",
                "Could not extract information from the resume.",
            ) from e

        logger.info("Resume extracted: %d experience entries, %d chars of text",
                    len(structured.experience or []), len(text.text))
        return ResumeIntake(structured=structured, text=text.text, file_name=file_name or "")

    def generate_questions(self, structured: ExtractedResumeInfo, text: str) -> List[InterviewQuestion]:
        """
        Generate up to three tailored questions with ideal answers.

        Raises:
            ServiceError: If generation fails
        """
        summary = structured.question_summary()
        try:
            question_set = self.flows.generate_questions_from_resume(summary, text)
        except Exception as e:
            logger.error("Question generation failed: %s", e)
            logger.debug("Question generation traceback", exc_info=True)
            raise ServiceError(
                "generate_questions",
                "Question Generation Failed",
                "Could not generate questions from the resume.",
            ) from e

        logger.info("Generated %d interview questions", len(question_set.questions))
        return list(question_set.questions)


class AnalysisService:
    """Builds evaluator requests and runs the analysis."""

    def __init__(self, flows: CoachingFlows):
        self.flows = flows

    def build_request(self, session: CoachingSession) -> AnalysisRequest:
        """
        Validate the session and build a fresh request.

        Interview answers are scored as rehearsals against the selected
        question's ideal answer; the request keeps Interview as display_mode.

        Raises:
            SessionValidationError: If a required input is missing
        """
        session.require_ready()

        question = perfect_answer = None
        if session.mode is AnalysisMode.REHEARSAL:
            question = session.question.strip()
            perfect_answer = session.perfect_answer.strip()
        elif session.mode is AnalysisMode.INTERVIEW:
            question = session.active_question.question
            perfect_answer = session.active_question.answer

        request = AnalysisRequest(
            speech_sample=session.sample,
            mode=session.mode,
            display_mode=session.mode,
            question=question,
            perfect_answer=perfect_answer,
        )
        return request.with_mode(session.mode.evaluation_mode)

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Run one analysis. No retry.

        Raises:
            ServiceError: If the call fails or the response is malformed
        """
        try:
            result = self.flows.analyze_speech(request)
        except Exception as e:
            logger.error("Analysis failed: %s", e)
            logger.debug("Analysis traceback", exc_info=True)
            raise ServiceError(
                "analyze_speech",
                "Analysis Failed",
                "There was an error analyzing your speech. Please try again.",
            ) from e

        if not request.speech_sample.is_audio:
            result = self._ensure_transcript(result, request.speech_sample.value)
        return result

    def summarize(self, text: str) -> str:
        try:
            return self.flows.summarize_speech(text)
        except Exception as e:
            logger.error("Summary failed: %s", e)
            raise ServiceError("summarize_speech", "Summary Failed", "Could not summarize the speech.") from e

    @staticmethod
    def _ensure_transcript(result: AnalysisResult, transcript: str) -> AnalysisResult:
        """Replace a highlighted transcription that doesn't rebuild the submitted text."""
        if segments_match_transcript(result.highlighted_transcription, transcript):
            return result
        logger.warning("Highlighted transcription does not match the submitted text, segmenting locally")
        segments = segment_transcript(transcript)
        fillers = sum(1 for s in segments if s.type is SegmentType.FILLER)
        metadata = result.metadata
        if fillers > metadata.filler_word_count:
            metadata = metadata.model_copy(update={"filler_word_count": fillers})
        return result.model_copy(update={"highlighted_transcription": segments, "metadata": metadata})
