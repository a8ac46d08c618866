"""
Model operations used by the coaching session.

Every operation is one request and one response. Responses are validated
against the schemas in ``schemas.py``; failures propagate to the caller.
"""
import logging
from typing import Optional

from .models import AnalysisRequest
from .prompts import CoachingPrompts
from .schemas import (
    AnalysisResult, ExtractedResumeInfo, ExtractedText, QuestionSet, SpeechSummary,
    parse_llm_payload,
)
from ..config import MAX_GENERATED_QUESTIONS
from ..infrastructure.llm import VertexRestClient

logger = logging.getLogger("flows")


class CoachingFlows:
    """Typed wrappers around the five model operations."""

    def __init__(self, llm_client: VertexRestClient, prompts: Optional[CoachingPrompts] = None):
        self.llm_client = llm_client
        self.prompts = prompts or CoachingPrompts()

    def analyze_speech(self, request: AnalysisRequest) -> AnalysisResult:
        """
        Score a speech sample.

        Args:
            request: Request with the evaluation mode already applied

        Returns:
            Validated AnalysisResult

        Raises:
            RuntimeError: If the HTTP call fails
            ValueError: If the response does not fit the schema
        """
        sample = request.speech_sample
        prompt = self.prompts.analyze_speech(
            mode=request.mode.value,
            is_audio=sample.is_audio,
            speech_text=None if sample.is_audio else sample.value,
            question=request.question,
            perfect_answer=request.perfect_answer,
        )
        media = [sample.value] if sample.is_audio else None

        logger.info("Analyzing %s sample in %s", "audio" if sample.is_audio else "text", request.mode.value)
        raw = self.llm_client.generate_json(prompt, media=media, operation="analyze_speech")
        result = parse_llm_payload(raw, AnalysisResult)
        logger.info("Analysis returned total score %.1f with %d criteria",
                    result.total_score, len(result.evaluation_criteria))
        return result

    def extract_resume_info(self, file_data_uri: str) -> ExtractedResumeInfo:
        """Structured fields from a resume file."""
        raw = self.llm_client.generate_json(
            self.prompts.extract_resume_info(),
            media=[file_data_uri],
            operation="extract_resume_info",
        )
        return parse_llm_payload(raw, ExtractedResumeInfo)

    def extract_text_from_file(self, file_data_uri: str) -> ExtractedText:
        """Plain text of any document."""
        raw = self.llm_client.generate_json(
            self.prompts.extract_text_from_file(),
            media=[file_data_uri],
            operation="extract_text_from_file",
        )
        return parse_llm_payload(raw, ExtractedText)

    def generate_questions_from_resume(self, resume_summary: str, resume_text: str) -> QuestionSet:
        prompt = self.prompts.generate_questions_from_resume(
            resume_summary, resume_text, count=MAX_GENERATED_QUESTIONS
        )
        raw = self.llm_client.generate_json(prompt, operation="generate_questions_from_resume")
        return parse_llm_payload(raw, QuestionSet)

    def summarize_speech(self, speech_text: str) -> str:
        raw = self.llm_client.generate_json(
            self.prompts.summarize_speech(speech_text),
            operation="summarize_speech",
        )
        return parse_llm_payload(raw, SpeechSummary).summary
