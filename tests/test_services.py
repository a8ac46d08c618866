"""Resume intake and analysis services against the mock LLM client."""
import pytest

from verbal_insights.coaching.errors import ServiceError, SessionValidationError
from verbal_insights.coaching.flows import CoachingFlows
from verbal_insights.coaching.models import AnalysisMode, SpeechSample
from verbal_insights.coaching.schemas import SegmentType
from verbal_insights.coaching.services import AnalysisService, ResumeIntakeService
from verbal_insights.coaching.session import CoachingSession
from verbal_insights.coaching.testing import (
    create_analysis_payload, create_mock_llm_client, create_questions_payload,
    create_text_payload,
)
from verbal_insights.infrastructure.media import encode_data_uri


def services(llm):
    flows = CoachingFlows(llm)
    return ResumeIntakeService(flows), AnalysisService(flows)


class TestResumeIntake:

    def test_extracts_both_outputs_from_a_file(self, llm, resume_file):
        intake_service, _ = services(llm)

        intake = intake_service.extract(resume_file)

        assert intake.file_name == "resume.pdf"
        assert intake.structured.name == "Alex Morgan"
        assert intake.text.startswith("Alex Morgan")
        [structured_call] = llm.calls("extract_resume_info")
        [text_call] = llm.calls("extract_text_from_file")
        assert structured_call["media"] == text_call["media"]
        assert structured_call["media"][0].startswith("data:application/pdf;base64,")

    def test_accepts_data_uri(self, llm):
        intake_service, _ = services(llm)
        uri = encode_data_uri(b"resume bytes", "application/pdf")

        intake = intake_service.extract(uri, file_name="cv.pdf")

        assert intake.file_name == "cv.pdf"
        assert llm.calls("extract_text_from_file")[0]["media"] == [uri]

    @pytest.mark.parametrize("failing", ["extract_resume_info", "extract_text_from_file"])
    def test_either_leg_failing_fails_the_whole_intake(self, resume_file, failing):
        llm = create_mock_llm_client(**{failing: [RuntimeError("model unavailable")]})
        intake_service, _ = services(llm)

        with pytest.raises(ServiceError) as exc:
            intake_service.extract(resume_file)
        assert exc.value.title == "Resume Extraction Failed"
        assert exc.value.operation == "extract_resume"

    def test_missing_file(self, llm, tmp_path):
        intake_service, _ = services(llm)
        with pytest.raises(ServiceError):
            intake_service.extract(str(tmp_path / "missing.pdf"))
        assert llm.calls() == []

    def test_questions_use_summary_and_text(self, llm, resume_file):
        intake_service, _ = services(llm)
        intake = intake_service.extract(resume_file)

        questions = intake_service.generate_questions(intake.structured, intake.text)

        assert len(questions) == 3
        prompt = llm.calls("generate_questions_from_resume")[0]["prompt"]
        assert "Engineer with five years of backend experience." in prompt
        assert "Software Engineer at Acme" in prompt

    def test_question_generation_failure(self, resume_file):
        llm = create_mock_llm_client(generate_questions_from_resume=[{"questions": "nope"}])
        intake_service, _ = services(llm)
        intake = intake_service.extract(resume_file)

        with pytest.raises(ServiceError) as exc:
            intake_service.generate_questions(intake.structured, intake.text)
        assert exc.value.title == "Question Generation Failed"


class TestAnalysis:

    def test_interview_request_is_remapped_to_rehearsal(self, llm, resume_file):
        intake_service, analysis = services(llm)
        session = CoachingSession(AnalysisMode.INTERVIEW)
        intake = intake_service.extract(resume_file)
        session.commit_resume(intake)
        session.replace_questions(intake_service.generate_questions(intake.structured, intake.text))
        session.select_question(0)
        session.set_sample(SpeechSample.text("I build reliable APIs"))

        request = analysis.build_request(session)

        assert request.mode is AnalysisMode.REHEARSAL
        assert request.display_mode is AnalysisMode.INTERVIEW
        assert request.question == "Tell me about yourself."
        assert request.perfect_answer == "I am a software engineer who builds reliable APIs."

    def test_build_request_validates_first(self, llm):
        _, analysis = services(llm)
        session = CoachingSession(AnalysisMode.REHEARSAL)
        session.set_sample(SpeechSample.text("An answer"))

        with pytest.raises(SessionValidationError):
            analysis.build_request(session)

    def test_rehearsal_inputs_are_trimmed(self, llm):
        _, analysis = services(llm)
        session = CoachingSession(AnalysisMode.REHEARSAL)
        session.set_sample(SpeechSample.text("An answer"))
        session.set_question("  Why us?  ")
        session.set_perfect_answer(" Because. ")

        request = analysis.build_request(session)

        assert (request.question, request.perfect_answer) == ("Why us?", "Because.")

    def test_mismatched_highlighting_is_rebuilt_locally(self):
        transcript = "So um we shipped it like on time"
        llm = create_mock_llm_client(analyze_speech=[create_analysis_payload(
            transcript="something else entirely",
        )])
        _, analysis = services(llm)
        session = CoachingSession()
        session.set_sample(SpeechSample.text(transcript))

        result = analysis.analyze(analysis.build_request(session))

        assert " ".join(s.text for s in result.highlighted_transcription) == transcript
        fillers = [s.text for s in result.highlighted_transcription if s.type is SegmentType.FILLER]
        assert fillers == ["um", "like"]
        assert result.metadata.filler_word_count == 2

    def test_audio_result_is_kept_as_returned(self):
        llm = create_mock_llm_client(analyze_speech=[create_analysis_payload(audio_duration=12.5)])
        _, analysis = services(llm)
        session = CoachingSession()
        session.set_sample(SpeechSample.audio(encode_data_uri(b"RIFF", "audio/webm")))

        result = analysis.analyze(analysis.build_request(session))

        assert result.metadata.audio_duration_seconds == 12.5
        assert llm.calls("analyze_speech")[0]["media"][0].startswith("data:audio/webm")

    def test_malformed_response_is_analysis_failure(self):
        llm = create_mock_llm_client(analyze_speech=[{"metadata": {}}])
        _, analysis = services(llm)
        session = CoachingSession()
        session.set_sample(SpeechSample.text("Hello there"))

        with pytest.raises(ServiceError) as exc:
            analysis.analyze(analysis.build_request(session))
        assert exc.value.title == "Analysis Failed"
        assert exc.value.description == "There was an error analyzing your speech. Please try again."

    def test_summarize(self, llm):
        _, analysis = services(llm)
        assert analysis.summarize("We did it.") == "The speaker considers the project a success."

    def test_summarize_failure(self):
        llm = create_mock_llm_client(summarize_speech=[ValueError("bad json")])
        _, analysis = services(llm)
        with pytest.raises(ServiceError):
            analysis.summarize("We did it.")


def test_text_payload_factory_is_plain_text():
    assert create_text_payload("abc") == {"text": "abc"}
    assert len(create_questions_payload(1)["questions"]) == 1
