"""Session state machine: mode changes, the interview sub-flow and the validation gate."""
import pytest

from verbal_insights.coaching.errors import SessionBusyError, SessionStateError, SessionValidationError
from verbal_insights.coaching.models import AnalysisMode, ResumeIntake, SpeechSample
from verbal_insights.coaching.schemas import ExtractedResumeInfo, QuestionSet
from verbal_insights.coaching.session import CoachingSession, InterviewStage
from verbal_insights.coaching.testing import create_questions_payload, create_resume_payload


def make_intake():
    return ResumeIntake(
        structured=ExtractedResumeInfo.model_validate(create_resume_payload()),
        text="Alex Morgan\nSoftware Engineer",
        file_name="resume.pdf",
    )


def make_questions(count=3):
    return QuestionSet.model_validate(create_questions_payload(count)).questions


@pytest.fixture
def interview():
    return CoachingSession(AnalysisMode.INTERVIEW)


class TestValidationGate:

    def test_presentation_needs_only_a_sample(self):
        session = CoachingSession()
        assert session.missing_fields() == ["speech sample"]

        session.set_sample(SpeechSample.text("Hello everyone"))
        assert session.can_analyze

    def test_rehearsal_names_every_missing_field(self):
        session = CoachingSession(AnalysisMode.REHEARSAL)
        session.set_sample(SpeechSample.text("My answer"))
        session.set_question("Why us?")

        with pytest.raises(SessionValidationError) as exc:
            session.require_ready()
        assert exc.value.missing_fields == ("perfect answer",)
        assert exc.value.description == "Missing required field(s): perfect answer."

    def test_whitespace_only_inputs_count_as_missing(self):
        session = CoachingSession(AnalysisMode.REHEARSAL)
        session.set_sample(SpeechSample.text("   "))
        session.set_question("  ")
        session.set_perfect_answer("\n")

        assert session.missing_fields() == ["speech sample", "question", "perfect answer"]

    def test_interview_needs_selected_question(self, interview):
        interview.set_sample(SpeechSample.text("My answer"))
        assert interview.missing_fields() == ["selected interview question"]

    def test_busy_session_cannot_analyze(self):
        session = CoachingSession()
        session.set_sample(SpeechSample.text("Hello"))
        session.begin_task("Analyzing")
        assert not session.can_analyze


class TestModeChange:

    def test_clears_sample_result_and_foreign_state(self, interview):
        interview.commit_resume(make_intake())
        interview.set_sample(SpeechSample.text("Hello"))

        interview.change_mode(AnalysisMode.REHEARSAL)

        assert interview.sample is None
        assert interview.analysis_result is None
        assert interview.resume is None
        assert interview.interview_stage is InterviewStage.NO_RESUME

    def test_leaving_rehearsal_clears_question(self):
        session = CoachingSession(AnalysisMode.REHEARSAL)
        session.set_question("Why us?")
        session.set_perfect_answer("Because.")

        session.change_mode(AnalysisMode.PRESENTATION)

        assert session.question == ""
        assert session.perfect_answer == ""

    def test_refused_while_busy(self):
        session = CoachingSession()
        session.begin_task("Analyzing your speech")
        with pytest.raises(SessionBusyError):
            session.change_mode(AnalysisMode.REHEARSAL)
        session.end_task()
        session.change_mode(AnalysisMode.REHEARSAL)
        assert session.mode is AnalysisMode.REHEARSAL


class TestInterviewFlow:

    def test_stages_progress_in_order(self, interview):
        assert interview.interview_stage is InterviewStage.NO_RESUME
        assert not interview.can_generate_questions

        interview.commit_resume(make_intake())
        assert interview.interview_stage is InterviewStage.RESUME_UPLOADED

        interview.replace_questions(make_questions())
        assert interview.interview_stage is InterviewStage.QUESTIONS_GENERATED
        assert not interview.can_capture_answer

        question = interview.select_question(1)
        assert interview.interview_stage is InterviewStage.QUESTION_SELECTED
        assert interview.active_question is question
        assert interview.can_capture_answer

    def test_resume_only_in_interview_mode(self):
        with pytest.raises(SessionStateError):
            CoachingSession().commit_resume(make_intake())

    def test_new_resume_drops_old_questions(self, interview):
        interview.commit_resume(make_intake())
        interview.replace_questions(make_questions())
        interview.select_question(0)

        interview.commit_resume(make_intake())

        assert interview.generated_questions == ()
        assert interview.selected_index is None

    def test_questions_need_a_resume(self, interview):
        with pytest.raises(SessionStateError):
            interview.replace_questions(make_questions())

    def test_regeneration_clears_selection_and_truncates(self, interview):
        interview.commit_resume(make_intake())
        interview.replace_questions(make_questions())
        interview.select_question(2)
        interview.toggle_ideal_answer()

        interview.replace_questions(make_questions(3) + make_questions(3))

        assert len(interview.generated_questions) == 3
        assert interview.selected_index is None
        assert not interview.show_ideal_answer

    @pytest.mark.parametrize("index", [-1, 3])
    def test_select_out_of_range(self, interview, index):
        interview.commit_resume(make_intake())
        interview.replace_questions(make_questions())
        with pytest.raises(SessionStateError):
            interview.select_question(index)

    def test_select_without_questions(self, interview):
        with pytest.raises(SessionStateError):
            interview.select_question(0)

    def test_ideal_answer_toggle_needs_selection(self, interview):
        interview.commit_resume(make_intake())
        interview.replace_questions(make_questions())
        with pytest.raises(SessionStateError):
            interview.toggle_ideal_answer()

        interview.select_question(0)
        assert interview.toggle_ideal_answer() is True
        assert interview.toggle_ideal_answer() is False

    def test_selecting_another_question_hides_ideal_answer(self, interview):
        interview.commit_resume(make_intake())
        interview.replace_questions(make_questions())
        interview.select_question(0)
        interview.toggle_ideal_answer()

        interview.select_question(1)

        assert not interview.show_ideal_answer


def test_begin_task_refuses_second_task():
    session = CoachingSession()
    session.begin_task("Extracting resume info")
    with pytest.raises(SessionBusyError) as exc:
        session.begin_task("Generating questions")
    assert "Extracting resume info" in exc.value.description
