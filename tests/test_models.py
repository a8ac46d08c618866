import pytest

from verbal_insights.coaching.models import (
    AnalysisMode, AnalysisRequest, Notification, SampleKind, SpeechSample,
)


class TestAnalysisMode:

    @pytest.mark.parametrize("value, expected", [
        ("interview", AnalysisMode.INTERVIEW),
        ("Rehearsal", AnalysisMode.REHEARSAL),
        ("Presentation Mode", AnalysisMode.PRESENTATION),
        ("  presentation  ", AnalysisMode.PRESENTATION),
    ])
    def test_parse(self, value, expected):
        assert AnalysisMode.parse(value) is expected

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            AnalysisMode.parse("debate")

    def test_interview_is_evaluated_as_rehearsal(self):
        assert AnalysisMode.INTERVIEW.evaluation_mode is AnalysisMode.REHEARSAL
        assert AnalysisMode.REHEARSAL.evaluation_mode is AnalysisMode.REHEARSAL
        assert AnalysisMode.PRESENTATION.evaluation_mode is AnalysisMode.PRESENTATION

    def test_label(self):
        assert AnalysisMode.INTERVIEW.label == "Interview"


class TestSpeechSample:

    def test_from_payload_tags_audio_by_prefix(self):
        assert SpeechSample.from_payload("data:audio/webm;base64,AAAA").kind is SampleKind.AUDIO_DATA_URI
        assert SpeechSample.from_payload("data:text/plain;base64,AAAA").kind is SampleKind.TEXT
        assert SpeechSample.from_payload("Hello everyone").kind is SampleKind.TEXT

    def test_audio_requires_audio_data_uri(self):
        with pytest.raises(ValueError):
            SpeechSample.audio("Hello everyone")

    def test_blank_text_is_empty(self):
        assert SpeechSample.text("  \n").is_empty
        assert not SpeechSample.text("Hi").is_empty


class TestAnalysisRequest:

    def test_with_mode_returns_copy(self):
        request = AnalysisRequest(
            speech_sample=SpeechSample.text("My answer"),
            mode=AnalysisMode.INTERVIEW,
            display_mode=AnalysisMode.INTERVIEW,
            question="Q?",
            perfect_answer="A.",
        )
        remapped = request.with_mode(AnalysisMode.REHEARSAL)

        assert remapped.mode is AnalysisMode.REHEARSAL
        assert remapped.display_mode is AnalysisMode.INTERVIEW
        assert request.mode is AnalysisMode.INTERVIEW

    def test_payload_omits_empty_context(self):
        request = AnalysisRequest(
            speech_sample=SpeechSample.text("Hello"),
            mode=AnalysisMode.PRESENTATION,
            display_mode=AnalysisMode.PRESENTATION,
        )
        assert request.to_payload() == {"speechSample": "Hello", "mode": "Presentation Mode"}


def test_notification_levels():
    assert Notification.warning("Careful").level == "warning"
    assert Notification.error("Broken", "details").description == "details"
