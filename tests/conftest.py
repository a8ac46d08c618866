"""Shared fixtures for the speech coach tests."""
import pytest

from verbal_insights.coaching import SpeechCoach
from verbal_insights.coaching.testing import (
    MockMicrophone, MockRecognizer, create_mock_llm_client,
)
from verbal_insights.infrastructure.report import ReportExporter


@pytest.fixture
def llm():
    return create_mock_llm_client()


@pytest.fixture
def recognizer():
    return MockRecognizer()


@pytest.fixture
def microphone():
    return MockMicrophone()


@pytest.fixture
def make_coach(recognizer, microphone, tmp_path):
    """Build a coach around a given mock client."""
    def factory(llm_client, **kwargs):
        options = dict(
            llm_client=llm_client,
            recognizer=recognizer,
            microphone=microphone,
            workdir=str(tmp_path),
            exporter=ReportExporter(logo_url=None),
        )
        options.update(kwargs)
        return SpeechCoach(**options)
    return factory


@pytest.fixture
def coach(make_coach, llm):
    return make_coach(llm)


@pytest.fixture
def resume_file(tmp_path):
    path = tmp_path / "resume.pdf"
    path.write_bytes(b"%PDF-1.4 mock resume")
    return str(path)
