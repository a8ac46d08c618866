import os

import pytest

from verbal_insights.config import (
    Config, REPORT_FILENAME, RECORDING_FILENAME, get_config,
)


def test_requires_project(monkeypatch):
    monkeypatch.delenv("GOOGLE_CLOUD_PROJECT", raising=False)
    with pytest.raises(ValueError):
        get_config()


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "demo-project")
    monkeypatch.setenv("VERBAL_INSIGHTS_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("VERBAL_INSIGHTS_LOG_LEVEL", "INFO")
    monkeypatch.delenv("VERBAL_INSIGHTS_LOGO_URL", raising=False)

    config = get_config()

    assert config.google_cloud_project == "demo-project"
    assert config.model_name == "gemini-2.5-pro"
    assert config.log_level == "INFO"
    assert config.report_logo_url is None


def test_default_paths_live_in_workdir():
    config = Config(google_cloud_project="p", workdir="/tmp/coach")
    assert config.report_path == os.path.join("/tmp/coach", REPORT_FILENAME)
    assert config.recording_path == os.path.join("/tmp/coach", RECORDING_FILENAME)
