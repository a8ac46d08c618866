"""
Verbal Insights: AI speech coaching with structured feedback.

Analyzes a typed, streamed, recorded or uploaded speech sample in
Presentation, Interview or Rehearsal mode and renders a PDF report.
"""

__version__ = "1.0.0"

# Main entry points
from .coaching.coach import SpeechCoach
from .coaching.models import AnalysisMode, InputTab, SpeechSample
from .coaching.schemas import AnalysisResult

__all__ = ["SpeechCoach", "AnalysisMode", "InputTab", "SpeechSample", "AnalysisResult"]
