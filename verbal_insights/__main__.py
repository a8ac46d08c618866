#!/usr/bin/env python3
"""
Main entry point for the Verbal Insights speech coach.
Allows running the package with: python -m verbal_insights
"""
import sys
from typing import Dict, Optional

from .config import get_config
from .coaching.models import AnalysisMode, InputTab
from . import SpeechCoach

USAGE = """Usage: python -m verbal_insights [options]

  --mode=presentation|interview|rehearsal   Analysis context (default: presentation)
  --text="..."                              Speech sample as a typed transcript
  --audio=PATH                              Speech sample as an audio file
  --question="..." --answer="..."           Rehearsal question and perfect answer
  --resume=PATH                             Resume used to generate interview questions
  --pick=N                                  Interview question to answer (default: 1)
  --report[=PATH]                           Export the analysis as a PDF
  --summary                                 Also print a summary of the speech
"""


def _parse_args(argv) -> Dict[str, Optional[str]]:
    options: Dict[str, Optional[str]] = {}
    for arg in argv:
        if not arg.startswith("--"):
            continue
        key, sep, value = arg[2:].partition("=")
        options[key] = value if sep else None
    return options


def _flush_notifications(coach: SpeechCoach, seen: int) -> int:
    icons = {"info": "✅", "warning": "⚠️ ", "error": "❌"}
    for note in coach.notifications[seen:]:
        detail = f" - {note.description}" if note.description else ""
        print(f"{icons.get(note.level, '•')} {note.title}{detail}")
    return len(coach.notifications)


def main():
    """Command-line interface for the speech coach."""
    options = _parse_args(sys.argv[1:])
    if "help" in options or "h" in options:
        print(USAGE)
        return

    # Load configuration from environment
    try:
        config = get_config()
    except ValueError as e:
        print(f"❌ Configuration Error: {e}")
        sys.exit(1)

    try:
        mode = AnalysisMode.parse(options.get("mode") or "presentation")
    except ValueError as e:
        print(f"❌ {e}. Use --mode=presentation, --mode=interview or --mode=rehearsal")
        sys.exit(1)

    text = options.get("text")
    audio = options.get("audio")
    if not text and not audio:
        print("❌ Provide a speech sample with --text=\"...\" or --audio=PATH")
        print(USAGE)
        sys.exit(1)

    coach = SpeechCoach.from_config(config)
    seen = 0
    print(f"🎙️  Mode: {mode.value}")
    print(f"📝 Detailed logs: {config.log_file}")
    coach.change_mode(mode)

    if mode is AnalysisMode.REHEARSAL:
        coach.set_rehearsal_question(options.get("question") or "")
        coach.set_perfect_answer(options.get("answer") or "")

    elif mode is AnalysisMode.INTERVIEW:
        resume = options.get("resume")
        if not resume:
            print("❌ Interview mode needs a resume: --resume=PATH")
            sys.exit(1)

        print("📄 Extracting resume info...")
        intake = coach.upload_resume(resume)
        seen = _flush_notifications(coach, seen)
        if intake is None:
            sys.exit(1)

        print("🤔 Generating questions...")
        questions = coach.generate_questions()
        seen = _flush_notifications(coach, seen)
        if not questions:
            sys.exit(1)
        for i, q in enumerate(questions, 1):
            print(f"   {i}. {q.question}")

        try:
            pick = int(options.get("pick") or 1)
        except ValueError:
            print("❌ Invalid question number. Use --pick=1 to --pick=3")
            sys.exit(1)
        selected = coach.select_question(pick - 1)
        seen = _flush_notifications(coach, seen)
        if selected is None:
            sys.exit(1)
        print(f"❓ Answering: {selected.question}")

    if audio:
        coach.switch_input_tab(InputTab.UPLOAD)
        coach.upload_audio(audio)
    else:
        coach.switch_input_tab(InputTab.LIVE)
        coach.edit_transcript(text)
    seen = _flush_notifications(coach, seen)

    print("🔍 Analyzing speech...")
    result = coach.analyze()
    seen = _flush_notifications(coach, seen)
    if result is None:
        sys.exit(1)
    coach.display_result(result)

    if "summary" in options:
        summary = coach.summarize_transcript()
        seen = _flush_notifications(coach, seen)
        if summary:
            print(f"\n🧾 Summary: {summary}")

    if "report" in options:
        path = options.get("report") or config.report_path
        written = coach.export_report(path)
        seen = _flush_notifications(coach, seen)
        if written:
            print(f"📄 Report saved to: {written} ({coach.exporter.page_count} pages)")

    coach.close()


if __name__ == "__main__":
    main()
