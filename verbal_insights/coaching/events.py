"""
Event-driven communication for the coaching session.
"""
import logging
from abc import ABC
from typing import Dict, Any, List, Callable, Optional
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger("events")


class EventType(str, Enum):
    """Types of coaching events."""
    MODE_CHANGED = "mode_changed"
    INPUT_TAB_CHANGED = "input_tab_changed"
    SAMPLE_UPDATED = "sample_updated"
    RESUME_EXTRACTED = "resume_extracted"
    QUESTIONS_GENERATED = "questions_generated"
    QUESTION_SELECTED = "question_selected"
    ANALYSIS_COMPLETED = "analysis_completed"
    REPORT_EXPORTED = "report_exported"
    NOTIFICATION = "notification"
    ERROR_OCCURRED = "error_occurred"


@dataclass
class CoachingEvent(ABC):
    """Base class for all coaching events."""
    event_type: EventType
    session_id: str
    timestamp: float
    data: Dict[str, Any]


@dataclass
class ModeChangedEvent(CoachingEvent):
    def __init__(self, session_id: str, timestamp: float, mode: str):
        super().__init__(
            event_type=EventType.MODE_CHANGED,
            session_id=session_id,
            timestamp=timestamp,
            data={"mode": mode}
        )


@dataclass
class InputTabChangedEvent(CoachingEvent):
    def __init__(self, session_id: str, timestamp: float, tab: str):
        super().__init__(
            event_type=EventType.INPUT_TAB_CHANGED,
            session_id=session_id,
            timestamp=timestamp,
            data={"tab": tab}
        )


@dataclass
class SampleUpdatedEvent(CoachingEvent):
    """Event fired when the speech sample is set or cleared."""
    def __init__(self, session_id: str, timestamp: float, kind: Optional[str], length: int):
        super().__init__(
            event_type=EventType.SAMPLE_UPDATED,
            session_id=session_id,
            timestamp=timestamp,
            data={"kind": kind, "length": length}
        )


@dataclass
class ResumeExtractedEvent(CoachingEvent):
    def __init__(self, session_id: str, timestamp: float, file_name: str,
                 sections: List[str], text_length: int):
        super().__init__(
            event_type=EventType.RESUME_EXTRACTED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "file_name": file_name,
                "sections": sections,
                "text_length": text_length
            }
        )


@dataclass
class QuestionsGeneratedEvent(CoachingEvent):
    def __init__(self, session_id: str, timestamp: float, questions: List[str]):
        super().__init__(
            event_type=EventType.QUESTIONS_GENERATED,
            session_id=session_id,
            timestamp=timestamp,
            data={"questions": questions, "count": len(questions)}
        )


@dataclass
class QuestionSelectedEvent(CoachingEvent):
    def __init__(self, session_id: str, timestamp: float, index: int, question: str):
        super().__init__(
            event_type=EventType.QUESTION_SELECTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"index": index, "question": question}
        )


@dataclass
class AnalysisCompletedEvent(CoachingEvent):
    """Event fired when the evaluator returns a result."""
    def __init__(self, session_id: str, timestamp: float, display_mode: str,
                 evaluation_mode: str, total_score: float, filler_word_count: int):
        super().__init__(
            event_type=EventType.ANALYSIS_COMPLETED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "display_mode": display_mode,
                "evaluation_mode": evaluation_mode,
                "total_score": total_score,
                "filler_word_count": filler_word_count
            }
        )


@dataclass
class ReportExportedEvent(CoachingEvent):
    def __init__(self, session_id: str, timestamp: float, path: Optional[str],
                 size_bytes: int, page_count: int):
        super().__init__(
            event_type=EventType.REPORT_EXPORTED,
            session_id=session_id,
            timestamp=timestamp,
            data={"path": path, "size_bytes": size_bytes, "page_count": page_count}
        )


@dataclass
class NotificationEvent(CoachingEvent):
    """Event fired for every message shown to the user."""
    def __init__(self, session_id: str, timestamp: float, level: str, title: str, description: str):
        super().__init__(
            event_type=EventType.NOTIFICATION,
            session_id=session_id,
            timestamp=timestamp,
            data={"level": level, "title": title, "description": description}
        )


@dataclass
class ErrorOccurredEvent(CoachingEvent):
    """Event fired when an error occurs."""
    def __init__(self, session_id: str, timestamp: float, error_type: str,
                 error_message: str, component: str):
        super().__init__(
            event_type=EventType.ERROR_OCCURRED,
            session_id=session_id,
            timestamp=timestamp,
            data={
                "error_type": error_type,
                "error_message": error_message,
                "component": component
            }
        )


EventHandler = Callable[[CoachingEvent], None]


class CoachingEventBus:
    """Event bus for coaching session communication."""

    def __init__(self):
        self._handlers: Dict[EventType, List[EventHandler]] = {}
        self._global_handlers: List[EventHandler] = []

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """
        Subscribe to specific event type.

        Args:
            event_type: Type of event to listen for
            handler: Function to call when event occurs
        """
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(f"Subscribed handler to {event_type}")

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)
        logger.debug("Subscribed global handler")

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        if event_type in self._handlers:
            try:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Unsubscribed handler from {event_type}")
            except ValueError:
                logger.warning(f"Handler not found for {event_type}")

    def emit(self, event: CoachingEvent) -> None:
        """
        Emit an event to all subscribers.
        A failing handler is logged and never stops the others.
        """
        logger.debug(f"Emitting event: {event.event_type} for session {event.session_id}")

        for handler in self._handlers.get(event.event_type, []):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.event_type}: {e}")

        for handler in self._global_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in global event handler: {e}")

    def clear_handlers(self) -> None:
        self._handlers.clear()
        self._global_handlers.clear()
        logger.debug("Cleared all event handlers")


class EventLogger:
    """Logs all events for debugging and analysis."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger("event_logger")
        self.logger.setLevel(log_level)

    def handle_event(self, event: CoachingEvent) -> None:
        self.logger.info(f"Event: {event.event_type.value} | Session: {event.session_id} | Data: {event.data}")


class SessionMetrics:
    """Collects metrics from coaching events."""

    _COUNTERS = {
        EventType.ANALYSIS_COMPLETED: "analyses_completed",
        EventType.RESUME_EXTRACTED: "resumes_extracted",
        EventType.QUESTIONS_GENERATED: "question_sets_generated",
        EventType.REPORT_EXPORTED: "reports_exported",
        EventType.MODE_CHANGED: "mode_changes",
        EventType.ERROR_OCCURRED: "errors_occurred",
    }

    def __init__(self):
        self.reset()

    def handle_event(self, event: CoachingEvent) -> None:
        """Update metrics based on event."""
        name = self._COUNTERS.get(event.event_type)
        if name:
            self._counts[name] += 1

    def get_metrics(self) -> Dict[str, int]:
        """Get current metrics snapshot."""
        return dict(self._counts)

    def reset(self) -> None:
        self._counts: Dict[str, int] = {name: 0 for name in self._COUNTERS.values()}
