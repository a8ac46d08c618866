from verbal_insights.coaching.events import (
    AnalysisCompletedEvent, CoachingEventBus, ErrorOccurredEvent, EventType,
    ModeChangedEvent, SessionMetrics,
)


def test_specific_and_global_handlers():
    bus = CoachingEventBus()
    specific, everything = [], []
    bus.subscribe(EventType.MODE_CHANGED, specific.append)
    bus.subscribe_all(everything.append)

    bus.emit(ModeChangedEvent("s1", 0.0, "Interview Mode"))
    bus.emit(ErrorOccurredEvent("s1", 0.0, "ServiceError", "boom", "analysis"))

    assert [e.data["mode"] for e in specific] == ["Interview Mode"]
    assert [e.event_type for e in everything] == [EventType.MODE_CHANGED, EventType.ERROR_OCCURRED]


def test_failing_handler_does_not_stop_others():
    bus = CoachingEventBus()
    received = []

    def broken(event):
        raise RuntimeError("handler bug")

    bus.subscribe(EventType.MODE_CHANGED, broken)
    bus.subscribe_all(received.append)

    bus.emit(ModeChangedEvent("s1", 0.0, "Rehearsal Mode"))

    assert len(received) == 1


def test_unsubscribe():
    bus = CoachingEventBus()
    received = []
    bus.subscribe(EventType.MODE_CHANGED, received.append)
    bus.unsubscribe(EventType.MODE_CHANGED, received.append)

    bus.emit(ModeChangedEvent("s1", 0.0, "Rehearsal Mode"))

    assert received == []


def test_metrics_counts_and_resets():
    metrics = SessionMetrics()
    metrics.handle_event(AnalysisCompletedEvent("s1", 0.0, "Interview Mode", "Rehearsal Mode", 80, 3))
    metrics.handle_event(AnalysisCompletedEvent("s1", 0.0, "Presentation Mode", "Presentation Mode", 70, 0))

    assert metrics.get_metrics()["analyses_completed"] == 2

    metrics.reset()
    assert metrics.get_metrics()["analyses_completed"] == 0
