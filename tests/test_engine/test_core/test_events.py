import gc
import logging
import pytest
from enum import Enum, auto
from engine.core.events import EventBus, Event, EngineEvent

class MockEvent(Enum):
    TEST_EVENT = auto()
    OTHER_EVENT = auto()

def test_event_bus_subscribe_publish(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT, amount=12)

    assert len(received) == 1
    assert received[0].type == MockEvent.TEST_EVENT
    assert received[0].data["amount"] == 12
    assert received[0]["amount"] == 12
    assert received[0].get("missing", "default") == "default"

def test_event_bus_unsubscribe(event_bus):
    received = []
    def handler(event):
        received.append(event)

    event_bus.subscribe(MockEvent.TEST_EVENT, handler)
    event_bus.unsubscribe(MockEvent.TEST_EVENT, handler)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 0

def test_event_priority(event_bus):
    order = []

    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("low"), priority=1, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("high"), priority=10, weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("normal"), priority=5, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["high", "normal", "low"]

def test_event_consumption(event_bus):
    received = []

    def consumer(event):
        received.append("consumer")
        event.consume()

    def later_handler(event):
        received.append("later")

    event_bus.subscribe(MockEvent.TEST_EVENT, consumer, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, later_handler, priority=5)

    event = event_bus.publish(MockEvent.TEST_EVENT)

    assert received == ["consumer"]
    assert event.consumed

def test_one_shot_handler(event_bus):
    received = []
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, one_shot=True, weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1

def test_events_published_during_dispatch_are_queued(event_bus):
    order = []

    def on_test(event):
        order.append("test start")
        event_bus.publish(MockEvent.OTHER_EVENT)
        order.append("test end")

    event_bus.subscribe(MockEvent.TEST_EVENT, on_test)
    event_bus.subscribe(MockEvent.OTHER_EVENT, lambda e: order.append("other"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["test start", "test end", "other"]

def test_handler_error_is_logged_and_dispatch_continues(event_bus, caplog):
    received = []

    def broken(event):
        raise RuntimeError("boom")

    event_bus.subscribe(MockEvent.TEST_EVENT, broken, priority=10)
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, weak=False)

    with caplog.at_level(logging.ERROR, logger="engine.core.events"):
        event_bus.publish(MockEvent.TEST_EVENT)

    assert len(received) == 1
    assert "Error in event handler" in caplog.text

def test_weak_method_handler_is_dropped(event_bus):
    class Listener:
        def __init__(self):
            self.count = 0

        def on_event(self, event):
            self.count += 1

    listener = Listener()
    event_bus.subscribe(MockEvent.TEST_EVENT, listener.on_event)
    event_bus.publish(MockEvent.TEST_EVENT)
    assert listener.count == 1

    del listener
    gc.collect()
    event_bus.publish(MockEvent.TEST_EVENT)

    assert event_bus._handlers[MockEvent.TEST_EVENT] == []

def test_subscribe_all_covers_whole_enum(event_bus):
    received = []
    event_bus.subscribe_all(EngineEvent, received.append, weak=False)

    for event_type in EngineEvent:
        event_bus.publish(event_type)

    assert [event.type for event in received] == list(EngineEvent)

def test_clear_single_type(event_bus):
    received = []
    event_bus.subscribe(MockEvent.TEST_EVENT, received.append, weak=False)
    event_bus.subscribe(MockEvent.OTHER_EVENT, received.append, weak=False)

    event_bus.clear(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.TEST_EVENT)
    event_bus.publish(MockEvent.OTHER_EVENT)

    assert [event.type for event in received] == [MockEvent.OTHER_EVENT]

def test_event_defaults():
    event = Event(type=MockEvent.TEST_EVENT)
    assert event.data == {}
    assert not event.consumed

def test_equal_priority_keeps_subscription_order(event_bus):
    order = []
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("first"), weak=False)
    event_bus.subscribe(MockEvent.TEST_EVENT, lambda e: order.append("second"), weak=False)

    event_bus.publish(MockEvent.TEST_EVENT)

    assert order == ["first", "second"]
