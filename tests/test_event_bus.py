from pickpush.event_bus import EventBus, WorkflowEvent


def test_event_bus_pub_sub():
    test_bus = EventBus()
    received_events: list[WorkflowEvent] = []

    def dummy_subscriber(event: WorkflowEvent):
        received_events.append(event)

    # Subscribe to the bus
    test_bus.subscribe(dummy_subscriber)

    # Emit an event
    test_bus.emit(
        event_type="path_staged",
        stage="staging",
        payload={"path": "a.txt"}
    )

    # Verify the event was received and formatted correctly
    assert len(received_events) == 1

    event = received_events[0]
    assert event.event_type == "path_staged"
    assert event.stage == "staging"
    assert event.payload == {"path": "a.txt"}

    # Verify auto-generated fields
    assert event.event_id is not None
    assert isinstance(event.event_id, str)
    assert event.timestamp is not None


def test_failing_subscriber_does_not_stop_others():
    test_bus = EventBus()
    received: list[str] = []

    def broken(event: WorkflowEvent):
        raise OSError("disk full")

    test_bus.subscribe(broken)
    test_bus.subscribe(lambda e: received.append(e.event_type))

    test_bus.emit("committed", "commit", {})
    assert received == ["committed"]
