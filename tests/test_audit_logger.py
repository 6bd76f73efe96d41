import json

from pickpush.audit_logger import AuditLogger
from pickpush.event_bus import EventBus


def test_events_are_appended_as_jsonl(tmp_path):
    bus = EventBus()
    log_file = tmp_path / "logs" / "audit.jsonl"
    AuditLogger(str(log_file), bus)

    bus.emit("path_staged", "staging", {"index": 1, "path": "a.txt"})
    bus.emit("committed", "commit", {"sha": "abc"})

    lines = log_file.read_text().splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event_type"] == "path_staged"
    assert first["payload"] == {"index": 1, "path": "a.txt"}
    assert json.loads(lines[1])["stage"] == "commit"
