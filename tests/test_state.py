import pytest
from pydantic import ValidationError

from pickpush.state import ChangeRecord, ChangeStatus, Snapshot, StagedSet, StatusEntry


@pytest.mark.parametrize("code, status", [
    (" M", ChangeStatus.MODIFIED),
    ("M ", ChangeStatus.MODIFIED),
    ("MM", ChangeStatus.MODIFIED),
    ("A ", ChangeStatus.ADDED),
    ("AM", ChangeStatus.ADDED),
    (" D", ChangeStatus.DELETED),
    ("R ", ChangeStatus.RENAMED),
    ("R100", ChangeStatus.RENAMED),
    ("??", ChangeStatus.UNTRACKED),
    ("UU", ChangeStatus.OTHER),
    ("!!", ChangeStatus.OTHER),
])
def test_status_from_code(code, status):
    assert ChangeStatus.from_code(code) is status


def test_snapshot_numbers_from_one_in_reported_order():
    snap = Snapshot.from_entries([
        StatusEntry(ChangeStatus.MODIFIED, "z.txt"),
        StatusEntry(ChangeStatus.UNTRACKED, "a.txt"),
    ])
    assert [(r.index, r.path) for r in snap] == [(1, "z.txt"), (2, "a.txt")]
    assert len(snap) == 2
    assert snap.get(2).path == "a.txt"
    assert snap.get(0) is None
    assert snap.get(3) is None


def test_snapshot_select_is_index_ordered():
    snap = Snapshot.from_entries([StatusEntry(ChangeStatus.MODIFIED, f"{n}.txt") for n in range(5)])
    assert [r.index for r in snap.select({5, 1, 3, 9})] == [1, 3, 5]


def test_snapshot_is_immutable():
    snap = Snapshot.from_entries([StatusEntry(ChangeStatus.MODIFIED, "a.txt")])
    with pytest.raises(ValidationError):
        snap.records = ()
    with pytest.raises(ValidationError):
        snap.records[0].index = 7


def test_rename_record_paths():
    rec = ChangeRecord(index=1, status=ChangeStatus.RENAMED, path="new.py", orig_path="old.py")
    assert rec.paths == ("new.py", "old.py")
    assert ChangeRecord(index=1, status=ChangeStatus.MODIFIED, path="a").paths == ("a",)


def test_staged_set_truthiness():
    assert not StagedSet()
    staged = StagedSet(entries=(StatusEntry(ChangeStatus.ADDED, "a"),))
    assert staged and len(staged) == 1
    assert staged.paths == ["a"]
