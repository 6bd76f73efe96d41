import pytest

from pickpush.errors import NoChangesError
from pickpush.inspector import ChangeSetInspector
from pickpush.state import ChangeStatus

from conftest import FakeStore


def test_snapshot_records(store):
    snap = ChangeSetInspector(store).snapshot()
    assert [(r.index, r.status, r.path) for r in snap] == [
        (1, ChangeStatus.MODIFIED, "a.txt"),
        (2, ChangeStatus.UNTRACKED, "b.txt"),
        (3, ChangeStatus.DELETED, "c.txt"),
    ]


def test_snapshot_is_read_only(store):
    ChangeSetInspector(store).snapshot()
    assert store.calls == ["query_status"]
    assert store.index == {}


def test_clean_tree_raises_no_changes():
    with pytest.raises(NoChangesError) as exc:
        ChangeSetInspector(FakeStore([])).snapshot()
    assert exc.value.exit_code == 0


def test_untracked_can_be_excluded(store):
    snap = ChangeSetInspector(store, include_untracked=False).snapshot()
    assert [(r.index, r.path) for r in snap] == [(1, "a.txt"), (2, "c.txt")]


def test_only_untracked_and_excluded_is_clean(three_changes):
    untracked_only = FakeStore([e for e in three_changes if e.status is ChangeStatus.UNTRACKED])
    with pytest.raises(NoChangesError):
        ChangeSetInspector(untracked_only, include_untracked=False).snapshot()
