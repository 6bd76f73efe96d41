import shutil
import subprocess
from pathlib import Path

import pytest

from pickpush.state import ChangeStatus, StatusEntry
from pickpush.workspace import WorkspaceError


class FakeStore:
    """In-memory VersionStore: a fixed list of changes plus an index."""

    def __init__(self, changes: list[StatusEntry] | None = None, staged: list[str] | None = None):
        self.changes: list[StatusEntry] = list(changes or [])
        self.index: dict[str, StatusEntry] = {}
        self.commits: list[tuple[str, list[str]]] = []
        self.pushes: list[dict] = []
        self.calls: list[str] = []
        self.fail_commit = False
        self.fail_push = False
        self.fail_stage = False
        for path in staged or []:
            self.index[path] = self._entry(path)

    def _entry(self, path: str) -> StatusEntry:
        for e in self.changes:
            if path in (e.path, e.orig_path):
                return e
        raise WorkspaceError(f"pathspec '{path}' did not match any files")

    def query_status(self, include_untracked: bool = True) -> list[StatusEntry]:
        self.calls.append("query_status")
        if include_untracked:
            return list(self.changes)
        return [e for e in self.changes if e.status is not ChangeStatus.UNTRACKED]

    def reset_index(self) -> None:
        self.calls.append("reset_index")
        self.index.clear()

    def stage_all(self) -> None:
        self.calls.append("stage_all")
        for e in self.changes:
            self.index[e.path] = e

    def stage_path(self, path: str) -> None:
        self.calls.append(f"stage_path:{path}")
        if self.fail_stage:
            raise WorkspaceError("index.lock exists")
        entry = self._entry(path)
        self.index[entry.path] = entry

    def is_index_empty(self) -> bool:
        return not self.index

    def staged_entries(self) -> list[StatusEntry]:
        return [e for e in self.changes if e.path in self.index]

    def commit(self, message: str, no_verify: bool = False) -> str:
        self.calls.append("commit")
        if self.fail_commit:
            raise WorkspaceError("pre-commit hook rejected the commit")
        if not self.index:
            raise WorkspaceError("nothing to commit")
        paths = list(self.index)
        self.commits.append((message, paths))
        self.changes = [e for e in self.changes if e.path not in self.index]
        self.index.clear()
        return f"{len(self.commits):040x}"

    def push(self, remote=None, branch=None, set_upstream=False) -> None:
        self.calls.append("push")
        if self.fail_push:
            raise WorkspaceError("! [rejected] main -> main (fetch first)")
        self.pushes.append({"remote": remote, "branch": branch, "set_upstream": set_upstream})


@pytest.fixture
def three_changes() -> list[StatusEntry]:
    return [
        StatusEntry(ChangeStatus.MODIFIED, "a.txt"),
        StatusEntry(ChangeStatus.UNTRACKED, "b.txt"),
        StatusEntry(ChangeStatus.DELETED, "c.txt"),
    ]


@pytest.fixture
def store(three_changes) -> FakeStore:
    return FakeStore(three_changes)


# ---------------------------------------------------------------------------
# Real git
# ---------------------------------------------------------------------------

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return result.stdout


@pytest.fixture
def git_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(tmp_path / "gitconfig"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for var in ("PICKPUSH_REMOTE", "PICKPUSH_BRANCH", "PICKPUSH_NO_VERIFY", "PICKPUSH_GIT_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def repo(tmp_path, git_env) -> Path:
    """A repository with one commit, tracking a bare 'origin' on branch main."""
    remote = tmp_path / "remote.git"
    work = tmp_path / "work"
    remote.mkdir()
    work.mkdir()

    git(remote, "init", "-q", "--bare", "-b", "main")
    git(work, "init", "-q", "-b", "main")
    (work / "a.txt").write_text("a\n")
    (work / "c.txt").write_text("c\n")
    git(work, "add", "-A")
    git(work, "commit", "-q", "-m", "initial")
    git(work, "remote", "add", "origin", str(remote))
    git(work, "push", "-q", "-u", "origin", "main")
    return work
