"""
PICKPUSH State — the values that flow through one invocation.

Everything here is immutable once built. The snapshot is taken once
and never renumbered; the staged set is read from the index once
staging is finished.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterator, Literal, NamedTuple, Union

from pydantic import BaseModel, ConfigDict, Field


class ChangeStatus(str, Enum):
    MODIFIED = "modified"
    ADDED = "added"
    DELETED = "deleted"
    UNTRACKED = "untracked"
    RENAMED = "renamed"
    OTHER = "other"

    @classmethod
    def from_code(cls, code: str) -> "ChangeStatus":
        """
        Map a porcelain ``XY`` code (or a single ``--name-status`` letter)
        to a status. The first non-blank column wins, so ``AM`` is added
        and `` D`` is deleted.
        """
        if code == "??":
            return cls.UNTRACKED

        letter = code.strip()[:1]
        return {
            "M": cls.MODIFIED,
            "T": cls.MODIFIED,
            "A": cls.ADDED,
            "D": cls.DELETED,
            "R": cls.RENAMED,
            "C": cls.RENAMED,
        }.get(letter, cls.OTHER)


class StatusEntry(NamedTuple):
    status: ChangeStatus
    path: str
    orig_path: str | None = None


class Mode(str, Enum):
    ALL = "all"
    STAGED = "staged"
    SELECTIVE = "selective"


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

class ChangeRecord(BaseModel):
    """One numbered line of the snapshot."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1)
    status: ChangeStatus
    path: str
    orig_path: str | None = None

    @property
    def paths(self) -> tuple[str, ...]:
        """Every path that has to be staged to record this change."""
        if self.orig_path and self.orig_path != self.path:
            return (self.path, self.orig_path)
        return (self.path,)


class Snapshot(BaseModel):
    """Ordered, immutable list of change records for one invocation."""
    model_config = ConfigDict(frozen=True)

    records: tuple[ChangeRecord, ...] = ()

    @classmethod
    def from_entries(cls, entries: list[StatusEntry]) -> "Snapshot":
        return cls(records=tuple(
            ChangeRecord(index=i, status=e.status, path=e.path, orig_path=e.orig_path)
            for i, e in enumerate(entries, start=1)
        ))

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ChangeRecord]:  # type: ignore[override]
        return iter(self.records)

    def get(self, index: int) -> ChangeRecord | None:
        if 1 <= index <= len(self.records):
            return self.records[index - 1]
        return None

    def select(self, indices: frozenset[int] | set[int]) -> list[ChangeRecord]:
        """Records whose index is in ``indices``, in ascending index order."""
        return [r for r in self.records if r.index in indices]


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class Cancelled(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["cancelled"] = "cancelled"


class SelectAll(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["all"] = "all"


class Indices(BaseModel):
    model_config = ConfigDict(frozen=True)
    kind: Literal["indices"] = "indices"
    values: frozenset[int] = frozenset()

    @property
    def empty(self) -> bool:
        return not self.values


ParsedSelection = Union[Cancelled, SelectAll, Indices]


# ---------------------------------------------------------------------------
# Staging + commit results
# ---------------------------------------------------------------------------

class StagedSet(BaseModel):
    """The index as it stands right before commit."""
    model_config = ConfigDict(frozen=True)

    entries: tuple[StatusEntry, ...] = ()

    @property
    def paths(self) -> list[str]:
        return [e.path for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


class CommitResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    sha: str
    pushed: bool = False
    remote: str | None = None
    branch: str | None = None


class RunOptions(BaseModel):
    """Per-invocation choices made on the command line."""
    model_config = ConfigDict(frozen=True)

    repo: Path
    mode: Mode = Mode.SELECTIVE
    message: str | None = None


class TerminalState(str, Enum):
    NO_CHANGES = "no_changes"
    CANCELLED = "cancelled"
    EMPTY_STAGE = "empty_stage"
    EMPTY_SELECTION = "empty_selection"
    STAGING_FAILED = "staging_failed"
    COMMIT_FAILED = "commit_failed"
    PUSH_FAILED = "push_failed"
    REPO_ERROR = "repo_error"
    PUSHED = "pushed"


class RunResult(BaseModel):
    """Terminal report of one invocation."""
    model_config = ConfigDict(frozen=True)

    state: TerminalState
    exit_code: int
    detail: str
    warning: bool = False
    staged: StagedSet | None = None
    commit: CommitResult | None = None

    @property
    def ok(self) -> bool:
        return self.exit_code == 0
