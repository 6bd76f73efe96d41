"""
PICKPUSH Staging Orchestrator

Decides what goes into the index for one invocation:

  - all        stage every working-tree change (new files included)
  - staged     touch nothing; the index must already hold something
  - selective  reset the index, then stage exactly the picked records

It owns the index between snapshot and commit. It never edits the
snapshot or the selection.
"""

from __future__ import annotations

from loguru import logger

from pickpush.errors import (
    EmptySelectionError,
    EmptyStageError,
    StagingError,
    UserCancelledError,
)
from pickpush.event_bus import EventBus
from pickpush.selection import describe
from pickpush.state import (
    Cancelled,
    Indices,
    Mode,
    ParsedSelection,
    SelectAll,
    Snapshot,
    StagedSet,
)
from pickpush.workspace import VersionStore, WorkspaceError


class StagingOrchestrator:

    def __init__(self, store: VersionStore, bus: EventBus | None = None, reset_on_cancel: bool = True):
        self.store = store
        self.bus = bus or EventBus()
        self.reset_on_cancel = reset_on_cancel

    def apply(self, mode: Mode, selection: ParsedSelection | None, snapshot: Snapshot) -> StagedSet:
        """
        Apply ``mode`` and return the resulting staged set.

        Raises UserCancelledError, EmptySelectionError or EmptyStageError for
        the operator-level outcomes and StagingError when git itself fails.
        """
        try:
            if mode is Mode.ALL:
                logger.info("[STAGE] Mode: all")
                self.store.stage_all()
                self.bus.emit("staged_all", "staging", {"mode": mode.value})
            elif mode is Mode.STAGED:
                logger.info("[STAGE] Mode: staged only")
                if self.store.is_index_empty():
                    raise EmptyStageError("The index is empty. Nothing to commit.")
            else:
                self._apply_selection(selection, snapshot)

            staged = StagedSet(entries=tuple(self.store.staged_entries()))
        except WorkspaceError as e:
            raise StagingError(f"Staging failed: {e}") from e

        if not staged:
            raise EmptyStageError("The index is empty. Nothing to commit.")

        self.bus.emit("staging_done", "staging", {"count": len(staged), "paths": staged.paths})
        return staged

    def _apply_selection(self, selection: ParsedSelection | None, snapshot: Snapshot) -> None:
        if not isinstance(selection, (Cancelled, SelectAll, Indices)):
            raise StagingError(f"Selective mode needs a parsed selection, got {selection!r}")

        logger.info(f"[STAGE] Mode: selective ({describe(selection)})")

        if isinstance(selection, Cancelled):
            if self.reset_on_cancel:
                self.store.reset_index()
            self.bus.emit("cancelled", "staging", {"index_reset": self.reset_on_cancel})
            raise UserCancelledError("Commit cancelled.")

        # Selective staging is never additive across runs.
        self.store.reset_index()
        self.bus.emit("index_reset", "staging", {})

        if isinstance(selection, SelectAll):
            self.store.stage_all()
            self.bus.emit("staged_all", "staging", {"mode": Mode.SELECTIVE.value})
            return

        records = snapshot.select(selection.values)
        for rec in records:
            for path in rec.paths:
                self.store.stage_path(path)
            logger.debug(f"[STAGE] + {rec.path}")
            self.bus.emit("path_staged", "staging", {
                "index": rec.index,
                "path": rec.path,
                "status": rec.status.value,
            })

        if not records:
            raise EmptySelectionError("No valid files were selected.")
