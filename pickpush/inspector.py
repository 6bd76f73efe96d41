"""
PICKPUSH Change-Set Inspector

Takes the one and only snapshot of the working tree for an invocation.
Indices are assigned here and never change afterwards; later steps look
statuses and paths up in this snapshot instead of asking git again.
"""

from __future__ import annotations

from loguru import logger

from pickpush.errors import NoChangesError
from pickpush.state import Snapshot
from pickpush.workspace import VersionStore


class ChangeSetInspector:

    def __init__(self, store: VersionStore, include_untracked: bool = True):
        self.store = store
        self.include_untracked = include_untracked

    def snapshot(self) -> Snapshot:
        entries = self.store.query_status(include_untracked=self.include_untracked)
        if not entries:
            raise NoChangesError("Working tree and index are clean. Nothing to commit.")

        snap = Snapshot.from_entries(entries)
        logger.info(f"[INSPECT] Snapshot taken: {len(snap)} changes")
        for rec in snap:
            logger.debug(f"[INSPECT] {rec.index:>3} {rec.status.value:<9} {rec.path}")
        return snap
