"""
PICKPUSH Commit/Push Pipeline

message → commit → push. Each step either succeeds or ends the run:
a failed commit means no push; a failed push keeps the local commit.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from loguru import logger

from pickpush.config_loader import CommitConfig, PushConfig
from pickpush.errors import CommitError, EmptyStageError, PushError
from pickpush.event_bus import EventBus
from pickpush.state import CommitResult, StagedSet
from pickpush.workspace import VersionStore, WorkspaceError


class CommitPushPipeline:

    def __init__(
        self,
        store: VersionStore,
        commit_config: CommitConfig | None = None,
        push_config: PushConfig | None = None,
        ask_message: Callable[[], str] | None = None,
        bus: EventBus | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.commit_config = commit_config or CommitConfig()
        self.push_config = push_config or PushConfig()
        self.ask_message = ask_message
        self.bus = bus or EventBus()
        self.clock = clock

    def run(self, staged: StagedSet, message: str | None = None) -> CommitResult:
        if not staged:
            raise EmptyStageError("The index is empty. Nothing to commit.")

        resolved = self.resolve_message(message)

        try:
            sha = self.store.commit(resolved, no_verify=self.commit_config.no_verify)
        except WorkspaceError as e:
            logger.error(f"[PIPELINE] Commit failed: {e}")
            raise CommitError(f"Commit failed: {e}") from e

        result = CommitResult(
            message=resolved,
            sha=sha,
            remote=self.push_config.remote,
            branch=self.push_config.branch,
        )
        self.bus.emit("committed", "commit", {"sha": sha, "message": resolved, "files": staged.paths})

        self.bus.emit("push_started", "push", {"remote": self.push_config.remote, "branch": self.push_config.branch})
        try:
            self.store.push(
                remote=self.push_config.remote,
                branch=self.push_config.branch,
                set_upstream=self.push_config.set_upstream,
            )
        except WorkspaceError as e:
            logger.error(f"[PIPELINE] Push failed, commit {sha[:12]} stays local: {e}")
            self.bus.emit("push_failed", "push", {"sha": sha, "error": str(e)})
            raise PushError(f"Push failed: {e}", commit=result) from e

        result = result.model_copy(update={"pushed": True})
        self.bus.emit("pushed", "push", {
            "sha": sha,
            "remote": self.push_config.remote,
            "branch": self.push_config.branch,
        })
        return result

    def resolve_message(self, message: str | None) -> str:
        """
        Preset message, else the operator's answer, else the timestamped default.
        """
        if message and message.strip():
            return message.strip()

        answer = ""
        if self.ask_message is not None:
            answer = (self.ask_message() or "").strip()
        if answer:
            return answer

        return self.default_message()

    def default_message(self) -> str:
        stamp = self.clock().strftime(self.commit_config.timestamp_format)
        msg = self.commit_config.default_message.format(timestamp=stamp)
        logger.warning(f"[PIPELINE] Using default commit message: {msg}")
        return msg
