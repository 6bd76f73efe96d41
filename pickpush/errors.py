"""
Workflow error taxonomy.

Every error maps to exactly one terminal state and exit code. The
controller is the only place these are caught.
"""

from __future__ import annotations

from pickpush.state import CommitResult, TerminalState


class PickPushError(Exception):
    exit_code: int = 1
    terminal_state: TerminalState = TerminalState.STAGING_FAILED
    warning: bool = False


class NoChangesError(PickPushError):
    """Index and working tree are both clean."""
    exit_code = 0
    terminal_state = TerminalState.NO_CHANGES


class UserCancelledError(PickPushError):
    exit_code = 0
    terminal_state = TerminalState.CANCELLED


class EmptyStageError(PickPushError):
    """Nothing is staged when a commit is about to be made."""
    exit_code = 0
    terminal_state = TerminalState.EMPTY_STAGE
    warning = True


class EmptySelectionError(PickPushError):
    """The selection text named no valid index."""
    exit_code = 0
    terminal_state = TerminalState.EMPTY_SELECTION
    warning = True


class StagingError(PickPushError):
    terminal_state = TerminalState.STAGING_FAILED


class CommitError(PickPushError):
    terminal_state = TerminalState.COMMIT_FAILED


class PushError(PickPushError):
    """Push failed after a successful commit. The commit stays local."""
    terminal_state = TerminalState.PUSH_FAILED

    def __init__(self, message: str, commit: CommitResult | None = None):
        super().__init__(message)
        self.commit = commit
