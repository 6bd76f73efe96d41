"""
PICKPUSH Workspace — the git boundary.

The workflow only ever talks to git through the VersionStore
capability below. GitWorkspace is the real implementation and shells
out to the git CLI; tests swap in an in-memory store.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from loguru import logger

from pickpush.state import ChangeStatus, StatusEntry


class WorkspaceError(Exception):
    pass


class VersionStore(Protocol):
    """Primitive operations the workflow needs from version control."""

    def query_status(self, include_untracked: bool = True) -> list[StatusEntry]: ...

    def reset_index(self) -> None: ...

    def stage_all(self) -> None: ...

    def stage_path(self, path: str) -> None: ...

    def is_index_empty(self) -> bool: ...

    def staged_entries(self) -> list[StatusEntry]: ...

    def commit(self, message: str, no_verify: bool = False) -> str: ...

    def push(
        self,
        remote: str | None = None,
        branch: str | None = None,
        set_upstream: bool = False,
    ) -> None: ...


class GitWorkspace:
    """
    VersionStore backed by the git CLI, rooted at a working tree.
    """

    def __init__(self, repo_path: Path, timeout: int = 120):
        self.repo_path = repo_path.resolve()
        self.timeout = timeout

    def ensure_repository(self) -> None:
        """Check for a work tree and re-root every later git call at its top level."""
        try:
            top = self._git("rev-parse", "--show-toplevel", capture=True).strip()
        except WorkspaceError as e:
            raise WorkspaceError(f"Not a git repository: {self.repo_path}") from e
        if not top:
            raise WorkspaceError(f"Not a git repository: {self.repo_path}")

        # status reports paths relative to the top level, so add must run there too.
        if Path(top).resolve() != self.repo_path:
            logger.debug(f"[WORKSPACE] {self.repo_path} is inside {top}")
        self.repo_path = Path(top).resolve()

    def git_dir(self) -> Path:
        raw = self._git("rev-parse", "--git-dir", capture=True).strip()
        path = Path(raw)
        return path if path.is_absolute() else (self.repo_path / path).resolve()

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def query_status(self, include_untracked: bool = True) -> list[StatusEntry]:
        """Working tree + index status, in the order git reports it."""
        args = ["status", "--porcelain=v1", "-z"]
        if not include_untracked:
            args.append("--untracked-files=no")
        raw = self._git(*args, capture=True)
        entries = parse_porcelain(raw)
        logger.debug(f"[WORKSPACE] status: {len(entries)} entries")
        return entries

    def is_index_empty(self) -> bool:
        return self._probe("diff", "--cached", "--quiet") == 0

    def staged_entries(self) -> list[StatusEntry]:
        raw = self._git("diff", "--cached", "--name-status", "-z", capture=True)
        return parse_name_status(raw)

    def has_head(self) -> bool:
        return self._probe("rev-parse", "--verify", "--quiet", "HEAD") == 0

    # -----------------------------------------------------------------------
    # Index mutations
    # -----------------------------------------------------------------------

    def reset_index(self) -> None:
        """Unstage everything. Safe to call repeatedly."""
        if self.has_head():
            self._git("reset", "-q")
        else:
            # Unborn branch: there is no HEAD to reset to.
            self._git("read-tree", "--empty")
        logger.debug("[WORKSPACE] index reset")

    def stage_all(self) -> None:
        self._git("add", "-A")

    def stage_path(self, path: str) -> None:
        self._git("add", "-A", "--", path)

    # -----------------------------------------------------------------------
    # History
    # -----------------------------------------------------------------------

    def commit(self, message: str, no_verify: bool = False) -> str:
        cmd = ["commit", "-q", "-m", message]
        if no_verify:
            cmd.append("--no-verify")
        self._git(*cmd)
        sha = self._git("rev-parse", "HEAD", capture=True).strip()
        logger.info(f"[WORKSPACE] Committed {sha[:12]}")
        return sha

    def push(
        self,
        remote: str | None = None,
        branch: str | None = None,
        set_upstream: bool = False,
    ) -> None:
        cmd = ["push"]
        if set_upstream:
            cmd.append("-u")
        if remote:
            cmd.append(remote)
            if branch:
                cmd.append(branch)
        elif branch:
            cmd.extend(["origin", branch])

        self._git(*cmd)
        logger.info(f"[WORKSPACE] Pushed ({' '.join(cmd[1:]) or 'default upstream'})")

    # -----------------------------------------------------------------------
    # Plumbing
    # -----------------------------------------------------------------------

    def _git(self, *args: str, check: bool = True, capture: bool = False) -> str:
        return self._run_cmd(["git", *args], cwd=self.repo_path, check=check, capture=capture, timeout=self.timeout)

    def _probe(self, *args: str) -> int:
        """Run a git command for its exit status only."""
        cmd = ["git", *args]
        try:
            result = subprocess.run(cmd, cwd=self.repo_path, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise WorkspaceError(f"Git timed out after {self.timeout}s: {' '.join(cmd)}") from e
        return result.returncode

    @staticmethod
    def _run_cmd(cmd: list[str], cwd: Path, check: bool = True, capture: bool = False, timeout: int = 120) -> str:
        try:
            result = subprocess.run(
                cmd,
                cwd=cwd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise WorkspaceError(f"Git timed out after {timeout}s: {' '.join(cmd)}") from e
        except FileNotFoundError as e:
            raise WorkspaceError("git executable not found on PATH") from e

        if check and result.returncode != 0:
            stderr = (result.stderr or "").strip()
            raise WorkspaceError(f"Git failed: {' '.join(cmd)}\n{stderr}".rstrip())
        return result.stdout if capture else ""


# ---------------------------------------------------------------------------
# Output parsers
# ---------------------------------------------------------------------------

def parse_porcelain(raw: str) -> list[StatusEntry]:
    """
    Parse ``git status --porcelain=v1 -z`` output.

    Records are ``XY<space>path`` separated by NUL; renames and copies
    are followed by one extra NUL-terminated field holding the source path.
    """
    fields = raw.split("\0")
    entries: list[StatusEntry] = []
    i = 0
    while i < len(fields):
        item = fields[i]
        i += 1
        if len(item) < 4:
            continue

        code, path = item[:2], item[3:]
        orig = None
        if code[0] in "RC" or code[1] in "RC":
            if i < len(fields):
                orig = fields[i] or None
                i += 1

        entries.append(StatusEntry(ChangeStatus.from_code(code), path, orig))
    return entries


def parse_name_status(raw: str) -> list[StatusEntry]:
    """
    Parse ``git diff --name-status -z`` output.

    Each record is a status field followed by one path, or two paths
    (source then destination) for renames and copies.
    """
    fields = raw.split("\0")
    entries: list[StatusEntry] = []
    i = 0
    while i < len(fields):
        code = fields[i]
        i += 1
        if not code:
            continue

        if code[0] in "RC":
            if i + 1 >= len(fields):
                break
            orig, path = fields[i], fields[i + 1]
            i += 2
            entries.append(StatusEntry(ChangeStatus.from_code(code), path, orig))
        else:
            if i >= len(fields):
                break
            path = fields[i]
            i += 1
            entries.append(StatusEntry(ChangeStatus.from_code(code), path))
    return entries
