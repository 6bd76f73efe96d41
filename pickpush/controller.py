"""
PICKPUSH Controller — the workflow

  inspecting → mode dispatch → staging → committing → pushing

It is deterministic and it never retries. Every step either moves
the run forward or ends it; whatever ends it is caught here and
turned into one RunResult. Nothing escapes past run().
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from pickpush.audit_logger import AuditLogger
from pickpush.config_loader import PickPushConfig
from pickpush.errors import PickPushError, PushError
from pickpush.event_bus import EventBus, WorkflowEvent
from pickpush.inspector import ChangeSetInspector
from pickpush.orchestrator import StagingOrchestrator
from pickpush.pipeline import CommitPushPipeline
from pickpush.selection import parse
from pickpush.state import (
    ChangeStatus,
    CommitResult,
    Mode,
    ParsedSelection,
    RunOptions,
    RunResult,
    Snapshot,
    StagedSet,
    TerminalState,
)
from pickpush.workspace import GitWorkspace, VersionStore, WorkspaceError

STATUS_STYLE = {
    ChangeStatus.MODIFIED: ("modified", "yellow"),
    ChangeStatus.ADDED: ("added", "green"),
    ChangeStatus.DELETED: ("deleted", "red"),
    ChangeStatus.UNTRACKED: ("untracked", "blue"),
    ChangeStatus.RENAMED: ("renamed", "magenta"),
    ChangeStatus.OTHER: ("other", "dim"),
}

SELECTION_HELP = """Pick the files to commit:
  single     1
  several    1,3,5  or  1 3 5
  range      1-5
  combined   1,3-5,7
  everything a  or  all
  cancel     q  or  quit"""


def _read_or_empty(ask: Callable[[], str]) -> str:
    """Operator input; end-of-input counts as an empty answer."""
    try:
        return ask()
    except EOFError:
        return ""


class Controller:
    """
    Runs one invocation against one repository.

    ``store`` defaults to a GitWorkspace on ``options.repo``; prompts
    default to rich prompts on ``console``.
    """

    def __init__(
        self,
        options: RunOptions,
        config: PickPushConfig | None = None,
        store: VersionStore | None = None,
        console: Console | None = None,
        ask_selection: Callable[[], str] | None = None,
        ask_message: Callable[[], str] | None = None,
        bus: EventBus | None = None,
    ):
        self.options = options
        self.config = config or PickPushConfig()
        self.console = console or Console()
        self.store = store or GitWorkspace(options.repo, timeout=self.config.git.timeout)
        self.bus = bus or EventBus()

        self._ask_selection = ask_selection or (
            lambda: Prompt.ask("[bold]Selection[/]", default="", show_default=False, console=self.console)
        )
        self._ask_message = ask_message or (
            lambda: Prompt.ask("[bold]Commit message[/]", default="", show_default=False, console=self.console)
        )

        self.inspector = ChangeSetInspector(self.store, include_untracked=self.config.inspect.include_untracked)
        self.orchestrator = StagingOrchestrator(
            self.store,
            bus=self.bus,
            reset_on_cancel=self.config.staging.reset_on_cancel,
        )
        self.pipeline = CommitPushPipeline(
            self.store,
            commit_config=self.config.commit,
            push_config=self.config.push,
            ask_message=self._prompt_message,
            bus=self.bus,
        )

        self.bus.subscribe(self._print_progress)
        self._staged: StagedSet | None = None

    def run(self) -> RunResult:
        """Execute the whole workflow and report how it ended."""
        try:
            self._prepare()

            self.bus.emit("run_started", "inspecting", {
                "repo": str(self.options.repo),
                "mode": self.options.mode.value,
            })

            snapshot = self.inspector.snapshot()

            selection = None
            self.console.print(f"[blue]🚀 Mode: {self.options.mode.value}[/]")
            if self.options.mode is Mode.SELECTIVE:
                selection = self._prompt_selection(snapshot)

            self._staged = self.orchestrator.apply(self.options.mode, selection, snapshot)
            self._print_staged(self._staged)

            self.console.print("[blue]📝 Committing...[/]")
            commit = self.pipeline.run(self._staged, self.options.message)
        except PushError as e:
            return self._finish(e, commit=e.commit)
        except PickPushError as e:
            return self._finish(e)
        except WorkspaceError as e:
            logger.error(f"[CONTROLLER] {e}")
            return self._report(RunResult(
                state=TerminalState.REPO_ERROR,
                exit_code=1,
                detail=str(e),
            ))

        return self._report(RunResult(
            state=TerminalState.PUSHED,
            exit_code=0,
            detail=f"Pushed {commit.sha[:12]}: {commit.message}",
            staged=self._staged,
            commit=commit,
        ))

    # -----------------------------------------------------------------------
    # Steps
    # -----------------------------------------------------------------------

    def _prepare(self) -> None:
        """Repository checks and audit wiring for real git stores."""
        if not isinstance(self.store, GitWorkspace):
            return

        self.store.ensure_repository()
        if self.config.audit.enabled:
            audit_path = Path(self.config.audit.file).expanduser()
            if not audit_path.is_absolute():
                audit_path = self.store.git_dir() / audit_path
            try:
                AuditLogger(str(audit_path), self.bus)
            except OSError as e:
                logger.warning(f"[CONTROLLER] Audit log disabled, cannot use {audit_path}: {e}")
            else:
                logger.debug(f"[CONTROLLER] Audit log: {audit_path}")

    def _prompt_selection(self, snapshot: Snapshot) -> ParsedSelection:
        self._print_snapshot(snapshot)
        self.console.print(Panel(SELECTION_HELP, border_style="blue"))
        text = _read_or_empty(self._ask_selection)
        selection = parse(text, len(snapshot))
        self.bus.emit("selection_parsed", "mode_dispatch", {"input": text, "kind": selection.kind})
        return selection

    def _prompt_message(self) -> str:
        self.console.print("[blue]Enter a commit message (blank for the default):[/]")
        return _read_or_empty(self._ask_message)

    # -----------------------------------------------------------------------
    # Terminal reporting
    # -----------------------------------------------------------------------

    def _finish(self, error: PickPushError, commit: CommitResult | None = None) -> RunResult:
        return self._report(RunResult(
            state=error.terminal_state,
            exit_code=error.exit_code,
            detail=str(error),
            warning=error.warning,
            staged=self._staged,
            commit=commit,
        ))

    def _report(self, result: RunResult) -> RunResult:
        self.bus.emit("run_finished", result.state.value, {
            "exit_code": result.exit_code,
            "detail": result.detail,
        })

        if result.state is TerminalState.PUSHED:
            color, icon = "green", "🎉"
        elif result.exit_code != 0:
            color, icon = "red", "❌"
        elif result.warning:
            color, icon = "yellow", "⚠️ "
        else:
            color, icon = "green", "✅"

        body = escape(result.detail)
        if result.state is TerminalState.PUSH_FAILED and result.commit:
            body += f"\nLocal commit {result.commit.sha[:12]} was kept; push it again once the remote is reachable."

        self.console.print(Panel(f"{icon} {body}", border_style=color))
        return result

    # -----------------------------------------------------------------------
    # Display Helpers
    # -----------------------------------------------------------------------

    def _print_snapshot(self, snapshot: Snapshot) -> None:
        table = Table(title="Changes", border_style="yellow")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Status")
        table.add_column("Path")

        for rec in snapshot:
            label, color = STATUS_STYLE[rec.status]
            path = f"{rec.orig_path} → {rec.path}" if rec.orig_path else rec.path
            table.add_row(str(rec.index), f"[{color}]{label}[/]", escape(path))

        self.console.print(table)

    def _print_staged(self, staged: StagedSet) -> None:
        table = Table(title="📋 To be committed", border_style="blue")
        table.add_column("Status")
        table.add_column("Path")

        for entry in staged.entries:
            label, color = STATUS_STYLE[entry.status]
            table.add_row(f"[{color}]{label}[/]", escape(entry.path))

        self.console.print(table)

    def _print_progress(self, event: WorkflowEvent) -> None:
        if event.event_type == "path_staged":
            self.console.print(f"  [green]✓[/] staged: {escape(event.payload['path'])}")
        elif event.event_type == "committed":
            self.console.print(f"[green]✅ Committed {event.payload['sha'][:12]}[/]")
        elif event.event_type == "staged_all":
            self.console.print("[green]✅ Staged every change.[/]")
        elif event.event_type == "push_started":
            self.console.print("[blue]📤 Pushing to remote...[/]")
