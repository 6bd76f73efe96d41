"""
PICKPUSH CLI — The Interface

Three modes:
  1. pickpush [MESSAGE...]          (selective: pick files from a numbered list)
  2. pickpush --all [MESSAGE...]    (stage every change)
  3. pickpush --staged [MESSAGE...] (commit what is already staged)

Any positional words are joined into the commit message. Without one,
the message is prompted for, and a blank answer gets a timestamped default.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from loguru import logger
from rich.console import Console

from pickpush.config_loader import ConfigError, load_config
from pickpush.controller import Controller
from pickpush.identity import BANNER, __codename__, __tagline__, __version__
from pickpush.state import Mode, RunOptions

app = typer.Typer(
    name="pickpush",
    help=f"{__codename__} — {__tagline__}\nSelectively stage, commit and push.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"{__codename__} v{__version__}")
        raise typer.Exit()


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def main(
    message: Optional[List[str]] = typer.Argument(None, help="Commit message (words are joined with spaces)"),
    all_: bool = typer.Option(False, "--all", "-a", help="Stage and commit every change"),
    staged: bool = typer.Option(False, "--staged", "-s", help="Commit only what is already staged"),
    repo: Path = typer.Option(Path("."), "--repo", "-C", help="Path to the repository"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
):
    """
    Pick changes from a numbered list, stage them, commit and push.

    Default mode is selective: enter indices such as 1,3-5,7, 'a' for all or 'q' to quit.
    """
    _configure_logging(verbose)

    if all_ and staged:
        raise typer.BadParameter("--all and --staged cannot be combined", param_hint="--all/--staged")

    _print_banner()

    repo = repo.expanduser().resolve()
    if not repo.exists():
        console.print(f"[red]Repository not found: {repo}[/]")
        raise typer.Exit(1)

    load_dotenv(repo / ".pickpush" / ".env")
    load_dotenv(Path.home() / ".pickpush" / ".env")

    try:
        config = load_config(repo)
    except ConfigError as e:
        console.print(str(e), style="red", markup=False)
        raise typer.Exit(1)

    mode = Mode.ALL if all_ else Mode.STAGED if staged else Mode.SELECTIVE
    options = RunOptions(
        repo=repo,
        mode=mode,
        message=" ".join(message) if message else None,
    )
    logger.debug(f"[CLI] mode={mode.value} repo={repo}")

    result = Controller(options, config=config, console=console).run()
    raise typer.Exit(result.exit_code)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _print_banner():
    console.print(f"[bright_green]{BANNER}[/]")
    console.print(f"[dim]{__tagline__}[/]\n")


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    if verbose:
        logger.add(
            lambda msg: console.print(str(msg).rstrip("\n"), style="dim", markup=False, highlight=False),
            level="DEBUG",
            format="{time:HH:mm:ss} | {level:<7} | {message}",
        )
    else:
        logger.add(
            lambda msg: console.print(str(msg).rstrip("\n"), style="dim", markup=False, highlight=False),
            level="WARNING",
            format="{message}",
        )


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    app()
