from __future__ import annotations

import logging
import os
import sqlite3
from pathlib import Path
from typing import Optional

import click
import typer
from rich.console import Console
from rich.table import Table

from .config import Prompter, UserConfig, resolve_config
from .data import SqliteData
from .errors import ConfigError
from .hook import ConsoleHook
from .installers.system import host_system, macos_only_message
from .paths import HomePaths
from .plan import default_steps
from .report import render_report
from .runner import Runner
from .shell import Shell


logger = logging.getLogger(__name__)

app = typer.Typer(
    name="macsetup",
    help="Provision a macOS developer machine: Homebrew, Python, Git/SSH, VS Code and more.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _configure_logging(verbose: bool) -> None:
    log_level = os.getenv("MACSETUP_LOG_LEVEL", "INFO" if verbose else "WARNING")
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(name)s: %(message)s",
    )


def cmd_history(paths: HomePaths, console: Console, limit: int = 10) -> int:
    db_path = paths.history_db
    if not db_path.exists():
        console.print("No runs recorded yet")
        return 0
    data = SqliteData(db_path)
    try:
        runs = data.recent_runs(limit)
    finally:
        data.close()
    table = Table(title=f"Recent runs ({db_path})")
    table.add_column("Started")
    table.add_column("Finished")
    table.add_column("Status")
    table.add_column("Steps", justify="right")
    table.add_column("Failed", justify="right")
    for run in runs:
        status = run["status"] or "?"
        if run["halted_by"]:
            status = f"{status} ({run['halted_by']})"
        table.add_row(
            str(run["start_timestamp"]),
            str(run["end_timestamp"] or "-"),
            status,
            str(run["steps"]),
            str(run["failed"] or 0),
        )
    console.print(table)
    return 0


def _open_history(paths: HomePaths, hook: ConsoleHook) -> Optional[SqliteData]:
    try:
        return SqliteData(paths.history_db)
    except (OSError, sqlite3.Error) as e:
        hook.warning(f"Run history disabled: {e}")
        return None


def cmd_setup(
    name: Optional[str] = None,
    email: Optional[str] = None,
    python_version: Optional[str] = None,
    work_tools: Optional[bool] = None,
    dry_run: bool = False,
    non_interactive: bool = False,
    config_path: Optional[Path] = None,
    save_config: bool = False,
    show_output: bool = False,
    history: bool = False,
    paths: Optional[HomePaths] = None,
    prompter: Optional[Prompter] = None,
    console: Optional[Console] = None,
) -> int:
    paths = paths or HomePaths.current()
    console = console or Console()
    prompter = prompter or Prompter()
    hook = ConsoleHook(console)

    if history:
        return cmd_history(paths, console)

    # Checked before any prompt, dry run included; macos-check repeats it in the report
    system = host_system()
    if system != "Darwin":
        ConsoleHook(Console(stderr=True)).error(macos_only_message(system))
        return 1

    console.rule("[bold]Mac Environment Setup[/bold]")
    try:
        user_config = UserConfig(config_path or paths.config_file)
        if not non_interactive:
            hook.info("Setting up Mac environment - let's collect some information first")
        config = resolve_config(
            name=name,
            email=email,
            python_version=python_version,
            work_tools=work_tools,
            dry_run=dry_run,
            non_interactive=non_interactive,
            user_config=user_config,
            prompter=prompter,
        )
    except ConfigError as e:
        ConsoleHook(Console(stderr=True)).error(str(e))
        return 1

    hook.info("Configuration:")
    console.print(f"  Name: {config.name}", highlight=False, markup=False)
    console.print(f"  Email: {config.email}", highlight=False, markup=False)
    console.print(f"  Python: {config.python_version}", highlight=False)
    console.print(f"  Work tools: {config.work_tools}", highlight=False)
    console.print(f"  Dry run: {config.dry_run}", highlight=False)

    if not config.non_interactive and not prompter.confirm("Continue with setup?", default=True):
        hook.info("Setup cancelled")
        return 0

    if save_config and not config.dry_run:
        user_config.remember(config)
        try:
            user_config.save()
            hook.info(f"Saved preferences to {user_config.config_path}")
        except ConfigError as e:
            hook.warning(str(e))

    shell = Shell(show=show_output)
    steps = default_steps(config, shell=shell, paths=paths, prompter=prompter)
    data = None if config.dry_run else _open_history(paths, hook)
    try:
        report = Runner(config, steps, hook=hook, data=data).execute()
    except KeyboardInterrupt:
        console.print()
        hook.error("Setup interrupted")
        return 130
    finally:
        if data is not None:
            data.close()

    render_report(report, config.work_tools, console)
    return report.exit_code


@app.command()
def setup_command(
    python_version: Optional[str] = typer.Option(
        None, "--python-version", metavar="X.Y.Z", help="Python version to install with pyenv (default: recommended version)"
    ),
    work_tools: Optional[bool] = typer.Option(
        None, "--work-tools/--no-work-tools", help="Install work tools (1Password, Slack, Zoom, ...)"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be done without making changes"),
    non_interactive: bool = typer.Option(False, "--non-interactive", help="Never prompt; requires --name and --email"),
    name: Optional[str] = typer.Option(None, "--name", help="Full name for Git"),
    email: Optional[str] = typer.Option(None, "--email", help="Email for Git and the SSH key comment"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="YAML config file (default ~/.macsetup.yaml)"),
    save_config: bool = typer.Option(False, "--save-config", help="Remember name, email and preferences in the config file"),
    show_output: bool = typer.Option(False, "--show-output", help="Stream installer output while running"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
    history: bool = typer.Option(False, "--history", help="Show recently recorded runs and exit"),
):
    """Provision this Mac. Every step is idempotent, so re-running is safe."""
    _configure_logging(verbose)
    code = cmd_setup(
        name=name,
        email=email,
        python_version=python_version,
        work_tools=work_tools,
        dry_run=dry_run,
        non_interactive=non_interactive,
        config_path=config_path,
        save_config=save_config,
        show_output=show_output,
        history=history,
    )
    raise typer.Exit(code)


def main(argv: list[str] | None = None) -> int:
    # Programmatic entry point that maps every outcome to an exit code.
    try:
        rv = app(args=argv, prog_name="macsetup", standalone_mode=False)
        return rv if isinstance(rv, int) else 0
    except click.UsageError as e:
        # Unknown flags and bad values: error plus usage, exit 1
        e.show()
        return 1
    except click.Abort:
        typer.echo("Aborted!", err=True)
        return 130


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
