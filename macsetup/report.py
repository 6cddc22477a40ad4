"""End-of-run summary and the manual follow-up checklist."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .runner import RunReport
from .step import StepStatus


STATUS_STYLE: Dict[StepStatus, Tuple[str, str]] = {
    StepStatus.SUCCEEDED: ("succeeded", "green"),
    StepStatus.NOOP: ("already done", "green"),
    StepStatus.SKIPPED: ("skipped", "dim"),
    StepStatus.FAILED: ("failed", "red"),
}


def manual_followups(work_tools: bool) -> List[Tuple[str, List[str]]]:
    """Actions automation cannot do, grouped by section.

    The list depends only on whether work tools were selected, never on step
    outcomes.
    """
    sections: List[Tuple[str, List[str]]] = [
        (
            "System Settings",
            [
                "User & Groups > Set user image",
                "Displays > Night shift > Sunset to sunrise",
                "Bluetooth > Connect keyboard, mouse and headphones",
                "Desktop & Dock > Position: Left, Minimise into app: True, Auto-hide: False",
                "Privacy & Security > App Management > Add iTerm",
            ],
        ),
        (
            "iTerm2 Configuration",
            [
                "Settings > Profiles > Text > Font: Source Code Pro, size 12",
                "Settings > Profiles > Colors > Preset: 3024_night.itermcolors",
                "Settings > Profiles > Colors > Cursor colors: Yellow",
            ],
        ),
    ]

    apps = ["Sign in to: LastPass, Chrome, Spotify, Google Drive"]
    if work_tools:
        apps.append("Sign in to: 1Password, Loom, Notion, Slack, Zoom")
    apps += [
        "Logi+ > Setup mouse and keyboard",
        "Obsidian > Load commonplace vault from Google Drive",
        "Claude Code > Run `claude` once and sign in",
    ]
    sections.append(("Application Setup", apps))

    dev = ["Add SSH key to GitHub account (already copied to clipboard)"]
    if work_tools:
        dev.append("Run: gcloud auth application-default login")
    sections.append(("Development", dev))

    optional = ["System Settings > Wallpaper > Set to mac_background.heic"]
    if work_tools:
        optional.append("Zoom > Settings > Background > Set to zoom_background.png")
    sections.append(("Optional", optional))
    return sections


def summary_table(report: RunReport) -> Table:
    table = Table(title="Setup summary", box=box.SIMPLE_HEAVY)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Step", style="bold")
    table.add_column("Status")
    table.add_column("Detail", overflow="fold")
    for i, (name, result) in enumerate(report.entries, start=1):
        label, style = STATUS_STYLE[result.status]
        if result.attempts > 1:
            label = f"{label} ({result.attempts} attempts)"
        table.add_row(str(i), name, Text(label, style=style), Text(result.detail))
    return table


def counts_line(report: RunReport) -> str:
    c = report.counts
    return (
        f"Succeeded: {c[StepStatus.SUCCEEDED]}  Already done: {c[StepStatus.NOOP]}  "
        f"Skipped: {c[StepStatus.SKIPPED]}  Failed: {c[StepStatus.FAILED]}"
    )


def render_report(report: RunReport, work_tools: bool, console: Optional[Console] = None) -> None:
    console = console or Console()
    console.print()
    console.print(summary_table(report))
    console.print(counts_line(report), highlight=False)
    if report.halted_by:
        return

    console.print()
    console.print("[blue]INFO:[/blue] Here are the manual steps you still need to do:")
    for title, items in manual_followups(work_tools):
        console.print()
        console.print(f"[bold]{title}:[/bold]")
        for item in items:
            console.print(f"  • {item}", highlight=False, markup=False)
    console.print()
    console.print("[green]SUCCESS:[/green] Restart your terminal to apply all shell changes!")
