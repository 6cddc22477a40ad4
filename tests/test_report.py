"""Tests for the end-of-run summary"""
from rich.console import Console

from macsetup.hook import ConsoleHook
from macsetup.report import counts_line, manual_followups, render_report
from macsetup.runner import RunReport
from macsetup.step import StepResult


def _flatten(sections):
    return [item for _, items in sections for item in items]


class TestManualFollowups:
    def test_sections(self):
        titles = [title for title, _ in manual_followups(work_tools=False)]
        assert titles == ["System Settings", "iTerm2 Configuration", "Application Setup", "Development", "Optional"]

    def test_work_items_only_with_work_tools(self):
        personal = _flatten(manual_followups(work_tools=False))
        work = _flatten(manual_followups(work_tools=True))

        assert "Run: gcloud auth application-default login" in work
        assert "Run: gcloud auth application-default login" not in personal
        assert set(personal) < set(work)

    def test_ssh_key_reminder_always_present(self):
        assert any("SSH key" in item for item in _flatten(manual_followups(work_tools=False)))


def _report(halted_by=None):
    report = RunReport(halted_by=halted_by)
    report.add("homebrew", StepResult.noop())
    report.add("poetry", StepResult.failed("network down", attempts=3))
    report.add("dock", StepResult.succeeded("pinned Spotify"))
    report.add("work-tools", StepResult.skipped("disabled by configuration"))
    return report


class TestRender:
    def test_counts_line(self):
        assert counts_line(_report()) == "Succeeded: 1  Already done: 1  Skipped: 1  Failed: 1"

    def test_render_lists_steps_and_followups(self):
        console = Console(record=True, width=200)
        render_report(_report(), work_tools=False, console=console)
        out = console.export_text()

        assert "poetry" in out
        assert "failed (3 attempts)" in out
        assert "System Settings:" in out
        assert "Restart your terminal" in out

    def test_halted_run_has_no_followups(self):
        console = Console(record=True, width=200)
        render_report(_report(halted_by="macos-check"), work_tools=False, console=console)
        out = console.export_text()

        assert "Setup summary" in out
        assert "System Settings:" not in out


class TestBracketsInText:
    """Names and command stderr may contain text that looks like markup"""

    def test_detail_is_printed_literally(self):
        report = RunReport()
        report.add("git-identity", StepResult.succeeded("Ada [/x] <ada@example.com>"))
        report.add("dev-tools", StepResult.failed("`brew install hugo` exited with code 1: [red]Error[/red]"))
        console = Console(record=True, width=200)
        render_report(report, work_tools=False, console=console)
        out = console.export_text()

        assert "Ada [/x] <ada@example.com>" in out
        assert "[red]Error[/red]" in out

    def test_hook_messages_are_printed_literally(self):
        console = Console(record=True, width=200)
        hook = ConsoleHook(console)
        hook.success("git-identity (Ada [/x] <ada@example.com>)")
        hook.error("dev-tools failed: [/bold] boom")
        out = console.export_text()

        assert "SUCCESS: git-identity (Ada [/x] <ada@example.com>)" in out
        assert "ERROR: dev-tools failed: [/bold] boom" in out
