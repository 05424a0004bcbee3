"""
Output - Console output formatting for the CLI.

Provides colored, aligned output for issues, events and command results.
"""

import json
import sys
from typing import Optional, TextIO

from ..application.commands import CommandResult
from ..application.sync import PollResult
from ..core.domain.entities import CreateEventInput, Issue


class Colors:
    """ANSI color codes."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"

    BG_YELLOW = "\033[43m"


class Symbols:
    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"


class Console:
    """Console output helper with colors and formatting."""

    def __init__(self, color: bool = True, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.color = color and hasattr(self.stream, "isatty") and self.stream.isatty()

    def _c(self, text: str, *codes: str) -> str:
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def section(self, text: str) -> None:
        self.print()
        self.print(self._c(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.BLUE))

    def success(self, text: str) -> None:
        self.print(self._c(f"  {Symbols.CHECK} {text}", Colors.GREEN))

    def error(self, text: str) -> None:
        self.print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED))

    def warning(self, text: str) -> None:
        self.print(self._c(f"  {Symbols.WARN} {text}", Colors.YELLOW))

    def detail(self, text: str) -> None:
        self.print(self._c(f"    {text}", Colors.DIM))

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], len(cell))

        self.print("  " + "  ".join(self._c(h.ljust(w), Colors.BOLD) for h, w in zip(headers, widths)))
        self.print("  " + "  ".join("-" * w for w in widths))
        for row in rows:
            self.print("  " + "  ".join(cell.ljust(w) for cell, w in zip(row, widths)))

    def dry_run_banner(self) -> None:
        banner = "DRY-RUN MODE - no changes will be made (use --execute)"
        self.print()
        if self.color:
            self.print(f"{Colors.BG_YELLOW}{Colors.BOLD} {banner} {Colors.RESET}")
        else:
            self.print(f"*** {banner} ***")

    # -------------------------------------------------------------------------
    # Domain Output
    # -------------------------------------------------------------------------

    def issue_table(self, issues: list[Issue]) -> None:
        rows = [
            [
                issue.id,
                issue.title[:50],
                _name(issue.state),
                _name(issue.priority),
                _name(issue.estimation),
                str(issue.sprint_number) if issue.sprint_number is not None else "-",
            ]
            for issue in issues
        ]
        self.table(["ID", "Title", "State", "Priority", "Size", "Sprint"], rows)

    def issue(self, issue: Issue) -> None:
        self.section(f"{issue.id}: {issue.title}")
        self.detail(f"State:      {_name(issue.state)}")
        self.detail(f"Priority:   {_name(issue.priority)}")
        self.detail(f"Type:       {issue.type_name or '-'}")
        self.detail(f"Sprint:     {issue.sprint_number if issue.sprint_number is not None else '-'}")
        self.detail(f"Estimation: {_name(issue.estimation)}")
        self.detail(f"Assignees:  {', '.join(str(a) for a in issue.assignee_ids) or '-'}")
        if issue.description:
            self.print()
            for line in issue.description.splitlines():
                self.detail(line)
        if issue.comments:
            self.print()
            self.detail(f"{len(issue.comments)} comment(s)")

    def events(self, events: list[CreateEventInput]) -> None:
        for event in events:
            self.print(json.dumps(event.to_dict(), sort_keys=True))

    def command_result(self, description: str, result: CommandResult) -> None:
        if result.dry_run:
            self.detail(f"[DRY-RUN] {description}")
        elif result.skipped:
            self.warning(f"Skipped {description}: {result.error}")
        elif result.success:
            self.success(description)
        else:
            self.error(f"{description}: {result.error}")

    def poll_result(self, result: PollResult) -> None:
        self.events(result.events)
        self.section("Poll summary")
        self.detail(f"Issues polled:      {result.issues_polled}")
        self.detail(f"Events delivered:   {result.events_delivered}")
        self.detail(f"Duplicates dropped: {result.duplicates_dropped}")
        for failure in result.failures:
            self.error(f"{failure.issue_id}: {failure.error}")


def _name(value) -> str:
    return value.name if value is not None else "-"
