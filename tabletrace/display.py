from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import MAX_INLINE_DIFF_ROWS, PROMPT_CLEAR_WIDTH
from .models import ChangeEvent, ChangeRecord, DiffKind, RowDiff, TableId

TIME_FORMAT = "%H:%M:%S"

_KIND_STYLES = {
    "INSERT": ("+", "green"),
    "UPDATE": ("~", "yellow"),
    "DELETE": ("-", "red"),
}

_DIFF_SYMBOLS = {
    DiffKind.ADDED: ("+", "bold green"),
    DiffKind.REMOVED: ("-", "bold red"),
    DiffKind.MODIFIED: ("~", "bold yellow"),
}


def change_icon(change_type: str) -> Tuple[str, str]:
    """(icon, style) for a change type label such as "INSERT" or "DELETE+INSERT"."""
    if "+" in change_type:
        return "±", "magenta"
    return _KIND_STYLES.get(change_type, ("•", ""))


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def _row_label(count: int) -> str:
    return f"{count} row" if count <= 1 else f"{count} rows"


def diff_values(diff: RowDiff) -> List[Text]:
    """
    Compact column=value fragments for one diff, key column omitted for
    added and removed rows.
    """
    fragments: List[Text] = []
    if diff.kind is DiffKind.ADDED and diff.new_row is not None:
        for column, value in diff.new_row.items():
            if column != diff.key_column:
                fragments.append(Text.assemble((column, "dim"), "=", (value, "green")))
    elif diff.kind is DiffKind.REMOVED and diff.old_row is not None:
        for column, value in diff.old_row.items():
            if column != diff.key_column:
                fragments.append(Text.assemble((column, "dim"), "=", (value, "red")))
    elif diff.kind is DiffKind.MODIFIED:
        old_row = diff.old_row or {}
        new_row = diff.new_row or {}
        for column in diff.changed_columns:
            fragments.append(
                Text.assemble(
                    f"{column}: ",
                    (old_row.get(column, "?"), "white"),
                    " → ",
                    (new_row.get(column, "?"), "yellow"),
                )
            )
    return fragments


class Display:
    """
    Terminal output for the watcher. Everything goes to stderr so stdout stays
    free for redirection.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True, highlight=False)

    def banner(self) -> None:
        self.console.print()
        self.console.print(
            Panel(Text("TableTrace - Real-time DB Monitor", justify="center"), style="cyan")
        )

    def connecting(self) -> None:
        self.console.print()
        self.console.print("Connecting to PostgreSQL...", style="dim")

    def connected(self) -> None:
        self.console.print(Text("✓ Connected!", style="green"))
        self.console.print()

    def watching_tables(self, tables: Sequence[TableId], prefix: str = "👁 Watching") -> None:
        self.console.print()
        self.console.print(
            Text.assemble((prefix, "bold cyan"), f" ({_plural(len(tables), 'table')})")
        )
        self._numbered_tables(tables)
        self.console.print()

    def _numbered_tables(self, tables: Sequence[TableId]) -> None:
        for i, table in enumerate(tables, start=1):
            self.console.print(Text.assemble("  ", (f"[{i}]", "cyan"), f" {table}"))

    def interactive_hint(self) -> None:
        self.console.print()
        self.console.print(
            Panel(
                Text("Commands: [number] details | h help | l list | q quit"),
                style="dim",
                expand=False,
            )
        )
        self.console.print()

    def clear_prompt_line(self) -> None:
        self.console.file.write("\r" + " " * PROMPT_CLEAR_WIDTH + "\r")
        self.console.file.flush()

    def prompt(self, change_count: int) -> None:
        self.console.file.write("\r")
        if change_count > 0:
            text = Text.assemble(
                (f"[{change_count} changes]", "cyan"),
                " ",
                ("(l=list, w=watching, r=reset, q=quit) >", "dim"),
                " ",
            )
        else:
            text = Text("Waiting for changes... (h=help, r=reset, q=quit) > ", style="dim")
        self.console.print(text, end="")
        self.console.file.flush()

    def help(self) -> None:
        table = Table(title="Available Commands", title_style="cyan", border_style="cyan")
        table.add_column("Command", style="yellow")
        table.add_column("Action")
        table.add_row("1, 2, ...", "Show change details")
        table.add_row("l", "List all changes")
        table.add_row("c", "Clear history")
        table.add_row("w", "Show watching tables")
        table.add_row("r", "Reset table selection")
        table.add_row("h", "Show this help")
        table.add_row("q", "Quit")
        self.console.print()
        self.console.print(table)
        self.console.print()

    def change_line(self, change: ChangeEvent, show_id: bool = True, diff_count: Optional[int] = None) -> Text:
        icon, style = change_icon(change.change_type)
        line = Text.assemble((icon, style), " ")
        if show_id:
            line.append(f"#{change.id}", style="bold cyan")
            line.append(" ")
        line.append(f"[{change.timestamp.strftime(TIME_FORMAT)}]", style="dim")
        line.append(" ")
        line.append(change.change_type, style=style)
        line.append(f" {change.table} ({_row_label(change.row_count)})")
        if diff_count:
            line.append(f" [{diff_count} row diff]", style="dim")
        return line

    def change(self, change: ChangeEvent, interactive: bool) -> None:
        self.console.print(self.change_line(change, show_id=interactive))

    def inline_diff(self, diffs: Sequence[RowDiff]) -> None:
        current_table = ""
        for diff in diffs[:MAX_INLINE_DIFF_ROWS]:
            if diff.table and diff.table != current_table:
                if current_table:
                    self.console.print()
                self.console.print(Text(f"  ── {diff.table} ──", style="dim"))
                current_table = diff.table

            values = diff_values(diff)
            if not values:
                continue
            symbol, style = _DIFF_SYMBOLS[diff.kind]
            line = Text.assemble(
                "    ",
                (symbol, style),
                " ",
                (f"{diff.key_column}={diff.key_value}", "cyan"),
                " { ",
                Text(", ").join(values),
                " }",
            )
            self.console.print(line)

        if len(diffs) > MAX_INLINE_DIFF_ROWS:
            self.console.print(
                Text(f"    ...and {len(diffs) - MAX_INLINE_DIFF_ROWS} more rows", style="dim")
            )

    def history(self, records: Iterable[ChangeRecord]) -> None:
        records = list(records)
        self.console.print()
        if not records:
            self.console.print(
                "No changes recorded yet. Make some changes to your database!", style="dim"
            )
            return

        self.console.print("═══ Change History ═══", style="bold cyan")
        for record in records:
            line = Text("  ")
            line.append_text(self.change_line(record.change, diff_count=len(record.diffs)))
            self.console.print(line)
        self.console.print()
        self.console.print("Type a number to see details (e.g., '1')", style="dim")

    def detail(self, record: ChangeRecord) -> None:
        change = record.change
        _, style = change_icon(change.change_type)
        body = Text()
        body.append_text(
            Text.assemble(
                ("Change", "bold cyan"),
                f" #{change.id}: ",
                (change.change_type, f"bold {style}".strip()),
                f" on {change.table}\n",
                ("Time", "dim"),
                f": {change.timestamp.strftime(TIME_FORMAT)}   ",
                ("Affected", "dim"),
                f": {change.row_count} row(s)",
            )
        )

        if not record.diffs:
            body.append("\n\n")
            body.append("No detailed diff available.", style="dim")
        else:
            current_table = ""
            for diff in record.diffs:
                if diff.table and diff.table != current_table:
                    body.append("\n\n")
                    body.append(f"📋 {diff.table}", style="bold cyan")
                    current_table = diff.table
                body.append("\n")
                body.append_text(self._detail_diff(diff))

        self.console.print()
        self.console.print(Panel(body, border_style="cyan"))
        self.console.print()

    def _detail_diff(self, diff: RowDiff) -> Text:
        symbol, style = _DIFF_SYMBOLS[diff.kind]
        text = Text.assemble(
            "\n",
            (symbol, style),
            " ",
            (diff.key_column, "cyan"),
            " = ",
            (diff.key_value, "bold cyan"),
        )
        if diff.kind is DiffKind.ADDED and diff.new_row is not None:
            for column, value in diff.new_row.items():
                if column != diff.key_column:
                    text.append_text(Text.assemble("\n    ", (column, "dim"), ": ", (value, "green")))
        elif diff.kind is DiffKind.REMOVED and diff.old_row is not None:
            for column, value in diff.old_row.items():
                if column != diff.key_column:
                    text.append_text(
                        Text.assemble("\n    ", (column, "dim"), ": ", (value, "red strike"))
                    )
        elif diff.kind is DiffKind.MODIFIED:
            for fragment in diff_values(diff):
                text.append("\n    ")
                text.append_text(fragment)
        return text

    def change_not_found(self, change_id: int) -> None:
        self.console.print(
            Text.assemble(
                ("✗", "red"),
                f" Change #{change_id} not found. Type 'l' to list all changes.",
            )
        )

    def unknown_command(self, text: str) -> None:
        self.console.print(
            Text.assemble(("?", "yellow"), f" Unknown command '{text}'. Type 'h' for help.")
        )

    def table_selection_prompt(self, all_tables: Sequence[TableId], startup: bool = False) -> None:
        self.console.print()
        self.console.print("Available tables:", style="bold cyan")
        if startup:
            self.console.print()
        self._numbered_tables(all_tables)
        self.console.print()
        verb = "Select tables" if startup else "Enter numbers"
        self.console.print(
            f"{verb} (e.g., 1,3,5 or 1-3 or 1,4-6), 'all', or empty to cancel:",
            style="cyan",
            markup=False,
        )
        if startup:
            self.console.print(Text("> ", style="cyan"), end="")
            self.console.file.flush()

    def newline(self) -> None:
        self.console.print()

    def warning(self, message: str) -> None:
        self.console.print(Text(message, style="yellow"))

    def success(self, message: str) -> None:
        self.console.print(Text(message, style="dim"))

    def connection_error(self, error: BaseException) -> None:
        self.console.print()
        self.console.print(
            Text.assemble(("✗", "bold red"), " ", ("Connection error:", "red"), f" {error}")
        )
        self.console.print(Text("Exiting...", style="red"))

    def error(self, message: str) -> None:
        self.console.print(Text(f"Error: {message}", style="red"))

    def goodbye(self) -> None:
        self.console.print()
        self.console.print(Text("Goodbye! 👋", style="cyan"))
