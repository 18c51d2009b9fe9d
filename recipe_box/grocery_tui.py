"""Interactive TUI for ticking off grocery items."""

from __future__ import annotations

from dataclasses import dataclass, field

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Header, Label, Static

from .categories import DEFAULT_CATEGORY
from .models import GroceryEntry
from .units import format_quantity


@dataclass
class ChecklistResult:
    """Result from the grocery checklist TUI."""

    confirmed: bool
    toggled_ids: list[str] = field(default_factory=list)


def _order_by_category(items: list[GroceryEntry]) -> list[GroceryEntry]:
    """Stable sort so items of a category sit together, categories in first-seen order."""
    first_seen: dict[str, int] = {}
    for item in items:
        first_seen.setdefault(item.category or DEFAULT_CATEGORY, len(first_seen))
    return sorted(items, key=lambda item: first_seen[item.category or DEFAULT_CATEGORY])


class GroceryChecklistScreen(App[ChecklistResult]):
    """Interactive screen for checking grocery items off while shopping."""

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        height: 100%;
        padding: 1;
    }

    #header-info {
        height: auto;
        padding: 1;
        background: $primary-background;
        color: $text;
    }

    #header-title {
        text-style: bold;
    }

    #items-table {
        height: 1fr;
        margin: 1 0;
    }

    #summary {
        height: 3;
        padding: 0 1;
        background: $surface-darken-1;
        content-align: center middle;
    }

    #button-bar {
        height: 3;
        align: center middle;
        padding: 0 1;
    }

    #button-bar Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("space", "toggle_item", "Toggle"),
        Binding("enter", "confirm", "Save"),
        Binding("q", "quit_cancel", "Cancel"),
        Binding("escape", "quit_cancel", "Cancel"),
    ]

    def __init__(self, items: list[GroceryEntry], title: str | None = None) -> None:
        super().__init__()
        self.entries = _order_by_category(list(items))
        self.screen_title = title or "Grocery List"
        self.checked: set[str] = {item.id for item in self.entries if item.checked}
        self._initial = set(self.checked)

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main-container"):
            with Vertical(id="header-info"):
                yield Label("Tick off items as you shop.", id="header-title")
            table = DataTable(id="items-table")
            table.cursor_type = "row"
            table.add_columns("", "Item", "Quantity", "Category")
            yield table
            yield Static(self._get_summary(), id="summary")
            with Horizontal(id="button-bar"):
                yield Button("Save (enter)", variant="success", id="btn-confirm")
                yield Button("Cancel (q)", variant="error", id="btn-cancel")
        yield Footer()

    def on_mount(self) -> None:
        self.title = self.screen_title
        self._refresh_table()

    def _get_summary(self) -> str:
        done = len(self.checked)
        return f"Done: {done} | Remaining: {len(self.entries) - done}"

    def toggled_ids(self) -> list[str]:
        """Ids whose checked state differs from when the screen opened, in list order."""
        changed = self.checked ^ self._initial
        return [item.id for item in self.entries if item.id in changed]

    def toggle_entry(self, index: int) -> None:
        item_id = self.entries[index].id
        if item_id in self.checked:
            self.checked.discard(item_id)
        else:
            self.checked.add(item_id)

    def _refresh_table(self) -> None:
        table = self.query_one("#items-table", DataTable)
        table.clear()

        for item in self.entries:
            checkbox = "[x]" if item.id in self.checked else "[ ]"
            qty_str = format_quantity(item.quantity)
            if item.unit:
                qty_str = f"{qty_str} {item.unit}".strip()
            table.add_row(checkbox, item.name, qty_str, item.category or DEFAULT_CATEGORY)

        self.query_one("#summary", Static).update(self._get_summary())

    def action_toggle_item(self) -> None:
        table = self.query_one("#items-table", DataTable)
        if table.cursor_row is not None and 0 <= table.cursor_row < len(self.entries):
            row_idx = table.cursor_row
            self.toggle_entry(row_idx)
            self._refresh_table()
            table.move_cursor(row=row_idx)

    def action_confirm(self) -> None:
        self.exit(ChecklistResult(confirmed=True, toggled_ids=self.toggled_ids()))

    def action_quit_cancel(self) -> None:
        self.exit(ChecklistResult(confirmed=False))

    @on(DataTable.RowSelected)
    def on_row_selected(self, event: DataTable.RowSelected) -> None:
        self.action_toggle_item()

    @on(Button.Pressed, "#btn-confirm")
    def on_confirm_button(self) -> None:
        self.action_confirm()

    @on(Button.Pressed, "#btn-cancel")
    def on_cancel_button(self) -> None:
        self.action_quit_cancel()


def interactive_checklist(
    items: list[GroceryEntry], title: str | None = None
) -> ChecklistResult:
    """
    Launch the checklist TUI.

    Returns:
        ChecklistResult with the ids whose checked state changed
    """
    if not items:
        return ChecklistResult(confirmed=True)

    result = GroceryChecklistScreen(items, title).run()

    # Handle case where app exits without explicit result
    if result is None:
        return ChecklistResult(confirmed=False)
    return result
