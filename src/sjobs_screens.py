import getpass
import re

from rich import box
from rich.table import Table as RichTable
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container, Horizontal, ScrollableContainer
from textual.screen import ModalScreen
from textual.widgets import Button, Label, Static

from slurm_backend import get_job_details

DETAIL_KEYS = [
    "JobId",
    "ArrayJobId",
    "ArrayTaskId",
    "JobName",
    "UserId",
    "Account",
    "QOS",
    "JobState",
    "Reason",
    "Dependency",
    "RunTime",
    "TimeLimit",
    "SubmitTime",
    "StartTime",
    "EndTime",
    "Partition",
    "NodeList",
    "NumNodes",
    "NumCPUs",
    "Command",
    "WorkDir",
    "StdOut",
]
MAX_LISTED_IDS = 12


def parse_scontrol(raw_text: str) -> dict[str, str]:
    parsed = {}
    for token in re.split(r"\s+", raw_text):
        if "=" in token:
            key, value = token.split("=", 1)
            if key in DETAIL_KEYS:
                parsed[key] = value
    return parsed


class CancelConfirmationScreen(ModalScreen[bool]):
    CSS = """
    CancelConfirmationScreen { align: center middle; background: rgba(40, 0, 0, 0.8); }
    #cancel-dialog { width: 74; height: auto; background: $surface; border: solid red; padding: 1 2; }
    .warning-text { text-align: center; color: red; text-style: bold; margin-bottom: 1; width: 100%; }
    .info-text { text-align: center; margin-bottom: 2; width: 100%; }
    #button-row { align: center middle; height: auto; width: 100%; margin-top: 1; }
    Button { margin: 0 2; }
    """

    def __init__(self, job_ids: list[str], owners: set[str]):
        super().__init__()
        self.job_ids = job_ids
        self.owners = owners
        self.current_user = getpass.getuser()

    def describe_jobs(self) -> str:
        if len(self.job_ids) == 1:
            return f"job {self.job_ids[0]}"
        listed = ", ".join(self.job_ids[:MAX_LISTED_IDS])
        if len(self.job_ids) > MAX_LISTED_IDS:
            listed += f", … (+{len(self.job_ids) - MAX_LISTED_IDS} more)"
        return f"{len(self.job_ids)} jobs: {listed}"

    def compose(self) -> ComposeResult:
        with Container(id="cancel-dialog"):
            yield Label("⚠️  CANCEL JOBS CONFIRMATION ⚠️", classes="warning-text")
            msg = f"Are you sure you want to cancel {self.describe_jobs()}?"
            foreign = sorted(self.owners - {self.current_user})
            if foreign:
                msg += (
                    "\n\n[bold red]WARNING: You are "
                    f"{self.current_user}, but the selection includes jobs of "
                    f"{', '.join(foreign)}![/]"
                )
            yield Label(msg, classes="info-text")
            with Horizontal(id="button-row"):
                yield Button("Yes, cancel", variant="error", id="confirm")
                yield Button("No, keep", variant="primary", id="cancel")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "confirm")

    def key_escape(self):
        self.dismiss(False)


class JobDetailScreen(ModalScreen):
    CSS = """
    JobDetailScreen { align: center middle; background: rgba(0,0,0,0.7); }
    #detail-container { width: 80%; height: 80%; background: $surface; border: solid $accent; padding: 1 2; }
    #detail-content { margin-top: 1; }
    .header { text-style: bold; color: $accent; border-bottom: solid $accent; width: 100%; }
    .label { color: $text-muted; text-align: center; width: 100%; margin-top: 1; }
    """

    def __init__(self, job_id: str, group_size: int = 1):
        super().__init__()
        self.job_id = job_id
        self.group_size = group_size
        self.data = get_job_details(job_id)

    def compose(self) -> ComposeResult:
        with Container(id="detail-container"):
            title = f"🔍 Job Details: {self.job_id}"
            if self.group_size > 1:
                title += f" (first of {self.group_size} array tasks)"
            yield Label(title, classes="header")
            with ScrollableContainer(id="detail-content"):
                sstat = self.data.get("sstat", "")
                if sstat and "error" not in sstat.lower():
                    yield Label("\n📈 Live Resource Usage (sstat)", classes="header")
                    parts = sstat.strip().split("|")
                    if len(parts) >= 3:
                        grid = RichTable.grid(padding=(0, 2))
                        grid.add_column()
                        grid.add_column()
                        grid.add_row(Text("Ave CPU:"), Text(parts[0], style="green"))
                        grid.add_row(Text("Ave RSS (Mem):"), Text(parts[1], style="green"))
                        grid.add_row(
                            Text("Max RSS (Peak):"), Text(parts[2], style="bold red")
                        )
                        yield Static(grid)
                    else:
                        yield Label("No sstat metrics available yet.")

                yield Label("\n📋 Configuration (scontrol)", classes="header")
                parsed = parse_scontrol(self.data["raw"])
                if parsed:
                    grid = RichTable.grid(padding=(0, 2))
                    grid.add_column(style="dim cyan", justify="right")
                    grid.add_column(style="white")
                    for key in DETAIL_KEYS:
                        if key in parsed:
                            grid.add_row(key, parsed[key])
                    yield Static(grid)
                else:
                    yield Label(self.data["raw"] or "No details returned.")
            yield Label("\n[Press ESC or Enter to close]", classes="label")

    def key_escape(self):
        self.dismiss()

    def key_enter(self):
        self.dismiss()


class ShortcutHelpScreen(ModalScreen):
    CSS = """
    ShortcutHelpScreen { align: center middle; background: rgba(0,0,0,0.75); }
    #help-container { width: 88%; height: 88%; background: $surface; border: solid $accent; padding: 1 2; }
    #help-content { margin-top: 1; }
    .header { text-style: bold; color: $accent; border-bottom: solid $accent; width: 100%; }
    .label { color: $text-muted; text-align: center; width: 100%; margin-top: 1; }
    """

    def compose(self) -> ComposeResult:
        def make_table(title: str, rows: list[tuple[str, str]]) -> RichTable:
            table = RichTable(title=title, box=box.ROUNDED, expand=True)
            table.add_column("Key", style="bold cyan", no_wrap=True)
            table.add_column("Action", style="white")
            for key, action in rows:
                table.add_row(key, action)
            return table

        with Container(id="help-container"):
            yield Label("⌨️ Shortcut Manual", classes="header")
            with ScrollableContainer(id="help-content"):
                yield Static(
                    make_table(
                        "Navigation",
                        [
                            ("j / k, Down / Up", "Move down/up; wraps at both ends."),
                            ("h / l", "Scroll the jobs table left/right."),
                            ("Enter", "Open details of the job under the cursor."),
                            ("?", "Open/close this manual."),
                            ("q", "Quit sjobs."),
                        ],
                    )
                )
                yield Static(
                    make_table(
                        "Selection",
                        [
                            ("Space", "Toggle the row; on an array header, the whole array."),
                            ("a", "Select every job, or clear when all are selected."),
                            ("x / Delete", "Cancel selected jobs (or the job under the cursor)."),
                            ("y", "Copy selected job IDs (or the one under the cursor)."),
                        ],
                    )
                )
                yield Static(
                    make_table(
                        "Array jobs",
                        [
                            ("e", "Expand/collapse the array under the cursor."),
                            ("E", "Expand every array."),
                            ("C", "Collapse every array."),
                        ],
                    )
                )
                yield Static(
                    make_table(
                        "View",
                        [
                            ("s", "Sort by the next displayed column."),
                            ("r", "Reverse the sort order."),
                            ("c", "Toggle compact columns."),
                        ],
                    )
                )

            yield Label("[Press ? or ESC to close]", classes="label")

    def key_escape(self):
        self.dismiss()

    def key_question_mark(self):
        self.dismiss()

    def on_mount(self):
        self.query_one("#help-content", ScrollableContainer).focus()

    def on_key(self, event):
        content = self.query_one("#help-content", ScrollableContainer)
        if event.key in ("j", "down"):
            content.scroll_down(animate=False)
            event.stop()
        elif event.key in ("k", "up"):
            content.scroll_up(animate=False)
            event.stop()
