import logging
from datetime import datetime

from rich import box
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text
from textual import on
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.reactive import reactive
from textual.widgets import DataTable, Footer, Label, Static

from sjobs_clipboard import copy_job_ids
from sjobs_columns import COMPACT_COLUMNS, SortColumn, SortOrder
from sjobs_config import (
    CLUSTER_NAME,
    DASHBOARD_TITLE,
    JOB_COLUMNS,
    REFRESH_RATE,
    SORT_COLUMNS,
)
from sjobs_grouping import GroupHeader
from sjobs_jobslist import JobsList, RowView
from sjobs_screens import CancelConfirmationScreen, JobDetailScreen, ShortcutHelpScreen
from slurm_backend import cancel_jobs, get_job_stats

logger = logging.getLogger(__name__)


class Branding(Static):
    def on_mount(self):
        self.update_branding()
        self.set_interval(1.0, self.update_branding)

    def update_branding(self):
        grid = RichTable.grid(expand=True)
        grid.add_column(justify="left", ratio=1)
        grid.add_column(justify="center", ratio=1)
        grid.add_column(justify="right", ratio=1)
        title = Text(f" {DASHBOARD_TITLE}", style="bold cyan")
        cluster = Text(f"🖥  {CLUSTER_NAME}", style="bold magenta")
        clock = Text(f"{datetime.now().strftime('%H:%M:%S')} ", style="bold green")
        grid.add_row(title, cluster, clock)
        self.update(Panel(grid, style="white", box=box.ROUNDED, height=3))


class JobsTable(DataTable):
    """DataTable whose cursor follows the wrapping navigation of a JobsList."""

    BINDINGS = [
        ("j", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
    ]

    def __init__(self, jobs_list: JobsList, **kwargs):
        super().__init__(cursor_type="row", **kwargs)
        self.jobs_list = jobs_list

    def sync_cursor(self) -> None:
        if self.jobs_list.cursor is not None and self.row_count:
            self.move_cursor(row=self.jobs_list.cursor, animate=False)

    def action_cursor_down(self) -> None:
        if self.jobs_list.next():
            self.sync_cursor()

    def action_cursor_up(self) -> None:
        if self.jobs_list.previous():
            self.sync_cursor()


def row_cells(jobs_list: JobsList, view: RowView, columns) -> list[Text]:
    style = view.color
    if view.is_group:
        style += " bold"
    if view.selected:
        style += " reverse"
    return [Text(jobs_list.cell(column, view), style=style) for column in columns]


class SlurmJobsDashboard(App):
    CSS = """
    Screen { layout: vertical; }
    Branding { height: auto; width: 100%; margin: 0; padding: 0; }

    #job-pane {
        width: 1fr;
        height: 1fr;
        overflow: hidden;
    }

    #job-scroll-wrapper {
        width: 100%;
        height: 1fr;
        overflow-x: auto;
    }

    .pane-header { text-align: center; text-style: bold; background: $panel; color: $text; padding: 0 1; width: 100%; border-bottom: solid $accent; }
    JobsTable { height: 100%; scrollbar-gutter: stable; }

    #statusline {
        height: 1;
        width: 100%;
        layout: horizontal;
        background: #334155;
        color: #e2e8f0;
    }

    #selection-pill {
        width: auto;
        height: 1;
        min-width: 8;
        padding: 0 1;
        content-align: center middle;
        text-style: bold;
        background: #1e3a8a;
        color: #dbeafe;
    }

    SlurmJobsDashboard.-has-selection #selection-pill {
        background: #f59e0b;
        color: #1f2937;
    }

    #status-footer {
        width: 1fr;
        height: 1;
        dock: none;
        background: transparent;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("space", "toggle_select", "Select"),
        ("a", "select_all", "All"),
        ("e", "toggle_group", "Expand"),
        ("E", "expand_all", "Expand all"),
        ("C", "collapse_all", "Collapse all"),
        ("s", "cycle_sort", "Sort"),
        ("r", "reverse_sort", "Reverse"),
        ("c", "toggle_compact", "Compact"),
        ("x", "cancel_jobs", "Cancel"),
        ("delete", "cancel_jobs", "Cancel"),
        ("y", "copy_job_ids", "Copy IDs"),
        ("question_mark", "show_help", "Help"),
    ]

    show_compact = reactive(False)

    def __init__(self, fetch_jobs=get_job_stats, refresh_rate: float = REFRESH_RATE):
        super().__init__()
        self.fetch_jobs = fetch_jobs
        self.refresh_rate = refresh_rate
        self.jobs_list = JobsList()
        self.columns = list(JOB_COLUMNS)
        self.sort_specs = list(SORT_COLUMNS)
        self._jobs_ready = False

    def compose(self) -> ComposeResult:
        yield Branding()
        with Vertical(id="job-pane"):
            yield Label("📊 JOBS", id="jobs-header", classes="pane-header")
            with Container(id="job-scroll-wrapper"):
                yield JobsTable(self.jobs_list, id="job_table")
        with Horizontal(id="statusline"):
            yield Static("", id="selection-pill")
            yield Footer(id="status-footer")

    def on_mount(self) -> None:
        self.title = "Slurm Jobs"
        self._jobs_ready = True
        self.query_one(JobsTable).focus()
        if self.refresh_rate > 0:
            self.set_interval(self.refresh_rate, self.update_data)
        self.update_data()

    def on_key(self, event):
        if event.character == "?":
            self.action_show_help()
            event.stop()
            return

        table = self.query_one(JobsTable)
        if table.has_focus:
            wrapper = self.query_one("#job-scroll-wrapper")
            if event.key in ("left", "h"):
                wrapper.scroll_left(animate=False)
                event.stop()
            elif event.key in ("right", "l"):
                wrapper.scroll_right(animate=False)
                event.stop()

    @on(DataTable.RowHighlighted, "#job_table")
    def follow_table_cursor(self, event: DataTable.RowHighlighted) -> None:
        # Stale highlights from a redraw no longer match the table's cursor.
        if event.cursor_row == event.data_table.cursor_row:
            self.jobs_list.move_cursor(event.cursor_row)

    @on(DataTable.RowSelected, "#job_table")
    def show_job_details(self, event: DataTable.RowSelected):
        job = self.jobs_list.selected_job()
        if job is None:
            return
        row = self.jobs_list.current_row
        group_size = 1
        if isinstance(row, GroupHeader):
            group_size = self.jobs_list.groups.member_count(row.key)
        self.push_screen(JobDetailScreen(job.id, group_size))

    def target_job_ids(self) -> list[str]:
        """Selected jobs, or the job under the cursor when nothing is selected."""
        selected = self.jobs_list.selected_ids()
        if selected:
            return selected
        job = self.jobs_list.selected_job()
        return [job.id] if job else []

    def action_toggle_select(self) -> None:
        self.jobs_list.toggle_select()
        self.render_jobs()

    def action_select_all(self) -> None:
        if self.jobs_list.job_count and self.jobs_list.all_selected():
            self.jobs_list.clear_selection()
        else:
            self.jobs_list.select_all()
        self.render_jobs()

    def action_toggle_group(self) -> None:
        self.jobs_list.toggle_group_expand()
        self.render_jobs()

    def action_expand_all(self) -> None:
        self.jobs_list.expand_all()
        self.render_jobs()

    def action_collapse_all(self) -> None:
        self.jobs_list.collapse_all()
        self.render_jobs()

    def action_cycle_sort(self) -> None:
        if not self.columns:
            return
        order = self.sort_specs[0].order if self.sort_specs else SortOrder.ASCENDING
        position = (self.jobs_list.sort_column + 1) % len(self.columns)
        self.sort_specs = [SortColumn(self.columns[position], order)]
        self.update_data()

    def action_reverse_sort(self) -> None:
        if not self.sort_specs:
            return
        first = self.sort_specs[0]
        self.sort_specs = [SortColumn(first.column, first.order.reversed())]
        self.update_data()

    def action_toggle_compact(self) -> None:
        self.show_compact = not self.show_compact

    def watch_show_compact(self, value: bool) -> None:
        self.columns = list(COMPACT_COLUMNS if value else JOB_COLUMNS)
        if self._jobs_ready:
            self.render_jobs()

    def action_copy_job_ids(self) -> None:
        job_ids = self.target_job_ids()
        if not job_ids:
            self.notify("No job selected.", severity="warning")
            return
        if copy_job_ids(job_ids):
            self.notify(f"Copied {len(job_ids)} job ID(s).")
        else:
            self.notify("Clipboard unavailable.", severity="error")

    def action_cancel_jobs(self) -> None:
        job_ids = self.target_job_ids()
        if not job_ids:
            self.notify("No job selected.", severity="warning")
            return
        wanted = set(job_ids)
        owners = {job.user for job in self.jobs_list.jobs if job.id in wanted}

        def handle_cancel_response(confirmed: bool | None):
            if not confirmed:
                return
            if cancel_jobs(job_ids):
                self.notify(f"Cancelled {len(job_ids)} job(s).")
                self.jobs_list.clear_selection()
            else:
                self.notify("scancel failed, see log.", severity="error")
            self.update_data()

        self.push_screen(CancelConfirmationScreen(job_ids, owners), handle_cancel_response)

    def action_show_help(self):
        if isinstance(self.screen, ShortcutHelpScreen):
            self.pop_screen()
            return
        self.push_screen(ShortcutHelpScreen())

    def update_data(self):
        try:
            jobs = self.fetch_jobs(self.sort_specs)
        except Exception as error:
            logger.exception("Fetching jobs failed")
            self.notify(f"Refresh failed: {error}", severity="error")
            return
        self.jobs_list.update(jobs)
        self.render_jobs()

    def render_jobs(self):
        self.jobs_list.update_sort(self.columns, self.sort_specs)

        wrapper = self.query_one("#job-scroll-wrapper")
        table = self.query_one(JobsTable)
        scroll_x, scroll_y = wrapper.scroll_x, table.scroll_y

        table.clear(columns=True)
        table.add_columns(*self.jobs_list.header_titles(self.columns))
        for view in self.jobs_list.row_views():
            table.add_row(*row_cells(self.jobs_list, view, self.columns))

        table.scroll_y = scroll_y
        wrapper.scroll_x = scroll_x
        table.sync_cursor()
        self.update_status()

    def update_status(self):
        jobs_list = self.jobs_list
        selected = len(jobs_list.selection)
        header = self.query_one("#jobs-header", Label)
        header.update(f"📊 {jobs_list.job_count} JOBS · {len(jobs_list.rows)} ROWS")
        pill = self.query_one("#selection-pill", Static)
        pill.update(f" {selected} SELECTED " if selected else " NORMAL ")
        self.set_class(selected > 0, "-has-selection")
