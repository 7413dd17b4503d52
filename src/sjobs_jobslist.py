"""
State behind the jobs table: cursor, selection and array-job groups.

The list never reorders jobs; squeue hands them over already sorted and
this module only groups, selects and navigates on top of that order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sjobs_columns import JobColumn, SortColumn, SortOrder
from sjobs_grouping import (
    GroupHeader,
    GroupIndex,
    JobRow,
    VisibleRow,
    compute_group_key,
    project_rows,
)
from sjobs_models import Job, RowIndex, state_color
from sjobs_selection import SelectionSet

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"
NAME_MAX_LEN = 30
NAME_KEEP_LEN = 27
ELLIPSIS = "..."


@dataclass(frozen=True)
class RowView:
    row: VisibleRow
    job: Job
    selected: bool
    color: str
    member_count: int = 1
    expanded: bool = False

    @property
    def is_group(self) -> bool:
        return isinstance(self.row, GroupHeader) and self.member_count > 1


def truncate_name(name: str) -> str:
    if len(name) > NAME_MAX_LEN:
        return name[:NAME_KEEP_LEN] + ELLIPSIS
    return name


def _or_placeholder(value) -> str:
    if value is None:
        return PLACEHOLDER
    return str(value)


class JobsList:
    def __init__(self):
        self.jobs: list[Job] = []
        self.groups = GroupIndex()
        self.rows: list[VisibleRow] = []
        self.expanded: set[str] = set()
        self.selection = SelectionSet()
        self.cursor: Optional[RowIndex] = None
        self.sort_column = 0
        self.sort_ascending = True

    @property
    def job_count(self) -> int:
        return len(self.jobs)

    def update(self, jobs: Sequence[Job]) -> None:
        """Replaces the snapshot and revalidates cursor and selection."""
        old_jobs = self.jobs
        self.jobs = list(jobs)
        self.selection.remap(old_jobs, self.jobs)
        self._rebuild()
        logger.debug(
            "Snapshot of %d jobs -> %d rows, cursor %s",
            len(self.jobs),
            len(self.rows),
            self.cursor,
        )

    def _rebuild(self) -> None:
        self.groups = GroupIndex.build(self.jobs)
        self.rows = project_rows(self.jobs, self.groups, self.expanded)
        self._revalidate_cursor()

    def _revalidate_cursor(self) -> None:
        if self.cursor is not None and self.cursor >= len(self.rows):
            self.cursor = RowIndex(0) if self.rows else None
        elif self.cursor is None and self.rows:
            self.cursor = RowIndex(0)

    def row_at(self, index: Optional[int]) -> Optional[VisibleRow]:
        if index is None or not 0 <= index < len(self.rows):
            return None
        return self.rows[index]

    @property
    def current_row(self) -> Optional[VisibleRow]:
        return self.row_at(self.cursor)

    # --- navigation ---

    def next(self) -> bool:
        """Moves down, wrapping to the top. Returns True if the cursor moved."""
        if not self.rows:
            return False
        old = self.cursor
        if old is None or old >= len(self.rows) - 1:
            new = RowIndex(0)
        else:
            new = RowIndex(old + 1)
        self.cursor = new
        return old != new

    def previous(self) -> bool:
        if not self.rows:
            return False
        old = self.cursor
        if old is None:
            new = RowIndex(0)
        elif old == 0:
            new = RowIndex(len(self.rows) - 1)
        else:
            new = RowIndex(old - 1)
        self.cursor = new
        return old != new

    def move_cursor(self, index: int) -> bool:
        if not 0 <= index < len(self.rows) or index == self.cursor:
            return False
        self.cursor = RowIndex(index)
        return True

    # --- selection ---

    def toggle_select(self) -> None:
        row = self.current_row
        if row is not None:
            self.selection.toggle(row, self.groups)

    def select_all(self) -> None:
        self.selection.select_all(len(self.jobs))

    def clear_selection(self) -> None:
        self.selection.clear()

    def all_selected(self) -> bool:
        return self.selection.all_selected(len(self.jobs))

    def selected_ids(self) -> list[str]:
        return self.selection.selected_ids(self.jobs)

    def is_row_selected(self, row: VisibleRow) -> bool:
        return self.selection.is_row_selected(row, self.groups)

    def selected_job(self) -> Optional[Job]:
        """The job under the cursor; a group header stands for its first task."""
        row = self.current_row
        if isinstance(row, GroupHeader):
            members = self.groups.members(row.key)
            return self.jobs[members[0]] if members else None
        if isinstance(row, JobRow) and row.job_index < len(self.jobs):
            return self.jobs[row.job_index]
        return None

    # --- grouping ---

    def row_key(self, row: VisibleRow) -> str:
        if isinstance(row, GroupHeader):
            return row.key
        return compute_group_key(self.jobs[row.job_index])

    def toggle_group_expand(self) -> None:
        row = self.current_row
        if row is None:
            return
        key = self.row_key(row)
        if key in self.expanded:
            self.expanded.discard(key)
        else:
            self.expanded.add(key)

        self._rebuild()
        header = self._header_position(key)
        if header is not None:
            self.cursor = header

    def expand_all(self) -> None:
        self.expanded.update(self.groups.array_keys())
        self._rebuild_keeping_cursor()

    def collapse_all(self) -> None:
        self.expanded.clear()
        self._rebuild_keeping_cursor()

    def _rebuild_keeping_cursor(self) -> None:
        row = self.current_row
        self._rebuild()
        if row is None:
            return
        if isinstance(row, JobRow) and row in self.rows:
            self.cursor = RowIndex(self.rows.index(row))
            return
        # Header, or a task that just folded away under its header.
        header = self._header_position(self.row_key(row))
        if header is not None:
            self.cursor = header

    def _header_position(self, key: str) -> Optional[RowIndex]:
        for pos, row in enumerate(self.rows):
            if isinstance(row, GroupHeader) and row.key == key:
                return RowIndex(pos)
        return None

    # --- sorting ---

    def update_sort(
        self, columns: Sequence[JobColumn], sort_specs: Sequence[SortColumn]
    ) -> None:
        """Tracks which displayed column carries the sort arrow."""
        if not sort_specs:
            return
        first = sort_specs[0]
        try:
            self.sort_column = list(columns).index(first.column)
        except ValueError:
            self.sort_column = 0
        self.sort_ascending = first.order is SortOrder.ASCENDING

    def header_titles(self, columns: Sequence[JobColumn]) -> list[str]:
        arrow = " ↑" if self.sort_ascending else " ↓"
        return [
            f"{column.title}{arrow}" if pos == self.sort_column else column.title
            for pos, column in enumerate(columns)
        ]

    # --- rendering ---

    def row_view(self, row: VisibleRow) -> RowView:
        if isinstance(row, GroupHeader):
            job = self.jobs[row.representative]
            return RowView(
                row=row,
                job=job,
                selected=self.is_row_selected(row),
                color=state_color(job.state),
                member_count=self.groups.member_count(row.key),
                expanded=row.key in self.expanded,
            )
        job = self.jobs[row.job_index]
        return RowView(
            row=row,
            job=job,
            selected=self.is_row_selected(row),
            color=state_color(job.state),
        )

    def row_views(self) -> list[RowView]:
        return [self.row_view(row) for row in self.rows]

    def cell(self, column: JobColumn, view: RowView) -> str:
        job = view.job
        if column is JobColumn.ID:
            if view.is_group:
                marker = "[-]" if view.expanded else "[+]"
                return f"{view.row.key} {marker} ({view.member_count} tasks)"
            return job.id
        if column is JobColumn.NAME:
            return truncate_name(job.name)
        if column is JobColumn.STATE:
            return job.state_label

        values = {
            JobColumn.USER: job.user,
            JobColumn.PARTITION: job.partition,
            JobColumn.QOS: job.qos,
            JobColumn.NODES: job.nodes,
            JobColumn.NODE: job.node,
            JobColumn.CPUS: job.cpus,
            JobColumn.TIME: job.time,
            JobColumn.MEMORY: job.memory,
            JobColumn.ACCOUNT: job.account,
            JobColumn.PRIORITY: job.priority,
            JobColumn.WORK_DIR: job.work_dir,
            JobColumn.SUBMIT_TIME: job.submit_time,
            JobColumn.START_TIME: job.start_time,
            JobColumn.END_TIME: job.end_time,
            JobColumn.PREASON: job.pending_reason,
        }
        return _or_placeholder(values.get(column))
