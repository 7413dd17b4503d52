from __future__ import annotations

import logging
from typing import Sequence

from sjobs_grouping import GroupHeader, GroupIndex, VisibleRow
from sjobs_models import Job, JobIndex

logger = logging.getLogger(__name__)


class SelectionSet:
    """Selected jobs, tracked by snapshot index rather than by row."""

    def __init__(self):
        self._selected: set[JobIndex] = set()

    def toggle(self, row: VisibleRow, groups: GroupIndex) -> None:
        """
        Flips the selection of a row.

        A group header selects every member, unless every member is
        already selected, in which case the whole group is deselected.
        """
        if isinstance(row, GroupHeader):
            members = groups.members(row.key)
            if not members:
                return
            if all(idx in self._selected for idx in members):
                self._selected.difference_update(members)
            else:
                self._selected.update(members)
            return

        if row.job_index in self._selected:
            self._selected.discard(row.job_index)
        else:
            self._selected.add(row.job_index)

    def select_all(self, job_count: int) -> None:
        self._selected = {JobIndex(i) for i in range(job_count)}

    def clear(self) -> None:
        self._selected.clear()

    def all_selected(self, job_count: int) -> bool:
        return len(self._selected) == job_count

    def is_row_selected(self, row: VisibleRow, groups: GroupIndex) -> bool:
        if isinstance(row, GroupHeader):
            return any(idx in self._selected for idx in groups.members(row.key))
        return row.job_index in self._selected

    def indices(self) -> list[JobIndex]:
        return sorted(self._selected)

    def selected_ids(self, jobs: Sequence[Job]) -> list[str]:
        return [jobs[idx].id for idx in self.indices() if 0 <= idx < len(jobs)]

    def remap(self, old_jobs: Sequence[Job], new_jobs: Sequence[Job]) -> None:
        """Carries the selection over to a new snapshot by job id."""
        wanted = set(self.selected_ids(old_jobs))
        self._selected = {
            JobIndex(i) for i, job in enumerate(new_jobs) if job.id in wanted
        }
        dropped = len(wanted) - len(self._selected)
        if dropped:
            logger.debug("Dropped %d selected jobs that left the queue", dropped)

    def __contains__(self, idx: object) -> bool:
        return idx in self._selected

    def __len__(self) -> int:
        return len(self._selected)
