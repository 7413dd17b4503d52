"""Array-job grouping and the flattening of jobs into display rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence, Union

from sjobs_models import Job, JobIndex

ARRAY_SEPARATOR = "_"
_DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class GroupHeader:
    key: str
    representative: JobIndex


@dataclass(frozen=True)
class JobRow:
    job_index: JobIndex


VisibleRow = Union[GroupHeader, JobRow]


def compute_group_key(job: Job | str) -> str:
    """
    Returns the array parent id for a task id like "12345_7".

    Only the first separator counts: "12345_7_8" has the suffix "7_8",
    which is not all digits, so the id is its own key.
    """
    job_id = job if isinstance(job, str) else job.id
    prefix, sep, suffix = job_id.partition(ARRAY_SEPARATOR)
    if sep and suffix and all(ch in _DIGITS for ch in suffix):
        return prefix
    return job_id


class GroupIndex:
    """Maps a group key to the snapshot indices of its members, in order."""

    def __init__(self, buckets: dict[str, list[JobIndex]] | None = None):
        self._buckets: dict[str, list[JobIndex]] = buckets or {}

    @classmethod
    def build(cls, jobs: Sequence[Job]) -> "GroupIndex":
        buckets: dict[str, list[JobIndex]] = {}
        for idx, job in enumerate(jobs):
            buckets.setdefault(compute_group_key(job), []).append(JobIndex(idx))
        return cls(buckets)

    def members(self, key: str) -> list[JobIndex]:
        return list(self._buckets.get(key, ()))

    def member_count(self, key: str) -> int:
        return len(self._buckets.get(key, ()))

    def is_array(self, key: str) -> bool:
        return self.member_count(key) > 1

    def array_keys(self) -> Iterator[str]:
        return (key for key, members in self._buckets.items() if len(members) > 1)

    def __contains__(self, key: object) -> bool:
        return key in self._buckets

    def __len__(self) -> int:
        return len(self._buckets)


def project_rows(
    jobs: Sequence[Job], groups: GroupIndex, expanded: Iterable[str]
) -> list[VisibleRow]:
    """
    Flattens the snapshot into rows in original job order.

    A multi-member group shows up as one header at the position of its
    first member; when expanded, every member follows the header.
    """
    expanded = set(expanded)
    rows: list[VisibleRow] = []
    headers_added: set[str] = set()
    displayed: set[int] = set()

    for idx, job in enumerate(jobs):
        if idx in displayed:
            continue

        key = compute_group_key(job)
        members = groups.members(key)
        if len(members) <= 1:
            rows.append(JobRow(JobIndex(idx)))
            displayed.add(idx)
            continue

        if key not in headers_added:
            headers_added.add(key)
            rows.append(GroupHeader(key, JobIndex(idx)))

        if key in expanded:
            for member in members:
                if member not in displayed:
                    rows.append(JobRow(member))
                    displayed.add(member)

    return rows
