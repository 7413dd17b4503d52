from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Sequence

logger = logging.getLogger(__name__)


class JobColumn(Enum):
    # (title, default width, squeue --sort field)
    ID = ("ID", 18, "i")
    NAME = ("Name", 30, "j")
    USER = ("User", 10, "u")
    STATE = ("State", 11, "T")
    PARTITION = ("Part", 10, "P")
    QOS = ("QOS", 10, "q")
    NODES = ("Nodes", 5, "D")
    NODE = ("Node/List", 16, "N")
    CPUS = ("CPUs", 5, "C")
    TIME = ("Time", 11, "M")
    MEMORY = ("Mem", 8, "m")
    ACCOUNT = ("Acct", 12, "a")
    PRIORITY = ("Prio", 8, "p")
    WORK_DIR = ("WorkDir", 20, "Z")
    SUBMIT_TIME = ("Submit", 19, "V")
    START_TIME = ("Start", 19, "S")
    END_TIME = ("End", 19, "e")
    PREASON = ("Reason", 16, "r")

    def __init__(self, title: str, default_width: int, sort_key: str):
        self.title = title
        self.default_width = default_width
        self.sort_key = sort_key

    @classmethod
    def lookup(cls, name: str) -> "JobColumn | None":
        normalized = name.strip().upper().replace("-", "_")
        return cls.__members__.get(normalized)


class SortOrder(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def reversed(self) -> "SortOrder":
        if self is SortOrder.ASCENDING:
            return SortOrder.DESCENDING
        return SortOrder.ASCENDING


@dataclass(frozen=True)
class SortColumn:
    column: JobColumn
    order: SortOrder = SortOrder.ASCENDING


DEFAULT_COLUMNS = [
    JobColumn.ID,
    JobColumn.NAME,
    JobColumn.USER,
    JobColumn.ACCOUNT,
    JobColumn.STATE,
    JobColumn.PRIORITY,
    JobColumn.TIME,
    JobColumn.CPUS,
    JobColumn.MEMORY,
    JobColumn.NODES,
    JobColumn.NODE,
    JobColumn.QOS,
    JobColumn.PARTITION,
    JobColumn.SUBMIT_TIME,
    JobColumn.PREASON,
]

COMPACT_COLUMNS = [
    JobColumn.ID,
    JobColumn.USER,
    JobColumn.STATE,
    JobColumn.TIME,
    JobColumn.NODES,
]

DEFAULT_SORT = [
    SortColumn(JobColumn.STATE, SortOrder.ASCENDING),
    SortColumn(JobColumn.PRIORITY, SortOrder.DESCENDING),
]


def parse_columns(text: str | None) -> list[JobColumn]:
    """Reads "id,name,state"; falls back to the default column set."""
    columns = []
    for token in (text or "").split(","):
        if not token.strip():
            continue
        column = JobColumn.lookup(token)
        if column is None:
            logger.warning("Ignoring unknown column %r", token.strip())
        elif column not in columns:
            columns.append(column)
    return columns or list(DEFAULT_COLUMNS)


def parse_sort(text: str | None) -> list[SortColumn]:
    """Reads "state:asc,priority:desc"; order defaults to ascending."""
    specs = []
    for token in (text or "").split(","):
        if not token.strip():
            continue
        name, _, order = token.partition(":")
        column = JobColumn.lookup(name)
        if column is None:
            logger.warning("Ignoring unknown sort column %r", name.strip())
            continue
        order = order.strip().lower() or SortOrder.ASCENDING.value
        try:
            sort_order = SortOrder(order)
        except ValueError:
            logger.warning("Unknown sort order %r for %s", order, column.name)
            sort_order = SortOrder.ASCENDING
        specs.append(SortColumn(column, sort_order))
    return specs or list(DEFAULT_SORT)


def squeue_sort_arg(specs: Sequence[SortColumn]) -> str:
    keys = []
    for spec in specs:
        prefix = "-" if spec.order is SortOrder.DESCENDING else ""
        keys.append(f"{prefix}{spec.column.sort_key}")
    return ",".join(keys)
