from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NewType, Optional

# Two index spaces: positions in the job snapshot and positions in the
# rendered row list. They must never be mixed.
JobIndex = NewType("JobIndex", int)
RowIndex = NewType("RowIndex", int)


class JobState(Enum):
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    TIMEOUT = "TIMEOUT"
    NODE_FAIL = "NODE_FAIL"
    BOOT = "BOOT_FAIL"
    CANCELLED = "CANCELLED"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, text: str | None) -> "JobState":
        value = (text or "").strip().upper()
        # scancel'ed jobs come back as "CANCELLED by 1234"
        if value.startswith("CANCELLED"):
            return cls.CANCELLED
        for state in cls:
            if state.value == value:
                return state
        return cls.OTHER

    def __str__(self) -> str:
        return self.value


_STATE_COLORS = {
    JobState.PENDING: "yellow",
    JobState.RUNNING: "green",
    JobState.COMPLETED: "blue",
    JobState.FAILED: "red",
    JobState.TIMEOUT: "red",
    JobState.NODE_FAIL: "red",
    JobState.BOOT: "red",
    JobState.CANCELLED: "magenta",
}


def state_color(state: JobState) -> str:
    return _STATE_COLORS.get(state, "white")


@dataclass
class Job:
    """One scheduler job as reported by squeue."""

    id: str
    name: str
    user: str
    state: JobState
    partition: str = ""
    qos: str = ""
    nodes: int = 0
    cpus: int = 0
    time: str = ""
    memory: str = ""
    node: Optional[str] = None
    account: Optional[str] = None
    priority: Optional[int] = None
    work_dir: Optional[str] = None
    submit_time: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    pending_reason: Optional[str] = None
    state_raw: str = ""

    @property
    def state_label(self) -> str:
        if self.state is JobState.OTHER and self.state_raw:
            return self.state_raw
        return str(self.state)
