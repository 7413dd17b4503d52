import logging
import shlex
import subprocess
from typing import Sequence

from fake_slurm_fixtures import run_fake_slurm_command
from sjobs_columns import SortColumn, squeue_sort_arg
from sjobs_config import USE_FAKE_DATA
from sjobs_models import Job, JobState

logger = logging.getLogger(__name__)

# The job name goes last so a "|" inside it cannot shift the other fields.
SQUEUE_FIELDS = [
    ("id", "%i"),
    ("user", "%u"),
    ("state", "%T"),
    ("time", "%M"),
    ("nodes", "%D"),
    ("cpus", "%C"),
    ("memory", "%m"),
    ("partition", "%P"),
    ("qos", "%q"),
    ("account", "%a"),
    ("priority", "%Q"),
    ("node", "%N"),
    ("reason", "%r"),
    ("work_dir", "%Z"),
    ("submit", "%V"),
    ("start", "%S"),
    ("end", "%e"),
    ("name", "%j"),
]
SQUEUE_FORMAT = "|".join(spec for _, spec in SQUEUE_FIELDS)
_EMPTY_VALUES = {"", "(null)", "N/A", "None", "n/a"}


def run_slurm_command(cmd: str) -> str:
    if USE_FAKE_DATA:
        return run_fake_slurm_command(cmd)
    return subprocess.getoutput(cmd)


def _optional(value: str):
    value = value.strip()
    return None if value in _EMPTY_VALUES else value


def _to_int(value: str, default=0):
    try:
        return int(value.strip())
    except ValueError:
        return default


def parse_squeue_line(line: str) -> Job | None:
    parts = line.split("|", len(SQUEUE_FIELDS) - 1)
    if len(parts) != len(SQUEUE_FIELDS):
        return None
    data = {key: value for (key, _), value in zip(SQUEUE_FIELDS, parts)}
    if not data["id"].strip():
        return None

    state_raw = data["state"].strip()
    state = JobState.parse(state_raw)
    return Job(
        id=data["id"].strip(),
        name=data["name"].strip(),
        user=data["user"].strip(),
        state=state,
        partition=data["partition"].strip(),
        qos=data["qos"].strip(),
        nodes=_to_int(data["nodes"]),
        cpus=_to_int(data["cpus"]),
        time=data["time"].strip(),
        memory=data["memory"].strip(),
        node=_optional(data["node"]),
        account=_optional(data["account"]),
        priority=_to_int(data["priority"], default=None),
        work_dir=_optional(data["work_dir"]),
        submit_time=_optional(data["submit"]),
        start_time=_optional(data["start"]),
        end_time=_optional(data["end"]),
        # squeue reports "None" as the reason of jobs that are not waiting
        pending_reason=_optional(data["reason"]),
        state_raw=state_raw,
    )


def build_squeue_command(sort_specs: Sequence[SortColumn] = ()) -> str:
    cmd = f"squeue --all --states=all --noheader --format={shlex.quote(SQUEUE_FORMAT)}"
    sort_arg = squeue_sort_arg(sort_specs)
    if sort_arg:
        cmd += f" --sort={shlex.quote(sort_arg)}"
    return cmd


def get_job_stats(sort_specs: Sequence[SortColumn] = ()) -> list[Job]:
    """Returns the current queue, already ordered by squeue."""
    try:
        output = run_slurm_command(build_squeue_command(sort_specs))
    except Exception:
        logger.warning("squeue failed", exc_info=True)
        return []

    jobs = []
    for line in output.split("\n"):
        if not line.strip():
            continue
        job = parse_squeue_line(line)
        if job is None:
            logger.debug("Skipping malformed squeue line: %r", line)
            continue
        jobs.append(job)
    return jobs


def get_job_details(job_id: str):
    details = {"raw": "", "sstat": ""}
    try:
        details["raw"] = run_slurm_command(f"scontrol show job {shlex.quote(job_id)}")
    except Exception:
        logger.warning("scontrol show job %s failed", job_id, exc_info=True)
        details["raw"] = "Error fetching job details."

    if "JobState=RUNNING" in details["raw"]:
        try:
            cmd = (
                f"sstat -j {shlex.quote(job_id)} --format=AveCPU,AveRSS,MaxRSS,"
                "MaxDiskRead,MaxDiskWrite -n -P"
            )
            details["sstat"] = run_slurm_command(cmd)
        except Exception:
            logger.warning("sstat for %s failed", job_id, exc_info=True)

    return details


def cancel_jobs(job_ids: Sequence[str]) -> bool:
    if not job_ids:
        return False
    cmd = "scancel " + " ".join(shlex.quote(job_id) for job_id in job_ids)
    try:
        output = run_slurm_command(cmd)
    except Exception:
        logger.warning("scancel failed for %s", ", ".join(job_ids), exc_info=True)
        return False
    if "error" in output.lower():
        logger.warning("scancel reported: %s", output.strip())
        return False
    return True
