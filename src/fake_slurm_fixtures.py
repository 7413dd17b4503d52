"""Fake Slurm fixtures for screenshots, tests and local demo mode."""

from __future__ import annotations

import re
import shlex

FAKE_CLUSTER_NAME = "DEMO-CLUSTER"

# squeue format letter -> fixture field
_FORMAT_FIELDS = {
    "i": "id",
    "j": "name",
    "u": "user",
    "T": "state",
    "P": "part",
    "q": "qos",
    "D": "nodes",
    "N": "nodelist",
    "C": "cpus",
    "M": "time",
    "m": "mem",
    "a": "account",
    "Q": "prio",
    "p": "prio",
    "Z": "workdir",
    "V": "submit",
    "S": "start",
    "e": "end",
    "r": "reason",
}
_NUMERIC_FIELDS = {"nodes", "cpus", "prio"}


def _job(
    job_id: str,
    user: str,
    state: str,
    time: str,
    nodes: str,
    cpus: str,
    mem: str,
    part: str,
    qos: str,
    account: str,
    prio: str,
    nodelist: str,
    reason: str,
    submit: str,
    start: str,
    name: str,
    end: str = "N/A",
) -> dict[str, str]:
    return {
        "id": job_id,
        "user": user,
        "state": state,
        "time": time,
        "nodes": nodes,
        "cpus": cpus,
        "mem": mem,
        "part": part,
        "qos": qos,
        "account": account,
        "prio": prio,
        "nodelist": nodelist,
        "reason": reason,
        "workdir": f"/home/{user}/projects/{name.split('.')[0]}",
        "submit": submit,
        "start": start,
        "end": end,
        "name": name,
    }


def _array(
    parent: str,
    tasks: range,
    states: dict[int, str],
    user: str,
    name: str,
    account: str,
    prio: str,
    submit: str,
) -> list[dict[str, str]]:
    jobs = []
    for task in tasks:
        state = states.get(task, "RUNNING")
        running = state == "RUNNING"
        jobs.append(
            _job(
                f"{parent}_{task}",
                user,
                state,
                f"00:{10 + task:02d}:{(task * 7) % 60:02d}" if running else "0:00",
                "1",
                "8",
                "32G",
                "gpu" if int(prio) > 4500 else "cpu",
                "std",
                account,
                prio,
                f"cpu-a{task % 12 + 1:02d}" if running else "",
                "None" if running else ("Priority" if state == "PENDING" else "NonZeroExitCode"),
                submit,
                submit if running else "N/A",
                name,
                end="2026-02-21T12:40:00" if state in {"COMPLETED", "FAILED"} else "N/A",
            )
        )
    return jobs


_FAKE_JOBS = [
    _job("451950", "alice", "RUNNING", "17:52:11", "6", "384", "2048G", "gpu", "gpu_ultra", "ml_lab", "4900", "gpu-a[01-06]", "None", "2026-02-20T18:40:00", "2026-02-20T18:41:02", "trained_AGI_encoder"),
    *_array("451960", range(1, 7), {5: "PENDING", 6: "PENDING"}, "bob", "lr_sweep.sbatch", "ml_ops", "4700", "2026-02-21T09:05:00"),
    _job("451952", "carol", "PENDING", "0:00", "8", "512", "2048G", "gpu", "std", "research", "4680", "", "Resources", "2026-02-21T12:02:11", "N/A", "diffusion_lr_schedule_with_an_unreasonably_long_name"),
    _job("451953", "dave", "RUNNING", "03:28:41", "3", "192", "512G", "cpu", "std", "ml_platform", "4580", "cpu-a[01-03]", "None", "2026-02-21T08:03:44", "2026-02-21T08:05:00", "vanishing_gradient_clinic"),
    *_array("451970", range(1, 4), {3: "FAILED"}, "eve", "tokenizer_shards.sh", "ml_research", "4400", "2026-02-21T10:40:00"),
    _job("451954", "eve", "TIMEOUT", "08:00:00", "2", "128", "768G", "gpu", "std", "ml_research", "4300", "gpu-a[03-04]", "TimeLimit", "2026-02-21T02:02:00", "2026-02-21T02:10:00", "beam_search_tunnel_vision", end="2026-02-21T10:10:00"),
    _job("451955", "alice", "CANCELLED", "00:12:00", "1", "64", "256G", "gpu", "std", "ml_lab", "4250", "gpu-a09", "None", "2026-02-21T11:33:11", "2026-02-21T11:40:00", "scheduled_sampling_relapse", end="2026-02-21T11:52:00"),
    _job("451956", "bob", "COMPLETED", "02:44:10", "1", "64", "320G", "gpu", "gpu_high", "ml_ops", "4200", "gpu-a12", "None", "2026-02-21T09:05:00", "2026-02-21T09:06:00", "lora_rank_budget_review", end="2026-02-21T11:50:10"),
    _job("451957", "carol", "NODE_FAIL", "01:01:01", "4", "256", "768G", "cpu", "std", "research", "4150", "cpu-a[05-08]", "NodeDown", "2026-02-21T10:22:10", "2026-02-21T10:30:00", "reward_model_disagreement", end="2026-02-21T11:31:01"),
    *_array("451980", range(1, 11), {n: "PENDING" for n in range(4, 11)}, "dave", "eval_matrix.py", "ml_platform", "4100", "2026-02-21T12:15:40"),
    _job("451958", "dave", "CONFIGURING", "0:05", "2", "128", "640G", "gpu", "std", "ml_platform", "4050", "gpu-a[13-14]", "None", "2026-02-21T12:15:40", "2026-02-21T12:50:00", "checkpoint_resume_ritual"),
    _job("451959", "eve", "PENDING", "0:00", "6", "384", "2304G", "gpu", "gpu_ultra", "ml_research", "4000", "", "Dependency", "2026-02-21T12:20:20", "N/A", "moe_router_lottery"),
    _job("451961", "alice", "RUNNING", "05:01:02", "2", "128", "1024G", "bigmem", "highmem", "ml_lab", "3950", "hm-a[01-02]", "None", "2026-02-21T03:30:00", "2026-02-21T03:31:00", "tensorboard_confessional"),
    _job("451962", "bob", "BOOT_FAIL", "0:00", "1", "64", "96G", "cpu", "low", "ml_ops", "3900", "cpu-a05", "BootFail", "2026-02-21T12:30:05", "2026-02-21T12:31:00", "nan_loss_postmortem", end="2026-02-21T12:31:05"),
    _job("451963_7_2", "carol", "PENDING", "0:00", "1", "16", "64G", "cpu", "low", "research", "3850", "", "Priority", "2026-02-21T12:33:00", "N/A", "nested_task_label"),
    _job("451964", "carol", "RUNNING", "13:21:45", "4", "256", "1280G", "gpu", "gpu_high", "research", "3800", "gpu-a[05-08]", "None", "2026-02-20T23:45:00", "2026-02-20T23:46:00", "prompt_template_regression"),
]

_FAKE_JOB_MAP = {job["id"]: job for job in _FAKE_JOBS}


def get_fake_cluster_name() -> str:
    return FAKE_CLUSTER_NAME


def _option(args: list[str], name: str) -> str:
    for pos, arg in enumerate(args):
        if arg.startswith(f"{name}="):
            return arg.split("=", 1)[1]
        if arg == name and pos + 1 < len(args):
            return args[pos + 1]
    return ""


def _id_sort_key(job_id: str) -> tuple:
    parts = re.split(r"[_\[\]-]", job_id)
    return tuple((0, int(p), "") if p.isdigit() else (1, 0, p) for p in parts if p)


def _field_sort_key(field: str):
    def key(job: dict[str, str]):
        value = job[field]
        if field == "id":
            return _id_sort_key(value)
        if field in _NUMERIC_FIELDS:
            return int(value) if value.isdigit() else 0
        return value

    return key


def _sorted_jobs(sort_arg: str) -> list[dict[str, str]]:
    jobs = list(_FAKE_JOBS)
    keys = [k.strip() for k in sort_arg.split(",") if k.strip()]
    # Stable sorts applied from the least significant key.
    for key in reversed(keys):
        descending = key.startswith("-")
        field = _FORMAT_FIELDS.get(key.lstrip("+-"))
        if field is None:
            continue
        jobs.sort(key=_field_sort_key(field), reverse=descending)
    return jobs


def _fake_squeue_output(args: list[str]) -> str:
    fmt = _option(args, "--format") or _option(args, "-o")
    specifiers = re.findall(r"%\.?\d*([a-zA-Z])", fmt)
    delimiter = "|" if "|" in fmt else " "
    fields = [_FORMAT_FIELDS.get(letter, "") for letter in specifiers]

    lines = []
    if "--noheader" not in args and "-h" not in args:
        lines.append(delimiter.join(f.upper() or "?" for f in fields))
    for job in _sorted_jobs(_option(args, "--sort") or _option(args, "-S")):
        lines.append(delimiter.join(job.get(f, "") for f in fields))
    return "\n".join(lines)


def _fake_uid_for_user(user: str) -> int:
    return 1000 + (sum(ord(c) for c in user) % 700)


def _fake_job_detail(job_id: str) -> str:
    job = _FAKE_JOB_MAP.get(job_id)
    if not job:
        return f"slurm_load_jobs error: Invalid job id specified ({job_id})"

    user = job["user"]
    array_id, _, task_id = job_id.partition("_")
    array_fields = f"ArrayJobId={array_id} ArrayTaskId={task_id} " if task_id else ""
    return (
        f"JobId={job_id} {array_fields}JobName={job['name']} "
        f"UserId={user}({_fake_uid_for_user(user)}) Account={job['account']} "
        f"QOS={job['qos']} JobState={job['state']} Reason={job['reason']} "
        f"Dependency=(null) RunTime={job['time']} TimeLimit=1-00:00:00 "
        f"SubmitTime={job['submit']} StartTime={job['start']} EndTime={job['end']} "
        f"Partition={job['part']} NodeList={job['nodelist'] or '(null)'} "
        f"NumNodes={job['nodes']} NumCPUs={job['cpus']} "
        f"Command={job['workdir']}/{job['name']} WorkDir={job['workdir']} "
        f"StdOut={job['workdir']}/slurm-{job_id}.out"
    )


def _fake_sstat(job_id: str) -> str:
    job = _FAKE_JOB_MAP.get(job_id)
    if not job or job["state"] != "RUNNING":
        return ""
    seed = sum(ord(c) for c in job_id) % 40
    mem_gib = int(job["mem"].rstrip("GM") or 1)
    ave_rss = max(1, mem_gib * (30 + seed) // 100)
    max_rss = max(ave_rss + 1, mem_gib * (55 + seed) // 100)
    return f"00:{seed + 10:02d}:{seed:02d}|{ave_rss}G|{max_rss}G|{seed * 1.5:.1f}G|{seed * 0.7:.1f}G"


def run_fake_slurm_command(cmd: str) -> str:
    args = shlex.split(cmd)
    if not args:
        return ""
    program = args[0]
    if program == "squeue":
        return _fake_squeue_output(args[1:])
    if program == "scontrol" and args[1:3] == ["show", "job"] and len(args) > 3:
        return _fake_job_detail(args[3])
    if program == "sstat" and "-j" in args:
        job_id = args[args.index("-j") + 1].split(".")[0]
        return _fake_sstat(job_id)
    if program == "scancel":
        return ""
    return ""
