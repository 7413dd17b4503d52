import pytest

import slurm_backend
from sjobs_columns import JobColumn, SortColumn, SortOrder
from sjobs_grouping import GroupIndex
from sjobs_models import JobState


@pytest.fixture
def fake_slurm(monkeypatch):
    monkeypatch.setattr(slurm_backend, "USE_FAKE_DATA", True)


def _line(**overrides) -> str:
    values = {
        "id": "777_3",
        "user": "bob",
        "state": "PENDING",
        "time": "0:00",
        "nodes": "2",
        "cpus": "16",
        "memory": "64G",
        "partition": "gpu",
        "qos": "std",
        "account": "(null)",
        "priority": "4100",
        "node": "",
        "reason": "Priority",
        "work_dir": "/home/bob/run",
        "submit": "2026-02-21T12:00:00",
        "start": "N/A",
        "end": "N/A",
        "name": "train|eval",
    }
    values.update(overrides)
    return "|".join(values[key] for key, _ in slurm_backend.SQUEUE_FIELDS)


def test_parse_squeue_line():
    job = slurm_backend.parse_squeue_line(_line())
    assert job.id == "777_3"
    assert job.name == "train|eval"
    assert job.state is JobState.PENDING
    assert job.nodes == 2
    assert job.cpus == 16
    assert job.priority == 4100
    assert job.account is None
    assert job.node is None
    assert job.start_time is None
    assert job.pending_reason == "Priority"
    assert job.work_dir == "/home/bob/run"


def test_parse_squeue_line_tolerates_bad_numbers():
    job = slurm_backend.parse_squeue_line(_line(nodes="?", priority="high"))
    assert job.nodes == 0
    assert job.priority is None


def test_parse_squeue_line_rejects_short_lines():
    assert slurm_backend.parse_squeue_line("1|alice|RUNNING") is None
    assert slurm_backend.parse_squeue_line(_line(id=" ")) is None


def test_build_squeue_command():
    cmd = slurm_backend.build_squeue_command(
        [SortColumn(JobColumn.PRIORITY, SortOrder.DESCENDING), SortColumn(JobColumn.ID)]
    )
    assert cmd.startswith("squeue --all")
    assert "--noheader" in cmd
    assert cmd.endswith("--sort=-p,i")
    assert "--sort" not in slurm_backend.build_squeue_command([])


def test_fake_jobs_contain_array_groups(fake_slurm):
    jobs = slurm_backend.get_job_stats()
    assert len(jobs) > 20
    groups = GroupIndex.build(jobs)
    assert groups.member_count("451960") == 6
    assert groups.member_count("451980") == 10
    # Only the first separator counts, so this task stays on its own.
    assert groups.member_count("451963_7_2") == 1
    states = {job.state for job in jobs}
    assert {JobState.RUNNING, JobState.PENDING, JobState.BOOT, JobState.OTHER} <= states


def test_fake_squeue_honours_sort(fake_slurm):
    jobs = slurm_backend.get_job_stats(
        [SortColumn(JobColumn.PRIORITY, SortOrder.DESCENDING)]
    )
    priorities = [job.priority for job in jobs]
    assert priorities == sorted(priorities, reverse=True)

    jobs = slurm_backend.get_job_stats([SortColumn(JobColumn.USER)])
    users = [job.user for job in jobs]
    assert users == sorted(users)


def test_get_job_stats_survives_command_failure(monkeypatch):
    def boom(cmd):
        raise OSError("squeue not found")

    monkeypatch.setattr(slurm_backend, "run_slurm_command", boom)
    assert slurm_backend.get_job_stats() == []


def test_get_job_stats_skips_malformed_lines(monkeypatch):
    output = "\n".join([_line(), "garbage", "", _line(id="778")])
    monkeypatch.setattr(slurm_backend, "run_slurm_command", lambda cmd: output)
    assert [job.id for job in slurm_backend.get_job_stats()] == ["777_3", "778"]


def test_get_job_details_for_running_job(fake_slurm):
    details = slurm_backend.get_job_details("451960_1")
    assert "ArrayJobId=451960" in details["raw"]
    assert details["sstat"].count("|") == 4


def test_cancel_jobs(monkeypatch):
    commands = []
    monkeypatch.setattr(
        slurm_backend, "run_slurm_command", lambda cmd: commands.append(cmd) or ""
    )
    assert slurm_backend.cancel_jobs(["1_1", "1_2"])
    assert commands == ["scancel 1_1 1_2"]
    assert not slurm_backend.cancel_jobs([])


def test_cancel_jobs_reports_scancel_errors(monkeypatch):
    monkeypatch.setattr(
        slurm_backend,
        "run_slurm_command",
        lambda cmd: "scancel: error: Invalid job id 99",
    )
    assert not slurm_backend.cancel_jobs(["99"])
