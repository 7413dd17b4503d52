import pytest

from sjobs_models import Job, JobState


def make_job(job_id: str, **fields) -> Job:
    fields.setdefault("name", f"job_{job_id}")
    fields.setdefault("user", "alice")
    fields.setdefault("state", JobState.RUNNING)
    return Job(id=job_id, **fields)


@pytest.fixture
def make_jobs():
    def factory(*job_ids: str) -> list[Job]:
        return [make_job(job_id) for job_id in job_ids]

    return factory


@pytest.fixture
def array_snapshot(make_jobs):
    return make_jobs("100", "200_1", "200_2", "300")
