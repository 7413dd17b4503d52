import pytest

from sjobs_models import JobState, state_color
from conftest import make_job


@pytest.mark.parametrize(
    "text, expected",
    [
        ("RUNNING", JobState.RUNNING),
        ("pending", JobState.PENDING),
        ("BOOT_FAIL", JobState.BOOT),
        ("NODE_FAIL", JobState.NODE_FAIL),
        ("CANCELLED by 1042", JobState.CANCELLED),
        ("COMPLETING", JobState.OTHER),
        ("", JobState.OTHER),
        (None, JobState.OTHER),
    ],
)
def test_parse_state(text, expected):
    assert JobState.parse(text) is expected


def test_state_colors():
    assert state_color(JobState.PENDING) == "yellow"
    assert state_color(JobState.RUNNING) == "green"
    assert state_color(JobState.COMPLETED) == "blue"
    for state in (JobState.FAILED, JobState.TIMEOUT, JobState.NODE_FAIL, JobState.BOOT):
        assert state_color(state) == "red"
    assert state_color(JobState.CANCELLED) == "magenta"
    assert state_color(JobState.OTHER) == "white"


def test_state_label_keeps_unknown_scheduler_text():
    job = make_job("1", state=JobState.OTHER, state_raw="COMPLETING")
    assert job.state_label == "COMPLETING"
    assert make_job("2").state_label == "RUNNING"
