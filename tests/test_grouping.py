import pytest

from sjobs_grouping import (
    GroupHeader,
    GroupIndex,
    JobRow,
    compute_group_key,
    project_rows,
)


@pytest.mark.parametrize(
    "job_id, key",
    [
        ("12345_7", "12345"),
        ("12345", "12345"),
        ("12345_abc", "12345_abc"),
        ("12345_7_8", "12345_7_8"),
        ("12345_", "12345_"),
        ("12345_[1-10]", "12345_[1-10]"),
        ("_7", ""),
    ],
)
def test_compute_group_key(job_id, key):
    assert compute_group_key(job_id) == key


def test_compute_group_key_accepts_jobs(make_jobs):
    (job,) = make_jobs("42_3")
    assert compute_group_key(job) == "42"


def test_compute_group_key_rejects_non_ascii_digits():
    assert compute_group_key("42_٣") == "42_٣"


def test_build_group_index(array_snapshot):
    groups = GroupIndex.build(array_snapshot)
    assert groups.members("200") == [1, 2]
    assert groups.members("100") == [0]
    assert groups.members("missing") == []
    assert list(groups.array_keys()) == ["200"]
    assert len(groups) == 3
    assert "300" in groups


def test_members_returns_a_copy(array_snapshot):
    groups = GroupIndex.build(array_snapshot)
    groups.members("200").append(99)
    assert groups.member_count("200") == 2


def test_collapsed_rows(array_snapshot):
    groups = GroupIndex.build(array_snapshot)
    rows = project_rows(array_snapshot, groups, set())
    assert rows == [JobRow(0), GroupHeader("200", 1), JobRow(3)]


def test_expanded_rows(array_snapshot):
    groups = GroupIndex.build(array_snapshot)
    rows = project_rows(array_snapshot, groups, {"200"})
    assert rows == [
        JobRow(0),
        GroupHeader("200", 1),
        JobRow(1),
        JobRow(2),
        JobRow(3),
    ]


def test_expanded_members_follow_header_even_when_scattered(make_jobs):
    jobs = make_jobs("7_1", "8", "7_2", "9", "7_3")
    groups = GroupIndex.build(jobs)

    assert project_rows(jobs, groups, set()) == [
        GroupHeader("7", 0),
        JobRow(1),
        JobRow(3),
    ]
    assert project_rows(jobs, groups, {"7"}) == [
        GroupHeader("7", 0),
        JobRow(0),
        JobRow(2),
        JobRow(4),
        JobRow(1),
        JobRow(3),
    ]


def test_singleton_key_in_expansion_set_is_ignored(make_jobs):
    jobs = make_jobs("5_1", "6")
    groups = GroupIndex.build(jobs)
    assert project_rows(jobs, groups, {"5", "6"}) == [JobRow(0), JobRow(1)]


@pytest.mark.parametrize(
    "job_ids",
    [
        [],
        ["1"],
        ["1_1", "1_2", "1_3"],
        ["10", "11_1", "12_1", "11_2", "12_2", "13", "11_3"],
        ["5_1_1", "5_1_2", "5_1", "5_2", "5"],
    ],
)
def test_fully_expanded_rows_cover_every_job_once(make_jobs, job_ids):
    jobs = make_jobs(*job_ids)
    groups = GroupIndex.build(jobs)
    rows = project_rows(jobs, groups, set(groups.array_keys()))

    shown = [row.job_index for row in rows if isinstance(row, JobRow)]
    assert sorted(shown) == list(range(len(jobs)))

    headers = [row for row in rows if isinstance(row, GroupHeader)]
    assert [h.key for h in headers] == list(groups.array_keys())
    for header in headers:
        assert header.representative == groups.members(header.key)[0]


def test_collapsed_rows_reach_every_job(make_jobs):
    jobs = make_jobs("10", "11_1", "12_1", "11_2", "12_2", "13", "11_3")
    groups = GroupIndex.build(jobs)
    rows = project_rows(jobs, groups, set())

    reached = []
    for row in rows:
        if isinstance(row, GroupHeader):
            reached.extend(groups.members(row.key))
        else:
            reached.append(row.job_index)
    assert sorted(reached) == list(range(len(jobs)))
    assert len(rows) == 4
