import asyncio

import sjobs_dashboard
from sjobs_dashboard import JobsTable, SlurmJobsDashboard
from conftest import make_job


def _snapshot():
    return [make_job(job_id) for job_id in ("100", "200_1", "200_2", "300")]


def _app(jobs=None) -> SlurmJobsDashboard:
    fetched = _snapshot() if jobs is None else jobs
    return SlurmJobsDashboard(fetch_jobs=lambda sort_specs: fetched, refresh_rate=0)


def test_app_starts_and_draws_grouped_rows():
    async def scenario():
        app = _app()
        async with app.run_test(size=(160, 40)) as pilot:
            await pilot.pause()
            table = app.query_one(JobsTable)
            assert table.row_count == 3
            assert app.jobs_list.cursor == 0
            assert table.cursor_row == 0

    asyncio.run(scenario())


def test_navigate_expand_and_select():
    async def scenario():
        app = _app()
        async with app.run_test(size=(160, 40)) as pilot:
            await pilot.pause()
            table = app.query_one(JobsTable)
            assert table.row_count == 3

            await pilot.press("j")
            assert app.jobs_list.cursor == 1

            await pilot.press("e")
            await pilot.pause()
            assert table.row_count == 5
            assert app.jobs_list.cursor == 1

            await pilot.press("space")
            assert app.jobs_list.selected_ids() == ["200_1", "200_2"]

            await pilot.press("k", "k")
            await pilot.pause()
            assert app.jobs_list.cursor == 4
            assert table.cursor_row == 4

    asyncio.run(scenario())


def test_select_all_toggles():
    async def scenario():
        app = _app()
        async with app.run_test(size=(160, 40)) as pilot:
            await pilot.pause()
            await pilot.press("a")
            assert app.jobs_list.all_selected()
            await pilot.press("a")
            assert app.jobs_list.selected_ids() == []

    asyncio.run(scenario())


def test_compact_view_switches_columns():
    async def scenario():
        app = _app()
        async with app.run_test(size=(160, 40)) as pilot:
            await pilot.pause()
            await pilot.press("c")
            await pilot.pause()
            table = app.query_one(JobsTable)
            assert len(table.columns) == len(sjobs_dashboard.COMPACT_COLUMNS)

    asyncio.run(scenario())


def test_cancel_selected_jobs(monkeypatch):
    cancelled = []

    def fake_cancel(job_ids):
        cancelled.append(list(job_ids))
        return True

    monkeypatch.setattr(sjobs_dashboard, "cancel_jobs", fake_cancel)

    async def scenario():
        app = _app()
        async with app.run_test(size=(160, 40)) as pilot:
            await pilot.pause()
            await pilot.press("j", "space", "x")
            await pilot.pause()
            await pilot.click("#confirm")
            await pilot.pause()
            assert app.jobs_list.selected_ids() == []

    asyncio.run(scenario())
    assert cancelled == [["200_1", "200_2"]]


def test_empty_queue_renders():
    async def scenario():
        app = _app(jobs=[])
        async with app.run_test(size=(160, 40)) as pilot:
            await pilot.pause()
            await pilot.press("j", "space", "e")
            assert app.jobs_list.cursor is None
            assert app.query_one(JobsTable).row_count == 0

    asyncio.run(scenario())
