from __future__ import annotations

import pytest
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from funding_harvester.config import ScheduleConfig, ScheduleType
from funding_harvester.scheduler import RUN_ALL_JOB_ID, APSchedulerAdapter


class StubScheduler:
    def __init__(self) -> None:
        self.jobs: list[dict] = []
        self.started = False
        self.stopped = False

    def add_job(self, callback, trigger, id, replace_existing, max_instances, coalesce):  # noqa: A002
        self.jobs.append(
            {
                "callback": callback,
                "trigger": trigger,
                "id": id,
                "replace_existing": replace_existing,
                "max_instances": max_instances,
            }
        )

    def start(self) -> None:
        self.started = True

    def shutdown(self, wait: bool = True) -> None:
        self.stopped = True

    def get_jobs(self):
        return []


def test_build_triggers() -> None:
    cron = APSchedulerAdapter._build_trigger(
        ScheduleConfig(type=ScheduleType.CRON, value="0 */6 * * *")
    )
    assert isinstance(cron, CronTrigger)

    interval = APSchedulerAdapter._build_trigger(ScheduleConfig(value=30))
    assert isinstance(interval, IntervalTrigger)
    assert interval.interval.total_seconds() == 30

    kwargs = APSchedulerAdapter._build_trigger(ScheduleConfig(value={"hours": 2}))
    assert kwargs.interval.total_seconds() == 7200


def test_schedule_run_all_registers_single_job() -> None:
    stub = StubScheduler()
    adapter = APSchedulerAdapter(scheduler=stub)

    def callback():
        return None

    adapter.schedule_run_all(callback, ScheduleConfig())
    adapter.schedule_run_all(callback, ScheduleConfig(value=60))

    assert [job["id"] for job in stub.jobs] == [RUN_ALL_JOB_ID, RUN_ALL_JOB_ID]
    assert all(job["replace_existing"] for job in stub.jobs)
    assert stub.jobs[0]["max_instances"] == 1
    assert stub.jobs[-1]["trigger"].interval.total_seconds() == 60


def test_start_and_shutdown_are_idempotent() -> None:
    stub = StubScheduler()
    adapter = APSchedulerAdapter(scheduler=stub)
    adapter.shutdown()
    assert not stub.stopped

    adapter.start()
    adapter.start()
    adapter.shutdown()
    assert stub.started and stub.stopped
    assert adapter.list_jobs() == []


def test_invalid_interval_value_rejected() -> None:
    schedule = ScheduleConfig.model_construct(type=ScheduleType.INTERVAL, value="soon")
    with pytest.raises(ValueError):
        APSchedulerAdapter._build_trigger(schedule)
