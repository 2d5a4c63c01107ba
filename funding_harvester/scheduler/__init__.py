from .apsched_adapter import RUN_ALL_JOB_ID, APSchedulerAdapter

__all__ = ["APSchedulerAdapter", "RUN_ALL_JOB_ID"]
