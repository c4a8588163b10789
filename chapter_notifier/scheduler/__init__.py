"""Scheduling of release checks."""

from .apsched_adapter import APSchedulerAdapter, JOB_ID

__all__ = ["APSchedulerAdapter", "JOB_ID"]
