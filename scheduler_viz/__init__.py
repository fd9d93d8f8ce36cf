"""
Scheduler visualizer engine.

Simulates CPU scheduling algorithms (FCFS, SJF, SJF-Aging, RR, Priority,
MLQ, MLQ-Aging, MLFQ) and returns a Gantt timeline plus per-process
statistics, through a Python API, an HTTP API and a command-line interface.
"""

from .engine import ALGORITHMS, available_algorithms, schedule
from .models import Process, SchedulerParams, ScheduleResult

__all__ = ["ALGORITHMS", "Process", "ScheduleResult", "SchedulerParams", "available_algorithms", "schedule"]
