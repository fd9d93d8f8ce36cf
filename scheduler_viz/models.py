from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

IDLE_PID = -1
IDLE_QUEUE_LEVEL = -1


@dataclass(frozen=True)
class Process:
    pid: int
    arrival_time: int
    burst_time: int
    priority: int = 0


@dataclass
class SchedulerParams:
    """
    Algorithm parameters. A quantum of None means "use the algorithm default".
    """

    quantum: Optional[int] = None
    num_queues: int = 3
    aging_threshold: int = 50


@dataclass
class TimelineSegment:
    """
    One contiguous slice of the Gantt chart, attributed to a process or to idle.

    Flat policies fill ``ready_queue``; multilevel policies fill ``queues``
    (one list per level) and ``queue_level``.
    """

    process_id: int
    start_time: int
    end_time: Optional[int] = None
    ready_queue: Optional[List[int]] = None
    queues: Optional[List[List[int]]] = None
    queue_level: Optional[int] = None

    @property
    def is_idle(self) -> bool:
        return self.process_id == IDLE_PID

    @property
    def duration(self) -> int:
        return (self.end_time or self.start_time) - self.start_time

    def to_dict(self) -> dict:
        row = {
            "process_id": self.process_id,
            "start_time": self.start_time,
            "end_time": self.end_time,
        }
        if self.ready_queue is not None:
            row["ready_queue"] = list(self.ready_queue)
        if self.queues is not None:
            row["queues"] = [list(q) for q in self.queues]
        if self.queue_level is not None:
            row["queue_level"] = self.queue_level
        return row


@dataclass
class ProcessStat:
    process_id: int
    arrival_time: int
    burst_time: int
    priority: int
    completion_time: int
    turnaround_time: int
    waiting_time: int
    final_queue_level: Optional[int] = None
    aging_wait_time: Optional[int] = None

    def to_dict(self) -> dict:
        row = {
            "process_id": self.process_id,
            "arrival_time": self.arrival_time,
            "burst_time": self.burst_time,
            "priority": self.priority,
            "completion_time": self.completion_time,
            "turnaround_time": self.turnaround_time,
            "waiting_time": self.waiting_time,
        }
        if self.final_queue_level is not None:
            row["final_queue_level"] = self.final_queue_level
        if self.aging_wait_time is not None:
            row["aging_wait_time"] = self.aging_wait_time
        return row


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    idle_time: int
    makespan: int
    throughput: float
    cpu_utilization: float
    context_switches: int = 0
    starvation_count: int = 0

    def to_dict(self) -> dict:
        return {
            "cpu_busy_time": self.cpu_busy_time,
            "idle_time": self.idle_time,
            "makespan": self.makespan,
            "throughput": self.throughput,
            "cpu_utilization": self.cpu_utilization,
            "context_switches": self.context_switches,
            "starvation_count": self.starvation_count,
        }


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessStat] = field(default_factory=list)
    timeline: List[TimelineSegment] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    def to_dict(self) -> dict:
        payload = {
            "scheduling_algorithm": self.algorithm,
            "gantt_chart": [seg.to_dict() for seg in self.timeline],
            "process_stats": [stat.to_dict() for stat in self.processes],
        }
        if self.quantum is not None:
            payload["quantum"] = self.quantum
        if self.system is not None:
            payload["system_metrics"] = self.system.to_dict()
        return payload
