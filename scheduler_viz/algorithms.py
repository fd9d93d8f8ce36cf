from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Sequence

from .config import DEFAULT_QUANTUM
from .errors import InvalidIdentifier, InvalidParameters
from .metrics import compute_system_metrics
from .models import Process, ScheduleResult, SchedulerParams
from .timeline import StatsCollector, TimelineBuilder


def by_arrival(processes: Sequence[Process]) -> List[Process]:
    """
    Sort processes by arrival time. ``sorted`` is stable, so equal arrivals
    keep their input order. Duplicate ids are rejected because the timeline
    attributes segments by id.
    """
    seen = set()
    for p in processes:
        if p.pid in seen:
            raise InvalidIdentifier(f"Duplicate process id: {p.pid}")
        seen.add(p.pid)
    return sorted(processes, key=lambda p: p.arrival_time)


def resolve_quantum(params: SchedulerParams, algorithm: str) -> int:
    quantum = params.quantum if params.quantum is not None else DEFAULT_QUANTUM[algorithm]
    if quantum <= 0:
        raise InvalidParameters(f"{algorithm} requires a positive quantum, got {quantum}")
    return quantum


def arrived_indices(procs: List[Process], remaining: List[int], time: int) -> List[int]:
    """Indices of arrived, incomplete processes in arrival order."""
    return [i for i, p in enumerate(procs) if p.arrival_time <= time and remaining[i] > 0]


def next_arrival(procs: List[Process], time: int) -> int:
    return min(p.arrival_time for p in procs if p.arrival_time > time)


def arrives_at(procs: List[Process], time: int) -> bool:
    return any(p.arrival_time == time for p in procs)


def _waiting_pids(procs: List[Process], remaining: List[int], time: int, running: int) -> List[int]:
    return [procs[i].pid for i in arrived_indices(procs, remaining, time) if i != running]


def finish_result(
    algorithm: str,
    quantum: Optional[int],
    builder: TimelineBuilder,
    stats: StatsCollector,
    time: int,
) -> ScheduleResult:
    result = ScheduleResult(
        algorithm=algorithm,
        quantum=quantum,
        processes=stats.stats,
        timeline=builder.build(time),
    )
    compute_system_metrics(result)
    return result


def schedule_fcfs(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive).

    Each process runs to completion in arrival order. Arrivals strictly
    inside a run split its segment so the ready-queue snapshot shows them.
    """
    procs = by_arrival(processes)

    builder = TimelineBuilder()
    stats = StatsCollector()
    time = 0

    for i, p in enumerate(procs):
        if time < p.arrival_time:
            builder.idle(time)
            time = p.arrival_time

        start_time = time
        end_time = start_time + p.burst_time
        later = procs[i + 1:]

        builder.open(p.pid, start_time, ready_queue=[q.pid for q in later if q.arrival_time <= start_time])

        arrivals = sorted({q.arrival_time for q in later if start_time < q.arrival_time < end_time})
        for arrival in arrivals:
            builder.refresh(arrival, ready_queue=[q.pid for q in later if q.arrival_time <= arrival])

        time = end_time
        stats.record(p, time)

    return finish_result("FCFS", None, builder, stats, time)


def schedule_sjf(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    Shortest Job First, re-evaluated every tick.

    Among arrived processes pick the smallest remaining burst; ties go to the
    earliest in arrival order.
    """
    procs = by_arrival(processes)
    n = len(procs)
    remaining = [p.burst_time for p in procs]

    builder = TimelineBuilder()
    stats = StatsCollector()
    time = 0
    done = 0

    while done < n:
        ready = arrived_indices(procs, remaining, time)
        if not ready:
            if not builder.is_idle:
                builder.idle(time)
            time = next_arrival(procs, time)
            continue

        idx = min(ready, key=lambda i: remaining[i])
        p = procs[idx]
        if not builder.is_running(p.pid):
            builder.open(p.pid, time, ready_queue=_waiting_pids(procs, remaining, time, idx))

        remaining[idx] -= 1
        time += 1

        if remaining[idx] == 0:
            done += 1
            stats.record(p, time)
        elif arrives_at(procs, time):
            builder.refresh(time, ready_queue=_waiting_pids(procs, remaining, time, idx))

    return finish_result("SJF", None, builder, stats, time)


def schedule_sjf_aging(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    SJF where waiting lowers a process's effective remaining time.

    The selection key is ``remaining - (aging_threshold / 100) * wait``,
    floored at 0.5. After every tick, ``wait`` grows by one for each
    process that has arrived by the new time and did not run, so a process
    arriving at the end of a tick has already waited one.
    """
    params = params or SchedulerParams()
    if params.aging_threshold < 0:
        raise InvalidParameters(f"aging_threshold must be >= 0, got {params.aging_threshold}")
    aging_factor = params.aging_threshold / 100.0

    procs = by_arrival(processes)
    n = len(procs)
    remaining = [p.burst_time for p in procs]
    wait = [0] * n

    def adjusted(i: int) -> float:
        return max(remaining[i] - aging_factor * wait[i], 0.5)

    builder = TimelineBuilder()
    stats = StatsCollector()
    time = 0
    done = 0

    while done < n:
        ready = arrived_indices(procs, remaining, time)
        if not ready:
            if not builder.is_idle:
                builder.idle(time)
            time = next_arrival(procs, time)
            continue

        idx = min(ready, key=adjusted)
        p = procs[idx]
        if not builder.is_running(p.pid):
            builder.open(p.pid, time, ready_queue=_waiting_pids(procs, remaining, time, idx))

        remaining[idx] -= 1
        time += 1

        for i in arrived_indices(procs, remaining, time):
            if i != idx:
                wait[i] += 1

        if remaining[idx] == 0:
            done += 1
            stats.record(p, time, aging_wait_time=wait[idx])
        elif arrives_at(procs, time):
            builder.refresh(time, ready_queue=_waiting_pids(procs, remaining, time, idx))

    return finish_result("SJF-Aging", None, builder, stats, time)


def schedule_priority(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    Priority scheduling, re-evaluated every tick.

    Lower numeric priority value means higher priority. Ties are broken by
    earlier arrival, then by smaller remaining burst, then by arrival order.
    A higher-priority arrival takes the CPU at the next tick boundary.
    """
    procs = by_arrival(processes)
    n = len(procs)
    remaining = [p.burst_time for p in procs]

    def priority_key(i: int):
        return (procs[i].priority, procs[i].arrival_time, remaining[i])

    builder = TimelineBuilder()
    stats = StatsCollector()
    time = 0
    done = 0

    while done < n:
        ready = arrived_indices(procs, remaining, time)
        if not ready:
            if not builder.is_idle:
                builder.idle(time)
            time = next_arrival(procs, time)
            continue

        idx = min(ready, key=priority_key)
        p = procs[idx]
        if not builder.is_running(p.pid):
            builder.open(p.pid, time, ready_queue=_waiting_pids(procs, remaining, time, idx))

        remaining[idx] -= 1
        time += 1

        if remaining[idx] == 0:
            done += 1
            stats.record(p, time)
        elif arrives_at(procs, time):
            builder.refresh(time, ready_queue=_waiting_pids(procs, remaining, time, idx))

    return finish_result("Priority", None, builder, stats, time)


def schedule_rr(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    Round Robin with a fixed time quantum.

    The head of the FIFO ready queue runs for ``min(quantum, remaining)``
    ticks in one jump. Arrivals inside the slice join the tail at their
    arrival instant and split the segment; arrivals at the end of the slice
    are queued before the preempted process.
    """
    params = params or SchedulerParams()
    quantum = resolve_quantum(params, "RR")

    procs = by_arrival(processes)
    n = len(procs)
    remaining = [p.burst_time for p in procs]

    builder = TimelineBuilder()
    stats = StatsCollector()
    ready: Deque[int] = deque()
    time = 0
    admitted = 0
    done = 0

    def enqueue_new_arrivals(current_time: int) -> None:
        nonlocal admitted
        while admitted < n and procs[admitted].arrival_time <= current_time:
            ready.append(admitted)
            admitted += 1

    def ready_pids() -> List[int]:
        return [procs[i].pid for i in ready]

    enqueue_new_arrivals(time)

    while done < n:
        if not ready:
            # Nothing runnable: idle until the next arrival.
            builder.idle(time)
            time = procs[admitted].arrival_time
            enqueue_new_arrivals(time)
            continue

        idx = ready.popleft()
        p = procs[idx]

        run_time = min(quantum, remaining[idx])
        slice_start = time
        slice_end = time + run_time
        builder.open(p.pid, slice_start, ready_queue=ready_pids())

        arrivals = sorted({q.arrival_time for q in procs[admitted:] if q.arrival_time < slice_end})
        for arrival in arrivals:
            enqueue_new_arrivals(arrival)
            builder.refresh(arrival, ready_queue=ready_pids())

        time = slice_end
        remaining[idx] -= run_time
        enqueue_new_arrivals(time)

        if remaining[idx] > 0:
            ready.append(idx)
        else:
            done += 1
            stats.record(p, time)

    return finish_result("RR", quantum, builder, stats, time)
