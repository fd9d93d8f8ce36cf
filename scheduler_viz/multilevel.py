"""
Queue-based policies: Multilevel Queue (with and without aging) and the
Multilevel Feedback Queue.

Timeline segments of these policies carry a ``queues`` snapshot (one list of
waiting process ids per level) and the ``queue_level`` of the running
process. Idle segments use ``IDLE_QUEUE_LEVEL``.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, List, Optional, Sequence

from .algorithms import arrived_indices, arrives_at, by_arrival, finish_result, next_arrival, resolve_quantum
from .config import MLQ_AGING_THRESHOLD
from .errors import InvalidParameters
from .models import IDLE_QUEUE_LEVEL, Process, ScheduleResult, SchedulerParams
from .timeline import StatsCollector, TimelineBuilder


def resolve_num_queues(params: SchedulerParams) -> int:
    if params.num_queues <= 0:
        raise InvalidParameters(f"num_queues must be positive, got {params.num_queues}")
    return params.num_queues


def level_quanta(base_quantum: int, num_queues: int) -> List[int]:
    """Quantum doubles with every level: base, 2*base, 4*base, ..."""
    return [base_quantum * (2 ** level) for level in range(num_queues)]


def _first_nonempty(queues: List[Deque[int]]) -> Optional[int]:
    for level, queue in enumerate(queues):
        if queue:
            return level
    return None


def schedule_mlq(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    Multilevel Queue with fixed assignment ``priority mod num_queues``.

    Dispatch always comes from the lowest-index non-empty queue and runs for
    ``min(level quantum, remaining)`` ticks in one jump. A higher-level
    arrival during the jump only closes the segment so the next decision
    point starts a fresh one; the slice itself is not cut short.
    """
    params = params or SchedulerParams()
    base_quantum = resolve_quantum(params, "MLQ")
    num_queues = resolve_num_queues(params)
    quanta = level_quanta(base_quantum, num_queues)

    procs = by_arrival(processes)
    n = len(procs)
    remaining = [p.burst_time for p in procs]
    assignment = [p.priority % num_queues for p in procs]
    queues: List[Deque[int]] = [deque() for _ in range(num_queues)]

    builder = TimelineBuilder()
    stats = StatsCollector()
    time = 0
    admitted = 0
    done = 0

    def enqueue_new_arrivals(current_time: int) -> bool:
        nonlocal admitted
        before = admitted
        while admitted < n and procs[admitted].arrival_time <= current_time:
            queues[assignment[admitted]].append(admitted)
            admitted += 1
        return admitted > before

    def snapshot() -> List[List[int]]:
        return [[procs[i].pid for i in queue] for queue in queues]

    enqueue_new_arrivals(time)

    while done < n:
        active = _first_nonempty(queues)
        if active is None:
            builder.idle(time, queues=snapshot(), queue_level=IDLE_QUEUE_LEVEL)
            time = procs[admitted].arrival_time
            enqueue_new_arrivals(time)
            continue

        idx = queues[active].popleft()
        p = procs[idx]
        if not builder.is_running(p.pid):
            builder.open(p.pid, time, queues=snapshot(), queue_level=active)

        run_time = min(quanta[active], remaining[idx])
        time += run_time
        remaining[idx] -= run_time

        if remaining[idx] == 0:
            done += 1
            stats.record(p, time, final_queue_level=active)
        else:
            queues[active].append(idx)

        if enqueue_new_arrivals(time) and any(queues[level] for level in range(active)):
            builder.close(time)

    return finish_result("MLQ", base_quantum, builder, stats, time)


def schedule_mlq_aging(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    Multilevel Queue with aging, simulated tick by tick.

    A process starts in level ``min(priority, num_queues - 1)``. Once it has
    waited ``MLQ_AGING_THRESHOLD`` ticks in a level ``q >= 1`` (since it
    entered that level or last ran) it moves to the tail of ``q - 1``.
    Levels only ever decrease.
    """
    params = params or SchedulerParams()
    base_quantum = resolve_quantum(params, "MLQ-Aging")
    num_queues = resolve_num_queues(params)
    quanta = level_quanta(base_quantum, num_queues)

    procs = by_arrival(processes)
    n = len(procs)
    remaining = [p.burst_time for p in procs]
    level = [min(max(p.priority, 0), num_queues - 1) for p in procs]
    waiting_since = [p.arrival_time for p in procs]
    time_in_slice = [0] * n
    queues: List[Deque[int]] = [deque() for _ in range(num_queues)]

    builder = TimelineBuilder()
    stats = StatsCollector()
    time = 0
    admitted = 0
    done = 0

    def enqueue_new_arrivals(current_time: int) -> bool:
        nonlocal admitted
        before = admitted
        while admitted < n and procs[admitted].arrival_time <= current_time:
            queues[level[admitted]].append(admitted)
            waiting_since[admitted] = current_time
            admitted += 1
        return admitted > before

    def promote_aged(current_time: int) -> bool:
        promoted = False
        for q in range(1, num_queues):
            aged = [i for i in queues[q] if current_time - waiting_since[i] >= MLQ_AGING_THRESHOLD]
            for i in aged:
                queues[q].remove(i)
                queues[q - 1].append(i)
                level[i] = q - 1
                waiting_since[i] = current_time
                time_in_slice[i] = 0
                promoted = True
        return promoted

    def snapshot() -> List[List[int]]:
        return [[procs[i].pid for i in queue] for queue in queues]

    while done < n:
        arrived = enqueue_new_arrivals(time)
        promoted = promote_aged(time)
        if arrived or promoted:
            builder.close(time)

        active = _first_nonempty(queues)
        if active is None:
            if not builder.is_idle:
                builder.idle(time, queues=snapshot(), queue_level=IDLE_QUEUE_LEVEL)
            time = procs[admitted].arrival_time
            continue

        idx = queues[active].popleft()
        p = procs[idx]
        current = builder.current
        if not builder.is_running(p.pid) or current is None or current.queue_level != active:
            builder.open(p.pid, time, queues=snapshot(), queue_level=active)

        time += 1
        remaining[idx] -= 1
        time_in_slice[idx] += 1
        waiting_since[idx] = time

        if remaining[idx] == 0:
            done += 1
            stats.record(p, time, final_queue_level=active)
            builder.close(time)
        elif time_in_slice[idx] >= quanta[active]:
            # Slice used up: back to the tail of its level.
            time_in_slice[idx] = 0
            queues[active].append(idx)
            builder.close(time)
        else:
            queues[active].appendleft(idx)

    return finish_result("MLQ-Aging", base_quantum, builder, stats, time)


def schedule_mlfq(processes: Sequence[Process], params: Optional[SchedulerParams] = None) -> ScheduleResult:
    """
    Multi-Level Feedback Queue, simulated tick by tick.

    - Every process starts in level 0.
    - Level ``L`` has quantum ``base * 2**L``; the last level is unbounded.
    - Each tick runs the arrived process in the lowest level (ties go to
      arrival order), so a level-0 arrival preempts deeper levels at the
      next tick.
    - Using a whole quantum without finishing demotes the process one level.
    """
    params = params or SchedulerParams()
    base_quantum = resolve_quantum(params, "MLFQ")
    num_queues = resolve_num_queues(params)
    quanta: List[Optional[int]] = list(level_quanta(base_quantum, num_queues))
    quanta[-1] = None

    procs = by_arrival(processes)
    n = len(procs)
    remaining = [p.burst_time for p in procs]
    level = [0] * n
    time_in_slice = [0] * n

    def snapshot(current_time: int, running: int) -> List[List[int]]:
        queues: List[List[int]] = [[] for _ in range(num_queues)]
        for i in arrived_indices(procs, remaining, current_time):
            if i != running:
                queues[level[i]].append(procs[i].pid)
        return queues

    builder = TimelineBuilder()
    stats = StatsCollector()
    time = 0
    done = 0

    while done < n:
        ready = arrived_indices(procs, remaining, time)
        if not ready:
            if not builder.is_idle:
                builder.idle(time, queues=[[] for _ in range(num_queues)], queue_level=IDLE_QUEUE_LEVEL)
            time = next_arrival(procs, time)
            continue

        idx = min(ready, key=lambda i: level[i])
        p = procs[idx]
        if not builder.is_running(p.pid):
            builder.open(p.pid, time, queues=snapshot(time, idx), queue_level=level[idx])

        remaining[idx] -= 1
        time_in_slice[idx] += 1
        time += 1

        quantum = quanta[level[idx]]
        if remaining[idx] == 0:
            done += 1
            time_in_slice[idx] = 0
            stats.record(p, time, final_queue_level=level[idx])
            builder.close(time)
        elif quantum is not None and time_in_slice[idx] >= quantum:
            level[idx] += 1
            time_in_slice[idx] = 0
            builder.close(time)
        elif arrives_at(procs, time):
            builder.refresh(time, queues=snapshot(time, idx))

    return finish_result("MLFQ", base_quantum, builder, stats, time)
