import random

import pytest

from scheduler_viz.engine import available_algorithms, schedule
from scheduler_viz.models import Process, SchedulerParams


def _random_workload(seed, n=8):
    rng = random.Random(seed)
    return [
        Process(
            pid=i + 1,
            arrival_time=rng.randint(0, 20),
            burst_time=rng.randint(1, 9),
            priority=rng.randint(0, 4),
        )
        for i in range(n)
    ]


WORKLOADS = [
    [Process(1, 0, 5, 2), Process(2, 1, 3, 1), Process(3, 2, 8, 3)],
    [Process(1, 3, 4, 1), Process(2, 3, 2, 0), Process(3, 12, 1, 2)],
    [Process(10, 0, 1), Process(20, 0, 1), Process(30, 0, 1)],
    [Process(1, 0, 70, 2), Process(2, 1, 4, 0), Process(3, 2, 6, 1), Process(4, 60, 3, 2)],
    _random_workload(1),
    _random_workload(7),
    _random_workload(42, n=12),
]

PARAMS = [SchedulerParams(), SchedulerParams(quantum=3, num_queues=4, aging_threshold=80)]


def _cases():
    for alg in available_algorithms():
        for w_idx, _ in enumerate(WORKLOADS):
            for p_idx, _ in enumerate(PARAMS):
                yield pytest.param(alg, w_idx, p_idx, id=f"{alg}-w{w_idx}-p{p_idx}")


@pytest.mark.parametrize("alg,w_idx,p_idx", list(_cases()))
def test_schedule_invariants(alg, w_idx, p_idx):
    procs = WORKLOADS[w_idx]
    params = PARAMS[p_idx]
    res = schedule(procs, alg, params)
    by_pid = {p.pid: p for p in procs}

    # Every process completes exactly once.
    assert sorted(s.process_id for s in res.processes) == sorted(by_pid)

    # Arithmetic identities and completion lower bound.
    for stat in res.processes:
        proc = by_pid[stat.process_id]
        assert stat.turnaround_time == stat.completion_time - proc.arrival_time
        assert stat.waiting_time == stat.turnaround_time - proc.burst_time
        assert stat.completion_time >= proc.arrival_time + proc.burst_time

    # Contiguous cover from 0 to the last completion, no empty segments.
    timeline = res.timeline
    assert timeline[0].start_time == 0
    for prev, seg in zip(timeline, timeline[1:]):
        assert prev.end_time == seg.start_time
    assert all(seg.end_time > seg.start_time for seg in timeline)
    assert timeline[-1].end_time == max(s.completion_time for s in res.processes)

    # Burst conservation.
    executed = {}
    for seg in timeline:
        if not seg.is_idle:
            executed[seg.process_id] = executed.get(seg.process_id, 0) + seg.duration
    assert executed == {pid: p.burst_time for pid, p in by_pid.items()}

    # A process never runs before it arrives or after it completes.
    completion = {s.process_id: s.completion_time for s in res.processes}
    for seg in timeline:
        if not seg.is_idle:
            assert seg.start_time >= by_pid[seg.process_id].arrival_time
            assert seg.end_time <= completion[seg.process_id]

    # Snapshots never list the running process.
    for seg in timeline:
        waiting = seg.ready_queue if seg.ready_queue is not None else [pid for q in seg.queues for pid in q]
        assert seg.process_id not in waiting


@pytest.mark.parametrize("alg", available_algorithms())
def test_schedule_is_deterministic(alg):
    procs = _random_workload(3, n=10)
    first = schedule(procs, alg, SchedulerParams(quantum=2))
    second = schedule(list(procs), alg, SchedulerParams(quantum=2))
    assert first.to_dict() == second.to_dict()


@pytest.mark.parametrize("alg", available_algorithms())
def test_first_segment_is_idle_until_first_arrival(alg):
    res = schedule([Process(1, 3, 2), Process(2, 4, 1)], alg)
    first = res.timeline[0]
    assert (first.process_id, first.start_time, first.end_time) == (-1, 0, 3)
    assert not any(first.ready_queue or []) and not any(q for q in (first.queues or []))


@pytest.mark.parametrize("quantum", [1, 2, 3, 5])
def test_rr_segments_never_exceed_quantum(quantum):
    procs = _random_workload(11, n=10)
    res = schedule(procs, "RR", SchedulerParams(quantum=quantum))
    for seg in res.timeline:
        if not seg.is_idle:
            assert seg.duration <= quantum


def _levels_over_time(res):
    levels = {}
    for seg in res.timeline:
        if not seg.is_idle:
            levels.setdefault(seg.process_id, []).append(seg.queue_level)
    return levels


@pytest.mark.parametrize("w_idx", range(len(WORKLOADS)))
def test_mlfq_levels_only_go_down_the_queue(w_idx):
    res = schedule(WORKLOADS[w_idx], "MLFQ", SchedulerParams(quantum=1))
    for levels in _levels_over_time(res).values():
        assert levels == sorted(levels)
    for stat in res.processes:
        assert stat.final_queue_level == _levels_over_time(res)[stat.process_id][-1]


@pytest.mark.parametrize("w_idx", range(len(WORKLOADS)))
def test_mlq_aging_levels_only_go_up_the_queue(w_idx):
    res = schedule(WORKLOADS[w_idx], "MLQ-Aging", SchedulerParams(quantum=1))
    for levels in _levels_over_time(res).values():
        assert levels == sorted(levels, reverse=True)
