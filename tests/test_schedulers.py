from scheduler_viz.algorithms import (
    schedule_fcfs,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
    schedule_sjf_aging,
)
from scheduler_viz.models import Process, SchedulerParams
from scheduler_viz.multilevel import schedule_mlfq, schedule_mlq, schedule_mlq_aging


def _procs():
    return [
        Process(1, arrival_time=0, burst_time=5, priority=2),
        Process(2, arrival_time=1, burst_time=3, priority=1),
        Process(3, arrival_time=2, burst_time=8, priority=3),
    ]


def _flat(result):
    return [(s.process_id, s.start_time, s.end_time, s.ready_queue) for s in result.timeline]


def _levels(result):
    return [(s.process_id, s.start_time, s.end_time, s.queue_level, s.queues) for s in result.timeline]


def _stats(result):
    return [(p.process_id, p.completion_time, p.turnaround_time, p.waiting_time) for p in result.processes]


def test_fcfs_two_process_example():
    res = schedule_fcfs([Process(1, 0, 5), Process(2, 2, 3)])
    assert _flat(res) == [(1, 0, 2, []), (1, 2, 5, [2]), (2, 5, 8, [])]
    assert _stats(res) == [(1, 5, 5, 0), (2, 8, 6, 3)]


def test_fcfs_order():
    res = schedule_fcfs(_procs())
    assert _flat(res) == [
        (1, 0, 1, []),
        (1, 1, 2, [2]),
        (1, 2, 5, [2, 3]),
        (2, 5, 8, [3]),
        (3, 8, 16, []),
    ]
    assert [p.waiting_time for p in res.processes] == [0, 4, 6]


def test_fcfs_idle_gap_between_arrivals():
    res = schedule_fcfs([Process(1, 0, 2), Process(2, 5, 1)])
    assert _flat(res) == [(1, 0, 2, []), (-1, 2, 5, []), (2, 5, 6, [])]


def test_fcfs_equal_arrivals_keep_input_order():
    res = schedule_fcfs([Process(9, 0, 1), Process(4, 0, 1), Process(7, 0, 1)])
    assert [s.process_id for s in res.timeline] == [9, 4, 7]
    assert res.timeline[0].ready_queue == [4, 7]


def test_sjf_picks_shortest_remaining():
    res = schedule_sjf(_procs())
    assert _flat(res) == [
        (1, 0, 1, []),
        (2, 1, 2, [1]),
        (2, 2, 4, [1, 3]),
        (1, 4, 8, [3]),
        (3, 8, 16, []),
    ]
    assert _stats(res) == [(2, 4, 3, 0), (1, 8, 8, 3), (3, 16, 14, 6)]


def test_sjf_tie_goes_to_earlier_arrival():
    res = schedule_sjf([Process(1, 0, 2), Process(2, 0, 2)])
    assert [s.process_id for s in res.timeline] == [1, 2]


def test_sjf_aging_tracks_wait():
    res = schedule_sjf_aging(_procs())
    assert _flat(res) == [
        (1, 0, 1, []),
        (2, 1, 2, [1]),
        (2, 2, 4, [1, 3]),
        (1, 4, 8, [3]),
        (3, 8, 16, []),
    ]
    # P2 and P3 count a wait tick at the instant they arrive.
    assert [(p.process_id, p.aging_wait_time) for p in res.processes] == [(2, 1), (1, 3), (3, 7)]


def test_sjf_aging_arrival_at_tick_end_counts_as_waiting():
    res = schedule_sjf_aging([Process(1, 0, 2), Process(2, 1, 1)])
    # At t=1 P2's key is max(1 - 0.5 * 1, 0.5) = 0.5, beating P1's 1.
    assert _flat(res) == [(1, 0, 1, []), (2, 1, 2, [1]), (1, 2, 3, [])]
    assert [(p.process_id, p.aging_wait_time) for p in res.processes] == [(2, 1), (1, 1)]
    assert _flat(schedule_sjf([Process(1, 0, 2), Process(2, 1, 1)])) == [(1, 0, 1, []), (1, 1, 2, [2]), (2, 2, 3, [])]


def test_sjf_aging_lets_long_job_overtake():
    procs = [Process(1, 0, 5), Process(2, 0, 2), Process(3, 2, 2), Process(4, 4, 2)]

    plain = {p.process_id: p.completion_time for p in schedule_sjf(procs).processes}
    aged = {
        p.process_id: p.completion_time
        for p in schedule_sjf_aging(procs, SchedulerParams(aging_threshold=100)).processes
    }

    assert plain == {2: 2, 3: 4, 4: 6, 1: 11}
    assert aged == {2: 2, 3: 4, 1: 9, 4: 11}


def test_sjf_aging_with_zero_threshold_matches_sjf():
    procs = _procs()
    aged = schedule_sjf_aging(procs, SchedulerParams(aging_threshold=0))
    assert _flat(aged) == _flat(schedule_sjf(procs))


def test_priority_static():
    res = schedule_priority(_procs())
    # P2 has the highest priority (1) and takes over as soon as it arrives.
    assert [s.process_id for s in res.timeline] == [1, 2, 2, 1, 3]
    assert _stats(res) == [(2, 4, 3, 0), (1, 8, 8, 3), (3, 16, 14, 6)]


def test_priority_preempts_at_tick_boundary():
    res = schedule_priority([Process(1, 0, 4, priority=3), Process(2, 2, 2, priority=1)])
    assert _flat(res) == [(1, 0, 2, []), (2, 2, 4, [1]), (1, 4, 6, [])]


def test_priority_tie_breaks_on_remaining_burst():
    res = schedule_priority([Process(1, 0, 5, priority=1), Process(2, 0, 2, priority=1)])
    assert _flat(res) == [(2, 0, 2, [1]), (1, 2, 7, [])]


def test_rr_quantum_2():
    res = schedule_rr(_procs(), SchedulerParams(quantum=2))
    assert _flat(res) == [
        (1, 0, 1, []),
        (1, 1, 2, [2]),
        (2, 2, 4, [3, 1]),
        (3, 4, 6, [1, 2]),
        (1, 6, 8, [2, 3]),
        (2, 8, 9, [3, 1]),
        (3, 9, 11, [1]),
        (1, 11, 12, [3]),
        (3, 12, 14, []),
        (3, 14, 16, []),
    ]
    assert _stats(res) == [(2, 9, 8, 5), (1, 12, 12, 7), (3, 16, 14, 6)]
    assert res.system.cpu_busy_time == sum(p.burst_time for p in _procs())


def test_rr_default_quantum_is_one():
    res = schedule_rr([Process(1, 0, 2), Process(2, 0, 2)])
    assert res.quantum == 1
    assert [s.process_id for s in res.timeline] == [1, 2, 1, 2]


def test_mlq_fixed_queues():
    res = schedule_mlq(_procs())
    assert _levels(res) == [
        (1, 0, 5, 2, [[], [], []]),
        (3, 5, 13, 0, [[], [2], []]),
        (2, 13, 16, 1, [[], [], []]),
    ]
    assert [(p.process_id, p.completion_time, p.final_queue_level) for p in res.processes] == [
        (1, 5, 2),
        (3, 13, 0),
        (2, 16, 1),
    ]


def test_mlq_higher_queue_arrival_does_not_cut_slice():
    procs = [Process(1, 0, 6, priority=1), Process(2, 1, 2, priority=0)]
    res = schedule_mlq(procs)
    assert [(s.process_id, s.start_time, s.end_time, s.queue_level) for s in res.timeline] == [
        (1, 0, 4, 1),
        (2, 4, 6, 0),
        (1, 6, 8, 1),
    ]
    assert _stats(res) == [(2, 6, 5, 3), (1, 8, 8, 2)]


def test_mlq_aging_initial_levels_are_clamped():
    res = schedule_mlq_aging(_procs())
    assert _levels(res) == [
        (1, 0, 1, 2, [[], [], []]),
        (2, 1, 2, 1, [[], [], [1]]),
        (2, 2, 4, 1, [[], [], [1, 3]]),
        (1, 4, 8, 2, [[], [], [3]]),
        (3, 8, 16, 2, [[], [], []]),
    ]
    assert [(p.process_id, p.completion_time, p.final_queue_level) for p in res.processes] == [
        (2, 4, 1),
        (1, 8, 2),
        (3, 16, 2),
    ]


def test_mlq_aging_promotes_starving_process():
    procs = [Process(1, 0, 60, priority=0), Process(2, 0, 3, priority=1)]
    res = schedule_mlq_aging(procs, SchedulerParams(quantum=2, num_queues=2))

    p2_segments = [s for s in res.timeline if s.process_id == 2]
    assert p2_segments[0].start_time == 52
    assert all(s.queue_level == 0 for s in p2_segments)

    at_promotion = next(s for s in res.timeline if s.start_time == 50)
    assert at_promotion.process_id == 1
    assert at_promotion.queues == [[2], []]

    assert [(p.process_id, p.completion_time, p.final_queue_level) for p in res.processes] == [
        (2, 57, 0),
        (1, 63, 0),
    ]


def test_mlfq_demotes_and_refreshes():
    res = schedule_mlfq(_procs(), SchedulerParams(quantum=2))
    assert _levels(res) == [
        (1, 0, 1, 0, [[], [], []]),
        (1, 1, 2, 0, [[2], [], []]),
        (2, 2, 4, 0, [[3], [1], []]),
        (3, 4, 6, 0, [[], [1, 2], []]),
        (1, 6, 9, 1, [[], [2, 3], []]),
        (2, 9, 10, 1, [[], [3], []]),
        (3, 10, 14, 1, [[], [], []]),
        (3, 14, 16, 2, [[], [], []]),
    ]
    assert [(p.process_id, p.completion_time, p.final_queue_level) for p in res.processes] == [
        (1, 9, 1),
        (2, 10, 1),
        (3, 16, 2),
    ]


def test_mlfq_last_level_runs_to_completion():
    res = schedule_mlfq([Process(1, 0, 20)], SchedulerParams(quantum=1, num_queues=2))
    assert [(s.start_time, s.end_time, s.queue_level) for s in res.timeline] == [(0, 1, 0), (1, 20, 1)]
