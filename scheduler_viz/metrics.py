from __future__ import annotations

from typing import Dict

from .models import ScheduleResult, SystemMetrics


def compute_system_metrics(result: ScheduleResult) -> SystemMetrics:
    """
    Compute busy/idle time, throughput, CPU utilization and context switches
    from a populated timeline and per-process stats.
    """
    if not result.timeline:
        system = SystemMetrics(cpu_busy_time=0, idle_time=0, makespan=0, throughput=0.0, cpu_utilization=0.0)
        result.system = system
        return system

    makespan = max(seg.end_time for seg in result.timeline)
    cpu_busy_time = sum(seg.duration for seg in result.timeline if not seg.is_idle)
    idle_time = sum(seg.duration for seg in result.timeline if seg.is_idle)

    throughput = len(result.processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    # Compare each dispatch with the last process that ran. Idle gaps and
    # snapshot refreshes of the same process are not switches.
    context_switches = 0
    last_pid = None
    for seg in result.timeline:
        if seg.is_idle:
            continue
        if last_pid is not None and seg.process_id != last_pid:
            context_switches += 1
        last_pid = seg.process_id

    starvation_count = 0
    if result.processes:
        avg_wait = sum(p.waiting_time for p in result.processes) / len(result.processes)
        starvation_count = sum(1 for p in result.processes if p.waiting_time > 2 * avg_wait)

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        idle_time=idle_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
        context_switches=context_switches,
        starvation_count=starvation_count,
    )
    result.system = system
    return system


def response_times(result: ScheduleResult) -> Dict[int, int]:
    """
    First time each process got the CPU, minus its arrival time.
    """
    first_start: Dict[int, int] = {}
    for seg in sorted(result.timeline, key=lambda s: s.start_time):
        if not seg.is_idle and seg.process_id not in first_start:
            first_start[seg.process_id] = seg.start_time
    return {
        p.process_id: first_start[p.process_id] - p.arrival_time
        for p in result.processes
        if p.process_id in first_start
    }


def summarize_process_metrics(result: ScheduleResult) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    processes = result.processes
    if not processes:
        return {"avg_waiting": 0.0, "avg_turnaround": 0.0, "avg_response": 0.0}

    n = len(processes)
    responses = response_times(result)
    return {
        "avg_waiting": sum(p.waiting_time for p in processes) / n,
        "avg_turnaround": sum(p.turnaround_time for p in processes) / n,
        "avg_response": sum(responses.values()) / len(responses) if responses else 0.0,
    }
