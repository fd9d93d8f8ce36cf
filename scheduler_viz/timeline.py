from __future__ import annotations

from enum import Enum, auto
from typing import List, Optional, Set

from .models import IDLE_PID, Process, ProcessStat, TimelineSegment


class CursorState(Enum):
    CLOSED = auto()
    IDLE = auto()
    RUNNING = auto()


class TimelineBuilder:
    """
    Accumulates Gantt chart segments for one simulation run.

    Exactly one segment is open at a time (or none, in the CLOSED state).
    Opening a segment stamps the open one's ``end_time``. Segments that would
    close with zero length are dropped, so the output never contains them.
    """

    def __init__(self) -> None:
        self.segments: List[TimelineSegment] = []
        self.state = CursorState.CLOSED
        self._open: Optional[TimelineSegment] = None

    @property
    def running_pid(self) -> Optional[int]:
        if self.state is CursorState.RUNNING and self._open is not None:
            return self._open.process_id
        return None

    @property
    def current(self) -> Optional[TimelineSegment]:
        return self._open

    def is_running(self, pid: int) -> bool:
        return self.running_pid == pid

    @property
    def is_idle(self) -> bool:
        return self.state is CursorState.IDLE

    def open(
        self,
        pid: int,
        time: int,
        ready_queue: Optional[List[int]] = None,
        queues: Optional[List[List[int]]] = None,
        queue_level: Optional[int] = None,
    ) -> TimelineSegment:
        self.close(time)
        segment = TimelineSegment(
            process_id=pid,
            start_time=time,
            ready_queue=list(ready_queue) if ready_queue is not None else None,
            queues=[list(q) for q in queues] if queues is not None else None,
            queue_level=queue_level,
        )
        self.segments.append(segment)
        self._open = segment
        self.state = CursorState.IDLE if pid == IDLE_PID else CursorState.RUNNING
        return segment

    def idle(
        self,
        time: int,
        queues: Optional[List[List[int]]] = None,
        queue_level: Optional[int] = None,
    ) -> TimelineSegment:
        # Idle segments carry an empty snapshot of whichever shape the policy uses.
        ready_queue = [] if queues is None else None
        return self.open(IDLE_PID, time, ready_queue=ready_queue, queues=queues, queue_level=queue_level)

    def refresh(
        self,
        time: int,
        ready_queue: Optional[List[int]] = None,
        queues: Optional[List[List[int]]] = None,
    ) -> Optional[TimelineSegment]:
        """
        Split the open segment at ``time`` and reopen it for the same process
        and level with a new snapshot. Nothing is preempted.
        """
        if self._open is None:
            return None
        previous = self._open
        return self.open(
            previous.process_id,
            time,
            ready_queue=ready_queue,
            queues=queues,
            queue_level=previous.queue_level,
        )

    def close(self, time: int) -> None:
        if self._open is None:
            return
        if time < self._open.start_time:
            raise ValueError(
                f"segment for {self._open.process_id} cannot end at {time} "
                f"before it starts at {self._open.start_time}"
            )
        if time == self._open.start_time:
            self.segments.pop()
        else:
            self._open.end_time = time
        self._open = None
        self.state = CursorState.CLOSED

    def build(self, time: int) -> List[TimelineSegment]:
        self.close(time)
        return self.segments


class StatsCollector:
    """
    Records one ProcessStat per process, in completion order.
    """

    def __init__(self) -> None:
        self.stats: List[ProcessStat] = []
        self._seen: Set[int] = set()

    def record(
        self,
        process: Process,
        completion_time: int,
        final_queue_level: Optional[int] = None,
        aging_wait_time: Optional[int] = None,
    ) -> ProcessStat:
        if process.pid in self._seen:
            raise ValueError(f"process {process.pid} already completed")
        self._seen.add(process.pid)

        turnaround_time = completion_time - process.arrival_time
        stat = ProcessStat(
            process_id=process.pid,
            arrival_time=process.arrival_time,
            burst_time=process.burst_time,
            priority=process.priority,
            completion_time=completion_time,
            turnaround_time=turnaround_time,
            waiting_time=turnaround_time - process.burst_time,
            final_queue_level=final_queue_level,
            aging_wait_time=aging_wait_time,
        )
        self.stats.append(stat)
        return stat
