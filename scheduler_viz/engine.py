from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .algorithms import schedule_fcfs, schedule_priority, schedule_rr, schedule_sjf, schedule_sjf_aging
from .errors import UnsupportedAlgorithm
from .models import Process, ScheduleResult, SchedulerParams
from .multilevel import schedule_mlfq, schedule_mlq, schedule_mlq_aging

logger = logging.getLogger(__name__)

Policy = Callable[[Sequence[Process], Optional[SchedulerParams]], ScheduleResult]

ALGORITHMS: Dict[str, Policy] = {
    "FCFS": schedule_fcfs,
    "SJF": schedule_sjf,
    "SJF-Aging": schedule_sjf_aging,
    "RR": schedule_rr,
    "Priority": schedule_priority,
    "MLQ": schedule_mlq,
    "MLQ-Aging": schedule_mlq_aging,
    "MLFQ": schedule_mlfq,
}

# Algorithms whose behaviour depends on the quantum parameter.
QUANTUM_ALGORITHMS = frozenset({"RR", "MLQ", "MLQ-Aging", "MLFQ"})

_LOOKUP = {name.upper(): name for name in ALGORITHMS}


def available_algorithms() -> List[str]:
    return list(ALGORITHMS)


def resolve_algorithm(name: str) -> str:
    """
    Map a user-supplied selector to its canonical name. Matching ignores
    case and treats ``_`` like ``-`` (``mlq_aging`` -> ``MLQ-Aging``).
    """
    if not isinstance(name, str):
        raise UnsupportedAlgorithm(f"Unsupported scheduling algorithm: {name!r}")
    key = name.strip().upper().replace("_", "-")
    if key not in _LOOKUP:
        raise UnsupportedAlgorithm(
            f"Unsupported scheduling algorithm '{name}' (choose from {', '.join(ALGORITHMS)})"
        )
    return _LOOKUP[key]


def schedule(
    processes: Sequence[Process],
    algorithm: str,
    params: Optional[SchedulerParams] = None,
) -> ScheduleResult:
    """
    Run one scheduling algorithm over ``processes``.

    Every call builds its own simulation state, so concurrent calls share
    nothing. Bad parameters raise before any simulation loop starts.
    """
    name = resolve_algorithm(algorithm)
    params = params or SchedulerParams()
    policy = ALGORITHMS[name]

    result = policy(processes, params)
    logger.debug(
        "scheduled %d processes with %s: %d segments, makespan %s",
        len(processes),
        name,
        len(result.timeline),
        result.system.makespan if result.system else 0,
    )
    return result
