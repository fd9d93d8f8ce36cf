from __future__ import annotations

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

from .config import DEFAULT_AGING_THRESHOLD, DEFAULT_NUM_QUEUES
from .errors import InvalidIdentifier, MalformedInput
from .models import Process, SchedulerParams

_ID_KEYS = ("p_id", "pid", "id")


@dataclass
class ScheduleRequest:
    processes: List[Process]
    algorithm: Optional[str] = None
    params: SchedulerParams = field(default_factory=SchedulerParams)


def load_workload(path: str | Path) -> ScheduleRequest:
    """
    Load a workload from a JSON or CSV file.

    JSON files may hold a full request object (``processes`` plus optional
    ``scheduling_type``/``quantum``/``num_queues``/``aging_threshold``) or a
    bare list of process objects. CSV files hold one process per row.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return ScheduleRequest(processes=_load_csv(path))

    raise MalformedInput(f"Unsupported workload format: {suffix} (use .json or .csv)")


def _load_json(path: Path) -> ScheduleRequest:
    with path.open("r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as exc:
            raise MalformedInput(f"Invalid JSON in {path}: {exc}") from exc

    if isinstance(raw, list):
        return ScheduleRequest(processes=parse_processes(raw))
    return parse_schedule_request(raw)


def _load_csv(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        return [process_from_mapping(row) for row in reader]


def coerce_process_id(value: Any) -> int:
    """
    Accept an integer id or a string holding one; reject everything else.
    """
    if isinstance(value, bool):
        raise InvalidIdentifier("Process ID must be a number or string convertible to number")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise InvalidIdentifier(
                f"Invalid process ID format {value!r}: must be convertible to integer"
            ) from exc
    raise InvalidIdentifier("Process ID must be a number or string convertible to number")


def _int_field(mapping: Mapping, key: str, default: Optional[int] = None) -> int:
    value = mapping.get(key)
    if value in (None, ""):
        if default is None:
            raise MalformedInput(f"Process entry is missing '{key}': {dict(mapping)!r}")
        return default
    if isinstance(value, bool):
        raise MalformedInput(f"'{key}' must be an integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise MalformedInput(f"'{key}' must be an integer, got {value!r}") from exc
    if isinstance(value, float) and not value.is_integer():
        raise MalformedInput(f"'{key}' must be an integer, got {value!r}")
    return number


def process_from_mapping(mapping: Any) -> Process:
    if not isinstance(mapping, Mapping):
        raise MalformedInput(f"Invalid process entry: {mapping!r}")

    for key in _ID_KEYS:
        if key in mapping:
            pid = coerce_process_id(mapping[key])
            break
    else:
        raise InvalidIdentifier(f"Process entry has no id ('p_id'): {dict(mapping)!r}")

    arrival_time = _int_field(mapping, "arrival_time")
    burst_time = _int_field(mapping, "burst_time")
    priority = _int_field(mapping, "priority", default=0)

    if arrival_time < 0:
        raise MalformedInput(f"Process {pid}: arrival_time must be >= 0, got {arrival_time}")
    if burst_time <= 0:
        raise MalformedInput(f"Process {pid}: burst_time must be > 0, got {burst_time}")

    return Process(pid=pid, arrival_time=arrival_time, burst_time=burst_time, priority=priority)


def parse_processes(entries: Any) -> List[Process]:
    if not isinstance(entries, list):
        raise MalformedInput("'processes' must be a list of process objects")
    return [process_from_mapping(entry) for entry in entries]


def _optional_int(body: Mapping, *keys: str) -> Optional[int]:
    for key in keys:
        if key in body and body[key] is not None:
            value = body[key]
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                raise MalformedInput(f"'{key}' must be an integer, got {value!r}")
            try:
                return int(value)
            except ValueError as exc:
                raise MalformedInput(f"'{key}' must be an integer, got {value!r}") from exc
    return None


def parse_schedule_request(body: Any, algorithm: Optional[str] = None) -> ScheduleRequest:
    """
    Decode a scheduling request body.

    ``algorithm`` overrides ``scheduling_type`` for endpoints that imply the
    algorithm. Both ``num_queues`` and ``num_of_queues`` are accepted.
    """
    if not isinstance(body, Mapping):
        raise MalformedInput("Request body must be a JSON object")
    if "processes" not in body:
        raise MalformedInput("Missing processes field")

    processes = parse_processes(body["processes"])

    selected = algorithm if algorithm is not None else body.get("scheduling_type")

    num_queues = _optional_int(body, "num_queues", "num_of_queues")
    aging_threshold = _optional_int(body, "aging_threshold")
    params = SchedulerParams(
        quantum=_optional_int(body, "quantum", "time_slice"),
        num_queues=DEFAULT_NUM_QUEUES if num_queues is None else num_queues,
        aging_threshold=DEFAULT_AGING_THRESHOLD if aging_threshold is None else aging_threshold,
    )
    return ScheduleRequest(processes=processes, algorithm=selected, params=params)
