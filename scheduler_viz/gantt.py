from __future__ import annotations

from typing import Dict, List

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import TimelineSegment


def _label(seg: TimelineSegment) -> str:
    return "idle" if seg.is_idle else f"P{seg.process_id}"


def render_gantt(segments: List[TimelineSegment]) -> str:
    """
    Plain-text Gantt chart, one character per tick. Idle ticks are dots.
    """
    if not segments:
        return "(no execution)"

    line = "|"
    labels = ""
    time_marks = str(segments[0].start_time)

    for seg in segments:
        width = max(1, seg.duration)
        line += ("." if seg.is_idle else "=") * width
        labels += _label(seg)[:width].ljust(width)
        time_marks += f"{seg.end_time:>{max(3, width)}}"

    line += "|"

    return "\n".join(["Gantt Chart:", line, labels, time_marks])


def build_rich_gantt(segments: List[TimelineSegment]) -> tuple[Panel, str]:
    """
    Build a Rich Panel containing a colored Gantt chart and a string with time marks.
    """
    if not segments:
        panel = Panel("No execution", title="Gantt Chart")
        return panel, ""

    colors = ["red", "green", "yellow", "blue", "magenta", "cyan"]
    pid_to_color: Dict[int, str] = {}

    def pid_color(pid: int) -> str:
        if pid not in pid_to_color:
            idx = len(pid_to_color) % len(colors)
            pid_to_color[pid] = colors[idx]
        return pid_to_color[pid]

    timeline = Text()
    labels = Text()
    time_marks = str(segments[0].start_time)

    for seg in segments:
        width = max(1, seg.duration)
        if seg.is_idle:
            timeline.append("." * width, style="dim")
            labels.append(_label(seg)[:width].ljust(width), style="dim")
        else:
            timeline.append(" " * width, style=f"on {pid_color(seg.process_id)}")
            labels.append(_label(seg)[:width].ljust(width), style="bold")
        time_marks += f"{seg.end_time:>{max(3, width)}}"

    table = Table.grid(padding=(0, 0))
    table.add_row(timeline)
    table.add_row(labels)

    panel = Panel.fit(table, title="Gantt Chart")
    return panel, time_marks
