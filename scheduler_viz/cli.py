from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import ServerConfig
from .engine import QUANTUM_ALGORITHMS, available_algorithms, resolve_algorithm, schedule
from .errors import SchedulerError
from .gantt import build_rich_gantt, render_gantt
from .metrics import summarize_process_metrics
from .models import ScheduleResult, SchedulerParams
from .workload_io import load_workload


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser() -> argparse.ArgumentParser:
    algorithms = ", ".join(available_algorithms())
    parser = argparse.ArgumentParser(
        prog="scheduler-viz",
        description=f"CPU scheduling simulator ({algorithms}).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: SCHEDULER_VIZ_LOG_LEVEL or INFO).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        default=None,
        help=f"Algorithm to use ({algorithms}). Defaults to the workload's scheduling_type.",
    )
    run_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    _add_param_arguments(run_parser)
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw result as JSON instead of tables.",
    )
    run_parser.add_argument(
        "--plain",
        action="store_true",
        help="Draw the Gantt chart as plain text instead of a colored panel.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=available_algorithms(),
        help="Algorithms to compare (default: all).",
    )
    _add_param_arguments(compare_parser)

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API server.")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: SCHEDULER_VIZ_HOST or 0.0.0.0).")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: SCHEDULER_VIZ_PORT or 18080).")
    serve_parser.add_argument("--debug", action="store_true", help="Run Flask in debug mode.")

    return parser


def _add_param_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=None,
        help="Time quantum for RR, base quantum for MLQ / MLQ-Aging / MLFQ.",
    )
    parser.add_argument(
        "--num-queues",
        type=int,
        default=None,
        help="Number of queues for MLQ / MLQ-Aging / MLFQ (default: 3).",
    )
    parser.add_argument(
        "--aging-threshold",
        type=int,
        default=None,
        help="Aging threshold for SJF-Aging, 0-100 (default: 50).",
    )


def _merge_params(base: SchedulerParams, args: argparse.Namespace) -> SchedulerParams:
    return SchedulerParams(
        quantum=args.quantum if args.quantum is not None else base.quantum,
        num_queues=args.num_queues if args.num_queues is not None else base.num_queues,
        aging_threshold=args.aging_threshold if args.aging_threshold is not None else base.aging_threshold,
    )


def _print_result(result: ScheduleResult, console: Console, plain: bool = False) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    if result.quantum is not None:
        console.print(f"[bold]Quantum:[/bold] {result.quantum}")

    console.print()

    if plain:
        console.print(render_gantt(result.timeline), markup=False, highlight=False)
    else:
        panel, time_marks = build_rich_gantt(result.timeline)
        console.print(panel)
        if time_marks:
            console.print(time_marks)

    console.print()

    headers = ["PID", "Arrive", "Burst", "Priority", "Complete", "Turnaround", "Wait"]
    extra = []
    if any(p.final_queue_level is not None for p in result.processes):
        extra.append("Final queue")
    if any(p.aging_wait_time is not None for p in result.processes):
        extra.append("Aging wait")

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers + extra:
        justify = "center" if h in {"PID", "Priority"} else "right"
        proc_table.add_column(h, justify=justify)

    for p in result.processes:
        row = [
            str(p.process_id),
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(p.completion_time),
            str(p.turnaround_time),
            str(p.waiting_time),
        ]
        if "Final queue" in extra:
            row.append("" if p.final_queue_level is None else str(p.final_queue_level))
        if "Aging wait" in extra:
            row.append("" if p.aging_wait_time is None else str(p.aging_wait_time))
        proc_table.add_row(*row)

    console.print(proc_table)
    console.print()

    summary = summarize_process_metrics(result)
    if result.system:
        sys = result.system
        sys_table = Table(title="System metrics", box=box.SIMPLE_HEAVY)
        sys_table.add_column("Metric")
        sys_table.add_column("Value", justify="right")

        sys_table.add_row("Avg waiting", f"{summary['avg_waiting']:.2f}")
        sys_table.add_row("Avg turnaround", f"{summary['avg_turnaround']:.2f}")
        sys_table.add_row("Avg response", f"{summary['avg_response']:.2f}")
        sys_table.add_row("Throughput (proc/time)", f"{sys.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{sys.cpu_utilization*100:.1f}%")
        sys_table.add_row("Context switches", str(sys.context_switches))
        sys_table.add_row("Starvation count", str(sys.starvation_count))

        console.print(sys_table)


def _run_compare(args: argparse.Namespace, console: Console) -> None:
    workload_path = Path(args.workload)
    request = load_workload(workload_path)
    params = _merge_params(request.params, args)

    summary_table = Table(title=f"Algorithm comparison: {workload_path}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Quantum", justify="right")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("Avg response", justify="right")
    summary_table.add_column("Switches", justify="right")

    for alg in args.algorithms:
        result = schedule(request.processes, alg, params)
        summary = summarize_process_metrics(result)
        summary_table.add_row(
            result.algorithm,
            str(result.quantum) if resolve_algorithm(alg) in QUANTUM_ALGORITHMS else "",
            f"{summary['avg_waiting']:.2f}",
            f"{summary['avg_turnaround']:.2f}",
            f"{summary['avg_response']:.2f}",
            str(result.system.context_switches if result.system else 0),
        )

    console.print(summary_table)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    console = Console()

    try:
        config = ServerConfig.from_env()
    except ValueError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        return 1
    _configure_logging(args.log_level or config.log_level)

    try:
        if args.command == "run":
            request = load_workload(Path(args.workload))
            algorithm = args.algorithm or request.algorithm
            if not algorithm:
                parser.error("no algorithm given (use --algorithm or set scheduling_type in the workload)")
            result = schedule(request.processes, algorithm, _merge_params(request.params, args))
            if args.json:
                console.print_json(json.dumps(result.to_dict()))
            else:
                _print_result(result, console, plain=args.plain)
            return 0

        if args.command == "compare":
            _run_compare(args, console)
            return 0

        if args.command == "serve":
            from .server import create_app

            if args.host is not None:
                config.host = args.host
            if args.port is not None:
                config.port = args.port
            if args.debug:
                config.debug = True
            app = create_app(config)
            app.run(host=config.host, port=config.port, debug=config.debug, threaded=True)
            return 0
    except SchedulerError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1
    except OSError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        return 1

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
