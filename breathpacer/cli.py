"""breathpacer command-line interface.

Argparse-based CLI over the technique registry, phase calculator, geometry
generator and session timer. Initializes logging before doing any work.
Exposed via ``python -m breathpacer`` and the ``breathpacer`` script.

Exit codes:
  0 success
  1 error (unknown technique, invalid technique file, run timed out)
  2 usage error
"""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

from .context import EngineContext, create_context
from .errors import BreathpacerError, NotFoundError
from .logging_utils import LogMode, get_default_log_path, setup_logging
from .settings import EngineSettings
from .timing.events import TimerEvent, TimerEventType
from .timing.phase import PhaseSnapshot, phase_for
from .timing.watchers import PhaseChangeWatcher

logger = logging.getLogger(__name__)


def _add_logging_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set log level (default: WARNING)",
    )
    parser.add_argument(
        "--log-mode",
        choices=[mode.value for mode in LogMode],
        default=LogMode.NORMAL.value,
        help="Logging preset: quiet suppresses console info, debug forces DEBUG",
    )
    parser.add_argument(
        "--log-file",
        default=str(get_default_log_path()),
        help="Path to log file (default: per-user breathpacer directory)",
    )
    parser.add_argument(
        "--log-format",
        choices=["plain", "json"],
        default="plain",
        help="Log format (plain or json)",
    )
    parser.add_argument(
        "--techniques-file",
        default=None,
        help="Custom techniques JSON to load (default: BREATHPACER_TECHNIQUES_FILE or per-user file)",
    )


def _build_logging_parent() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    _add_logging_args(parent)
    return parent


def _non_negative_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw!r}") from None
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {value}")
    return value


def _positive_int(raw: str) -> int:
    value = _non_negative_int(raw)
    if value == 0:
        raise argparse.ArgumentTypeError("must be positive")
    return value


def build_parser() -> argparse.ArgumentParser:
    logging_parent = _build_logging_parent()
    parser = argparse.ArgumentParser(
        prog="breathpacer",
        description="breathpacer CLI",
        parents=[logging_parent],
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_subparser(name: str, **kwargs: Any) -> argparse.ArgumentParser:
        parents = list(kwargs.pop("parents", []))
        parents.insert(0, logging_parent)
        return sub.add_parser(name, parents=parents, **kwargs)

    p_list = add_subparser("list", help="List registered techniques")
    p_list.add_argument("--category", default=None, help="Only techniques in this category")
    p_list.add_argument("--json", action="store_true", help="Print JSON")

    p_show = add_subparser("show", help="Show one technique in full")
    p_show.add_argument("technique_id")
    p_show.add_argument("--json", action="store_true", help="Print JSON")

    p_search = add_subparser("search", help="Search name, description, benefits and pattern")
    p_search.add_argument("query")
    p_search.add_argument("--json", action="store_true", help="Print JSON")

    p_rec = add_subparser("recommend", help="Filter by cycle length and phase count")
    p_rec.add_argument("--min-duration", type=_positive_int, default=None)
    p_rec.add_argument("--max-duration", type=_positive_int, default=None)
    p_rec.add_argument("--min-phases", type=_positive_int, default=None)
    p_rec.add_argument("--max-phases", type=_positive_int, default=None)
    p_rec.add_argument("--json", action="store_true", help="Print JSON")

    p_phase = add_subparser("phase", help="Active phase after ELAPSED seconds")
    p_phase.add_argument("technique_id")
    p_phase.add_argument("elapsed", type=_non_negative_int)
    p_phase.add_argument("--json", action="store_true", help="Print JSON")

    p_points = add_subparser("points", help="Progress marker geometry")
    p_points.add_argument("technique_id")
    p_points.add_argument("--json", action="store_true", help="Print JSON")

    p_run = add_subparser("run", help="Run a headless session, printing phase changes")
    p_run.add_argument("technique_id")
    p_run.add_argument("--cycles", type=_positive_int, default=1, help="Stop after N cycles (default: 1)")
    p_run.add_argument("--timeout", type=float, default=None, help="Give up after N seconds")

    return parser


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _print_rows(rows: list[dict[str, Any]]) -> None:
    if not rows:
        print("No techniques found")
        return
    width = max(len(r["id"]) for r in rows)
    for r in rows:
        print(f"{r['id']:<{width}}  {r['pattern']:<10} {r['total_duration']:>4}s  {r['name']}")


def _metadata_rows(ctx: EngineContext, techniques) -> list[dict[str, Any]]:
    ids = {t.id for t in techniques}
    order = [t.id for t in techniques]
    by_id = {row["id"]: row for row in ctx.registry.get_technique_metadata() if row["id"] in ids}
    return [by_id[i] for i in order]


def _phase_line(snapshot: PhaseSnapshot) -> str:
    return (
        f"{snapshot.phase_name} ({snapshot.phase_key}) "
        f"phase {snapshot.phase_index + 1}, {snapshot.time_in_phase}s in, {snapshot.time_left}s left"
    )


def cmd_list(ctx: EngineContext, args: argparse.Namespace) -> int:
    if args.category:
        techniques = ctx.registry.get_techniques_by_category(args.category)
    else:
        techniques = ctx.registry.get_all_techniques()
    rows = _metadata_rows(ctx, techniques)
    if args.json:
        _print_json(rows)
    else:
        _print_rows(rows)
    return 0


def cmd_show(ctx: EngineContext, args: argparse.Namespace) -> int:
    technique = ctx.registry.get_technique(args.technique_id)
    if args.json:
        data = technique.to_dict()
        data["total_duration"] = technique.total_duration_sec
        _print_json(data)
        return 0
    print(f"{technique.name} [{technique.id}]  {technique.pattern}  ({technique.total_duration_sec}s cycle)")
    if technique.description:
        print(technique.description)
    if technique.benefits:
        print(f"Benefits: {technique.benefits}")
    for phase, duration in zip(technique.phases, technique.durations_sec):
        print(f"  {phase.name:<10} {duration:>3}s")
    for i, step in enumerate(technique.instructions, 1):
        print(f"  {i}. {step}")
    return 0


def cmd_search(ctx: EngineContext, args: argparse.Namespace) -> int:
    rows = _metadata_rows(ctx, ctx.registry.search_techniques(args.query))
    if args.json:
        _print_json(rows)
    else:
        _print_rows(rows)
    return 0


def cmd_recommend(ctx: EngineContext, args: argparse.Namespace) -> int:
    techniques = ctx.registry.get_recommended_techniques(
        min_duration=args.min_duration,
        max_duration=args.max_duration,
        min_phases=args.min_phases,
        max_phases=args.max_phases,
    )
    rows = _metadata_rows(ctx, techniques)
    if args.json:
        _print_json(rows)
    else:
        _print_rows(rows)
    return 0


def cmd_phase(ctx: EngineContext, args: argparse.Namespace) -> int:
    technique = ctx.registry.get_technique(args.technique_id)
    snapshot = phase_for(args.elapsed, technique)
    if args.json:
        data = snapshot.to_dict()
        data["elapsed"] = args.elapsed
        data["cycles_completed"] = args.elapsed // technique.total_duration_sec
        _print_json(data)
    else:
        print(_phase_line(snapshot))
    return 0


def cmd_points(ctx: EngineContext, args: argparse.Namespace) -> int:
    points = ctx.points_for(args.technique_id)
    if args.json:
        _print_json([p.to_dict() for p in points])
    else:
        for p in points:
            print(f"{p.label:>3}  x={p.x:7.2f}  y={p.y:7.2f}")
    return 0


def cmd_run(ctx: EngineContext, args: argparse.Namespace) -> int:
    """Run a session on a Qt event loop until ``--cycles`` cycles complete."""
    from PyQt6.QtCore import QCoreApplication, QTimer

    timer = ctx.new_timer(args.technique_id)
    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    outcome = {"cycles": 0, "timed_out": False}

    def on_phase(previous: Optional[PhaseSnapshot], current: PhaseSnapshot) -> None:
        print(f"[{timer.get_elapsed_time():>4}s] {current.phase_name} ({current.duration}s)", flush=True)

    def on_cycle(event: TimerEvent) -> None:
        outcome["cycles"] = event.data["cycles_completed"]
        print(f"Cycle {outcome['cycles']} complete", flush=True)
        if outcome["cycles"] >= args.cycles:
            timer.stop()
            app.quit()

    def on_timeout() -> None:
        outcome["timed_out"] = True
        timer.stop()
        app.quit()

    watcher = PhaseChangeWatcher(timer, on_phase)
    timer.add_listener(TimerEventType.CYCLE_COMPLETE, on_cycle)
    previous_sigint = signal.signal(signal.SIGINT, lambda *_: on_timeout())
    guard: Optional[QTimer] = None
    if args.timeout is not None:
        guard = QTimer()
        guard.setSingleShot(True)
        guard.timeout.connect(on_timeout)
        guard.start(int(args.timeout * 1000))

    try:
        timer.start()
        app.exec()
    finally:
        signal.signal(signal.SIGINT, previous_sigint)
        if guard is not None:
            guard.stop()
        watcher.close()
        timer.dispose()

    if outcome["timed_out"]:
        print(f"Stopped after {outcome['cycles']} of {args.cycles} cycle(s)", file=sys.stderr)
        return 1
    return 0


_COMMANDS = {
    "list": cmd_list,
    "show": cmd_show,
    "search": cmd_search,
    "recommend": cmd_recommend,
    "phase": cmd_phase,
    "points": cmd_points,
    "run": cmd_run,
}


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging before doing any work
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        json_format=(args.log_format == "json"),
        log_mode=args.log_mode,
        add_console=True,
    )

    settings = EngineSettings.from_env()
    if args.techniques_file:
        settings.techniques_file = Path(args.techniques_file)

    with create_context(settings) as ctx:
        try:
            return _COMMANDS[args.command](ctx, args)
        except NotFoundError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
        except BreathpacerError as exc:
            logger.error(f"[cli] {args.command} failed: {exc}")
            print(f"Error: {exc}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
