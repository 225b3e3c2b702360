"""Terminal CLI entrypoint for Medi."""

from __future__ import annotations

import argparse
import asyncio
import logging
import math
from dataclasses import replace
from pathlib import Path

from medi.core.settings import AppSettings, default_data_dir
from medi.meditation.model import AVAILABLE_DURATIONS_MIN, DEFAULT_DURATION_MIN, TimerSnapshot
from medi.meditation.scheduler import ManualScheduler
from medi.meditation.stats import format_duration
from medi.mood.insights import personalized_message, recommended_meditations
from medi.mood.model import MoodState
from medi.ui.controller import MeditationController


logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Medi meditation timer")
    parser.add_argument(
        "--duration",
        type=int,
        choices=AVAILABLE_DURATIONS_MIN,
        default=DEFAULT_DURATION_MIN,
        help="Session length in minutes",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--history", action="store_true", help="Print session history")
    mode.add_argument("--stats", action="store_true", help="Print history statistics")
    mode.add_argument("--guided", action="store_true", help="List guided meditations")
    parser.add_argument(
        "--mood",
        choices=[m.value for m in MoodState],
        default=None,
        help="Record a mood check-in before the session",
    )
    mode.add_argument(
        "--simulate",
        action="store_true",
        help="Run the full countdown instantly on a simulated clock",
    )
    mode.add_argument(
        "--ui-web",
        action="store_true",
        help="Launch web UI (NiceGUI)",
    )
    parser.add_argument("--web-host", default="127.0.0.1", help="Host bind for --ui-web")
    parser.add_argument("--web-port", type=int, default=8089, help="Port for --ui-web")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding sessions.json and moods.json (default: $MEDI_HOME or ~/.medi)",
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", type=Path, default=None, help="Also log to this file")
    return parser


def settings_from_args(args: argparse.Namespace) -> AppSettings:
    return AppSettings(
        data_dir=args.data_dir or default_data_dir(),
        duration_min=args.duration,
        log_level=args.log_level,
        log_file=args.log_file,
        web_host=args.web_host,
        web_port=args.web_port,
    )


def print_history(controller: MeditationController) -> int:
    groups = controller.history_by_month()
    if not groups:
        print("No sessions yet")
        return 0
    for month, records in groups.items():
        print(month)
        for record in records:
            started = record.started_at.astimezone().strftime("%a %d %H:%M")
            print(f"  {started}  {format_duration(record.duration_sec):>8}")
    return 0


def print_stats(controller: MeditationController) -> int:
    stats = controller.stats()
    print(f"Sessions:        {stats.completed_sessions}")
    print(f"Minutes:         {stats.total_minutes:.0f}")
    print(f"Average session: {stats.average_session_min:.1f} min")
    print(f"Current streak:  {stats.current_streak_days} days")
    print(f"Longest streak:  {stats.longest_streak_days} days")
    return 0


def print_guided(controller: MeditationController) -> int:
    for item in controller.guided():
        print(f"{item.key:<16} {item.duration_label:>7}  {item.title} - {item.description}")
    return 0


def _status_line(snap: TimerSnapshot) -> str:
    return f"{snap.state:<9} {format_duration(snap.remaining_sec)} / {format_duration(snap.total_sec)}"


def _check_in(controller: MeditationController, mood_value: str | None) -> None:
    if mood_value is None:
        return
    mood = MoodState(mood_value)
    controller.check_in(mood)
    print(f"{mood.emoji}  {personalized_message(mood)}")
    titles = ", ".join(item.title for item in recommended_meditations(mood))
    print(f"Suggested: {titles}")


def run_simulated(controller: MeditationController, scheduler: ManualScheduler) -> int:
    controller.start()
    while controller.snapshot().state != "idle":
        scheduler.advance()
    record = controller.history[-1]
    print(f"Session completed ({format_duration(record.duration_sec)})")
    return 0


async def run_countdown(controller: MeditationController) -> int:
    done = asyncio.Event()
    last_shown: list[int] = [-1]

    def on_change(snap: TimerSnapshot) -> None:
        whole = math.ceil(snap.remaining_sec)
        if whole != last_shown[0]:
            last_shown[0] = whole
            print(_status_line(snap))

    controller.subscribe(on_change)
    controller.on_complete(lambda _record: done.set())
    controller.start()
    try:
        await done.wait()
    except asyncio.CancelledError:
        controller.stop()
        raise
    finally:
        controller.close()
    print("Session completed")
    return 0


def main() -> int:
    parser = build_parser()
    args = parser.parse_args()
    settings = settings_from_args(args)
    setup_logging(settings.log_level, settings.log_file)
    logger.debug("Data directory: %s", settings.data_dir)

    if args.ui_web:
        from medi.ui.web_app import run_web_ui

        return run_web_ui(settings)

    if args.simulate:
        scheduler = ManualScheduler()
        controller = MeditationController(
            replace(settings, tick_interval_sec=1.0),
            scheduler=scheduler,
        )
        _check_in(controller, args.mood)
        return run_simulated(controller, scheduler)

    controller = MeditationController(settings)
    if args.history:
        return print_history(controller)
    if args.stats:
        return print_stats(controller)
    if args.guided:
        return print_guided(controller)

    _check_in(controller, args.mood)
    try:
        return asyncio.run(run_countdown(controller))
    except KeyboardInterrupt:
        print("Session stopped; nothing recorded")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
