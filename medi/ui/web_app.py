"""NiceGUI web UI for Medi."""

from __future__ import annotations

from dataclasses import dataclass

from nicegui import ui

from medi.core.settings import AppSettings
from medi.meditation.model import SessionRecord
from medi.meditation.stats import format_duration
from medi.mood.insights import personalized_message, recommended_meditations
from medi.mood.model import MoodState
from medi.ui.controller import MeditationController

HISTORY_LIMIT = 12
REFRESH_SEC = 0.25

STATE_LABELS = {
    "idle": "Ready",
    "running": "Breathe",
    "paused": "Paused",
}


@dataclass
class WebState:
    status: str = "Pick a duration and press Start"


def _history_rows(records: list[SessionRecord]) -> list[dict[str, str]]:
    rows: list[dict[str, str]] = []
    for item in reversed(records[-HISTORY_LIMIT:]):
        rows.append(
            {
                "date": item.started_at.astimezone().strftime("%Y-%m-%d %H:%M"),
                "length": format_duration(item.duration_sec),
            }
        )
    return rows


def run_web_ui(settings: AppSettings | None = None) -> int:
    settings = settings or AppSettings()
    controller = MeditationController(settings)
    state = WebState()

    ui.add_head_html(
        """
        <style>
          body {
            background: radial-gradient(circle at top, #eef2ff 0%, #f8fafc 60%);
            color: #334155;
            font-family: Arial, "Segoe UI", sans-serif;
          }
          .md-card {
            border-radius: 16px;
            box-shadow: 0 10px 24px rgba(51, 65, 85, 0.12);
          }
          .md-countdown {
            font-size: 4rem;
            font-weight: 300;
            letter-spacing: 0.05em;
          }
          .md-muted { color: #64748b; }
        </style>
        """
    )

    def on_complete(record: SessionRecord) -> None:
        state.status = f"Session completed ({format_duration(record.duration_sec)})"
        if controller.journal.current is not None:
            rating_row.set_visibility(True)
        refresh_history()

    controller.on_complete(on_complete)

    def refresh_history() -> None:
        history.rows = _history_rows(controller.history)
        history.update()
        stats = controller.stats()
        stats_label.set_text(
            f"{stats.completed_sessions} sessions · {stats.total_minutes:.0f} min · "
            f"{stats.current_streak_days} day streak (best {stats.longest_streak_days})"
        )

    def refresh_ui() -> None:
        snap = controller.snapshot()
        countdown.set_text(format_duration(snap.remaining_sec))
        state_label.set_text(STATE_LABELS.get(snap.state, snap.state))
        progress.set_value(snap.progress)
        status_label.set_text(state.status)
        if controller.last_error is not None:
            error_label.set_text(f"History not saved: {controller.last_error}")
            error_label.set_visibility(True)
        start_btn.set_visibility(snap.state == "idle")
        pause_btn.set_visibility(snap.state == "running")
        resume_btn.set_visibility(snap.state == "paused")
        stop_btn.set_visibility(snap.state in ("running", "paused"))
        if duration_select.value != snap.selected_duration_min:
            duration_select.set_value(snap.selected_duration_min)

    def on_start() -> None:
        if controller.start():
            state.status = "Session started"
        refresh_ui()

    def on_pause() -> None:
        controller.pause()
        state.status = "Paused"
        refresh_ui()

    def on_resume() -> None:
        controller.resume()
        state.status = "Resumed"
        refresh_ui()

    def on_stop() -> None:
        if controller.stop():
            state.status = "Session stopped - nothing recorded"
        refresh_ui()

    def on_duration_change() -> None:
        value = duration_select.value
        if value is None:
            return
        if not controller.select_duration(int(value)):
            ui.notify(f"Unsupported duration: {value} min", color="negative")
        elif controller.timer.is_active:
            state.status = f"Next session: {value} min"
        refresh_ui()

    def on_guided_pick(key: str) -> None:
        item = controller.select_guided(key)
        state.status = f"Guided: {item.title}"
        refresh_ui()

    def on_check_in() -> None:
        if mood_select.value is None:
            ui.notify("Pick a mood first", color="warning")
            return
        mood = MoodState(mood_select.value)
        controller.check_in(mood, apply_recommended_duration=not controller.timer.is_active)
        mood_message.set_text(f"{mood.emoji}  {personalized_message(mood)}")
        suggestions.set_text(
            "Suggested: " + ", ".join(item.title for item in recommended_meditations(mood))
        )
        refresh_ui()

    def on_rate(rating: int) -> None:
        controller.rate_session(rating)
        rating_row.set_visibility(False)
        insights = controller.insights()
        ui.notify(f"Thanks! {insights.mood_trend}")

    with ui.column().classes("w-full items-center gap-4 p-6"):
        ui.label("Medi").classes("text-3xl font-light")

        with ui.card().classes("md-card w-full max-w-xl items-center"):
            state_label = ui.label("Ready").classes("md-muted text-lg")
            countdown = ui.label("10:00").classes("md-countdown")
            progress = ui.linear_progress(value=0.0, show_value=False).classes("w-full")
            duration_select = ui.select(
                {m: f"{m} min" for m in controller.timer.available_durations_min},
                value=controller.timer.selected_duration_min,
                label="Duration",
                on_change=lambda _e: on_duration_change(),
            ).classes("w-40")
            with ui.row().classes("gap-2"):
                start_btn = ui.button("Start", on_click=on_start)
                pause_btn = ui.button("Pause", on_click=on_pause)
                resume_btn = ui.button("Resume", on_click=on_resume)
                stop_btn = ui.button("Stop", on_click=on_stop, color="negative")
            status_label = ui.label(state.status).classes("md-muted")
            error_label = ui.label("").classes("text-negative")
            error_label.set_visibility(False)

        with ui.card().classes("md-card w-full max-w-xl"):
            ui.label("How are you feeling?").classes("text-lg")
            with ui.row().classes("items-center gap-2"):
                mood_select = ui.select(
                    {m.value: f"{m.emoji} {m.label}" for m in MoodState},
                    label="Mood",
                ).classes("w-48")
                ui.button("Check in", on_click=on_check_in)
            mood_message = ui.label("").classes("md-muted")
            suggestions = ui.label("").classes("md-muted")
            with ui.row().classes("items-center gap-1") as rating_row:
                ui.label("Did it help?")
                for value in range(1, 6):
                    ui.button(str(value), on_click=lambda _e, v=value: on_rate(v)).props("flat")
            rating_row.set_visibility(False)

        with ui.card().classes("md-card w-full max-w-xl"):
            ui.label("Guided meditations").classes("text-lg")
            for item in controller.guided():
                with ui.row().classes("w-full items-center justify-between"):
                    ui.label(f"{item.title} · {item.duration_label}")
                    ui.button(
                        "Use",
                        on_click=lambda _e, key=item.key: on_guided_pick(key),
                    ).props("flat")

        with ui.card().classes("md-card w-full max-w-xl"):
            ui.label("Your journey").classes("text-lg")
            stats_label = ui.label("").classes("md-muted")
            history = ui.table(
                columns=[
                    {"name": "date", "label": "Date", "field": "date", "align": "left"},
                    {"name": "length", "label": "Length", "field": "length"},
                ],
                rows=[],
            ).classes("w-full")

    refresh_history()
    refresh_ui()
    ui.timer(REFRESH_SEC, refresh_ui)
    ui.run(host=settings.web_host, port=settings.web_port, reload=False, title="Medi")
    return 0
