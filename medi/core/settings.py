"""Runtime settings shared by the CLI and the web UI."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from medi.meditation.model import DEFAULT_DURATION_MIN


DATA_DIR_ENV = "MEDI_HOME"


def default_data_dir(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    override = env.get(DATA_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".medi"


@dataclass(frozen=True)
class AppSettings:
    data_dir: Path = field(default_factory=default_data_dir)
    duration_min: int = DEFAULT_DURATION_MIN
    tick_interval_sec: float = 0.1
    log_level: str = "INFO"
    log_file: Path | None = None
    web_host: str = "127.0.0.1"
    web_port: int = 8089

    @property
    def sessions_path(self) -> Path:
        return self.data_dir / "sessions.json"

    @property
    def moods_path(self) -> Path:
        return self.data_dir / "moods.json"
