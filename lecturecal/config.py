"""
Runtime settings.

Values come from LECTURECAL_* environment variables; the CLI may override
them with flags. Invalid numbers fail at startup with ValueError.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from lecturecal.cache import DEFAULT_CLEANUP_INTERVAL, DEFAULT_MAXSIZE, DEFAULT_TTL


def _default_courses_csv() -> Path:
    return Path(__file__).resolve().parent / "data" / "courses.csv"


@dataclass
class Settings:
    courses_csv: Path = field(default_factory=_default_courses_csv)
    cache_ttl: float = DEFAULT_TTL
    cache_cleanup_interval: float = DEFAULT_CLEANUP_INTERVAL
    cache_maxsize: int = DEFAULT_MAXSIZE
    http_timeout: float = 30.0
    attachment_name: str = "lezioni"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables (os.environ by default).
        """
        env = os.environ if env is None else env
        s = cls()
        if env.get("LECTURECAL_COURSES_CSV"):
            s.courses_csv = Path(env["LECTURECAL_COURSES_CSV"])
        if env.get("LECTURECAL_CACHE_TTL"):
            s.cache_ttl = float(env["LECTURECAL_CACHE_TTL"])
        if env.get("LECTURECAL_CACHE_CLEANUP"):
            s.cache_cleanup_interval = float(env["LECTURECAL_CACHE_CLEANUP"])
        if env.get("LECTURECAL_CACHE_MAXSIZE"):
            s.cache_maxsize = int(env["LECTURECAL_CACHE_MAXSIZE"])
        if env.get("LECTURECAL_HTTP_TIMEOUT"):
            s.http_timeout = float(env["LECTURECAL_HTTP_TIMEOUT"])
        if env.get("LECTURECAL_ATTACHMENT_NAME"):
            s.attachment_name = env["LECTURECAL_ATTACHMENT_NAME"].strip()
        if env.get("LECTURECAL_LOG_LEVEL"):
            s.log_level = env["LECTURECAL_LOG_LEVEL"].strip().upper()

        if s.cache_ttl <= 0:
            raise ValueError(f"LECTURECAL_CACHE_TTL must be positive, got {s.cache_ttl}")
        if s.cache_maxsize <= 0:
            raise ValueError(f"LECTURECAL_CACHE_MAXSIZE must be positive, got {s.cache_maxsize}")
        return s
