from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

# Per-algorithm default base quantum.
DEFAULT_QUANTUM = {
    "RR": 1,
    "MLQ": 2,
    "MLQ-Aging": 2,
    "MLFQ": 2,
}
DEFAULT_NUM_QUEUES = 3
DEFAULT_AGING_THRESHOLD = 50

# Ticks a process may wait in queue q >= 1 before MLQ-Aging promotes it.
MLQ_AGING_THRESHOLD = 50

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 18080


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Build a config from ``SCHEDULER_VIZ_*`` environment variables, after
        loading a ``.env`` file from the working directory if there is one.
        """
        load_dotenv()

        origins = os.getenv("SCHEDULER_VIZ_CORS_ORIGINS", "*")
        try:
            port = int(os.getenv("SCHEDULER_VIZ_PORT", str(DEFAULT_PORT)))
        except ValueError as exc:
            raise ValueError("SCHEDULER_VIZ_PORT must be an integer") from exc

        log_level = os.getenv("SCHEDULER_VIZ_LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"SCHEDULER_VIZ_LOG_LEVEL must be a logging level name, got {log_level!r}")

        return cls(
            host=os.getenv("SCHEDULER_VIZ_HOST", DEFAULT_HOST),
            port=port,
            debug=_env_bool("SCHEDULER_VIZ_DEBUG"),
            log_level=log_level,
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
