"""Service configuration read from the environment."""

from __future__ import annotations

import os


class AgendaConfig:
    """Agenda service configuration."""

    def __init__(self) -> None:
        self.host = os.getenv("AGENDA_HOST", "0.0.0.0")
        self.port = int(os.getenv("AGENDA_PORT", 8000))
        self.log_level = os.getenv("AGENDA_LOG_LEVEL", "INFO").upper()
        self.seed_data = os.getenv("AGENDA_SEED_DATA", "false").lower() == "true"


config = AgendaConfig()
