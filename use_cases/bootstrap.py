"""Startup orchestration: configuration, API client and session store wiring."""

from dataclasses import dataclass
from typing import Literal, Tuple

import logging

from infrastructure.config import load_api_settings
from utils import session_manager

log = logging.getLogger(__name__)

StartupStatus = Literal["CONTINUE", "STOP"]


@dataclass(frozen=True)
class StartupResult:
    """Result contract for startup/bootstrap orchestration."""

    status: StartupStatus
    planned_steps: Tuple[str, ...]


def run_startup() -> StartupResult:
    """Build the per-session store once and run its one-time restore check."""
    executed_steps = []

    session_manager.init_session_state()
    executed_steps.append("init_session_state")

    if session_manager.st.session_state.session_store is None:
        settings = load_api_settings()
        executed_steps.append("load_api_settings")
        session_manager.build_session_store(settings)
        executed_steps.append("build_session_store")

    state = session_manager.check_and_restore_session()
    executed_steps.append(f"session_{state.lower()}")

    return StartupResult(status="CONTINUE", planned_steps=tuple(executed_steps))
