"""User-facing failure notifiers injected into the API gateway client."""

import logging
from typing import Callable

log = logging.getLogger(__name__)

Notifier = Callable[[str], None]


def streamlit_notifier(message: str) -> None:
    """Shows the failure as an error banner in the current Streamlit run."""
    import streamlit as st

    st.error(f"❌ {message}")


def log_notifier(message: str) -> None:
    log.warning(f"API failure: {message}")


def null_notifier(message: str) -> None:
    return None


def build_notifier(alert_on_failure: bool) -> Notifier:
    if alert_on_failure:
        return streamlit_notifier
    return log_notifier
