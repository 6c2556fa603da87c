"""Runtime configuration: Streamlit secrets first, then environment variables."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

import streamlit as st

log = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8080/api"
DEFAULT_TIMEOUT = 20.0


@dataclass(frozen=True)
class ApiSettings:
    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    alert_on_failure: bool = True


def get_secret(key: str) -> Optional[str]:
    try:
        value = st.secrets.get(key)
    except FileNotFoundError:
        value = None
    if value is None:
        value = os.getenv(key)
    return value


def _as_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or str(raw).strip() == "":
        return default
    return str(raw).strip().lower() in ("1", "true", "yes", "on")


def load_api_settings() -> ApiSettings:
    base_url = get_secret("ESTATE_API_URL") or DEFAULT_API_URL

    timeout = DEFAULT_TIMEOUT
    raw_timeout = get_secret("ESTATE_API_TIMEOUT")
    if raw_timeout:
        try:
            timeout = float(raw_timeout)
            if timeout <= 0:
                raise ValueError(raw_timeout)
        except ValueError:
            log.warning(f"Invalid ESTATE_API_TIMEOUT={raw_timeout!r}, using {DEFAULT_TIMEOUT}s")
            timeout = DEFAULT_TIMEOUT

    alert = _as_bool(get_secret("ESTATE_ALERT_ON_FAILURE"), True)
    return ApiSettings(base_url=str(base_url), timeout=timeout, alert_on_failure=alert)
