import logging
import time

import streamlit as st

from infrastructure.api.gateway_client import ApiGatewayClient
from infrastructure.config import ApiSettings, load_api_settings
from infrastructure.messaging.notifications import build_notifier
from infrastructure.storage.browser_storage import BrowserStorage
from use_cases.session_store import TOKEN_KEY, SessionStore

log = logging.getLogger(__name__)

# Time for the injected cookie/localStorage script to run before the page is rebuilt
STORAGE_SETTLE_SECONDS = 1.0

"""
SESSION STATE CONTRACT

Streamlit per-browser-session keys managed here.

session_store: SessionStore | None
    owner of token/identity lifecycle for this browser session
    default: None
    owner: session_manager

api_client: ApiGatewayClient | None
    the only HTTP client views may use
    default: None
    owner: session_manager

field_errors: dict
    field -> message from the last failed register/login submit
    default: {}
    owner: login_view

form_error: str | None
    form-level message from the last failed submit
    default: None
    owner: login_view

session_diag_seen: bool
    prevents repeating the "session expired" notice
    default: False
    owner: session_manager
"""


def init_session_state():
    if "session_store" not in st.session_state:
        st.session_state.session_store = None
    if "api_client" not in st.session_state:
        st.session_state.api_client = None
    if "field_errors" not in st.session_state:
        st.session_state.field_errors = {}
    if "form_error" not in st.session_state:
        st.session_state.form_error = None
    if "session_diag_seen" not in st.session_state:
        st.session_state.session_diag_seen = False


def build_session_store(settings: ApiSettings = None) -> SessionStore:
    settings = settings or load_api_settings()
    client = ApiGatewayClient(
        settings.base_url,
        timeout=settings.timeout,
        notifier=build_notifier(settings.alert_on_failure),
    )
    store = SessionStore(client, BrowserStorage())
    st.session_state.api_client = client
    st.session_state.session_store = store
    log.info(f"Session store created for {settings.base_url}")
    return store


def get_store() -> SessionStore:
    store = st.session_state.get("session_store")
    if store is None:
        store = build_session_store()
    return store


def get_client() -> ApiGatewayClient:
    get_store()
    return st.session_state.api_client


def check_and_restore_session():
    store = get_store()
    had_snapshot = store.snapshot_identity is not None
    state = store.initialize()
    if state == "ANONYMOUS" and had_snapshot and not st.session_state.session_diag_seen:
        st.warning("Your session has expired. Please sign in again.")
        st.session_state.session_diag_seen = True
    return state


def settle_and_rerun():
    """Reruns the script once the storage script injected in this run has had time to execute."""
    time.sleep(STORAGE_SETTLE_SECONDS)
    st.rerun()


def logout():
    get_store().logout()
    st.session_state.field_errors = {}
    st.session_state.form_error = None
    settle_and_rerun()


def render_session_recovery():
    """Lets the browser restore the token cookie from localStorage before the next restore check."""
    BrowserStorage().render_recovery(TOKEN_KEY)
