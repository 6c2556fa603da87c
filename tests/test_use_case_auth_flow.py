from unittest.mock import MagicMock, patch

import streamlit as st

from use_cases import auth_flow
from use_cases.session_models import Identity


@patch("use_cases.auth_flow.session_manager.get_store")
@patch("use_cases.auth_flow.session_manager.check_and_restore_session")
@patch("use_cases.auth_flow.session_manager.init_session_state")
def test_ensure_authenticated_session_stop_without_identity(
    mock_init,
    mock_restore,
    mock_get_store,
):
    st.session_state.clear()
    mock_get_store.return_value = MagicMock(is_authenticated=False, identity=None)

    result = auth_flow.ensure_authenticated_session()

    assert result.status == "STOP"
    assert result.reason == "auth_required"
    assert result.user_id is None
    mock_init.assert_called_once()
    mock_restore.assert_called_once()


@patch("use_cases.auth_flow.session_manager.get_store")
@patch("use_cases.auth_flow.session_manager.check_and_restore_session")
@patch("use_cases.auth_flow.session_manager.init_session_state")
def test_ensure_authenticated_session_continue_with_identity(
    mock_init,
    mock_restore,
    mock_get_store,
):
    st.session_state.clear()
    identity = Identity(id="u-42", email="t@example.com", first_name="Tester", last_name="", role="broker")
    mock_get_store.return_value = MagicMock(is_authenticated=True, identity=identity)

    result = auth_flow.ensure_authenticated_session()

    assert result.status == "CONTINUE"
    assert result.user_id == "u-42"
    mock_init.assert_called_once()
    mock_restore.assert_called_once()
