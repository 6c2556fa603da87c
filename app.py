import streamlit as st
from datetime import datetime

from infrastructure.observability import setup_observability
setup_observability()

from use_cases import auth_flow, bootstrap
from views import dashboard_view, login_view

# --- PAGE SETTINGS ---
st.set_page_config(page_title="Estate CRM", page_icon="🏠", layout="wide", initial_sidebar_state="expanded")

# Health Check (basic load-balancer heartbeat)
if st.query_params.get("health") == "1":
    st.write({"status": "ok", "version": "1.0", "time": datetime.utcnow().isoformat()})
    st.stop()

startup = bootstrap.run_startup()
if startup.status == "STOP":
    st.stop()

auth_result = auth_flow.ensure_authenticated_session()
if auth_result.status == "STOP":
    login_view.render_auth_screen()
    st.stop()

dashboard_view.render_dashboard()
