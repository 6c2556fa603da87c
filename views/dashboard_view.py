import logging

import pandas as pd
import streamlit as st

from infrastructure.api.errors import ApiError
from infrastructure.messaging.notifications import streamlit_notifier
from use_cases import rbac_policy
from use_cases.session_models import IdentityDecodeError
from utils import session_manager

log = logging.getLogger(__name__)

PROPERTY_TYPES = ["apartment", "house", "commercial", "plot"]
LISTING_TYPES = ["sale", "rent"]
CLIENT_TYPES = ["buyer", "seller", "tenant", "owner"]
CLIENT_STATUSES = ["active", "converted", "inactive"]
APPOINTMENT_TYPES = ["site_visit", "meeting", "call"]

PROPERTY_COLUMNS = ["title", "type", "listing_type", "price", "area", "city", "status"]
CLIENT_COLUMNS = ["first_name", "last_name", "email", "phone", "type", "status", "city"]
APPOINTMENT_COLUMNS = ["title", "date", "time", "type", "status", "client_name"]


def records_frame(records, columns) -> pd.DataFrame:
    """Builds a table from opaque backend records, keeping only the known columns that are present."""
    df = pd.DataFrame(records or [])
    if df.empty:
        return pd.DataFrame(columns=columns)
    present = [c for c in columns if c in df.columns]
    return df[present]


def _report(client, error: ApiError):
    log.warning(f"⚠️ Dashboard call failed: {error}")
    if client.notifier is not streamlit_notifier:
        st.error(str(error))


def _submit(client, action) -> bool:
    try:
        action()
    except ApiError as e:
        _report(client, e)
        return False
    except IdentityDecodeError as e:
        # Not an HTTP failure, so the client notifier never saw it
        log.warning(f"⚠️ Unreadable profile from backend: {e}")
        st.error(str(e))
        return False
    return True


def _fetch_envelope(client, loader):
    try:
        return loader()
    except ApiError as e:
        _report(client, e)
        return None


def _fetch(client, loader):
    """Returns the envelope payload as a list, empty when the call failed."""
    envelope = _fetch_envelope(client, loader)
    if envelope is None or not isinstance(envelope.data, list):
        return []
    return envelope.data


def render_properties(client, identity):
    properties = _fetch(client, client.get_properties)
    st.dataframe(records_frame(properties, PROPERTY_COLUMNS), use_container_width=True, hide_index=True)

    if not rbac_policy.enforce(identity, rbac_policy.CREATE_PROPERTY):
        return
    with st.expander("➕ New property"):
        with st.form("property_form", clear_on_submit=True):
            title = st.text_input("Title *")
            col1, col2 = st.columns(2)
            prop_type = col1.selectbox("Type", PROPERTY_TYPES)
            listing_type = col2.selectbox("Listing", LISTING_TYPES)
            price = col1.number_input("Price", min_value=0.0, step=1000.0)
            area = col2.number_input("Area (sq ft)", min_value=0.0, step=10.0)
            bedrooms = col1.number_input("Bedrooms", min_value=0, step=1)
            bathrooms = col2.number_input("Bathrooms", min_value=0, step=1)
            location = st.text_input("Location *")
            address = st.text_input("Address *")
            city = col1.text_input("City *")
            state = col2.text_input("State *")
            description = st.text_area("Description")
            amenities = st.text_input("Amenities (comma separated)")
            if st.form_submit_button("Create"):
                fields = {
                    "title": title.strip(),
                    "type": prop_type,
                    "listing_type": listing_type,
                    "price": price,
                    "area": area,
                    "bedrooms": int(bedrooms) or None,
                    "bathrooms": int(bathrooms) or None,
                    "location": location.strip(),
                    "address": address.strip(),
                    "city": city.strip(),
                    "state": state.strip(),
                    "description": description.strip(),
                    "amenities": [a.strip() for a in amenities.split(",") if a.strip()],
                }
                if _submit(client, lambda: client.create_property(fields)):
                    st.rerun()


def render_clients(client, identity):
    if not rbac_policy.enforce(identity, rbac_policy.MANAGE_CLIENTS):
        st.info("You do not have access to clients.")
        return
    clients = _fetch(client, client.get_clients)
    st.dataframe(records_frame(clients, CLIENT_COLUMNS), use_container_width=True, hide_index=True)

    with st.expander("➕ New client"):
        with st.form("client_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            first_name = col1.text_input("First name *")
            last_name = col2.text_input("Last name *")
            email = col1.text_input("Email *")
            phone = col2.text_input("Phone *")
            client_type = st.selectbox("Type", CLIENT_TYPES)
            preferred_location = st.text_input("Preferred location *")
            address = st.text_input("Address *")
            city = col1.text_input("City *")
            state = col2.text_input("State *")
            postal_code = st.text_input("Postal code *")
            requirements = st.text_area("Requirements *")
            if st.form_submit_button("Create"):
                fields = {
                    "first_name": first_name.strip(),
                    "last_name": last_name.strip(),
                    "email": email.strip(),
                    "phone": phone.strip(),
                    "type": client_type,
                    "preferred_location": preferred_location.strip(),
                    "address": address.strip(),
                    "city": city.strip(),
                    "state": state.strip(),
                    "postal_code": postal_code.strip(),
                    "requirements": requirements.strip(),
                }
                if _submit(client, lambda: client.create_client(fields)):
                    st.rerun()

    if not clients:
        return
    labels = {c.get("id"): f"{c.get('first_name', '')} {c.get('last_name', '')}".strip() for c in clients}
    selected = st.selectbox("Client", list(labels), format_func=labels.get)
    col1, col2 = st.columns(2)
    new_status = col1.selectbox("Status", CLIENT_STATUSES)
    if col1.button("Update status"):
        if _submit(client, lambda: client.update_client(selected, {"status": new_status})):
            st.rerun()
    if col2.button("🗑️ Delete client"):
        if _submit(client, lambda: client.delete_client(selected)):
            st.rerun()


def render_appointments(client, identity):
    if not rbac_policy.enforce(identity, rbac_policy.MANAGE_APPOINTMENTS):
        st.info("You do not have access to appointments.")
        return
    appointments = _fetch(client, client.get_appointments)
    st.dataframe(records_frame(appointments, APPOINTMENT_COLUMNS), use_container_width=True, hide_index=True)

    clients = _fetch(client, client.get_clients)
    if not clients:
        st.caption("Add a client before scheduling appointments.")
        return
    labels = {c.get("id"): f"{c.get('first_name', '')} {c.get('last_name', '')}".strip() for c in clients}
    with st.expander("➕ New appointment"):
        with st.form("appointment_form", clear_on_submit=True):
            title = st.text_input("Title *")
            client_id = st.selectbox("Client", list(labels), format_func=labels.get)
            col1, col2 = st.columns(2)
            date = col1.date_input("Date")
            time = col2.time_input("Time")
            appointment_type = st.selectbox("Type", APPOINTMENT_TYPES)
            description = st.text_area("Description")
            if st.form_submit_button("Schedule"):
                fields = {
                    "title": title.strip(),
                    "client_id": client_id,
                    "date": date.isoformat(),
                    "time": time.strftime("%H:%M"),
                    "type": appointment_type,
                    "description": description.strip() or None,
                }
                if _submit(client, lambda: client.create_appointment(fields)):
                    st.rerun()


def render_profile(client, store):
    identity = store.identity
    st.subheader(identity.display_name)
    st.write(f"**Email:** {identity.email}")
    st.write(f"**Role:** {identity.role.replace('_', ' ').title()}")
    if identity.firm_name:
        st.write(f"**Firm:** {identity.firm_name}")
    st.write(f"**Location:** {identity.city}, {identity.state}")
    st.write("✅ Verified" if identity.is_verified else "⏳ Not verified yet")

    if rbac_policy.enforce(identity, rbac_policy.VIEW_ROLE_DASHBOARD):
        dashboard = _fetch_envelope(client, lambda: client.get_role_dashboard(identity.role))
        if dashboard is not None:
            st.caption(dashboard.message)

    photo = st.file_uploader("Profile photo", type=["jpg", "jpeg", "png"])
    if photo is not None and st.button("Upload photo"):
        upload = lambda: client.upload_profile_photo(photo.name, photo.getvalue(), photo.type or "application/octet-stream")
        if _submit(client, upload) and _submit(client, store.refresh_identity):
            st.success("Profile photo updated.")


def render_dashboard():
    store = session_manager.get_store()
    client = session_manager.get_client()
    identity = store.identity

    with st.sidebar:
        st.write(f"👤 {identity.display_name}")
        st.caption(identity.role.replace("_", " ").title())
        if st.button("Sign out"):
            session_manager.logout()

    tab_props, tab_clients, tab_appts, tab_profile = st.tabs(
        ["🏢 Properties", "👥 Clients", "📅 Appointments", "⚙️ Profile"]
    )
    with tab_props:
        render_properties(client, identity)
    with tab_clients:
        render_clients(client, identity)
    with tab_appts:
        render_appointments(client, identity)
    with tab_profile:
        render_profile(client, store)
