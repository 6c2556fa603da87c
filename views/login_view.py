import streamlit as st

from infrastructure.api.errors import ApiError
from use_cases.session_models import IdentityDecodeError
from use_cases.validation import parse_validation_error
from utils import session_manager

ROLE_LABELS = {
    "broker": "Broker",
    "channel_partner": "Channel Partner",
}

REQUIRED_SIGNUP_FIELDS = (
    "first_name", "last_name", "email", "password", "date_of_birth", "firm_name",
    "whatsapp_number", "address", "location", "city", "state", "postal_code",
)


def _show_feedback():
    if st.session_state.get("form_error"):
        st.error(st.session_state.form_error)
    for field, message in st.session_state.get("field_errors", {}).items():
        st.caption(f"⚠️ {field.replace('_', ' ').capitalize()}: {message}")


def _record_failure(message: str):
    feedback = parse_validation_error(message)
    st.session_state.form_error = feedback.form_error
    st.session_state.field_errors = feedback.field_errors


def validate_signup(fields: dict, password_confirm: str) -> dict:
    """Client-side checks mirroring the backend's required/min rules."""
    errors = {}
    for name in REQUIRED_SIGNUP_FIELDS:
        if not str(fields.get(name, "")).strip():
            errors[name] = "This field is required"
    if fields.get("password") and len(fields["password"]) < 6:
        errors["password"] = "Password must be at least 6 characters long"
    if fields.get("password") != password_confirm:
        errors["password_confirm"] = "Passwords do not match"
    email = fields.get("email", "")
    if email and ("@" not in email or "." not in email.split("@")[-1]):
        errors["email"] = "Please enter a valid email address"
    return errors


def render_auth_screen():
    store = session_manager.get_store()
    session_manager.render_session_recovery()

    st.title("🏠 Estate CRM")
    tab_login, tab_register = st.tabs(["Sign in", "Register"])

    with tab_login:
        with st.form("login_form", clear_on_submit=False):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in")
            if submitted:
                if not email.strip() or not password:
                    st.error("Please enter email and password.")
                else:
                    try:
                        store.login(email.strip(), password)
                        st.session_state.form_error = None
                        st.session_state.field_errors = {}
                        session_manager.settle_and_rerun()
                    except (ApiError, IdentityDecodeError) as e:
                        st.error(str(e))

    with tab_register:
        with st.form("register_form", clear_on_submit=False):
            col1, col2 = st.columns(2)
            first_name = col1.text_input("First name *")
            last_name = col2.text_input("Last name *")
            email = st.text_input("Email *", key="register_email")
            password = col1.text_input("Password *", type="password", key="register_password")
            password_confirm = col2.text_input("Confirm password *", type="password")
            date_of_birth = st.date_input("Date of birth *", value=None)
            firm_name = st.text_input("Firm name *")
            role = st.selectbox("Role *", list(ROLE_LABELS), format_func=ROLE_LABELS.get)
            whatsapp_number = st.text_input("WhatsApp number *")
            alternative_number = col1.text_input("Alternative number")
            foreign_number = col2.text_input("Foreign number")
            address = st.text_area("Address *")
            location = st.text_input("Location *")
            city = col1.text_input("City *")
            state = col2.text_input("State *")
            postal_code = st.text_input("Postal code *")
            submitted = st.form_submit_button("Create account")

        if submitted:
            fields = {
                "first_name": first_name.strip(),
                "last_name": last_name.strip(),
                "email": email.strip(),
                "password": password,
                "date_of_birth": date_of_birth.isoformat() if date_of_birth else "",
                "firm_name": firm_name.strip(),
                "role": role,
                "whatsapp_number": whatsapp_number.strip(),
                "alternative_number": alternative_number.strip(),
                "foreign_number": foreign_number.strip(),
                "address": address.strip(),
                "location": location.strip(),
                "city": city.strip(),
                "state": state.strip(),
                "postal_code": postal_code.strip(),
            }
            errors = validate_signup(fields, password_confirm)
            if errors:
                st.session_state.form_error = "Please fix the errors below"
                st.session_state.field_errors = errors
            else:
                try:
                    store.register(fields)
                    st.session_state.form_error = None
                    st.session_state.field_errors = {}
                    session_manager.settle_and_rerun()
                except (ApiError, IdentityDecodeError) as e:
                    _record_failure(str(e))

        _show_feedback()
