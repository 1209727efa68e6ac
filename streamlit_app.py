"""
Streamlit operator console for the API Key Manager.

Connects to the FastAPI backend to register users, validate keys and, after
admin login, inspect every user with their key.
"""
import streamlit as st
import pandas as pd

from key_manager.ui.client import APIRequestError, KeyManagerClient, get_api_base_url

# Page config
st.set_page_config(
    page_title="API Key Manager",
    page_icon="🔑",
    layout="wide",
    initial_sidebar_state="expanded",
)

if "credential" not in st.session_state:
    st.session_state.credential = None
if "admin_email" not in st.session_state:
    st.session_state.admin_email = None

API_BASE_URL = get_api_base_url()
client = KeyManagerClient(API_BASE_URL)


def show_error(e: APIRequestError) -> None:
    """Show API errors with user-friendly messages."""
    if e.status_code == 401:
        st.error(f"❌ Authentication failed: {e.message}")
    elif e.status_code == 409:
        st.error(f"❌ Conflict: {e.message}")
    elif e.status_code is not None and e.status_code >= 500:
        st.error(f"❌ Server error: {e.message}")
    else:
        st.error(f"❌ {e.message}")


# ============= Sidebar =============

with st.sidebar:
    st.header("⚙️ Settings")
    st.text_input(
        "Backend URL",
        value=API_BASE_URL,
        disabled=True,
        help="Set via API_BASE_URL environment variable",
    )

    try:
        server = client.server_status()
        st.success(f"Server: {server.get('status', 'unknown')}")
    except APIRequestError as e:
        st.warning(f"Server unreachable: {e.message}")

    st.markdown("---")
    st.header("🔐 Admin")

    if st.session_state.credential:
        st.write(f"Signed in as **{st.session_state.admin_email}**")
        if st.button("Sign out", use_container_width=True):
            st.session_state.credential = None
            st.session_state.admin_email = None
            st.rerun()
    else:
        admin_email = st.text_input("Admin email", key="admin_email_input")
        admin_password = st.text_input("Password", type="password", key="admin_password_input")
        col_login, col_register = st.columns(2)
        if col_login.button("Login", type="primary", use_container_width=True):
            try:
                st.session_state.credential = client.login(admin_email, admin_password)
                st.session_state.admin_email = admin_email
                st.rerun()
            except APIRequestError as e:
                show_error(e)
        if col_register.button("Register", use_container_width=True):
            try:
                client.register_admin(admin_email, admin_password)
                st.success("✅ Admin registered. You can log in now.")
            except APIRequestError as e:
                show_error(e)


# ============= Main tabs =============

st.title("🔑 API Key Manager")
tab_register, tab_validate, tab_users = st.tabs(["Register User", "Validate Key", "Users & Keys"])

with tab_register:
    st.header("Register a user and issue an API key")
    with st.form("register_user_form"):
        first_name = st.text_input("First name")
        last_name = st.text_input("Last name")
        email = st.text_input("Email")
        submitted = st.form_submit_button("🚀 Register", use_container_width=True)

    if submitted:
        try:
            issued = client.register_user(first_name, last_name, email)
            st.success("✅ Registration successful. Copy the key now, it is not shown again.")
            st.code(issued["apiKey"])
            st.caption(f"Expires: {issued['expires']}")
        except APIRequestError as e:
            show_error(e)

with tab_validate:
    st.header("Validate an API key")
    api_key = st.text_input("API key", type="password", key="validate_key_input")
    if st.button("🔍 Validate", type="primary"):
        try:
            verdict = client.validate_key(api_key)
            if verdict.get("valid"):
                st.success(f"✅ {verdict.get('message')} (expires {verdict.get('expires')})")
            else:
                st.error(f"❌ {verdict.get('message')}")
            st.json(verdict)
        except APIRequestError as e:
            show_error(e)

with tab_users:
    st.header("Users and their keys")
    if not st.session_state.credential:
        st.info("Log in as an administrator in the sidebar to see users.")
    else:
        if st.button("🔄 Refresh List"):
            st.rerun()
        try:
            rows = client.list_users(st.session_state.credential)
        except APIRequestError as e:
            if e.status_code == 401:
                # Credential expired; force a new login
                st.session_state.credential = None
            show_error(e)
            rows = []

        if rows:
            users_df = pd.DataFrame(
                [
                    {
                        "ID": row.get("userId"),
                        "First name": row.get("firstName"),
                        "Last name": row.get("lastName"),
                        "Email": row.get("email"),
                        "API key": row.get("keyToken"),
                        "Start": (row.get("start") or "")[:19],
                        "Expiry": (row.get("expiry") or "")[:19],
                        "Status": row.get("status"),
                    }
                    for row in rows
                ]
            )
            st.dataframe(users_df, use_container_width=True, hide_index=True)
            st.caption(f"{len(rows)} users")
        else:
            st.info("No users found")
