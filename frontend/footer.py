import streamlit as st
from utils import clear_session


def render_sidebar_footer():
    # Logout button in sidebar
    with st.sidebar:
        st.write(f"Logged in as: {st.session_state.get('user_email', 'Unknown')}")
        if st.button("👋 Logout", use_container_width=True, help="Sign out"):
            clear_session()
            st.switch_page("🏠_Home.py")
