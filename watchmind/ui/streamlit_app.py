from __future__ import annotations

import time

import streamlit as st

from watchmind.config import load_settings
from watchmind.errors import SettingsError
from watchmind.schema import SessionState, Status
from watchmind.session import ChatSession


def get_session() -> ChatSession:
    # One ChatSession per browser session; Streamlit reruns this script on every interaction.
    if "session" not in st.session_state:
        try:
            settings = load_settings()
        except SettingsError as e:
            st.error(str(e))
            st.stop()
        st.session_state["session"] = ChatSession(settings)
        st.session_state["screen"] = "chat"
    return st.session_state["session"]


def render_header() -> None:
    left, right = st.columns([4, 1])
    screen = st.session_state["screen"]
    left.subheader("Chat" if screen == "chat" else "Settings")
    if right.button("⚙", help="Toggle settings"):
        st.session_state["screen"] = "settings" if screen == "chat" else "chat"
        st.rerun()


def render_chat(session: ChatSession, state: SessionState) -> None:
    if state.status is Status.ERROR:
        st.error(state.status_text)
    else:
        st.caption(state.status_text)

    for m in state.messages:
        with st.chat_message(m.role):
            st.markdown(m.content)

    text = st.chat_input("Type a message", disabled=session.busy or not state.settings.api_key.strip())
    if text is not None:
        # The box clears itself on submit, so its text only reaches the session here.
        if session.update_input(text).can_send:
            session.send()
        st.rerun()


def render_settings(session: ChatSession, state: SessionState) -> None:
    s = state.settings
    with st.form("settings"):
        api_key = st.text_input("API key", value=s.api_key, type="password")
        base_url = st.text_input("Base URL", value=s.base_url)
        model = st.text_input("Model", value=s.model)
        saved = st.form_submit_button("Save")
    if saved:
        session.update_settings(api_key=api_key, base_url=base_url, model=model)
        try:
            path = session.save_settings()
        except OSError as e:
            st.error(f"Could not save settings: {e}")
        else:
            st.success(f"Saved to {path}")


st.set_page_config(page_title="WatchMind", layout="centered")

session = get_session()
render_header()
state = session.state
if st.session_state["screen"] == "chat":
    render_chat(session, state)
else:
    render_settings(session, state)

if session.busy:
    time.sleep(0.5)
    st.rerun()
