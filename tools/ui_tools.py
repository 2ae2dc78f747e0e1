"""
ui_tools.py — Shared Streamlit UI Utilities
---------------------------------------------

Provides reusable components for the Plant Identifier pages:

* Per-visitor state kept in `st.session_state` (session, camera adapter)
* Guarded callbacks and the one-shot API key prompt
* "How it works" cards
* Error panel and the tabbed plant result

Dependencies:
- Streamlit

"""

from typing import MutableMapping

import streamlit as st

from core.capture import MediaCaptureAdapter
from core.exception import MissingCredentialError
from core.rendering import TABS, ResultView
from core.session import IdentificationSession

HOW_TO_CARDS = [
    ("📷", "Take or Upload a Photo",
     "Capture a clear photo of your plant or upload an existing one. Ensure good lighting and focus on the leaves."),
    ("🌿", "Get Instant Identification",
     "Our AI will analyze the image and provide detailed information about your plant species."),
    ("ℹ️", "Learn & Care",
     "Receive comprehensive care instructions and tips to help your plant thrive."),
]


def get_session() -> IdentificationSession:
    if "plant_session" not in st.session_state:
        st.session_state.plant_session = IdentificationSession()
    return st.session_state.plant_session


def get_camera() -> MediaCaptureAdapter:
    if "camera_adapter" not in st.session_state:
        st.session_state.camera_adapter = MediaCaptureAdapter()
    return st.session_state.camera_adapter


def run_guarded(session: IdentificationSession, fn, *args):
    """Call `fn(*args)`; errors outside the PlantIdError family land in the session's error panel."""
    try:
        return fn(*args)
    except Exception as e:
        session.report_unexpected(e)
        return None


def needs_key_prompt(state: MutableMapping, has_credential: bool, failure) -> bool:
    """
    Open the API key dialog once on a first visit without a key, and once per
    selection blocked by a missing key. Dismissing the dialog does not reopen
    it on the next rerun.
    """
    if not has_credential and not state.get("api_key_prompted"):
        state["api_key_prompted"] = True
        return True
    if isinstance(failure, MissingCredentialError) and state.get("prompted_failure") is not failure:
        state["prompted_failure"] = failure
        return True
    return False


def release_camera():
    """Stop the camera if this visitor left it running (e.g. navigated away)."""
    adapter = st.session_state.get("camera_adapter")
    if adapter is not None:
        adapter.deactivate()


def render_how_to_cards():
    cols = st.columns(len(HOW_TO_CARDS))
    for col, (icon, title, description) in zip(cols, HOW_TO_CARDS):
        with col.container(border=True):
            st.markdown(f"<div style='text-align: center; font-size: 2em;'>{icon}</div>", unsafe_allow_html=True)
            st.markdown(f"**{title}**")
            st.caption(description)


def render_error(error):
    if error:
        st.error(error)


def render_result(view: ResultView):
    """Header with confidence badge, then the four tabs."""
    if view is None:
        return

    with st.container(border=True):
        left, right = st.columns([4, 1])
        with left:
            st.subheader(view.title)
            st.markdown(f"*{view.subtitle}*")
        with right:
            st.markdown(
                f"<div style='background: #dcfce7; color: #166534; border-radius: 999px; "
                f"padding: 4px 12px; text-align: center; font-size: 0.9em;'>{view.badge}</div>",
                unsafe_allow_html=True,
            )

        overview, features, care, details = st.tabs([label for _, label in TABS])

        with overview:
            st.write(view.overview)

        with features:
            for feature in view.features:
                st.markdown(f"✅ {feature}")

        with care:
            cols = st.columns(2)
            for i, entry in enumerate(view.care):
                with cols[i % 2]:
                    st.markdown(f"{entry.icon} **{entry.label}**")
                    st.caption(entry.text)

        with details:
            if view.problems:
                st.markdown("**🐛 Common Problems**")
                st.markdown("\n".join(f"- {p}" for p in view.problems))
            if view.propagation_steps:
                st.markdown("**🌱 Propagation**")
                st.markdown("\n".join(f"{i}. {step}" for i, step in enumerate(view.propagation_steps, start=1)))
            if view.growth_rate:
                st.markdown("**📈 Growth Rate**")
                st.caption(view.growth_rate)
