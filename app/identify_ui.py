"""
identify_ui.py — Plant identification page
------------------------------------------

Upload or capture a photo, send it to the identification relay, and show the
plant's overview, key features, care instructions and details.

Flow per visit:
1. API key dialog if this visitor has no key yet (once; reopen from the sidebar)
2. Choose an image: file upload (max 5MB) or a photo from the browser camera
3. "Identify Plant" (disabled while a request is running)
4. Result tabs, or an error panel with the option to retry or reset

Dependencies:
- Streamlit for UI
- requests / pydantic via core.identification
"""

import streamlit as st

from config.settings import MAX_UPLOAD_BYTES
from core.credentials import load_operator_seed, visitor_store
from core.exception import CameraError, MissingCredentialError
from core.identification import IdentificationClient
from core.rendering import build_result_view
from tools.ui_tools import (
    get_camera, get_session, needs_key_prompt, render_error, render_how_to_cards,
    render_result, run_guarded,
)


# The key lives in this visitor's session; the operator seed only fills an empty slot
store = visitor_store(st.session_state, seed=load_operator_seed())
session = get_session()
camera = get_camera()

if "uploader_nonce" not in st.session_state:
    st.session_state.uploader_nonce = 0


# --- API key dialog ---
@st.dialog("Enter Your API Key")
def api_key_dialog():
    st.markdown("Get your API key from [OpenAI](https://platform.openai.com/api-keys).")
    st.caption("The key is kept for this browser session only.")
    with st.form("api_key_form"):
        key = st.text_input("API key", type="password", placeholder="Enter your API key")
        if st.form_submit_button("Save API Key", use_container_width=True):
            if key.strip():
                store.set(key)
                if isinstance(session.failure, MissingCredentialError):
                    session.reset()
                    st.session_state.uploader_nonce += 1
                st.rerun()
            else:
                st.warning("Please enter a key.")


change_key = st.sidebar.button("🔑 Change API key")

if change_key or needs_key_prompt(st.session_state, store.has_credential(), session.failure):
    api_key_dialog()


# --- Callbacks (run before the page script reruns) ---
def on_upload():
    uploaded = st.session_state.get(f"uploader_{st.session_state.uploader_nonce}")
    if uploaded is not None:
        run_guarded(session, session.select_file, uploaded, store.get())


def on_start_camera():
    run_guarded(session, session.activate_camera, camera)


def on_snapshot():
    snapshot = st.session_state.get(f"camera_{st.session_state.uploader_nonce}")
    if snapshot is not None:
        run_guarded(session, session.capture_snapshot, camera, snapshot.getvalue())


def on_capture():
    run_guarded(session, session.capture_photo, camera)


def on_cancel_camera():
    run_guarded(session, session.cancel_camera, camera)


def on_reset():
    camera.deactivate()
    session.reset()
    # New widget keys empty the file uploader and the camera widget
    st.session_state.uploader_nonce += 1


# --- Page header ---
st.markdown("<p style='text-align: center;'>Identify and learn about any plant instantly</p>",
            unsafe_allow_html=True)
render_how_to_cards()
st.write("")

render_error(session.error)

# --- Image upload / camera ---
if session.image is None and not camera.active:
    col1, col2 = st.columns(2)
    with col1.container(border=True):
        st.file_uploader(
            "📤 Upload an image",
            type=["jpg", "jpeg", "png", "webp"],
            key=f"uploader_{st.session_state.uploader_nonce}",
            on_change=on_upload,
        )
        st.caption(f"Max file size: {MAX_UPLOAD_BYTES // (1024 * 1024)}MB")
    with col2.container(border=True):
        st.markdown("📷 **Take a photo**")
        st.caption("Using your camera")
        st.button("Start camera", on_click=on_start_camera, use_container_width=True)

elif camera.uses_browser:
    st.camera_input(
        "Point your camera at the plant",
        key=f"camera_{st.session_state.uploader_nonce}",
        on_change=on_snapshot,
    )
    st.button("✕ Cancel", on_click=on_cancel_camera, use_container_width=True)

elif camera.active:
    try:
        st.image(camera.preview_frame(), use_container_width=True)
    except CameraError as e:
        st.warning(f"Camera preview unavailable: {e.message}")
    c1, c2 = st.columns(2)
    c1.button("📸 Capture", on_click=on_capture, use_container_width=True)
    c2.button("✕ Cancel", on_click=on_cancel_camera, use_container_width=True)

else:
    left, right = st.columns([12, 1])
    with left:
        st.image(session.image.payload, caption="Selected plant", use_container_width=True)
    with right:
        st.button("✕", on_click=on_reset, help="Start over")

    if session.record is None:
        label = "⏳ Identifying Plant..." if session.is_loading else "🌿 Identify Plant"
        if st.button(label, disabled=session.is_loading, use_container_width=True, type="primary"):
            client = IdentificationClient(api_key=store.get())
            with st.spinner("Identifying Plant..."):
                run_guarded(session, session.identify, client)
            st.rerun()

# --- Plant information ---
render_result(build_result_view(session.record))
