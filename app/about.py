"""
about.py — Project Overview & How It Works
------------------------------------------

This Streamlit module introduces the Plant Identifier and walks through one
identification cycle, from photo to care instructions.

Dependencies:
- Streamlit for UI rendering

"""

import streamlit as st

from config.settings import IDENTIFY_ENDPOINT, MAX_UPLOAD_BYTES
from tools.ui_tools import render_how_to_cards


# --- Project Description ---
st.write("Upload or capture a photo of a plant and get its common and scientific names, a short "
         "description, key features, care instructions (light, water, humidity, temperature, soil, "
         "fertilizer), common problems, propagation notes and growth rate. The identification itself "
         "is done by a hosted multimodal model behind a small relay service; this app handles the "
         "photo, the request and the presentation of the result.")
st.write("")

render_how_to_cards()

st.subheader("How an identification works")

with st.expander("1️⃣ Choose a photo"):
    st.markdown(f"""
- **Upload:** JPEG, PNG or WebP up to {MAX_UPLOAD_BYTES // (1024 * 1024)}MB. Larger files are rejected before anything is sent.
- **Camera:** start the camera, frame the plant and press **Capture**. The camera is released right after the shot,
  or when you press **Cancel**.
- An API key is required before a photo is accepted; it is stored locally and sent only to the relay.
    """)

with st.expander("2️⃣ Identify"):
    st.markdown(f"""
- The photo is posted to the relay at `{IDENTIFY_ENDPOINT}`, which forwards it to the model.
- The button is disabled while the request runs. If you start a new request, only the newest answer is shown.
- Answers missing the name, scientific name, light or water needs are treated as failed.
    """)

with st.expander("3️⃣ Read the result"):
    st.markdown("""
- **Overview:** a short description.
- **Key Features:** what to look for on the plant.
- **Care Instructions:** one card per care topic.
- **Details:** common problems, propagation steps and growth rate.
- If something fails, try a clear photo of a single plant, or press ✕ to start over.
    """)
