"""
main.py — Streamlit Multi-Page Navigation Controller
-----------------------------------------------------

This script initializes the Plant Identifier Streamlit app and
provides dynamic, config-driven page navigation.

Features:
✅ Supports both flat and grouped sidebar navigation
✅ Loads pages from `.streamlit/pages.toml` (flat) or `pages_sections.toml` (grouped)
✅ Automatically sets the page title and browser tab icon
✅ Releases the camera when the visitor leaves the identification page

Navigation and layout logic are driven by `st_pages` extension.

Dependencies:
- streamlit
- st_pages
"""

import logging

import streamlit as st
from st_pages import add_page_title, get_nav_from_toml

from config.settings import LOG_LEVEL
from tools.ui_tools import release_camera

IDENTIFY_PAGE = "Identify Plant"

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

# --- Configure the main Streamlit app window ---
st.set_page_config(
    page_title="Plant Identifier",
    page_icon="🌿",               # Tab icon
    layout="centered",
    initial_sidebar_state="expanded"
)

# --- Sidebar toggle to choose between flat pages or grouped sections ---
sections = st.sidebar.toggle(
    "Sections",
    value=True,
    key="use_sections"
)

# --- Load navigation config from the appropriate TOML file ---
nav = get_nav_from_toml(
    ".streamlit/pages_sections.toml" if sections else ".streamlit/pages.toml"
)

# --- Create the navigation sidebar ---
pg = st.navigation(nav)

# --- Automatically display page title from TOML definition ---
add_page_title(pg)

# --- The camera belongs to the identify page only ---
if pg.title != IDENTIFY_PAGE:
    release_camera()

# --- Run the selected page from the sidebar ---
pg.run()
