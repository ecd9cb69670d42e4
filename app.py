"""
Streamlit Viewer — stillbecoming

Single-panel layout: the live canvas, the edition label and the current
ritual state. The only interaction is the "Begin" trigger; once the
ritual reaches RELIC a download button offers the high-resolution relic.

Run with ``streamlit run app.py`` (append ``?seed=...`` to the URL to pin
the session seed).
"""

from __future__ import annotations

import io
import time

import streamlit as st

from config import configure_logging, settings
from persistence import JsonFileStore
from relic import RelicExporter, relic_filename
from session import ArtSession

configure_logging()

# ── Page Config ──────────────────────────────────────────────────────
st.set_page_config(
    page_title="stillbecoming",
    layout="centered",
    initial_sidebar_state="collapsed",
)

st.markdown("""
<style>
    .stApp { background: #1c1c1f; }

    .edition-label {
        color: rgba(249, 249, 254, 0.65);
        font-family: monospace;
        font-size: 0.8rem;
        letter-spacing: 0.12em;
        text-align: center;
        text-transform: uppercase;
    }

    .state-label {
        color: rgba(147, 129, 255, 0.8);
        font-family: monospace;
        font-size: 0.7rem;
        text-align: right;
    }
</style>
""", unsafe_allow_html=True)


# ── Session State Initialization ─────────────────────────────────────

def init_session_state():
    """Create the art session once per browser session."""
    if "art_session" not in st.session_state:
        override = st.query_params.get("seed") or None
        st.session_state.art_session = ArtSession(
            persistence=JsonFileStore(settings.store_path),
            seed_override=override,
        )
        st.session_state.last_tick = None
        st.session_state.export_message = None


init_session_state()
art: ArtSession = st.session_state.art_session

st.markdown(f'<div class="edition-label">{art.edition.label}</div>', unsafe_allow_html=True)

canvas = st.empty()

if not art.started:
    canvas.image(art.render(), use_container_width=True)
    if st.button("Begin", use_container_width=True):
        art.start()
        st.session_state.last_tick = time.monotonic()
        st.rerun()
    st.stop()

# ── Frame ────────────────────────────────────────────────────────────
now = time.monotonic()
dt = now - (st.session_state.last_tick or now)
st.session_state.last_tick = now

frame = art.tick(dt)
canvas.image(art.render(), use_container_width=True)
st.progress(frame.global_progress)
st.markdown(f'<div class="state-label">{frame.state_name}</div>', unsafe_allow_html=True)

if frame.complete:
    if art.timestamp_text:
        st.caption(art.timestamp_text)

    if "relic_png" not in st.session_state:
        buf = io.BytesIO()
        art.relic_draw_callback()(settings.EXPORT_SIZE).save(buf, format="PNG")
        st.session_state.relic_png = buf.getvalue()

    st.download_button(
        "Download relic",
        data=st.session_state.relic_png,
        file_name=relic_filename(art.edition.filename_part, art.completion_timestamp),
        mime="image/png",
        use_container_width=True,
    )

    if st.button("Save to outputs", use_container_width=True):
        result = art.export_relic(RelicExporter())
        st.session_state.export_message = (
            f"Saved `{result.path.name}`" if result.success else f"⚠️ Export failed: {result.error}"
        )

    if st.session_state.export_message:
        st.caption(st.session_state.export_message)
else:
    time.sleep(1 / settings.FRAME_RATE)
    st.rerun()
