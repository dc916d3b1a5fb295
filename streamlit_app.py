"""
Truchet Mosaic — Gallery Edition

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io
import time

import streamlit as st
from PIL import Image, ImageDraw

from truchet_mosaic.config import MosaicConfig
from truchet_mosaic.errors import MosaicError
from truchet_mosaic.image_io import encode_image, load_image, to_pil
from truchet_mosaic.mosaic import build_mosaic

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Truchet Mosaic",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = MosaicConfig()
_MIME = {".png": "image/png", ".jpg": "image/jpeg", ".gif": "image/gif"}

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    .stApp {
        background-color: #faf9f6;
        color: #2a2a2a;
        font-family: 'Inter', 'Helvetica Neue', sans-serif;
    }
    .block-container {
        max-width: 1000px;
        padding-top: 3.5rem;
        padding-bottom: 4rem;
    }
    .gallery-title {
        font-family: 'Cormorant Garamond', 'Georgia', serif;
        font-size: 2.8rem;
        font-weight: 300;
        text-align: center;
        border-bottom: 1px solid #1a1a1a;
        padding-bottom: 0.6rem;
        margin-bottom: 0.5rem;
    }
    .gallery-subtitle {
        font-size: 0.75rem;
        font-weight: 300;
        line-height: 1.8;
        margin-bottom: 3.5rem;
    }
    .label-detail {
        font-family: 'Cormorant Garamond', 'Georgia', serif;
        font-size: 0.85rem;
        font-style: italic;
        color: #a0a09a;
        text-align: center;
    }
    .stButton > button, .stDownloadButton > button {
        border-radius: 0px !important;
        text-transform: uppercase;
        letter-spacing: 0.10em;
    }
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# -- Helpers -----------------------------------------------------------

def _add_passepartout(img: Image.Image, border: int = 20) -> Image.Image:
    w, h = img.size
    bg = (250, 249, 246)
    canvas = Image.new("RGB", (w + border * 2, h + border * 2), bg)
    canvas.paste(img.convert("RGB"), (border, border))
    draw = ImageDraw.Draw(canvas)
    draw.rectangle(
        [border - 1, border - 1, border + w, border + h],
        outline=(224, 222, 216), width=1,
    )
    return canvas


# -- Title -------------------------------------------------------------
st.markdown(
    '<div class="gallery-title">Truchet Mosaic</div>',
    unsafe_allow_html=True,
)
st.markdown(
    '<div class="gallery-subtitle">'
    "Upload an image and it is rebuilt from square tiles, each cut along the "
    "diagonal that keeps the most contrast. One half of every tile takes the "
    "average colour under it, the other the average of the whole tile."
    "</div>",
    unsafe_allow_html=True,
)

# -- Controls ----------------------------------------------------------
ctrl1, ctrl2 = st.columns(2)
with ctrl1:
    tile_side = st.slider("Tile side (px)", 4, 128, _DEFAULTS.tile_side)
with ctrl2:
    suffix = st.selectbox("Format", [".png", ".jpg", ".gif"])

uploaded = st.file_uploader("Select artwork", type=["gif", "jpg", "jpeg", "png"])

if uploaded is not None:
    try:
        source = load_image(io.BytesIO(uploaded.getvalue()))
    except MosaicError as exc:
        st.error(f"{exc.stage} failed: {exc}")
        st.stop()

    if st.button("COMPOSE", type="primary", use_container_width=True):
        bar = st.progress(0.0, text="Composing ...")

        def _on_tile(done: int, total: int) -> None:
            bar.progress(done / total, text=f"Tile {done} / {total}")

        t0 = time.perf_counter()
        mosaic = build_mosaic(source, tile_side, progress=_on_tile)
        elapsed = time.perf_counter() - t0
        bar.empty()

        h, w = mosaic.shape[:2]
        col1, col2 = st.columns(2)
        with col1:
            st.image(
                _add_passepartout(to_pil(source), border=12),
                use_container_width=True,
            )
            st.markdown('<div class="label-detail">Source</div>', unsafe_allow_html=True)
        with col2:
            st.image(
                _add_passepartout(to_pil(mosaic), border=12),
                use_container_width=True,
            )
            st.markdown(
                f'<div class="label-detail">{w} &times; {h}, '
                f"{tile_side} px tiles, {elapsed:.1f} s</div>",
                unsafe_allow_html=True,
            )

        buf = io.BytesIO()
        encode_image(mosaic, buf, suffix)
        st.download_button(
            "SAVE ART",
            data=buf.getvalue(),
            file_name=f"truchet_mosaic{suffix}",
            mime=_MIME[suffix],
            use_container_width=True,
        )
else:
    st.markdown(
        '<p style="font-family: Cormorant Garamond, Georgia, serif; '
        "color: #bbb; font-size: 1rem; font-style: italic; margin-top: 2rem;\">"
        "Select an artwork to begin.</p>",
        unsafe_allow_html=True,
    )
