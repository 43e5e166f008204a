"""Lunar Phase Card: Streamlit host page for the moon card and its altitude chart."""

import html
import logging
from datetime import datetime

import streamlit as st
from dotenv import load_dotenv
from pytz import utc

load_dotenv()

from lunarcard.compute import SkyfieldMoonSource  # noqa: E402
from lunarcard.config import NUMBER_FORMATS, CardConfig, ConfigError  # noqa: E402
from lunarcard.i18n import localize  # noqa: E402
from lunarcard.moon import MoonDataAdapter  # noqa: E402
from lunarcard.renderers.card_html import render_card_html  # noqa: E402
from lunarcard.renderers.plotly_chart import render_altitude_chart  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s: %(levelname)s: %(message)s")

st.set_page_config(
    page_title="Lunar Phase Card",
    page_icon="☾",
    layout="centered",
)

st.markdown(
    """
    <style>
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #050a1a !important;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] {
        display: none !important;
    }
    label, [data-testid="stWidgetLabel"] p {
        color: #aaaaaa !important;
        font-size: 0.85rem !important;
    }
    </style>
    """,
    unsafe_allow_html=True,
)


@st.cache_resource
def _source() -> SkyfieldMoonSource:
    # Loads (and on first run downloads) the ephemeris once per process.
    return SkyfieldMoonSource()


def _env_defaults() -> dict:
    try:
        cfg = CardConfig.from_env()
    except ConfigError:
        return {"latitude": 0.0, "longitude": 0.0}
    return {
        "latitude": cfg.latitude,
        "longitude": cfg.longitude,
        "12hr_format": cfg.use_12_hour,
        "mile_unit": cfg.use_miles,
        "selected_language": cfg.language,
        "number_format": cfg.number_format,
    }


# --- Session state initialization ---
if "card_config" not in st.session_state:
    st.session_state.card_config = _env_defaults()

_raw = st.session_state.card_config

# --- Card settings ---
with st.sidebar:
    latitude = st.number_input("Latitude", value=float(_raw.get("latitude", 0.0)), format="%.4f")
    longitude = st.number_input("Longitude", value=float(_raw.get("longitude", 0.0)), format="%.4f")
    language = st.text_input("Language", value=_raw.get("selected_language") or "en")
    number_format = st.selectbox(
        "Number format",
        NUMBER_FORMATS,
        index=NUMBER_FORMATS.index(_raw.get("number_format") or "language"),
    )
    use_12_hour = st.toggle("12-hour clock", value=bool(_raw.get("12hr_format")))
    use_miles = st.toggle("Miles", value=bool(_raw.get("mile_unit")))

st.session_state.card_config = {
    "latitude": latitude,
    "longitude": longitude,
    "12hr_format": use_12_hour,
    "mile_unit": use_miles,
    "selected_language": language,
    "number_format": number_format,
}

try:
    config = CardConfig.from_mapping(st.session_state.card_config)
except ConfigError as e:
    st.error(localize("card.error.config", language, "{0}", html.escape(str(e))))
    st.stop()

now = datetime.now(utc)
adapter = MoonDataAdapter(config.context_at(now), _source(), now=now)
adapter.store_moon_images(st.session_state)

snapshot = adapter.evaluate()
st.markdown(
    render_card_html(snapshot, adapter.today_data_item(snapshot)),
    unsafe_allow_html=True,
)

fig = render_altitude_chart(adapter.today_data(), lang=config.language)
st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})
