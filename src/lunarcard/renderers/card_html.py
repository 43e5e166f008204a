"""Card body renderer.

Produces a self-contained HTML fragment for st.markdown(unsafe_allow_html=True)
or st.components.v1.html(). The phase illustration is rotated by the raw
rotate_deg so its lit edge faces the way it does in the sky.
"""

from html import escape

from lunarcard.models import DisplayItem, MoonSnapshot, TodayDataItem

_BG = "#0d1b35"
_TEXT_COLOR = "#e8d5a3"
_MUTED_COLOR = "#9aa4b8"


def _row(item: DisplayItem) -> str:
    second = (
        f'<span class="lpc-second">{escape(item.second_value)}</span>'
        if item.second_value
        else ""
    )
    return (
        "<tr>"
        f'<td class="lpc-label">{escape(item.label)}</td>'
        f'<td class="lpc-value">{escape(item.value)}{second}</td>'
        "</tr>"
    )


def render_card_html(
    snapshot: MoonSnapshot,
    today_item: TodayDataItem | None = None,
    image_base_url: str = "",
) -> str:
    """Return the card markup for one snapshot.

    Args:
        snapshot: Output of MoonDataAdapter.evaluate().
        today_item: Optional position/direction summary shown under the image.
        image_base_url: Prefix joined to the phase image identifier.

    Returns:
        HTML string.
    """
    image = snapshot.image
    src = escape(f"{image_base_url}{image.moon_pic}", quote=True)
    rows = "\n".join(_row(item) for item in snapshot.fields().values())

    summary = ""
    if today_item is not None:
        summary = (
            '<div class="lpc-summary">'
            f"<span>{escape(today_item.position.value)}</span>"
            f"<span>{escape(today_item.direction.value)}"
            f" {escape(today_item.direction.second_value or '')}</span>"
            "</div>"
        )

    return f"""
<div class="lunar-phase-card" style="background:{_BG};color:{_TEXT_COLOR};
     border-radius:12px;padding:1rem 1.4rem;font-family:sans-serif;">
  <style>
    .lunar-phase-card table {{ width:100%; border-collapse:collapse; }}
    .lunar-phase-card td {{ padding:0.2rem 0; }}
    .lunar-phase-card .lpc-label {{ color:{_MUTED_COLOR}; }}
    .lunar-phase-card .lpc-value {{ text-align:right; }}
    .lunar-phase-card .lpc-second {{ display:block; font-size:0.8em; color:{_MUTED_COLOR}; }}
    .lunar-phase-card .lpc-summary {{ display:flex; justify-content:space-between; margin:0.4rem 0; }}
  </style>
  <div style="text-align:center;">
    <img class="lpc-moon" src="{src}" alt="{escape(snapshot.phase_name, quote=True)}"
         data-phase-index="{image.phase_index}"
         style="width:120px;height:120px;transform:rotate({image.rotate_deg:.2f}deg);"/>
    <h3 class="lpc-phase" style="margin:0.4rem 0;">{escape(snapshot.phase_name)}</h3>
  </div>
  {summary}
  <table>
{rows}
  </table>
</div>
"""
