"""Study line colours derived from a dataset's base colour."""

from __future__ import annotations

import colorsys
import re

from chartseries.models import Study

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{6})$")

# Hue rotation in degrees per study
STUDY_HUE_SHIFT: dict[Study, float] = {
    Study.SMA: 40.0,
    Study.EMA: 80.0,
    Study.CAGR: 120.0,
    Study.RSI: 160.0,
}


def _channel(value: float) -> int:
    # Round half up, matching how browsers round colour channels
    return int(value * 255 + 0.5)


def shift_hue(color: str, degrees: float) -> str:
    """Rotate the hue of a ``#rrggbb`` colour, keeping lightness and saturation.

    Colours in any other notation are returned unchanged.
    """
    match = _HEX_COLOR.match(color.strip())
    if match is None:
        return color
    hex_digits = match.group(1)
    r, g, b = (int(hex_digits[i : i + 2], 16) / 255 for i in (0, 2, 4))
    hue, lightness, saturation = colorsys.rgb_to_hls(r, g, b)
    hue = (hue + degrees / 360.0) % 1.0
    r, g, b = colorsys.hls_to_rgb(hue, lightness, saturation)
    return "#{:02x}{:02x}{:02x}".format(_channel(r), _channel(g), _channel(b))


def study_color(study: Study, base_color: str) -> str:
    """Colour for a study line drawn over a dataset coloured ``base_color``."""
    return shift_hue(base_color, STUDY_HUE_SHIFT.get(study, 0.0))
