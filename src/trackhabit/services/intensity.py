"""Map streak length to a display intensity and fire-like color stops.

Intensity grows piecewise-linearly across the milestone breakpoints and clamps
at the last one. Colors are picked from a nine-step palette running from gray
embers to indigo, plus a light and a dark variant of the same palette.
"""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Sequence

BREAKPOINTS: tuple[float, ...] = (0, 30, 150, 365, 730, 1095)
LEVELS: tuple[float, ...] = (0.0, 0.2, 0.4, 0.6, 0.8, 1.0)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


@dataclass(frozen=True)
class Color:
    """RGBA color with channels in ``[0, 1]``."""

    red: float
    green: float
    blue: float
    alpha: float = 1.0

    @classmethod
    def from_hex(cls, value: str) -> "Color":
        digits = value.lstrip("#")
        if len(digits) == 6:
            digits = "FF" + digits
        if len(digits) != 8:
            raise ValueError(f"Expected #RRGGBB or #AARRGGBB, got {value!r}")
        alpha, red, green, blue = (int(digits[i:i + 2], 16) / 255 for i in range(0, 8, 2))
        return cls(red, green, blue, alpha)

    @property
    def hex(self) -> str:
        red, green, blue = (round(_clamp(channel) * 255) for channel in (self.red, self.green, self.blue))
        return f"#{red:02X}{green:02X}{blue:02X}"

    def adjust_hsl(self, hue_shift: float = 0.0, saturation_delta: float = 0.0, lightness: float = 0.5) -> "Color":
        """Shift hue (degrees, wrapped), nudge saturation and set lightness."""

        hue, _, saturation = colorsys.rgb_to_hls(self.red, self.green, self.blue)
        hue = ((hue * 360 + hue_shift) % 360) / 360
        saturation = _clamp(saturation + saturation_delta)
        red, green, blue = colorsys.hls_to_rgb(hue, _clamp(lightness), saturation)
        return Color(red, green, blue, self.alpha)

    def lerp(self, other: "Color", fraction: float) -> "Color":
        fraction = _clamp(fraction)
        return Color(
            self.red + (other.red - self.red) * fraction,
            self.green + (other.green - self.green) * fraction,
            self.blue + (other.blue - self.blue) * fraction,
            self.alpha + (other.alpha - self.alpha) * fraction,
        )


BASE_PALETTE: tuple[Color, ...] = tuple(
    Color.from_hex(value)
    for value in (
        "#9CA3AF",  # gray
        "#78350F",  # ember brown
        "#FBBF24",  # yellow
        "#F97316",  # orange
        "#EF4444",  # red
        "#EC4899",  # pink
        "#A855F7",  # purple
        "#8B5CF6",  # violet
        "#6366F1",  # indigo
    )
)

LOW_PALETTE: tuple[Color, ...] = tuple(
    color.adjust_hsl(hue_shift=5, saturation_delta=-0.1, lightness=0.8) for color in BASE_PALETTE
)
HIGH_PALETTE: tuple[Color, ...] = tuple(
    color.adjust_hsl(hue_shift=-10, saturation_delta=0.1, lightness=0.35) for color in BASE_PALETTE
)


def intensity(days: int) -> float:
    """Piecewise-linear intensity in ``[0, 1]`` for a streak length."""

    clamped = min(float(days), BREAKPOINTS[-1])
    if clamped <= BREAKPOINTS[0]:
        return LEVELS[0]
    for index in range(len(BREAKPOINTS) - 1):
        upper = BREAKPOINTS[index + 1]
        if clamped <= upper:
            lower = BREAKPOINTS[index]
            progress = (clamped - lower) / (upper - lower)
            return LEVELS[index] + (LEVELS[index + 1] - LEVELS[index]) * progress
    return LEVELS[-1]


def blend(value: float, palette: Sequence[Color]) -> Color:
    """Interpolate between the palette entries straddling ``value * (len - 1)``."""

    scaled = _clamp(value) * (len(palette) - 1)
    lower = min(int(scaled), len(palette) - 2)
    upper = min(lower + 1, len(palette) - 1)
    return palette[lower].lerp(palette[upper], scaled - lower)


def color_stops(value: float) -> tuple[Color, Color, Color]:
    """Return the (low, mid, high) gradient stops for an intensity."""

    return blend(value, LOW_PALETTE), blend(value, BASE_PALETTE), blend(value, HIGH_PALETTE)


def gradient_for_days(days: int) -> tuple[Color, Color, Color]:
    return color_stops(intensity(days))


__all__ = [
    "BASE_PALETTE",
    "BREAKPOINTS",
    "Color",
    "HIGH_PALETTE",
    "LEVELS",
    "LOW_PALETTE",
    "blend",
    "color_stops",
    "gradient_for_days",
    "intensity",
]
