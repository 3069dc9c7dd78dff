import math
from dataclasses import dataclass
from typing import Protocol, Sequence
from xml.sax.saxutils import quoteattr

PLAYED_COLOR = "#4f46e5"
UNPLAYED_COLOR = "#d1d5db"
BACKGROUND_COLOR = "#f9fafb"


def compute_progress_fraction(current_time: float, duration: float) -> float:
    """
    Elapsed time over total duration, clamped to [0, 1].

    Returns 0 while the duration is unknown (``duration <= 0``) or either
    value is not finite.
    """
    if not (math.isfinite(current_time) and math.isfinite(duration)) or duration <= 0:
        return 0.0
    return min(max(current_time / duration, 0.0), 1.0)


def map_click_to_fraction(click_x: float, surface_width: float) -> float:
    """
    Convert a click position on the waveform into a progress fraction.

    Callers turn the fraction into a seek target with ``fraction * duration``.
    Non-finite input maps to 0.
    """
    if not (math.isfinite(click_x) and math.isfinite(surface_width)) or surface_width <= 0:
        return 0.0
    return min(max(click_x / surface_width, 0.0), 1.0)


class DrawingSurface(Protocol):
    """2D surface the renderer draws onto"""

    width: float
    height: float

    def clear(self) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None: ...


@dataclass(frozen=True)
class Bar:
    x: float
    y: float
    width: float
    height: float
    played: bool


class WaveformRenderer:
    """
    Draws an amplitude sequence as vertical bars with a progress marker.

    Rendering is stateless: each call clears the surface and redraws
    everything from its inputs.
    """

    def __init__(
        self,
        played_color: str = PLAYED_COLOR,
        unplayed_color: str = UNPLAYED_COLOR,
        bar_gap: float = 1.0,
        height_ratio: float = 0.7,
        marker_width: float = 2.0
    ):
        self.played_color = played_color
        self.unplayed_color = unplayed_color
        self.bar_gap = bar_gap
        self.height_ratio = height_ratio
        self.marker_width = marker_width

    def layout(
        self,
        samples: Sequence[float],
        current_time: float,
        duration: float,
        width: float,
        height: float
    ) -> tuple[list[Bar], float]:
        """
        Compute bar geometry and the marker position without drawing.

        Returns:
            (bars, marker_x)
        """
        progress_x = compute_progress_fraction(current_time, duration) * width
        if not samples:
            return [], progress_x

        slot = width / len(samples)
        bar_width = max(slot - self.bar_gap, 0.0)
        bars = []
        for index, value in enumerate(samples):
            x = index * slot
            bar_height = value * height * self.height_ratio
            bars.append(Bar(
                x=x,
                y=(height - bar_height) / 2,
                width=bar_width,
                height=bar_height,
                played=x <= progress_x,
            ))
        return bars, progress_x

    def render(
        self,
        surface: DrawingSurface,
        samples: Sequence[float],
        current_time: float,
        duration: float
    ) -> None:
        bars, marker_x = self.layout(samples, current_time, duration, surface.width, surface.height)

        surface.clear()
        for bar in bars:
            color = self.played_color if bar.played else self.unplayed_color
            surface.fill_rect(bar.x, bar.y, bar.width, bar.height, color)

        surface.fill_rect(marker_x, 0, self.marker_width, surface.height, self.played_color)


class SvgSurface:
    """DrawingSurface that accumulates rectangles into an SVG document"""

    def __init__(self, width: float, height: float, background: str | None = BACKGROUND_COLOR):
        if width <= 0 or height <= 0:
            raise ValueError("Surface dimensions must be positive")
        self.width = width
        self.height = height
        self.background = background
        self._shapes: list[str] = []

    def clear(self) -> None:
        self._shapes.clear()

    def fill_rect(self, x: float, y: float, width: float, height: float, color: str) -> None:
        self._shapes.append(
            f'<rect x="{x:.2f}" y="{y:.2f}" width="{width:.2f}" height="{height:.2f}" fill={quoteattr(color)}/>'
        )

    @property
    def shape_count(self) -> int:
        return len(self._shapes)

    def to_svg(self) -> str:
        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width:g}" height="{self.height:g}" '
            f'viewBox="0 0 {self.width:g} {self.height:g}">'
        ]
        if self.background:
            parts.append(f'<rect width="100%" height="100%" fill={quoteattr(self.background)}/>')
        parts.extend(self._shapes)
        parts.append("</svg>")
        return "".join(parts)
