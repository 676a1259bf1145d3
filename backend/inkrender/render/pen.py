"""Pen-style dispatch: pen style + width → immutable outline parameters."""

from __future__ import annotations

from dataclasses import dataclass

from inkrender.models.stroke import PenStyle

# Shared by every style: how aggressively consecutive samples are blended.
_SMOOTHING = 0.5
_STREAMLINE = 0.5

# Pressure fed to styles that ignore the recorded value.
FIXED_PRESSURE = 0.5

# Run-length (logical units) of the ballpoint pen-lift taper.
_BALLPOINT_END_TAPER = 10.0

# Thinning per style: how much pressure modulates the half-width.
_PRESSURE_THINNING = 0.5
_BALLPOINT_THINNING = 0.15


@dataclass(frozen=True)
class Taper:
    """Taper setting for one end of a stroke.

    ``enabled`` without ``length`` tapers over the whole stroke (or its width,
    whichever is longer); ``length`` tapers over a fixed run-length.
    """

    enabled: bool = False
    length: float | None = None
    cap: bool = True


@dataclass(frozen=True)
class StrokeOptions:
    size: float
    thinning: float
    smoothing: float = _SMOOTHING
    streamline: float = _STREAMLINE
    simulate_pressure: bool = False
    use_recorded_pressure: bool = False
    start: Taper = Taper()
    end: Taper = Taper()


def stroke_options(pen_style: PenStyle | str, width: float) -> StrokeOptions:
    """Outline parameters for a pen style at a given base width."""
    style = PenStyle(pen_style)

    if style is PenStyle.PRESSURE:
        return StrokeOptions(
            size=width,
            thinning=_PRESSURE_THINNING,
            use_recorded_pressure=True,
            start=Taper(enabled=True),
            end=Taper(enabled=True),
        )
    if style is PenStyle.UNIFORM:
        return StrokeOptions(size=width, thinning=0.0)
    return StrokeOptions(
        size=width,
        thinning=_BALLPOINT_THINNING,
        simulate_pressure=True,
        end=Taper(enabled=True, length=_BALLPOINT_END_TAPER),
    )
