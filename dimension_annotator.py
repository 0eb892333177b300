"""Dimension annotations for the staircase elevation.
Derives measurement lines from the already-built step layout and segments.
Purely presentational: nothing here feeds back into the profile.

Points are (x, y, z): x along the run, y up, z along the width (extrusion) axis,
centred on the stair axis like the extruded solid.
"""
import math
from dataclasses import dataclass

# Standoffs (cm)
DIM_OFFSET = 20.0        # overall height / run / width, outside the silhouette
DIM_SMALL_OFFSET = 5.0   # riser, tread and landing samples

# Colour tags
C_OVERALL = "overall"
C_STEP = "step"
C_LANDING = "landing"
C_SLAB = "slab"

DIMENSION_STYLE = {
    C_OVERALL: {"color": (0.94, 0.27, 0.27), "aci": 1},
    C_STEP:    {"color": (0.23, 0.51, 0.96), "aci": 5},
    C_LANDING: {"color": (0.13, 0.77, 0.37), "aci": 3},
    C_SLAB:    {"color": (0.98, 0.75, 0.14), "aci": 2},
}


@dataclass(frozen=True)
class DimensionLine:
    start: tuple
    end: tuple
    label: str
    color: str

    @property
    def length(self):
        return math.dist(self.start, self.end)


def _label(value):
    return f"{value:.1f} cm"


def representative_step(steps):
    """First ordinary step above the floor step; step 1 only if it is the sole option.

    Returns None when every step is a landing.
    """
    flight = [s for s in steps if not s.is_landing]
    for s in flight:
        if s.step_index > 1:
            return s
    return flight[0] if flight else None


def _slab_indicator(segments, pitch):
    """Perpendicular from the throat line to the soffit at mid first flight."""
    seg = next((s for s in segments if s.kind == "flight"), None)
    if seg is None or pitch.slab_thickness <= 0:
        return None
    x_mid = (seg.start_x + seg.end_x) / 2.0
    y_throat = pitch.slope * (x_mid - seg.start_x - pitch.step_depth) + seg.start_y
    t = pitch.slab_thickness
    end = (x_mid + t * math.sin(pitch.angle), y_throat - t * math.cos(pitch.angle), 0.0)
    return DimensionLine((x_mid, y_throat, 0.0), end, _label(t), C_SLAB)


def build_dimensions(spec, layout, segments, pitch):
    run, rise = layout.total_run, layout.total_rise
    dims = [
        DimensionLine((run + DIM_OFFSET, 0.0, 0.0), (run + DIM_OFFSET, rise, 0.0),
                      _label(spec.total_height), C_OVERALL),
        DimensionLine((0.0, -DIM_OFFSET, 0.0), (run, -DIM_OFFSET, 0.0),
                      _label(run), C_OVERALL),
        DimensionLine((run, rise + DIM_OFFSET, -spec.width / 2),
                      (run, rise + DIM_OFFSET, spec.width / 2),
                      _label(spec.width), C_OVERALL),
    ]

    sample = representative_step(layout.steps)
    if sample is not None:
        x = sample.start_x - DIM_SMALL_OFFSET
        dims.append(DimensionLine((x, sample.start_y - layout.riser_height, 0.0),
                                  (x, sample.start_y, 0.0),
                                  _label(layout.riser_height), C_STEP))
        y = sample.start_y + DIM_SMALL_OFFSET
        dims.append(DimensionLine((sample.start_x, y, 0.0), (sample.end_x, y, 0.0),
                                  _label(sample.depth), C_STEP))

    slab = _slab_indicator(segments, pitch)
    if slab is not None:
        dims.append(slab)

    for step in layout.steps:
        if step.is_landing:
            y = step.start_y + DIM_SMALL_OFFSET
            dims.append(DimensionLine((step.start_x, y, 0.0), (step.end_x, y, 0.0),
                                      _label(step.depth), C_LANDING))
    return dims
