"""Concrete Staircase Profile Engine.
Turns a parametric stair description into the closed 2D cross-section that is
later extruded along the width axis:
- Step layout (uniform risers, treads, landings at arbitrary steps)
- Flight / landing segments
- Soffit (slab underside) with exact flight/landing junctions
- Closed profile polygon + dimension annotations

All lengths are in the unit of the StaircaseSpec (cm by default).
The engine is a pure function: no I/O, no shared state.

Usage:
    python staircase_profile.py [--height 280] [--steps 14] [--landing 5:100]
"""
import math
import argparse
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

from dimension_annotator import build_dimensions

# Default Configuration (cm)
DEFAULT_CONFIG = {
    "total_height": 280.0,
    "width": 90.0,
    "num_steps": 14,
    "step_depth": 25.0,
    "slab_thickness": 20.0,
    "landings": [],
}


class InvalidSpec(ValueError):
    """The stair description cannot produce a profile."""


class SegmentKind(str, Enum):
    FLIGHT = "flight"
    LANDING = "landing"


class VertexRole(str, Enum):
    TOP = "top"
    JUNCTION = "junction"
    FLOOR = "floor"


# ===========================================================================
# INPUT
# ===========================================================================

def _check_number(name, value, allow_zero=False):
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidSpec(f"{name} must be a finite number, got {value!r}")
    if value < 0 or (value == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "> 0"
        raise InvalidSpec(f"{name} must be {bound}, got {value}")


def _check_step_index(name, value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSpec(f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class Landing:
    step_index: int
    depth: float
    id: Optional[str] = None


@dataclass(frozen=True)
class StaircaseSpec:
    """Immutable stair description. Validated on construction."""
    total_height: float
    width: float
    num_steps: int
    step_depth: float
    slab_thickness: float
    landings: tuple = ()

    def __post_init__(self):
        landings = tuple(self.landings)
        _check_number("total_height", self.total_height)
        _check_number("width", self.width)
        _check_step_index("num_steps", self.num_steps)
        if self.num_steps < 1:
            raise InvalidSpec(f"num_steps must be >= 1, got {self.num_steps}")
        _check_number("step_depth", self.step_depth)
        _check_number("slab_thickness", self.slab_thickness, allow_zero=True)

        seen = set()
        for landing in landings:
            if not isinstance(landing, Landing):
                raise InvalidSpec(f"landings must be Landing records, got {landing!r}")
            _check_step_index("landing step_index", landing.step_index)
            if not 1 <= landing.step_index <= self.num_steps:
                raise InvalidSpec(
                    f"landing step_index {landing.step_index} is outside [1, {self.num_steps}]")
            if landing.step_index in seen:
                raise InvalidSpec(f"duplicate landing at step_index {landing.step_index}")
            seen.add(landing.step_index)
            _check_number(f"landing depth at step {landing.step_index}", landing.depth)

        object.__setattr__(self, "landings",
                           tuple(sorted(landings, key=lambda l: l.step_index)))

    @property
    def riser_height(self):
        return self.total_height / self.num_steps

    @classmethod
    def from_config(cls, config):
        """Build a spec from the flat key/value form (see DEFAULT_CONFIG)."""
        try:
            landings = [
                Landing(step_index=l["step_index"], depth=l["depth"], id=l.get("id"))
                for l in config.get("landings") or []
            ]
            return cls(
                total_height=config["total_height"],
                width=config["width"],
                num_steps=config["num_steps"],
                step_depth=config["step_depth"],
                slab_thickness=config["slab_thickness"],
                landings=tuple(landings),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise InvalidSpec(f"Malformed staircase config: {e!r}") from e

    def to_config(self):
        return {
            "total_height": self.total_height,
            "width": self.width,
            "num_steps": self.num_steps,
            "step_depth": self.step_depth,
            "slab_thickness": self.slab_thickness,
            "landings": [
                {"step_index": l.step_index, "depth": l.depth, "id": l.id}
                for l in self.landings
            ],
        }

    def with_landing(self, step_index, depth, landing_id=None):
        """Return a new spec with a landing added at step_index (or replaced)."""
        kept = [l for l in self.landings if l.step_index != step_index]
        return replace(self, landings=tuple(kept) + (Landing(step_index, depth, landing_id),))

    def without_landing(self, step_index):
        return replace(self, landings=tuple(l for l in self.landings if l.step_index != step_index))


# ===========================================================================
# 1. STEP LAYOUT
# ===========================================================================

@dataclass(frozen=True)
class StepCoord:
    """Top surface of one step.

    start_x is the foot of the riser (tread start), start_y the tread level
    after the riser climbed; end_x is where the tread ends.
    """
    step_index: int
    start_x: float
    start_y: float
    end_x: float
    depth: float
    is_landing: bool


@dataclass(frozen=True)
class StepLayout:
    steps: tuple
    riser_height: float
    total_run: float
    total_rise: float


def build_step_layout(spec):
    riser = spec.riser_height
    landing_depths = {l.step_index: l.depth for l in spec.landings}

    # X is rebuilt from counts so a plain flight ends exactly on num_steps * step_depth
    flight_steps = 0
    landing_run = 0.0
    steps = []
    for i in range(1, spec.num_steps + 1):
        x = flight_steps * spec.step_depth + landing_run
        # Last tread sits exactly on the upper floor
        y = spec.total_height if i == spec.num_steps else spec.total_height * i / spec.num_steps
        if i in landing_depths:
            run = landing_depths[i]
            landing_run += run
        else:
            run = spec.step_depth
            flight_steps += 1
        end_x = flight_steps * spec.step_depth + landing_run
        steps.append(StepCoord(i, x, y, end_x, run, i in landing_depths))

    return StepLayout(tuple(steps), riser, steps[-1].end_x, steps[-1].start_y)


# ===========================================================================
# 2. SEGMENTS
# ===========================================================================

@dataclass(frozen=True)
class Segment:
    kind: SegmentKind
    start_step: int
    end_step: int
    start_x: float
    start_y: float
    end_x: float
    end_y: float


def _segment(first, last):
    kind = SegmentKind.LANDING if first.is_landing else SegmentKind.FLIGHT
    return Segment(kind, first.step_index, last.step_index,
                   first.start_x, first.start_y, last.end_x, last.start_y)


def partition_segments(steps):
    """Group consecutive steps of the same kind. Adjacent segments alternate kind."""
    segments = []
    first = steps[0]
    for prev, step in zip(steps, steps[1:]):
        if step.is_landing != prev.is_landing:
            segments.append(_segment(first, prev))
            first = step
    segments.append(_segment(first, steps[-1]))
    return segments


# ===========================================================================
# 3. SOFFIT
# ===========================================================================

@dataclass(frozen=True)
class FlightPitch:
    """Pitch of a standard flight and the vertical drop of the slab below it."""
    angle: float
    slope: float
    vertical_offset: float
    step_depth: float
    slab_thickness: float

    @classmethod
    def of(cls, spec):
        angle = math.atan2(spec.riser_height, spec.step_depth)
        return cls(
            angle=angle,
            slope=math.tan(angle),
            vertical_offset=spec.slab_thickness / math.cos(angle),
            step_depth=spec.step_depth,
            slab_thickness=spec.slab_thickness,
        )


@dataclass(frozen=True)
class SoffitLine:
    """y = slope * (x - x0) + y0"""
    slope: float
    x0: float
    y0: float

    def y_at(self, x):
        return self.slope * (x - self.x0) + self.y0

    def x_at(self, y):
        return (y - self.y0) / self.slope + self.x0


def _flight_soffit(segment, pitch):
    # Throat line through (start_x + step_depth, start_y), dropped by the slab
    return SoffitLine(pitch.slope, segment.start_x + pitch.step_depth,
                      segment.start_y - pitch.vertical_offset)


def _landing_soffit(segment, pitch):
    return SoffitLine(0.0, segment.start_x, segment.start_y - pitch.slab_thickness)


SOFFIT_LINES = {
    SegmentKind.FLIGHT: _flight_soffit,
    SegmentKind.LANDING: _landing_soffit,
}


@dataclass(frozen=True)
class SoffitVertex:
    x: float
    y: float
    role: VertexRole
    clamped: bool = False


def _bound_x(x, y, prev):
    """Keep x >= 0; once the chain runs along the floor it may only move toward the origin."""
    bounded = max(0.0, x)
    if y == 0.0 and prev.y == 0.0:
        bounded = min(bounded, prev.x)
    return bounded


def _junction(lower, upper, prev):
    flat, sloped = (lower, upper) if lower.slope == 0 else (upper, lower)
    y = max(0.0, flat.y0)
    x = sloped.x_at(y)
    bounded_x = _bound_x(x, y, prev)
    return SoffitVertex(bounded_x, y, VertexRole.JUNCTION,
                        clamped=flat.y0 < 0 or bounded_x != x)


def build_soffit(segments, pitch):
    """Soffit vertices from the top of the stair down to the floor.

    Every coordinate is clamped to y >= 0. Vertices pushed onto the floor
    never run back past the previous floor vertex.
    """
    lines = [SOFFIT_LINES[s.kind](s, pitch) for s in segments]

    last = segments[-1]
    top_y = lines[-1].y_at(last.end_x)
    vertices = [SoffitVertex(last.end_x, max(0.0, top_y), VertexRole.TOP, clamped=top_y < 0)]

    for i in range(len(segments) - 2, -1, -1):
        vertices.append(_junction(lines[i], lines[i + 1], vertices[-1]))

    first_line = lines[0]
    if segments[0].kind is SegmentKind.LANDING:
        vertices.append(SoffitVertex(0.0, max(0.0, first_line.y0), VertexRole.FLOOR,
                                     clamped=first_line.y0 < 0))
        vertices.append(SoffitVertex(0.0, 0.0, VertexRole.FLOOR))
    else:
        x = first_line.x_at(0.0)
        bounded_x = _bound_x(x, 0.0, vertices[-1])
        vertices.append(SoffitVertex(bounded_x, 0.0, VertexRole.FLOOR, clamped=bounded_x != x))
    return vertices


# ===========================================================================
# 4. PROFILE
# ===========================================================================

def assemble_profile(layout, soffit):
    """Closed polygon: origin, riser/tread zig-zag, soffit, back to origin."""
    pts = [(0.0, 0.0)]
    for step in layout.steps:
        pts.append((step.start_x, step.start_y))
        pts.append((step.end_x, step.start_y))
    pts.extend((v.x, v.y) for v in soffit)
    if pts[-1] != (0.0, 0.0):
        pts.append((0.0, 0.0))
    # Clamping can land two soffit vertices on the same point
    return [p for i, p in enumerate(pts) if i == 0 or p != pts[i - 1]]


def profile_area(polygon):
    """Shoelace area of a closed polygon."""
    twice = 0.0
    for (x1, y1), (x2, y2) in zip(polygon, polygon[1:]):
        twice += x1 * y2 - x2 * y1
    return abs(twice) / 2.0


@dataclass(frozen=True)
class ProfileResult:
    spec: StaircaseSpec
    pitch: FlightPitch
    layout: StepLayout
    segments: tuple
    soffit: tuple
    polygon: tuple
    annotations: tuple = field(default=())

    @property
    def clamped(self):
        return any(v.clamped for v in self.soffit)


def compute(spec, dimensions=True):
    """spec -> closed profile polygon (+ dimension lines).

    Raises InvalidSpec for a description that cannot be built.
    """
    if not isinstance(spec, StaircaseSpec):
        raise InvalidSpec(f"Expected a StaircaseSpec, got {type(spec).__name__}")

    pitch = FlightPitch.of(spec)
    layout = build_step_layout(spec)
    segments = partition_segments(layout.steps)
    soffit = build_soffit(segments, pitch)
    polygon = assemble_profile(layout, soffit)
    annotations = build_dimensions(spec, layout, segments, pitch) if dimensions else ()

    return ProfileResult(
        spec=spec,
        pitch=pitch,
        layout=layout,
        segments=tuple(segments),
        soffit=tuple(soffit),
        polygon=tuple(polygon),
        annotations=tuple(annotations),
    )


def stair_stats(result):
    """Raw numbers for the caller to check (no compliance judgement here)."""
    area = profile_area(result.polygon)
    volume = area * result.spec.width
    return {
        "riser_height": result.layout.riser_height,
        "total_run": result.layout.total_run,
        "total_rise": result.layout.total_rise,
        "pitch_deg": math.degrees(result.pitch.angle),
        "landing_count": len(result.spec.landings),
        "profile_area": area,
        "concrete_volume": volume,
        "concrete_volume_m3": volume / 1_000_000.0,
        "clamped": result.clamped,
    }


# ===========================================================================
# CLI
# ===========================================================================

def _landing_arg(text):
    try:
        step, depth = text.split(":")
        return {"step_index": int(step), "depth": float(depth)}
    except ValueError:
        raise argparse.ArgumentTypeError(f"Landing must look like STEP:DEPTH, got {text!r}")


def add_config_arguments(parser):
    parser.add_argument("--height", type=float, default=DEFAULT_CONFIG["total_height"])
    parser.add_argument("--width", type=float, default=DEFAULT_CONFIG["width"])
    parser.add_argument("--steps", type=int, default=DEFAULT_CONFIG["num_steps"])
    parser.add_argument("--depth", type=float, default=DEFAULT_CONFIG["step_depth"])
    parser.add_argument("--slab", type=float, default=DEFAULT_CONFIG["slab_thickness"])
    parser.add_argument("--landing", type=_landing_arg, action="append", default=[],
                        help="Landing as STEP:DEPTH, repeatable")
    return parser


def config_from_args(args):
    config = DEFAULT_CONFIG.copy()
    config.update({
        "total_height": args.height,
        "width": args.width,
        "num_steps": args.steps,
        "step_depth": args.depth,
        "slab_thickness": args.slab,
        "landings": args.landing,
    })
    return config


if __name__ == "__main__":
    parser = add_config_arguments(argparse.ArgumentParser(description=__doc__.splitlines()[0]))
    args = parser.parse_args()

    try:
        spec = StaircaseSpec.from_config(config_from_args(args))
    except InvalidSpec as e:
        parser.error(str(e))

    result = compute(spec)
    stats = stair_stats(result)
    print(f"Profile: H={spec.total_height}, Steps={spec.num_steps}, "
          f"Landings={[l.step_index for l in spec.landings]}")
    print(f"Riser={stats['riser_height']:.2f}, Run={stats['total_run']:.1f}, "
          f"Pitch={stats['pitch_deg']:.1f}°, Volume={stats['concrete_volume_m3']:.3f} m3")
    if result.clamped:
        print("WARNING: slab thicker than the riser clearance, soffit clamped to the floor")
    for seg in result.segments:
        print(f"  {seg.kind.value:8s} steps {seg.start_step}-{seg.end_step}")
    for x, y in result.polygon:
        print(f"  ({x:.2f}, {y:.2f})")
