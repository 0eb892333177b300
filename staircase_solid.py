"""Concrete Staircase Solid Builder.
Sweeps the closed profile from staircase_profile along the width axis with
build123d. The profile lies on the XY plane (X = run, Y = rise) and the
solid spans Z = -width/2..width/2, centred on the stair axis.

Usage:
    python staircase_solid.py [--height 280] [--steps 14] [--landing 5:100] [--scale 10]
"""
import argparse
from build123d import *
from staircase_profile import (
    StaircaseSpec, InvalidSpec, compute, add_config_arguments, config_from_args,
)


def _is_spike(prev, pt, nxt):
    """pt is a dead end: the outline arrives and leaves along the same line."""
    ax, ay = pt[0] - prev[0], pt[1] - prev[1]
    bx, by = nxt[0] - pt[0], nxt[1] - pt[1]
    return ax * by - ay * bx == 0 and ax * bx + ay * by < 0


def drop_spikes(polygon):
    """Remove zero-width spikes from a closed outline (first == last).

    A landing on the first step closes its soffit down the first riser line;
    OCCT will not make a face from a wire that doubles back on itself.
    """
    ring = list(polygon[:-1])
    changed = True
    while changed and len(ring) > 3:
        changed = False
        for i in range(len(ring)):
            if _is_spike(ring[i - 1], ring[i], ring[(i + 1) % len(ring)]):
                del ring[i]
                changed = True
                break
    return ring + ring[:1]


def build_solid(result, scale=1.0):
    """Extrude a computed profile into a solid.

    Args:
        result: ProfileResult from staircase_profile.compute()
        scale: Unit conversion applied to every coordinate (0.01 for cm -> m).
    """
    pts = [(x * scale, y * scale) for x, y in drop_spikes(result.polygon)]
    width = result.spec.width * scale

    with BuildPart() as bp:
        with BuildSketch(Plane.XY):
            with BuildLine():
                Polyline(pts)
            make_face()
        extrude(amount=width)

    return bp.part.translate((0, 0, -width / 2))


def build_staircase(config, scale=1.0):
    """Build the concrete staircase solid from a config dict."""
    spec = StaircaseSpec.from_config(config)
    result = compute(spec, dimensions=False)
    print(f"[SOLID] Building: H={spec.total_height}, W={spec.width}, Steps={spec.num_steps}, "
          f"Landings={len(spec.landings)}, Slab={spec.slab_thickness}")
    if result.clamped:
        print("[SOLID] Soffit clamped to the floor plane (slab thicker than riser clearance)")
    return build_solid(result, scale=scale)


if __name__ == "__main__":
    parser = add_config_arguments(argparse.ArgumentParser(description=__doc__.splitlines()[0]))
    parser.add_argument("--scale", type=float, default=10.0,
                        help="Coordinate scale for the exported solid (10 = cm -> mm)")
    parser.add_argument("--no_show", action="store_true", help="Skip the ocp_vscode preview")
    args = parser.parse_args()

    try:
        stair = build_staircase(config_from_args(args), scale=args.scale)
    except InvalidSpec as e:
        parser.error(str(e))

    bb = stair.bounding_box()
    print(f"BBox: X={bb.min.X:.1f}..{bb.max.X:.1f}, Y={bb.min.Y:.1f}..{bb.max.Y:.1f}, Z={bb.min.Z:.1f}..{bb.max.Z:.1f}")

    export_stl(stair, "staircase_concrete.stl")
    print("Exported: staircase_concrete.stl")

    if not args.no_show:
        from ocp_vscode import show, set_port
        set_port(3939)
        show(stair, names=["Staircase"])
