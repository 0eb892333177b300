"""Solid builder tests: the extruded profile must keep its area and extents."""
import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from staircase_profile import StaircaseSpec, Landing, compute, profile_area
from staircase_solid import build_solid, build_staircase, drop_spikes


class TestBuildSolid:

    def test_default_volume_matches_profile(self, default_spec):
        result = compute(default_spec)
        solid = build_solid(result)
        expected = profile_area(result.polygon) * default_spec.width
        assert solid.volume == pytest.approx(expected, rel=1e-3)

    def test_default_bounding_box(self, default_spec):
        bb = build_solid(compute(default_spec)).bounding_box()
        assert bb.min.X == pytest.approx(0.0, abs=1e-3)
        assert bb.max.X == pytest.approx(350.0, abs=1e-3)
        assert bb.min.Y == pytest.approx(0.0, abs=1e-3)
        assert bb.max.Y == pytest.approx(280.0, abs=1e-3)
        # Centred on the width axis
        assert bb.min.Z == pytest.approx(-45.0, abs=1e-3)
        assert bb.max.Z == pytest.approx(45.0, abs=1e-3)

    def test_scale_to_meters(self, default_spec):
        bb = build_solid(compute(default_spec), scale=0.01).bounding_box()
        assert bb.max.X == pytest.approx(3.5, abs=1e-4)
        assert bb.size.Z == pytest.approx(0.9, abs=1e-4)

    def test_width_annotation_spans_solid(self, landing_config):
        result = compute(StaircaseSpec.from_config(landing_config))
        bb = build_solid(result).bounding_box()
        width = next(d for d in result.annotations if d.start[2] != d.end[2])
        assert width.start[2] == pytest.approx(bb.min.Z, abs=1e-3)
        assert width.end[2] == pytest.approx(bb.max.Z, abs=1e-3)
        assert width.start[0] == pytest.approx(bb.max.X, abs=1e-3)

    def test_landing_volume_matches_profile(self, landing_config):
        result = compute(StaircaseSpec.from_config(landing_config))
        solid = build_solid(result)
        expected = profile_area(result.polygon) * landing_config["width"]
        assert solid.volume == pytest.approx(expected, rel=1e-3)

    def test_landing_on_first_step(self):
        spec = StaircaseSpec(300.0, 100.0, 10, 30.0, 10.0, (Landing(1, 80.0),))
        result = compute(spec)
        solid = build_solid(result)
        assert solid.volume == pytest.approx(profile_area(result.polygon) * 100.0, rel=1e-3)

    def test_thick_slab_still_builds(self, default_config):
        default_config["slab_thickness"] = 400
        solid = build_staircase(default_config)
        assert solid.volume > 0
        assert solid.bounding_box().min.Y == pytest.approx(0.0, abs=1e-3)


class TestDropSpikes:

    def test_removes_spike_at_origin(self):
        outline = [(0, 0), (0, 30), (80, 30), (80, 60), (100, 60), (60, 20), (0, 20), (0, 0)]
        cleaned = drop_spikes(outline)
        assert (0, 0) not in cleaned
        assert cleaned[0] == cleaned[-1]
        assert len(cleaned) == len(outline) - 1

    def test_keeps_plain_outline(self):
        outline = [(0, 0), (0, 20), (25, 20), (25, 0), (0, 0)]
        assert drop_spikes(outline) == outline

    def test_keeps_collinear_floor_run(self):
        outline = [(0, 0), (0, 20), (25, 20), (30, 0), (10, 0), (0, 0)]
        assert drop_spikes(outline) == outline
