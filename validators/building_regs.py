import math

# Private-dwelling limits, cm and degrees
RISER_RANGE = (15.0, 22.0)         # riser band highlighted in the configurator
GOING_RANGE = (22.0, 30.0)
TWO_R_PLUS_G_RANGE = (55.0, 70.0)
MAX_PITCH_DEG = 42.0
PITCH_TOLERANCE_DEG = 0.1


def _outside(value, bounds):
    lo, hi = bounds
    return not (lo <= value <= hi)


def _range_label(bounds):
    return f"[{bounds[0]:g}, {bounds[1]:g}]"


class StairRegsValidator:
    """Advisory checks for a concrete stair (all dimensions in cm).

    Never called by the profile engine; callers run it on a computed result.
    """

    @staticmethod
    def check_staircase(rise: float, going: float) -> list[str]:
        """
        Validate the per-step proportions of a flight.

        Args:
            rise: Individual riser height (cm)
            going: Individual tread depth (cm)
        """
        issues = []
        pitch = math.degrees(math.atan2(rise, going))
        trg = 2 * rise + going

        if _outside(rise, RISER_RANGE):
            issues.append(f"Riser height {rise:.1f}cm is outside compliant range {_range_label(RISER_RANGE)}")
        if _outside(going, GOING_RANGE):
            issues.append(f"Stair going {going:.1f}cm is outside compliant range {_range_label(GOING_RANGE)}")
        if pitch > MAX_PITCH_DEG + PITCH_TOLERANCE_DEG:
            issues.append(f"Pitch {pitch:.1f}° exceeds maximum {MAX_PITCH_DEG:g}°")
        if _outside(trg, TWO_R_PLUS_G_RANGE):
            issues.append(f"2R + G calculation ({trg:.1f}) is outside compliant range "
                          f"{_range_label(TWO_R_PLUS_G_RANGE)}")
        return issues

    @staticmethod
    def check_slab_clearance(result) -> list[str]:
        """Report soffit points that were clamped to the floor plane.

        Args:
            result: ProfileResult from staircase_profile.compute()
        """
        clamped = [v for v in result.soffit if v.clamped]
        if not clamped:
            return []
        spec = result.spec
        return [
            f"Slab thickness {spec.slab_thickness:.1f}cm does not fit under the "
            f"{spec.riser_height:.1f}cm risers: soffit clamped at {len(clamped)} point(s)"
        ]

    @classmethod
    def check_result(cls, result) -> list[str]:
        spec = result.spec
        return cls.check_staircase(spec.riser_height, spec.step_depth) + cls.check_slab_clearance(result)
