import sys
import math
import pytest
import numpy as np
from pathlib import Path
from unittest.mock import MagicMock

# --- SETUP PATHS ---
if __name__ == "__main__":
    sys.path.append(str(Path(__file__).parents[2]))

from PoseMatching.errors import InvalidPose, LengthMismatch, PoseMatchingError
from PoseMatching.pose_matcher import (
    classify,
    distance,
    nearest,
    normalize,
    pose_from_landmarks,
)


def make_pose(offset=(0.0, 0.0, 0.0), scale=1.0):
    """Builds a deterministic, non-degenerate 21-landmark pose."""
    base = [
        (0.4 + 0.01 * i, 0.6 - 0.02 * i, 0.003 * i * (-1) ** i)
        for i in range(21)
    ]
    return [
        (x * scale + offset[0], y * scale + offset[1], z * scale + offset[2])
        for x, y, z in base
    ]


class TestNormalize:

    def test_output_length(self):
        """Verify 21 landmarks flatten into a 63-value descriptor."""
        descriptor = normalize(make_pose())
        assert isinstance(descriptor, list)
        assert len(descriptor) == 63

    def test_wrist_is_origin(self):
        """Verify the first three values (the wrist) are always zero."""
        descriptor = normalize(make_pose(offset=(3.0, -2.0, 0.5)))
        assert descriptor[0:3] == [0.0, 0.0, 0.0]

    def test_max_distance_is_one(self):
        """Verify the farthest landmark from the wrist ends up at distance 1."""
        points = np.array(normalize(make_pose())).reshape(21, 3)
        norms = np.linalg.norm(points, axis=1)
        assert math.isclose(float(norms.max()), 1.0, rel_tol=1e-9)

    def test_translation_invariance(self):
        """Verify a uniform shift of the input leaves the descriptor unchanged."""
        reference = normalize(make_pose())
        shifted = normalize(make_pose(offset=(10.0, -4.5, 2.25)))
        assert np.allclose(reference, shifted)

    @pytest.mark.parametrize("factor", [0.1, 2.0, 37.5])
    def test_scale_invariance(self, factor):
        """Verify a uniform positive scaling leaves the descriptor unchanged."""
        reference = normalize(make_pose())
        scaled = normalize(make_pose(scale=factor))
        assert np.allclose(reference, scaled)

    def test_degenerate_pose_stays_at_origin(self):
        """Verify that all landmarks on the wrist yield an all-zero descriptor."""
        pose = [(0.5, 0.5, 0.1)] * 21
        descriptor = normalize(pose)
        assert descriptor == [0.0] * 63

    def test_known_values(self):
        """Verify translation then scaling on a hand-computed pose."""
        pose = [(1.0, 1.0, 1.0)] * 21
        pose[4] = (4.0, 5.0, 1.0)  # 5 units from the wrist
        pose[8] = (1.0, 2.0, 1.0)  # 1 unit from the wrist

        descriptor = normalize(pose)

        assert descriptor[12:15] == pytest.approx([0.6, 0.8, 0.0])
        assert descriptor[24:27] == pytest.approx([0.0, 0.2, 0.0])
        assert descriptor[3:6] == [0.0, 0.0, 0.0]

    def test_twenty_landmarks_fail(self):
        """Verify InvalidPose is raised when a landmark is missing."""
        with pytest.raises(InvalidPose):
            normalize(make_pose()[:20])

    def test_twenty_two_landmarks_fail(self):
        pose = make_pose() + [(0.0, 0.0, 0.0)]
        with pytest.raises(InvalidPose):
            normalize(pose)

    def test_landmark_without_z_fails(self):
        """Verify 2-D landmarks are rejected."""
        pose = [(x, y) for x, y, _ in make_pose()]
        with pytest.raises(InvalidPose):
            normalize(pose)

    def test_does_not_mutate_input(self):
        pose = make_pose(offset=(1.0, 1.0, 1.0))
        snapshot = list(pose)
        normalize(pose)
        assert pose == snapshot

    def test_errors_are_value_errors(self):
        """Verify the error taxonomy stays catchable as ValueError."""
        with pytest.raises(ValueError):
            normalize([])
        assert issubclass(InvalidPose, PoseMatchingError)


class TestDistance:

    def test_three_four_five(self):
        assert distance([0.0, 0.0], [3.0, 4.0]) == 5.0

    def test_identity_and_symmetry(self):
        """Verify d(a, a) == 0 and d(a, b) == d(b, a)."""
        a = normalize(make_pose())
        b = normalize(make_pose(offset=(0.1, 0.2, 0.3)))
        b[5] += 0.25

        assert distance(a, a) == 0.0
        assert distance(a, b) == distance(b, a)
        assert distance(a, b) > 0.0

    def test_triangle_inequality(self):
        a = [0.0] * 63
        b = [1.0] + [0.0] * 62
        c = [1.0, 1.0] + [0.0] * 61
        assert distance(a, c) <= distance(a, b) + distance(b, c)

    def test_length_mismatch(self):
        """Verify LengthMismatch for descriptors of different sizes."""
        with pytest.raises(LengthMismatch):
            distance([0.0] * 63, [0.0] * 62)


class TestClassify:

    @pytest.fixture
    def reference_set(self):
        descriptor = normalize(make_pose())
        other = list(descriptor)
        other[10] += 2.0
        return {"A": descriptor, "B": other}

    def test_empty_reference_set_is_no_match(self):
        """Verify an empty reference set never matches."""
        assert classify(make_pose(), {}) is None
        assert nearest(normalize(make_pose()), {}) is None

    def test_exact_match(self, reference_set):
        """Verify a pose equal to a template matches it at distance 0."""
        assert classify(make_pose(scale=3.0), reference_set) == "A"

        label, dist = nearest(normalize(make_pose()), reference_set)
        assert label == "A"
        assert dist == pytest.approx(0.0, abs=1e-12)

    def test_threshold_is_strict(self):
        """Verify a match at exactly the threshold distance is rejected."""
        descriptor = normalize(make_pose())
        shifted = list(descriptor)
        shifted[62] += 0.5

        _, dist = nearest(descriptor, {"C": shifted})

        assert classify(make_pose(), {"C": shifted}, threshold=dist) is None
        assert classify(make_pose(), {"C": shifted}, threshold=dist + 1e-9) == "C"

    def test_default_threshold(self):
        """Verify the 0.5 default applies when no threshold is passed."""
        descriptor = normalize(make_pose())
        near = list(descriptor)
        near[62] += 0.4
        far = list(descriptor)
        far[62] += 0.6

        assert classify(make_pose(), {"N": near}) == "N"
        assert classify(make_pose(), {"F": far}) is None

    def test_nan_threshold_never_matches(self):
        """Verify a NaN threshold yields no match, even for far templates."""
        descriptor = normalize(make_pose())
        far = [v + 10.0 for v in descriptor]

        assert classify(make_pose(), {"A": far}, threshold=float("nan")) is None
        assert classify(make_pose(), {"A": descriptor}, threshold=float("nan")) is None

    def test_tie_resolves_to_first_label(self):
        """Verify equidistant templates resolve to the alphabetically first label."""
        descriptor = [0.0] * 63
        up = list(descriptor)
        up[30] = 0.25
        down = list(descriptor)
        down[30] = -0.25

        for reference_set in ({"Z": up, "M": down}, {"M": down, "Z": up}):
            label, _ = nearest(descriptor, reference_set)
            assert label == "M"

    def test_wrong_template_length(self):
        with pytest.raises(LengthMismatch):
            classify(make_pose(), {"A": [0.0] * 10})


class TestPoseFromLandmarks:

    def test_maps_xyz(self):
        """Verify detector objects are mapped into (x, y, z) tuples."""
        landmarks = [MagicMock(x=0.1 * i, y=0.2, z=-0.01) for i in range(21)]

        pose = pose_from_landmarks(landmarks)

        assert isinstance(pose, tuple)
        assert len(pose) == 21
        assert pose[3] == pytest.approx((0.3, 0.2, -0.01))

    def test_wrong_count(self):
        landmarks = [MagicMock(x=0.0, y=0.0, z=0.0) for _ in range(5)]
        with pytest.raises(InvalidPose):
            pose_from_landmarks(landmarks)


def run_tests_directly() -> None:
    print(f"--- Running tests for {Path(__file__).name} ---")
    exit_code = pytest.main(["-v", "-p", "no:cacheprovider", __file__])
    sys.exit(exit_code)

if __name__ == "__main__":
    run_tests_directly()
