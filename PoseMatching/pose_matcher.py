"""
Pose normalization and nearest-template matching for single-hand gestures.
A Pose is 21 (x, y, z) landmarks, wrist first; its Descriptor is the flat
63-value wrist-relative, max-distance-scaled form of it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import List, Optional, Protocol, Tuple

import numpy as np

from config.matching import (
    COORDS_PER_LANDMARK,
    DEFAULT_THRESHOLD,
    NUM_LANDMARKS,
    WRIST_INDEX,
)
from PoseMatching.errors import InvalidPose, LengthMismatch

# --- TYPES ---
Landmark = Tuple[float, float, float]
Pose = Sequence[Sequence[float]]
Descriptor = List[float]
ReferenceSet = Mapping[str, Sequence[float]]


class HasXYZ(Protocol):
    """Protocol for detector landmarks (e.g., MediaPipe NormalizedLandmark)."""
    x: float
    y: float
    z: float


# --- BOUNDARY ---

def pose_from_landmarks(hand_points: Sequence[HasXYZ]) -> Tuple[Landmark, ...]:
    """Maps detector landmark objects into an immutable Pose of (x, y, z) tuples."""
    if len(hand_points) != NUM_LANDMARKS:
        raise InvalidPose(
            f"Expected {NUM_LANDMARKS} landmarks, got {len(hand_points)}"
        )
    return tuple((float(lm.x), float(lm.y), float(lm.z)) for lm in hand_points)


# --- CORE ---

def normalize(pose: Pose) -> Descriptor:
    """
    Translates the pose so the wrist is the origin, then scales it so the
    landmark farthest from the wrist sits at distance 1.
    A degenerate pose (all landmarks on the wrist) is left unscaled.
    """
    if len(pose) != NUM_LANDMARKS:
        raise InvalidPose(f"Expected {NUM_LANDMARKS} landmarks, got {len(pose)}")
    if any(len(landmark) != COORDS_PER_LANDMARK for landmark in pose):
        raise InvalidPose(f"Every landmark must have {COORDS_PER_LANDMARK} coordinates")

    points = np.asarray(pose, dtype=float)
    relative = points - points[WRIST_INDEX]

    max_dist = float(np.max(np.linalg.norm(relative, axis=1)))
    if max_dist > 0:
        relative = relative / max_dist

    return relative.flatten().tolist()


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Computes the Euclidean distance between two descriptors."""
    if len(a) != len(b):
        raise LengthMismatch(f"Descriptor lengths differ: {len(a)} != {len(b)}")
    diff = np.asarray(a, dtype=float) - np.asarray(b, dtype=float)
    return float(np.sqrt(np.sum(diff * diff)))


def nearest(descriptor: Sequence[float], reference_set: ReferenceSet) -> Optional[Tuple[str, float]]:
    """
    Finds the closest reference label by linear scan.
    Labels are visited in sorted order and only a strictly smaller distance
    replaces the current best, so ties resolve to the alphabetically first label.
    """
    best: Optional[Tuple[str, float]] = None

    for label in sorted(reference_set):
        dist = distance(descriptor, reference_set[label])
        if best is None or dist < best[1]:
            best = (label, dist)

    return best


def classify(
    pose: Pose,
    reference_set: ReferenceSet,
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[str]:
    """Returns the nearest label if strictly closer than `threshold`, else None."""
    match = nearest(normalize(pose), reference_set)

    # NaN thresholds never match
    if match is None or not match[1] < threshold:
        return None
    return match[0]


__all__ = [
    "Landmark",
    "Pose",
    "Descriptor",
    "ReferenceSet",
    "HasXYZ",
    "pose_from_landmarks",
    "normalize",
    "distance",
    "nearest",
    "classify",
]
