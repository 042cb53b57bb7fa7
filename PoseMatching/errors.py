"""Validation errors raised by the pose matching functions."""

from __future__ import annotations


class PoseMatchingError(ValueError):
    """Base class for local validation failures."""


class InvalidPose(PoseMatchingError):
    """A pose does not hold exactly 21 (x, y, z) landmarks."""


class LengthMismatch(PoseMatchingError):
    """Two descriptors (or a descriptor and the expected layout) differ in length."""


class InvalidLabel(PoseMatchingError):
    """A label is not a single uppercase letter A-Z."""


__all__ = [
    "PoseMatchingError",
    "InvalidPose",
    "LengthMismatch",
    "InvalidLabel",
]
