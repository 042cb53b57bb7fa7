"""Pose matching configuration constants (descriptor layout, thresholds, paths)."""

from __future__ import annotations
from pathlib import Path
from typing import Final

# --- Paths (project-relative) ---
PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[1]
MATCHING_DIR: Final[Path] = PROJECT_ROOT / "PoseMatching"
REFERENCE_SET_PATH: Final[Path] = MATCHING_DIR / "reference_sets" / "reference_set.json"
LANDMARKER_MODEL_PATH: Final[Path] = MATCHING_DIR / "models" / "hand_landmarker.task"

# --- Descriptor layout ---
# Hands: 21 landmarks * (x, y, z), wrist first
NUM_LANDMARKS: Final[int] = 21
COORDS_PER_LANDMARK: Final[int] = 3
DESCRIPTOR_LEN: Final[int] = NUM_LANDMARKS * COORDS_PER_LANDMARK
WRIST_INDEX: Final[int] = 0

# --- Matching parameters ---
DEFAULT_THRESHOLD: Final[float] = 0.5
LABEL_PATTERN: Final[str] = r"[A-Z]"

# --- Session keys ---
QUIT_KEY: Final[int] = 27  # ESC, letters are reserved for recording

# --- Hand skeleton topology (landmark index pairs) ---
HAND_CONNECTIONS: Final[tuple[tuple[int, int], ...]] = (
    (0, 1), (1, 2), (2, 3), (3, 4),          # Thumb
    (0, 5), (5, 6), (6, 7), (7, 8),          # Index
    (5, 9), (9, 10), (10, 11), (11, 12),     # Middle
    (9, 13), (13, 14), (14, 15), (15, 16),   # Ring
    (13, 17), (0, 17), (17, 18), (18, 19), (19, 20),  # Pinky + palm
)

# --- Overlay colors (BGR) ---
COLOR_LEFT_HAND: Final[tuple[int, int, int]] = (0, 255, 0)
COLOR_RIGHT_HAND: Final[tuple[int, int, int]] = (255, 0, 0)
COLOR_NODE: Final[tuple[int, int, int]] = (0, 0, 255)
COLOR_MATCH: Final[tuple[int, int, int]] = (0, 255, 0)
COLOR_NO_MATCH: Final[tuple[int, int, int]] = (0, 165, 255)
