"""
MediaPipe HandLandmarker helpers used by the gesture session.
The landmarker always runs in VIDEO mode on a live webcam stream.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Optional, Tuple, List

import cv2
import numpy as np
import mediapipe as mp

# Direct imports to provide real types to Pylance and the IDE
from mediapipe.tasks.python import BaseOptions
from mediapipe.tasks.python.vision import (
    HandLandmarker,
    HandLandmarkerOptions,
    RunningMode
)

from config.matching import (
    COLOR_LEFT_HAND,
    COLOR_NODE,
    COLOR_RIGHT_HAND,
    HAND_CONNECTIONS,
    LANDMARKER_MODEL_PATH,
)
from config.mpParameters import (
    MAX_NUM_HANDS,
    MIN_DETECTION_CONFIDENCE,
    MIN_PRESENCE_CONFIDENCE,
    MIN_TRACKING_CONFIDENCE,
)


def get_hand_landmarker(
    model_path: str | Path | None = None,
    num_hands: int = MAX_NUM_HANDS,
    min_hand_detection_confidence: float = MIN_DETECTION_CONFIDENCE,
    min_hand_presence_confidence: float = MIN_PRESENCE_CONFIDENCE,
    min_tracking_confidence: float = MIN_TRACKING_CONFIDENCE,
) -> HandLandmarker:
    """Initializes a VIDEO-mode MediaPipe HandLandmarker."""

    if model_path is None:
        model_path = LANDMARKER_MODEL_PATH

    task_path = Path(model_path)
    if not task_path.exists():
        raise FileNotFoundError(f"Model not found: {task_path}")

    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=str(task_path)),
        running_mode=RunningMode.VIDEO,
        num_hands=num_hands,
        min_hand_detection_confidence=min_hand_detection_confidence,
        min_hand_presence_confidence=min_hand_presence_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )

    return HandLandmarker.create_from_options(options)


def process_frame_with_mediapipe(
    frame_bgr: np.ndarray,
    landmarker: HandLandmarker,
    timestamp_ms: int,
) -> Tuple[Optional[Any], mp.Image]:
    """Runs HandLandmarker inference on a BGR frame."""

    frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
    mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)

    try:
        result = landmarker.detect_for_video(mp_image, timestamp_ms)
    except Exception as exc:
        print(f"MediaPipe error: {exc}")
        return None, mp_image

    return result, mp_image


def handedness_of(result: Any, hand_index: int = 0) -> Optional[str]:
    """Returns 'Left' or 'Right' for a detected hand, None if unreported."""
    handedness = getattr(result, "handedness", None)
    if not handedness or len(handedness) <= hand_index or not handedness[hand_index]:
        return None
    return handedness[hand_index][0].category_name


def hand_color(handedness: Optional[str]) -> Tuple[int, int, int]:
    """Link color for a hand: green for left, blue for right."""
    return COLOR_RIGHT_HAND if handedness == "Right" else COLOR_LEFT_HAND


def draw_hand_landmarks(
    frame_bgr: np.ndarray,
    hand_landmarks: List[Any],
    connections: Optional[Sequence[Tuple[int, int]]] = None,
    link_color: Tuple[int, int, int] = COLOR_LEFT_HAND,
) -> np.ndarray:
    """Renders hand skeletons (links + every joint) onto the frame in-place."""

    if connections is None:
        connections = HAND_CONNECTIONS

    h, w = frame_bgr.shape[:2]

    for landmarks in hand_landmarks:
        for start_idx, end_idx in connections:
            start = landmarks[start_idx]
            end = landmarks[end_idx]

            p1 = (int(start.x * w), int(start.y * h))
            p2 = (int(end.x * w), int(end.y * h))

            cv2.line(frame_bgr, p1, p2, link_color, 2)

        for lm in landmarks:
            cv2.circle(frame_bgr, (int(lm.x * w), int(lm.y * h)), 4, COLOR_NODE, -1)

    return frame_bgr
