"""
Webcam session for the pose matcher.
Classifies the detected hand against a loaded reference set on every frame,
records letter-keyed samples, and exports their averages as a reference set.
"""

from __future__ import annotations

import math
import time
from pathlib import Path
from typing import Final, Optional, Tuple, Union

import cv2
import numpy as np

from config.matching import (
    COLOR_MATCH,
    COLOR_NO_MATCH,
    DEFAULT_THRESHOLD,
    QUIT_KEY,
    REFERENCE_SET_PATH,
)
from PoseMatching.errors import PoseMatchingError
from PoseMatching.mediapipe_utils import (
    get_hand_landmarker,
    process_frame_with_mediapipe,
    draw_hand_landmarks,
    hand_color,
    handedness_of,
)
from PoseMatching.pose_matcher import Landmark, classify, normalize, pose_from_landmarks
from PoseMatching.reference_set import (
    ReferenceSet,
    SampleStore,
    build_reference_set,
    record_sample,
    save_reference_set,
)

WINDOW_NAME: Final[str] = "Pose Matcher"


class GestureSession:
    """Owns the video loop, the current pose and the per-session sample store."""

    def __init__(
        self,
        camera_index: int = 0,
        reference_set: Optional[ReferenceSet] = None,
        threshold: float = DEFAULT_THRESHOLD,
        output_path: Union[str, Path] = REFERENCE_SET_PATH,
        model_path: Optional[Union[str, Path]] = None,
    ):
        if not math.isfinite(threshold):
            raise ValueError(f"Threshold must be a finite number, got {threshold}")

        # Landmarker before camera, so a missing model opens no capture
        self.landmarker = get_hand_landmarker(model_path=model_path)
        self.camera = cv2.VideoCapture(camera_index)

        # Matching State
        self.reference_set: ReferenceSet = dict(reference_set or {})
        self.threshold = threshold
        self.output_path = Path(output_path)

        # Session State
        self.store: SampleStore = {}
        self.current_pose: Optional[Tuple[Landmark, ...]] = None
        self.current_hand: Optional[str] = None
        self.current_match: Optional[str] = None
        self._start = time.monotonic()
        self._last_ts = -1

    def _next_timestamp(self) -> int:
        """VIDEO mode requires strictly increasing timestamps."""
        ts = int((time.monotonic() - self._start) * 1000)
        self._last_ts = max(ts, self._last_ts + 1)
        return self._last_ts

    def _extract_pose(self, frame: np.ndarray, timestamp_ms: int) -> Tuple[Optional[Tuple[Landmark, ...]], np.ndarray]:
        """
        Process frame: Detect -> Draw -> Map to Pose.
        Returns: (pose or None, annotated_frame). Sets `current_hand`.
        """
        result, _ = process_frame_with_mediapipe(frame, self.landmarker, timestamp_ms)

        if not (result and result.hand_landmarks):
            self.current_hand = None
            return None, frame

        self.current_hand = handedness_of(result)
        frame = draw_hand_landmarks(
            frame, result.hand_landmarks, link_color=hand_color(self.current_hand)
        )
        try:
            return pose_from_landmarks(result.hand_landmarks[0]), frame
        except PoseMatchingError as exc:
            print(f"[UI] !! Skipping frame: {exc}")
            return None, frame

    def _match(self, pose: Optional[Tuple[Landmark, ...]]) -> Optional[str]:
        if pose is None or not self.reference_set:
            return None
        return classify(pose, self.reference_set, self.threshold)

    def update(self, frame: np.ndarray) -> np.ndarray:
        """Runs one frame through detection and classification."""
        self.current_pose, frame = self._extract_pose(frame, self._next_timestamp())
        self.current_match = self._match(self.current_pose)
        return frame

    def handle_key(self, key: int) -> bool:
        """Reacts to a key press. Returns False when the session should end."""
        if key == QUIT_KEY:
            return False

        char = chr(key)
        if not (char.isascii() and char.isalpha()):
            return True

        label = char.upper()
        if self.current_pose is None:
            print(f"[UI] !! No hand in frame, {label} not recorded")
            return True

        try:
            record_sample(self.store, label, normalize(self.current_pose))
        except PoseMatchingError as exc:
            print(f"[REC] Rejected sample for {label}: {exc}")
            return True

        print(f"[REC] {label}: {len(self.store[label])} samples")
        return True

    def _draw_ui(self, frame: np.ndarray) -> None:
        """Overlays match result and sample count onto the frame."""
        if self.current_match is not None:
            match_text, color = f"Gesture: {self.current_match}", COLOR_MATCH
        elif self.reference_set:
            match_text, color = "Gesture: no match", COLOR_NO_MATCH
        else:
            match_text, color = "Gesture: no reference set loaded", COLOR_NO_MATCH

        if self.current_pose is None:
            hand_text = "Hands Detected: 0"
        elif self.current_hand:
            hand_text = f"{self.current_hand} Hand detected"
        else:
            hand_text = "Hand detected"

        total = sum(len(samples) for samples in self.store.values())
        info_text = f"{hand_text} | {match_text} | Labels: {len(self.store)} | Samples: {total}"

        cv2.putText(
            frame, info_text, (10, 30),
            cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2, cv2.LINE_AA
        )
        cv2.putText(
            frame, "Keys: [A-Z] Record pose | [ESC] Quit",
            (10, frame.shape[0] - 20),
            cv2.FONT_HERSHEY_SIMPLEX, 0.5, (0, 0, 0), 1, cv2.LINE_AA
        )

    def _cleanup(self) -> None:
        """Release resources and trigger export dialog."""
        if self.camera.isOpened():
            self.camera.release()
        self.landmarker.close()
        cv2.destroyAllWindows()
        self._save_dialog()

    def _save_dialog(self) -> None:
        """Averages recorded samples and exports them on confirmation."""
        total = sum(len(samples) for samples in self.store.values())
        print(f"\nSession ended. Recorded {total} samples for {len(self.store)} labels.")

        if not self.store:
            print("No samples to export.")
            return

        save = input(f"Export reference set to {self.output_path.name}? [y/n]: ").strip().lower()
        if save == 'y':
            reference_set = build_reference_set(self.store)
            save_reference_set(reference_set, self.output_path)
            print(f"Reference set saved: {', '.join(sorted(reference_set))}")
        else:
            print("Samples discarded.")

    def run(self) -> None:
        """Main loop: read -> detect -> classify -> draw -> keys."""
        try:
            while self.camera.isOpened():
                ret, frame = self.camera.read()
                if not ret:
                    print("Error reading frame.")
                    break

                frame = self.update(frame)
                self._draw_ui(frame)
                cv2.imshow(WINDOW_NAME, frame)

                key = cv2.waitKey(1) & 0xFF
                if not self.handle_key(key):
                    break

        except KeyboardInterrupt:
            pass
        finally:
            self._cleanup()
