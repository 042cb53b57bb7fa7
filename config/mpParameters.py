"""MediaPipe runtime parameters."""

from __future__ import annotations
from typing import Final

MAX_NUM_HANDS: Final[int] = 1
MIN_DETECTION_CONFIDENCE: Final[float] = 0.3
MIN_PRESENCE_CONFIDENCE: Final[float] = 0.3
MIN_TRACKING_CONFIDENCE: Final[float] = 0.3
