"""
=============================================================================
KEYPOINTS API REFERENCE
=============================================================================

Immutable 2D keypoint positions for the 17 COCO body landmarks.

Storage:
  • values: np.ndarray, shape (17, 2), dtype float32
  • scores: np.ndarray, shape (17,), dtype float32
  • Arrays are read-only after construction

Missing Data:
  • A keypoint is MISSING if ANY component (x or y) is NaN
  • Missing keypoints have score 0.0

Construction:
  • Keypoints(values, scores)               → Copies the arrays
  • Keypoints.create_empty()                → All NaN values, zero scores
  • Keypoints.from_dict({name: (x, y)})     → Named points, optional third score item
  • Keypoints.from_flat_array(flat)         → [x0, y0, s0, x1, y1, s1, ...]

Lookup:
  • keypoints.get_keypoint(name) -> Point2f | None
      Accepts a landmark name, KeypointLandmark or int index.
      Returns None for unknown names and missing keypoints.
=============================================================================
"""

from enum import IntEnum
from typing import Iterable, Mapping, Sequence

import numpy as np
from typing_extensions import Self

from posetracker.utils.PointsAndRects import Point2f


class KeypointLandmark(IntEnum):
    """COCO body landmarks."""
    nose =          0
    left_eye =      1
    right_eye =     2
    left_ear =      3
    right_ear =     4
    left_shoulder = 5
    right_shoulder= 6
    left_elbow =    7
    right_elbow =   8
    left_wrist =    9
    right_wrist =   10
    left_hip =      11
    right_hip =     12
    left_knee =     13
    right_knee =    14
    left_ankle =    15
    right_ankle =   16


KEYPOINT_NAMES: list[str] = [e.name for e in KeypointLandmark]
KEYPOINT_COUNT: int = len(KeypointLandmark)

KeypointKey = KeypointLandmark | int | str


def landmark_from_key(key: KeypointKey) -> KeypointLandmark | None:
    """Resolve a landmark name, enum or index. Returns None if unknown."""
    if isinstance(key, KeypointLandmark):
        return key
    if isinstance(key, str):
        return KeypointLandmark.__members__.get(key)
    if isinstance(key, (int, np.integer)) and 0 <= key < KEYPOINT_COUNT:
        return KeypointLandmark(int(key))
    return None


class Keypoints:
    """Keypoint positions and confidence scores for one detected body."""

    __slots__ = ('_values', '_scores')

    def __init__(self, values: np.ndarray, scores: np.ndarray) -> None:
        values = np.array(values, dtype=np.float32, copy=True)
        scores = np.array(scores, dtype=np.float32, copy=True)
        if values.shape != (KEYPOINT_COUNT, 2):
            raise ValueError(f"Keypoints: values must have shape ({KEYPOINT_COUNT}, 2), got {values.shape}")
        if scores.shape != (KEYPOINT_COUNT,):
            raise ValueError(f"Keypoints: scores must have shape ({KEYPOINT_COUNT},), got {scores.shape}")

        # Missing keypoints carry no confidence
        missing = np.isnan(values).any(axis=1)
        if missing.any() and np.any(scores[missing] != 0.0):
            scores[missing] = 0.0

        values.flags.writeable = False
        scores.flags.writeable = False
        self._values: np.ndarray = values
        self._scores: np.ndarray = scores

    # ========== FACTORIES ==========

    @classmethod
    def create_empty(cls) -> Self:
        """All keypoints missing."""
        return cls(
            np.full((KEYPOINT_COUNT, 2), np.nan, dtype=np.float32),
            np.zeros(KEYPOINT_COUNT, dtype=np.float32)
        )

    @classmethod
    def from_dict(cls, points: Mapping[KeypointKey, Sequence[float]]) -> Self:
        """Create from named points, each (x, y) or (x, y, score).

        Points without a score get score 1.0.

        Raises:
            ValueError: If a name is not a known landmark.
        """
        values = np.full((KEYPOINT_COUNT, 2), np.nan, dtype=np.float32)
        scores = np.zeros(KEYPOINT_COUNT, dtype=np.float32)
        for key, point in points.items():
            landmark = landmark_from_key(key)
            if landmark is None:
                raise ValueError(f"Keypoints: unknown landmark '{key}'")
            values[landmark] = (point[0], point[1])
            scores[landmark] = point[2] if len(point) > 2 else 1.0
        return cls(values, scores)

    @classmethod
    def from_flat_array(cls, flat: Iterable[float]) -> Self:
        """Create from [x0, y0, s0, x1, y1, s1, ...].

        Fewer than 17 triplets leave the remaining keypoints missing.

        Raises:
            ValueError: If the length is not a multiple of 3 or exceeds 17 triplets.
        """
        arr = np.asarray(list(flat), dtype=np.float32)
        if arr.size % 3 != 0:
            raise ValueError(f"Keypoints: flat array length {arr.size} is not a multiple of 3")
        count = arr.size // 3
        if count > KEYPOINT_COUNT:
            raise ValueError(f"Keypoints: got {count} keypoints, at most {KEYPOINT_COUNT} supported")

        triplets = arr.reshape(count, 3)
        values = np.full((KEYPOINT_COUNT, 2), np.nan, dtype=np.float32)
        scores = np.zeros(KEYPOINT_COUNT, dtype=np.float32)
        values[:count] = triplets[:, :2]
        scores[:count] = triplets[:, 2]
        return cls(values, scores)

    # ========== ACCESS ==========

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def scores(self) -> np.ndarray:
        return self._scores

    @property
    def valid_mask(self) -> np.ndarray:
        return ~np.isnan(self._values).any(axis=1)

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(self.valid_mask))

    def __len__(self) -> int:
        return KEYPOINT_COUNT

    def get_keypoint(self, key: KeypointKey) -> Point2f | None:
        """Position of a keypoint, or None if unknown or missing."""
        landmark = landmark_from_key(key)
        if landmark is None:
            return None
        x, y = self._values[landmark]
        if np.isnan(x) or np.isnan(y):
            return None
        return Point2f(float(x), float(y))

    def get_score(self, key: KeypointKey) -> float:
        landmark = landmark_from_key(key)
        if landmark is None:
            return 0.0
        return float(self._scores[landmark])

    def __repr__(self) -> str:
        return f"Keypoints(valid={self.valid_count}/{KEYPOINT_COUNT})"
