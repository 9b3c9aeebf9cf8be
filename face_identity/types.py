from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np

# (x, y, width, height) in frame pixel coordinates.
Rect = Tuple[int, int, int, int]

UNKNOWN_NAME = "unknown"
ERROR_NAME = "error"


@dataclass(frozen=True)
class LabeledSample:
    label: int
    person_name: str
    image: np.ndarray
    source: Optional[Path] = None

    @property
    def size(self) -> Tuple[int, int]:
        height, width = self.image.shape[:2]
        return width, height


@dataclass(frozen=True)
class PredictionResult:
    index: int
    label: int
    name: str
    distance: float
    known: bool = True


@dataclass
class FaceAnnotation:
    rect: Rect
    name: str
    label: Optional[int] = None
    distance: Optional[float] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
