from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from .config import get_settings
from .exceptions import DetectorError
from .types import Rect


class HaarFaceDetector:
    """Frontal face detector backed by an OpenCV Haar cascade."""

    def __init__(
        self,
        cascade_path: Optional[Path] = None,
        scale_factor: float = 1.1,
        min_neighbors: int = 5,
        min_size: int = 40,
    ):
        self.cascade_path = Path(cascade_path or get_settings().cascade_path)
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = min_size

        cascade_cls = getattr(cv2, "CascadeClassifier", None)
        if cascade_cls is None:
            raise DetectorError(
                f"OpenCV {cv2.__version__} does not provide CascadeClassifier; install opencv-python<5."
            )
        try:
            self.classifier = cascade_cls(str(self.cascade_path))
        except cv2.error as exc:
            raise DetectorError(f"Failed to load face cascade from '{self.cascade_path}': {exc}") from exc
        if self.classifier.empty():
            raise DetectorError(f"Failed to load face cascade from '{self.cascade_path}'.")

    def detect(self, frame: np.ndarray) -> List[Rect]:
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame
        try:
            boxes = self.classifier.detectMultiScale(
                gray,
                scaleFactor=self.scale_factor,
                minNeighbors=self.min_neighbors,
                minSize=(self.min_size, self.min_size),
            )
        except cv2.error as exc:
            raise DetectorError(f"Face detection failed: {exc}") from exc
        return [(int(x), int(y), int(w), int(h)) for x, y, w, h in boxes]
