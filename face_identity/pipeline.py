from __future__ import annotations

from pathlib import Path
from threading import Lock
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .classifier import NearestNeighborClassifier
from .exceptions import DimensionMismatchError, QueryError, RegionError
from .logger import setup_logger
from .subspace import SubspaceModel
from .types import ERROR_NAME, FaceAnnotation, Rect


def crop_region(frame: np.ndarray, rect: Rect) -> np.ndarray:
    try:
        x, y, w, h = (int(v) for v in rect)
    except (TypeError, ValueError) as exc:
        raise RegionError(f"Rectangle {rect!r} is not an (x, y, width, height) tuple.") from exc
    if w <= 0 or h <= 0:
        raise RegionError(f"Rectangle {tuple(rect)} has non-positive size.")

    frame_h, frame_w = frame.shape[:2]
    if x < 0 or y < 0 or x + w > frame_w or y + h > frame_h:
        raise RegionError(f"Rectangle {tuple(rect)} is outside the {frame_w}x{frame_h} frame.")
    return frame[y : y + h, x : x + w]


def normalize_face(region: np.ndarray, image_size: Tuple[int, int]) -> np.ndarray:
    """Convert a cropped BGR (or already gray) region to a grayscale image of ``image_size``."""
    try:
        gray = _to_gray(region)
        width, height = image_size
        if gray.shape[:2] == (height, width):
            return np.ascontiguousarray(gray)
        interpolation = cv2.INTER_AREA if gray.shape[1] > width else cv2.INTER_LINEAR
        return cv2.resize(gray, (width, height), interpolation=interpolation)
    except cv2.error as exc:
        raise RegionError(
            f"Face region of shape {region.shape} and dtype {region.dtype} cannot be normalized."
        ) from exc


def _to_gray(region: np.ndarray) -> np.ndarray:
    if region.ndim == 3 and region.shape[2] == 4:
        return cv2.cvtColor(region, cv2.COLOR_BGRA2GRAY)
    if region.ndim == 3 and region.shape[2] == 3:
        return cv2.cvtColor(region, cv2.COLOR_BGR2GRAY)
    if region.ndim == 3 and region.shape[2] == 1:
        return np.ascontiguousarray(region[:, :, 0])
    return region


def read_query_image(path: Path) -> np.ndarray:
    """Read a face image submitted for identification as grayscale."""
    path = Path(path)
    if not path.is_file():
        raise QueryError(f"Query image '{path}' does not exist.")
    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if image is None:
        raise QueryError(f"Query image '{path}' could not be decoded.")
    return image


class RecognitionPipeline:
    def __init__(self, model: SubspaceModel, threshold: Optional[float] = None):
        self.threshold = threshold
        self.logger = setup_logger(self.__class__.__name__)
        self._lock = Lock()
        self._classifier = NearestNeighborClassifier(model, threshold=threshold)

    @property
    def model(self) -> SubspaceModel:
        with self._lock:
            return self._classifier.model

    def swap_model(self, model: SubspaceModel) -> None:
        classifier = NearestNeighborClassifier(model, threshold=self.threshold)
        with self._lock:
            self._classifier = classifier
        self.logger.info("Switched to model with %d samples, %d components", model.n_samples, model.n_components)

    def process_frame(self, frame: np.ndarray, rects: Sequence[Rect]) -> List[FaceAnnotation]:
        with self._lock:
            classifier = self._classifier

        annotations: List[FaceAnnotation] = []
        for rect in rects:
            rect = tuple(rect)
            try:
                region = crop_region(frame, rect)
                face = normalize_face(region, classifier.model.image_size)
                result = classifier.predict(face)
            except (RegionError, DimensionMismatchError) as exc:
                self.logger.warning("Skipping face %s: %s", rect, exc)
                annotations.append(FaceAnnotation(rect=rect, name=ERROR_NAME, error=str(exc)))
                continue

            annotations.append(
                FaceAnnotation(rect=rect, name=result.name, label=result.label, distance=result.distance)
            )
        return annotations
