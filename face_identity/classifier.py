from __future__ import annotations

from typing import Optional

import numpy as np

from .exceptions import PredictionError
from .logger import setup_logger
from .subspace import SubspaceModel
from .types import UNKNOWN_NAME, PredictionResult

# Relative slack under which two distances count as a tie.
TIE_TOLERANCE = 1e-9


class NearestNeighborClassifier:
    """
    Classify faces by the nearest training projection in eigenface space.

    Distances are plain Euclidean distances between K-dimensional subspace
    coordinates. The classifier holds no per-query state, so one instance can
    serve concurrent callers as long as the model is not replaced underneath it.
    """

    def __init__(self, model: SubspaceModel, threshold: Optional[float] = None):
        if threshold is not None and threshold < 0:
            raise PredictionError(f"Unknown-face threshold must be non-negative, got {threshold}.")
        self.model = model
        self.threshold = threshold
        self.logger = setup_logger(self.__class__.__name__)

    def distances(self, image: np.ndarray) -> np.ndarray:
        query = self.model.project(image)
        return np.linalg.norm(self.model.projections - query, axis=1)

    def predict(self, image: np.ndarray) -> PredictionResult:
        distances = self.distances(image)
        if distances.size == 0:
            raise PredictionError("Subspace model holds no training projections.")

        best = float(distances.min())
        if not np.isfinite(best):
            raise PredictionError("Subspace distances are not finite; the model is corrupt.")
        # First index within tolerance of the minimum wins.
        index = int(np.flatnonzero(distances <= best + TIE_TOLERANCE * max(1.0, best))[0])
        distance = float(distances[index])
        label, name = self.model.identity(index)

        known = self.threshold is None or distance <= self.threshold
        if not known:
            self.logger.debug("Nearest face %s at %.2f exceeds threshold %.2f", name, distance, self.threshold)
            name = UNKNOWN_NAME
        return PredictionResult(index=index, label=label, name=name, distance=distance, known=known)


def predict(model: SubspaceModel, image: np.ndarray, threshold: Optional[float] = None) -> PredictionResult:
    return NearestNeighborClassifier(model, threshold=threshold).predict(image)
