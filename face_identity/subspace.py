"""
Eigenface subspace training.

A corpus of N equally sized grayscale faces is flattened into an N x D matrix
(D = width * height), centered on its mean face, and decomposed with a thin
SVD. The right singular vectors are the principal directions of the sample
covariance, already ordered by descending variance, so the first K rows form
the eigenface basis. Every training face is stored only as its K coordinates
in that basis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .config import get_settings
from .exceptions import DimensionMismatchError, PredictionError, TrainingError
from .logger import setup_logger
from .types import LabeledSample

logger = setup_logger("SubspaceTrainer")


@dataclass(frozen=True, eq=False)
class SubspaceModel:
    mean: np.ndarray
    basis: np.ndarray
    eigenvalues: np.ndarray
    projections: np.ndarray
    labels: Tuple[int, ...]
    names: Tuple[str, ...]
    image_size: Tuple[int, int]
    total_variance: float

    @property
    def n_components(self) -> int:
        return int(self.basis.shape[0])

    @property
    def n_samples(self) -> int:
        return len(self.labels)

    @property
    def explained_variance_ratio(self) -> np.ndarray:
        if self.total_variance <= 0.0:
            return np.zeros_like(self.eigenvalues)
        return self.eigenvalues / self.total_variance

    def identity(self, index: int) -> Tuple[int, str]:
        return self.labels[index], self.names[index]

    def validate(self) -> None:
        k = self.n_components
        if k == 0:
            raise PredictionError("Subspace model has no basis vectors; it was never trained.")
        width, height = self.image_size
        if self.basis.shape[1] != width * height or self.mean.shape != (width * height,):
            raise PredictionError("Subspace basis and mean do not match the model image size.")
        if self.projections.shape != (self.n_samples, k) or len(self.names) != self.n_samples:
            raise PredictionError("Training projections are not aligned with the label table.")

    def project(self, image: np.ndarray) -> np.ndarray:
        """Return the K subspace coordinates of a (height, width) grayscale image."""
        self.validate()
        image = np.asarray(image)
        width, height = self.image_size
        if image.ndim != 2 or image.shape != (height, width):
            raise DimensionMismatchError(
                f"Query image has shape {image.shape}, model expects ({height}, {width})."
            )
        centered = image.reshape(-1).astype(np.float64) - self.mean
        return self.basis @ centered

    def eigenface_images(self) -> List[np.ndarray]:
        """Mean face followed by every basis vector, each rescaled to a displayable uint8 image."""
        width, height = self.image_size
        faces = [np.clip(self.mean, 0, 255).reshape(height, width).astype(np.uint8)]
        for vector in self.basis:
            face = cv2.normalize(vector.reshape(height, width), None, 0, 255, cv2.NORM_MINMAX, dtype=cv2.CV_8U)
            faces.append(face)
        return faces


def train_subspace(samples: Sequence[LabeledSample], max_components: Optional[int] = None) -> SubspaceModel:
    """
    Build an eigenface model from ``samples``.

    Retains K = min(N - 1, max_components, D) directions. A centered corpus of
    N samples spans at most N - 1 dimensions, so directions beyond that carry
    no variance. Pixel-identical pairs are fine; a corpus with no variance at
    all is rejected.
    """
    n_samples = len(samples)
    if n_samples < 2:
        raise TrainingError(f"Training needs at least 2 samples, got {n_samples}.")

    cap = get_settings().max_components if max_components is None else max_components
    if cap < 1:
        raise TrainingError(f"max_components must be at least 1, got {cap}.")

    data, image_size = _stack_samples(samples)
    mean = data.mean(axis=0)
    centered = data - mean

    total_variance = float(np.sum(centered**2) / (n_samples - 1))
    if total_variance <= 0.0:
        raise TrainingError("All training samples are pixel-identical; there is no variance to model.")

    try:
        _, singular_values, vt = np.linalg.svd(centered, full_matrices=False)
    except np.linalg.LinAlgError as exc:
        raise TrainingError(f"Decomposition of the training data failed: {exc}") from exc

    k = min(n_samples - 1, cap, vt.shape[0])
    basis = _orient(vt[:k])
    eigenvalues = singular_values[:k] ** 2 / (n_samples - 1)
    projections = centered @ basis.T

    model = SubspaceModel(
        mean=_frozen(mean),
        basis=_frozen(basis),
        eigenvalues=_frozen(eigenvalues),
        projections=_frozen(projections),
        labels=tuple(sample.label for sample in samples),
        names=tuple(sample.person_name for sample in samples),
        image_size=image_size,
        total_variance=total_variance,
    )
    logger.info(
        "Trained subspace: samples=%d components=%d size=%dx%d captured_variance=%.3f",
        n_samples,
        k,
        image_size[0],
        image_size[1],
        float(model.explained_variance_ratio.sum()),
    )
    return model


def _stack_samples(samples: Sequence[LabeledSample]) -> Tuple[np.ndarray, Tuple[int, int]]:
    first = np.asarray(samples[0].image)
    if first.ndim != 2:
        raise TrainingError(f"Training images must be 2-D grayscale, got shape {first.shape}.")

    rows = []
    for index, sample in enumerate(samples):
        image = np.asarray(sample.image)
        if image.shape != first.shape:
            raise TrainingError(
                f"Sample {index} ({sample.person_name}) has shape {image.shape}, expected {first.shape}."
            )
        rows.append(image.reshape(-1).astype(np.float64))

    height, width = first.shape
    return np.vstack(rows), (width, height)


def _orient(vectors: np.ndarray) -> np.ndarray:
    # SVD signs are arbitrary; make the largest-magnitude entry of each vector positive.
    pivots = np.argmax(np.abs(vectors), axis=1)
    signs = np.sign(vectors[np.arange(vectors.shape[0]), pivots])
    signs[signs == 0] = 1.0
    return vectors * signs[:, None]


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.ascontiguousarray(array)
    array.setflags(write=False)
    return array
