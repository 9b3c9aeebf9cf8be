from pathlib import Path
from typing import List, Sequence

import cv2
import numpy as np

from .types import UNKNOWN_NAME, FaceAnnotation

KNOWN_COLOR = (30, 180, 30)
UNKNOWN_COLOR = (20, 20, 220)


def annotation_text(annotation: FaceAnnotation) -> str:
    if not annotation.ok or annotation.distance is None:
        return annotation.name
    return f"{annotation.name} {annotation.distance:.0f}"


def draw_annotations(frame: np.ndarray, annotations: Sequence[FaceAnnotation]) -> np.ndarray:
    for annotation in annotations:
        x, y, w, h = annotation.rect
        known = annotation.ok and annotation.name != UNKNOWN_NAME
        color = KNOWN_COLOR if known else UNKNOWN_COLOR
        cv2.rectangle(frame, (x, y), (x + w, y + h), color, 2)
        cv2.putText(
            frame,
            annotation_text(annotation),
            (x, max(20, y - 10)),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.65,
            color,
            2,
            cv2.LINE_AA,
        )
    return frame


def write_eigenfaces(faces: Sequence[np.ndarray], output_dir: Path) -> List[Path]:
    """Write the mean face and eigenfaces as ``mean.png``, ``eigenface_000.png``, ..."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    for index, face in enumerate(faces):
        name = "mean.png" if index == 0 else f"eigenface_{index - 1:03d}.png"
        path = output_dir / name
        if not cv2.imwrite(str(path), face):
            raise OSError(f"Failed to write '{path}'.")
        written.append(path)
    return written


def write_match(image: np.ndarray, person_name: str, result_dir: Path) -> Path:
    """Save the training face a query matched as ``<person_name>.png``."""
    result_dir = Path(result_dir)
    result_dir.mkdir(parents=True, exist_ok=True)
    path = result_dir / f"{person_name}.png"
    if not cv2.imwrite(str(path), image):
        raise OSError(f"Failed to write '{path}'.")
    return path
