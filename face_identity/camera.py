from typing import Iterator, Optional, Tuple

import cv2
import numpy as np

from .config import get_settings
from .exceptions import CameraError
from .logger import setup_logger


class CameraStream:
    """Webcam frames as BGR arrays; tolerates a few dropped reads before giving up."""

    def __init__(self, camera_index: Optional[int] = None, max_failed_reads: int = 5):
        settings = get_settings()
        self.camera_index = settings.camera_index if camera_index is None else camera_index
        self.requested_size = (settings.frame_width, settings.frame_height)
        self.max_failed_reads = max(1, max_failed_reads)
        self.logger = setup_logger(self.__class__.__name__)
        self._cap: Optional[cv2.VideoCapture] = None

    def __enter__(self) -> "CameraStream":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    @property
    def frame_size(self) -> Tuple[int, int]:
        """Size the device actually delivers, which may differ from the requested one."""
        if self._cap is None:
            raise CameraError("Webcam stream is not initialized.")
        width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        return width, height

    def open(self) -> None:
        cap = cv2.VideoCapture(self.camera_index)
        if not cap.isOpened():
            cap.release()
            raise CameraError(f"Unable to open webcam index {self.camera_index}.")

        width, height = self.requested_size
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self._cap = cap
        self.logger.info("Opened webcam %d at %dx%d", self.camera_index, *self.frame_size)

    def read(self) -> np.ndarray:
        if self._cap is None:
            raise CameraError("Webcam stream is not initialized.")

        for _ in range(self.max_failed_reads):
            success, frame = self._cap.read()
            if success and frame is not None:
                return frame
        raise CameraError(f"Webcam {self.camera_index} returned no frame in {self.max_failed_reads} attempts.")

    def frames(self) -> Iterator[np.ndarray]:
        while self._cap is not None:
            yield self.read()

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
