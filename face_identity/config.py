from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional, Tuple

import cv2
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"

CASCADE_FILE = "haarcascade_frontalface_default.xml"
_CASCADE_DIR = getattr(getattr(cv2, "data", None), "haarcascades", "")
DEFAULT_CASCADE = Path(_CASCADE_DIR) / CASCADE_FILE


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="FACE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    training_dir: Path = DATA_DIR / "training"
    log_dir: Path = BASE_DIR / "logs"
    log_level: str = "INFO"

    # Every corpus image and every query face is normalized to this canvas.
    image_width: int = 125
    image_height: int = 150
    max_components: int = 100
    # Unset means closed-set recognition: the nearest person is always reported.
    unknown_threshold: Optional[float] = None

    camera_index: int = 0
    frame_width: int = 1280
    frame_height: int = 720
    cascade_path: Path = DEFAULT_CASCADE

    @property
    def image_size(self) -> Tuple[int, int]:
        return self.image_width, self.image_height


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
