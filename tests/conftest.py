import os
import tempfile
from pathlib import Path

# Settings are cached on first use, so test overrides must be in place before import.
os.environ.setdefault("FACE_LOG_DIR", str(Path(tempfile.gettempdir()) / "face_identity_test_logs"))
os.environ["FACE_IMAGE_WIDTH"] = "20"
os.environ["FACE_IMAGE_HEIGHT"] = "24"

import cv2
import numpy as np
import pytest

from face_identity.corpus import load_corpus
from face_identity.subspace import train_subspace

WIDTH = 20
HEIGHT = 24

PEOPLE = {1: "andrew", 2: "gabi", 3: "peeranut"}


def _face(person_seed: int, sample_seed=None, noise: int = 8) -> np.ndarray:
    base = np.random.default_rng(person_seed).integers(40, 216, size=(HEIGHT, WIDTH)).astype(np.int16)
    if sample_seed is not None:
        jitter = np.random.default_rng(1000 + sample_seed).integers(-noise, noise + 1, size=base.shape)
        base = base + jitter
    return np.clip(base, 0, 255).astype(np.uint8)


@pytest.fixture
def make_face():
    return _face


@pytest.fixture
def write_corpus():
    def _write(directory: Path, entries) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        for filename, image in entries:
            assert cv2.imwrite(str(directory / filename), image)
        return directory

    return _write


@pytest.fixture
def corpus_dir(tmp_path, write_corpus):
    entries = []
    for label, name in PEOPLE.items():
        for index in range(3):
            entries.append((f"{label}-{name}_{index}.png", _face(label, sample_seed=label * 10 + index)))
    return write_corpus(tmp_path / "training", entries)


@pytest.fixture
def samples(corpus_dir):
    return load_corpus(corpus_dir)


@pytest.fixture
def model(samples):
    return train_subspace(samples)
