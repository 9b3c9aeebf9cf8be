from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .exceptions import CorpusError
from .logger import setup_logger
from .types import LabeledSample

IMG_EXTS = (".jpg", ".pgm", ".png")

logger = setup_logger("CorpusLoader")


def parse_filename(filename: str) -> Tuple[int, str]:
    """
    Split a corpus filename of the form ``<label>-<name>_<anything>.<ext>``.

    The label is everything before the first ``-`` and must be a non-negative
    integer. The name is the text between the first ``-`` and the first ``_``.
    """
    stem = Path(filename).name
    dash = stem.find("-")
    underscore = stem.find("_")
    if dash < 0 or underscore < 0:
        raise CorpusError(f"Filename '{stem}' does not match '<label>-<name>_<index>.<ext>'.")
    if underscore < dash:
        raise CorpusError(f"Filename '{stem}' has '_' before '-'; expected '<label>-<name>_<index>.<ext>'.")

    raw_label = stem[:dash]
    if not raw_label.isdecimal():
        raise CorpusError(f"Filename '{stem}' has a non-numeric label '{raw_label}'.")

    name = stem[dash + 1 : underscore]
    if not name:
        raise CorpusError(f"Filename '{stem}' has an empty person name.")
    return int(raw_label), name


def parse_label(filename: str) -> int:
    return parse_filename(filename)[0]


def parse_name(filename: str) -> str:
    return parse_filename(filename)[1]


def list_image_files(directory: Path) -> List[Path]:
    root = Path(directory)
    if not root.exists():
        raise CorpusError(f"Corpus directory '{root}' does not exist.")
    if not root.is_dir():
        raise CorpusError(f"Corpus path '{root}' is not a directory.")

    try:
        entries = sorted(root.iterdir(), key=lambda path: path.name)
    except OSError as exc:
        raise CorpusError(f"Corpus directory '{root}' cannot be read: {exc}") from exc

    return [path for path in entries if path.is_file() and path.suffix.lower() in IMG_EXTS]


def read_grayscale(path: Path) -> np.ndarray:
    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if image is None:
        raise CorpusError(f"Image '{path}' could not be decoded.")
    return image


def load_corpus(directory: Path, image_size: Optional[Tuple[int, int]] = None) -> List[LabeledSample]:
    """
    Load every labeled face image in ``directory``.

    Images are read as grayscale and must already share one (width, height);
    when ``image_size`` is given they must match it exactly. Nothing is
    resized here.
    """
    files = list_image_files(directory)
    if not files:
        raise CorpusError(f"Corpus directory '{directory}' contains no {'/'.join(IMG_EXTS)} images.")

    samples: List[LabeledSample] = []
    expected = image_size
    for path in files:
        label, name = parse_filename(path.name)
        image = read_grayscale(path)
        sample = LabeledSample(label=label, person_name=name, image=image, source=path)

        if expected is None:
            expected = sample.size
        elif sample.size != expected:
            raise CorpusError(
                f"Image '{path.name}' is {sample.size[0]}x{sample.size[1]}, "
                f"expected {expected[0]}x{expected[1]}."
            )
        samples.append(sample)

    people = {sample.person_name for sample in samples}
    logger.info("Loaded %d samples of %d people from %s", len(samples), len(people), directory)
    return samples
