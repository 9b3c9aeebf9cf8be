from .classifier import NearestNeighborClassifier, predict
from .corpus import load_corpus, parse_filename, parse_label, parse_name
from .exceptions import (
    CorpusError,
    DimensionMismatchError,
    PredictionError,
    QueryError,
    RecognitionError,
    RegionError,
    TrainingError,
)
from .pipeline import RecognitionPipeline, read_query_image
from .subspace import SubspaceModel, train_subspace
from .types import FaceAnnotation, LabeledSample, PredictionResult

__all__ = [
    "CorpusError",
    "DimensionMismatchError",
    "FaceAnnotation",
    "LabeledSample",
    "NearestNeighborClassifier",
    "PredictionError",
    "PredictionResult",
    "QueryError",
    "RecognitionError",
    "RecognitionPipeline",
    "RegionError",
    "SubspaceModel",
    "TrainingError",
    "load_corpus",
    "parse_filename",
    "parse_label",
    "parse_name",
    "predict",
    "read_query_image",
    "train_subspace",
]
