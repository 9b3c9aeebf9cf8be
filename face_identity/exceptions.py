class RecognitionError(Exception):
    """Base exception for the face identity system."""


class CorpusError(RecognitionError):
    """Raised when the training corpus directory or one of its files is unusable."""


class TrainingError(RecognitionError):
    """Raised when the corpus cannot produce a subspace model."""


class PredictionError(RecognitionError):
    """Raised when a model is unbuilt or its internal tables disagree."""


class DimensionMismatchError(RecognitionError):
    """Raised when a query image does not match the model's image size."""


class RegionError(RecognitionError):
    """Raised when a detected face rectangle cannot be cropped from the frame."""


class CameraError(RecognitionError):
    """Raised when webcam access fails."""


class DetectorError(RecognitionError):
    """Raised when the face detector cannot be initialized or run."""


class QueryError(RecognitionError):
    """Raised when an image submitted for identification cannot be read."""
