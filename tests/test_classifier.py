from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from face_identity.classifier import NearestNeighborClassifier, predict
from face_identity.exceptions import DimensionMismatchError, PredictionError
from face_identity.subspace import SubspaceModel, train_subspace
from face_identity.types import UNKNOWN_NAME, LabeledSample


def test_every_training_sample_recognizes_itself(model, samples):
    classifier = NearestNeighborClassifier(model)
    for index, sample in enumerate(samples):
        result = classifier.predict(sample.image)
        assert result.index == index
        assert result.label == sample.label
        assert result.name == sample.person_name
        assert result.distance == pytest.approx(0.0, abs=1e-6)
        assert result.known


def test_unseen_sample_of_known_person(model, make_face):
    result = predict(model, make_face(2, sample_seed=99))
    assert result.name == "gabi"
    assert result.label == 2
    assert result.distance > 0.0


def test_retraining_classifies_identically(samples):
    first = train_subspace(samples)
    second = train_subspace(samples)
    for sample in samples:
        a = predict(first, sample.image)
        b = predict(second, sample.image)
        assert (a.index, a.label, a.name) == (b.index, b.label, b.name)


def test_duplicate_images_resolve_to_lowest_index(make_face):
    face = make_face(1)
    samples = [
        LabeledSample(2, "gabi", make_face(2)),
        LabeledSample(1, "andrew", face),
        LabeledSample(3, "andrew-twin", face.copy()),
    ]
    model = train_subspace(samples)

    result = predict(model, face)

    assert result.index == 1
    assert result.name == "andrew"


def test_andrew_gabi_scenario(make_face):
    img_a1 = make_face(1, sample_seed=1)
    img_a2 = make_face(1, sample_seed=2)
    img_b1 = make_face(2, sample_seed=3)
    model = train_subspace(
        [LabeledSample(1, "andrew", img_a1), LabeledSample(1, "andrew", img_a2), LabeledSample(2, "gabi", img_b1)]
    )

    own = predict(model, img_a1)
    assert own.name == "andrew"
    assert own.distance == pytest.approx(0.0, abs=1e-6)

    gray = predict(model, np.full((24, 20), 128, dtype=np.uint8))
    assert gray.name in {"andrew", "gabi"}
    assert np.isfinite(gray.distance)
    assert gray.distance > 1.0
    self_distances = [predict(model, img).distance for img in (img_a1, img_a2, img_b1)]
    assert gray.distance > max(self_distances)


def test_distance_is_euclidean_in_subspace(model, make_face):
    query = make_face(3, sample_seed=42)
    coordinates = model.project(query)
    result = predict(model, query)
    expected = np.linalg.norm(model.projections[result.index] - coordinates)
    assert result.distance == pytest.approx(expected)
    assert result.distance == pytest.approx(float(np.min(NearestNeighborClassifier(model).distances(query))))


def test_threshold_marks_far_faces_unknown(model):
    gray = np.full((24, 20), 128, dtype=np.uint8)
    closed = predict(model, gray)

    rejected = predict(model, gray, threshold=closed.distance / 2)
    assert rejected.name == UNKNOWN_NAME
    assert not rejected.known
    assert rejected.index == closed.index
    assert rejected.distance == pytest.approx(closed.distance)

    accepted = predict(model, gray, threshold=closed.distance * 2)
    assert accepted.name == closed.name
    assert accepted.known


def test_negative_threshold_is_rejected(model):
    with pytest.raises(PredictionError):
        NearestNeighborClassifier(model, threshold=-1.0)


def test_mismatched_query_size(model):
    with pytest.raises(DimensionMismatchError):
        predict(model, np.zeros((150, 125), dtype=np.uint8))


def test_model_without_components_fails():
    model = SubspaceModel(
        mean=np.zeros(6),
        basis=np.zeros((0, 6)),
        eigenvalues=np.zeros(0),
        projections=np.zeros((1, 0)),
        labels=(1,),
        names=("andrew",),
        image_size=(3, 2),
        total_variance=0.0,
    )
    with pytest.raises(PredictionError):
        predict(model, np.zeros((2, 3), dtype=np.uint8))


def test_misaligned_model_tables_fail(model):
    broken = SubspaceModel(
        mean=model.mean,
        basis=model.basis,
        eigenvalues=model.eigenvalues,
        projections=model.projections,
        labels=model.labels[:-1],
        names=model.names[:-1],
        image_size=model.image_size,
        total_variance=model.total_variance,
    )
    with pytest.raises(PredictionError, match="aligned"):
        predict(broken, np.zeros((24, 20), dtype=np.uint8))


def test_concurrent_predictions_share_one_model(model, samples):
    classifier = NearestNeighborClassifier(model)
    images = [s.image for s in samples] * 4

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(classifier.predict, images))

    assert [r.index for r in results] == list(range(len(samples))) * 4
