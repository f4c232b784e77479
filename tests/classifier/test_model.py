"""Tests for the precedence classifier."""

import joblib
import pytest

from event_assembly.classifier.model import (
    CLASSIFIER_LABELS,
    E1_PRECEDES_E2,
    E2_PRECEDES_E1,
    NO_RELATION,
    PrecedenceClassifier,
)
from event_assembly.exceptions import (
    ClassifierError,
    ModelNotTrainedError,
    UnsupportedRelationLabelError,
)


# =============================================================================
# Fixtures
# =============================================================================


CUES = {
    E1_PRECEDES_E2: "followed by",
    E2_PRECEDES_E1: "after",
    NO_RELATION: "and",
}


@pytest.fixture
def examples(factory):
    """Small training set where the cue word decides the label."""
    data = []
    for i in range(6):
        for label, cue in CUES.items():
            text = f"binding {cue} phosphorylation"
            n = len(text.split())
            doc = factory.document(text, doc_id=f"D{i}-{label}")
            first = factory.event("Binding", doc, 0, 0, 1, trigger=0)
            second = factory.event("Phosphorylation", doc, 0, n - 1, n, trigger=n - 1)
            data.append((first, second, label))
    return data


@pytest.fixture
def trained(examples):
    return PrecedenceClassifier().fit(examples)


# =============================================================================
# Tests
# =============================================================================


class TestFit:
    """Tests for training."""

    def test_fit(self, trained):
        """Test a fitted model exposes its classes."""
        assert trained.is_fitted
        assert sorted(trained.classes) == sorted(CLASSIFIER_LABELS)

    def test_unknown_label(self, examples):
        """Test labels outside the annotation vocabulary are rejected."""
        e1, e2, _ = examples[0]
        with pytest.raises(UnsupportedRelationLabelError):
            PrecedenceClassifier().fit(examples + [(e1, e2, "E1 causes E2")])

    def test_single_class(self, examples):
        """Test training needs at least two classes."""
        only_none = [example for example in examples if example[2] == NO_RELATION]
        with pytest.raises(ClassifierError, match="two classes"):
            PrecedenceClassifier().fit(only_none)


class TestPredict:
    """Tests for prediction."""

    def test_unfitted(self, examples):
        """Test predicting before fit raises ModelNotTrainedError."""
        e1, e2, _ = examples[0]
        with pytest.raises(ModelNotTrainedError):
            PrecedenceClassifier().predict(e1, e2)

    def test_predict(self, trained, examples):
        """Test predictions are a known label with a probability."""
        e1, e2, _ = examples[0]

        label, probability = trained.predict(e1, e2)

        assert label in CLASSIFIER_LABELS
        assert 0.0 <= probability <= 1.0

    def test_learns_cue(self, trained, examples):
        """Test the cue words separate the training classes."""
        for e1, e2, label in examples[:3]:
            assert trained.predict(e1, e2)[0] == label

    def test_predict_many_empty(self, trained):
        """Test an empty batch gives no predictions."""
        assert trained.predict_many([]) == []

    def test_probabilities_sum_to_one(self, trained, examples):
        """Test each row of predict_proba is a distribution."""
        pairs = [(e1, e2) for e1, e2, _ in examples[:4]]
        probabilities = trained.predict_proba(pairs)

        assert probabilities.shape == (4, 3)
        assert probabilities.sum(axis=1) == pytest.approx([1.0] * 4)


class TestPersistence:
    """Tests for save/load."""

    def test_round_trip(self, trained, examples, tmp_path):
        """Test a saved model predicts the same after loading."""
        path = trained.save(tmp_path / "models" / "precedence.joblib")

        loaded = PrecedenceClassifier.load(path)

        e1, e2, _ = examples[1]
        assert loaded.predict(e1, e2) == trained.predict(e1, e2)

    def test_save_unfitted(self, tmp_path):
        """Test saving an unfitted model raises."""
        with pytest.raises(ModelNotTrainedError):
            PrecedenceClassifier().save(tmp_path / "model.joblib")

    def test_load_missing(self, tmp_path):
        """Test loading a missing file raises ClassifierError."""
        with pytest.raises(ClassifierError):
            PrecedenceClassifier.load(tmp_path / "missing.joblib")

    def test_load_wrong_object(self, tmp_path):
        """Test loading something that is not a model raises ClassifierError."""
        path = tmp_path / "other.joblib"
        joblib.dump({"weights": [1, 2, 3]}, path)

        with pytest.raises(ClassifierError, match="does not contain"):
            PrecedenceClassifier.load(path)
