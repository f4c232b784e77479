"""Feature-based precedence classifier.

A logistic regression over DictVectorizer features predicts, for an
ordered pair of events (E1, E2), one of the annotation labels:

- ``E1 precedes E2``
- ``E2 precedes E1``
- ``None``

Example:
    >>> classifier = PrecedenceClassifier()
    >>> classifier.fit(training_examples(annotations))
    >>> label, probability = classifier.predict(e1, e2)
    >>> classifier.save("models/precedence.joblib")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

import joblib
import numpy as np
from sklearn.feature_extraction import DictVectorizer
from sklearn.linear_model import LogisticRegression
from sklearn.pipeline import Pipeline

from event_assembly.classifier.features import pair_features
from event_assembly.config import ClassifierConfig
from event_assembly.exceptions import (
    ClassifierError,
    ModelNotTrainedError,
    UnsupportedRelationLabelError,
)
from event_assembly.mentions import Mention
from event_assembly.sieves.tense import TenseAspectDetector

logger = logging.getLogger(__name__)

E1_PRECEDES_E2 = "E1 precedes E2"
E2_PRECEDES_E1 = "E2 precedes E1"
NO_RELATION = "None"

CLASSIFIER_LABELS = (E1_PRECEDES_E2, E2_PRECEDES_E1, NO_RELATION)

TrainingExample = tuple[Mention, Mention, str]


class PrecedenceClassifier:
    """Statistical precedence model over event-pair features."""

    def __init__(self, config: ClassifierConfig | None = None):
        self.config = config or ClassifierConfig()
        self._detector = TenseAspectDetector()
        self._pipeline: Pipeline | None = None

    @property
    def is_fitted(self) -> bool:
        return self._pipeline is not None

    @property
    def classes(self) -> list[str]:
        if self._pipeline is None:
            raise ModelNotTrainedError()
        return list(self._pipeline.named_steps["model"].classes_)

    def features(self, e1: Mention, e2: Mention) -> dict:
        return pair_features(e1, e2, self._detector)

    def fit(self, examples: Iterable[TrainingExample]) -> "PrecedenceClassifier":
        """Train on (e1, e2, label) triples.

        Raises:
            UnsupportedRelationLabelError: For labels outside CLASSIFIER_LABELS.
            ClassifierError: When the data holds fewer than two classes.
        """
        rows = []
        labels = []
        for e1, e2, label in examples:
            if label not in CLASSIFIER_LABELS:
                raise UnsupportedRelationLabelError(label)
            rows.append(self.features(e1, e2))
            labels.append(label)

        if len(set(labels)) < 2:
            raise ClassifierError(
                f"Need at least two classes to train, got {sorted(set(labels))}"
            )

        pipeline = Pipeline([
            ("vectorizer", DictVectorizer(sparse=True)),
            ("model", LogisticRegression(
                C=self.config.regularization,
                max_iter=self.config.max_iter,
                class_weight="balanced",
                random_state=self.config.random_state,
            )),
        ])
        pipeline.fit(rows, labels)
        self._pipeline = pipeline
        logger.info(f"Trained precedence classifier on {len(rows)} pairs")
        return self

    def predict_proba(self, pairs: Sequence[tuple[Mention, Mention]]) -> np.ndarray:
        """Class probabilities per pair, columns ordered as ``classes``."""
        if self._pipeline is None:
            raise ModelNotTrainedError()
        if not pairs:
            return np.zeros((0, len(self.classes)))
        rows = [self.features(e1, e2) for e1, e2 in pairs]
        return self._pipeline.predict_proba(rows)

    def predict(self, e1: Mention, e2: Mention) -> tuple[str, float]:
        """Most likely label for the pair and its probability."""
        return self.predict_many([(e1, e2)])[0]

    def predict_many(self, pairs: Sequence[tuple[Mention, Mention]]) -> list[tuple[str, float]]:
        probabilities = self.predict_proba(pairs)
        classes = self.classes
        best = np.argmax(probabilities, axis=1) if len(pairs) else []
        return [(classes[j], float(probabilities[i, j])) for i, j in enumerate(best)]

    def save(self, path: str | Path) -> Path:
        """Persist the fitted model with joblib."""
        if self._pipeline is None:
            raise ModelNotTrainedError()
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self._pipeline, path)
        logger.info(f"Saved precedence classifier to {path}")
        return path

    @classmethod
    def load(cls, path: str | Path, config: ClassifierConfig | None = None) -> "PrecedenceClassifier":
        """Load a model saved by ``save``.

        Raises:
            ClassifierError: If the file is missing or holds something else.
        """
        path = Path(path)
        try:
            pipeline = joblib.load(path)
        except (OSError, EOFError, ValueError) as e:
            raise ClassifierError(f"Cannot load precedence classifier from {path}", cause=e) from e
        if not isinstance(pipeline, Pipeline):
            raise ClassifierError(f"{path} does not contain a precedence classifier")

        classifier = cls(config)
        classifier._pipeline = pipeline
        logger.debug(f"Loaded precedence classifier from {path}")
        return classifier
