"""Feature-based precedence classifier."""

from event_assembly.classifier.features import MAX_BETWEEN_LEMMAS, pair_features
from event_assembly.classifier.model import (
    CLASSIFIER_LABELS,
    E1_PRECEDES_E2,
    E2_PRECEDES_E1,
    NO_RELATION,
    PrecedenceClassifier,
    TrainingExample,
)

__all__ = [
    "MAX_BETWEEN_LEMMAS",
    "pair_features",
    "CLASSIFIER_LABELS",
    "E1_PRECEDES_E2",
    "E2_PRECEDES_E1",
    "NO_RELATION",
    "PrecedenceClassifier",
    "TrainingExample",
]
