"""Assembly sieves.

Provides:
- AssemblySieve / SievePipeline: named stages and their composition
- DeduplicationSieves: builds the EER index
- PrecedenceSieves: rule-based and statistical precedence strategies
"""

from event_assembly.sieves.base import AssemblySieve, SieveFunction, SievePipeline
from event_assembly.sieves.cues import (
    BETWEEN_SENTENCE_RULES,
    WITHIN_SENTENCE_RULES,
    CueLocation,
    CueRule,
    Direction,
    match_between,
    match_within,
)
from event_assembly.sieves.deduplication import DeduplicationSieves
from event_assembly.sieves.precedence import (
    BETWEEN_RB_PRECEDENCE,
    FEATURE_BASED_CLASSIFIER,
    REICHENBACH_PRECEDENCE,
    WITHIN_RB_PRECEDENCE,
    PrecedenceSieves,
)
from event_assembly.sieves.tense import (
    Aspect,
    Tense,
    TenseAspect,
    TenseAspectDetector,
    reichenbach_order,
)

__all__ = [
    "AssemblySieve",
    "SieveFunction",
    "SievePipeline",
    "BETWEEN_SENTENCE_RULES",
    "WITHIN_SENTENCE_RULES",
    "CueLocation",
    "CueRule",
    "Direction",
    "match_between",
    "match_within",
    "DeduplicationSieves",
    "BETWEEN_RB_PRECEDENCE",
    "FEATURE_BASED_CLASSIFIER",
    "REICHENBACH_PRECEDENCE",
    "WITHIN_RB_PRECEDENCE",
    "PrecedenceSieves",
    "Aspect",
    "Tense",
    "TenseAspect",
    "TenseAspectDetector",
    "reichenbach_order",
]
