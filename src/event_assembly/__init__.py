"""Event assembly: precedence ordering of extracted biomedical events.

Event mentions extracted from papers are grouped into equivalence classes
(EERs), and a chain of sieves adds happens-before edges between them:

- deduplication builds the EER index
- rule-based sieves use lexical cues, tense/aspect and discourse openers
- a feature-based classifier handles pairs the rules leave unrelated

Example:
    from event_assembly import apply_sieves, load_config

    manager = apply_sieves(mentions, load_config())
    for relation in manager.get_precedence_relations():
        print(relation.before, "->", relation.after, relation.found_by)
"""

__version__ = "0.1.0"

# Errors and configuration
from event_assembly.exceptions import (
    AssemblyError,
    ClassifierError,
    ConfigurationError,
    MissingArgumentError,
    ModelNotTrainedError,
    NotTrackedError,
    UnsupportedRelationLabelError,
)
from event_assembly.config import (
    AssemblyConfig,
    ClassifierConfig,
    EvaluationConfig,
    RuleConfig,
    load_config,
)

# Mentions and equivalence
from event_assembly.mentions import Document, Mention, Sentence, validate_mentions
from event_assembly.canonical import canonical_form, equivalence_hash
from event_assembly.eer import EER
from event_assembly.manager import AssemblyManager, PrecedenceRelation, RelationConflict

# Sieves (imported before the classifier package, which depends on them)
from event_assembly.sieves import (
    AssemblySieve,
    DeduplicationSieves,
    PrecedenceSieves,
    SievePipeline,
)
from event_assembly.classifier import PrecedenceClassifier

# Running and evaluation
from event_assembly.runner import apply_each_sieve, apply_sieves
from event_assembly.corpus import AssemblyAnnotation, gold_from_annotations, training_examples
from event_assembly.evaluation import Performance, evaluate, format_report

__all__ = [
    "__version__",
    "AssemblyError",
    "ClassifierError",
    "ConfigurationError",
    "MissingArgumentError",
    "ModelNotTrainedError",
    "NotTrackedError",
    "UnsupportedRelationLabelError",
    "AssemblyConfig",
    "ClassifierConfig",
    "EvaluationConfig",
    "RuleConfig",
    "load_config",
    "Document",
    "Mention",
    "Sentence",
    "validate_mentions",
    "canonical_form",
    "equivalence_hash",
    "EER",
    "AssemblyManager",
    "PrecedenceRelation",
    "RelationConflict",
    "AssemblySieve",
    "DeduplicationSieves",
    "PrecedenceSieves",
    "SievePipeline",
    "PrecedenceClassifier",
    "apply_each_sieve",
    "apply_sieves",
    "AssemblyAnnotation",
    "gold_from_annotations",
    "training_examples",
    "Performance",
    "evaluate",
    "format_report",
]
