"""Gold precedence relations from annotated event pairs.

An annotation pairs two event mentions (E1, E2) with one relation label.
Only precedence labels yield gold edges; the other labels matter for
training the classifier, where they all mean "no precedence".

Reading annotation files is left to the caller: this module works on
AssemblyAnnotation objects already in memory.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from event_assembly.classifier.model import (
    E1_PRECEDES_E2,
    E2_PRECEDES_E1,
    NO_RELATION,
    TrainingExample,
)
from event_assembly.exceptions import UnsupportedRelationLabelError
from event_assembly.manager import AssemblyManager, PrecedenceRelation
from event_assembly.mentions import Mention

logger = logging.getLogger(__name__)

GOLD = "gold"

PRECEDENCE_RELATIONS = frozenset({E1_PRECEDES_E2, E2_PRECEDES_E1})
NO_RELATIONS = frozenset({NO_RELATION})
SUBSUMPTION_RELATIONS = frozenset({"E1 specifies E2", "E2 specifies E1"})
EQUIVALENCE_RELATIONS = frozenset({"Equivalent"})

ALL_RELATIONS = PRECEDENCE_RELATIONS | NO_RELATIONS | SUBSUMPTION_RELATIONS | EQUIVALENCE_RELATIONS


@dataclass(frozen=True)
class AssemblyAnnotation:
    """One annotated event pair.

    Attributes:
        e1: First event (None when it could not be matched to a mention)
        e2: Second event (same)
        relation: Annotation label, e.g. "E1 precedes E2"
    """

    e1: Mention | None
    e2: Mention | None
    relation: str

    @property
    def pair(self) -> tuple[Mention, Mention] | None:
        if self.e1 is None or self.e2 is None:
            return None
        return (self.e1, self.e2)


def filter_relations(
    annotations: Iterable[AssemblyAnnotation],
    labels: Iterable[str],
) -> list[AssemblyAnnotation]:
    """Annotations whose relation is one of ``labels``."""
    wanted = frozenset(labels)
    return [a for a in annotations if a.relation in wanted]


def gold_from_annotations(
    annotations: Iterable[AssemblyAnnotation],
) -> tuple[list[PrecedenceRelation], list[Mention]]:
    """Derive gold precedence edges and the mentions to assemble.

    Every precedence annotation whose two events are present yields one
    gold edge (found_by ``gold``, no evidence) between the EER hashes of
    its events, and contributes both events to the test mentions.

    Returns:
        (gold relations, distinct test mentions in first-seen order)

    Raises:
        UnsupportedRelationLabelError: An annotation carries an unknown label.
    """
    annotations = list(annotations)
    for annotation in annotations:
        if annotation.relation not in ALL_RELATIONS:
            raise UnsupportedRelationLabelError(annotation.relation)

    gold: list[PrecedenceRelation] = []
    test_mentions: dict[tuple, Mention] = {}
    skipped = 0

    for annotation in filter_relations(annotations, PRECEDENCE_RELATIONS):
        pair = annotation.pair
        if pair is None:
            skipped += 1
            continue
        e1, e2 = pair

        # a throwaway manager only to resolve the two EER hashes
        manager = AssemblyManager().track_mentions((e1, e2))
        h1 = manager.get_eer(e1).equivalence_hash
        h2 = manager.get_eer(e2).equivalence_hash
        if annotation.relation == E1_PRECEDES_E2:
            gold.append(PrecedenceRelation(h1, h2, (), GOLD))
        else:
            gold.append(PrecedenceRelation(h2, h1, (), GOLD))

        test_mentions.setdefault(e1.key, e1)
        test_mentions.setdefault(e2.key, e2)

    if skipped:
        logger.warning(f"Skipped {skipped} precedence annotations with unmatched events")
    logger.info(f"Derived {len(gold)} gold relations over {len(test_mentions)} mentions")
    return gold, list(test_mentions.values())


def training_examples(annotations: Sequence[AssemblyAnnotation]) -> list[TrainingExample]:
    """(e1, e2, label) triples for the precedence classifier.

    Subsumption and equivalence are not temporal orderings, so they are
    collapsed into ``None``.

    Raises:
        UnsupportedRelationLabelError: An annotation carries an unknown label.
    """
    examples: list[TrainingExample] = []
    for annotation in annotations:
        if annotation.relation not in ALL_RELATIONS:
            raise UnsupportedRelationLabelError(annotation.relation)
        pair = annotation.pair
        if pair is None:
            continue
        label = annotation.relation if annotation.relation in PRECEDENCE_RELATIONS else NO_RELATION
        examples.append((pair[0], pair[1], label))
    return examples
