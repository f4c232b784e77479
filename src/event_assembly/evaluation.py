"""Micro-averaged evaluation of precedence relations against gold.

A predicted relation is a true positive when some gold relation is
equivalent to it (same endpoints, same direction); evidence and found_by
are ignored. Scores are smoothed so that empty sets never divide by zero:

    p  = tp / (tp + fp + ε)
    r  = tp / (tp + fn + ε)
    f1 = 2pr / (p + r + ε)

Scores are reported for every strategy as a whole (rule ``**ALL**``) and
for every (sieve, rule) group of its predictions.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Collection, Iterable, Mapping, Sequence

from event_assembly.classifier.model import PrecedenceClassifier
from event_assembly.config import AssemblyConfig
from event_assembly.manager import AssemblyManager, PrecedenceRelation
from event_assembly.mentions import Mention
from event_assembly.runner import FULL_PIPELINE, apply_each_sieve, apply_sieves

logger = logging.getLogger(__name__)

SMOOTHING = 1e-5

ALL_RULES = "**ALL**"
NO_RULE = "**NONE**"

REPORT_HEADER = "sieve\trule\tp\tr\tf1\ttp\tfp\tfn"


@dataclass(frozen=True)
class Performance:
    """Scores of one strategy, or of one rule within it."""

    sieve: str
    rule: str
    precision: float
    recall: float
    f1: float
    tp: int
    fp: int
    fn: int

    def to_row(self) -> str:
        return (
            f"{self.sieve}\t{self.rule}\t{self.precision:.3f}\t{self.recall:.3f}\t"
            f"{self.f1:.3f}\t{self.tp}\t{self.fp}\t{self.fn}"
        )


def _matches(relation: PrecedenceRelation, others: Iterable[PrecedenceRelation]) -> bool:
    return any(other.is_equivalent_to(relation) for other in others)


def count_matches(
    predicted: Collection[PrecedenceRelation],
    gold: Collection[PrecedenceRelation],
) -> tuple[int, int, int]:
    """(tp, fp, fn) of predicted relations against gold, by equivalence."""
    tp = sum(1 for p in predicted if _matches(p, gold))
    fp = len(predicted) - tp
    fn = sum(1 for g in gold if not _matches(g, predicted))
    return tp, fp, fn


def micro_scores(tp: int, fp: int, fn: int, smoothing: float = SMOOTHING) -> tuple[float, float, float]:
    """Smoothed precision, recall and F1."""
    precision = tp / (tp + fp + smoothing)
    recall = tp / (tp + fn + smoothing)
    f1 = (2 * precision * recall) / (precision + recall + smoothing)
    return precision, recall, f1


def _performance(
    sieve: str,
    rule: str,
    predicted: Collection[PrecedenceRelation],
    gold: Collection[PrecedenceRelation],
    smoothing: float,
) -> Performance:
    tp, fp, fn = count_matches(predicted, gold)
    precision, recall, f1 = micro_scores(tp, fp, fn, smoothing)
    return Performance(sieve, rule, precision, recall, f1, tp, fp, fn)


def evaluate_manager(
    name: str,
    manager: AssemblyManager,
    gold: Sequence[PrecedenceRelation],
    smoothing: float = SMOOTHING,
) -> list[Performance]:
    """Score one manager's relations, overall and per (sieve, rule) group.

    A group's false negatives are the gold relations that group missed,
    so per-rule recall reads as "what this rule alone would have found".

    Returns:
        Rows sorted by ascending precision. The overall row has rule
        ``**ALL**``; relations without evidence are grouped under
        ``**NONE**``.
    """
    predicted = manager.get_precedence_relations()

    groups: dict[tuple[str, str], list[PrecedenceRelation]] = defaultdict(list)
    for relation in predicted:
        evidence = relation.first_evidence
        rule = evidence.found_by if evidence is not None else NO_RULE
        groups[(relation.found_by, rule)].append(relation)

    rows = [
        _performance(sieve, rule, group, gold, smoothing)
        for (sieve, rule), group in sorted(groups.items())
    ]
    rows.append(_performance(name, ALL_RULES, predicted, gold, smoothing))
    return sorted(rows, key=lambda row: row.precision)


def evaluate(
    mentions: Sequence[Mention],
    gold: Sequence[PrecedenceRelation],
    config: AssemblyConfig | None = None,
    classifier: PrecedenceClassifier | None = None,
) -> dict[str, list[Performance]]:
    """Run every strategy on the mentions and score it against gold.

    The full pipeline is scored too, under ``all``, when
    ``evaluation.include_full_pipeline`` is set.
    """
    config = (config or AssemblyConfig.default()).validate()
    smoothing = config.evaluation.smoothing

    managers = dict(apply_each_sieve(mentions, config))
    if config.evaluation.include_full_pipeline:
        managers[FULL_PIPELINE] = apply_sieves(mentions, config, classifier)

    results = {
        name: evaluate_manager(name, manager, gold, smoothing)
        for name, manager in managers.items()
    }
    for name, rows in results.items():
        overall = next(row for row in rows if row.rule == ALL_RULES)
        logger.info(f"{name}: p={overall.precision:.3f} r={overall.recall:.3f} f1={overall.f1:.3f}")
    return results


def format_report(results: Mapping[str, Sequence[Performance]]) -> str:
    """Tab separated report: the header, then every row of every strategy."""
    lines = [REPORT_HEADER]
    for rows in results.values():
        lines.extend(row.to_row() for row in rows)
    return "\n".join(lines)
