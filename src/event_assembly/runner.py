"""Pipeline construction and execution.

Two ways to run the sieves:

- ``apply_sieves``: the full ordered chain on one manager
  (dedup → within → reichenbach → between → classifier)
- ``apply_each_sieve``: every rule-based strategy in isolation, each behind
  its own dedup and on its own manager, so strategies can be compared

The isolated runs share nothing mutable and are executed concurrently.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from event_assembly.classifier.model import PrecedenceClassifier
from event_assembly.config import AssemblyConfig
from event_assembly.manager import AssemblyManager
from event_assembly.mentions import Mention, validate_mentions
from event_assembly.sieves.base import AssemblySieve, SievePipeline
from event_assembly.sieves.deduplication import DeduplicationSieves
from event_assembly.sieves.precedence import (
    BETWEEN_RB_PRECEDENCE,
    FEATURE_BASED_CLASSIFIER,
    REICHENBACH_PRECEDENCE,
    WITHIN_RB_PRECEDENCE,
    PrecedenceSieves,
)

logger = logging.getLogger(__name__)

DEDUPLICATION = "trackMentions"
FULL_PIPELINE = "all"

STRATEGIES = (WITHIN_RB_PRECEDENCE, REICHENBACH_PRECEDENCE, BETWEEN_RB_PRECEDENCE)


def _dedup() -> AssemblySieve:
    return AssemblySieve(DEDUPLICATION, DeduplicationSieves().track_mentions)


def full_pipeline(precedence: PrecedenceSieves) -> SievePipeline:
    """Dedup followed by every precedence sieve, rules before the classifier."""
    return (
        _dedup()
        .and_then(AssemblySieve(WITHIN_RB_PRECEDENCE, precedence.within_rb_precedence))
        .and_then(AssemblySieve(REICHENBACH_PRECEDENCE, precedence.reichenbach_precedence))
        .and_then(AssemblySieve(BETWEEN_RB_PRECEDENCE, precedence.between_rb_precedence))
        .and_then(AssemblySieve(FEATURE_BASED_CLASSIFIER, precedence.feature_based_classifier))
    )


def strategy_pipelines(precedence: PrecedenceSieves) -> dict[str, SievePipeline]:
    """One dedup + strategy pipeline per rule-based precedence sieve."""
    return {
        WITHIN_RB_PRECEDENCE: _dedup().and_then(
            AssemblySieve(WITHIN_RB_PRECEDENCE, precedence.within_rb_precedence)
        ),
        REICHENBACH_PRECEDENCE: _dedup().and_then(
            AssemblySieve(REICHENBACH_PRECEDENCE, precedence.reichenbach_precedence)
        ),
        BETWEEN_RB_PRECEDENCE: _dedup().and_then(
            AssemblySieve(BETWEEN_RB_PRECEDENCE, precedence.between_rb_precedence)
        ),
    }


def apply_sieves(
    mentions: Sequence[Mention],
    config: AssemblyConfig | None = None,
    classifier: PrecedenceClassifier | None = None,
) -> AssemblyManager:
    """Run the full sieve chain on a fresh manager.

    Raises:
        UnsupportedRelationLabelError: A mention carries an unknown label.
        MissingArgumentError: An event lacks a required argument.
    """
    config = (config or AssemblyConfig.default()).validate()
    mentions = validate_mentions(mentions)
    precedence = PrecedenceSieves(config, classifier)

    manager = full_pipeline(precedence).apply(mentions, AssemblyManager())
    logger.info(
        f"Assembled {len(mentions)} mentions: {len(manager.distinct_eers())} event EERs, "
        f"{len(manager.get_precedence_relations())} precedence relations"
    )
    return manager


def apply_each_sieve(
    mentions: Sequence[Mention],
    config: AssemblyConfig | None = None,
) -> dict[str, AssemblyManager]:
    """Run each rule-based strategy in isolation.

    Returns:
        Mapping of strategy name to the manager it produced. Every manager
        is private to its run.
    """
    config = (config or AssemblyConfig.default()).validate()
    mentions = validate_mentions(mentions)
    pipelines = strategy_pipelines(PrecedenceSieves(config))

    with ThreadPoolExecutor(max_workers=config.evaluation.max_workers) as executor:
        futures = {
            name: executor.submit(pipeline.apply, mentions, AssemblyManager())
            for name, pipeline in pipelines.items()
        }
        results = {name: future.result() for name, future in futures.items()}

    for name, manager in results.items():
        logger.debug(f"{name}: {len(manager.get_precedence_relations())} precedence relations")
    return results
