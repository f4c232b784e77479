"""Precedence sieves.

Four independent strategies add happens-before edges between EERs:

1. ``within_rb_precedence``: lexical cues linking two events in one sentence
2. ``reichenbach_precedence``: tense/aspect of the two triggers
3. ``between_rb_precedence``: discourse cues linking adjacent sentences
4. ``feature_based_classifier``: a trained statistical model

Each sieve computes all of its candidate edges first and only then commits
them to the manager, so a failure leaves no partial contribution. Edges
point at EER hashes: every mention of an equivalence class inherits an
edge found for any one of them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from itertools import combinations
from typing import Sequence

from event_assembly.classifier.model import E1_PRECEDES_E2, E2_PRECEDES_E1, PrecedenceClassifier
from event_assembly.config import AssemblyConfig
from event_assembly.manager import AssemblyManager, PrecedenceRelation
from event_assembly.mentions import Mention, precedence_mention
from event_assembly.sieves.cues import Direction, match_between, match_within
from event_assembly.sieves.tense import TenseAspectDetector, reichenbach_order

logger = logging.getLogger(__name__)

WITHIN_RB_PRECEDENCE = "withinRbPrecedence"
REICHENBACH_PRECEDENCE = "reichenbachPrecedence"
BETWEEN_RB_PRECEDENCE = "betweenRbPrecedence"
FEATURE_BASED_CLASSIFIER = "featureBasedClassifier"

CLASSIFIER_RULE = "precedence-classifier"


def _position(mention: Mention) -> tuple:
    return (mention.document.doc_id, mention.sentence, mention.start, mention.end, mention.label)


class PrecedenceSieves:
    """Rule-based and statistical precedence strategies.

    Args:
        config: Assembly configuration (defaults are used when omitted)
        classifier: A fitted PrecedenceClassifier. When omitted and
            ``config.classifier.model_path`` is set, the model is loaded
            from that path.
    """

    def __init__(
        self,
        config: AssemblyConfig | None = None,
        classifier: PrecedenceClassifier | None = None,
    ):
        self.config = config or AssemblyConfig()
        self.detector = TenseAspectDetector()
        if classifier is None and self.config.classifier.model_path:
            classifier = PrecedenceClassifier.load(
                self.config.classifier.model_path, self.config.classifier
            )
        self.classifier = classifier

    # -------------------------------------------------------------------------
    # Sieves
    # -------------------------------------------------------------------------

    def within_rb_precedence(
        self, mentions: Sequence[Mention], manager: AssemblyManager
    ) -> AssemblyManager:
        """Link events of one sentence through an explicit lexical cue."""
        max_tokens = self.config.rules.within_max_tokens
        found = []
        for events in self._by_sentence(self._events(mentions, manager)).values():
            for first, second in combinations(events, 2):
                if first.end > second.start or second.start - first.end > max_tokens:
                    continue
                if not self._can_link(manager, first, second):
                    continue
                rule = match_within(first.sentence_obj, first, second)
                if rule is None:
                    continue
                before, after = (first, second) if rule.direction is Direction.FORWARD else (second, first)
                found.append(self._relation(manager, before, after, rule.name, WITHIN_RB_PRECEDENCE))

        return self._commit(manager, found, WITHIN_RB_PRECEDENCE)

    def reichenbach_precedence(
        self, mentions: Sequence[Mention], manager: AssemblyManager
    ) -> AssemblyManager:
        """Order events whose triggers share a Reichenbach reference point."""
        window = self.config.rules.reichenbach_window
        found = []
        for events in self._by_document(self._events(mentions, manager)).values():
            tenses = {e.key: self.detector.detect(e) for e in events}
            for a, b in combinations(events, 2):
                if b.sentence - a.sentence > window:
                    continue
                ta, tb = tenses[a.key], tenses[b.key]
                if ta is None or tb is None or not self._can_link(manager, a, b):
                    continue
                direction = reichenbach_order(ta, tb)
                if direction is None:
                    continue
                # an order implies a shared tense
                rule = f"reichenbach-{ta.tense.value}-{ta.aspect.value}-{tb.aspect.value}"
                before, after = (a, b) if direction is Direction.FORWARD else (b, a)
                found.append(self._relation(manager, before, after, rule, REICHENBACH_PRECEDENCE))

        return self._commit(manager, found, REICHENBACH_PRECEDENCE)

    def between_rb_precedence(
        self, mentions: Sequence[Mention], manager: AssemblyManager
    ) -> AssemblyManager:
        """Link events of neighbouring sentences through a discourse opener."""
        window = self.config.rules.between_window
        found = []
        for events in self._by_document(self._events(mentions, manager)).values():
            by_sentence: dict[int, list[Mention]] = defaultdict(list)
            for event in events:
                by_sentence[event.sentence].append(event)
            top_level = {i: self._top_level(evs) for i, evs in by_sentence.items()}

            for j, later_events in sorted(top_level.items()):
                for later in later_events:
                    rule = match_between(later.sentence_obj, later)
                    if rule is None:
                        continue
                    for i in range(j - window, j):
                        for earlier in top_level.get(i, []):
                            if not self._can_link(manager, earlier, later):
                                continue
                            if rule.direction is Direction.FORWARD:
                                before, after = earlier, later
                            else:
                                before, after = later, earlier
                            found.append(
                                self._relation(manager, before, after, rule.name, BETWEEN_RB_PRECEDENCE)
                            )

        return self._commit(manager, found, BETWEEN_RB_PRECEDENCE)

    def feature_based_classifier(
        self, mentions: Sequence[Mention], manager: AssemblyManager
    ) -> AssemblyManager:
        """Predict precedence for pairs the rule sieves left unrelated."""
        if self.classifier is None:
            logger.info("No precedence classifier configured, skipping feature-based sieve")
            return manager

        window = self.config.classifier.window
        threshold = self.config.classifier.threshold
        candidates = []
        for events in self._by_document(self._events(mentions, manager)).values():
            for a, b in combinations(events, 2):
                if b.sentence - a.sentence > window or not self._can_link(manager, a, b):
                    continue
                ha = manager.get_eer(a).equivalence_hash
                hb = manager.get_eer(b).equivalence_hash
                if manager.relation_between(ha, hb) is None:
                    candidates.append((a, b))

        found = []
        for (a, b), (label, probability) in zip(candidates, self.classifier.predict_many(candidates)):
            if probability < threshold:
                continue
            if label == E1_PRECEDES_E2:
                found.append(self._relation(manager, a, b, CLASSIFIER_RULE, FEATURE_BASED_CLASSIFIER))
            elif label == E2_PRECEDES_E1:
                found.append(self._relation(manager, b, a, CLASSIFIER_RULE, FEATURE_BASED_CLASSIFIER))

        return self._commit(manager, found, FEATURE_BASED_CLASSIFIER)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _events(self, mentions: Sequence[Mention], manager: AssemblyManager) -> list[Mention]:
        """Distinct event mentions in textual order.

        Raises:
            NotTrackedError: If any event was not deduplicated first.
        """
        distinct: dict[tuple, Mention] = {}
        for mention in mentions:
            if mention.is_event:
                manager.get_eer(mention)
                distinct.setdefault(mention.key, mention)
        return sorted(distinct.values(), key=_position)

    @staticmethod
    def _by_document(events: list[Mention]) -> dict[str, list[Mention]]:
        grouped: dict[str, list[Mention]] = defaultdict(list)
        for event in events:
            grouped[event.document.doc_id].append(event)
        return grouped

    @staticmethod
    def _by_sentence(events: list[Mention]) -> dict[tuple[str, int], list[Mention]]:
        grouped: dict[tuple[str, int], list[Mention]] = defaultdict(list)
        for event in events:
            grouped[(event.document.doc_id, event.sentence)].append(event)
        return grouped

    @staticmethod
    def _top_level(events: list[Mention]) -> list[Mention]:
        """Events that are not an argument of another event in the list."""
        return [e for e in events if not any(other.contains(e) for other in events if other is not e)]

    @staticmethod
    def _can_link(manager: AssemblyManager, a: Mention, b: Mention) -> bool:
        """Pairs inside one EER, or an event and its own argument, never link."""
        if a.contains(b) or b.contains(a):
            return False
        return manager.get_eer(a) is not manager.get_eer(b)

    @staticmethod
    def _relation(
        manager: AssemblyManager,
        before: Mention,
        after: Mention,
        rule: str,
        sieve: str,
    ) -> PrecedenceRelation:
        return PrecedenceRelation(
            before=manager.get_eer(before).equivalence_hash,
            after=manager.get_eer(after).equivalence_hash,
            evidence=(precedence_mention(before, after, rule),),
            found_by=sieve,
        )

    @staticmethod
    def _commit(
        manager: AssemblyManager,
        relations: list[PrecedenceRelation],
        sieve: str,
    ) -> AssemblyManager:
        added = sum(manager.add_relation(r) for r in relations)
        logger.info(f"{sieve}: {len(relations)} precedence candidates, {added} new edges")
        return manager

