"""Assembly Manager: the registry of EERs and precedence relations.

One AssemblyManager is created per pipeline run and threaded through every
sieve. Deduplication fills the EER index; precedence sieves add directed
edges between EER hashes. After the chain completes the manager is only
read, and it is discarded once results are extracted.

Relations are stored keyed by ``(before, after)``: inserting a relation
equivalent to an existing one is an upsert that merges evidence instead of
a second entry.

Example:
    >>> manager = AssemblyManager().track_mentions(mentions)
    >>> eer = manager.get_eer(mentions[0])
    >>> manager.add_relation(PrecedenceRelation(h1, h2, (evidence,), "withinRbPrecedence"))
    True
    >>> manager.get_precedence_relations()
    {PrecedenceRelation(before=h1, after=h2, ...)}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from event_assembly.canonical import equivalence_hash
from event_assembly.eer import EER
from event_assembly.exceptions import NotTrackedError
from event_assembly.mentions import Mention

logger = logging.getLogger(__name__)


# =============================================================================
# Relations
# =============================================================================


@dataclass(frozen=True)
class PrecedenceRelation:
    """A directed happens-before edge between two EERs.

    Attributes:
        before: Equivalence hash of the earlier event
        after: Equivalence hash of the later event
        evidence: Mentions supporting the edge, in the order they were found
        found_by: Name of the sieve that first asserted the edge
    """

    before: int
    after: int
    evidence: tuple[Mention, ...] = ()
    found_by: str = ""

    @property
    def key(self) -> tuple[int, int]:
        return (self.before, self.after)

    @property
    def first_evidence(self) -> Mention | None:
        return self.evidence[0] if self.evidence else None

    def is_equivalent_to(self, other: "PrecedenceRelation") -> bool:
        """Same endpoints in the same direction; evidence and provenance are ignored."""
        return self.key == other.key

    def with_evidence(self, evidence: Iterable[Mention]) -> "PrecedenceRelation":
        """Copy of this relation with extra evidence appended (no duplicates)."""
        merged = list(self.evidence)
        for mention in evidence:
            if mention not in merged:
                merged.append(mention)
        return PrecedenceRelation(self.before, self.after, tuple(merged), self.found_by)


@dataclass(frozen=True)
class RelationConflict:
    """An edge rejected because the opposite direction was already asserted."""

    existing: PrecedenceRelation
    rejected: PrecedenceRelation


# =============================================================================
# Manager
# =============================================================================


class AssemblyManager:
    """Registry mapping mentions to EERs and holding precedence relations."""

    def __init__(self) -> None:
        self._eers: dict[int, EER] = {}
        self._index: dict[tuple, EER] = {}
        self._relations: dict[tuple[int, int], PrecedenceRelation] = {}
        self._conflicts: list[RelationConflict] = []

    # -------------------------------------------------------------------------
    # Deduplication
    # -------------------------------------------------------------------------

    def track_mentions(self, mentions: Iterable[Mention]) -> "AssemblyManager":
        """Register mentions into EERs, merging equivalent ones.

        Idempotent: tracking a mention twice leaves a single membership.
        Arguments of events are tracked too so that every EER an event
        refers to exists.

        Returns:
            self, to allow chaining.
        """
        tracked = 0
        for mention in mentions:
            tracked += self._track(mention)
        logger.debug(f"Tracked {tracked} new mentions into {len(self._eers)} EERs")
        return self

    def _track(self, mention: Mention) -> int:
        added = 0
        for args in mention.arguments.values():
            for arg in args:
                added += self._track(arg)

        if mention.key in self._index:
            return added

        h = equivalence_hash(mention)
        eer = self._eers.get(h)
        if eer is None:
            eer = EER(h, mention.label)
            self._eers[h] = eer
        eer.add(mention)
        self._index[mention.key] = eer
        return added + 1

    def is_tracked(self, mention: Mention) -> bool:
        return mention.key in self._index

    def get_eer(self, mention: Mention) -> EER:
        """Return the EER of a tracked mention.

        Raises:
            NotTrackedError: If the mention never went through track_mentions.
        """
        try:
            return self._index[mention.key]
        except KeyError as e:
            raise NotTrackedError(mention, cause=e) from e

    def get_eer_by_hash(self, h: int) -> EER | None:
        return self._eers.get(h)

    def get_eers(self) -> list[EER]:
        return list(self._eers.values())

    def distinct_eers(self) -> list[EER]:
        """EERs of events only (entities excluded)."""
        return [eer for eer in self._eers.values() if eer.is_event]

    def get_equivalent_mentions(self, mention: Mention) -> tuple[Mention, ...]:
        return self.get_eer(mention).mentions

    # -------------------------------------------------------------------------
    # Relations
    # -------------------------------------------------------------------------

    def add_relation(self, relation: PrecedenceRelation) -> bool:
        """Insert a precedence edge, merging with an equivalent one.

        - Self-precedence is ignored.
        - An equivalent edge keeps its original found_by and gains evidence.
        - An edge opposite to an existing one is recorded as a conflict and
          not inserted.

        Returns:
            True if a new edge was inserted.

        Raises:
            NotTrackedError: If either endpoint has no EER.
        """
        if relation.before == relation.after:
            logger.debug(f"Ignoring self-precedence for EER {relation.before}")
            return False

        for h in relation.key:
            if h not in self._eers:
                raise NotTrackedError(h)

        existing = self._relations.get(relation.key)
        if existing is not None:
            self._relations[relation.key] = existing.with_evidence(relation.evidence)
            return False

        reverse = self._relations.get((relation.after, relation.before))
        if reverse is not None:
            self._conflicts.append(RelationConflict(existing=reverse, rejected=relation))
            logger.warning(
                f"Precedence conflict: {relation.found_by} asserts "
                f"{relation.before} -> {relation.after}, but {reverse.found_by} "
                f"already asserted the opposite"
            )
            return False

        self._relations[relation.key] = relation
        return True

    def has_relation(self, before: int, after: int) -> bool:
        return (before, after) in self._relations

    def relation_between(self, a: int, b: int) -> PrecedenceRelation | None:
        """The edge linking two EERs in either direction, if any."""
        return self._relations.get((a, b)) or self._relations.get((b, a))

    def get_precedence_relations(self) -> set[PrecedenceRelation]:
        """A copy of the current relations."""
        return set(self._relations.values())

    def predecessors_of(self, mention: Mention) -> set[EER]:
        """EERs that happen before the mention's EER."""
        h = self.get_eer(mention).equivalence_hash
        return {self._eers[r.before] for r in self._relations.values() if r.after == h}

    def successors_of(self, mention: Mention) -> set[EER]:
        """EERs that happen after the mention's EER."""
        h = self.get_eer(mention).equivalence_hash
        return {self._eers[r.after] for r in self._relations.values() if r.before == h}

    @property
    def conflicts(self) -> tuple[RelationConflict, ...]:
        return tuple(self._conflicts)

    def __repr__(self) -> str:
        return (
            f"AssemblyManager(eers={len(self._eers)}, "
            f"relations={len(self._relations)}, conflicts={len(self._conflicts)})"
        )
