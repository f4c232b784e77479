"""Equivalence Event Representation (EER).

An EER is the canonical identity of one distinct entity or event. It holds
the equivalence hash shared by all of its members and the set of mentions
judged equivalent. The hash is fixed at creation; equivalent mentions found
later are added as members and never re-hash the EER.
"""

from __future__ import annotations

from typing import Iterator

from event_assembly.mentions import EVENT_LABELS, Mention


class EER:
    """One equivalence class of mentions.

    Attributes:
        equivalence_hash: Hash shared by every member (read-only)
        label: Label shared by every member
    """

    def __init__(self, equivalence_hash: int, label: str):
        self._equivalence_hash = equivalence_hash
        self.label = label
        self._members: dict[tuple, Mention] = {}

    @property
    def equivalence_hash(self) -> int:
        return self._equivalence_hash

    def add(self, mention: Mention) -> bool:
        """Add a member; returns False if it was already present."""
        if mention.key in self._members:
            return False
        self._members[mention.key] = mention
        return True

    @property
    def mentions(self) -> tuple[Mention, ...]:
        return tuple(self._members.values())

    @property
    def provenance(self) -> frozenset[str]:
        """The extraction rules that produced the members."""
        return frozenset(m.found_by for m in self._members.values())

    @property
    def is_event(self) -> bool:
        return self.label in EVENT_LABELS

    @property
    def negated(self) -> bool:
        return any(m.negated for m in self._members.values())

    @property
    def hypothesized(self) -> bool:
        return any(m.hypothesized for m in self._members.values())

    def __contains__(self, mention: object) -> bool:
        return isinstance(mention, Mention) and mention.key in self._members

    def __iter__(self) -> Iterator[Mention]:
        return iter(self._members.values())

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"EER({self.label!r}, hash={self._equivalence_hash}, members={len(self._members)})"
