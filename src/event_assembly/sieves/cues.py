"""Lexical cues for rule-based precedence.

Two rule tables drive the rule-based precedence sieves:

1. **Within-sentence rules** look at the tokens between two events in one
   sentence ("A, followed by B", "A requires B") or at a subordinating
   opener of the sentence ("After A, B").
2. **Between-sentence rules** look at the discourse opener of a sentence
   that follows the one holding the earlier event ("Then, B",
   "Previously, B").

Every rule names a direction relative to textual order: FORWARD means the
event that appears first in the text happens first.

Example:
    >>> rule = match_within(sentence, binding, phosphorylation)
    >>> rule.name, rule.direction
    ('within-followed-by', <Direction.FORWARD: 'forward'>)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from event_assembly.mentions import Mention, Sentence


class Direction(str, Enum):
    """Temporal direction relative to textual order."""

    FORWARD = "forward"  # textually first event happens first
    BACKWARD = "backward"  # textually second event happens first


class CueLocation(str, Enum):
    """Where a cue pattern is matched."""

    BETWEEN = "between"  # tokens between the two events
    PREFIX = "prefix"  # tokens from sentence start to the (first) event


@dataclass(frozen=True)
class CueRule:
    """A named lexical precedence cue."""

    name: str
    pattern: re.Pattern[str]
    direction: Direction
    location: CueLocation = CueLocation.BETWEEN


def _rule(
    name: str,
    pattern: str,
    direction: Direction,
    location: CueLocation = CueLocation.BETWEEN,
) -> CueRule:
    return CueRule(name, re.compile(pattern), direction, location)


# =============================================================================
# Rule tables (first match wins)
# =============================================================================

WITHIN_SENTENCE_RULES: tuple[CueRule, ...] = (
    # "After A, B" / "Before A, B": the first event sits in the subordinate clause
    _rule(
        "within-after-subordinate",
        r"^(after|following|upon|once)\b",
        Direction.FORWARD,
        CueLocation.PREFIX,
    ),
    _rule(
        "within-before-subordinate",
        r"^(before|prior to)\b",
        Direction.BACKWARD,
        CueLocation.PREFIX,
    ),
    _rule(
        "within-requires",
        r"\b(requires?|required|depends? on|dependent on|preceded by)\b",
        Direction.BACKWARD,
    ),
    _rule(
        "within-before",
        r"\b(before|prior to|preceding|ahead of)\b",
        Direction.FORWARD,
    ),
    _rule(
        "within-followed-by",
        r"\b(followed by|then|subsequently|thereafter|afterwards?)\b",
        Direction.FORWARD,
    ),
    _rule(
        "within-leads-to",
        r"\b(leads? to|led to|leading to|results? in|resulted in|resulting in|triggers?|triggered)\b",
        Direction.FORWARD,
    ),
    _rule(
        "within-after",
        r"\b(after|following|upon|once)\b",
        Direction.BACKWARD,
    ),
)

BETWEEN_SENTENCE_RULES: tuple[CueRule, ...] = (
    _rule(
        "between-after-that",
        r"^(after|following) (this|that|these|those|which|it)\b",
        Direction.FORWARD,
        CueLocation.PREFIX,
    ),
    _rule(
        "between-before-that",
        r"^(before|prior to) (this|that|these|those|it)\b",
        Direction.BACKWARD,
        CueLocation.PREFIX,
    ),
    _rule(
        "between-then",
        r"^(then|next|subsequently|afterwards?|later|thereafter|finally)\b",
        Direction.FORWARD,
        CueLocation.PREFIX,
    ),
    _rule(
        "between-as-a-result",
        r"^(as a (result|consequence)|consequently)\b",
        Direction.FORWARD,
        CueLocation.PREFIX,
    ),
    _rule(
        "between-in-turn",
        r"\bin turn\b",
        Direction.FORWARD,
        CueLocation.PREFIX,
    ),
    _rule(
        "between-previously",
        r"^(previously|earlier|beforehand)\b",
        Direction.BACKWARD,
        CueLocation.PREFIX,
    ),
)


# =============================================================================
# Matching
# =============================================================================


def _span_text(sentence: Sentence, start: int, end: int) -> str:
    return " ".join(sentence.words[start:end]).lower()


def _opens_sentence(rule: CueRule, prefix: str, between: str) -> bool:
    """A subordinate opener holds the first event and ends before the second."""
    return "," not in prefix and "," in between and bool(rule.pattern.search(prefix))


def match_within(sentence: Sentence, first: Mention, second: Mention) -> CueRule | None:
    """First within-sentence rule linking two non-overlapping events.

    ``first`` must end before ``second`` starts.
    """
    between = _span_text(sentence, first.end, second.start)
    prefix = _span_text(sentence, 0, first.start)

    for rule in WITHIN_SENTENCE_RULES:
        if rule.location is CueLocation.PREFIX:
            if _opens_sentence(rule, prefix, between):
                return rule
        elif rule.pattern.search(between):
            return rule
    return None


def match_between(sentence: Sentence, later: Mention) -> CueRule | None:
    """First discourse rule matching the opener of the later event's sentence.

    The opener runs from the sentence start to the event's trigger.
    """
    prefix = _span_text(sentence, 0, later.trigger_span[0])
    if not prefix:
        return None
    for rule in BETWEEN_SENTENCE_RULES:
        if rule.pattern.search(prefix):
            return rule
    return None


def cue_names(sentence: Sentence, first: Mention, second: Mention) -> list[str]:
    """Names of every within-sentence rule that would fire, for features."""
    between = _span_text(sentence, first.end, second.start)
    prefix = _span_text(sentence, 0, first.start)
    names = []
    for rule in WITHIN_SENTENCE_RULES:
        if rule.location is CueLocation.PREFIX:
            fired = _opens_sentence(rule, prefix, between)
        else:
            fired = bool(rule.pattern.search(between))
        if fired:
            names.append(rule.name)
    return names
