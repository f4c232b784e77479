"""Tense and aspect of event triggers, in Reichenbach's framework.

Reichenbach describes a verb form by three points on the timeline:

- **S**: speech time
- **R**: reference time
- **E**: event time

Tense fixes R relative to S (past: R < S, present: R = S, future: R > S);
the perfect places E before R, simple and progressive forms put E at R.
Two events sharing a reference point can be ordered by where their event
points fall relative to it:

- "X had phosphorylated Y. Y translocated." → E1 < R = E2: X's
  phosphorylation happened first.
- "X has bound Y and Y is degraded." → E1 < R = S = E2.

Example:
    >>> detector = TenseAspectDetector()
    >>> detector.detect(phosphorylation)
    TenseAspect(tense=<Tense.PAST: 'past'>, aspect=<Aspect.PERFECT: 'perfect'>)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from event_assembly.mentions import Mention, Sentence
from event_assembly.sieves.cues import Direction


# =============================================================================
# Types
# =============================================================================


class Tense(str, Enum):
    """Grammatical tense: position of R relative to S."""

    PAST = "past"
    PRESENT = "present"
    FUTURE = "future"


class Aspect(str, Enum):
    """Grammatical aspect: position of E relative to R."""

    SIMPLE = "simple"
    PERFECT = "perfect"
    PROGRESSIVE = "progressive"


_REFERENCE = {Tense.PAST: -1, Tense.PRESENT: 0, Tense.FUTURE: 1}


@dataclass(frozen=True)
class TenseAspect:
    """Tense and aspect of one verbal trigger."""

    tense: Tense
    aspect: Aspect

    @property
    def reference(self) -> int:
        """R relative to S: -1 before, 0 at, 1 after."""
        return _REFERENCE[self.tense]

    @property
    def event_offset(self) -> int:
        """E relative to R: -1 before (perfect), 0 at."""
        return -1 if self.aspect is Aspect.PERFECT else 0

    @property
    def name(self) -> str:
        return f"{self.tense.value}-{self.aspect.value}"


def reichenbach_order(a: TenseAspect, b: TenseAspect) -> Direction | None:
    """Order two events that share a reference point.

    Returns FORWARD if ``a`` happens before ``b``, BACKWARD if after, and
    None when the tenses do not share R or the event points coincide.
    """
    if a.reference != b.reference:
        return None
    if a.event_offset < b.event_offset:
        return Direction.FORWARD
    if a.event_offset > b.event_offset:
        return Direction.BACKWARD
    return None


# =============================================================================
# Detector
# =============================================================================


class TenseAspectDetector:
    """Detects tense and aspect from POS tags and auxiliaries.

    Uses the Penn Treebank tag of the trigger verb and the auxiliaries in
    front of it. When a sentence carries no tags, the tag is guessed from the
    word form. Nominal triggers ("phosphorylation of p53") have no tense.
    """

    PAST_AUXILIARIES = {"was", "were", "had", "did"}
    PRESENT_AUXILIARIES = {"is", "are", "am", "has", "have", "do", "does"}
    FUTURE_MARKERS = {"will", "shall", "'ll"}
    PERFECT_AUXILIARIES = {"has", "have", "had"}
    BE_FORMS = {"is", "are", "am", "was", "were", "been", "being", "be"}

    # Skipped while walking back from the verb to its auxiliaries
    INTERVENING = {"not", "n't", "also", "then", "further", "still", "already", "subsequently"}

    IRREGULAR_PAST = {
        "bound", "led", "found", "underwent", "became", "began", "made",
        "took", "gave", "brought", "held", "kept", "left", "lost", "showed",
        "shown", "known", "seen", "undergone", "broken", "driven", "taken",
    }

    NOMINAL_SUFFIXES = ("tion", "sion", "ment", "ance", "ence", "ysis")

    MAX_AUXILIARIES = 4

    def detect(self, mention: Mention) -> TenseAspect | None:
        """Tense and aspect of the mention's trigger, or None if not verbal."""
        sentence = mention.sentence_obj
        start, end = mention.trigger_span
        verb = self._find_verb(sentence, start, end)
        if verb is None:
            return None

        auxiliaries = self._auxiliaries(sentence, verb)
        tag = sentence.tag(verb) or self._guess_tag(sentence.words[verb], auxiliaries)

        tense = self._tense(tag, auxiliaries)
        if tense is None:
            return None
        return TenseAspect(tense, self._aspect(tag, auxiliaries))

    def _find_verb(self, sentence: Sentence, start: int, end: int) -> int | None:
        if sentence.tags is not None:
            for i in range(start, end):
                if sentence.tags[i].startswith("VB"):
                    return i
            return None

        for i in range(start, end):
            word = sentence.words[i].lower()
            if not word.endswith(self.NOMINAL_SUFFIXES) and word.isalpha():
                return i
        return None

    def _auxiliaries(self, sentence: Sentence, verb: int) -> list[str]:
        """Auxiliary words in front of the verb, leftmost first."""
        found: list[str] = []
        i = verb - 1
        while i >= 0 and len(found) < self.MAX_AUXILIARIES:
            word = sentence.words[i].lower()
            tag = sentence.tag(i)
            if word in self.INTERVENING or (tag is not None and tag.startswith("RB")):
                i -= 1
                continue
            if (
                word in self.PAST_AUXILIARIES
                or word in self.PRESENT_AUXILIARIES
                or word in self.FUTURE_MARKERS
                or word in self.BE_FORMS
            ):
                found.insert(0, word)
                i -= 1
                continue
            break
        return found

    def _guess_tag(self, word: str, auxiliaries: list[str]) -> str:
        word = word.lower()
        if word.endswith("ing"):
            return "VBG"
        if word.endswith("ed") or word in self.IRREGULAR_PAST:
            has_aux = any(a in self.PERFECT_AUXILIARIES or a in self.BE_FORMS for a in auxiliaries)
            return "VBN" if has_aux else "VBD"
        if auxiliaries and auxiliaries[-1] in self.FUTURE_MARKERS | {"do", "does", "did"}:
            return "VB"
        if word.endswith("s"):
            return "VBZ"
        return "VBP"

    def _tense(self, tag: str, auxiliaries: list[str]) -> Tense | None:
        if any(a in self.FUTURE_MARKERS for a in auxiliaries):
            return Tense.FUTURE
        for aux in auxiliaries:
            if aux in self.PAST_AUXILIARIES:
                return Tense.PAST
            if aux in self.PRESENT_AUXILIARIES:
                return Tense.PRESENT
        if tag == "VBD":
            return Tense.PAST
        if tag in ("VBZ", "VBP"):
            return Tense.PRESENT
        # bare participles and infinitives carry no tense of their own
        return None

    def _aspect(self, tag: str, auxiliaries: list[str]) -> Aspect:
        if any(a in self.PERFECT_AUXILIARIES for a in auxiliaries) and (
            tag == "VBN" or "been" in auxiliaries
        ):
            return Aspect.PERFECT
        if tag == "VBG" and any(a in self.BE_FORMS for a in auxiliaries):
            return Aspect.PROGRESSIVE
        return Aspect.SIMPLE
