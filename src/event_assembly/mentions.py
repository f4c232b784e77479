"""Mention model consumed by the assembly core.

Mentions are produced upstream by the rule-based extraction engine. The
assembly core only reads them: labels, argument roles, token spans,
provenance (``found_by``) and modality flags.

Example:
    >>> doc = Document("PMC123", (Sentence(("ASPP2", "phosphorylates", "p53", ".")),))
    >>> kinase = Mention("Protein", doc, 0, 0, 1, "ner")
    >>> substrate = Mention("Protein", doc, 0, 2, 3, "ner")
    >>> event = Mention(
    ...     "Phosphorylation", doc, 0, 0, 3, "phospho_rule",
    ...     arguments={"theme": (substrate,), "controller": (kinase,)},
    ...     trigger=(1, 2),
    ... )
    >>> event.is_event
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from event_assembly.exceptions import MissingArgumentError, UnsupportedRelationLabelError

logger = logging.getLogger(__name__)


# =============================================================================
# Vocabulary
# =============================================================================

_MODIFICATIONS = [
    "Phosphorylation",
    "Ubiquitination",
    "Hydroxylation",
    "Sumoylation",
    "Glycosylation",
    "Acetylation",
    "Farnesylation",
    "Ribosylation",
    "Methylation",
    "Hydrolysis",
]

MODIFICATION_EVENTS = frozenset(
    _MODIFICATIONS + [f"De{label.lower()}" for label in _MODIFICATIONS]
)
COMPLEX_ASSEMBLY_EVENTS = frozenset({"Binding"})
TRANSLOCATION_EVENTS = frozenset({"Translocation"})
ACTIVATION_EVENTS = frozenset({"Positive_activation", "Negative_activation"})
REGULATION_EVENTS = frozenset({"Positive_regulation", "Negative_regulation"})

EVENT_LABELS = (
    MODIFICATION_EVENTS
    | COMPLEX_ASSEMBLY_EVENTS
    | TRANSLOCATION_EVENTS
    | ACTIVATION_EVENTS
    | REGULATION_EVENTS
)

ENTITY_LABELS = frozenset({
    "Gene_or_gene_product",
    "Protein",
    "Complex",
    "Family",
    "Simple_chemical",
    "Cellular_component",
    "Site",
    "Mutant",
    "BioProcess",
    "Species",
    "Cell_type",
    "Cell_line",
    "Organ",
    "TissueType",
})

PRECEDENCE_LABEL = "Precedence"

KNOWN_LABELS = EVENT_LABELS | ENTITY_LABELS | {PRECEDENCE_LABEL}


def event_type(label: str) -> str:
    """Map an event label to its coarse event type.

    Raises:
        UnsupportedRelationLabelError: If the label is not an event label.
    """
    if label in MODIFICATION_EVENTS:
        return "protein-modification"
    if label in COMPLEX_ASSEMBLY_EVENTS:
        return "complex-assembly"
    if label in TRANSLOCATION_EVENTS:
        return "translocation"
    if label in ACTIVATION_EVENTS:
        return "activation"
    if label in REGULATION_EVENTS:
        return "regulation"
    raise UnsupportedRelationLabelError(label)


# =============================================================================
# Text containers
# =============================================================================


@dataclass(frozen=True)
class Sentence:
    """One tokenized sentence.

    Attributes:
        words: Surface tokens
        lemmas: Optional lemmas, aligned with words
        tags: Optional Penn Treebank POS tags, aligned with words
    """

    words: tuple[str, ...]
    lemmas: tuple[str, ...] | None = None
    tags: tuple[str, ...] | None = None

    def __len__(self) -> int:
        return len(self.words)

    def lemma(self, i: int) -> str:
        """Lemma of token i, falling back to the lowercased word."""
        if self.lemmas is not None:
            return self.lemmas[i].lower()
        return self.words[i].lower()

    def tag(self, i: int) -> str | None:
        return self.tags[i] if self.tags is not None else None


@dataclass(frozen=True)
class Document:
    """A document: an identifier plus its sentences."""

    doc_id: str
    sentences: tuple[Sentence, ...] = ()


# =============================================================================
# Mention
# =============================================================================


@dataclass(frozen=True, eq=False)
class Mention:
    """A labeled span of text found by an extraction rule.

    Identity is the ``key``: document, sentence, token span, label, the rule
    that found it and the identities of its arguments. Two mentions with the
    same span but different ``found_by`` are distinct mentions that will
    normally fall into the same EER.
    """

    label: str
    document: Document
    sentence: int
    start: int
    end: int
    found_by: str
    arguments: Mapping[str, tuple["Mention", ...]] = field(default_factory=dict)
    trigger: tuple[int, int] | None = None
    negated: bool = False
    hypothesized: bool = False

    @property
    def key(self) -> tuple[Any, ...]:
        args = tuple(
            (role, tuple(sorted(repr(arg.key) for arg in self.arguments[role])))
            for role in sorted(self.arguments)
        )
        return (
            self.document.doc_id,
            self.sentence,
            self.start,
            self.end,
            self.label,
            self.found_by,
            args,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mention):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __repr__(self) -> str:
        return (
            f"Mention({self.label!r}, doc={self.document.doc_id!r}, "
            f"sent={self.sentence}, span=({self.start}, {self.end}), "
            f"text={self.text!r}, found_by={self.found_by!r})"
        )

    @property
    def sentence_obj(self) -> Sentence:
        return self.document.sentences[self.sentence]

    @property
    def words(self) -> tuple[str, ...]:
        return self.sentence_obj.words[self.start:self.end]

    @property
    def text(self) -> str:
        return " ".join(self.words)

    @property
    def trigger_span(self) -> tuple[int, int]:
        """Token span of the predicate, or the whole mention if unknown."""
        return self.trigger if self.trigger is not None else (self.start, self.end)

    @property
    def is_event(self) -> bool:
        return self.label in EVENT_LABELS

    def argument(self, role: str) -> tuple["Mention", ...]:
        return tuple(self.arguments.get(role, ()))

    def iter_arguments(self) -> Iterable["Mention"]:
        """Yield every argument mention, recursively."""
        for role in sorted(self.arguments):
            for arg in self.arguments[role]:
                yield arg
                yield from arg.iter_arguments()

    def contains(self, other: "Mention") -> bool:
        """True if other is a (transitive) argument of this mention."""
        return any(arg == other for arg in self.iter_arguments())


def precedence_mention(before: Mention, after: Mention, found_by: str) -> Mention:
    """Build the evidence mention emitted when a precedence rule fires.

    The span covers both events when they share a sentence, otherwise it
    covers the later event.
    """
    if before.document.doc_id == after.document.doc_id and before.sentence == after.sentence:
        sentence = before.sentence
        start = min(before.start, after.start)
        end = max(before.end, after.end)
    else:
        later = max((before, after), key=lambda m: (m.sentence, m.start))
        sentence, start, end = later.sentence, later.start, later.end

    return Mention(
        label=PRECEDENCE_LABEL,
        document=after.document,
        sentence=sentence,
        start=start,
        end=end,
        found_by=found_by,
        arguments={"before": (before,), "after": (after,)},
    )


# =============================================================================
# Validation
# =============================================================================


def validate_mention(mention: Mention) -> None:
    """Reject malformed mentions before they reach the sieve pipeline.

    Raises:
        UnsupportedRelationLabelError: Unknown label.
        MissingArgumentError: An event lacks a required argument role.
    """
    if mention.label not in KNOWN_LABELS:
        raise UnsupportedRelationLabelError(mention.label)

    if mention.is_event:
        kind = event_type(mention.label)
        if kind in ("protein-modification", "translocation"):
            _require(mention, "theme")
        elif kind == "complex-assembly":
            _require(mention, "theme")
            if len(mention.argument("theme")) < 2:
                raise MissingArgumentError(mention, "theme")
        else:
            _require(mention, "controller")
            _require(mention, "controlled")

    for args in mention.arguments.values():
        for arg in args:
            validate_mention(arg)


def validate_mentions(mentions: Iterable[Mention]) -> list[Mention]:
    """Validate every mention; returns them as a list."""
    validated = []
    for mention in mentions:
        validate_mention(mention)
        validated.append(mention)
    logger.debug(f"Validated {len(validated)} mentions")
    return validated


def _require(mention: Mention, role: str) -> None:
    if not mention.argument(role):
        raise MissingArgumentError(mention, role)
