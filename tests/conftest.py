"""Pytest configuration for event-assembly tests."""

from __future__ import annotations

from typing import Sequence

import pytest

from event_assembly.manager import AssemblyManager
from event_assembly.mentions import Document, Mention, Sentence


# =============================================================================
# Mention Factory
# =============================================================================


class MentionFactory:
    """Builds documents and mentions without an upstream extraction engine.

    Usage:
        def test_something(factory):
            doc = factory.document(("X phosphorylates Y .", "NN VBZ NN ."))
            x = factory.entity(doc, 0, 0)
            y = factory.entity(doc, 0, 2)
            event = factory.event("Phosphorylation", doc, 0, 0, 3, trigger=1,
                                  theme=y, controller=x)
    """

    def document(self, *sentences: tuple[str, str | None] | str, doc_id: str = "PMC0001") -> Document:
        """Build a document from ``"words"`` or ``("words", "tags")`` sentences."""
        built = []
        for sentence in sentences:
            if isinstance(sentence, str):
                words, tags = sentence, None
            else:
                words, tags = sentence
            built.append(
                Sentence(
                    tuple(words.split()),
                    tags=tuple(tags.split()) if tags is not None else None,
                )
            )
        return Document(doc_id, tuple(built))

    def entity(
        self,
        doc: Document,
        sentence: int,
        start: int,
        end: int | None = None,
        label: str = "Protein",
        found_by: str = "ner",
    ) -> Mention:
        return Mention(label, doc, sentence, start, start + 1 if end is None else end, found_by)

    def event(
        self,
        label: str,
        doc: Document,
        sentence: int,
        start: int,
        end: int,
        trigger: int | tuple[int, int] | None = None,
        found_by: str = "event_rule",
        negated: bool = False,
        hypothesized: bool = False,
        **arguments: Mention | Sequence[Mention],
    ) -> Mention:
        if isinstance(trigger, int):
            trigger = (trigger, trigger + 1)
        args = {
            role: (value,) if isinstance(value, Mention) else tuple(value)
            for role, value in arguments.items()
        }
        return Mention(
            label,
            doc,
            sentence,
            start,
            end,
            found_by,
            arguments=args,
            trigger=trigger,
            negated=negated,
            hypothesized=hypothesized,
        )


@pytest.fixture
def factory() -> MentionFactory:
    return MentionFactory()


# =============================================================================
# Scenario Fixtures
# =============================================================================


@pytest.fixture
def discourse_scenario(factory):
    """Two sentences linked by "After that": phosphorylation, then translocation.

    Returns:
        (mentions, phosphorylation, translocation)
    """
    doc = factory.document(
        ("X phosphorylates Y .", "NN VBZ NN ."),
        ("After that , Y translocates to the nucleus .", "IN DT , NN VBZ TO DT NN ."),
    )
    x = factory.entity(doc, 0, 0)
    y0 = factory.entity(doc, 0, 2)
    y1 = factory.entity(doc, 1, 3)
    phosphorylation = factory.event(
        "Phosphorylation", doc, 0, 0, 3, trigger=1, theme=y0, controller=x
    )
    translocation = factory.event("Translocation", doc, 1, 3, 8, trigger=4, theme=y1)
    return [x, y0, y1, phosphorylation, translocation], phosphorylation, translocation


@pytest.fixture
def within_scenario(factory):
    """One sentence: "A binds B , followed by phosphorylation of B ."

    Returns:
        (mentions, binding, phosphorylation)
    """
    doc = factory.document(
        (
            "A binds B , followed by phosphorylation of B .",
            "NN VBZ NN , VBN IN NN IN NN .",
        ),
    )
    a = factory.entity(doc, 0, 0)
    b = factory.entity(doc, 0, 2)
    b2 = factory.entity(doc, 0, 8)
    binding = factory.event("Binding", doc, 0, 0, 3, trigger=1, theme=(a, b))
    phosphorylation = factory.event("Phosphorylation", doc, 0, 6, 9, trigger=6, theme=b2)
    return [a, b, b2, binding, phosphorylation], binding, phosphorylation


@pytest.fixture
def tense_scenario(factory):
    """Past perfect then past simple: "X had phosphorylated Y . Y translocated ."

    Returns:
        (mentions, phosphorylation, translocation)
    """
    doc = factory.document(
        ("X had phosphorylated Y .", "NN VBD VBN NN ."),
        ("Y translocated .", "NN VBD ."),
    )
    x = factory.entity(doc, 0, 0)
    y0 = factory.entity(doc, 0, 3)
    y1 = factory.entity(doc, 1, 0)
    phosphorylation = factory.event(
        "Phosphorylation", doc, 0, 0, 4, trigger=2, theme=y0, controller=x
    )
    translocation = factory.event("Translocation", doc, 1, 0, 2, trigger=1, theme=y1)
    return [x, y0, y1, phosphorylation, translocation], phosphorylation, translocation


@pytest.fixture
def combined_scenario(factory):
    """Tense and a discourse cue agree: "X had phosphorylated Y . Then , Y translocated ."

    Returns:
        (mentions, phosphorylation, translocation)
    """
    doc = factory.document(
        ("X had phosphorylated Y .", "NN VBD VBN NN ."),
        ("Then , Y translocated .", "RB , NN VBD ."),
    )
    x = factory.entity(doc, 0, 0)
    y0 = factory.entity(doc, 0, 3)
    y1 = factory.entity(doc, 1, 2)
    phosphorylation = factory.event(
        "Phosphorylation", doc, 0, 0, 4, trigger=2, theme=y0, controller=x
    )
    translocation = factory.event("Translocation", doc, 1, 2, 4, trigger=3, theme=y1)
    return [x, y0, y1, phosphorylation, translocation], phosphorylation, translocation


@pytest.fixture
def cue_and_tense_scenario(factory):
    """A within cue and tense agree: "X had phosphorylated Y before Y translocated ."

    Returns:
        (mentions, phosphorylation, translocation)
    """
    doc = factory.document(
        ("X had phosphorylated Y before Y translocated .", "NN VBD VBN NN IN NN VBD ."),
    )
    x = factory.entity(doc, 0, 0)
    y0 = factory.entity(doc, 0, 3)
    y1 = factory.entity(doc, 0, 5)
    phosphorylation = factory.event(
        "Phosphorylation", doc, 0, 0, 4, trigger=2, theme=y0, controller=x
    )
    translocation = factory.event("Translocation", doc, 0, 5, 7, trigger=6, theme=y1)
    return [x, y0, y1, phosphorylation, translocation], phosphorylation, translocation


def tracked(mentions) -> AssemblyManager:
    """A manager with the mentions already deduplicated."""
    return AssemblyManager().track_mentions(mentions)


@pytest.fixture
def track():
    return tracked
