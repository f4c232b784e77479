"""Sieve abstraction and composition.

A sieve is a named function ``(mentions, manager) -> manager``. Sieves are
composed into a SievePipeline, an explicit ordered tuple of stages applied
left to right. Order matters: later stages see the EERs and edges created
by earlier ones, and the first stage to assert an edge keeps its
attribution.

Example:
    >>> pipeline = (
    ...     AssemblySieve("dedup", dedup.track_mentions)
    ...     .and_then(AssemblySieve("withinRbPrecedence", precedence.within_rb_precedence))
    ... )
    >>> manager = pipeline.apply(mentions)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Sequence, Union

from event_assembly.manager import AssemblyManager
from event_assembly.mentions import Mention

logger = logging.getLogger(__name__)

SieveFunction = Callable[[Sequence[Mention], AssemblyManager], AssemblyManager]


@dataclass(frozen=True)
class AssemblySieve:
    """A single named pipeline stage."""

    name: str
    fn: SieveFunction

    def apply(
        self,
        mentions: Sequence[Mention],
        manager: AssemblyManager | None = None,
    ) -> AssemblyManager:
        """Run this sieve, creating a fresh manager when none is given."""
        return SievePipeline((self,)).apply(mentions, manager)

    def and_then(self, other: Union["AssemblySieve", "SievePipeline"]) -> "SievePipeline":
        return SievePipeline((self,)).and_then(other)


@dataclass(frozen=True)
class SievePipeline:
    """An ordered sequence of sieves. The empty pipeline is the identity."""

    stages: tuple[AssemblySieve, ...] = ()

    @property
    def names(self) -> list[str]:
        return [stage.name for stage in self.stages]

    def and_then(self, other: Union[AssemblySieve, "SievePipeline"]) -> "SievePipeline":
        if isinstance(other, AssemblySieve):
            return SievePipeline(self.stages + (other,))
        return SievePipeline(self.stages + other.stages)

    def apply(
        self,
        mentions: Sequence[Mention],
        manager: AssemblyManager | None = None,
    ) -> AssemblyManager:
        """Thread one manager through every stage in order.

        A failing stage stops the chain: the error is logged and re-raised,
        and the manager keeps whatever earlier stages committed.
        """
        if manager is None:
            manager = AssemblyManager()

        for stage in self.stages:
            logger.debug(f"Applying sieve '{stage.name}' to {len(mentions)} mentions")
            try:
                manager = stage.fn(mentions, manager)
            except Exception as e:
                logger.error(f"Sieve '{stage.name}' failed, aborting pipeline: {e}")
                raise
        return manager

    def __len__(self) -> int:
        return len(self.stages)
