"""Deduplication sieve."""

from __future__ import annotations

import logging
from typing import Sequence

from event_assembly.manager import AssemblyManager
from event_assembly.mentions import Mention

logger = logging.getLogger(__name__)


class DeduplicationSieves:
    """Sieves that build the EER index. Must run before any precedence sieve."""

    def track_mentions(self, mentions: Sequence[Mention], manager: AssemblyManager) -> AssemblyManager:
        """Register every mention into the manager's EERs."""
        manager.track_mentions(mentions)
        logger.info(
            f"Deduplicated {len(mentions)} mentions into "
            f"{len(manager.distinct_eers())} event EERs"
        )
        return manager
