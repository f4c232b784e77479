"""Canonicalization of mentions into equivalence hashes.

Two mentions denote the same event when they share a label, the same
normalized arguments (in any order, under any paraphrase of the
surrounding text) and the same modality flags. Their canonical forms are
then identical and so are their equivalence hashes. Collisions between
distinct mentions are the deduplication mechanism, not an error.

The functions here are pure: they never consult an AssemblyManager.
"""

from __future__ import annotations

import hashlib
import json
import re
import string
from typing import Any

from event_assembly.mentions import Mention

_WHITESPACE = re.compile(r"\s+")
_EDGE_PUNCTUATION = string.punctuation + "–—"


def normalize_text(text: str) -> str:
    """Lowercase, collapse whitespace and strip surrounding punctuation."""
    text = _WHITESPACE.sub(" ", text.lower()).strip()
    return text.strip(_EDGE_PUNCTUATION).strip()


def canonical_form(mention: Mention) -> dict[str, Any]:
    """Build the order-independent structure that identifies an event.

    Entities reduce to their label and normalized text. Events keep their
    label, modality flags and, per argument role, the sorted canonical keys
    of their arguments. An event without arguments falls back to its text
    but still keeps its modality flags.
    """
    form: dict[str, Any] = {"label": mention.label}
    if mention.arguments:
        form["arguments"] = {
            role: sorted(canonical_key(arg) for arg in args)
            for role, args in mention.arguments.items()
            if args
        }
    else:
        form["text"] = normalize_text(mention.text)

    if mention.is_event or mention.arguments:
        form["negated"] = mention.negated
        form["hypothesized"] = mention.hypothesized
    return form


def canonical_key(mention: Mention) -> str:
    """Serialize the canonical form; equal keys mean equivalent mentions."""
    return json.dumps(canonical_form(mention), sort_keys=True, separators=(",", ":"))


def equivalence_hash(mention: Mention) -> int:
    """Deterministic 63-bit hash of the canonical key.

    Unlike the builtin hash(), the value is stable across processes, so
    gold relations computed in one run can be compared with another.
    """
    digest = hashlib.sha256(canonical_key(mention).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") >> 1
