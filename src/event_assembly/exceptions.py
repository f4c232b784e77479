"""Standard exception hierarchy for event-assembly.

All event-assembly exceptions inherit from AssemblyError, making it easy
to catch every library-specific error.

Exception Hierarchy:
    AssemblyError (base)
    ├── ConfigurationError - Invalid configuration
    ├── NotTrackedError - Mention or EER hash never deduplicated
    ├── MissingArgumentError - Event lacks a required argument role
    ├── UnsupportedRelationLabelError - Label outside the known vocabulary
    └── ClassifierError - Base for precedence classifier errors
        └── ModelNotTrainedError - Prediction with an unfitted model
"""

from __future__ import annotations

from typing import Any


class AssemblyError(Exception):
    """Base exception for all event-assembly errors.

    Catch this to handle any library-specific exception:
        try:
            manager = apply_sieves(mentions)
        except AssemblyError as e:
            logger.error(f"Assembly failed: {e}")
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{super().__str__()} (caused by: {self.cause})"
        return super().__str__()


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(AssemblyError):
    """Invalid configuration.

    Raised when AssemblyConfig has out-of-range values or a config file
    cannot be parsed.
    """

    pass


# =============================================================================
# Registry Errors
# =============================================================================


class NotTrackedError(AssemblyError):
    """A mention (or EER hash) was never passed through deduplication.

    Fatal to the sieve that hit it: an edge cannot point at an EER that
    does not exist.
    """

    def __init__(self, mention: Any, cause: Exception | None = None):
        self.mention = mention
        super().__init__(f"Not tracked by the assembly manager: {mention!r}", cause)


# =============================================================================
# Input Errors
# =============================================================================


class MissingArgumentError(AssemblyError):
    """An event mention lacks a required argument role.

    Raised for upstream extraction defects, e.g. a regulation without a
    controlled argument.
    """

    def __init__(self, mention: Any, role: str):
        self.mention = mention
        self.role = role
        label = getattr(mention, "label", "?")
        super().__init__(f"{label} mention is missing required argument '{role}': {mention!r}")


class UnsupportedRelationLabelError(AssemblyError):
    """A relation or event label is outside the recognized vocabulary."""

    def __init__(self, label: str):
        self.label = label
        super().__init__(f"Unsupported label: {label!r}")


# =============================================================================
# Classifier Errors
# =============================================================================


class ClassifierError(AssemblyError):
    """Base exception for precedence classifier errors."""

    pass


class ModelNotTrainedError(ClassifierError):
    """Raised when predicting with a classifier that was never fitted."""

    def __init__(self, message: str = "Precedence classifier has not been trained"):
        super().__init__(message)
