"""Unified configuration for event assembly.

AssemblyConfig configures every tunable part of the sieve pipeline:
- Rule-based precedence windows
- The feature-based precedence classifier
- Evaluation scoring and parallelism

Configuration can be built directly, from environment variables, or from
an assembly.yaml file:

    rules:
      within_max_tokens: 25
      reichenbach_window: 1
    classifier:
      model_path: ${ASSEMBLY_HOME}/models/precedence.joblib
      threshold: 0.6
    evaluation:
      smoothing: 0.00001
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from event_assembly.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default config file names to search for
DEFAULT_CONFIG_FILES = [
    "assembly.yaml",
    "assembly.yml",
    ".assembly.yaml",
    ".assembly.yml",
]

# Parent directories searched above the working directory
SEARCH_DEPTH = 5


@dataclass
class RuleConfig:
    """Configuration for the rule-based precedence sieves."""

    within_max_tokens: int = 25
    """Maximum number of tokens between two events for within-sentence cues."""

    between_window: int = 1
    """How many following sentences a discourse cue may link to."""

    reichenbach_window: int = 1
    """Maximum sentence distance between events ordered by tense/aspect."""


@dataclass
class ClassifierConfig:
    """Configuration for the feature-based precedence classifier."""

    model_path: str | None = None
    threshold: float = 0.5
    window: int = 1
    max_iter: int = 1000
    regularization: float = 1.0  # inverse strength, sklearn's C
    random_state: int = 42


@dataclass
class EvaluationConfig:
    """Configuration for scoring sieve output against gold relations."""

    smoothing: float = 1e-5
    max_workers: int | None = None
    include_full_pipeline: bool = False


@dataclass
class AssemblyConfig:
    """Main configuration for event assembly.

    Create from environment variables:
        config = AssemblyConfig.from_env()

    Or specify directly:
        config = AssemblyConfig(
            classifier=ClassifierConfig(model_path="precedence.joblib"),
        )
    """

    rules: RuleConfig = field(default_factory=RuleConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)

    def validate(self) -> "AssemblyConfig":
        """Check value ranges.

        Returns:
            self, so construction can be chained.

        Raises:
            ConfigurationError: If any value is out of range.
        """
        if self.rules.within_max_tokens < 0:
            raise ConfigurationError("rules.within_max_tokens must be >= 0")
        if self.rules.between_window < 1:
            raise ConfigurationError("rules.between_window must be >= 1")
        if self.rules.reichenbach_window < 0:
            raise ConfigurationError("rules.reichenbach_window must be >= 0")
        if not 0.0 <= self.classifier.threshold <= 1.0:
            raise ConfigurationError("classifier.threshold must be within [0, 1]")
        if self.classifier.window < 0:
            raise ConfigurationError("classifier.window must be >= 0")
        if self.classifier.regularization <= 0:
            raise ConfigurationError("classifier.regularization must be > 0")
        if self.evaluation.smoothing <= 0:
            raise ConfigurationError("evaluation.smoothing must be > 0")
        if self.evaluation.max_workers is not None and self.evaluation.max_workers < 1:
            raise ConfigurationError("evaluation.max_workers must be >= 1")
        return self

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "AssemblyConfig":
        """Build a configuration from a nested dict (e.g. parsed YAML).

        Raises:
            ConfigurationError: On unknown sections, unknown keys or values
                that cannot be converted.
        """
        sections = {
            "rules": RuleConfig,
            "classifier": ClassifierConfig,
            "evaluation": EvaluationConfig,
        }
        unknown = set(raw) - set(sections)
        if unknown:
            raise ConfigurationError(f"Unknown config sections: {sorted(unknown)}")

        built: dict[str, Any] = {}
        for name, section_cls in sections.items():
            built[name] = _build_section(section_cls, raw.get(name) or {}, name)
        return cls(**built).validate()

    @classmethod
    def from_env(cls) -> "AssemblyConfig":
        """Load configuration from environment variables.

        Environment variables:
        - ASSEMBLY_WITHIN_MAX_TOKENS: Token limit for within-sentence cues
        - ASSEMBLY_BETWEEN_WINDOW: Sentence window for discourse cues
        - ASSEMBLY_REICHENBACH_WINDOW: Sentence window for tense ordering
        - ASSEMBLY_CLASSIFIER_MODEL: Path to a saved precedence classifier
        - ASSEMBLY_CLASSIFIER_THRESHOLD: Minimum probability to add an edge
        - ASSEMBLY_CLASSIFIER_WINDOW: Sentence window for classifier pairs
        - ASSEMBLY_SMOOTHING: Additive smoothing for precision/recall/F1
        - ASSEMBLY_MAX_WORKERS: Threads for per-sieve evaluation
        - ASSEMBLY_INCLUDE_FULL_PIPELINE: true/false
        """
        try:
            max_workers = os.getenv("ASSEMBLY_MAX_WORKERS")
            return cls(
                rules=RuleConfig(
                    within_max_tokens=int(os.getenv("ASSEMBLY_WITHIN_MAX_TOKENS", "25")),
                    between_window=int(os.getenv("ASSEMBLY_BETWEEN_WINDOW", "1")),
                    reichenbach_window=int(os.getenv("ASSEMBLY_REICHENBACH_WINDOW", "1")),
                ),
                classifier=ClassifierConfig(
                    model_path=os.getenv("ASSEMBLY_CLASSIFIER_MODEL"),
                    threshold=float(os.getenv("ASSEMBLY_CLASSIFIER_THRESHOLD", "0.5")),
                    window=int(os.getenv("ASSEMBLY_CLASSIFIER_WINDOW", "1")),
                ),
                evaluation=EvaluationConfig(
                    smoothing=float(os.getenv("ASSEMBLY_SMOOTHING", "1e-5")),
                    max_workers=int(max_workers) if max_workers else None,
                    include_full_pipeline=os.getenv(
                        "ASSEMBLY_INCLUDE_FULL_PIPELINE", "false"
                    ).lower() == "true",
                ),
            ).validate()
        except ValueError as e:
            raise ConfigurationError("Invalid numeric value in environment", cause=e) from e

    @classmethod
    def default(cls) -> "AssemblyConfig":
        """Create a default configuration (same as no-arg constructor)."""
        return cls()


def load_config(path: Path | str | None = None) -> AssemblyConfig:
    """Load assembly configuration from a YAML file.

    If no path is provided, searches for default config files in the
    current directory and parent directories. Falls back to defaults when
    nothing is found.

    Raises:
        ConfigurationError: If the file exists but cannot be parsed.
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            logger.warning(f"Config file not found: {path}")
            return AssemblyConfig()
    else:
        config_path = _find_config_file()
        if config_path is None:
            logger.debug("No config file found, using defaults")
            return AssemblyConfig()

    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config file {config_path}", cause=e) from e

    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    logger.debug(f"Loaded config from {config_path}")
    return AssemblyConfig.from_dict(_expand_env_vars(raw))


def _find_config_file() -> Path | None:
    """Nearest default config file in the working directory or its parents."""
    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents[:SEARCH_DEPTH]):
        candidate = next(
            (directory / name for name in DEFAULT_CONFIG_FILES if (directory / name).is_file()),
            None,
        )
        if candidate is not None:
            logger.debug(f"Found config file: {candidate}")
            return candidate
    return None


def _build_section(section_cls: type, values: dict[str, Any], name: str) -> Any:
    """Instantiate one config dataclass, coercing string values."""
    if not isinstance(values, dict):
        raise ConfigurationError(f"Config section '{name}' must be a mapping")

    known = {f.name: f for f in fields(section_cls)}
    unknown = set(values) - set(known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in '{name}': {sorted(unknown)}")

    kwargs = {}
    for key, value in values.items():
        try:
            kwargs[key] = _coerce(value, str(known[key].type))
        except ValueError as e:
            raise ConfigurationError(f"Invalid value for {name}.{key}: {value!r}", cause=e) from e
    return section_cls(**kwargs)


def _coerce(value: Any, type_name: str) -> Any:
    """Convert a raw YAML value to the annotated field type."""
    optional = "None" in type_name
    if value is None or (optional and value == ""):
        if optional:
            return None
        raise ValueError("value is required")

    if type_name.startswith("bool"):
        if isinstance(value, str):
            return value.lower() == "true"
        return bool(value)
    if type_name.startswith("int"):
        return int(value)
    if type_name.startswith("float"):
        return float(value)
    return str(value)


def _expand_env_vars(raw: dict[str, Any]) -> dict[str, Any]:
    """Expand ${VAR} and $VAR in the string values of each section."""
    expanded: dict[str, Any] = {}
    for name, section in raw.items():
        if isinstance(section, dict):
            section = {
                key: os.path.expandvars(value) if isinstance(value, str) else value
                for key, value in section.items()
            }
        expanded[name] = section
    return expanded
