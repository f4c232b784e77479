"""Tests for AssemblyConfig."""

import os
from unittest.mock import patch

import pytest

from event_assembly.config import (
    AssemblyConfig,
    ClassifierConfig,
    EvaluationConfig,
    RuleConfig,
    load_config,
)
from event_assembly.exceptions import ConfigurationError


class TestAssemblyConfig:
    """Tests for AssemblyConfig."""

    def test_default_config(self):
        """Test creating default configuration."""
        config = AssemblyConfig()

        assert config.rules.within_max_tokens == 25
        assert config.rules.between_window == 1
        assert config.classifier.model_path is None
        assert config.classifier.threshold == 0.5
        assert config.evaluation.smoothing == 1e-5
        assert config.evaluation.include_full_pipeline is False

    def test_custom_config(self):
        """Test creating custom configuration."""
        config = AssemblyConfig(
            rules=RuleConfig(reichenbach_window=2),
            classifier=ClassifierConfig(model_path="precedence.joblib", threshold=0.8),
        )

        assert config.rules.reichenbach_window == 2
        assert config.classifier.model_path == "precedence.joblib"
        assert config.classifier.threshold == 0.8

    def test_from_env_defaults(self):
        """Test loading from environment with no vars set."""
        with patch.dict(os.environ, {}, clear=True):
            config = AssemblyConfig.from_env()

        assert config == AssemblyConfig()

    def test_from_env_with_vars(self):
        """Test loading from environment variables."""
        env = {
            "ASSEMBLY_WITHIN_MAX_TOKENS": "10",
            "ASSEMBLY_BETWEEN_WINDOW": "2",
            "ASSEMBLY_CLASSIFIER_MODEL": "/models/precedence.joblib",
            "ASSEMBLY_CLASSIFIER_THRESHOLD": "0.7",
            "ASSEMBLY_MAX_WORKERS": "3",
            "ASSEMBLY_INCLUDE_FULL_PIPELINE": "true",
        }
        with patch.dict(os.environ, env, clear=True):
            config = AssemblyConfig.from_env()

        assert config.rules.within_max_tokens == 10
        assert config.rules.between_window == 2
        assert config.classifier.model_path == "/models/precedence.joblib"
        assert config.classifier.threshold == 0.7
        assert config.evaluation.max_workers == 3
        assert config.evaluation.include_full_pipeline is True

    def test_from_env_invalid_number(self):
        """Test non-numeric environment values raise ConfigurationError."""
        with patch.dict(os.environ, {"ASSEMBLY_SMOOTHING": "tiny"}, clear=True):
            with pytest.raises(ConfigurationError):
                AssemblyConfig.from_env()

    def test_default_method(self):
        """Test the default() class method."""
        config = AssemblyConfig.default()
        assert config == AssemblyConfig()


class TestValidation:
    """Tests for value range checks."""

    @pytest.mark.parametrize(
        "config",
        [
            AssemblyConfig(rules=RuleConfig(within_max_tokens=-1)),
            AssemblyConfig(rules=RuleConfig(between_window=0)),
            AssemblyConfig(classifier=ClassifierConfig(threshold=1.5)),
            AssemblyConfig(classifier=ClassifierConfig(regularization=0)),
            AssemblyConfig(evaluation=EvaluationConfig(smoothing=0)),
            AssemblyConfig(evaluation=EvaluationConfig(max_workers=0)),
        ],
    )
    def test_out_of_range_rejected(self, config):
        """Test out-of-range values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            config.validate()

    def test_validate_returns_self(self):
        """Test validate() can be chained."""
        config = AssemblyConfig()
        assert config.validate() is config


class TestFromDict:
    """Tests for building config from parsed YAML."""

    def test_nested_sections(self):
        """Test sections map onto their dataclasses."""
        config = AssemblyConfig.from_dict({
            "rules": {"within_max_tokens": 5},
            "evaluation": {"include_full_pipeline": True},
        })

        assert config.rules.within_max_tokens == 5
        assert config.rules.between_window == 1
        assert config.evaluation.include_full_pipeline is True

    def test_string_values_coerced(self):
        """Test string values are converted to the field type."""
        config = AssemblyConfig.from_dict({
            "classifier": {"threshold": "0.25", "window": "3", "model_path": ""},
            "evaluation": {"include_full_pipeline": "TRUE"},
        })

        assert config.classifier.threshold == 0.25
        assert config.classifier.window == 3
        assert config.classifier.model_path is None
        assert config.evaluation.include_full_pipeline is True

    def test_unknown_section_rejected(self):
        """Test unknown top-level sections raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="sections"):
            AssemblyConfig.from_dict({"memory": {}})

    def test_unknown_key_rejected(self):
        """Test unknown keys raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="window_size"):
            AssemblyConfig.from_dict({"rules": {"window_size": 3}})

    def test_bad_value_rejected(self):
        """Test unconvertible values raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            AssemblyConfig.from_dict({"rules": {"between_window": "two"}})


class TestLoadConfig:
    """Tests for load_config."""

    def test_load_yaml_file(self, tmp_path):
        """Test loading an explicit YAML file."""
        path = tmp_path / "assembly.yaml"
        path.write_text(
            "rules:\n"
            "  reichenbach_window: 0\n"
            "classifier:\n"
            "  threshold: 0.9\n"
        )

        config = load_config(path)

        assert config.rules.reichenbach_window == 0
        assert config.classifier.threshold == 0.9

    def test_env_vars_expanded(self, tmp_path):
        """Test ${VAR} references are expanded."""
        path = tmp_path / "assembly.yaml"
        path.write_text("classifier:\n  model_path: ${MODEL_DIR}/precedence.joblib\n")

        with patch.dict(os.environ, {"MODEL_DIR": "/srv/models"}):
            config = load_config(path)

        assert config.classifier.model_path == "/srv/models/precedence.joblib"

    def test_missing_file_uses_defaults(self, tmp_path):
        """Test a missing explicit path falls back to defaults."""
        config = load_config(tmp_path / "nope.yaml")
        assert config == AssemblyConfig()

    def test_empty_file_uses_defaults(self, tmp_path):
        """Test an empty file yields defaults."""
        path = tmp_path / "assembly.yaml"
        path.write_text("")
        assert load_config(path) == AssemblyConfig()

    def test_invalid_yaml_raises(self, tmp_path):
        """Test unparsable YAML raises ConfigurationError."""
        path = tmp_path / "assembly.yaml"
        path.write_text("rules: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path):
        """Test a YAML list at the top level raises ConfigurationError."""
        path = tmp_path / "assembly.yaml"
        path.write_text("- rules\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_searches_working_directory(self, tmp_path, monkeypatch):
        """Test default file names are found from the working directory."""
        (tmp_path / ".assembly.yml").write_text("rules:\n  within_max_tokens: 7\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert load_config().rules.within_max_tokens == 7

    def test_search_stops_at_depth(self, tmp_path, monkeypatch):
        """Test config files too far above the working directory are ignored."""
        (tmp_path / "assembly.yaml").write_text("rules:\n  within_max_tokens: 7\n")
        nested = tmp_path.joinpath(*"abcdef")
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        assert load_config() == AssemblyConfig()
