"""
Smoke tests for configuration loading and validation.
"""

import pytest

from main import load_config, validate_config
from models.config import Config


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        """A complete valid config passes validation."""
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("section", ["model", "worker", "log_path", "log_level"])
    def test_missing_required_section(self, valid_config, section):
        """Each required section is reported by name when missing."""
        del valid_config[section]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert section in error.lower()

    def test_client_section_optional(self, valid_config):
        """The UI-side client section may be omitted."""
        del valid_config["client"]

        is_valid, _ = validate_config(valid_config)

        assert is_valid is True

    def test_empty_model_path(self, valid_config):
        """model.path must be set."""
        valid_config["model"]["path"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "model.path" in error

    @pytest.mark.parametrize("target_size", [0, -320, "320", 320.0, True])
    def test_invalid_target_size(self, valid_config, target_size):
        """target_size must be a positive integer."""
        valid_config["model"]["target_size"] = target_size

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "target_size" in error

    def test_empty_input_name(self, valid_config):
        valid_config["model"]["input_name"] = ""

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "input_name" in error

    @pytest.mark.parametrize("port", [0, 70000, "8765"])
    def test_invalid_port(self, valid_config, port):
        valid_config["worker"]["port"] = port

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "port" in error

    def test_negative_restart_delay(self, valid_config):
        valid_config["worker"]["restart_delay_s"] = -1

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "restart_delay_s" in error

    def test_null_timeout_means_no_timeout(self, valid_config):
        """A null client timeout is valid."""
        valid_config["client"]["timeout_s"] = None

        is_valid, _ = validate_config(valid_config)

        assert is_valid is True

    def test_non_positive_timeout(self, valid_config):
        valid_config["client"]["timeout_s"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "timeout_s" in error

    def test_invalid_log_level(self, valid_config):
        """Unknown log level fails validation."""
        valid_config["log_level"] = "VERBOSE"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_yaml(self, temp_config_dir):
        """Loads default.yaml when config.yaml does not exist."""
        config_path = str(temp_config_dir / "config.yaml")

        config = load_config(config_path)

        assert config["model"]["target_size"] == 320
        assert config["worker"]["port"] == 8765

    def test_local_overrides_merge(self, temp_config_dir):
        """config.yaml overrides default.yaml values."""
        config_yaml = temp_config_dir / "config.yaml"
        config_yaml.write_text("""
worker:
  port: 9000
log_level: "DEBUG"
""")

        config = load_config(str(config_yaml))

        assert config["worker"]["port"] == 9000
        assert config["log_level"] == "DEBUG"
        # Untouched values come from default.yaml
        assert config["worker"]["host"] == "127.0.0.1"

    def test_explicit_config_overrides_local(self, temp_config_dir):
        """An explicit --config file is layered on top of config.yaml."""
        (temp_config_dir / "config.yaml").write_text("model:\n  path: local.onnx\n")
        explicit = temp_config_dir / "bench.yaml"
        explicit.write_text("model:\n  path: bench.onnx\n")

        config = load_config(str(explicit))

        assert config["model"]["path"] == "bench.onnx"
        assert config["model"]["input_name"] == "images"


class TestTypedConfig:
    def test_defaults(self):
        cfg = Config.from_dict({})

        assert cfg.model.target_size == 320
        assert cfg.model.input_name == "images"
        assert cfg.worker.restart_delay_s == 5.0
        assert cfg.client.timeout_s is None

    def test_from_dict_to_dict(self, valid_config):
        cfg = Config.from_dict(valid_config)

        assert cfg.worker.port == 8765
        assert cfg.to_dict()["model"] == valid_config["model"]
        assert "timeout_s" not in cfg.to_dict()["client"]
