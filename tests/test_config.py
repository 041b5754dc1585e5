"""
Smoke tests for configuration loading, validation and typed config models.
"""

import pytest

from main import load_config, validate_config
from greeting.engine import EngineConfig
from models.config import Config


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("section", ["detection", "greeting", "speech", "log_path", "log_level"])
    def test_missing_required_section(self, valid_config, section):
        del valid_config[section]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert section in error

    def test_invalid_detection_backend(self, valid_config):
        valid_config["detection"]["backend"] = "lidar"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "detection.backend" in error

    def test_zero_threshold_rejected(self, valid_config):
        valid_config["detection"]["positive_threshold"] = 0
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "positive_threshold" in error

    def test_float_threshold_rejected(self, valid_config):
        valid_config["detection"]["negative_threshold"] = 2.5
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "negative_threshold" in error

    def test_negative_debounce_rejected(self, valid_config):
        valid_config["detection"]["debounce_ms"] = -1
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "debounce_ms" in error

    def test_zero_debounce_allowed(self, valid_config):
        valid_config["detection"]["debounce_ms"] = 0
        is_valid, _ = validate_config(valid_config)
        assert is_valid is True

    def test_probability_out_of_range(self, valid_config):
        valid_config["detection"]["simulated_probability"] = 1.5
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "simulated_probability" in error

    @pytest.mark.parametrize("key", ["session_duration_s", "cooldown_s", "face_lost_grace_s"])
    def test_non_positive_durations_rejected(self, valid_config, key):
        valid_config["greeting"][key] = 0
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert key in error

    def test_unsupported_language(self, valid_config):
        valid_config["greeting"]["language"] = "fr-FR"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "language" in error

    def test_invalid_speech_backend(self, valid_config):
        valid_config["speech"]["backend"] = "cloud"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "speech.backend" in error

    def test_invalid_device_id_type(self, valid_config):
        valid_config["detection"]["camera"]["device_id"] = [1, 2]
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "device_id" in error

    def test_negative_device_id(self, valid_config):
        valid_config["detection"]["camera"]["device_id"] = -1
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "device_id" in error

    def test_rtsp_device_id_allowed(self, valid_config):
        valid_config["detection"]["camera"]["device_id"] = "rtsp://10.0.0.5/stream"
        is_valid, _ = validate_config(valid_config)
        assert is_valid is True

    def test_invalid_port(self, valid_config):
        valid_config["web"]["port"] = 70000
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "web.port" in error

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "VERBOSE"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "log_level" in error


class TestLoadConfig:
    """Tests for load_config layering."""

    def test_loads_default_yaml(self, temp_config_dir):
        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["detection"]["backend"] == "opencv"
        assert config["greeting"]["cooldown_s"] == 30
        assert config["log_level"] == "INFO"

    def test_local_overrides_are_merged(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("""
greeting:
  language: "ta-IN"
""")
        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["greeting"]["language"] == "ta-IN"
        # untouched sibling keys survive the deep merge
        assert config["greeting"]["cooldown_s"] == 30

    def test_explicit_path_applied_last(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("""
detection:
  backend: "simulated"
""")
        explicit = temp_config_dir / "kiosk-ward-3.yaml"
        explicit.write_text("""
detection:
  positive_threshold: 4
log_level: "DEBUG"
""")
        config = load_config(str(explicit))

        assert config["detection"]["backend"] == "simulated"
        assert config["detection"]["positive_threshold"] == 4
        assert config["detection"]["debounce_ms"] == 500
        assert config["log_level"] == "DEBUG"

    def test_loaded_defaults_validate(self, temp_config_dir):
        config = load_config(str(temp_config_dir / "config.yaml"))
        is_valid, error = validate_config(config)
        assert is_valid is True, error


class TestConfigModels:
    def test_from_dict(self, valid_config):
        config = Config.from_dict(valid_config)

        assert config.detection.backend == "simulated"
        assert config.detection.positive_threshold == 2
        assert config.detection.camera.device_id == 0
        assert config.greeting.face_lost_grace_s == 8
        assert config.speech.backend == "log"
        assert config.web.host == "127.0.0.1"
        assert config.log_path == "logs/test.log"

    def test_defaults_for_missing_sections(self):
        config = Config.from_dict({})

        assert config.detection.debounce_ms == 500
        assert config.greeting.session_duration_s == 60
        assert config.greeting.cooldown_s == 30
        assert config.speech.backend == "pyttsx3"
        assert config.web.port == 5000

    def test_round_trip_through_dict(self, valid_config):
        config = Config.from_dict(valid_config)
        assert Config.from_dict(config.to_dict()) == config

    def test_engine_config_from_config(self, valid_config):
        valid_config["greeting"]["language"] = "hi-IN"
        valid_config["greeting"]["auto_interaction_enabled"] = False
        engine_cfg = EngineConfig.from_config(Config.from_dict(valid_config))

        assert engine_cfg.debounce_ms == 500
        assert engine_cfg.negative_threshold == 3
        assert engine_cfg.timings.cooldown_s == 30.0
        assert engine_cfg.timings.face_lost_grace_s == 8.0
        assert engine_cfg.language == "hi-IN"
        assert engine_cfg.auto_interaction_enabled is False
