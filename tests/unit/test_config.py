"""Unit tests for PoiseConfig."""

from pathlib import Path

import pytest

from poise.config import DEFAULTS, PoiseConfig, find_config_file


@pytest.mark.unit
class TestPoiseConfig:
    """Test cases for configuration loading."""

    def test_defaults_without_config_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = PoiseConfig()

        assert config.config_file is None
        assert config.get("recorder.sample_period_seconds") == 0.2
        assert config.get("recorder.warmup_seconds") == 0.5
        assert config.get("chart.downsample_points") == 180

    def test_defaults_not_shared(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = PoiseConfig()

        config.set("recorder.warmup_seconds", 2.0)

        assert DEFAULTS["recorder"]["warmup_seconds"] == 0.5

    def test_partial_file_merged_with_defaults(self, write_config):
        path = write_config("recorder:\n  warmup_seconds: 0.0\n")

        config = PoiseConfig(path)

        assert config.get("recorder.warmup_seconds") == 0.0
        assert config.get("recorder.sample_period_seconds") == 0.2
        assert config.get("sensors.microphone.sample_rate") == 16000

    def test_relative_paths_resolved_against_config_dir(self, write_config, tmp_path):
        path = write_config(
            "storage:\n  data_directory: store\n"
            "sensors:\n  replay:\n    file_path: streams/hands.jsonl\n"
        )

        config = PoiseConfig(path)

        assert config.get("storage.data_directory") == str(tmp_path / "store")
        assert config.get("sensors.replay.file_path") == str(tmp_path / "streams" / "hands.jsonl")
        assert config.get("logging.file_path") == str(tmp_path / "data" / "logs" / "poise.log")
        assert config.get_sessions_directory() == str(tmp_path / "store" / "sessions")

    def test_absolute_paths_kept(self, write_config, tmp_path):
        target = tmp_path / "elsewhere"
        path = write_config(f"storage:\n  data_directory: {target}\n")

        assert PoiseConfig(path).get_data_directory() == str(target)

    def test_config_found_in_parent_directory(self, write_config, tmp_path, monkeypatch):
        write_config("chart:\n  downsample_points: 90\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = PoiseConfig()

        assert find_config_file() == (tmp_path / "poise.yaml").resolve()
        assert config.get("chart.downsample_points") == 90

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PoiseConfig(str(tmp_path / "missing.yaml"))

    @pytest.mark.parametrize("text", ["", "recorder: [1, 2\n", "- just\n- a list\n"])
    def test_invalid_files(self, write_config, text):
        path = write_config(text)

        with pytest.raises(ValueError):
            PoiseConfig(path)

    @pytest.mark.parametrize("key,value", [
        ("sample_period_seconds", 0),
        ("warmup_seconds", -0.1),
        ("min_update_interval_seconds", -1),
    ])
    def test_invalid_recorder_settings(self, write_config, key, value):
        path = write_config(f"recorder:\n  {key}: {value}\n")

        with pytest.raises(ValueError, match=key):
            PoiseConfig(path)

    def test_get_and_set(self, write_config):
        config = PoiseConfig(write_config("storage:\n  max_age_days: 7\n"))

        assert config.get("storage.max_age_days") == 7
        assert config.get("storage.nope", "fallback") == "fallback"
        assert config.get("recorder.warmup_seconds.deeper") is None

        config.set("ui.theme.color", "green")
        assert config.get("ui.theme.color") == "green"

    def test_example_config_loads(self):
        example = Path(__file__).resolve().parents[2] / "poise.example.yaml"

        config = PoiseConfig(str(example))

        assert config.get("recorder.sample_period_seconds") == 0.2
        assert config.get("sensors.microphone.device_index") is None
