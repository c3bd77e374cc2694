"""Simple YAML configuration loader for Poise."""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "poise.yaml"

DEFAULTS: Dict[str, Any] = {
    "recorder": {
        "sample_period_seconds": 0.2,
        "warmup_seconds": 0.5,
        "min_update_interval_seconds": 0.001,
    },
    "storage": {
        "data_directory": "data",
        "max_age_days": 30,
    },
    "logging": {
        "level": "INFO",
        "file_path": "data/logs/poise.log",
        "console_output": True,
    },
    "sensors": {
        "microphone": {
            "sample_rate": 16000,
            "chunk_size": 1024,
            "channels": 1,
            "device_index": None,
        },
        "replay": {
            "file_path": None,
            "speed": 1.0,
        },
    },
    "chart": {
        "downsample_points": 180,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_config_file(start_dir: Optional[str] = None) -> Optional[Path]:
    """Look for poise.yaml in start_dir and its parents."""
    current = Path(start_dir or os.getcwd()).resolve()
    for directory in [current, *current.parents]:
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class PoiseConfig:
    """Poise configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, looks for poise.yaml
                        in current directory and parent directories, and falls
                        back to built-in defaults when none is found.
        """
        if config_path is None:
            self.config_file = find_config_file()
        else:
            self.config_file = Path(config_path)
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        if self.config_file is None:
            logger.info("No configuration file found, using defaults")
            self.config = copy.deepcopy(DEFAULTS)
        else:
            logger.info(f"Loading configuration from: {self.config_file}")
            self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ValueError(f"Failed to load configuration: {e}")

        if not loaded:
            raise ValueError("Configuration file is empty")
        if not isinstance(loaded, dict):
            raise ValueError("Configuration file must contain a mapping")

        config = _deep_merge(DEFAULTS, loaded)
        self._resolve_paths(config)
        self._validate(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        for key_path in ("storage.data_directory", "logging.file_path", "sensors.replay.file_path"):
            *parents, leaf = key_path.split('.')
            section = config
            for key in parents:
                section = section.get(key, {})
            value = section.get(leaf)
            if value and not os.path.isabs(value):
                section[leaf] = str(config_dir / value)

    def _validate(self, config: Dict[str, Any]) -> None:
        recorder = config["recorder"]
        if recorder["sample_period_seconds"] <= 0:
            raise ValueError("recorder.sample_period_seconds must be positive")
        if recorder["warmup_seconds"] < 0:
            raise ValueError("recorder.warmup_seconds must not be negative")
        if recorder["min_update_interval_seconds"] < 0:
            raise ValueError("recorder.min_update_interval_seconds must not be negative")

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'recorder.warmup_seconds').

        Args:
            key_path: Dot-separated key path
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'chart.downsample_points')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_data_directory(self) -> str:
        """Get data directory path."""
        data_dir = self.get('storage.data_directory', 'data')
        return str(Path(data_dir).absolute())

    def get_sessions_directory(self) -> str:
        """Get directory holding the per-session JSON records."""
        return str(Path(self.get_data_directory()) / "sessions")
