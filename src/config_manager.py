#!/usr/bin/env python3
"""
Configuration Manager for Chat Share Parser
Loads the YAML settings for fetching, extraction and output.
"""

import copy
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from parsers.base_parser import (
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    DEFAULT_ACCEPT,
    DEFAULT_ACCEPT_LANGUAGE,
)
from parsers.payload_locator import DEFAULT_MIN_STREAM_PAYLOAD_LENGTH
from parsers.pointer_resolver import DEFAULT_ROLE_LOOKBACK_WINDOW, DEFAULT_ROLE_POINTER_KEY
from parsers.role_pairing import DEFAULT_DEDUPE_PREFIX_LENGTH

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'fetch': {
        'timeout': DEFAULT_TIMEOUT,
        'user_agent': DEFAULT_USER_AGENT,
        'accept': DEFAULT_ACCEPT,
        'accept_language': DEFAULT_ACCEPT_LANGUAGE,
    },
    'extraction': {
        'min_stream_payload_length': DEFAULT_MIN_STREAM_PAYLOAD_LENGTH,
        'role_lookback_window': DEFAULT_ROLE_LOOKBACK_WINDOW,
        'role_pointer_key': DEFAULT_ROLE_POINTER_KEY,
        'dedupe_prefix_length': DEFAULT_DEDUPE_PREFIX_LENGTH,
        'role_fallback': 'alternate',
    },
    'output': {
        'format': 'json',
        'indent': 2,
    },
}

def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge overrides into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        # A blank YAML entry such as "extraction:" keeps the default
        if value is None and key in merged:
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged

class ConfigManager:
    """Manages configuration files and settings"""

    DEFAULT_CONFIG_DIR = Path.home() / ".config" / "chat_share_parser"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"

    def __init__(self, config_path: Optional[str] = None):
        """Initialize config manager with optional custom config path"""
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_FILE
        self.config_dir = self.config_path.parent

    def load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file, creating the default if needed

        Values missing from the file are filled from the defaults. An
        unreadable file falls back to the defaults entirely.
        """
        try:
            if not self.config_path.exists():
                logger.info(f"Config file not found at {self.config_path}, creating default")
                self._create_default_config()

            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)

            logger.debug(f"Loaded config from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {self.config_path}: {e}")
            logger.info("Using default configuration")
            return self._get_default_config()

        if not isinstance(config, dict):
            return self._get_default_config()
        return _merge(DEFAULT_CONFIG, config)

    def save_config(self, config: Dict[str, Any]) -> None:
        """Save configuration to file"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(config, f, default_flow_style=False, allow_unicode=True)

            logger.info(f"Saved config to {self.config_path}")

        except OSError as e:
            logger.error(f"Failed to save config to {self.config_path}: {e}")
            raise

    def _create_default_config(self) -> None:
        self.save_config(self._get_default_config())

    def _get_default_config(self) -> Dict[str, Any]:
        return copy.deepcopy(DEFAULT_CONFIG)

    def get_nested_value(self, config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
        """Get nested configuration value using dot notation (e.g., 'fetch.timeout')"""
        value = config
        try:
            for key in key_path.split('.'):
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Merge new values into the stored configuration"""
        config = _merge(self.load_config(), updates)
        self.save_config(config)
