"""Configuration management for the Plaid node."""

import json
import os
import yaml
from typing import Dict, Any, Optional
import logging

from ..models.core import NodeConfig


logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages loading and validation of node configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager

        Args:
            config_path: Path to configuration file. If None, searches for default locations.
        """
        self.config_path = config_path
        self._config_cache: Optional[NodeConfig] = None

    def load_config(self, force_reload: bool = False) -> NodeConfig:
        """Load node configuration from file or return default

        Args:
            force_reload: Force reload from file even if cached

        Returns:
            NodeConfig instance with loaded or default configuration
        """
        if self._config_cache is not None and not force_reload:
            return self._config_cache

        config_data = self._load_config_file()

        try:
            self._config_cache = NodeConfig(
                request_timeout=float(config_data.get('request_timeout', 30.0)),
                plaid_version=config_data.get('plaid_version', '2020-09-14'),
                continue_on_fail=config_data.get('continue_on_fail', False),
                default_count=config_data.get('default_count', 100),
                default_country_codes=config_data.get('default_country_codes'),
                plugin_directories=config_data.get('plugin_directories'),
                log_directory=config_data.get('log_directory')
            )

            logger.info(f"Configuration loaded successfully from {self.config_path or 'defaults'}")
            return self._config_cache

        except Exception as e:
            logger.warning(f"Error loading configuration: {e}. Using defaults.")
            self._config_cache = NodeConfig()
            return self._config_cache

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from file

        Returns:
            Dictionary with configuration data or empty dict if no file found
        """
        config_file = self._find_config_file()

        if not config_file or not os.path.exists(config_file):
            logger.info("No configuration file found, using defaults")
            return {}

        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                if config_file.endswith('.json'):
                    data = json.load(f)
                elif config_file.endswith(('.yml', '.yaml')):
                    data = yaml.safe_load(f)
                else:
                    logger.warning(f"Unsupported config file format: {config_file}")
                    return {}

            self._validate_config_data(data)
            logger.info(f"Configuration loaded from {config_file}")
            return data

        except Exception as e:
            logger.error(f"Error reading configuration file {config_file}: {e}")
            return {}

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations

        Returns:
            Path to configuration file or None if not found
        """
        if self.config_path:
            return self.config_path

        search_paths = [
            'plaid_node.json',
            'plaid_node.yml',
            'plaid_node.yaml',
            'config/plaid_node.json',
            'config/plaid_node.yml',
            'config/plaid_node.yaml',
            os.path.expanduser('~/.plaid_node/config.json'),
            os.path.expanduser('~/.plaid_node/config.yml'),
        ]

        for path in search_paths:
            if os.path.exists(path):
                return path

        return None

    def _validate_config_data(self, data: Dict[str, Any]) -> None:
        """Validate configuration data structure

        Args:
            data: Configuration data to validate

        Raises:
            ValueError: If configuration data is invalid
        """
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")

        if 'request_timeout' in data:
            timeout = data['request_timeout']
            if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
                raise ValueError("request_timeout must be a number")
            if timeout <= 0:
                raise ValueError("request_timeout must be positive")

        if 'plaid_version' in data:
            if not isinstance(data['plaid_version'], str) or not data['plaid_version'].strip():
                raise ValueError("plaid_version must be a non-empty string")

        if 'continue_on_fail' in data and not isinstance(data['continue_on_fail'], bool):
            raise ValueError("continue_on_fail must be a boolean")

        if 'default_count' in data:
            count = data['default_count']
            if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= 500:
                raise ValueError("default_count must be an integer between 1 and 500")

        for list_key in ['default_country_codes', 'plugin_directories']:
            if list_key in data:
                if not isinstance(data[list_key], list):
                    raise ValueError(f"{list_key} must be a list")
                for value in data[list_key]:
                    if not isinstance(value, str):
                        raise ValueError(f"All {list_key} entries must be strings")

        if 'log_directory' in data and data['log_directory'] is not None:
            if not isinstance(data['log_directory'], str):
                raise ValueError("log_directory must be a string")

    def save_config_template(self, output_path: str) -> None:
        """Generate and save a configuration file template

        Args:
            output_path: Path where to save the template
        """
        template = {
            "request_timeout": 30.0,
            "plaid_version": "2020-09-14",
            "continue_on_fail": False,
            "default_count": 100,
            "default_country_codes": ["US"],
            "plugin_directories": [
                "plugins",
                "~/.plaid_node/plugins"
            ],
            "log_directory": None
        }

        try:
            output_dir = os.path.dirname(output_path)
            if output_dir:
                os.makedirs(output_dir, exist_ok=True)

            with open(output_path, 'w', encoding='utf-8') as f:
                if output_path.endswith(('.yml', '.yaml')):
                    yaml.dump(template, f, default_flow_style=False, indent=2)
                else:
                    json.dump(template, f, indent=2)

            logger.info(f"Configuration template saved to {output_path}")

        except Exception as e:
            logger.error(f"Error saving configuration template: {e}")
            raise

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Update configuration with new values

        Args:
            updates: Dictionary of configuration updates
        """
        if self._config_cache is None:
            self.load_config()

        for key, value in updates.items():
            if hasattr(self._config_cache, key):
                setattr(self._config_cache, key, value)
                logger.debug(f"Updated configuration: {key} = {value}")
            else:
                logger.warning(f"Unknown configuration key: {key}")

    def reset_config(self) -> None:
        """Reset configuration cache, forcing reload on next access"""
        self._config_cache = None
        logger.debug("Configuration cache reset")


def get_default_config_manager() -> ConfigManager:
    """Get a default configuration manager instance"""
    return ConfigManager()
