"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict

import yaml

from extractors.meta_filter import MetaFilter
from models import LayoutMode

DEFAULT_CONFIG: Dict[str, Any] = {
    'input': 'export.xml',
    'output': 'output',
    'filter': None,
    'folders': LayoutMode.PATH.value,
    'prefixdate': False,
    'namedfiles': False,
    'saveimages': True,
    'addcontentimages': True,
    'progress_bars': True,
    'meta_keys': {},
    'logging': {
        'level': None,
        'file': None,
    },
    'advanced': {
        'max_workers': 8,
        'request_timeout': 30,
        'stagger_ms': 25,
        'user_agent': 'wp-export-to-markdown/1.0',
    },
}

BOOLEAN_OPTIONS = ('prefixdate', 'namedfiles', 'saveimages', 'addcontentimages')


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        return cls._substitute_env_vars_recursive(config_data)

    @classmethod
    def with_defaults(cls, config: Dict[str, Any]) -> Dict[str, Any]:
        """Deep-merge ``config`` over ``DEFAULT_CONFIG``."""
        return _deep_merge(copy.deepcopy(DEFAULT_CONFIG), config or {})

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        folders = config.get('folders', LayoutMode.PATH.value)
        try:
            LayoutMode(folders)
        except ValueError:
            raise ValueError(
                f"Invalid `folders` option: {folders}. "
                f"Choose from: {', '.join(mode.value for mode in LayoutMode)}"
            )

        for option in BOOLEAN_OPTIONS:
            if not isinstance(config.get(option, False), bool):
                raise ValueError(f"{option} must be a boolean")

        if not config.get('input'):
            raise ValueError("Missing required configuration: input")
        if not config.get('output'):
            raise ValueError("Missing required configuration: output")

        post_filter = config.get('filter')
        if post_filter is not None and not isinstance(post_filter, str):
            raise ValueError("filter must be a string")

        # Raises ValueError on unknown transform names
        MetaFilter.from_config(config.get('meta_keys'))

        max_workers = get_nested(config, 'advanced.max_workers', 8)
        if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
            raise ValueError("advanced.max_workers must be a positive integer")

        timeout = get_nested(config, 'advanced.request_timeout', 30)
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            raise ValueError("advanced.request_timeout must be a positive number")

        stagger = get_nested(config, 'advanced.stagger_ms', 25)
        if not isinstance(stagger, (int, float)) or isinstance(stagger, bool) or stagger < 0:
            raise ValueError("advanced.stagger_ms must be a non-negative number")

        level = get_nested(config, 'logging.level')
        if level and str(level).upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError("logging.level must be one of: DEBUG, INFO, WARNING, ERROR, CRITICAL")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)

        if 'logging' not in merged:
            merged['logging'] = {}

        for option in ('input', 'output', 'filter', 'folders'):
            value = getattr(args, option, None)
            if value is not None:
                merged[option] = value

        # Boolean flags default to None so an omitted flag keeps the file value
        for option in BOOLEAN_OPTIONS:
            value = getattr(args, option, None)
            if value is not None:
                merged[option] = value

        if hasattr(args, 'log_file') and args.log_file:
            merged['logging']['file'] = args.log_file

        if hasattr(args, 'verbose') and args.verbose:
            merged['logging']['level'] = 'DEBUG' if args.verbose >= 2 else 'INFO'

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict) and key != 'meta_keys':
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "advanced.max_workers")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'get_nested']
