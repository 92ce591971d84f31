#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

import logging
import sys

import toml
import yaml

from .errors import PolicyConfigError

logger = logging.getLogger("tagreflector")

CONFIG_FILENAMES = ['config.json', 'config.toml', 'config.yaml', 'config.yml']


def setup_logging(config: Optional[Dict[str, Any]] = None, level: Optional[str] = None) -> None:
    """
    Configure the package logger from the "logging" config section.

    Messages go to stderr so stdout stays clean for command output.

    Args:
        config: Configuration dict (defaults used if None)
        level: Explicit level name overriding the config (e.g. "DEBUG")
    """
    settings = (config or get_default_config()).get("logging", {})
    level_name = (level or settings.get("level") or "INFO").upper()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(settings.get("format") or "%(levelname)s: %(message)s"))

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name, logging.INFO))
    logger.propagate = False


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. TAGREFLECTOR_CONFIG environment variable
    2. ~/.tagreflector/ directory
    """
    if 'TAGREFLECTOR_CONFIG' in os.environ:
        path = Path(os.environ['TAGREFLECTOR_CONFIG'])
        if path.exists():
            return path

    config_dir = Path.home() / '.tagreflector'
    for filename in CONFIG_FILENAMES:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path for saving
    return config_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    if config_path.exists():
        try:
            suffix = config_path.suffix.lower()
            if suffix == '.toml':
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif suffix in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)

    return config


def save_config(config):
    """Save configuration to file."""
    config_path = get_config_path()

    config_path.parent.mkdir(parents=True, exist_ok=True)

    suffix = config_path.suffix.lower()
    with open(config_path, 'w') as f:
        if suffix == '.toml':
            toml.dump(config, f)
        elif suffix in ['.yaml', '.yml']:
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)

    logger.info(f"Configuration saved to {config_path}")


def get_default_config():
    """Get default configuration."""
    return {
        "database": {
            "path": "",  # Empty means ~/.tagreflector/tags.db
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
        # Named selection rules, e.g.
        # "nginx-stable": {"policy": {"semver": {"range": "^1.24"}}}
        "policies": {},
    }


def get_selection_rule(config: Dict[str, Any], name: str) -> Dict[str, Any]:
    """
    Look up a named selection rule mapping.

    Raises:
        PolicyConfigError: If no rule has that name
    """
    rules = config.get("policies") or {}
    if name not in rules:
        known = ', '.join(sorted(rules)) or 'none'
        raise PolicyConfigError(f"no policy named '{name}' in configuration (known: {known})")
    return rules[name]


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: TAGREFLECTOR_SECTION_KEY
    For example: TAGREFLECTOR_LOGGING_LEVEL=DEBUG

    TAGREFLECTOR_CONFIG and TAGREFLECTOR_DB are read elsewhere and match no
    config key, so they are left alone here.
    """
    env_prefix = "TAGREFLECTOR_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i : i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if matched_key:
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    break
            else:
                break

    return config
