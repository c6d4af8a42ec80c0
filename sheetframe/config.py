"""Configuration loading for the sheetframe command-line tool."""

import os

import yaml

DEFAULTS = {
    "log_level": "INFO",
    "csv_encoding": "utf-8",
    "unique_rows": False,
    "preview_rows": 5,
}


def load_config(config_path=None) -> dict:
    """Load configuration from a YAML file, falling back to ``DEFAULTS``."""
    config = dict(DEFAULTS)
    if config_path and os.path.exists(config_path):
        with open(config_path, "r") as f:
            user_config = yaml.safe_load(f) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"Config file must hold a mapping: {config_path}")
        config.update(user_config)
    return config
