import json
import os
from typing import Any, Dict

from spotify_client.config import DEFAULT_SETTINGS

CONFIG_PATH = "config.json"

# Default configuration values
DEFAULT_CONFIG = {
    # Where credentials come from: "pass", "env" or "config"
    "credential_source": "pass",
    "spotify_pass_client_id_key": "spotify/client-id",
    "spotify_pass_client_secret_key": "spotify/client-secret",
    "spotify_env_file": ".env",

    # Only used when credential_source == "config"
    "spotify_client_id": "",
    "spotify_client_secret": "",

    # Transport
    **DEFAULT_SETTINGS,
}

# Validation rules for config fields
CONFIG_SCHEMA = {
    "credential_source": {"type": str, "required": True, "choices": ["pass", "env", "config"]},
    "spotify_pass_client_id_key": {"type": str, "required": False},
    "spotify_pass_client_secret_key": {"type": str, "required": False},
    "spotify_env_file": {"type": str, "required": False},

    "spotify_client_id": {"type": str, "required": False},
    "spotify_client_secret": {"type": str, "required": False},

    "spotify_api_base_url": {"type": str, "required": False, "prefix": "http"},
    "spotify_accounts_base_url": {"type": str, "required": False, "prefix": "http"},
    "spotify_timeout": {"type": (int, float), "required": False, "min": 1, "max": 300},
    "spotify_proxy": {"type": (str, type(None)), "required": False},
    "spotify_language": {"type": (str, type(None)), "required": False},
    "spotify_market": {"type": str, "required": False, "length": 2},
}

SECRET_KEYS = {"spotify_client_secret"}


def load_config() -> Dict[str, Any]:
    """Load configuration from file, applying defaults for missing fields."""
    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file {CONFIG_PATH} not found.")

    with open(CONFIG_PATH, "r", encoding="utf-8") as f:
        config = json.load(f)

    # Apply defaults for missing fields
    for key, value in DEFAULT_CONFIG.items():
        if key not in config:
            config[key] = value

    return config


def save_config(config: Dict[str, Any]) -> bool:
    """Save configuration to file."""
    try:
        with open(CONFIG_PATH, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except OSError as e:
        raise IOError(f"Failed to save config: {e}") from e


def validate_config(config: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration against schema.
    Returns (is_valid, list_of_errors).
    """
    errors = []

    for key, rules in CONFIG_SCHEMA.items():
        # Check required fields
        if rules.get("required", False) and key not in config:
            errors.append(f"Missing required field: {key}")
            continue

        if key not in config:
            continue

        value = config[key]

        # Type check (bool is an int subclass; don't let True pass as a timeout)
        expected_type = rules.get("type")
        if expected_type and (not isinstance(value, expected_type) or isinstance(value, bool)):
            type_names = expected_type.__name__ if not isinstance(expected_type, tuple) else "/".join(t.__name__ for t in expected_type)
            errors.append(f"Field '{key}' must be {type_names}, got {type(value).__name__}")
            continue

        # Choices check
        if "choices" in rules and value not in rules["choices"]:
            errors.append(f"Field '{key}' must be one of {rules['choices']}, got '{value}'")

        if isinstance(value, str):
            if "prefix" in rules and not value.startswith(rules["prefix"]):
                errors.append(f"Field '{key}' must start with '{rules['prefix']}', got '{value}'")
            if "length" in rules and len(value) != rules["length"]:
                errors.append(f"Field '{key}' must be {rules['length']} characters, got '{value}'")

        # Range check for numeric values
        if isinstance(value, (int, float)):
            if "min" in rules and value < rules["min"]:
                errors.append(f"Field '{key}' must be >= {rules['min']}, got {value}")
            if "max" in rules and value > rules["max"]:
                errors.append(f"Field '{key}' must be <= {rules['max']}, got {value}")

    if config.get("credential_source") == "config":
        for key in ("spotify_client_id", "spotify_client_secret"):
            if not str(config.get(key) or "").strip():
                errors.append(f"Field '{key}' is required when credential_source is 'config'")

    return len(errors) == 0, errors


def update_config(key: str, value: Any) -> tuple[bool, str]:
    """
    Update a single config field with validation.
    Returns (success, message).
    """
    config = load_config()

    # Check if key is valid
    if key not in CONFIG_SCHEMA:
        return False, f"Unknown config key: {key}"

    # Create temporary config with new value
    test_config = config.copy()
    test_config[key] = value

    # Validate the change
    is_valid, errors = validate_config(test_config)
    if not is_valid:
        return False, f"Validation failed: {', '.join(errors)}"

    # Save the updated config
    config[key] = value
    save_config(config)

    shown = "********" if key in SECRET_KEYS else value
    return True, f"Updated '{key}' to '{shown}'"


def reset_to_defaults() -> tuple[bool, str]:
    """Reset configuration to default values."""
    try:
        save_config(DEFAULT_CONFIG.copy())
        return True, "Configuration reset to defaults"
    except IOError as e:
        return False, f"Failed to reset config: {e}"


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a single config value with optional default."""
    try:
        config = load_config()
    except (FileNotFoundError, json.JSONDecodeError):
        return default
    return config.get(key, default)
