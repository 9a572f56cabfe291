import questionary
from config import (
    load_config, validate_config, update_config, reset_to_defaults,
    CONFIG_SCHEMA, SECRET_KEYS
)
from utils.logger import log_error, log_success


def config_menu(config: dict) -> dict:
    """
    Display the configuration menu and handle user selections.
    Returns the potentially updated config dict.
    """
    while True:
        choice = questionary.select(
            "⚙️ Config Menu — What would you like to do?",
            choices=[
                "View current config",
                "Update a setting",
                "Reset to defaults",
                "Validate configuration",
                "Back"
            ]
        ).ask()

        if choice == "View current config":
            view_config(config)

        elif choice == "Update a setting":
            config = update_setting_menu(config)

        elif choice == "Reset to defaults":
            config = reset_config_menu(config)

        elif choice == "Validate configuration":
            validate_config_menu(config)

        elif choice in ("Back", None):
            break

    return config


def _display_value(key: str, value) -> str:
    if key in SECRET_KEYS:
        return "********" if value else "(not set)"
    if value is None or value == "":
        return "(not set)"
    return str(value)


def view_config(config: dict):
    """Display the current configuration in a readable format."""
    print("\n" + "=" * 50)
    print("📋 Current Configuration")
    print("=" * 50)

    # Group settings by category
    categories = {
        "Credentials": [
            "credential_source",
            "spotify_pass_client_id_key",
            "spotify_pass_client_secret_key",
            "spotify_env_file",
            "spotify_client_id",
            "spotify_client_secret",
        ],
        "Web API": [
            "spotify_api_base_url",
            "spotify_accounts_base_url",
            "spotify_timeout",
            "spotify_proxy",
            "spotify_language",
            "spotify_market",
        ],
    }

    for category, keys in categories.items():
        print(f"\n{category}:")
        for key in keys:
            if key in config:
                print(f"  {key}: {_display_value(key, config[key])}")

    print("\n" + "=" * 50)
    input("\nPress Enter to continue...")


def update_setting_menu(config: dict) -> dict:
    """Menu to update individual settings."""
    editable_keys = list(CONFIG_SCHEMA.keys())
    editable_keys.append("Back")

    key = questionary.select(
        "Select setting to update:",
        choices=editable_keys
    ).ask()

    if key in ("Back", None):
        return config

    schema = CONFIG_SCHEMA.get(key, {})
    current_value = config.get(key)

    print(f"\nCurrent value: {_display_value(key, current_value)}")

    if "choices" in schema:
        new_value = questionary.select(
            f"Select new value for {key}:",
            choices=schema["choices"]
        ).ask()

    elif schema.get("type") == (int, float):
        min_val = schema.get("min", 0)
        max_val = schema.get("max", 9999)
        new_value_str = questionary.text(
            f"Enter new value for {key} ({min_val}-{max_val}):",
            default=str(current_value) if current_value is not None else ""
        ).ask()

        try:
            new_value = float(new_value_str)
        except (TypeError, ValueError):
            log_error("Invalid number format")
            return config

    elif key in SECRET_KEYS:
        new_value = questionary.password(f"Enter new value for {key}:").ask()

    else:
        answer = questionary.text(
            f"Enter new value for {key} (blank to unset):",
            default=str(current_value) if current_value else ""
        ).ask()
        if answer is None:
            return config
        new_value = answer.strip()
        # Optional string settings are stored as null when cleared.
        if not new_value and schema.get("type") == (str, type(None)):
            new_value = None

    if new_value is None and schema.get("type") != (str, type(None)):
        return config

    success, message = update_config(key, new_value)

    if success:
        log_success(message)
        config[key] = new_value
    else:
        log_error(message)

    return config


def reset_config_menu(config: dict) -> dict:
    """Menu to reset configuration to defaults."""
    confirm = questionary.confirm(
        "⚠️ Reset all settings to defaults? This cannot be undone.",
        default=False
    ).ask()

    if confirm:
        success, message = reset_to_defaults()

        if success:
            log_success(message)
            config = load_config()
        else:
            log_error(message)

    return config


def validate_config_menu(config: dict):
    """Validate the current configuration and show any errors."""
    is_valid, errors = validate_config(config)

    print("\n" + "=" * 50)
    print("🔍 Configuration Validation")
    print("=" * 50)

    if is_valid:
        log_success("Configuration is valid! ✓")
    else:
        log_error("Configuration has errors:")
        for error in errors:
            print(f"  ✗ {error}")

    print("=" * 50)
    input("\nPress Enter to continue...")
