import json
import sys

from config import CONFIG_PATH, DEFAULT_CONFIG, load_config, save_config, validate_config
from utils.logger import setup_logging, log_info, log_warning, log_error
from menus.main_menu import main_menu
from menus.lookup_menu import lookup_menu
from menus.config_menu import config_menu


def main() -> int:
    setup_logging()

    try:
        config = load_config()
    except FileNotFoundError:
        log_warning(f"Config file {CONFIG_PATH} not found; writing defaults.")
        config = DEFAULT_CONFIG.copy()
        try:
            save_config(config)
        except IOError as e:
            log_error(str(e))
            return 1
    except json.JSONDecodeError as e:
        log_error(f"Config file contains invalid JSON: {e}")
        return 1

    is_valid, errors = validate_config(config)
    if not is_valid:
        for error in errors:
            log_warning(error)

    while True:
        choice = main_menu()

        # Lookup Menu
        if choice == "Lookup Menu":
            lookup_menu(config)

        # Config Menu
        elif choice == "Config Menu":
            config = config_menu(config)

        # Exit
        elif choice == "Exit":
            log_info("Exiting program...")
            break

        else:
            log_error("Invalid choice.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
