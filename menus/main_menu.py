import questionary


def main_menu() -> str:
    """Top-level menu; returns the selected entry (or "Exit" on Ctrl-C)."""
    choice = questionary.select(
        "🎧 Spotify Lookup — What would you like to do?",
        choices=[
            "Lookup Menu",
            "Config Menu",
            "Exit",
        ]
    ).ask()
    return choice or "Exit"
