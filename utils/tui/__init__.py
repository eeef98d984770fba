"""Theme support shared by the rich console and the prompt_toolkit wizard."""

from utils.tui.theme import Theme, set_theme

__all__ = [
    "Theme",
    "set_theme",
]
