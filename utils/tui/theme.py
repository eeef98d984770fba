"""Theme system for the terminal output and the wizard, dark and light."""

from dataclasses import dataclass
from typing import Dict

from rich.style import Style
from rich.theme import Theme as RichTheme


@dataclass
class ThemeColors:
    """Color palette for a theme."""

    # Accents
    primary: str  # Titles, selection
    secondary: str  # Headings
    success: str
    warning: str
    error: str

    # Backgrounds
    bg_primary: str
    bg_secondary: str
    bg_highlight: str  # Focused input

    # Text
    text_primary: str
    text_secondary: str
    text_muted: str  # Hints, placeholders

    # Semantic
    user_input: str  # Typed values
    command_output: str  # Raw build output


DARK_THEME = ThemeColors(
    primary="#00D9FF",  # Bright cyan
    secondary="#A78BFA",  # Soft purple
    success="#10B981",  # Emerald green
    warning="#F59E0B",  # Amber
    error="#EF4444",  # Red
    bg_primary="#0D1117",  # Deep blue-black
    bg_secondary="#161B22",
    bg_highlight="#21262D",
    text_primary="#F0F6FC",  # Bright white
    text_secondary="#8B949E",  # Gray
    text_muted="#484F58",  # Dark gray
    user_input="#00D9FF",
    command_output="#F78166",  # Orange
)

LIGHT_THEME = ThemeColors(
    primary="#0969DA",  # Blue
    secondary="#8250DF",  # Purple
    success="#1A7F37",  # Green
    warning="#9A6700",  # Amber
    error="#CF222E",  # Red
    bg_primary="#FFFFFF",
    bg_secondary="#F6F8FA",
    bg_highlight="#EAEEF2",
    text_primary="#1F2328",  # Near black
    text_secondary="#57606A",  # Medium gray
    text_muted="#8C959F",  # Light gray
    user_input="#0969DA",
    command_output="#BC4C00",  # Orange
)


class Theme:
    """Theme manager shared by rich and prompt_toolkit output."""

    _current_theme: str = "dark"
    _themes: Dict[str, ThemeColors] = {
        "dark": DARK_THEME,
        "light": LIGHT_THEME,
    }

    @classmethod
    def get_colors(cls) -> ThemeColors:
        return cls._themes[cls._current_theme]

    @classmethod
    def set_theme(cls, name: str) -> None:
        """Set the current theme.

        Args:
            name: Theme name ('dark' or 'light')

        Raises:
            ValueError: If theme name is invalid
        """
        if name not in cls._themes:
            raise ValueError(f"Unknown theme: {name}. Available: {list(cls._themes.keys())}")
        cls._current_theme = name

    @classmethod
    def get_rich_theme(cls) -> RichTheme:
        """Get a Rich Theme object for the current theme."""
        colors = cls.get_colors()
        return RichTheme(
            {
                "primary": Style(color=colors.primary),
                "secondary": Style(color=colors.secondary),
                "success": Style(color=colors.success),
                "warning": Style(color=colors.warning),
                "error": Style(color=colors.error),
                "text": Style(color=colors.text_primary),
                "text.secondary": Style(color=colors.text_secondary),
                "text.muted": Style(color=colors.text_muted),
                "output": Style(color=colors.command_output),
                "divider": Style(color=colors.text_muted),
            }
        )

    @classmethod
    def get_prompt_toolkit_style(cls) -> Dict[str, str]:
        """Base style dict for prompt_toolkit applications."""
        colors = cls.get_colors()
        return {
            "": colors.text_primary,  # Default text
            "scrollbar.background": colors.bg_secondary,
            "scrollbar.button": colors.text_muted,
        }

    @classmethod
    def get_wizard_style(cls) -> Dict[str, str]:
        """Style classes used by the wizard screens."""
        colors = cls.get_colors()
        return {
            "heading": f"{colors.secondary} bold",
            "hint": colors.text_muted,
            "item": colors.text_primary,
            "selected": f"bg:{colors.primary} {colors.bg_primary}",
            "label": colors.text_secondary,
            "value": colors.text_primary,
            "input": colors.user_input,
            "input.focused": f"bg:{colors.bg_highlight} {colors.user_input}",
            "placeholder": f"{colors.text_muted} italic",
            "cursor": colors.primary,
            "success": f"{colors.success} bold",
            "warning": f"{colors.warning} bold",
            "error": colors.error,
            "output": colors.command_output,
        }


def set_theme(name: str) -> None:
    """Set the current theme (convenience function)."""
    Theme.set_theme(name)
