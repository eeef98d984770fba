"""Terminal output for the non-interactive commands, using Rich.

Styling comes from the shared theme so --list and --inspect match the wizard.
"""

from typing import TYPE_CHECKING, Optional, Sequence

from rich import box
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config import Config
from utils.tui.theme import Theme, set_theme

if TYPE_CHECKING:
    from manifests import Manifest, SkillError

set_theme(Config.TUI_THEME)

console = Console(theme=Theme.get_rich_theme())


def _get_colors():
    return Theme.get_colors()


def print_header(title: str, subtitle: Optional[str] = None) -> None:
    """Print a formatted header panel.

    Args:
        title: Main title text
        subtitle: Optional subtitle text
    """
    colors = _get_colors()
    content = f"[bold {colors.primary}]{title}[/bold {colors.primary}]"
    if subtitle:
        content += f"\n[{colors.text_secondary}]{subtitle}[/{colors.text_secondary}]"

    console.print(Panel(content, border_style=colors.primary, box=box.DOUBLE, padding=(1, 2)))


def print_skill_list(
    manifests: Sequence["Manifest"], errors: Sequence["SkillError"]
) -> None:
    """Print discovered skills, then the skill directories that failed to load."""
    colors = _get_colors()

    if not manifests and not errors:
        print_warning("No skills found.")
        return

    if manifests:
        table = Table(box=box.SIMPLE, border_style=colors.text_muted, padding=(0, 2))
        table.add_column("Skill", style=f"{colors.primary} bold")
        table.add_column("Version", style=colors.text_secondary)
        table.add_column("Binary", style=colors.text_secondary)
        table.add_column("Variables", justify="right")
        table.add_column("Description", style=colors.text_primary)
        for manifest in manifests:
            table.add_row(
                manifest.name,
                manifest.version or "-",
                manifest.binary_name,
                str(len(manifest.variables)),
                manifest.description,
            )
        console.print(table)

    for skill_error in errors:
        line = Text()
        line.append(f"✗ {skill_error.name} ", style=colors.error)
        line.append(str(skill_error.path), style=colors.text_muted)
        console.print(line)
        console.print(Text(f"  {skill_error.reason}", style=colors.error))


def print_error(message: str, title: str = "Error") -> None:
    """Print an error message.

    Args:
        message: Error message
        title: Error title (default: "Error")
    """
    colors = _get_colors()
    console.print(
        Panel(
            Text(message, style=colors.error),
            title=f"[bold {colors.error}]{title}[/bold {colors.error}]",
            border_style=colors.error,
            box=box.ROUNDED,
        )
    )


def print_warning(message: str) -> None:
    colors = _get_colors()
    console.print(f"[{colors.warning}]{message}[/{colors.warning}]")


def print_success(message: str) -> None:
    colors = _get_colors()
    console.print(f"[{colors.success}]✓ {message}[/{colors.success}]")


def print_log_location(log_file: str) -> None:
    """Print log file location.

    Args:
        log_file: Path to log file
    """
    colors = _get_colors()
    console.print()
    console.print(f"[{colors.text_muted}]Detailed logs: {log_file}[/{colors.text_muted}]")


def print_markdown(markdown_text: str) -> None:
    console.print(Markdown(markdown_text))
