"""Configuration management for skillfactory."""

import os

# Define path constants directly to avoid circular imports with utils
# (utils.terminal_ui imports Config, and utils.runtime is in the utils package)
_RUNTIME_DIR = os.path.join(os.path.expanduser("~"), ".skillfactory")
_CONFIG_FILE = os.path.join(_RUNTIME_DIR, "config")

# Default configuration template
_DEFAULT_CONFIG = """\
# SkillFactory Configuration

# Directory (relative to the project root) that holds one folder per skill
SKILLS_DIR=skills

# Staging directory (relative to the project root) for freshly built binaries
STAGING_DIR=dist

# Compiler invocation, run inside the skill directory.
# {output} is the staged binary path, {entry} the manifest build entry.
BUILD_COMMAND=go build -o {output} {entry}
BUILD_TIMEOUT=600

# Seconds to wait for a single `<binary> ... --help` call during doc generation
HELP_TIMEOUT=10

# Pre-filled base folder in the deploy step (e.g. ~/.claude/skills)
DEFAULT_SKILLS_FOLDER=

LOG_LEVEL=DEBUG
TUI_THEME=dark
"""


def _load_config(path: str) -> dict[str, str]:
    """Parse a KEY=VALUE config file, skipping comments and blank lines."""
    cfg: dict[str, str] = {}
    if not os.path.isfile(path):
        return cfg
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            # Strip inline comments (# ...) from the value
            if "#" in value:
                value = value[: value.index("#")]
            cfg[key.strip()] = value.strip()
    return cfg


def _ensure_config():
    """Ensure ~/.skillfactory/config exists, create with defaults if not."""
    if not os.path.exists(_CONFIG_FILE):
        os.makedirs(_RUNTIME_DIR, exist_ok=True)
        with open(_CONFIG_FILE, "w", encoding="utf-8") as f:
            f.write(_DEFAULT_CONFIG)


# Ensure config exists and load it
_ensure_config()
_cfg = _load_config(_CONFIG_FILE)


class Config:
    """Configuration for skillfactory.

    All configuration is centralized here. Access config values directly via Config.XXX.
    """

    # Project layout
    SKILLS_DIR = _cfg.get("SKILLS_DIR") or "skills"
    STAGING_DIR = _cfg.get("STAGING_DIR") or "dist"

    # Build Configuration
    BUILD_COMMAND = _cfg.get("BUILD_COMMAND") or "go build -o {output} {entry}"
    BUILD_TIMEOUT = float(_cfg.get("BUILD_TIMEOUT", "600"))

    # Documentation generation
    HELP_TIMEOUT = float(_cfg.get("HELP_TIMEOUT", "10"))

    # Deploy step defaults
    DEFAULT_SKILLS_FOLDER = _cfg.get("DEFAULT_SKILLS_FOLDER", "")

    # Logging Configuration
    # Note: Logging is controlled via --verbose flag, files go to ~/.skillfactory/logs/
    LOG_LEVEL = _cfg.get("LOG_LEVEL", "DEBUG").upper()

    # TUI Configuration
    TUI_THEME = _cfg.get("TUI_THEME", "dark")  # "dark" or "light"

    @classmethod
    def validate(cls):
        """Validate configuration.

        Raises:
            ValueError: If a configured value cannot work
        """
        if "{output}" not in cls.BUILD_COMMAND:
            raise ValueError(
                "BUILD_COMMAND must contain {output}. Please fix it in ~/.skillfactory/config.\n"
                "Example: BUILD_COMMAND=go build -o {output} {entry}"
            )
        if cls.BUILD_TIMEOUT <= 0:
            raise ValueError("BUILD_TIMEOUT must be a positive number of seconds.")
        if cls.HELP_TIMEOUT <= 0:
            raise ValueError("HELP_TIMEOUT must be a positive number of seconds.")
        if not cls.SKILLS_DIR.strip():
            raise ValueError("SKILLS_DIR cannot be empty.")
        staging = cls.STAGING_DIR.strip()
        parts = staging.replace("\\", "/").split("/")
        if (
            not staging
            or os.path.isabs(staging)
            or ".." in parts
            or os.path.normpath(staging) in (".", os.path.normpath(cls.SKILLS_DIR.strip()))
        ):
            raise ValueError(
                "STAGING_DIR must be a relative sub-folder of the project, separate from "
                f"SKILLS_DIR (got {cls.STAGING_DIR!r}). It is removed after every deploy."
            )
