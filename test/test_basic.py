"""Basic tests for configuration, logging and module imports.

These tests are offline and need no Go toolchain.
"""

import logging

import pytest


def test_imports():
    from config import Config  # noqa: F401
    from manifests import ManifestRegistry  # noqa: F401
    from pipeline import build_skill, deploy_skill  # noqa: F401
    from wizard import WizardApp, WizardStateMachine  # noqa: F401


def test_config_defaults_are_valid():
    from config import Config

    Config.validate()
    assert "{output}" in Config.BUILD_COMMAND
    assert Config.BUILD_TIMEOUT > 0
    assert Config.HELP_TIMEOUT > 0


@pytest.mark.parametrize(
    "attr, value, message",
    [
        ("BUILD_COMMAND", "go build .", "{output}"),
        ("BUILD_TIMEOUT", 0, "BUILD_TIMEOUT"),
        ("HELP_TIMEOUT", -1, "HELP_TIMEOUT"),
        ("SKILLS_DIR", "  ", "SKILLS_DIR"),
        ("STAGING_DIR", "", "STAGING_DIR"),
        ("STAGING_DIR", ".", "STAGING_DIR"),
        ("STAGING_DIR", "./", "STAGING_DIR"),
        ("STAGING_DIR", "..", "STAGING_DIR"),
        ("STAGING_DIR", "build/../..", "STAGING_DIR"),
        ("STAGING_DIR", "/tmp/dist", "STAGING_DIR"),
        ("STAGING_DIR", "skills", "STAGING_DIR"),
        ("STAGING_DIR", "./skills/", "STAGING_DIR"),
    ],
)
def test_config_validate_rejects(monkeypatch, attr, value, message):
    from config import Config

    monkeypatch.setattr(Config, attr, value)
    with pytest.raises(ValueError, match=message):
        Config.validate()


def test_load_config_parses_key_values(tmp_path):
    from config import _load_config

    path = tmp_path / "config"
    path.write_text(
        "# comment\n"
        "\n"
        "BUILD_TIMEOUT=30  # seconds\n"
        "STAGING_DIR = out\n"
        "not a setting\n"
    )
    assert _load_config(str(path)) == {"BUILD_TIMEOUT": "30", "STAGING_DIR": "out"}
    assert _load_config(str(tmp_path / "missing")) == {}


def test_setup_logger_writes_file(tmp_path, monkeypatch):
    from utils import logger as logger_module

    monkeypatch.setattr(logger_module, "_logging_initialized", False)
    monkeypatch.setattr(logger_module, "_log_file_path", None)
    handlers = list(logging.root.handlers)
    level = logging.root.level
    try:
        logger_module.setup_logger(log_dir=str(tmp_path), log_level="INFO")
        logger_module.get_logger("skillfactory.test").info("hello from test")

        log_file = logger_module.get_log_file_path()
        assert log_file is not None
        assert log_file.startswith(str(tmp_path))
        for handler in logging.root.handlers:
            handler.flush()
        with open(log_file, encoding="utf-8") as f:
            assert "hello from test" in f.read()
    finally:
        for handler in logging.root.handlers[:]:
            if handler not in handlers:
                handler.close()
                logging.root.removeHandler(handler)
        logging.root.setLevel(level)


def test_print_skill_list_shows_skills_and_errors(tmp_path):
    from manifests import Manifest, SkillError
    from utils import terminal_ui

    manifest = Manifest(name="vikunja", description="Manage [tasks]", path=tmp_path, version="1.0.0")
    skill_error = SkillError(name="broken", path=tmp_path / "broken", reason="invalid YAML: [line 3]")

    with terminal_ui.console.capture() as capture:
        terminal_ui.print_skill_list([manifest], [skill_error])
    output = capture.get()

    assert "vikunja" in output
    assert "1.0.0" in output
    assert "✗ broken" in output
    assert "invalid YAML: [line 3]" in output


def test_theme_switch():
    from utils.tui.theme import DARK_THEME, LIGHT_THEME, Theme

    original = Theme._current_theme
    try:
        Theme.set_theme("light")
        assert Theme.get_colors() is LIGHT_THEME
        Theme.set_theme("dark")
        assert Theme.get_colors() is DARK_THEME
        with pytest.raises(ValueError):
            Theme.set_theme("neon")
    finally:
        Theme._current_theme = original
