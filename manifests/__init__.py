"""Skill manifest discovery for skillfactory."""

from .parser import MANIFEST_FILENAME, ManifestError, parse_manifest
from .registry import ManifestRegistry, find_project_root
from .types import (
    BuildConfig,
    DeployConfig,
    DocsConfig,
    FileRule,
    Manifest,
    SkillError,
    Variable,
    VariableType,
)

__all__ = [
    "BuildConfig",
    "DeployConfig",
    "DocsConfig",
    "FileRule",
    "MANIFEST_FILENAME",
    "Manifest",
    "ManifestError",
    "ManifestRegistry",
    "SkillError",
    "Variable",
    "VariableType",
    "find_project_root",
    "parse_manifest",
]
