"""Parsing helpers for skill.yaml manifests."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

import aiofiles
import aiofiles.os
import yaml

from .types import (
    BuildConfig,
    DeployConfig,
    DocsConfig,
    FileRule,
    Manifest,
    Variable,
    VariableType,
)

MANIFEST_FILENAME = "skill.yaml"

_ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class ManifestError(ValueError):
    """A skill.yaml that cannot be turned into a Manifest."""


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _file_name(value: str, field: str) -> str:
    """Return value if it is a bare file name, with no directory part."""
    if value in (".", "..") or "\\" in value or Path(value).name != value:
        raise ManifestError(f"'{field}' must be a plain file name, got '{value}'")
    return value


def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"'{key}' must be a mapping")
    return value


def _parse_variable(raw: Any, index: int) -> Variable:
    if not isinstance(raw, dict):
        raise ManifestError(f"variable #{index + 1} must be a mapping")

    name = _text(raw.get("name"))
    if not _ENV_NAME_RE.match(name):
        raise ManifestError(f"variable #{index + 1} has invalid name '{name}'")

    type_name = _text(raw.get("type")) or VariableType.TEXT.value
    try:
        var_type = VariableType(type_name)
    except ValueError:
        allowed = ", ".join(t.value for t in VariableType)
        raise ManifestError(
            f"variable '{name}' has unknown type '{type_name}' (expected one of: {allowed})"
        ) from None

    return Variable(
        name=name,
        label=_text(raw.get("label")) or name,
        description=_text(raw.get("description")),
        required=bool(raw.get("required", False)),
        placeholder=_text(raw.get("placeholder")),
        default=_text(raw.get("default")),
        type=var_type,
    )


def _parse_file_rules(raw: Any) -> tuple[FileRule, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise ManifestError("'deploy.files' must be a list")

    rules: list[FileRule] = []
    for entry in raw:
        if isinstance(entry, str):
            source = target = entry.strip()
        elif isinstance(entry, dict):
            source = _text(entry.get("source"))
            target = _text(entry.get("target")) or source
        else:
            raise ManifestError("'deploy.files' entries must be strings or mappings")
        if not source:
            raise ManifestError("'deploy.files' entry is missing 'source'")
        rules.append(FileRule(source=source, target=target))
    return tuple(rules)


def parse_manifest(text: str, skill_dir: Path) -> Manifest:
    """Parse the text of a skill.yaml.

    Raises:
        ManifestError: If the document is malformed or misses required fields.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(f"invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError("manifest must be a mapping")

    name = _text(data.get("name"))
    if not name:
        raise ManifestError("missing required field 'name'")

    raw_variables = data.get("variables") or []
    if not isinstance(raw_variables, list):
        raise ManifestError("'variables' must be a list")

    variables: list[Variable] = []
    seen: set[str] = set()
    for index, raw in enumerate(raw_variables):
        variable = _parse_variable(raw, index)
        if variable.name in seen:
            raise ManifestError(f"duplicate variable '{variable.name}'")
        seen.add(variable.name)
        variables.append(variable)

    build = _section(data, "build")
    deploy = _section(data, "deploy")
    docs = _section(data, "docs")
    defaults = DocsConfig()

    # The binary is named after the skill unless build.binary is set; it lives in bin/
    binary = _text(build.get("binary"))
    _file_name(binary or name, "build.binary" if binary else "name")
    output = _file_name(_text(docs.get("output")) or defaults.output, "docs.output")

    return Manifest(
        name=name,
        description=_text(data.get("description")),
        detailed_description=_text(data.get("detailed_description")),
        version=_text(data.get("version")),
        path=skill_dir,
        variables=tuple(variables),
        build=BuildConfig(
            entry=_text(build.get("entry")) or ".",
            binary=binary,
        ),
        deploy=DeployConfig(
            files=_parse_file_rules(deploy.get("files")),
            wrapper=bool(deploy.get("wrapper", False)),
        ),
        docs=DocsConfig(
            template=_text(docs.get("template")) or defaults.template,
            output=output,
        ),
    )


async def read_text(path: Path) -> str:
    async with aiofiles.open(path, encoding="utf-8") as handle:
        return await handle.read()


async def list_skill_dirs(skills_dir: Path) -> list[Path]:
    """Return sub-directories of skills_dir that hold a skill.yaml, sorted by name."""
    if not await aiofiles.os.path.exists(skills_dir):
        return []

    def _collect() -> list[Path]:
        results: list[Path] = []
        for entry in sorted(skills_dir.iterdir()):
            if entry.is_dir() and (entry / MANIFEST_FILENAME).is_file():
                results.append(entry)
        return results

    return await asyncio.to_thread(_collect)
