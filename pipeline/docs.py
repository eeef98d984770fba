"""Render the deployed skill's documentation file."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Mapping

import aiofiles.os
import yaml

from manifests import Manifest, VariableType

from .types import CommandNode, FlagDescriptor

FRONTMATTER_DELIMITER = "---"

SKILL_PATH_TOKEN = "{{SKILL_PATH}}"
COMMANDS_TOKEN = "{{COMMANDS}}"
TABLE_TOKEN = "{{{{{name}_TABLE}}}}"

_SKELETON = """\
# {name}

{description}

## Commands

{commands}
"""


def strip_frontmatter(text: str) -> str:
    """Drop a leading `---` ... `---` block and the blank lines after it.

    Text without a complete block is returned unchanged.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != FRONTMATTER_DELIMITER:
        return text

    for i in range(1, len(lines)):
        if lines[i].strip() == FRONTMATTER_DELIMITER:
            return "".join(lines[i + 1 :]).lstrip("\n")
    return text


def render_frontmatter(manifest: Manifest) -> str:
    header = yaml.safe_dump(
        {"name": manifest.name, "description": manifest.skill_description},
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )
    return f"{FRONTMATTER_DELIMITER}\n{header}{FRONTMATTER_DELIMITER}\n\n"


def render_flag(flag: FlagDescriptor) -> str:
    text = f"`{flag.display_name}`"
    if flag.type:
        text += f" ({flag.type})"
    if flag.description:
        text += f": {flag.description}"
    return text


def render_command(display_path: str, command_path: str, node: CommandNode) -> str:
    lines = [f"### {command_path}", ""]
    if node.description:
        lines += [node.description, ""]
    if node.usage:
        lines += [f"**Usage:** `{display_path} {node.usage}`", ""]
    if node.flags:
        lines.append("**Flags:**")
        lines += [f"- {render_flag(flag)}" for flag in node.flags]
        lines.append("")
    return "\n".join(lines) + "\n"


def help_fallback(display_path: str) -> str:
    return f"Run `{display_path} --help` to see available commands."


def render_commands(tree: CommandNode, display_path: str) -> str:
    """Markdown for every leaf command, or a --help hint when there are none."""
    leaves = tree.iter_leaves()
    if not leaves:
        return help_fallback(display_path)
    return "".join(render_command(display_path, path, node) for path, node in leaves)


def _table_cell(value: object) -> str:
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False)
    return text.replace("|", "\\|")


def render_json_table(raw: str, label: str) -> str:
    """Turn a JSON object like {"Inbox": 1} into an ID/Name markdown table."""
    if not raw.strip():
        return f"No {label} configured."

    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        data = None
    if not isinstance(data, dict) or not data:
        return f"Config: `{raw}`"

    rows = ["| ID | Name |", "|----|------|"]
    for name, ident in data.items():
        rows.append(f"| {_table_cell(ident)} | {_table_cell(name)} |")
    return "\n".join(rows)


def replace_placeholders(
    content: str,
    manifest: Manifest,
    deploy_path: Path,
    values: Mapping[str, str],
    tree: CommandNode,
) -> str:
    """Substitute the known tokens; anything else in {{...}} stays as written."""
    display_path = str(deploy_path / "bin" / manifest.binary_name)

    replacements = {SKILL_PATH_TOKEN: str(deploy_path)}
    for variable in manifest.variables:
        token = TABLE_TOKEN.format(name=variable.name)
        if variable.type is VariableType.JSON and token in content:
            replacements[token] = render_json_table(values.get(variable.name, ""), variable.label)
    if COMMANDS_TOKEN in content:
        replacements[COMMANDS_TOKEN] = render_commands(tree, display_path)

    # One pass, so substituted text is never scanned for tokens again
    pattern = re.compile("|".join(re.escape(token) for token in replacements))
    return pattern.sub(lambda match: replacements[match.group(0)], content)


def render_docs(
    manifest: Manifest,
    deploy_path: Path,
    values: Mapping[str, str],
    tree: CommandNode,
    template: str | None,
) -> str:
    """Produce the final documentation text.

    Same inputs give byte-identical output.
    """
    if template is None:
        body = _SKELETON.format(
            name=manifest.name,
            description=manifest.description,
            commands=COMMANDS_TOKEN,
        )
    else:
        body = strip_frontmatter(template)

    body = replace_placeholders(body, manifest, deploy_path, values, tree)
    return render_frontmatter(manifest) + body


async def load_template(manifest: Manifest) -> str | None:
    """Read the manifest's docs template, or None when the skill has none."""
    template_path = manifest.path / manifest.docs.template
    if not await aiofiles.os.path.isfile(template_path):
        return None
    async with aiofiles.open(template_path, encoding="utf-8") as handle:
        return await handle.read()
