"""Tests for documentation rendering."""

from pathlib import Path

import pytest
import yaml

from manifests import BuildConfig, DocsConfig, Manifest, Variable, VariableType
from pipeline.docs import (
    load_template,
    render_commands,
    render_docs,
    render_frontmatter,
    render_json_table,
    strip_frontmatter,
)
from pipeline.types import CommandNode, FlagDescriptor

DEPLOY_PATH = Path("/home/user/.claude/skills/vikunja")
BINARY_PATH = "/home/user/.claude/skills/vikunja/bin/vk"


def _manifest(tmp_path: Path, **kwargs) -> Manifest:
    fields = dict(
        name="vikunja",
        description="Manage Vikunja tasks",
        path=tmp_path,
        build=BuildConfig(binary="vk"),
        variables=(
            Variable(name="VIKUNJA_TOKEN", label="API Token", type=VariableType.SECRET),
            Variable(name="PROJECT_IDS", label="Projects", type=VariableType.JSON),
        ),
    )
    fields.update(kwargs)
    return Manifest(**fields)


def _tree() -> CommandNode:
    create = CommandNode(
        name="create",
        description="Create a task",
        usage="tasks create [flags]",
        flags=(
            FlagDescriptor(names=("-t", "--title"), type="string", description="Task title (required)"),
            FlagDescriptor(names=("--done",), description="Mark as done"),
        ),
    )
    tasks = CommandNode(name="tasks", description="Work with tasks", children=(create,))
    version = CommandNode(name="version", description="Print the version", usage="version")
    return CommandNode(name="vk", children=(tasks, version))


class TestStripFrontmatter:
    def test_removes_header_and_following_blank_lines(self):
        text = "---\nname: old\n---\n\n# Title\n"
        assert strip_frontmatter(text) == "# Title\n"

    def test_without_header_is_unchanged(self):
        text = "# Title\n\n---\nnot a header\n---\n"
        assert strip_frontmatter(text) == text

    def test_unterminated_header_is_unchanged(self):
        text = "---\nname: old\n# Title\n"
        assert strip_frontmatter(text) == text

    def test_empty(self):
        assert strip_frontmatter("") == ""


def test_frontmatter_uses_detailed_description(tmp_path):
    manifest = _manifest(tmp_path, detailed_description="Tasks: create & list")
    header = render_frontmatter(manifest)

    assert header.startswith("---\n")
    assert header.endswith("---\n\n")
    data = yaml.safe_load(header.strip().strip("-"))
    assert data == {"name": "vikunja", "description": "Tasks: create & list"}


class TestRenderCommands:
    def test_renders_every_leaf(self):
        text = render_commands(_tree(), BINARY_PATH)

        assert "### tasks create" in text
        assert "Create a task" in text
        assert f"**Usage:** `{BINARY_PATH} tasks create [flags]`" in text
        assert "- `-t, --title` (string): Task title (required)" in text
        assert "- `--done`: Mark as done" in text
        assert "### version" in text
        assert text.index("### tasks create") < text.index("### version")

    def test_empty_tree_falls_back_to_help_hint(self):
        text = render_commands(CommandNode(name="vk"), BINARY_PATH)
        assert text == f"Run `{BINARY_PATH} --help` to see available commands."


class TestRenderJsonTable:
    def test_object_becomes_table(self):
        table = render_json_table('{"Inbox": 1, "Work": 7}', "Projects")
        assert table.splitlines() == [
            "| ID | Name |",
            "|----|------|",
            "| 1 | Inbox |",
            "| 7 | Work |",
        ]

    def test_empty_value(self):
        assert render_json_table("", "Projects") == "No Projects configured."

    @pytest.mark.parametrize("raw", ["[1, 2]", "not json", "{}"])
    def test_non_object_is_shown_raw(self, raw):
        assert render_json_table(raw, "Projects") == f"Config: `{raw}`"


class TestRenderDocs:
    TEMPLATE = (
        "---\nname: stale\ndescription: stale\n---\n\n"
        "# Vikunja\n\nInstalled at {{SKILL_PATH}}.\n\n"
        "## Projects\n\n{{PROJECT_IDS_TABLE}}\n\n"
        "## Commands\n\n{{COMMANDS}}\n\n{{UNKNOWN}}\n"
    )

    def test_template_placeholders(self, tmp_path):
        values = {"VIKUNJA_TOKEN": "secret-token", "PROJECT_IDS": '{"Inbox": 1}'}
        doc = render_docs(_manifest(tmp_path), DEPLOY_PATH, values, _tree(), self.TEMPLATE)

        assert doc.startswith("---\nname: vikunja\ndescription: Manage Vikunja tasks\n---\n\n# Vikunja\n")
        assert "stale" not in doc
        assert f"Installed at {DEPLOY_PATH}." in doc
        assert "| 1 | Inbox |" in doc
        assert "### tasks create" in doc
        assert "{{UNKNOWN}}" in doc
        assert "secret-token" not in doc

    def test_configured_values_are_not_expanded(self, tmp_path):
        values = {"PROJECT_IDS": "{{COMMANDS}} in {{SKILL_PATH}}"}
        doc = render_docs(_manifest(tmp_path), DEPLOY_PATH, values, _tree(), self.TEMPLATE)

        assert "Config: `{{COMMANDS}} in {{SKILL_PATH}}`" in doc
        assert doc.count("### tasks create") == 1

    def test_skeleton_without_template(self, tmp_path):
        doc = render_docs(_manifest(tmp_path), DEPLOY_PATH, {}, CommandNode(name="vk"), None)

        assert "# vikunja\n\nManage Vikunja tasks\n\n## Commands\n" in doc
        assert f"Run `{BINARY_PATH} --help` to see available commands." in doc

    def test_rendering_is_idempotent(self, tmp_path):
        manifest = _manifest(tmp_path)
        values = {"PROJECT_IDS": '{"Inbox": 1}'}
        first = render_docs(manifest, DEPLOY_PATH, values, _tree(), self.TEMPLATE)
        second = render_docs(manifest, DEPLOY_PATH, values, _tree(), self.TEMPLATE)
        assert first == second

    def test_rendered_output_used_as_template_is_stable(self, tmp_path):
        manifest = _manifest(tmp_path)
        first = render_docs(manifest, DEPLOY_PATH, {}, _tree(), self.TEMPLATE)
        again = render_docs(manifest, DEPLOY_PATH, {}, _tree(), first)
        assert again == first


@pytest.mark.asyncio
async def test_load_template(tmp_path):
    manifest = _manifest(tmp_path, docs=DocsConfig(template="docs.md"))
    assert await load_template(manifest) is None

    (tmp_path / "docs.md").write_text("# Hello\n")
    assert await load_template(manifest) == "# Hello\n"
