"""Tests for command tree introspection."""

import asyncio
import stat
import textwrap

import pytest

from pipeline.introspect import CommandIntrospector, run_help

HELP_PAGES = {
    (): textwrap.dedent(
        """\
        Vikunja client

        Usage:
          vk [command]

        Available Commands:
          help        Help about any command
          tasks       Work with tasks
          version     Print the version
          broken      Always fails
        """
    ),
    ("tasks",): textwrap.dedent(
        """\
        Work with tasks

        Usage:
          vk tasks [command]

        Available Commands:
          create      Create a task
          list        List tasks
        """
    ),
    ("tasks", "create"): textwrap.dedent(
        """\
        Create a task

        Usage:
          vk tasks create [flags]

        Flags:
          -t, --title string   Task title (required)
          -h, --help           help for create
        """
    ),
    ("tasks", "list"): "List tasks\n\nUsage:\n  vk tasks list [flags]\n",
    ("version",): "Print the version\n\nUsage:\n  vk version\n",
}


def _fake_runner(pages, calls=None):
    async def _runner(args):
        if calls is not None:
            calls.append(tuple(args))
        return pages.get(tuple(args))

    return _runner


class TestCommandIntrospector:
    @pytest.mark.asyncio
    async def test_builds_two_level_tree(self):
        tree = await CommandIntrospector(_fake_runner(HELP_PAGES)).introspect("vk")

        assert tree.name == "vk"
        assert tree.description == "Vikunja client"
        assert [c.name for c in tree.children] == ["tasks", "version"]

        tasks = tree.children[0]
        assert not tasks.is_leaf
        assert [c.name for c in tasks.children] == ["create", "list"]
        assert tasks.children[0].usage == "tasks create [flags]"
        assert tasks.children[0].flags[0].display_name == "-t, --title"

        assert [path for path, _ in tree.iter_leaves()] == [
            "tasks create",
            "tasks list",
            "version",
        ]

    @pytest.mark.asyncio
    async def test_failed_command_only_drops_its_subtree(self):
        calls = []
        tree = await CommandIntrospector(_fake_runner(HELP_PAGES, calls)).introspect("vk")

        assert "broken" not in [c.name for c in tree.children]
        assert ("broken",) in calls
        # help is reserved and never invoked
        assert ("help",) not in calls

    @pytest.mark.asyncio
    async def test_failed_leaf_under_group(self):
        pages = dict(HELP_PAGES)
        del pages[("tasks", "list")]
        tree = await CommandIntrospector(_fake_runner(pages)).introspect("vk")

        tasks = tree.children[0]
        assert [c.name for c in tasks.children] == ["create"]

    @pytest.mark.asyncio
    async def test_group_without_any_leaf_is_dropped(self):
        pages = dict(HELP_PAGES)
        del pages[("tasks", "list")]
        del pages[("tasks", "create")]
        tree = await CommandIntrospector(_fake_runner(pages)).introspect("vk")

        assert [c.name for c in tree.children] == ["version"]

    @pytest.mark.asyncio
    async def test_root_failure_gives_empty_tree(self):
        tree = await CommandIntrospector(_fake_runner({})).introspect("vk")
        assert tree.name == "vk"
        assert tree.children == ()
        assert tree.iter_leaves() == []

    @pytest.mark.asyncio
    async def test_no_subcommands_gives_empty_tree(self):
        pages = {(): "A tool\n\nUsage:\n  vk [flags]\n"}
        tree = await CommandIntrospector(_fake_runner(pages)).introspect("vk")
        assert tree.children == ()
        assert tree.usage == "[flags]"

    @pytest.mark.asyncio
    async def test_depth_is_limited_to_two_levels(self):
        pages = {
            (): "Usage:\n  vk\n\nAvailable Commands:\n  a  A\n",
            ("a",): "Usage:\n  vk a\n\nAvailable Commands:\n  b  B\n",
            ("a", "b"): "Usage:\n  vk a b\n\nAvailable Commands:\n  c  C\n",
        }
        calls = []
        tree = await CommandIntrospector(_fake_runner(pages, calls)).introspect("vk")

        assert ("a", "b", "c") not in calls
        assert tree.children[0].children[0].name == "b"
        assert tree.children[0].children[0].is_leaf


def _write_script(path, body):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return path


class TestRunHelp:
    @pytest.mark.asyncio
    async def test_returns_combined_output(self, tmp_path):
        script = _write_script(tmp_path / "prog", 'echo "args: $*"\necho "to stderr" >&2\n')
        output = await run_help(script, ["tasks"], timeout=5)
        assert "args: tasks --help" in output
        assert "to stderr" in output

    @pytest.mark.asyncio
    async def test_non_zero_exit_is_none(self, tmp_path):
        script = _write_script(tmp_path / "prog", "echo usage\nexit 2\n")
        assert await run_help(script, [], timeout=5) is None

    @pytest.mark.asyncio
    async def test_missing_binary_is_none(self, tmp_path):
        assert await run_help(tmp_path / "missing", [], timeout=5) is None

    @pytest.mark.asyncio
    async def test_timeout_is_none(self, tmp_path):
        script = _write_script(tmp_path / "prog", "exec sleep 10\n")
        assert await run_help(script, [], timeout=0.5) is None

    @pytest.mark.asyncio
    async def test_for_binary_runs_real_program(self, tmp_path):
        script = _write_script(
            tmp_path / "prog",
            textwrap.dedent(
                """\
                if [ "$1" = "--help" ]; then
                  printf 'Tool\\n\\nUsage:\\n  prog [command]\\n\\nAvailable Commands:\\n  run  Run it\\n'
                  exit 0
                fi
                if [ "$1" = "run" ]; then
                  printf 'Run it\\n\\nUsage:\\n  prog run [flags]\\n'
                  exit 0
                fi
                exit 1
                """
            ),
        )
        tree = await CommandIntrospector.for_binary(script, timeout=5).introspect("prog")
        assert [path for path, _ in tree.iter_leaves()] == ["run"]
        assert tree.children[0].usage == "run [flags]"


class _ExitedDuringTimeout:
    """A process that finishes right after the help timeout fires."""

    returncode = None

    def __init__(self):
        self.calls = 0

    async def communicate(self):
        self.calls += 1
        if self.calls == 1:
            await asyncio.sleep(10)
        return b"", None

    def kill(self):
        raise ProcessLookupError


@pytest.mark.asyncio
async def test_timeout_after_process_exit_is_none(tmp_path, monkeypatch):
    async def fake_exec(*args, **kwargs):
        return _ExitedDuringTimeout()

    monkeypatch.setattr("pipeline.introspect.asyncio.create_subprocess_exec", fake_exec)
    assert await run_help(tmp_path / "prog", [], timeout=0.1) is None
