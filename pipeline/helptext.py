"""Parsers for conventional CLI help output.

The target programs print help in the cobra/pflag layout:

    Create a task

    Usage:
      vikunja tasks create [flags]

    Available Commands:
      list        List tasks

    Flags:
      -t, --title string   Task title (required)
      -h, --help           help for create

Every function here is permissive: text that does not follow the layout
yields empty results instead of errors.
"""

from __future__ import annotations

from .types import CommandNode, FlagDescriptor

COMMANDS_HEADER = "Available Commands:"
USAGE_HEADER = "Usage:"
FLAGS_HEADER = "Flags:"

# Tooling commands every cobra program carries; never documented.
RESERVED_COMMANDS = frozenset({"help", "completion"})

HELP_FLAG = "--help"

FLAG_TYPES = frozenset(
    {
        "string",
        "strings",
        "stringArray",
        "stringSlice",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "intSlice",
        "int32Slice",
        "int64Slice",
        "uintSlice",
        "bool",
        "boolSlice",
        "float32",
        "float64",
        "float32Slice",
        "float64Slice",
        "duration",
        "durationSlice",
    }
)


def _is_header(trimmed: str) -> bool:
    return trimmed.endswith(":")


def parse_subcommands(help_text: str) -> list[str]:
    """Return the command names listed under "Available Commands:".

    The section ends at a line ending in ":" or, after a blank line, at the
    first unindented line.
    """
    commands: list[str] = []
    in_section = False
    after_blank = False

    for line in help_text.splitlines():
        trimmed = line.strip()

        if not in_section:
            if trimmed.startswith(COMMANDS_HEADER):
                in_section = True
            continue

        if not trimmed:
            after_blank = True
            continue
        if _is_header(trimmed):
            break
        if after_blank and not line[:1].isspace():
            break

        name = trimmed.split()[0]
        if name not in RESERVED_COMMANDS:
            commands.append(name)

    return commands


def parse_description(help_text: str) -> str:
    """Return the first non-blank line before "Usage:", or "" if there is none."""
    for line in help_text.splitlines():
        trimmed = line.strip()
        if trimmed.startswith(USAGE_HEADER):
            break
        if trimmed:
            return trimmed
    return ""


def parse_usage(help_text: str) -> str:
    """Return the usage pattern without the leading program name."""
    lines = help_text.splitlines()
    for i, line in enumerate(lines):
        trimmed = line.strip()
        if not trimmed.startswith(USAGE_HEADER):
            continue

        inline = trimmed[len(USAGE_HEADER) :].strip()
        pattern = inline or (lines[i + 1].strip() if i + 1 < len(lines) else "")
        parts = pattern.split()
        if len(parts) > 1:
            return " ".join(parts[1:])
        return ""
    return ""


def parse_flag_line(line: str) -> FlagDescriptor | None:
    """Parse `-t, --title string   Task title` into a FlagDescriptor.

    Returns None for lines that do not start with a dash.
    """
    parts = line.split()
    if not parts or not parts[0].startswith("-"):
        return None

    names: list[str] = []
    i = 0
    while i < len(parts) and (parts[i].startswith("-") or parts[i] == ","):
        name = parts[i].rstrip(",")
        if name:
            names.append(name)
        i += 1

    flag_type = ""
    if i < len(parts) and parts[i] in FLAG_TYPES:
        flag_type = parts[i]
        i += 1

    return FlagDescriptor(
        names=tuple(names),
        type=flag_type,
        description=" ".join(parts[i:]),
    )


def parse_flags(help_text: str) -> list[FlagDescriptor]:
    """Return the flags of the "Flags:" section, minus the universal help flag.

    "Global Flags:" and any other section end the list.
    """
    flags: list[FlagDescriptor] = []
    in_section = False

    for line in help_text.splitlines():
        trimmed = line.strip()

        if not in_section:
            if trimmed.startswith(FLAGS_HEADER):
                in_section = True
            continue

        if not trimmed:
            continue
        if not trimmed.startswith("-"):
            if _is_header(trimmed):
                break
            # wrapped description or stray text
            continue

        flag = parse_flag_line(trimmed)
        if flag is not None and HELP_FLAG not in flag.names:
            flags.append(flag)

    return flags


def parse_help(name: str, help_text: str) -> CommandNode:
    """Build a leaf CommandNode from one help page."""
    return CommandNode(
        name=name,
        description=parse_description(help_text),
        usage=parse_usage(help_text),
        flags=tuple(parse_flags(help_text)),
    )
