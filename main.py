"""Main entry point for skillfactory."""

import argparse
import asyncio
import importlib.metadata
import logging
from pathlib import Path

from config import Config
from manifests import ManifestRegistry, find_project_root
from pipeline import CommandIntrospector
from pipeline.docs import render_commands
from utils import get_log_file_path, setup_logger, terminal_ui
from utils.runtime import ensure_runtime_dirs
from wizard import run_wizard
from wizard.states import Done


async def _list_skills(project_root: Path) -> None:
    registry = ManifestRegistry(project_root)
    await registry.load()
    terminal_ui.print_header("Skills", subtitle=str(registry.skills_dir))
    terminal_ui.print_skill_list(registry.manifests, registry.errors)


async def _inspect_binary(binary: Path) -> None:
    introspector = CommandIntrospector.for_binary(binary)
    tree = await introspector.introspect(binary.name)
    terminal_ui.print_header(binary.name, subtitle=tree.description or None)
    terminal_ui.print_markdown(render_commands(tree, str(binary)))


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Build Go skills, configure them and deploy them with generated docs"
    )

    try:
        version = importlib.metadata.version("skillfactory")
    except importlib.metadata.PackageNotFoundError:
        version = "dev"
    parser.add_argument("--version", "-V", action="version", version=f"skillfactory {version}")

    parser.add_argument(
        "--root",
        type=str,
        help="Project root (default: nearest parent holding go.mod and the skills directory)",
    )
    parser.add_argument(
        "--list",
        "-l",
        action="store_true",
        help="List discovered skills and invalid skill directories, then exit",
    )
    parser.add_argument(
        "--inspect",
        type=str,
        metavar="BINARY",
        help="Print the command documentation introspected from BINARY, then exit",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging to ~/.skillfactory/logs/",
    )

    args = parser.parse_args()

    # Initialize runtime directories (create logs dir only in verbose mode)
    ensure_runtime_dirs(create_logs=args.verbose)

    if args.verbose:
        setup_logger()
    else:
        # Keep stray warnings off the wizard screen
        logging.root.addHandler(logging.NullHandler())

    try:
        Config.validate()
    except ValueError as e:
        terminal_ui.print_error(str(e), title="Configuration Error")
        return

    if args.inspect:
        binary = Path(args.inspect).expanduser().resolve()
        if not binary.is_file():
            terminal_ui.print_error(f"No such file: {binary}", title="Inspect Error")
            return
        asyncio.run(_inspect_binary(binary))
        return

    start = Path(args.root).expanduser() if args.root else Path.cwd()
    if not start.is_dir():
        terminal_ui.print_error(f"Not a directory: {start}", title="Project Error")
        return
    project_root = find_project_root(start)

    if args.list:
        asyncio.run(_list_skills(project_root))
        return

    try:
        final_state = asyncio.run(run_wizard(project_root, version))
    except KeyboardInterrupt:
        final_state = None

    if isinstance(final_state, Done):
        if final_state.ok:
            terminal_ui.print_success(
                f"{final_state.manifest.name} deployed to {final_state.target.path}"
            )
        else:
            terminal_ui.print_error(final_state.message, title="Deploy Failed")

    log_file = get_log_file_path()
    if log_file:
        terminal_ui.print_log_location(log_file)


if __name__ == "__main__":
    main()
