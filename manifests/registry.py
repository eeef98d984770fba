"""Manifest registry: discovers deployable skills under a project root."""

from __future__ import annotations

from pathlib import Path

from config import Config
from utils import get_logger

from .parser import MANIFEST_FILENAME, ManifestError, list_skill_dirs, parse_manifest, read_text
from .types import Manifest, SkillError

logger = get_logger(__name__)

_ROOT_SEARCH_DEPTH = 10


def find_project_root(start: Path, skills_dir: str | None = None) -> Path:
    """Walk up from start to the first directory holding go.mod and the skills folder.

    Falls back to start when nothing matches.
    """
    skills_dir = skills_dir or Config.SKILLS_DIR
    current = start.resolve()
    for _ in range(_ROOT_SEARCH_DEPTH):
        if (current / "go.mod").is_file() and (current / skills_dir).is_dir():
            return current
        if current.parent == current:
            break
        current = current.parent
    return start.resolve()


class ManifestRegistry:
    """Index of the skills found in <project_root>/<skills_dir>.

    Every skill directory resolves to exactly one outcome: a Manifest in
    `manifests` or a SkillError in `errors`. A broken skill never stops
    discovery of the others.
    """

    def __init__(self, project_root: Path, skills_dir: str | None = None) -> None:
        self.project_root = project_root
        self.skills_dir = project_root / (skills_dir or Config.SKILLS_DIR)
        self.manifests: list[Manifest] = []
        self.errors: list[SkillError] = []

    async def load(self) -> None:
        manifests: list[Manifest] = []
        errors: list[SkillError] = []

        for skill_dir in await list_skill_dirs(self.skills_dir):
            outcome = await self._load_one(skill_dir)
            if isinstance(outcome, Manifest):
                manifests.append(outcome)
            else:
                errors.append(outcome)

        self.manifests = manifests
        self.errors = errors
        logger.info(
            f"Discovered {len(manifests)} skill(s) and {len(errors)} broken skill(s) "
            f"in {self.skills_dir}"
        )

    async def _load_one(self, skill_dir: Path) -> Manifest | SkillError:
        manifest_file = skill_dir / MANIFEST_FILENAME
        try:
            content = await read_text(manifest_file)
            return parse_manifest(content, skill_dir)
        except (OSError, UnicodeDecodeError) as e:
            reason = f"cannot read {MANIFEST_FILENAME}: {e}"
        except ManifestError as e:
            reason = str(e)
        logger.warning(f"Skipping skill {skill_dir.name}: {reason}")
        return SkillError(name=skill_dir.name, path=skill_dir, reason=reason)

    def get(self, name: str) -> Manifest | None:
        for manifest in self.manifests:
            if manifest.name == name:
                return manifest
        return None
