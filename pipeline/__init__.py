"""Build, deploy and documentation pipeline for skills."""

from .build import build_skill, make_build_request
from .deploy import deploy_skill, make_deploy_request
from .docs import render_docs, strip_frontmatter
from .introspect import CommandIntrospector
from .types import (
    BuildRequest,
    BuildResult,
    CommandNode,
    DeployRequest,
    DeployResult,
    FlagDescriptor,
)

__all__ = [
    "BuildRequest",
    "BuildResult",
    "CommandIntrospector",
    "CommandNode",
    "DeployRequest",
    "DeployResult",
    "FlagDescriptor",
    "build_skill",
    "deploy_skill",
    "make_build_request",
    "make_deploy_request",
    "render_docs",
    "strip_frontmatter",
]
