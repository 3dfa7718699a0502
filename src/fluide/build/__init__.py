"""Build configuration generation and bundler invocation."""

from fluide.build.config import (
    BuildConfiguration,
    ServerSettings,
    discover_entrypoints,
    generate_build_config,
    merge_config,
    resolve_build_config,
)
from fluide.build.engine import BuildEngine, ViteEngine, write_config_module
from fluide.build.logger import BuildLogger

__all__ = [
    "BuildConfiguration",
    "ServerSettings",
    "discover_entrypoints",
    "generate_build_config",
    "merge_config",
    "resolve_build_config",
    "BuildEngine",
    "ViteEngine",
    "write_config_module",
    "BuildLogger",
]
