"""Build configuration generation.

Derives the Vite configuration for a fluide theme from the project layout
and the dev-server settings, then layers the user's own configuration on
top. Generated values are defaults only: whatever the user sets wins.
"""

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from fluide.core.config import ProjectSettings

logger = logging.getLogger(__name__)

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5173
MANIFEST_FILE = "fluide.manifest.json"
ENV_PREFIXES = ["VITE_", "PUBLIC_", "FLUIDE_"]
SOURCE_ALIASES = ("~", "@")


@dataclass(frozen=True)
class ServerSettings:
    """Dev-server settings resolved from the user's configuration."""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    https: bool = False

    @property
    def protocol(self) -> str:
        return "https:" if self.https else "http:"

    @property
    def socket_protocol(self) -> str:
        return "wss" if self.https else "ws"

    @property
    def origin(self) -> str:
        return f"{self.protocol}//{self.host}:{self.port}"

    @classmethod
    def from_user_config(cls, user_config: Optional[Mapping[str, Any]]) -> "ServerSettings":
        server = (user_config or {}).get("server") or {}
        host = server.get("host")
        port = server.get("port")
        return cls(
            host=str(host) if host not in (None, True, False) else DEFAULT_HOST,
            port=int(port) if port is not None else DEFAULT_PORT,
            # An https options object means TLS is configured
            https=bool(server.get("https")),
        )


@dataclass
class BuildConfiguration:
    """Generated build configuration."""
    base: str
    out_dir: str
    input: List[str]
    alias: Dict[str, str]
    server: ServerSettings
    watch_ignored: List[str]

    @property
    def origin(self) -> str:
        return self.server.origin

    def to_dict(self) -> Dict[str, Any]:
        """Vite-shaped configuration mapping."""
        server = self.server
        return {
            # Relative base so imported assets load from the storefront CDN
            "base": self.base,
            "envPrefix": list(ENV_PREFIXES),
            "publicDir": False,
            "build": {
                "outDir": self.out_dir,
                "modulePreload": {"polyfill": True},
                "assetsDir": "",
                "rollupOptions": {"input": list(self.input)},
                "manifest": MANIFEST_FILE,
            },
            "resolve": {"alias": dict(self.alias)},
            "server": {
                "host": server.host,
                "https": server.https,
                "port": server.port,
                "origin": server.origin,
                "strictPort": True,
                "hmr": {
                    "host": server.host,
                    "port": server.port,
                    "protocol": server.socket_protocol,
                },
                "watch": {"ignored": list(self.watch_ignored)},
            },
        }


def discover_entrypoints(entrypoints_dir: Path) -> List[str]:
    """All files (recursively) under the entry points directory."""
    if not entrypoints_dir.is_dir():
        logger.debug("No entry points directory at %s", entrypoints_dir)
        return []
    return sorted(p.as_posix() for p in entrypoints_dir.rglob("*") if p.is_file())


def generate_build_config(settings: ProjectSettings, server: ServerSettings) -> BuildConfiguration:
    """Derive the build configuration from the project layout."""
    source = str(settings.source_path.resolve())
    config = BuildConfiguration(
        base="./",
        out_dir=str(settings.root / "assets"),
        input=discover_entrypoints(settings.entrypoints_path),
        alias={name: source for name in SOURCE_ALIASES},
        server=server,
        watch_ignored=["assets/*", f"snippets/{settings.snippet_name}.liquid"],
    )
    logger.debug("Generated build configuration: %s", config)
    return config


def merge_config(defaults: Mapping[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Deep-merge two configuration mappings.

    Nested mappings are merged key by key. Anywhere else the override
    value replaces the default; None in overrides leaves the default alone.
    Neither input is modified.
    """
    merged: Dict[str, Any] = copy.deepcopy(dict(defaults))
    for key, value in overrides.items():
        if value is None:
            continue
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def resolve_build_config(settings: ProjectSettings) -> Dict[str, Any]:
    """Generated configuration with the project's user overrides applied."""
    server = ServerSettings.from_user_config(settings.vite)
    generated = generate_build_config(settings, server)
    return merge_config(generated.to_dict(), settings.vite)
