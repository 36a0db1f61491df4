"""Toolchain environment cache.

Discovering a toolchain environment can be slow (MSVC runs vcvarsall.bat and
dumps every variable it sets). The result is stored as JSON in the output
directory, keyed by host/target architecture, so later builds load it instead
of rediscovering it.

Each adapter owns its ToolchainEnvironment value; nothing is kept in module
globals.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..output import log_warning

logger = logging.getLogger(__name__)


def env_spec(host: str, target: str) -> str:
    """Return the environment spec for a host/target pair.

    Native builds use the target alone ("x64"); cross builds join host and
    target ("x64_arm64").
    """
    return target if target == host else f"{host}_{target}"


@dataclass
class ToolchainEnvironment:
    """Variables needed to run a toolchain for one host/target pair.

    Attributes:
        host: Host architecture token
        target: Target architecture token
        variables: Environment variables passed to every tool invocation
    """

    host: str
    target: str
    variables: Dict[str, str] = field(default_factory=dict)

    @property
    def spec(self) -> str:
        return env_spec(self.host, self.target)

    @staticmethod
    def cache_path(output_dir: Path, prefix: str, host: str, target: str) -> Path:
        """Location of the cache file for a host/target pair."""
        return Path(output_dir) / f"{prefix}_{env_spec(host, target)}.json"

    def to_dict(self) -> dict[str, Any]:
        return {"host": self.host, "target": self.target, "variables": dict(self.variables)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolchainEnvironment":
        variables = data["variables"]
        if not isinstance(variables, dict):
            raise ValueError("variables must be a mapping")
        return cls(
            host=data["host"],
            target=data["target"],
            variables={str(k): str(v) for k, v in variables.items()},
        )

    @classmethod
    def load(cls, path: Path) -> Optional["ToolchainEnvironment"]:
        """Load a cached environment.

        Returns:
            The cached environment, or None if the file is missing or corrupted
        """
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                env = cls.from_dict(json.load(f))
            logger.debug(f"Loaded toolchain environment ({len(env.variables)} variables) from {path}")
            return env
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, OSError) as e:
            log_warning(f"Ignoring corrupted toolchain environment cache {path.name}: {e}")
            return None

    def save(self, path: Path) -> None:
        """Save the environment atomically (temp file + rename)."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_file = path.with_suffix(".tmp")
        with open(temp_file, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        temp_file.replace(path)
        logger.debug(f"Saved toolchain environment to {path}")
