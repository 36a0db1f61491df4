"""Build configuration.

BuildConfig is assembled once per invocation and then flows, unchanged, into
the resolver and the orchestrator.

Sources, lowest precedence first:
    1. Built-in defaults (src/ for sources, project root for tests, build/ for output)
    2. The [modbuild] section of modbuild.ini in the project directory
    3. Environment variables: MODBUILD_OUTPUT_DIR, MODBUILD_COMPILER, MODBUILD_TARGET
    4. Explicit overrides (command-line flags)

Example modbuild.ini:
    [modbuild]
    source_dir = src
    output_dir = out
    compiler = msvc
    external_namespaces = std, boost
"""

import configparser
import os
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from .build.errors import ConfigError

CONFIG_FILE_NAME = "modbuild.ini"
CONFIG_SECTION = "modbuild"

# Environment variable -> BuildConfig field
ENV_OVERRIDES = {
    "MODBUILD_OUTPUT_DIR": "output_dir",
    "MODBUILD_COMPILER": "compiler",
    "MODBUILD_TARGET": "target",
}

SUPPORTED_COMPILERS = ("msvc", "gcc")

_PATH_FIELDS = ("source_dir", "test_dir", "output_dir")


def default_compiler() -> str:
    """MSVC on Windows, GCC everywhere else."""
    return "msvc" if sys.platform == "win32" else "gcc"


@dataclass(frozen=True)
class BuildConfig:
    """Configuration for one build invocation.

    Attributes:
        project_dir: Project root; relative paths are resolved against it
        source_dir: Root for modules in the default namespace
        test_dir: Root for modules in the test namespace
        output_dir: Directory for module artifacts and the linked artifact
        compiler: Compiler adapter name ("msvc" or "gcc")
        target: Target architecture, or None for the host architecture
        source_extension: Extension of module source files
        test_namespace: Namespace resolved under test_dir
        external_namespaces: Namespaces supplied by the toolchain
        verbose: Log every module decision
        clean: Empty output_dir before building
    """

    project_dir: Path
    source_dir: Path
    test_dir: Path
    output_dir: Path
    compiler: str
    target: Optional[str] = None
    source_extension: str = ".cpp"
    test_namespace: str = "test"
    external_namespaces: Tuple[str, ...] = ("std",)
    verbose: bool = False
    clean: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary (paths as strings)."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data


def _read_ini(project_dir: Path) -> Dict[str, str]:
    """Read the [modbuild] section of modbuild.ini, if present."""
    ini_path = project_dir / CONFIG_FILE_NAME
    if not ini_path.exists():
        return {}

    parser = configparser.ConfigParser()
    try:
        parser.read(ini_path, encoding="utf-8")
    except configparser.Error as e:
        raise ConfigError(f"Failed to parse {ini_path}: {e}") from e

    if not parser.has_section(CONFIG_SECTION):
        return {}
    return dict(parser.items(CONFIG_SECTION))


def _split_list(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.replace("\n", ",").split(",") if item.strip())


def load_config(
    project_dir: Path,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> BuildConfig:
    """Assemble the build configuration for a project.

    Args:
        project_dir: Project root directory
        environ: Environment to read overrides from (defaults to os.environ)
        **overrides: Field values that take precedence; None means "not given"

    Returns:
        Fully resolved BuildConfig

    Raises:
        ConfigError: If modbuild.ini is malformed or a value is invalid
    """
    environ = os.environ if environ is None else environ
    project_dir = Path(project_dir).resolve()

    values: Dict[str, Any] = {
        "source_dir": "src",
        "test_dir": ".",
        "output_dir": "build",
        "compiler": default_compiler(),
    }

    known = {f.name for f in fields(BuildConfig)} - {"project_dir"}
    for key, value in _read_ini(project_dir).items():
        if key not in known:
            raise ConfigError(f"Unknown option '{key}' in {CONFIG_FILE_NAME}")
        values[key] = value

    for env_name, key in ENV_OVERRIDES.items():
        if environ.get(env_name):
            values[key] = environ[env_name]

    for key, value in overrides.items():
        if key not in known:
            raise ConfigError(f"Unknown configuration option: {key}")
        if value is not None:
            values[key] = value

    for key in _PATH_FIELDS:
        path = Path(values[key])
        values[key] = (path if path.is_absolute() else project_dir / path).resolve()

    if isinstance(values.get("external_namespaces"), str):
        values["external_namespaces"] = _split_list(values["external_namespaces"])
    elif "external_namespaces" in values:
        values["external_namespaces"] = tuple(values["external_namespaces"])

    for key in ("verbose", "clean"):
        if isinstance(values.get(key), str):
            values[key] = values[key].strip().lower() in ("1", "true", "yes", "on")

    extension = values.get("source_extension")
    if extension is not None and not str(extension).startswith("."):
        values["source_extension"] = f".{extension}"

    if values["compiler"] not in SUPPORTED_COMPILERS:
        raise ConfigError(f"Unsupported compiler '{values['compiler']}'. Supported: {', '.join(SUPPORTED_COMPILERS)}")

    return BuildConfig(project_dir=project_dir, **values)
