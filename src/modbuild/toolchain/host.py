"""Host processor architecture detection.

Architecture tokens follow the MSVC convention used for environment specs:
"x64", "x86" and "arm64".
"""

import os
import platform
import sys
from typing import Mapping, Optional

from ..build.errors import ToolchainDiscoveryError

# platform.machine() values mapped to architecture tokens
MACHINE_ARCH_MAP = {
    "amd64": "x64",
    "x86_64": "x64",
    "x64": "x64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86": "x86",
    "arm64": "arm64",
    "aarch64": "arm64",
}


def get_host_architecture(environ: Optional[Mapping[str, str]] = None) -> str:
    """Determine the host architecture token.

    On Windows the PROCESSOR_ARCHITECTURE family of variables decides: "AMD64"
    maps to x64 and anything else to x86. Other platforms use
    platform.machine().

    Args:
        environ: Environment to inspect (defaults to os.environ)

    Raises:
        ToolchainDiscoveryError: If the architecture cannot be determined
    """
    environ = os.environ if environ is None else environ

    if sys.platform == "win32":
        for key in sorted(environ):
            if key.upper().startswith("PROCESSOR_ARCH"):
                return "x64" if environ[key] == "AMD64" else "x86"

    machine = platform.machine().lower()
    arch = MACHINE_ARCH_MAP.get(machine)
    if arch is None:
        raise ToolchainDiscoveryError(f"Unable to determine host processor architecture (machine={machine!r})")
    return arch
