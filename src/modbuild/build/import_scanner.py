"""Import directive scanner.

Extracts imported module names from module source text. A directive is only
recognized when `import` starts a line, followed by whitespace and a module
name that runs up to the first ';', carriage return or line feed:

    import BasicTypes;
    import parse.Token;

Anything else (`export import X;`, indented imports, comments) is ignored.
"""

import logging
import re
from pathlib import Path
from typing import List, Optional

from .errors import ResolutionError

logger = logging.getLogger(__name__)

IMPORT_PATTERN = re.compile(r"^import[ \t]+([^;\r\n]+)", re.MULTILINE)


class ImportScanner:
    """Reads module sources and lists their imports in directive order."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    @staticmethod
    def scan_text(text: str) -> List[str]:
        """Extract imported module names from source text."""
        imports = []
        for match in IMPORT_PATTERN.finditer(text):
            name = match.group(1).strip()
            if name:
                imports.append(name)
        return imports

    def scan(self, path: Path, module_name: Optional[str] = None) -> List[str]:
        """Read a source file and extract its imports.

        Args:
            path: Source file to read
            module_name: Module being scanned (used in error reports)

        Returns:
            Imported module names in the order they appear

        Raises:
            ResolutionError: If the file does not exist or cannot be read
        """
        try:
            text = Path(path).read_text(encoding=self.encoding)
        except FileNotFoundError as e:
            raise ResolutionError(module_name, Path(path), reason="file not found") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ResolutionError(module_name, Path(path), reason=str(e)) from e

        imports = self.scan_text(text)
        logger.debug(f"Scanned {path}: {len(imports)} import(s) {imports}")
        return imports
