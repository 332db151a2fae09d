"""
Static resource loader.

Resolves ``ior:esm:`` references to script files under the web root.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from iorgate.errors import NotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourcePath:
    """A located file plus the web root it was found under."""

    path: Path
    web_root: Path

    def relative_url(self) -> str:
        """Root-relative URL path, without the web root prefix."""
        return "/" + self.path.relative_to(self.web_root).as_posix()


class StaticResourceLoader:
    """
    Locates script resources under a web root.

    Lookup order for ``/Components/Generic``:
        1. <web_root>/Components/Generic
        2. <web_root>/Components/Generic.mjs, .js
        3. <web_root>/Components/Generic/index.mjs, index.js
    """

    SUFFIXES = (".mjs", ".js")
    INDEX_FILES = ("index.mjs", "index.js")

    def __init__(self, web_root: str | Path):
        self._web_root = Path(web_root).resolve()

    @property
    def web_root(self) -> Path:
        return self._web_root

    async def locate(self, path: str) -> ResourcePath:
        """
        Find the file a reference path points to.

        Raises:
            NotFound: If nothing matches or the path escapes the web root
        """
        relative = path.lstrip("/")
        if not relative:
            raise NotFound("Empty resource path")

        base = self._web_root / relative
        candidates = [
            base,
            *(base.with_name(base.name + suffix) for suffix in self.SUFFIXES),
            *(base / index for index in self.INDEX_FILES),
        ]
        for candidate in candidates:
            resolved = candidate.resolve()
            if not resolved.is_relative_to(self._web_root):
                logger.warning(f"[static] Path escapes web root: {path}")
                raise NotFound(f"Resource not found: {path}")
            if resolved.is_file():
                return ResourcePath(path=resolved, web_root=self._web_root)

        raise NotFound(f"Resource not found: {path}")
