"""Thin adapter over a parsed EAGLE BRD XML tree."""
import logging
from pathlib import Path
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from brdrender.errors import MissingNodeError

logger = logging.getLogger(__name__)


class BrdDocument:
    """Read-only view of an EAGLE board file."""

    def __init__(self, root: Element):
        self.root = root

    @classmethod
    def from_string(cls, text: str | bytes) -> "BrdDocument":
        return cls(ElementTree.fromstring(text))

    @classmethod
    def from_file(cls, path: str | Path) -> "BrdDocument":
        return cls(ElementTree.parse(str(path)).getroot())

    @property
    def version(self) -> str | None:
        """EAGLE version that wrote the file, if recorded."""
        return self.root.get("version")

    def first(self, tag: str) -> Element | None:
        """First node with the given tag, in document order."""
        return next(self.root.iter(tag), None)

    def find_all(self, tag: str) -> list[Element]:
        """All nodes with the given tag, in document order."""
        return list(self.root.iter(tag))

    def require(self, tag: str) -> Element:
        """Like `first`, but a missing node is fatal."""
        node = self.first(tag)
        if node is None:
            raise MissingNodeError(tag)
        return node

    def package(self, library: str, name: str) -> Element | None:
        """
        Resolve a library package by name.

        Args:
            library: Library name from an <element>
            name: Package name from an <element>

        Returns:
            The <package> node, or None if either name is unknown
        """
        for lib in self.find_all("library"):
            if lib.get("name") != library:
                continue
            for package in lib.iter("package"):
                if package.get("name") == name:
                    return package
            logger.warning("Package %s not found in library %s", name, library)
            return None
        logger.warning("Library %s not found", library)
        return None
