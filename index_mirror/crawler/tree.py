"""
Tree entries shared by the crawler, the filter and the downloader.

A crawled index is a DirectoryEntry whose children are DirectoryEntry or
FileEntry values, in the order their anchors appeared in the listing.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Tuple, Union


class EntryKind(Enum):
    """Discriminator carried by every tree entry."""

    DIRECTORY = "directory"
    FILE = "file"


@dataclass(frozen=True)
class FileEntry:
    """A remote file: its leaf name and the absolute URL its body is fetched from."""

    name: str
    source_url: str

    kind = EntryKind.FILE
    is_directory = False

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "name": self.name, "url": self.source_url}


@dataclass
class DirectoryEntry:
    """
    A remote directory listing.

    Children keep insertion order and are not deduplicated; two children
    may share a name.
    """

    name: str
    children: List["Entry"] = field(default_factory=list)

    kind = EntryKind.DIRECTORY
    is_directory = True

    def add_child(self, entry: "Entry") -> None:
        """Append a child entry."""
        self.children.append(entry)

    def walk(self, _parents: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], "Entry"]]:
        """
        Iterate over all descendants depth-first, in child order.

        Yields:
            (parent names relative to this directory, entry) pairs
        """
        for child in self.children:
            yield _parents, child
            if child.is_directory:
                yield from child.walk(_parents + (child.name,))

    def count(self) -> Tuple[int, int]:
        """
        Count the descendants of this directory.

        Returns:
            (directories, files) below this node
        """
        directories = files = 0
        for _, entry in self.walk():
            if entry.is_directory:
                directories += 1
            else:
                files += 1
        return directories, files

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.kind.value,
            "name": self.name,
            "children": [child.to_dict() for child in self.children],
        }


Entry = Union[DirectoryEntry, FileEntry]
