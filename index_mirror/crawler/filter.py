"""
Tree filter for pruning a crawled index down to an allow-list.

Pure functions over tree entries; nothing here performs I/O.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from .tree import DirectoryEntry, EntryKind
from ..utils.constants import DEFAULT_ALLOWED_DIRS, DEFAULT_FILE_NAMES, DEFAULT_FILE_SUFFIXES
from ..utils.log import get_logger


@dataclass(frozen=True)
class FilterPolicy:
    """
    Which directories and files survive filtering.

    Attributes:
        allowed_dirs: Directory names that are kept (with their filtered contents)
        file_suffixes: A file is kept if its name ends with one of these
        file_names: A file is kept if its name is exactly one of these
        nested_dirs: Apply allowed_dirs to the root's children only and keep
            every directory below an allowed one
    """

    allowed_dirs: Tuple[str, ...] = ()
    file_suffixes: Tuple[str, ...] = ()
    file_names: Tuple[str, ...] = ()
    nested_dirs: bool = False

    @classmethod
    def create(
        cls,
        allowed_dirs: Iterable[str] = (),
        file_suffixes: Iterable[str] = (),
        file_names: Iterable[str] = (),
        nested_dirs: bool = False
    ) -> "FilterPolicy":
        """Build a policy from any iterables, dropping repeated values."""
        return cls(
            allowed_dirs=tuple(dict.fromkeys(allowed_dirs)),
            file_suffixes=tuple(dict.fromkeys(file_suffixes)),
            file_names=tuple(dict.fromkeys(file_names)),
            nested_dirs=nested_dirs,
        )

    @classmethod
    def wordpress(cls) -> "FilterPolicy":
        """Policy for a WordPress core tree: wp-admin, wp-includes, PHP sources and the license."""
        return cls(DEFAULT_ALLOWED_DIRS, DEFAULT_FILE_SUFFIXES, DEFAULT_FILE_NAMES)

    def keeps_directory(self, name: str, depth: int) -> bool:
        """
        Check whether a directory survives.

        Args:
            name: Directory name
            depth: 1 for children of the root, 2 below those, and so on
        """
        if self.nested_dirs and depth > 1:
            return True
        return name in self.allowed_dirs

    def keeps_file(self, name: str) -> bool:
        """Check whether a file survives."""
        return name in self.file_names or name.endswith(self.file_suffixes)


class TreeFilter:
    """Produces pruned copies of entry trees according to a FilterPolicy."""

    def __init__(self, policy: FilterPolicy):
        self.policy = policy
        self.logger = get_logger("filter")

    def filter(self, node: DirectoryEntry) -> DirectoryEntry:
        """
        Build a filtered copy of a directory tree.

        The input is left untouched. A directory that is not allowed is
        dropped together with everything below it; surviving children keep
        their input order.

        Args:
            node: Root of the tree to filter

        Returns:
            New root DirectoryEntry with the same name
        """
        filtered = self._filter(node, 1)

        before, after = node.count(), filtered.count()
        self.logger.info(
            f"Filter kept {after[0]}/{before[0]} directories, "
            f"{after[1]}/{before[1]} files"
        )
        return filtered

    def _filter(self, node: DirectoryEntry, depth: int) -> DirectoryEntry:
        filtered = DirectoryEntry(node.name)

        for child in node.children:
            if child.kind is EntryKind.DIRECTORY:
                if self.policy.keeps_directory(child.name, depth):
                    filtered.add_child(self._filter(child, depth + 1))
            elif child.kind is EntryKind.FILE:
                if self.policy.keeps_file(child.name):
                    filtered.add_child(child)

        return filtered


def filter_tree(node: DirectoryEntry, policy: FilterPolicy) -> DirectoryEntry:
    """Filter a tree with the given policy."""
    return TreeFilter(policy).filter(node)
