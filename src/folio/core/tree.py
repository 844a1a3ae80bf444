"""Editor file tree.

The tree is walked breadth-first with an explicit work queue. Nodes are
collected in flat lists with children tracked by index, and nested node
objects are only assembled once the walk is complete.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path

from folio.core.errors import translate_os_error
from folio.core.fs import ScannedEntry, scan_directory
from folio.core.paths import relative_posix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileNode:
    """Regular file in the tree."""

    name: str
    relative_path: str

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {"type": "file", "name": self.name, "path": self.relative_path}


@dataclass(frozen=True)
class DirectoryNode:
    """Directory in the tree with its sorted children."""

    name: str
    relative_path: str
    children: list["FileTreeNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "type": "directory",
            "name": self.name,
            "path": self.relative_path,
            "children": [child.to_dict() for child in self.children],
        }


FileTreeNode = DirectoryNode | FileNode


class TreeBuilder:
    """Collects tree entries by index before building nested nodes."""

    def __init__(self) -> None:
        self._entries: list[ScannedEntry] = []
        self._relative_paths: list[str] = []
        self._children: list[list[int]] = []
        self._roots: list[int] = []

    def add(self, entry: ScannedEntry, relative_path: str, parent_idx: int | None) -> int:
        """Add an entry.

        Args:
            entry: Scanned directory entry
            relative_path: Path relative to the content root
            parent_idx: Index of the parent directory, None for top level

        Returns:
            Index of the added entry
        """
        idx = len(self._entries)
        self._entries.append(entry)
        self._relative_paths.append(relative_path)
        self._children.append([])

        if parent_idx is None:
            self._roots.append(idx)
        else:
            self._children[parent_idx].append(idx)
        return idx

    def build(self) -> list[FileTreeNode]:
        """Assemble sorted nested nodes.

        Children always have larger indices than their parent, so building
        in reverse index order sees every child before its parent.
        """
        nodes: list[FileTreeNode | None] = [None] * len(self._entries)
        for idx in reversed(range(len(self._entries))):
            entry = self._entries[idx]
            if entry.is_dir:
                children = [nodes[i] for i in self._children[idx]]
                nodes[idx] = DirectoryNode(
                    name=entry.name,
                    relative_path=self._relative_paths[idx],
                    children=sort_tree([n for n in children if n is not None]),
                )
            else:
                nodes[idx] = FileNode(name=entry.name, relative_path=self._relative_paths[idx])

        return sort_tree([node for i in self._roots if (node := nodes[i]) is not None])


def sort_tree(nodes: list[FileTreeNode]) -> list[FileTreeNode]:
    """Order directories before files, each group by name."""
    return sorted(nodes, key=lambda node: (not isinstance(node, DirectoryNode), node.name))


async def build_tree(content_root: Path, directory: Path) -> list[FileTreeNode]:
    """Build the file tree below a resolved directory.

    Subdirectories that cannot be read are logged and left empty.

    Args:
        content_root: Resolved content root
        directory: Resolved directory inside content_root

    Returns:
        Top-level nodes, directories first

    Raises:
        NotFoundError: If the directory does not exist
        IoFailure: If the directory cannot be read
    """
    builder = TreeBuilder()

    try:
        top_level = await asyncio.to_thread(scan_directory, directory)
    except OSError as e:
        raise translate_os_error(e) from e

    pending: deque[tuple[list[ScannedEntry], int | None]] = deque([(top_level, None)])
    while pending:
        scanned, parent_idx = pending.popleft()
        for entry in scanned:
            idx = builder.add(entry, relative_posix(content_root, entry.path), parent_idx)
            if not entry.is_dir:
                continue
            try:
                children = await asyncio.to_thread(scan_directory, entry.path)
            except OSError as e:
                logger.warning("Cannot read directory %s: %s", entry.path, e)
                continue
            pending.append((children, idx))

    return builder.build()
