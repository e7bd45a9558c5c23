"""
Core data models for the folder comparison engine.

This module defines the data structures shared across the engine:
- Directory tree snapshot nodes (files and directories)
- Diff-annotated tree nodes
- Line-level diff runs and file diff results
- Recent folder records

All models are designed to be:
- UI-agnostic (can be used with any frontend)
- Serializable (``to_dict`` produces JSON-friendly data)
- Immutable where practical
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Optional, Union


# =============================================================================
# Enumerations
# =============================================================================

class DiffTag(Enum):
    """Classification of a node or line run relative to its counterpart."""
    ADDED = "added"          # Exists only on the left/new side
    REMOVED = "removed"      # Exists only on the right/old side
    MODIFIED = "modified"    # Exists on both sides but differs
    UNCHANGED = "unchanged"  # Exists on both sides, identical


# =============================================================================
# Tree Snapshot Models
# =============================================================================

@dataclass(frozen=True)
class FileNode:
    """A regular file in a directory tree snapshot."""
    path: Path
    name: str
    size: Optional[int] = None
    modified_time: Optional[datetime] = None

    @property
    def is_directory(self) -> bool:
        return False

    def iter_all(self) -> Iterator[Node]:
        yield self

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-friendly node shape."""
        return {
            'path': str(self.path),
            'name': self.name,
            'type': 'file',
            'size': self.size,
            'modifiedTime': self.modified_time.isoformat() if self.modified_time else None,
        }


@dataclass(frozen=True)
class DirNode:
    """
    A directory in a directory tree snapshot.

    Children keep filesystem listing order; no sorting is applied.
    """
    path: Path
    name: str
    children: tuple[Node, ...] = ()

    @property
    def is_directory(self) -> bool:
        return True

    def iter_all(self) -> Iterator[Node]:
        """Iterate over this node and all descendants, depth-first."""
        yield self
        for child in self.children:
            yield from child.iter_all()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-friendly node shape."""
        return {
            'path': str(self.path),
            'name': self.name,
            'type': 'dir',
            'children': [child.to_dict() for child in self.children],
        }


Node = Union[FileNode, DirNode]


@dataclass
class DiffNode:
    """
    A node in a diff-annotated tree.

    Wraps a snapshot node with its diff tag. The tree is rooted at the
    left side; ``synthesized`` nodes were copied from the right side to
    represent entries that only exist there.
    """
    node: Node
    tag: DiffTag
    children: list['DiffNode'] = field(default_factory=list)
    synthesized: bool = False

    @property
    def path(self) -> Path:
        return self.node.path

    @property
    def name(self) -> str:
        return self.node.name

    @property
    def is_directory(self) -> bool:
        return self.node.is_directory

    @property
    def has_differences(self) -> bool:
        return self.tag != DiffTag.UNCHANGED

    def iter_all(self) -> Iterator['DiffNode']:
        """Iterate over this node and all descendants."""
        yield self
        for child in self.children:
            yield from child.iter_all()

    def iter_changed(self) -> Iterator['DiffNode']:
        """Iterate over nodes with differences."""
        for node in self.iter_all():
            if node.tag != DiffTag.UNCHANGED:
                yield node

    def find(self, name: str) -> Optional['DiffNode']:
        """Get a direct child by name (first match)."""
        for child in self.children:
            if child.name == name:
                return child
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON-friendly node shape with ``diffType``."""
        data = self.node.to_dict()
        data['diffType'] = self.tag.value
        if self.is_directory:
            data['children'] = [child.to_dict() for child in self.children]
        return data


# =============================================================================
# Line Diff Models
# =============================================================================

@dataclass(frozen=True)
class LineChange:
    """
    A run of one or more lines sharing the same diff tag.

    ``value`` keeps each line's newline so runs concatenate back into
    the original content exactly.
    """
    value: str
    tag: DiffTag

    def __post_init__(self) -> None:
        if self.tag == DiffTag.MODIFIED:
            raise ValueError("Line runs are added, removed or unchanged")

    @property
    def line_count(self) -> int:
        """Number of lines in this run."""
        count = self.value.count('\n')
        if self.value and not self.value.endswith('\n'):
            count += 1
        return count

    def to_dict(self) -> dict[str, str]:
        return {'value': self.value, 'type': self.tag.value}


@dataclass
class DiffStatistics:
    """Line counts for a file diff."""
    added_lines: int = 0
    removed_lines: int = 0
    unchanged_lines: int = 0

    @property
    def total_changes(self) -> int:
        return self.added_lines + self.removed_lines

    def __str__(self) -> str:
        return f"+{self.added_lines} -{self.removed_lines} ={self.unchanged_lines}"


@dataclass
class FileDiff:
    """
    Result of a line-level diff between two files.

    Binary files are reported with ``is_binary`` set and no changes.
    """
    old_content: str
    new_content: str
    changes: list[LineChange] = field(default_factory=list)
    is_binary: bool = False
    encoding_left: str = 'utf-8'
    encoding_right: str = 'utf-8'

    @property
    def is_identical(self) -> bool:
        return not self.is_binary and all(
            change.tag == DiffTag.UNCHANGED for change in self.changes
        )

    @property
    def statistics(self) -> DiffStatistics:
        stats = DiffStatistics()
        for change in self.changes:
            if change.tag == DiffTag.ADDED:
                stats.added_lines += change.line_count
            elif change.tag == DiffTag.REMOVED:
                stats.removed_lines += change.line_count
            else:
                stats.unchanged_lines += change.line_count
        return stats

    def to_dict(self) -> dict[str, Any]:
        return {
            'oldContent': self.old_content,
            'newContent': self.new_content,
            'changes': [change.to_dict() for change in self.changes],
            'isBinary': self.is_binary,
        }


# =============================================================================
# Session/State Models
# =============================================================================

@dataclass
class RecentFolder:
    """A recently opened folder, persisted by the host application."""
    path: str
    name: str
    last_used: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'path': self.path,
            'name': self.name,
            'last_used': self.last_used.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'RecentFolder':
        """Create from dictionary."""
        return cls(
            path=data['path'],
            name=data.get('name') or Path(data['path']).name,
            last_used=datetime.fromisoformat(data['last_used']),
        )
