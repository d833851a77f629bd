"""
Explorer tree builder.

Turns the flat note list returned by the API into a forest of display
nodes. Everything here is pure: the input is never mutated and the same
input always yields an equal tree.

Sibling order: nodes with children (or directories) first, then by name
compared case-insensitively. Ties fall back to the exact name and then
the note id so the order never depends on input order.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol


class NoteLike(Protocol):
    id: int
    name: str
    parent_id: int | None


@dataclass
class TreeNode:
    """One entry of the explorer tree."""

    name: str
    id: int | None = None
    parent_id: int | None = None
    note: Any = None
    is_directory: bool = False
    children: list["TreeNode"] = field(default_factory=list)

    @property
    def is_parent(self) -> bool:
        return self.is_directory or bool(self.children)

    def walk(self) -> Iterable["TreeNode"]:
        """Depth-first, pre-order traversal of this node and its subtree."""
        yield self
        for child in self.children:
            yield from child.walk()


def sort_key(node: TreeNode) -> tuple[int, str, str, int]:
    return (
        0 if node.is_parent else 1,
        node.name.casefold(),
        node.name,
        node.id if node.id is not None else -1,
    )


def _sort_recursive(nodes: list[TreeNode]) -> None:
    nodes.sort(key=sort_key)
    for node in nodes:
        _sort_recursive(node.children)


def build_explorer_tree(notes: Sequence[NoteLike]) -> list[TreeNode]:
    """
    Build the display forest from notes linked by parent_id.

    A note whose parent is not in the list (an orphan) is shown as a
    root. So is every note of a parent_id cycle, which keeps each note
    reachable exactly once.
    """
    nodes = {
        note.id: TreeNode(
            name=note.name,
            id=note.id,
            parent_id=note.parent_id,
            note=note,
        )
        for note in notes
    }

    roots: list[TreeNode] = []
    for node in nodes.values():
        parent = nodes.get(node.parent_id) if node.parent_id is not None else None
        if parent is None or _closes_cycle(node, nodes):
            roots.append(node)
        else:
            parent.children.append(node)

    _sort_recursive(roots)
    return roots


def _closes_cycle(node: TreeNode, nodes: dict[int, TreeNode]) -> bool:
    seen: set[int] = set()
    current = node.parent_id
    while current is not None and current in nodes and current not in seen:
        if current == node.id:
            return True
        seen.add(current)
        current = nodes[current].parent_id
    return False


def build_path_tree(entries: Iterable[tuple[str, Any]]) -> list[TreeNode]:
    """
    Build the display forest from materialized paths.

    Each entry is (full_path, payload) where full_path looks like
    "/Work/Projects/Plan". Intermediate segments become directory nodes;
    the last segment is a leaf carrying the payload. A leaf whose path is
    later used as a prefix turns into a directory that keeps its payload.
    """
    root = TreeNode(name="", is_directory=True)
    by_path: dict[str, TreeNode] = {"": root}

    for full_path, payload in entries:
        segments = [segment for segment in full_path.split("/") if segment]
        if not segments:
            continue

        parent = root
        prefix = ""
        for segment in segments[:-1]:
            prefix = f"{prefix}/{segment}"
            node = by_path.get(prefix)
            if node is None:
                node = TreeNode(name=segment, is_directory=True)
                by_path[prefix] = node
                parent.children.append(node)
            node.is_directory = True
            parent = node

        leaf_path = f"{prefix}/{segments[-1]}"
        leaf = by_path.get(leaf_path)
        if leaf is None or leaf.note is not None:
            leaf = TreeNode(name=segments[-1])
            parent.children.append(leaf)
            by_path.setdefault(leaf_path, leaf)
        leaf.note = payload
        leaf.id = getattr(payload, "id", None)
        leaf.parent_id = getattr(payload, "parent_id", None)

    _sort_recursive(root.children)
    return root.children


def materialize_paths(notes: Sequence[NoteLike]) -> list[tuple[str, NoteLike]]:
    """
    Derive "/A/B/name" paths from parent ids.

    The walk upward stops at a root, at a parent missing from the list
    (orphans get a one-segment path) or on revisiting a note. Slashes
    inside names are not escaped.
    """
    by_id = {note.id: note for note in notes}
    paths: list[tuple[str, NoteLike]] = []

    for note in notes:
        names = [note.name]
        seen = {note.id}
        current = by_id.get(note.parent_id) if note.parent_id is not None else None
        while current is not None and current.id not in seen:
            names.append(current.name)
            seen.add(current.id)
            current = by_id.get(current.parent_id) if current.parent_id is not None else None
        paths.append(("/" + "/".join(reversed(names)), note))

    return paths
