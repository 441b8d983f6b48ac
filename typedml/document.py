"""Parsed TML document: the root node sequence plus the hydration arena."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Iterator, Optional, Union, overload

from .nodes import AttributeNode, BlockNode, Node, TreeItem, Value, ValueNode

ArenaItem = Union[Node, Value]


@dataclass(eq=False)
class TMLDocument(Sequence):
    """Read-only sequence of root nodes.

    The arena owns a flat, pre-order list of every node (and of the inner value
    of every attribute and value node) once parents are hydrated; ``node_id`` and
    ``parent_id`` on tree items are indices into it.
    """

    nodes: list[Node] = field(default_factory=list)
    arena: list[ArenaItem] = field(default_factory=list)

    @overload
    def __getitem__(self, index: int) -> Node: ...

    @overload
    def __getitem__(self, index: slice) -> list[Node]: ...

    def __getitem__(self, index):
        return self.nodes[index]

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TMLDocument):
            return self.nodes == other.nodes
        if isinstance(other, list):
            return self.nodes == other
        return NotImplemented

    @property
    def is_hydrated(self) -> bool:
        return bool(self.arena) or not self.nodes

    def hydrate_parents(self) -> None:
        self.arena = []
        for node in self.nodes:
            self._register(node, None)

    def _register(self, item: TreeItem, parent_id: Optional[int]) -> None:
        item.node_id = len(self.arena)
        item.parent_id = parent_id
        self.arena.append(item)  # type: ignore[arg-type]
        if isinstance(item, BlockNode):
            for child in item.children:
                self._register(child, item.node_id)
        elif isinstance(item, (AttributeNode, ValueNode)):
            self._register(item.value, item.node_id)

    def parent_of(self, item: TreeItem) -> Optional[ArenaItem]:
        if item.parent_id is None or item.parent_id >= len(self.arena):
            return None
        return self.arena[item.parent_id]

    def ancestors_of(self, item: TreeItem) -> list[ArenaItem]:
        ancestors: list[ArenaItem] = []
        parent = self.parent_of(item)
        while parent is not None:
            ancestors.append(parent)
            parent = self.parent_of(parent)
        return ancestors

    def parent_block(self, item: TreeItem) -> Optional[BlockNode]:
        return next((parent for parent in self.ancestors_of(item) if isinstance(parent, BlockNode)), None)


__all__ = ["ArenaItem", "TMLDocument"]
