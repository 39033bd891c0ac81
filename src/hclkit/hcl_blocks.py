"""
Block index: groups same-typed blocks by their label sequence.

`Blocks` maps a block type to a `BlockBody`. A `BlockBody` starts as a leaf
(a list of bodies for blocks with no further labels) and widens, exactly once
and never back, into a labeled node when a block with a further label is
appended. Each label level peels off the next label and descends one level.

    resource "security/group" "foobar" { ... }
    resource "security/group" "second" { ... }
    resource "instance" { ... }

indexes as::

    resource -> Labeled(leaf=[], children={
        "security/group": Labeled(leaf=[], children={
            "foobar": Leaf([body]),
            "second": Leaf([body]),
        }),
        "instance": Leaf([body]),
    })

Bodies and labels are stored as given; labels only need to hash and compare
by their text.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Any


class BlockBody:
    """One level of the block index.

    Attributes:
        leaf (list): Bodies of blocks whose label path ends at this level.
        children (dict | None): Child levels keyed by label, or None while the
            node is still a leaf.
    """

    def __init__(self, leaf: list[Any] | None = None, children: dict[Any, "BlockBody"] | None = None):
        self.leaf: list[Any] = leaf if leaf is not None else []
        self.children: dict[Any, BlockBody] | None = children

    @property
    def is_leaf(self) -> bool:
        return self.children is None

    @property
    def is_labeled(self) -> bool:
        return self.children is not None

    def append(self, labels: Sequence[Any], body: Any) -> None:
        """Stores `body` under the label path `labels`.

        An empty path stores the body at this level. A non-empty path on a
        leaf widens it to a labeled node; existing bodies stay in `leaf`.
        """
        if not labels:
            self.leaf.append(body)
            return
        if self.children is None:
            self.children = {}
        first, rest = labels[0], labels[1:]
        child = self.children.get(first)
        if child is None:
            child = BlockBody()
            self.children[first] = child
        child.append(rest, body)

    def get(self, labels: Sequence[Any] = ()) -> "BlockBody | None":
        """Walks `labels` down the index.

        Returns:
            BlockBody | None: The node reached, or None if a label has no
            matching child or a leaf is asked for a further label.
        """
        node = self
        for label in labels:
            if node.children is None:
                return None
            child = node.children.get(label)
            if child is None:
                return None
            node = child
        return node

    def bodies(self) -> list[Any]:
        """Bodies stored at exactly this level."""
        return list(self.leaf)

    def flat_iter(self) -> Iterator[tuple[tuple[Any, ...], Any]]:
        """Yields every stored body with the full label path that reaches it."""
        for body in self.leaf:
            yield (), body
        if self.children is not None:
            for label, child in self.children.items():
                for labels, body in child.flat_iter():
                    yield (label, *labels), body

    def len_blocks(self) -> int:
        count = len(self.leaf)
        if self.children is not None:
            count += sum(child.len_blocks() for child in self.children.values())
        return count

    def extend(self, other: "BlockBody") -> None:
        for labels, body in other.flat_iter():
            self.append(labels, body)

    def copy(self) -> "BlockBody":
        """Copies the index structure; bodies are shared."""
        children = None
        if self.children is not None:
            children = {label: child.copy() for label, child in self.children.items()}
        return BlockBody(list(self.leaf), children)

    def map_bodies(self, fn) -> "BlockBody":
        """Returns a copy of this node with `fn` applied to every body."""
        children = None
        if self.children is not None:
            children = {label: child.map_bodies(fn) for label, child in self.children.items()}
        return BlockBody([fn(body) for body in self.leaf], children)

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, BlockBody)
            and self.leaf == other.leaf
            and self.children == other.children
        )

    def __repr__(self) -> str:
        if self.children is None:
            return f"Leaf({self.leaf!r})"
        return f"Labeled(leaf={self.leaf!r}, children={self.children!r})"


class Blocks:
    """Maps block types to their `BlockBody` index.

    Attributes:
        types (dict[str, BlockBody]): Index per block type, in first-seen order.
    """

    def __init__(self, types: dict[str, BlockBody] | None = None):
        self.types: dict[str, BlockBody] = types if types is not None else {}

    @classmethod
    def new(cls, blocks: Iterable[Any]) -> "Blocks":
        """Indexes blocks (objects with `type`, `labels` and `body`) in order."""
        index = cls()
        for block in blocks:
            index.append(block)
        return index

    def append(self, block: Any) -> None:
        self.insert(block.type, block.labels, block.body)

    def insert(self, block_type: str, labels: Sequence[Any], body: Any) -> None:
        entry = self.types.get(block_type)
        if entry is None:
            entry = BlockBody()
            self.types[block_type] = entry
        entry.append(labels, body)

    def get(self, block_type: str, labels: Sequence[Any] = ()) -> BlockBody | None:
        """Looks up the index node for `block_type` and a label path."""
        entry = self.types.get(block_type)
        if entry is None:
            return None
        return entry.get(labels)

    def extend(self, other: "Blocks") -> None:
        for block_type, labels, body in other.flat_iter():
            self.insert(block_type, labels, body)

    def flat_iter(self) -> Iterator[tuple[str, tuple[Any, ...], Any]]:
        """Yields `(block_type, labels, body)` for every stored block."""
        for block_type, entry in self.types.items():
            for labels, body in entry.flat_iter():
                yield block_type, labels, body

    def len_blocks(self) -> int:
        return sum(entry.len_blocks() for entry in self.types.values())

    def copy(self) -> "Blocks":
        return Blocks({block_type: entry.copy() for block_type, entry in self.types.items()})

    def map_bodies(self, fn) -> "Blocks":
        return Blocks({block_type: entry.map_bodies(fn) for block_type, entry in self.types.items()})

    def items(self):
        return self.types.items()

    def __contains__(self, block_type: object) -> bool:
        return block_type in self.types

    def __getitem__(self, block_type: str) -> BlockBody:
        return self.types[block_type]

    def __iter__(self) -> Iterator[str]:
        return iter(self.types)

    def __len__(self) -> int:
        return len(self.types)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Blocks) and self.types == other.types

    def __repr__(self) -> str:
        return f"Blocks({self.types!r})"
