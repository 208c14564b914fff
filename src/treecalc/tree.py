"""Indexed binary tree used as the backing store for expression trees.

Nodes live in an append-only table and refer to each other by integer index.
Child links own the structure; ``parent`` is a cached back-reference kept in
sync by :meth:`Tree.set_child` and only ever used to walk upward.

Fallible operations report failure through their return value (``False`` or
``None``) instead of raising, so callers decide how a missing index is handled.
"""
from __future__ import annotations

from enum import Enum
from typing import Generic, Iterator, List, Optional, Set, TypeVar
from typing_extensions import TypeAlias

T = TypeVar("T")

NodeIndex: TypeAlias = int


class ChildSide(Enum):
    LEFT = "left"
    RIGHT = "right"


class TreeNode(Generic[T]):
    """A single slot of the arena: payload plus neighbour indices."""
    __slots__ = ("value", "left", "right", "parent")

    def __init__(self, value: T):
        self.value = value
        self.left: Optional[NodeIndex] = None
        self.right: Optional[NodeIndex] = None
        self.parent: Optional[NodeIndex] = None

    def has_left(self) -> bool:
        return self.left is not None

    def has_right(self) -> bool:
        return self.right is not None

    def child(self, side: ChildSide) -> Optional[NodeIndex]:
        return self.left if side is ChildSide.LEFT else self.right

    def __repr__(self) -> str:
        return (f"TreeNode({self.value!r}, left={self.left}, "
                f"right={self.right}, parent={self.parent})")


class Tree(Generic[T]):
    """Append-only arena of optional node slots with an optional root."""

    def __init__(self) -> None:
        self._slots: List[Optional[TreeNode[T]]] = []
        self._root: Optional[NodeIndex] = None

    # ------------------------------------------------------------------
    # Root
    # ------------------------------------------------------------------

    @property
    def root(self) -> Optional[NodeIndex]:
        return self._root

    def set_root(self, root: Optional[NodeIndex]) -> None:
        self._root = root

    def has_root(self) -> bool:
        return self._root is not None and self.get(self._root) is not None

    def is_root(self, index: NodeIndex) -> bool:
        return self._root is not None and self._root == index

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def add(self, node: TreeNode[T]) -> NodeIndex:
        index = len(self._slots)
        self._slots.append(node)
        return index

    def add_with_children(self, node: TreeNode[T],
                          left: Optional[NodeIndex] = None,
                          right: Optional[NodeIndex] = None) -> NodeIndex:
        index = self.add(node)
        # a missing child simply leaves that side empty
        if left is not None:
            self.set_child(index, left, ChildSide.LEFT)
        if right is not None:
            self.set_child(index, right, ChildSide.RIGHT)
        return index

    def get(self, index: NodeIndex) -> Optional[TreeNode[T]]:
        if index < 0 or index >= len(self._slots):
            return None
        return self._slots[index]

    def remove(self, index: NodeIndex) -> Optional[TreeNode[T]]:
        node = self.get(index)
        if node is None:
            return None
        self._slots[index] = None
        return node

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.get(index) is not None

    def __len__(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)

    def child_count(self, index: NodeIndex) -> int:
        node = self.get(index)
        if node is None:
            return 0
        return int(node.has_left()) + int(node.has_right())

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def parent_of(self, index: NodeIndex) -> Optional[NodeIndex]:
        node = self.get(index)
        if node is None:
            return None
        return node.parent

    def set_child(self, parent_index: NodeIndex, child_index: Optional[NodeIndex],
                  side: ChildSide) -> bool:
        parent = self.get(parent_index)
        if parent is None:
            return False

        child = None
        if child_index is not None:
            child = self.get(child_index)
            if child is None:
                return False

        prev_index = parent.child(side)
        if prev_index is not None:
            prev = self.get(prev_index)
            if prev is not None:
                prev.parent = None

        if side is ChildSide.LEFT:
            parent.left = child_index
        else:
            parent.right = child_index

        if child is not None:
            child.parent = parent_index

        return True

    def replace_root_with(self, new_root_index: NodeIndex, side: ChildSide) -> bool:
        old_root = self._root
        if old_root is None or self.get(new_root_index) is None:
            return False

        if not self.set_child(new_root_index, old_root, side):
            return False

        self._root = new_root_index
        return True

    def insert_below(self, parent_index: NodeIndex, old_child_side: ChildSide,
                     new_index: NodeIndex, new_child_side: ChildSide) -> bool:
        """Put ``new_index`` between a parent and its child on ``old_child_side``.

        The displaced child (if any) hangs off ``new_child_side`` of the new node.
        """
        parent = self.get(parent_index)
        if parent is None or self.get(new_index) is None:
            return False

        old_child = parent.child(old_child_side)

        if not self.set_child(parent_index, new_index, old_child_side):
            return False
        return self.set_child(new_index, old_child, new_child_side)

    def insert_above(self, target_index: NodeIndex, new_index: NodeIndex,
                     new_side: ChildSide) -> bool:
        """Splice ``new_index`` in between ``target_index`` and its parent.

        The root has no parent and cannot be targeted; use
        :meth:`replace_root_with` for that case.
        """
        parent_index = self.parent_of(target_index)
        if parent_index is None:
            return False

        parent = self.get(parent_index)
        if parent is None:
            return False

        if parent.left == target_index:
            target_side = ChildSide.LEFT
        elif parent.right == target_index:
            target_side = ChildSide.RIGHT
        else:
            # stale parent link
            return False

        return self.insert_below(parent_index, target_side, new_index, new_side)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def postorder(self) -> PostOrderIter[T]:
        """Fresh post-order sequencer over this tree."""
        return PostOrderIter(self)


class PostOrderIter(Generic[T]):
    """Lazy post-order walk (left, right, node) without recursion.

    Single pass: once exhausted it stays exhausted. Create a new one (or call
    :meth:`Tree.postorder`) to walk the tree again.
    """

    def __init__(self, tree: Tree[T]):
        self.tree = tree
        self.stack: List[NodeIndex] = [tree.root] if tree.root is not None else []
        self.visited: Set[NodeIndex] = set()

    def __iter__(self) -> Iterator[NodeIndex]:
        return self

    def __next__(self) -> NodeIndex:
        while self.stack:
            index = self.stack.pop()
            node = self.tree.get(index)
            if node is None:
                continue

            self.stack.append(index)
            pushed = False

            # right goes on first so left comes off first
            for child in (node.right, node.left):
                if child is not None and child not in self.visited and child in self.tree:
                    self.stack.append(child)
                    pushed = True

            if not pushed:
                self.stack.pop()
                self.visited.add(index)
                return index

        raise StopIteration
