"""
treegp/tree.py - Flattened pre-order tree storage

A tree is stored as one contiguous list of node records in pre-order. Each
record keeps its value, its number of children and the size of the subtree
it roots, so children are found by index arithmetic: the first child of node
`i` sits at `i + 1` and every following sibling starts right after the
previous sibling's subtree.
"""
from typing import Any, Iterator, List, Sequence

from .errors import require


class NodeStorage:
    """One node record"""

    __slots__ = ('value', 'child_count', 'subtree_size')

    def __init__(self, value: Any, child_count: int = 0, subtree_size: int = 1):
        self.value = value
        # The number of children that this tree node has.
        self.child_count = child_count
        # The number of nodes contained in this sub-tree, including the current node.
        self.subtree_size = subtree_size

    def copy(self) -> 'NodeStorage':
        return NodeStorage(self.value, self.child_count, self.subtree_size)

    def __eq__(self, other):
        if not isinstance(other, NodeStorage):
            return NotImplemented
        return (self.value == other.value and self.child_count == other.child_count
                and self.subtree_size == other.subtree_size)

    def __repr__(self):
        return f"NodeStorage({self.value!r}, {self.child_count}, {self.subtree_size})"


class Node:
    """A read-only view of one node of a tree"""

    __slots__ = ('tree', 'node_id')

    def __init__(self, tree: 'Tree', node_id: int):
        self.tree = tree
        self.node_id = node_id

    @property
    def value(self) -> Any:
        return self.tree._nodes[self.node_id].value

    @property
    def child_count(self) -> int:
        return self.tree._nodes[self.node_id].child_count

    @property
    def subtree_size(self) -> int:
        return self.tree._nodes[self.node_id].subtree_size

    def __len__(self) -> int:
        return self.child_count

    def is_empty(self) -> bool:
        return self.child_count == 0

    def children(self) -> Iterator['Node']:
        """Iterate over the direct children of this node"""
        nodes = self.tree._nodes
        child_id = self.node_id + 1
        for _ in range(nodes[self.node_id].child_count):
            yield Node(self.tree, child_id)
            child_id += nodes[child_id].subtree_size

    def __iter__(self) -> Iterator['Node']:
        return self.children()

    def child_at(self, index: int) -> 'Node':
        require(0 <= index < self.child_count,
                f"child index {index} out of range for a node with {self.child_count} children")
        for i, child in enumerate(self.children()):
            if i == index:
                return child

    def __getitem__(self, index: int) -> 'Node':
        return self.child_at(index)

    def first(self) -> 'Node':
        """Return the first child"""
        return self.child_at(0)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return self.tree is other.tree and self.node_id == other.node_id

    def __repr__(self):
        return f"Node(id={self.node_id}, value={self.value!r}, children={self.child_count})"


class Tree:
    """A rooted ordered tree in flattened pre-order form.

    Trees are filled through a `Builder`; afterwards they are changed only by
    `replace`, which keeps every subtree size consistent.
    """

    def __init__(self, nodes: List[NodeStorage] = None):
        self._nodes = nodes if nodes is not None else []

    @classmethod
    def build(cls) -> 'Builder':
        """Shorthand for creating an empty tree together with its builder"""
        return Builder(cls())

    def node_count(self) -> int:
        """Return the number of nodes in a tree"""
        return len(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def copy(self) -> 'Tree':
        return Tree([node.copy() for node in self._nodes])

    def node(self, node_id: int) -> Node:
        require(0 <= node_id < len(self._nodes),
                f"node id {node_id} out of range for a tree of {len(self._nodes)} nodes")
        return Node(self, node_id)

    def __getitem__(self, node_id: int) -> Node:
        return self.node(node_id)

    def root(self) -> Node:
        require(len(self._nodes) > 0, "an empty tree has no root")
        return Node(self, 0)

    def first(self) -> Node:
        return self.root()

    def __iter__(self) -> Iterator[Node]:
        """Iterate over the top-level nodes (just the root for a complete tree)"""
        node_id = 0
        while node_id < len(self._nodes):
            yield Node(self, node_id)
            node_id += self._nodes[node_id].subtree_size

    def values(self) -> List[Any]:
        """Node values in pre-order"""
        return [node.value for node in self._nodes]

    def get_subtree(self, node_id: int) -> 'Tree':
        """Return a copy of the sub-tree rooted at the given node id"""
        require(0 <= node_id < len(self._nodes),
                f"node id {node_id} out of range for a tree of {len(self._nodes)} nodes")
        end = node_id + self._nodes[node_id].subtree_size
        return Tree([node.copy() for node in self._nodes[node_id:end]])

    def replace(self, node_id: int, subtree: 'Tree') -> None:
        """Replace the sub-tree rooted at the given node id by a copy of `subtree`"""
        require(0 <= node_id < len(self._nodes),
                f"node id {node_id} out of range for a tree of {len(self._nodes)} nodes")
        subtree._check_single_root()
        end = node_id + self._nodes[node_id].subtree_size
        self._nodes[node_id:end] = [node.copy() for node in subtree._nodes]
        self._recompute_subtree_sizes()
        require(self._nodes[0].subtree_size == len(self._nodes),
                "tree is not a single rooted tree after replacement")

    def _check_single_root(self) -> None:
        require(len(self._nodes) > 0, "expected a non-empty tree")
        require(self._nodes[0].subtree_size == len(self._nodes),
                f"expected a single rooted tree, but the root spans "
                f"{self._nodes[0].subtree_size} of {len(self._nodes)} nodes")

    def _recompute_subtree_sizes(self) -> None:
        # Walk the pre-order sequence backwards: every node's children are
        # already on the stack, in order, when the node itself is reached.
        sizes = []
        for node in reversed(self._nodes):
            require(len(sizes) >= node.child_count,
                    f"node {node.value!r} declares more children than follow it")
            size = 1
            for _ in range(node.child_count):
                size += sizes.pop()
            node.subtree_size = size
            sizes.append(size)

    def __eq__(self, other):
        if not isinstance(other, Tree):
            return NotImplemented
        return self._nodes == other._nodes

    # Trees change in place through replace().
    __hash__ = None

    def __repr__(self):
        return f"Tree({self.values()!r})"


class Builder:
    """Constructs a tree node by node in pre-order.

    `push` opens a node that will receive children, `add` appends a complete
    leaf, `pop` closes the most recently opened node.
    """

    def __init__(self, tree: Tree):
        self.tree = tree
        self._stack: List[int] = []

    @property
    def open_nodes(self) -> int:
        return len(self._stack)

    def is_complete(self) -> bool:
        return not self._stack and len(self.tree._nodes) > 0

    def _check_has_parent(self) -> None:
        # Only the very first node may start without an open parent.
        require(self._stack or not self.tree._nodes,
                "tree already has a complete root; push a parent node first")

    def _add_node(self, value: Any) -> int:
        self.tree._nodes.append(NodeStorage(value))
        return len(self.tree._nodes) - 1

    def push(self, value: Any) -> 'Builder':
        nodes = self.tree._nodes
        self._check_has_parent()
        if self._stack:
            nodes[self._stack[-1]].child_count += 1
        self._stack.append(self._add_node(value))
        return self

    def add(self, value: Any) -> 'Builder':
        nodes = self.tree._nodes
        self._check_has_parent()
        self._add_node(value)
        if self._stack:
            parent = nodes[self._stack[-1]]
            parent.child_count += 1
            parent.subtree_size += 1
        return self

    def pop(self) -> 'Builder':
        require(len(self._stack) > 0, "pop() called with no open node")
        nodes = self.tree._nodes
        size = nodes[self._stack.pop()].subtree_size
        # Propagate the sub-tree size up to the parent.
        if self._stack:
            nodes[self._stack[-1]].subtree_size += size
        return self

    def extend(self, subtree: Tree) -> 'Builder':
        """Append a complete tree as the next child of the open node"""
        subtree._check_single_root()
        self._check_has_parent()
        nodes = self.tree._nodes
        nodes.extend(node.copy() for node in subtree._nodes)
        if self._stack:
            parent = nodes[self._stack[-1]]
            parent.child_count += 1
            parent.subtree_size += len(subtree)
        return self


def tree_from_values(values: Sequence[Any], child_counts: Sequence[int]) -> Tree:
    """Build a tree from parallel pre-order value and child count sequences"""
    require(len(values) == len(child_counts), "values and child counts differ in length")
    tree = Tree([NodeStorage(value, count) for value, count in zip(values, child_counts)])
    if len(tree):
        tree._recompute_subtree_sizes()
        require(tree._nodes[0].subtree_size == len(tree),
                "child counts do not describe a single rooted tree")
    return tree
