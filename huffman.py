"""
Построение дерева Хаффмана по таблице частот байтов.

Порядок узлов полностью детерминирован: сначала вес, затем лист раньше
внутреннего узла, затем код символа (для листьев) или порядок создания
(для внутренних узлов).
"""

import heapq
from typing import Iterator, List, Optional, Sequence

from frequency import SYMBOL_COUNT


class NodeKind:
    LEAF = 0
    INNER = 1


class HuffmanNode:
    def __init__(self, kind: int, weight: int, order: int,
                 symbol: Optional[int] = None,
                 left: Optional['HuffmanNode'] = None,
                 right: Optional['HuffmanNode'] = None):
        self.kind = kind
        self.weight = weight
        self.order = order
        self.symbol = symbol
        self.left = left
        self.right = right

    @staticmethod
    def leaf(symbol: int, weight: int, order: int) -> 'HuffmanNode':
        return HuffmanNode(NodeKind.LEAF, weight, order, symbol=symbol)

    @staticmethod
    def merge(left: 'HuffmanNode', right: 'HuffmanNode', order: int) -> 'HuffmanNode':
        return HuffmanNode(NodeKind.INNER, left.weight + right.weight, order,
                           left=left, right=right)

    @property
    def is_leaf(self) -> bool:
        return self.kind == NodeKind.LEAF

    def __lt__(self, other: 'HuffmanNode') -> bool:
        return compare_nodes(self, other) < 0

    def __repr__(self):
        if self.is_leaf:
            return f"LEAF({self.symbol}, weight={self.weight}, order={self.order})"
        else:
            return f"INNER(weight={self.weight}, order={self.order})"


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def compare_nodes(a: HuffmanNode, b: HuffmanNode) -> int:
    if a.weight != b.weight:
        return _sign(a.weight - b.weight)

    if a.kind != b.kind:
        return -1 if a.kind == NodeKind.LEAF else 1

    if a.kind == NodeKind.LEAF:
        return _sign(a.symbol - b.symbol)

    return _sign(a.order - b.order)


class HuffmanTree:
    def __init__(self):
        self.root: Optional[HuffmanNode] = None
        self._next_order = 0

    def _take_order(self) -> int:
        order = self._next_order
        self._next_order += 1
        return order

    def build(self, frequencies: Sequence[int]) -> Optional[HuffmanNode]:
        if len(frequencies) != SYMBOL_COUNT:
            raise ValueError(f"Frequency table must have {SYMBOL_COUNT} entries, "
                             f"got {len(frequencies)}")

        self.root = None
        self._next_order = 0

        nodes: List[HuffmanNode] = []
        for symbol, count in enumerate(frequencies):
            if count < 0:
                raise ValueError(f"Negative count for symbol {symbol}: {count}")
            if count > 0:
                nodes.append(HuffmanNode.leaf(symbol, count, self._take_order()))

        if not nodes:
            return None

        if len(nodes) == 1:
            self.root = nodes[0]
            return self.root

        heapq.heapify(nodes)

        while len(nodes) > 1:
            left = heapq.heappop(nodes)
            right = heapq.heappop(nodes)

            parent = HuffmanNode.merge(left, right, self._take_order())
            heapq.heappush(nodes, parent)

        self.root = nodes[0]
        return self.root

    def leaves(self) -> Iterator[HuffmanNode]:
        if self.root is None:
            return

        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node
            else:
                stack.append(node.right)
                stack.append(node.left)

    @property
    def leaf_count(self) -> int:
        return sum(1 for _ in self.leaves())

    @property
    def weight(self) -> int:
        return self.root.weight if self.root is not None else 0

    @property
    def depth(self) -> int:
        if self.root is None:
            return 0

        deepest = 0
        stack = [(self.root, 0)]
        while stack:
            node, level = stack.pop()
            if node.is_leaf:
                deepest = max(deepest, level)
            else:
                stack.append((node.left, level + 1))
                stack.append((node.right, level + 1))

        return deepest


def build_tree(frequencies: Sequence[int]) -> Optional[HuffmanNode]:
    return HuffmanTree().build(frequencies)
