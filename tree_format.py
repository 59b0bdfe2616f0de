"""
Текстовое представление дерева Хаффмана.

Лист записывается как `*<символ>:<вес>`, внутренний узел как
`<вес> <левое поддерево> <правое поддерево>` (обход в прямом порядке).
"""

from typing import List, Optional, TextIO, Tuple

from frequency import SYMBOL_COUNT, build_frequency_table
from huffman import HuffmanNode, build_tree


LEAF_MARK = '*'
SEPARATOR = ' '


class TreeFormat:
    @staticmethod
    def serialize(root: Optional[HuffmanNode]) -> str:
        if root is None:
            raise ValueError("Cannot serialize an empty tree")

        parts: List[str] = []

        def traverse(node: HuffmanNode):
            if node.is_leaf:
                parts.append(f"{LEAF_MARK}{node.symbol}:{node.weight}")
                return

            parts.append(str(node.weight))
            traverse(node.left)
            traverse(node.right)

        traverse(root)
        return SEPARATOR.join(parts)

    @staticmethod
    def write(root: HuffmanNode, out: TextIO):
        out.write(TreeFormat.serialize(root))

    @staticmethod
    def deserialize(text: str) -> HuffmanNode:
        tokens = text.split(SEPARATOR)
        if not text or any(not token for token in tokens):
            raise ValueError("Invalid tree text: empty token")

        state = {'order': 0, 'symbols': set()}
        root, pos = TreeFormat._read_node(tokens, 0, 0, state)

        if pos != len(tokens):
            raise ValueError(f"Invalid tree text: trailing data at token {pos}")

        return root

    @staticmethod
    def _read_node(tokens: List[str], pos: int, depth: int,
                   state: dict) -> Tuple[HuffmanNode, int]:
        if pos >= len(tokens):
            raise ValueError("Truncated tree text")

        if depth >= SYMBOL_COUNT:
            raise ValueError("Invalid tree text: tree too deep")

        token = tokens[pos]
        pos += 1

        if token.startswith(LEAF_MARK):
            symbol, weight = TreeFormat._parse_leaf(token)

            if symbol in state['symbols']:
                raise ValueError(f"Duplicate symbol: {symbol}")
            state['symbols'].add(symbol)

            node = HuffmanNode.leaf(symbol, weight, state['order'])
            state['order'] += 1
            return node, pos

        weight = TreeFormat._parse_int(token)

        left, pos = TreeFormat._read_node(tokens, pos, depth + 1, state)
        right, pos = TreeFormat._read_node(tokens, pos, depth + 1, state)

        node = HuffmanNode.merge(left, right, state['order'])
        state['order'] += 1

        if node.weight != weight:
            raise ValueError(f"Weight mismatch: {weight} != "
                             f"{left.weight} + {right.weight}")

        return node, pos

    @staticmethod
    def _parse_leaf(token: str) -> Tuple[int, int]:
        body = token[len(LEAF_MARK):]
        symbol_text, colon, weight_text = body.partition(':')
        if not colon:
            raise ValueError(f"Invalid leaf token: {token!r}")

        symbol = TreeFormat._parse_int(symbol_text)
        weight = TreeFormat._parse_int(weight_text)

        if symbol >= SYMBOL_COUNT:
            raise ValueError(f"Symbol out of range: {symbol}")
        if weight == 0:
            raise ValueError(f"Leaf weight must be positive: {token!r}")

        return symbol, weight

    @staticmethod
    def _parse_int(text: str) -> int:
        if not text.isdigit() or not text.isascii():
            raise ValueError(f"Invalid number: {text!r}")
        return int(text)


def dump_tree(data: bytes) -> str:
    root = build_tree(build_frequency_table(data))

    if root is None:
        return ''

    return TreeFormat.serialize(root)
