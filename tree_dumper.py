"""
Главный класс: файл -> таблица частот -> дерево -> текст.
"""

import sys
from typing import List, Optional, TextIO, Tuple

from frequency import ByteSource, FrequencyCounter, CHUNK_SIZE
from huffman import HuffmanTree
from tree_format import TreeFormat


class TreeDumper:
    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def count_file(self, file_path: str) -> List[int]:
        counter = FrequencyCounter()

        with ByteSource.open(file_path, self.chunk_size) as source:
            return counter.consume(source)

    def load(self, file_path: str) -> Tuple[List[int], HuffmanTree]:
        table = self.count_file(file_path)

        tree = HuffmanTree()
        tree.build(table)
        return table, tree

    @staticmethod
    def format_tree(tree: HuffmanTree) -> str:
        if tree.root is None:
            return ''

        return TreeFormat.serialize(tree.root)

    def dump_file(self, file_path: str) -> str:
        _, tree = self.load(file_path)
        return self.format_tree(tree)

    def print_tree(self, file_path: str, out: Optional[TextIO] = None,
                   report_out: Optional[TextIO] = None):
        # one pass over the file; nothing is written until it has been read
        table, tree = self.load(file_path)
        text = self.format_tree(tree)

        if report_out is not None:
            self.write_report(table, tree, report_out)

        out = out if out is not None else sys.stdout
        out.write(text)
        out.flush()

    def report(self, file_path: str, out: Optional[TextIO] = None):
        table, tree = self.load(file_path)
        self.write_report(table, tree, out if out is not None else sys.stderr)

    @staticmethod
    def write_report(table: List[int], tree: HuffmanTree, out: TextIO):
        if tree.root is None:
            print("Empty input", file=out)
            return

        total = tree.weight

        print(f"{'Symbol':>6} {'Char':>6} {'Count':>12} {'Share':>8}", file=out)
        print("-" * 35, file=out)

        for symbol, count in enumerate(table):
            if count == 0:
                continue

            char = chr(symbol) if 32 <= symbol < 127 else '.'
            share = count / total * 100
            print(f"{symbol:>6} {char:>6} {count:>12} {share:>7.2f}%", file=out)

        print("-" * 35, file=out)
        print(f"Total: {total} bytes, {tree.leaf_count} symbols, "
              f"depth {tree.depth}, root weight {tree.root.weight}", file=out)
