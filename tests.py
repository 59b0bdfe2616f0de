import unittest
import io
import sys
import random
from unittest import mock

from frequency import (ByteSource, FrequencyCounter, StreamReadError,
                       build_frequency_table, SYMBOL_COUNT)
from huffman import HuffmanNode, HuffmanTree, NodeKind, build_tree, compare_nodes
from tree_format import TreeFormat, dump_tree


class FailingStream(io.RawIOBase):
    def __init__(self, data: bytes, fail_after: int):
        self.data = data
        self.fail_after = fail_after
        self.pos = 0

    def readable(self):
        return True

    def read(self, size=-1):
        if self.pos >= self.fail_after:
            raise OSError("device went away")
        chunk = self.data[self.pos:self.pos + min(size, self.fail_after - self.pos)]
        self.pos += len(chunk)
        return chunk


class TestFrequencyCounter(unittest.TestCase):
    def test_counts_sum_to_length(self):
        data = b"The quick brown fox jumps over the lazy dog"
        table = build_frequency_table(data)
        self.assertEqual(len(table), SYMBOL_COUNT)
        self.assertEqual(sum(table), len(data))
        self.assertEqual(table[ord('o')], 4)
        self.assertEqual(table[ord('z')], 1)
        self.assertEqual(table[ord('Q')], 0)

    def test_empty_data(self):
        table = build_frequency_table(b"")
        self.assertEqual(table, [0] * SYMBOL_COUNT)

    def test_iterable_of_ints(self):
        table = build_frequency_table([0, 0, 255])
        self.assertEqual(table[0], 2)
        self.assertEqual(table[255], 1)
        self.assertEqual(sum(table), 3)

    def test_rejects_values_outside_byte_range(self):
        with self.assertRaises(ValueError):
            build_frequency_table([1, 256])
        with self.assertRaises(ValueError):
            build_frequency_table([-1])

    def test_streaming_in_small_chunks(self):
        random.seed(7)
        data = bytes(random.randint(0, 255) for _ in range(5000))
        counter = FrequencyCounter()
        counter.consume(ByteSource(io.BytesIO(data), chunk_size=3))
        self.assertEqual(counter.table, build_frequency_table(data))
        self.assertEqual(counter.total, len(data))

    def test_table_is_a_copy(self):
        counter = FrequencyCounter()
        counter.update(b"AB")
        table = counter.table
        table[65] = 100
        self.assertEqual(counter.table[65], 1)

    def test_read_failure_is_distinct(self):
        stream = FailingStream(b"A" * 100, fail_after=40)
        counter = FrequencyCounter()
        with self.assertRaises(StreamReadError):
            counter.consume(ByteSource(stream, chunk_size=16))

    def test_read_failure_is_an_os_error(self):
        self.assertTrue(issubclass(StreamReadError, OSError))


class TestByteSource(unittest.TestCase):
    def test_read_byte_until_end(self):
        source = ByteSource(io.BytesIO(b"\x00\xffA"), chunk_size=2)
        values = []
        while True:
            value = source.read_byte()
            if value is None:
                break
            values.append(value)
        self.assertEqual(values, [0, 255, 65])
        self.assertIsNone(source.read_byte())

    def test_iteration_yields_byte_values(self):
        source = ByteSource(io.BytesIO(b"hello"), chunk_size=2)
        self.assertEqual(list(source), list(b"hello"))

    def test_chunks_after_partial_read(self):
        source = ByteSource(io.BytesIO(b"abcdef"), chunk_size=4)
        self.assertEqual(source.read_byte(), ord('a'))
        self.assertEqual(b"".join(source.chunks()), b"bcdef")

    def test_invalid_chunk_size(self):
        with self.assertRaises(ValueError):
            ByteSource(io.BytesIO(b""), chunk_size=0)

    def test_open_closes_file_on_invalid_chunk_size(self):
        with mock.patch("frequency.open", mock.mock_open(), create=True) as opened:
            with self.assertRaises(ValueError):
                ByteSource.open("input.bin", chunk_size=0)

        opened.assert_called_once_with("input.bin", "rb")
        opened.return_value.close.assert_called_once_with()


class TestNodeOrder(unittest.TestCase):
    def test_lower_weight_first(self):
        light = HuffmanNode.leaf(200, 1, 0)
        heavy = HuffmanNode.leaf(10, 2, 1)
        self.assertEqual(compare_nodes(light, heavy), -1)
        self.assertEqual(compare_nodes(heavy, light), 1)

    def test_leaf_before_inner_on_equal_weight(self):
        inner = HuffmanNode.merge(HuffmanNode.leaf(1, 1, 0), HuffmanNode.leaf(2, 1, 1), 2)
        leaf = HuffmanNode.leaf(3, 2, 3)
        self.assertEqual(inner.kind, NodeKind.INNER)
        self.assertEqual(inner.weight, 2)
        self.assertEqual(compare_nodes(leaf, inner), -1)
        self.assertEqual(compare_nodes(inner, leaf), 1)

    def test_leaves_by_symbol(self):
        a = HuffmanNode.leaf(65, 5, 9)
        b = HuffmanNode.leaf(66, 5, 0)
        self.assertEqual(compare_nodes(a, b), -1)
        self.assertTrue(a < b)
        self.assertFalse(b < a)

    def test_inner_nodes_by_creation_order(self):
        first = HuffmanNode.merge(HuffmanNode.leaf(1, 1, 0), HuffmanNode.leaf(2, 1, 1), 4)
        second = HuffmanNode.merge(HuffmanNode.leaf(3, 1, 2), HuffmanNode.leaf(4, 1, 3), 5)
        self.assertEqual(compare_nodes(first, second), -1)
        self.assertEqual(compare_nodes(second, first), 1)
        self.assertEqual(compare_nodes(first, first), 0)


class TestTreeBuilder(unittest.TestCase):
    def dump(self, data):
        return dump_tree(bytes(data))

    def test_single_symbol(self):
        self.assertEqual(self.dump([65] * 6), "*65:6")

    def test_single_symbol_is_bare_leaf(self):
        table = [0] * SYMBOL_COUNT
        table[42] = 10 ** 9
        tree = HuffmanTree()
        root = tree.build(table)
        self.assertTrue(root.is_leaf)
        self.assertIsNone(root.left)
        self.assertIsNone(root.right)
        self.assertEqual(tree.depth, 0)
        self.assertEqual(TreeFormat.serialize(root), "*42:1000000000")

    def test_lighter_leaf_left(self):
        self.assertEqual(self.dump([66, 66, 66, 65]), "4 *65:1 *66:3")

    def test_equal_weight_lower_symbol_left(self):
        self.assertEqual(self.dump([66, 65]), "2 *65:1 *66:1")

    def test_equal_weight_inner_nodes_by_creation_order(self):
        self.assertEqual(self.dump([65, 66, 67, 68]),
                         "4 2 *65:1 *66:1 2 *67:1 *68:1")

    def test_doubled_weights(self):
        self.assertEqual(self.dump([65, 65, 66, 66, 67, 67, 68, 68]),
                         "8 4 *65:2 *66:2 4 *67:2 *68:2")

    def test_leaf_before_inner_of_same_weight(self):
        self.assertEqual(self.dump([65, 66, 67, 67]), "4 *67:2 2 *65:1 *66:1")

    def test_complex_tie_breaking(self):
        self.assertEqual(self.dump([65, 66, 67, 68, 68, 68]),
                         "6 *68:3 3 *67:1 2 *65:1 *66:1")

    def test_weight_beats_symbol(self):
        self.assertEqual(self.dump([0, 0, 255]), "3 *255:1 *0:2")

    def test_empty_input(self):
        self.assertIsNone(build_tree([0] * SYMBOL_COUNT))
        self.assertEqual(self.dump([]), "")
        tree = HuffmanTree()
        tree.build([0] * SYMBOL_COUNT)
        self.assertEqual(tree.leaf_count, 0)
        self.assertEqual(tree.weight, 0)
        self.assertEqual(tree.depth, 0)

    def test_leaf_count_and_root_weight(self):
        random.seed(42)
        data = bytes(random.randint(0, 40) for _ in range(3000))
        table = build_frequency_table(data)
        tree = HuffmanTree()
        tree.build(table)
        self.assertEqual(tree.leaf_count, sum(1 for count in table if count))
        self.assertEqual(tree.weight, len(data))
        self.assertEqual(sorted(leaf.symbol for leaf in tree.leaves()),
                         [s for s, count in enumerate(table) if count])

    def test_all_byte_values(self):
        table = build_frequency_table(bytes(range(256)) * 3)
        tree = HuffmanTree()
        root = tree.build(table)
        self.assertEqual(tree.leaf_count, 256)
        self.assertEqual(root.weight, 768)
        self.assertEqual(tree.depth, 8)

    def test_inner_weights_are_child_sums(self):
        random.seed(3)
        data = bytes(random.randint(0, 255) for _ in range(2000))
        root = build_tree(build_frequency_table(data))
        stack = [root]
        while stack:
            node = stack.pop()
            if not node.is_leaf:
                self.assertEqual(node.weight, node.left.weight + node.right.weight)
                self.assertFalse(node.right < node.left)
                stack.extend([node.left, node.right])

    def test_creation_orders(self):
        table = [0] * SYMBOL_COUNT
        for symbol in (65, 66, 67, 68):
            table[symbol] = 1
        root = build_tree(table)
        self.assertEqual(root.order, 6)
        self.assertEqual([root.left.order, root.right.order], [4, 5])
        self.assertEqual(root.left.left.order, 0)
        self.assertEqual(root.right.right.order, 3)

    def test_deterministic(self):
        random.seed(11)
        data = bytes(random.randint(0, 9) for _ in range(1000))
        self.assertEqual(dump_tree(data), dump_tree(data))

    def test_rejects_malformed_table(self):
        with self.assertRaises(ValueError):
            build_tree([1, 2, 3])
        table = [0] * SYMBOL_COUNT
        table[5] = -1
        with self.assertRaises(ValueError):
            build_tree(table)


class TestTreeFormat(unittest.TestCase):
    def test_serialize_rejects_empty_tree(self):
        with self.assertRaises(ValueError):
            TreeFormat.serialize(None)

    def test_write_has_no_newline(self):
        out = io.StringIO()
        TreeFormat.write(build_tree(build_frequency_table(b"BA")), out)
        self.assertEqual(out.getvalue(), "2 *65:1 *66:1")

    def test_deserialize_round_trip(self):
        text = dump_tree(b"abracadabra, alakazam")
        root = TreeFormat.deserialize(text)
        self.assertEqual(TreeFormat.serialize(root), text)
        self.assertEqual(root.weight, 21)

    def test_deserialize_bare_leaf(self):
        root = TreeFormat.deserialize("*65:6")
        self.assertTrue(root.is_leaf)
        self.assertEqual((root.symbol, root.weight), (65, 6))

    def test_deserialize_errors(self):
        bad = [
            "",
            "2 *65:1",
            "2 *65:1 *66:1 *67:1",
            "3 *65:1 *66:1",
            "*256:1",
            "*65:0",
            "*65",
            "x *65:1 *66:1",
            "2  *65:1 *66:1",
            "2 *65:1 *65:1",
            "2 *65:1 *66:1 ",
        ]
        for text in bad:
            with self.subTest(text=text):
                with self.assertRaises(ValueError):
                    TreeFormat.deserialize(text)

    def test_deserialize_rejects_deep_nesting(self):
        with self.assertRaises(ValueError):
            TreeFormat.deserialize(" ".join(["1"] * 5000))


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestFrequencyCounter))
    suite.addTests(loader.loadTestsFromTestCase(TestByteSource))
    suite.addTests(loader.loadTestsFromTestCase(TestNodeOrder))
    suite.addTests(loader.loadTestsFromTestCase(TestTreeBuilder))
    suite.addTests(loader.loadTestsFromTestCase(TestTreeFormat))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
