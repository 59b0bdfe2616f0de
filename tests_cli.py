import unittest
import io
import os
import sys
import shutil
import tempfile
from contextlib import redirect_stdout, redirect_stderr
from unittest import mock

from frequency import ByteSource
from main import main, stats_main, ARGUMENT_ERROR, FILE_ERROR
from tree_dumper import TreeDumper


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


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def create_file(self, data: bytes, name: str = "input.bin") -> str:
        path = os.path.join(self.temp_dir, name)
        with open(path, 'wb') as f:
            f.write(data)
        return path

    def run_main(self, argv):
        out = io.StringIO()
        err = io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(argv)
        return code, out.getvalue(), err.getvalue()


class TestTreeDumper(CliTestCase):
    def setUp(self):
        super().setUp()
        self.dumper = TreeDumper(chunk_size=7)

    def test_count_file(self):
        path = self.create_file(b"Hello World! " * 100)
        table = self.dumper.count_file(path)
        self.assertEqual(sum(table), 1300)
        self.assertEqual(table[ord('l')], 300)

    def test_dump_file(self):
        path = self.create_file(bytes([65, 66, 67, 68]))
        self.assertEqual(self.dumper.dump_file(path), "4 2 *65:1 *66:1 2 *67:1 *68:1")

    def test_dump_empty_file(self):
        path = self.create_file(b"")
        self.assertEqual(self.dumper.dump_file(path), "")

    def test_print_tree(self):
        path = self.create_file(bytes([0, 0, 255]))
        out = io.StringIO()
        self.dumper.print_tree(path, out)
        self.assertEqual(out.getvalue(), "3 *255:1 *0:2")

    def test_missing_file(self):
        with self.assertRaises(OSError):
            self.dumper.dump_file(os.path.join(self.temp_dir, "missing.bin"))

    def test_report(self):
        path = self.create_file(b"AAB")
        out = io.StringIO()
        self.dumper.report(path, out)
        lines = out.getvalue().splitlines()
        self.assertIn("Symbol", lines[0])
        self.assertTrue(lines[2].split()[:3] == ['65', 'A', '2'])
        self.assertTrue(lines[3].split()[:3] == ['66', 'B', '1'])
        self.assertEqual(lines[-1], "Total: 3 bytes, 2 symbols, depth 1, root weight 3")

    def test_report_empty(self):
        path = self.create_file(b"")
        out = io.StringIO()
        self.dumper.report(path, out)
        self.assertEqual(out.getvalue(), "Empty input\n")


class TestMain(CliTestCase):
    def test_no_arguments(self):
        code, out, _ = self.run_main([])
        self.assertEqual(out, ARGUMENT_ERROR)
        self.assertEqual(code, 1)

    def test_too_many_arguments(self):
        code, out, _ = self.run_main(["a.in", "b.in"])
        self.assertEqual(out, "Argument Error")
        self.assertEqual(code, 1)

    def test_option_with_file_is_two_arguments(self):
        path = self.create_file(b"AB")
        code, out, _ = self.run_main([path, "--stats"])
        self.assertEqual(out, ARGUMENT_ERROR)
        self.assertEqual(code, 1)

    def test_file_does_not_exist(self):
        code, out, err = self.run_main([os.path.join(self.temp_dir, "nope.bin")])
        self.assertEqual(out, "File Error")
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("Error:"))

    def test_directory_is_file_error(self):
        code, out, _ = self.run_main([self.temp_dir])
        self.assertEqual(out, FILE_ERROR)
        self.assertEqual(code, 1)

    def test_empty_file(self):
        path = self.create_file(b"")
        code, out, _ = self.run_main([path])
        self.assertEqual(out, "")
        self.assertEqual(code, 0)

    def test_single_character(self):
        path = self.create_file(bytes([65] * 6))
        code, out, _ = self.run_main([path])
        self.assertEqual(out, "*65:6")
        self.assertEqual(code, 0)

    def test_two_characters(self):
        path = self.create_file(bytes([66, 66, 66, 65]))
        _, out, _ = self.run_main([path])
        self.assertEqual(out, "4 *65:1 *66:3")

    def test_binary_bytes(self):
        path = self.create_file(bytes([0, 0, 255]))
        _, out, _ = self.run_main([path])
        self.assertEqual(out, "3 *255:1 *0:2")

    def test_argument_starting_with_dash_is_a_path(self):
        self.create_file(b"BA", name="-data.bin")
        cwd = os.getcwd()
        os.chdir(self.temp_dir)
        try:
            code, out, _ = self.run_main(["-data.bin"])
            self.assertEqual(out, "2 *65:1 *66:1")
            self.assertEqual(code, 0)

            code, out, _ = self.run_main(["-h"])
            self.assertEqual(out, FILE_ERROR)
            self.assertEqual(code, 1)

            code, out, _ = self.run_main(["--"])
            self.assertEqual(out, FILE_ERROR)
            self.assertEqual(code, 1)
        finally:
            os.chdir(cwd)

    def test_null_byte_in_path(self):
        code, out, _ = self.run_main(["a\0b"])
        self.assertEqual(out, FILE_ERROR)
        self.assertEqual(code, 1)

    def test_read_failure_mid_stream(self):
        path = self.create_file(b"AB" * 100)
        source = ByteSource(FailingStream(b"AB" * 100, fail_after=50), chunk_size=16)

        with mock.patch.object(ByteSource, 'open', return_value=source):
            code, out, err = self.run_main([path])

        self.assertEqual(out, FILE_ERROR)
        self.assertEqual(code, 1)
        self.assertIn("device went away", err)

    def test_large_single_symbol_file(self):
        path = self.create_file(bytes([42]) * (5 * 1024 * 1024))
        _, out, _ = self.run_main([path])
        self.assertEqual(out, "*42:5242880")


class TestStatsMain(CliTestCase):
    def run_stats(self, argv):
        out = io.StringIO()
        err = io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = stats_main(argv)
        return code, out.getvalue(), err.getvalue()

    def test_stats_go_to_stderr(self):
        path = self.create_file(bytes([66, 65]))
        code, out, err = self.run_stats([path])
        self.assertEqual(out, "2 *65:1 *66:1")
        self.assertIn("Total: 2 bytes, 2 symbols", err)
        self.assertEqual(code, 0)

    def test_file_is_read_once(self):
        path = self.create_file(b"AAB")
        with mock.patch.object(ByteSource, 'open', wraps=ByteSource.open) as opened:
            code, out, err = self.run_stats([path])

        self.assertEqual(opened.call_count, 1)
        self.assertEqual(out, "3 *66:1 *65:2")
        self.assertIn("Total: 3 bytes", err)
        self.assertEqual(code, 0)

    def test_missing_file(self):
        code, out, _ = self.run_stats([os.path.join(self.temp_dir, "nope.bin")])
        self.assertEqual(out, FILE_ERROR)
        self.assertEqual(code, 1)

    def test_usage_error(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                stats_main([])


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    suite.addTests(loader.loadTestsFromTestCase(TestTreeDumper))
    suite.addTests(loader.loadTestsFromTestCase(TestMain))
    suite.addTests(loader.loadTestsFromTestCase(TestStatsMain))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
