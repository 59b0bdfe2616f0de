"""
Командная строка: печать дерева Хаффмана для одного файла.

`hufftree FILE` принимает ровно один аргумент и всегда считает его путём
к файлу. Статистика по символам вынесена в отдельную команду
`hufftree-stats`.
"""

import argparse
import sys
from typing import List, Optional

from tree_dumper import TreeDumper


ARGUMENT_ERROR = 'Argument Error'
FILE_ERROR = 'File Error'


def run(file_path: str, report: bool = False) -> int:
    dumper = TreeDumper()

    try:
        dumper.print_tree(file_path, sys.stdout,
                          report_out=sys.stderr if report else None)

    except (OSError, ValueError) as e:
        # ValueError comes from open() on paths such as 'a\0b'
        print(f"Error: {e}", file=sys.stderr)
        sys.stdout.write(FILE_ERROR)
        return 1

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)

    if len(args) != 1:
        sys.stdout.write(ARGUMENT_ERROR)
        return 1

    return run(args[0])


def build_stats_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hufftree-stats',
        description='Print the Huffman tree of a file and symbol statistics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hufftree-stats data.bin
  hufftree-stats data.bin 2> stats.txt
        """
    )

    parser.add_argument('file', help='Input file')

    return parser


def stats_main(argv: Optional[List[str]] = None) -> int:
    args = build_stats_parser().parse_args(argv)
    return run(args.file, report=True)


if __name__ == '__main__':
    sys.exit(main())
