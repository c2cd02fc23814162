"""Command line driver: flatten one JSON document per input line."""

import argparse
import contextlib
import logging
import sys
from typing import List, Optional

from .constants import DEFAULT_ARRAY_END, DEFAULT_ARRAY_START, DEFAULT_KEY_SEPARATOR
from .errors import FlattenError
from .file_processor import process_stream
from .flattener import Flattener, Plain, Surrounded

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='flatjson',
        description="Flatten JSON documents, one per line, into single-level objects."
    )
    parser.add_argument('input', nargs='?', default='-',
                        help="Input JSON Lines file, or '-' for stdin.")
    parser.add_argument('-o', '--output', default='-',
                        help="Output file, or '-' for stdout.")
    parser.add_argument('-s', '--separator', default=DEFAULT_KEY_SEPARATOR,
                        help="Separator placed between nested keys.")
    parser.add_argument('-b', '--brackets', action='store_true',
                        help=f"Write array indices as {DEFAULT_ARRAY_START}0{DEFAULT_ARRAY_END}.")
    parser.add_argument('--array-start', help="String placed before array indices.")
    parser.add_argument('--array-end', help="String placed after array indices.")
    parser.add_argument('--preserve-empty-arrays', action='store_true',
                        help="Keep empty arrays as [] values.")
    parser.add_argument('--preserve-empty-objects', action='store_true',
                        help="Keep empty objects as {} values.")
    parser.add_argument('-e', '--preserve-empty', action='store_true',
                        help="Keep both empty arrays and empty objects.")
    parser.add_argument('-i', '--infer-types', action='store_true',
                        help="Turn strings holding integers, floats or booleans into those types.")
    parser.add_argument('--max-depth', type=int,
                        help="Fail on documents nested deeper than this.")
    parser.add_argument('-d', '--debug', action='store_true', help="Debug logging.")
    return parser


def flattener_from_args(args: argparse.Namespace) -> Flattener:
    """Translate parsed command line options into a Flattener."""
    if args.brackets or args.array_start is not None or args.array_end is not None:
        array_formatting = Surrounded(
            DEFAULT_ARRAY_START if args.array_start is None else args.array_start,
            DEFAULT_ARRAY_END if args.array_end is None else args.array_end,
        )
    else:
        array_formatting = Plain()

    flattener = Flattener(
        key_separator=args.separator,
        array_formatting=array_formatting,
        preserve_empty_arrays=args.preserve_empty_arrays or args.preserve_empty,
        preserve_empty_objects=args.preserve_empty_objects or args.preserve_empty,
        max_depth=args.max_depth,
    )
    if args.infer_types:
        flattener = flattener.with_type_inference()
    return flattener


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(stream=sys.stderr, datefmt='%Y-%m-%d %H:%M:%S', style='{',
                        format='{asctime} {levelname:7}: {message}',
                        level=logging.DEBUG if args.debug else logging.INFO)

    try:
        flattener = flattener_from_args(args)
    except FlattenError as e:
        parser.error(str(e))

    with contextlib.ExitStack() as stack:
        try:
            source = sys.stdin if args.input == '-' else stack.enter_context(
                open(args.input, encoding='utf-8'))
            target = sys.stdout if args.output == '-' else stack.enter_context(
                open(args.output, 'w', encoding='utf-8'))
        except OSError as e:
            parser.error(f"cannot open {e.filename}: {e.strerror}")

        try:
            process_stream(source, target, flattener)
        except FlattenError as e:
            logger.error(str(e))
            return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
