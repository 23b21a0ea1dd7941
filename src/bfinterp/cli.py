from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from .api import RunOptions, compile_string
from .errors import BFExecutionError, BFParseError
from .executor import TAPE_LENGTH, Executor
from .optimizer import count_static_ops, emit


def source_file(value: str) -> str:
    if Path(value).suffix != ".bf":
        raise argparse.ArgumentTypeError("source file extension is not valid")
    return value


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"tape length must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfinterp",
        description="Parse, optimize and run a Brainfuck program on a 30,000 cell tape.",
    )
    parser.add_argument("file", type=source_file, help="source file path (*.bf)")
    parser.add_argument("--no-optimize", action="store_true", help="run the parsed program as is")
    parser.add_argument("--no-positions", action="store_true", help="omit line/char positions from parse errors")
    parser.add_argument("--tape-length", type=positive_int, default=TAPE_LENGTH, help=f"number of cells (default {TAPE_LENGTH})")
    parser.add_argument("--emit", action="store_true", help="print the program as source text and exit")
    parser.add_argument("--dump", action="store_true", help="print one instruction per line and exit")
    parser.add_argument("--stats", action="store_true", help="report timings and the first tape cells on stderr")
    parser.add_argument("--visualize", action="store_true", help="open the program in the Qt visualizer")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def _dump_memory(tape: bytearray, cells: int = 100) -> str:
    values = [int(b) for b in tape[:cells]]
    return "\n".join(" ".join(map(str, values[i:i + 8])) for i in range(0, len(values), 8))


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    options = RunOptions(
        optimize=not args.no_optimize,
        tape_length=args.tape_length,
        track_positions=not args.no_positions,
    )

    try:
        source = Path(args.file).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"file reading error: {e}", file=sys.stderr)
        return 1

    if args.visualize:
        from .visualizer import main as visualize
        return visualize([sys.argv[0]], source=source, optimize=options.optimize)

    start = time.time()
    try:
        program = compile_string(source, options=options)
    except BFParseError as e:
        print(f"parsing error: {e}", file=sys.stderr)
        return 1
    parse_time = time.time() - start

    if args.emit:
        print(emit(program))
        return 0
    if args.dump:
        for index, ins in enumerate(program):
            print(f"{index:6d}  {ins!r}")
        return 0

    executor = Executor(program, tape_length=options.tape_length)
    start = time.time()
    try:
        executor.run()
    except BFExecutionError as e:
        print(f"execution error: {e}", file=sys.stderr)
        return 1
    finally:
        if args.stats:
            exec_time = time.time() - start
            print(f"\nParsing took {parse_time * 1000:.2f} ms "
                  f"({len(program)} instructions for {count_static_ops(program)} ops)", file=sys.stderr)
            print(f"Execution took {exec_time * 1000:.2f} ms ({executor.steps} steps)", file=sys.stderr)
            print(_dump_memory(executor.tape), file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
