from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import BinaryIO, List, Optional

from .codegen import generate
from .interpreter import BufferedHandler, Handler, Interpreter, InterpreterError, StreamHandler
from .ir import count_nodes, format_tree
from .optimizer import PASSES
from .pipeline import compile_source

logger = logging.getLogger(__name__)


def _read_source(path: str) -> bytes:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_bytes()


def _write_output(path: str, data: str) -> None:
    output_path = Path(path)
    output_path.write_text(data, encoding="utf-8")


def _binary(stream) -> BinaryIO:
    # Text wrappers expose the underlying byte stream as ``buffer``.
    return getattr(stream, "buffer", stream)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Optimizing Brainfuck interpreter and Python translator")
    parser.add_argument("source", help="Path to Brainfuck source file")
    parser.add_argument(
        "--input",
        help="Input supplied to the program instead of standard input (UTF-8 bytes)",
    )
    parser.add_argument(
        "--no-optimize",
        action="store_true",
        help="Run the parsed program without optimization passes",
    )
    parser.add_argument(
        "--passes",
        nargs="+",
        metavar="NAME",
        help=f"Optimization passes to apply, in order (available: {', '.join(PASSES)})",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Abort after executing this many IR nodes",
    )
    parser.add_argument(
        "--emit-python",
        nargs="?",
        const="-",
        metavar="PATH",
        help="Write the equivalent Python program to PATH (or stdout) instead of running",
    )
    parser.add_argument(
        "--dump-ir",
        action="store_true",
        help="Print the IR tree instead of running",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        source = _read_source(args.source)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    passes = None
    if args.passes is not None:
        unknown = [name for name in args.passes if name not in PASSES]
        if unknown:
            print(f"Unknown optimization pass: {unknown[0]}", file=sys.stderr)
            return 1
        passes = [PASSES[name]() for name in args.passes]

    tree = compile_source(source, optimize=not args.no_optimize, passes=passes)
    logger.debug("compiled %s into %d IR node(s)", args.source, count_nodes(tree))

    if args.dump_ir:
        sys.stdout.write(format_tree(tree) + "\n")
        return 0

    if args.emit_python is not None:
        script = generate(tree)
        if args.emit_python == "-":
            sys.stdout.write(script)
        else:
            _write_output(args.emit_python, script)
        return 0

    sys.stdout.flush()
    output_stream = _binary(sys.stdout)
    handler: Handler
    if args.input is not None:
        # The bytes the shell passed; ordinary text arrives as UTF-8.
        handler = BufferedHandler(os.fsencode(args.input))
    else:
        handler = StreamHandler(_binary(sys.stdin), output_stream)

    try:
        Interpreter(handler=handler, max_steps=args.max_steps).run(tree)
    except InterpreterError as exc:
        print(f"Runtime error: {exc}", file=sys.stderr)
        return 1
    finally:
        if isinstance(handler, BufferedHandler):
            output_stream.write(bytes(handler.output))
        output_stream.flush()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
