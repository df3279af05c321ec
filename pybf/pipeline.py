from __future__ import annotations

from typing import Iterable, Optional, Union

from .interpreter import BufferedHandler, Interpreter
from .ir import Block
from .lexer import lex
from .optimizer import OptimizePass, Optimizer, default_passes
from .parser import parse


def compile_source(
    source: Union[str, bytes],
    optimize: bool = True,
    passes: Optional[Iterable[OptimizePass]] = None,
) -> Block:
    """Lex, parse and (optionally) optimize ``source``."""
    tree = parse(lex(source))
    if not optimize:
        return tree
    optimizer = Optimizer(tree)
    for optimize_pass in passes if passes is not None else default_passes():
        optimizer.add_pass(optimize_pass)
    return optimizer.optimize()


def run_source(
    source: Union[str, bytes],
    input_data: Union[str, bytes] = b"",
    optimize: bool = True,
    max_steps: Optional[int] = None,
) -> bytes:
    handler = BufferedHandler(input_data)
    Interpreter(handler=handler, max_steps=max_steps).run(compile_source(source, optimize=optimize))
    return bytes(handler.output)


__all__ = ["compile_source", "run_source"]
