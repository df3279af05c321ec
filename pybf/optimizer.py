from __future__ import annotations

import logging
from typing import Dict, List, Optional, Type

from .interpreter import Handler, Interpreter, InterpreterError
from .ir import (
    Assign,
    AssignCurrent,
    Block,
    Decrement,
    Loop,
    Node,
    PrintString,
    ReadChar,
    ReadCharForget,
    SetCellPointer,
    contains_read,
    format_tree,
    uses_memory,
)

logger = logging.getLogger(__name__)


class OptimizePass:
    """Rewrites an IR tree in place."""

    name = "pass"

    def optimize(self, node: Node) -> None:
        raise NotImplementedError


class ZeroLoopPass(OptimizePass):
    """Replaces ``[-]`` with ``AssignCurrent(0)``."""

    name = "zero-loop"

    def optimize(self, node: Node) -> None:
        if not isinstance(node, Block):
            return
        for index, child in enumerate(node.body):
            if self._is_zero_loop(child):
                node.body[index] = AssignCurrent(value=0)
            elif isinstance(child, Block):
                self.optimize(child)

    @staticmethod
    def _is_zero_loop(node: Node) -> bool:
        return (
            isinstance(node, Loop)
            and isinstance(node.body, Block)
            and node.body.body == [Decrement(count=1)]
        )


class SpeculativeHandler(Handler):
    """Captures output, starting a new segment at every input read."""

    def __init__(self) -> None:
        self.segments: List[bytearray] = [bytearray()]

    def read_char(self) -> int:
        self.segments.append(bytearray())
        return 0

    def write_char(self, value: int) -> None:
        self.segments[-1].append(value)


class SpeculativeExecutionPass(OptimizePass):
    """Evaluates the input-independent prefix of the top-level block.

    The prefix is replaced by constant cell assignments, the output it
    produced and a pointer reset. Reads whose value is discarded are kept as
    ``ReadCharForget`` so input consumption is unchanged.
    """

    name = "speculative"

    def __init__(self, max_steps: Optional[int] = 1_000_000) -> None:
        self.max_steps = max_steps

    def optimize(self, node: Node) -> None:
        if not isinstance(node, Block):
            return
        handler = SpeculativeHandler()
        vm = Interpreter(handler=handler, max_steps=self.max_steps)
        children = node.body
        split: Optional[int] = None

        try:
            for index, child in enumerate(children):
                if contains_read(child) and not self._read_is_safe(children, index):
                    split = index
                    break
                vm.run(child)
        except InterpreterError as exc:
            logger.debug("speculative execution abandoned: %s", exc)
            return

        replacement: List[Node] = []
        if split is not None:
            logger.debug("speculative execution split at top-level node %d", split)
            for index, value in enumerate(vm.tape):
                replacement.append(Assign(index=index, value=value))
        for segment in handler.segments[:-1]:
            replacement.append(PrintString(value=bytes(segment)))
            replacement.append(ReadCharForget())
        replacement.append(PrintString(value=bytes(handler.segments[-1])))
        if split is not None:
            replacement.append(SetCellPointer(index=vm.pointer))
            replacement.extend(children[split:])
        node.body = replacement

    @staticmethod
    def _read_is_safe(children: List[Node], index: int) -> bool:
        child = children[index]
        following = children[index + 1] if index + 1 < len(children) else None
        # The value read is overwritten straight away.
        if isinstance(child, (ReadChar, ReadCharForget)) and isinstance(following, AssignCurrent):
            return True
        # Nothing left can observe the tape. The read itself is part of the
        # tail, so a trailing bare ReadChar writes a cell and still splits.
        return not any(uses_memory(rest) for rest in children[index:])


PASSES: Dict[str, Type[OptimizePass]] = {
    ZeroLoopPass.name: ZeroLoopPass,
    SpeculativeExecutionPass.name: SpeculativeExecutionPass,
}


def default_passes() -> List[OptimizePass]:
    return [ZeroLoopPass(), SpeculativeExecutionPass()]


class Optimizer:
    max_iterations = 3

    def __init__(self, node: Node) -> None:
        if not isinstance(node, Block):
            node = Block([node])
        self.node: Block = node
        self.passes: List[OptimizePass] = []
        self.iterations = 0

    def add_pass(self, optimize_pass: OptimizePass) -> "Optimizer":
        self.passes.append(optimize_pass)
        return self

    def optimize(self) -> Block:
        self.iterations = 0
        for _ in range(self.max_iterations):
            before = format_tree(self.node)
            for optimize_pass in self.passes:
                optimize_pass.optimize(self.node)
            self.iterations += 1
            if format_tree(self.node) == before:
                logger.debug("optimizer reached a fixed point after %d cycle(s)", self.iterations)
                break
        return self.node


__all__ = [
    "OptimizePass",
    "Optimizer",
    "PASSES",
    "SpeculativeExecutionPass",
    "SpeculativeHandler",
    "ZeroLoopPass",
    "default_passes",
]
