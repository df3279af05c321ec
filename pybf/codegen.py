from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .ir import (
    Assign,
    AssignCurrent,
    Block,
    Decrement,
    Increment,
    Loop,
    Node,
    PrintChar,
    PrintString,
    ReadChar,
    ReadCharForget,
    SetCellPointer,
    ShiftLeft,
    ShiftRight,
    uses_memory,
)


@dataclass
class PythonCodeGen:
    """Lowers IR to an equivalent Python 3 script.

    The script keeps the tape in ``cells`` and the data pointer in
    ``cell_index``. Input is taken a line at a time; ``ReadChar`` keeps the
    first character of the line (a space for an empty line).
    """

    tape_length: int = 30000

    output: List[str] = field(init=False, repr=False)
    depth: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.output = []
        self.depth = 0

    def generate(self, node: Node) -> str:
        self.reset()
        if uses_memory(node):
            self._emit_preamble()
        self._emit(node)
        return "".join(self.output)

    # --- Helpers ---

    def _line(self, text: str) -> None:
        self.output.append("\t" * self.depth + text + "\n")

    def _emit_preamble(self) -> None:
        self._line(f"cells = [0] * {self.tape_length}")
        self._line("cell_index = 0")

    def _emit(self, node: Node) -> None:
        if isinstance(node, Block):
            for child in node.body:
                self._emit(child)
        elif isinstance(node, Increment):
            self._line(f"cells[cell_index] = (cells[cell_index] + {node.count}) % 256")
        elif isinstance(node, Decrement):
            self._line(f"cells[cell_index] = (cells[cell_index] - {node.count}) % 256")
        elif isinstance(node, ShiftRight):
            self._line(f"cell_index += {node.count}")
        elif isinstance(node, ShiftLeft):
            self._line(f"cell_index -= {node.count}")
        elif isinstance(node, Loop):
            self._line("while cells[cell_index] != 0:")
            self.depth += 1
            before = len(self.output)
            self._emit(node.body)
            if len(self.output) == before:
                self._line("pass")
            self.depth -= 1
        elif isinstance(node, PrintChar):
            self._line("print(chr(cells[cell_index]), end='')")
        elif isinstance(node, ReadChar):
            self._line("cells[cell_index] = ord((input() + ' ')[0]) % 256")
        elif isinstance(node, Assign):
            self._line(f"cells[{node.index}] = {node.value}")
        elif isinstance(node, AssignCurrent):
            self._line(f"cells[cell_index] = {node.value}")
        elif isinstance(node, SetCellPointer):
            self._line(f"cell_index = {node.index}")
        elif isinstance(node, PrintString):
            self._line(f"print({node.value.decode('latin-1')!r}, end='')")
        elif isinstance(node, ReadCharForget):
            self._line("input()")
        else:
            raise ValueError(f"Cannot generate code for {node!r}")


def generate(node: Node) -> str:
    return PythonCodeGen().generate(node)


__all__ = ["PythonCodeGen", "generate"]
