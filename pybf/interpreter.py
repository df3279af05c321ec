from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Union

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
)


class InterpreterError(RuntimeError):
    """Raised when executing the IR hits a runtime fault."""


class StepLimitExceeded(InterpreterError):
    """Raised when execution exceeds the configured step budget."""


class Handler:
    """I/O capability consumed by the interpreter.

    The base class reads EOF forever and discards output.
    """

    def read_char(self) -> int:
        return 0

    def write_char(self, value: int) -> None:
        pass

    def mem_read(self, index: int) -> None:
        pass


class BufferedHandler(Handler):
    """Serves input from memory and collects output.

    Text input is encoded as UTF-8 and ``output_text`` decodes the same way,
    so characters outside ASCII arrive as their UTF-8 byte sequences and a
    program that echoes them back round-trips.
    """

    def __init__(self, input_data: Union[bytes, str] = b"", encoding: str = "utf-8") -> None:
        if isinstance(input_data, str):
            input_data = input_data.encode(encoding)
        self.encoding = encoding
        self.input_data = bytes(input_data)
        self.consumed = 0
        self.output = bytearray()

    def read_char(self) -> int:
        if self.consumed >= len(self.input_data):
            return 0
        value = self.input_data[self.consumed]
        self.consumed += 1
        return value

    def write_char(self, value: int) -> None:
        self.output.append(value)

    def output_text(self) -> str:
        return self.output.decode(self.encoding, errors="replace")


class StreamHandler(Handler):
    def __init__(self, input_stream: Optional[BinaryIO], output_stream: BinaryIO) -> None:
        self.input_stream = input_stream
        self.output_stream = output_stream

    def read_char(self) -> int:
        if self.input_stream is None:
            return 0
        data = self.input_stream.read(1)
        if not data:
            return 0
        return data[0]

    def write_char(self, value: int) -> None:
        self.output_stream.write(bytes((value,)))


@dataclass
class Interpreter:
    handler: Handler = field(default_factory=Handler)
    max_steps: Optional[int] = None

    tape: bytearray = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    steps: int = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.tape = bytearray()
        self.pointer = 0
        self.steps = 0

    def run(self, node: Node) -> None:
        """Execute ``node`` against the current machine state.

        State is kept between calls so a program may be fed node by node.
        """
        self._tick()
        if isinstance(node, Block):
            for child in node.body:
                self.run(child)
        elif isinstance(node, Increment):
            self._store(self.pointer, self._load(self.pointer) + node.count)
        elif isinstance(node, Decrement):
            self._store(self.pointer, self._load(self.pointer) - node.count)
        elif isinstance(node, ShiftRight):
            self.pointer += node.count
        elif isinstance(node, ShiftLeft):
            if node.count > self.pointer:
                raise InterpreterError("Pointer moved before start of tape.")
            self.pointer -= node.count
        elif isinstance(node, Loop):
            self.handler.mem_read(self.pointer)
            while self._load(self.pointer) != 0:
                self.run(node.body)
                self.handler.mem_read(self.pointer)
        elif isinstance(node, PrintChar):
            self.handler.mem_read(self.pointer)
            self.handler.write_char(self._load(self.pointer))
        elif isinstance(node, ReadChar):
            self._store(self.pointer, self.handler.read_char())
        elif isinstance(node, Assign):
            self._store(node.index, node.value)
        elif isinstance(node, AssignCurrent):
            self._store(self.pointer, node.value)
        elif isinstance(node, SetCellPointer):
            self.pointer = node.index
        elif isinstance(node, PrintString):
            for value in node.value:
                self.handler.write_char(value)
        elif isinstance(node, ReadCharForget):
            self.handler.read_char()
        else:
            raise InterpreterError(f"Unknown IR node: {node!r}")

    def _tick(self) -> None:
        if self.max_steps is not None and self.steps >= self.max_steps:
            raise StepLimitExceeded("Program exceeded allowed step count")
        self.steps += 1

    def _ensure(self, index: int) -> None:
        if index >= len(self.tape):
            self.tape.extend(bytes(index + 1 - len(self.tape)))

    def _load(self, index: int) -> int:
        self._ensure(index)
        return self.tape[index]

    def _store(self, index: int, value: int) -> None:
        self._ensure(index)
        self.tape[index] = value % 256


__all__ = [
    "BufferedHandler",
    "Handler",
    "Interpreter",
    "InterpreterError",
    "StepLimitExceeded",
    "StreamHandler",
]
