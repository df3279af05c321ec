from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


# === IR Nodes ===


class Node:
    pass


@dataclass
class Block(Node):
    body: List[Node] = field(default_factory=list)


@dataclass
class Increment(Node):
    count: int = 1


@dataclass
class Decrement(Node):
    count: int = 1


@dataclass
class ShiftRight(Node):
    count: int = 1


@dataclass
class ShiftLeft(Node):
    count: int = 1


@dataclass
class Loop(Node):
    body: Node = field(default_factory=Block)


@dataclass
class PrintChar(Node):
    pass


@dataclass
class ReadChar(Node):
    pass


# Variants below are only produced by optimization passes.


@dataclass
class Assign(Node):
    index: int
    value: int


@dataclass
class AssignCurrent(Node):
    value: int


@dataclass
class SetCellPointer(Node):
    index: int


@dataclass
class PrintString(Node):
    value: bytes = b""


@dataclass
class ReadCharForget(Node):
    pass


# === Predicates ===


def is_block(node: Node) -> bool:
    return isinstance(node, Block)


def is_loop(node: Node) -> bool:
    return isinstance(node, Loop)


def contains_read(node: Node) -> bool:
    pending = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, (ReadChar, ReadCharForget)):
            return True
        if isinstance(current, Block):
            pending.extend(current.body)
        elif isinstance(current, Loop):
            pending.append(current.body)
    return False


def uses_memory(node: Node) -> bool:
    """Whether ``node`` may touch the tape or the data pointer.

    Output-only and input-only variants report False. A loop always reads
    the current cell for its condition, whatever its body. New variants must
    be classified here, the speculative pass relies on it.
    """
    pending = [node]
    while pending:
        current = pending.pop()
        if isinstance(current, Block):
            pending.extend(current.body)
        elif not isinstance(current, (PrintString, ReadCharForget)):
            return True
    return False


# === Rendering ===


_SOURCE_CHARS = {
    Increment: "+",
    Decrement: "-",
    ShiftRight: ">",
    ShiftLeft: "<",
}


def to_source(node: Node) -> str:
    """Flatten a source-faithful tree back to command text."""
    if isinstance(node, Block):
        return "".join(to_source(child) for child in node.body)
    if isinstance(node, Loop):
        return "[" + to_source(node.body) + "]"
    if isinstance(node, PrintChar):
        return "."
    if isinstance(node, ReadChar):
        return ","
    char = _SOURCE_CHARS.get(type(node))
    if char is None:
        raise ValueError(f"{type(node).__name__} has no source spelling")
    return char * node.count


def format_tree(node: Node, indent: int = 0) -> str:
    """Render ``node`` one line per node, children indented under parents.

    The walk keeps its own stack, so deeply nested loops render without
    recursion. Two trees render the same text exactly when they are equal.
    """
    lines: List[str] = []
    pending = [(node, indent)]
    while pending:
        current, depth = pending.pop()
        lines.append("  " * depth + _describe(current))
        if isinstance(current, Block):
            pending.extend((child, depth + 1) for child in reversed(current.body))
        elif isinstance(current, Loop):
            pending.append((current.body, depth + 1))
    return "\n".join(lines)


def _describe(node: Node) -> str:
    if isinstance(node, (Increment, Decrement, ShiftRight, ShiftLeft)):
        return f"{type(node).__name__}({node.count})"
    if isinstance(node, Assign):
        return f"Assign(cells[{node.index}] = {node.value})"
    if isinstance(node, AssignCurrent):
        return f"AssignCurrent({node.value})"
    if isinstance(node, SetCellPointer):
        return f"SetCellPointer({node.index})"
    if isinstance(node, PrintString):
        return f"PrintString({node.value!r})"
    return type(node).__name__


def count_nodes(node: Node) -> int:
    total = 0
    pending = [node]
    while pending:
        current = pending.pop()
        total += 1
        if isinstance(current, Block):
            pending.extend(current.body)
        elif isinstance(current, Loop):
            pending.append(current.body)
    return total


__all__ = [
    "Assign",
    "AssignCurrent",
    "Block",
    "Decrement",
    "Increment",
    "Loop",
    "Node",
    "PrintChar",
    "PrintString",
    "ReadChar",
    "ReadCharForget",
    "SetCellPointer",
    "ShiftLeft",
    "ShiftRight",
    "contains_read",
    "count_nodes",
    "format_tree",
    "is_block",
    "is_loop",
    "to_source",
    "uses_memory",
]
