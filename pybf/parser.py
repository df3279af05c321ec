from __future__ import annotations

from typing import List, Sequence

from .ir import Block, Decrement, Increment, Loop, Node, PrintChar, ReadChar, ShiftLeft, ShiftRight
from .lexer import Token, TokenKind


class ParseError(Exception):
    pass


_COUNTED_NODES = {
    TokenKind.INCREMENT: Increment,
    TokenKind.DECREMENT: Decrement,
    TokenKind.SHIFT_RIGHT: ShiftRight,
    TokenKind.SHIFT_LEFT: ShiftLeft,
}


class Parser:
    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens = list(tokens)
        self.pos = 0
        self.depth = 0

    def parse(self) -> Block:
        self.pos = 0
        self.depth = 0
        return self._parse_block()

    def _parse_block(self) -> Block:
        body: List[Node] = []
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            self.pos += 1
            node_type = _COUNTED_NODES.get(token.kind)
            if node_type is not None:
                body.append(node_type(count=token.count))
            elif token.kind == TokenKind.PRINT:
                body.append(PrintChar())
            elif token.kind == TokenKind.READ:
                body.append(ReadChar())
            elif token.kind == TokenKind.START_LOOP:
                self.depth += 1
                body.append(Loop(body=self._parse_block()))
            elif token.kind == TokenKind.END_LOOP:
                # A stray ']' at the outermost level is dropped.
                if self.depth > 0:
                    self.depth -= 1
                    return Block(body)
        # An unmatched '[' ends up here too: its loop runs to end of input.
        return Block(body)


def parse(tokens: Sequence[Token]) -> Block:
    return Parser(tokens).parse()


__all__ = ["ParseError", "Parser", "parse"]
