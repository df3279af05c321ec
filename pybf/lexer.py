from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Union


class LexError(Exception):
    pass


class TokenKind(str, Enum):
    SHIFT_LEFT = "shift_left"
    SHIFT_RIGHT = "shift_right"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    START_LOOP = "start_loop"
    END_LOOP = "end_loop"
    READ = "read"
    PRINT = "print"
    OTHER = "other"


COMMAND_CHARS = "+-<>.,[]"

# Runs of these characters collapse into one counted token.
_COUNTED = {
    "+": TokenKind.INCREMENT,
    "-": TokenKind.DECREMENT,
    ">": TokenKind.SHIFT_RIGHT,
    "<": TokenKind.SHIFT_LEFT,
}

_SINGLE = {
    ".": TokenKind.PRINT,
    ",": TokenKind.READ,
    "[": TokenKind.START_LOOP,
    "]": TokenKind.END_LOOP,
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    count: int = 1
    text: str = ""


class Lexer:
    def __init__(self, source: Union[str, bytes]) -> None:
        if isinstance(source, (bytes, bytearray)):
            source = bytes(source).decode("latin-1")
        self.source = source
        self.pos = 0
        self.tokens: List[Token] = []

    def lex(self) -> List[Token]:
        source = self.source
        length = len(source)
        while self.pos < length:
            char = source[self.pos]
            start = self.pos
            if char in _COUNTED:
                while self.pos < length and source[self.pos] == char:
                    self.pos += 1
                self.tokens.append(
                    Token(_COUNTED[char], count=self.pos - start, text=source[start : self.pos])
                )
            elif char in _SINGLE:
                self.pos += 1
                self.tokens.append(Token(_SINGLE[char], text=char))
            else:
                while self.pos < length and source[self.pos] not in COMMAND_CHARS:
                    self.pos += 1
                self.tokens.append(Token(TokenKind.OTHER, text=source[start : self.pos]))
        return self.tokens


def lex(source: Union[str, bytes]) -> List[Token]:
    """Tokenize ``source``; never fails, every character lands in some token."""
    return Lexer(source).lex()


__all__ = ["COMMAND_CHARS", "LexError", "Lexer", "Token", "TokenKind", "lex"]
