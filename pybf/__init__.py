from .codegen import PythonCodeGen, generate
from .interpreter import (
    BufferedHandler,
    Handler,
    Interpreter,
    InterpreterError,
    StepLimitExceeded,
    StreamHandler,
)
from .ir import Block, Node, contains_read, format_tree, to_source, uses_memory
from .lexer import LexError, Lexer, Token, TokenKind, lex
from .optimizer import (
    OptimizePass,
    Optimizer,
    SpeculativeExecutionPass,
    ZeroLoopPass,
    default_passes,
)
from .parser import ParseError, Parser, parse
from .pipeline import compile_source, run_source

__all__ = [
    "Block",
    "BufferedHandler",
    "Handler",
    "Interpreter",
    "InterpreterError",
    "LexError",
    "Lexer",
    "Node",
    "OptimizePass",
    "Optimizer",
    "ParseError",
    "Parser",
    "PythonCodeGen",
    "SpeculativeExecutionPass",
    "StepLimitExceeded",
    "StreamHandler",
    "Token",
    "TokenKind",
    "ZeroLoopPass",
    "compile_source",
    "contains_read",
    "default_passes",
    "format_tree",
    "generate",
    "lex",
    "parse",
    "run_source",
    "to_source",
    "uses_memory",
]
