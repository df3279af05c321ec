import io
import unittest
from contextlib import redirect_stdout
from unittest import mock

from pybf import compile_source, generate, lex, parse
from pybf.codegen import PythonCodeGen
from pybf.interpreter import BufferedHandler, Interpreter
from pybf.ir import Block, Loop, PrintString, ReadCharForget

from test_interpreter import COUNT_DOWN, FACTORIAL_TABLE, HELLO_WORLD


def exec_script(script: str, stdin_text: str = "") -> str:
    buffer = io.StringIO()
    with mock.patch("sys.stdin", io.StringIO(stdin_text)), redirect_stdout(buffer):
        exec(compile(script, "<generated>", "exec"), {})
    return buffer.getvalue()


def interpret(tree, input_data=b"") -> str:
    handler = BufferedHandler(input_data)
    Interpreter(handler=handler).run(tree)
    # Generated scripts print one chr() per cell value.
    return bytes(handler.output).decode("latin-1")


class CodeGenTextTests(unittest.TestCase):
    def test_preamble_and_increment(self) -> None:
        script = generate(parse(lex("+")))
        self.assertEqual(
            script,
            "cells = [0] * 30000\n"
            "cell_index = 0\n"
            "cells[cell_index] = (cells[cell_index] + 1) % 256\n",
        )

    def test_loops_indent_with_tabs(self) -> None:
        script = generate(parse(lex("[>[-]<-]")))
        lines = script.splitlines()[2:]
        self.assertEqual(
            lines,
            [
                "while cells[cell_index] != 0:",
                "\tcell_index += 1",
                "\twhile cells[cell_index] != 0:",
                "\t\tcells[cell_index] = (cells[cell_index] - 1) % 256",
                "\tcell_index -= 1",
                "\tcells[cell_index] = (cells[cell_index] - 1) % 256",
            ],
        )

    def test_empty_loop_body_gets_pass(self) -> None:
        script = generate(Block([Loop(Block([]))]))
        self.assertIn("while cells[cell_index] != 0:\n\tpass\n", script)

    def test_io_only_program_has_no_preamble(self) -> None:
        script = generate(Block([PrintString(b"it's\n"), ReadCharForget()]))
        self.assertEqual(script, "print(\"it's\\n\", end='')\ninput()\n")

    def test_synthesized_assignments(self) -> None:
        script = generate(compile_source("+++.,+."))
        self.assertIn("cells[0] = 3\n", script)
        self.assertIn("cell_index = 0\n", script)
        self.assertIn("cells[cell_index] = ord((input() + ' ')[0]) % 256\n", script)

    def test_tape_length_is_configurable(self) -> None:
        script = PythonCodeGen(tape_length=16).generate(parse(lex(">")))
        self.assertTrue(script.startswith("cells = [0] * 16\n"))

    def test_generator_is_reusable(self) -> None:
        codegen = PythonCodeGen()
        first = codegen.generate(parse(lex("+.")))
        self.assertEqual(codegen.generate(parse(lex("+."))), first)


class CodeGenExecutionTests(unittest.TestCase):
    def test_matches_interpreter_without_input(self) -> None:
        for source in (HELLO_WORLD, COUNT_DOWN, FACTORIAL_TABLE, "++++++++[>++++++++<-]>+."):
            for optimize in (False, True):
                with self.subTest(source=source, optimize=optimize):
                    tree = compile_source(source, optimize=optimize)
                    self.assertEqual(exec_script(generate(tree)), interpret(tree))

    def test_wrapping_arithmetic(self) -> None:
        tree = compile_source("-.+.", optimize=False)
        self.assertEqual(exec_script(generate(tree)), "\xff\x00")

    def test_reads_first_character_of_each_line(self) -> None:
        tree = compile_source(",+.,+.", optimize=False)
        self.assertEqual(exec_script(generate(tree), "abc\nx\n"), "by")
        self.assertEqual(interpret(tree, b"ax"), "by")

    def test_empty_line_reads_space(self) -> None:
        tree = compile_source(",.", optimize=False)
        self.assertEqual(exec_script(generate(tree), "\n"), " ")

    def test_forgotten_reads_consume_lines(self) -> None:
        tree = compile_source("+.,[-]++.,.")
        self.assertEqual(exec_script(generate(tree), "q\nz\n"), "\x01\x02z")
        self.assertEqual(interpret(tree, b"qz"), "\x01\x02z")


if __name__ == "__main__":
    unittest.main()
