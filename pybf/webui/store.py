from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pybf.codegen import generate
from pybf.ir import Block
from pybf.optimizer import PASSES, default_passes
from pybf.pipeline import compile_source


@dataclass
class ProgramRecord:
    program_id: str
    code: str
    tree: Block
    optimized: bool
    passes: List[str] = field(default_factory=list)
    python: str = ""


class ProgramStore:
    """Thread-safe registry of compiled programs."""

    def __init__(self) -> None:
        self._programs: Dict[str, ProgramRecord] = {}
        self._lock = threading.RLock()

    def create_program(
        self,
        *,
        code: str,
        optimize: bool = True,
        passes: Optional[List[str]] = None,
    ) -> ProgramRecord:
        if passes is None:
            pass_objects = default_passes()
        else:
            pass_objects = [PASSES[name]() for name in passes]
        tree = compile_source(code, optimize=optimize, passes=pass_objects)
        record = ProgramRecord(
            program_id=uuid.uuid4().hex,
            code=code,
            tree=tree,
            optimized=optimize,
            passes=[optimize_pass.name for optimize_pass in pass_objects] if optimize else [],
            python=generate(tree),
        )
        with self._lock:
            self._programs[record.program_id] = record
        return record

    def get(self, program_id: str) -> ProgramRecord:
        with self._lock:
            try:
                return self._programs[program_id]
            except KeyError as exc:
                raise KeyError(f"Unknown program id: {program_id}") from exc

    def remove(self, program_id: str) -> bool:
        with self._lock:
            return self._programs.pop(program_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._programs.clear()


__all__ = ["ProgramRecord", "ProgramStore"]
