from __future__ import annotations

from typing import List, Optional

from fastapi import FastAPI, HTTPException, Response, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field, field_validator

from pybf.interpreter import BufferedHandler, Interpreter, InterpreterError, StepLimitExceeded
from pybf.ir import count_nodes, format_tree
from pybf.optimizer import PASSES

from .store import ProgramRecord, ProgramStore


class ProgramRequest(BaseModel):
    code: str
    optimize: bool = True
    passes: Optional[List[str]] = None

    @field_validator("passes")
    @classmethod
    def validate_passes(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        for name in value:
            if name not in PASSES:
                raise ValueError(f"unknown optimization pass '{name}'")
        return value


class ProgramPayload(BaseModel):
    program_id: str
    code: str
    optimized: bool
    passes: List[str]
    ir: str
    python: str
    node_count: int


class RunRequest(BaseModel):
    input: str = ""
    max_steps: Optional[int] = Field(default=None, ge=1)


class RunResponse(BaseModel):
    program_id: str
    output: str
    consumed: int
    steps: int
    pointer: int


def _build_payload(record: ProgramRecord) -> ProgramPayload:
    return ProgramPayload(
        program_id=record.program_id,
        code=record.code,
        optimized=record.optimized,
        passes=record.passes,
        ir=format_tree(record.tree),
        python=record.python,
        node_count=count_nodes(record.tree),
    )


def create_app(store: Optional[ProgramStore] = None) -> FastAPI:
    program_store = store or ProgramStore()
    app = FastAPI(title="pybf API", version="0.1.0")

    def _lookup(program_id: str) -> ProgramRecord:
        try:
            return program_store.get(program_id)
        except KeyError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    @app.post("/api/programs", response_model=ProgramPayload, status_code=status.HTTP_201_CREATED)
    def create_program(payload: ProgramRequest) -> ProgramPayload:
        record = program_store.create_program(
            code=payload.code,
            optimize=payload.optimize,
            passes=payload.passes,
        )
        return _build_payload(record)

    @app.get("/api/programs/{program_id}", response_model=ProgramPayload)
    def get_program(program_id: str) -> ProgramPayload:
        return _build_payload(_lookup(program_id))

    @app.get("/api/programs/{program_id}/python", response_class=PlainTextResponse)
    def get_python(program_id: str) -> str:
        return _lookup(program_id).python

    @app.post("/api/programs/{program_id}/run", response_model=RunResponse)
    def run_program(program_id: str, payload: RunRequest) -> RunResponse:
        record = _lookup(program_id)
        handler = BufferedHandler(payload.input)
        interpreter = Interpreter(handler=handler, max_steps=payload.max_steps)
        try:
            interpreter.run(record.tree)
        except StepLimitExceeded as exc:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
        except InterpreterError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(exc),
            ) from exc

        return RunResponse(
            program_id=record.program_id,
            output=handler.output_text(),
            consumed=handler.consumed,
            steps=interpreter.steps,
            pointer=interpreter.pointer,
        )

    @app.delete("/api/programs/{program_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_program(program_id: str) -> Response:
        removed = program_store.remove(program_id)
        if not removed:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown program id: {program_id}",
            )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


__all__ = ["create_app"]
