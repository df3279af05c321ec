from .app import create_app
from .store import ProgramRecord, ProgramStore

__all__ = [
    "create_app",
    "ProgramRecord",
    "ProgramStore",
]
