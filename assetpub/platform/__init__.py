"""Host process helpers."""

from .process import ProcessError, run

__all__ = ["ProcessError", "run"]
