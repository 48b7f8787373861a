"""Result type for explicit error handling.

Fallible steps return ``Ok(value)`` or ``Err(error)`` instead of raising, so
callers decide per step whether a failure is fatal or just reported.

Usage:
    def parse_port(text: str) -> Result[int, str]:
        if not text.isdigit():
            return Err(f"not a port: {text}")
        return Ok(int(text))

    result = parse_port("8080")
    if isinstance(result, Err):
        print(f"Error: {result.error}")
    else:
        print(f"Port: {result.value}")
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
