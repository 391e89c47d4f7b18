"""Result type for explicit error handling.

Operations that can fail in an expected way (bad configuration, an HTTP
request that could not be completed, a page that is not JSON) return
``Ok(value)`` or ``Err(error)`` instead of raising. Callers branch with
``isinstance(result, Err)`` or a ``match`` statement.

Usage:
    match load_config(os.environ):
        case Ok(config):
            ...
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result.

    Attributes:
        value: The success value.
    """

    value: T


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result.

    Attributes:
        error: The error value.
    """

    error: E


type Result[T, E] = Ok[T] | Err[E]
