from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class PruneError:
    kind: Literal[
        "config_invalid",
        "fetch_failed",
        "invalid_response",
    ]
    message: str
    hint: str | None = None
