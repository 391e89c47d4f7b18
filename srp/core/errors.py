"""Exit codes for the CLI.

The tool distinguishes only two outcomes: the run completed (even if some
deletes were rejected by the server), or it aborted before completion.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes. Values are stable."""

    OK = 0
    RUN_FAILED = 1
