"""Process exit codes.

Values are stable; the host CI platform only distinguishes zero from
non-zero, but operators running the CLI locally can tell failures apart.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (including "no completed run" and skipped uploads)
    - 1: User error (bad or incomplete inputs)
    - 2: Environment error (gh missing, repository unknown)
    - 4: Network error (run query or artifact download failed)
    - 5: I/O error (download directory unusable)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
