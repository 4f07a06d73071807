from __future__ import annotations

from typing import Final

# Error codes reported by the operator CLI. Every HarnessError subclass
# contributes its error_type; keep this set in sync with core.errors.
KNOWN_ERROR_TYPES: Final[set[str]] = {
    "ALREADY_INVOKED",
    "HARNESS_ERROR",
    "INVALID_ARGUMENT",
    "INVALID_CONFIG",
    "INVALID_TABLE",
    "SPAWN_FAILED",
    "STDIN_WRITE_FAILED",
    "TIMEOUT",
}


def assert_known_error_type(error_type: str) -> None:
    if error_type not in KNOWN_ERROR_TYPES:
        raise ValueError(
            f"Unknown error type: {error_type!r}. Add it to patton_acceptance.core.error_types.KNOWN_ERROR_TYPES."
        )
