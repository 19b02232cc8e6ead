"""
Exit codes for FocusTimer CLI.

Semantic exit codes so scripts can tell why a command failed.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Configuration key missing or value rejected
ERROR_CONFIG = 3

# Command not valid in the current timer state
ERROR_INVALID_STATE = 4


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_CONFIG: "ERROR_CONFIG",
        ERROR_INVALID_STATE: "ERROR_INVALID_STATE",
    }
    return code_names.get(code, f"UNKNOWN({code})")
