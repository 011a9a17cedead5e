"""
Exit codes for Cadence.

Semantic exit codes so scripts wrapping the CLI can tell what went wrong.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or configuration
ERROR_INVALID_ARGS = 2

# Resource not found (plan, workout template, task)
ERROR_NOT_FOUND = 5

# Operation not allowed in the current session state
ERROR_INVALID_STATE = 7


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_INVALID_STATE: "ERROR_INVALID_STATE",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or configuration",
        ERROR_NOT_FOUND: "Resource not found",
        ERROR_INVALID_STATE: "Not allowed while the session is in this state",
    }
    return descriptions.get(code, "Unknown error")
