"""
Exit codes for Nexus CLI.

Semantic exit codes let scripts (and schedulers running ``nexus calendar sync``)
tell a reconnect-required failure apart from a transient provider outage.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Authentication failure (calendar not connected, reconnect required)
ERROR_AUTH_FAILURE = 3

# Network or provider API error (token refresh failed, Google API error)
ERROR_NETWORK = 4

# Resource not found
ERROR_NOT_FOUND = 5

# Concurrent modification detected
ERROR_CONFLICT = 6


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_AUTH_FAILURE: "ERROR_AUTH_FAILURE",
        ERROR_NETWORK: "ERROR_NETWORK",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_CONFLICT: "ERROR_CONFLICT",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def get_exit_code_description(code: int) -> str:
    """Get a human-readable description of an exit code."""
    descriptions = {
        SUCCESS: "Command executed successfully",
        ERROR_GENERAL: "A general error occurred",
        ERROR_INVALID_ARGS: "Invalid arguments or validation error",
        ERROR_AUTH_FAILURE: "Google Calendar is not connected or must be reconnected",
        ERROR_NETWORK: "Google API error - try again later",
        ERROR_NOT_FOUND: "Resource not found",
        ERROR_CONFLICT: "Resource was modified concurrently",
    }
    return descriptions.get(code, "Unknown error")
