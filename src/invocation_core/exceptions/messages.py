"""
Human-readable messages and remediation hints per error kind.
"""

from .base import ErrorKind

USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.RATE_LIMIT: "Too many requests. Please wait a moment and try again.",
    ErrorKind.AUTH: "Authentication failed. Please check your credentials.",
    ErrorKind.NETWORK: "Network connection issue. Check your internet connection.",
    ErrorKind.FILE_SYSTEM: "File operation failed. Check file permissions and path.",
    ErrorKind.API: "Service temporarily unavailable. Please try again later.",
    ErrorKind.VALIDATION: "Invalid input provided. Please check your data.",
    ErrorKind.CANCELLED: "The request was cancelled before it completed.",
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again.",
}

TROUBLESHOOTING_TIPS: dict[ErrorKind, tuple[str, ...]] = {
    ErrorKind.RATE_LIMIT: (
        "Wait a few minutes before retrying",
        "Consider batching requests",
        "Check your API quota and billing limits",
    ),
    ErrorKind.AUTH: (
        "Verify the API key in your .env file is correct",
        "Check if the credentials have expired",
        "Ensure the account has the required permissions",
    ),
    ErrorKind.NETWORK: (
        "Check your internet connection",
        "Verify firewall settings allow the connection",
        "Try again in a few minutes",
    ),
    ErrorKind.FILE_SYSTEM: (
        "Check if the file or directory exists",
        "Verify read/write permissions",
        "Ensure the path is correct",
    ),
    ErrorKind.API: (
        "Check if the API service is up",
        "Verify your API key is valid",
        "Review the API documentation for changes",
    ),
    ErrorKind.VALIDATION: (
        "Check that all required fields are provided",
        "Verify data formats match the expected patterns",
    ),
    ErrorKind.CANCELLED: (
        "Increase the timeout if the service is slow",
        "Run the command again",
    ),
    ErrorKind.UNKNOWN: (
        "Check the logs for more details",
        "Run again with debug logging enabled",
        "Report the issue if it persists",
    ),
}


def user_message(kind: ErrorKind) -> str:
    """Return the user-facing message for an error kind."""
    return USER_MESSAGES.get(ErrorKind(kind), USER_MESSAGES[ErrorKind.UNKNOWN])


def troubleshooting_tips(kind: ErrorKind) -> list[str]:
    """Return remediation hints for an error kind."""
    return list(TROUBLESHOOTING_TIPS.get(ErrorKind(kind), TROUBLESHOOTING_TIPS[ErrorKind.UNKNOWN]))
