"""
Error kinds raised by the message board.

Each error is terminal for the request that raised it. The HTTP mapping
lives in main.py:
- ValidationError -> 400 (empty body)
- AuthenticationFailure -> 401
- StorageError -> 500
"""


class MessageBoardError(Exception):
    """Base class for message board errors."""


class ValidationError(MessageBoardError):
    """Message content is missing, blank, or too long."""


class AuthenticationFailure(MessageBoardError):
    """Username/password pair did not match the credential table."""


class StorageError(MessageBoardError):
    """The database is unreachable or rejected a read or write."""
