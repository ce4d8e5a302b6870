"""Domain-specific exceptions for keygate.

Bad or missing credentials are not exceptions: they are reported as
``Rejected`` outcomes (see ``keygate.auth.outcome``). The exceptions below
cover infrastructure and configuration problems only.
"""

from __future__ import annotations


class ConfigurationFault(Exception):
    """Raised at startup when the service cannot be configured.

    Never raised per request; it must stop the process from starting.
    """


class StoreUnavailableError(Exception):
    """The credential or user store could not be reached or queried."""

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = type(cause).__name__ if cause is not None else "unknown error"
        super().__init__(f"Credential store unavailable during {operation}: {detail}")


class UserNotFoundError(Exception):
    """Raised when an API key is issued for a user that does not exist."""

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User not found for id={user_id}")
