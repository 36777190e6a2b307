"""Errors raised by notification use cases."""


class InvalidNotificationRequest(ValueError):
    """Raised when a send request is malformed or targets no existing user."""


class InvalidIdentifierError(ValueError):
    """Raised when a user or notification identifier cannot be resolved."""


__all__ = ["InvalidIdentifierError", "InvalidNotificationRequest"]
