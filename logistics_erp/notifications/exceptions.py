"""
Custom exceptions for the notification log subsystem.

Expected bad input (unknown channel on a candidate entry, illegal status
transition) is reported through return values. These exceptions mark
programmer error: a value outside a closed enumeration reaching code that
assumes one.
"""


class NotificationError(Exception):
    """Base exception for notification log errors."""
    pass


class InvalidChannelError(NotificationError, ValueError):
    """Raised when a value is not one of the notification channels."""

    def __init__(self, value):
        super().__init__(f"Invalid notification channel: {value!r}")
        self.value = value


class InvalidStatusError(NotificationError, ValueError):
    """Raised when a value is not one of the notification statuses."""

    def __init__(self, value):
        super().__init__(f"Invalid notification status: {value!r}")
        self.value = value
