"""Error types shared across modules.

Business errors that routers translate into HTTP responses.
"""


class PersistenceError(RuntimeError):
    """A storage operation failed (connection loss, constraint violation, ...).

    Callers surface this as a generic internal failure. No retry is attempted.
    """


class MailDeliveryError(RuntimeError):
    """The SMTP relay rejected or failed to accept a message."""


class MailNotConfiguredError(MailDeliveryError):
    """SMTP credentials are missing, so no message can be sent."""
