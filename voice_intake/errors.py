"""
Error taxonomy for the intake workflow.

Each HTTP-facing error carries the status code the API answers with; see
``voice_intake.main`` for the handlers that turn them into JSON responses.
"""


class IntakeError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(IntakeError):
    """Malformed request (missing roomName / intake)."""

    status_code = 400


class ConfigurationError(IntakeError):
    """Storage backend is not configured."""

    status_code = 503


class StoreError(IntakeError):
    """Backend read/write failure."""

    status_code = 500


class StoreUnavailableError(StoreError):
    """The database could not be reached."""

    status_code = 503


class SendError(Exception):
    """Mail dispatch failure. Logged by the notification gate, never surfaced."""


class NotFoundError(IntakeError):
    status_code = 404
