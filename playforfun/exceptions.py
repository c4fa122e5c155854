"""Domain exceptions.

Each class carries the HTTP status the API answers with; the handler
registered in ``main.py`` turns any of them into ``{"detail": message}``.
"""


class PlayForFunError(Exception):
    """Base class for every error the API reports to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PlayForFunError):
    """Missing or malformed input, e.g. a deadline after kick-off."""

    status_code = 400


class AuthenticationError(PlayForFunError):
    """No usable credentials: missing, expired or wrong."""

    status_code = 401


class PermissionDeniedError(PlayForFunError):
    """Authenticated, but the role is wrong for this action."""

    status_code = 403


class NotFoundError(PlayForFunError):
    """Unknown match, user or space within the caller's space.

    Ids that exist in another space are reported the same way.
    """

    status_code = 404


class ConflictError(PlayForFunError):
    """The request is valid but the current state forbids it."""

    status_code = 409


class ScoringError(PlayForFunError):
    """Applying or reverting points failed and the transaction was rolled back."""

    status_code = 500


class JoinCodeGenerationError(PlayForFunError):
    """No unique join code could be found within the allowed attempts."""

    status_code = 503
