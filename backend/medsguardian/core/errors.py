"""Module: errors.

Every failure a user can hit resolves to one of these, and the API turns each
class into a status code plus a ``{"detail": ...}`` body.
"""


class MedsGuardianError(Exception):
    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(MedsGuardianError):
    """The backing store is missing or unreachable."""

    status_code = 503
    default_message = "Changes were not saved."


class StorageError(MedsGuardianError):
    """A storage call failed while talking to the database."""

    status_code = 503
    default_message = "Connection failed. Please check your connection."


class ValidationError(MedsGuardianError):
    status_code = 400
    default_message = "Please fill in all required fields."


class AuthenticationError(MedsGuardianError):
    status_code = 401
    default_message = "Incorrect email or password"


class PermissionDeniedError(MedsGuardianError):
    status_code = 403
    default_message = "You are not allowed to do that."


class NotFoundError(MedsGuardianError):
    status_code = 404
    default_message = "Not found"


class IntegrityConflict(MedsGuardianError):
    status_code = 409
    default_message = "Email is already in use"
