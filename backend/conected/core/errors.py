"""
Domain errors raised by the services.

Routes translate these into HTTP responses; storage exceptions never cross
a service boundary untranslated.
"""


class ConectedError(Exception):
    """Base class for every error the services raise"""

    message = "Something went wrong"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class PasswordMismatch(ConectedError):
    message = "Passwords must match"


class DuplicateField(ConectedError):
    """A unique field (username, email) is already taken"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"{field} already exists")


class InvalidCredentials(ConectedError):
    # Same message for unknown user and wrong password
    message = "Invalid credentials"


class InvalidPage(ConectedError):
    message = "Invalid page number"


class SubmissionFailed(ConectedError):
    message = "Subject could not be saved"


class StoreError(ConectedError):
    message = "Database error occurred"


class UniqueConstraintViolation(Exception):
    """Raised by the credential store when an insert hits a unique index"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Unique constraint violated on {field}")
