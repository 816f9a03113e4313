"""
Error kinds raised by the store.

NotFound, Duplicate and IncorrectPassword are the recoverable errors of
the data-access contract. Each carries an HTTP-style ``code`` and an
``errno`` so a transport layer can frame it without a lookup table.

IntegrityViolation is different: it means the tables themselves are
inconsistent, and it is never caught inside the store.
"""


class AppError(Exception):
    """Base class for errors a caller is expected to handle"""

    code = 500
    errno = 999
    error = "Internal Server Error"
    message = "Unspecified error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "errno": self.errno,
            "error": self.error,
            "message": self.message,
        }


class NotFound(AppError):
    """Raised when the target row does not exist"""

    code = 404
    errno = 116
    error = "Not Found"
    message = "Not Found"


class Duplicate(AppError):
    """Raised when a uniqueness or single-active-token rule would be broken"""

    code = 409
    errno = 101
    error = "Conflict"
    message = "Record already exists"


class IncorrectPassword(AppError):
    """Raised on a credential mismatch or an unknown account, indistinguishably"""

    code = 400
    errno = 103
    error = "Bad Request"
    message = "Incorrect password"


class IntegrityViolation(RuntimeError):
    """A table row is missing data every row must carry"""
