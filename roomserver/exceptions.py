"""Custom exception classes for the room server."""


class SkyDropError(Exception):
    """
    Base exception class for all room server errors.
    """
    code = "INTERNAL_ERROR"


class ValidationError(SkyDropError):
    """
    Raised when required input is missing or malformed.
    """
    code = "VALIDATION_ERROR"


class FileTooLargeError(ValidationError):
    """
    Raised when an uploaded file exceeds the configured size limit.
    """
    code = "FILE_TOO_LARGE"


class RoomExpiredError(ValidationError):
    """
    Raised when uploads into expired rooms are disabled and the room has expired.
    """
    code = "ROOM_EXPIRED"


class UnauthorizedError(SkyDropError):
    """
    Raised when a session token is missing, unknown or no longer valid.
    """
    code = "UNAUTHORIZED"


class InvalidCredentialsError(UnauthorizedError):
    """
    Raised when login credentials are invalid.
    """
    code = "INVALID_CREDENTIALS"


class ConflictError(SkyDropError):
    """
    Raised when a record would violate a uniqueness rule.
    """
    code = "CONFLICT"


class UserAlreadyExistsError(ConflictError):
    """
    Raised when attempting to sign up with an email that is already registered.
    """
    code = "USER_ALREADY_EXISTS"


class NotFoundError(SkyDropError):
    """
    Raised when a requested record does not exist.
    """
    code = "NOT_FOUND"


class UserNotFoundError(NotFoundError):
    code = "USER_NOT_FOUND"


class RoomNotFoundError(NotFoundError):
    code = "ROOM_NOT_FOUND"


class InvalidRoomCredentialsError(NotFoundError):
    """
    Raised when no active room matches a code and password.
    Code and password mismatches are not distinguished.
    """
    code = "INVALID_ROOM_CREDENTIALS"


class BlobNotFoundError(NotFoundError):
    """
    Raised when a download locator does not point at a stored blob.
    """
    code = "FILE_NOT_FOUND"


class StorageFailureError(SkyDropError):
    """
    Raised when the database or the blob store fails underneath an operation.
    """
    code = "STORAGE_FAILURE"
