"""
Error taxonomy. Each error carries the HTTP status it maps to; main.py renders
them as {"detail": message}.
"""
from fastapi import status


class VideoHubError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(VideoHubError):
    """Raised at startup; never reaches a request."""


class ValidationError(VideoHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UploadTooLargeError(ValidationError):
    status_code = 413  # Content Too Large
    default_message = "Video is too large. Max size is 100MB."


class AuthError(VideoHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class InvalidTokenError(AuthError):
    pass


class StorageError(VideoHubError):
    default_message = "Upload failed"


class StorageNotConfiguredError(StorageError):
    status_code = status.HTTP_501_NOT_IMPLEMENTED
    default_message = "Video storage is not configured for production yet."


class RemoteStorageError(StorageError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Cloudinary upload failed"


class DatastoreError(VideoHubError):
    default_message = "Server error"


class DuplicateEmailError(DatastoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "User already exists"


class NotFoundError(VideoHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"
